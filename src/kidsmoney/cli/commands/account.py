"""Account management commands."""

import click
from kidsmoney.cli.account_resolution import format_money, resolve_account_or_exit
from kidsmoney.cli.error_handling import handle_domain_error
from kidsmoney.domain.account import AccountService
from kidsmoney.domain.errors import DomainError
from kidsmoney.domain.rates import (
    CATEGORIES,
    INTEREST_BEARING,
    rate_from_percent,
    rate_to_percent,
)
from kidsmoney.utils.amount_parser import parse_amount

CATEGORY_CHOICE = click.Choice(CATEGORIES, case_sensitive=False)
RATE_CATEGORY_CHOICE = click.Choice(INTEREST_BEARING, case_sensitive=False)


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.pass_context
def create_account(ctx, name: str):
    """Create a new account with zero balances.

    Examples:
        kidsmoney account create "Emma"
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account_id = service.create_account(name=name)
        click.echo(f"Created account '{name.strip()}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances and rates."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 90)
    for acc in accounts:
        balances = " | ".join(
            f"{category.capitalize()}: {format_money(acc.balance(category))}"
            for category in CATEGORIES
        )
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | {balances}")
        rates = ", ".join(
            f"{category} {rate_to_percent(acc.effective_rate(category))}%"
            + ("" if category in acc.rate_overrides else " (default)")
            for category in INTEREST_BEARING
        )
        click.echo(f"         Rates: {rates} | Total: {format_money(acc.total)}")


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_account(ctx, account: str, new_name: str) -> None:
    """Rename an account.

    ACCOUNT can be an account name or ID.

    Examples:
        kidsmoney account rename "Emma" "Emma B."
        kidsmoney account rename 1 "Noah"
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        updated = service.rename_account(account_id=account_id, name=new_name)
        click.echo(f"Renamed account to '{updated.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--force", is_flag=True, help="Also delete the account's transaction history")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, force: bool, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    An account with transaction history can only be deleted with --force.

    Examples:
        kidsmoney account delete "Emma"
        kidsmoney account delete 1 --force --yes
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id, force=force)
        click.echo(f"Deleted account '{account_obj.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("set-rate")
@click.argument("account", metavar="ACCOUNT")
@click.argument("category", type=RATE_CATEGORY_CHOICE)
@click.argument("percent", required=False)
@click.option("--default", "use_default", is_flag=True, help="Go back to the default rate")
@click.pass_context
def set_rate(ctx, account: str, category: str, percent: str | None, use_default: bool) -> None:
    """Set the annual interest rate of savings or investments.

    PERCENT is between 0 and 100 (e.g. 4.5 for 4.5%).

    Examples:
        kidsmoney account set-rate "Emma" savings 5
        kidsmoney account set-rate "Emma" investments --default
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    if use_default == (percent is not None):
        click.echo("Error: Provide either PERCENT or --default", err=True)
        ctx.exit(1)

    try:
        rate = None if use_default else rate_from_percent(percent)
        updated = service.set_rate(account_id, category.lower(), rate)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    shown = rate_to_percent(updated.effective_rate(category.lower()))
    suffix = " (default)" if use_default else ""
    click.echo(f"{category.capitalize()} rate for '{updated.name}' is now {shown}%{suffix}")


@account_group.command("set-balance")
@click.argument("account", metavar="ACCOUNT")
@click.argument("category", type=CATEGORY_CHOICE)
@click.argument("amount")
@click.pass_context
def set_balance(ctx, account: str, category: str, amount: str) -> None:
    """Set a balance directly.

    The difference to the old balance is recorded as an adjustment.

    Examples:
        kidsmoney account set-balance "Emma" cash 12.50
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        new_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        txn = service.set_balance(account_id, category.lower(), new_amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    account_obj = service.get_account(account_id)
    click.echo(
        f"{category.capitalize()} balance for '{account_obj.name}' is now "
        f"{format_money(account_obj.balance(category.lower()))}"
    )
    if txn is None:
        click.echo("Balance unchanged, nothing recorded.")
    else:
        sign = "+" if txn.direction == "credit" else "-"
        click.echo(f"Recorded adjustment of {sign}{format_money(txn.amount)}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
