"""Add and subtract money commands."""

import click
from kidsmoney.cli.account_resolution import format_money, resolve_account_or_exit
from kidsmoney.cli.error_handling import handle_domain_error
from kidsmoney.domain.account import AccountService
from kidsmoney.domain.errors import DomainError
from kidsmoney.domain.rates import CATEGORIES, CASH
from kidsmoney.utils.amount_parser import parse_amount

CATEGORY_OPTION = click.option(
    "--category",
    type=click.Choice(CATEGORIES, case_sensitive=False),
    default=CASH,
    show_default=True,
    help="Balance to change",
)


def _move_money(ctx, account: str, amount: str, category: str, note: str | None, subtract: bool):
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        if subtract:
            txn = service.withdraw(account_id, category.lower(), txn_amount, description=note)
        else:
            txn = service.deposit(account_id, category.lower(), txn_amount, description=note)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    account_obj = service.get_account(account_id)
    verb = "Subtracted" if subtract else "Added"
    preposition = "from" if subtract else "to"
    click.echo(f"{verb} {format_money(txn.amount)} {preposition} {txn.category} (transaction {txn.id})")
    click.echo(f"  Account: {account_obj.name}")
    click.echo(f"  New {txn.category} balance: {format_money(account_obj.balance(txn.category))}")
    if note:
        click.echo(f"  Note: {note}")


@click.command("add")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount")
@CATEGORY_OPTION
@click.option("--note", help="Optional description")
@click.pass_context
def add_money(ctx, account: str, amount: str, category: str, note: str | None):
    """Add money to an account.

    ACCOUNT can be an account name or ID.

    Examples:
        kidsmoney add "Emma" 5
        kidsmoney add "Emma" 20 --category savings --note "Birthday"
    """
    _move_money(ctx, account, amount, category, note, subtract=False)


@click.command("subtract")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount")
@CATEGORY_OPTION
@click.option("--note", help="Optional description")
@click.pass_context
def subtract_money(ctx, account: str, amount: str, category: str, note: str | None):
    """Subtract money from an account.

    ACCOUNT can be an account name or ID.

    Examples:
        kidsmoney subtract "Emma" 3.50 --note "Ice cream"
    """
    _move_money(ctx, account, amount, category, note, subtract=True)


def register_commands(cli):
    """Register add and subtract commands with main CLI."""
    cli.add_command(add_money)
    cli.add_command(subtract_money)
