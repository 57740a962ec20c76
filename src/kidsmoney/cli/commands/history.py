"""Transaction history command."""

import click
from kidsmoney.cli.account_resolution import format_money, resolve_account_or_exit
from kidsmoney.cli.error_handling import handle_domain_error
from kidsmoney.domain.account import AccountService
from kidsmoney.domain.errors import DomainError
from kidsmoney.domain.rates import CATEGORIES
from kidsmoney.domain.transaction import TransactionService
from kidsmoney.utils.date_parser import parse_date


@click.command("history")
@click.argument("account", metavar="ACCOUNT")
@click.option(
    "--category",
    type=click.Choice(CATEGORIES, case_sensitive=False),
    help="Only show one balance",
)
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option("--verbose", "-v", is_flag=True, help="List every transaction instead of daily totals")
@click.pass_context
def show_history(
    ctx, account: str, category: str | None, start_date: str | None, end_date: str | None, verbose: bool
):
    """Show an account's transaction history.

    By default shows per-day totals of money added, interest earned and
    money withdrawn. Use --verbose to list individual transactions.

    Examples:
        kidsmoney history "Emma"
        kidsmoney history "Emma" --category savings --start-date "this month"
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    service = TransactionService(db)
    account_id = resolve_account_or_exit(ctx, account_service, account)
    category = category.lower() if category else None

    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    try:
        transactions = service.list_transactions(
            account_id=account_id, category=category, start_date=start, end_date=end
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not transactions:
        click.echo("No transactions yet.")
        return

    if verbose:
        click.echo(f"\nFound {len(transactions)} transaction(s):")
        click.echo("-" * 90)
        click.echo(f"{'ID':<6} {'When':<20} {'Category':<12} {'Amount':>12}  {'Kind':<10} {'Description':<30}")
        click.echo("-" * 90)
        for txn in transactions:
            sign = "+" if txn.direction == "credit" else "-"
            kind = "interest" if txn.is_interest else txn.direction
            click.echo(
                f"{txn.id:<6} {txn.occurred_at:%Y-%m-%d %H:%M}     {txn.category:<12} "
                f"{sign + format_money(txn.amount):>12}  {kind:<10} {(txn.description or '')[:30]:<30}"
            )
        return

    try:
        days = service.daily_history(
            account_id=account_id, category=category, start_date=start, end_date=end
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo("\nTransaction History:")
    for activity in days:
        click.echo(f"{activity.day:%b %d, %Y}")
        if activity.added:
            click.echo(f"  Added            +{format_money(activity.added)}")
        if activity.interest:
            click.echo(f"  Interest earned  +{format_money(activity.interest)}")
        if activity.withdrawn:
            click.echo(f"  Withdrawn        -{format_money(activity.withdrawn)}")


def register_commands(cli):
    """Register history command with main CLI."""
    cli.add_command(show_history)
