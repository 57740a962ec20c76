"""Interest accrual command."""

from datetime import timedelta

import click
from kidsmoney.cli.account_resolution import format_money
from kidsmoney.cli.error_handling import handle_domain_error
from kidsmoney.domain.engine import AccrualEngine, AccrualPassResult, run_periodically
from kidsmoney.domain.errors import DomainError
from kidsmoney.utils.date_parser import parse_instant


def _echo_pass(db, result: AccrualPassResult) -> None:
    names = {acc.id: acc.name for acc in db.list_accounts()}

    if not result.events:
        click.echo(f"No interest due as of {result.now:%Y-%m-%d %H:%M} UTC.")
    else:
        click.echo(f"\nInterest posted as of {result.now:%Y-%m-%d %H:%M} UTC:")
        for event in result.events:
            name = names.get(event.account_id, f"#{event.account_id}")
            click.echo(
                f"  {name:20s} {event.category:12s} {format_money(event.amount):>12s}"
                f"  ({event.days_passed} day(s))"
            )
        click.echo(f"  Total: {format_money(result.total_interest)}")

    for failure in result.failed:
        hint = " (will retry)" if failure.retryable else ""
        click.echo(f"Error: account {failure.account_id}: {failure.error}{hint}", err=True)


@click.command("accrue")
@click.option("--now", "now_str", help='Evaluate as of this time (e.g. "2024-06-01", "3 days from now")')
@click.option("--every", type=float, help="Keep running, one pass every HOURS hours")
@click.option("--passes", type=click.IntRange(min=1), help="Stop after this many passes (with --every)")
@click.pass_context
def accrue(ctx, now_str: str | None, every: float | None, passes: int | None):
    """Post interest for every whole day since the last accrual.

    Running it again right away posts nothing.

    Examples:
        kidsmoney accrue
        kidsmoney accrue --now "400 days from now"
        kidsmoney accrue --every 24
    """
    db = ctx.obj["db"]
    engine = AccrualEngine(db)

    if every is not None:
        if now_str is not None:
            click.echo("Error: --now cannot be combined with --every", err=True)
            ctx.exit(1)
        if every <= 0:
            click.echo("Error: --every must be a positive number of hours", err=True)
            ctx.exit(1)
        try:
            run_periodically(
                engine,
                timedelta(hours=every),
                max_passes=passes,
                on_result=lambda result: _echo_pass(db, result),
            )
        except KeyboardInterrupt:
            click.echo("Stopped.")
        return

    try:
        now = parse_instant(now_str) if now_str is not None else None
    except ValueError as e:
        click.echo(f"Error: Invalid time: {e}", err=True)
        ctx.exit(1)

    try:
        result = engine.run_accrual_pass(now)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    _echo_pass(db, result)
    if result.failed:
        ctx.exit(1)


def register_commands(cli):
    """Register accrue command with main CLI."""
    cli.add_command(accrue)
