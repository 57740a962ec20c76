"""Projected balance command."""

import click
from kidsmoney.cli.account_resolution import format_money, resolve_account_or_exit
from kidsmoney.cli.error_handling import handle_domain_error
from kidsmoney.domain.account import AccountService
from kidsmoney.domain.errors import DomainError
from kidsmoney.domain.interest import DEFAULT_HORIZONS, HORIZON_LABELS, compute_projections
from kidsmoney.domain.rates import (
    INTEREST_BEARING,
    annual_rate_for,
    rate_from_percent,
    rate_to_percent,
)
from kidsmoney.utils.amount_parser import parse_amount


@click.command("project")
@click.argument("category", type=click.Choice(INTEREST_BEARING, case_sensitive=False))
@click.option("--account", help="Account name or ID to project (uses its balance and rate)")
@click.option("--amount", help="Starting balance when no account is given")
@click.option("--rate", "percent", help="Annual rate in percent (overrides the account/default rate)")
@click.option(
    "--horizon",
    "horizons",
    type=click.IntRange(min=0),
    multiple=True,
    help="Horizon in days (repeatable). Defaults to 14, 30, 180, 365 and 1825 days",
)
@click.pass_context
def project_balance(
    ctx,
    category: str,
    account: str | None,
    amount: str | None,
    percent: str | None,
    horizons: tuple[int, ...],
):
    """Show how a savings or investments balance grows with daily compounding.

    Examples:
        kidsmoney project savings --account "Emma"
        kidsmoney project investments --amount 500 --horizon 30 --horizon 365
    """
    category = category.lower()
    horizons = tuple(sorted(set(horizons))) or DEFAULT_HORIZONS

    if (account is None) == (amount is None):
        click.echo("Error: Provide exactly one of --account or --amount", err=True)
        ctx.exit(1)

    try:
        rate = rate_from_percent(percent) if percent is not None else None
        if account is not None:
            service = AccountService(ctx.obj["db"])
            account_id = resolve_account_or_exit(ctx, service, account)
            account_obj = service.require_account(account_id)
            principal = account_obj.balance(category)
            if rate is None:
                rate = account_obj.effective_rate(category)
            title = f"{account_obj.name} - {category}"
        else:
            try:
                principal = parse_amount(amount)
            except ValueError as e:
                click.echo(f"Error: Invalid amount format: {e}", err=True)
                ctx.exit(1)
            title = category
        rate = annual_rate_for(category, rate)
        projections = compute_projections(principal, category, horizons, annual_rate=rate)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nProjected Balance ({title}, {format_money(principal)} at {rate_to_percent(rate)}%):")
    for days, value in projections.items():
        label = HORIZON_LABELS.get(days, f"{days} Days")
        click.echo(f"  {label + ':':<10} {format_money(value)}")


def register_commands(cli):
    """Register project command with main CLI."""
    cli.add_command(project_balance)
