"""CLI helpers for account resolution and error handling."""

from __future__ import annotations

import click
from kidsmoney.cli.error_handling import handle_domain_error
from kidsmoney.domain.account import AccountService
from kidsmoney.domain.errors import DomainError
from kidsmoney.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)


def format_money(amount) -> str:
    """Format an amount the way every command prints money."""
    return f"${amount:,.2f}"
