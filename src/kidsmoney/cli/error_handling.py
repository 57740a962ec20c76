"""CLI error handling helpers."""

import logging

import click

from kidsmoney.domain.errors import DomainError

logger = logging.getLogger(__name__)


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error on stderr and exit with failure.

    Errors the store marks as retryable get a hint that running the
    command again may succeed.
    """
    logger.debug("%s failed", ctx.command_path, exc_info=error)
    suffix = " Please try again." if getattr(error, "retryable", False) else ""
    click.echo(f"Error: {error}{suffix}", err=True)
    ctx.exit(1)
