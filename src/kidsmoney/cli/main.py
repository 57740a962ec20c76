"""Main CLI entry point."""

import click
from kidsmoney.database.factories import create_sqlite_database
from kidsmoney.domain.engine import AccrualEngine
from kidsmoney.domain.errors import DomainError
from kidsmoney.logging_config import LOG_LEVEL_ENV_VAR, setup_logging

# Import and register all commands at module level
from kidsmoney.cli.commands import (
    account,
    add,
    history,
    project,
    accrue,
)

# Commands that manage accrual themselves and must not trigger the startup pass
NO_STARTUP_PASS = {"accrue"}


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides KIDSMONEY_DB_PATH environment variable)",
    envvar="KIDSMONEY_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar=LOG_LEVEL_ENV_VAR,
    help="Logging verbosity",
)
@click.option(
    "--no-accrue",
    is_flag=True,
    help="Skip the interest catch-up that runs before every command",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, no_accrue: bool):
    """Kidsmoney - Savings tracker for kids.

    Every account holds cash, savings and investments. Savings and
    investments earn daily compounded interest, which is posted
    automatically for every whole day that has passed.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)

        if not no_accrue and ctx.invoked_subcommand not in NO_STARTUP_PASS:
            run_startup_pass(db)


def run_startup_pass(db) -> None:
    """Bring every account up to date before the command runs."""
    try:
        result = AccrualEngine(db).run_accrual_pass()
    except DomainError as e:
        click.echo(f"Warning: interest catch-up skipped: {e}", err=True)
        return
    for failure in result.failed:
        click.echo(
            f"Warning: interest catch-up failed for account {failure.account_id}: {failure.error}",
            err=True,
        )


# Register all commands
account.register_commands(cli)
add.register_commands(cli)
history.register_commands(cli)
project.register_commands(cli)
accrue.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
