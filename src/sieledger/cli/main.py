"""Main CLI entry point."""

import click
from sieledger.config.logging import configure_logging
from sieledger.database.factories import create_database, create_sqlite_database

# Import and register all commands at module level
from sieledger.cli.commands import (
    import_cmd,
    verification,
    export_cmd,
    close,
    serve,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides SIELEDGER_DB_PATH environment variable)",
    envvar="SIELEDGER_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    help="User ID that owns the ledger (overrides SIELEDGER_USER_ID environment variable)",
    envvar="SIELEDGER_USER_ID",
)
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str | None):
    """sieledger - SIE import, monthly close and export for Swedish bookkeeping.

    Import SIE4 files into a user's ledger, review and close months, and
    export the ledger back to SIE4.
    """
    ctx.ensure_object(dict)
    configure_logging()
    ctx.obj["db_path"] = db_path
    ctx.obj["user_id"] = user_id

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and ctx.invoked_subcommand != "serve":
        db = create_sqlite_database(database_path=db_path) if db_path else create_database()
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
import_cmd.register_commands(cli)
export_cmd.register_commands(cli)
close.register_commands(cli)
serve.register_commands(cli)
verification.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
