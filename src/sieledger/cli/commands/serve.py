"""HTTP server command."""

from typing import Optional

import click
from sieledger.config.settings import get_settings


@click.command("serve")
@click.option("--host", help="Bind host (default from SIELEDGER_HOST)")
@click.option("--port", type=int, help="Bind port (default from SIELEDGER_PORT)")
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int]):
    """Run the HTTP API."""
    import uvicorn

    from sieledger.api.app import create_app
    from sieledger.database.factories import create_database, create_sqlite_database

    settings = get_settings()
    db_path = ctx.obj.get("db_path")
    db = create_sqlite_database(db_path) if db_path else create_database()
    uvicorn.run(
        create_app(db),
        host=host or settings.host,
        port=port or settings.port,
    )


def register_commands(cli):
    """Register serve command with main CLI."""
    cli.add_command(serve)
