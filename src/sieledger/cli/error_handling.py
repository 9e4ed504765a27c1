"""CLI error handling helpers."""

import click

from sieledger.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_user(ctx: click.Context) -> str:
    """Return the configured user ID, or exit with a CLI error."""
    user_id = ctx.obj.get("user_id")
    if not user_id:
        click.echo("Error: No user given (use --user or SIELEDGER_USER_ID)", err=True)
        ctx.exit(1)
    return user_id
