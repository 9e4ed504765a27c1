"""SIE import command."""

from pathlib import Path

import click
from sieledger.cli.error_handling import handle_domain_error, require_user
from sieledger.domain.errors import DomainError
from sieledger.domain.sie_import import SieImportService
from sieledger.domain.sie_parser import decode_sie_bytes


@click.command("import-sie")
@click.argument("sie_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_sie(ctx, sie_file: str):
    """Import verifications and balances from a SIE4 file."""
    user_id = require_user(ctx)
    db = ctx.obj["db"]
    service = SieImportService(db)

    try:
        content = decode_sie_bytes(Path(sie_file).read_bytes())
        report = service.import_sie(content, user_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    stats = report.stats
    click.echo(f"\nImport complete ({stats.period}):")
    click.echo(f"  Verifications: {stats.verifications}")
    click.echo(f"  Accounts: {stats.accounts}")
    click.echo(f"  Balances: {stats.balances}")
    click.echo(f"  Transactions inserted: {stats.transactions_inserted}")
    click.echo(f"  Account balances written: {stats.account_balances_inserted}")
    if report.unbalanced:
        click.echo(f"  Unbalanced verifications: {', '.join(report.unbalanced)}")
    if report.warnings:
        click.echo(f"  Skipped lines: {len(report.warnings)}")
        for warning in report.warnings:
            click.echo(f"    Line {warning.line_number}: {warning.reason}", err=True)
    if report.errors:
        click.echo(f"  Errors: {len(report.errors)}")
        for error in report.errors:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_sie)
