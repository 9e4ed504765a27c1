"""SIE export command."""

from pathlib import Path
from typing import Optional

import click
from sieledger.cli.error_handling import handle_domain_error, require_user
from sieledger.config.settings import get_settings
from sieledger.domain.errors import DomainError
from sieledger.domain.sie_export import SieExportService, sie_filename


@click.command("export-sie")
@click.option("--year", type=click.IntRange(1900, 2100), required=True, help="Fiscal year to export")
@click.option("--output", type=click.Path(dir_okay=False), help="Output file (default: bokforing_<orgnr>_<year>.se)")
@click.option("--no-balances", is_flag=True, help="Leave out #UB/#RES balances")
@click.pass_context
def export_sie(ctx, year: int, output: Optional[str], no_balances: bool):
    """Export a year of verifications to a SIE4 file."""
    user_id = require_user(ctx)
    settings = get_settings()
    service = SieExportService(ctx.obj["db"])

    try:
        content = service.export_year(
            user_id,
            year,
            company_name=settings.company_name,
            org_number=settings.org_number,
            include_balances=not no_balances,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    path = Path(output or sie_filename(settings.org_number, year))
    # Characters outside PC8 are replaced rather than failing the export
    path.write_bytes(content.encode("cp437", errors="replace"))
    click.echo(f"Exported {year} to {path}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_sie)
