"""Monthly close commands."""

from datetime import date
from typing import Optional

import click
from sieledger.cli.error_handling import handle_domain_error, require_user
from sieledger.domain.errors import DomainError
from sieledger.domain.monthly_close import MonthlyCloseService, lock_message


def _format_amount(amount) -> str:
    return f"{amount:,.2f}".replace(",", " ")


@click.command("months")
@click.option("--year", type=click.IntRange(1900, 2100), help="Year (default: current year)")
@click.pass_context
def months(ctx, year: Optional[int]):
    """Show revenue, expenses and close status per month."""
    user_id = require_user(ctx)
    year = year or date.today().year
    service = MonthlyCloseService(ctx.obj["db"])

    try:
        summaries = service.get_monthly_summaries(user_id, year)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(
        f"{'Period':<16} {'Ver':>5} {'Intäkter':>14} {'Kostnader':>14} {'Resultat':>14}  Status"
    )
    click.echo("-" * 78)
    for summary in summaries:
        click.echo(
            f"{summary.label:<16} {summary.verification_count:>5} "
            f"{_format_amount(summary.revenue):>14} {_format_amount(summary.expenses):>14} "
            f"{_format_amount(summary.result):>14}  {summary.status.value}"
        )


def _set_locked(ctx, year: int, month: int, locked: bool) -> None:
    user_id = require_user(ctx)
    service = MonthlyCloseService(ctx.obj["db"])
    try:
        affected = service.set_month_locked(user_id, year, month, locked=locked)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(lock_message(year, month, locked, affected))


@click.command("close-month")
@click.argument("year", type=click.IntRange(1900, 2100))
@click.argument("month", type=click.IntRange(1, 12))
@click.pass_context
def close_month(ctx, year: int, month: int):
    """Lock all verifications in a month."""
    _set_locked(ctx, year, month, locked=True)


@click.command("reopen-month")
@click.argument("year", type=click.IntRange(1900, 2100))
@click.argument("month", type=click.IntRange(1, 12))
@click.pass_context
def reopen_month(ctx, year: int, month: int):
    """Unlock all verifications in a month."""
    _set_locked(ctx, year, month, locked=False)


def register_commands(cli):
    """Register monthly close commands with main CLI."""
    cli.add_command(months)
    cli.add_command(close_month)
    cli.add_command(reopen_month)
