"""Ledger verification commands."""

import click
from decimal import Decimal
from sieledger.cli.error_handling import handle_domain_error, require_user
from sieledger.domain.entities import LedgerRow
from sieledger.domain.errors import DomainError
from sieledger.domain.ledger import LedgerService
from sieledger.utils.amount_parser import parse_amount
from sieledger.utils.date_parser import parse_date


@click.group()
def verification_group():
    """Manage ledger verifications."""
    pass


def parse_row(value: str) -> LedgerRow:
    """Parse ACCOUNT:AMOUNT. Positive amounts are debit, negative credit."""
    account, separator, amount_str = value.partition(":")
    if not separator or not account.strip():
        raise ValueError(f"Expected ACCOUNT:AMOUNT, got '{value}'")
    amount = parse_amount(amount_str)
    if amount >= 0:
        return LedgerRow(account=account.strip(), debit=amount)
    return LedgerRow(account=account.strip(), credit=-amount)


@verification_group.command("add")
@click.option(
    "--date",
    "date_str",
    required=True,
    help="Verification date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--description", default="", help="Verification text")
@click.option(
    "--row",
    "row_values",
    multiple=True,
    required=True,
    help="ACCOUNT:AMOUNT, debit positive and credit negative (e.g. 5010:10000 1930:-10000)",
)
@click.option("--series", default="A", show_default=True, help="Verification series")
@click.option("--number", type=int, help="Verification number (next free number if not provided)")
@click.pass_context
def add_verification(ctx, date_str: str, description: str, row_values, series: str, number):
    """Post a balanced verification.

    Examples:
        sieledger verification add --date 2024-01-15 --description "Hyra" \\
            --row 5010:10000 --row 1930:-10000
    """
    user_id = require_user(ctx)
    service = LedgerService(ctx.obj["db"])

    try:
        verification_date = parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        rows = [parse_row(value) for value in row_values]
    except ValueError as e:
        click.echo(f"Error: Invalid row: {e}", err=True)
        ctx.exit(1)

    try:
        verification_id = service.post_verification(
            user_id,
            date=verification_date,
            description=description,
            rows=rows,
            series=series,
            number=number,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    verification = service.get_verification(user_id, verification_id)
    click.echo(
        f"Posted verification {verification.series}{verification.number} (ID: {verification_id})"
    )


@verification_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def list_verifications(ctx, start_date: str, end_date: str):
    """List verifications with their rows."""
    user_id = require_user(ctx)
    service = LedgerService(ctx.obj["db"])

    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    verifications = service.list_verifications(user_id, start, end)
    if not verifications:
        click.echo("No verifications found.")
        return

    click.echo(f"\nFound {len(verifications)} verification(s):")
    click.echo("-" * 80)
    for verification in verifications:
        lock = " [låst]" if verification.is_locked else ""
        click.echo(
            f"{verification.series}{verification.number:<6} {verification.date} "
            f"{verification.description}{lock}  (ID: {verification.id})"
        )
        for row in verification.rows:
            debit = f"{row.debit:,.2f}" if row.debit else ""
            credit = f"{row.credit:,.2f}" if row.credit else ""
            click.echo(f"    {row.account:<8} {debit:>14} {credit:>14}")

    total = sum((row.debit for v in verifications for row in v.rows), Decimal("0"))
    click.echo("-" * 80)
    click.echo(f"Count: {len(verifications)} | Total debit: {total:,.2f}")


@verification_group.command("delete")
@click.argument("verification_id", type=int)
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_context
def delete_verification(ctx, verification_id: int, yes: bool) -> None:
    """Delete an unlocked verification.

    Examples:
        sieledger verification delete 1
    """
    user_id = require_user(ctx)
    service = LedgerService(ctx.obj["db"])

    if not yes and not click.confirm(f"Are you sure you want to delete verification {verification_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_verification(user_id, verification_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted verification {verification_id}")


def register_commands(cli: click.Group) -> None:
    """Register verification commands with main CLI."""
    cli.add_command(verification_group, name="verification")
