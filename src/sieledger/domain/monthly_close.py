"""Monthly close domain service.

A month has no stored state of its own. It is ``closed`` when it contains at
least one verification and every verification in it is locked, otherwise
``open``. Closing and reopening flip ``is_locked`` on every verification in
the month with one bulk update.

Reopening is not checked against reports (VAT, employer declarations, annual
accounts) already filed for the month; that is left to the caller.
"""

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Any, Optional

from sieledger.config.logging import get_logger
from sieledger.database.base import Database
from sieledger.domain.entities import MonthStatus, MonthlySummary, Verification
from sieledger.domain.errors import (
    UnauthorizedError,
    ValidationError,
    invalid_month,
    unauthorized,
)
from sieledger.utils.date_parser import month_range

logger = get_logger(__name__)

MONTH_NAMES = (
    "Januari",
    "Februari",
    "Mars",
    "April",
    "Maj",
    "Juni",
    "Juli",
    "Augusti",
    "September",
    "Oktober",
    "November",
    "December",
)

REVENUE_ACCOUNTS = range(3000, 4000)
EXPENSE_ACCOUNTS = range(4000, 9000)


def month_label(year: int, month: int) -> str:
    """Swedish month name and year, e.g. 'Mars 2024'."""
    return f"{MONTH_NAMES[month - 1]} {year}"


def derive_status(verifications: list[Verification]) -> MonthStatus:
    if verifications and all(v.is_locked for v in verifications):
        return MonthStatus.CLOSED
    return MonthStatus.OPEN


def summarize_balances(balances: list[dict[str, Any]]) -> tuple[Decimal, Decimal]:
    """Return (revenue, expenses) from per-account balances.

    Revenue accounts are credit-normal, so their absolute value is used.
    Expense accounts are taken as booked.
    """
    revenue = Decimal("0")
    expenses = Decimal("0")
    for row in balances:
        try:
            account = int(row["account_number"])
        except (TypeError, ValueError):
            continue
        balance = Decimal(row["balance"])
        if account in REVENUE_ACCOUNTS:
            revenue += abs(balance)
        elif account in EXPENSE_ACCOUNTS:
            expenses += balance
    return revenue, expenses


def lock_message(year: int, month: int, locked: bool, affected_count: int) -> str:
    """Confirmation message for a close or reopen."""
    if locked:
        return f"{month_label(year, month)} stängd. {affected_count} verifikationer låsta."
    return f"{month_label(year, month)} öppnad. {affected_count} verifikationer upplåsta."


class MonthlyCloseService:
    """Service for month summaries and closing."""

    def __init__(self, db: Database):
        """Initialize monthly close service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_monthly_summaries(self, user_id: Optional[str], year: int) -> list[MonthlySummary]:
        """Build one summary per calendar month of a year.

        The twelve balance queries are read-only and independent, so they
        run concurrently.

        Raises:
            UnauthorizedError: If user_id is missing
        """
        if not user_id:
            raise UnauthorizedError(unauthorized())

        ranges = [month_range(year, month) for month in range(1, 13)]
        with ThreadPoolExecutor(max_workers=len(ranges)) as executor:
            balance_futures = [
                executor.submit(self.db.get_account_balances, user_id, start, end)
                for start, end in ranges
            ]
            verifications = self.db.list_verifications(user_id, ranges[0][0], ranges[-1][1])
            monthly_balances = [future.result() for future in balance_futures]

        by_month: dict[int, list[Verification]] = {month: [] for month in range(1, 13)}
        for verification in verifications:
            by_month[verification.date.month].append(verification)

        summaries = []
        for month in range(1, 13):
            revenue, expenses = summarize_balances(monthly_balances[month - 1])
            month_verifications = by_month[month]
            summaries.append(
                MonthlySummary(
                    month=month,
                    year=year,
                    period=f"{year:04d}-{month:02d}",
                    label=month_label(year, month),
                    verification_count=len(month_verifications),
                    revenue=revenue,
                    expenses=expenses,
                    result=revenue - expenses,
                    status=derive_status(month_verifications),
                )
            )
        return summaries

    def month_status(self, user_id: str, year: int, month: int) -> MonthStatus:
        """Derived status of a single month."""
        start_date, end_date = self._range(year, month)
        return derive_status(self.db.list_verifications(user_id, start_date, end_date))

    def close_month(self, user_id: Optional[str], year: int, month: int) -> int:
        """Lock every verification in the month. Returns the affected count."""
        return self.set_month_locked(user_id, year, month, locked=True)

    def reopen_month(self, user_id: Optional[str], year: int, month: int) -> int:
        """Unlock every verification in the month. Returns the affected count."""
        return self.set_month_locked(user_id, year, month, locked=False)

    def set_month_locked(
        self, user_id: Optional[str], year: int, month: int, locked: bool
    ) -> int:
        """Set is_locked across a month.

        Raises:
            UnauthorizedError: If user_id is missing
            ValidationError: If month is not 1-12
        """
        if not user_id:
            raise UnauthorizedError(unauthorized())

        start_date, end_date = self._range(year, month)
        affected = self.db.set_verifications_locked(user_id, start_date, end_date, locked)
        logger.info(
            "month_closed" if locked else "month_reopened",
            user_id=user_id,
            period=f"{year:04d}-{month:02d}",
            affected=affected,
        )
        return affected

    def _range(self, year: int, month: int):
        try:
            return month_range(year, month)
        except ValueError:
            raise ValidationError(invalid_month(month))
