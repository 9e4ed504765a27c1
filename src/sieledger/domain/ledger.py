"""Ledger verification domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from sieledger.config.logging import get_logger
from sieledger.database.base import Database
from sieledger.domain.entities import LedgerRow, MonthStatus, Verification
from sieledger.domain.errors import (
    NotFoundError,
    PeriodLockedError,
    UnauthorizedError,
    ValidationError,
    period_locked,
    unauthorized,
    verification_locked,
    verification_not_found,
    verification_unbalanced,
)
from sieledger.domain.monthly_close import derive_status
from sieledger.utils.date_parser import month_range

logger = get_logger(__name__)


def validate_rows(rows: Sequence[LedgerRow]) -> None:
    """Check that rows form a balanced double-entry verification.

    Raises:
        ValidationError: If there are fewer than two rows, a row is not
            strictly debit or credit, or the totals differ
    """
    if len(rows) < 2:
        raise ValidationError("A verification needs at least two rows")

    for index, row in enumerate(rows, start=1):
        if not row.account:
            raise ValidationError(f"Row {index}: Missing account")
        if row.debit < 0 or row.credit < 0:
            raise ValidationError(f"Row {index}: Amounts must not be negative")
        if (row.debit > 0) == (row.credit > 0):
            raise ValidationError(f"Row {index}: Exactly one of debit and credit must be set")

    total_debit = sum((row.debit for row in rows), Decimal("0"))
    total_credit = sum((row.credit for row in rows), Decimal("0"))
    if total_debit != total_credit:
        raise ValidationError(verification_unbalanced(total_debit, total_credit))


class LedgerService:
    """Service for posting and reading ledger verifications."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def is_month_closed(self, user_id: str, year: int, month: int) -> bool:
        """A month is closed when it has verifications and all are locked."""
        start_date, end_date = month_range(year, month)
        verifications = self.db.list_verifications(user_id, start_date, end_date)
        return derive_status(verifications) is MonthStatus.CLOSED

    def post_verification(
        self,
        user_id: Optional[str],
        date: date,
        description: str,
        rows: Sequence[LedgerRow],
        series: str = "A",
        number: Optional[int] = None,
    ) -> int:
        """Post a balanced verification.

        Args:
            user_id: Owning user ID
            date: Verification date
            description: Verification text
            rows: Debit/credit rows
            series: Verification series
            number: Verification number; next free number when omitted

        Returns:
            Verification ID

        Raises:
            UnauthorizedError: If user_id is missing
            ValidationError: If the rows do not balance
            PeriodLockedError: If the month of ``date`` is closed
            ConflictError: If the series/number is taken
        """
        if not user_id:
            raise UnauthorizedError(unauthorized())

        validate_rows(rows)

        if self.is_month_closed(user_id, date.year, date.month):
            raise PeriodLockedError(period_locked(date.year, date.month))

        if number is None:
            number = self.db.next_verification_number(user_id, series)

        verification_id = self.db.create_verification(
            user_id=user_id,
            series=series,
            number=number,
            date=date,
            description=description,
            rows=rows,
        )
        logger.info(
            "verification_posted",
            user_id=user_id,
            verification_id=verification_id,
            voucher=f"{series}{number}",
        )
        return verification_id

    def get_verification(self, user_id: str, verification_id: int) -> Optional[Verification]:
        """Get verification by ID.

        Returns:
            Verification entity or None if not found
        """
        return self.db.get_verification(user_id, verification_id)

    def list_verifications(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Verification]:
        """List verifications in a date range."""
        return self.db.list_verifications(user_id, start_date, end_date)

    def delete_verification(self, user_id: str, verification_id: int) -> None:
        """Delete an unlocked verification.

        Raises:
            NotFoundError: If the verification doesn't exist
            PeriodLockedError: If it is locked
        """
        verification = self.db.get_verification(user_id, verification_id)
        if verification is None:
            raise NotFoundError(verification_not_found(verification_id))
        if verification.is_locked:
            raise PeriodLockedError(verification_locked(verification_id))
        self.db.delete_verification(user_id, verification_id)
