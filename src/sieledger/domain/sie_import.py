"""SIE import domain service."""

from datetime import date, datetime, UTC
from typing import Optional

from sieledger.config.logging import get_logger
from sieledger.database.base import Database
from sieledger.domain.entities import (
    DuplicateKey,
    FiscalYear,
    ImportReport,
    ImportStats,
    Inserted,
    SieBalance,
    SieDocument,
    SieVerification,
    StoreFailure,
    VerificationRow,
)
from sieledger.domain.errors import UnauthorizedError, unauthorized
from sieledger.domain.sie_parser import parse_sie
from sieledger.utils.amount_parser import format_sek
from sieledger.utils.date_parser import parse_sie_date, period_key

logger = get_logger(__name__)

SIE_SOURCE = "sie_import"
BOOKED_STATUS = "Bokförd"
CURRENCY = "SEK"


def fallback_account_name(account_number: str) -> str:
    """Name used when the file has no #KONTO for an account."""
    return f"Konto {account_number}"


def resolve_fiscal_year(document: SieDocument) -> FiscalYear:
    """Active fiscal year of the document, or the current calendar year."""
    if document.fiscal_year is not None:
        return document.fiscal_year
    today = datetime.now(UTC).date()
    return FiscalYear(start=date(today.year, 1, 1), end=date(today.year, 12, 31))


def balance_period(balance: SieBalance, fiscal_year: FiscalYear) -> str:
    """Map a balance to the YYYY-MM period it is stored under.

    Year offset 0 goes to the fiscal year's first month, every other offset
    to its last month. Only the offset is looked at, not whether the line
    was #IB or #UB.
    """
    if balance.year == 0:
        return period_key(fiscal_year.start)
    return period_key(fiscal_year.end)


def fiscal_year_label(fiscal_year: FiscalYear) -> str:
    return f"{fiscal_year.start.isoformat()} – {fiscal_year.end.isoformat()}"


class SieImportService:
    """Service for importing SIE files into a user's ledger."""

    def __init__(self, db: Database):
        """Initialize SIE import service.

        Args:
            db: Database instance
        """
        self.db = db

    def import_sie(self, content: str, user_id: Optional[str]) -> ImportReport:
        """Import transactions and account balances from SIE text.

        Rows are written one at a time, in file order. A failing row is
        recorded and the import continues; nothing already written is rolled
        back. Re-importing the same file is safe for transactions because
        rows whose external ID already exists are skipped.

        Args:
            content: SIE file text
            user_id: Owning user ID

        Returns:
            ImportReport with counts, per-row errors, parse warnings and the
            vouchers whose rows do not sum to zero

        Raises:
            UnauthorizedError: If user_id is missing
        """
        if not user_id:
            raise UnauthorizedError(unauthorized())

        document = parse_sie(content)
        fiscal_year = resolve_fiscal_year(document)
        booked_at = datetime.now(UTC)

        errors: list[str] = []
        unbalanced: list[str] = []
        transactions_inserted = 0
        account_balances_inserted = 0

        for verification in document.verifications:
            if not verification.is_balanced:
                # Imported anyway; the caller decides what to do about it
                logger.warning(
                    "sie_verification_unbalanced",
                    voucher_id=verification.voucher_id,
                    total=str(verification.total),
                )
                unbalanced.append(verification.voucher_id)

            for row in verification.rows:
                outcome = self._insert_row(document, verification, row, user_id, booked_at)
                if isinstance(outcome, Inserted):
                    transactions_inserted += 1
                elif isinstance(outcome, DuplicateKey):
                    continue
                elif isinstance(outcome, StoreFailure):
                    errors.append(f"Verifikation {verification.voucher_id}: {outcome.message}")

        for balance in document.balances:
            period = balance_period(balance, fiscal_year)
            outcome = self.db.upsert_account_balance(
                user_id=user_id,
                account_number=balance.account,
                period=period,
                balance=balance.amount,
            )
            if isinstance(outcome, Inserted):
                account_balances_inserted += 1
            elif isinstance(outcome, StoreFailure):
                errors.append(f"Saldo {balance.account} {period}: {outcome.message}")

        stats = ImportStats(
            verifications=len(document.verifications),
            accounts=len(document.accounts),
            balances=len(document.balances),
            transactions_inserted=transactions_inserted,
            account_balances_inserted=account_balances_inserted,
            period=fiscal_year_label(fiscal_year),
        )
        logger.info(
            "sie_import_finished",
            user_id=user_id,
            verifications=stats.verifications,
            transactions_inserted=transactions_inserted,
            account_balances_inserted=account_balances_inserted,
            errors=len(errors),
            warnings=len(document.warnings),
        )
        return ImportReport(
            stats=stats,
            errors=tuple(errors),
            warnings=tuple(document.warnings),
            unbalanced=tuple(unbalanced),
        )

    def _insert_row(
        self,
        document: SieDocument,
        verification: SieVerification,
        row: VerificationRow,
        user_id: str,
        booked_at: datetime,
    ):
        """Build and insert the transaction for one verification row."""
        category = document.account_name(row.account) or fallback_account_name(row.account)
        voucher_id = verification.voucher_id
        description = verification.description or f"Verifikation {voucher_id}"
        program = f" ({document.program})" if document.program else ""

        return self.db.insert_transaction(
            user_id=user_id,
            description=description,
            date=parse_sie_date(verification.date),
            amount=format_sek(row.amount),
            amount_value=row.amount,
            currency=CURRENCY,
            status=BOOKED_STATUS,
            category=category,
            account=row.account,
            notes=f"Importerad från SIE{program} {voucher_id}",
            source=SIE_SOURCE,
            external_id=f"{voucher_id}{row.account}",
            voucher_id=voucher_id,
            booked_at=booked_at,
        )
