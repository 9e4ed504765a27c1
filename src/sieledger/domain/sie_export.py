"""SIE4 export.

Builds a SIE type 4 file (chart of accounts, balances and verifications)
from a user's ledger. Output lines are joined with CRLF.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Optional
import re

from sieledger.config.logging import get_logger
from sieledger.database.base import Database
from sieledger.domain.errors import UnauthorizedError, unauthorized
from sieledger.utils.amount_parser import format_sie_amount
from sieledger.utils.date_parser import format_sie_date

logger = get_logger(__name__)

PROGRAM_NAME = "sieledger"
PROGRAM_VERSION = "1.0"
SIE_TYPE = "4"
FILE_FORMAT = "PC8"


@dataclass(frozen=True)
class SieCompanyInfo:
    name: str
    org_number: str
    fiscal_year_start: date
    fiscal_year_end: date
    previous_year_start: Optional[date] = None
    previous_year_end: Optional[date] = None
    tax_year: Optional[int] = None


@dataclass(frozen=True)
class SieExportAccount:
    number: str
    name: str
    type: Optional[str] = None


@dataclass(frozen=True)
class SieExportBalance:
    account: str
    amount: Decimal
    year_index: int = 0


@dataclass(frozen=True)
class SieExportEntry:
    account: str
    amount: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class SieExportVerification:
    series: str
    number: int
    date: date
    description: str
    entries: tuple[SieExportEntry, ...]
    registered: Optional[date] = None


@dataclass
class SieExportData:
    company: SieCompanyInfo
    accounts: list[SieExportAccount] = field(default_factory=list)
    opening_balances: list[SieExportBalance] = field(default_factory=list)
    closing_balances: list[SieExportBalance] = field(default_factory=list)
    result_balances: list[SieExportBalance] = field(default_factory=list)
    verifications: list[SieExportVerification] = field(default_factory=list)
    generated_at: Optional[datetime] = None


def account_type(account_number: str) -> Optional[str]:
    """SIE #KTYP code from a BAS account number.

    1xxx T (tillgång), 2xxx S (skuld), 3xxx I (intäkt), 4xxx-8xxx K (kostnad).
    """
    first_digit = account_number[:1]
    if first_digit == "1":
        return "T"
    if first_digit == "2":
        return "S"
    if first_digit == "3":
        return "I"
    if first_digit in ("4", "5", "6", "7", "8"):
        return "K"
    return None


def quote(value: str) -> str:
    """Quote a SIE string value."""
    # The parser has no escape support, so embedded quotes are dropped
    return '"' + value.replace('"', "") + '"'


def _clean_org_number(org_number: str) -> str:
    return re.sub(r"[^0-9]", "", org_number)


def _clean_account(account: str) -> str:
    return re.sub(r"\s", "", account)


def sie_filename(org_number: str, year: int) -> str:
    """Standard download name for an export."""
    org_nr = _clean_org_number(org_number) if org_number else ""
    return f"bokforing_{org_nr or 'export'}_{year}.se"


def generate_sie(data: SieExportData) -> str:
    """Generate SIE4 text from export data."""
    company = data.company
    generated_at = data.generated_at or datetime.now(UTC)
    lines: list[str] = []

    # Header
    lines.append("#FLAGGA 0")
    lines.append(f"#PROGRAM {quote(PROGRAM_NAME)} {quote(PROGRAM_VERSION)}")
    lines.append(f"#FORMAT {FILE_FORMAT}")
    lines.append(f"#GEN {format_sie_date(generated_at.date())}")
    lines.append(f"#SIETYP {SIE_TYPE}")

    # Company
    if company.org_number:
        lines.append(f"#ORGNR {_clean_org_number(company.org_number)}")
    lines.append(f"#FNAMN {quote(company.name)}")
    if company.tax_year:
        lines.append(f"#TAXAR {company.tax_year}")
    lines.append(
        f"#OMFATTN {format_sie_date(company.fiscal_year_start)} "
        f"{format_sie_date(company.fiscal_year_end)}"
    )
    lines.append("#VALUTA SEK")

    # Fiscal years
    lines.append(
        f"#RAR 0 {format_sie_date(company.fiscal_year_start)} "
        f"{format_sie_date(company.fiscal_year_end)}"
    )
    if company.previous_year_start and company.previous_year_end:
        lines.append(
            f"#RAR -1 {format_sie_date(company.previous_year_start)} "
            f"{format_sie_date(company.previous_year_end)}"
        )

    # Chart of accounts
    for account in sorted(data.accounts, key=lambda a: a.number):
        number = _clean_account(account.number)
        lines.append(f"#KONTO {number} {quote(account.name)}")
        if account.type:
            lines.append(f"#KTYP {number} {account.type}")

    # Balances, zero amounts omitted
    for tag, balances in (
        ("#IB", data.opening_balances),
        ("#UB", data.closing_balances),
        ("#RES", data.result_balances),
    ):
        for balance in balances:
            if balance.amount != 0:
                lines.append(
                    f"{tag} {balance.year_index} {_clean_account(balance.account)} "
                    f"{format_sie_amount(balance.amount)}"
                )

    # Verifications
    for verification in sorted(data.verifications, key=lambda v: (v.series, v.number)):
        registered = f" {format_sie_date(verification.registered)}" if verification.registered else ""
        ver_date = format_sie_date(verification.date)
        lines.append(
            f"#VER {verification.series} {verification.number} {ver_date} "
            f"{quote(verification.description)}{registered}"
        )
        lines.append("{")
        for entry in verification.entries:
            text = f" {quote(entry.description)}" if entry.description else ""
            lines.append(
                f"\t#TRANS {_clean_account(entry.account)} {{}} "
                f"{format_sie_amount(entry.amount)} {ver_date}{text}"
            )
        lines.append("}")

    return "\r\n".join(lines)


class SieExportService:
    """Service for exporting a user's ledger as SIE4."""

    def __init__(self, db: Database):
        """Initialize SIE export service.

        Args:
            db: Database instance
        """
        self.db = db

    def build_export_data(
        self,
        user_id: Optional[str],
        year: int,
        company_name: str,
        org_number: str = "",
        include_balances: bool = True,
    ) -> SieExportData:
        """Collect verifications, accounts and balances for a calendar year.

        Raises:
            UnauthorizedError: If user_id is missing
        """
        if not user_id:
            raise UnauthorizedError(unauthorized())

        year_start = date(year, 1, 1)
        year_end = date(year, 12, 31)
        verifications = self.db.list_verifications(user_id, year_start, year_end)
        balances = self.db.list_account_balances(user_id, f"{year:04d}-01", f"{year:04d}-12")

        # Names come from imported transactions where available
        names: dict[str, str] = {}
        for txn in self.db.list_transactions(user_id):
            if txn.account and txn.category and txn.account not in names:
                names[txn.account] = txn.category

        account_numbers = {bal.account_number for bal in balances}
        for verification in verifications:
            account_numbers.update(row.account for row in verification.rows)

        accounts = [
            SieExportAccount(
                number=number,
                name=names.get(number, f"Konto {number}"),
                type=account_type(number),
            )
            for number in sorted(account_numbers)
        ]

        closing_balances: list[SieExportBalance] = []
        result_balances: list[SieExportBalance] = []
        if include_balances:
            # Latest stored period wins per account
            latest: dict[str, Decimal] = {}
            for bal in balances:
                latest[bal.account_number] = bal.balance
            for number, amount in sorted(latest.items()):
                kind = account_type(number)
                if kind in ("T", "S"):
                    closing_balances.append(SieExportBalance(account=number, amount=amount))
                elif kind in ("I", "K"):
                    result_balances.append(SieExportBalance(account=number, amount=amount))

        export_verifications = [
            SieExportVerification(
                series=v.series,
                number=v.number,
                date=v.date,
                description=v.description,
                entries=tuple(
                    SieExportEntry(account=row.account, amount=row.amount, description=row.description)
                    for row in v.rows
                ),
                registered=v.created_at.date() if v.created_at else None,
            )
            for v in verifications
            if v.rows
        ]

        company = SieCompanyInfo(
            name=company_name,
            org_number=org_number,
            fiscal_year_start=year_start,
            fiscal_year_end=year_end,
            previous_year_start=date(year - 1, 1, 1),
            previous_year_end=date(year - 1, 12, 31),
            tax_year=year + 1,
        )
        return SieExportData(
            company=company,
            accounts=accounts,
            closing_balances=closing_balances,
            result_balances=result_balances,
            verifications=export_verifications,
        )

    def export_year(
        self,
        user_id: Optional[str],
        year: int,
        company_name: str,
        org_number: str = "",
        include_balances: bool = True,
    ) -> str:
        """Export one calendar year as SIE4 text."""
        data = self.build_export_data(
            user_id, year, company_name, org_number, include_balances=include_balances
        )
        logger.info(
            "sie_export_built",
            user_id=user_id,
            year=year,
            verifications=len(data.verifications),
            accounts=len(data.accounts),
        )
        return generate_sie(data)
