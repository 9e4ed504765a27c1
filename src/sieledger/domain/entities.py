"""Domain model entities for sieledger.

These are pure data classes representing bookkeeping concepts, independent of
the database schema. Parser output, persisted ledger records and report rows
all live here so the services can be tested without a database.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


# SIE document (parser output)


@dataclass(frozen=True)
class FiscalYear:
    """Fiscal year range declared by a #RAR line."""

    start: date
    end: date


@dataclass(frozen=True)
class SieAccount:
    """Account from the chart of accounts (#KONTO)."""

    number: str
    name: str


@dataclass(frozen=True)
class SieBalance:
    """Opening or closing balance (#IB / #UB).

    ``year`` is the SIE relative year offset: 0 is the current fiscal year,
    -1 the year before and so on.
    """

    account: str
    amount: Decimal
    year: int
    period: Optional[int] = None
    kind: str = "IB"


@dataclass(frozen=True)
class VerificationRow:
    """One #TRANS line: signed amount, positive is debit."""

    account: str
    amount: Decimal


@dataclass
class SieVerification:
    """Verification (#VER) with the #TRANS rows that followed it."""

    series: str
    ver_number: str
    date: str
    description: str
    rows: list[VerificationRow] = field(default_factory=list)

    @property
    def voucher_id(self) -> str:
        return f"{self.series}{self.ver_number}"

    @property
    def total(self) -> Decimal:
        return sum((row.amount for row in self.rows), Decimal("0"))

    @property
    def is_balanced(self) -> bool:
        return self.total == 0


@dataclass(frozen=True)
class ParseWarning:
    """A line the parser skipped."""

    line_number: int
    raw_line: str
    reason: str


@dataclass
class SieDocument:
    """Best-effort result of parsing a SIE file."""

    program: str = ""
    fiscal_years: list[FiscalYear] = field(default_factory=list)
    accounts: list[SieAccount] = field(default_factory=list)
    balances: list[SieBalance] = field(default_factory=list)
    verifications: list[SieVerification] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)

    @property
    def fiscal_year(self) -> Optional[FiscalYear]:
        """Active fiscal year (index 0), if declared."""
        return self.fiscal_years[0] if self.fiscal_years else None

    def account_name(self, number: str) -> Optional[str]:
        for account in self.accounts:
            if account.number == number:
                return account.name
        return None


# Persisted entities


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    user_id: str
    description: str
    date: date
    amount: str
    amount_value: Decimal
    currency: str
    status: str
    category: Optional[str]
    account: Optional[str]
    notes: Optional[str]
    source: Optional[str]
    external_id: Optional[str]
    voucher_id: Optional[str]
    booked_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class AccountBalance:
    """Period balance of one account."""

    id: int
    user_id: str
    account_number: str
    period: str
    balance: Decimal
    updated_at: datetime


@dataclass(frozen=True)
class LedgerRow:
    """Debit/credit line of a ledger verification."""

    account: str
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    description: Optional[str] = None

    @property
    def amount(self) -> Decimal:
        """Signed amount, positive is debit."""
        return self.debit - self.credit


@dataclass(frozen=True)
class Verification:
    """Ledger verification domain entity."""

    id: int
    user_id: str
    series: str
    number: int
    date: date
    description: str
    is_locked: bool
    created_at: datetime
    rows: tuple[LedgerRow, ...] = ()


# Persistence outcomes


@dataclass(frozen=True)
class Inserted:
    """Row written."""

    id: Union[int, str]


@dataclass(frozen=True)
class DuplicateKey:
    """Row rejected by a uniqueness constraint."""

    key: str


@dataclass(frozen=True)
class StoreFailure:
    """Any other store error."""

    message: str


InsertOutcome = Union[Inserted, DuplicateKey, StoreFailure]


# Reports


@dataclass(frozen=True)
class ImportStats:
    verifications: int
    accounts: int
    balances: int
    transactions_inserted: int
    account_balances_inserted: int
    period: str


@dataclass(frozen=True)
class ImportReport:
    """Outcome of one SIE import."""

    stats: ImportStats
    errors: tuple[str, ...] = ()
    warnings: tuple[ParseWarning, ...] = ()
    unbalanced: tuple[str, ...] = ()


class MonthStatus(str, Enum):
    """Derived close state of a month."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class MonthlySummary:
    month: int
    year: int
    period: str
    label: str
    verification_count: int
    revenue: Decimal
    expenses: Decimal
    result: Decimal
    status: MonthStatus
