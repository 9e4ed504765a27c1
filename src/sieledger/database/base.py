"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any, Sequence
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from sieledger.domain.entities import (
    AccountBalance,
    InsertOutcome,
    LedgerRow,
    Transaction,
    Verification,
)


class Database(ABC):
    """Abstract, user-scoped store for sieledger.

    Every read and write takes the owning ``user_id``; rows of other users
    are never visible.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transaction(
        self,
        user_id: str,
        description: str,
        date: date,
        amount: str,
        amount_value: Decimal,
        status: str,
        currency: str = "SEK",
        category: Optional[str] = None,
        account: Optional[str] = None,
        notes: Optional[str] = None,
        source: Optional[str] = None,
        external_id: Optional[str] = None,
        voucher_id: Optional[str] = None,
        booked_at: Optional[datetime] = None,
    ) -> InsertOutcome:
        """Insert a transaction.

        Returns Inserted with the new ID, DuplicateKey when
        (user_id, external_id) already exists, or StoreFailure for any other
        store error. Never raises for store errors.
        """
        pass

    @abstractmethod
    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        source: Optional[str] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters."""
        pass

    # Account balance operations
    @abstractmethod
    def upsert_account_balance(
        self, user_id: str, account_number: str, period: str, balance: Decimal
    ) -> InsertOutcome:
        """Insert or overwrite the balance keyed by (user_id, account_number, period)."""
        pass

    @abstractmethod
    def list_account_balances(
        self,
        user_id: str,
        start_period: Optional[str] = None,
        end_period: Optional[str] = None,
    ) -> list[AccountBalance]:
        """List stored period balances, optionally limited to a YYYY-MM range."""
        pass

    # Verification operations
    @abstractmethod
    def create_verification(
        self,
        user_id: str,
        series: str,
        number: int,
        date: date,
        description: str,
        rows: Sequence[LedgerRow],
    ) -> int:
        """Create a verification with its rows. Returns verification ID.

        Raises:
            ConflictError: If (user_id, series, number) already exists
        """
        pass

    @abstractmethod
    def get_verification(self, user_id: str, verification_id: int) -> Optional[Verification]:
        """Get verification by ID."""
        pass

    @abstractmethod
    def list_verifications(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Verification]:
        """List verifications ordered by series and number."""
        pass

    @abstractmethod
    def next_verification_number(self, user_id: str, series: str) -> int:
        """Return the next free number in a series."""
        pass

    @abstractmethod
    def delete_verification(self, user_id: str, verification_id: int) -> None:
        """Delete a verification and its rows."""
        pass

    @abstractmethod
    def set_verifications_locked(
        self, user_id: str, start_date: date, end_date: date, locked: bool
    ) -> int:
        """Set is_locked on every verification dated within [start_date, end_date].

        Issued as a single bulk update. Returns the number of rows matched.
        """
        pass

    @abstractmethod
    def get_account_balances(
        self, user_id: str, start_date: date, end_date: date
    ) -> list[dict[str, Any]]:
        """Net signed balance (debit - credit) per account over verification rows in range.

        Returns a list of dictionaries with ``account_number`` and ``balance``.
        Safe to call concurrently from several threads.
        """
        pass
