"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so domain entities stay stable when
the database schema changes.
"""

from decimal import Decimal

from sieledger.domain import entities as domain
from sieledger.database.models import (
    AccountBalance as ORMAccountBalance,
    Transaction as ORMTransaction,
    Verification as ORMVerification,
    VerificationRow as ORMVerificationRow,
)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        description=orm_transaction.description,
        date=orm_transaction.date,
        amount=orm_transaction.amount,
        amount_value=Decimal(orm_transaction.amount_value),
        currency=orm_transaction.currency,
        status=orm_transaction.status,
        category=orm_transaction.category,
        account=orm_transaction.account,
        notes=orm_transaction.notes,
        source=orm_transaction.source,
        external_id=orm_transaction.external_id,
        voucher_id=orm_transaction.voucher_id,
        booked_at=orm_transaction.booked_at,
        created_at=orm_transaction.created_at,
    )


def account_balance_to_domain(orm_balance: ORMAccountBalance) -> domain.AccountBalance:
    """Convert SQLAlchemy AccountBalance model to domain AccountBalance entity."""
    return domain.AccountBalance(
        id=orm_balance.id,
        user_id=orm_balance.user_id,
        account_number=orm_balance.account_number,
        period=orm_balance.period,
        balance=Decimal(orm_balance.balance),
        updated_at=orm_balance.updated_at,
    )


def ledger_row_to_domain(orm_row: ORMVerificationRow) -> domain.LedgerRow:
    """Convert SQLAlchemy VerificationRow model to domain LedgerRow."""
    return domain.LedgerRow(
        account=orm_row.account,
        debit=Decimal(orm_row.debit or 0),
        credit=Decimal(orm_row.credit or 0),
        description=orm_row.description,
    )


def verification_to_domain(orm_verification: ORMVerification) -> domain.Verification:
    """Convert SQLAlchemy Verification model to domain Verification entity."""
    return domain.Verification(
        id=orm_verification.id,
        user_id=orm_verification.user_id,
        series=orm_verification.series,
        number=orm_verification.number,
        date=orm_verification.date,
        description=orm_verification.description,
        is_locked=orm_verification.is_locked,
        created_at=orm_verification.created_at,
        rows=tuple(ledger_row_to_domain(row) for row in orm_verification.rows),
    )
