"""SQLAlchemy models for sieledger database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(String, nullable=False)
    amount_value = Column(Numeric(14, 2), nullable=False)
    currency = Column(String(3), default="SEK", nullable=False)
    status = Column(String, nullable=False)
    category = Column(String, nullable=True)
    account = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    source = Column(String, nullable=True)
    external_id = Column(String, nullable=True)
    voucher_id = Column(String, nullable=True)
    booked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # De-duplication key for imports
    __table_args__ = (
        UniqueConstraint("user_id", "external_id", name="uq_transactions_user_external_id"),
    )


class AccountBalance(Base):
    """Account balance per YYYY-MM period."""

    __tablename__ = "accountbalances"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    account_number = Column(String, nullable=False)
    period = Column(String(7), nullable=False)
    balance = Column(Numeric(14, 2), nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "account_number", "period", name="uq_accountbalances_user_account_period"
        ),
    )


class Verification(Base):
    """Ledger verification model."""

    __tablename__ = "verifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    series = Column(String, nullable=False, default="A")
    number = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False, default="")
    is_locked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "series", "number", name="uq_verifications_user_series_number"),
        Index("ix_verifications_user_date", "user_id", "date"),
    )

    # Relationships
    rows = relationship(
        "VerificationRow",
        back_populates="verification",
        cascade="all, delete-orphan",
        order_by="VerificationRow.position",
    )


class VerificationRow(Base):
    """Debit/credit line of a verification."""

    __tablename__ = "verification_rows"

    id = Column(Integer, primary_key=True)
    verification_id = Column(Integer, ForeignKey("verifications.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    account = Column(String, nullable=False)
    debit = Column(Numeric(14, 2), nullable=False, default=0)
    credit = Column(Numeric(14, 2), nullable=False, default=0)
    description = Column(String, nullable=True)

    # Relationships
    verification = relationship("Verification", back_populates="rows")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are used from request and worker threads
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
