"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PeriodLockedError(ConflictError):
    """Write blocked because the verification or its month is closed."""


class UnauthorizedError(DomainError):
    """No user identity available for a user-scoped operation."""


def unauthorized() -> str:
    """Return message for a missing user identity."""
    return "Unauthorized"


def verification_not_found(verification_id: int) -> str:
    """Return message for missing verification."""
    return f"Verification {verification_id} not found"


def duplicate_verification(series: str, number: int) -> str:
    """Return message for a verification number that is already taken."""
    return f"Verification {series}{number} already exists"


def verification_unbalanced(debit, credit) -> str:
    """Return message when debit and credit totals differ."""
    return f"Verification does not balance: debit {debit} != credit {credit}"


def verification_locked(verification_id: int) -> str:
    """Return message when a locked verification is modified."""
    return f"Verification {verification_id} is locked"


def period_locked(year: int, month: int) -> str:
    """Return message when posting into a closed month."""
    return f"Period {year}-{month:02d} is closed"


def invalid_month(month: int) -> str:
    """Return message for a month outside 1-12."""
    return f"Invalid month: {month}"
