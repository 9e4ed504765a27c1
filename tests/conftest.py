"""Shared pytest fixtures for sieledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
from pathlib import Path
import pytest

from sieledger.config.settings import Settings
from sieledger.database.factories import create_sqlite_database
from sieledger.domain.entities import LedgerRow
from sieledger.domain.ledger import LedgerService
from sieledger.domain.monthly_close import MonthlyCloseService
from sieledger.domain.sie_export import SieExportService
from sieledger.domain.sie_import import SieImportService

TEST_USER = "user-1"
OTHER_USER = "user-2"
TEST_JWT_SECRET = "test-secret"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_id():
    return TEST_USER


@pytest.fixture
def import_service(temp_db):
    """Create a SieImportService with a temporary database."""
    return SieImportService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def close_service(temp_db):
    """Create a MonthlyCloseService with a temporary database."""
    return MonthlyCloseService(temp_db)


@pytest.fixture
def export_service(temp_db):
    """Create a SieExportService with a temporary database."""
    return SieExportService(temp_db)


def rows(debit_account: str, credit_account: str, amount: str, description=None):
    """Two balanced ledger rows moving ``amount`` from credit to debit account."""
    value = Decimal(amount)
    return [
        LedgerRow(account=debit_account, debit=value, description=description),
        LedgerRow(account=credit_account, credit=value, description=description),
    ]


@pytest.fixture
def ledger_rows():
    """Factory for balanced two-row verifications."""
    return rows


@pytest.fixture
def sample_verifications(ledger_service, user_id):
    """Post a small ledger for 2024 and return the verification IDs by name."""
    ids = {}
    ids["rent"] = ledger_service.post_verification(
        user_id, date(2024, 1, 15), "Hyra januari", rows("5010", "1930", "10000.00")
    )
    ids["sale"] = ledger_service.post_verification(
        user_id, date(2024, 1, 20), "Faktura 1001", rows("1930", "3010", "25000.00")
    )
    ids["supplies"] = ledger_service.post_verification(
        user_id, date(2024, 1, 28), "Kontorsmaterial", rows("6110", "1930", "1500.00")
    )
    ids["february_sale"] = ledger_service.post_verification(
        user_id, date(2024, 2, 5), "Faktura 1002", rows("1930", "3010", "8000.00")
    )
    return ids


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_sie(fixtures_dir):
    return (fixtures_dir / "sample.se").read_text(encoding="utf-8")


@pytest.fixture
def test_settings():
    return Settings(
        jwt_secret=TEST_JWT_SECRET,
        company_name="Testbolaget AB",
        org_number="556677-8899",
        log_level="WARNING",
    )


@pytest.fixture
def api_client(temp_db, test_settings):
    """FastAPI test client bound to the temporary database."""
    from fastapi.testclient import TestClient

    from sieledger.api.app import create_app

    app = create_app(temp_db, settings=test_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers(test_settings, user_id):
    from sieledger.api.auth import create_token

    token = create_token(user_id, test_settings)
    return {"Authorization": f"Bearer {token}"}
