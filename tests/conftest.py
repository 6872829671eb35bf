"""Shared pytest fixtures for mahallu tests."""

import tempfile
import os
from decimal import Decimal
from pathlib import Path
import pytest

from mahallu.database.factories import create_sqlite_store
from mahallu.domain.bank import BankTransactionService
from mahallu.domain.csv_import import CSVImportService
from mahallu.domain.hierarchy import HierarchyService
from mahallu.domain.ledger import LedgerService
from mahallu.domain.reports import ReportService


@pytest.fixture
def temp_store():
    """Create a temporary document store for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()
    store.initialize_schema()

    yield store

    # Cleanup
    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def hierarchy_service(temp_store):
    """Create a HierarchyService with a temporary store."""
    return HierarchyService(temp_store)


@pytest.fixture
def ledger_service(temp_store):
    """Create a LedgerService with a temporary store."""
    return LedgerService(temp_store)


@pytest.fixture
def bank_service(temp_store):
    """Create a BankTransactionService with a temporary store."""
    return BankTransactionService(temp_store)


@pytest.fixture
def import_service(temp_store):
    """Create a CSVImportService with a temporary store."""
    return CSVImportService(temp_store)


@pytest.fixture
def report_service(temp_store):
    """Create a ReportService with a temporary store."""
    return ReportService(temp_store)


@pytest.fixture
def sample_block(hierarchy_service):
    """Create a sample block with the default clusters."""
    return hierarchy_service.create_block("North")


@pytest.fixture
def sample_member(ledger_service, sample_block):
    """Create a sample member in North / A."""
    return ledger_service.add_member(
        name="Aisha",
        house_number="12",
        block="North",
        cluster="A",
        phone="9876543210",
        account_number="MB1001",
    )


@pytest.fixture
def funded_member(ledger_service, sample_member):
    """Sample member who paid the registration fee and holds a balance of 100."""
    ledger_service.add_transaction(sample_member.id, "in", Decimal("150"))
    return ledger_service.get_member(sample_member.id)


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
def fail_writes(temp_store, monkeypatch):
    """Return a function that makes one store method raise for one collection."""

    def install(method, collection):
        real = getattr(temp_store, method)

        def write(target, *args):
            if target == collection:
                raise RuntimeError("disk full")
            return real(target, *args)

        monkeypatch.setattr(temp_store, method, write)

    return install
