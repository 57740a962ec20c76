"""Shared pytest fixtures for kidsmoney tests."""

import logging
import tempfile
import os
from datetime import datetime, UTC
from decimal import Decimal
import pytest

from kidsmoney.database.factories import create_sqlite_database
from kidsmoney.domain.account import AccountService
from kidsmoney.domain.engine import AccrualEngine
from kidsmoney.domain.ledger import LedgerWriter
from kidsmoney.domain.transaction import TransactionService
from kidsmoney.logging_config import LOGGER_NAME

# Fixed instant all service-level tests start their accounts at
T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


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


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo handler changes made by the CLI so caplog keeps working."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db, clock=lambda: T0)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def ledger_writer(temp_db):
    """Create a LedgerWriter with a temporary database."""
    return LedgerWriter(temp_db)


@pytest.fixture
def engine(temp_db):
    """Create an AccrualEngine with a temporary database."""
    return AccrualEngine(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account created at T0 with money in every balance."""
    account_id = account_service.create_account(name="Emma", now=T0)
    account_service.deposit(account_id, "cash", Decimal("20.00"), now=T0)
    account_service.deposit(account_id, "savings", Decimal("1000.00"), now=T0)
    account_service.deposit(account_id, "investments", Decimal("500.00"), now=T0)
    return account_service.get_account(account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
