"""Shared fixtures for Ledger Guard tests."""

from datetime import datetime
from decimal import Decimal

import pytest

from ledger_guard.book import LedgerBook
from ledger_guard.config import get_settings
from ledger_guard.models.ledger import LedgerState, Transaction, TransactionType
from ledger_guard.services.storage import InMemoryStorage


NOW = datetime(2024, 3, 15, 12, 0, 0)


def _make_tx(
    amount,
    tx_type=TransactionType.DEPOSIT,
    when=datetime(2024, 1, 5),
    user_id="1",
    **kwargs,
) -> Transaction:
    """Build a transaction with terse defaults."""
    return Transaction(
        user_id=user_id,
        amount=Decimal(str(amount)),
        type=tx_type,
        timestamp=when,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent of the developer's environment and .env file."""
    for var in (
        "LEDGER_ANNUAL_RATE",
        "LEDGER_STORAGE_PATH",
        "LEDGER_STORAGE_KEY",
        "LEDGER_DEFAULT_USER_NAMES",
        "LEDGER_CURRENCY_SYMBOL",
        "APP_ENVIRONMENT",
        "DEBUG_MODE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_tx():
    return _make_tx


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def book(storage):
    return LedgerBook(LedgerState.default(["Alice", "Bob"], now=NOW), storage)
