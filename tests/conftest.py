"""Shared fixtures for ledger tests."""

import datetime as dt

import pytest

from ledger.config import get_settings
from ledger.engine import add_transaction
from ledger.models import (
    CASH_METHOD_ID,
    DEFAULT_CATEGORIES,
    BankAccount,
    ProfileData,
)


def _deposit(data, amount, method_id=CASH_METHOD_ID, date=dt.date(2024, 1, 1)):
    return add_transaction(
        data,
        description="Salario",
        amount=amount,
        date=date,
        type="income",
        payment_method_id=method_id,
    )


@pytest.fixture(autouse=True)
def fresh_settings():
    """Reload settings per test so environment overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def deposit():
    """Add a plain income so later operations have money to move."""
    return _deposit


@pytest.fixture
def empty_data() -> ProfileData:
    """Profile data with default categories and one bank account ("bank-1"), no money."""
    return ProfileData(
        categories=list(DEFAULT_CATEGORIES),
        bank_accounts=[BankAccount(id="bank-1", name="Banco")],
    )


@pytest.fixture
def funded_data(empty_data) -> ProfileData:
    """1000 in cash and 500 in the bank, both on 2024-01-01."""
    data = _deposit(empty_data, "1000", CASH_METHOD_ID)
    return _deposit(data, "500", "bank-1")
