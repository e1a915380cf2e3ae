"""
Shared fixtures for the FinanceFlow test suite.

Test strategy:
1. Unit tests for models, views and the validator
2. Engine tests against the in-memory store
3. JSON store tests in a temporary directory
4. No Streamlit in tests
"""

from decimal import Decimal

import pytest

from financeflow.config import LedgerSettings
from financeflow.events import EventPublisher
from financeflow.ledger import LedgerEngine
from financeflow.models import (
    Account,
    AccountType,
    Category,
    OperationType,
)
from financeflow.services.storage import InMemoryRecordStore
from financeflow.validation import LedgerValidator


@pytest.fixture
def ledger_settings():
    return LedgerSettings(
        default_currency="KZT",
        budget_warning_threshold=80.0,
        top_categories_limit=5,
        trend_months=12,
        recent_operations_limit=5,
        dashboard_window_days=7,
        seed_default_categories=False,
        max_operation_amount=1_000_000.0,
        future_date_tolerance_days=1,
    )


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def events():
    """Every event published during a test, in order."""
    return []


@pytest.fixture
def publisher(events):
    publisher = EventPublisher()
    publisher.subscribe(events.append)
    return publisher


@pytest.fixture
def validator(ledger_settings):
    return LedgerValidator(ledger_settings)


@pytest.fixture
def engine(store, publisher, validator, ledger_settings):
    engine = LedgerEngine(store, publisher=publisher, validator=validator, settings=ledger_settings)
    engine.load()
    return engine


@pytest.fixture
def account(engine):
    account = Account(name="Kaspi Gold", balance=Decimal("1000"), currency="KZT", account_type=AccountType.CARD)
    assert engine.add_account(account)
    return account


@pytest.fixture
def food(engine):
    category = Category(name="Food", icon="🍔", color="FF6B6B", category_type=OperationType.EXPENSE)
    assert engine.add_category(category)
    return category


@pytest.fixture
def salary(engine):
    category = Category(name="Salary", icon="💼", color="91D1BA", category_type=OperationType.INCOME)
    assert engine.add_category(category)
    return category
