"""Pytest configuration and shared fixtures for Hisab tests.

Each test gets its own SQLite file so balance updates from several
connections (and threads) behave like they do in production.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
from sqlmodel import SQLModel, create_engine, select

from hisab import create_app
from hisab.domain.schemas import TransactionCreate
from hisab.infra.database import create_session_factory
from hisab.models import PaymentMethod, PaymentType, User
from hisab.services import payment_methods

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'hisab-test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Transactional session factory matching the one the app uses."""

    return create_session_factory(db_engine)


@pytest.fixture
def owner(session_factory) -> User:
    """A provisioned owner with all payment methods at zero."""

    with session_factory() as session:
        user = User(username="tester")
        session.add(user)
        session.flush()
    payment_methods.ensure_provisioned(session_factory, user.id)
    return user


@pytest.fixture
def other_owner(session_factory) -> User:
    with session_factory() as session:
        user = User(username="someone-else")
        session.add(user)
        session.flush()
    payment_methods.ensure_provisioned(session_factory, user.id)
    return user


# =============================================================================
# Flask Fixtures
# =============================================================================


@pytest.fixture()
def app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HISAB_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HISAB_DATABASE_URL", f"sqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("HISAB_DEV_MODE", "true")
    monkeypatch.delenv("HISAB_API_PREFIX", raising=False)
    monkeypatch.delenv("HISAB_DEFAULT_OWNER", raising=False)
    return create_app("testing")


@pytest.fixture()
def client(app):
    with app.test_client() as test_client:
        yield test_client


# =============================================================================
# Test Data Factories
# =============================================================================


def transaction_payload(**overrides: Any) -> dict[str, Any]:
    """Wire-format transaction body with sensible defaults."""

    payload: dict[str, Any] = {
        "day": "Monday",
        "nepaliDate": "2081-01-15",
        "englishDate": "2024-04-27T10:30:00",
        "type": "Expense",
        "amount": 500,
        "reason": "Food",
        "paymentType": "CASH",
        "notes": "Lunch",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_create():
    """Build a validated TransactionCreate from wire-format overrides."""

    def _make(**overrides: Any) -> TransactionCreate:
        return TransactionCreate.model_validate(transaction_payload(**overrides))

    return _make


def balances(session_factory, owner_id: int) -> dict[PaymentType, float]:
    """Current cached balances keyed by payment type."""

    with session_factory() as session:
        rows = session.exec(select(PaymentMethod).where(PaymentMethod.user_id == owner_id)).all()
        return {PaymentType(row.name): row.balance for row in rows}


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance."""
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"


def at(year: int, month: int, day: int, hour: int = 12) -> str:
    return datetime(year, month, day, hour).isoformat()
