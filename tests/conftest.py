"""
Shared test fixtures.

Provides:
  • an in-memory reservation store seeded with a customer's weekly series
  • a FastAPI TestClient wired to a temporary SQLite database (via the app
    lifespan) with rate limiting disabled
  • bearer-token headers for a customer, a second customer and an admin
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from court_booking.dependencies import create_access_token
from court_booking.main import app
from tests.mocks.models import MOCK_ADMIN, MOCK_CUSTOMER, MOCK_CUSTOMER_2, MOCK_RESERVATIONS
from tests.mocks.services import MockReservationStore

# ── Store fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def store() -> MockReservationStore:
    """In-memory store seeded with MOCK_RESERVATIONS."""
    return MockReservationStore(MOCK_RESERVATIONS)


@pytest.fixture()
def empty_store() -> MockReservationStore:
    return MockReservationStore()


# ── App fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def _test_env(monkeypatch, tmp_path):
    """
    Point the app lifespan at a temp database and disable rate limiting.
    """
    monkeypatch.setattr("court_booking.main.DB_PATH", str(tmp_path / "test.db"))

    from court_booking.rate_limit import limiter as _limiter
    monkeypatch.setattr(_limiter, "enabled", False)


@pytest.fixture()
def client(_test_env) -> TestClient:
    """
    FastAPI TestClient backed by a fresh SQLite database.

    Uses a context manager so the lifespan runs (DB open/close).
    """
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc


def _auth(customer) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(customer)}"}


@pytest.fixture()
def customer_headers() -> dict[str, str]:
    return _auth(MOCK_CUSTOMER)


@pytest.fixture()
def other_customer_headers() -> dict[str, str]:
    return _auth(MOCK_CUSTOMER_2)


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    return _auth(MOCK_ADMIN)
