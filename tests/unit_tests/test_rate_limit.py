"""Tests for rate limiting behaviour."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from court_booking.dependencies import get_current_customer
from court_booking.main import app
from tests.mocks.models import MOCK_CUSTOMER

_START = datetime.now(UTC).replace(hour=10, minute=0, second=0, microsecond=0) + timedelta(days=5)


def _booking(offset_days: int) -> dict:
    start = _START + timedelta(days=offset_days)
    return {
        "name": "Rate limited",
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=1)).isoformat(),
        "locations": {"badminton": True},
    }


class TestRateLimiting:
    """Verify that rate limiting kicks in for write endpoints."""

    @pytest.fixture()
    def limited_client(self, _test_env):
        """
        TestClient with rate limiting **enabled** (unlike the default
        `client` fixture which disables it for convenience).
        """
        from court_booking.rate_limit import limiter

        limiter.enabled = True
        # Reset in-memory state so previous tests don't pollute counts
        limiter.reset()

        async def _mock_current_customer():
            return MOCK_CUSTOMER

        app.dependency_overrides[get_current_customer] = _mock_current_customer

        with TestClient(app, raise_server_exceptions=False) as tc:
            yield tc

        app.dependency_overrides.clear()
        limiter.enabled = False

    def test_create_reservation_rate_limit(self, limited_client):
        """POST /api/reservations is limited to 20 requests/minute."""
        for i in range(20):
            resp = limited_client.post("/api/reservations", json=_booking(i))
            assert resp.status_code == 201, f"Request {i + 1} should succeed"

        # 21st request should be rate-limited
        resp = limited_client.post("/api/reservations", json=_booking(20))
        assert resp.status_code == 429
        assert "Rate limit exceeded" in resp.json()["detail"]

    def test_conflicts_count_towards_limit(self, limited_client):
        for i in range(20):
            resp = limited_client.post("/api/reservations", json=_booking(0))
            # 409 (slot taken) is fine: we just need it not to be 429 yet
            assert resp.status_code in (201, 409), f"Request {i + 1} should not be rate-limited"

        resp = limited_client.post("/api/reservations", json=_booking(0))
        assert resp.status_code == 429

    def test_availability_not_limited_at_low_volume(self, limited_client):
        """POST /api/availability at low volume should not be rate-limited."""
        body = {"time_proposals": [_booking(0)]}
        del body["time_proposals"][0]["name"]
        for _ in range(10):
            resp = limited_client.post("/api/availability", json=body)
            assert resp.status_code == 200
