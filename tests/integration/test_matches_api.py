"""
Swipe endpoint driven against an in-memory swipe store.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from wink.db.helpers import DatabaseError
from wink.features.matching.domain.models import Decision, SwipeKey
from wink.features.matching.domain.state_machine import apply_decision, new_swipe
from wink.features.matching.services.match_service import MatchService
from wink.main import app

pytestmark = pytest.mark.integration

client = TestClient(app)
WHEN = datetime(2025, 3, 14, 18, tzinfo=UTC)
SWIPE = {
    "friend_id": "friend-1",
    "activity_id": "act-1",
    "response": "accept",
    "suggested_time": "2025-03-14T18:00:00Z",
}


@pytest.fixture(autouse=True)
def authenticated(apply_auth_override):
    apply_auth_override(app)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def service(monkeypatch, fake_swipe_repository):
    service = MatchService(fake_swipe_repository)
    monkeypatch.setattr("wink.features.matching.api.router.match_service", service)
    return service


def _friend_accepted(repository):
    key = SwipeKey("friend-1", "user-123", "act-1", WHEN)
    repository.rows[key] = apply_decision(new_swipe(key), Decision.ACCEPT)


def test_first_accept_is_not_a_match(service):
    response = client.post("/matches/swipes", json=SWIPE)

    assert response.status_code == 200
    data = response.json()
    assert data["is_match"] is False
    assert data["swipe"]["state"] == "accepted"


def test_reciprocal_accept_matches(service, fake_swipe_repository):
    _friend_accepted(fake_swipe_repository)

    response = client.post("/matches/swipes", json=SWIPE)

    data = response.json()
    assert data["is_match"] is True
    assert data["swipe"]["state"] == "matched"
    assert data["swipe"]["matched_at"] is not None
    friend_row = fake_swipe_repository.rows[SwipeKey("friend-1", "user-123", "act-1", WHEN)]
    assert friend_row.matched_at is not None


def test_failed_match_check_is_reported(service, fake_swipe_repository):
    _friend_accepted(fake_swipe_repository)
    fake_swipe_repository.fail_promotion = True

    response = client.post("/matches/swipes", json=SWIPE)

    assert response.status_code == 200
    data = response.json()
    assert data["match_check_failed"] is True
    assert data["swipe"]["state"] == "accepted"


def test_changed_decision_conflicts(service):
    client.post("/matches/swipes", json={**SWIPE, "response": "reject"})

    response = client.post("/matches/swipes", json=SWIPE)

    assert response.status_code == 409


def test_self_swipe_is_rejected(service):
    response = client.post("/matches/swipes", json={**SWIPE, "friend_id": "user-123"})

    assert response.status_code == 400


def test_unknown_response_value(service):
    response = client.post("/matches/swipes", json={**SWIPE, "response": "maybe"})

    assert response.status_code == 422


def test_database_outage(service, fake_swipe_repository):
    fake_swipe_repository.record = AsyncMock(side_effect=DatabaseError("connection refused"))

    response = client.post("/matches/swipes", json=SWIPE)

    assert response.status_code == 503
