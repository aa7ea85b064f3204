"""
Availability endpoints through the FastAPI app with the repository mocked.
"""

from datetime import UTC, datetime, time
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from wink.db.helpers import DatabaseError
from wink.features.availability.repository.availability_repository import AvailabilityRepository
from wink.main import app

pytestmark = pytest.mark.integration

client = TestClient(app)


def _utc(hour: int) -> datetime:
    return datetime(2025, 3, 10, hour, tzinfo=UTC)


@pytest.fixture(autouse=True)
def authenticated(apply_auth_override):
    apply_auth_override(app)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def repo(monkeypatch):
    mocks = {
        "fetch_profiles": AsyncMock(
            return_value={
                "user-123": {"id": "user-123", "wake_time": time(9), "sleep_time": time(17)},
                "friend-1": {"id": "friend-1", "wake_time": time(8), "sleep_time": time(22)},
            }
        ),
        "fetch_events": AsyncMock(
            return_value=[
                {
                    "user_id": "user-123",
                    "title": "Standup",
                    "start_time": _utc(12),
                    "end_time": _utc(13),
                },
                {
                    "user_id": "friend-1",
                    "title": "Dentist",
                    "start_time": _utc(15),
                    "end_time": _utc(16),
                },
            ]
        ),
        "fetch_accepted_friend_ids": AsyncMock(return_value={"friend-1"}),
    }
    for name, mock in mocks.items():
        monkeypatch.setattr(AvailabilityRepository, name, mock)
    return mocks


def test_mutual_returns_shared_windows(repo):
    response = client.post(
        "/availability/mutual",
        json={"friend_ids": ["friend-1"], "start_date": "2025-03-10", "end_date": "2025-03-10"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["participant_count"] == 2
    assert [(w["start"], w["end"]) for w in data["free_windows"]] == [
        ("2025-03-10T09:00:00+00:00", "2025-03-10T12:00:00+00:00"),
        ("2025-03-10T13:00:00+00:00", "2025-03-10T15:00:00+00:00"),
        ("2025-03-10T16:00:00+00:00", "2025-03-10T17:00:00+00:00"),
    ]
    assert data["free_windows"][0]["duration"] == 180
    assert data["total_free_minutes"] == 180 + 120 + 60


def test_mutual_respects_minimum_duration(repo):
    response = client.post(
        "/availability/mutual",
        json={
            "friend_ids": ["friend-1"],
            "start_date": "2025-03-10",
            "end_date": "2025-03-10",
            "min_duration_minutes": 90,
        },
    )

    assert [w["duration"] for w in response.json()["free_windows"]] == [180, 120]


def test_mutual_rejects_non_friends(repo):
    repo["fetch_accepted_friend_ids"].return_value = set()

    response = client.post(
        "/availability/mutual",
        json={"friend_ids": ["friend-1"], "start_date": "2025-03-10", "end_date": "2025-03-10"},
    )

    assert response.status_code == 403


def test_mutual_rejects_reversed_range(repo):
    response = client.post(
        "/availability/mutual",
        json={"friend_ids": ["friend-1"], "start_date": "2025-03-12", "end_date": "2025-03-10"},
    )

    assert response.status_code == 400


def test_mutual_reports_database_outage(repo):
    repo["fetch_events"].side_effect = DatabaseError("connection refused")

    response = client.post(
        "/availability/mutual",
        json={"friend_ids": ["friend-1"], "start_date": "2025-03-10", "end_date": "2025-03-10"},
    )

    assert response.status_code == 503


def test_mutual_requires_friend_ids(repo):
    response = client.post(
        "/availability/mutual",
        json={"friend_ids": [], "start_date": "2025-03-10", "end_date": "2025-03-10"},
    )

    assert response.status_code == 422


def test_compare_returns_day_view(repo):
    response = client.post(
        "/availability/compare",
        json={"friend_id": "friend-1", "start_date": "2025-03-10", "end_date": "2025-03-10"},
    )

    assert response.status_code == 200
    (day,) = response.json()["days"]
    assert day["day"] == "2025-03-10"
    busy = [block for block in day["user_blocks"] if block["type"] == "busy"]
    assert busy[0]["eventTitle"] == "Standup"
    assert day["friend_blocks"] is not None
    assert all(block["type"] == "overlap" for block in day["overlap_blocks"])


def test_compare_without_friend(repo):
    response = client.post(
        "/availability/compare",
        json={"start_date": "2025-03-10", "end_date": "2025-03-10"},
    )

    assert response.status_code == 200
    assert response.json()["days"][0]["friend_blocks"] is None
