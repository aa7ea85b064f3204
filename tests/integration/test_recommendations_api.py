"""
Recommendation ranking endpoint with preference storage mocked.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from wink.db.helpers import DatabaseError
from wink.features.recommendations.preferences import PreferenceProfileCache
from wink.features.recommendations.repository.preference_repository import PreferenceRepository
from wink.main import app

pytestmark = pytest.mark.integration

client = TestClient(app)

WINDOW = {"start": "2025-03-10T14:00:00Z", "end": "2025-03-10T18:00:00Z", "participant_count": 2}
CLIMBING = {
    "id": "climb-1",
    "name": "Climbing wall",
    "category": "sports",
    "price_level": 1,
    "rating": 5,
    "lat": 51.5010,
    "lng": -0.1250,
}
OPERA = {"id": "opera-1", "name": "Opera", "category": "theatre", "price_level": 4, "rating": 2.5}


@pytest.fixture(autouse=True)
def authenticated(apply_auth_override, monkeypatch):
    apply_auth_override(app)
    monkeypatch.setattr(app.state, "preference_cache", PreferenceProfileCache(60))
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def repo(monkeypatch):
    mocks = {
        "fetch_preferences": AsyncMock(return_value=[{"category": "sports", "score": 10}]),
        "fetch_rated_history": AsyncMock(return_value=[{"category": "sports", "rating": 5}]),
        "fetch_profile": AsyncMock(
            return_value={"budget_max": 30, "home_lat": 51.5007, "home_lng": -0.1246}
        ),
    }
    for name, mock in mocks.items():
        monkeypatch.setattr(PreferenceRepository, name, mock)
    return mocks


def _body(**overrides):
    body = {
        "free_window": WINDOW,
        "activities": [
            {"source": "stored", "payload": OPERA},
            {"source": "stored", "payload": CLIMBING},
        ],
        "weather": {"temperature_c": 18, "is_raining": False},
    }
    body.update(overrides)
    return body


def test_rank_orders_and_filters(repo):
    response = client.post("/recommendations/rank", json=_body(min_score=50))

    assert response.status_code == 200
    data = response.json()
    assert data["total_count"] == 1
    top = data["recommendations"][0]
    assert top["activity"]["name"] == "Climbing wall"
    assert top["breakdown"]["preference"] == 30
    assert top["breakdown"]["proximity"] == 10
    assert top["total_score"] == 90
    assert top["is_standout"] is True


def test_rank_with_zero_floor_returns_all(repo):
    response = client.post("/recommendations/rank", json=_body(min_score=0))

    names = [item["activity"]["name"] for item in response.json()["recommendations"]]
    assert names == ["Climbing wall", "Opera"]


def test_rank_caches_preferences_between_requests(repo):
    client.post("/recommendations/rank", json=_body())
    client.post("/recommendations/rank", json=_body())

    assert repo["fetch_preferences"].await_count == 1


def test_rank_skips_malformed_payloads(repo):
    body = _body(activities=[{"source": "stored", "payload": {"name": "no id"}}])

    response = client.post("/recommendations/rank", json=body)

    assert response.status_code == 200
    assert response.json()["recommendations"] == []


def test_rank_rejects_inverted_window(repo):
    body = _body(free_window={"start": "2025-03-10T18:00:00Z", "end": "2025-03-10T14:00:00Z"})

    response = client.post("/recommendations/rank", json=body)

    assert response.status_code == 400


def test_rank_rejects_unknown_supplier(repo):
    body = _body(activities=[{"source": "ticketmaster", "payload": CLIMBING}])

    response = client.post("/recommendations/rank", json=body)

    assert response.status_code == 422


def test_rank_reports_database_outage(repo):
    repo["fetch_preferences"].side_effect = DatabaseError("connection refused")

    response = client.post("/recommendations/rank", json=_body())

    assert response.status_code == 503
