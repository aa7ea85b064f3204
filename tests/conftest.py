from datetime import UTC, datetime

import pytest

from wink.auth.verify import auth_dependency
from wink.errors import MatchPromotionError
from wink.features.matching.domain.models import SwipeDecision, SwipeKey
from wink.features.matching.domain.state_machine import apply_decision, can_match, promote_pair


@pytest.fixture
def auth_override():
    def _override():
        return {"sub": "user-123"}

    return _override


@pytest.fixture
def apply_auth_override(auth_override):
    def _apply(app):
        app.dependency_overrides[auth_dependency] = auth_override

    return _apply


class FakeSwipeRepository:
    """In-memory activity_swipes with the same transition rules as Postgres."""

    def __init__(self):
        self.rows: dict[SwipeKey, SwipeDecision] = {}
        self.fail_promotion = False
        self.promote_calls = 0

    async def get(self, key: SwipeKey) -> SwipeDecision | None:
        return self.rows.get(key)

    async def record(self, swipe: SwipeDecision) -> SwipeDecision:
        stored = self.rows.get(swipe.key)
        if stored is None:
            stored = SwipeDecision(
                actor_id=swipe.actor_id,
                counterpart_id=swipe.counterpart_id,
                activity_id=swipe.activity_id,
                proposed_time=swipe.proposed_time,
                decision=swipe.decision,
                created_at=datetime.now(UTC),
            )
        saved = apply_decision(stored, swipe.decision)
        self.rows[swipe.key] = saved
        return saved

    async def promote(self, key: SwipeKey, now: datetime):
        self.promote_calls += 1
        if self.fail_promotion:
            raise MatchPromotionError("simulated lock timeout")

        own, other = self.rows.get(key), self.rows.get(key.reciprocal())
        if not can_match(own, other):
            return None
        own, other = promote_pair(own, other, now)
        self.rows[own.key] = own
        self.rows[other.key] = other
        return own, other


@pytest.fixture
def fake_swipe_repository():
    return FakeSwipeRepository()
