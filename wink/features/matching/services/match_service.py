"""
Match service - records swipe decisions and promotes reciprocal accepts.

The decision write and the match check run in separate transactions: an
accept stays recorded even when the check after it fails, and the check can
be re-run at any time because promotion only ever sets ``matched_at`` once.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from wink.db.helpers import DatabaseError
from wink.errors import MatchPromotionError
from wink.features.matching.domain.models import (
    Decision,
    MatchOutcome,
    SwipeDecision,
    SwipeKey,
)
from wink.features.matching.domain.state_machine import apply_decision, new_swipe
from wink.features.matching.repository.swipe_repository import (
    PostgresSwipeRepository,
    SwipeRepository,
)
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

MatchListener = Callable[[SwipeDecision, SwipeDecision], Awaitable[None]]


class MatchService:
    def __init__(
        self,
        repository: SwipeRepository,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repository = repository
        self._clock = clock or (lambda: datetime.now(UTC))
        self._listeners: list[MatchListener] = []

    def add_listener(self, listener: MatchListener) -> None:
        """Register a coroutine called once per new match with both swipes."""
        self._listeners.append(listener)

    async def record_decision(
        self,
        actor_id: str,
        counterpart_id: str,
        activity_id: str,
        proposed_time: datetime,
        decision: Decision | str,
    ) -> MatchOutcome:
        decision = Decision(decision)
        key = SwipeKey(actor_id, counterpart_id, activity_id, _as_utc(proposed_time))
        swipe = apply_decision(new_swipe(key), decision)

        saved = await self.repository.record(swipe)
        logger.info(
            "Swipe recorded",
            actor_id=actor_id,
            counterpart_id=counterpart_id,
            activity_id=activity_id,
            response=decision.value,
        )

        if decision is not Decision.ACCEPT:
            return MatchOutcome(swipe=saved)
        return await self._check_match(saved)

    async def reevaluate(
        self,
        actor_id: str,
        counterpart_id: str,
        activity_id: str,
        proposed_time: datetime,
    ) -> MatchOutcome | None:
        """Re-run the match check for an existing swipe; None if there is no swipe."""
        key = SwipeKey(actor_id, counterpart_id, activity_id, _as_utc(proposed_time))
        swipe = await self.repository.get(key)
        if swipe is None:
            return None
        if swipe.decision is not Decision.ACCEPT:
            return MatchOutcome(swipe=swipe)
        return await self._check_match(swipe)

    async def _check_match(self, swipe: SwipeDecision) -> MatchOutcome:
        now = self._clock()
        try:
            pair = await self.repository.promote(swipe.key, now)
        except (MatchPromotionError, DatabaseError) as e:
            logger.error(
                "Match check failed; accept kept",
                actor_id=swipe.actor_id,
                counterpart_id=swipe.counterpart_id,
                activity_id=swipe.activity_id,
                error=str(e),
            )
            return MatchOutcome(swipe=swipe, match_check_failed=True)

        if pair is None:
            return MatchOutcome(swipe=swipe)

        own, other = pair
        newly_matched = own.matched_at == now
        if newly_matched:
            logger.info(
                "Mutual match",
                actor_id=own.actor_id,
                counterpart_id=own.counterpart_id,
                activity_id=own.activity_id,
                matched_at=own.matched_at.isoformat(),
            )
            await self._notify(own, other)
        return MatchOutcome(swipe=own, is_match=True, newly_matched=newly_matched)

    async def _notify(self, own: SwipeDecision, other: SwipeDecision) -> None:
        for listener in self._listeners:
            try:
                await listener(own, other)
            except Exception as e:
                logger.error(
                    "Match listener failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                    activity_id=own.activity_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )


def _as_utc(value: datetime) -> datetime:
    # Stored as timestamptz; naive input is taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


match_service = MatchService(PostgresSwipeRepository())
