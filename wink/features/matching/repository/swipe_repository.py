"""
Swipe persistence.

``SwipeRepository`` is the seam the match service depends on;
``PostgresSwipeRepository`` implements it over the activity_swipes table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

import psycopg

from wink.db.helpers import DatabaseError, execute_query, fetch_all, fetch_one
from wink.db.pool import db_pool
from wink.errors import MatchPromotionError, ValidationError
from wink.features.matching.domain.models import Decision, SwipeDecision, SwipeKey
from wink.features.matching.domain.state_machine import apply_decision, can_match, promote_pair
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_SWIPE_COLUMNS = """
    user_id::text AS user_id,
    friend_id::text AS friend_id,
    activity_id::text AS activity_id,
    suggested_time,
    response,
    matched_at,
    created_at
"""


class SwipeRepository(Protocol):
    async def get(self, key: SwipeKey) -> SwipeDecision | None: ...

    async def record(self, swipe: SwipeDecision) -> SwipeDecision:
        """Persist a decided swipe; an existing row must hold the same decision."""
        ...

    async def promote(
        self, key: SwipeKey, now: datetime
    ) -> tuple[SwipeDecision, SwipeDecision] | None:
        """Match ``key`` and its reciprocal if both are accepted; None otherwise."""
        ...


def row_to_swipe(row: dict) -> SwipeDecision:
    return SwipeDecision(
        actor_id=row["user_id"],
        counterpart_id=row["friend_id"],
        activity_id=row["activity_id"],
        proposed_time=row["suggested_time"],
        decision=Decision(row["response"]) if row.get("response") else None,
        matched_at=row.get("matched_at"),
        created_at=row.get("created_at"),
    )


class PostgresSwipeRepository:
    """activity_swipes access with row locks around the match check."""

    async def get(self, key: SwipeKey) -> SwipeDecision | None:
        row = await fetch_one(
            f"""
            SELECT {_SWIPE_COLUMNS}
            FROM activity_swipes
            WHERE user_id = %s::uuid AND friend_id = %s::uuid
              AND activity_id = %s::uuid AND suggested_time = %s
            """,
            _key_params(key),
        )
        return row_to_swipe(row) if row else None

    async def record(self, swipe: SwipeDecision) -> SwipeDecision:
        if swipe.decision is None:
            raise ValidationError("Only decided swipes are stored")

        async with db_pool.transaction() as conn:
            # The no-op DO UPDATE locks and returns an existing row so the
            # transition check below sees what is actually stored.
            row = await fetch_one(
                f"""
                INSERT INTO activity_swipes
                    (user_id, friend_id, activity_id, suggested_time, response)
                VALUES (%s::uuid, %s::uuid, %s::uuid, %s, %s)
                ON CONFLICT (user_id, friend_id, activity_id, suggested_time)
                DO UPDATE SET response = activity_swipes.response
                RETURNING {_SWIPE_COLUMNS}
                """,
                (*_key_params(swipe.key), swipe.decision.value),
                connection=conn,
            )
            stored = row_to_swipe(row)
            # Raises InvalidTransitionError (and rolls back) on a changed decision
            return apply_decision(stored, swipe.decision)

    async def promote(
        self, key: SwipeKey, now: datetime
    ) -> tuple[SwipeDecision, SwipeDecision] | None:
        reciprocal = key.reciprocal()
        try:
            async with db_pool.transaction() as conn:
                rows = await fetch_all(
                    f"""
                    SELECT {_SWIPE_COLUMNS}
                    FROM activity_swipes
                    WHERE activity_id = %s::uuid
                      AND suggested_time = %s
                      AND (
                        (user_id = %s::uuid AND friend_id = %s::uuid)
                        OR (user_id = %s::uuid AND friend_id = %s::uuid)
                      )
                    ORDER BY user_id
                    FOR UPDATE
                    """,
                    (
                        key.activity_id,
                        key.proposed_time,
                        key.actor_id,
                        key.counterpart_id,
                        reciprocal.actor_id,
                        reciprocal.counterpart_id,
                    ),
                    connection=conn,
                )
                swipes = {swipe.key: swipe for swipe in map(row_to_swipe, rows)}
                own, other = swipes.get(key), swipes.get(reciprocal)
                if not can_match(own, other):
                    return None

                own, other = promote_pair(own, other, now)
                await execute_query(
                    """
                    UPDATE activity_swipes
                    SET matched_at = COALESCE(matched_at, %s)
                    WHERE activity_id = %s::uuid
                      AND suggested_time = %s
                      AND (
                        (user_id = %s::uuid AND friend_id = %s::uuid)
                        OR (user_id = %s::uuid AND friend_id = %s::uuid)
                      )
                    """,
                    (
                        own.matched_at,
                        key.activity_id,
                        key.proposed_time,
                        key.actor_id,
                        key.counterpart_id,
                        reciprocal.actor_id,
                        reciprocal.counterpart_id,
                    ),
                    connection=conn,
                )
                return own, other

        except (DatabaseError, psycopg.Error, RuntimeError) as e:
            logger.error(
                "Match promotion failed",
                actor_id=key.actor_id,
                counterpart_id=key.counterpart_id,
                activity_id=key.activity_id,
                error=str(e),
            )
            raise MatchPromotionError(f"Match promotion failed: {e}") from e


def _key_params(key: SwipeKey) -> tuple:
    return (key.actor_id, key.counterpart_id, key.activity_id, key.proposed_time)
