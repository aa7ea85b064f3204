"""
Repository helpers for loading the calendar data the availability
pipeline consumes (profiles, synced calendar events, friendships).
"""

from collections.abc import Sequence
from datetime import datetime

from wink.db.helpers import fetch_all, with_db_retry
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class AvailabilityRepository:
    """Thin read-only wrappers over profiles, calendar_events and friendships."""

    @staticmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def fetch_profiles(user_ids: Sequence[str]) -> dict[str, dict]:
        if not user_ids:
            return {}
        rows = await fetch_all(
            """
            SELECT id::text AS id, wake_time, sleep_time
            FROM profiles
            WHERE id = ANY(%s::uuid[])
            """,
            (list(user_ids),),
        )
        return {row["id"]: row for row in rows}

    @staticmethod
    @with_db_retry(max_retries=2, base_delay=0.1)
    async def fetch_events(
        user_ids: Sequence[str], start: datetime, end: datetime
    ) -> list[dict]:
        """Events overlapping ``[start, end)`` for every user, ordered by start."""
        if not user_ids:
            return []
        rows = await fetch_all(
            """
            SELECT user_id::text AS user_id, title, start_time, end_time
            FROM calendar_events
            WHERE user_id = ANY(%s::uuid[])
              AND start_time < %s
              AND end_time > %s
            ORDER BY start_time
            """,
            (list(user_ids), end, start),
        )
        logger.debug("Calendar events loaded", user_count=len(user_ids), event_count=len(rows))
        return rows

    @staticmethod
    async def fetch_accepted_friend_ids(user_id: str, friend_ids: Sequence[str]) -> set[str]:
        if not friend_ids:
            return set()
        rows = await fetch_all(
            """
            SELECT CASE WHEN user_id = %s::uuid THEN friend_id ELSE user_id END::text AS friend_id
            FROM friendships
            WHERE status = 'accepted'
              AND (
                (user_id = %s::uuid AND friend_id = ANY(%s::uuid[]))
                OR (friend_id = %s::uuid AND user_id = ANY(%s::uuid[]))
              )
            """,
            (user_id, user_id, list(friend_ids), user_id, list(friend_ids)),
        )
        return {row["friend_id"] for row in rows}
