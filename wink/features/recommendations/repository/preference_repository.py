"""
Repository for the signals the scorer reads about a user.
"""

from wink.db.helpers import fetch_all, fetch_one
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class PreferenceRepository:
    @staticmethod
    async def fetch_preferences(user_id: str) -> list[dict]:
        return await fetch_all(
            """
            SELECT category, score
            FROM preferences
            WHERE user_id = %s::uuid
            """,
            (user_id,),
        )

    @staticmethod
    async def fetch_rated_history(user_id: str) -> list[dict]:
        """Completed, rated activities with the category of the activity done."""
        return await fetch_all(
            """
            SELECT a.category, sa.rating
            FROM scheduled_activities sa
            JOIN activities a ON a.id = sa.activity_id
            WHERE sa.user_id = %s::uuid
              AND sa.rating IS NOT NULL
            """,
            (user_id,),
        )

    @staticmethod
    async def fetch_profile(user_id: str) -> dict | None:
        return await fetch_one(
            """
            SELECT budget_max, home_lat, home_lng
            FROM profiles
            WHERE id = %s::uuid
            """,
            (user_id,),
        )
