"""
Writes in-app notifications for new matches.
"""

from wink.db.helpers import execute_query, fetch_one
from wink.features.matching.domain.models import SwipeDecision


class NotificationRepository:
    @staticmethod
    async def fetch_activity(activity_id: str) -> dict | None:
        return await fetch_one(
            """
            SELECT name, address
            FROM activities
            WHERE id = %s::uuid
            """,
            (activity_id,),
        )

    @staticmethod
    async def insert_match_notification(
        recipient_id: str, sender_id: str, swipe: SwipeDecision, name: str, address: str | None
    ) -> int:
        return await execute_query(
            """
            INSERT INTO notifications
                (user_id, sender_id, activity_id, activity_name, activity_address,
                 activity_time, status)
            VALUES (%s::uuid, %s::uuid, %s, %s, %s, %s, 'accepted')
            """,
            (
                recipient_id,
                sender_id,
                swipe.activity_id,
                name,
                address,
                swipe.proposed_time.isoformat(),
            ),
        )
