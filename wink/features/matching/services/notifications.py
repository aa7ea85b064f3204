"""
Match listener that tells both people about a new match.
"""

from wink.features.matching.domain.models import SwipeDecision
from wink.features.matching.repository.notification_repository import NotificationRepository
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


async def notify_match(own: SwipeDecision, other: SwipeDecision) -> None:
    activity = await NotificationRepository.fetch_activity(own.activity_id) or {}
    name = f"Wink: {activity.get('name') or 'Activity'}"

    for recipient, sender in ((own.actor_id, other.actor_id), (other.actor_id, own.actor_id)):
        await NotificationRepository.insert_match_notification(
            recipient, sender, own, name, activity.get("address")
        )
    logger.info("Match notifications created", activity_id=own.activity_id)
