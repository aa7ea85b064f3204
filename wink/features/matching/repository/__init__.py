from .notification_repository import NotificationRepository
from .swipe_repository import PostgresSwipeRepository, SwipeRepository, row_to_swipe

__all__ = ["NotificationRepository", "PostgresSwipeRepository", "SwipeRepository", "row_to_swipe"]
