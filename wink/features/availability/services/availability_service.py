"""
Availability service - loads calendars for a group and runs the
free-time pipeline over them.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from datetime import UTC, date, datetime, time, timedelta

from wink.config import settings
from wink.errors import FriendshipRequiredError, ValidationError
from wink.features.availability.domain.models import (
    CalendarEntry,
    DaySchedule,
    FreeWindow,
    Participant,
    TimeInterval,
)
from wink.features.availability.pipeline.intersection import (
    IntersectionStrategy,
    compare_calendars,
    find_mutual_free_windows,
)
from wink.features.availability.repository.availability_repository import (
    AvailabilityRepository,
)
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class AvailabilityService:
    """
    Bridges stored calendar data and the pure availability pipeline.

    Profiles without a stored wake/sleep window get the application defaults
    here; the pipeline itself never guesses.
    """

    def __init__(
        self,
        default_wake: time | None = None,
        default_sleep: time | None = None,
        max_range_days: int | None = None,
    ):
        self.default_wake = default_wake or settings.DEFAULT_WAKE_TIME
        self.default_sleep = default_sleep or settings.DEFAULT_SLEEP_TIME
        self.max_range_days = max_range_days or settings.AVAILABILITY_MAX_RANGE_DAYS

    async def find_group_windows(
        self,
        user_id: str,
        friend_ids: Sequence[str],
        start_date: date,
        end_date: date,
        min_duration_minutes: int | None = None,
        strategy: IntersectionStrategy | str | None = None,
    ) -> list[FreeWindow]:
        friend_ids = [fid for fid in dict.fromkeys(friend_ids) if fid != user_id]
        if len(friend_ids) > settings.MAX_GROUP_FRIENDS:
            raise ValidationError(f"At most {settings.MAX_GROUP_FRIENDS} friends can be compared")

        await self._ensure_friends(user_id, friend_ids)
        participants = await self.load_participants([user_id, *friend_ids], start_date, end_date)

        windows = find_mutual_free_windows(
            participants,
            start_date,
            end_date,
            min_duration_minutes
            if min_duration_minutes is not None
            else settings.MIN_FREE_WINDOW_MINUTES,
            strategy=strategy or settings.INTERSECTION_STRATEGY,
            slot_minutes=settings.GRID_SLOT_MINUTES,
            tzinfo=UTC,
        )
        logger.info(
            "Group availability analyzed",
            user_id=user_id,
            participant_count=len(participants),
            window_count=len(windows),
        )
        return windows

    async def compare(
        self,
        user_id: str,
        friend_id: str | None,
        start_date: date,
        end_date: date,
    ) -> list[DaySchedule]:
        if friend_id == user_id:
            friend_id = None
        if friend_id:
            await self._ensure_friends(user_id, [friend_id])

        ids = [user_id] + ([friend_id] if friend_id else [])
        participants = await self.load_participants(ids, start_date, end_date)
        user = participants[0]
        friend = participants[1] if friend_id else None
        return compare_calendars(
            user,
            friend,
            start_date,
            end_date,
            settings.MIN_FREE_WINDOW_MINUTES,
            tzinfo=UTC,
        )

    async def load_participants(
        self, user_ids: Sequence[str], start_date: date, end_date: date
    ) -> list[Participant]:
        """Participants in ``user_ids`` order, with events covering the range."""
        self._check_range(start_date, end_date)

        # One day of slack on both sides for overnight windows and long events
        range_start = datetime.combine(start_date - timedelta(days=1), time.min, tzinfo=UTC)
        range_end = datetime.combine(end_date + timedelta(days=2), time.min, tzinfo=UTC)

        profiles = await AvailabilityRepository.fetch_profiles(user_ids)
        rows = await AvailabilityRepository.fetch_events(user_ids, range_start, range_end)

        events_by_user: dict[str, list[CalendarEntry]] = defaultdict(list)
        for row in rows:
            entry = self._row_to_entry(row)
            if entry:
                events_by_user[row["user_id"]].append(entry)

        participants = []
        for uid in user_ids:
            profile = profiles.get(uid)
            if profile is None:
                logger.warning("No profile found for participant", participant_id=uid)
            participants.append(
                Participant(
                    id=uid,
                    wake_time=(profile or {}).get("wake_time") or self.default_wake,
                    sleep_time=(profile or {}).get("sleep_time") or self.default_sleep,
                    busy_events=tuple(events_by_user.get(uid, ())) if profile else None,
                )
            )
        return participants

    def _check_range(self, start_date: date, end_date: date) -> None:
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")
        span_days = (end_date - start_date).days + 1
        if span_days > self.max_range_days:
            raise ValidationError(
                f"Date range of {span_days} days exceeds the {self.max_range_days} day limit"
            )

    async def _ensure_friends(self, user_id: str, friend_ids: Sequence[str]) -> None:
        if not friend_ids:
            return
        accepted = await AvailabilityRepository.fetch_accepted_friend_ids(user_id, friend_ids)
        missing = [fid for fid in friend_ids if fid not in accepted]
        if missing:
            raise FriendshipRequiredError(
                "Availability can only be compared with accepted friends", missing_ids=missing
            )

    @staticmethod
    def _row_to_entry(row: dict) -> CalendarEntry | None:
        try:
            interval = TimeInterval(row["start_time"], row["end_time"])
        except ValidationError as exc:
            logger.warning(
                "Skipping calendar event with invalid interval",
                participant_id=row.get("user_id"),
                error=str(exc),
            )
            return None
        return CalendarEntry(title=row.get("title") or "Busy", interval=interval)


availability_service = AvailabilityService()
