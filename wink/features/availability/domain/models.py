"""
Domain models for the availability feature.

Intervals and blocks are immutable; every pipeline stage builds new ones
rather than mutating what it was given.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import StrEnum
from typing import Any

from wink.errors import ValidationError


@dataclass(frozen=True, slots=True)
class TimeInterval:
    """Half-open span of time, ``start < end``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if (self.start.tzinfo is None) != (self.end.tzinfo is None):
            raise ValidationError("Interval cannot mix naive and timezone-aware datetimes")
        if self.start >= self.end:
            raise ValidationError(
                f"Interval start must be before end (start={self.start.isoformat()}, "
                f"end={self.end.isoformat()})"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def duration_minutes(self) -> float:
        return self.duration.total_seconds() / 60

    def overlaps(self, other: TimeInterval) -> bool:
        return self.start < other.end and other.start < self.end

    def intersection(self, other: TimeInterval) -> TimeInterval | None:
        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if start >= end:
            return None
        return TimeInterval(start, end)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    def covers(self, other: TimeInterval) -> bool:
        return self.start <= other.start and other.end <= self.end

    def clip(self, bounds: TimeInterval) -> TimeInterval | None:
        """Portion of this interval inside ``bounds``, or None."""
        return self.intersection(bounds)


class BlockKind(StrEnum):
    BUSY = "busy"
    FREE = "free"
    OVERLAP = "overlap"


@dataclass(frozen=True, slots=True)
class ClassifiedBlock:
    interval: TimeInterval
    kind: BlockKind
    label: str | None = None

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    def to_dict(self) -> dict[str, Any]:
        data = {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "type": self.kind.value,
        }
        if self.label:
            data["eventTitle"] = self.label
        return data


@dataclass(frozen=True, slots=True)
class CalendarEntry:
    """One upstream calendar event: a title and the span it blocks."""

    title: str
    interval: TimeInterval


@dataclass(frozen=True, slots=True)
class Participant:
    """
    A person whose calendar feeds the intersection engine.

    ``busy_events`` is None when the calendar could not be loaded; such a
    participant has no free time at all.
    """

    id: str
    wake_time: time | None
    sleep_time: time | None
    busy_events: Sequence[CalendarEntry] | None = field(default_factory=tuple)

    @property
    def calendar_available(self) -> bool:
        return self.busy_events is not None


@dataclass(frozen=True, slots=True)
class FreeWindow:
    """Maximal span during which ``participant_count`` people are all free."""

    interval: TimeInterval
    participant_count: int

    def __post_init__(self) -> None:
        if self.participant_count < 1:
            raise ValidationError("participant_count must be at least 1")

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    @property
    def duration_minutes(self) -> float:
        return self.interval.duration_minutes

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "duration": int(self.duration_minutes),
            "participantCount": self.participant_count,
        }


@dataclass(frozen=True, slots=True)
class DaySchedule:
    """Side-by-side view of one day for a user and (optionally) a friend."""

    day: date
    user_blocks: list[ClassifiedBlock]
    friend_blocks: list[ClassifiedBlock] | None
    overlap_blocks: list[ClassifiedBlock]
