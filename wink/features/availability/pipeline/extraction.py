"""
Busy-block extraction: calendar entries for one day -> Busy blocks.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, tzinfo as TzInfo

from wink.features.availability.domain.models import (
    BlockKind,
    CalendarEntry,
    ClassifiedBlock,
    TimeInterval,
)


def calendar_day(day: date, tzinfo: TzInfo | None = None) -> TimeInterval:
    """``[00:00, next 00:00)`` for ``day`` in the reference zone."""
    start = datetime.combine(day, time.min, tzinfo=tzinfo)
    return TimeInterval(start, start + timedelta(days=1))


def extract_busy_blocks(
    events: Iterable[CalendarEntry],
    day: date,
    *,
    bounds: TimeInterval | None = None,
    tzinfo: TzInfo | None = None,
) -> list[ClassifiedBlock]:
    """
    Keep the events that intersect ``day`` and turn each into a Busy block.

    Overlapping events are not merged here; the free-time walk absorbs them.
    ``bounds`` replaces the calendar day when a waking window runs past
    midnight.
    """
    span = bounds or calendar_day(day, tzinfo)
    return [
        ClassifiedBlock(interval=event.interval, kind=BlockKind.BUSY, label=event.title)
        for event in events
        if event.interval.overlaps(span)
    ]
