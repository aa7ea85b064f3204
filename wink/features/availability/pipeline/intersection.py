"""
Multi-party free-time intersection.

Two strategies are available and selected per call:

* ``EXACT`` folds the pairwise overlap rule across every participant's
  sorted free blocks with a two-pointer sweep. Window edges land exactly
  on busy boundaries.
* ``GRID`` scans fixed-size slots laid out from midnight, inside the
  shared waking window, and keeps the slots every participant is free
  for, coalescing runs of consecutive free slots.
"""

from collections.abc import Iterable, Iterator, Sequence
from datetime import date, datetime, timedelta, tzinfo as TzInfo
from enum import StrEnum

from wink.errors import ValidationError
from wink.features.availability.domain.models import (
    BlockKind,
    ClassifiedBlock,
    DaySchedule,
    FreeWindow,
    Participant,
    TimeInterval,
)
from wink.infrastructure.observability.logging import get_logger

from .extraction import calendar_day, extract_busy_blocks
from .free_time import compute_free_blocks, day_window

logger = get_logger(__name__)


class IntersectionStrategy(StrEnum):
    EXACT = "exact"
    GRID = "grid"


def find_mutual_free_windows(
    participants: Sequence[Participant],
    start_date: date | datetime,
    end_date: date | datetime,
    min_duration_minutes: int = 30,
    *,
    strategy: IntersectionStrategy | str = IntersectionStrategy.EXACT,
    slot_minutes: int = 60,
    tzinfo: TzInfo | None = None,
) -> list[FreeWindow]:
    """
    Windows in ``[start_date, end_date]`` where every participant is free.

    Participants without a waking window raise ParticipantConfigurationError
    before anything is computed. A participant whose calendar is missing
    simply has no free time. Results are ascending by start and each one is
    at least ``min_duration_minutes`` long.
    """
    first_day, last_day = _day_range(start_date, end_date)
    if min_duration_minutes < 0:
        raise ValidationError("min_duration_minutes must not be negative")
    strategy = IntersectionStrategy(strategy)
    if strategy is IntersectionStrategy.GRID and slot_minutes <= 0:
        raise ValidationError("slot_minutes must be positive")

    if not participants:
        return []

    for participant in participants:
        # Fails fast on missing or degenerate wake/sleep settings
        day_window(
            first_day,
            participant.wake_time,
            participant.sleep_time,
            tzinfo=tzinfo,
            participant_id=participant.id,
        )

    min_duration = timedelta(minutes=min_duration_minutes)
    count = len(participants)
    windows: list[FreeWindow] = []

    for day in _iter_days(first_day, last_day):
        free_sets = [
            [block.interval for block in participant_free_blocks(p, day, tzinfo=tzinfo)]
            for p in participants
        ]

        if strategy is IntersectionStrategy.GRID:
            shared = _grid_scan(participants, free_sets, day, slot_minutes, tzinfo)
        else:
            shared = _fold_overlaps(free_sets)

        windows.extend(
            FreeWindow(interval=interval, participant_count=count)
            for interval in _coalesce(shared)
            if interval.duration >= min_duration
        )

    windows.sort(key=lambda window: window.start)
    logger.debug(
        "Mutual free windows computed",
        participant_count=count,
        days=(last_day - first_day).days + 1,
        strategy=strategy.value,
        window_count=len(windows),
    )
    return windows


def participant_free_blocks(
    participant: Participant, day: date, *, tzinfo: TzInfo | None = None
) -> list[ClassifiedBlock]:
    """Free blocks for one participant and day; none when the calendar is missing."""
    if not participant.calendar_available:
        return []
    busy = participant_busy_blocks(participant, day, tzinfo=tzinfo)
    return compute_free_blocks(
        busy, day, participant.wake_time, participant.sleep_time, tzinfo=tzinfo
    )


def participant_busy_blocks(
    participant: Participant, day: date, *, tzinfo: TzInfo | None = None
) -> list[ClassifiedBlock]:
    if not participant.calendar_available:
        return []
    window = day_window(
        day,
        participant.wake_time,
        participant.sleep_time,
        tzinfo=tzinfo,
        participant_id=participant.id,
    )
    calendar = calendar_day(day, tzinfo)
    bounds = TimeInterval(min(calendar.start, window.start), max(calendar.end, window.end))
    return extract_busy_blocks(participant.busy_events, day, bounds=bounds)


def pairwise_overlaps(
    first: Sequence[TimeInterval], second: Sequence[TimeInterval]
) -> list[TimeInterval]:
    """
    Overlaps of two ascending, non-overlapping interval lists.

    ``overlap = [max(a.start, b.start), min(a.end, b.end)]`` for every pair
    that actually intersects; the pointer of whichever interval ends first
    advances.
    """
    result: list[TimeInterval] = []
    i = j = 0
    while i < len(first) and j < len(second):
        a, b = first[i], second[j]
        overlap = a.intersection(b)
        if overlap:
            result.append(overlap)
        if a.end <= b.end:
            i += 1
        else:
            j += 1
    return result


def total_free_minutes(windows: Iterable[FreeWindow]) -> float:
    return sum(window.duration_minutes for window in windows)


def compare_calendars(
    user: Participant,
    friend: Participant | None,
    start_date: date | datetime,
    end_date: date | datetime,
    min_overlap_minutes: int = 30,
    *,
    tzinfo: TzInfo | None = None,
) -> list[DaySchedule]:
    """
    Per-day busy/free blocks for a user and optional friend, plus the
    overlapping free time of both as Overlap blocks.
    """
    first_day, last_day = _day_range(start_date, end_date)
    min_overlap = timedelta(minutes=min_overlap_minutes)
    schedules: list[DaySchedule] = []

    for day in _iter_days(first_day, last_day):
        user_busy = participant_busy_blocks(user, day, tzinfo=tzinfo)
        user_free = participant_free_blocks(user, day, tzinfo=tzinfo)

        friend_blocks = None
        overlap_blocks: list[ClassifiedBlock] = []
        if friend is not None:
            friend_busy = participant_busy_blocks(friend, day, tzinfo=tzinfo)
            friend_free = participant_free_blocks(friend, day, tzinfo=tzinfo)
            friend_blocks = friend_busy + friend_free
            overlap_blocks = [
                ClassifiedBlock(interval=interval, kind=BlockKind.OVERLAP)
                for interval in pairwise_overlaps(
                    [block.interval for block in user_free],
                    [block.interval for block in friend_free],
                )
                if interval.duration >= min_overlap
            ]

        schedules.append(
            DaySchedule(
                day=day,
                user_blocks=user_busy + user_free,
                friend_blocks=friend_blocks,
                overlap_blocks=overlap_blocks,
            )
        )

    return schedules


def _fold_overlaps(free_sets: list[list[TimeInterval]]) -> list[TimeInterval]:
    shared = free_sets[0]
    for other in free_sets[1:]:
        if not shared:
            break
        shared = pairwise_overlaps(shared, other)
    return shared


def _grid_scan(
    participants: Sequence[Participant],
    free_sets: list[list[TimeInterval]],
    day: date,
    slot_minutes: int,
    tzinfo: TzInfo | None,
) -> list[TimeInterval]:
    windows = [
        day_window(day, p.wake_time, p.sleep_time, tzinfo=tzinfo, participant_id=p.id)
        for p in participants
    ]
    # Slots sit on a fixed lattice from midnight so adding a participant
    # can only remove slots, never shift them
    lattice = calendar_day(day, tzinfo).start
    earliest = max(window.start for window in windows)
    horizon = min(window.end for window in windows)
    step = timedelta(minutes=slot_minutes)

    slots: list[TimeInterval] = []
    skipped = -(-(earliest - lattice) // step) if earliest > lattice else 0
    cursor = lattice + skipped * step
    while cursor + step <= horizon:
        slot = TimeInterval(cursor, cursor + step)
        if all(any(free.covers(slot) for free in free_set) for free_set in free_sets):
            slots.append(slot)
        cursor += step
    return slots


def _coalesce(intervals: Iterable[TimeInterval]) -> list[TimeInterval]:
    """Merge touching or overlapping intervals into maximal ones."""
    merged: list[TimeInterval] = []
    for interval in sorted(intervals, key=lambda item: item.start):
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            if interval.end > last.end:
                merged[-1] = TimeInterval(last.start, interval.end)
            continue
        merged.append(interval)
    return merged


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _day_range(start_date: date | datetime, end_date: date | datetime) -> tuple[date, date]:
    first_day, last_day = _as_date(start_date), _as_date(end_date)
    if last_day < first_day:
        raise ValidationError(
            f"end_date {last_day.isoformat()} is before start_date {first_day.isoformat()}"
        )
    return first_day, last_day


def _iter_days(first_day: date, last_day: date) -> Iterator[date]:
    day = first_day
    while day <= last_day:
        yield day
        day += timedelta(days=1)
