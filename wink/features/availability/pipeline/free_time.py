"""
Free-block calculation: the complement of a participant's busy blocks
inside their waking window for one day.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, tzinfo as TzInfo

from wink.errors import ParticipantConfigurationError
from wink.features.availability.domain.models import BlockKind, ClassifiedBlock, TimeInterval


def day_window(
    day: date,
    wake: time | None,
    sleep: time | None,
    *,
    tzinfo: TzInfo | None = None,
    participant_id: str | None = None,
) -> TimeInterval:
    """
    Addressable window ``[day+wake, day+sleep]``.

    A sleep time at or before the wake time is read as "after midnight":
    the window then ends on the following day.
    """
    if wake is None or sleep is None:
        raise ParticipantConfigurationError(
            "Wake and sleep times are required to compute availability",
            participant_id=participant_id,
        )
    if wake == sleep:
        raise ParticipantConfigurationError(
            f"Wake and sleep times are identical ({wake.isoformat()})",
            participant_id=participant_id,
        )

    start = datetime.combine(day, wake, tzinfo=tzinfo)
    end_day = day if sleep > wake else day + timedelta(days=1)
    end = datetime.combine(end_day, sleep, tzinfo=tzinfo)
    return TimeInterval(start, end)


def compute_free_blocks(
    busy: Iterable[ClassifiedBlock],
    day: date,
    wake: time | None,
    sleep: time | None,
    *,
    tzinfo: TzInfo | None = None,
) -> list[ClassifiedBlock]:
    """
    Free blocks for one day, ascending and non-overlapping.

    Busy blocks are clipped to the window first. The walk keeps the latest
    busy end seen so far, so nested or overlapping busy blocks behave as if
    they had been merged.
    """
    window = day_window(day, wake, sleep, tzinfo=tzinfo)

    clipped = sorted(
        (interval for interval in (block.interval.clip(window) for block in busy) if interval),
        key=lambda interval: interval.start,
    )
    if not clipped:
        return [ClassifiedBlock(interval=window, kind=BlockKind.FREE)]

    free: list[ClassifiedBlock] = []
    cursor = window.start
    for interval in clipped:
        if cursor < interval.start:
            free.append(
                ClassifiedBlock(interval=TimeInterval(cursor, interval.start), kind=BlockKind.FREE)
            )
        cursor = max(cursor, interval.end)

    if cursor < window.end:
        free.append(ClassifiedBlock(interval=TimeInterval(cursor, window.end), kind=BlockKind.FREE))

    return free
