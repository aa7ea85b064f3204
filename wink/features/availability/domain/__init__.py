"""
Domain models for the availability feature.
"""

from .models import (
    BlockKind,
    CalendarEntry,
    ClassifiedBlock,
    DaySchedule,
    FreeWindow,
    Participant,
    TimeInterval,
)

__all__ = [
    "BlockKind",
    "CalendarEntry",
    "ClassifiedBlock",
    "DaySchedule",
    "FreeWindow",
    "Participant",
    "TimeInterval",
]
