"""
Availability pipeline.

extraction -> free_time -> intersection: calendar entries become busy
blocks, busy blocks become free blocks inside each participant's waking
window, and free blocks are intersected across the group.
"""

from .extraction import extract_busy_blocks
from .free_time import compute_free_blocks, day_window
from .intersection import (
    IntersectionStrategy,
    compare_calendars,
    find_mutual_free_windows,
    total_free_minutes,
)

__all__ = [
    "IntersectionStrategy",
    "compare_calendars",
    "compute_free_blocks",
    "day_window",
    "extract_busy_blocks",
    "find_mutual_free_windows",
    "total_free_minutes",
]
