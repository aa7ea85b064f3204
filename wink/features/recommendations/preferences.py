"""
Preference profiles and the per-app cache that holds them.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from wink.errors import ValidationError
from wink.infrastructure.observability.logging import get_logger

from .domain.models import PreferenceProfile

logger = get_logger(__name__)

EXPLICIT_PREFERENCE_SCORE = 10
SATISFIED_RATING = 4.0


def build_preference_profile(
    preferences: Iterable[Mapping[str, Any]],
    history: Iterable[Mapping[str, Any]] = (),
) -> PreferenceProfile:
    """
    Derive a profile from onboarding preference rows and rated past activities.

    Explicit categories are the ones the user scored at the top of the scale.
    History categories are the ones whose completed activities averaged at
    least four stars.
    """
    explicit = {
        str(row["category"]).strip().lower()
        for row in preferences
        if row.get("category") and row.get("score") == EXPLICIT_PREFERENCE_SCORE
    }

    ratings: dict[str, list[float]] = defaultdict(list)
    for row in history:
        category, rating = row.get("category"), row.get("rating")
        if category and rating is not None:
            ratings[str(category).strip().lower()].append(float(rating))
    liked = {
        category
        for category, values in ratings.items()
        if sum(values) / len(values) >= SATISFIED_RATING
    }

    return PreferenceProfile(
        explicit_categories=frozenset(explicit),
        history_categories=frozenset(liked),
    )


@dataclass(frozen=True, slots=True)
class CacheEntry:
    value: PreferenceProfile
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class PreferenceProfileCache:
    """
    TTL cache of preference profiles keyed by user id.

    One instance lives on the application state; nothing here is a module
    global.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], datetime] | None = None):
        if ttl_seconds <= 0:
            raise ValidationError("ttl_seconds must be positive")
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._entries: dict[str, CacheEntry] = {}

    def get(self, user_id: str) -> PreferenceProfile | None:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[user_id]
            return None
        return entry.value

    def put(self, user_id: str, profile: PreferenceProfile) -> CacheEntry:
        entry = CacheEntry(value=profile, expires_at=self._clock() + self.ttl)
        self._entries[user_id] = entry
        return entry

    def invalidate(self, user_id: str) -> None:
        self._entries.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._entries)
