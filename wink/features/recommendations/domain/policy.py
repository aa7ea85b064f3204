"""
The single weighting policy used to score activities.

Caps and tier values live here so scoring code never hard-codes a number;
callers that need a different weighting build their own ``ScoringPolicy``.
"""

from __future__ import annotations

from dataclasses import dataclass

from wink.config import settings
from wink.errors import ValidationError


@dataclass(frozen=True, slots=True)
class ScoringPolicy:
    preference_cap: float = 30
    time_fit_cap: float = 20
    weather_cap: float = 15
    budget_cap: float = 15
    proximity_cap: float = 10
    popularity_cap: float = 10

    # preference tiers
    preference_explicit_only: float = 25
    preference_history_only: float = 20
    preference_floor: float = 10

    # time fit: (max day distance, credit); beyond the last band -> time_fit_floor
    time_fit_bands: tuple[tuple[int, float], ...] = ((1, 15), (3, 10), (7, 5))
    time_fit_floor: float = 2
    time_fit_unknown: float = 10

    weather_indoor_clear: float = 10
    weather_mismatch: float = 5
    weather_unknown: float = 10

    # budget: (max ratio of price to budget, credit)
    budget_bands: tuple[tuple[float, float], ...] = ((1.2, 10), (1.5, 5))
    budget_floor: float = 2
    budget_unknown: float = 10

    # proximity: (max km, credit)
    proximity_bands: tuple[tuple[float, float], ...] = (
        (1, 10),
        (2, 8),
        (3, 6),
        (5, 4),
    )
    proximity_floor: float = 2
    proximity_unknown: float = 5

    popularity_unknown: float = 0.5

    score_ceiling: float = 95
    standout_threshold: float = 85

    def __post_init__(self) -> None:
        caps = (
            self.preference_cap,
            self.time_fit_cap,
            self.weather_cap,
            self.budget_cap,
            self.proximity_cap,
            self.popularity_cap,
        )
        if any(cap < 0 for cap in caps):
            raise ValidationError("Factor caps must be non-negative")
        if sum(caps) > 100:
            raise ValidationError(f"Factor caps sum to {sum(caps)}, above 100")
        if not 0 < self.score_ceiling < 100:
            raise ValidationError("score_ceiling must be between 0 and 100 (exclusive)")
        if self.standout_threshold > self.score_ceiling:
            raise ValidationError("standout_threshold cannot exceed score_ceiling")
        if self.preference_cap < max(
            self.time_fit_cap,
            self.weather_cap,
            self.budget_cap,
            self.proximity_cap,
            self.popularity_cap,
        ):
            raise ValidationError("Preference must carry the largest cap")

    @property
    def caps_total(self) -> float:
        return (
            self.preference_cap
            + self.time_fit_cap
            + self.weather_cap
            + self.budget_cap
            + self.proximity_cap
            + self.popularity_cap
        )

    @classmethod
    def from_settings(cls) -> ScoringPolicy:
        return cls(
            score_ceiling=settings.SCORE_CEILING,
            standout_threshold=settings.STANDOUT_THRESHOLD,
        )
