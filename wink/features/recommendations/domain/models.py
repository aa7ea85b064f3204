"""
Domain models for activity recommendations.

Every supplier payload is normalized into a ``CandidateActivity`` before it
reaches the scorer; the scorer never inspects raw supplier shapes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from wink.errors import ValidationError


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90 <= self.lat <= 90 or not -180 <= self.lng <= 180:
            raise ValidationError(f"Coordinates out of range: ({self.lat}, {self.lng})")


@dataclass(frozen=True, slots=True)
class CandidateActivity:
    """An activity proposed by an external search supplier."""

    id: str
    name: str
    category: str
    source: str
    description: str = ""
    location_name: str | None = None
    location: GeoPoint | None = None
    starts_at: datetime | None = None
    price: float | None = None
    price_level: int | None = None
    popularity: float | None = None
    distance_km: float | None = None
    url: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationError("Activity name is required")
        if self.price is not None and self.price < 0:
            raise ValidationError("Activity price cannot be negative")
        if self.price_level is not None and not 0 <= self.price_level <= 4:
            raise ValidationError("price_level must be between 0 and 4")
        if self.popularity is not None and not 0 <= self.popularity <= 1:
            raise ValidationError("popularity must be between 0 and 1")
        if self.distance_km is not None and self.distance_km < 0:
            raise ValidationError("distance_km cannot be negative")

    @property
    def estimated_price(self) -> float | None:
        if self.price is not None:
            return self.price
        if self.price_level is not None:
            return self.price_level * 20.0
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "source": self.source,
            "description": self.description,
            "location_name": self.location_name,
            "lat": self.location.lat if self.location else None,
            "lng": self.location.lng if self.location else None,
            "starts_at": self.starts_at.isoformat() if self.starts_at else None,
            "price": self.price,
            "price_level": self.price_level,
            "popularity": self.popularity,
            "distance_km": self.distance_km,
            "url": self.url,
        }


@dataclass(frozen=True, slots=True)
class WeatherConditions:
    temperature_c: float | None = None
    is_raining: bool = False


@dataclass(frozen=True, slots=True)
class PreferenceProfile:
    """Categories a user rates highly, from onboarding and from history."""

    explicit_categories: frozenset[str] = frozenset()
    history_categories: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class ScoringContext:
    """Per-request signals the scorer reads; every field is optional."""

    weather: WeatherConditions | None = None
    budget_max: float | None = None
    preferences: PreferenceProfile = field(default_factory=PreferenceProfile)
    origin: GeoPoint | None = None


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    preference: float
    time_fit: float
    weather: float
    budget: float
    proximity: float
    popularity: float

    @property
    def raw_total(self) -> float:
        return (
            self.preference
            + self.time_fit
            + self.weather
            + self.budget
            + self.proximity
            + self.popularity
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "preference": self.preference,
            "time_fit": self.time_fit,
            "weather": self.weather,
            "budget": self.budget,
            "proximity": self.proximity,
            "popularity": self.popularity,
        }


@dataclass(frozen=True, slots=True)
class ScoredActivity:
    activity: CandidateActivity
    breakdown: ScoreBreakdown
    total_score: float
    is_standout: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "activity": self.activity.to_dict(),
            "breakdown": self.breakdown.to_dict(),
            "total_score": self.total_score,
            "is_standout": self.is_standout,
        }
