"""
Recommendation API request/response models.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class FreeWindowRequest(BaseModel):
    start: datetime = Field(..., description="Window start")
    end: datetime = Field(..., description="Window end")
    participant_count: int = Field(default=1, ge=1, description="People free for the window")


class ActivityPayload(BaseModel):
    source: Literal["overpass", "live_event", "generated", "stored"] = Field(
        ..., description="Supplier that produced the payload"
    )
    payload: dict[str, Any] = Field(..., description="Raw supplier payload")


class WeatherRequest(BaseModel):
    temperature_c: float | None = Field(default=None, description="Current temperature")
    is_raining: bool = Field(default=False, description="Whether it is raining")


class LocationRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class RankRecommendationsRequest(BaseModel):
    """Request for ranking supplier activities against one free window."""

    free_window: FreeWindowRequest
    activities: list[ActivityPayload] = Field(..., max_length=200)
    weather: WeatherRequest | None = None
    origin: LocationRequest | None = Field(
        default=None, description="Search origin (defaults to the stored home location)"
    )
    budget_max: float | None = Field(default=None, ge=0, description="Budget override")
    min_score: float | None = Field(default=None, ge=0, lt=100)
    limit: int | None = Field(default=None, ge=0, le=50)


class ScoredActivityResponse(BaseModel):
    activity: dict[str, Any]
    breakdown: dict[str, float]
    total_score: float
    is_standout: bool


class RankRecommendationsResponse(BaseModel):
    recommendations: list[ScoredActivityResponse]
    total_count: int
