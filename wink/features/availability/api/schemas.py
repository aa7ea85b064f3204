"""
Availability API request/response models.
"""

from datetime import date

from pydantic import BaseModel, Field

from wink.features.availability.pipeline.intersection import IntersectionStrategy


class MutualAvailabilityRequest(BaseModel):
    """Request for mutual free windows across the caller and some friends."""

    friend_ids: list[str] = Field(..., min_length=1, description="Accepted friends to include")
    start_date: date = Field(..., description="First day of the range (inclusive)")
    end_date: date = Field(..., description="Last day of the range (inclusive)")
    min_duration_minutes: int | None = Field(
        default=None, gt=0, description="Shortest window worth returning"
    )
    strategy: IntersectionStrategy | None = Field(
        default=None, description="Intersection strategy (exact or grid)"
    )


class FreeWindowResponse(BaseModel):
    start: str
    end: str
    duration: int = Field(..., description="Window length in minutes")
    participantCount: int = Field(..., description="Number of people free for the window")


class MutualAvailabilityResponse(BaseModel):
    free_windows: list[FreeWindowResponse]
    participant_count: int
    total_free_minutes: int


class CompareCalendarsRequest(BaseModel):
    """Request for a side-by-side day view with at most one friend."""

    friend_id: str | None = Field(default=None, description="Friend to compare against")
    start_date: date = Field(..., description="First day of the range (inclusive)")
    end_date: date = Field(..., description="Last day of the range (inclusive)")


class CalendarBlockResponse(BaseModel):
    start: str
    end: str
    type: str
    eventTitle: str | None = None


class DayScheduleResponse(BaseModel):
    day: date
    user_blocks: list[CalendarBlockResponse]
    friend_blocks: list[CalendarBlockResponse] | None
    overlap_blocks: list[CalendarBlockResponse]


class CompareCalendarsResponse(BaseModel):
    days: list[DayScheduleResponse]
