"""
Availability API routes.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from wink.auth.verify import current_user_id
from wink.db.helpers import DatabaseError
from wink.errors import FriendshipRequiredError, ValidationError
from wink.features.availability.api.schemas import (
    CalendarBlockResponse,
    CompareCalendarsRequest,
    CompareCalendarsResponse,
    DayScheduleResponse,
    FreeWindowResponse,
    MutualAvailabilityRequest,
    MutualAvailabilityResponse,
)
from wink.features.availability.pipeline.intersection import total_free_minutes
from wink.features.availability.services.availability_service import availability_service
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/availability", tags=["availability"])


@router.post("/mutual", response_model=MutualAvailabilityResponse)
async def mutual_availability(
    request: MutualAvailabilityRequest, user_id: str = Depends(current_user_id)
):
    """Free windows shared by the caller and every listed friend."""
    try:
        windows = await availability_service.find_group_windows(
            user_id,
            request.friend_ids,
            request.start_date,
            request.end_date,
            min_duration_minutes=request.min_duration_minutes,
            strategy=request.strategy,
        )
    except FriendshipRequiredError as e:
        logger.warning(
            "Availability requested for non-friends", user_id=user_id, missing=e.missing_ids
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        logger.error("Failed to load calendars", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Calendar data unavailable"
        )

    participant_count = len({user_id, *request.friend_ids})
    return MutualAvailabilityResponse(
        free_windows=[FreeWindowResponse(**window.to_dict()) for window in windows],
        participant_count=participant_count,
        total_free_minutes=int(total_free_minutes(windows)),
    )


@router.post("/compare", response_model=CompareCalendarsResponse)
async def compare_availability(
    request: CompareCalendarsRequest, user_id: str = Depends(current_user_id)
):
    """Per-day busy/free/overlap blocks for the caller and one friend."""
    try:
        schedules = await availability_service.compare(
            user_id, request.friend_id, request.start_date, request.end_date
        )
    except FriendshipRequiredError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        logger.error("Failed to load calendars", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Calendar data unavailable"
        )

    return CompareCalendarsResponse(
        days=[
            DayScheduleResponse(
                day=schedule.day,
                user_blocks=[CalendarBlockResponse(**b.to_dict()) for b in schedule.user_blocks],
                friend_blocks=(
                    [CalendarBlockResponse(**b.to_dict()) for b in schedule.friend_blocks]
                    if schedule.friend_blocks is not None
                    else None
                ),
                overlap_blocks=[
                    CalendarBlockResponse(**b.to_dict()) for b in schedule.overlap_blocks
                ],
            )
            for schedule in schedules
        ]
    )
