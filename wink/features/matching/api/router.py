"""
Matching API routes.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from wink.auth.verify import current_user_id
from wink.db.helpers import DatabaseError
from wink.errors import InvalidTransitionError, ValidationError
from wink.features.matching.domain.models import Decision
from wink.features.matching.services.match_service import match_service
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/matches", tags=["matches"])


class SwipeRequest(BaseModel):
    """A user's response to an activity suggested with a friend."""

    friend_id: str = Field(..., description="Friend the activity was suggested with")
    activity_id: str = Field(..., description="Activity being swiped on")
    response: Decision = Field(..., description="accept or reject")
    suggested_time: datetime = Field(..., description="Proposed start time")


class SwipeResponse(BaseModel):
    swipe: dict
    is_match: bool
    match_check_failed: bool


@router.post("/swipes", response_model=SwipeResponse)
async def record_swipe(request: SwipeRequest, user_id: str = Depends(current_user_id)):
    """Record a swipe and report whether it completed a mutual match."""
    try:
        outcome = await match_service.record_decision(
            user_id,
            request.friend_id,
            request.activity_id,
            request.suggested_time,
            request.response,
        )
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        logger.error("Failed to record swipe", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Failed to record swipe"
        )

    return SwipeResponse(
        swipe=outcome.swipe.to_dict(),
        is_match=outcome.is_match,
        match_check_failed=outcome.match_check_failed,
    )
