"""
Recommendation API routes.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from wink.auth.verify import current_user_id
from wink.db.helpers import DatabaseError
from wink.errors import ValidationError
from wink.features.availability.domain.models import FreeWindow, TimeInterval
from wink.features.recommendations.api.schemas import (
    RankRecommendationsRequest,
    RankRecommendationsResponse,
    ScoredActivityResponse,
)
from wink.features.recommendations.domain.models import GeoPoint, WeatherConditions
from wink.features.recommendations.services.recommendation_service import (
    recommendation_service,
)
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.post("/rank", response_model=RankRecommendationsResponse)
async def rank_recommendations(
    body: RankRecommendationsRequest,
    request: Request,
    user_id: str = Depends(current_user_id),
):
    """Score supplier activities for a free window and return the best ones."""
    try:
        window = FreeWindow(
            TimeInterval(body.free_window.start, body.free_window.end),
            body.free_window.participant_count,
        )
        ranked = await recommendation_service.recommend(
            user_id,
            window,
            [(item.payload, item.source) for item in body.activities],
            weather=(
                WeatherConditions(body.weather.temperature_c, body.weather.is_raining)
                if body.weather
                else None
            ),
            origin=GeoPoint(body.origin.lat, body.origin.lng) if body.origin else None,
            budget_max=body.budget_max,
            min_score=body.min_score,
            limit=body.limit,
            cache=getattr(request.app.state, "preference_cache", None),
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        logger.error("Failed to load preference data", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Preference data unavailable",
        )

    return RankRecommendationsResponse(
        recommendations=[ScoredActivityResponse(**item.to_dict()) for item in ranked],
        total_count=len(ranked),
    )
