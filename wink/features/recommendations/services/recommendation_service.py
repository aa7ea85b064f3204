"""
Recommendation service - turns supplier payloads plus a free window into a
ranked activity list for one user.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from wink.config import settings
from wink.errors import ValidationError
from wink.features.availability.domain.models import FreeWindow
from wink.features.recommendations.adapters import normalize_activities
from wink.features.recommendations.domain.models import (
    GeoPoint,
    PreferenceProfile,
    ScoredActivity,
    ScoringContext,
    WeatherConditions,
)
from wink.features.recommendations.domain.policy import ScoringPolicy
from wink.features.recommendations.pipeline.ranking.service import rank
from wink.features.recommendations.pipeline.scoring.service import ActivityScorer
from wink.features.recommendations.preferences import (
    PreferenceProfileCache,
    build_preference_profile,
)
from wink.features.recommendations.repository.preference_repository import (
    PreferenceRepository,
)
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class RecommendationService:
    def __init__(self, policy: ScoringPolicy | None = None):
        self.scorer = ActivityScorer(policy or ScoringPolicy.from_settings())

    async def load_profile(
        self, user_id: str, cache: PreferenceProfileCache | None = None
    ) -> PreferenceProfile:
        if cache is not None:
            cached = cache.get(user_id)
            if cached is not None:
                return cached

        preferences = await PreferenceRepository.fetch_preferences(user_id)
        history = await PreferenceRepository.fetch_rated_history(user_id)
        profile = build_preference_profile(preferences, history)

        if cache is not None:
            cache.put(user_id, profile)
        logger.debug(
            "Preference profile built",
            user_id=user_id,
            explicit_count=len(profile.explicit_categories),
            history_count=len(profile.history_categories),
        )
        return profile

    async def build_context(
        self,
        user_id: str,
        *,
        weather: WeatherConditions | None = None,
        origin: GeoPoint | None = None,
        budget_max: float | None = None,
        cache: PreferenceProfileCache | None = None,
    ) -> ScoringContext:
        """Fill whatever the request left out from the stored profile."""
        preferences = await self.load_profile(user_id, cache)

        if budget_max is None or origin is None:
            profile_row = await PreferenceRepository.fetch_profile(user_id) or {}
            if budget_max is None:
                stored_budget = profile_row.get("budget_max")
                budget_max = (
                    float(stored_budget)
                    if stored_budget is not None
                    else settings.DEFAULT_BUDGET_MAX
                )
            if origin is None and profile_row.get("home_lat") is not None:
                try:
                    origin = GeoPoint(profile_row["home_lat"], profile_row["home_lng"])
                except (ValidationError, TypeError) as exc:
                    logger.warning(
                        "Ignoring invalid home location", user_id=user_id, error=str(exc)
                    )

        return ScoringContext(
            weather=weather,
            budget_max=budget_max,
            preferences=preferences,
            origin=origin,
        )

    def rank_activities(
        self,
        payloads: Iterable[tuple[dict[str, Any], str]],
        window: FreeWindow,
        context: ScoringContext,
        min_score: float | None = None,
        limit: int | None = None,
    ) -> list[ScoredActivity]:
        activities = normalize_activities(payloads, tz=window.start.tzinfo)
        scored = [self.scorer.score(activity, window, context) for activity in activities]
        return rank(scored, min_score=min_score, limit=limit)

    async def recommend(
        self,
        user_id: str,
        window: FreeWindow,
        payloads: Iterable[tuple[dict[str, Any], str]],
        *,
        weather: WeatherConditions | None = None,
        origin: GeoPoint | None = None,
        budget_max: float | None = None,
        min_score: float | None = None,
        limit: int | None = None,
        cache: PreferenceProfileCache | None = None,
    ) -> list[ScoredActivity]:
        payloads = list(payloads)
        context = await self.build_context(
            user_id, weather=weather, origin=origin, budget_max=budget_max, cache=cache
        )
        ranked = self.rank_activities(payloads, window, context, min_score=min_score, limit=limit)
        logger.info(
            "Recommendations ranked",
            user_id=user_id,
            candidate_count=len(payloads),
            returned=len(ranked),
            standout_count=sum(1 for item in ranked if item.is_standout),
        )
        return ranked


recommendation_service = RecommendationService()
