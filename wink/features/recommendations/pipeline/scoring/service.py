"""
Activity scoring - rates one candidate activity against one free window.
"""

from __future__ import annotations

import re

from wink.features.availability.domain.models import FreeWindow
from wink.features.recommendations.domain.models import (
    CandidateActivity,
    ScoreBreakdown,
    ScoredActivity,
    ScoringContext,
)
from wink.features.recommendations.domain.policy import ScoringPolicy
from wink.features.recommendations.geo import haversine_km
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

_WORD = re.compile(r"[a-z0-9]+")


class ActivityScorer:
    INDOOR_KEYWORDS = {
        "indoor",
        "museum",
        "cinema",
        "theatre",
        "theater",
        "gallery",
        "concert",
        "library",
        "shopping",
        "mall",
        "bowling",
        "arts_centre",
        "escape room",
        "restaurant",
        "cafe",
    }

    def __init__(self, policy: ScoringPolicy | None = None):
        self.policy = policy or ScoringPolicy()

    def score(
        self,
        activity: CandidateActivity,
        window: FreeWindow,
        context: ScoringContext | None = None,
    ) -> ScoredActivity:
        context = context or ScoringContext()
        breakdown = ScoreBreakdown(
            preference=self._preference(activity, context),
            time_fit=self._time_fit(activity, window),
            weather=self._weather(activity, context),
            budget=self._budget(activity, context),
            proximity=self._proximity(activity, context),
            popularity=self._popularity(activity),
        )
        total = max(0.0, min(breakdown.raw_total, self.policy.score_ceiling))

        logger.debug(
            "Activity scored",
            activity_id=activity.id,
            total_score=total,
            component_scores=breakdown.to_dict(),
        )
        return ScoredActivity(
            activity=activity,
            breakdown=breakdown,
            total_score=total,
            is_standout=total >= self.policy.standout_threshold,
        )

    def _preference(self, activity: CandidateActivity, context: ScoringContext) -> float:
        category = activity.category.strip().lower()
        explicit = self._mentions_any(category, context.preferences.explicit_categories)
        # Rated history is keyed by the exact category the activity was stored under
        history = bool(category) and category in context.preferences.history_categories
        if explicit and history:
            return self.policy.preference_cap
        if explicit:
            return self.policy.preference_explicit_only
        if history:
            return self.policy.preference_history_only
        return self.policy.preference_floor

    def _time_fit(self, activity: CandidateActivity, window: FreeWindow) -> float:
        if activity.starts_at is None:
            return self.policy.time_fit_unknown
        # naive and aware datetimes cannot be compared
        if (activity.starts_at.tzinfo is None) != (window.start.tzinfo is None):
            return self.policy.time_fit_unknown
        if window.interval.contains(activity.starts_at):
            return self.policy.time_fit_cap

        day_distance = abs((activity.starts_at.date() - window.start.date()).days)
        for max_days, credit in self.policy.time_fit_bands:
            if day_distance <= max_days:
                return credit
        return self.policy.time_fit_floor

    def _weather(self, activity: CandidateActivity, context: ScoringContext) -> float:
        if context.weather is None:
            return self.policy.weather_unknown

        indoor = self.is_indoor(activity)
        if context.weather.is_raining:
            return self.policy.weather_cap if indoor else self.policy.weather_mismatch
        return self.policy.weather_indoor_clear if indoor else self.policy.weather_cap

    def _budget(self, activity: CandidateActivity, context: ScoringContext) -> float:
        price = activity.estimated_price
        if price == 0:
            return self.policy.budget_cap
        if price is None or context.budget_max is None:
            return self.policy.budget_unknown
        if price <= context.budget_max:
            return self.policy.budget_cap
        if context.budget_max <= 0:
            return self.policy.budget_floor

        ratio = price / context.budget_max
        for max_ratio, credit in self.policy.budget_bands:
            if ratio <= max_ratio:
                return credit
        return self.policy.budget_floor

    def _proximity(self, activity: CandidateActivity, context: ScoringContext) -> float:
        distance = self.distance_km(activity, context)
        if distance is None:
            return self.policy.proximity_unknown
        for max_km, credit in self.policy.proximity_bands:
            if distance <= max_km:
                return min(credit, self.policy.proximity_cap)
        return self.policy.proximity_floor

    def _popularity(self, activity: CandidateActivity) -> float:
        signal = (
            activity.popularity
            if activity.popularity is not None
            else self.policy.popularity_unknown
        )
        return float(round(signal * self.policy.popularity_cap))

    @staticmethod
    def distance_km(activity: CandidateActivity, context: ScoringContext) -> float | None:
        if activity.distance_km is not None:
            return activity.distance_km
        if context.origin is not None and activity.location is not None:
            return haversine_km(context.origin, activity.location)
        return None

    @classmethod
    def is_indoor(cls, activity: CandidateActivity) -> bool:
        text = " ".join(
            part.lower()
            for part in (activity.category, activity.description, activity.location_name)
            if part
        )
        return any(keyword in text for keyword in cls.INDOOR_KEYWORDS)

    @staticmethod
    def _mentions_any(category: str, preferred: frozenset[str]) -> bool:
        """True when every word of some preference appears as a word of ``category``."""
        words = set(_WORD.findall(category))
        if not words:
            return False
        for pref in preferred:
            pref_words = set(_WORD.findall(pref.lower()))
            if pref_words and pref_words <= words:
                return True
        return False


def score_activity(
    activity: CandidateActivity,
    window: FreeWindow,
    context: ScoringContext | None = None,
    policy: ScoringPolicy | None = None,
) -> ScoredActivity:
    return ActivityScorer(policy).score(activity, window, context)
