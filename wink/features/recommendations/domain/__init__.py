from .models import (
    CandidateActivity,
    GeoPoint,
    PreferenceProfile,
    ScoreBreakdown,
    ScoredActivity,
    ScoringContext,
    WeatherConditions,
)
from .policy import ScoringPolicy

__all__ = [
    "CandidateActivity",
    "GeoPoint",
    "PreferenceProfile",
    "ScoreBreakdown",
    "ScoredActivity",
    "ScoringContext",
    "ScoringPolicy",
    "WeatherConditions",
]
