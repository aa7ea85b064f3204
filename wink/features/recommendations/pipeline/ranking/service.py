"""
Ranking - filter, order and truncate scored activities.
"""

from __future__ import annotations

from collections.abc import Iterable

from wink.config import settings
from wink.errors import ValidationError
from wink.features.recommendations.domain.models import ScoredActivity
from wink.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def rank(
    scored: Iterable[ScoredActivity],
    min_score: float | None = None,
    limit: int | None = None,
) -> list[ScoredActivity]:
    """
    Keep activities scoring at least ``min_score``, best first, at most ``limit``.

    The sort is stable, so equal scores keep their input order.
    """
    min_score = settings.RECOMMENDATION_MIN_SCORE if min_score is None else min_score
    limit = settings.RECOMMENDATION_LIMIT if limit is None else limit
    if limit < 0:
        raise ValidationError("limit cannot be negative")
    if not 0 <= min_score < 100:
        raise ValidationError("min_score must be in [0, 100)")

    candidates = list(scored)
    kept = [item for item in candidates if item.total_score >= min_score]
    kept.sort(key=lambda item: item.total_score, reverse=True)
    ranked = kept[:limit]

    logger.debug(
        "Activities ranked",
        candidate_count=len(candidates),
        above_threshold=len(kept),
        returned=len(ranked),
        min_score=min_score,
    )
    return ranked
