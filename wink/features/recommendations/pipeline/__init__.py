"""
Recommendation pipeline: score every candidate against a free window, then rank.
"""

from .ranking import rank
from .scoring import ActivityScorer, score_activity

__all__ = ["ActivityScorer", "rank", "score_activity"]
