from .service import ActivityScorer, score_activity

__all__ = ["ActivityScorer", "score_activity"]
