from .models import Decision, MatchOutcome, SwipeDecision, SwipeKey, SwipeState
from .state_machine import apply_decision, can_match, is_reciprocal, new_swipe, promote_pair

__all__ = [
    "Decision",
    "MatchOutcome",
    "SwipeDecision",
    "SwipeKey",
    "SwipeState",
    "apply_decision",
    "can_match",
    "is_reciprocal",
    "new_swipe",
    "promote_pair",
]
