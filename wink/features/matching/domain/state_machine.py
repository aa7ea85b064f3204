"""
Pure transitions for swipe decisions.

pending -> accepted | rejected; two reciprocal accepted rows -> matched
together. Nothing here touches storage; the repository applies these
functions inside its own transactions.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from wink.errors import InvalidTransitionError, ValidationError

from .models import Decision, SwipeDecision, SwipeKey, SwipeState


def new_swipe(key: SwipeKey) -> SwipeDecision:
    if key.actor_id == key.counterpart_id:
        raise ValidationError("A swipe must involve two different people")
    if not key.activity_id:
        raise ValidationError("activity_id is required")
    return SwipeDecision(
        actor_id=key.actor_id,
        counterpart_id=key.counterpart_id,
        activity_id=key.activity_id,
        proposed_time=key.proposed_time,
    )


def apply_decision(swipe: SwipeDecision, decision: Decision) -> SwipeDecision:
    """
    Record ``decision`` on a swipe.

    Repeating the decision already held is a no-op. Changing it is not
    allowed: a reject is terminal and an accept may already be matched.
    """
    decision = Decision(decision)
    if swipe.decision is None:
        return replace(swipe, decision=decision)
    if swipe.decision is decision:
        return swipe
    raise InvalidTransitionError(
        f"Swipe already {swipe.state.value}; cannot change to {decision.value}"
    )


def is_reciprocal(first: SwipeDecision, second: SwipeDecision) -> bool:
    return first.key.reciprocal() == second.key


def promote_pair(
    first: SwipeDecision, second: SwipeDecision, now: datetime
) -> tuple[SwipeDecision, SwipeDecision]:
    """
    Move two reciprocal accepts to matched with one shared ``matched_at``.

    An existing ``matched_at`` wins over ``now`` so re-running the promotion
    never changes the timestamp.
    """
    if not is_reciprocal(first, second):
        raise InvalidTransitionError("Swipes are not reciprocal")
    if first.decision is not Decision.ACCEPT or second.decision is not Decision.ACCEPT:
        raise InvalidTransitionError("Both swipes must be accepted to match")

    matched_at = first.matched_at or second.matched_at or now
    return (
        _with_matched_at(first, matched_at),
        _with_matched_at(second, matched_at),
    )


def can_match(first: SwipeDecision | None, second: SwipeDecision | None) -> bool:
    return (
        first is not None
        and second is not None
        and is_reciprocal(first, second)
        and first.state in (SwipeState.ACCEPTED, SwipeState.MATCHED)
        and second.state in (SwipeState.ACCEPTED, SwipeState.MATCHED)
    )


def _with_matched_at(swipe: SwipeDecision, matched_at: datetime) -> SwipeDecision:
    if swipe.matched_at == matched_at:
        return swipe
    return replace(swipe, matched_at=matched_at)
