from datetime import UTC, datetime, timedelta

import pytest

from wink.errors import InvalidTransitionError, ValidationError
from wink.features.matching.domain.models import Decision, SwipeKey, SwipeState
from wink.features.matching.domain.state_machine import (
    apply_decision,
    can_match,
    is_reciprocal,
    new_swipe,
    promote_pair,
)

WHEN = datetime(2025, 3, 14, 18, tzinfo=UTC)
NOW = datetime(2025, 3, 10, 9, tzinfo=UTC)
KEY = SwipeKey("alice", "bob", "activity-1", WHEN)


def test_new_swipe_is_pending():
    assert new_swipe(KEY).state is SwipeState.PENDING


def test_self_swipe_is_rejected():
    with pytest.raises(ValidationError):
        new_swipe(SwipeKey("alice", "alice", "activity-1", WHEN))


def test_pending_moves_to_accepted_or_rejected():
    assert apply_decision(new_swipe(KEY), Decision.ACCEPT).state is SwipeState.ACCEPTED
    assert apply_decision(new_swipe(KEY), "reject").state is SwipeState.REJECTED


def test_repeating_a_decision_is_idempotent():
    accepted = apply_decision(new_swipe(KEY), Decision.ACCEPT)
    assert apply_decision(accepted, Decision.ACCEPT) is accepted


def test_reject_is_terminal():
    rejected = apply_decision(new_swipe(KEY), Decision.REJECT)
    with pytest.raises(InvalidTransitionError):
        apply_decision(rejected, Decision.ACCEPT)


def test_promote_pair_sets_same_timestamp_on_both():
    mine = apply_decision(new_swipe(KEY), Decision.ACCEPT)
    theirs = apply_decision(new_swipe(KEY.reciprocal()), Decision.ACCEPT)

    first, second = promote_pair(mine, theirs, NOW)

    assert first.matched_at == second.matched_at == NOW
    assert first.state is second.state is SwipeState.MATCHED


def test_promote_pair_keeps_existing_timestamp():
    mine = apply_decision(new_swipe(KEY), Decision.ACCEPT)
    theirs = apply_decision(new_swipe(KEY.reciprocal()), Decision.ACCEPT)
    first, second = promote_pair(mine, theirs, NOW)

    again = promote_pair(first, second, NOW + timedelta(minutes=5))

    assert again == (first, second)


def test_promote_requires_two_accepts():
    mine = apply_decision(new_swipe(KEY), Decision.ACCEPT)
    theirs = apply_decision(new_swipe(KEY.reciprocal()), Decision.REJECT)

    assert not can_match(mine, theirs)
    with pytest.raises(InvalidTransitionError):
        promote_pair(mine, theirs, NOW)


def test_different_proposed_time_is_a_separate_instance():
    mine = apply_decision(new_swipe(KEY), Decision.ACCEPT)
    other_time = SwipeKey("bob", "alice", "activity-1", WHEN + timedelta(hours=1))
    theirs = apply_decision(new_swipe(other_time), Decision.ACCEPT)

    assert not is_reciprocal(mine, theirs)
    assert not can_match(mine, theirs)
    with pytest.raises(InvalidTransitionError):
        promote_pair(mine, theirs, NOW)


def test_can_match_handles_missing_rows():
    assert not can_match(apply_decision(new_swipe(KEY), Decision.ACCEPT), None)
