"""
Domain models for mutual activity matching.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class Decision(StrEnum):
    ACCEPT = "accept"
    REJECT = "reject"


class SwipeState(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    MATCHED = "matched"


@dataclass(frozen=True, slots=True)
class SwipeKey:
    """Identity of one directional decision: who, about whom, what, when."""

    actor_id: str
    counterpart_id: str
    activity_id: str
    proposed_time: datetime

    def reciprocal(self) -> SwipeKey:
        return SwipeKey(
            actor_id=self.counterpart_id,
            counterpart_id=self.actor_id,
            activity_id=self.activity_id,
            proposed_time=self.proposed_time,
        )


@dataclass(frozen=True, slots=True)
class SwipeDecision:
    actor_id: str
    counterpart_id: str
    activity_id: str
    proposed_time: datetime
    decision: Decision | None = None
    matched_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def key(self) -> SwipeKey:
        return SwipeKey(self.actor_id, self.counterpart_id, self.activity_id, self.proposed_time)

    @property
    def state(self) -> SwipeState:
        if self.matched_at is not None:
            return SwipeState.MATCHED
        if self.decision is Decision.ACCEPT:
            return SwipeState.ACCEPTED
        if self.decision is Decision.REJECT:
            return SwipeState.REJECTED
        return SwipeState.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.actor_id,
            "friend_id": self.counterpart_id,
            "activity_id": self.activity_id,
            "suggested_time": self.proposed_time.isoformat(),
            "response": self.decision.value if self.decision else None,
            "state": self.state.value,
            "matched_at": self.matched_at.isoformat() if self.matched_at else None,
        }


@dataclass(frozen=True, slots=True)
class MatchOutcome:
    """Result of recording one decision, including the match check."""

    swipe: SwipeDecision
    is_match: bool = False
    match_check_failed: bool = False
    newly_matched: bool = False
