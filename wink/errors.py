"""
Shared exception hierarchy.

Core computations raise these synchronously; nothing here wraps I/O.
"""


class WinkError(Exception):
    """Base class for application errors."""


class ValidationError(WinkError, ValueError):
    """Input rejected at construction or call time."""


class ParticipantConfigurationError(ValidationError):
    """A participant lacks the wake/sleep window needed to compute availability."""

    def __init__(self, message: str, participant_id: str | None = None):
        super().__init__(message)
        self.participant_id = participant_id


class UnsupportedSupplierError(ValidationError):
    """An activity payload came from a supplier with no registered adapter."""


class InvalidTransitionError(WinkError):
    """A swipe decision cannot move to the requested state."""


class MatchPromotionError(WinkError):
    """The reciprocal-accept check or the matched_at update failed."""


class FriendshipRequiredError(WinkError):
    """A calendar was requested for someone who is not an accepted friend."""

    def __init__(self, message: str, missing_ids: list[str] | None = None):
        super().__init__(message)
        self.missing_ids = missing_ids or []
