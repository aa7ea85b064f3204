from .match_service import MatchListener, MatchService
from .notifications import notify_match

__all__ = ["MatchListener", "MatchService", "notify_match"]
