"""Data models - Pure data structures with no business logic."""

from .profile import GENRES, MediaHighlight, MediaType, Profile, Role, coerce_profile
from .match import Match, coerce_match
from .decision import (
    DecisionResult,
    Matched,
    PersistenceFailed,
    QuotaExceeded,
    QuotaState,
    Skipped,
    SubscriptionTier,
    SwipeDecision,
)

__all__ = [
    "GENRES",
    "MediaHighlight",
    "MediaType",
    "Profile",
    "Role",
    "coerce_profile",
    "Match",
    "coerce_match",
    "DecisionResult",
    "Matched",
    "PersistenceFailed",
    "QuotaExceeded",
    "QuotaState",
    "Skipped",
    "SubscriptionTier",
    "SwipeDecision",
]
