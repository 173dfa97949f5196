"""Decision data models.

Pure data structures for one decision cycle: the decision itself, the quota
answer consulted while processing it, and the tagged result it produces.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .match import Match


class SwipeDecision(Enum):
    """A committed decision on the current candidate."""
    PASS = "pass"
    LIKE = "like"
    SUPER_LIKE = "super_like"

    @property
    def is_accept(self) -> bool:
        """Like and super-like share quota and match handling."""
        return self is not SwipeDecision.PASS


class SubscriptionTier(Enum):
    """Subscription tiers with different daily accept limits."""
    FREE = "free"
    PREMIUM = "premium"


@dataclass(frozen=True)
class QuotaState:
    """Answer from a quota gate, valid for one decision cycle only."""
    allowed: bool
    reason: str | None = None


@dataclass(frozen=True)
class DecisionResult:
    """Base class for the outcome of a decision cycle."""
    kind = "result"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"result": self.kind}


@dataclass(frozen=True)
class Skipped(DecisionResult):
    """The candidate was passed on."""
    kind = "skipped"


@dataclass(frozen=True)
class Matched(DecisionResult):
    """The candidate was accepted and the match was stored."""
    match: Match
    kind = "matched"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["match"] = self.match.to_dict()
        return data


@dataclass(frozen=True)
class QuotaExceeded(DecisionResult):
    """The accept was refused by the quota gate; the candidate stays."""
    reason: str
    kind = "quota_exceeded"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class PersistenceFailed(DecisionResult):
    """The accept was allowed but the match could not be stored."""
    match: Match
    error: str
    kind = "persistence_failed"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["match"] = self.match.to_dict()
        data["error"] = self.error
        return data
