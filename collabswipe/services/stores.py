"""Store interfaces and in-memory implementations.

This module defines the narrow async interfaces the core consumes:
- ProfileSource: the viewer's profile and the candidate pool
- MatchStore: existing matches and new match persistence
- QuotaGate: whether an accept is allowed right now, and consumption

Interface Contract:
- All methods are coroutines
- Failures raise the store's own error (MatchStoreError, QuotaGateError) or
  whatever the backend raised; callers decide how to degrade
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from config import FREE_LIKES_PER_DAY
from collabswipe.errors import MatchStoreError, QuotaGateError
from collabswipe.models import Match, Profile, QuotaState, SubscriptionTier


class ProfileSource(ABC):
    """Where profiles come from."""

    @abstractmethod
    async def get_current_profile(self) -> Profile | None:
        """Return the viewer's own profile, or None if it does not exist."""
        pass

    @abstractmethod
    async def get_all_profiles(self) -> list[Profile | dict[str, Any]]:
        """Return the full candidate pool. Records may be raw dicts."""
        pass


class MatchStore(ABC):
    """Where matches are kept."""

    @abstractmethod
    async def get_matches(self) -> list[Match | dict[str, Any]]:
        """Return every known match. Records may be raw dicts."""
        pass

    @abstractmethod
    async def add_match(self, match: Match) -> None:
        """Persist a new match.

        Raises:
            MatchStoreError: If the match could not be stored, including when
                the unordered pair is already matched
        """
        pass


class QuotaGate(ABC):
    """Subscription quota on accept actions."""

    @abstractmethod
    async def can_accept_now(self) -> QuotaState:
        """Return whether one more accept is currently allowed."""
        pass

    @abstractmethod
    async def consume_one(self) -> None:
        """Record one accept against the quota.

        Raises:
            QuotaGateError: If the consumption could not be recorded
        """
        pass


def sample_profiles() -> list[dict[str, Any]]:
    """Seed collaborators used when no backend is configured."""
    return [
        {
            "id": "user_1",
            "name": "Alex Producer",
            "role": "producer",
            "genres": ["Hip-Hop", "R&B"],
            "location": "Los Angeles, CA",
            "bio": "Grammy-nominated producer specializing in modern hip-hop and R&B. "
                   "Looking for talented vocalists and rappers.",
            "rating": 4.8,
            "verified": True,
        },
        {
            "id": "user_2",
            "name": "Maya Vocalist",
            "role": "vocalist",
            "genres": ["Pop", "R&B"],
            "location": "Nashville, TN",
            "bio": "Professional vocalist with 10+ years experience. "
                   "Featured on multiple Billboard charting songs.",
            "rating": 4.9,
            "verified": True,
        },
        {
            "id": "user_3",
            "name": "Jordan Beats",
            "role": "producer",
            "genres": ["Electronic", "Pop"],
            "location": "New York, NY",
            "bio": "Electronic music producer and sound designer. "
                   "Specializing in innovative pop productions.",
            "rating": 4.7,
            "verified": False,
        },
        {
            "id": "user_4",
            "name": "Sophia Strings",
            "role": "instrumentalist",
            "genres": ["Classical", "Pop", "Rock"],
            "location": "Boston, MA",
            "bio": "Professional violinist and string arranger. "
                   "Classically trained with a passion for modern music.",
            "rating": 4.6,
            "verified": True,
        },
        {
            "id": "user_5",
            "name": "Marcus Mix",
            "role": "mixer",
            "genres": ["Hip-Hop", "Pop", "R&B"],
            "location": "Atlanta, GA",
            "bio": "Award-winning mix engineer with credits on platinum albums. "
                   "Specializing in modern urban music.",
            "rating": 4.9,
            "verified": True,
        },
    ]


class InMemoryProfileSource(ProfileSource):
    """Profile source over a list of records held in memory."""

    def __init__(
        self,
        records: Iterable[Profile | Mapping[str, Any]],
        current_user_id: str | None = None,
    ):
        self.records = list(records)
        self.current_user_id = current_user_id

    @classmethod
    def from_json(cls, path: Path, current_user_id: str | None = None) -> "InMemoryProfileSource":
        """Load records from a JSON file holding a list of profiles."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("profiles", [])
        return cls(data, current_user_id=current_user_id)

    async def get_current_profile(self) -> Profile | None:
        if self.current_user_id is None:
            return None
        for record in self.records:
            if isinstance(record, Profile):
                if record.id == self.current_user_id:
                    return record
            elif isinstance(record, Mapping) and record.get("id") == self.current_user_id:
                return Profile.from_dict(record)
        return None

    async def get_all_profiles(self) -> list[Profile | dict[str, Any]]:
        return list(self.records)


class InMemoryMatchStore(MatchStore):
    """Match store that enforces one match per unordered pair."""

    def __init__(self, matches: Iterable[Match] = ()):
        self._matches: list[Match] = []
        for match in matches:
            self._insert(match)

    @property
    def matches(self) -> list[Match]:
        return list(self._matches)

    def _insert(self, match: Match) -> None:
        if any(existing.pair == match.pair for existing in self._matches):
            raise MatchStoreError(
                f"Pair {sorted(match.pair)} is already matched"
            )
        self._matches.append(match)

    async def get_matches(self) -> list[Match | dict[str, Any]]:
        return list(self._matches)

    async def add_match(self, match: Match) -> None:
        self._insert(match)


def _today() -> date:
    return datetime.now(timezone.utc).date()


class DailyQuotaGate(QuotaGate):
    """Tier-aware daily accept quota kept in memory.

    Free users get ``likes_per_day`` accepts per day; premium is unlimited.
    The counter resets the first time it is checked on a new day.
    """

    def __init__(
        self,
        tier: SubscriptionTier = SubscriptionTier.FREE,
        likes_per_day: int = FREE_LIKES_PER_DAY,
        clock: Callable[[], date] = _today,
    ):
        self.tier = tier
        self.likes_per_day = likes_per_day
        self._clock = clock
        self.used_today = 0
        self.last_reset = clock()

    def _roll_over(self) -> None:
        today = self._clock()
        if today != self.last_reset:
            self.used_today = 0
            self.last_reset = today

    async def can_accept_now(self) -> QuotaState:
        if self.tier is SubscriptionTier.PREMIUM:
            return QuotaState(allowed=True)
        self._roll_over()
        if self.used_today >= self.likes_per_day:
            return QuotaState(
                allowed=False,
                reason=(
                    f"Free users get {self.likes_per_day} likes per day. "
                    "Upgrade to Premium for unlimited likes!"
                ),
            )
        return QuotaState(allowed=True)

    async def consume_one(self) -> None:
        if self.tier is SubscriptionTier.PREMIUM:
            return
        self._roll_over()
        if self.used_today >= self.likes_per_day:
            raise QuotaGateError("Daily like quota already used up")
        self.used_today += 1
