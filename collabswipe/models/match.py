"""Match data models."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from collabswipe.errors import MalformedRecordError


def get_utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Match:
    """An accepted pairing between two users.

    The pair is unordered: a match between A and B is the same match no
    matter who initiated it.
    """
    id: str
    user_id: str
    matched_user_id: str
    matched_at: str
    is_read: bool = False

    @property
    def pair(self) -> frozenset[str]:
        return frozenset((self.user_id, self.matched_user_id))

    def involves(self, user_id: str) -> bool:
        return user_id in (self.user_id, self.matched_user_id)

    def other_party(self, user_id: str) -> str:
        """The id on the other side of this match from ``user_id``."""
        return self.matched_user_id if self.user_id == user_id else self.user_id

    @classmethod
    def create(cls, user_id: str, matched_user_id: str) -> "Match":
        """Build a new match with a fresh id and the current timestamp."""
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            matched_user_id=matched_user_id,
            matched_at=get_utc_now().isoformat(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "matched_user_id": self.matched_user_id,
            "matched_at": self.matched_at,
            "is_read": self.is_read,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Match":
        """Create from dictionary.

        Raises:
            MalformedRecordError: If an id field is missing or not a string
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordError("Match record must be a mapping")
        for key in ("id", "user_id", "matched_user_id"):
            value = data.get(key)
            if not isinstance(value, str) or not value:
                raise MalformedRecordError(f"Missing or invalid '{key}'")
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            matched_user_id=data["matched_user_id"],
            matched_at=str(data.get("matched_at") or ""),
            is_read=bool(data.get("is_read", False)),
        )


def coerce_match(record: Match | Mapping[str, Any] | None) -> Match:
    """Return a Match for either a parsed match or a raw record."""
    if isinstance(record, Match):
        return record
    if record is None:
        raise MalformedRecordError("Match record is missing")
    return Match.from_dict(record)
