"""Profile data models.

Pure data structures with no business logic.
Profiles are owned by the external profile system; the core only reads them,
so every model here is frozen.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any

from collabswipe.errors import MalformedRecordError


class Role(str, Enum):
    """Collaboration roles a profile can advertise."""
    PRODUCER = "producer"
    VOCALIST = "vocalist"
    SONGWRITER = "songwriter"
    INSTRUMENTALIST = "instrumentalist"
    MIXER = "mixer"
    AR = "ar"


class MediaType(str, Enum):
    """Kinds of media a highlight can point at."""
    AUDIO = "audio"
    VIDEO = "video"
    IMAGE = "image"


GENRES = (
    "Hip-Hop", "R&B", "Pop", "Rock", "Electronic", "Jazz",
    "Classical", "Country", "Reggae", "Latin", "Alternative", "Indie",
)


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedRecordError(f"Missing or invalid '{key}'")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRecordError(f"'{key}' must be a string")
    return value


@dataclass(frozen=True)
class MediaHighlight:
    """A single media highlight shown on a profile card."""
    id: str
    type: MediaType
    title: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"id": self.id, "type": self.type.value, "title": self.title}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MediaHighlight":
        """Create from dictionary.

        Raises:
            MalformedRecordError: If id or type is missing or invalid
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordError("Highlight record must be a mapping")
        try:
            media_type = MediaType(data.get("type"))
        except ValueError as e:
            raise MalformedRecordError(f"Unknown highlight type: {data.get('type')!r}") from e
        return cls(
            id=_require_str(data, "id"),
            type=media_type,
            title=_optional_str(data, "title"),
        )


@dataclass(frozen=True)
class Profile:
    """A collaborator profile as presented in the discovery feed."""
    id: str
    name: str
    role: Role
    location: str = ""
    genres: frozenset[str] = dataclass_field(default_factory=frozenset)
    bio: str = ""
    rating: float = 0.0
    verified: bool = False
    highlights: tuple[MediaHighlight, ...] = ()

    def summary(self) -> str:
        """One-paragraph description used by the 'view profile' action."""
        genres = ", ".join(sorted(self.genres)) or "None listed"
        return (
            f"{self.name}\n\nRole: {self.role.value}\n"
            f"Location: {self.location or 'Unknown'}\nGenres: {genres}"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value,
            "location": self.location,
            "genres": sorted(self.genres),
            "bio": self.bio,
            "rating": self.rating,
            "verified": self.verified,
            "highlights": [h.to_dict() for h in self.highlights],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Profile":
        """Create from dictionary.

        Raises:
            MalformedRecordError: If a required field is missing or a field
                has the wrong type
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordError("Profile record must be a mapping")

        role_value = _require_str(data, "role")
        try:
            role = Role(role_value.lower())
        except ValueError as e:
            raise MalformedRecordError(f"Unknown role: {role_value!r}") from e

        genres = data.get("genres") or []
        if isinstance(genres, str) or not isinstance(genres, (list, tuple, set, frozenset)):
            raise MalformedRecordError("'genres' must be a list of strings")
        if not all(isinstance(g, str) for g in genres):
            raise MalformedRecordError("'genres' must be a list of strings")

        rating = data.get("rating", 0.0)
        if rating is None:
            rating = 0.0
        if isinstance(rating, bool) or not isinstance(rating, (int, float)) or rating < 0:
            raise MalformedRecordError(f"Invalid rating: {rating!r}")

        verified = data.get("verified", False)
        if not isinstance(verified, bool):
            raise MalformedRecordError("'verified' must be a boolean")

        highlights = data.get("highlights") or []
        if not isinstance(highlights, (list, tuple)):
            raise MalformedRecordError("'highlights' must be a list")

        return cls(
            id=_require_str(data, "id"),
            name=_require_str(data, "name"),
            role=role,
            location=_optional_str(data, "location"),
            genres=frozenset(genres),
            bio=_optional_str(data, "bio"),
            rating=float(rating),
            verified=verified,
            highlights=tuple(MediaHighlight.from_dict(h) for h in highlights),
        )


def _check_profile(profile: Profile) -> None:
    """Apply the from_dict rules to a profile built directly."""
    for key in ("id", "name"):
        value = getattr(profile, key)
        if not isinstance(value, str) or not value.strip():
            raise MalformedRecordError(f"Missing or invalid '{key}'")
    if not isinstance(profile.role, Role):
        raise MalformedRecordError(f"Unknown role: {profile.role!r}")
    if not isinstance(profile.location, str):
        raise MalformedRecordError("'location' must be a string")
    if not isinstance(profile.genres, frozenset) or not all(isinstance(g, str) for g in profile.genres):
        raise MalformedRecordError("'genres' must be a frozenset of strings")


def coerce_profile(record: Profile | Mapping[str, Any] | None) -> Profile:
    """Return a Profile for either a parsed profile or a raw record.

    Raises:
        MalformedRecordError: If the record is missing or cannot be parsed
    """
    if isinstance(record, Profile):
        _check_profile(record)
        return record
    if record is None:
        raise MalformedRecordError("Profile record is missing")
    return Profile.from_dict(record)
