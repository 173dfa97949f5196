"""Compatibility Service - Closed-form collaborator scoring.

This module handles:
- Scoring a candidate against the viewer on a 0-100 scale
- Explaining how each term contributed to the score

Interface Contract:
- score(viewer, candidate) -> int in [0, 100]
- explain(viewer, candidate) -> CompatibilityBreakdown
- Never raises: malformed or missing profiles score a neutral 50
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from collabswipe.errors import MalformedRecordError
from collabswipe.models import Profile, Role, coerce_profile

logger = logging.getLogger(__name__)

BASE_SCORE = 50
NEUTRAL_SCORE = 50
GENRE_WEIGHT = 40
COMPLEMENTARY_ROLE_BONUS = 30
SAME_ROLE_BONUS = 15
SAME_LOCATION_BONUS = 20

COMPLEMENTARY_ROLES = frozenset(
    frozenset(pair)
    for pair in (
        (Role.PRODUCER, Role.VOCALIST),
        (Role.PRODUCER, Role.SONGWRITER),
        (Role.PRODUCER, Role.INSTRUMENTALIST),
        (Role.PRODUCER, Role.MIXER),
        (Role.VOCALIST, Role.SONGWRITER),
        (Role.VOCALIST, Role.INSTRUMENTALIST),
        (Role.SONGWRITER, Role.INSTRUMENTALIST),
        (Role.AR, Role.PRODUCER),
        (Role.AR, Role.VOCALIST),
    )
)

ProfileLike = Profile | Mapping[str, Any] | None


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass
class CompatibilityBreakdown:
    """Per-term contributions to a compatibility score."""
    genre: float = 0.0
    role: float = 0.0
    location: float = 0.0
    shared_genres: list[str] = field(default_factory=list)
    total: int = NEUTRAL_SCORE
    fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "genre": round(self.genre, 2),
            "role": self.role,
            "location": self.location,
            "shared_genres": self.shared_genres,
            "total": self.total,
            "fallback": self.fallback,
        }


def genre_term(viewer: Profile, candidate: Profile) -> float:
    if not viewer.genres or not candidate.genres:
        return 0.0
    shared = len(viewer.genres & candidate.genres)
    denominator = max(len(viewer.genres), len(candidate.genres), 1)
    return _clamp(shared / denominator * GENRE_WEIGHT, 0, GENRE_WEIGHT)


def role_term(viewer: Profile, candidate: Profile) -> float:
    if frozenset((viewer.role, candidate.role)) in COMPLEMENTARY_ROLES:
        return COMPLEMENTARY_ROLE_BONUS
    if viewer.role == candidate.role:
        return SAME_ROLE_BONUS
    return 0


def location_term(viewer: Profile, candidate: Profile) -> float:
    # Exact, case-sensitive comparison. An empty location is unknown and never matches.
    if viewer.location and viewer.location == candidate.location:
        return SAME_LOCATION_BONUS
    return 0


def explain(viewer: ProfileLike, candidate: ProfileLike) -> CompatibilityBreakdown:
    """Break a compatibility score down into its terms.

    Args:
        viewer: The profile doing the swiping
        candidate: The profile being shown

    Returns:
        CompatibilityBreakdown: Term values and the clamped, rounded total.
            ``fallback`` is True when either profile was unusable.
    """
    try:
        viewer_profile = coerce_profile(viewer)
        candidate_profile = coerce_profile(candidate)
    except MalformedRecordError as e:
        logger.debug("[score] neutral fallback: %s", e)
        return CompatibilityBreakdown(fallback=True)

    breakdown = CompatibilityBreakdown(
        genre=genre_term(viewer_profile, candidate_profile),
        role=role_term(viewer_profile, candidate_profile),
        location=location_term(viewer_profile, candidate_profile),
        shared_genres=sorted(viewer_profile.genres & candidate_profile.genres),
    )
    total = BASE_SCORE + breakdown.genre + breakdown.role + breakdown.location
    # Halves round up.
    breakdown.total = int(math.floor(_clamp(total, 0, 100) + 0.5))
    return breakdown


def score(viewer: ProfileLike, candidate: ProfileLike) -> int:
    """Compatibility of ``candidate`` for ``viewer`` in [0, 100]."""
    return explain(viewer, candidate).total
