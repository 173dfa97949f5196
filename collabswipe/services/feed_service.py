"""Feed Service - Discovery feed construction.

This module handles:
- Excluding the viewer and everyone already matched with the viewer
- Dropping malformed profile and match records
- De-duplicating profiles while keeping source order

Interface Contract:
- FeedBuilder.build(viewer_id, all_profiles, all_matches) -> DiscoveryFeed
- Never raises because of a bad record; an empty feed is a normal result
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from collabswipe.errors import MalformedRecordError
from collabswipe.models import Match, Profile, coerce_match, coerce_profile

logger = logging.getLogger(__name__)


class DiscoveryFeed:
    """Ordered candidate queue with a cursor.

    Only the match coordinator is expected to call ``advance()``.
    """

    def __init__(self, profiles: Iterable[Profile] = ()):
        self._profiles: tuple[Profile, ...] = tuple(profiles)
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def profiles(self) -> tuple[Profile, ...]:
        return self._profiles

    @property
    def remaining(self) -> int:
        return max(len(self._profiles) - self._cursor, 0)

    @property
    def is_exhausted(self) -> bool:
        return self._cursor >= len(self._profiles)

    def current(self) -> Profile | None:
        """The candidate at the cursor, or None once the feed is used up."""
        if self.is_exhausted:
            return None
        return self._profiles[self._cursor]

    def advance(self) -> Profile | None:
        """Move the cursor forward by one and return the new candidate."""
        if not self.is_exhausted:
            self._cursor += 1
        return self.current()

    def restart(self) -> None:
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._profiles)

    def __iter__(self) -> Iterator[Profile]:
        return iter(self._profiles[self._cursor:])

    def __repr__(self) -> str:
        return f"DiscoveryFeed(size={len(self._profiles)}, cursor={self._cursor})"


def matched_ids_for(viewer_id: str, matches: Iterable[Match | Mapping[str, Any]]) -> set[str]:
    """Ids of everyone already paired with ``viewer_id``."""
    matched: set[str] = set()
    for record in matches:
        try:
            match = coerce_match(record)
        except MalformedRecordError as e:
            logger.debug("[feed] dropped match record: %s", e)
            continue
        if match.involves(viewer_id):
            matched.add(match.other_party(viewer_id))
    return matched


class FeedBuilder:
    """Builds a fresh discovery feed for a viewer."""

    def build(
        self,
        viewer_id: str,
        all_profiles: Iterable[Profile | Mapping[str, Any]],
        all_matches: Iterable[Match | Mapping[str, Any]],
    ) -> DiscoveryFeed:
        """Build the discovery feed for ``viewer_id``.

        Args:
            viewer_id: Id of the profile doing the swiping
            all_profiles: Full candidate pool, parsed or raw
            all_matches: Every known match, parsed or raw

        Returns:
            DiscoveryFeed: Eligible candidates in source order
        """
        excluded = matched_ids_for(viewer_id, all_matches)
        excluded.add(viewer_id)

        seen: set[str] = set()
        eligible: list[Profile] = []
        dropped = 0
        for record in all_profiles:
            try:
                profile = coerce_profile(record)
            except MalformedRecordError as e:
                dropped += 1
                logger.debug("[feed] dropped profile record: %s", e)
                continue
            if profile.id in excluded or profile.id in seen:
                continue
            seen.add(profile.id)
            eligible.append(profile)

        logger.info(
            "[feed] viewer=%s candidates=%d excluded=%d malformed=%d",
            viewer_id, len(eligible), len(excluded), dropped,
        )
        return DiscoveryFeed(eligible)
