"""Session Loader - Resilient discovery session bootstrap.

This module handles:
- Fetching the viewer profile with bounded retry and backoff
- Fetching the profile and match pools on a best-effort basis
- Bounding the whole load with a single timeout

Interface Contract:
- load() -> LoadedSession
- Raises ViewerNotFoundError when there is no viewer profile
- Raises ProfileFetchError when the viewer fetch keeps failing
- Raises SessionTimeoutError when the load runs past its budget
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from config import PROFILE_FETCH_ATTEMPTS, PROFILE_FETCH_BACKOFF, SESSION_LOAD_TIMEOUT
from collabswipe.errors import (
    MalformedRecordError,
    ProfileFetchError,
    SessionTimeoutError,
    ViewerNotFoundError,
)
from collabswipe.models import Profile, coerce_profile
from collabswipe.services.feed_service import DiscoveryFeed, FeedBuilder
from collabswipe.services.stores import MatchStore, ProfileSource

logger = logging.getLogger(__name__)


@dataclass
class LoadedSession:
    """Everything a discovery session needs to start swiping."""
    viewer: Profile
    feed: DiscoveryFeed


class SessionLoader:
    """Bootstraps a discovery session from the external stores."""

    def __init__(
        self,
        profile_source: ProfileSource,
        match_store: MatchStore,
        *,
        feed_builder: FeedBuilder | None = None,
        max_attempts: int = PROFILE_FETCH_ATTEMPTS,
        backoff: float = PROFILE_FETCH_BACKOFF,
        timeout: float = SESSION_LOAD_TIMEOUT,
    ):
        """Initialize with store dependencies.

        Args:
            profile_source: Source of the viewer profile and candidate pool
            match_store: Source of existing matches
            feed_builder: Feed builder. If None, creates default.
            max_attempts: Viewer fetch attempts before giving up
            backoff: Base delay in seconds; doubles after every failed attempt
            timeout: Budget in seconds for the whole load
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._profiles = profile_source
        self._matches = match_store
        self._feed_builder = feed_builder or FeedBuilder()
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.timeout = timeout

    async def load(self) -> LoadedSession:
        """Load the viewer and build a fresh feed.

        Returns:
            LoadedSession: The viewer profile and its discovery feed

        Raises:
            ViewerNotFoundError: If the viewer has no profile
            ProfileFetchError: If every viewer fetch attempt failed
            SessionTimeoutError: If the load exceeded ``timeout``
        """
        try:
            return await asyncio.wait_for(self._load(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning("[load] timed out after %.1fs", self.timeout)
            raise SessionTimeoutError(
                f"Loading took longer than {self.timeout:g}s. Please try again."
            ) from e

    async def _load(self) -> LoadedSession:
        viewer = await self._fetch_viewer()
        profiles, matches = await asyncio.gather(
            self._best_effort("profiles", self._profiles.get_all_profiles),
            self._best_effort("matches", self._matches.get_matches),
        )
        feed = self._feed_builder.build(viewer.id, profiles, matches)
        logger.info("[load] viewer=%s feed=%d", viewer.id, len(feed))
        return LoadedSession(viewer=viewer, feed=feed)

    async def _fetch_viewer(self) -> Profile:
        for attempt in range(1, self.max_attempts + 1):
            try:
                record = await self._profiles.get_current_profile()
            except MalformedRecordError as e:
                raise ViewerNotFoundError("Your profile is incomplete") from e
            except Exception as e:
                logger.warning(
                    "[load] viewer fetch attempt %d/%d failed: %s",
                    attempt, self.max_attempts, e,
                )
                if attempt == self.max_attempts:
                    raise ProfileFetchError(f"Failed to load your profile: {e}") from e
            else:
                if record is not None:
                    try:
                        return coerce_profile(record)
                    except MalformedRecordError as e:
                        raise ViewerNotFoundError("Your profile is incomplete") from e
                logger.info("[load] no viewer profile on attempt %d/%d", attempt, self.max_attempts)
            if attempt < self.max_attempts:
                await asyncio.sleep(self.backoff * 2 ** (attempt - 1))
        raise ViewerNotFoundError("Please complete your profile first.")

    async def _best_effort(
        self,
        label: str,
        fetch: Callable[[], Awaitable[list[Any]]],
    ) -> list[Any]:
        try:
            records = await fetch()
        except Exception as e:
            logger.warning("[load] %s unavailable, continuing without them: %s", label, e)
            return []
        return list(records or [])
