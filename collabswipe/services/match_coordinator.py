"""Match Coordinator - One full decision cycle.

This module handles:
- Passing on a candidate (free and unlimited)
- Checking and consuming the accept quota
- Persisting the match and advancing the feed

Interface Contract:
- decide(viewer_id, candidate, decision) -> DecisionResult
- The cursor advances exactly once per cycle, except when the quota gate
  refuses the accept, in which case it does not move at all
- A quota unit spent on a failed write is not refunded
"""

from __future__ import annotations

import logging

from collabswipe.errors import StaleCandidateError
from collabswipe.models import (
    DecisionResult,
    Match,
    Matched,
    PersistenceFailed,
    Profile,
    QuotaExceeded,
    Skipped,
    SwipeDecision,
)
from collabswipe.services.feed_service import DiscoveryFeed
from collabswipe.services.stores import MatchStore, QuotaGate

logger = logging.getLogger(__name__)

QUOTA_CHECK_FAILED = "Unable to check limits"
QUOTA_CONSUME_FAILED = "Unable to record like"


class MatchCoordinator:
    """Orchestrates quota, persistence and cursor movement for a feed."""

    def __init__(self, feed: DiscoveryFeed, quota_gate: QuotaGate, match_store: MatchStore):
        self.feed = feed
        self._quota = quota_gate
        self._matches = match_store

    async def decide(
        self,
        viewer_id: str,
        candidate: Profile,
        decision: SwipeDecision,
    ) -> DecisionResult:
        """Run one decision cycle for the candidate currently showing.

        Args:
            viewer_id: Id of the profile doing the swiping
            candidate: The feed's current candidate
            decision: The committed decision

        Returns:
            DecisionResult: Skipped, Matched, QuotaExceeded or PersistenceFailed

        Raises:
            StaleCandidateError: If ``candidate`` is not the current candidate
        """
        current = self.feed.current()
        if current is None or current.id != candidate.id:
            raise StaleCandidateError(
                f"Candidate {candidate.id} is not the one currently showing"
            )

        if not decision.is_accept:
            self.feed.advance()
            logger.info("[decide] viewer=%s passed on %s", viewer_id, candidate.id)
            return Skipped()

        try:
            quota = await self._quota.can_accept_now()
        except Exception as e:
            logger.error("[decide] quota check failed: %s", e)
            return QuotaExceeded(reason=QUOTA_CHECK_FAILED)
        if not quota.allowed:
            logger.info("[decide] viewer=%s blocked by quota: %s", viewer_id, quota.reason)
            return QuotaExceeded(reason=quota.reason or "Like limit reached")

        try:
            await self._quota.consume_one()
        except Exception as e:
            logger.error("[decide] quota consumption failed: %s", e)
            return QuotaExceeded(reason=QUOTA_CONSUME_FAILED)

        match = Match.create(viewer_id, candidate.id)
        try:
            await self._matches.add_match(match)
        except Exception as e:
            # Candidate is consumed even though the write failed.
            self.feed.advance()
            logger.error("[decide] failed to store match %s: %s", match.id, e)
            return PersistenceFailed(match=match, error=str(e))

        self.feed.advance()
        logger.info(
            "[decide] viewer=%s matched with %s (%s)",
            viewer_id, candidate.id, decision.value,
        )
        return Matched(match=match)
