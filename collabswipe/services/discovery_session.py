"""Discovery Session - The interface the presentation layer talks to.

One session per viewer. It owns the feed, the gesture state machine and the
match coordinator, and publishes every decision result to its listeners.

Interface Contract:
- load_session() / refresh() -> LoadedSession (raises SessionLoadError subclasses)
- current_candidate() -> Profile | None (None once the feed is exhausted)
- compatibility_of(candidate) -> int
- on_gesture_start(), on_gesture_sample(dx, dy), on_gesture_end()
- on_discrete_action(decision)
- subscribe(listener) -> unsubscribe callable
- close(): in-flight decision cycles still finish their writes, but their
  results are no longer delivered
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from config import SWIPE_COMMIT_THRESHOLD
from collabswipe.errors import SessionNotLoadedError
from collabswipe.models import DecisionResult, Profile, SwipeDecision
from collabswipe.services import compatibility_service
from collabswipe.services.feed_service import DiscoveryFeed
from collabswipe.services.match_coordinator import MatchCoordinator
from collabswipe.services.session_loader import LoadedSession, SessionLoader
from collabswipe.services.stores import MatchStore, ProfileSource, QuotaGate
from collabswipe.services.swipe_controller import SwipeController

logger = logging.getLogger(__name__)

DecisionListener = Callable[[DecisionResult], None]


class DiscoverySession:
    """A single viewer's swiping session."""

    def __init__(
        self,
        profile_source: ProfileSource,
        match_store: MatchStore,
        quota_gate: QuotaGate,
        *,
        loader: SessionLoader | None = None,
        controller: SwipeController | None = None,
        commit_threshold: float = SWIPE_COMMIT_THRESHOLD,
    ):
        """Initialize with store dependencies.

        Args:
            profile_source: Source of the viewer profile and candidate pool
            match_store: Where matches are read from and written to
            quota_gate: Daily accept quota
            loader: Session loader. If None, creates default over the stores.
            controller: Gesture state machine. If None, creates default.
            commit_threshold: Drag distance used by the default controller
        """
        self._loader = loader or SessionLoader(profile_source, match_store)
        self._controller = controller or SwipeController(commit_threshold)
        self._quota = quota_gate
        self._matches = match_store
        self._loaded: LoadedSession | None = None
        self._coordinator: MatchCoordinator | None = None
        self._listeners: list[DecisionListener] = []
        self._pending: set[asyncio.Task] = set()
        self._closed = False

    @property
    def controller(self) -> SwipeController:
        return self._controller

    @property
    def match_store(self) -> MatchStore:
        return self._matches

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def viewer(self) -> Profile:
        return self._require_loaded().viewer

    @property
    def feed(self) -> DiscoveryFeed:
        return self._require_loaded().feed

    @property
    def is_loaded(self) -> bool:
        return self._loaded is not None

    def _require_loaded(self) -> LoadedSession:
        if self._loaded is None:
            raise SessionNotLoadedError("Call load_session() first")
        return self._loaded

    async def load_session(self) -> LoadedSession:
        """Load the viewer and build a fresh feed, replacing any previous one."""
        loaded = await self._loader.load()
        self._loaded = loaded
        self._coordinator = MatchCoordinator(loaded.feed, self._quota, self._matches)
        return loaded

    async def refresh(self) -> LoadedSession:
        logger.info("[session] refreshing feed")
        return await self.load_session()

    def current_candidate(self) -> Profile | None:
        return self.feed.current()

    def compatibility_of(self, candidate: Profile) -> int:
        viewer = self._loaded.viewer if self._loaded else None
        return compatibility_service.score(viewer, candidate)

    def subscribe(self, listener: DecisionListener) -> Callable[[], None]:
        """Register a listener for decision results.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def on_gesture_start(self) -> bool:
        if self._closed or self.current_candidate() is None:
            return False
        return self._controller.start()

    def on_gesture_sample(self, dx: float, dy: float) -> None:
        self._controller.update(dx, dy)

    async def on_gesture_end(self) -> DecisionResult | None:
        """Release the drag and run the decision cycle if it committed."""
        decision = self._controller.end()
        if decision is None:
            return None
        if self._closed:
            self._controller.resolve()
            return None
        return await self._run_cycle(decision)

    async def on_discrete_action(self, decision: SwipeDecision) -> DecisionResult | None:
        """Apply a button press (pass, like or super-like) to the current card."""
        if self._closed or self.current_candidate() is None:
            return None
        if self._controller.press(decision) is None:
            return None
        return await self._run_cycle(decision)

    async def _run_cycle(self, decision: SwipeDecision) -> DecisionResult | None:
        loaded = self._require_loaded()
        coordinator = self._coordinator
        candidate = loaded.feed.current()
        if coordinator is None or candidate is None:
            self._controller.resolve()
            return None

        task = asyncio.ensure_future(coordinator.decide(loaded.viewer.id, candidate, decision))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        task.add_done_callback(lambda _: self._controller.resolve())

        # Writes run to completion even if the caller is cancelled.
        result = await asyncio.shield(task)
        self._controller.resolve()

        if self._closed:
            logger.info("[session] closed, dropping %s result", result.kind)
            return None
        self._publish(result)
        return result

    def _publish(self, result: DecisionResult) -> None:
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception:
                logger.exception("[session] decision listener failed")

    def close(self) -> None:
        """Tear the session down. In-flight writes still complete."""
        self._closed = True
        self._listeners.clear()

    async def drain(self) -> None:
        """Wait for any in-flight decision cycles to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
