"""Swipe Controller - Gesture state machine.

Turns a continuous drag into at most one committed decision.

States::

    IDLE --start--> DRAGGING --end, |dx| > threshold--> COMMITTED --resolve--> IDLE
                             --end, |dx| <= threshold--> IDLE (cancelled)
    IDLE --press(decision)--> COMMITTED

While COMMITTED no new gesture or button press is accepted; the owner calls
``resolve()`` once the decision cycle's side effects have settled.
"""

from __future__ import annotations

import logging
from enum import Enum

from config import SWIPE_COMMIT_THRESHOLD
from collabswipe.models import SwipeDecision

logger = logging.getLogger(__name__)


class SwipeState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTED = "committed"


class SwipeController:
    """Pure gesture state machine for one card at a time."""

    def __init__(self, commit_threshold: float = SWIPE_COMMIT_THRESHOLD):
        if commit_threshold <= 0:
            raise ValueError("commit_threshold must be positive")
        self.commit_threshold = commit_threshold
        self._state = SwipeState.IDLE
        self._dx = 0.0
        self._dy = 0.0
        self._committed: SwipeDecision | None = None

    @property
    def state(self) -> SwipeState:
        return self._state

    @property
    def offset(self) -> tuple[float, float]:
        return (self._dx, self._dy)

    @property
    def committed_decision(self) -> SwipeDecision | None:
        return self._committed

    @property
    def is_busy(self) -> bool:
        return self._state is SwipeState.COMMITTED

    @property
    def progress(self) -> float:
        """How far the drag is towards committing, from 0.0 to 1.0."""
        return min(abs(self._dx) / self.commit_threshold, 1.0)

    @property
    def direction_hint(self) -> SwipeDecision | None:
        """The decision the current drag would commit to, if released now."""
        if self._state is not SwipeState.DRAGGING or not self._crosses_threshold():
            return None
        return self._direction()

    def start(self) -> bool:
        """Begin a drag. Returns False when the gesture is refused."""
        if self._state is not SwipeState.IDLE:
            logger.debug("[swipe] start ignored in state=%s", self._state.value)
            return False
        self._state = SwipeState.DRAGGING
        self._dx = self._dy = 0.0
        return True

    def update(self, dx: float, dy: float) -> None:
        """Record the cumulative offset since the drag started."""
        if self._state is not SwipeState.DRAGGING:
            return
        self._dx = float(dx)
        self._dy = float(dy)

    def end(self) -> SwipeDecision | None:
        """Release the drag.

        Returns:
            The committed decision, or None if the drag was cancelled or no
            drag was in progress
        """
        if self._state is not SwipeState.DRAGGING:
            return None
        if not self._crosses_threshold():
            logger.debug("[swipe] cancelled at dx=%.1f", self._dx)
            self._reset()
            return None
        return self._commit(self._direction())

    def press(self, decision: SwipeDecision) -> SwipeDecision | None:
        """Commit a decision from a button, bypassing the drag."""
        if self._state is not SwipeState.IDLE:
            logger.debug("[swipe] press %s ignored in state=%s", decision.value, self._state.value)
            return None
        return self._commit(decision)

    def resolve(self) -> None:
        """Mark the committed decision as processed and return to IDLE."""
        if self._state is SwipeState.COMMITTED:
            self._reset()

    def _crosses_threshold(self) -> bool:
        return abs(self._dx) > self.commit_threshold

    def _direction(self) -> SwipeDecision:
        return SwipeDecision.LIKE if self._dx > 0 else SwipeDecision.PASS

    def _commit(self, decision: SwipeDecision) -> SwipeDecision:
        self._state = SwipeState.COMMITTED
        self._committed = decision
        logger.debug("[swipe] committed %s", decision.value)
        return decision

    def _reset(self) -> None:
        self._state = SwipeState.IDLE
        self._dx = self._dy = 0.0
        self._committed = None
