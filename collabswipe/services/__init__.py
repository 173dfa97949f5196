"""Service layer - Business logic modules.

Each service module has a clear interface and can be developed/tested independently.
"""

from .feed_service import DiscoveryFeed, FeedBuilder
from .swipe_controller import SwipeController, SwipeState
from .session_loader import LoadedSession, SessionLoader
from .match_coordinator import MatchCoordinator
from .discovery_session import DiscoverySession
from .stores import (
    DailyQuotaGate,
    InMemoryMatchStore,
    InMemoryProfileSource,
    MatchStore,
    ProfileSource,
    QuotaGate,
)

__all__ = [
    "DiscoveryFeed",
    "FeedBuilder",
    "SwipeController",
    "SwipeState",
    "LoadedSession",
    "SessionLoader",
    "MatchCoordinator",
    "DiscoverySession",
    "DailyQuotaGate",
    "InMemoryMatchStore",
    "InMemoryProfileSource",
    "MatchStore",
    "ProfileSource",
    "QuotaGate",
]
