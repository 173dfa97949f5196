"""CollabSwipe - swipe-based discovery and matching for music collaborators."""

from .models import Match, Profile, SwipeDecision
from .services import DiscoverySession, FeedBuilder, SwipeController
from .services.compatibility_service import score

__version__ = "0.1.0"

__all__ = [
    "Profile",
    "Match",
    "SwipeDecision",
    "DiscoverySession",
    "FeedBuilder",
    "SwipeController",
    "score",
]
