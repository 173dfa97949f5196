"""Exception hierarchy shared by the models and services."""

from __future__ import annotations


class CollabSwipeError(Exception):
    """Base class for all errors raised by this package."""
    pass


class MalformedRecordError(CollabSwipeError):
    """Raised when a raw profile or match record cannot be parsed."""
    pass


class SessionLoadError(CollabSwipeError):
    """Raised when a discovery session cannot be bootstrapped."""
    pass


class ProfileFetchError(SessionLoadError):
    """Raised when the viewer profile could not be fetched. Retryable."""
    pass


class ViewerNotFoundError(SessionLoadError):
    """Raised when no viewer profile exists; the user must set one up."""
    pass


class SessionTimeoutError(SessionLoadError):
    """Raised when the whole load exceeded its time budget."""
    pass


class MatchStoreError(CollabSwipeError):
    """Raised by match stores when reading or writing fails."""
    pass


class QuotaGateError(CollabSwipeError):
    """Raised by quota gates when the quota cannot be checked or consumed."""
    pass


class StaleCandidateError(CollabSwipeError):
    """Raised when a decision targets a card that is no longer showing."""
    pass


class SessionNotLoadedError(CollabSwipeError):
    """Raised when the session is used before load_session()."""
    pass
