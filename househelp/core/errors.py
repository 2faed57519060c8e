"""Error taxonomy for the matching engine.

An empty match list is not an error: callers receive ``[]`` and can render
"no matches" rather than a failure.
"""


class MatchingError(Exception):
    """Base class for every error raised by the matching engine."""


class ValidationError(MatchingError, ValueError):
    """Request rejected before any store call (empty services, bad radius, ...)."""


class RetrievalError(MatchingError):
    """A candidate or history store call failed. Never retried internally."""
