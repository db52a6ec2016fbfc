"""
Exceptions raised by the competition core.

Every error raised while building, loading or querying a competition derives
from CompetitionError, so callers such as the document layer and the command
line can catch them with a single except clause. The concrete classes also
derive from the matching built-in exception, which keeps ``except ValueError``
and ``except LookupError`` working for callers that do not know about them.
"""


class CompetitionError(Exception):
    """Base exception for all competition errors."""

    pass


# ========== Structure ==========


class StructureError(CompetitionError, ValueError):
    """Raised when the competition structure is invalid, e.g. duplicate IDs."""

    pass


class InvalidIDError(StructureError):
    """Raised when an ID or name fails the length or character rules."""

    pass


class NotFoundError(CompetitionError, LookupError):
    """Raised when looking up an entity by an ID that does not exist."""

    pass


# ========== References ==========


class TeamReferenceError(CompetitionError, ValueError):
    """Raised when a team ID or team reference is malformed or invalid."""

    pass


# ========== Match state ==========


class ScoreError(CompetitionError, ValueError):
    """Raised when scores are invalid for a match or its group configuration."""

    pass


class MatchResultError(CompetitionError):
    """Raised when querying a match result that does not exist yet."""

    pass


# ========== Documents ==========


class DocumentError(CompetitionError):
    """Raised when a competition document cannot be read, parsed or written."""

    pass
