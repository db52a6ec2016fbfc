"""
ID and name validation shared by every entity in a competition.

IDs are 1-100 ASCII printable characters, excluding the characters used by the
team reference grammar. Names and other free text fields are 1-1000
characters long.
"""

import re

from vbcompetitions.competition_core.exceptions import InvalidIDError

UNKNOWN_TEAM_ID = "UNKNOWN"
UNKNOWN_TEAM_NAME = "UNKNOWN"

MAX_ID_LENGTH = 100
MAX_NAME_LENGTH = 1000

ID_PATTERN = re.compile(r'^((?![":{}?=])[\x20-\x7F])+$')


def validate_id(value: str, kind: str = "team") -> str:
    """
    Check an entity ID, returning it unchanged when valid.

    Args:
        value: The ID to check
        kind: The entity kind used in the error message, e.g. "team" or "stage"

    Raises:
        InvalidIDError: The ID is too short, too long, or uses reserved characters
    """
    if not isinstance(value, str) or len(value) < 1 or len(value) > MAX_ID_LENGTH:
        raise InvalidIDError(
            f"Invalid {kind} ID: must be between 1 and {MAX_ID_LENGTH} characters long"
        )
    if not ID_PATTERN.match(value):
        raise InvalidIDError(
            f'Invalid {kind} ID: must contain only ASCII printable characters excluding " : {{ }} ? ='
        )
    return value


def validate_text(value: str, what: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Check a name or other free text field is 1 to max_length characters long."""
    if not isinstance(value, str) or len(value) < 1 or len(value) > max_length:
        raise InvalidIDError(
            f"Invalid {what}: must be between 1 and {max_length} characters long"
        )
    return value


def is_reference(team_id: str) -> bool:
    """Whether a team ID is a reference (or ternary) rather than a literal ID."""
    return team_id.startswith("{")
