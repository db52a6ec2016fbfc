"""
Parsing, validation and resolution of team references.

A team is named in a match either by its literal ID or by a reference to the
outcome of another part of the competition:

    {STAGE:GROUP:league:POSITION}      the team in a league position
    {STAGE:GROUP:MATCH:winner|loser}   the winner or loser of a match
    LEFT==RIGHT?TRUE:FALSE             TRUE when LEFT and RIGHT resolve to
                                       the same team, otherwise FALSE

LEFT and RIGHT must be references. Each branch is a literal ID or a reference.

Validation (validate_team_id) is strict and reports the first bad fragment.
Resolution (resolve_team_id) returns UNKNOWN_TEAM_ID for any well-formed
reference that cannot be resolved yet, and raises only for malformed ones.
"""

import logging
import re
from typing import Dict, List, Optional
from dataclasses import dataclass

from vbcompetitions.competition_core.exceptions import CompetitionError, TeamReferenceError
from vbcompetitions.competition_core.identifiers import UNKNOWN_TEAM_ID, is_reference

logger = logging.getLogger(__name__)

LEAGUE_TYPE = "league"
MATCH_RESULTS = ("winner", "loser")

# Bound on chained references (a winner that is itself a reference, ...)
MAX_REFERENCE_DEPTH = 32

REFERENCE_PATTERN = re.compile(r"^\{([^:{}]*):([^:{}]*):([^:{}]*):([^:{}]*)\}$")
TERNARY_PATTERN = re.compile(r"^([^=]*)==([^?]*)\?(.*)$")
BRANCH_REFERENCE_PATTERN = re.compile(r"^(\{[^}]*\}):(.*)$")
BRANCH_LITERAL_PATTERN = re.compile(r"^([^:]*):(.*)$")
UNCLOSED_REFERENCE_PATTERN = re.compile(r"^\{[^}]*$")
INTEGER_PATTERN = re.compile(r"^-?[0-9]+$")


@dataclass(frozen=True)
class TeamReference:
    """A parsed {STAGE:GROUP:TYPE:ENTITY} reference."""

    text: str
    stage_id: str
    group_id: str
    type: str
    entity: str

    @property
    def is_league_position(self) -> bool:
        return self.type == LEAGUE_TYPE


@dataclass(frozen=True)
class Ternary:
    """The four raw parts of a LEFT==RIGHT?TRUE:FALSE reference."""

    left: str
    right: str
    true_branch: Optional[str]
    false_branch: Optional[str]
    branches: str


def parse_reference(text: str) -> TeamReference:
    """
    Parse a {STAGE:GROUP:TYPE:ENTITY} reference.

    Raises:
        TeamReferenceError: The text is not of that form
    """
    match = REFERENCE_PATTERN.match(text)
    if match is None:
        raise TeamReferenceError(
            f'Invalid team reference format "{text}", '
            'must be "{STAGE-ID:GROUP-ID:TYPE-INDICATOR:ENTITY-INDICATOR}"'
        )
    return TeamReference(text, *match.groups())


def split_ternary(text: str) -> Optional[Ternary]:
    """
    Split a ternary reference into its parts, or return None if it is not one.

    The true branch is a reference when the branches start with "{", and a
    literal ID otherwise. When the branches have no ":" separator both
    branches are None.
    """
    match = TERNARY_PATTERN.match(text)
    if match is None:
        return None
    left, right, branches = match.groups()
    branch_match = BRANCH_REFERENCE_PATTERN.match(branches) or BRANCH_LITERAL_PATTERN.match(
        branches
    )
    if branch_match is None:
        return Ternary(left, right, None, None, branches)
    return Ternary(left, right, branch_match.group(1), branch_match.group(2), branches)


def _check_position(reference: TeamReference) -> int:
    entity = reference.entity
    if not INTEGER_PATTERN.match(entity) or str(int(entity)) != entity:
        raise TeamReferenceError("Invalid League position: reference must be an integer")
    position = int(entity)
    if position < 1:
        raise TeamReferenceError("Invalid League position: reference must be a positive integer")
    return position


def _check_match_result(reference: TeamReference):
    if reference.entity not in MATCH_RESULTS:
        raise TeamReferenceError(
            f"Invalid Match result in reference {reference.text}: "
            'reference must be one of "winner"|"loser" in stage:group:match with IDs '
            f'"{reference.stage_id}:{reference.group_id}:{reference.type}"'
        )


def validate_team_reference(competition, text: str) -> TeamReference:
    """
    Check a single {STAGE:GROUP:TYPE:ENTITY} reference against a competition.

    The stage, group and match must exist, a league position must be a
    positive integer, and once all teams in a league are known the position
    must not be beyond the number of teams.
    """
    reference = parse_reference(text)

    if not competition.has_stage(reference.stage_id):
        raise TeamReferenceError(
            f'Invalid Stage part: Stage with ID "{reference.stage_id}" does not exist'
        )
    stage = competition.get_stage_by_id(reference.stage_id)

    if not stage.has_group(reference.group_id):
        raise TeamReferenceError(
            f'Invalid Group part: Group with ID "{reference.group_id}" does not exist in stage '
            f'with ID "{reference.stage_id}"'
        )
    group = stage.get_group_by_id(reference.group_id)

    if reference.is_league_position:
        position = _check_position(reference)
        if not group.is_league:
            raise TeamReferenceError(
                'Invalid type "league" in team reference. '
                "Cannot get league position from a non-league group"
            )
        if group.all_teams_known() and position > len(group.league_table().entries):
            raise TeamReferenceError(
                "Invalid League position: position is bigger than the number of teams"
            )
    else:
        if not group.has_match(reference.type):
            raise TeamReferenceError(
                f'Invalid Match part in reference {text} : Match with ID "{reference.type}" '
                f'does not exist in stage:group with IDs "{reference.stage_id}:{reference.group_id}"'
            )
        _check_match_result(reference)

    return reference


def validate_team_exists(competition, team_id: str):
    if not competition.has_team(team_id):
        raise TeamReferenceError(f'Team with ID "{team_id}" does not exist')


def _validate_branch(competition, branch: str):
    if is_reference(branch):
        validate_team_reference(competition, branch)
    else:
        validate_team_exists(competition, branch)


def _missing_false_branch(competition, branches: str):
    raise TeamReferenceError(f'Invalid ternary branches "{branches}", must be "TRUE-TEAM:FALSE-TEAM"')


def validate_team_id(competition, team_id: str, match_id: str, field: str):
    """
    Validate a team ID, team reference or ternary as used in a match.

    Args:
        competition: The competition the match belongs to
        team_id: The raw team ID as written in the match
        match_id: The match ID, for error messages
        field: The field being checked, e.g. "homeTeam" or "officials > team"

    Raises:
        TeamReferenceError: The team ID is invalid. Errors for literal IDs and
            ternary parts wrap the underlying error as their cause.
    """
    if not is_reference(team_id):
        try:
            validate_team_exists(competition, team_id)
        except CompetitionError as err:
            raise TeamReferenceError(
                f'Invalid team ID for {field} in match with ID "{match_id}"'
            ) from err
        return

    ternary = split_ternary(team_id)
    if ternary is not None:
        parts = [
            ("left part", ternary.left, validate_team_reference),
            ("right part", ternary.right, validate_team_reference),
        ]
        if ternary.true_branch is None:
            parts.append(("true team", ternary.branches, _missing_false_branch))
        else:
            parts.append(("true team", ternary.true_branch, _validate_branch))
            parts.append(("false team", ternary.false_branch, _validate_branch))

        for role, fragment, check in parts:
            try:
                check(competition, fragment)
            except CompetitionError as err:
                raise TeamReferenceError(
                    f'Invalid ternary {role} reference for {field} in match with ID "{match_id}": '
                    f'"{fragment}"'
                ) from err
        return

    if UNCLOSED_REFERENCE_PATTERN.match(team_id):
        raise TeamReferenceError(
            f'Invalid team reference for {field} in match with ID "{match_id}": "{team_id}"'
        )

    validate_team_reference(competition, team_id)


def _resolve_reference(competition, reference: TeamReference, depth: int) -> str:
    if reference.is_league_position:
        position = _check_position(reference)
    else:
        _check_match_result(reference)

    if not competition.has_stage(reference.stage_id):
        return UNKNOWN_TEAM_ID
    stage = competition.get_stage_by_id(reference.stage_id)
    if not stage.has_group(reference.group_id):
        return UNKNOWN_TEAM_ID
    group = stage.get_group_by_id(reference.group_id)

    if reference.is_league_position:
        if not group.is_league or not group.is_complete():
            logger.debug("League for %s is not complete", reference.text)
            return UNKNOWN_TEAM_ID
        entries = group.league_table().entries
        if position > len(entries):
            return UNKNOWN_TEAM_ID
        return resolve_team_id(competition, entries[position - 1].team_id, depth + 1)

    if not group.has_match(reference.type):
        return UNKNOWN_TEAM_ID
    match = group.get_match(reference.type)
    if not match.is_complete() or match.is_draw():
        logger.debug("Match for %s has no result yet", reference.text)
        return UNKNOWN_TEAM_ID
    if reference.entity == "winner":
        team_id = match.get_winner_team_id()
    else:
        team_id = match.get_loser_team_id()
    return resolve_team_id(competition, team_id, depth + 1)


def _parse_ternary_part(text: str, role: str) -> TeamReference:
    try:
        return parse_reference(text)
    except TeamReferenceError as err:
        raise TeamReferenceError(f'Invalid ternary {role} reference: "{text}"') from err


def resolve_team_id(competition, team_id: str, depth: int = 0) -> str:
    """
    Resolve a team ID, reference or ternary to a team ID.

    Returns:
        The ID of a team in the competition, or UNKNOWN_TEAM_ID when the team
        cannot be determined yet

    Raises:
        TeamReferenceError: The reference is malformed
    """
    if depth > MAX_REFERENCE_DEPTH:
        logger.debug("Reference chain too deep at %s", team_id)
        return UNKNOWN_TEAM_ID

    if not is_reference(team_id):
        return team_id if competition.has_team(team_id) else UNKNOWN_TEAM_ID

    ternary = split_ternary(team_id)
    if ternary is not None:
        left = _parse_ternary_part(ternary.left, "left part")
        right = _parse_ternary_part(ternary.right, "right part")
        if ternary.true_branch is None:
            raise TeamReferenceError(f'Invalid ternary true team reference: "{ternary.branches}"')
        for role, branch in (("true team", ternary.true_branch), ("false team", ternary.false_branch)):
            if is_reference(branch):
                _parse_ternary_part(branch, role)

        left_id = _resolve_reference(competition, left, depth + 1)
        right_id = _resolve_reference(competition, right, depth + 1)
        if left_id == UNKNOWN_TEAM_ID or right_id == UNKNOWN_TEAM_ID:
            return UNKNOWN_TEAM_ID
        branch = ternary.true_branch if left_id == right_id else ternary.false_branch
        return resolve_team_id(competition, branch, depth + 1)

    return _resolve_reference(competition, parse_reference(team_id), depth)


def strip_team_references(team_id: str) -> List[str]:
    """
    List the {STAGE:GROUP:TYPE:ENTITY} fragments used by a team ID.

    Never raises: fragments are returned as written, even when malformed.
    """
    if not is_reference(team_id):
        return []
    ternary = split_ternary(team_id)
    if ternary is None:
        return [team_id]

    references = []
    candidates = [ternary.left, ternary.right]
    if ternary.true_branch is not None:
        candidates.extend([ternary.true_branch, ternary.false_branch])
    for candidate in candidates:
        if is_reference(candidate) and candidate not in references:
            references.append(candidate)
    return references


def group_reference_fragments(group) -> List[str]:
    """Every reference fragment used by the playing and officiating teams of a group."""
    fragments = []
    for match in group.matches:
        for team_id in match.team_ids():
            for fragment in strip_team_references(team_id):
                if fragment not in fragments:
                    fragments.append(fragment)
    return fragments


def _referenced_groups(group, visited: Dict[str, int], depth: int):
    competition = group.competition
    for fragment in group_reference_fragments(group):
        # Only revisit a reference when reaching it by a shorter path
        if fragment in visited and visited[fragment] <= depth:
            continue
        visited[fragment] = depth
        match = REFERENCE_PATTERN.match(fragment)
        if match is None:
            continue
        stage_id, group_id = match.group(1), match.group(2)
        if not competition.has_stage(stage_id):
            continue
        stage = competition.get_stage_by_id(stage_id)
        if not stage.has_group(group_id):
            continue
        yield stage.get_group_by_id(group_id)


def team_may_have_matches(
    group, team_id: str, visited: Optional[Dict[str, int]] = None, depth: int = 0
) -> bool:
    """
    Whether a chain of unresolved references could bring a team into a group.

    This only checks that a path exists from a group the team plays in to this
    group, not that the team can still finish in a qualifying place. A
    complete group has no unresolved references, so the answer is False and
    Group.team_has_matches gives the definite answer. Cycles, malformed
    references and chains deeper than MAX_REFERENCE_DEPTH answer False.
    """
    if depth > MAX_REFERENCE_DEPTH or group.is_complete():
        return False
    if not group.competition.has_team(team_id):
        return False
    if visited is None:
        visited = {}

    for source in _referenced_groups(group, visited, depth):
        if not source.is_complete() and source.team_has_matches(team_id):
            return True
        if source is not group and team_may_have_matches(source, team_id, visited, depth + 1):
            return True
    return False


def maybe_team_ids(
    group, visited: Optional[Dict[str, int]] = None, depth: int = 0
) -> List[str]:
    """
    Team IDs that might still reach a group through unresolved references.
    """
    if depth > MAX_REFERENCE_DEPTH or group.is_complete():
        return []
    if visited is None:
        visited = {}

    team_ids: List[str] = []
    for source in _referenced_groups(group, visited, depth):
        if source.is_complete():
            continue
        candidates = list(source.known_team_ids())
        if source is not group:
            candidates.extend(maybe_team_ids(source, visited, depth + 1))
        for team_id in candidates:
            if team_id not in team_ids:
                team_ids.append(team_id)
    return team_ids
