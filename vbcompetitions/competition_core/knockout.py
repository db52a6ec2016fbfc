"""
Knockout configuration and final standings.

A knockout group declares its final standing as an ordered template of
positions, each filled by the winner or loser of a bracket match, e.g.

    1st -> {KO:CUP:FIN:winner}
    2nd -> {KO:CUP:FIN:loser}
    3rd -> {KO:CUP:PO:winner}

Positions whose match has not produced a result yet are left out of the
standing, so the standing grows as the bracket is played.
"""

from typing import List
from dataclasses import dataclass, field

from vbcompetitions.competition_core.identifiers import UNKNOWN_TEAM_ID


@dataclass(frozen=True)
class KnockoutPosition:
    """One row of a knockout standing template."""

    position: str
    id: str


@dataclass(frozen=True)
class KnockoutConfig:
    standing: List[KnockoutPosition] = field(default_factory=list)


@dataclass(frozen=True)
class KnockoutStanding:
    """A resolved position in a knockout's final standing."""

    position: str
    team_id: str


def calculate_knockout_standing(group) -> List[KnockoutStanding]:
    """
    Resolve a knockout group's standing template against the current results.

    Args:
        group: A knockout group

    Returns:
        The resolved positions in template order, skipping any position whose
        match is incomplete or drawn. Groups without a knockout configuration
        have an empty standing.
    """
    if group.knockout_config is None:
        return []

    competition = group.competition
    standing = []
    for row in group.knockout_config.standing:
        team_id = competition.resolve_team_id(row.id)
        if team_id == UNKNOWN_TEAM_ID:
            continue
        standing.append(KnockoutStanding(position=row.position, team_id=team_id))
    return standing
