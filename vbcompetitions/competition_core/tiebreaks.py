"""
League table entries and the comparators used to order them.

A league is ordered by a configured list of keys, applied left to right until
two teams are separated. Teams still level after every key keep the order in
which they first appeared in the group.
"""

from functools import cmp_to_key
from typing import Callable, Dict, List
from dataclasses import dataclass, field


@dataclass
class LeagueTableEntry:
    """Aggregated results for one team in a league group."""

    team_id: str
    name: str
    played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    sets_for: int = 0
    sets_against: int = 0
    sets_difference: int = 0
    points_for: int = 0
    points_against: int = 0
    points_difference: int = 0
    bonus_points: int = 0
    penalty_points: int = 0
    league_points: int = 0
    # Opponent team ID -> net wins minus losses against that opponent
    h2h: Dict[str, int] = field(default_factory=dict)


def compare_league_points(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return b.league_points - a.league_points


def compare_wins(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return b.wins - a.wins


def compare_losses(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return a.losses - b.losses


def compare_head_to_head(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    """
    Compare two teams on their direct results only.

    Teams that have not played each other are level on head-to-head.
    """
    if b.team_id not in a.h2h or a.team_id not in b.h2h:
        return 0
    return b.h2h[a.team_id] - a.h2h[b.team_id]


def compare_points_for(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return b.points_for - a.points_for


def compare_points_against(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return a.points_against - b.points_against


def compare_points_difference(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return b.points_difference - a.points_difference


def compare_sets_for(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return b.sets_for - a.sets_for


def compare_sets_against(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return a.sets_against - b.sets_against


def compare_sets_difference(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return b.sets_difference - a.sets_difference


def compare_bonus_points(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return b.bonus_points - a.bonus_points


def compare_penalty_points(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
    return a.penalty_points - b.penalty_points


ORDERING_COMPARATORS: Dict[str, Callable[[LeagueTableEntry, LeagueTableEntry], int]] = {
    "PTS": compare_league_points,
    "WINS": compare_wins,
    "LOSSES": compare_losses,
    "H2H": compare_head_to_head,
    "PF": compare_points_for,
    "PA": compare_points_against,
    "PD": compare_points_difference,
    "SF": compare_sets_for,
    "SA": compare_sets_against,
    "SD": compare_sets_difference,
    "BP": compare_bonus_points,
    "PP": compare_penalty_points,
}

ORDERING_KEYS = tuple(ORDERING_COMPARATORS)

ORDERING_NAMES = {
    "PTS": "points",
    "WINS": "wins",
    "LOSSES": "losses",
    "H2H": "head-to-head",
    "PF": "points for",
    "PA": "points against",
    "PD": "points difference",
    "SF": "sets for",
    "SA": "sets against",
    "SD": "sets difference",
    "BP": "bonus points",
    "PP": "penalty points",
}


def sort_league_entries(
    entries: List[LeagueTableEntry], ordering: List[str]
) -> List[LeagueTableEntry]:
    """
    Order league entries by the given ordering keys.

    Args:
        entries: Entries in the order the teams first appeared in the group
        ordering: Ordering keys, e.g. ["PTS", "H2H", "PD"]

    Returns:
        A new list, best placed team first
    """
    comparators = [ORDERING_COMPARATORS[key] for key in ordering]

    def compare(a: LeagueTableEntry, b: LeagueTableEntry) -> int:
        for comparator in comparators:
            result = comparator(a, b)
            if result != 0:
                return result
        return 0

    # sorted() is stable, so fully tied teams keep their insertion order
    return sorted(entries, key=cmp_to_key(compare))


def describe_ordering(ordering: List[str]) -> str:
    """Describe the ordering, e.g. "Position is decided by points, then head-to-head"."""
    names = [ORDERING_NAMES[key] for key in ordering]
    return "Position is decided by " + ", then ".join(names)
