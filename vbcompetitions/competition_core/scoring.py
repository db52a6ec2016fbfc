"""
Configurable scoring rules for groups.

SetConfig defines when a set is won and how many sets decide a match.
LeaguePoints defines how match results are converted to league points, and
LeagueConfig pairs those points with the ordering used to rank a league table.
"""

from typing import List, Optional
from dataclasses import dataclass, field

from vbcompetitions.competition_core.exceptions import StructureError
from vbcompetitions.competition_core.tiebreaks import ORDERING_KEYS


@dataclass(frozen=True)
class SetConfig:
    """Limits governing set scores in a sets match."""

    max_sets: int = 5
    sets_to_win: int = 3
    clear_points: int = 2
    min_points: int = 1
    points_to_win: int = 25
    last_set_points_to_win: int = 15
    max_points: int = 1000
    last_set_max_points: int = 1000

    def is_decider(self, set_index: int) -> bool:
        """Whether the set at this (0-based) index is the deciding set."""
        return set_index == self.max_sets - 1

    def target_points(self, set_index: int) -> int:
        if self.is_decider(set_index):
            return self.last_set_points_to_win
        return self.points_to_win

    def cap_points(self, set_index: int) -> int:
        if self.is_decider(set_index):
            return self.last_set_max_points
        return self.max_points

    def is_set_complete(self, set_index: int, home_score: int, away_score: int) -> bool:
        """
        Whether a set is decided.

        A set is decided when one side has reached the points needed to win
        and is clear by enough points, or when one side has reached the
        maximum points for the set.
        """
        cap = self.cap_points(set_index)
        if home_score == cap or away_score == cap:
            return True
        target = self.target_points(set_index)
        has_enough_points = home_score >= target or away_score >= target
        return has_enough_points and abs(home_score - away_score) >= self.clear_points

    def minimum_winning_score(self, set_index: int, losing_score: int) -> int:
        """The lowest score that wins a set against the given losing score."""
        needed = max(self.target_points(set_index), losing_score + self.clear_points)
        return min(needed, self.cap_points(set_index))


DEFAULT_SET_CONFIG = SetConfig()


@dataclass(frozen=True)
class LeaguePoints:
    """League points awarded per event. Unconfigured events award nothing."""

    played: int = 0
    per_set: int = 0
    win: int = 0
    win_by_one: int = 0
    lose: int = 0
    lose_by_one: int = 0
    forfeit: int = 0

    def result_points(self, won: bool, set_difference: Optional[int] = None) -> int:
        """
        League points for winning or losing a match.

        Args:
            won: Whether the team won the match
            set_difference: The absolute set difference for sets matches, or
                None for continuous matches

        Returns:
            The points for the result, before per-set, played, forfeit, bonus
            and penalty points are applied
        """
        if set_difference == 1:
            return self.win_by_one if won else self.lose_by_one
        return self.win if won else self.lose

    def describe(self) -> str:
        """
        Describe the scoring rules, e.g. "Teams win 3 points per win and 1 point per set".

        Returns an empty string when every event is worth zero points.
        """
        parts = []

        def add(points: int, action: str):
            if points == 1:
                parts.append(f"1 point per {action}")
            else:
                parts.append(f"{points} points per {action}")

        if self.played != 0:
            add(self.played, "played")
        if self.win != 0:
            add(self.win, "win")
        if self.per_set != 0:
            add(self.per_set, "set")
        if self.win_by_one != 0 and self.win_by_one != self.win:
            add(self.win_by_one, "win by one set")
        if self.lose != 0:
            add(self.lose, "loss")
        if self.lose_by_one != 0 and self.lose_by_one != self.lose:
            add(self.lose_by_one, "loss by one set")
        if self.forfeit != 0:
            add(self.forfeit, "forfeited match")

        if not parts:
            return ""
        if len(parts) == 1:
            return f"Teams win {parts[0]}"
        return f"Teams win {', '.join(parts[:-1])} and {parts[-1]}"


@dataclass(frozen=True)
class LeagueConfig:
    """Ordering and points configuration for a league group."""

    ordering: List[str] = field(default_factory=lambda: ["PTS"])
    points: LeaguePoints = field(default_factory=LeaguePoints)

    def __post_init__(self):
        if len(self.ordering) == 0:
            raise StructureError("Invalid league ordering: at least one ordering key is required")
        for key in self.ordering:
            if key not in ORDERING_KEYS:
                raise StructureError(
                    f'Invalid league ordering key "{key}": must be one of {", ".join(ORDERING_KEYS)}'
                )
