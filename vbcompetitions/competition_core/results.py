"""
Score validation and result calculation for a single match.

These functions are pure: they take score arrays and the group configuration
and either raise ScoreError or return a MatchOutcome. Match uses them to move
between the unscored, partial and complete states.
"""

from enum import Enum
from typing import List, Optional
from dataclasses import dataclass

from vbcompetitions.competition_core.exceptions import ScoreError
from vbcompetitions.competition_core.scoring import SetConfig


class Side(Enum):
    HOME = "home"
    AWAY = "away"


@dataclass(frozen=True)
class MatchOutcome:
    """The calculated state of a match."""

    complete: bool = False
    draw: bool = False
    winner: Optional[Side] = None
    home_sets: int = 0
    away_sets: int = 0

    @property
    def loser(self) -> Optional[Side]:
        if self.winner is None:
            return None
        return Side.AWAY if self.winner == Side.HOME else Side.HOME


UNSCORED = MatchOutcome()


def _is_score(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def assert_scores_are_integers(home_scores: List[int], away_scores: List[int]):
    """Check both score arrays have the same length and hold only integers."""
    if len(home_scores) != len(away_scores):
        raise ScoreError("Invalid results: score lengths are different")
    for home_score, away_score in zip(home_scores, away_scores):
        if not _is_score(home_score):
            raise ScoreError("Invalid results: found a non-integer home team score value")
        if not _is_score(away_score):
            raise ScoreError("Invalid results: found a non-integer away team score value")


def assert_continuous_scores_valid(home_scores: List[int], away_scores: List[int]):
    """A continuous match has at most one score per team."""
    if len(home_scores) != len(away_scores):
        raise ScoreError("Invalid results: score lengths are different")
    if len(home_scores) > 1:
        raise ScoreError(
            "Invalid results: match type is continuous, but score length is greater than one"
        )


def assert_set_scores_valid(
    home_scores: List[int], away_scores: List[int], set_config: SetConfig
):
    """
    Check a pair of set score arrays against the set configuration.

    Raises:
        ScoreError: The arrays differ in length, hold more sets than allowed,
            carry scores after an undecided set, or show a team scoring more
            points than it needed to win a set
    """
    if len(home_scores) != len(away_scores):
        raise ScoreError("Invalid set scores: score arrays are different lengths")

    if len(home_scores) > set_config.max_sets:
        raise ScoreError(
            "Invalid set scores: score arrays are longer than the maximum number of sets allowed"
        )

    seen_incomplete_set = False
    for set_index, (home_score, away_score) in enumerate(zip(home_scores, away_scores)):
        if seen_incomplete_set and (home_score != 0 or away_score != 0):
            raise ScoreError(
                "Invalid set scores: data contains non-zero scores for a set after an incomplete set"
            )

        if home_score != away_score:
            side = "home" if home_score > away_score else "away"
            winning_score = max(home_score, away_score)
            losing_score = min(home_score, away_score)
            if winning_score > set_config.minimum_winning_score(set_index, losing_score):
                raise ScoreError(
                    f"Invalid set scores: value for set score at index {set_index} shows {side} "
                    "team scoring more points than necessary to win the set"
                )

        if not set_config.is_set_complete(set_index, home_score, away_score):
            seen_incomplete_set = True


def calculate_continuous_outcome(
    home_scores: List[int], away_scores: List[int], complete: bool, draws_allowed: bool
) -> MatchOutcome:
    """
    Work out the state of a continuous match.

    A match without scores, or with both scores at zero, has no result even
    when it is marked as complete.
    """
    if len(home_scores) == 0 or home_scores[0] + away_scores[0] == 0:
        return UNSCORED
    if not complete:
        return MatchOutcome(complete=False)

    if home_scores[0] > away_scores[0]:
        return MatchOutcome(complete=True, winner=Side.HOME)
    if home_scores[0] < away_scores[0]:
        return MatchOutcome(complete=True, winner=Side.AWAY)
    if draws_allowed:
        return MatchOutcome(complete=True, draw=True)
    raise ScoreError("scores show a draw but draws are not allowed")


def calculate_sets_outcome(
    home_scores: List[int],
    away_scores: List[int],
    set_config: SetConfig,
    complete: bool,
    has_duration: bool,
    draws_allowed: bool,
) -> MatchOutcome:
    """
    Work out the state of a sets match.

    Sets where neither team reached the minimum points are ignored. Without an
    explicit completeness, a match with no fixed duration is complete once a
    team has won enough sets or every set has been played.

    Args:
        home_scores: Home team points per set
        away_scores: Away team points per set
        set_config: The group's set configuration
        complete: The starting completeness (explicit, or the previous state)
        has_duration: Whether the match has a fixed duration
        draws_allowed: Whether the group allows draws
    """
    assert_set_scores_valid(home_scores, away_scores, set_config)

    home_sets = 0
    away_sets = 0
    for set_index, (home_score, away_score) in enumerate(zip(home_scores, away_scores)):
        if home_score < set_config.min_points and away_score < set_config.min_points:
            continue
        if complete or set_config.is_set_complete(set_index, home_score, away_score):
            if home_score > away_score:
                home_sets += 1
            elif home_score < away_score:
                away_sets += 1

    if not has_duration and (
        home_sets + away_sets == set_config.max_sets
        or home_sets >= set_config.sets_to_win
        or away_sets >= set_config.sets_to_win
    ):
        complete = True

    if not complete:
        return MatchOutcome(complete=False, home_sets=home_sets, away_sets=away_sets)

    if home_sets > away_sets:
        winner = Side.HOME
    elif home_sets < away_sets:
        winner = Side.AWAY
    elif draws_allowed:
        return MatchOutcome(complete=True, draw=True, home_sets=home_sets, away_sets=away_sets)
    else:
        raise ScoreError("scores show a draw but draws are not allowed")

    return MatchOutcome(complete=True, winner=winner, home_sets=home_sets, away_sets=away_sets)
