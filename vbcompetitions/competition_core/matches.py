"""
Matches and breaks within a group.

A Match holds the two playing teams, their scores and the scheduling details,
and tracks its own result. Score changes go through Match.set_scores, which
validates the new scores against the group configuration and only stores them
when they are valid.
"""

import re
from datetime import date as dt_date
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from vbcompetitions.competition_core.exceptions import (
    MatchResultError,
    ScoreError,
    StructureError,
)
from vbcompetitions.competition_core.identifiers import validate_id, validate_text
from vbcompetitions.competition_core.results import (
    UNSCORED,
    MatchOutcome,
    Side,
    assert_continuous_scores_valid,
    assert_scores_are_integers,
    assert_set_scores_valid,
    calculate_continuous_outcome,
    calculate_sets_outcome,
)

START_PATTERN = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")
DATE_PATTERN = re.compile(r"^[0-9]{4}-(0[0-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])$")
DURATION_PATTERN = re.compile(r"^[0-9]+:[0-5][0-9]$")


@dataclass
class MatchTeam:
    """One side of a match. The ID may be a literal team ID or a team reference."""

    id: str
    scores: Tuple[int, ...] = ()
    mvp: Optional[str] = None
    forfeit: bool = False
    bonus_points: int = 0
    penalty_points: int = 0
    notes: Optional[str] = None
    players: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.scores = tuple(self.scores)


@dataclass
class MatchOfficials:
    """The officials for a match: either an officiating team or named people."""

    team_id: Optional[str] = None
    first: Optional[str] = None
    second: Optional[str] = None
    challenge: Optional[str] = None
    assistant_challenge: Optional[str] = None
    reserve: Optional[str] = None
    scorer: Optional[str] = None
    assistant_scorer: Optional[str] = None
    linespersons: List[str] = field(default_factory=list)
    ball_crew: List[str] = field(default_factory=list)

    def __post_init__(self):
        if (self.team_id is None) == (self.first is None):
            raise StructureError("Match Officials must be either a team or a person")

    @property
    def is_team(self) -> bool:
        return self.team_id is not None


@dataclass
class MatchManager:
    """The court manager for a match: either a team or a named person."""

    team_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        if (self.team_id is None) == (self.name is None):
            raise StructureError("Match manager must be either a team or a person")

    @property
    def is_team(self) -> bool:
        return self.team_id is not None


def validate_start(start: str) -> str:
    if not START_PATTERN.match(start):
        raise StructureError(
            f'Invalid start time "{start}": must contain a value of the form "HH:mm" using a 24 hour clock'
        )
    return start


def validate_date(value: str) -> str:
    if not DATE_PATTERN.match(value):
        raise StructureError(f'Invalid date "{value}": must contain a value of the form "YYYY-MM-DD"')
    try:
        dt_date.fromisoformat(value)
    except ValueError as err:
        raise StructureError(f'Invalid date "{value}": date does not exist') from err
    return value


def validate_duration(duration: str) -> str:
    if not DURATION_PATTERN.match(duration):
        raise StructureError(f'Invalid duration "{duration}": must contain a value of the form "HH:mm"')
    return duration


@dataclass
class Break:
    """A non-match slot in a group's schedule, e.g. lunch."""

    start: Optional[str] = None
    date: Optional[str] = None
    duration: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        if self.start is not None:
            validate_start(self.start)
        if self.date is not None:
            validate_date(self.date)
        if self.duration is not None:
            validate_duration(self.duration)
        if self.name is not None:
            validate_text(self.name, "break name")


class Match:
    """A match between two teams in a group."""

    def __init__(
        self,
        match_id: str,
        home_team: MatchTeam,
        away_team: MatchTeam,
        complete: Optional[bool] = None,
        court: Optional[str] = None,
        venue: Optional[str] = None,
        date: Optional[str] = None,
        warmup: Optional[str] = None,
        start: Optional[str] = None,
        duration: Optional[str] = None,
        officials: Optional[MatchOfficials] = None,
        mvp: Optional[str] = None,
        manager: Optional[MatchManager] = None,
        notes: Optional[str] = None,
        friendly: bool = False,
    ):
        self.id = validate_id(match_id, "match")
        self.home_team = home_team
        self.away_team = away_team
        # The explicit completeness, as given in the document or by set_scores
        self.complete = complete
        self.court = court
        self.venue = venue
        self.date = validate_date(date) if date is not None else None
        self.warmup = validate_start(warmup) if warmup is not None else None
        self.start = validate_start(start) if start is not None else None
        self.duration = validate_duration(duration) if duration is not None else None
        self.officials = officials
        self.mvp = mvp
        self.manager = manager
        self.notes = notes
        self.friendly = friendly
        self.group = None
        self._outcome: MatchOutcome = UNSCORED

    def __repr__(self):
        return f"Match({self.label}, {self.home_team.id!r} v {self.away_team.id!r})"

    @property
    def label(self) -> str:
        """The fully qualified match ID, e.g. "{L:RL:RLM1}"."""
        if self.group is None:
            return "{" + self.id + "}"
        return "{" + f"{self.group.stage.id}:{self.group.id}:{self.id}" + "}"

    def _require_group(self):
        if self.group is None:
            raise StructureError(f"Match {self.id} has not been added to a group")
        return self.group

    def team_ids(self, include_officials: bool = True) -> List[str]:
        """The raw home, away and (optionally) officiating team IDs."""
        ids = [self.home_team.id, self.away_team.id]
        if include_officials and self.officials is not None and self.officials.is_team:
            ids.append(self.officials.team_id)
        return ids

    # Result calculation

    def _calculate_outcome(
        self, home_scores: Sequence[int], away_scores: Sequence[int], complete: bool
    ) -> MatchOutcome:
        group = self._require_group()
        home_scores = list(home_scores)
        away_scores = list(away_scores)
        if len(home_scores) != len(away_scores):
            raise ScoreError(
                f"Invalid match information for match {self.id}: team scores have different length"
            )

        if group.is_continuous:
            try:
                return calculate_continuous_outcome(
                    home_scores, away_scores, complete, group.draws_allowed
                )
            except ScoreError as err:
                raise ScoreError(f"Invalid match information (in match {self.label}): {err}") from err

        if len(home_scores) > group.set_config.max_sets:
            raise ScoreError(
                f"Invalid match information (in match {self.label}): "
                "team scores have more sets than the maximum allowed length"
            )
        try:
            return calculate_sets_outcome(
                home_scores,
                away_scores,
                group.set_config,
                complete,
                self.duration is not None,
                group.draws_allowed,
            )
        except ScoreError as err:
            raise ScoreError(f"Invalid match information (in match {self.label}): {err}") from err

    def refresh_result(self) -> "Match":
        """Recalculate the result from the stored scores and explicit completeness."""
        self._outcome = self._calculate_outcome(
            self.home_team.scores, self.away_team.scores, bool(self.complete)
        )
        return self

    def set_scores(
        self,
        home_scores: Sequence[int],
        away_scores: Sequence[int],
        complete: Optional[bool] = None,
    ) -> "Match":
        """
        Set the scores for this match.

        Args:
            home_scores: The home team's score, or points per set
            away_scores: The away team's score, or points per set
            complete: Whether the match is complete. Required for continuous
                matches and for sets matches with a fixed duration.

        Raises:
            ScoreError: The scores are invalid. The match is left unchanged.
        """
        group = self._require_group()
        home_scores = list(home_scores)
        away_scores = list(away_scores)
        assert_scores_are_integers(home_scores, away_scores)

        if group.is_continuous:
            if complete is None:
                raise ScoreError(
                    "Invalid score: match type is continuous, but the match completeness is not set"
                )
            assert_continuous_scores_valid(home_scores, away_scores)
            starting_complete = complete
        else:
            assert_set_scores_valid(home_scores, away_scores, group.set_config)
            if self.duration is not None and complete is None:
                raise ScoreError(
                    "Invalid results: match type is sets and match has a duration, "
                    "but the match completeness is not set"
                )
            starting_complete = complete if complete is not None else self._outcome.complete

        outcome = self._calculate_outcome(home_scores, away_scores, starting_complete)

        self.home_team.scores = tuple(home_scores)
        self.away_team.scores = tuple(away_scores)
        if complete is not None:
            self.complete = complete
        self._outcome = outcome
        group.invalidate()
        return self

    # Result queries

    def is_complete(self) -> bool:
        return self._outcome.complete

    def is_draw(self) -> bool:
        return self._outcome.draw

    def get_home_team_scores(self) -> List[int]:
        return list(self.home_team.scores)

    def get_away_team_scores(self) -> List[int]:
        return list(self.away_team.scores)

    def get_home_team_sets(self) -> int:
        if self._require_group().is_continuous:
            raise MatchResultError("Match has no sets because the match type is continuous")
        return self._outcome.home_sets

    def get_away_team_sets(self) -> int:
        if self._require_group().is_continuous:
            raise MatchResultError("Match has no sets because the match type is continuous")
        return self._outcome.away_sets

    def _side_team_id(self, side: Side) -> str:
        return self.home_team.id if side == Side.HOME else self.away_team.id

    def get_winner_team_id(self) -> str:
        """The raw ID of the winning team, which may itself be a reference."""
        if not self._outcome.complete:
            raise MatchResultError("Match incomplete, there is no winner")
        if self._outcome.draw:
            raise MatchResultError("Match drawn, there is no winner")
        return self._side_team_id(self._outcome.winner)

    def get_loser_team_id(self) -> str:
        """The raw ID of the losing team, which may itself be a reference."""
        if not self._outcome.complete:
            raise MatchResultError("Match incomplete, there is no loser")
        if self._outcome.draw:
            raise MatchResultError("Match drawn, there is no loser")
        return self._side_team_id(self._outcome.loser)
