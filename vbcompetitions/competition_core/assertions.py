"""
Fluent assertion interface for testing league tables and knockout standings.

This module provides a clean, fluent way to assert group results for testing
purposes. It works with the pure Python competition_core structures:

    assert_league(group).team("TM1").position(1).wins(3).points(9)
    assert_knockout(group).position("1st", "TM2")
"""

from typing import Optional
from dataclasses import dataclass

from vbcompetitions.competition_core.standings import LeagueTable
from vbcompetitions.competition_core.structure import Group
from vbcompetitions.competition_core.tiebreaks import LeagueTableEntry


# Use the built-in AssertionError for proper test framework integration


@dataclass
class LeagueAssertion:
    """Fluent interface for asserting a league table."""

    group: Group
    _table: Optional[LeagueTable] = None

    def __post_init__(self):
        """Calculate the table once on initialization."""
        if self._table is None:
            if not self.group.is_league:
                raise AssertionError(f"Group {self.group.label} is not a league")
            self._table = self.group.league_table()

    def size(self, expected: int) -> "LeagueAssertion":
        """Assert the number of teams in the table."""
        actual = len(self._table.entries)
        if actual != expected:
            raise AssertionError(f"League table expected {expected} teams, got {actual}")
        return self

    def order(self, *team_ids: str) -> "LeagueAssertion":
        """Assert the full order of the table, best placed team first."""
        actual = [entry.team_id for entry in self._table.entries]
        if actual != list(team_ids):
            raise AssertionError(f"League table expected order {list(team_ids)}, got {actual}")
        return self

    def team(self, team_id: str) -> "LeagueEntryAssertion":
        """Select a team's table entry for assertions."""
        for entry in self._table.entries:
            if entry.team_id == team_id:
                return LeagueEntryAssertion(group=self.group, team_id=team_id, _table=self._table)
        raise AssertionError(f"Team '{team_id}' not found in league table")


@dataclass
class LeagueEntryAssertion(LeagueAssertion):
    """Assertions for a single team in a league table."""

    team_id: str = ""

    def _entry(self) -> LeagueTableEntry:
        return self._table.get_entry(self.team_id)

    def _check(self, label: str, expected: int, actual: int) -> "LeagueEntryAssertion":
        if actual != expected:
            raise AssertionError(f"{self.team_id} expected {expected} {label}, got {actual}")
        return self

    def position(self, expected: int) -> "LeagueEntryAssertion":
        """Assert the 1-based position in the table."""
        return self._check("position", expected, self._table.position_of(self.team_id))

    def played(self, expected: int) -> "LeagueEntryAssertion":
        return self._check("played", expected, self._entry().played)

    def wins(self, expected: int) -> "LeagueEntryAssertion":
        return self._check("wins", expected, self._entry().wins)

    def losses(self, expected: int) -> "LeagueEntryAssertion":
        return self._check("losses", expected, self._entry().losses)

    def draws(self, expected: int) -> "LeagueEntryAssertion":
        return self._check("draws", expected, self._entry().draws)

    def sets(self, won: int, lost: int) -> "LeagueEntryAssertion":
        """Assert sets won and lost."""
        entry = self._entry()
        self._check("sets won", won, entry.sets_for)
        return self._check("sets lost", lost, entry.sets_against)

    def score_points(self, scored: int, conceded: int) -> "LeagueEntryAssertion":
        """Assert points scored and conceded."""
        entry = self._entry()
        self._check("points scored", scored, entry.points_for)
        return self._check("points conceded", conceded, entry.points_against)

    def points(self, expected: int) -> "LeagueEntryAssertion":
        """Assert the league points."""
        return self._check("league points", expected, self._entry().league_points)

    def head_to_head(self, opponent_id: str, expected: int) -> "LeagueEntryAssertion":
        """Assert the head-to-head balance against one opponent."""
        h2h = self._entry().h2h
        if opponent_id not in h2h:
            raise AssertionError(f"{self.team_id} has no head-to-head record against {opponent_id}")
        return self._check(f"head-to-head against {opponent_id}", expected, h2h[opponent_id])


@dataclass
class KnockoutAssertion:
    """Fluent interface for asserting a knockout group's final standing."""

    group: Group

    def position(self, position: str, team_id: str) -> "KnockoutAssertion":
        """Assert which team holds a named position, e.g. "1st"."""
        for row in self.group.knockout_standing():
            if row.position == position:
                if row.team_id != team_id:
                    raise AssertionError(
                        f"Position {position} expected {team_id}, got {row.team_id}"
                    )
                return self
        raise AssertionError(f"Position {position} is not decided yet")

    def undecided(self, position: str) -> "KnockoutAssertion":
        """Assert a position has no team yet."""
        for row in self.group.knockout_standing():
            if row.position == position:
                raise AssertionError(f"Position {position} expected undecided, got {row.team_id}")
        return self

    def size(self, expected: int) -> "KnockoutAssertion":
        actual = len(self.group.knockout_standing())
        if actual != expected:
            raise AssertionError(f"Knockout standing expected {expected} positions, got {actual}")
        return self


def assert_league(group: Group) -> LeagueAssertion:
    """Entry point for league table assertions."""
    return LeagueAssertion(group)


def assert_knockout(group: Group) -> KnockoutAssertion:
    """Entry point for knockout standing assertions."""
    return KnockoutAssertion(group)
