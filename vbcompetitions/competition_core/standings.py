"""
League table calculation.

The table is derived from the current state of a league group's matches and
is never stored in a document. Group caches the result and drops the cache
whenever a score in the group changes.
"""

from typing import Dict, List
from dataclasses import dataclass, field

from vbcompetitions.competition_core.exceptions import NotFoundError
from vbcompetitions.competition_core.scoring import LeaguePoints
from vbcompetitions.competition_core.tiebreaks import (
    LeagueTableEntry,
    describe_ordering,
    sort_league_entries,
)


@dataclass
class LeagueTable:
    """An ordered league table, best placed team first."""

    group_id: str
    entries: List[LeagueTableEntry] = field(default_factory=list)
    ordering: List[str] = field(default_factory=list)
    points: LeaguePoints = field(default_factory=LeaguePoints)
    has_sets: bool = False
    has_draws: bool = False

    def ordering_text(self) -> str:
        return describe_ordering(self.ordering)

    def scoring_text(self) -> str:
        return self.points.describe()

    def position_of(self, team_id: str) -> int:
        """The 1-based position of a team in the table."""
        for position, entry in enumerate(self.entries, start=1):
            if entry.team_id == team_id:
                return position
        raise NotFoundError(f'Team with ID "{team_id}" is not in the league table for group {self.group_id}')

    def get_entry(self, team_id: str) -> LeagueTableEntry:
        return self.entries[self.position_of(team_id) - 1]


def _add_result(
    entries: Dict[str, LeagueTableEntry], winner_id: str, loser_id: str
):
    winner = entries[winner_id]
    loser = entries[loser_id]
    winner.wins += 1
    loser.losses += 1
    winner.h2h[loser_id] = winner.h2h.get(loser_id, 0) + 1
    loser.h2h[winner_id] = loser.h2h.get(winner_id, 0) - 1


def calculate_league_table(group) -> LeagueTable:
    """
    Fold a league group's matches into an ordered league table.

    Friendly matches are ignored entirely. Every team with at least one
    non-friendly match gets an entry, in the order teams first appear, before
    the table is sorted by the group's ordering keys.
    """
    config = group.league_config
    points = config.points
    competition = group.competition
    has_sets = not group.is_continuous
    entries: Dict[str, LeagueTableEntry] = {}

    for match in group.matches:
        if match.friendly:
            continue
        home_id = match.home_team.id
        away_id = match.away_team.id
        for team_id in (home_id, away_id):
            if team_id not in entries:
                entries[team_id] = LeagueTableEntry(
                    team_id=team_id, name=competition.resolve_team(team_id).name
                )

        if not match.is_complete():
            continue

        home = entries[home_id]
        away = entries[away_id]
        home.played += 1
        away.played += 1

        if match.is_draw():
            home.draws += 1
            away.draws += 1
            home.h2h.setdefault(away_id, 0)
            away.h2h.setdefault(home_id, 0)
        else:
            _add_result(entries, match.get_winner_team_id(), match.get_loser_team_id())

        home_scores = match.get_home_team_scores()
        away_scores = match.get_away_team_scores()
        if has_sets:
            min_points = group.set_config.min_points
            for home_score, away_score in zip(home_scores, away_scores):
                if home_score < min_points and away_score < min_points:
                    continue
                home.points_for += home_score
                home.points_against += away_score
                away.points_for += away_score
                away.points_against += home_score

            home_sets = match.get_home_team_sets()
            away_sets = match.get_away_team_sets()
            home.sets_for += home_sets
            home.sets_against += away_sets
            away.sets_for += away_sets
            away.sets_against += home_sets
            home.league_points += points.per_set * home_sets
            away.league_points += points.per_set * away_sets
            set_difference = abs(home_sets - away_sets)
        else:
            home.points_for += home_scores[0]
            home.points_against += away_scores[0]
            away.points_for += away_scores[0]
            away.points_against += home_scores[0]
            set_difference = None

        if not match.is_draw():
            winner = entries[match.get_winner_team_id()]
            loser = entries[match.get_loser_team_id()]
            winner.league_points += points.result_points(True, set_difference)
            loser.league_points += points.result_points(False, set_difference)

        for match_team, entry in ((match.home_team, home), (match.away_team, away)):
            if match_team.forfeit:
                entry.league_points -= points.forfeit
            entry.bonus_points += match_team.bonus_points
            entry.penalty_points += match_team.penalty_points

    for entry in entries.values():
        entry.points_difference = entry.points_for - entry.points_against
        entry.sets_difference = entry.sets_for - entry.sets_against
        entry.league_points += (
            entry.played * points.played + entry.bonus_points - entry.penalty_points
        )

    return LeagueTable(
        group_id=group.id,
        entries=sort_league_entries(list(entries.values()), config.ordering),
        ordering=list(config.ordering),
        points=points,
        has_sets=has_sets,
        has_draws=group.draws_allowed,
    )
