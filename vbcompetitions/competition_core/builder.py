"""
Builder for creating competition structures with a fluent API.

This module provides a builder for creating competition_core structures in
tests and seed scripts without writing a competition document by hand:

    competition = (
        CompetitionBuilder("Summer League")
        .team("TM1", "Alice Aces")
        .team("TM2", "Bob's Blockers")
        .stage("L")
        .league("RL", ordering=["PTS", "H2H"], points=LeaguePoints(win=3))
        .match("RLM1", "TM1", "TM2", "25-20", "25-18", "25-22")
        .build()
    )
"""

from typing import List, Optional, Sequence, Tuple

from vbcompetitions.competition_core.knockout import KnockoutConfig, KnockoutPosition
from vbcompetitions.competition_core.matches import Break, Match, MatchOfficials, MatchTeam
from vbcompetitions.competition_core.scoring import LeagueConfig, LeaguePoints, SetConfig
from vbcompetitions.competition_core.structure import (
    Competition,
    Group,
    GroupType,
    MatchType,
    Stage,
)
from vbcompetitions.competition_core.teams import Club, CompetitionTeam


def parse_score(score: str) -> Tuple[int, int]:
    """Parse a "25-20" style score into (home, away)."""
    home, sep, away = score.partition("-")
    if not sep:
        raise ValueError(f"Invalid score: {score}")
    return int(home), int(away)


class CompetitionBuilder:
    """Builder for creating competition structures easily."""

    def __init__(self, name: str = "Test Competition", notes: Optional[str] = None):
        self.competition = Competition(name, notes=notes)
        self.current_stage: Optional[Stage] = None
        self.current_group: Optional[Group] = None
        self._next_match_number = 1

    # Competition level

    def metadata(self, key: str, value: str) -> "CompetitionBuilder":
        self.competition.set_metadata(key, value)
        return self

    def club(self, club_id: str, name: str, **kwargs) -> "CompetitionBuilder":
        self.competition.add_club(Club(club_id, name, **kwargs))
        return self

    def team(
        self, team_id: str, name: Optional[str] = None, **kwargs
    ) -> "CompetitionBuilder":
        """Add a team. The name defaults to the ID."""
        self.competition.add_team(CompetitionTeam(team_id, name or team_id, **kwargs))
        return self

    def teams(self, *team_ids: str) -> "CompetitionBuilder":
        """Add several teams named after their IDs."""
        for team_id in team_ids:
            self.team(team_id)
        return self

    # Stages and groups

    def stage(self, stage_id: str, name: Optional[str] = None, **kwargs) -> "CompetitionBuilder":
        """Start a new stage. Following groups are added to it."""
        self.current_stage = Stage(self.competition, stage_id, name=name, **kwargs)
        self.competition.add_stage(self.current_stage)
        self.current_group = None
        return self

    def _group(self, group_id: str, group_type: GroupType, **kwargs) -> "CompetitionBuilder":
        if self.current_stage is None:
            raise ValueError("Must add a stage before adding groups")
        self.current_group = Group(self.current_stage, group_id, group_type, **kwargs)
        self.current_stage.add_group(self.current_group)
        return self

    def league(
        self,
        group_id: str,
        continuous: bool = False,
        draws: bool = False,
        ordering: Optional[List[str]] = None,
        points: Optional[LeaguePoints] = None,
        sets: Optional[SetConfig] = None,
        **kwargs,
    ) -> "CompetitionBuilder":
        """Start a league group in the current stage."""
        league_config = LeagueConfig(
            ordering=list(ordering or ["PTS"]), points=points or LeaguePoints()
        )
        return self._group(
            group_id,
            GroupType.LEAGUE,
            match_type=MatchType.CONTINUOUS if continuous else MatchType.SETS,
            draws_allowed=draws,
            set_config=sets,
            league_config=league_config,
            **kwargs,
        )

    def knockout(
        self,
        group_id: str,
        standing: Sequence[Tuple[str, str]] = (),
        continuous: bool = False,
        sets: Optional[SetConfig] = None,
        **kwargs,
    ) -> "CompetitionBuilder":
        """
        Start a knockout group in the current stage.

        Args:
            standing: (position, reference) pairs for the final standing,
                e.g. [("1st", "{KO:CUP:FIN:winner}")]. Validated by build().
        """
        knockout_config = None
        if standing:
            knockout_config = KnockoutConfig(
                standing=[KnockoutPosition(position, ref) for position, ref in standing]
            )
        return self._group(
            group_id,
            GroupType.KNOCKOUT,
            match_type=MatchType.CONTINUOUS if continuous else MatchType.SETS,
            set_config=sets,
            knockout_config=knockout_config,
            **kwargs,
        )

    def crossover(
        self, group_id: str, continuous: bool = False, sets: Optional[SetConfig] = None, **kwargs
    ) -> "CompetitionBuilder":
        """Start a crossover group in the current stage."""
        return self._group(
            group_id,
            GroupType.CROSSOVER,
            match_type=MatchType.CONTINUOUS if continuous else MatchType.SETS,
            set_config=sets,
            **kwargs,
        )

    # Matches

    def match(
        self,
        match_id: Optional[str],
        home: str,
        away: str,
        *scores: str,
        complete: Optional[bool] = None,
        officials: Optional[str] = None,
        **kwargs,
    ) -> "CompetitionBuilder":
        """
        Add a match to the current group.

        Args:
            match_id: The match ID, or None to number matches M1, M2, ...
            home: Home team ID or reference
            away: Away team ID or reference
            scores: One "home-away" score per set, or a single score for
                continuous groups
            complete: Explicit completeness. Continuous groups default to
                True when scores are given and False otherwise.
            officials: An officiating team ID or reference
        """
        if self.current_group is None:
            raise ValueError("Must add a group before adding matches")
        if match_id is None:
            match_id = f"M{self._next_match_number}"
            self._next_match_number += 1

        parsed = [parse_score(score) for score in scores]
        if complete is None and self.current_group.is_continuous:
            complete = bool(parsed)

        match = Match(
            match_id,
            MatchTeam(home, scores=[h for h, _ in parsed]),
            MatchTeam(away, scores=[a for _, a in parsed]),
            complete=complete,
            officials=MatchOfficials(team_id=officials) if officials else None,
            **kwargs,
        )
        self.current_group.add_match(match)
        return self

    def break_(self, name: Optional[str] = None, **kwargs) -> "CompetitionBuilder":
        """Add a break (e.g. lunch) to the current group's schedule."""
        if self.current_group is None:
            raise ValueError("Must add a group before adding breaks")
        self.current_group.add_break(Break(name=name, **kwargs))
        return self

    def result(
        self, match_id: str, *scores: str, complete: Optional[bool] = None
    ) -> "CompetitionBuilder":
        """Update the scores of a match already in the current group."""
        if self.current_group is None:
            raise ValueError("Must add a group before setting results")
        parsed = [parse_score(score) for score in scores]
        if complete is None and self.current_group.is_continuous:
            complete = True
        self.current_group.get_match(match_id).set_scores(
            [h for h, _ in parsed], [a for _, a in parsed], complete
        )
        return self

    def if_unknown(self, *description: str) -> "CompetitionBuilder":
        """Give the current stage a placeholder description for unknown teams."""
        if self.current_stage is None:
            raise ValueError("Must add a stage before adding an if-unknown block")
        self.current_stage.set_if_unknown(list(description))
        return self

    def build(self) -> Competition:
        """Check the cross-group rules and return the competition."""
        for stage in self.competition.stages:
            stage.check_shared_teams()
            for group in stage.groups:
                group.validate_knockout_standing()
        return self.competition
