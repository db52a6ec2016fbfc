"""
The competition entity graph.

Competition -> Stage -> Group -> Match/Break, plus the teams, clubs and players
registered in the competition. These classes hold the data and the mutation
methods; results, standings and reference resolution are derived on demand by
the results, standings, knockout and references modules.
"""

import logging
from enum import Enum, Flag, auto
from typing import Dict, List, Optional, Union

from vbcompetitions.competition_core import references
from vbcompetitions.competition_core.exceptions import NotFoundError, StructureError
from vbcompetitions.competition_core.identifiers import (
    UNKNOWN_TEAM_ID,
    MAX_ID_LENGTH,
    is_reference,
    validate_id,
    validate_text,
)
from vbcompetitions.competition_core.knockout import (
    KnockoutConfig,
    KnockoutStanding,
    calculate_knockout_standing,
)
from vbcompetitions.competition_core.matches import Break, Match
from vbcompetitions.competition_core.scoring import DEFAULT_SET_CONFIG, LeagueConfig, SetConfig
from vbcompetitions.competition_core.standings import LeagueTable, calculate_league_table
from vbcompetitions.competition_core.teams import (
    Club,
    CompetitionTeam,
    Player,
    create_unknown_team,
)

logger = logging.getLogger(__name__)

SUPPORTED_VERSION = "1.0.0"
IF_UNKNOWN_GROUP_ID = "unknown"


class GroupType(Enum):
    LEAGUE = "league"
    KNOCKOUT = "knockout"
    CROSSOVER = "crossover"
    IF_UNKNOWN = "ifUnknown"


class MatchType(Enum):
    CONTINUOUS = "continuous"
    SETS = "sets"


class TeamSelection(Flag):
    """Which team IDs get_team_ids returns. MAYBE overrides KNOWN overrides FIXED_ID."""

    FIXED_ID = auto()  # literal team IDs, no references
    KNOWN = auto()  # literal IDs plus references that resolve to a team
    MAYBE = auto()  # teams that may still arrive through unresolved references
    ALL = auto()  # raw playing and officiating IDs, references included
    PLAYING = auto()  # raw playing IDs, references included
    OFFICIATING = auto()  # raw officiating IDs, references included


class MatchSelection(Flag):
    ALL = auto()
    PLAYING = auto()
    OFFICIATING = auto()


Entry = Union[Match, Break]


def _match_sort_key(match: Match):
    return (match.date or "", match.start or "")


class Group:
    """
    A league, knockout, crossover or "if unknown" group of matches.

    The kind is fixed at construction. League groups carry a LeagueConfig and
    knockout groups may carry a KnockoutConfig; every kind shares the same
    match and team queries.
    """

    def __init__(
        self,
        stage: "Stage",
        group_id: str,
        group_type: GroupType,
        match_type: MatchType = MatchType.SETS,
        draws_allowed: bool = False,
        set_config: Optional[SetConfig] = None,
        league_config: Optional[LeagueConfig] = None,
        knockout_config: Optional[KnockoutConfig] = None,
        name: Optional[str] = None,
        notes: Optional[str] = None,
        description: Optional[List[str]] = None,
    ):
        self.stage = stage
        if group_type != GroupType.IF_UNKNOWN:
            validate_id(group_id, "group")
        self.id = group_id
        self.type = group_type
        self.match_type = match_type
        self._draws_allowed = draws_allowed
        self.set_config = set_config or DEFAULT_SET_CONFIG
        if group_type == GroupType.LEAGUE and league_config is None:
            league_config = LeagueConfig()
        self.league_config = league_config
        self.knockout_config = knockout_config
        self.name = name
        self.notes = notes
        self.description = description
        self.entries: List[Entry] = []
        self._matches: Dict[str, Match] = {}
        self._league_table: Optional[LeagueTable] = None
        self._calculating_table = False

    def __repr__(self):
        return f"Group({self.label}, {self.type.value})"

    @property
    def label(self) -> str:
        return "{" + f"{self.stage.id}:{self.id}" + "}"

    @property
    def competition(self) -> "Competition":
        return self.stage.competition

    @property
    def is_league(self) -> bool:
        return self.type == GroupType.LEAGUE

    @property
    def is_knockout(self) -> bool:
        return self.type == GroupType.KNOCKOUT

    @property
    def is_continuous(self) -> bool:
        return self.match_type == MatchType.CONTINUOUS

    @property
    def draws_allowed(self) -> bool:
        # Only leagues can allow draws
        return self.is_league and self._draws_allowed

    @property
    def matches(self) -> List[Match]:
        return [entry for entry in self.entries if isinstance(entry, Match)]

    @property
    def breaks(self) -> List[Break]:
        return [entry for entry in self.entries if isinstance(entry, Break)]

    # Mutation

    def add_match(self, match: Match) -> "Group":
        """
        Add a match, validating its teams and calculating its result.

        Raises:
            StructureError: Duplicate match ID, missing completeness on a
                continuous match, a team playing itself, or a playing team
                also officiating
            TeamReferenceError: A team ID or reference is invalid
            ScoreError: The match scores are invalid
        """
        if match.id in self._matches:
            raise StructureError(
                f"Group {self.label}: matches with duplicate IDs {{{match.id}}} not allowed"
            )
        if self.is_continuous and match.complete is None:
            raise StructureError(
                f'Group {self.label}, match ID {{{match.id}}}, missing field "complete"'
            )

        if self.type != GroupType.IF_UNKNOWN:
            competition = self.competition
            competition.validate_team_id(match.home_team.id, match.id, "homeTeam")
            competition.validate_team_id(match.away_team.id, match.id, "awayTeam")
            if match.officials is not None and match.officials.is_team:
                competition.validate_team_id(match.officials.team_id, match.id, "officials > team")

        match.group = self
        try:
            self._check_match_teams(match)
            if self.type != GroupType.IF_UNKNOWN:
                match.refresh_result()
        except Exception:
            match.group = None
            raise

        self.entries.append(match)
        self._matches[match.id] = match
        self.invalidate()
        return self

    def _check_match_teams(self, match: Match):
        """
        Check that a match does not put one team on two sides, comparing the
        raw IDs and, where references are involved, the teams they resolve to.
        """
        home_id = match.home_team.id
        away_id = match.away_team.id
        officials_id = None
        if match.officials is not None and match.officials.is_team:
            officials_id = match.officials.team_id

        if officials_id in (home_id, away_id):
            raise StructureError(
                f"Refereeing team (in match {match.label}) cannot be the same as one of the playing teams"
            )
        if self.type == GroupType.IF_UNKNOWN:
            return
        if home_id == away_id:
            raise StructureError(
                f"Home and away teams (in match {match.label}) cannot be the same team"
            )

        team_ids = match.team_ids()
        if not any(is_reference(team_id) for team_id in team_ids):
            return
        resolved = [self.competition.resolve_team_id(team_id) for team_id in team_ids]
        if resolved[0] != UNKNOWN_TEAM_ID and resolved[0] == resolved[1]:
            raise StructureError(
                f'Home and away teams (in match {match.label}) both resolve to team "{resolved[0]}"'
            )
        if len(resolved) == 3 and resolved[2] != UNKNOWN_TEAM_ID and resolved[2] in resolved[:2]:
            raise StructureError(
                f"Refereeing team (in match {match.label}) cannot be the same as one of the playing teams"
            )

    def add_break(self, group_break: Break) -> "Group":
        self.entries.append(group_break)
        return self

    def invalidate(self):
        """
        Drop the cached league table of every group in the competition after a
        score change in this group.
        """
        self._league_table = None
        for stage in self.competition.stages:
            for group in stage.groups:
                group._league_table = None

    # Lookups

    def get_match(self, match_id: str) -> Match:
        if match_id not in self._matches:
            raise NotFoundError(f"Match with ID {match_id} not found")
        return self._matches[match_id]

    def has_match(self, match_id: str) -> bool:
        return match_id in self._matches

    def get_matches(
        self, team_id: Optional[str] = None, flags: MatchSelection = MatchSelection.ALL
    ) -> List[Entry]:
        """
        Matches in this group, optionally only those involving a team.

        Args:
            team_id: A resolved team ID. None, UNKNOWN or a reference returns
                every entry, breaks included.
            flags: PLAYING and/or OFFICIATING select the team's matches
        """
        if (
            team_id is None
            or MatchSelection.ALL in flags
            or team_id == UNKNOWN_TEAM_ID
            or is_reference(team_id)
        ):
            return list(self.entries)

        resolve = self.competition.resolve_team_id
        selected = []
        for match in self.matches:
            if MatchSelection.PLAYING in flags and team_id in (
                resolve(match.home_team.id),
                resolve(match.away_team.id),
            ):
                selected.append(match)
            elif (
                MatchSelection.OFFICIATING in flags
                and match.officials is not None
                and match.officials.is_team
                and resolve(match.officials.team_id) == team_id
            ):
                selected.append(match)
        return selected

    # Completeness and teams

    def is_complete(self) -> bool:
        return all(match.is_complete() for match in self.matches)

    def all_teams_known(self) -> bool:
        """Whether every group referenced by this group's teams is complete."""
        competition = self.competition
        for fragment in references.group_reference_fragments(self):
            match = references.REFERENCE_PATTERN.match(fragment)
            if match is None:
                return False
            stage_id, group_id = match.group(1), match.group(2)
            if not competition.has_stage(stage_id):
                return False
            stage = competition.get_stage_by_id(stage_id)
            if not stage.has_group(group_id) or not stage.get_group_by_id(group_id).is_complete():
                return False
        return True

    def _raw_team_ids(self, playing: bool, officiating: bool) -> List[str]:
        team_ids = []
        for match in self.matches:
            candidates = []
            if playing:
                candidates.extend([match.home_team.id, match.away_team.id])
            if officiating and match.officials is not None and match.officials.is_team:
                candidates.append(match.officials.team_id)
            for team_id in candidates:
                if team_id not in team_ids:
                    team_ids.append(team_id)
        return team_ids

    def _sort_by_name(self, team_ids: List[str]) -> List[str]:
        competition = self.competition
        return sorted(team_ids, key=lambda team_id: competition.resolve_team(team_id).name)

    def known_team_ids(self) -> List[str]:
        """Resolved IDs of every team known to play or officiate here, sorted by name."""
        resolve = self.competition.resolve_team_id
        known = []
        for team_id in self._raw_team_ids(playing=True, officiating=True):
            resolved = resolve(team_id)
            if resolved != UNKNOWN_TEAM_ID and resolved not in known:
                known.append(resolved)
        return self._sort_by_name(known)

    def get_team_ids(self, selection: TeamSelection = TeamSelection.FIXED_ID) -> List[str]:
        if TeamSelection.ALL in selection:
            return self._raw_team_ids(playing=True, officiating=True)
        if TeamSelection.PLAYING in selection:
            return self._raw_team_ids(playing=True, officiating=False)
        if TeamSelection.OFFICIATING in selection:
            return self._raw_team_ids(playing=False, officiating=True)
        if TeamSelection.MAYBE in selection:
            return references.maybe_team_ids(self)
        if TeamSelection.KNOWN in selection:
            return self.known_team_ids()
        fixed = [
            team_id
            for team_id in self._raw_team_ids(playing=True, officiating=True)
            if not is_reference(team_id)
        ]
        return self._sort_by_name(fixed)

    def team_has_matches(self, team_id: str) -> bool:
        """Whether the team is known to play in this group."""
        resolve = self.competition.resolve_team_id
        return any(
            team_id in (resolve(match.home_team.id), resolve(match.away_team.id))
            for match in self.matches
        )

    def team_has_officiating(self, team_id: str) -> bool:
        """Whether the team is known to officiate in this group."""
        resolve = self.competition.resolve_team_id
        return any(
            match.officials is not None
            and match.officials.is_team
            and resolve(match.officials.team_id) == team_id
            for match in self.matches
        )

    def team_may_have_matches(self, team_id: str) -> bool:
        return references.team_may_have_matches(self, team_id)

    # Schedule queries

    def matches_have(self, attribute: str) -> bool:
        """Whether any match sets a field, e.g. matches_have("court")."""
        return any(getattr(match, attribute) for match in self.matches)

    def get_match_dates(
        self, team_id: Optional[str] = None, flags: MatchSelection = MatchSelection.PLAYING
    ) -> List[str]:
        if team_id is None:
            flags = MatchSelection.ALL
        dates = {
            entry.date
            for entry in self.get_matches(team_id, flags)
            if isinstance(entry, Match) and entry.date is not None
        }
        return sorted(dates)

    def get_matches_on_date(
        self, date: str, team_id: Optional[str] = None, flags: MatchSelection = MatchSelection.ALL
    ) -> List[Entry]:
        entries = [
            entry for entry in self.get_matches(team_id, flags) if entry.date == date
        ]
        return sorted(entries, key=lambda entry: entry.start or "")

    # Standings

    def league_table(self) -> LeagueTable:
        if not self.is_league:
            raise StructureError(f"Group {self.label} is not a league")
        if self._league_table is None:
            if self._calculating_table:
                # A team name in this table refers back to the table itself
                return LeagueTable(group_id=self.id)
            logger.debug("Calculating league table for %s", self.label)
            self._calculating_table = True
            try:
                self._league_table = calculate_league_table(self)
            finally:
                self._calculating_table = False
        return self._league_table

    def knockout_standing(self) -> List[KnockoutStanding]:
        if not self.is_knockout:
            raise StructureError(f"Group {self.label} is not a knockout")
        return calculate_knockout_standing(self)

    def validate_knockout_standing(self):
        """Check every reference in the knockout standing template."""
        if self.knockout_config is None:
            return
        for row in self.knockout_config.standing:
            try:
                references.validate_team_reference(self.competition, row.id)
            except StructureError:
                raise
            except Exception as err:
                raise StructureError(
                    f'Invalid knockout standing reference for position "{row.position}" '
                    f'in group {self.label}: "{row.id}"'
                ) from err


class Stage:
    """An ordered phase of a competition, containing one or more groups."""

    def __init__(
        self,
        competition: "Competition",
        stage_id: str,
        name: Optional[str] = None,
        notes: Optional[str] = None,
        description: Optional[List[str]] = None,
    ):
        self.competition = competition
        self.id = validate_id(stage_id, "stage")
        self.name = name
        self.notes = notes
        self.description = description
        self.groups: List[Group] = []
        self._groups: Dict[str, Group] = {}
        self.if_unknown: Optional[Group] = None

    def __repr__(self):
        return f"Stage({self.id!r}, groups={[group.id for group in self.groups]})"

    def add_group(self, group: Group) -> "Stage":
        if group.stage is not self:
            raise StructureError("Group was initialised with a different Stage")
        if group.id in self._groups:
            raise StructureError(
                "Competition data failed validation. Groups in a Stage with duplicate IDs not allowed: "
                f"{{{self.id}:{group.id}}}"
            )
        self.groups.append(group)
        self._groups[group.id] = group
        return self

    def set_if_unknown(self, description: List[str]) -> Group:
        """Create the placeholder bracket shown while the stage's teams are unknown."""
        self.if_unknown = Group(
            self,
            IF_UNKNOWN_GROUP_ID,
            GroupType.IF_UNKNOWN,
            MatchType.SETS,
            description=description,
        )
        return self.if_unknown

    def check_shared_teams(self):
        """Groups in one stage must not share playing teams."""
        for index, group in enumerate(self.groups):
            team_ids = group.get_team_ids(TeamSelection.PLAYING)
            for other in self.groups[index + 1:]:
                other_ids = set(other.get_team_ids(TeamSelection.PLAYING))
                shared = [team_id for team_id in team_ids if team_id in other_ids]
                if shared:
                    shared_text = '", "'.join(shared)
                    raise StructureError(
                        "Groups in the same stage cannot contain the same team. "
                        f"Groups {group.label} and {other.label} both contain the following "
                        f'team IDs: "{shared_text}"'
                    )

    def get_group_by_id(self, group_id: str) -> Group:
        if group_id not in self._groups:
            raise NotFoundError(f"Group with ID {group_id} not found in stage with ID {self.id}")
        return self._groups[group_id]

    def has_group(self, group_id: str) -> bool:
        return group_id in self._groups

    def is_complete(self) -> bool:
        return all(group.is_complete() for group in self.groups)

    def get_matches(
        self, team_id: Optional[str] = None, flags: MatchSelection = MatchSelection.ALL
    ) -> List[Match]:
        """Matches across all groups, ordered by date and start time."""
        matches = []
        for group in self.groups:
            matches.extend(
                entry for entry in group.get_matches(team_id, flags) if isinstance(entry, Match)
            )
        return sorted(matches, key=_match_sort_key)

    def get_team_ids(self, selection: TeamSelection = TeamSelection.FIXED_ID) -> List[str]:
        team_ids = []
        for group in self.groups:
            for team_id in group.get_team_ids(selection):
                if team_id not in team_ids:
                    team_ids.append(team_id)
        return team_ids

    def team_has_matches(self, team_id: str) -> bool:
        return any(group.team_has_matches(team_id) for group in self.groups)

    def team_has_officiating(self, team_id: str) -> bool:
        return any(group.team_has_officiating(team_id) for group in self.groups)

    def team_may_have_matches(self, team_id: str) -> bool:
        if self.is_complete():
            return False
        return any(group.team_may_have_matches(team_id) for group in self.groups)

    def matches_have(self, attribute: str) -> bool:
        return any(group.matches_have(attribute) for group in self.groups)

    def get_match_dates(
        self, team_id: Optional[str] = None, flags: MatchSelection = MatchSelection.PLAYING
    ) -> List[str]:
        dates = set()
        for group in self.groups:
            dates.update(group.get_match_dates(team_id, flags))
        return sorted(dates)

    def get_matches_on_date(
        self, date: str, team_id: Optional[str] = None, flags: MatchSelection = MatchSelection.ALL
    ) -> List[Match]:
        matches = []
        for group in self.groups:
            matches.extend(
                entry
                for entry in group.get_matches_on_date(date, team_id, flags)
                if isinstance(entry, Match)
            )
        return sorted(matches, key=_match_sort_key)


class Competition:
    """The root of the entity graph: teams, clubs, players and stages."""

    def __init__(self, name: str, version: str = SUPPORTED_VERSION, notes: Optional[str] = None):
        self.name = validate_text(name, "competition name")
        self.version = version
        self.notes = notes
        self.metadata: Dict[str, str] = {}
        self.teams: List[CompetitionTeam] = []
        self.clubs: List[Club] = []
        self.players: List[Player] = []
        self.stages: List[Stage] = []
        self._teams: Dict[str, CompetitionTeam] = {}
        self._clubs: Dict[str, Club] = {}
        self._players: Dict[str, Player] = {}
        self._stages: Dict[str, Stage] = {}
        self.unknown_team = create_unknown_team()

    def __repr__(self):
        return f"Competition({self.name!r}, stages={[stage.id for stage in self.stages]})"

    # Metadata

    def set_metadata(self, key: str, value: str) -> "Competition":
        validate_text(key, "metadata key", MAX_ID_LENGTH)
        validate_text(value, "metadata value")
        self.metadata[key] = value
        return self

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def get_metadata(self, key: str) -> Optional[str]:
        return self.metadata.get(key)

    def delete_metadata(self, key: str) -> "Competition":
        self.metadata.pop(key, None)
        return self

    # Clubs

    def add_club(self, club: Club) -> "Competition":
        if club.id in self._clubs:
            raise StructureError(f'Club with ID "{club.id}" already exists in the competition')
        self.clubs.append(club)
        self._clubs[club.id] = club
        return self

    def get_club_by_id(self, club_id: str) -> Club:
        if club_id not in self._clubs:
            raise NotFoundError(f'Club with ID "{club_id}" not found')
        return self._clubs[club_id]

    def has_club(self, club_id: str) -> bool:
        return club_id in self._clubs

    def get_club_teams(self, club_id: str) -> List[CompetitionTeam]:
        return [team for team in self.teams if team.club_id == club_id]

    def delete_club(self, club_id: str) -> "Competition":
        if not self.has_club(club_id):
            return self
        club_teams = self.get_club_teams(club_id)
        if club_teams:
            team_ids = ", ".join("{" + team.id + "}" for team in club_teams)
            raise StructureError(f"Club still contains teams with IDs: {team_ids}")
        self.clubs.remove(self._clubs.pop(club_id))
        return self

    # Players

    def add_player(self, player: Player) -> "Competition":
        if player.id in self._players:
            raise StructureError(f'Player with ID "{player.id}" already exists in the competition')
        self.players.append(player)
        self._players[player.id] = player
        return self

    def get_player_by_id(self, player_id: str) -> Player:
        if player_id not in self._players:
            raise NotFoundError(f'Player with ID "{player_id}" not found')
        return self._players[player_id]

    def has_player(self, player_id: str) -> bool:
        return player_id in self._players

    # Teams

    def add_team(self, team: CompetitionTeam) -> "Competition":
        if team.is_unknown or team.id in self._teams:
            raise StructureError(f'Team with ID "{team.id}" already exists in the competition')
        if team.club_id is not None and not self.has_club(team.club_id):
            raise StructureError(f'No club with ID "{team.club_id}" exists')
        self.teams.append(team)
        self._teams[team.id] = team
        return self

    def get_team_by_id(self, team_id: str) -> CompetitionTeam:
        """Look up a registered team by its literal ID."""
        if team_id not in self._teams:
            raise NotFoundError(f'Team with ID "{team_id}" not found')
        return self._teams[team_id]

    def has_team(self, team_id: str) -> bool:
        return team_id in self._teams

    def delete_team(self, team_id: str) -> "Competition":
        """Remove a team that has no matches or officiating duties."""
        if not self.has_team(team_id):
            return self
        team_matches = []
        for stage in self.stages:
            team_matches.extend(
                stage.get_matches(team_id, MatchSelection.PLAYING | MatchSelection.OFFICIATING)
            )
        if team_matches:
            labels = ", ".join(match.label for match in team_matches)
            raise StructureError(f"Team still has matches with IDs: {labels}")
        self.teams.remove(self._teams.pop(team_id))
        return self

    # References

    def validate_team_id(self, team_id: str, match_id: str, field: str):
        references.validate_team_id(self, team_id, match_id, field)

    def resolve_team_id(self, team_id: str) -> str:
        """Resolve a team ID or reference, returning UNKNOWN_TEAM_ID when not yet known."""
        return references.resolve_team_id(self, team_id)

    def resolve_team(self, team_id: str) -> CompetitionTeam:
        resolved = self.resolve_team_id(team_id)
        if resolved == UNKNOWN_TEAM_ID:
            return self.unknown_team
        return self._teams[resolved]

    # Stages

    def add_stage(self, stage: Stage) -> "Competition":
        if stage.competition is not self:
            raise StructureError("Stage was initialised with a different Competition")
        if stage.id in self._stages:
            raise StructureError(f'Stage with ID "{stage.id}" already exists in the competition')
        self.stages.append(stage)
        self._stages[stage.id] = stage
        return self

    def get_stage_by_id(self, stage_id: str) -> Stage:
        if stage_id not in self._stages:
            raise NotFoundError(f"Stage with ID {stage_id} not found")
        return self._stages[stage_id]

    def has_stage(self, stage_id: str) -> bool:
        return stage_id in self._stages

    def delete_stage(self, stage_id: str) -> "Competition":
        """Remove a stage that no later stage refers to."""
        if not self.has_stage(stage_id):
            return self
        index = self.stages.index(self._stages[stage_id])
        for stage in self.stages[index + 1:]:
            for group in stage.groups:
                for match in group.matches:
                    for team_id in match.team_ids():
                        for fragment in references.strip_team_references(team_id):
                            if fragment[1:].split(":", 1)[0] == stage_id:
                                raise StructureError(
                                    f'Cannot delete stage with id "{stage_id}" as it is '
                                    f"referenced in match {match.label}"
                                )
        self.stages.remove(self._stages.pop(stage_id))
        return self

    def is_complete(self) -> bool:
        return all(stage.is_complete() for stage in self.stages)
