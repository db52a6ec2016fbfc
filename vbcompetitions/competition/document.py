"""
Loading and saving competition JSON documents.

A document is parsed and checked against the document models in
vbcompetitions.competition.schema, then built into the competition_core
entity graph, which applies the semantic rules (IDs, team references, scores).
Saving reverses the process, omitting any optional field that is unset.
"""

import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from vbcompetitions import settings
from vbcompetitions.competition.schema import (
    BreakDocument,
    CompetitionDocument,
    ContactDocument,
    GroupDocument,
    MatchDocument,
    MatchTeamDocument,
)
from vbcompetitions.competition_core.exceptions import DocumentError
from vbcompetitions.competition_core.knockout import KnockoutConfig, KnockoutPosition
from vbcompetitions.competition_core.matches import (
    Break,
    Match,
    MatchManager,
    MatchOfficials,
    MatchTeam,
)
from vbcompetitions.competition_core.scoring import LeagueConfig, LeaguePoints, SetConfig
from vbcompetitions.competition_core.structure import (
    SUPPORTED_VERSION,
    Competition,
    Group,
    GroupType,
    MatchType,
    Stage,
)
from vbcompetitions.competition_core.teams import Club, CompetitionTeam, Contact, Player

logger = logging.getLogger(__name__)

MAX_SCHEMA_ERRORS = 5


# ========== Loading ==========


def _schema_error(err: ValidationError) -> DocumentError:
    lines = []
    for error in err.errors()[:MAX_SCHEMA_ERRORS]:
        location = "/".join(str(part) for part in error["loc"])
        lines.append(f"[{location}] {error['msg']}")
    return DocumentError("Competition data failed schema validation:\n" + "\n".join(lines))


def _build_contacts(contacts: Optional[List[ContactDocument]]) -> List[Contact]:
    return [
        Contact(
            contact.id,
            contact.name,
            roles=list(contact.roles),
            emails=list(contact.emails or []),
            phones=list(contact.phones or []),
            notes=contact.notes,
        )
        for contact in contacts or []
    ]


def _build_match_team(data: MatchTeamDocument) -> MatchTeam:
    return MatchTeam(
        id=data.id,
        scores=data.scores,
        mvp=data.mvp,
        forfeit=data.forfeit,
        bonus_points=data.bonus_points,
        penalty_points=data.penalty_points,
        notes=data.notes,
        players=list(data.players or []),
    )


def _build_match(data: MatchDocument) -> Match:
    officials = None
    if data.officials is not None:
        officials = MatchOfficials(
            team_id=data.officials.team,
            first=data.officials.first,
            second=data.officials.second,
            challenge=data.officials.challenge,
            assistant_challenge=data.officials.assistant_challenge,
            reserve=data.officials.reserve,
            scorer=data.officials.scorer,
            assistant_scorer=data.officials.assistant_scorer,
            linespersons=list(data.officials.linespersons or []),
            ball_crew=list(data.officials.ball_crew or []),
        )
    manager = None
    if isinstance(data.manager, str):
        manager = MatchManager(name=data.manager)
    elif data.manager is not None:
        manager = MatchManager(team_id=data.manager.team)

    return Match(
        data.id,
        _build_match_team(data.home_team),
        _build_match_team(data.away_team),
        complete=data.complete,
        court=data.court,
        venue=data.venue,
        date=data.date,
        warmup=data.warmup,
        start=data.start,
        duration=data.duration,
        officials=officials,
        mvp=data.mvp,
        manager=manager,
        notes=data.notes,
        friendly=bool(data.friendly),
    )


def _add_entries(group: Group, entries: List[Union[MatchDocument, BreakDocument]]):
    for entry in entries:
        if isinstance(entry, MatchDocument):
            group.add_match(_build_match(entry))
        else:
            group.add_break(
                Break(start=entry.start, date=entry.date, duration=entry.duration, name=entry.name)
            )


def _build_group(stage: Stage, data: GroupDocument) -> Group:
    set_config = SetConfig(**data.sets.model_dump()) if data.sets is not None else None
    league_config = None
    if data.league is not None:
        league_config = LeagueConfig(
            ordering=list(data.league.ordering),
            points=LeaguePoints(**data.league.points.model_dump()),
        )
    knockout_config = None
    if data.knockout is not None:
        knockout_config = KnockoutConfig(
            standing=[KnockoutPosition(row.position, row.id) for row in data.knockout.standing]
        )
    return Group(
        stage,
        data.id,
        GroupType(data.type),
        MatchType(data.match_type),
        draws_allowed=bool(data.draws_allowed),
        set_config=set_config,
        league_config=league_config,
        knockout_config=knockout_config,
        name=data.name,
        notes=data.notes,
        description=data.description,
    )


def build_competition(document: CompetitionDocument) -> Competition:
    """Build the entity graph from a structurally valid document."""
    competition = Competition(document.name, version=document.version, notes=document.notes)

    for item in document.metadata or []:
        competition.set_metadata(item.key, item.value)

    for club in document.clubs or []:
        competition.add_club(
            Club(club.id, club.name, notes=club.notes, contacts=_build_contacts(club.contacts))
        )

    for team in document.teams:
        competition.add_team(
            CompetitionTeam(
                team.id,
                team.name,
                notes=team.notes,
                club_id=team.club,
                contacts=_build_contacts(team.contacts),
            )
        )

    for player in document.players or []:
        competition.add_player(Player(player.id, player.name, number=player.number, notes=player.notes))

    for stage_data in document.stages:
        stage = Stage(
            competition,
            stage_data.id,
            name=stage_data.name,
            notes=stage_data.notes,
            description=stage_data.description,
        )
        competition.add_stage(stage)
        for group_data in stage_data.groups:
            # Groups join the stage before their matches so they can refer to themselves
            group = _build_group(stage, group_data)
            stage.add_group(group)
            _add_entries(group, group_data.matches)
        if stage_data.if_unknown is not None:
            if_unknown = stage.set_if_unknown(list(stage_data.if_unknown.description))
            _add_entries(if_unknown, stage_data.if_unknown.matches)
        stage.check_shared_teams()

    for stage in competition.stages:
        for group in stage.groups:
            group.validate_knockout_standing()

    return competition


def parse_document(data: Any) -> CompetitionDocument:
    """
    Check the version and structure of decoded JSON data.

    Raises:
        DocumentError: The version is unsupported or the structure is invalid
    """
    if isinstance(data, dict) and "version" in data and data["version"] != SUPPORTED_VERSION:
        raise DocumentError(f"Document version {data['version']} not supported")
    try:
        return CompetitionDocument.model_validate(data)
    except ValidationError as err:
        raise _schema_error(err) from err


def loads_competition(text: str) -> Competition:
    """
    Load a competition from JSON text.

    Raises:
        DocumentError: The text is not JSON, or the document is structurally invalid
        CompetitionError: The document breaks a competition rule, e.g. an
            unknown team ID or invalid scores
    """
    try:
        data = json.loads(text)
    except ValueError as err:
        raise DocumentError("Document does not contain valid JSON") from err
    return build_competition(parse_document(data))


def load_competition(path: str) -> Competition:
    """Load a competition from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as err:
        raise DocumentError("Failed to load file") from err
    return loads_competition(text)


# ========== Saving ==========


def _prune(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _contact_to_dict(contact: Contact) -> Dict[str, Any]:
    return _prune(
        {
            "id": contact.id,
            "name": contact.name,
            "notes": contact.notes,
            "roles": list(contact.roles),
            "emails": list(contact.emails) or None,
            "phones": list(contact.phones) or None,
        }
    )


def _match_team_to_dict(team: MatchTeam) -> Dict[str, Any]:
    return _prune(
        {
            "id": team.id,
            "scores": list(team.scores),
            "mvp": team.mvp,
            "forfeit": team.forfeit,
            "bonusPoints": team.bonus_points,
            "penaltyPoints": team.penalty_points,
            "notes": team.notes,
            "players": list(team.players) or None,
        }
    )


def _officials_to_dict(officials: MatchOfficials) -> Dict[str, Any]:
    if officials.is_team:
        return {"team": officials.team_id}
    return _prune(
        {
            "first": officials.first,
            "second": officials.second,
            "challenge": officials.challenge,
            "assistantChallenge": officials.assistant_challenge,
            "reserve": officials.reserve,
            "scorer": officials.scorer,
            "assistantScorer": officials.assistant_scorer,
            "linespersons": list(officials.linespersons) or None,
            "ballCrew": list(officials.ball_crew) or None,
        }
    )


def _manager_to_dict(manager: Optional[MatchManager]):
    if manager is None:
        return None
    if manager.is_team:
        return {"team": manager.team_id}
    return manager.name


def _entry_to_dict(entry: Union[Match, Break]) -> Dict[str, Any]:
    if isinstance(entry, Break):
        return _prune(
            {
                "type": "break",
                "start": entry.start,
                "date": entry.date,
                "duration": entry.duration,
                "name": entry.name,
            }
        )
    return _prune(
        {
            "id": entry.id,
            "court": entry.court,
            "venue": entry.venue,
            "type": "match",
            "date": entry.date,
            "warmup": entry.warmup,
            "start": entry.start,
            "duration": entry.duration,
            "complete": entry.complete,
            "homeTeam": _match_team_to_dict(entry.home_team),
            "awayTeam": _match_team_to_dict(entry.away_team),
            "officials": _officials_to_dict(entry.officials) if entry.officials else None,
            "mvp": entry.mvp,
            "manager": _manager_to_dict(entry.manager),
            "friendly": True if entry.friendly else None,
            "notes": entry.notes,
        }
    )


def _group_to_dict(group: Group) -> Dict[str, Any]:
    data = _prune(
        {
            "id": group.id,
            "name": group.name,
            "notes": group.notes,
            "description": group.description,
            "type": group.type.value,
            "matchType": group.match_type.value,
        }
    )
    if not group.is_continuous:
        config = group.set_config
        data["sets"] = {
            "maxSets": config.max_sets,
            "setsToWin": config.sets_to_win,
            "clearPoints": config.clear_points,
            "minPoints": config.min_points,
            "pointsToWin": config.points_to_win,
            "lastSetPointsToWin": config.last_set_points_to_win,
            "maxPoints": config.max_points,
            "lastSetMaxPoints": config.last_set_max_points,
        }
    if group.is_league:
        points = group.league_config.points
        data["league"] = {
            "ordering": list(group.league_config.ordering),
            "points": {
                "played": points.played,
                "perSet": points.per_set,
                "win": points.win,
                "winByOne": points.win_by_one,
                "lose": points.lose,
                "loseByOne": points.lose_by_one,
                "forfeit": points.forfeit,
            },
        }
        data["drawsAllowed"] = group.draws_allowed
    if group.knockout_config is not None:
        data["knockout"] = {
            "standing": [
                {"position": row.position, "id": row.id} for row in group.knockout_config.standing
            ]
        }
    data["matches"] = [_entry_to_dict(entry) for entry in group.entries]
    return data


def competition_to_dict(competition: Competition) -> Dict[str, Any]:
    """The document form of a competition."""
    data: Dict[str, Any] = {"version": competition.version}
    if competition.metadata:
        data["metadata"] = [
            {"key": key, "value": value} for key, value in competition.metadata.items()
        ]
    data["name"] = competition.name
    if competition.notes is not None:
        data["notes"] = competition.notes
    clubs = []
    for club in competition.clubs:
        club_data = {"id": club.id, "name": club.name}
        if club.contacts:
            club_data["contacts"] = [_contact_to_dict(contact) for contact in club.contacts]
        if club.notes is not None:
            club_data["notes"] = club.notes
        clubs.append(club_data)
    data["clubs"] = clubs

    teams = []
    for team in competition.teams:
        team_data = {"id": team.id, "name": team.name}
        if team.contacts:
            team_data["contacts"] = [_contact_to_dict(contact) for contact in team.contacts]
        if team.club_id is not None:
            team_data["club"] = team.club_id
        if team.notes is not None:
            team_data["notes"] = team.notes
        teams.append(team_data)
    data["teams"] = teams

    if competition.players:
        data["players"] = [
            _prune({"id": p.id, "name": p.name, "number": p.number, "notes": p.notes})
            for p in competition.players
        ]

    stages = []
    for stage in competition.stages:
        stage_data = _prune(
            {
                "id": stage.id,
                "name": stage.name,
                "notes": stage.notes,
                "description": stage.description,
            }
        )
        stage_data["groups"] = [_group_to_dict(group) for group in stage.groups]
        if stage.if_unknown is not None:
            stage_data["ifUnknown"] = {
                "description": list(stage.if_unknown.description or []),
                "matches": [_entry_to_dict(entry) for entry in stage.if_unknown.entries],
            }
        stages.append(stage_data)
    data["stages"] = stages
    return data


def dumps_competition(competition: Competition, indent: Optional[int] = None) -> str:
    """Serialise a competition to JSON text, checking the document structure first."""
    data = competition_to_dict(competition)
    parse_document(data)
    return json.dumps(data, indent=settings.JSON_INDENT if indent is None else indent, ensure_ascii=False)


def save_competition(competition: Competition, path: str):
    """
    Write a competition to a JSON file.

    The document is written to a temporary file in the same directory and
    moved into place, so readers never see a partially written file.

    Raises:
        DocumentError: The file cannot be written
    """
    text = dumps_competition(competition)
    directory = os.path.dirname(os.path.abspath(path))
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, suffix=".tmp", delete=False
        ) as f:
            f.write(text)
            temp_path = f.name
        os.replace(temp_path, path)
    except OSError as err:
        raise DocumentError(f"Failed to save file {path}") from err
    logger.info("Saved competition %r to %s", competition.name, path)
