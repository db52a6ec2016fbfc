"""Pydantic models describing the structure of a competition JSON document."""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictInt, model_validator


class DocumentModel(BaseModel):
    """Base for document models: camelCase aliases, unknown fields rejected."""

    class Config:
        """Pydantic configuration."""

        populate_by_name = True
        extra = "forbid"


class MetadataItem(DocumentModel):
    key: str
    value: str


class ContactDocument(DocumentModel):
    id: str
    name: Optional[str] = None
    notes: Optional[str] = None
    roles: List[str]
    emails: Optional[List[str]] = None
    phones: Optional[List[str]] = None


class ClubDocument(DocumentModel):
    id: str
    name: str
    contacts: Optional[List[ContactDocument]] = None
    notes: Optional[str] = None


class TeamDocument(DocumentModel):
    id: str
    name: str
    contacts: Optional[List[ContactDocument]] = None
    club: Optional[str] = None
    notes: Optional[str] = None


class PlayerDocument(DocumentModel):
    id: str
    name: str
    number: Optional[StrictInt] = None
    notes: Optional[str] = None


class MatchTeamDocument(DocumentModel):
    id: str
    scores: List[StrictInt]
    mvp: Optional[str] = None
    forfeit: StrictBool = False
    bonus_points: StrictInt = Field(0, alias="bonusPoints")
    penalty_points: StrictInt = Field(0, alias="penaltyPoints")
    notes: Optional[str] = None
    players: Optional[List[str]] = None


class OfficialsDocument(DocumentModel):
    team: Optional[str] = None
    first: Optional[str] = None
    second: Optional[str] = None
    challenge: Optional[str] = None
    assistant_challenge: Optional[str] = Field(None, alias="assistantChallenge")
    reserve: Optional[str] = None
    scorer: Optional[str] = None
    assistant_scorer: Optional[str] = Field(None, alias="assistantScorer")
    linespersons: Optional[List[str]] = None
    ball_crew: Optional[List[str]] = Field(None, alias="ballCrew")


class ManagerTeamDocument(DocumentModel):
    team: str


class MatchDocument(DocumentModel):
    id: str
    type: Literal["match"]
    court: Optional[str] = None
    venue: Optional[str] = None
    date: Optional[str] = None
    warmup: Optional[str] = None
    start: Optional[str] = None
    duration: Optional[str] = None
    complete: Optional[StrictBool] = None
    home_team: MatchTeamDocument = Field(..., alias="homeTeam")
    away_team: MatchTeamDocument = Field(..., alias="awayTeam")
    officials: Optional[OfficialsDocument] = None
    mvp: Optional[str] = None
    manager: Optional[Union[ManagerTeamDocument, str]] = None
    friendly: Optional[StrictBool] = None
    notes: Optional[str] = None


class BreakDocument(DocumentModel):
    type: Literal["break"]
    start: Optional[str] = None
    date: Optional[str] = None
    duration: Optional[str] = None
    name: Optional[str] = None


GroupEntry = Annotated[Union[MatchDocument, BreakDocument], Field(discriminator="type")]


class SetConfigDocument(DocumentModel):
    max_sets: StrictInt = Field(5, alias="maxSets")
    sets_to_win: StrictInt = Field(3, alias="setsToWin")
    clear_points: StrictInt = Field(2, alias="clearPoints")
    min_points: StrictInt = Field(1, alias="minPoints")
    points_to_win: StrictInt = Field(25, alias="pointsToWin")
    last_set_points_to_win: StrictInt = Field(15, alias="lastSetPointsToWin")
    max_points: StrictInt = Field(1000, alias="maxPoints")
    last_set_max_points: StrictInt = Field(1000, alias="lastSetMaxPoints")


class LeaguePointsDocument(DocumentModel):
    played: StrictInt = 0
    per_set: StrictInt = Field(0, alias="perSet")
    win: StrictInt = 0
    win_by_one: StrictInt = Field(0, alias="winByOne")
    lose: StrictInt = 0
    lose_by_one: StrictInt = Field(0, alias="loseByOne")
    forfeit: StrictInt = 0


class LeagueConfigDocument(DocumentModel):
    ordering: List[str]
    points: LeaguePointsDocument


class KnockoutPositionDocument(DocumentModel):
    position: str
    id: str


class KnockoutConfigDocument(DocumentModel):
    standing: List[KnockoutPositionDocument]


class GroupDocument(DocumentModel):
    id: str
    name: Optional[str] = None
    notes: Optional[str] = None
    description: Optional[List[str]] = None
    type: Literal["league", "knockout", "crossover"]
    match_type: Literal["continuous", "sets"] = Field(..., alias="matchType")
    sets: Optional[SetConfigDocument] = None
    league: Optional[LeagueConfigDocument] = None
    knockout: Optional[KnockoutConfigDocument] = None
    draws_allowed: Optional[StrictBool] = Field(None, alias="drawsAllowed")
    matches: List[GroupEntry]

    @model_validator(mode="after")
    def league_groups_have_league(self):
        if self.type == "league" and self.league is None:
            raise ValueError('league groups must contain a "league" configuration')
        return self


class IfUnknownDocument(DocumentModel):
    description: List[str]
    matches: List[GroupEntry]


class StageDocument(DocumentModel):
    id: str
    name: Optional[str] = None
    notes: Optional[str] = None
    description: Optional[List[str]] = None
    groups: List[GroupDocument]
    if_unknown: Optional[IfUnknownDocument] = Field(None, alias="ifUnknown")


class CompetitionDocument(DocumentModel):
    version: str = "1.0.0"
    metadata: Optional[List[MetadataItem]] = None
    name: str
    notes: Optional[str] = None
    clubs: Optional[List[ClubDocument]] = None
    teams: List[TeamDocument]
    players: Optional[List[PlayerDocument]] = None
    stages: List[StageDocument]
