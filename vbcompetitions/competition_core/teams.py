"""
Teams, clubs, players and contacts registered in a competition.
"""

from typing import List, Optional
from dataclasses import dataclass, field

from vbcompetitions.competition_core.exceptions import NotFoundError, StructureError
from vbcompetitions.competition_core.identifiers import (
    UNKNOWN_TEAM_ID,
    UNKNOWN_TEAM_NAME,
    validate_id,
    validate_text,
)


@dataclass
class Contact:
    """A team or club contact, e.g. a secretary or treasurer."""

    id: str
    name: Optional[str] = None
    roles: List[str] = field(default_factory=list)
    emails: List[str] = field(default_factory=list)
    phones: List[str] = field(default_factory=list)
    notes: Optional[str] = None

    def __post_init__(self):
        validate_id(self.id, "contact")
        if self.name is not None:
            validate_text(self.name, "contact name")


class ContactOwner:
    """Contact lookups shared by teams and clubs, which both hold a contacts list."""

    owner_kind = ""

    def _duplicate_contact_error(self) -> StructureError:
        return StructureError(
            f"{self.owner_kind} contacts with duplicate IDs within a {self.owner_kind} not allowed"
        )

    def _check_contacts(self):
        seen = set()
        for contact in self.contacts:
            if contact.id in seen:
                raise self._duplicate_contact_error()
            seen.add(contact.id)

    def add_contact(self, contact: Contact):
        if self.has_contact(contact.id):
            raise self._duplicate_contact_error()
        self.contacts.append(contact)
        return self

    def has_contact(self, contact_id: str) -> bool:
        return any(contact.id == contact_id for contact in self.contacts)

    def get_contact_by_id(self, contact_id: str) -> Contact:
        for contact in self.contacts:
            if contact.id == contact_id:
                return contact
        raise NotFoundError(f'Contact with ID "{contact_id}" not found')

    def delete_contact(self, contact_id: str):
        self.contacts = [contact for contact in self.contacts if contact.id != contact_id]
        return self


@dataclass
class CompetitionTeam(ContactOwner):
    """A team taking part in the competition."""

    id: str
    name: str
    notes: Optional[str] = None
    club_id: Optional[str] = None
    contacts: List[Contact] = field(default_factory=list)

    owner_kind = "team"

    def __post_init__(self):
        # The unknown team is created internally and skips validation
        if self.id != UNKNOWN_TEAM_ID:
            validate_id(self.id, "team")
            validate_text(self.name, "team name")
        self._check_contacts()

    @property
    def is_unknown(self) -> bool:
        return self.id == UNKNOWN_TEAM_ID


def create_unknown_team() -> CompetitionTeam:
    """The placeholder team returned when a reference cannot be resolved yet."""
    return CompetitionTeam(id=UNKNOWN_TEAM_ID, name=UNKNOWN_TEAM_NAME)


@dataclass
class Club(ContactOwner):
    """A club that one or more teams belong to."""

    id: str
    name: str
    notes: Optional[str] = None
    contacts: List[Contact] = field(default_factory=list)

    owner_kind = "club"

    def __post_init__(self):
        validate_id(self.id, "club")
        validate_text(self.name, "club name")
        self._check_contacts()


@dataclass
class Player:
    """A registered player."""

    id: str
    name: str
    number: Optional[int] = None
    notes: Optional[str] = None

    def __post_init__(self):
        validate_id(self.id, "player")
        validate_text(self.name, "player name")
