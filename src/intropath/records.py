"""Record types exchanged with the network data-access layer.

Every store returns these immutable records so the graph builder never
depends on a particular backend's row format.

Public API:
    UserRecord: A registered user.
    ContactRecord: A contact owned by a user.
    RelationshipRecord: A user-to-contact or contact-to-contact relationship.
    TeamRecord: A team a user belongs to.
    TeamMemberRecord: A member of a team.
    SharedContactRecord: A contact one member shared with a team.
    TeamContactMatch: A team-shared contact found by free-text search.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import InvalidRecordError

MIN_STRENGTH = 1
MAX_STRENGTH = 5
DEFAULT_STRENGTH = 3
DEFAULT_VISIBILITY = "basic"


def validate_strength(strength: int) -> int:
    """Return *strength* if it is an integer on the 1-5 scale.

    Raises:
        InvalidRecordError: If the value is not an int or is out of range.
    """
    if isinstance(strength, bool) or not isinstance(strength, int):
        raise InvalidRecordError("strength must be an integer")
    if not (MIN_STRENGTH <= strength <= MAX_STRENGTH):
        raise InvalidRecordError(
            f"strength must be between {MIN_STRENGTH} and {MAX_STRENGTH}"
        )
    return strength


def _require(value: str | None, field_name: str) -> None:
    if not value or not str(value).strip():
        raise InvalidRecordError(f"{field_name} cannot be empty")


@dataclass(frozen=True)
class UserRecord:
    """A registered user of the network."""

    user_id: str
    name: str

    def __post_init__(self):
        _require(self.user_id, "user_id")
        _require(self.name, "name")


@dataclass(frozen=True)
class ContactRecord:
    """A contact owned by exactly one user.

    Attributes:
        contact_id: Unique contact identifier.
        owner_id: User who owns the contact.
        name: Display name (required).
        company: Employer, if known.
        title: Job title, if known.
    """

    contact_id: str
    owner_id: str
    name: str
    company: str | None = None
    title: str | None = None

    def __post_init__(self):
        _require(self.contact_id, "contact_id")
        _require(self.owner_id, "owner_id")
        _require(self.name, "name")
        if self.contact_id == self.owner_id:
            raise InvalidRecordError("contact_id cannot equal owner_id")


@dataclass(frozen=True)
class RelationshipRecord:
    """A stored relationship owned by a user.

    A user relationship links the owner to ``contact_a_id``; a contact
    relationship links ``contact_a_id`` to ``contact_b_id``.

    Attributes:
        relationship_id: Unique relationship identifier.
        owner_id: User whose network holds the relationship.
        contact_a_id: First endpoint (always a contact).
        contact_b_id: Second endpoint for contact relationships, else None.
        is_user_relationship: True when the owner is the other endpoint.
        strength: Trust on the 1-5 scale, higher is stronger.
        relationship_type: Free-form label (e.g. "colleague", "direct").
    """

    relationship_id: str
    owner_id: str
    contact_a_id: str
    contact_b_id: str | None = None
    is_user_relationship: bool = False
    strength: int = DEFAULT_STRENGTH
    relationship_type: str | None = None

    def __post_init__(self):
        _require(self.relationship_id, "relationship_id")
        _require(self.owner_id, "owner_id")
        _require(self.contact_a_id, "contact_a_id")
        validate_strength(self.strength)
        if not self.is_user_relationship and not self.contact_b_id:
            raise InvalidRecordError(
                "contact relationships require contact_b_id"
            )


@dataclass(frozen=True)
class TeamRecord:
    """A team and its display name."""

    team_id: str
    name: str


@dataclass(frozen=True)
class TeamMemberRecord:
    """A member of a team."""

    user_id: str
    name: str


@dataclass(frozen=True)
class SharedContactRecord:
    """A contact that one team member shared with a team."""

    contact_id: str
    name: str
    company: str | None = None
    title: str | None = None
    visibility: str = DEFAULT_VISIBILITY


@dataclass(frozen=True)
class TeamContactMatch:
    """A team-shared contact found by free-text search, with its provenance."""

    contact: ContactRecord
    team_id: str
    team_name: str
    shared_by_user_id: str
    shared_by_user_name: str


__all__ = [
    "MIN_STRENGTH",
    "MAX_STRENGTH",
    "DEFAULT_STRENGTH",
    "DEFAULT_VISIBILITY",
    "validate_strength",
    "UserRecord",
    "ContactRecord",
    "RelationshipRecord",
    "TeamRecord",
    "TeamMemberRecord",
    "SharedContactRecord",
    "TeamContactMatch",
]
