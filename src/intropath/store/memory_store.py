"""InMemoryNetworkStore -- dict-based NetworkStore for tests and embedding.

Public API:
    InMemoryNetworkStore: Thread-safe store holding all records in dicts.
"""

from __future__ import annotations

import threading
import uuid

from ..exceptions import InvalidRecordError, RecordNotFoundError
from ..records import (
    DEFAULT_STRENGTH,
    DEFAULT_VISIBILITY,
    ContactRecord,
    RelationshipRecord,
    SharedContactRecord,
    TeamContactMatch,
    TeamMemberRecord,
    TeamRecord,
    UserRecord,
)


def contact_matches(contact: ContactRecord, text: str) -> bool:
    """Case-insensitive substring test over name, company and title."""
    needle = text.lower()
    for value in (contact.name, contact.company, contact.title):
        if value and needle in value.lower():
            return True
    return False


class InMemoryNetworkStore:
    """Dict-based NetworkStore that needs no database.

    Reads return records in insertion order.  Thread-safe via a
    reentrant lock.

    Args:
        store_id: Human-readable identifier for this store instance.
    """

    def __init__(self, store_id: str = "in_memory") -> None:
        self._store_id = store_id
        self._users: dict[str, UserRecord] = {}
        self._contacts: dict[str, ContactRecord] = {}
        self._relationships: list[RelationshipRecord] = []
        self._teams: dict[str, TeamRecord] = {}
        self._members: dict[str, list[str]] = {}  # team_id -> [user_id]
        # (team_id, user_id) in join order
        self._memberships: list[tuple[str, str]] = []
        # (team_id, contact_id) -> (shared_by_id, visibility)
        self._shares: dict[tuple[str, str], tuple[str, str]] = {}
        self._lock = threading.RLock()

    @property
    def store_id(self) -> str:
        return self._store_id

    # ── writes ────────────────────────────────────────────────

    def add_user(self, user_id: str, name: str) -> UserRecord:
        user = UserRecord(user_id=user_id, name=name)
        with self._lock:
            self._users[user_id] = user
        return user

    def add_contact(
        self,
        owner_id: str,
        name: str,
        company: str | None = None,
        title: str | None = None,
        contact_id: str | None = None,
    ) -> ContactRecord:
        contact = ContactRecord(
            contact_id=contact_id or uuid.uuid4().hex,
            owner_id=owner_id,
            name=name,
            company=company,
            title=title,
        )
        with self._lock:
            if owner_id not in self._users:
                raise RecordNotFoundError(f"User not found: {owner_id}")
            existing = self._contacts.get(contact.contact_id)
            if existing is not None and existing.owner_id != owner_id:
                raise InvalidRecordError(
                    f"Contact {contact.contact_id} is owned by {existing.owner_id}"
                )
            self._contacts[contact.contact_id] = contact
        return contact

    def add_relationship(
        self,
        owner_id: str,
        contact_a_id: str,
        strength: int = DEFAULT_STRENGTH,
        relationship_type: str | None = None,
        contact_b_id: str | None = None,
        relationship_id: str | None = None,
    ) -> RelationshipRecord:
        """Store a relationship; ``contact_b_id=None`` links owner and contact A."""
        relationship = RelationshipRecord(
            relationship_id=relationship_id or uuid.uuid4().hex,
            owner_id=owner_id,
            contact_a_id=contact_a_id,
            contact_b_id=contact_b_id,
            is_user_relationship=contact_b_id is None,
            strength=strength,
            relationship_type=relationship_type,
        )
        with self._lock:
            for cid in filter(None, (contact_a_id, contact_b_id)):
                self._require_owned_contact(cid, owner_id)
            self._relationships.append(relationship)
        return relationship

    def create_team(self, name: str, team_id: str | None = None) -> TeamRecord:
        if not name or not name.strip():
            raise InvalidRecordError("team name cannot be empty")
        team = TeamRecord(team_id=team_id or uuid.uuid4().hex, name=name)
        with self._lock:
            self._teams[team.team_id] = team
            self._members.setdefault(team.team_id, [])
        return team

    def add_team_member(self, team_id: str, user_id: str) -> None:
        with self._lock:
            if team_id not in self._teams:
                raise RecordNotFoundError(f"Team not found: {team_id}")
            if user_id not in self._users:
                raise RecordNotFoundError(f"User not found: {user_id}")
            members = self._members[team_id]
            if user_id not in members:
                members.append(user_id)
                self._memberships.append((team_id, user_id))

    def share_contact(
        self,
        contact_id: str,
        team_id: str,
        shared_by_id: str,
        visibility: str = DEFAULT_VISIBILITY,
    ) -> None:
        """Share an owned contact with a team; re-sharing updates visibility."""
        with self._lock:
            if team_id not in self._teams:
                raise RecordNotFoundError(f"Team not found: {team_id}")
            if shared_by_id not in self._members[team_id]:
                raise InvalidRecordError(
                    f"User {shared_by_id} is not a member of team {team_id}"
                )
            self._require_owned_contact(contact_id, shared_by_id)
            key = (team_id, contact_id)
            existing = self._shares.get(key)
            sharer = existing[0] if existing else shared_by_id
            self._shares[key] = (sharer, visibility)

    # ── NetworkStore reads ────────────────────────────────────

    def get_contacts(self, user_id: str) -> list[ContactRecord]:
        with self._lock:
            return [c for c in self._contacts.values() if c.owner_id == user_id]

    def get_relationships(self, user_id: str) -> list[RelationshipRecord]:
        with self._lock:
            return [r for r in self._relationships if r.owner_id == user_id]

    def get_teams(self, user_id: str) -> list[TeamRecord]:
        with self._lock:
            return [
                self._teams[tid]
                for tid, uid in self._memberships
                if uid == user_id
            ]

    def get_team_members(
        self,
        team_id: str,
        exclude_user_id: str,
    ) -> list[TeamMemberRecord]:
        with self._lock:
            return [
                TeamMemberRecord(user_id=uid, name=self._users[uid].name)
                for uid in self._members.get(team_id, [])
                if uid != exclude_user_id
            ]

    def get_shared_contacts(
        self,
        team_id: str,
        shared_by_id: str,
    ) -> list[SharedContactRecord]:
        results: list[SharedContactRecord] = []
        with self._lock:
            for (tid, cid), (sharer, visibility) in self._shares.items():
                if tid != team_id or sharer != shared_by_id:
                    continue
                contact = self._contacts[cid]
                results.append(
                    SharedContactRecord(
                        contact_id=cid,
                        name=contact.name,
                        company=contact.company,
                        title=contact.title,
                        visibility=visibility,
                    )
                )
        return results

    def search_own_contacts(self, user_id: str, text: str) -> ContactRecord | None:
        for contact in self.get_contacts(user_id):
            if contact_matches(contact, text):
                return contact
        return None

    def search_team_shared_contacts(
        self,
        user_id: str,
        text: str,
    ) -> TeamContactMatch | None:
        with self._lock:
            team_ids = {t.team_id for t in self.get_teams(user_id)}
            for (tid, cid), (sharer, _visibility) in self._shares.items():
                if tid not in team_ids or sharer == user_id:
                    continue
                contact = self._contacts[cid]
                if not contact_matches(contact, text):
                    continue
                return TeamContactMatch(
                    contact=contact,
                    team_id=tid,
                    team_name=self._teams[tid].name,
                    shared_by_user_id=sharer,
                    shared_by_user_name=self._users[sharer].name,
                )
        return None

    # ── lifecycle ─────────────────────────────────────────────

    def close(self) -> None:
        """No-op for the in-memory store."""

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ── private helpers ───────────────────────────────────────

    def _require_owned_contact(self, contact_id: str, owner_id: str) -> None:
        contact = self._contacts.get(contact_id)
        if contact is None or contact.owner_id != owner_id:
            raise RecordNotFoundError(
                f"Contact not found or not owned by {owner_id}: {contact_id}"
            )


__all__ = ["InMemoryNetworkStore", "contact_matches"]
