"""KuzuNetworkStore -- Kuzu-backed implementation of the NetworkStore protocol.

Users, contacts and teams are node tables (``NetworkUser``, ``Contact``,
``Team``); relationships, memberships and shares are rel tables.  All
Cypher queries use parameterised bindings to prevent injection.

Public API:
    KuzuNetworkStore: Concrete NetworkStore backed by a Kuzu database.
"""

from __future__ import annotations

import itertools
import logging
import time
import uuid
from pathlib import Path
from typing import Any

import kuzu

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

logger = logging.getLogger(__name__)

_SCHEMA = (
    "CREATE NODE TABLE IF NOT EXISTS NetworkUser("
    "node_id STRING, name STRING, PRIMARY KEY(node_id))",
    "CREATE NODE TABLE IF NOT EXISTS Contact("
    "node_id STRING, owner_id STRING, name STRING, company STRING, "
    "title STRING, seq INT64, PRIMARY KEY(node_id))",
    "CREATE NODE TABLE IF NOT EXISTS Team("
    "node_id STRING, name STRING, PRIMARY KEY(node_id))",
    "CREATE REL TABLE IF NOT EXISTS KNOWS("
    "FROM NetworkUser TO Contact, rel_id STRING, strength INT64, rel_type STRING, seq INT64)",
    "CREATE REL TABLE IF NOT EXISTS ACQUAINTED("
    "FROM Contact TO Contact, rel_id STRING, owner_id STRING, "
    "strength INT64, rel_type STRING, seq INT64)",
    "CREATE REL TABLE IF NOT EXISTS MEMBER_OF(FROM NetworkUser TO Team, seq INT64)",
    "CREATE REL TABLE IF NOT EXISTS SHARED_WITH("
    "FROM Contact TO Team, shared_by STRING, visibility STRING, seq INT64)",
)

_CONTACT_TEXT_MATCH = (
    "(lower(c.name) CONTAINS $q OR lower(c.company) CONTAINS $q "
    "OR lower(c.title) CONTAINS $q)"
)


def _opt(value: str | None) -> str:
    """Optional strings are stored as '' because every column is STRING."""
    return value or ""


def _from_opt(value: Any) -> str | None:
    return str(value) if value else None


class KuzuNetworkStore:
    """Kuzu graph database implementation of the NetworkStore protocol.

    Reads are ordered by a ``seq`` column stamped at write time, so
    results come back in insertion order across sessions.

    Args:
        db_path: Filesystem path for the Kuzu database.
        store_id: Optional human-readable identifier; auto-generated if None.
    """

    # ── construction / lifecycle ──────────────────────────────

    def __init__(self, db_path: Path | str, store_id: str | None = None) -> None:
        self._db_path = Path(db_path)
        self._store_id = store_id or f"kuzu-{uuid.uuid4().hex[:8]}"
        self._db = kuzu.Database(str(self._db_path))
        self._conn = kuzu.Connection(self._db)
        # Nanosecond start keeps seq increasing across reopened sessions.
        self._seq = itertools.count(time.time_ns())
        self._ensure_schema()

    @property
    def store_id(self) -> str:
        return self._store_id

    def close(self) -> None:
        """Release Kuzu resources."""
        self._conn = None  # type: ignore[assignment]
        self._db = None  # type: ignore[assignment]

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def _ensure_schema(self) -> None:
        for ddl in _SCHEMA:
            self._conn.execute(ddl)
        logger.debug("Kuzu network schema ready at %s", self._db_path)

    # ── writes ────────────────────────────────────────────────

    def add_user(self, user_id: str, name: str) -> UserRecord:
        user = UserRecord(user_id=user_id, name=name)
        if self._exists("MATCH (u:NetworkUser) WHERE u.node_id = $id RETURN u.node_id", user_id):
            self._conn.execute(
                "MATCH (u:NetworkUser) WHERE u.node_id = $id SET u.name = $name",
                {"id": user_id, "name": name},
            )
        else:
            self._conn.execute(
                "CREATE (:NetworkUser {node_id: $id, name: $name})",
                {"id": user_id, "name": name},
            )
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
        if not self._exists("MATCH (u:NetworkUser) WHERE u.node_id = $id RETURN u.node_id", owner_id):
            raise RecordNotFoundError(f"User not found: {owner_id}")

        params = {
            "id": contact.contact_id,
            "name": contact.name,
            "company": _opt(contact.company),
            "title": _opt(contact.title),
        }
        owners = self._rows(
            "MATCH (c:Contact) WHERE c.node_id = $id RETURN c.owner_id",
            {"id": contact.contact_id},
        )
        if owners and owners[0][0] != owner_id:
            raise InvalidRecordError(
                f"Contact {contact.contact_id} is owned by {owners[0][0]}"
            )
        if owners:
            self._conn.execute(
                "MATCH (c:Contact) WHERE c.node_id = $id "
                "SET c.name = $name, c.company = $company, c.title = $title",
                params,
            )
        else:
            self._conn.execute(
                "CREATE (:Contact {node_id: $id, owner_id: $owner, name: $name, "
                "company: $company, title: $title, seq: $seq})",
                {**params, "owner": owner_id, "seq": next(self._seq)},
            )
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
        for cid in filter(None, (contact_a_id, contact_b_id)):
            self._require_owned_contact(cid, owner_id)

        params: dict[str, Any] = {
            "a": contact_a_id,
            "rid": relationship.relationship_id,
            "strength": relationship.strength,
            "rtype": _opt(relationship.relationship_type),
            "seq": next(self._seq),
        }
        if relationship.is_user_relationship:
            self._conn.execute(
                "MATCH (u:NetworkUser), (a:Contact) WHERE u.node_id = $owner AND a.node_id = $a "
                "CREATE (u)-[:KNOWS {rel_id: $rid, strength: $strength, "
                "rel_type: $rtype, seq: $seq}]->(a)",
                {**params, "owner": owner_id},
            )
        else:
            self._conn.execute(
                "MATCH (a:Contact), (b:Contact) WHERE a.node_id = $a AND b.node_id = $b "
                "CREATE (a)-[:ACQUAINTED {rel_id: $rid, owner_id: $owner, "
                "strength: $strength, rel_type: $rtype, seq: $seq}]->(b)",
                {**params, "b": contact_b_id, "owner": owner_id},
            )
        return relationship

    def create_team(self, name: str, team_id: str | None = None) -> TeamRecord:
        if not name or not name.strip():
            raise InvalidRecordError("team name cannot be empty")
        team = TeamRecord(team_id=team_id or uuid.uuid4().hex, name=name)
        params = {"id": team.team_id, "name": team.name}
        if self._exists("MATCH (t:Team) WHERE t.node_id = $id RETURN t.node_id", team.team_id):
            self._conn.execute("MATCH (t:Team) WHERE t.node_id = $id SET t.name = $name", params)
        else:
            self._conn.execute("CREATE (:Team {node_id: $id, name: $name})", params)
        return team

    def add_team_member(self, team_id: str, user_id: str) -> None:
        if not self._exists("MATCH (t:Team) WHERE t.node_id = $id RETURN t.node_id", team_id):
            raise RecordNotFoundError(f"Team not found: {team_id}")
        if not self._exists("MATCH (u:NetworkUser) WHERE u.node_id = $id RETURN u.node_id", user_id):
            raise RecordNotFoundError(f"User not found: {user_id}")
        if self._is_member(team_id, user_id):
            return
        self._conn.execute(
            "MATCH (u:NetworkUser), (t:Team) WHERE u.node_id = $uid AND t.node_id = $tid "
            "CREATE (u)-[:MEMBER_OF {seq: $seq}]->(t)",
            {"uid": user_id, "tid": team_id, "seq": next(self._seq)},
        )

    def share_contact(
        self,
        contact_id: str,
        team_id: str,
        shared_by_id: str,
        visibility: str = DEFAULT_VISIBILITY,
    ) -> None:
        """Share an owned contact with a team; re-sharing updates visibility."""
        if not self._exists("MATCH (t:Team) WHERE t.node_id = $id RETURN t.node_id", team_id):
            raise RecordNotFoundError(f"Team not found: {team_id}")
        if not self._is_member(team_id, shared_by_id):
            raise InvalidRecordError(
                f"User {shared_by_id} is not a member of team {team_id}"
            )
        self._require_owned_contact(contact_id, shared_by_id)

        params = {"cid": contact_id, "tid": team_id, "vis": visibility}
        existing = self._rows(
            "MATCH (c:Contact)-[s:SHARED_WITH]->(t:Team) "
            "WHERE c.node_id = $cid AND t.node_id = $tid RETURN s.shared_by",
            {"cid": contact_id, "tid": team_id},
        )
        if existing:
            self._conn.execute(
                "MATCH (c:Contact)-[s:SHARED_WITH]->(t:Team) "
                "WHERE c.node_id = $cid AND t.node_id = $tid SET s.visibility = $vis",
                params,
            )
            return
        self._conn.execute(
            "MATCH (c:Contact), (t:Team) WHERE c.node_id = $cid AND t.node_id = $tid "
            "CREATE (c)-[:SHARED_WITH {shared_by: $sharer, visibility: $vis, seq: $seq}]->(t)",
            {**params, "sharer": shared_by_id, "seq": next(self._seq)},
        )

    # ── NetworkStore reads ────────────────────────────────────

    def get_contacts(self, user_id: str) -> list[ContactRecord]:
        rows = self._rows(
            "MATCH (c:Contact) WHERE c.owner_id = $uid "
            "RETURN c.node_id, c.owner_id, c.name, c.company, c.title, c.seq "
            "ORDER BY c.seq",
            {"uid": user_id},
        )
        return [self._row_to_contact(row[:5]) for row in rows]

    def get_relationships(self, user_id: str) -> list[RelationshipRecord]:
        user_rows = self._rows(
            "MATCH (u:NetworkUser)-[r:KNOWS]->(a:Contact) WHERE u.node_id = $uid "
            "RETURN r.rel_id, a.node_id, r.strength, r.rel_type, r.seq",
            {"uid": user_id},
        )
        contact_rows = self._rows(
            "MATCH (a:Contact)-[r:ACQUAINTED]->(b:Contact) WHERE r.owner_id = $uid "
            "RETURN r.rel_id, a.node_id, b.node_id, r.strength, r.rel_type, r.seq",
            {"uid": user_id},
        )

        ordered: list[tuple[int, RelationshipRecord]] = []
        for rid, a_id, strength, rtype, seq in user_rows:
            ordered.append((seq, RelationshipRecord(
                relationship_id=rid,
                owner_id=user_id,
                contact_a_id=a_id,
                is_user_relationship=True,
                strength=int(strength),
                relationship_type=_from_opt(rtype),
            )))
        for rid, a_id, b_id, strength, rtype, seq in contact_rows:
            ordered.append((seq, RelationshipRecord(
                relationship_id=rid,
                owner_id=user_id,
                contact_a_id=a_id,
                contact_b_id=b_id,
                strength=int(strength),
                relationship_type=_from_opt(rtype),
            )))
        ordered.sort(key=lambda pair: pair[0])
        return [rel for _, rel in ordered]

    def get_teams(self, user_id: str) -> list[TeamRecord]:
        rows = self._rows(
            "MATCH (u:NetworkUser)-[m:MEMBER_OF]->(t:Team) WHERE u.node_id = $uid "
            "RETURN t.node_id, t.name, m.seq ORDER BY m.seq",
            {"uid": user_id},
        )
        return [TeamRecord(team_id=tid, name=name) for tid, name, _seq in rows]

    def get_team_members(
        self,
        team_id: str,
        exclude_user_id: str,
    ) -> list[TeamMemberRecord]:
        rows = self._rows(
            "MATCH (u:NetworkUser)-[m:MEMBER_OF]->(t:Team) "
            "WHERE t.node_id = $tid AND u.node_id <> $uid "
            "RETURN u.node_id, u.name, m.seq ORDER BY m.seq",
            {"tid": team_id, "uid": exclude_user_id},
        )
        return [TeamMemberRecord(user_id=uid, name=name) for uid, name, _seq in rows]

    def get_shared_contacts(
        self,
        team_id: str,
        shared_by_id: str,
    ) -> list[SharedContactRecord]:
        rows = self._rows(
            "MATCH (c:Contact)-[s:SHARED_WITH]->(t:Team) "
            "WHERE t.node_id = $tid AND s.shared_by = $sid "
            "RETURN c.node_id, c.name, c.company, c.title, s.visibility, s.seq "
            "ORDER BY s.seq",
            {"tid": team_id, "sid": shared_by_id},
        )
        return [
            SharedContactRecord(
                contact_id=cid,
                name=name,
                company=_from_opt(company),
                title=_from_opt(title),
                visibility=visibility,
            )
            for cid, name, company, title, visibility, _seq in rows
        ]

    def search_own_contacts(self, user_id: str, text: str) -> ContactRecord | None:
        rows = self._rows(
            f"MATCH (c:Contact) WHERE c.owner_id = $uid AND {_CONTACT_TEXT_MATCH} "
            "RETURN c.node_id, c.owner_id, c.name, c.company, c.title, c.seq "
            "ORDER BY c.seq LIMIT 1",
            {"uid": user_id, "q": text.lower()},
        )
        return self._row_to_contact(rows[0][:5]) if rows else None

    def search_team_shared_contacts(
        self,
        user_id: str,
        text: str,
    ) -> TeamContactMatch | None:
        rows = self._rows(
            "MATCH (me:NetworkUser)-[:MEMBER_OF]->(t:Team)<-[s:SHARED_WITH]-(c:Contact), "
            "(sharer:NetworkUser) "
            "WHERE me.node_id = $uid AND s.shared_by <> $uid "
            f"AND sharer.node_id = s.shared_by AND {_CONTACT_TEXT_MATCH} "
            "RETURN c.node_id, c.owner_id, c.name, c.company, c.title, "
            "t.node_id, t.name, sharer.node_id, sharer.name, s.seq "
            "ORDER BY s.seq LIMIT 1",
            {"uid": user_id, "q": text.lower()},
        )
        if not rows:
            return None
        row = rows[0]
        return TeamContactMatch(
            contact=self._row_to_contact(row[:5]),
            team_id=row[5],
            team_name=row[6],
            shared_by_user_id=row[7],
            shared_by_user_name=row[8],
        )

    # ── private helpers ───────────────────────────────────────

    def _rows(self, cypher: str, params: dict[str, Any]) -> list[list[Any]]:
        result = self._conn.execute(cypher, params)
        rows: list[list[Any]] = []
        while result.has_next():
            rows.append(result.get_next())
        return rows

    def _exists(self, cypher: str, node_id: str) -> bool:
        return bool(self._rows(cypher, {"id": node_id}))

    def _is_member(self, team_id: str, user_id: str) -> bool:
        return bool(self._rows(
            "MATCH (u:NetworkUser)-[:MEMBER_OF]->(t:Team) "
            "WHERE u.node_id = $uid AND t.node_id = $tid RETURN u.node_id",
            {"uid": user_id, "tid": team_id},
        ))

    def _require_owned_contact(self, contact_id: str, owner_id: str) -> None:
        rows = self._rows(
            "MATCH (c:Contact) WHERE c.node_id = $cid AND c.owner_id = $owner "
            "RETURN c.node_id",
            {"cid": contact_id, "owner": owner_id},
        )
        if not rows:
            raise RecordNotFoundError(
                f"Contact not found or not owned by {owner_id}: {contact_id}"
            )

    @staticmethod
    def _row_to_contact(row: list[Any]) -> ContactRecord:
        contact_id, owner_id, name, company, title = row
        return ContactRecord(
            contact_id=contact_id,
            owner_id=owner_id,
            name=name,
            company=_from_opt(company),
            title=_from_opt(title),
        )


__all__ = ["KuzuNetworkStore"]
