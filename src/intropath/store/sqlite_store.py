"""SQLite backend for network storage.

Relational schema with one table per entity plus junction tables for
team membership and contact sharing.
"""

import logging
import sqlite3
import threading
import uuid
from pathlib import Path

from ..exceptions import InvalidRecordError, RecordNotFoundError, StoreCorruptedError
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

# SQLite lower() folds ASCII letters only, so accented text matches case-sensitively.
_TEXT_MATCH = (
    "(instr(lower(c.name), lower(?)) > 0"
    " OR instr(lower(coalesce(c.company, '')), lower(?)) > 0"
    " OR instr(lower(coalesce(c.title, '')), lower(?)) > 0)"
)


class SQLiteNetworkStore:
    """SQLite-based network storage.

    Args:
        db_path: Path to the SQLite database file (parent directories are
            created on demand).
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._lock = threading.Lock()
        self._connection = None
        self.initialize_schema()

    def initialize_schema(self):
        """Open the database and create tables and indexes."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._connection = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=10.0,
            )
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA journal_mode=WAL")
            self._connection.execute("PRAGMA foreign_keys=ON")

            self._connection.executescript("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS contacts (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    name TEXT NOT NULL,
                    company TEXT,
                    title TEXT
                );

                CREATE TABLE IF NOT EXISTS relationships (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    contact_a_id TEXT NOT NULL REFERENCES contacts(id) ON DELETE CASCADE,
                    contact_b_id TEXT REFERENCES contacts(id) ON DELETE CASCADE,
                    is_user_relationship INTEGER NOT NULL DEFAULT 0,
                    relationship_type TEXT,
                    strength INTEGER NOT NULL DEFAULT 3
                );

                CREATE TABLE IF NOT EXISTS teams (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS team_members (
                    team_id TEXT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
                    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    PRIMARY KEY (team_id, user_id)
                );

                CREATE TABLE IF NOT EXISTS shared_contacts (
                    contact_id TEXT NOT NULL REFERENCES contacts(id) ON DELETE CASCADE,
                    team_id TEXT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
                    shared_by_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    visibility TEXT NOT NULL DEFAULT 'basic',
                    PRIMARY KEY (contact_id, team_id)
                );

                CREATE INDEX IF NOT EXISTS idx_contacts_user ON contacts(user_id);
                CREATE INDEX IF NOT EXISTS idx_relationships_user ON relationships(user_id);
                CREATE INDEX IF NOT EXISTS idx_team_members_user ON team_members(user_id);
                CREATE INDEX IF NOT EXISTS idx_shared_team_sharer
                    ON shared_contacts(team_id, shared_by_id);
            """)
            self._connection.commit()

        except sqlite3.DatabaseError as e:
            error_msg = str(e).lower()
            if (
                "corrupted" in error_msg
                or "malformed" in error_msg
                or "not a database" in error_msg
            ):
                logger.error("Failed to initialize network schema: %s", e)
                raise StoreCorruptedError(f"Database corrupted: {e}") from e
            raise

    # ── writes ────────────────────────────────────────────────

    def add_user(self, user_id: str, name: str) -> UserRecord:
        user = UserRecord(user_id=user_id, name=name)
        with self._lock:
            self._connection.execute(
                "INSERT INTO users (id, name) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET name = excluded.name",
                (user.user_id, user.name),
            )
            self._connection.commit()
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
            if not self._exists("SELECT 1 FROM users WHERE id = ?", (owner_id,)):
                raise RecordNotFoundError(f"User not found: {owner_id}")
            row = self._connection.execute(
                "SELECT user_id FROM contacts WHERE id = ?", (contact.contact_id,)
            ).fetchone()
            if row is not None and row["user_id"] != owner_id:
                raise InvalidRecordError(
                    f"Contact {contact.contact_id} is owned by {row['user_id']}"
                )
            self._connection.execute(
                """
                INSERT INTO contacts (id, user_id, name, company, title)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    company = excluded.company,
                    title = excluded.title
                """,
                (
                    contact.contact_id,
                    contact.owner_id,
                    contact.name,
                    contact.company,
                    contact.title,
                ),
            )
            self._connection.commit()
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
            self._connection.execute(
                """
                INSERT INTO relationships (
                    id, user_id, contact_a_id, contact_b_id,
                    is_user_relationship, relationship_type, strength
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    relationship.relationship_id,
                    relationship.owner_id,
                    relationship.contact_a_id,
                    relationship.contact_b_id,
                    int(relationship.is_user_relationship),
                    relationship.relationship_type,
                    relationship.strength,
                ),
            )
            self._connection.commit()
        return relationship

    def create_team(self, name: str, team_id: str | None = None) -> TeamRecord:
        if not name or not name.strip():
            raise InvalidRecordError("team name cannot be empty")
        team = TeamRecord(team_id=team_id or uuid.uuid4().hex, name=name)
        with self._lock:
            self._connection.execute(
                "INSERT INTO teams (id, name) VALUES (?, ?) "
                "ON CONFLICT(id) DO UPDATE SET name = excluded.name",
                (team.team_id, team.name),
            )
            self._connection.commit()
        return team

    def add_team_member(self, team_id: str, user_id: str) -> None:
        with self._lock:
            if not self._exists("SELECT 1 FROM teams WHERE id = ?", (team_id,)):
                raise RecordNotFoundError(f"Team not found: {team_id}")
            if not self._exists("SELECT 1 FROM users WHERE id = ?", (user_id,)):
                raise RecordNotFoundError(f"User not found: {user_id}")
            self._connection.execute(
                "INSERT OR IGNORE INTO team_members (team_id, user_id) VALUES (?, ?)",
                (team_id, user_id),
            )
            self._connection.commit()

    def share_contact(
        self,
        contact_id: str,
        team_id: str,
        shared_by_id: str,
        visibility: str = DEFAULT_VISIBILITY,
    ) -> None:
        """Share an owned contact with a team; re-sharing updates visibility."""
        with self._lock:
            if not self._exists("SELECT 1 FROM teams WHERE id = ?", (team_id,)):
                raise RecordNotFoundError(f"Team not found: {team_id}")
            if not self._exists(
                "SELECT 1 FROM team_members WHERE team_id = ? AND user_id = ?",
                (team_id, shared_by_id),
            ):
                raise InvalidRecordError(
                    f"User {shared_by_id} is not a member of team {team_id}"
                )
            self._require_owned_contact(contact_id, shared_by_id)

            if self._exists(
                "SELECT 1 FROM shared_contacts WHERE contact_id = ? AND team_id = ?",
                (contact_id, team_id),
            ):
                self._connection.execute(
                    "UPDATE shared_contacts SET visibility = ? "
                    "WHERE contact_id = ? AND team_id = ?",
                    (visibility, contact_id, team_id),
                )
            else:
                self._connection.execute(
                    """
                    INSERT INTO shared_contacts (contact_id, team_id, shared_by_id, visibility)
                    VALUES (?, ?, ?, ?)
                    """,
                    (contact_id, team_id, shared_by_id, visibility),
                )
            self._connection.commit()

    # ── NetworkStore reads ────────────────────────────────────

    def get_contacts(self, user_id: str) -> list[ContactRecord]:
        cursor = self._connection.execute(
            "SELECT id, user_id, name, company, title FROM contacts c "
            "WHERE user_id = ? ORDER BY rowid",
            (user_id,),
        )
        return [self._row_to_contact(row) for row in cursor.fetchall()]

    def get_relationships(self, user_id: str) -> list[RelationshipRecord]:
        cursor = self._connection.execute(
            "SELECT * FROM relationships WHERE user_id = ? ORDER BY rowid",
            (user_id,),
        )
        return [
            RelationshipRecord(
                relationship_id=row["id"],
                owner_id=row["user_id"],
                contact_a_id=row["contact_a_id"],
                contact_b_id=row["contact_b_id"],
                is_user_relationship=bool(row["is_user_relationship"]),
                strength=row["strength"],
                relationship_type=row["relationship_type"],
            )
            for row in cursor.fetchall()
        ]

    def get_teams(self, user_id: str) -> list[TeamRecord]:
        cursor = self._connection.execute(
            """
            SELECT t.id AS team_id, t.name AS team_name
            FROM teams t
            JOIN team_members tm ON t.id = tm.team_id
            WHERE tm.user_id = ?
            ORDER BY tm.rowid
            """,
            (user_id,),
        )
        return [
            TeamRecord(team_id=row["team_id"], name=row["team_name"])
            for row in cursor.fetchall()
        ]

    def get_team_members(
        self,
        team_id: str,
        exclude_user_id: str,
    ) -> list[TeamMemberRecord]:
        cursor = self._connection.execute(
            """
            SELECT tm.user_id, u.name AS user_name
            FROM team_members tm
            JOIN users u ON tm.user_id = u.id
            WHERE tm.team_id = ? AND tm.user_id != ?
            ORDER BY tm.rowid
            """,
            (team_id, exclude_user_id),
        )
        return [
            TeamMemberRecord(user_id=row["user_id"], name=row["user_name"])
            for row in cursor.fetchall()
        ]

    def get_shared_contacts(
        self,
        team_id: str,
        shared_by_id: str,
    ) -> list[SharedContactRecord]:
        cursor = self._connection.execute(
            """
            SELECT c.id, c.name, c.company, c.title, sc.visibility
            FROM shared_contacts sc
            JOIN contacts c ON sc.contact_id = c.id
            WHERE sc.team_id = ? AND sc.shared_by_id = ?
            ORDER BY sc.rowid
            """,
            (team_id, shared_by_id),
        )
        return [
            SharedContactRecord(
                contact_id=row["id"],
                name=row["name"],
                company=row["company"],
                title=row["title"],
                visibility=row["visibility"],
            )
            for row in cursor.fetchall()
        ]

    def search_own_contacts(self, user_id: str, text: str) -> ContactRecord | None:
        row = self._connection.execute(
            f"""
            SELECT c.id, c.user_id, c.name, c.company, c.title FROM contacts c
            WHERE c.user_id = ? AND {_TEXT_MATCH}
            ORDER BY c.rowid
            LIMIT 1
            """,
            (user_id, text, text, text),
        ).fetchone()
        return self._row_to_contact(row) if row else None

    def search_team_shared_contacts(
        self,
        user_id: str,
        text: str,
    ) -> TeamContactMatch | None:
        row = self._connection.execute(
            f"""
            SELECT
                c.id, c.user_id, c.name, c.company, c.title,
                sc.team_id, t.name AS team_name,
                sc.shared_by_id, u.name AS shared_by_name
            FROM shared_contacts sc
            JOIN contacts c ON sc.contact_id = c.id
            JOIN teams t ON sc.team_id = t.id
            JOIN users u ON sc.shared_by_id = u.id
            WHERE sc.team_id IN (SELECT team_id FROM team_members WHERE user_id = ?)
              AND sc.shared_by_id != ?
              AND {_TEXT_MATCH}
            ORDER BY sc.rowid
            LIMIT 1
            """,
            (user_id, user_id, text, text, text),
        ).fetchone()
        if row is None:
            return None
        return TeamContactMatch(
            contact=self._row_to_contact(row),
            team_id=row["team_id"],
            team_name=row["team_name"],
            shared_by_user_id=row["shared_by_id"],
            shared_by_user_name=row["shared_by_name"],
        )

    # ── lifecycle ─────────────────────────────────────────────

    def close(self):
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ── private helpers ───────────────────────────────────────

    def _exists(self, sql: str, params: tuple) -> bool:
        return self._connection.execute(sql, params).fetchone() is not None

    def _require_owned_contact(self, contact_id: str, owner_id: str) -> None:
        if not self._exists(
            "SELECT 1 FROM contacts WHERE id = ? AND user_id = ?",
            (contact_id, owner_id),
        ):
            raise RecordNotFoundError(
                f"Contact not found or not owned by {owner_id}: {contact_id}"
            )

    @staticmethod
    def _row_to_contact(row: sqlite3.Row) -> ContactRecord:
        return ContactRecord(
            contact_id=row["id"],
            owner_id=row["user_id"],
            name=row["name"],
            company=row["company"],
            title=row["title"],
        )


__all__ = ["SQLiteNetworkStore"]
