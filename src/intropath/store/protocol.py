"""NetworkStore protocol -- the data-access contract the engine consumes.

Public API:
    NetworkStore: Runtime-checkable protocol defining the read-side contract.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..records import (
    ContactRecord,
    RelationshipRecord,
    SharedContactRecord,
    TeamContactMatch,
    TeamMemberRecord,
    TeamRecord,
)


@runtime_checkable
class NetworkStore(Protocol):
    """Read-side interface for contact, relationship and team storage.

    Every concrete backend (in-memory, SQLite, Kuzu) satisfies this
    protocol so the graph builder and discovery facade can swap backends
    without changes.  Any exception raised here propagates to the caller
    of the engine unchanged.
    """

    # ── own network ───────────────────────────────────────────

    def get_contacts(self, user_id: str) -> list[ContactRecord]:
        """Return every contact owned by *user_id*."""
        ...

    def get_relationships(self, user_id: str) -> list[RelationshipRecord]:
        """Return the user's relationships, both user and contact kinds."""
        ...

    # ── teams ─────────────────────────────────────────────────

    def get_teams(self, user_id: str) -> list[TeamRecord]:
        """Return the teams *user_id* is a member of."""
        ...

    def get_team_members(
        self,
        team_id: str,
        exclude_user_id: str,
    ) -> list[TeamMemberRecord]:
        """Return members of *team_id* other than *exclude_user_id*."""
        ...

    def get_shared_contacts(
        self,
        team_id: str,
        shared_by_id: str,
    ) -> list[SharedContactRecord]:
        """Return contacts *shared_by_id* has shared with *team_id*."""
        ...

    # ── free-text search ──────────────────────────────────────

    def search_own_contacts(self, user_id: str, text: str) -> ContactRecord | None:
        """First own contact whose name, company or title contains *text*.

        Matching is a case-insensitive substring test.
        """
        ...

    def search_team_shared_contacts(
        self,
        user_id: str,
        text: str,
    ) -> TeamContactMatch | None:
        """First contact shared with any of the user's teams matching *text*.

        Contacts the user shared themselves are excluded.
        """
        ...

    # ── lifecycle ─────────────────────────────────────────────

    def close(self) -> None:
        """Release resources held by the store."""
        ...


__all__ = ["NetworkStore"]
