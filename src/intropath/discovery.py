"""High-level path discovery: build a graph, resolve a target, search.

Every call builds a fresh graph from the store; nothing is cached
between requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .config import DiscoveryConfig
from .graph.builder import GraphBuilder
from .graph.search import PathResult, find_paths
from .graph.types import (
    AcquaintanceGraph,
    TeamSource,
    own_contact_node_id,
    team_contact_node_id,
)
from .store.protocol import NetworkStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTarget:
    """The contact a free-text description resolved to.

    Attributes:
        contact_id: Underlying contact id.
        node_id: Graph node id searched for (composite for team contacts).
        name: Display name.
        company: Employer, if known.
        title: Job title, if known.
        team_source: Set when the contact is visible only through a team.
    """

    contact_id: str
    node_id: str
    name: str
    company: str | None = None
    title: str | None = None
    team_source: TeamSource | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.contact_id,
            "name": self.name,
            "company": self.company,
            "title": self.title,
        }
        if self.team_source is not None:
            data["teamSource"] = self.team_source.to_dict()
        return data


@dataclass
class SearchOutcome:
    """Result of a discovery request.

    ``target`` is None when no contact matched, which is distinct from a
    matched target with no path (``target`` set, ``paths`` empty).
    """

    target: ResolvedTarget | None = None
    paths: list[PathResult] = field(default_factory=list)
    is_team_contact: bool = False
    target_node_id: str | None = None

    @property
    def found(self) -> bool:
        return self.target is not None or self.target_node_id is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"paths": [p.to_dict() for p in self.paths]}
        if self.target is not None:
            data["targetContact"] = self.target.to_dict()
            data["isTeamContact"] = self.is_team_contact
        elif self.target_node_id is not None:
            data["targetContactId"] = self.target_node_id
        else:
            data["message"] = "No matching contacts found"
        return data


class PathDiscovery:
    """Finds ranked introduction paths for users of a network store.

    Args:
        store: Data-access collaborator satisfying ``NetworkStore``.
        config: Search defaults; per-call arguments override it.
    """

    def __init__(self, store: NetworkStore, config: DiscoveryConfig | None = None):
        self.store = store
        self.config = config or DiscoveryConfig()
        self._builder = GraphBuilder(store)

    def build_graph(self, user_id: str) -> AcquaintanceGraph:
        """Build a fresh acquaintance graph for *user_id*."""
        return self._builder.build(user_id)

    def find_paths(
        self,
        user_id: str,
        target_node_id: str,
        max_hops: int | None = None,
        top_k: int | None = None,
    ) -> list[PathResult]:
        """Build the user's graph and search toward *target_node_id*."""
        graph = self.build_graph(user_id)
        return self._search(graph, target_node_id, max_hops, top_k)

    def search_paths(
        self,
        user_id: str,
        target_description: str,
        max_hops: int | None = None,
        top_k: int | None = None,
    ) -> SearchOutcome:
        """Resolve a free-text description to a contact, then find paths.

        The user's own contacts are searched first; only when none match
        are contacts shared by teammates considered.

        Returns:
            SearchOutcome; ``target`` is None when nothing matched.
        """
        text = (target_description or "").strip()
        if not text:
            return SearchOutcome()

        own = self.store.search_own_contacts(user_id, text)
        if own is not None:
            target = ResolvedTarget(
                contact_id=own.contact_id,
                node_id=own_contact_node_id(own.contact_id),
                name=own.name,
                company=own.company,
                title=own.title,
            )
            paths = self.find_paths(user_id, target.node_id, max_hops, top_k)
            return SearchOutcome(target=target, paths=paths, is_team_contact=False)

        match = self.store.search_team_shared_contacts(user_id, text)
        if match is None:
            logger.debug("No contact matches %r for user %s", text, user_id)
            return SearchOutcome()

        target = ResolvedTarget(
            contact_id=match.contact.contact_id,
            node_id=team_contact_node_id(match.team_id, match.contact.contact_id),
            name=match.contact.name,
            company=match.contact.company,
            title=match.contact.title,
            team_source=TeamSource(
                team_id=match.team_id,
                team_name=match.team_name,
                shared_by_user_id=match.shared_by_user_id,
                shared_by_user_name=match.shared_by_user_name,
            ),
        )
        paths = self.find_paths(user_id, target.node_id, max_hops, top_k)
        return SearchOutcome(target=target, paths=paths, is_team_contact=True)

    def discover(
        self,
        user_id: str,
        target_contact_id: str | None = None,
        target_description: str | None = None,
        max_hops: int | None = None,
        top_k: int | None = None,
    ) -> SearchOutcome:
        """Search by node id when given, otherwise by description.

        Raises:
            ValueError: If neither target_contact_id nor target_description
                is provided.
        """
        if target_contact_id:
            paths = self.find_paths(user_id, target_contact_id, max_hops, top_k)
            return SearchOutcome(paths=paths, target_node_id=target_contact_id)
        if target_description:
            return self.search_paths(user_id, target_description, max_hops, top_k)
        raise ValueError("Either target_contact_id or target_description is required")

    def _search(
        self,
        graph: AcquaintanceGraph,
        target_node_id: str,
        max_hops: int | None,
        top_k: int | None,
    ) -> list[PathResult]:
        return find_paths(
            graph,
            target_node_id,
            max_hops=self.config.max_hops if max_hops is None else max_hops,
            top_k=self.config.top_k if top_k is None else top_k,
            early_stop_factor=self.config.early_stop_factor,
        )


__all__ = ["PathDiscovery", "ResolvedTarget", "SearchOutcome"]
