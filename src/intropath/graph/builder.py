"""GraphBuilder -- assemble the acquaintance graph reachable from one user.

Three provenances are merged into one graph:

1. the user's own contacts and stored relationships;
2. teammates from every team the user belongs to (virtual nodes,
   fixed strength ``TEAMMATE_STRENGTH``);
3. contacts those teammates shared with a common team (virtual nodes
   keyed by team and contact, fixed strength ``TEAM_SHARED_STRENGTH``).

Store exceptions propagate unchanged: there is no partial graph.

Public API:
    GraphBuilder: Builds an AcquaintanceGraph from a NetworkStore.
    build_graph: Convenience wrapper around GraphBuilder.build.
"""

from __future__ import annotations

import logging

from ..records import RelationshipRecord, TeamMemberRecord, TeamRecord
from ..store.protocol import NetworkStore
from .types import (
    SELF_NAME,
    TEAM_SHARED_EDGE,
    TEAM_SHARED_STRENGTH,
    TEAMMATE_EDGE,
    TEAMMATE_STRENGTH,
    TEAMMATE_TITLE,
    AcquaintanceGraph,
    Node,
    NodeKind,
    TeamSource,
    own_contact_node_id,
    self_node_id,
    team_contact_node_id,
    teammate_node_id,
)

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Builds a fresh AcquaintanceGraph per request.

    Args:
        store: Data-access collaborator satisfying ``NetworkStore``.
    """

    def __init__(self, store: NetworkStore) -> None:
        self.store = store

    def build(self, user_id: str) -> AcquaintanceGraph:
        """Build the graph for *user_id*.

        Returns:
            A graph whose node map holds every endpoint of every edge and
            whose edges all come in mirrored pairs.
        """
        graph = AcquaintanceGraph(user_id=user_id)
        graph.add_node(
            Node(node_id=self_node_id(user_id), kind=NodeKind.SELF, name=SELF_NAME)
        )

        self._add_own_contacts(graph, user_id)
        self._add_relationships(graph, user_id)
        for team in self.store.get_teams(user_id):
            self._add_team(graph, user_id, team)

        logger.debug(
            "Built graph for user %s: %d nodes, %d edges",
            user_id, len(graph.nodes), graph.edge_count,
        )
        return graph

    # ── own network ───────────────────────────────────────────

    def _add_own_contacts(self, graph: AcquaintanceGraph, user_id: str) -> None:
        for contact in self.store.get_contacts(user_id):
            graph.add_node(
                Node(
                    node_id=own_contact_node_id(contact.contact_id),
                    kind=NodeKind.OWN_CONTACT,
                    name=contact.name,
                    company=contact.company,
                    title=contact.title,
                )
            )

    def _add_relationships(self, graph: AcquaintanceGraph, user_id: str) -> None:
        for rel in self.store.get_relationships(user_id):
            source_id, target_id = self._endpoints(graph, rel)
            if not (graph.has_node(source_id) and graph.has_node(target_id)):
                logger.debug(
                    "Skipping relationship %s: endpoint outside graph (%s, %s)",
                    rel.relationship_id, source_id, target_id,
                )
                continue
            if source_id == target_id:
                logger.debug("Skipping self-loop relationship %s", rel.relationship_id)
                continue
            graph.add_mirrored_edge(
                source_id, target_id, rel.strength, rel.relationship_type
            )

    @staticmethod
    def _endpoints(graph: AcquaintanceGraph, rel: RelationshipRecord) -> tuple[str, str]:
        if rel.is_user_relationship:
            return graph.self_id, own_contact_node_id(rel.contact_a_id)
        return (
            own_contact_node_id(rel.contact_a_id),
            own_contact_node_id(rel.contact_b_id or rel.contact_a_id),
        )

    # ── teams ─────────────────────────────────────────────────

    def _add_team(self, graph: AcquaintanceGraph, user_id: str, team: TeamRecord) -> None:
        for member in self.store.get_team_members(team.team_id, user_id):
            member_node_id = self._ensure_teammate(graph, team, member)

            for shared in self.store.get_shared_contacts(team.team_id, member.user_id):
                contact_node_id = team_contact_node_id(team.team_id, shared.contact_id)
                if not graph.has_node(contact_node_id):
                    graph.add_node(
                        Node(
                            node_id=contact_node_id,
                            kind=NodeKind.TEAM_SHARED_CONTACT,
                            name=shared.name,
                            company=shared.company,
                            title=shared.title,
                            team_source=TeamSource(
                                team_id=team.team_id,
                                team_name=team.name,
                                shared_by_user_id=member.user_id,
                                shared_by_user_name=member.name,
                            ),
                        )
                    )
                if graph.has_edge(member_node_id, contact_node_id):
                    continue
                graph.add_mirrored_edge(
                    member_node_id, contact_node_id,
                    TEAM_SHARED_STRENGTH, TEAM_SHARED_EDGE,
                )

    @staticmethod
    def _ensure_teammate(
        graph: AcquaintanceGraph,
        team: TeamRecord,
        member: TeamMemberRecord,
    ) -> str:
        """Return the teammate's node id, creating node and Self edge once."""
        member_node_id = teammate_node_id(member.user_id)
        if graph.has_node(member_node_id):
            return member_node_id

        graph.add_node(
            Node(
                node_id=member_node_id,
                kind=NodeKind.TEAMMATE,
                name=member.name,
                title=TEAMMATE_TITLE,
                team_source=TeamSource(
                    team_id=team.team_id,
                    team_name=team.name,
                    shared_by_user_id=member.user_id,
                    shared_by_user_name=member.name,
                ),
            )
        )
        graph.add_mirrored_edge(
            graph.self_id, member_node_id, TEAMMATE_STRENGTH, TEAMMATE_EDGE
        )
        return member_node_id


def build_graph(store: NetworkStore, user_id: str) -> AcquaintanceGraph:
    """Build the acquaintance graph for *user_id* from *store*."""
    return GraphBuilder(store).build(user_id)


__all__ = ["GraphBuilder", "build_graph"]
