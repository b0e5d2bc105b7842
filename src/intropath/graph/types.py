"""Graph data structures for introduction-path discovery.

Nodes form a tagged union discriminated by ``NodeKind``.  Virtual nodes
(teammates and team-shared contacts) get composite ids derived from their
provenance, so one real contact can appear several times with different
trust context.

Public API:
    NodeKind: Node variant tag.
    TeamSource: Team provenance carried by virtual nodes.
    Node: Immutable graph node.
    Edge: Immutable directed edge.
    AcquaintanceGraph: Node map plus adjacency lists for one querying user.
    self_node_id, own_contact_node_id, teammate_node_id,
    team_contact_node_id: Deterministic node id derivation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..records import MAX_STRENGTH, MIN_STRENGTH

TEAMMATE_STRENGTH = 4
TEAM_SHARED_STRENGTH = 3

TEAMMATE_EDGE = "teammate"
TEAM_SHARED_EDGE = "team_shared"

SELF_NAME = "You"
TEAMMATE_TITLE = "Team Member"


class NodeKind(Enum):
    """Variants of a graph node."""

    SELF = "self"
    OWN_CONTACT = "own_contact"
    TEAMMATE = "teammate"
    TEAM_SHARED_CONTACT = "team_shared_contact"


# ── node id derivation ────────────────────────────────────────


def self_node_id(user_id: str) -> str:
    return user_id


def own_contact_node_id(contact_id: str) -> str:
    return contact_id


def teammate_node_id(user_id: str) -> str:
    return f"teammate:{user_id}"


def team_contact_node_id(team_id: str, contact_id: str) -> str:
    return f"team:{team_id}:{contact_id}"


# ── nodes and edges ───────────────────────────────────────────


@dataclass(frozen=True)
class TeamSource:
    """How a virtual node became reachable through a team.

    Attributes:
        team_id: Team through which the node is visible.
        team_name: Display name of that team.
        shared_by_user_id: Teammate who provides the link.
        shared_by_user_name: Display name of that teammate.
    """

    team_id: str
    team_name: str
    shared_by_user_id: str
    shared_by_user_name: str

    def to_dict(self) -> dict[str, str]:
        return {
            "teamId": self.team_id,
            "teamName": self.team_name,
            "sharedByUserId": self.shared_by_user_id,
            "sharedByUserName": self.shared_by_user_name,
        }


@dataclass(frozen=True)
class Node:
    """An immutable node in the acquaintance graph.

    Attributes:
        node_id: Unique id within one built graph.
        kind: Variant tag.
        name: Display name.
        company: Employer, if known.
        title: Job title, if known.
        team_source: Team provenance for TEAMMATE and TEAM_SHARED_CONTACT.
    """

    node_id: str
    kind: NodeKind
    name: str
    company: str | None = None
    title: str | None = None
    team_source: TeamSource | None = None

    @property
    def is_virtual(self) -> bool:
        return self.kind in (NodeKind.TEAMMATE, NodeKind.TEAM_SHARED_CONTACT)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "contactId": self.node_id,
            "name": self.name,
            "company": self.company,
            "title": self.title,
        }
        if self.team_source is not None:
            data["teamSource"] = self.team_source.to_dict()
        return data


@dataclass(frozen=True)
class Edge:
    """A directed trust link between two nodes.

    Attributes:
        source_id: Node id of the tail.
        target_id: Node id of the head.
        strength: Trust on the 1-5 scale.
        edge_type: Relationship label ("teammate", "team_shared", or stored type).
    """

    source_id: str
    target_id: str
    strength: int
    edge_type: str | None = None

    def reversed(self) -> Edge:
        return Edge(
            source_id=self.target_id,
            target_id=self.source_id,
            strength=self.strength,
            edge_type=self.edge_type,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source_id,
            "to": self.target_id,
            "strength": self.strength,
            "type": self.edge_type,
        }


@dataclass
class AcquaintanceGraph:
    """Every node and edge reachable from one querying user.

    Edges are always stored in mirrored pairs so the graph is logically
    undirected while adjacency stays directional for traversal.

    Attributes:
        user_id: The querying user; also the id of the SELF node.
        nodes: node_id -> Node.
        adjacency: node_id -> outgoing edges, in insertion order.
    """

    user_id: str
    nodes: dict[str, Node] = field(default_factory=dict)
    adjacency: dict[str, list[Edge]] = field(default_factory=dict)

    @property
    def self_id(self) -> str:
        return self_node_id(self.user_id)

    def add_node(self, node: Node) -> Node:
        """Insert *node*.

        Raises:
            ValueError: If a node with the same id already exists.
        """
        if node.node_id in self.nodes:
            raise ValueError(f"Duplicate node id: {node.node_id}")
        self.nodes[node.node_id] = node
        self.adjacency[node.node_id] = []
        return node

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def get_node(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def neighbors(self, node_id: str) -> list[Edge]:
        return self.adjacency.get(node_id, [])

    def add_mirrored_edge(
        self,
        source_id: str,
        target_id: str,
        strength: int,
        edge_type: str | None = None,
    ) -> Edge:
        """Insert ``source -> target`` and its mirror ``target -> source``.

        Raises:
            KeyError: If either endpoint is not in the node map.
            ValueError: If strength is outside the 1-5 scale.
        """
        if source_id not in self.nodes:
            raise KeyError(f"Source node not found: {source_id}")
        if target_id not in self.nodes:
            raise KeyError(f"Target node not found: {target_id}")
        if not (MIN_STRENGTH <= strength <= MAX_STRENGTH):
            raise ValueError(f"Edge strength out of range: {strength}")

        edge = Edge(source_id, target_id, strength, edge_type)
        self.adjacency[source_id].append(edge)
        self.adjacency[target_id].append(edge.reversed())
        return edge

    def has_edge(self, source_id: str, target_id: str) -> bool:
        return any(e.target_id == target_id for e in self.neighbors(source_id))

    def edges(self) -> list[Edge]:
        """All directed edges, grouped by source in node insertion order."""
        return [edge for out in self.adjacency.values() for edge in out]

    @property
    def edge_count(self) -> int:
        return sum(len(out) for out in self.adjacency.values())

    def nodes_of_kind(self, kind: NodeKind) -> list[Node]:
        return [n for n in self.nodes.values() if n.kind is kind]


__all__ = [
    "TEAMMATE_STRENGTH",
    "TEAM_SHARED_STRENGTH",
    "TEAMMATE_EDGE",
    "TEAM_SHARED_EDGE",
    "SELF_NAME",
    "TEAMMATE_TITLE",
    "NodeKind",
    "TeamSource",
    "Node",
    "Edge",
    "AcquaintanceGraph",
    "self_node_id",
    "own_contact_node_id",
    "teammate_node_id",
    "team_contact_node_id",
]
