"""Acquaintance graph construction and weakest-link path search.

Public API:
    NodeKind: Node variant tag.
    TeamSource: Team provenance of virtual nodes.
    Node: Immutable graph node.
    Edge: Immutable directed edge.
    AcquaintanceGraph: Node map plus adjacency lists.
    GraphBuilder: Builds a graph from a NetworkStore.
    build_graph: Convenience wrapper around GraphBuilder.
    PathResult: One ranked introduction path.
    find_paths: Bounded-depth top-K weakest-link search.
"""

from __future__ import annotations

from .builder import GraphBuilder, build_graph
from .search import EARLY_STOP_FACTOR, PathResult, estimated_success_rate, find_paths
from .types import (
    TEAM_SHARED_STRENGTH,
    TEAMMATE_STRENGTH,
    AcquaintanceGraph,
    Edge,
    Node,
    NodeKind,
    TeamSource,
    own_contact_node_id,
    self_node_id,
    team_contact_node_id,
    teammate_node_id,
)

__all__ = [
    "NodeKind",
    "TeamSource",
    "Node",
    "Edge",
    "AcquaintanceGraph",
    "TEAMMATE_STRENGTH",
    "TEAM_SHARED_STRENGTH",
    "self_node_id",
    "own_contact_node_id",
    "teammate_node_id",
    "team_contact_node_id",
    "GraphBuilder",
    "build_graph",
    "EARLY_STOP_FACTOR",
    "PathResult",
    "estimated_success_rate",
    "find_paths",
]
