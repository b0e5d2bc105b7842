"""Weakest-link path search over an AcquaintanceGraph.

Paths are ranked by the minimum edge strength along them (the weakest
link), then by hop count.  This is not Dijkstra: the queue is a list
re-sorted by weakest-link strength after every expansion, and the
search stops once ``early_stop_factor * top_k`` paths have been found.

Public API:
    EARLY_STOP_FACTOR: Default cutoff multiplier for found paths.
    PathResult: One ranked introduction path.
    estimated_success_rate: Map weakest-link strength to a probability score.
    find_paths: Bounded-depth top-K path search.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..records import MAX_STRENGTH
from .types import AcquaintanceGraph, Edge, Node

logger = logging.getLogger(__name__)

DEFAULT_MAX_HOPS = 4
DEFAULT_TOP_K = 5

# Stop after this many times top_k paths have been found.  Removing the
# cutoff makes worst-case work exponential in degree x depth.
EARLY_STOP_FACTOR = 2

SUCCESS_RATE_CAP = 0.9


def estimated_success_rate(path_strength: int) -> float:
    """Capped linear mapping from weakest-link strength to (0, 0.9]."""
    return min(SUCCESS_RATE_CAP, path_strength * 0.15 + 0.10)


@dataclass
class PathResult:
    """A path from the querying user to a target.

    Attributes:
        path: Nodes from SELF to the target, inclusive.
        edges: The edges traversed, ``len(path) - 1`` of them.
        path_strength: Minimum edge strength along the path.
        hops: Number of edges.
        estimated_success_rate: Probability-like score from path_strength.
    """

    path: list[Node]
    edges: list[Edge]
    path_strength: int
    hops: int
    estimated_success_rate: float

    @property
    def node_ids(self) -> list[str]:
        return [n.node_id for n in self.path]

    @property
    def is_direct_connection(self) -> bool:
        return self.hops == 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": [n.to_dict() for n in self.path],
            "edges": [e.to_dict() for e in self.edges],
            "pathStrength": self.path_strength,
            "hops": self.hops,
            "estimatedSuccessRate": self.estimated_success_rate,
        }


@dataclass
class _QueueItem:
    node_id: str
    path: list[str]
    edges: list[Edge] = field(default_factory=list)
    min_strength: int = MAX_STRENGTH


def _positive_int(value: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{name} must be a positive integer")


def find_paths(
    graph: AcquaintanceGraph,
    target_node_id: str,
    max_hops: int = DEFAULT_MAX_HOPS,
    top_k: int = DEFAULT_TOP_K,
    early_stop_factor: int = EARLY_STOP_FACTOR,
) -> list[PathResult]:
    """Return up to *top_k* simple paths from the user's SELF node to the target.

    Args:
        graph: A built acquaintance graph; not mutated.
        target_node_id: Node id to reach.  Unknown ids yield ``[]``; the
            user's own SELF id yields one 0-hop path.
        max_hops: Maximum number of edges per path.
        top_k: Maximum number of results.
        early_stop_factor: Stop once ``early_stop_factor * top_k`` paths
            have been found.

    Returns:
        Results ordered by path_strength descending, then hops ascending.

    Raises:
        ValueError: If max_hops, top_k or early_stop_factor is not a
            positive integer.
    """
    _positive_int(max_hops, "max_hops")
    _positive_int(top_k, "top_k")
    _positive_int(early_stop_factor, "early_stop_factor")

    if not graph.has_node(target_node_id):
        logger.debug("Target %s not in graph for user %s", target_node_id, graph.user_id)
        return []
    start = graph.self_id

    limit = early_stop_factor * top_k
    results: list[PathResult] = []
    queue: list[_QueueItem] = [_QueueItem(node_id=start, path=[start])]
    expanded = 0

    while queue and len(results) < limit:
        current = queue.pop(0)

        if current.node_id == target_node_id:
            results.append(_materialize(graph, current))
            continue

        if len(current.path) - 1 >= max_hops:
            continue

        expanded += 1
        for edge in graph.neighbors(current.node_id):
            if edge.target_id in current.path:
                continue
            queue.append(
                _QueueItem(
                    node_id=edge.target_id,
                    path=current.path + [edge.target_id],
                    edges=current.edges + [edge],
                    min_strength=min(current.min_strength, edge.strength),
                )
            )

        # Stable sort keeps discovery order among equal strengths.
        queue.sort(key=lambda item: item.min_strength, reverse=True)

    results.sort(key=lambda r: (-r.path_strength, r.hops))
    logger.debug(
        "Path search %s -> %s: %d found, %d expanded, returning %d",
        start, target_node_id, len(results), expanded, min(len(results), top_k),
    )
    return results[:top_k]


def _materialize(graph: AcquaintanceGraph, item: _QueueItem) -> PathResult:
    return PathResult(
        path=[graph.nodes[nid] for nid in item.path],
        edges=list(item.edges),
        path_strength=item.min_strength,
        hops=len(item.path) - 1,
        estimated_success_rate=estimated_success_rate(item.min_strength),
    )


__all__ = [
    "DEFAULT_MAX_HOPS",
    "DEFAULT_TOP_K",
    "EARLY_STOP_FACTOR",
    "PathResult",
    "estimated_success_rate",
    "find_paths",
]
