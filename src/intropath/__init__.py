"""intropath: Introduction-path discovery over a user's acquaintance network."""

__version__ = "0.1.0"

from .config import DiscoveryConfig
from .discovery import PathDiscovery, ResolvedTarget, SearchOutcome
from .exceptions import (
    IntroPathError,
    InvalidRecordError,
    RecordNotFoundError,
    StoreCorruptedError,
)
from .graph import (
    EARLY_STOP_FACTOR,
    AcquaintanceGraph,
    Edge,
    GraphBuilder,
    Node,
    NodeKind,
    PathResult,
    TeamSource,
    build_graph,
    find_paths,
)
from .records import (
    ContactRecord,
    RelationshipRecord,
    SharedContactRecord,
    TeamContactMatch,
    TeamMemberRecord,
    TeamRecord,
    UserRecord,
)
from .store import (
    InMemoryNetworkStore,
    KuzuNetworkStore,
    NetworkStore,
    SQLiteNetworkStore,
)

__all__ = [
    # Discovery
    "PathDiscovery",
    "DiscoveryConfig",
    "ResolvedTarget",
    "SearchOutcome",
    # Graph
    "NodeKind",
    "TeamSource",
    "Node",
    "Edge",
    "AcquaintanceGraph",
    "GraphBuilder",
    "build_graph",
    "PathResult",
    "find_paths",
    "EARLY_STOP_FACTOR",
    # Records
    "UserRecord",
    "ContactRecord",
    "RelationshipRecord",
    "TeamRecord",
    "TeamMemberRecord",
    "SharedContactRecord",
    "TeamContactMatch",
    # Stores
    "NetworkStore",
    "InMemoryNetworkStore",
    "SQLiteNetworkStore",
    "KuzuNetworkStore",
    # Exceptions
    "IntroPathError",
    "InvalidRecordError",
    "RecordNotFoundError",
    "StoreCorruptedError",
]
