"""Network storage backends.

Public API:
    NetworkStore: Protocol all backends implement.
    InMemoryNetworkStore: Dict-based store for testing.
    SQLiteNetworkStore: Relational store backed by SQLite.
    KuzuNetworkStore: Graph store backed by Kuzu.
"""

from __future__ import annotations

from .kuzu_store import KuzuNetworkStore
from .memory_store import InMemoryNetworkStore
from .protocol import NetworkStore
from .sqlite_store import SQLiteNetworkStore

__all__ = [
    "NetworkStore",
    "InMemoryNetworkStore",
    "SQLiteNetworkStore",
    "KuzuNetworkStore",
]
