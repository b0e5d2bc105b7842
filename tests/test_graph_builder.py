"""Tests for GraphBuilder.

Test categories:
- TestOwnNetwork: self node, own contacts, user and contact relationships
- TestTeamNetwork: teammates, team-shared contacts, dedupe, provenance
- TestGraphInvariants: mirroring, endpoint existence, uniqueness, idempotence
- TestFailurePropagation: store errors surface unchanged
"""

from __future__ import annotations

from collections import Counter

import pytest

from intropath import GraphBuilder, InMemoryNetworkStore, NetworkStore, build_graph
from intropath.graph import NodeKind, team_contact_node_id, teammate_node_id
from intropath.records import (
    ContactRecord,
    RelationshipRecord,
    SharedContactRecord,
    TeamMemberRecord,
    TeamRecord,
)


class StubStore:
    """Minimal NetworkStore returning canned records."""

    def __init__(self, contacts=(), relationships=(), teams=(), members=None, shares=None):
        self.contacts = list(contacts)
        self.relationships = list(relationships)
        self.teams = list(teams)
        self.members = members or {}
        self.shares = shares or {}
        self.calls: list[str] = []

    def get_contacts(self, user_id):
        self.calls.append("contacts")
        return self.contacts

    def get_relationships(self, user_id):
        self.calls.append("relationships")
        return self.relationships

    def get_teams(self, user_id):
        self.calls.append("teams")
        return self.teams

    def get_team_members(self, team_id, exclude_user_id):
        return [m for m in self.members.get(team_id, []) if m.user_id != exclude_user_id]

    def get_shared_contacts(self, team_id, shared_by_id):
        return self.shares.get((team_id, shared_by_id), [])

    def search_own_contacts(self, user_id, text):
        return None

    def search_team_shared_contacts(self, user_id, text):
        return None

    def close(self):
        pass


class FailingStore(InMemoryNetworkStore):
    """In-memory store whose team lookup fails."""

    def get_teams(self, user_id):
        raise ConnectionError("database unavailable")


def _edge_multiset(graph):
    return Counter(
        (e.source_id, e.target_id, e.strength, e.edge_type) for e in graph.edges()
    )


# ── own network ───────────────────────────────────────────────


class TestOwnNetwork:
    def test_empty_user_has_only_self(self):
        graph = build_graph(InMemoryNetworkStore(), "nobody")
        assert list(graph.nodes) == ["nobody"]
        assert graph.nodes["nobody"].kind is NodeKind.SELF
        assert graph.nodes["nobody"].name == "You"
        assert graph.edge_count == 0

    def test_own_contacts_become_nodes(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        own = graph.nodes_of_kind(NodeKind.OWN_CONTACT)
        assert [n.node_id for n in own] == ["alice", "bob", "carol"]
        alice = graph.nodes["alice"]
        assert (alice.name, alice.company, alice.title) == ("Alice", "Initrode", "VP Sales")
        assert alice.team_source is None

    def test_user_relationship_links_self(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        out = {e.target_id: e for e in graph.neighbors("u")}
        assert out["alice"].strength == 5
        assert out["alice"].edge_type == "direct"
        assert out["carol"].strength == 3

    def test_contact_relationship_links_contacts(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        [edge] = [e for e in graph.neighbors("alice") if e.target_id == "bob"]
        assert edge.strength == 2
        assert edge.edge_type == "colleague"
        assert not graph.has_edge("u", "bob")

    def test_relationship_to_unknown_contact_is_skipped(self):
        store = StubStore(
            contacts=[ContactRecord("a", "u", "Alice")],
            relationships=[
                RelationshipRecord("r1", "u", "a", is_user_relationship=True, strength=4),
                RelationshipRecord("r2", "u", "a", contact_b_id="ghost", strength=2),
                RelationshipRecord("r3", "u", "ghost", is_user_relationship=True),
            ],
        )
        graph = build_graph(store, "u")
        assert graph.edge_count == 2
        assert "ghost" not in graph.nodes

    def test_self_loop_relationship_is_skipped(self):
        store = StubStore(
            contacts=[ContactRecord("a", "u", "Alice")],
            relationships=[RelationshipRecord("r1", "u", "a", contact_b_id="a")],
        )
        assert build_graph(store, "u").edge_count == 0


# ── team network ──────────────────────────────────────────────


class TestTeamNetwork:
    def test_teammate_node_and_edge(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        mia = graph.nodes[teammate_node_id("m1")]
        assert mia.kind is NodeKind.TEAMMATE
        assert mia.name == "Mia"
        assert mia.title == "Team Member"
        [edge] = [e for e in graph.neighbors("u") if e.target_id == mia.node_id]
        assert (edge.strength, edge.edge_type) == (4, "teammate")

    def test_teammate_in_two_teams_appears_once(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        teammates = graph.nodes_of_kind(NodeKind.TEAMMATE)
        assert sorted(n.node_id for n in teammates) == ["teammate:m1", "teammate:m2"]

        to_mia = [e for e in graph.neighbors("u") if e.target_id == "teammate:m1"]
        from_mia = [e for e in graph.neighbors("teammate:m1") if e.target_id == "u"]
        assert len(to_mia) == 1
        assert len(from_mia) == 1

    def test_teammate_provenance_is_first_team(self, seeded_store):
        graph = build_graph(seeded_store, "u")
        source = graph.nodes["teammate:m1"].team_source
        assert (source.team_id, source.team_name) == ("t1", "Founders")
        assert (source.shared_by_user_id, source.shared_by_user_name) == ("m1", "Mia")

    def test_teammate_provenance_follows_join_order(self, store):
        store.add_user("u", "Uma")
        store.add_user("m", "Mia")
        store.create_team("Founders", team_id="t1")
        store.create_team("Investors", team_id="t2")
        for team_id in ("t2", "t1"):
            store.add_team_member(team_id, "u")
            store.add_team_member(team_id, "m")

        graph = build_graph(store, "u")
        assert graph.nodes["teammate:m"].team_source.team_id == "t2"

    def test_shares_from_second_team_still_added(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        yara_id = team_contact_node_id("t2", "x2")
        assert yara_id in graph.nodes
        [edge] = [e for e in graph.neighbors("teammate:m1") if e.target_id == yara_id]
        assert (edge.strength, edge.edge_type) == (3, "team_shared")

    def test_team_shared_contact_provenance(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        xavier = graph.nodes["team:t1:x1"]
        assert xavier.kind is NodeKind.TEAM_SHARED_CONTACT
        assert (xavier.name, xavier.company, xavier.title) == ("Xavier", "Acme Corp", "CTO")
        assert xavier.team_source.team_name == "Founders"
        assert xavier.team_source.shared_by_user_name == "Mia"

    def test_same_contact_in_two_teams_yields_two_nodes(self):
        mia = TeamMemberRecord("m1", "Mia")
        shared = SharedContactRecord("x", "Xavier")
        store = StubStore(
            teams=[TeamRecord("t1", "One"), TeamRecord("t2", "Two")],
            members={"t1": [mia], "t2": [mia]},
            shares={("t1", "m1"): [shared], ("t2", "m1"): [shared]},
        )
        graph = build_graph(store, "u")
        assert "team:t1:x" in graph.nodes
        assert "team:t2:x" in graph.nodes
        assert len(graph.neighbors("teammate:m1")) == 3  # self + two shares

    def test_own_contact_also_shared_stays_distinct(self):
        store = StubStore(
            contacts=[ContactRecord("x", "u", "Xavier")],
            relationships=[RelationshipRecord("r", "u", "x", is_user_relationship=True)],
            teams=[TeamRecord("t1", "One")],
            members={"t1": [TeamMemberRecord("m1", "Mia")]},
            shares={("t1", "m1"): [SharedContactRecord("x", "Xavier")]},
        )
        graph = build_graph(store, "u")
        assert graph.nodes["x"].kind is NodeKind.OWN_CONTACT
        assert graph.nodes["team:t1:x"].kind is NodeKind.TEAM_SHARED_CONTACT

    def test_duplicate_share_rows_do_not_duplicate_edges(self):
        shared = SharedContactRecord("x", "Xavier")
        store = StubStore(
            teams=[TeamRecord("t1", "One")],
            members={"t1": [TeamMemberRecord("m1", "Mia")]},
            shares={("t1", "m1"): [shared, shared]},
        )
        graph = build_graph(store, "u")
        assert len(graph.neighbors("team:t1:x")) == 1

    def test_user_is_not_their_own_teammate(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        assert "teammate:u" not in graph.nodes


# ── invariants ────────────────────────────────────────────────


class TestGraphInvariants:
    def test_every_edge_is_mirrored(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        edges = _edge_multiset(graph)
        for (src, dst, strength, etype), count in edges.items():
            assert edges[(dst, src, strength, etype)] == count

    def test_every_endpoint_is_a_node(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        for edge in graph.edges():
            assert edge.source_id in graph.nodes
            assert edge.target_id in graph.nodes

    def test_node_and_edge_counts(self, seeded_memory_store):
        graph = build_graph(seeded_memory_store, "u")
        # u, alice, bob, carol, 2 teammates, 3 team-shared contacts
        assert len(graph.nodes) == 9
        # 8 logical links, each mirrored
        assert graph.edge_count == 16

    def test_build_is_idempotent(self, seeded_memory_store):
        first = build_graph(seeded_memory_store, "u")
        second = build_graph(seeded_memory_store, "u")
        assert first.nodes == second.nodes
        assert _edge_multiset(first) == _edge_multiset(second)
        assert first is not second

    def test_build_does_not_mutate_store(self, seeded_memory_store):
        before = seeded_memory_store.get_relationships("u")
        build_graph(seeded_memory_store, "u")
        assert seeded_memory_store.get_relationships("u") == before

    def test_fetch_order(self):
        store = StubStore()
        GraphBuilder(store).build("u")
        assert store.calls == ["contacts", "relationships", "teams"]

    def test_stub_satisfies_protocol(self):
        assert isinstance(StubStore(), NetworkStore)


# ── failures ──────────────────────────────────────────────────


class TestFailurePropagation:
    def test_store_error_propagates_unchanged(self):
        store = FailingStore()
        store.add_user("u", "Uma")
        with pytest.raises(ConnectionError, match="database unavailable"):
            build_graph(store, "u")
