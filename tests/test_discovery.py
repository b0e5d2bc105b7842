"""Tests for the PathDiscovery facade and DiscoveryConfig."""

from __future__ import annotations

import pytest

from intropath import DiscoveryConfig, InMemoryNetworkStore, PathDiscovery
from intropath.graph import NodeKind


class TestDiscoveryConfig:
    def test_defaults(self):
        config = DiscoveryConfig()
        assert (config.max_hops, config.top_k, config.early_stop_factor) == (4, 5, 2)

    @pytest.mark.parametrize("field", ["max_hops", "top_k", "early_stop_factor"])
    def test_rejects_non_positive(self, field):
        with pytest.raises(ValueError):
            DiscoveryConfig(**{field: 0})

    def test_rejects_non_int(self):
        with pytest.raises(TypeError):
            DiscoveryConfig(max_hops="4")


class TestFindPaths:
    def test_find_paths_to_own_contact(self, seeded_store):
        discovery = PathDiscovery(seeded_store)
        [result] = discovery.find_paths("u", "bob")
        assert result.node_ids == ["u", "alice", "bob"]
        assert result.path_strength == 2

    def test_config_limits_apply(self, seeded_memory_store):
        discovery = PathDiscovery(seeded_memory_store, DiscoveryConfig(max_hops=1))
        assert discovery.find_paths("u", "bob") == []
        assert len(discovery.find_paths("u", "bob", max_hops=2)) == 1

    def test_explicit_zero_is_not_replaced_by_default(self, seeded_memory_store):
        discovery = PathDiscovery(seeded_memory_store)
        with pytest.raises(ValueError):
            discovery.find_paths("u", "bob", top_k=0)

    def test_unknown_target(self, seeded_memory_store):
        assert PathDiscovery(seeded_memory_store).find_paths("u", "nobody") == []

    def test_graph_rebuilt_per_request(self, seeded_memory_store):
        discovery = PathDiscovery(seeded_memory_store)
        assert discovery.find_paths("u", "late") == []
        seeded_memory_store.add_contact("u", "Late Arrival", contact_id="late")
        seeded_memory_store.add_relationship("u", "late", strength=4)
        [result] = discovery.find_paths("u", "late")
        assert result.path_strength == 4


class TestSearchPaths:
    def test_own_contact_match(self, seeded_store):
        outcome = PathDiscovery(seeded_store).search_paths("u", "hooli")
        assert outcome.found
        assert not outcome.is_team_contact
        assert outcome.target.contact_id == "bob"
        assert outcome.target.node_id == "bob"
        assert outcome.target.team_source is None
        assert [r.node_ids for r in outcome.paths] == [["u", "alice", "bob"]]

    def test_team_contact_match(self, seeded_store):
        outcome = PathDiscovery(seeded_store).search_paths("u", "Acme")
        assert outcome.is_team_contact is True
        assert outcome.target.contact_id == "x1"
        assert outcome.target.node_id == "team:t1:x1"
        assert outcome.target.team_source.team_name == "Founders"
        assert outcome.target.team_source.shared_by_user_name == "Mia"
        [result] = outcome.paths
        assert result.node_ids == ["u", "teammate:m1", "team:t1:x1"]
        assert result.path_strength == 3
        assert result.path[-1].kind is NodeKind.TEAM_SHARED_CONTACT

    def test_own_contacts_take_precedence(self, seeded_memory_store):
        # Bob (own) and Zed (shared by Noah) are both engineers.
        outcome = PathDiscovery(seeded_memory_store).search_paths("u", "engineer")
        assert not outcome.is_team_contact
        assert outcome.target.contact_id == "bob"

    def test_no_match(self, seeded_store):
        outcome = PathDiscovery(seeded_store).search_paths("u", "umbrella corp")
        assert not outcome.found
        assert outcome.target is None
        assert outcome.paths == []
        assert outcome.is_team_contact is False

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_blank_description(self, seeded_memory_store, text):
        outcome = PathDiscovery(seeded_memory_store).search_paths("u", text)
        assert not outcome.found

    def test_match_without_path(self):
        store = InMemoryNetworkStore()
        store.add_user("u", "Uma")
        store.add_contact("u", "Loner", contact_id="loner")
        outcome = PathDiscovery(store).search_paths("u", "loner")
        assert outcome.found
        assert outcome.paths == []

    def test_to_dict(self, seeded_memory_store):
        data = PathDiscovery(seeded_memory_store).search_paths("u", "acme").to_dict()
        assert data["isTeamContact"] is True
        assert data["targetContact"]["id"] == "x1"
        assert data["targetContact"]["teamSource"]["teamId"] == "t1"
        assert data["paths"][0]["pathStrength"] == 3

        empty = PathDiscovery(seeded_memory_store).search_paths("u", "zzz").to_dict()
        assert empty == {"paths": [], "message": "No matching contacts found"}


class TestDiscover:
    def test_by_id(self, seeded_memory_store):
        outcome = PathDiscovery(seeded_memory_store).discover("u", target_contact_id="carol")
        assert outcome.target_node_id == "carol"
        assert outcome.found
        [result] = outcome.paths
        assert result.is_direct_connection
        assert outcome.to_dict()["targetContactId"] == "carol"

    def test_by_description(self, seeded_memory_store):
        outcome = PathDiscovery(seeded_memory_store).discover("u", target_description="globex")
        assert outcome.is_team_contact
        assert outcome.target.node_id == "team:t2:x2"

    def test_id_wins_over_description(self, seeded_memory_store):
        outcome = PathDiscovery(seeded_memory_store).discover(
            "u", target_contact_id="alice", target_description="globex"
        )
        assert outcome.target_node_id == "alice"
        assert outcome.target is None

    def test_requires_a_target(self, seeded_memory_store):
        with pytest.raises(ValueError, match="required"):
            PathDiscovery(seeded_memory_store).discover("u")
