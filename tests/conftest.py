"""Pytest configuration and fixtures for intropath tests."""

import shutil

import pytest

from intropath import InMemoryNetworkStore, KuzuNetworkStore, SQLiteNetworkStore

BACKENDS = ["memory", "sqlite", "kuzu"]


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path):
    """Ensure each test uses isolated temporary storage.

    This fixture:
    - Creates unique temp directory for each test
    - Cleans up after test completes
    - Prevents database locking between tests
    """
    storage_path = tmp_path / "test_network"
    storage_path.mkdir(parents=True, exist_ok=True)

    yield storage_path

    if storage_path.exists():
        shutil.rmtree(storage_path, ignore_errors=True)


def make_store(backend, storage_path):
    if backend == "memory":
        return InMemoryNetworkStore()
    if backend == "sqlite":
        return SQLiteNetworkStore(storage_path / "network.db")
    if backend == "kuzu":
        return KuzuNetworkStore(storage_path / "network_kuzu", store_id="test-store")
    raise ValueError(backend)


@pytest.fixture(params=BACKENDS)
def store(request, isolated_storage):
    """A fresh, empty store for every backend."""
    s = make_store(request.param, isolated_storage)
    yield s
    s.close()


@pytest.fixture
def memory_store():
    s = InMemoryNetworkStore()
    yield s
    s.close()


def seed_team_network(store):
    """Populate *store* with a small two-team network.

    Network, from user "u":
        u --5-- alice --2-- bob
        u --3-- carol
        team t1 "Founders": u, m1 (Mia)
            Mia shared x1 "Xavier" (Acme Corp, CTO)
        team t2 "Investors": u, m1 (Mia), m2 (Noah)
            Mia shared x2 "Yara" (Globex, Partner)
            Noah shared x3 "Zed" (Initech, Engineer)
    """
    store.add_user("u", "Uma")
    store.add_user("m1", "Mia")
    store.add_user("m2", "Noah")

    store.add_contact("u", "Alice", company="Initrode", title="VP Sales", contact_id="alice")
    store.add_contact("u", "Bob", company="Hooli", title="Engineer", contact_id="bob")
    store.add_contact("u", "Carol", contact_id="carol")
    store.add_relationship("u", "alice", strength=5, relationship_type="direct")
    store.add_relationship("u", "carol", strength=3, relationship_type="direct")
    store.add_relationship(
        "u", "alice", strength=2, relationship_type="colleague", contact_b_id="bob"
    )

    store.add_contact("m1", "Xavier", company="Acme Corp", title="CTO", contact_id="x1")
    store.add_contact("m1", "Yara", company="Globex", title="Partner", contact_id="x2")
    store.add_contact("m2", "Zed", company="Initech", title="Engineer", contact_id="x3")

    store.create_team("Founders", team_id="t1")
    store.create_team("Investors", team_id="t2")
    for team_id, members in (("t1", ["u", "m1"]), ("t2", ["u", "m1", "m2"])):
        for user_id in members:
            store.add_team_member(team_id, user_id)

    store.share_contact("x1", "t1", "m1")
    store.share_contact("x2", "t2", "m1", visibility="full")
    store.share_contact("x3", "t2", "m2")
    return store


@pytest.fixture
def seeded_store(store):
    """The two-team network in every backend."""
    return seed_team_network(store)


@pytest.fixture
def seeded_memory_store(memory_store):
    """The two-team network in the in-memory store."""
    return seed_team_network(memory_store)
