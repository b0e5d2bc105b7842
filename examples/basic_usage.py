"""Basic usage example for intropath."""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


from intropath import PathDiscovery, SQLiteNetworkStore


def main():
    print("=" * 60)
    print("intropath - Basic Usage Example")
    print("=" * 60)

    # 1. Open a store
    print("\n1. Opening SQLiteNetworkStore...")
    db_path = Path("/tmp/demo-intropath/network.db")
    if db_path.exists():
        db_path.unlink()
    store = SQLiteNetworkStore(db_path)
    print(f"   Database: {store.db_path}")

    # 2. Seed a small network
    print("\n2. Seeding network...")
    store.add_user("me", "Morgan")
    store.add_user("sam", "Sam")
    store.add_contact("me", "Alice", company="Initrode", title="VP Sales", contact_id="alice")
    store.add_contact("me", "Bob", company="Hooli", title="Engineer", contact_id="bob")
    store.add_relationship("me", "alice", strength=5, relationship_type="direct")
    store.add_relationship("me", "alice", strength=2, relationship_type="colleague", contact_b_id="bob")

    store.add_contact("sam", "Xavier", company="Acme Corp", title="CTO", contact_id="xavier")
    store.create_team("Founders", team_id="founders")
    store.add_team_member("founders", "me")
    store.add_team_member("founders", "sam")
    store.share_contact("xavier", "founders", "sam")
    print("   2 users, 3 contacts, 1 team")

    discovery = PathDiscovery(store)

    # 3. Search by contact id
    print("\n3. Paths to Bob...")
    for result in discovery.find_paths("me", "bob"):
        route = " -> ".join(node.name for node in result.path)
        print(f"   {route}  (strength {result.path_strength}, "
              f"success ~{result.estimated_success_rate:.0%})")

    # 4. Search by description (falls back to team-shared contacts)
    print("\n4. Paths to 'Acme'...")
    outcome = discovery.search_paths("me", "Acme")
    if outcome.target is None:
        print("   No matching contacts found")
    else:
        source = outcome.target.team_source
        print(f"   Target: {outcome.target.name} via team {source.team_name} "
              f"(shared by {source.shared_by_user_name})")
        for result in outcome.paths:
            route = " -> ".join(node.name for node in result.path)
            print(f"   {route}  (strength {result.path_strength}, {result.hops} hops)")

    store.close()
    print("\n" + "=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
