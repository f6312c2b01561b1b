import json

import pytest

from tier_placement.core.ranking_store import InMemoryRankingStore
from tier_placement.core.session import PlacementSession
from placement_helpers import letters, ranks


def store_with(rank_map, user="alice", tier="liked"):
    return InMemoryRankingStore({(user, tier): rank_map})


def truthful(rank_map, true_position):
    return lambda candidate, state: "better" if rank_map[candidate] >= true_position else "worse"


def test_run_commits_first_place():
    store = store_with(letters(5))
    session = PlacementSession.start(store, "alice", "liked", "NEW")
    assert session.run(lambda c, s: "better") == 1
    assert store.get_ranked("alice", "liked") == {"NEW": 1, "A": 2, "B": 3, "C": 4, "D": 5, "E": 6}
    assert session.committed


def test_run_commits_last_place():
    store = store_with(letters(5))
    session = PlacementSession.start(store, "alice", "liked", "NEW")
    assert session.run(lambda c, s: "worse") == 6
    assert store.get_ranked("alice", "liked")["NEW"] == 6
    assert store.get_ranked("alice", "liked")["E"] == 5


def test_first_item_in_empty_tier():
    store = InMemoryRankingStore()
    asked = []
    session = PlacementSession.start(store, "alice", "fine", "NEW")
    assert session.run(lambda c, s: asked.append(c)) == 1
    assert asked == []
    assert store.get_ranked("alice", "fine") == {"NEW": 1}


def test_abandoned_session_leaves_store_untouched():
    store = store_with(letters(5))
    session = PlacementSession.start(store, "alice", "liked", "NEW")
    session.record(session.next_candidate(), "better")
    session.record(session.next_candidate(), "worse")
    assert store.get_ranked("alice", "liked") == letters(5)
    assert not session.committed


def test_finish_commits_once():
    store = store_with(letters(5))
    session = PlacementSession.start(store, "alice", "liked", "NEW")
    position = session.run(lambda c, s: "skipped")
    assert session.finish() == position
    assert len(store.get_ranked("alice", "liked")) == 6
    assert session.next_candidate() is None
    with pytest.raises(RuntimeError):
        session.record("A", "better")


def test_already_ranked_item_rejected():
    store = store_with(letters(3))
    with pytest.raises(ValueError):
        PlacementSession.start(store, "alice", "liked", "B")


def test_rank_gaps_are_closed():
    store = store_with({"a": 1, "b": 4, "c": 9})
    session = PlacementSession.start(store, "alice", "liked", "NEW")
    assert session.state.item_rank_map == {"a": 1, "b": 2, "c": 3}
    assert session.run(lambda c, s: "better") == 1
    assert store.get_ranked("alice", "liked") == {"NEW": 1, "a": 2, "b": 3, "c": 4}


def test_tiers_and_users_are_independent():
    store = InMemoryRankingStore({("alice", "liked"): letters(3), ("bob", "liked"): {"Z": 1}})
    PlacementSession.start(store, "alice", "fine", "NEW").run(lambda c, s: "better")
    assert store.get_ranked("alice", "liked") == letters(3)
    assert store.get_ranked("bob", "liked") == {"Z": 1}
    assert store.get_ranked("alice", "fine") == {"NEW": 1}


def test_snapshot_resume_matches_uninterrupted_run():
    rank_map = ranks(10)
    ask = truthful(rank_map, 4)

    straight_store = store_with(rank_map)
    straight = PlacementSession.start(straight_store, "alice", "liked", "NEW")
    expected = straight.run(ask)

    store = store_with(rank_map)
    session = PlacementSession.start(store, "alice", "liked", "NEW")
    for _ in range(2):
        candidate = session.next_candidate()
        session.record(candidate, ask(candidate, session.state))

    data = json.loads(json.dumps(session.snapshot()))
    assert len(data["history"]) == 2
    assert data["position"] is None

    resumed = PlacementSession.from_snapshot(store, data)
    assert resumed.state == session.state
    assert resumed.run(ask) == expected
    assert resumed.state.history == straight.state.history
    assert store.get_ranked("alice", "liked") == straight_store.get_ranked("alice", "liked")


def test_snapshot_of_committed_session():
    store = store_with(letters(3))
    session = PlacementSession.start(store, "alice", "liked", "NEW")
    session.run(lambda c, s: "worse")

    resumed = PlacementSession.from_snapshot(store, session.snapshot())
    assert resumed.committed
    assert resumed.finish() == 4
    assert len(store.get_ranked("alice", "liked")) == 4
