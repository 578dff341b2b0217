from pathlib import Path

import pytest

from vbpickup.balancer import distribute
from vbpickup.models import Player
from vbpickup.persistence import ConflictError, DuplicatePlayerId, DuplicatePlayerIdentity, RosterStore


@pytest.fixture
def store(tmp_path: Path) -> RosterStore:
    return RosterStore(tmp_path / "roster.sqlite")


def test_register_and_list_in_registration_order(store: RosterStore):
    alice = store.register_player("Alice", skill=10)
    bob = store.register_player("  Bob ")

    players = store.list_players()

    assert [player.player_id for player in players] == [alice.player_id, bob.player_id]
    assert players[1].name == "Bob"
    assert players[1].skill == 0.0


def test_register_duplicate_name_conflicts(store: RosterStore):
    existing = store.register_player("Alice")

    with pytest.raises(DuplicatePlayerIdentity) as excinfo:
        store.register_player("  aLiCe ")

    assert excinfo.value.existing == existing
    assert len(store.list_players()) == 1


def test_conflict_error_alias():
    assert ConflictError is DuplicatePlayerIdentity


def test_upsert_updates_existing_record(store: RosterStore):
    player = store.register_player("Alice")

    updated = store.upsert_player(
        Player(player_id=player.player_id, name="alice", skill=7, created_at=player.created_at)
    )

    assert updated.name == "alice"
    assert updated.skill == 7
    assert store.list_players() == [updated]


def test_update_player_rename_conflict(store: RosterStore):
    store.register_player("Alice")
    bob = store.register_player("Bob")

    with pytest.raises(DuplicatePlayerIdentity):
        store.update_player(bob.player_id, name="ALICE")

    assert store.get_player(bob.player_id).name == "Bob"


def test_update_player_missing_raises(store: RosterStore):
    with pytest.raises(KeyError):
        store.update_player("missing", skill=3)


def test_update_player_keeps_unchanged_fields(store: RosterStore):
    player = store.register_player("Alice", skill=4)
    updated = store.update_player(player.player_id, skill=9.5)
    assert updated.name == "Alice"
    assert updated.skill == pytest.approx(9.5)
    assert updated.created_at == player.created_at


def test_find_by_name_is_normalized(store: RosterStore):
    player = store.register_player("Carol")
    assert store.find_by_name(" CAROL ") == player
    assert store.find_by_name("Dave") is None
    assert store.find_by_name("   ") is None


def test_check_in_is_idempotent(store: RosterStore):
    player = store.register_player("Alice")

    store.set_checked_in(player.player_id, True)
    store.set_checked_in(player.player_id, True)

    assert store.list_checked_in() == {player.player_id}


def test_check_in_unknown_player_raises(store: RosterStore):
    with pytest.raises(KeyError):
        store.set_checked_in("ghost", True)


def test_check_out_is_idempotent(store: RosterStore):
    player = store.register_player("Alice")
    store.set_checked_in(player.player_id, True)

    store.set_checked_in(player.player_id, False)
    store.set_checked_in(player.player_id, False)

    assert store.list_checked_in() == set()


def test_check_in_by_name(store: RosterStore):
    player = store.register_player("Alice")

    assert store.check_in_by_name("alice ") == player
    assert store.check_in_by_name("Zed") is None
    assert store.list_checked_in() == {player.player_id}


def test_clear_all_check_ins(store: RosterStore):
    for name in ("Alice", "Bob", "Carol"):
        store.check_in_by_name(store.register_player(name).name)

    store.clear_all_check_ins()

    assert store.list_checked_in() == set()
    assert len(store.list_players()) == 3


def test_remove_player_drops_check_in(store: RosterStore):
    player = store.register_player("Alice")
    store.set_checked_in(player.player_id, True)

    store.remove_player(player.player_id)

    assert store.get_player(player.player_id) is None
    assert store.list_checked_in() == set()
    with pytest.raises(KeyError):
        store.remove_player(player.player_id)


def test_removed_name_can_register_again(store: RosterStore):
    player = store.register_player("Alice")
    store.remove_player(player.player_id)
    assert store.register_player("alice").name == "alice"


def test_store_survives_reopen(tmp_path: Path):
    path = tmp_path / "roster.sqlite"
    player = RosterStore(path).register_player("Alice", skill=3)
    RosterStore(path).set_checked_in(player.player_id, True)

    reopened = RosterStore(path)
    assert reopened.list_players() == [player]
    assert reopened.list_checked_in() == {player.player_id}


def test_save_and_load_latest_distribution(store: RosterStore):
    players = [store.register_player(name, skill=skill) for name, skill in (("Alice", 10), ("Bob", 8), ("Carol", 6))]
    assert store.get_latest_distribution() is None

    store.save_distribution(distribute(players, 3), tie_break="stable")
    teams = distribute(players, 2)
    record = store.save_distribution(teams, tie_break="shuffle")

    latest = store.get_latest_distribution()
    assert latest is not None
    assert latest.distribution_id == record.distribution_id
    assert latest.team_count == 2
    assert latest.tie_break == "shuffle"
    assert latest.teams == teams


def test_replace_roster(store: RosterStore):
    store.register_player("Old Timer")
    players = [
        Player(player_id="a", name="Alice", skill=2),
        Player(player_id="b", name="Bob", skill=4),
    ]

    store.replace_roster(players, ["b", "unknown"])

    assert [player.player_id for player in store.list_players()] == ["a", "b"]
    assert store.list_checked_in() == {"b"}


def test_replace_roster_rejects_duplicates(store: RosterStore):
    original = store.register_player("Keeper")
    players = [
        Player(player_id="a", name="Alice"),
        Player(player_id="b", name="ALICE"),
    ]

    with pytest.raises(DuplicatePlayerIdentity):
        store.replace_roster(players)

    assert store.list_players() == [original]


def test_replace_roster_rejects_repeated_ids(store: RosterStore):
    keeper = store.register_player("Keeper")
    players = [
        Player(player_id="x", name="Alice"),
        Player(player_id="x", name="Bob"),
    ]

    with pytest.raises(DuplicatePlayerId) as excinfo:
        store.replace_roster(players, ["x"])

    assert excinfo.value.player_id == "x"
    assert store.list_players() == [keeper]
    assert store.list_checked_in() == set()
