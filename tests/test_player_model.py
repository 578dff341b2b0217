import pytest
from pydantic import ValidationError

from vbpickup.models import Player, normalize_name


def test_player_is_frozen():
    player = Player(player_id="p1", name="Alice", skill=7.5)

    assert player.player_id == "p1"
    assert player.skill == pytest.approx(7.5)

    with pytest.raises((TypeError, ValidationError)):
        player.skill = 9.0  # type: ignore[misc]


def test_player_defaults_to_zero_skill():
    player = Player(player_id="p1", name="Newcomer")
    assert player.skill == 0.0


def test_player_name_is_stripped_and_keyed():
    player = Player(player_id="p1", name="  Alice Smith ")
    assert player.name == "Alice Smith"
    assert player.name_key == "alice smith"


def test_player_rejects_blank_name():
    with pytest.raises(ValidationError):
        Player(player_id="p1", name="   ")


def test_player_rejects_nan_skill():
    with pytest.raises(ValidationError):
        Player(player_id="p1", name="Alice", skill=float("nan"))


def test_negative_skill_allowed():
    assert Player(player_id="p1", name="Alice", skill=-2).skill == -2


def test_normalize_name():
    assert normalize_name("  BoB ") == "bob"
    assert normalize_name("") == ""
