import logging
from pathlib import Path

import pytest

from vbpickup.config import SessionSettings, get_rules, iter_rules, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("VBPICKUP_DB_PATH", "VBPICKUP_FORMAT", "VBPICKUP_TEAM_COUNT", "VBPICKUP_TIE_BREAK"):
        monkeypatch.delenv(name, raising=False)


def test_get_rules_is_case_insensitive():
    rules = get_rules(" beach ")
    assert rules.format == "BEACH"
    assert rules.players_per_team == 2


def test_get_rules_missing_raises():
    with pytest.raises(KeyError):
        get_rules("SNOW")


def test_iter_rules_lists_all_formats():
    assert {rules.format for rules in iter_rules()} == {"INDOOR", "QUADS", "BEACH"}


def test_load_settings_defaults():
    settings = load_settings()
    assert settings.rules.format == "INDOOR"
    assert settings.team_count is None
    assert settings.tie_break == "stable"
    assert isinstance(settings.db_path, Path)


def test_load_settings_reads_environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("VBPICKUP_DB_PATH", str(tmp_path / "roster.sqlite"))
    monkeypatch.setenv("VBPICKUP_FORMAT", "quads")
    monkeypatch.setenv("VBPICKUP_TEAM_COUNT", "4")
    monkeypatch.setenv("VBPICKUP_TIE_BREAK", "Shuffle")

    settings = load_settings()

    assert settings.db_path == tmp_path / "roster.sqlite"
    assert settings.rules.format == "QUADS"
    assert settings.team_count == 4
    assert settings.tie_break == "shuffle"


def test_load_settings_ignores_bad_values(monkeypatch, caplog):
    monkeypatch.setenv("VBPICKUP_FORMAT", "hockey")
    monkeypatch.setenv("VBPICKUP_TEAM_COUNT", "zero")
    monkeypatch.setenv("VBPICKUP_TIE_BREAK", "coin-flip")

    with caplog.at_level(logging.WARNING):
        settings = load_settings()

    assert settings.rules.format == "INDOOR"
    assert settings.team_count is None
    assert settings.tie_break == "stable"
    assert "VBPICKUP_TEAM_COUNT" in caplog.text


def test_team_count_override_must_be_positive(monkeypatch):
    monkeypatch.setenv("VBPICKUP_TEAM_COUNT", "0")
    assert load_settings().team_count is None


def _settings(session_format: str, team_count=None) -> SessionSettings:
    return SessionSettings(
        db_path=Path("unused.sqlite"),
        rules=get_rules(session_format),
        team_count=team_count,
        tie_break="stable",
    )


@pytest.mark.parametrize(
    ("session_format", "player_count", "expected"),
    [
        ("INDOOR", 0, 2),
        ("INDOOR", 13, 2),
        ("INDOOR", 20, 3),
        ("BEACH", 9, 4),
        ("QUADS", 3, 2),
    ],
)
def test_resolve_team_count_from_format(session_format, player_count, expected):
    assert _settings(session_format).resolve_team_count(player_count) == expected


def test_resolve_team_count_prefers_request_then_override():
    settings = _settings("INDOOR", team_count=5)
    assert settings.resolve_team_count(30) == 5
    assert settings.resolve_team_count(30, requested=3) == 3
