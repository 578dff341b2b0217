"""Session format presets and environment-driven settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

from vbpickup.balancer import team_count_for

logger = logging.getLogger(__name__)

_DB_PATH_ENV = "VBPICKUP_DB_PATH"
_FORMAT_ENV = "VBPICKUP_FORMAT"
_TEAM_COUNT_ENV = "VBPICKUP_TEAM_COUNT"
_TIE_BREAK_ENV = "VBPICKUP_TIE_BREAK"

_DEFAULT_FORMAT = "INDOOR"
_DEFAULT_DB_PATH = Path.home() / ".vbpickup" / "vbpickup.sqlite"
_TIE_BREAK_CHOICES = ("stable", "shuffle")


@dataclass(frozen=True)
class SessionRules:
    format: str
    label: str
    players_per_team: int
    default_team_count: int


_SESSION_RULES: Dict[str, SessionRules] = {
    "INDOOR": SessionRules(
        format="INDOOR",
        label="Indoor 6s",
        players_per_team=6,
        default_team_count=2,
    ),
    "QUADS": SessionRules(
        format="QUADS",
        label="Grass quads",
        players_per_team=4,
        default_team_count=2,
    ),
    "BEACH": SessionRules(
        format="BEACH",
        label="Beach doubles",
        players_per_team=2,
        default_team_count=2,
    ),
}


def iter_rules() -> Iterable[SessionRules]:
    """Return an iterator of all configured session formats."""

    return _SESSION_RULES.values()


def get_rules(session_format: str) -> SessionRules:
    """Fetch rules for a session format, raising KeyError if missing."""

    key = session_format.strip().upper()
    if key not in _SESSION_RULES:
        raise KeyError(f"No session rules configured for format={session_format!r}")
    return _SESSION_RULES[key]


def _env_int(name: str, default: Optional[int], *, min_value: int | None = None) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %s", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("%s must be >= %d, got %d; using default %s", name, min_value, value, default)
        return default
    return value


def _env_choice(name: str, default: str, choices: Iterable[str]) -> str:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    allowed = tuple(choices)
    if value not in allowed:
        logger.warning("Invalid value for %s: %s; expected one of %s", name, raw, ", ".join(allowed))
        return default
    return value


@dataclass(frozen=True)
class SessionSettings:
    db_path: Path | str
    rules: SessionRules
    team_count: Optional[int]
    tie_break: str

    def resolve_team_count(self, player_count: int, requested: Optional[int] = None) -> int:
        """Pick the team count for a round: explicit request, then override, then format suggestion."""

        if requested is not None:
            return requested
        if self.team_count is not None:
            return self.team_count
        suggested = team_count_for(player_count, self.rules.players_per_team)
        return max(suggested, self.rules.default_team_count)


def load_settings() -> SessionSettings:
    """Read settings from the environment, falling back to the indoor preset."""

    raw_format = os.getenv(_FORMAT_ENV) or _DEFAULT_FORMAT
    try:
        rules = get_rules(raw_format)
    except KeyError:
        logger.warning("Unknown session format %s; using %s", raw_format, _DEFAULT_FORMAT)
        rules = get_rules(_DEFAULT_FORMAT)

    env_db = os.getenv(_DB_PATH_ENV)
    if env_db:
        db_path: Path | str = env_db if env_db.startswith("file:") else Path(env_db)
    else:
        db_path = _DEFAULT_DB_PATH

    return SessionSettings(
        db_path=db_path,
        rules=rules,
        team_count=_env_int(_TEAM_COUNT_ENV, None, min_value=1),
        tie_break=_env_choice(_TIE_BREAK_ENV, "stable", _TIE_BREAK_CHOICES),
    )
