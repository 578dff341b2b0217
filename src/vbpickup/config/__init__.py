"""Configuration helpers for session formats and environment overrides."""

from .session import (
    SessionRules,
    SessionSettings,
    get_rules,
    iter_rules,
    load_settings,
)

__all__ = [
    "SessionRules",
    "SessionSettings",
    "get_rules",
    "iter_rules",
    "load_settings",
]
