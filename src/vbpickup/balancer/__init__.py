"""Skill-balanced team distribution."""

from .eligibility import filter_eligible
from .export import export_teams_to_csv, format_teams
from .service import (
    InvalidTeamCount,
    Team,
    TieBreak,
    distribute,
    skill_spread,
    team_count_for,
)

__all__ = [
    "InvalidTeamCount",
    "Team",
    "TieBreak",
    "distribute",
    "export_teams_to_csv",
    "filter_eligible",
    "format_teams",
    "skill_spread",
    "team_count_for",
]
