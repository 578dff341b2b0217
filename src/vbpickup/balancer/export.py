"""CSV and plain-text rendering for team assignments."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Sequence

from .service import Team


_CSV_HEADERS = ("team", "player_id", "name", "skill", "team_total")


def _format_skill(value: float) -> str:
    return f"{value:g}"


def export_teams_to_csv(teams: Sequence[Team]) -> str:
    """One row per player, grouped by team in assignment order."""

    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(_CSV_HEADERS)
    for team in teams:
        for player in team.players:
            writer.writerow([
                team.index + 1,
                player.player_id,
                player.name,
                _format_skill(player.skill),
                _format_skill(team.total_skill),
            ])
    return buffer.getvalue()


def format_teams(teams: Sequence[Team]) -> str:
    """Render teams the way the session screen lists them."""

    lines: list[str] = []
    for team in teams:
        lines.append(
            f"{team.label} ({len(team)} players, Total Skill: {_format_skill(team.total_skill)})"
        )
        for player in team.players:
            lines.append(f"  {player.name} (Skill: {_format_skill(player.skill)})")
    return "\n".join(lines)


__all__ = [
    "export_teams_to_csv",
    "format_teams",
]
