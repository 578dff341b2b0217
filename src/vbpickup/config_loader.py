"""Persist and load roster snapshots as JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping
from uuid import uuid4

from vbpickup.balancer import filter_eligible
from vbpickup.models import Player


def _player_from_entry(entry: Mapping[str, Any]) -> Player:
    # Older exports carry only name and skill; mint an id for those.
    data = dict(entry)
    data.setdefault("player_id", uuid4().hex)
    return Player.model_validate(data)


@dataclass
class RosterSnapshot:
    players: List[Player]
    checked_in: List[str] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "RosterSnapshot":
        data = json.loads(path.read_text(encoding="utf-8"))
        players = [_player_from_entry(item) for item in data.get("players", [])]
        entries = data.get("checked_in", [])
        present = {player.player_id for player in filter_eligible(players, entries)}
        # Older exports list display names; match only entries that are not ids.
        names = [entry for entry in entries if entry not in present]
        present.update(player.player_id for player in filter_eligible(players, names, by_name=True))
        checked_in = [player.player_id for player in players if player.player_id in present]
        return cls(players=players, checked_in=checked_in)

    def save(self, path: Path) -> None:
        payload = {
            "players": [player.model_dump(mode="json") for player in self.players],
            "checked_in": sorted(self.checked_in),
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
