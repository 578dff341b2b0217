"""Persistence layer for the roster, check-ins and saved team distributions."""

from __future__ import annotations

import json
import logging
import sqlite3
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set
from uuid import uuid4

from vbpickup.balancer import Team
from vbpickup.models import Player, normalize_name


logger = logging.getLogger(__name__)


class DuplicatePlayerIdentity(ValueError):
    """Raised when a write would give two roster players the same normalized name."""

    def __init__(self, name: str, existing: Optional[Player] = None):
        super().__init__(f"Player {name!r} is already registered")
        self.name = name
        self.existing = existing


ConflictError = DuplicatePlayerIdentity


class DuplicatePlayerId(ValueError):
    """Raised when a roster being imported lists the same player id twice."""

    def __init__(self, player_id: str):
        super().__init__(f"Player id {player_id!r} appears more than once")
        self.player_id = player_id


@dataclass
class DistributionRecord:
    distribution_id: str
    created_at: datetime
    team_count: int
    tie_break: str
    teams: List[Team]


class RosterStore:
    """Simple SQLite-backed store for players and session check-ins."""

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        if isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path: Path | str = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self.db_path)
            else:
                conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        except (sqlite3.OperationalError, OSError):
            fallback_dir = Path(tempfile.gettempdir()) / "vbpickup-runtime"
            fallback_dir.mkdir(parents=True, exist_ok=True)
            fallback = fallback_dir / "vbpickup.sqlite"
            logger.warning("Cannot open roster database at %s; falling back to %s", self.db_path, fallback)
            conn = sqlite3.connect(fallback)
            self.db_path = fallback
            self._use_uri = False
            self._create_schema(conn)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS players (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                name_key TEXT NOT NULL UNIQUE,
                skill REAL NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS checkins (
                player_id TEXT PRIMARY KEY,
                checked_in_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS distributions (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                team_count INTEGER NOT NULL,
                tie_break TEXT NOT NULL,
                teams_json TEXT NOT NULL
            )
            """
        )
        conn.commit()

    # Players

    def list_players(self) -> List[Player]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM players ORDER BY created_at ASC, rowid ASC"
            ).fetchall()
        return [self._row_to_player(row) for row in rows]

    def get_player(self, player_id: str) -> Optional[Player]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM players WHERE id = ?", (player_id,)).fetchone()
            if row is None:
                return None
            return self._row_to_player(row)

    def find_by_name(self, name: str) -> Optional[Player]:
        key = normalize_name(name)
        if not key:
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM players WHERE name_key = ?", (key,)).fetchone()
            if row is None:
                return None
            return self._row_to_player(row)

    def register_player(self, name: str, skill: float = 0.0) -> Player:
        player = Player(player_id=uuid4().hex, name=name, skill=skill)
        return self.upsert_player(player)

    def upsert_player(self, player: Player) -> Player:
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            clash = conn.execute(
                "SELECT * FROM players WHERE name_key = ? AND id != ?",
                (player.name_key, player.player_id),
            ).fetchone()
            if clash is not None:
                raise DuplicatePlayerIdentity(player.name, self._row_to_player(clash))
            existing = conn.execute(
                "SELECT id FROM players WHERE id = ?",
                (player.player_id,),
            ).fetchone()
            try:
                if existing is None:
                    conn.execute(
                        """
                        INSERT INTO players (id, name, name_key, skill, created_at, updated_at)
                        VALUES (?, ?, ?, ?, ?, ?)
                        """,
                        (
                            player.player_id,
                            player.name,
                            player.name_key,
                            player.skill,
                            player.created_at.isoformat(),
                            now,
                        ),
                    )
                else:
                    conn.execute(
                        """
                        UPDATE players
                        SET name = ?, name_key = ?, skill = ?, updated_at = ?
                        WHERE id = ?
                        """,
                        (player.name, player.name_key, player.skill, now, player.player_id),
                    )
            except sqlite3.IntegrityError as exc:
                # Another writer registered the same name between the check and the write.
                raise DuplicatePlayerIdentity(player.name) from exc
            conn.commit()
        stored = self.get_player(player.player_id)
        if stored is None:  # pragma: no cover
            raise KeyError(f"Player {player.player_id} not found after upsert")
        return stored

    def update_player(
        self,
        player_id: str,
        *,
        name: str | None = None,
        skill: float | None = None,
    ) -> Player:
        player = self.get_player(player_id)
        if player is None:
            raise KeyError(f"Player {player_id} not found")
        updated = Player(
            player_id=player.player_id,
            name=name if name is not None else player.name,
            skill=skill if skill is not None else player.skill,
            created_at=player.created_at,
        )
        return self.upsert_player(updated)

    def remove_player(self, player_id: str) -> None:
        with self._connect() as conn:
            deleted = conn.execute("DELETE FROM players WHERE id = ?", (player_id,)).rowcount
            conn.execute("DELETE FROM checkins WHERE player_id = ?", (player_id,))
            conn.commit()
        if not deleted:
            raise KeyError(f"Player {player_id} not found")

    # Check-ins

    def list_checked_in(self) -> Set[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT player_id FROM checkins").fetchall()
        return {row["player_id"] for row in rows}

    def set_checked_in(self, player_id: str, checked_in: bool) -> None:
        with self._connect() as conn:
            if checked_in:
                known = conn.execute("SELECT 1 FROM players WHERE id = ?", (player_id,)).fetchone()
                if known is None:
                    raise KeyError(f"Player {player_id} not found")
                conn.execute(
                    "INSERT OR IGNORE INTO checkins (player_id, checked_in_at) VALUES (?, ?)",
                    (player_id, datetime.now(timezone.utc).isoformat()),
                )
            else:
                conn.execute("DELETE FROM checkins WHERE player_id = ?", (player_id,))
            conn.commit()

    def check_in_by_name(self, name: str) -> Optional[Player]:
        player = self.find_by_name(name)
        if player is None:
            return None
        self.set_checked_in(player.player_id, True)
        return player

    def clear_all_check_ins(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM checkins")
            conn.commit()

    # Distributions

    def save_distribution(
        self,
        teams: Sequence[Team],
        *,
        tie_break: str,
        distribution_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> DistributionRecord:
        distribution_id = distribution_id or uuid4().hex
        created_at = created_at or datetime.now(timezone.utc)
        payload = [
            {
                "index": team.index,
                "total_skill": team.total_skill,
                "players": [player.model_dump(mode="json") for player in team.players],
            }
            for team in teams
        ]
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO distributions (id, created_at, team_count, tie_break, teams_json)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    distribution_id,
                    created_at.isoformat(),
                    len(teams),
                    tie_break,
                    json.dumps(payload),
                ),
            )
            conn.commit()
        record = self.get_distribution(distribution_id)
        if record is None:  # pragma: no cover
            raise KeyError(f"Distribution {distribution_id} not found after insert")
        return record

    def get_distribution(self, distribution_id: str) -> Optional[DistributionRecord]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM distributions WHERE id = ?",
                (distribution_id,),
            ).fetchone()
            if row is None:
                return None
            return self._row_to_distribution(row)

    def get_latest_distribution(self) -> Optional[DistributionRecord]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM distributions ORDER BY datetime(created_at) DESC, rowid DESC LIMIT 1"
            ).fetchone()
            if row is None:
                return None
            return self._row_to_distribution(row)

    def replace_roster(self, players: Iterable[Player], checked_in: Iterable[str] = ()) -> None:
        """Swap the whole roster and check-in set in one transaction."""

        players = list(players)
        ids: Set[str] = set()
        keys: dict[str, Player] = {}
        for player in players:
            if player.player_id in ids:
                raise DuplicatePlayerId(player.player_id)
            ids.add(player.player_id)
            if player.name_key in keys:
                raise DuplicatePlayerIdentity(player.name, keys[player.name_key])
            keys[player.name_key] = player
        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute("DELETE FROM checkins")
            conn.execute("DELETE FROM players")
            conn.executemany(
                """
                INSERT INTO players (id, name, name_key, skill, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        player.player_id,
                        player.name,
                        player.name_key,
                        player.skill,
                        player.created_at.isoformat(),
                        now,
                    )
                    for player in players
                ],
            )
            conn.executemany(
                "INSERT OR IGNORE INTO checkins (player_id, checked_in_at) VALUES (?, ?)",
                [(player_id, now) for player_id in checked_in if player_id in ids],
            )
            conn.commit()

    def _row_to_player(self, row: sqlite3.Row) -> Player:
        return Player(
            player_id=row["id"],
            name=row["name"],
            skill=row["skill"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_distribution(self, row: sqlite3.Row) -> DistributionRecord:
        teams = [
            Team(
                index=int(item["index"]),
                players=tuple(Player.model_validate(player) for player in item["players"]),
                total_skill=float(item["total_skill"]),
            )
            for item in json.loads(row["teams_json"])
        ]
        return DistributionRecord(
            distribution_id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            team_count=row["team_count"],
            tie_break=row["tie_break"],
            teams=teams,
        )


__all__ = [
    "ConflictError",
    "DistributionRecord",
    "DuplicatePlayerId",
    "DuplicatePlayerIdentity",
    "RosterStore",
]
