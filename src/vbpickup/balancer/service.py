"""Greedy skill balancing of checked-in players into teams."""

from __future__ import annotations

import heapq
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Literal, Optional, Sequence, Tuple

from vbpickup.models import Player


logger = logging.getLogger(__name__)


class InvalidTeamCount(ValueError):
    """Raised when a distribution is requested for fewer than one team."""

    def __init__(self, team_count: object):
        super().__init__(f"team_count must be a positive integer, got {team_count!r}")
        self.team_count = team_count


class TieBreak(str, Enum):
    """Ordering policy for players with equal skill."""

    STABLE = "stable"
    SHUFFLE = "shuffle"


@dataclass(frozen=True)
class Team:
    index: int
    players: Tuple[Player, ...]
    total_skill: float

    @property
    def label(self) -> str:
        return f"Team {self.index + 1}"

    def __len__(self) -> int:
        return len(self.players)


def _order_players(
    players: Sequence[Player],
    tie_break: TieBreak,
    rng: Optional[random.Random],
) -> List[Player]:
    ordered = list(players)
    if tie_break is TieBreak.SHUFFLE:
        (rng or random.Random()).shuffle(ordered)
    # sorted() is stable: equal skills keep input (or shuffled) order.
    return sorted(ordered, key=lambda player: player.skill, reverse=True)


def _assign_scan(ordered: Sequence[Player], team_count: int) -> List[List[Player]]:
    buckets: List[List[Player]] = [[] for _ in range(team_count)]
    totals = [0.0] * team_count
    for player in ordered:
        min_index = 0
        for idx in range(1, team_count):
            if totals[idx] < totals[min_index]:
                min_index = idx
        buckets[min_index].append(player)
        totals[min_index] += player.skill
    return buckets


def _assign_heap(ordered: Sequence[Player], team_count: int) -> List[List[Player]]:
    buckets: List[List[Player]] = [[] for _ in range(team_count)]
    # (total, index) ordering breaks ties toward the lowest index, same as the scan.
    heap = [(0.0, idx) for idx in range(team_count)]
    for player in ordered:
        total, idx = heapq.heappop(heap)
        buckets[idx].append(player)
        heapq.heappush(heap, (total + player.skill, idx))
    return buckets


def distribute(
    players: Sequence[Player],
    team_count: int,
    *,
    tie_break: TieBreak | str = TieBreak.STABLE,
    rng: Optional[random.Random] = None,
    strategy: Literal["scan", "heap"] = "scan",
) -> List[Team]:
    """Partition ``players`` into ``team_count`` teams with balanced skill totals.

    Players are taken in descending skill order and each one joins the team
    with the smallest running total (lowest index on ties). Every player lands
    on exactly one team; with fewer players than teams the extra teams stay
    empty. ``tie_break="shuffle"`` randomizes the order of equal-skill players
    using ``rng``.
    """

    if isinstance(team_count, bool) or not isinstance(team_count, int) or team_count <= 0:
        raise InvalidTeamCount(team_count)

    mode = TieBreak(tie_break)
    ordered = _order_players(players, mode, rng)
    if strategy == "scan":
        buckets = _assign_scan(ordered, team_count)
    elif strategy == "heap":
        buckets = _assign_heap(ordered, team_count)
    else:
        raise ValueError(f"Unknown strategy {strategy!r}")

    teams = [
        Team(index=idx, players=tuple(bucket), total_skill=sum(player.skill for player in bucket))
        for idx, bucket in enumerate(buckets)
    ]
    logger.info(
        "Distributed %d players into %d teams (tie_break=%s, spread=%.2f)",
        len(ordered),
        team_count,
        mode.value,
        skill_spread(teams),
    )
    return teams


def skill_spread(teams: Sequence[Team]) -> float:
    """Difference between the strongest and weakest team totals."""

    if not teams:
        return 0.0
    totals = [team.total_skill for team in teams]
    return max(totals) - min(totals)


def team_count_for(player_count: int, players_per_team: int) -> int:
    """Suggest how many full teams a head count supports (never less than one)."""

    if players_per_team <= 0:
        raise ValueError("players_per_team must be positive")
    return max(1, player_count // players_per_team)
