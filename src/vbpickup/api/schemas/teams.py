from __future__ import annotations

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field

from .player import PlayerResponse

MAX_TEAM_COUNT = 64


class TeamRequest(BaseModel):
    team_count: int | None = Field(default=None, ge=1, le=MAX_TEAM_COUNT)
    tie_break: Literal["stable", "shuffle"] | None = None
    seed: int | None = None
    save: bool = True


class TeamResponse(BaseModel):
    index: int
    label: str
    total_skill: float
    players: List[PlayerResponse]


class DistributionResponse(BaseModel):
    distribution_id: str | None = None
    created_at: datetime | None = None
    team_count: int
    tie_break: str
    eligible_players: int
    spread: float
    teams: List[TeamResponse]
