"""Pydantic models for API I/O."""

from .player import (
    CheckInListResponse,
    CheckInRequest,
    CheckInResponse,
    PlayerCreate,
    PlayerResponse,
    PlayerUpdate,
)
from .teams import MAX_TEAM_COUNT, DistributionResponse, TeamRequest, TeamResponse

__all__ = [
    "CheckInListResponse",
    "CheckInRequest",
    "CheckInResponse",
    "DistributionResponse",
    "MAX_TEAM_COUNT",
    "PlayerCreate",
    "PlayerResponse",
    "PlayerUpdate",
    "TeamRequest",
    "TeamResponse",
]
