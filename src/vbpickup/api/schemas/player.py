from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, field_validator


PLAYER_NAME_MAX_LENGTH = 50


class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=PLAYER_NAME_MAX_LENGTH)
    skill: float = Field(default=0.0, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def name_cleaned(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class PlayerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=PLAYER_NAME_MAX_LENGTH)
    skill: float | None = Field(default=None, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def name_cleaned(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("name must not be blank")
        return v.strip()


class PlayerResponse(BaseModel):
    player_id: str
    name: str
    skill: float
    created_at: datetime
    checked_in: bool = False


class CheckInRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=PLAYER_NAME_MAX_LENGTH)


class CheckInResponse(BaseModel):
    player: PlayerResponse
    message: str


class CheckInListResponse(BaseModel):
    count: int
    players: List[PlayerResponse]
