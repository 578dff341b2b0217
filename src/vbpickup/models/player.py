"""Canonical player model shared across the store and balancer."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


def normalize_name(value: str) -> str:
    """Identity key for a display name: surrounding whitespace removed, case folded."""

    return value.strip().casefold()


class Player(BaseModel):
    """Registered player with the skill rating used as a balancing weight."""

    player_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    skill: float = Field(default=0.0, allow_inf_nan=False)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def name_stripped(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @property
    def name_key(self) -> str:
        return normalize_name(self.name)
