"""Domain models shared by the store, balancer and presentation layers."""

from .player import Player, normalize_name

__all__ = ["Player", "normalize_name"]
