"""Pickup volleyball roster, check-in and team balancing."""

__version__ = "0.1.0"
