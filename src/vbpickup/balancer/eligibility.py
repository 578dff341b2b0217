"""Narrow the roster to the players checked in for the current session."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from vbpickup.models import Player, normalize_name


def filter_eligible(
    roster: Sequence[Player],
    checked_in: Iterable[str],
    *,
    by_name: bool = False,
) -> List[Player]:
    """Return roster players present in ``checked_in``, keeping roster order.

    ``checked_in`` holds player ids, matched exactly. With ``by_name=True`` it
    holds display names instead, compared after trimming and case folding.
    """

    if by_name:
        keys = {normalize_name(name) for name in checked_in}
        return [player for player in roster if player.name_key in keys]
    ids = set(checked_in)
    return [player for player in roster if player.player_id in ids]
