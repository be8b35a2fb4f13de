"""Utilities for per-round averages, weighted scores and ranking."""

from __future__ import annotations

import math
from typing import MutableSequence, Union

Number = Union[int, float]


def per_round(total: Number, rounds: int) -> float:
    """Return ``total / rounds``, or 0 when no rounds were played."""
    if rounds <= 0:
        return 0.0
    return total / rounds


def weighted_score(total_score: Number, rounds_played: int, games_played: int) -> float:
    """Average score per round scaled by ``ln(games_played + 1)``."""
    if rounds_played <= 0:
        return 0.0
    return per_round(total_score, rounds_played) * math.log(games_played + 1)


def round_half_up(value: float, digits: int = 0) -> Number:
    """Round halves towards positive infinity; ``digits=0`` returns an int."""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5)
    if digits == 0:
        return int(rounded)
    return rounded / factor


def assign_ranks(entries: MutableSequence) -> None:
    """Overwrite ``rank`` with the 1-based position of each entry."""
    for index, entry in enumerate(entries):
        entry.rank = index + 1
