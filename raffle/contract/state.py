"""Raffle lifecycle states."""
from __future__ import annotations

from enum import IntEnum


class RaffleState(IntEnum):
    OPEN = 0
    CALCULATING = 1


__all__ = ["RaffleState"]
