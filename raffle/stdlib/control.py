# -*- coding: utf-8 -*-
"""
raffle.stdlib.control
=====================

Storage-backed control primitives for raffle contracts.

1) **Pausable**
   - `is_paused(c) -> bool`
   - `require_not_paused(c) -> None`          raises `Paused`
   - `pause(c, caller)` / `unpause(c, caller)` owner only

   Both setters are idempotent writes and emit on every successful call:
   `Paused {"by": caller}` / `Unpaused {"by": caller}`.

2) **Reentrancy latch**
   - `guard_enter(c, scope)` / `guard_exit(c, scope)`
   - `require_not_entered(c, scope)`          raises `ReentrancyLocked`
   - `nonreentrant(c, scope)` context manager

   Typical pattern:

       with control.nonreentrant(self, b"payout"):
           ok = self.send_value(winner, amount)

   The latch is released on every exit path, including failures.

Storage Layout
--------------
- Paused flag:      b"control:paused"                 → b"\x01" or absent
- Reentrancy latch: b"control:reentrancy:" + scope    → b"\x01" or absent
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from raffle.errors import Paused, ReentrancyLocked
from raffle.runtime.contract import Contract

from . import ownable

__all__ = [
    "is_paused",
    "require_not_paused",
    "pause",
    "unpause",
    "guard_enter",
    "guard_exit",
    "require_not_entered",
    "is_entered",
    "nonreentrant",
]

_PAUSED_KEY: bytes = b"control:paused"
_REENT_PREFIX: bytes = b"control:reentrancy:"


# ---- Pausable ---------------------------------------------------------------


def is_paused(c: Contract) -> bool:
    return c.storage.get_bool(_PAUSED_KEY)


def require_not_paused(c: Contract) -> None:
    if is_paused(c):
        raise Paused()


def pause(c: Contract, caller: bytes) -> None:
    ownable.require_owner(c, caller)
    c.storage.set_bool(_PAUSED_KEY, True)
    c.emit(b"Paused", {"by": caller})


def unpause(c: Contract, caller: bytes) -> None:
    ownable.require_owner(c, caller)
    c.storage.set_bool(_PAUSED_KEY, False)
    c.emit(b"Unpaused", {"by": caller})


# ---- Reentrancy latch -------------------------------------------------------


def _guard_key(scope: bytes) -> bytes:
    return _REENT_PREFIX + scope


def is_entered(c: Contract, scope: bytes = b"default") -> bool:
    return c.storage.get_bool(_guard_key(scope))


def require_not_entered(c: Contract, scope: bytes = b"default") -> None:
    if is_entered(c, scope):
        raise ReentrancyLocked(scope)


def guard_enter(c: Contract, scope: bytes = b"default") -> None:
    require_not_entered(c, scope)
    c.storage.set_bool(_guard_key(scope), True)


def guard_exit(c: Contract, scope: bytes = b"default") -> None:
    """Idempotent."""
    c.storage.set_bool(_guard_key(scope), False)


@contextmanager
def nonreentrant(c: Contract, scope: bytes = b"default") -> Iterator[None]:
    guard_enter(c, scope)
    try:
        yield
    finally:
        guard_exit(c, scope)
