"""
raffle.contract.access — owner and pause gate for the raffle.

Thin composition of `raffle.stdlib.ownable` and `raffle.stdlib.control` bound
to one contract instance, so the state machine reads as a sequence of
explicit guard calls.
"""
from __future__ import annotations

from typing import Optional

from raffle.runtime.contract import Contract
from raffle.stdlib import control, ownable


class AccessGate:
    def __init__(self, contract: Contract) -> None:
        self._c = contract

    def init(self, owner: bytes) -> None:
        ownable.init_owner(self._c, owner)

    def owner(self) -> Optional[bytes]:
        return ownable.get_owner(self._c)

    def is_paused(self) -> bool:
        return control.is_paused(self._c)

    def require_owner(self, caller: bytes) -> None:
        ownable.require_owner(self._c, caller)

    def require_not_paused(self) -> None:
        control.require_not_paused(self._c)

    def pause(self, caller: bytes) -> None:
        control.pause(self._c, caller)

    def unpause(self, caller: bytes) -> None:
        control.unpause(self._c, caller)


__all__ = ["AccessGate"]
