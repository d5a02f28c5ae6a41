"""
raffle.contract.ledger — ordered participant ledger and pooled stake.

The ledger is an append-only array in contract storage; the same address may
appear several times (one slot per entry). The pooled balance is tracked
separately from the contract's native balance and always equals the sum of
admitted stakes since the last reset.

Storage Layout
--------------
- b"raffle:players"  → storage array of 20-byte addresses
- b"raffle:pooled"   → u256
"""
from __future__ import annotations

from typing import List

from raffle.errors import IndexOutOfBounds, InsufficientStake, NotOpen, Paused
from raffle.runtime.contract import Contract

from .state import RaffleState

_PLAYERS = b"raffle:players"
_POOLED = b"raffle:pooled"


class EntryLedger:
    def __init__(self, contract: Contract) -> None:
        self._c = contract

    def admit(self, participant: bytes, stake: int, *, fee: int, state: RaffleState, paused: bool) -> int:
        """
        Append `participant` and add `stake` to the pool. Returns the entry index.

        Checks, in order: stake ≥ fee, state is OPEN, not paused.
        """
        if stake < fee:
            raise InsufficientStake(stake, fee)
        if state != RaffleState.OPEN:
            raise NotOpen(int(state))
        if paused:
            raise Paused()
        index = self._c.storage.array_push(_PLAYERS, participant)
        self._c.storage.set_int(_POOLED, self.pooled_balance() + stake)
        self._c.emit(b"EntryRecorded", {"participant": participant})
        return index

    def size(self) -> int:
        return self._c.storage.array_len(_PLAYERS)

    def participant(self, index: int) -> bytes:
        n = self.size()
        if not 0 <= index < n:
            raise IndexOutOfBounds(index, n)
        return self._c.storage.array_get(_PLAYERS, index)

    def participants(self) -> List[bytes]:
        return self._c.storage.array_list(_PLAYERS)

    def pooled_balance(self) -> int:
        return self._c.storage.get_int(_POOLED)

    def reset_round(self) -> int:
        """Clear all entries and zero the pool. Returns the pool that was cleared."""
        pooled = self.pooled_balance()
        self._c.storage.array_clear(_PLAYERS)
        self._c.storage.set_int(_POOLED, 0)
        return pooled


__all__ = ["EntryLedger"]
