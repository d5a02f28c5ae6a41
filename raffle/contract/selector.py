"""Random word → ledger index → winner."""
from __future__ import annotations

from typing import Tuple

from raffle.errors import IndexOutOfBounds

from .ledger import EntryLedger


class WinnerSelector:
    def __init__(self, ledger: EntryLedger) -> None:
        self._ledger = ledger

    def select(self, random_word: int) -> Tuple[int, bytes]:
        # Plain modulo: the bias for N ≪ 2**256 is accepted.
        n = self._ledger.size()
        if n == 0:
            raise IndexOutOfBounds(0, 0)
        index = random_word % n
        return index, self._ledger.participant(index)


__all__ = ["WinnerSelector"]
