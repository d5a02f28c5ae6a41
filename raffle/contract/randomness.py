"""
raffle.contract.randomness — single outstanding oracle request per round.

`request()` asks the coordinator for one random word and records the
returned id as pending. `require_fulfillment()` accepts a callback only from
the registered coordinator and only for the pending id; stale, duplicate or
forged callbacks are rejected before any state changes.

Storage Layout
--------------
- b"vrf:coordinator"    → coordinator address
- b"vrf:key_hash"       → 32 bytes
- b"vrf:sub_id"         → u256
- b"vrf:confirmations"  → u16
- b"vrf:gas_limit"      → u32
- b"vrf:pending"        → u256 request id (absent when none)
"""
from __future__ import annotations

from typing import Optional

from raffle.errors import InvalidCorrelation, Revert, Unauthorized
from raffle.oracle.types import RandomWordsRequest
from raffle.runtime.contract import Contract

NUM_WORDS = 1

_COORDINATOR = b"vrf:coordinator"
_KEY_HASH = b"vrf:key_hash"
_SUB_ID = b"vrf:sub_id"
_CONFIRMATIONS = b"vrf:confirmations"
_GAS_LIMIT = b"vrf:gas_limit"
_PENDING = b"vrf:pending"


class RandomnessRequestCoordinator:
    def __init__(self, contract: Contract) -> None:
        self._c = contract

    def init(
        self,
        *,
        coordinator: bytes,
        key_hash: bytes,
        subscription_id: int,
        request_confirmations: int,
        callback_gas_limit: int,
    ) -> None:
        if len(key_hash) != 32:
            raise Revert("key hash must be 32 bytes")
        s = self._c.storage
        s.set_addr(_COORDINATOR, coordinator)
        s.set(_KEY_HASH, key_hash)
        s.set_int(_SUB_ID, subscription_id)
        s.set_int(_CONFIRMATIONS, request_confirmations)
        s.set_int(_GAS_LIMIT, callback_gas_limit)

    # ---- read accessors ----

    def coordinator(self) -> bytes:
        addr = self._c.storage.get_addr(_COORDINATOR)
        if addr is None:
            raise Revert("coordinator not configured")
        return addr

    def subscription_id(self) -> int:
        return self._c.storage.get_int(_SUB_ID)

    def pending(self) -> Optional[int]:
        v = self._c.storage.get_int(_PENDING)
        return v or None

    def build_request(self) -> RandomWordsRequest:
        s = self._c.storage
        return RandomWordsRequest(
            key_hash=s.get(_KEY_HASH) or b"",
            sub_id=s.get_int(_SUB_ID),
            request_confirmations=s.get_int(_CONFIRMATIONS),
            callback_gas_limit=s.get_int(_GAS_LIMIT),
            num_words=NUM_WORDS,
        )

    # ---- exchange ----

    def request(self) -> int:
        request_id = self._c.call(self.coordinator(), "request_random_words", self.build_request())
        self._c.storage.set_int(_PENDING, request_id)
        return request_id

    def require_fulfillment(self, caller: bytes, request_id: int) -> None:
        if caller != self.coordinator():
            raise Unauthorized(caller, role="coordinator")
        expected = self.pending() or 0
        if expected == 0 or request_id != expected:
            raise InvalidCorrelation(request_id, expected)

    def clear(self) -> None:
        self._c.storage.delete(_PENDING)


__all__ = ["RandomnessRequestCoordinator", "NUM_WORDS"]
