"""
raffle.oracle.types — randomness request, pending request and subscription records.

`PendingRequest` has a fixed-width binary layout so the coordinator can keep
it in journaled contract storage:

    sub_id (32) | consumer (20) | callback_gas_limit (4) | num_words (4)
    | request_confirmations (2) | key_hash (32) | pre_seed (32)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

MAX_REQUEST_CONFIRMATIONS = 200
MAX_NUM_WORDS = 500
MAX_CALLBACK_GAS_LIMIT = 2_500_000

_PENDING_LEN = 32 + 20 + 4 + 4 + 2 + 32 + 32


@dataclass(frozen=True)
class RandomWordsRequest:
    """What a consumer asks the coordinator for."""

    key_hash: bytes
    sub_id: int
    request_confirmations: int
    callback_gas_limit: int
    num_words: int


@dataclass(frozen=True)
class PendingRequest:
    sub_id: int
    consumer: bytes
    callback_gas_limit: int
    num_words: int
    request_confirmations: int
    key_hash: bytes
    pre_seed: bytes

    def encode(self) -> bytes:
        return b"".join(
            (
                self.sub_id.to_bytes(32, "big"),
                self.consumer,
                self.callback_gas_limit.to_bytes(4, "big"),
                self.num_words.to_bytes(4, "big"),
                self.request_confirmations.to_bytes(2, "big"),
                self.key_hash,
                self.pre_seed,
            )
        )

    @classmethod
    def decode(cls, raw: bytes) -> "PendingRequest":
        if len(raw) != _PENDING_LEN:
            raise ValueError(f"pending request must be {_PENDING_LEN} bytes, got {len(raw)}")
        return cls(
            sub_id=int.from_bytes(raw[0:32], "big"),
            consumer=raw[32:52],
            callback_gas_limit=int.from_bytes(raw[52:56], "big"),
            num_words=int.from_bytes(raw[56:60], "big"),
            request_confirmations=int.from_bytes(raw[60:62], "big"),
            key_hash=raw[62:94],
            pre_seed=raw[94:126],
        )


@dataclass(frozen=True)
class Subscription:
    owner: bytes
    balance: int
    request_count: int
    consumers: Tuple[bytes, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": "0x" + self.owner.hex(),
            "balance": self.balance,
            "request_count": self.request_count,
            "consumers": ["0x" + c.hex() for c in self.consumers],
        }


__all__ = [
    "RandomWordsRequest",
    "PendingRequest",
    "Subscription",
    "MAX_REQUEST_CONFIRMATIONS",
    "MAX_NUM_WORDS",
    "MAX_CALLBACK_GAS_LIMIT",
]
