"""
raffle.oracle.drbg — deterministic random words for the coordinator mock.

Counter-mode DRBG over SHA3-256 with domain separation:

    state   = SHA3-256(DOMAIN_INIT || seed || "|" || nonce)
    block_i = SHA3-256(DOMAIN_BLOCK || state || LE64(i))

Each random word is one 32-byte block read as a big-endian uint256. The
seed is the request's pre-seed, so the words for a request are fixed the
moment it is accepted. This is a local stand-in for a verifiable oracle,
not a source of unpredictable randomness.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import List

_DOMAIN_INIT = b"raffle/vrf/init/v1"
_DOMAIN_BLOCK = b"raffle/vrf/block/v1"


def _sha3(data: bytes) -> bytes:
    return hashlib.sha3_256(data).digest()


@dataclass
class DRBG:
    _state: bytes
    _counter: int = 0

    @staticmethod
    def new(seed: bytes, *, nonce: bytes = b"") -> "DRBG":
        if not isinstance(seed, (bytes, bytearray)):
            raise TypeError("seed must be bytes")
        return DRBG(_state=_sha3(_DOMAIN_INIT + bytes(seed) + b"|" + bytes(nonce)))

    def block(self) -> bytes:
        out = _sha3(_DOMAIN_BLOCK + self._state + self._counter.to_bytes(8, "little"))
        self._counter += 1
        return out

    def word(self) -> int:
        return int.from_bytes(self.block(), "big")


def pre_seed(coordinator: bytes, request_id: int, consumer: bytes) -> bytes:
    return _sha3(b"raffle/vrf/preseed/v1|" + coordinator + request_id.to_bytes(32, "big") + consumer)


def random_words(seed: bytes, num_words: int) -> List[int]:
    if num_words < 0:
        raise ValueError("num_words must be non-negative")
    g = DRBG.new(seed)
    return [g.word() for _ in range(num_words)]


def output_seed(words: List[int]) -> bytes:
    """Commitment to a fulfilment's words, reported in RandomWordsFulfilled."""
    return _sha3(b"".join(w.to_bytes(32, "big") for w in words))


__all__ = ["DRBG", "pre_seed", "random_words", "output_seed"]
