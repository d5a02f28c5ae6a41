"""
raffle.runtime.context — block environment and call frames seen by contracts.

Both models are frozen, pure data (ints/bytes) and validated on construction.
Addresses are raw 20-byte values; hex strings (with or without "0x") are
accepted by the helpers and normalized to bytes.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, replace
from typing import Any, Dict, Union

ADDRESS_LEN = 20
ZERO_ADDRESS = b"\x00" * ADDRESS_LEN

AddressLike = Union[bytes, bytearray, memoryview, str]


class ContextError(ValueError):
    """Validation or coercion failure for addresses, BlockEnv and CallFrame."""


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: AddressLike) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def to_address(value: AddressLike) -> bytes:
    b = to_bytes(value)
    if len(b) != ADDRESS_LEN:
        raise ContextError(f"address must be {ADDRESS_LEN} bytes, got {len(b)}")
    return b


def address_from_label(label: str) -> bytes:
    """Stable address for a human label (test accounts, CLI players)."""
    return hashlib.sha3_256(label.encode("utf-8")).digest()[:ADDRESS_LEN]


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


@dataclass(frozen=True)
class BlockEnv:
    """
    Block the host is currently executing in.

    height:     block height, advanced by `Host.advance`.
    timestamp:  seconds; the only clock contracts may read.
    chain_id:   network id (31337 local, 11155111 Sepolia).
    """

    height: int
    timestamp: int
    chain_id: int

    def __post_init__(self) -> None:
        _require_non_negative_int("height", self.height)
        _require_non_negative_int("timestamp", self.timestamp)
        _require_non_negative_int("chain_id", self.chain_id)

    def advanced(self, *, seconds: int = 0, blocks: int = 1) -> "BlockEnv":
        _require_non_negative_int("seconds", seconds)
        _require_non_negative_int("blocks", blocks)
        return replace(self, height=self.height + blocks, timestamp=self.timestamp + seconds)

    def to_dict(self) -> Dict[str, int]:
        return {"height": self.height, "timestamp": self.timestamp, "chain_id": self.chain_id}


@dataclass(frozen=True)
class CallFrame:
    """A single entry on the host call stack."""

    sender: bytes
    to: bytes
    value: int
    method: str
    depth: int

    def __post_init__(self) -> None:
        to_address(self.sender)
        to_address(self.to)
        _require_non_negative_int("value", self.value)
        _require_non_negative_int("depth", self.depth)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sender": to_hex(self.sender),
            "to": to_hex(self.to),
            "value": self.value,
            "method": self.method,
            "depth": self.depth,
        }


__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "ContextError",
    "BlockEnv",
    "CallFrame",
    "to_bytes",
    "to_hex",
    "to_address",
    "address_from_label",
]
