"""
raffle.runtime.storage — per-contract key/value storage over the journal.

Every contract gets a `ContractStorage` bound to its own address; all reads
and writes go through the host journal, so they are committed or reverted
together with the call frame that made them.

Public API
----------
- get(key) -> Optional[bytes] / set(key, value) / delete(key)
- get_int(key, default=0) / set_int(key, value)        # big-endian, unsigned
- get_addr(key) / set_addr(key, addr)
- get_bool(key) / set_bool(key, flag)
- array_len / array_get / array_push / array_items / array_clear

Arrays are laid out as `prefix + b":len"` holding the element count and
`prefix + b":" + u64be(index)` holding each element.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from .context import ADDRESS_LEN
from .journal import Journal

MAX_KEY_BYTES = 64
MAX_VALUE_BYTES = 64 * 1024


class ContractStorage:
    def __init__(self, journal: Journal, address: bytes) -> None:
        self._journal = journal
        self.address = address

    # ---------------------------- raw access ---------------------------- #

    @staticmethod
    def _check_key(key: bytes) -> bytes:
        if not isinstance(key, (bytes, bytearray)):
            raise TypeError("storage key must be bytes")
        if not key or len(key) > MAX_KEY_BYTES:
            raise ValueError(f"storage key length must be 1..{MAX_KEY_BYTES}, got {len(key)}")
        return bytes(key)

    @staticmethod
    def _check_value(value: bytes) -> bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("storage value must be bytes")
        if len(value) > MAX_VALUE_BYTES:
            raise ValueError(f"storage value too large: {len(value)} > {MAX_VALUE_BYTES}")
        return bytes(value)

    def get(self, key: bytes) -> Optional[bytes]:
        return self._journal.storage_get(self.address, self._check_key(key))

    def set(self, key: bytes, value: bytes) -> None:
        self._journal.storage_set(self.address, self._check_key(key), self._check_value(value))

    def delete(self, key: bytes) -> None:
        self._journal.storage_delete(self.address, self._check_key(key))

    # ---------------------------- typed helpers ------------------------- #

    def get_int(self, key: bytes, default: int = 0) -> int:
        v = self.get(key)
        if v is None:
            return default
        return int.from_bytes(v, "big")

    def set_int(self, key: bytes, value: int) -> None:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("value must be int")
        if value < 0:
            raise ValueError("value must be non-negative")
        if value == 0:
            self.delete(key)
            return
        self.set(key, value.to_bytes((value.bit_length() + 7) // 8, "big"))

    def get_addr(self, key: bytes) -> Optional[bytes]:
        v = self.get(key)
        if v is None:
            return None
        if len(v) != ADDRESS_LEN:
            raise ValueError(f"stored address has length {len(v)}")
        return v

    def set_addr(self, key: bytes, addr: bytes) -> None:
        if len(addr) != ADDRESS_LEN:
            raise ValueError(f"address must be {ADDRESS_LEN} bytes")
        self.set(key, addr)

    def get_bool(self, key: bytes) -> bool:
        v = self.get(key)
        return v is not None and v != b"\x00"

    def set_bool(self, key: bytes, flag: bool) -> None:
        if flag:
            self.set(key, b"\x01")
        else:
            self.delete(key)

    # ---------------------------- arrays -------------------------------- #

    @staticmethod
    def _elem_key(prefix: bytes, index: int) -> bytes:
        return prefix + b":" + index.to_bytes(8, "big")

    def array_len(self, prefix: bytes) -> int:
        return self.get_int(prefix + b":len")

    def array_get(self, prefix: bytes, index: int) -> bytes:
        n = self.array_len(prefix)
        if not 0 <= index < n:
            raise IndexError(f"index {index} out of range for length {n}")
        v = self.get(self._elem_key(prefix, index))
        if v is None:
            raise LookupError(f"missing array element {index}")
        return v

    def array_push(self, prefix: bytes, value: bytes) -> int:
        n = self.array_len(prefix)
        self.set(self._elem_key(prefix, n), value)
        self.set_int(prefix + b":len", n + 1)
        return n

    def array_items(self, prefix: bytes) -> Iterator[bytes]:
        for i in range(self.array_len(prefix)):
            yield self.array_get(prefix, i)

    def array_clear(self, prefix: bytes) -> int:
        """Delete every element and reset the length. Returns the old length."""
        n = self.array_len(prefix)
        for i in range(n):
            self.delete(self._elem_key(prefix, i))
        self.delete(prefix + b":len")
        return n

    def array_list(self, prefix: bytes) -> List[bytes]:
        return list(self.array_items(prefix))


__all__ = ["ContractStorage", "MAX_KEY_BYTES", "MAX_VALUE_BYTES"]
