"""
raffle.runtime.journal — journaled balances, contract storage and logs.

A stack of overlays sits on top of the committed base state. Writes go to the
top overlay; reads consult overlays from top → base. `commit()` merges the top
overlay into its parent, `revert()` discards it, and `flush()` applies the
root overlay to the base and hands back the logs it carried.

The host opens one checkpoint per call frame, which is what makes every
contract operation all-or-nothing: a failing frame reverts its overlay and
everything nested inside it, including emitted logs.

Intended usage
--------------
    j = Journal()
    j.begin()
    j.credit(addr, 100)
    j.storage_set(addr, b"k", b"v")
    j.append_log(record)
    j.commit()
    logs = j.flush()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from raffle.errors import InsufficientBalance

# Deletion marker inside an overlay (distinct from "not written here").
_DELETED = None
_MISSING = object()


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


def _amount(v: int) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError("amount must be int")
    if v < 0:
        raise ValueError("amount must be non-negative")
    return v


@dataclass
class Account:
    nonce: int = 0
    balance: int = 0

    def copy(self) -> "Account":
        return Account(nonce=self.nonce, balance=self.balance)


@dataclass
class _Overlay:
    """
    A single journal layer.

    - `accounts`: copies of accounts touched in this layer.
    - `storage`: staged storage writes; `None` marks a deletion.
    - `logs`: log records emitted while this layer was on top.
    """

    accounts: Dict[bytes, Account] = field(default_factory=dict)
    storage: Dict[bytes, Dict[bytes, Optional[bytes]]] = field(default_factory=dict)
    logs: List[Any] = field(default_factory=list)


class Journal:
    """
    Copy-on-write journal with nested checkpoints.

    API highlights
    --------------
    - begin() / commit() / revert() / depth() / flush()
    - balance_of(), credit(), debit(), transfer(), nonce_of(), bump_nonce()
    - storage_get(), storage_set(), storage_delete()
    - append_log()
    """

    def __init__(self) -> None:
        self._base_accounts: Dict[bytes, Account] = {}
        self._base_storage: Dict[bytes, Dict[bytes, bytes]] = {}
        self._layers: List[_Overlay] = [_Overlay()]

    # ------------------------------------------------------------------ #
    # Checkpointing
    # ------------------------------------------------------------------ #

    def depth(self) -> int:
        """Number of overlays (>= 1)."""
        return len(self._layers)

    def begin(self) -> int:
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        """Merge the top overlay into its parent. The root overlay is only applied by `flush()`."""
        if len(self._layers) < 2:
            raise RuntimeError("no open checkpoint to commit")
        top = self._layers.pop()
        self._merge_layers(self._layers[-1], top)

    def revert(self) -> None:
        """Discard the top overlay (or clear it if it's the root)."""
        if len(self._layers) > 1:
            self._layers.pop()
        else:
            self._layers[0] = _Overlay()

    def revert_to(self, marker: int) -> None:
        if marker < 1:
            raise ValueError("marker must be >= 1")
        while len(self._layers) > marker:
            self.revert()

    def flush(self) -> List[Any]:
        """
        Apply the root overlay to the base state and return its logs.
        Must be called with no open checkpoints.
        """
        if len(self._layers) != 1:
            raise RuntimeError(f"cannot flush with {len(self._layers) - 1} open checkpoint(s)")
        root = self._layers[0]
        self._layers[0] = _Overlay()

        for addr, acc in root.accounts.items():
            self._base_accounts[addr] = acc.copy()
        for addr, writes in root.storage.items():
            base = self._base_storage.setdefault(addr, {})
            for k, v in writes.items():
                if v is _DELETED:
                    base.pop(k, None)
                else:
                    base[k] = v
            if not base:
                self._base_storage.pop(addr, None)
        return list(root.logs)

    @staticmethod
    def _merge_layers(dst: _Overlay, src: _Overlay) -> None:
        for addr, acc in src.accounts.items():
            dst.accounts[addr] = acc.copy()
        for addr, writes in src.storage.items():
            dst.storage.setdefault(addr, {}).update(writes)
        dst.logs.extend(src.logs)

    # ------------------------------------------------------------------ #
    # Accounts
    # ------------------------------------------------------------------ #

    def _lookup_account(self, addr: bytes) -> Optional[Account]:
        for layer in reversed(self._layers):
            acc = layer.accounts.get(addr)
            if acc is not None:
                return acc
        return self._base_accounts.get(addr)

    def _account_for_write(self, addr: bytes) -> Account:
        top = self._layers[-1]
        acc = top.accounts.get(addr)
        if acc is not None:
            return acc
        src = self._lookup_account(addr)
        acc = src.copy() if src is not None else Account()
        top.accounts[addr] = acc
        return acc

    def balance_of(self, address: bytes) -> int:
        acc = self._lookup_account(_b(address, name="address"))
        return 0 if acc is None else acc.balance

    def nonce_of(self, address: bytes) -> int:
        acc = self._lookup_account(_b(address, name="address"))
        return 0 if acc is None else acc.nonce

    def bump_nonce(self, address: bytes) -> int:
        """Increment the nonce and return the value it had before."""
        acc = self._account_for_write(_b(address, name="address"))
        prev = acc.nonce
        acc.nonce = prev + 1
        return prev

    def credit(self, address: bytes, amount: int) -> None:
        amount = _amount(amount)
        acc = self._account_for_write(_b(address, name="address"))
        acc.balance += amount

    def debit(self, address: bytes, amount: int) -> None:
        amount = _amount(amount)
        addr = _b(address, name="address")
        have = self.balance_of(addr)
        if have < amount:
            raise InsufficientBalance(addr, have, amount)
        self._account_for_write(addr).balance = have - amount

    def transfer(self, src: bytes, dst: bytes, amount: int) -> None:
        if amount == 0:
            return
        self.debit(src, amount)
        self.credit(dst, amount)

    # ------------------------------------------------------------------ #
    # Storage
    # ------------------------------------------------------------------ #

    def storage_get(self, address: bytes, key: bytes) -> Optional[bytes]:
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        for layer in reversed(self._layers):
            m = layer.storage.get(addr)
            if m is None:
                continue
            v = m.get(key_b, _MISSING)
            if v is not _MISSING:
                return v
        return self._base_storage.get(addr, {}).get(key_b)

    def storage_set(self, address: bytes, key: bytes, value: bytes) -> None:
        """Stage a storage write in the top overlay. Empty value is a deletion."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        val_b = _b(value, name="value")
        self._layers[-1].storage.setdefault(addr, {})[key_b] = val_b if val_b else _DELETED

    def storage_delete(self, address: bytes, key: bytes) -> None:
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        self._layers[-1].storage.setdefault(addr, {})[key_b] = _DELETED

    # ------------------------------------------------------------------ #
    # Logs
    # ------------------------------------------------------------------ #

    def append_log(self, record: Any) -> None:
        self._layers[-1].logs.append(record)


__all__ = ["Account", "Journal"]
