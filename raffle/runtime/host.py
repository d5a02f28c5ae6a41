"""
raffle.runtime.host — local execution host for raffle contracts.

The host owns every account balance, every contract instance and the journal
their storage lives in. Each call runs in its own journal checkpoint:

    begin → move attached value → run method → commit
                                             ↘ revert + re-raise on any failure

Nested calls (a contract calling another, or a contract sending value to a
recipient contract's `receive`) open nested checkpoints, so a failure deep
in the stack unwinds exactly the frames it passed through. Only when the
outermost frame commits is the journal flushed and its logs published to
the event sink.

A single re-entrant lock serializes all entrypoints: no two top-level calls
ever interleave, while a contract may still re-enter the host from inside
its own frame.

Usage
-----
    host = Host(chain_id=31337)
    host.fund(alice, 10**18)
    addr = host.deploy(MyContract, 42, sender=alice)
    host.call(addr, "do_thing", sender=alice, value=10)
    assert host.view(addr, "get_thing") == 42
"""

from __future__ import annotations

import hashlib
import logging
import threading
from typing import Any, Dict, List, Optional, Type, TypeVar

from raffle import metrics
from raffle.config import LOCAL_CHAIN_ID, RaffleConfig
from raffle.errors import (
    CallDepthExceeded,
    InsufficientBalance,
    NonPayable,
    RaffleError,
    UnknownContract,
    UnknownEntrypoint,
)

from .contract import PAYABLE, Contract, entry_kind
from .context import ADDRESS_LEN, ZERO_ADDRESS, BlockEnv, CallFrame, to_address, to_hex
from .events import EventRecord, InMemoryEventSink, PendingLog, make_event
from .journal import Journal

log = logging.getLogger(__name__)

GENESIS_TIMESTAMP = 1_700_000_000

C = TypeVar("C", bound=Contract)


def contract_address(deployer: bytes, nonce: int) -> bytes:
    """Deterministic address of the contract `deployer` creates with `nonce`."""
    return hashlib.sha3_256(b"deploy|" + deployer + nonce.to_bytes(8, "big")).digest()[:ADDRESS_LEN]


class Host:
    def __init__(
        self,
        *,
        chain_id: int = LOCAL_CHAIN_ID,
        timestamp: int = GENESIS_TIMESTAMP,
        height: int = 1,
        max_call_depth: int = 64,
        sink: Optional[InMemoryEventSink] = None,
    ) -> None:
        self.journal = Journal()
        self.sink = sink if sink is not None else InMemoryEventSink()
        self.block = BlockEnv(height=height, timestamp=timestamp, chain_id=chain_id)
        self.max_call_depth = int(max_call_depth)
        self._contracts: Dict[bytes, Contract] = {}
        self._frames: List[CallFrame] = []
        self._lock = threading.RLock()
        self._tx_index = 0

    @classmethod
    def from_config(cls, cfg: RaffleConfig, **kwargs: Any) -> "Host":
        return cls(chain_id=cfg.chain_id, max_call_depth=cfg.max_call_depth, **kwargs)

    # ------------------------------------------------------------------ #
    # Clock
    # ------------------------------------------------------------------ #

    def advance(self, seconds: int = 0, blocks: int = 1) -> BlockEnv:
        """Move the clock forward by `seconds` and mine `blocks` blocks."""
        with self._lock:
            self._require_idle("advance")
            self.block = self.block.advanced(seconds=seconds, blocks=blocks)
            return self.block

    def warp(self, timestamp: int) -> BlockEnv:
        with self._lock:
            if timestamp < self.block.timestamp:
                raise ValueError(f"cannot move time backwards ({timestamp} < {self.block.timestamp})")
            return self.advance(seconds=timestamp - self.block.timestamp, blocks=1)

    # ------------------------------------------------------------------ #
    # Accounts
    # ------------------------------------------------------------------ #

    def fund(self, address: bytes, amount: int) -> int:
        """Mint `amount` to `address` (test and devnet faucet). Returns the new balance."""
        addr = to_address(address)
        with self._lock:
            self._require_idle("fund")
            self.journal.credit(addr, amount)
            self.journal.flush()
            return self.journal.balance_of(addr)

    def balance_of(self, address: bytes) -> int:
        addr = to_address(address)
        with self._lock:
            return self.journal.balance_of(addr)

    def is_contract(self, address: bytes) -> bool:
        with self._lock:
            return bytes(address) in self._contracts

    def contract_at(self, address: bytes) -> Contract:
        addr = to_address(address)
        with self._lock:
            try:
                return self._contracts[addr]
            except KeyError:
                raise UnknownContract(addr) from None

    def current_frame(self) -> CallFrame:
        if not self._frames:
            raise RuntimeError("no active call frame")
        return self._frames[-1]

    def _require_idle(self, what: str) -> None:
        if self._frames:
            raise RuntimeError(f"{what} is not allowed from inside a call frame")

    # ------------------------------------------------------------------ #
    # Logs
    # ------------------------------------------------------------------ #

    def emit_log(self, address: bytes, name: bytes, args: Any) -> None:
        if not self._frames:
            raise RuntimeError("events can only be emitted from inside a call frame")
        self.journal.append_log(PendingLog(address=address, event=make_event(name, args)))

    def logs(self, address: Optional[bytes] = None, name: Optional[bytes] = None) -> List[EventRecord]:
        return self.sink.get_logs(address=address, name=name)

    def _finalize(self) -> None:
        pending = self.journal.flush()
        for i, pl in enumerate(pending):
            self.sink.append(pl, block_number=self.block.height, tx_index=self._tx_index, log_index=i)
            metrics.count_event(pl.event.name)
        self._tx_index += 1

    # ------------------------------------------------------------------ #
    # Deploy / call
    # ------------------------------------------------------------------ #

    def deploy(self, cls: Type[C], *args: Any, sender: bytes, value: int = 0, **kwargs: Any) -> bytes:
        """Instantiate `cls` at a fresh address and run its `init` hook."""
        sender = to_address(sender)
        with self._lock:
            self._require_idle("deploy")
            self.journal.begin()
            nonce = self.journal.bump_nonce(sender)
            address = contract_address(sender, nonce)
            if address in self._contracts:
                self.journal.revert()
                raise RuntimeError(f"address collision at {to_hex(address)}")
            instance = cls(self, address)
            self._contracts[address] = instance
            self._frames.append(CallFrame(sender=sender, to=address, value=value, method="init", depth=0))
            try:
                with metrics.time_call("init"):
                    self.journal.transfer(sender, address, value)
                    instance.init(*args, **kwargs)
            except Exception:
                self.journal.revert()
                del self._contracts[address]
                raise
            else:
                self.journal.commit()
            finally:
                self._frames.pop()
            self._finalize()
        log.info("contract deployed", extra={"contract": cls.__name__, "address": to_hex(address)})
        return address

    def call(self, to: bytes, method: str, *args: Any, sender: bytes, value: int = 0, **kwargs: Any) -> Any:
        """
        Execute `method` on the contract at `to` as `sender`, attaching `value`.

        Raises the contract's `RaffleError` (after rolling the frame back) on failure.
        """
        to = to_address(to)
        sender = to_address(sender)
        with self._lock:
            if self._frames:
                return self._execute(to, method, args, kwargs, sender=sender, value=value)
            try:
                result = self._execute(to, method, args, kwargs, sender=sender, value=value)
            except RaffleError as exc:
                log.debug(
                    "call reverted",
                    extra={"method": method, "to": to_hex(to), "code": exc.code},
                )
                raise
            self._finalize()
            return result

    def view(self, to: bytes, method: str, *args: Any, sender: bytes = ZERO_ADDRESS, **kwargs: Any) -> Any:
        """Run `method` and discard every effect it had."""
        to = to_address(to)
        sender = to_address(sender)
        with self._lock:
            marker = self.journal.begin()
            try:
                return self._execute(to, method, args, kwargs, sender=sender, value=0)
            finally:
                self.journal.revert_to(marker - 1)

    def _execute(
        self,
        to: bytes,
        method: str,
        args: Any,
        kwargs: Dict[str, Any],
        *,
        sender: bytes,
        value: int,
    ) -> Any:
        depth = len(self._frames)
        if depth >= self.max_call_depth:
            raise CallDepthExceeded(depth, self.max_call_depth)
        contract = self._contracts.get(to)
        if contract is None:
            raise UnknownContract(to)
        fn = None if method.startswith("_") else getattr(contract, method, None)
        kind = entry_kind(fn) if fn is not None else None
        if kind is None:
            raise UnknownEntrypoint(to, method)
        if value and kind != PAYABLE:
            raise NonPayable(to, method, value)

        self.journal.begin()
        self._frames.append(CallFrame(sender=sender, to=to, value=value, method=method, depth=depth))
        try:
            with metrics.time_call(method):
                self.journal.transfer(sender, to, value)
                result = fn(*args, **kwargs)
        except Exception:
            self.journal.revert()
            raise
        else:
            self.journal.commit()
        finally:
            self._frames.pop()
        return result

    # ------------------------------------------------------------------ #
    # Value transfers initiated by contracts
    # ------------------------------------------------------------------ #

    def send_value(self, src: bytes, to: bytes, amount: int) -> bool:
        """
        Move `amount` from contract `src` to `to` inside the active frame.

        Recipient contracts get their payable `receive` entrypoint invoked in
        a nested frame; any failure there (missing hook, revert, re-entry
        rejected by the caller) is reported as False with the nested frame
        already rolled back.
        """
        if amount < 0:
            raise ValueError("amount must be non-negative")
        to = to_address(to)
        with self._lock:
            if not self._frames:
                raise RuntimeError("send_value requires an active call frame")
            if to in self._contracts:
                try:
                    self._execute(to, "receive", (), {}, sender=src, value=amount)
                except RaffleError as exc:
                    log.warning(
                        "value transfer rejected by recipient",
                        extra={"to": to_hex(to), "amount": amount, "code": exc.code},
                    )
                    metrics.count_payout(False)
                    return False
                metrics.count_payout(True)
                return True

            self.journal.begin()
            try:
                self.journal.transfer(src, to, amount)
            except InsufficientBalance as exc:
                self.journal.revert()
                log.warning("value transfer failed", extra={"to": to_hex(to), "amount": amount, "code": exc.code})
                metrics.count_payout(False)
                return False
            self.journal.commit()
            metrics.count_payout(True)
            return True


__all__ = ["Host", "GENESIS_TIMESTAMP", "contract_address"]
