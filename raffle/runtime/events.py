"""
raffle.runtime.events — validated contract events and the in-memory log sink.

Contracts emit `(name: bytes, args: mapping)` pairs. Names are non-empty
bytes (≤ 64), argument keys are identifier-like strings and values are
bytes, bool or int. Validated events are staged in the journal with the
emitting address and only reach the sink once the outermost call commits;
a reverted frame therefore never produces logs.

The sink assigns nothing itself: block number, tx index and log index are
provided by the host in emission order.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class EventError(ValueError):
    """Malformed event name or argument."""


@dataclass(frozen=True)
class Event:
    name: bytes
    args: Mapping[str, Any]


@dataclass(frozen=True)
class PendingLog:
    """Event staged in the journal together with its emitter."""

    address: bytes
    event: Event


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise EventError("event name must be bytes")
    b = bytes(name)
    if not b:
        raise EventError("event name must be non-empty")
    if len(b) > MAX_EVENT_NAME_BYTES:
        raise EventError(f"event name too long ({len(b)} bytes)")
    return b


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise EventError("event key must be a non-empty str")
    if len(key) > MAX_KEY_LEN or not _KEY_RE.match(key):
        raise EventError(f"invalid event key {key!r}")
    return key


def _check_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise EventError(f"event bytes arg too long ({len(b)})")
        return b
    # bool is a subclass of int, so check it before int.
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise EventError("event int arg out of range")
        return int(value)
    raise EventError(f"unsupported event arg type {type(value).__name__}")


def make_event(name: bytes, args: Mapping[Any, Any]) -> Event:
    """Validate and freeze an event."""
    bname = _check_name(name)
    if not isinstance(args, Mapping):
        raise EventError("event args must be a mapping")
    checked: Dict[str, Any] = {}
    for k, v in args.items():
        checked[_check_key(k)] = _check_value(v)
    return Event(bname, checked)


@dataclass(frozen=True)
class EventRecord:
    """
    A committed event with its execution context.

    block_number : height of the block the emitting call ran in.
    tx_index     : 0-based index of the top-level call on this host.
    log_index    : 0-based position of the event within that call.
    """

    block_number: int
    tx_index: int
    log_index: int
    address: bytes
    event: Event

    @property
    def name(self) -> bytes:
        return self.event.name

    @property
    def args(self) -> Mapping[str, Any]:
        return self.event.args

    def to_dict(self) -> Dict[str, Any]:
        args: Dict[str, Any] = {}
        for k, v in self.event.args.items():
            args[k] = "0x" + v.hex() if isinstance(v, bytes) else v
        return {
            "block": self.block_number,
            "tx_index": self.tx_index,
            "log_index": self.log_index,
            "address": "0x" + self.address.hex(),
            "name": self.event.name.decode("utf-8", "replace"),
            "args": args,
        }


class InMemoryEventSink:
    """Thread-safe append-only list of committed events."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: List[EventRecord] = []

    def append(
        self,
        log: PendingLog,
        *,
        block_number: int,
        tx_index: int,
        log_index: int,
    ) -> EventRecord:
        rec = EventRecord(
            block_number=block_number,
            tx_index=tx_index,
            log_index=log_index,
            address=log.address,
            event=log.event,
        )
        with self._lock:
            self._records.append(rec)
        return rec

    def get_logs(
        self,
        *,
        address: Optional[bytes] = None,
        name: Optional[bytes] = None,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None,
    ) -> List[EventRecord]:
        """Matching logs in ascending (block, tx, log) order."""
        with self._lock:
            records = list(self._records)
        out: List[EventRecord] = []
        for rec in records:
            if address is not None and rec.address != address:
                continue
            if name is not None and rec.name != name:
                continue
            if from_block is not None and rec.block_number < from_block:
                continue
            if to_block is not None and rec.block_number > to_block:
                continue
            out.append(rec)
        return out

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterable[EventRecord]:
        with self._lock:
            return iter(list(self._records))

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


__all__ = [
    "Event",
    "EventError",
    "EventRecord",
    "InMemoryEventSink",
    "PendingLog",
    "make_event",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
