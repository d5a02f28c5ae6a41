"""
raffle.metrics — Prometheus counters & histograms for the raffle host.

All metrics live on a dedicated CollectorRegistry so embedding applications
and tests never collide with the process-global default registry.

Exposed metrics (names are prefixed with `raffle_`):
  - host_calls_total{method,result}   : Counter — top-level and nested call frames by outcome
  - host_call_seconds{method}         : Histogram — wall time per call frame
  - events_total{name}                : Counter — events flushed to the sink
  - payouts_total{result}             : Counter — value transfers attempted by contracts

Labels:
  - result ∈ {success, revert, error}
"""

from __future__ import annotations

import os
import time
from contextlib import contextmanager
from typing import Iterable, Iterator

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from .errors import RaffleError

_PREFIX = "raffle_"


def _buckets_from_env(name: str, default: Iterable[float]) -> Iterable[float]:
    raw = os.getenv(name)
    if not raw:
        return default
    out = []
    for tok in raw.split(","):
        tok = tok.strip()
        if not tok:
            continue
        try:
            out.append(float(tok))
        except ValueError:
            continue
    return out or default


_CALL_SECONDS_BUCKETS = tuple(_buckets_from_env(
    "RAFFLE_METRICS_CALL_SECONDS_BUCKETS",
    (0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
))

REGISTRY = CollectorRegistry()

HOST_CALLS_TOTAL = Counter(
    _PREFIX + "host_calls_total",
    "Call frames executed by the host (by method and result).",
    labelnames=("method", "result"),
    registry=REGISTRY,
)
HOST_CALL_SECONDS = Histogram(
    _PREFIX + "host_call_seconds",
    "Wall time per call frame.",
    labelnames=("method",),
    buckets=_CALL_SECONDS_BUCKETS,
    registry=REGISTRY,
)
EVENTS_TOTAL = Counter(
    _PREFIX + "events_total",
    "Events committed to the event sink (by name).",
    labelnames=("name",),
    registry=REGISTRY,
)
PAYOUTS_TOTAL = Counter(
    _PREFIX + "payouts_total",
    "Value transfers attempted by contracts (by result).",
    labelnames=("result",),
    registry=REGISTRY,
)


def observe_call(method: str, result: str, seconds: float) -> None:
    HOST_CALLS_TOTAL.labels(method=method, result=result).inc()
    HOST_CALL_SECONDS.labels(method=method).observe(max(0.0, seconds))


@contextmanager
def time_call(method: str) -> Iterator[None]:
    """
    Time a call frame and count it by outcome.

        with time_call("enter_raffle"):
            ...
    """
    t0 = time.perf_counter()
    result = "success"
    try:
        yield
    except Exception as exc:
        result = "revert" if isinstance(exc, RaffleError) else "error"
        raise
    finally:
        observe_call(method, result, time.perf_counter() - t0)


def count_event(name: bytes) -> None:
    EVENTS_TOTAL.labels(name=name.decode("utf-8", "replace")).inc()


def count_payout(ok: bool) -> None:
    PAYOUTS_TOTAL.labels(result="success" if ok else "error").inc()


def sample(name: str, labels: dict) -> float:
    """Current value of a sample on the raffle registry (0.0 when absent)."""
    v = REGISTRY.get_sample_value(name, labels)
    return 0.0 if v is None else v


def generate_latest_text() -> bytes:
    """Prometheus exposition format for the raffle registry."""
    return generate_latest(REGISTRY)


__all__ = [
    "REGISTRY",
    "HOST_CALLS_TOTAL",
    "HOST_CALL_SECONDS",
    "EVENTS_TOTAL",
    "PAYOUTS_TOTAL",
    "observe_call",
    "time_call",
    "count_event",
    "count_payout",
    "sample",
    "generate_latest_text",
]
