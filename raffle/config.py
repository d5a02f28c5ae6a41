"""
raffle.config — network presets and numeric parameters for the raffle.

Configuration precedence:
  1) Environment variables (RAFFLE_*)
  2) Per-network preset selected by chain id
  3) Hardcoded defaults below

Key env vars:
  - RAFFLE_CHAIN_ID               (int)    default: 31337 (local devnet)
  - RAFFLE_ENTRANCE_FEE           (int)    default: 10**16 (0.01 native unit)
  - RAFFLE_INTERVAL               (int)    default: 30 seconds
  - RAFFLE_KEY_HASH               (hex)    default: preset gas lane
  - RAFFLE_SUBSCRIPTION_ID        (int)    default: 0 (create one at deploy time)
  - RAFFLE_REQUEST_CONFIRMATIONS  (int)    default: 3
  - RAFFLE_CALLBACK_GAS_LIMIT     (int)    default: 500_000
  - RAFFLE_FUND_AMOUNT            (int)    default: 3 * 10**18
  - RAFFLE_MAX_CALL_DEPTH         (int)    default: 64

Usage:
    from raffle.config import load_config
    cfg = load_config()
    if cfg.is_local: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict, Optional

LOCAL_CHAIN_ID = 31337
SEPOLIA_CHAIN_ID = 11155111

ETHER = 10**18

# Gas lane used by the mock and by the Sepolia deployment.
DEFAULT_KEY_HASH = bytes.fromhex(
    "787d74caea10b2b357790d5b5247c2f63d1d91572a9846f780606e4d953677ae"
)

# Mock coordinator pricing.
MOCK_BASE_FEE = ETHER // 4
MOCK_GAS_PRICE = 10**9


class UnsupportedChain(ValueError):
    def __init__(self, chain_id: int):
        super().__init__(f"no raffle preset for chain id {chain_id}")
        self.chain_id = chain_id


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw.strip(), 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_bytes32(name: str, default: bytes) -> bytes:
    raw = os.getenv(name)
    if not raw:
        return default
    s = raw.strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    try:
        b = bytes.fromhex(s)
    except ValueError:
        return default
    return b if len(b) == 32 else default


def _env_address(name: str) -> Optional[bytes]:
    raw = os.getenv(name)
    if not raw:
        return None
    s = raw.strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    try:
        b = bytes.fromhex(s)
    except ValueError:
        return None
    return b if len(b) == 20 else None


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class RaffleConfig:
    chain_id: int

    # Raffle parameters (immutable once deployed)
    entrance_fee: int
    interval: int

    # Randomness request parameters
    vrf_coordinator: Optional[bytes]
    key_hash: bytes
    subscription_id: int
    request_confirmations: int
    callback_gas_limit: int

    # Subscription funding and mock pricing
    fund_amount: int
    mock_base_fee: int
    mock_gas_price: int

    # Host limits
    max_call_depth: int

    @property
    def is_local(self) -> bool:
        return self.chain_id == LOCAL_CHAIN_ID

    def as_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "entrance_fee": self.entrance_fee,
            "interval": self.interval,
            "vrf_coordinator": ("0x" + self.vrf_coordinator.hex()) if self.vrf_coordinator else None,
            "key_hash": "0x" + self.key_hash.hex(),
            "subscription_id": str(self.subscription_id),
            "request_confirmations": self.request_confirmations,
            "callback_gas_limit": self.callback_gas_limit,
            "fund_amount": self.fund_amount,
            "mock_base_fee": self.mock_base_fee,
            "mock_gas_price": self.mock_gas_price,
            "max_call_depth": self.max_call_depth,
        }


def local_preset() -> RaffleConfig:
    """Devnet preset: the coordinator mock is deployed alongside the raffle."""
    return RaffleConfig(
        chain_id=LOCAL_CHAIN_ID,
        entrance_fee=ETHER // 100,
        interval=30,
        vrf_coordinator=None,
        key_hash=DEFAULT_KEY_HASH,
        subscription_id=0,
        request_confirmations=3,
        callback_gas_limit=500_000,
        fund_amount=3 * ETHER,
        mock_base_fee=MOCK_BASE_FEE,
        mock_gas_price=MOCK_GAS_PRICE,
        max_call_depth=64,
    )


def sepolia_preset() -> RaffleConfig:
    return replace(
        local_preset(),
        chain_id=SEPOLIA_CHAIN_ID,
        vrf_coordinator=bytes.fromhex("9ddfaca8183c41ad55329bdeed9f6a8d53168b1b"),
    )


_PRESETS = {
    LOCAL_CHAIN_ID: local_preset,
    SEPOLIA_CHAIN_ID: sepolia_preset,
}


def preset_for_chain(chain_id: int) -> RaffleConfig:
    try:
        return _PRESETS[int(chain_id)]()
    except KeyError:
        raise UnsupportedChain(chain_id) from None


@lru_cache(maxsize=4)
def load_config(chain_id: Optional[int] = None) -> RaffleConfig:
    """
    Build and cache a RaffleConfig from the network preset + environment.
    """
    if chain_id is None:
        chain_id = _env_int("RAFFLE_CHAIN_ID", LOCAL_CHAIN_ID, min_v=1, max_v=2**63 - 1)
    base = preset_for_chain(chain_id)

    return replace(
        base,
        entrance_fee=_env_int("RAFFLE_ENTRANCE_FEE", base.entrance_fee, min_v=1, max_v=2**128 - 1),
        interval=_env_int("RAFFLE_INTERVAL", base.interval, min_v=1, max_v=365 * 24 * 3600),
        vrf_coordinator=_env_address("RAFFLE_VRF_COORDINATOR") or base.vrf_coordinator,
        key_hash=_env_bytes32("RAFFLE_KEY_HASH", base.key_hash),
        subscription_id=_env_int("RAFFLE_SUBSCRIPTION_ID", base.subscription_id, min_v=0, max_v=2**256 - 1),
        request_confirmations=_env_int("RAFFLE_REQUEST_CONFIRMATIONS", base.request_confirmations, min_v=0, max_v=200),
        callback_gas_limit=_env_int("RAFFLE_CALLBACK_GAS_LIMIT", base.callback_gas_limit, min_v=1, max_v=2_500_000),
        fund_amount=_env_int("RAFFLE_FUND_AMOUNT", base.fund_amount, min_v=0, max_v=2**128 - 1),
        max_call_depth=_env_int("RAFFLE_MAX_CALL_DEPTH", base.max_call_depth, min_v=4, max_v=1024),
    )


__all__ = [
    "RaffleConfig",
    "UnsupportedChain",
    "LOCAL_CHAIN_ID",
    "SEPOLIA_CHAIN_ID",
    "ETHER",
    "DEFAULT_KEY_HASH",
    "local_preset",
    "sepolia_preset",
    "preset_for_chain",
    "load_config",
]
