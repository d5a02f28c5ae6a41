"""
raffle.deploy — bring up a raffle and its randomness subscription on a host.

Steps (each a separate top-level call, like separate transactions):
  1. Use the configured coordinator, or deploy `VRFCoordinatorMock` when none
     is configured or nothing is deployed at the configured address.
  2. Create and fund a subscription unless the config names one.
  3. Deploy the raffle.
  4. Register the raffle as a consumer of the subscription.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from raffle.config import RaffleConfig, load_config
from raffle.contract import Raffle
from raffle.oracle import VRFCoordinatorMock
from raffle.runtime import Host, to_hex

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deployment:
    raffle: bytes
    coordinator: bytes
    subscription_id: int
    deployer: bytes
    config: RaffleConfig

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raffle": to_hex(self.raffle),
            "coordinator": to_hex(self.coordinator),
            "subscription_id": str(self.subscription_id),
            "deployer": to_hex(self.deployer),
            "chain_id": self.config.chain_id,
        }


def deploy_raffle(host: Host, config: Optional[RaffleConfig] = None, *, deployer: bytes) -> Deployment:
    cfg = config if config is not None else load_config()

    coordinator = cfg.vrf_coordinator
    if coordinator is None or not host.is_contract(coordinator):
        if coordinator is not None:
            log.warning(
                "configured coordinator not deployed on this host; deploying mock",
                extra={"coordinator": to_hex(coordinator)},
            )
        coordinator = host.deploy(VRFCoordinatorMock, cfg.mock_base_fee, cfg.mock_gas_price, sender=deployer)

    sub_id = cfg.subscription_id
    if sub_id == 0:
        sub_id = host.call(coordinator, "create_subscription", sender=deployer)
        host.call(coordinator, "fund_subscription", sub_id, cfg.fund_amount, sender=deployer)
        log.info("subscription created", extra={"sub_id": str(sub_id), "fund_amount": cfg.fund_amount})

    raffle = host.deploy(
        Raffle,
        cfg.entrance_fee,
        cfg.interval,
        coordinator,
        cfg.key_hash,
        sub_id,
        cfg.request_confirmations,
        cfg.callback_gas_limit,
        sender=deployer,
    )
    host.call(coordinator, "add_consumer", sub_id, raffle, sender=deployer)
    log.info("raffle deployed", extra={"raffle": to_hex(raffle), "coordinator": to_hex(coordinator)})
    return Deployment(
        raffle=raffle,
        coordinator=coordinator,
        subscription_id=sub_id,
        deployer=deployer,
        config=cfg,
    )


__all__ = ["Deployment", "deploy_raffle"]
