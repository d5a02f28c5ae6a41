"""
raffle.keeper — the external scheduler side of the upkeep protocol.

`tick()` does what an automation network does on every block: ask the raffle
whether upkeep is needed and, if so, perform it.
"""

from __future__ import annotations

import logging
from typing import Optional

from raffle.runtime import Host, ZERO_ADDRESS, to_hex

log = logging.getLogger(__name__)


class Keeper:
    def __init__(self, host: Host, raffle: bytes, sender: bytes = ZERO_ADDRESS) -> None:
        self.host = host
        self.raffle = raffle
        self.sender = sender

    def needs_upkeep(self) -> bool:
        needed, _ = self.host.view(self.raffle, "check_upkeep", b"", sender=self.sender)
        return needed

    def tick(self) -> Optional[int]:
        """Perform upkeep when needed. Returns the new request id, or None."""
        if not self.needs_upkeep():
            log.debug("upkeep not needed", extra={"raffle": to_hex(self.raffle)})
            return None
        request_id = self.host.call(self.raffle, "perform_upkeep", b"", sender=self.sender)
        log.info("upkeep performed", extra={"raffle": to_hex(self.raffle), "request_id": request_id})
        return request_id


__all__ = ["Keeper"]
