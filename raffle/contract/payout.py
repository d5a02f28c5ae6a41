"""
raffle.contract.payout — move funds out of the raffle under the payout lock.

All outbound transfers (winner payouts and emergency withdrawals) share one
reentrancy scope. While a transfer is in flight the recipient may call back
into the raffle; any entrypoint that checks the lock rejects the call with
`ReentrancyLocked`, and a second payout attempt fails the same way.
"""
from __future__ import annotations

from raffle.errors import TransferFailed
from raffle.runtime.contract import Contract
from raffle.stdlib import control

PAYOUT_SCOPE = b"payout"


class PayoutEngine:
    def __init__(self, contract: Contract, scope: bytes = PAYOUT_SCOPE) -> None:
        self._c = contract
        self.scope = scope

    def locked(self) -> bool:
        return control.is_entered(self._c, self.scope)

    def require_unlocked(self) -> None:
        control.require_not_entered(self._c, self.scope)

    def pay(self, recipient: bytes, amount: int) -> None:
        with control.nonreentrant(self._c, self.scope):
            if not self._c.send_value(recipient, amount):
                raise TransferFailed(recipient, amount)


__all__ = ["PayoutEngine", "PAYOUT_SCOPE"]
