# -*- coding: utf-8 -*-
"""
Recipient contracts and round helpers shared by the raffle tests.

The recipient contracts stand in for participants that are themselves
contracts: one that accepts payouts, one that refuses them, and two that
call back into the raffle from their `receive` hook.
"""
from __future__ import annotations

from typing import Iterable, List

from raffle.deploy import Deployment
from raffle.errors import Revert
from raffle.runtime import Contract, Host, payable, view

_RAFFLE = b"test:raffle"


class Receiver(Contract):
    def init(self, raffle: bytes) -> None:
        self.storage.set_addr(_RAFFLE, raffle)

    def raffle(self) -> bytes:
        return self.storage.get_addr(_RAFFLE)

    @payable
    def enter(self) -> int:
        return self.call(self.raffle(), "enter_raffle", value=self.msg.value)

    @payable
    def receive(self) -> None:
        self.storage.set_int(b"received", self.storage.get_int(b"received") + self.msg.value)

    @view
    def received(self) -> int:
        return self.storage.get_int(b"received")


class RejectingReceiver(Receiver):
    @payable
    def receive(self) -> None:
        raise Revert("payouts refused", reason="rejecting receiver")


class WithdrawOnReceive(Receiver):
    """Tries to drain the raffle while its payout is in flight."""

    @payable
    def receive(self) -> None:
        self.call(self.raffle(), "emergency_withdraw")


class EnterOnReceive(Receiver):
    """Re-enters the next round with part of the payout it is receiving."""

    @payable
    def receive(self) -> None:
        fee = self.call(self.raffle(), "get_entrance_fee")
        self.call(self.raffle(), "enter_raffle", value=fee)


def enter_all(host: Host, dep: Deployment, players: Iterable[bytes]) -> List[int]:
    fee = host.view(dep.raffle, "get_entrance_fee")
    return [host.call(dep.raffle, "enter_raffle", sender=p, value=fee) for p in players]


def trigger(host: Host, dep: Deployment) -> int:
    """Advance past the interval and perform upkeep. Returns the request id."""
    host.advance(seconds=dep.config.interval + 1)
    return host.call(dep.raffle, "perform_upkeep", b"", sender=dep.deployer)


def fulfill_with(host: Host, dep: Deployment, request_id: int, word: int) -> bool:
    return host.call(
        dep.coordinator,
        "fulfill_random_words_with_override",
        request_id,
        dep.raffle,
        [word],
        sender=dep.deployer,
    )


def event_names(host: Host, address: bytes) -> List[bytes]:
    return [rec.name for rec in host.logs(address=address)]
