import threading

import pytest

from raffle.errors import (
    CallDepthExceeded,
    NonPayable,
    Revert,
    UnknownContract,
    UnknownEntrypoint,
)
from raffle.runtime import Contract, Host, address_from_label, external, payable, view
from raffle.runtime.host import contract_address
from raffle.tests.helpers import Receiver, RejectingReceiver

ALICE = address_from_label("alice")


class Counter(Contract):
    def init(self, start: int = 0) -> None:
        self.storage.set_int(b"n", start)

    @external
    def bump(self) -> int:
        n = self.storage.get_int(b"n") + 1
        self.storage.set_int(b"n", n)
        self.emit(b"Bumped", {"n": n})
        return n

    @external
    def bump_then_fail(self) -> None:
        self.bump()
        raise Revert("nope")

    @external
    def bump_and_swallow_inner(self, other: bytes) -> int:
        n = self.bump()
        try:
            self.call(other, "bump_then_fail")
        except Revert:
            pass
        return n

    @payable
    def deposit(self) -> int:
        return self.msg.value

    @external
    def pay_out(self, to: bytes, amount: int) -> bool:
        return self.send_value(to, amount)

    @external
    def recurse(self) -> None:
        self.call(self.address, "recurse")

    @view
    def get(self) -> int:
        return self.storage.get_int(b"n")

    def _private(self) -> None:
        pass


@pytest.fixture
def funded_host():
    h = Host()
    h.fund(ALICE, 1_000)
    return h


def test_deploy_address_is_deterministic(funded_host):
    addr = funded_host.deploy(Counter, 5, sender=ALICE)
    assert addr == contract_address(ALICE, 0)
    assert funded_host.view(addr, "get") == 5
    assert funded_host.deploy(Counter, sender=ALICE) == contract_address(ALICE, 1)


def test_failed_init_leaves_no_contract(funded_host):
    class Broken(Contract):
        def init(self) -> None:
            self.storage.set_int(b"x", 1)
            raise Revert("constructor failed")

    with pytest.raises(Revert):
        funded_host.deploy(Broken, sender=ALICE)
    assert not funded_host.is_contract(contract_address(ALICE, 0))
    assert funded_host.journal.nonce_of(ALICE) == 0


def test_failed_call_rolls_back_storage_and_logs(funded_host):
    c = funded_host.deploy(Counter, sender=ALICE)
    funded_host.call(c, "bump", sender=ALICE)
    with pytest.raises(Revert):
        funded_host.call(c, "bump_then_fail", sender=ALICE)
    assert funded_host.view(c, "get") == 1
    assert [r.args["n"] for r in funded_host.logs(name=b"Bumped")] == [1]


def test_caught_nested_failure_only_unwinds_inner_frame(funded_host):
    outer = funded_host.deploy(Counter, sender=ALICE)
    inner = funded_host.deploy(Counter, sender=ALICE)
    assert funded_host.call(outer, "bump_and_swallow_inner", inner, sender=ALICE) == 1
    assert funded_host.view(outer, "get") == 1
    assert funded_host.view(inner, "get") == 0
    assert [r.address for r in funded_host.logs(name=b"Bumped")] == [outer]


def test_value_moves_only_into_payable_entrypoints(funded_host):
    c = funded_host.deploy(Counter, sender=ALICE)
    assert funded_host.call(c, "deposit", sender=ALICE, value=40) == 40
    assert funded_host.balance_of(c) == 40
    assert funded_host.balance_of(ALICE) == 960

    with pytest.raises(NonPayable):
        funded_host.call(c, "bump", sender=ALICE, value=1)
    assert funded_host.balance_of(c) == 40
    assert funded_host.view(c, "get") == 0


def test_view_discards_writes(funded_host):
    c = funded_host.deploy(Counter, sender=ALICE)
    funded_host.view(c, "bump")
    assert funded_host.view(c, "get") == 0
    assert funded_host.logs(name=b"Bumped") == []


def test_send_value_to_eoa_and_contracts(funded_host):
    c = funded_host.deploy(Counter, sender=ALICE)
    funded_host.call(c, "deposit", sender=ALICE, value=100)
    bob = address_from_label("bob")
    ok_recv = funded_host.deploy(Receiver, c, sender=ALICE)
    bad_recv = funded_host.deploy(RejectingReceiver, c, sender=ALICE)

    assert funded_host.call(c, "pay_out", bob, 10, sender=ALICE) is True
    assert funded_host.call(c, "pay_out", ok_recv, 20, sender=ALICE) is True
    assert funded_host.call(c, "pay_out", bad_recv, 30, sender=ALICE) is False
    assert funded_host.call(c, "pay_out", c, 0, sender=ALICE) is False  # no receive hook
    assert funded_host.call(c, "pay_out", bob, 10_000, sender=ALICE) is False

    assert funded_host.balance_of(bob) == 10
    assert funded_host.view(ok_recv, "received") == 20
    assert funded_host.balance_of(bad_recv) == 0
    assert funded_host.balance_of(c) == 70


def test_call_depth_is_bounded():
    h = Host(max_call_depth=4)
    c = h.deploy(Counter, sender=ALICE)
    with pytest.raises(CallDepthExceeded):
        h.call(c, "recurse", sender=ALICE)


def test_unknown_targets_and_entrypoints(funded_host):
    c = funded_host.deploy(Counter, sender=ALICE)
    with pytest.raises(UnknownContract):
        funded_host.call(address_from_label("nobody"), "bump", sender=ALICE)
    for method in ("init", "_private", "missing"):
        with pytest.raises(UnknownEntrypoint):
            funded_host.call(c, method, sender=ALICE)


def test_log_records_carry_block_and_indices(funded_host):
    c = funded_host.deploy(Counter, sender=ALICE)
    funded_host.advance(seconds=12)
    funded_host.call(c, "bump", sender=ALICE)
    funded_host.call(c, "bump", sender=ALICE)
    recs = funded_host.logs(address=c, name=b"Bumped")
    assert [r.log_index for r in recs] == [0, 0]
    assert recs[1].tx_index == recs[0].tx_index + 1
    assert {r.block_number for r in recs} == {funded_host.block.height}
    assert recs[0].to_dict()["name"] == "Bumped"


def test_clock_only_moves_forward(funded_host):
    t0 = funded_host.block.timestamp
    funded_host.advance(seconds=30)
    assert funded_host.block.timestamp == t0 + 30
    with pytest.raises(ValueError):
        funded_host.warp(t0)


def test_reads_wait_for_in_flight_call(funded_host):
    entered = threading.Event()
    release = threading.Event()

    class SlowRejecter(Contract):
        @payable
        def receive(self) -> None:
            entered.set()
            release.wait(timeout=5)
            raise Revert("refused after a pause")

    payer = funded_host.deploy(Counter, sender=ALICE)
    funded_host.call(payer, "deposit", sender=ALICE, value=30)
    slow = funded_host.deploy(SlowRejecter, sender=ALICE)

    results = {}
    worker = threading.Thread(
        target=lambda: results.setdefault("paid", funded_host.call(payer, "pay_out", slow, 30, sender=ALICE))
    )
    worker.start()
    assert entered.wait(timeout=5)

    seen = []
    reader = threading.Thread(
        target=lambda: seen.append((funded_host.balance_of(slow), funded_host.balance_of(payer)))
    )
    reader.start()
    reader.join(timeout=0.2)
    assert reader.is_alive()

    release.set()
    worker.join(timeout=5)
    reader.join(timeout=5)
    assert results["paid"] is False
    assert seen == [(0, 30)]
