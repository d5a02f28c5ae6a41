from dataclasses import replace

import pytest
from hypothesis import given, settings, strategies as st

from raffle.config import local_preset
from raffle.contract import Raffle, RaffleState
from raffle.deploy import deploy_raffle
from raffle.errors import IndexOutOfBounds, InsufficientStake, NotOpen, Revert
from raffle.runtime import Host, address_from_label
from raffle.tests.conftest import FEE
from raffle.tests.helpers import enter_all, event_names, trigger


def test_initial_state(host, deployment, accounts):
    r = deployment.raffle
    assert host.view(r, "get_raffle_state") is RaffleState.OPEN
    assert host.view(r, "get_entrance_fee") == FEE
    assert host.view(r, "get_number_of_players") == 0
    assert host.view(r, "get_pooled_balance") == 0
    assert host.view(r, "get_owner") == accounts["deployer"]
    assert host.view(r, "get_last_timestamp") == host.block.timestamp
    assert host.view(r, "get_subscription_id") == deployment.subscription_id
    assert host.view(r, "get_vrf_coordinator") == deployment.coordinator


def test_entry_records_player_and_stake(host, deployment, accounts):
    alice = accounts["alice"]
    before = host.balance_of(alice)
    assert host.call(deployment.raffle, "enter_raffle", sender=alice, value=FEE) == 0

    assert host.view(deployment.raffle, "get_player", 0) == alice
    assert host.view(deployment.raffle, "get_pooled_balance") == FEE
    assert host.balance_of(deployment.raffle) == FEE
    assert host.balance_of(alice) == before - FEE
    [rec] = host.logs(address=deployment.raffle, name=b"EntryRecorded")
    assert rec.args == {"participant": alice}


def test_overpaying_stake_is_pooled_in_full(host, deployment, accounts):
    host.call(deployment.raffle, "enter_raffle", sender=accounts["alice"], value=FEE * 3)
    assert host.view(deployment.raffle, "get_pooled_balance") == FEE * 3


def test_same_participant_may_enter_twice(host, deployment, accounts):
    enter_all(host, deployment, [accounts["alice"], accounts["alice"]])
    assert host.view(deployment.raffle, "get_players") == [accounts["alice"]] * 2


def test_stake_below_fee_is_rejected_without_effects(host, deployment, accounts):
    alice = accounts["alice"]
    before = host.balance_of(alice)
    with pytest.raises(InsufficientStake) as ei:
        host.call(deployment.raffle, "enter_raffle", sender=alice, value=FEE - 1)
    assert ei.value.to_dict()["data"] == {"sent": FEE - 1, "required": FEE}
    assert host.view(deployment.raffle, "get_number_of_players") == 0
    assert host.view(deployment.raffle, "get_pooled_balance") == 0
    assert host.balance_of(alice) == before
    assert b"EntryRecorded" not in event_names(host, deployment.raffle)


def test_entry_rejected_while_calculating(host, deployment, accounts, players):
    enter_all(host, deployment, players)
    trigger(host, deployment)
    with pytest.raises(NotOpen):
        host.call(deployment.raffle, "enter_raffle", sender=accounts["dave"], value=FEE)
    assert host.view(deployment.raffle, "get_number_of_players") == 3


def test_stake_check_precedes_state_check(host, deployment, accounts, players):
    enter_all(host, deployment, players)
    trigger(host, deployment)
    with pytest.raises(InsufficientStake):
        host.call(deployment.raffle, "enter_raffle", sender=accounts["dave"], value=0)


def test_player_index_out_of_bounds(host, deployment):
    with pytest.raises(IndexOutOfBounds):
        host.view(deployment.raffle, "get_player", 0)


@settings(max_examples=25, deadline=None)
@given(extra=st.lists(st.integers(min_value=0, max_value=10**6), min_size=1, max_size=12))
def test_pool_equals_sum_of_admitted_stakes(extra):
    fee = 1_000
    host = Host()
    deployer = address_from_label("deployer")
    host.fund(deployer, 10**24)
    dep = deploy_raffle(host, replace(local_preset(), entrance_fee=fee), deployer=deployer)

    expected = 0
    entrants = []
    for i, e in enumerate(extra):
        p = address_from_label(f"p{i}")
        entrants.append(p)
        host.fund(p, fee + e)
        host.call(dep.raffle, "enter_raffle", sender=p, value=fee + e)
        expected += fee + e

    assert host.view(dep.raffle, "get_number_of_players") == len(extra)
    assert host.view(dep.raffle, "get_players") == entrants
    assert host.view(dep.raffle, "get_pooled_balance") == expected
    assert host.balance_of(dep.raffle) == expected


@pytest.mark.parametrize(
    "fee, interval, key_hash",
    [(-1, 30, b"\x00" * 32), (FEE, 0, b"\x00" * 32), (FEE, 30, b"\x00" * 31)],
)
def test_construction_rejects_bad_parameters(host, deployment, accounts, fee, interval, key_hash):
    with pytest.raises(Revert):
        host.deploy(
            Raffle,
            fee,
            interval,
            deployment.coordinator,
            key_hash,
            deployment.subscription_id,
            sender=accounts["alice"],
        )
    assert host.journal.nonce_of(accounts["alice"]) == 0
