import pytest

from raffle.errors import ActiveRoundWithdrawalBlocked, NoFundsToWithdraw, Unauthorized
from raffle.tests.conftest import ETHER
from raffle.tests.helpers import enter_all, fulfill_with, trigger


def test_only_owner_may_withdraw(host, deployment, accounts):
    host.fund(deployment.raffle, ETHER)
    with pytest.raises(Unauthorized) as ei:
        host.call(deployment.raffle, "emergency_withdraw", sender=accounts["alice"])
    assert ei.value.role == "owner"
    assert host.balance_of(deployment.raffle) == ETHER


def test_withdraw_blocked_while_round_has_participants(host, deployment, players):
    enter_all(host, deployment, players)
    with pytest.raises(ActiveRoundWithdrawalBlocked) as ei:
        host.call(deployment.raffle, "emergency_withdraw", sender=deployment.deployer)
    assert ei.value.participant_count == 3
    assert host.view(deployment.raffle, "get_number_of_players") == 3


def test_withdraw_blocked_while_calculating(host, deployment, players):
    enter_all(host, deployment, players)
    trigger(host, deployment)
    with pytest.raises(ActiveRoundWithdrawalBlocked):
        host.call(deployment.raffle, "emergency_withdraw", sender=deployment.deployer)


def test_withdraw_with_empty_contract(host, deployment):
    with pytest.raises(NoFundsToWithdraw):
        host.call(deployment.raffle, "emergency_withdraw", sender=deployment.deployer)


def test_stray_funds_are_returned_to_owner(host, deployment, players):
    enter_all(host, deployment, players)
    fulfill_with(host, deployment, trigger(host, deployment), 0)
    host.fund(deployment.raffle, 2 * ETHER)
    owner_before = host.balance_of(deployment.deployer)

    amount = host.call(deployment.raffle, "emergency_withdraw", sender=deployment.deployer)

    assert amount == 2 * ETHER
    assert host.balance_of(deployment.raffle) == 0
    assert host.balance_of(deployment.deployer) == owner_before + 2 * ETHER
    [rec] = host.logs(address=deployment.raffle, name=b"EmergencyWithdraw")
    assert rec.args == {"owner": deployment.deployer, "amount": 2 * ETHER}


def test_withdraw_works_while_paused(host, deployment):
    host.fund(deployment.raffle, 7)
    host.call(deployment.raffle, "pause", sender=deployment.deployer)
    assert host.call(deployment.raffle, "emergency_withdraw", sender=deployment.deployer) == 7
