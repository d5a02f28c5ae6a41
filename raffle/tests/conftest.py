# -*- coding: utf-8 -*-
"""
raffle.tests.conftest
=====================

Fixtures for raffle tests:
- a fresh local `Host` per test
- deterministic, funded accounts
- a small-fee config and a deployed raffle + coordinator mock

Usage (inside a test file):
    def test_enter(host, deployment, accounts):
        host.call(deployment.raffle, "enter_raffle", sender=accounts["alice"], value=FEE)
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict

import pytest

from raffle.config import ETHER, RaffleConfig, local_preset
from raffle.deploy import Deployment, deploy_raffle
from raffle.runtime import Host, address_from_label

PROJECT_TEST_SEED = 1337

FEE = ETHER // 100
INTERVAL = 30

ACCOUNT_BALANCES = {
    "deployer": 10_000 * ETHER,
    "alice": 5 * ETHER,
    "bob": 5 * ETHER,
    "carol": 5 * ETHER,
    "dave": 5 * ETHER,
}


@pytest.fixture
def host() -> Host:
    return Host()


@pytest.fixture
def accounts(host: Host) -> Dict[str, bytes]:
    out: Dict[str, bytes] = {}
    for label, balance in ACCOUNT_BALANCES.items():
        addr = address_from_label(label)
        host.fund(addr, balance)
        out[label] = addr
    return out


@pytest.fixture
def config() -> RaffleConfig:
    return replace(local_preset(), entrance_fee=FEE, interval=INTERVAL)


@pytest.fixture
def deployment(host: Host, accounts: Dict[str, bytes], config: RaffleConfig) -> Deployment:
    return deploy_raffle(host, config, deployer=accounts["deployer"])


@pytest.fixture
def players(accounts: Dict[str, bytes]):
    return [accounts["alice"], accounts["bob"], accounts["carol"]]
