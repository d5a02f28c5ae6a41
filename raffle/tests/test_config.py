import pytest

from raffle.config import (
    DEFAULT_KEY_HASH,
    ETHER,
    LOCAL_CHAIN_ID,
    SEPOLIA_CHAIN_ID,
    UnsupportedChain,
    load_config,
    local_preset,
    preset_for_chain,
)

_ENV = (
    "RAFFLE_CHAIN_ID",
    "RAFFLE_ENTRANCE_FEE",
    "RAFFLE_INTERVAL",
    "RAFFLE_VRF_COORDINATOR",
    "RAFFLE_KEY_HASH",
    "RAFFLE_SUBSCRIPTION_ID",
    "RAFFLE_CALLBACK_GAS_LIMIT",
    "RAFFLE_MAX_CALL_DEPTH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


def test_local_defaults():
    cfg = load_config()
    assert cfg == local_preset()
    assert cfg.is_local
    assert cfg.vrf_coordinator is None
    assert cfg.entrance_fee == ETHER // 100
    assert cfg.key_hash == DEFAULT_KEY_HASH
    assert "num_words" not in cfg.as_dict()


def test_sepolia_preset_names_live_coordinator():
    cfg = preset_for_chain(SEPOLIA_CHAIN_ID)
    assert not cfg.is_local
    assert cfg.vrf_coordinator == bytes.fromhex("9ddfaca8183c41ad55329bdeed9f6a8d53168b1b")
    assert cfg.as_dict()["vrf_coordinator"] == "0x9ddfaca8183c41ad55329bdeed9f6a8d53168b1b"


def test_unknown_chain():
    with pytest.raises(UnsupportedChain) as ei:
        load_config(1)
    assert ei.value.chain_id == 1


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("RAFFLE_ENTRANCE_FEE", "0x10")
    monkeypatch.setenv("RAFFLE_INTERVAL", "120")
    monkeypatch.setenv("RAFFLE_VRF_COORDINATOR", "0x" + "ab" * 20)
    monkeypatch.setenv("RAFFLE_SUBSCRIPTION_ID", "42")
    cfg = load_config()
    assert cfg.entrance_fee == 16
    assert cfg.interval == 120
    assert cfg.vrf_coordinator == b"\xab" * 20
    assert cfg.subscription_id == 42


def test_env_values_are_clamped(monkeypatch):
    monkeypatch.setenv("RAFFLE_INTERVAL", "0")
    monkeypatch.setenv("RAFFLE_CALLBACK_GAS_LIMIT", "99999999")
    monkeypatch.setenv("RAFFLE_MAX_CALL_DEPTH", "1")
    cfg = load_config()
    assert cfg.interval == 1
    assert cfg.callback_gas_limit == 2_500_000
    assert cfg.max_call_depth == 4


def test_malformed_env_falls_back(monkeypatch):
    monkeypatch.setenv("RAFFLE_ENTRANCE_FEE", "lots")
    monkeypatch.setenv("RAFFLE_KEY_HASH", "0x1234")
    monkeypatch.setenv("RAFFLE_VRF_COORDINATOR", "not-an-address")
    cfg = load_config()
    assert cfg.entrance_fee == local_preset().entrance_fee
    assert cfg.key_hash == DEFAULT_KEY_HASH
    assert cfg.vrf_coordinator is None


def test_chain_from_env(monkeypatch):
    monkeypatch.setenv("RAFFLE_CHAIN_ID", str(SEPOLIA_CHAIN_ID))
    assert load_config().chain_id == SEPOLIA_CHAIN_ID
    assert load_config(LOCAL_CHAIN_ID).chain_id == LOCAL_CHAIN_ID
