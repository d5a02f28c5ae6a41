import pytest

from raffle import metrics
from raffle.errors import InsufficientStake
from raffle.tests.conftest import FEE
from raffle.tests.helpers import enter_all, fulfill_with, trigger


def _calls(method, result):
    return metrics.sample("raffle_host_calls_total", {"method": method, "result": result})


def test_call_outcomes_are_counted(host, deployment, accounts):
    ok_before = _calls("enter_raffle", "success")
    revert_before = _calls("enter_raffle", "revert")

    host.call(deployment.raffle, "enter_raffle", sender=accounts["alice"], value=FEE)
    with pytest.raises(InsufficientStake):
        host.call(deployment.raffle, "enter_raffle", sender=accounts["bob"], value=FEE - 1)

    assert _calls("enter_raffle", "success") == ok_before + 1
    assert _calls("enter_raffle", "revert") == revert_before + 1


def test_events_and_payouts_are_counted(host, deployment, players):
    picked_before = metrics.sample("raffle_events_total", {"name": "WinnerPicked"})
    paid_before = metrics.sample("raffle_payouts_total", {"result": "success"})

    enter_all(host, deployment, players)
    fulfill_with(host, deployment, trigger(host, deployment), 0)

    assert metrics.sample("raffle_events_total", {"name": "WinnerPicked"}) == picked_before + 1
    assert metrics.sample("raffle_payouts_total", {"result": "success"}) == paid_before + 1


def test_reverted_events_are_not_counted(host, deployment, accounts):
    before = metrics.sample("raffle_events_total", {"name": "EntryRecorded"})
    with pytest.raises(InsufficientStake):
        host.call(deployment.raffle, "enter_raffle", sender=accounts["alice"], value=0)
    assert metrics.sample("raffle_events_total", {"name": "EntryRecorded"}) == before


def test_exposition_text():
    metrics.observe_call("probe", "success", 0.001)
    text = metrics.generate_latest_text().decode()
    assert "raffle_host_calls_total" in text
    assert 'raffle_host_call_seconds_bucket{method="probe",le="0.005"}' in text


def test_time_call_labels_non_raffle_errors():
    before = _calls("boom", "error")
    with pytest.raises(ZeroDivisionError):
        with metrics.time_call("boom"):
            1 // 0
    assert _calls("boom", "error") == before + 1
