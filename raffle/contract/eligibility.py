"""
raffle.contract.eligibility — may a round be triggered now?

A round is eligible when all four conditions hold:

    state == OPEN
    now - last_timestamp >= interval
    pooled_balance > 0
    participant_count > 0
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .state import RaffleState


@dataclass(frozen=True)
class Eligibility:
    is_open: bool
    time_passed: bool
    has_balance: bool
    has_players: bool

    @property
    def eligible(self) -> bool:
        return self.is_open and self.time_passed and self.has_balance and self.has_players

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_open": self.is_open,
            "time_passed": self.time_passed,
            "has_balance": self.has_balance,
            "has_players": self.has_players,
            "eligible": self.eligible,
        }


class EligibilityEvaluator:
    def __init__(self, interval: int) -> None:
        self.interval = interval

    def evaluate(
        self,
        *,
        state: RaffleState,
        now: int,
        last_timestamp: int,
        pooled_balance: int,
        participant_count: int,
    ) -> Eligibility:
        return Eligibility(
            is_open=state == RaffleState.OPEN,
            time_passed=now - last_timestamp >= self.interval,
            has_balance=pooled_balance > 0,
            has_players=participant_count > 0,
        )


__all__ = ["Eligibility", "EligibilityEvaluator"]
