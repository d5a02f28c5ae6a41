"""
raffle.contract.machine — the raffle contract and its round lifecycle.

    OPEN ──perform_upkeep──▶ CALCULATING ──raw_fulfill_random_words──▶ OPEN

Round flow
----------
1. Participants call `enter_raffle` with at least the entrance fee attached.
2. A scheduler polls `check_upkeep`; once the round is eligible it calls
   `perform_upkeep`, which flips the raffle to CALCULATING *before* asking
   the coordinator for a random word.
3. The coordinator calls back `raw_fulfill_random_words`. All bookkeeping
   (winner, state, ledger, timestamp, pool) is settled and `WinnerPicked`
   is emitted before the pool is sent to the winner under the payout lock.
   If that transfer fails the whole callback reverts and the raffle stays
   CALCULATING with its ledger intact.

There is no timeout for an unanswered request: the raffle stays CALCULATING
until the coordinator fulfils it.

Events
------
- EntryRecorded       {"participant"}
- RandomnessRequested {"request_id"}
- WinnerPicked        {"winner"}
- Paused / Unpaused   {"by"}
- EmergencyWithdraw   {"owner", "amount"}
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from raffle.errors import (
    ActiveRoundWithdrawalBlocked,
    MissingRandomWords,
    NoFundsToWithdraw,
    Revert,
    UpkeepNotNeeded,
)
from raffle.runtime.context import ZERO_ADDRESS
from raffle.runtime.contract import Contract, external, payable, view

from .access import AccessGate
from .eligibility import Eligibility, EligibilityEvaluator
from .ledger import EntryLedger
from .payout import PayoutEngine
from .randomness import RandomnessRequestCoordinator
from .selector import WinnerSelector
from .state import RaffleState

_FEE = b"raffle:fee"
_INTERVAL = b"raffle:interval"
_STATE = b"raffle:state"
_LAST_TS = b"raffle:last_ts"
_WINNER = b"raffle:winner"


class Raffle(Contract):
    def __init__(self, host, address: bytes) -> None:
        super().__init__(host, address)
        self.gate = AccessGate(self)
        self.ledger = EntryLedger(self)
        self.randomness = RandomnessRequestCoordinator(self)
        self.selector = WinnerSelector(self.ledger)
        self.payout = PayoutEngine(self)

    def init(
        self,
        entrance_fee: int,
        interval: int,
        vrf_coordinator: bytes,
        key_hash: bytes,
        subscription_id: int,
        request_confirmations: int = 3,
        callback_gas_limit: int = 500_000,
    ) -> None:
        if entrance_fee < 0:
            raise Revert("entrance fee must be non-negative")
        if interval < 1:
            raise Revert("interval must be at least one second")
        self.gate.init(self.msg.sender)
        self.storage.set_int(_FEE, entrance_fee)
        self.storage.set_int(_INTERVAL, interval)
        self.storage.set_int(_LAST_TS, self.block.timestamp)
        self._set_state(RaffleState.OPEN)
        self.randomness.init(
            coordinator=vrf_coordinator,
            key_hash=key_hash,
            subscription_id=subscription_id,
            request_confirmations=request_confirmations,
            callback_gas_limit=callback_gas_limit,
        )

    # ------------------------------------------------------------------ #
    # Internal state
    # ------------------------------------------------------------------ #

    def _state(self) -> RaffleState:
        return RaffleState(self.storage.get_int(_STATE))

    def _set_state(self, state: RaffleState) -> None:
        self.storage.set_int(_STATE, int(state))

    def _eligibility(self) -> Eligibility:
        evaluator = EligibilityEvaluator(self.storage.get_int(_INTERVAL))
        return evaluator.evaluate(
            state=self._state(),
            now=self.block.timestamp,
            last_timestamp=self.storage.get_int(_LAST_TS),
            pooled_balance=self.ledger.pooled_balance(),
            participant_count=self.ledger.size(),
        )

    # ------------------------------------------------------------------ #
    # Entry
    # ------------------------------------------------------------------ #

    @payable
    def enter_raffle(self) -> int:
        return self.ledger.admit(
            self.msg.sender,
            self.msg.value,
            fee=self.storage.get_int(_FEE),
            state=self._state(),
            paused=self.gate.is_paused(),
        )

    # ------------------------------------------------------------------ #
    # Trigger
    # ------------------------------------------------------------------ #

    @view
    def check_upkeep(self, check_data: bytes = b"") -> Tuple[bool, bytes]:
        return self._eligibility().eligible, b""

    @view
    def get_eligibility(self) -> Eligibility:
        return self._eligibility()

    @external
    def perform_upkeep(self, perform_data: bytes = b"") -> int:
        self.gate.require_not_paused()
        if not self._eligibility().eligible:
            raise UpkeepNotNeeded(self.ledger.pooled_balance(), self.ledger.size(), int(self._state()))
        self._set_state(RaffleState.CALCULATING)
        request_id = self.randomness.request()
        self.emit(b"RandomnessRequested", {"request_id": request_id})
        return request_id

    # ------------------------------------------------------------------ #
    # Fulfilment
    # ------------------------------------------------------------------ #

    @external
    def raw_fulfill_random_words(self, request_id: int, random_words: Sequence[int]) -> bytes:
        self.randomness.require_fulfillment(self.msg.sender, request_id)
        if not random_words:
            raise MissingRandomWords()

        _, winner = self.selector.select(int(random_words[0]))
        self.storage.set_addr(_WINNER, winner)
        self._set_state(RaffleState.OPEN)
        amount = self.ledger.reset_round()
        self.storage.set_int(_LAST_TS, self.block.timestamp)
        self.randomness.clear()
        self.emit(b"WinnerPicked", {"winner": winner})

        self.payout.pay(winner, amount)
        return winner

    # ------------------------------------------------------------------ #
    # Safety
    # ------------------------------------------------------------------ #

    @external
    def pause(self) -> None:
        self.gate.pause(self.msg.sender)

    @external
    def unpause(self) -> None:
        self.gate.unpause(self.msg.sender)

    @external
    def emergency_withdraw(self) -> int:
        self.payout.require_unlocked()
        owner = self.msg.sender
        self.gate.require_owner(owner)
        count = self.ledger.size()
        if count:
            raise ActiveRoundWithdrawalBlocked(count)
        amount = self.self_balance()
        if amount == 0:
            raise NoFundsToWithdraw()
        self.emit(b"EmergencyWithdraw", {"owner": owner, "amount": amount})
        self.payout.pay(owner, amount)
        return amount

    # ------------------------------------------------------------------ #
    # Read accessors
    # ------------------------------------------------------------------ #

    @view
    def get_entrance_fee(self) -> int:
        return self.storage.get_int(_FEE)

    @view
    def get_interval(self) -> int:
        return self.storage.get_int(_INTERVAL)

    @view
    def get_raffle_state(self) -> RaffleState:
        return self._state()

    @view
    def get_player(self, index: int) -> bytes:
        return self.ledger.participant(index)

    @view
    def get_players(self) -> List[bytes]:
        return self.ledger.participants()

    @view
    def get_number_of_players(self) -> int:
        return self.ledger.size()

    @view
    def get_last_timestamp(self) -> int:
        return self.storage.get_int(_LAST_TS)

    @view
    def get_recent_winner(self) -> bytes:
        return self.storage.get_addr(_WINNER) or ZERO_ADDRESS

    @view
    def get_subscription_id(self) -> int:
        return self.randomness.subscription_id()

    @view
    def get_pending_request_id(self) -> int:
        return self.randomness.pending() or 0

    @view
    def get_pooled_balance(self) -> int:
        return self.ledger.pooled_balance()

    @view
    def get_owner(self) -> bytes:
        return self.gate.owner() or ZERO_ADDRESS

    @view
    def is_paused(self) -> bool:
        return self.gate.is_paused()

    @view
    def get_vrf_coordinator(self) -> bytes:
        return self.randomness.coordinator()


__all__ = ["Raffle"]
