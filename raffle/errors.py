"""
raffle.errors — typed failures for the raffle contract, the oracle mock and the host.

Every failure that aborts a call frame is a `RaffleError`. The host catches it at
the frame boundary, reverts the frame's journal checkpoint and re-raises, so a
caller always observes either the full effect of an operation or none of it.

Hierarchy
---------
RaffleError (base)
 ├─ InsufficientStake            : stake below the entrance fee
 ├─ NotOpen                      : raffle is CALCULATING
 ├─ Paused                       : paused flag set
 ├─ Unauthorized                 : caller lacks the required role
 ├─ UpkeepNotNeeded              : trigger while ineligible (balance, players, state)
 ├─ TransferFailed               : value transfer to a recipient failed
 ├─ NoFundsToWithdraw            : emergency withdrawal with an empty contract
 ├─ ActiveRoundWithdrawalBlocked : emergency withdrawal with a non-empty ledger
 ├─ InvalidCorrelation           : fulfilment for a request that is not pending
 ├─ ReentrancyLocked             : payout lock already held
 ├─ MissingRandomWords           : fulfilment without any random word
 ├─ IndexOutOfBounds             : ledger read past its end
 ├─ Revert                       : free-form failure raised by arbitrary contracts
 ├─ HostError                    : execution host failures
 │   ├─ InsufficientBalance
 │   ├─ UnknownContract
 │   ├─ UnknownEntrypoint
 │   ├─ NonPayable
 │   └─ CallDepthExceeded
 └─ OracleError                  : randomness coordinator failures
     ├─ InvalidSubscription
     ├─ InvalidConsumer
     ├─ MustBeSubOwner
     ├─ InsufficientSubscriptionBalance
     ├─ NonexistentRequest
     └─ InvalidRequestParams

These classes import nothing from the rest of the package so they can be used
from the runtime, the stdlib helpers and the contracts without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


def _hex(addr: Optional[bytes]) -> Optional[str]:
    if addr is None:
        return None
    return "0x" + bytes(addr).hex()


@dataclass
class RaffleError(Exception):
    """
    Base raffle error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'NOT_OPEN', 'PAUSED').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "raffle error"
    code: str = "RAFFLE_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs and CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


# -------- contract errors ----------------------------------------------------


class InsufficientStake(RaffleError):
    """Stake attached to an entry is below the entrance fee."""
    def __init__(self, sent: int, required: int):
        self.sent = int(sent)
        self.required = int(required)
        super().__init__(
            message="stake below entrance fee",
            code="INSUFFICIENT_STAKE",
            data={"sent": self.sent, "required": self.required},
        )


class NotOpen(RaffleError):
    def __init__(self, state: int = 1):
        self.state = int(state)
        super().__init__(message="raffle is not open", code="NOT_OPEN", data={"state": self.state})


class Paused(RaffleError):
    def __init__(self, message: str = "raffle is paused"):
        super().__init__(message=message, code="PAUSED")


class Unauthorized(RaffleError):
    """
    Caller is not allowed to perform the operation.

    `role` names the missing capability ("owner", "coordinator", "sub_owner").
    """
    def __init__(self, caller: Optional[bytes] = None, *, role: str = "owner"):
        self.caller = caller
        self.role = role
        d: Dict[str, Any] = {"role": role}
        if caller is not None:
            d["caller"] = _hex(caller)
        super().__init__(message=f"caller is not {role}", code="UNAUTHORIZED", data=d)


class UpkeepNotNeeded(RaffleError):
    """
    Trigger attempted while the round is not eligible.

    Carries the diagnostic snapshot (pooled balance, participant count,
    lifecycle state) observed at the time of the call.
    """
    def __init__(self, balance: int, participant_count: int, state: int):
        self.balance = int(balance)
        self.participant_count = int(participant_count)
        self.state = int(state)
        super().__init__(
            message="upkeep not needed",
            code="UPKEEP_NOT_NEEDED",
            data={
                "balance": self.balance,
                "participant_count": self.participant_count,
                "state": self.state,
            },
        )


class TransferFailed(RaffleError):
    def __init__(self, recipient: bytes, amount: int):
        self.recipient = recipient
        self.amount = int(amount)
        super().__init__(
            message="value transfer failed",
            code="TRANSFER_FAILED",
            data={"recipient": _hex(recipient), "amount": self.amount},
        )


class NoFundsToWithdraw(RaffleError):
    def __init__(self):
        super().__init__(message="contract holds no funds", code="NO_FUNDS_TO_WITHDRAW")


class ActiveRoundWithdrawalBlocked(RaffleError):
    def __init__(self, participant_count: int):
        self.participant_count = int(participant_count)
        super().__init__(
            message="round has participants",
            code="ACTIVE_ROUND_WITHDRAWAL_BLOCKED",
            data={"participant_count": self.participant_count},
        )


class InvalidCorrelation(RaffleError):
    """Fulfilment names a request id other than the pending one."""
    def __init__(self, request_id: int, expected: int):
        self.request_id = int(request_id)
        self.expected = int(expected)
        super().__init__(
            message="request id does not match the pending request",
            code="INVALID_CORRELATION",
            data={"request_id": self.request_id, "expected": self.expected},
        )


class ReentrancyLocked(RaffleError):
    def __init__(self, scope: bytes = b"payout"):
        super().__init__(
            message="reentrant call",
            code="REENTRANCY_LOCKED",
            data={"scope": scope.decode("ascii", "replace")},
        )


class MissingRandomWords(RaffleError):
    def __init__(self):
        super().__init__(message="no random words supplied", code="MISSING_RANDOM_WORDS")


class IndexOutOfBounds(RaffleError):
    def __init__(self, index: int, length: int):
        super().__init__(
            message="index out of bounds",
            code="INDEX_OUT_OF_BOUNDS",
            data={"index": int(index), "length": int(length)},
        )


class Revert(RaffleError):
    """
    Free-form failure raised by arbitrary contracts (e.g. a recipient whose
    receive hook refuses funds).

    Usage:
        raise Revert("receive disabled", reason="rejects payouts")
    """
    def __init__(
        self,
        message: str = "reverted",
        *,
        reason: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if reason is not None:
            d.setdefault("reason", reason)
        super().__init__(message=message, code="REVERT", data=d or None)


# -------- host errors --------------------------------------------------------


class HostError(RaffleError):
    def __init__(self, message: str = "host error", *, code: str = "HOST_ERROR", data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code=code, data=data)


class InsufficientBalance(HostError):
    def __init__(self, account: bytes, balance: int, amount: int):
        super().__init__(
            "insufficient balance",
            code="INSUFFICIENT_BALANCE",
            data={"account": _hex(account), "balance": int(balance), "amount": int(amount)},
        )


class UnknownContract(HostError):
    def __init__(self, address: bytes):
        super().__init__("no contract at address", code="UNKNOWN_CONTRACT", data={"address": _hex(address)})


class UnknownEntrypoint(HostError):
    def __init__(self, address: bytes, method: str):
        super().__init__(
            "method is not an external entrypoint",
            code="UNKNOWN_ENTRYPOINT",
            data={"address": _hex(address), "method": method},
        )


class NonPayable(HostError):
    def __init__(self, address: bytes, method: str, value: int):
        super().__init__(
            "method does not accept value",
            code="NON_PAYABLE",
            data={"address": _hex(address), "method": method, "value": int(value)},
        )


class CallDepthExceeded(HostError):
    def __init__(self, depth: int, limit: int):
        super().__init__(
            "call depth exceeded",
            code="CALL_DEPTH_EXCEEDED",
            data={"depth": int(depth), "limit": int(limit)},
        )


# -------- oracle errors ------------------------------------------------------


class OracleError(RaffleError):
    def __init__(self, message: str = "oracle error", *, code: str = "ORACLE_ERROR", data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code=code, data=data)


class InvalidSubscription(OracleError):
    def __init__(self, sub_id: int):
        super().__init__("unknown subscription", code="INVALID_SUBSCRIPTION", data={"sub_id": str(sub_id)})


class InvalidConsumer(OracleError):
    def __init__(self, sub_id: int, consumer: bytes):
        super().__init__(
            "consumer not registered on subscription",
            code="INVALID_CONSUMER",
            data={"sub_id": str(sub_id), "consumer": _hex(consumer)},
        )


class MustBeSubOwner(OracleError):
    def __init__(self, sub_id: int, owner: bytes):
        super().__init__(
            "caller is not the subscription owner",
            code="MUST_BE_SUB_OWNER",
            data={"sub_id": str(sub_id), "owner": _hex(owner)},
        )


class InsufficientSubscriptionBalance(OracleError):
    def __init__(self, sub_id: int, balance: int, payment: int):
        super().__init__(
            "subscription balance too low for payment",
            code="INSUFFICIENT_SUBSCRIPTION_BALANCE",
            data={"sub_id": str(sub_id), "balance": int(balance), "payment": int(payment)},
        )


class NonexistentRequest(OracleError):
    def __init__(self, request_id: int):
        super().__init__("unknown request", code="NONEXISTENT_REQUEST", data={"request_id": int(request_id)})


class InvalidRequestParams(OracleError):
    def __init__(self, field_name: str, value: int, limit: int):
        super().__init__(
            "request parameter out of range",
            code="INVALID_REQUEST_PARAMS",
            data={"field": field_name, "value": int(value), "limit": int(limit)},
        )


__all__ = [
    "RaffleError",
    "InsufficientStake",
    "NotOpen",
    "Paused",
    "Unauthorized",
    "UpkeepNotNeeded",
    "TransferFailed",
    "NoFundsToWithdraw",
    "ActiveRoundWithdrawalBlocked",
    "InvalidCorrelation",
    "ReentrancyLocked",
    "MissingRandomWords",
    "IndexOutOfBounds",
    "Revert",
    "HostError",
    "InsufficientBalance",
    "UnknownContract",
    "UnknownEntrypoint",
    "NonPayable",
    "CallDepthExceeded",
    "OracleError",
    "InvalidSubscription",
    "InvalidConsumer",
    "MustBeSubOwner",
    "InsufficientSubscriptionBalance",
    "NonexistentRequest",
    "InvalidRequestParams",
]
