"""
raffle.oracle.coordinator — local VRF coordinator mock with subscriptions.

Lifecycle
---------
1. Anyone creates a subscription and becomes its owner.
2. The owner funds it (bookkeeping units, no native value moves) and adds
   consumer contracts.
3. A consumer calls `request_random_words`; the request is validated,
   assigned the next request id (starting at 1) and stored.
4. A test, the CLI or an operator calls `fulfill_random_words` (or the
   `_with_override` variant to choose the words). The coordinator charges
   the subscription, deletes the request and calls the consumer's
   `raw_fulfill_random_words(request_id, words)` with itself as sender.

A consumer callback that fails is rolled back on its own and reported as
`RandomWordsFulfilled(success=False)`; the request is still consumed and the
payment still charged. An underfunded subscription reverts the whole
fulfilment instead, leaving the request pending.

Storage Layout
--------------
- b"vrf:owner"                              → deployer address
- b"vrf:base_fee" / b"vrf:gas_price"        → u256
- b"vrf:sub_nonce" / b"vrf:next_req"        → u256 counters
- b"sub:" + id32 + b":owner"                → owner address
- b"sub:" + id32 + b":bal"                  → u256
- b"sub:" + id32 + b":reqs"                 → u256 request count
- b"sub:" + id32 + b":cons"                 → array of consumer addresses
- b"req:" + u64be(id)                       → PendingRequest.encode()
"""

from __future__ import annotations

import hashlib
import logging
from typing import List, Optional, Sequence

from raffle.errors import (
    InsufficientSubscriptionBalance,
    InvalidConsumer,
    InvalidRequestParams,
    InvalidSubscription,
    MustBeSubOwner,
    NonexistentRequest,
    RaffleError,
)
from raffle.runtime.contract import Contract, external, view
from raffle.runtime.context import to_hex
from raffle.stdlib import ownable

from . import drbg
from .types import (
    MAX_CALLBACK_GAS_LIMIT,
    MAX_NUM_WORDS,
    MAX_REQUEST_CONFIRMATIONS,
    PendingRequest,
    RandomWordsRequest,
    Subscription,
)

log = logging.getLogger(__name__)

_BASE_FEE = b"vrf:base_fee"
_GAS_PRICE = b"vrf:gas_price"
_SUB_NONCE = b"vrf:sub_nonce"
_NEXT_REQ = b"vrf:next_req"

_UINT256_MAX = 2**256 - 1


def _sub_key(sub_id: int, field: bytes) -> bytes:
    return b"sub:" + sub_id.to_bytes(32, "big") + b":" + field


def _req_key(request_id: int) -> bytes:
    return b"req:" + request_id.to_bytes(8, "big")


class VRFCoordinatorMock(Contract):
    def init(self, base_fee: int, gas_price: int) -> None:
        ownable.init_owner(self, self.msg.sender)
        self.storage.set_int(_BASE_FEE, base_fee)
        self.storage.set_int(_GAS_PRICE, gas_price)
        self.storage.set_int(_NEXT_REQ, 1)

    # ------------------------------------------------------------------ #
    # Subscriptions
    # ------------------------------------------------------------------ #

    def _require_sub(self, sub_id: int) -> bytes:
        if not 0 < sub_id <= _UINT256_MAX:
            raise InvalidSubscription(sub_id)
        owner = self.storage.get_addr(_sub_key(sub_id, b"owner"))
        if owner is None:
            raise InvalidSubscription(sub_id)
        return owner

    def _require_sub_owner(self, sub_id: int) -> None:
        owner = self._require_sub(sub_id)
        if self.msg.sender != owner:
            raise MustBeSubOwner(sub_id, owner)

    def _is_consumer(self, sub_id: int, consumer: bytes) -> bool:
        return consumer in self.storage.array_list(_sub_key(sub_id, b"cons"))

    @external
    def create_subscription(self) -> int:
        nonce = self.storage.get_int(_SUB_NONCE)
        self.storage.set_int(_SUB_NONCE, nonce + 1)
        digest = hashlib.sha3_256(
            b"raffle/vrf/sub/v1|"
            + self.msg.sender
            + self.block.height.to_bytes(8, "big")
            + self.address
            + nonce.to_bytes(8, "big")
        ).digest()
        # Zero is reserved for "no subscription".
        sub_id = int.from_bytes(digest, "big") or 1
        self.storage.set_addr(_sub_key(sub_id, b"owner"), self.msg.sender)
        self.emit(b"SubscriptionCreated", {"sub_id": sub_id, "owner": self.msg.sender})
        return sub_id

    @external
    def fund_subscription(self, sub_id: int, amount: int) -> int:
        self._require_sub(sub_id)
        if amount < 0:
            raise InvalidRequestParams("amount", amount, 0)
        key = _sub_key(sub_id, b"bal")
        old = self.storage.get_int(key)
        self.storage.set_int(key, old + amount)
        self.emit(b"SubscriptionFunded", {"sub_id": sub_id, "old_balance": old, "new_balance": old + amount})
        return old + amount

    @external
    def add_consumer(self, sub_id: int, consumer: bytes) -> None:
        self._require_sub_owner(sub_id)
        if self._is_consumer(sub_id, consumer):
            return
        self.storage.array_push(_sub_key(sub_id, b"cons"), consumer)
        self.emit(b"SubscriptionConsumerAdded", {"sub_id": sub_id, "consumer": consumer})

    @external
    def remove_consumer(self, sub_id: int, consumer: bytes) -> None:
        self._require_sub_owner(sub_id)
        prefix = _sub_key(sub_id, b"cons")
        current = self.storage.array_list(prefix)
        if consumer not in current:
            raise InvalidConsumer(sub_id, consumer)
        self.storage.array_clear(prefix)
        for c in current:
            if c != consumer:
                self.storage.array_push(prefix, c)
        self.emit(b"SubscriptionConsumerRemoved", {"sub_id": sub_id, "consumer": consumer})

    @view
    def get_subscription(self, sub_id: int) -> Subscription:
        owner = self._require_sub(sub_id)
        return Subscription(
            owner=owner,
            balance=self.storage.get_int(_sub_key(sub_id, b"bal")),
            request_count=self.storage.get_int(_sub_key(sub_id, b"reqs")),
            consumers=tuple(self.storage.array_list(_sub_key(sub_id, b"cons"))),
        )

    @view
    def consumer_is_added(self, sub_id: int, consumer: bytes) -> bool:
        self._require_sub(sub_id)
        return self._is_consumer(sub_id, consumer)

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    @external
    def request_random_words(self, request: RandomWordsRequest) -> int:
        consumer = self.msg.sender
        self._require_sub(request.sub_id)
        if not self._is_consumer(request.sub_id, consumer):
            raise InvalidConsumer(request.sub_id, consumer)
        if not 0 <= request.request_confirmations <= MAX_REQUEST_CONFIRMATIONS:
            raise InvalidRequestParams("request_confirmations", request.request_confirmations, MAX_REQUEST_CONFIRMATIONS)
        if not 0 < request.callback_gas_limit <= MAX_CALLBACK_GAS_LIMIT:
            raise InvalidRequestParams("callback_gas_limit", request.callback_gas_limit, MAX_CALLBACK_GAS_LIMIT)
        if not 1 <= request.num_words <= MAX_NUM_WORDS:
            raise InvalidRequestParams("num_words", request.num_words, MAX_NUM_WORDS)
        if len(request.key_hash) != 32:
            raise InvalidRequestParams("key_hash", len(request.key_hash), 32)

        request_id = self.storage.get_int(_NEXT_REQ)
        self.storage.set_int(_NEXT_REQ, request_id + 1)
        reqs_key = _sub_key(request.sub_id, b"reqs")
        self.storage.set_int(reqs_key, self.storage.get_int(reqs_key) + 1)

        pending = PendingRequest(
            sub_id=request.sub_id,
            consumer=consumer,
            callback_gas_limit=request.callback_gas_limit,
            num_words=request.num_words,
            request_confirmations=request.request_confirmations,
            key_hash=request.key_hash,
            pre_seed=drbg.pre_seed(self.address, request_id, consumer),
        )
        self.storage.set(_req_key(request_id), pending.encode())
        self.emit(
            b"RandomWordsRequested",
            {
                "key_hash": request.key_hash,
                "request_id": request_id,
                "pre_seed": pending.pre_seed,
                "sub_id": request.sub_id,
                "request_confirmations": request.request_confirmations,
                "callback_gas_limit": request.callback_gas_limit,
                "num_words": request.num_words,
                "sender": consumer,
            },
        )
        log.info("randomness requested", extra={"request_id": request_id, "consumer": to_hex(consumer)})
        return request_id

    @view
    def get_request(self, request_id: int) -> Optional[PendingRequest]:
        raw = self.storage.get(_req_key(request_id))
        return None if raw is None else PendingRequest.decode(raw)

    @view
    def payment_for(self, callback_gas_limit: int) -> int:
        return self.storage.get_int(_BASE_FEE) + self.storage.get_int(_GAS_PRICE) * callback_gas_limit

    @external
    def fulfill_random_words(self, request_id: int, consumer: bytes) -> bool:
        return self._fulfill(request_id, consumer, ())

    @external
    def fulfill_random_words_with_override(self, request_id: int, consumer: bytes, words: Sequence[int]) -> bool:
        return self._fulfill(request_id, consumer, tuple(words))

    def _fulfill(self, request_id: int, consumer: bytes, override: Sequence[int]) -> bool:
        raw = self.storage.get(_req_key(request_id))
        if raw is None:
            raise NonexistentRequest(request_id)
        req = PendingRequest.decode(raw)
        if req.consumer != consumer:
            raise InvalidConsumer(req.sub_id, consumer)

        if override:
            if len(override) != req.num_words:
                raise InvalidRequestParams("num_words", len(override), req.num_words)
            for w in override:
                if not 0 <= w <= _UINT256_MAX:
                    raise InvalidRequestParams("word", w, _UINT256_MAX)
            words: List[int] = list(override)
        else:
            words = drbg.random_words(req.pre_seed, req.num_words)

        payment = self.payment_for(req.callback_gas_limit)
        bal_key = _sub_key(req.sub_id, b"bal")
        balance = self.storage.get_int(bal_key)
        if balance < payment:
            raise InsufficientSubscriptionBalance(req.sub_id, balance, payment)
        self.storage.set_int(bal_key, balance - payment)
        self.storage.delete(_req_key(request_id))

        try:
            self.call(consumer, "raw_fulfill_random_words", request_id, words)
            success = True
        except RaffleError as exc:
            log.warning(
                "consumer rejected fulfilment",
                extra={"request_id": request_id, "consumer": to_hex(consumer), "code": exc.code},
            )
            success = False

        self.emit(
            b"RandomWordsFulfilled",
            {
                "request_id": request_id,
                "output_seed": drbg.output_seed(words),
                "sub_id": req.sub_id,
                "payment": payment,
                "success": success,
            },
        )
        return success


__all__ = ["VRFCoordinatorMock"]
