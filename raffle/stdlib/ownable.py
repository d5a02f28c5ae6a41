# -*- coding: utf-8 -*-
"""
raffle.stdlib.ownable
=====================

Owner storage for raffle contracts:
- read the owner (`get_owner`)
- record the owner once (`init_owner`)
- check that a caller is the owner (`require_owner`)

The owner is stored under a fixed key and never changes after `init_owner`;
there is no transfer or renounce path.

Typical usage
-------------
    from raffle.stdlib import ownable

    class Vault(Contract):
        def init(self) -> None:
            ownable.init_owner(self, self.msg.sender)

        @external
        def sweep(self) -> None:
            ownable.require_owner(self, self.msg.sender)
            ...
"""
from __future__ import annotations

from typing import Optional

from raffle.errors import Unauthorized
from raffle.runtime.contract import Contract

OWNER_KEY: bytes = b"access:owner"

__all__ = ["OWNER_KEY", "get_owner", "init_owner", "require_owner"]


def get_owner(c: Contract) -> Optional[bytes]:
    return c.storage.get_addr(OWNER_KEY)


def init_owner(c: Contract, owner: bytes) -> None:
    """Record `owner`. Does not overwrite an owner that is already set."""
    if get_owner(c) is None:
        c.storage.set_addr(OWNER_KEY, owner)


def require_owner(c: Contract, caller: bytes) -> None:
    owner = get_owner(c)
    if owner is None or owner != caller:
        raise Unauthorized(caller, role="owner")
