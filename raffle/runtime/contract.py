"""
raffle.runtime.contract — base class for contracts hosted by `raffle.runtime.host.Host`.

A contract is a plain Python class whose public entrypoints are marked with
one of three decorators:

    @external   mutating, rejects attached value
    @payable    mutating, accepts attached value
    @view       read-only helper (the host reverts anything it writes)

Only marked methods are reachable through `Host.call`. `init` is the
constructor hook run once by `Host.deploy`; `receive` (when marked payable)
is what plain value transfers from other contracts land on.

Inside a method, `self.msg` is the active call frame (sender, value),
`self.block` the block environment and `self.storage` the contract's
journaled key/value store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, TypeVar

from .context import BlockEnv, CallFrame
from .storage import ContractStorage

if TYPE_CHECKING:  # pragma: no cover
    from .host import Host

F = TypeVar("F", bound=Callable[..., Any])

ENTRY_ATTR = "__raffle_entry__"
NONPAYABLE = "nonpayable"
PAYABLE = "payable"
VIEW = "view"


def _mark(kind: str) -> Callable[[F], F]:
    def deco(fn: F) -> F:
        setattr(fn, ENTRY_ATTR, kind)
        return fn

    return deco


external = _mark(NONPAYABLE)
payable = _mark(PAYABLE)
view = _mark(VIEW)


def entry_kind(fn: Any) -> Optional[str]:
    return getattr(fn, ENTRY_ATTR, None)


class Contract:
    def __init__(self, host: "Host", address: bytes) -> None:
        self._host = host
        self.address = address
        self.storage = ContractStorage(host.journal, address)

    def init(self, *args: Any, **kwargs: Any) -> None:
        """Constructor hook; contracts override it to set initial storage."""

    # --------------------------- environment --------------------------- #

    @property
    def msg(self) -> CallFrame:
        return self._host.current_frame()

    @property
    def block(self) -> BlockEnv:
        return self._host.block

    def self_balance(self) -> int:
        return self._host.balance_of(self.address)

    # --------------------------- effects -------------------------------- #

    def emit(self, name: bytes, args: Mapping[str, Any]) -> None:
        self._host.emit_log(self.address, name, args)

    def call(self, to: bytes, method: str, *args: Any, value: int = 0, **kwargs: Any) -> Any:
        """Call another contract with this contract as the sender."""
        return self._host.call(to, method, *args, sender=self.address, value=value, **kwargs)

    def send_value(self, to: bytes, amount: int) -> bool:
        """Low-level value transfer; reports failure instead of raising."""
        return self._host.send_value(self.address, to, amount)


__all__ = [
    "Contract",
    "external",
    "payable",
    "view",
    "entry_kind",
    "NONPAYABLE",
    "PAYABLE",
    "VIEW",
]
