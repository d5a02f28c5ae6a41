"""
Local execution host: journaled accounts and storage, call frames, events.
"""

from .context import ZERO_ADDRESS, BlockEnv, CallFrame, address_from_label, to_address, to_hex
from .contract import Contract, external, payable, view
from .events import EventRecord, InMemoryEventSink
from .host import Host
from .journal import Journal

__all__ = [
    "ZERO_ADDRESS",
    "BlockEnv",
    "CallFrame",
    "Contract",
    "EventRecord",
    "Host",
    "InMemoryEventSink",
    "Journal",
    "address_from_label",
    "external",
    "payable",
    "to_address",
    "to_hex",
    "view",
]
