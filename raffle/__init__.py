"""
Custodial raffle engine with an asynchronous VRF randomness exchange.

Subpackages
-----------
- raffle.runtime   local execution host (journal, storage, events, call frames)
- raffle.stdlib    ownable / pausable / reentrancy helpers
- raffle.oracle    VRF coordinator mock and request types
- raffle.contract  the raffle contract and its components
- raffle.cli       `raffle-sim` local round simulator
"""

from .version import __version__

__all__ = ["__version__"]
