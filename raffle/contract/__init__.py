"""
The raffle contract and the components it is assembled from.
"""

from .access import AccessGate
from .eligibility import Eligibility, EligibilityEvaluator
from .ledger import EntryLedger
from .machine import Raffle
from .payout import PayoutEngine
from .randomness import RandomnessRequestCoordinator
from .selector import WinnerSelector
from .state import RaffleState

__all__ = [
    "AccessGate",
    "Eligibility",
    "EligibilityEvaluator",
    "EntryLedger",
    "PayoutEngine",
    "Raffle",
    "RaffleState",
    "RandomnessRequestCoordinator",
    "WinnerSelector",
]
