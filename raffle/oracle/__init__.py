"""
Randomness oracle: request/subscription types and a local VRF coordinator mock.
"""

from .coordinator import VRFCoordinatorMock
from .types import PendingRequest, RandomWordsRequest, Subscription

__all__ = ["VRFCoordinatorMock", "PendingRequest", "RandomWordsRequest", "Subscription"]
