"""
Domain models - pure data structures representing business entities.
"""

from domain.models.account import Account, LeaderboardEntry, TransferRecord, WorkSession
from domain.models.wager import WagerRound, WheelOutcome

__all__ = [
    "Account",
    "LeaderboardEntry",
    "TransferRecord",
    "WorkSession",
    "WagerRound",
    "WheelOutcome",
]
