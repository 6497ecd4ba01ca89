"""
Account and ledger history domain models.
"""

from dataclasses import dataclass


@dataclass
class Account:
    """
    A user's economy account.

    This is a pure domain model with no infrastructure dependencies.
    """

    account_id: int
    balance: int = 0
    display_name: str | None = None
    last_work_at: int | None = None  # Unix timestamp
    bailout_used: bool = False
    bailout_count: int = 0  # Lifetime bailout work sessions

    @property
    def has_used_bailout(self) -> bool:
        """True if the account has ever taken a bailout, even if re-armed since."""
        return self.bailout_count > 0


@dataclass
class WorkSession:
    """One successful /work action."""

    account_id: int
    reward: int
    balance_before: int
    balance_after: int
    worked_at: int
    was_bailout: bool = False
    session_id: int | None = None


@dataclass
class TransferRecord:
    """One executed peer-to-peer transfer."""

    sender_id: int
    receiver_id: int
    amount: int
    fee: int
    sender_balance_before: int
    sender_balance_after: int
    receiver_balance_before: int
    receiver_balance_after: int
    created_at: int
    memo: str | None = None
    transaction_type: str = "transfer"
    transaction_id: int | None = None

    @property
    def total_cost(self) -> int:
        return self.amount + self.fee


@dataclass
class LeaderboardEntry:
    rank: int
    account_id: int
    balance: int
    display_name: str | None = None
