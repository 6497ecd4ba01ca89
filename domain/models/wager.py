"""
Roulette round domain models.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WheelOutcome:
    """A single spin result: pocket number 0-36 and its color."""

    number: int
    color: str  # "red", "black" or "green"


@dataclass
class WagerRound:
    """
    Record of one roulette round.

    win_amount includes the stake returned on a win plus any consolation
    credit. consolation_amount is tracked separately so statistics can
    tell real wins apart from pity credits.
    """

    account_id: int
    bet_type: str
    bet_selector: int | None
    bet_amount: int
    outcome_number: int
    outcome_color: str
    won: bool
    win_amount: int
    payout_ratio: int
    balance_before: int
    balance_after: int
    played_at: int
    consolation_applied: bool = False
    consolation_amount: int = 0
    losing_streak: int = 0
    round_id: int | None = None

    @property
    def net_result(self) -> int:
        """Profit (positive) or loss (negative) for the round."""
        return self.win_amount - self.bet_amount
