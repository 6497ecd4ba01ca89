"""
Consolation (pity) credit for losing streaks.

The credit is a side payment added to a round's winnings. It never changes
the wheel outcome and is not a forced win.
"""

import math
from dataclasses import dataclass

from config import (
    CONSOLATION_BALANCE_SCALE,
    CONSOLATION_BALANCE_THRESHOLD,
    CONSOLATION_BET_REFERENCE,
    CONSOLATION_MANIPULATION_PENALTY,
    CONSOLATION_MAX_BALANCE_REDUCTION,
    CONSOLATION_MAX_BET,
    CONSOLATION_MIN_AMOUNT,
    CONSOLATION_THRESHOLDS,
)


@dataclass(frozen=True)
class ConsolationResult:
    """Outcome of a consolation calculation, with the multipliers that produced it."""

    amount: int
    base_amount: int = 0
    bet_multiplier: float = 1.0
    balance_multiplier: float = 1.0
    manipulation_multiplier: float = 1.0

    @property
    def applied(self) -> bool:
        return self.amount > 0


NO_CONSOLATION = ConsolationResult(amount=0)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


class ConsolationCalculator:
    """
    Pure domain service computing the pity credit.

    Eligibility: bet at or below max_bet and a losing streak reaching the
    lowest threshold. The base comes from the highest threshold met and is
    scaled by three independent dampeners:
    - bet size: min(bet / bet_reference, 1.0)
    - balance: 1 - min((balance - balance_threshold) / balance_scale, max_balance_reduction)
      when balance exceeds balance_threshold
    - manipulation: a flat penalty when the recent average bet is under half the current bet
    The dampened amount is rounded half-up and floored at min_amount.
    """

    def __init__(
        self,
        thresholds: dict[int, int] | None = None,
        max_bet: int | None = None,
        min_amount: int | None = None,
        bet_reference: int | None = None,
        balance_threshold: int | None = None,
        balance_scale: int | None = None,
        max_balance_reduction: float | None = None,
        manipulation_penalty: float | None = None,
    ):
        self.thresholds = dict(thresholds if thresholds is not None else CONSOLATION_THRESHOLDS)
        self.max_bet = max_bet if max_bet is not None else CONSOLATION_MAX_BET
        self.min_amount = min_amount if min_amount is not None else CONSOLATION_MIN_AMOUNT
        self.bet_reference = bet_reference if bet_reference is not None else CONSOLATION_BET_REFERENCE
        self.balance_threshold = (
            balance_threshold if balance_threshold is not None else CONSOLATION_BALANCE_THRESHOLD
        )
        self.balance_scale = balance_scale if balance_scale is not None else CONSOLATION_BALANCE_SCALE
        self.max_balance_reduction = (
            max_balance_reduction
            if max_balance_reduction is not None
            else CONSOLATION_MAX_BALANCE_REDUCTION
        )
        self.manipulation_penalty = (
            manipulation_penalty if manipulation_penalty is not None else CONSOLATION_MANIPULATION_PENALTY
        )

    @property
    def min_streak(self) -> int:
        return min(self.thresholds) if self.thresholds else 0

    def base_amount(self, losing_streak: int) -> int:
        """Flat bonus for the highest threshold the streak reaches (0 if none)."""
        met = [streak for streak in self.thresholds if losing_streak >= streak]
        if not met:
            return 0
        return self.thresholds[max(met)]

    def bet_multiplier(self, bet_amount: int) -> float:
        return min(bet_amount / self.bet_reference, 1.0)

    def balance_multiplier(self, balance: int) -> float:
        if balance <= self.balance_threshold:
            return 1.0
        reduction = min((balance - self.balance_threshold) / self.balance_scale, self.max_balance_reduction)
        return 1.0 - reduction

    def manipulation_multiplier(self, bet_amount: int, recent_average_bet: float | None) -> float:
        # No history means nothing to compare against
        if recent_average_bet is None:
            return 1.0
        if recent_average_bet < bet_amount / 2:
            return self.manipulation_penalty
        return 1.0

    def calculate(
        self,
        losing_streak: int,
        bet_amount: int,
        balance: int,
        recent_average_bet: float | None = None,
    ) -> ConsolationResult:
        """
        Compute the consolation credit for a round.

        Args:
            losing_streak: Consecutive losses immediately before this round
            bet_amount: Stake of this round
            balance: Balance before the stake was taken
            recent_average_bet: Mean stake of recent previous rounds, None if no history

        Returns:
            ConsolationResult (amount 0 when not eligible)
        """
        if bet_amount <= 0 or bet_amount > self.max_bet:
            return NO_CONSOLATION

        base = self.base_amount(losing_streak)
        if base <= 0:
            return NO_CONSOLATION

        bet_mult = self.bet_multiplier(bet_amount)
        balance_mult = self.balance_multiplier(balance)
        manipulation_mult = self.manipulation_multiplier(bet_amount, recent_average_bet)

        raw = base * bet_mult * balance_mult * manipulation_mult
        amount = max(self.min_amount, round_half_up(raw))

        return ConsolationResult(
            amount=amount,
            base_amount=base,
            bet_multiplier=bet_mult,
            balance_multiplier=balance_mult,
            manipulation_multiplier=manipulation_mult,
        )

    def table(self) -> list[tuple[int, int]]:
        """Threshold table sorted by streak, for display."""
        return sorted(self.thresholds.items())
