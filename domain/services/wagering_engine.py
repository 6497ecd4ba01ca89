"""
Wagering engine domain service.

Plays one roulette round without touching storage: draws an outcome,
evaluates the bet and computes win and consolation amounts.
"""

from domain.models.wager import WagerRound, WheelOutcome
from domain.services.consolation_service import ConsolationCalculator
from domain.services.roulette_wheel import (
    BetType,
    RouletteWheel,
    check_win,
    payout_ratio,
    validate_selector,
    win_amount,
)


class WageringEngine:
    """
    Pure domain service for a single round.

    All state comes in through arguments (balance, streak, recent average
    bet); the only source of randomness is the injected wheel.
    """

    def __init__(
        self,
        wheel: RouletteWheel | None = None,
        consolation: ConsolationCalculator | None = None,
    ):
        self.wheel = wheel or RouletteWheel()
        self.consolation = consolation or ConsolationCalculator()

    def settle(
        self,
        account_id: int,
        bet_type: BetType,
        selector: int | None,
        bet_amount: int,
        balance_before: int,
        outcome: WheelOutcome,
        losing_streak: int = 0,
        recent_average_bet: float | None = None,
        played_at: int = 0,
    ) -> WagerRound:
        """
        Settle a bet against a known outcome.

        Args:
            account_id: Player account
            bet_type: Bet category
            selector: Pocket for straight-number bets, None otherwise
            bet_amount: Stake (must be positive and not exceed balance_before)
            balance_before: Balance before the stake was taken
            outcome: Wheel result
            losing_streak: Consecutive losses before this round
            recent_average_bet: Mean stake of recent rounds (None if no history)
            played_at: Unix timestamp for the record

        Returns:
            WagerRound with balance_after = balance_before - stake + win_amount
        """
        bet_type = BetType(bet_type)
        if bet_amount <= 0:
            raise ValueError("Bet amount must be positive.")
        if bet_amount > balance_before:
            raise ValueError("Bet amount exceeds balance.")
        if not validate_selector(bet_type, selector):
            raise ValueError(f"Invalid selector {selector!r} for bet type {bet_type.value}.")

        won = check_win(bet_type, selector, outcome)
        payout = win_amount(bet_type, bet_amount, won)

        consolation = self.consolation.calculate(
            losing_streak=losing_streak,
            bet_amount=bet_amount,
            balance=balance_before,
            recent_average_bet=recent_average_bet,
        )
        total_win = payout + consolation.amount

        return WagerRound(
            account_id=account_id,
            bet_type=bet_type.value,
            bet_selector=selector,
            bet_amount=bet_amount,
            outcome_number=outcome.number,
            outcome_color=outcome.color,
            won=won,
            win_amount=total_win,
            payout_ratio=payout_ratio(bet_type),
            balance_before=balance_before,
            balance_after=balance_before - bet_amount + total_win,
            played_at=played_at,
            consolation_applied=consolation.applied,
            consolation_amount=consolation.amount,
            losing_streak=losing_streak,
        )

    def play(
        self,
        account_id: int,
        bet_type: BetType,
        selector: int | None,
        bet_amount: int,
        balance_before: int,
        losing_streak: int = 0,
        recent_average_bet: float | None = None,
        played_at: int = 0,
    ) -> WagerRound:
        """Spin the wheel and settle the bet against the drawn outcome."""
        outcome = self.wheel.spin()
        return self.settle(
            account_id=account_id,
            bet_type=bet_type,
            selector=selector,
            bet_amount=bet_amount,
            balance_before=balance_before,
            outcome=outcome,
            losing_streak=losing_streak,
            recent_average_bet=recent_average_bet,
            played_at=played_at,
        )
