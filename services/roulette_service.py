"""
Roulette wagering service.

Takes the stake from the ledger, plays the round through the pure
WageringEngine, pays out, handles the bankruptcy trigger and records
the round.
"""

import logging
import time
from collections.abc import Callable

from config import ROULETTE_MAX_BET, ROULETTE_MIN_BET
from domain.models.wager import WagerRound
from domain.services.consolation_service import ConsolationResult
from domain.services.roulette_wheel import (
    BET_FAMILIES,
    BET_TYPE_LABELS,
    BetType,
    house_edge,
    parse_bet,
    payout_ratio,
    win_probability,
)
from domain.services.wagering_engine import WageringEngine
from services import error_codes
from services.interfaces import IRouletteService
from services.ledger_service import LedgerService
from services.recorder_service import GameRecorder
from services.result import Result

logger = logging.getLogger("pod_bot.services.roulette")

# Bet amount sentinel meaning "everything I have"
ALL_IN = -1


class RouletteService(IRouletteService):
    """
    Orchestrates one roulette round against the ledger and recorder.

    The draw happens immediately when the bet is placed.
    """

    def __init__(
        self,
        ledger_service: LedgerService,
        recorder: GameRecorder,
        engine: WageringEngine | None = None,
        min_bet: int | None = None,
        max_bet: int | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self.ledger = ledger_service
        self.recorder = recorder
        self.engine = engine or WageringEngine()
        self.min_bet = min_bet if min_bet is not None else ROULETTE_MIN_BET
        self.max_bet = max_bet if max_bet is not None else ROULETTE_MAX_BET
        self._clock = clock or time.time

    def _now(self) -> int:
        return int(self._clock())

    def _validate_bet(self, bet_type, selector: int | None) -> Result[tuple[BetType, int | None]]:
        """Resolve (category, selector) to a concrete bet, or explain why not."""
        parsed = parse_bet(bet_type, selector)
        if parsed is not None:
            return Result.ok(parsed)

        key = bet_type.value if isinstance(bet_type, BetType) else str(bet_type).strip().lower()
        if key in BET_FAMILIES:
            return Result.fail(f"Pick which {key}: 1, 2 or 3.", code=error_codes.INVALID_BET)
        if key == BetType.NUMBER.value:
            return Result.fail("Pick a number between 0 and 36.", code=error_codes.INVALID_BET)
        if parse_bet(key) is not None:
            return Result.fail(f"A {key} bet takes no number.", code=error_codes.INVALID_BET)
        return Result.fail(f"Unknown bet type: {bet_type}", code=error_codes.INVALID_BET)

    def place_bet(
        self,
        account_id: int,
        bet_type: BetType | str,
        selector: int | None,
        amount: int,
        display_name: str | None = None,
    ) -> Result[WagerRound]:
        """
        Place a bet and resolve it immediately.

        Args:
            account_id: Bettor
            bet_type: BetType, its string value, or a "dozen"/"column" category
            selector: Pocket 0-36 for straight-number bets, 1-3 for a dozen or
                column category, None otherwise
            amount: Stake, or ALL_IN (-1) for the whole balance
            display_name: Optional name to store on the account

        Returns:
            Result with the recorded WagerRound, or INVALID_BET /
            INSUFFICIENT_FUNDS
        """
        validated = self._validate_bet(bet_type, selector)
        if not validated:
            return validated
        parsed_type, selector = validated.value

        account = self.ledger.get_or_create(account_id, display_name)
        balance_before = account.balance

        if amount == ALL_IN:
            if balance_before <= 0:
                return Result.fail("You have nothing to bet.", code=error_codes.INSUFFICIENT_FUNDS)
            amount = balance_before
        elif amount < self.min_bet or amount > self.max_bet:
            return Result.fail(
                f"Bet must be between {self.min_bet:,} and {self.max_bet:,} (or all-in).",
                code=error_codes.INVALID_BET,
                data={"min_bet": self.min_bet, "max_bet": self.max_bet},
            )

        if amount > balance_before:
            return Result.fail(
                f"Insufficient balance. You have {balance_before:,}.",
                code=error_codes.INSUFFICIENT_FUNDS,
                data={"balance": balance_before},
            )
        is_all_in = amount == balance_before

        # Read history before this round is appended
        losing_streak = self.recorder.get_losing_streak(account_id)
        recent_average_bet = self.recorder.get_recent_average_bet(account_id)

        if not self.ledger.debit(account_id, amount):
            return Result.fail("Insufficient balance.", code=error_codes.INSUFFICIENT_FUNDS)

        wager_round = self.engine.play(
            account_id=account_id,
            bet_type=parsed_type,
            selector=selector,
            bet_amount=amount,
            balance_before=balance_before,
            losing_streak=losing_streak,
            recent_average_bet=recent_average_bet,
            played_at=self._now(),
        )

        if wager_round.win_amount > 0:
            new_balance = self.ledger.credit(account_id, wager_round.win_amount)
        else:
            new_balance = self.ledger.get_balance(account_id)
        # Ledger is authoritative if another command touched the account meanwhile
        wager_round.balance_after = new_balance

        if is_all_in and not wager_round.won and new_balance == 0:
            self.ledger.set_bailout_flag(account_id, used=False, reason="all_in_loss")

        self.record_round(wager_round)

        logger.info(
            f"Roulette {account_id}: {parsed_type.value}"
            f"{f' {selector}' if selector is not None else ''} for {amount} -> "
            f"{wager_round.outcome_number} {wager_round.outcome_color}, "
            f"{'won' if wager_round.won else 'lost'}, paid {wager_round.win_amount}"
            f"{f' (consolation {wager_round.consolation_amount})' if wager_round.consolation_applied else ''}"
        )
        return Result.ok(wager_round)

    def record_round(self, wager_round: WagerRound) -> WagerRound:
        """Append a round to history and return it with its round_id set."""
        self.recorder.record_round(wager_round)
        return wager_round

    # --- Odds and consolation preview ---

    def get_odds_table(self) -> list[dict]:
        """Payout and win chance per bet type, for the odds screen."""
        return [
            {
                "bet_type": bet_type.value,
                "label": BET_TYPE_LABELS[bet_type],
                "payout_ratio": payout_ratio(bet_type),
                "win_probability": win_probability(bet_type),
            }
            for bet_type in BetType
        ]

    def get_house_edge(self) -> float:
        return house_edge()

    def get_consolation_table(self) -> list[tuple[int, int]]:
        return self.engine.consolation.table()

    def preview_consolation(self, account_id: int, bet_amount: int) -> ConsolationResult:
        """Consolation the account would receive on its next round at this stake."""
        return self.engine.consolation.calculate(
            losing_streak=self.recorder.get_losing_streak(account_id),
            bet_amount=bet_amount,
            balance=self.ledger.get_balance(account_id),
            recent_average_bet=self.recorder.get_recent_average_bet(account_id),
        )

    # --- Statistics ---

    def get_losing_streak(self, account_id: int) -> int:
        return self.recorder.get_losing_streak(account_id)

    def get_recent_rounds(self, account_id: int, limit: int = 10) -> list[WagerRound]:
        return self.recorder.get_recent_rounds(account_id, limit)

    def get_daily_stats(self, account_id: int) -> dict:
        return self.recorder.get_daily_stats(account_id)

    def get_user_stats(self, account_id: int) -> dict:
        return self.recorder.get_user_stats(account_id)

    def get_global_stats(self) -> dict:
        return self.recorder.get_global_stats()

    def get_top_winners(self, limit: int = 10) -> list[dict]:
        return self.recorder.get_top_winners(limit)

    def get_bet_type_stats(self) -> list[dict]:
        return self.recorder.get_bet_type_stats()
