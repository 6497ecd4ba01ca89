"""
Balance ledger service: balances, the work cooldown state machine and bailouts.
"""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from config import (
    LEADERBOARD_DEFAULT_LIMIT,
    WORK_COOLDOWN_SECONDS,
    WORK_REWARD_MAX,
    WORK_REWARD_MIN,
)
from domain.models.account import Account, LeaderboardEntry, WorkSession
from repositories.errors import ConcurrencyConflictError
from repositories.interfaces import ILedgerStore
from services import error_codes
from services.interfaces import ILedgerService
from services.result import Result

logger = logging.getLogger("pod_bot.services.ledger")


class WorkState(str, Enum):
    READY = "ready"
    COOLDOWN = "cooldown"
    BAILOUT_ELIGIBLE = "bailout_eligible"


@dataclass
class WorkStatus:
    """Answer to "can this account work right now?"."""

    state: WorkState
    remaining_seconds: int = 0
    available_at: int | None = None  # Unix timestamp, set while on cooldown

    @property
    def can_work(self) -> bool:
        return self.state != WorkState.COOLDOWN


@dataclass
class WorkOutcome:
    """A successful work action."""

    reward: int
    balance_before: int
    new_balance: int
    was_bailout: bool
    next_work_at: int


class LedgerService(ILedgerService):
    """
    Service for balance bookkeeping.

    Business conditions (cooldown, insufficient funds) come back as return
    values; only storage failures raise.
    """

    def __init__(
        self,
        ledger_store: ILedgerStore,
        recorder=None,
        cooldown_seconds: int | None = None,
        reward_min: int | None = None,
        reward_max: int | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self.ledger_store = ledger_store
        self.recorder = recorder
        self.cooldown_seconds = cooldown_seconds if cooldown_seconds is not None else WORK_COOLDOWN_SECONDS
        self.reward_min = reward_min if reward_min is not None else WORK_REWARD_MIN
        self.reward_max = reward_max if reward_max is not None else WORK_REWARD_MAX
        if self.reward_min <= 0 or self.reward_max < self.reward_min:
            raise ValueError("Work reward range must be positive and ordered.")
        self.rng = rng or random.Random()
        self._clock = clock or time.time

    def _now(self) -> int:
        return int(self._clock())

    # --- Balances ---

    def get_or_create(self, account_id: int, display_name: str | None = None) -> Account:
        return self.ledger_store.get_or_create(account_id, display_name)

    def get_balance(self, account_id: int) -> int:
        return self.ledger_store.get_or_create(account_id).balance

    def credit(self, account_id: int, amount: int) -> int:
        """Add amount (> 0) and return the new balance."""
        return self.ledger_store.credit(account_id, amount)

    def debit(self, account_id: int, amount: int) -> bool:
        """Remove amount (> 0) if covered. False leaves the balance untouched."""
        return self.ledger_store.debit(account_id, amount)

    def transfer(self, sender_id: int, receiver_id: int, amount: int, fee: int) -> dict[str, int]:
        """
        Atomically debit amount + fee from the sender and credit amount to the receiver.

        Raises:
            ConcurrencyConflictError: If the sender no longer covers amount + fee
        """
        return self.ledger_store.transfer(sender_id, receiver_id, amount, fee)

    # --- Work ---

    def _status_for(self, account: Account, now: int) -> WorkStatus:
        if account.balance == 0 and not account.bailout_used:
            return WorkStatus(state=WorkState.BAILOUT_ELIGIBLE)
        if account.last_work_at is None:
            return WorkStatus(state=WorkState.READY)
        elapsed = now - account.last_work_at
        if elapsed >= self.cooldown_seconds:
            return WorkStatus(state=WorkState.READY)
        return WorkStatus(
            state=WorkState.COOLDOWN,
            remaining_seconds=self.cooldown_seconds - elapsed,
            available_at=account.last_work_at + self.cooldown_seconds,
        )

    def can_work(self, account_id: int) -> WorkStatus:
        """
        Evaluate the work state machine for an account.

        Bailout eligibility (balance 0, bailout unused) is checked first and
        bypasses the cooldown.
        """
        account = self.ledger_store.get_or_create(account_id)
        return self._status_for(account, self._now())

    def do_work(self, account_id: int, display_name: str | None = None) -> Result[WorkOutcome]:
        """
        Perform a work action.

        Eligibility check and payout happen in one atomic store operation.

        Returns:
            Result with WorkOutcome, or COOLDOWN_ACTIVE with
            data["remaining_seconds"] and data["available_at"]
        """
        self.ledger_store.get_or_create(account_id, display_name)
        reward = self.rng.randint(self.reward_min, self.reward_max)
        now = self._now()

        try:
            session = self.ledger_store.claim_work(account_id, now, self.cooldown_seconds, reward)
        except ConcurrencyConflictError:
            logger.info(f"Work claim conflict for {account_id}, retrying once")
            session = self.ledger_store.claim_work(account_id, now, self.cooldown_seconds, reward)

        if session is None:
            status = self.can_work(account_id)
            return Result.fail(
                "You need to rest before working again.",
                code=error_codes.COOLDOWN_ACTIVE,
                data={
                    "remaining_seconds": status.remaining_seconds,
                    "available_at": status.available_at,
                },
            )

        if session.was_bailout:
            logger.info(f"Account {account_id} used bankruptcy bailout (reward {reward})")
        else:
            logger.info(f"Account {account_id} worked for {reward}")

        self._record_work(session)

        return Result.ok(
            WorkOutcome(
                reward=session.reward,
                balance_before=session.balance_before,
                new_balance=session.balance_after,
                was_bailout=session.was_bailout,
                next_work_at=now + self.cooldown_seconds,
            )
        )

    def _record_work(self, session: WorkSession) -> None:
        if not self.recorder:
            return
        # History is an audit trail; the reward has already been paid
        try:
            self.recorder.record_work_session(session)
        except Exception as exc:
            logger.warning(f"Failed to record work session for {session.account_id}: {exc}")

    # --- Bailout ---

    def set_bailout_flag(self, account_id: int, used: bool, reason: str) -> None:
        """
        Set the bailout flag explicitly.

        Outside of a bailout work action (which sets the flag inside the
        same atomic claim) this is the only writer of bailout_used.
        """
        self.ledger_store.set_bailout_flag(account_id, used)
        logger.info(
            f"Bailout flag for {account_id} set to {'used' if used else 'available'} (reason: {reason})"
        )

    # --- Leaderboard ---

    def get_leaderboard(self, limit: int | None = None) -> list[LeaderboardEntry]:
        return self.ledger_store.get_leaderboard(limit if limit is not None else LEADERBOARD_DEFAULT_LIMIT)

    def get_rank(self, account_id: int) -> int | None:
        return self.ledger_store.get_rank(account_id)

    # --- Administration ---

    def reset_account(self, account_id: int) -> bool:
        reset = self.ledger_store.reset_account(account_id)
        logger.warning(f"Account {account_id} reset by administrator (existed={reset})")
        return reset

    def reset_all(self) -> int:
        count = self.ledger_store.reset_all()
        logger.warning(f"All accounts reset by administrator ({count} removed)")
        return count
