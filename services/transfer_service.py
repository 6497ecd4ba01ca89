"""
Peer-to-peer transfer protocol (/pay).

A transfer is quoted first and only executed when the sender confirms the
quote. Nothing is held in between, so confirmation re-validates everything
against current state.
"""

import logging
import math
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from config import (
    TRANSFER_BAILOUT_FEE_RATE,
    TRANSFER_CONFIRM_TIMEOUT_SECONDS,
    TRANSFER_COOLDOWN_SECONDS,
    TRANSFER_MAX_AMOUNT,
    TRANSFER_MAX_DAILY_AMOUNT,
    TRANSFER_MAX_DAILY_COUNT,
    TRANSFER_MEMO_MAX_LENGTH,
    TRANSFER_MIN_AMOUNT,
)
from domain.models.account import TransferRecord
from repositories.errors import ConcurrencyConflictError
from services import error_codes
from services.interfaces import ITransferService
from services.ledger_service import LedgerService
from services.recorder_service import GameRecorder
from services.result import Result
from utils.rate_limiter import CooldownTracker

logger = logging.getLogger("pod_bot.services.transfer")


@dataclass
class TransferQuote:
    """Validated, not yet executed transfer awaiting confirmation."""

    token: str
    sender_id: int
    receiver_id: int
    amount: int
    fee: int
    sender_balance: int
    transfers_today: int
    amount_today: int
    created_at: int
    expires_at: int
    memo: str | None = None

    @property
    def total_cost(self) -> int:
        return self.amount + self.fee

    @property
    def fee_applied(self) -> bool:
        return self.fee > 0


@dataclass
class _Checked:
    fee: int
    sender_balance: int
    transfers_today: int
    amount_today: int


class TransferService(ITransferService):
    """
    Validates, quotes and executes transfers.

    Validation order (first failure wins): self-transfer, bot recipient,
    amount range and memo, sender cooldown, balance (amount + fee), daily
    count and amount limits.
    """

    def __init__(
        self,
        ledger_service: LedgerService,
        recorder: GameRecorder,
        min_amount: int | None = None,
        max_amount: int | None = None,
        cooldown_seconds: int | None = None,
        max_daily_count: int | None = None,
        max_daily_amount: int | None = None,
        bailout_fee_rate: float | None = None,
        confirm_timeout_seconds: int | None = None,
        memo_max_length: int | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self.ledger = ledger_service
        self.recorder = recorder
        self.min_amount = min_amount if min_amount is not None else TRANSFER_MIN_AMOUNT
        self.max_amount = max_amount if max_amount is not None else TRANSFER_MAX_AMOUNT
        self.max_daily_count = max_daily_count if max_daily_count is not None else TRANSFER_MAX_DAILY_COUNT
        self.max_daily_amount = max_daily_amount if max_daily_amount is not None else TRANSFER_MAX_DAILY_AMOUNT
        self.bailout_fee_rate = bailout_fee_rate if bailout_fee_rate is not None else TRANSFER_BAILOUT_FEE_RATE
        self.confirm_timeout_seconds = (
            confirm_timeout_seconds if confirm_timeout_seconds is not None else TRANSFER_CONFIRM_TIMEOUT_SECONDS
        )
        self.memo_max_length = memo_max_length if memo_max_length is not None else TRANSFER_MEMO_MAX_LENGTH
        self._clock = clock or time.time
        self.cooldowns = CooldownTracker(
            cooldown_seconds if cooldown_seconds is not None else TRANSFER_COOLDOWN_SECONDS,
            clock=self._clock,
        )

        self._pending: dict[str, TransferQuote] = {}
        # token -> expires_at, so a replayed token is reported as used rather than unknown
        self._consumed: dict[str, int] = {}
        self._lock = threading.Lock()

    def _now(self) -> int:
        return int(self._clock())

    # --- Validation ---

    def calculate_fee(self, amount: int, sender_id: int, receiver_id: int) -> int:
        """ceil(amount * rate) if either party has ever taken a bailout, else 0."""
        sender = self.ledger.get_or_create(sender_id)
        receiver = self.ledger.get_or_create(receiver_id)
        if sender.has_used_bailout or receiver.has_used_bailout:
            return math.ceil(amount * self.bailout_fee_rate)
        return 0

    def _validate(
        self,
        sender_id: int,
        receiver_id: int,
        amount: int,
        memo: str | None,
        receiver_is_bot: bool,
        now: int,
    ) -> Result[_Checked]:
        if sender_id == receiver_id:
            return Result.fail("You cannot send money to yourself.", code=error_codes.SELF_TRANSFER)

        if receiver_is_bot:
            return Result.fail("You cannot send money to bots.", code=error_codes.INVALID_RECIPIENT)

        if amount < self.min_amount or amount > self.max_amount:
            return Result.fail(
                f"Amount must be between {self.min_amount:,} and {self.max_amount:,}.",
                code=error_codes.AMOUNT_OUT_OF_RANGE,
                data={"min_amount": self.min_amount, "max_amount": self.max_amount},
            )

        if memo is not None and len(memo) > self.memo_max_length:
            return Result.fail(
                f"Memo must be {self.memo_max_length} characters or fewer.",
                code=error_codes.VALIDATION_ERROR,
            )

        retry_after = self.cooldowns.remaining(sender_id)
        if retry_after > 0:
            return Result.fail(
                f"Please wait {retry_after}s before sending another transfer.",
                code=error_codes.COOLDOWN_ACTIVE,
                data={"retry_after_seconds": retry_after},
            )

        fee = self.calculate_fee(amount, sender_id, receiver_id)
        total_cost = amount + fee
        sender_balance = self.ledger.get_balance(sender_id)
        if sender_balance < total_cost:
            return Result.fail(
                f"Insufficient balance. You need {total_cost:,} (amount: {amount:,}, fee: {fee:,}). "
                f"You have {sender_balance:,}.",
                code=error_codes.INSUFFICIENT_FUNDS,
                data={"required": total_cost, "balance": sender_balance},
            )

        transfers_today, amount_today = self.recorder.get_daily_transfer_totals(sender_id, now)
        usage = {"transfers_today": transfers_today, "amount_today": amount_today}
        if transfers_today >= self.max_daily_count:
            return Result.fail(
                f"Daily transfer limit reached ({self.max_daily_count} transfers per day). "
                f"Today: {transfers_today} transfers, {amount_today:,} sent.",
                code=error_codes.DAILY_LIMIT_EXCEEDED,
                data={"limit": "count", **usage},
            )
        if amount_today + amount > self.max_daily_amount:
            return Result.fail(
                f"This transfer would exceed the daily limit of {self.max_daily_amount:,}. "
                f"Today: {transfers_today} transfers, {amount_today:,} sent.",
                code=error_codes.DAILY_LIMIT_EXCEEDED,
                data={"limit": "amount", **usage},
            )

        return Result.ok(
            _Checked(
                fee=fee,
                sender_balance=sender_balance,
                transfers_today=transfers_today,
                amount_today=amount_today,
            )
        )

    # --- Quote / confirm ---

    def quote_transfer(
        self,
        sender_id: int,
        receiver_id: int,
        amount: int,
        memo: str | None = None,
        receiver_is_bot: bool = False,
    ) -> Result[TransferQuote]:
        """
        Validate a transfer and register it for confirmation.

        No funds move. The quote expires after the confirmation window.
        """
        now = self._now()
        memo = memo.strip() if memo else None
        checked = self._validate(sender_id, receiver_id, amount, memo, receiver_is_bot, now)
        if not checked:
            return checked

        details = checked.value
        quote = TransferQuote(
            token=uuid.uuid4().hex,
            sender_id=sender_id,
            receiver_id=receiver_id,
            amount=amount,
            fee=details.fee,
            sender_balance=details.sender_balance,
            transfers_today=details.transfers_today,
            amount_today=details.amount_today,
            created_at=now,
            expires_at=now + self.confirm_timeout_seconds,
            memo=memo,
        )
        with self._lock:
            self._pending[quote.token] = quote
        return Result.ok(quote)

    def _consume(self, token: str) -> Result[TransferQuote]:
        with self._lock:
            quote = self._pending.pop(token, None)
            if quote is None:
                if token in self._consumed:
                    return Result.fail(
                        "This transfer has already been processed.", code=error_codes.QUOTE_ALREADY_USED
                    )
                return Result.fail("Transfer not found.", code=error_codes.QUOTE_NOT_FOUND)
            self._consumed[token] = quote.expires_at
            return Result.ok(quote)

    def confirm_transfer(self, token: str) -> Result[TransferRecord]:
        """
        Execute a quoted transfer exactly once.

        The token is consumed before anything else, so a second confirm
        (double click) fails with QUOTE_ALREADY_USED. Balance, fee, cooldown
        and daily limits are checked again against current state.

        Returns:
            Result with the recorded TransferRecord
        """
        consumed = self._consume(token)
        if not consumed:
            return consumed
        quote = consumed.value

        now = self._now()
        if now > quote.expires_at:
            return Result.fail("Transfer confirmation expired.", code=error_codes.QUOTE_EXPIRED)

        balances = None
        fee = quote.fee
        for attempt in range(2):
            checked = self._validate(quote.sender_id, quote.receiver_id, quote.amount, quote.memo, False, now)
            if not checked:
                return checked
            fee = checked.value.fee
            try:
                balances = self.ledger.transfer(quote.sender_id, quote.receiver_id, quote.amount, fee)
                break
            except ConcurrencyConflictError:
                logger.info(f"Transfer conflict for {quote.sender_id} (attempt {attempt + 1})")

        if balances is None:
            return Result.fail("Insufficient balance.", code=error_codes.INSUFFICIENT_FUNDS)

        record = TransferRecord(
            sender_id=quote.sender_id,
            receiver_id=quote.receiver_id,
            amount=quote.amount,
            fee=fee,
            sender_balance_before=balances["sender_balance_before"],
            sender_balance_after=balances["sender_balance_after"],
            receiver_balance_before=balances["receiver_balance_before"],
            receiver_balance_after=balances["receiver_balance_after"],
            created_at=now,
            memo=quote.memo,
        )
        self.cooldowns.mark(quote.sender_id)

        try:
            record.transaction_id = self.recorder.record_transfer(record)
        except Exception as exc:
            # Funds already moved; a missing row only loosens today's limits
            logger.error(f"Failed to record transfer {quote.sender_id} -> {quote.receiver_id}: {exc}")

        logger.info(
            f"Transfer executed: {quote.sender_id} -> {quote.receiver_id} "
            f"amount={quote.amount} fee={fee}"
        )
        return Result.ok(record)

    def cancel_transfer(self, token: str) -> bool:
        """Drop a pending quote. Returns False if it was already confirmed, cancelled or unknown."""
        with self._lock:
            quote = self._pending.pop(token, None)
            if quote is None:
                return False
            self._consumed[token] = quote.expires_at
            return True

    def get_pending(self, token: str) -> TransferQuote | None:
        with self._lock:
            return self._pending.get(token)

    def purge_expired(self) -> int:
        """Forget expired quotes and old consumed tokens. Returns quotes dropped."""
        now = self._now()
        with self._lock:
            expired = [t for t, q in self._pending.items() if q.expires_at < now]
            for token in expired:
                del self._pending[token]
            for token in [t for t, exp in self._consumed.items() if exp < now]:
                del self._consumed[token]
            return len(expired)

    def get_daily_usage(self, sender_id: int) -> dict:
        count, amount = self.recorder.get_daily_transfer_totals(sender_id, self._now())
        return {
            "transfers_today": count,
            "amount_today": amount,
            "transfers_remaining": max(0, self.max_daily_count - count),
            "amount_remaining": max(0, self.max_daily_amount - amount),
        }

    def get_recent_transfers(self, account_id: int, limit: int = 10) -> list[TransferRecord]:
        return self.recorder.get_recent_transfers(account_id, limit)
