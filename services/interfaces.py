"""
Service layer interfaces (ABCs).

These abstract base classes define the contracts the command layer relies
on. Services inherit from their corresponding interface.

Usage:
    class MyService(IMyService):
        def my_method(self, param: str) -> Result[dict]:
            ...
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.models.account import Account, LeaderboardEntry, TransferRecord
    from domain.models.wager import WagerRound
    from services.ledger_service import WorkOutcome, WorkStatus
    from services.result import Result
    from services.transfer_service import TransferQuote


class ILedgerService(ABC):
    """Balances, the work state machine and bailouts."""

    @abstractmethod
    def get_or_create(self, account_id: int, display_name: str | None = None) -> "Account": ...

    @abstractmethod
    def get_balance(self, account_id: int) -> int: ...

    @abstractmethod
    def credit(self, account_id: int, amount: int) -> int: ...

    @abstractmethod
    def debit(self, account_id: int, amount: int) -> bool: ...

    @abstractmethod
    def can_work(self, account_id: int) -> "WorkStatus": ...

    @abstractmethod
    def do_work(self, account_id: int, display_name: str | None = None) -> "Result[WorkOutcome]": ...

    @abstractmethod
    def set_bailout_flag(self, account_id: int, used: bool, reason: str) -> None: ...

    @abstractmethod
    def get_leaderboard(self, limit: int | None = None) -> list["LeaderboardEntry"]: ...


class ITransferService(ABC):
    """Quote-then-confirm peer transfers."""

    @abstractmethod
    def quote_transfer(
        self,
        sender_id: int,
        receiver_id: int,
        amount: int,
        memo: str | None = None,
        receiver_is_bot: bool = False,
    ) -> "Result[TransferQuote]": ...

    @abstractmethod
    def confirm_transfer(self, token: str) -> "Result[TransferRecord]": ...

    @abstractmethod
    def cancel_transfer(self, token: str) -> bool: ...


class IRouletteService(ABC):
    """Roulette rounds and their statistics."""

    @abstractmethod
    def place_bet(
        self,
        account_id: int,
        bet_type,
        selector: int | None,
        amount: int,
        display_name: str | None = None,
    ) -> "Result[WagerRound]": ...

    @abstractmethod
    def record_round(self, wager_round: "WagerRound") -> "WagerRound": ...

    @abstractmethod
    def get_daily_stats(self, account_id: int) -> dict: ...
