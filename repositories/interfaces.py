"""
Abstract repository interfaces for data access.

These interfaces define the contracts implemented by both the SQLite
stores and their in-memory counterparts, so services can be handed
either one.
"""

from abc import ABC, abstractmethod

from domain.models.account import Account, LeaderboardEntry, TransferRecord, WorkSession
from domain.models.wager import WagerRound


class ILedgerStore(ABC):
    @abstractmethod
    def get_or_create(self, account_id: int, display_name: str | None = None) -> Account: ...

    @abstractmethod
    def get_account(self, account_id: int) -> Account | None: ...

    @abstractmethod
    def credit(self, account_id: int, amount: int) -> int: ...

    @abstractmethod
    def debit(self, account_id: int, amount: int) -> bool: ...

    @abstractmethod
    def claim_work(
        self, account_id: int, now: int, cooldown_seconds: int, reward: int
    ) -> WorkSession | None: ...

    @abstractmethod
    def set_bailout_flag(self, account_id: int, used: bool) -> None: ...

    @abstractmethod
    def transfer(self, sender_id: int, receiver_id: int, amount: int, fee: int) -> dict[str, int]: ...

    @abstractmethod
    def get_leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]: ...

    @abstractmethod
    def get_rank(self, account_id: int) -> int | None: ...

    @abstractmethod
    def reset_account(self, account_id: int) -> bool: ...

    @abstractmethod
    def reset_all(self) -> int: ...


class IHistoryStore(ABC):
    @abstractmethod
    def add_work_session(self, session: WorkSession) -> int: ...

    @abstractmethod
    def get_work_sessions(self, account_id: int, limit: int = 10) -> list[WorkSession]: ...

    @abstractmethod
    def add_transfer(self, record: TransferRecord) -> int: ...

    @abstractmethod
    def get_transfers(self, account_id: int, limit: int = 10) -> list[TransferRecord]: ...

    @abstractmethod
    def get_transfer_totals(self, sender_id: int, since: int, until: int) -> tuple[int, int]: ...

    @abstractmethod
    def add_round(self, wager_round: WagerRound) -> int: ...

    @abstractmethod
    def get_recent_rounds(self, account_id: int, limit: int = 10) -> list[WagerRound]: ...

    @abstractmethod
    def get_round_stats(
        self, account_id: int | None = None, since: int | None = None, until: int | None = None
    ) -> dict: ...

    @abstractmethod
    def count_players(self) -> int: ...

    @abstractmethod
    def get_top_winners(self, limit: int = 10) -> list[dict]: ...

    @abstractmethod
    def get_bet_type_stats(self) -> list[dict]: ...
