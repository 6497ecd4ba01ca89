"""
In-memory ledger and history stores.

Same contract as the SQLite stores, no durability: everything is lost on
restart. Used when the database cannot be reached, and handy in tests.
"""

import threading
from dataclasses import replace

from domain.models.account import Account, LeaderboardEntry, TransferRecord, WorkSession
from domain.models.wager import WagerRound
from repositories.errors import ConcurrencyConflictError
from repositories.interfaces import IHistoryStore, ILedgerStore


class VolatileLedgerStore(ILedgerStore):
    """Dict-backed ledger. Every public method holds the lock for its whole read-modify-write."""

    def __init__(self, starting_balance: int = 0):
        self.starting_balance = starting_balance
        self._accounts: dict[int, Account] = {}
        self._lock = threading.RLock()

    def _ensure(self, account_id: int, display_name: str | None = None) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            account = Account(account_id=account_id, balance=self.starting_balance, display_name=display_name)
            self._accounts[account_id] = account
        elif display_name is not None:
            account.display_name = display_name
        return account

    def get_or_create(self, account_id: int, display_name: str | None = None) -> Account:
        with self._lock:
            return replace(self._ensure(account_id, display_name))

    def get_account(self, account_id: int) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account else None

    def credit(self, account_id: int, amount: int) -> int:
        if amount <= 0:
            raise ValueError("Credit amount must be positive.")
        with self._lock:
            account = self._ensure(account_id)
            account.balance += amount
            return account.balance

    def debit(self, account_id: int, amount: int) -> bool:
        if amount <= 0:
            raise ValueError("Debit amount must be positive.")
        with self._lock:
            account = self._ensure(account_id)
            if account.balance < amount:
                return False
            account.balance -= amount
            return True

    def claim_work(
        self, account_id: int, now: int, cooldown_seconds: int, reward: int
    ) -> WorkSession | None:
        if reward <= 0:
            raise ValueError("Work reward must be positive.")
        with self._lock:
            account = self._ensure(account_id)
            was_bailout = account.balance == 0 and not account.bailout_used
            cooled_down = account.last_work_at is None or now - account.last_work_at >= cooldown_seconds
            if not was_bailout and not cooled_down:
                return None

            balance_before = account.balance
            account.balance += reward
            account.last_work_at = now
            if was_bailout:
                account.bailout_used = True
                account.bailout_count += 1

            return WorkSession(
                account_id=account_id,
                reward=reward,
                balance_before=balance_before,
                balance_after=account.balance,
                worked_at=now,
                was_bailout=was_bailout,
            )

    def set_bailout_flag(self, account_id: int, used: bool) -> None:
        with self._lock:
            self._ensure(account_id).bailout_used = used

    def transfer(self, sender_id: int, receiver_id: int, amount: int, fee: int) -> dict[str, int]:
        if sender_id == receiver_id:
            raise ValueError("Cannot transfer to the same account.")
        if amount <= 0:
            raise ValueError("Amount must be positive.")
        if fee < 0:
            raise ValueError("Fee cannot be negative.")

        total_cost = amount + fee
        with self._lock:
            sender = self._ensure(sender_id)
            receiver = self._ensure(receiver_id)
            if sender.balance < total_cost:
                raise ConcurrencyConflictError(
                    f"Sender {sender_id} balance {sender.balance} cannot cover {total_cost}"
                )

            sender_before = sender.balance
            receiver_before = receiver.balance
            sender.balance -= total_cost
            receiver.balance += amount

            return {
                "amount": amount,
                "fee": fee,
                "sender_balance_before": sender_before,
                "sender_balance_after": sender.balance,
                "receiver_balance_before": receiver_before,
                "receiver_balance_after": receiver.balance,
            }

    def _ranked(self) -> list[Account]:
        positive = [a for a in self._accounts.values() if a.balance > 0]
        return sorted(positive, key=lambda a: (-a.balance, a.account_id))

    def get_leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        with self._lock:
            return [
                LeaderboardEntry(
                    rank=i,
                    account_id=a.account_id,
                    balance=a.balance,
                    display_name=a.display_name,
                )
                for i, a in enumerate(self._ranked()[:limit], start=1)
            ]

    def get_rank(self, account_id: int) -> int | None:
        with self._lock:
            for i, account in enumerate(self._ranked(), start=1):
                if account.account_id == account_id:
                    return i
            return None

    def reset_account(self, account_id: int) -> bool:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return False
            account.balance = self.starting_balance
            account.last_work_at = None
            account.bailout_used = False
            account.bailout_count = 0
            return True

    def reset_all(self) -> int:
        with self._lock:
            count = len(self._accounts)
            self._accounts.clear()
            return count


class VolatileHistoryStore(IHistoryStore):
    """List-backed history with the same queries as the SQLite store."""

    def __init__(self):
        self._work_sessions: list[WorkSession] = []
        self._transfers: list[TransferRecord] = []
        self._rounds: list[WagerRound] = []
        self._lock = threading.RLock()

    def add_work_session(self, session: WorkSession) -> int:
        with self._lock:
            session_id = len(self._work_sessions) + 1
            self._work_sessions.append(replace(session, session_id=session_id))
            return session_id

    def get_work_sessions(self, account_id: int, limit: int = 10) -> list[WorkSession]:
        with self._lock:
            rows = [s for s in self._work_sessions if s.account_id == account_id]
            rows.sort(key=lambda s: (s.worked_at, s.session_id), reverse=True)
            return [replace(s) for s in rows[:limit]]

    def add_transfer(self, record: TransferRecord) -> int:
        with self._lock:
            transaction_id = len(self._transfers) + 1
            self._transfers.append(replace(record, transaction_id=transaction_id))
            return transaction_id

    def get_transfers(self, account_id: int, limit: int = 10) -> list[TransferRecord]:
        with self._lock:
            rows = [t for t in self._transfers if account_id in (t.sender_id, t.receiver_id)]
            rows.sort(key=lambda t: (t.created_at, t.transaction_id), reverse=True)
            return [replace(t) for t in rows[:limit]]

    def get_transfer_totals(self, sender_id: int, since: int, until: int) -> tuple[int, int]:
        with self._lock:
            rows = [
                t
                for t in self._transfers
                if t.sender_id == sender_id
                and t.transaction_type == "transfer"
                and since <= t.created_at < until
            ]
            return len(rows), sum(t.amount for t in rows)

    def add_round(self, wager_round: WagerRound) -> int:
        with self._lock:
            round_id = len(self._rounds) + 1
            self._rounds.append(replace(wager_round, round_id=round_id))
            return round_id

    def get_recent_rounds(self, account_id: int, limit: int = 10) -> list[WagerRound]:
        with self._lock:
            rows = [r for r in self._rounds if r.account_id == account_id]
            rows.sort(key=lambda r: (r.played_at, r.round_id), reverse=True)
            return [replace(r) for r in rows[:limit]]

    def get_round_stats(
        self, account_id: int | None = None, since: int | None = None, until: int | None = None
    ) -> dict:
        with self._lock:
            rows = [
                r
                for r in self._rounds
                if (account_id is None or r.account_id == account_id)
                and (since is None or r.played_at >= since)
                and (until is None or r.played_at < until)
            ]
            wins = sum(1 for r in rows if r.won)
            return {
                "games_played": len(rows),
                "wins": wins,
                "losses": len(rows) - wins,
                "total_bet": sum(r.bet_amount for r in rows),
                "total_won": sum(r.win_amount for r in rows),
                "consolation_total": sum(r.consolation_amount for r in rows),
            }

    def count_players(self) -> int:
        with self._lock:
            return len({r.account_id for r in self._rounds})

    def get_top_winners(self, limit: int = 10) -> list[dict]:
        with self._lock:
            totals: dict[int, dict] = {}
            for r in self._rounds:
                entry = totals.setdefault(
                    r.account_id,
                    {"account_id": r.account_id, "games_played": 0, "total_won": 0, "net_profit": 0},
                )
                entry["games_played"] += 1
                entry["total_won"] += r.win_amount
                entry["net_profit"] += r.win_amount - r.bet_amount
            winners = [e for e in totals.values() if e["net_profit"] > 0]
            winners.sort(key=lambda e: (-e["net_profit"], e["account_id"]))
            return winners[:limit]

    def get_bet_type_stats(self) -> list[dict]:
        with self._lock:
            stats: dict[str, dict] = {}
            for r in self._rounds:
                entry = stats.setdefault(
                    r.bet_type,
                    {"bet_type": r.bet_type, "games_played": 0, "wins": 0, "total_bet": 0, "total_won": 0},
                )
                entry["games_played"] += 1
                entry["wins"] += 1 if r.won else 0
                entry["total_bet"] += r.bet_amount
                entry["total_won"] += r.win_amount
            return sorted(stats.values(), key=lambda e: (-e["games_played"], e["bet_type"]))
