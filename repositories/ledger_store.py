"""
SQLite-backed balance ledger.
"""

import logging

from domain.models.account import Account, LeaderboardEntry, WorkSession
from repositories.base_repository import BaseRepository
from repositories.errors import ConcurrencyConflictError
from repositories.interfaces import ILedgerStore

logger = logging.getLogger("pod_bot.repositories.ledger")


class PersistentLedgerStore(BaseRepository, ILedgerStore):
    """
    Source of truth for balances, work timestamps and bailout flags.

    Every balance change is a single conditional UPDATE or runs inside an
    immediate transaction, so two commands on the same account cannot
    interleave between a read and a write.
    """

    def __init__(self, db_path: str, starting_balance: int = 0):
        super().__init__(db_path)
        self.starting_balance = starting_balance

    @staticmethod
    def _row_to_account(row) -> Account:
        return Account(
            account_id=row["account_id"],
            balance=row["balance"],
            display_name=row["display_name"],
            last_work_at=row["last_work_at"],
            bailout_used=bool(row["bailout_used"]),
            bailout_count=row["bailout_count"] or 0,
        )

    def _ensure_account(self, cursor, account_id: int, display_name: str | None = None) -> None:
        cursor.execute(
            """
            INSERT INTO accounts (account_id, display_name, balance)
            VALUES (?, ?, ?)
            ON CONFLICT(account_id) DO UPDATE SET
                display_name = COALESCE(excluded.display_name, accounts.display_name)
            """,
            (account_id, display_name, self.starting_balance),
        )

    def _select_account(self, cursor, account_id: int):
        cursor.execute(
            """
            SELECT account_id, display_name, balance, last_work_at, bailout_used, bailout_count
            FROM accounts
            WHERE account_id = ?
            """,
            (account_id,),
        )
        return cursor.fetchone()

    def get_or_create(self, account_id: int, display_name: str | None = None) -> Account:
        """Return the account, inserting a fresh one on first reference."""
        with self.connection() as conn:
            cursor = conn.cursor()
            self._ensure_account(cursor, account_id, display_name)
            return self._row_to_account(self._select_account(cursor, account_id))

    def get_account(self, account_id: int) -> Account | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            row = self._select_account(cursor, account_id)
            return self._row_to_account(row) if row else None

    def credit(self, account_id: int, amount: int) -> int:
        """
        Add currency to an account.

        Returns:
            The new balance

        Raises:
            ValueError: If amount is not positive
        """
        if amount <= 0:
            raise ValueError("Credit amount must be positive.")

        with self.connection() as conn:
            cursor = conn.cursor()
            self._ensure_account(cursor, account_id)
            cursor.execute(
                """
                UPDATE accounts
                SET balance = balance + ?, updated_at = CURRENT_TIMESTAMP
                WHERE account_id = ?
                """,
                (amount, account_id),
            )
            # Same write transaction as the UPDATE, so no other writer can interleave
            return self._select_account(cursor, account_id)["balance"]

    def debit(self, account_id: int, amount: int) -> bool:
        """
        Remove currency from an account if it holds enough.

        Returns:
            True if debited, False if the balance was too low (unchanged)
        """
        if amount <= 0:
            raise ValueError("Debit amount must be positive.")

        with self.connection() as conn:
            cursor = conn.cursor()
            self._ensure_account(cursor, account_id)
            # Atomic check-and-set: only update if the balance covers the amount
            cursor.execute(
                """
                UPDATE accounts
                SET balance = balance - ?, updated_at = CURRENT_TIMESTAMP
                WHERE account_id = ? AND balance >= ?
                """,
                (amount, account_id, amount),
            )
            return cursor.rowcount > 0

    def claim_work(
        self, account_id: int, now: int, cooldown_seconds: int, reward: int
    ) -> WorkSession | None:
        """
        Atomically check work eligibility and pay the reward.

        Bailout eligibility (balance 0, bailout unused) bypasses the cooldown
        and marks the bailout as used. Otherwise the cooldown must have
        elapsed since last_work_at.

        Args:
            account_id: Worker's account
            now: Current Unix timestamp
            cooldown_seconds: Required gap between work sessions
            reward: Amount to credit

        Returns:
            The WorkSession that was applied, or None if on cooldown
        """
        if reward <= 0:
            raise ValueError("Work reward must be positive.")

        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            self._ensure_account(cursor, account_id)
            account = self._row_to_account(self._select_account(cursor, account_id))

            was_bailout = account.balance == 0 and not account.bailout_used
            cooled_down = account.last_work_at is None or now - account.last_work_at >= cooldown_seconds
            if not was_bailout and not cooled_down:
                return None

            cursor.execute(
                """
                UPDATE accounts
                SET balance = balance + ?,
                    last_work_at = ?,
                    bailout_used = CASE WHEN ? THEN 1 ELSE bailout_used END,
                    bailout_count = bailout_count + ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE account_id = ?
                  AND ((balance = 0 AND bailout_used = 0)
                       OR last_work_at IS NULL
                       OR last_work_at <= ?)
                """,
                (
                    reward,
                    now,
                    1 if was_bailout else 0,
                    1 if was_bailout else 0,
                    account_id,
                    now - cooldown_seconds,
                ),
            )
            if cursor.rowcount == 0:
                raise ConcurrencyConflictError(f"Work claim for {account_id} matched no rows")

            return WorkSession(
                account_id=account_id,
                reward=reward,
                balance_before=account.balance,
                balance_after=account.balance + reward,
                worked_at=now,
                was_bailout=was_bailout,
            )

    def set_bailout_flag(self, account_id: int, used: bool) -> None:
        with self.connection() as conn:
            cursor = conn.cursor()
            self._ensure_account(cursor, account_id)
            cursor.execute(
                """
                UPDATE accounts
                SET bailout_used = ?, updated_at = CURRENT_TIMESTAMP
                WHERE account_id = ?
                """,
                (1 if used else 0, account_id),
            )

    def transfer(self, sender_id: int, receiver_id: int, amount: int, fee: int) -> dict[str, int]:
        """
        Atomically move currency between accounts.

        Sender pays amount + fee, receiver gets amount; the fee is burned.

        Returns:
            Dict with sender/receiver balances before and after

        Raises:
            ValueError: On a self-transfer or non-positive amount
            ConcurrencyConflictError: If the sender can no longer cover amount + fee
        """
        if sender_id == receiver_id:
            raise ValueError("Cannot transfer to the same account.")
        if amount <= 0:
            raise ValueError("Amount must be positive.")
        if fee < 0:
            raise ValueError("Fee cannot be negative.")

        total_cost = amount + fee

        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            self._ensure_account(cursor, sender_id)
            self._ensure_account(cursor, receiver_id)

            sender_before = self._select_account(cursor, sender_id)["balance"]
            receiver_before = self._select_account(cursor, receiver_id)["balance"]

            cursor.execute(
                """
                UPDATE accounts
                SET balance = balance - ?, updated_at = CURRENT_TIMESTAMP
                WHERE account_id = ? AND balance >= ?
                """,
                (total_cost, sender_id, total_cost),
            )
            if cursor.rowcount == 0:
                raise ConcurrencyConflictError(
                    f"Sender {sender_id} balance {sender_before} cannot cover {total_cost}"
                )

            cursor.execute(
                """
                UPDATE accounts
                SET balance = balance + ?, updated_at = CURRENT_TIMESTAMP
                WHERE account_id = ?
                """,
                (amount, receiver_id),
            )

            return {
                "amount": amount,
                "fee": fee,
                "sender_balance_before": sender_before,
                "sender_balance_after": sender_before - total_cost,
                "receiver_balance_before": receiver_before,
                "receiver_balance_after": receiver_before + amount,
            }

    def get_leaderboard(self, limit: int = 10) -> list[LeaderboardEntry]:
        """Accounts with a positive balance, richest first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT account_id, display_name, balance
                FROM accounts
                WHERE balance > 0
                ORDER BY balance DESC, account_id ASC
                LIMIT ?
                """,
                (limit,),
            )
            return [
                LeaderboardEntry(
                    rank=i,
                    account_id=row["account_id"],
                    balance=row["balance"],
                    display_name=row["display_name"],
                )
                for i, row in enumerate(cursor.fetchall(), start=1)
            ]

    def get_rank(self, account_id: int) -> int | None:
        """1-based leaderboard position, or None if the account has nothing."""
        with self.connection() as conn:
            cursor = conn.cursor()
            row = self._select_account(cursor, account_id)
            if not row or row["balance"] <= 0:
                return None
            balance = row["balance"]
            cursor.execute(
                """
                SELECT COUNT(*) AS ahead
                FROM accounts
                WHERE balance > ? OR (balance = ? AND account_id < ?)
                """,
                (balance, balance, account_id),
            )
            return cursor.fetchone()["ahead"] + 1

    def reset_account(self, account_id: int) -> bool:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE accounts
                SET balance = ?, last_work_at = NULL, bailout_used = 0, bailout_count = 0,
                    updated_at = CURRENT_TIMESTAMP
                WHERE account_id = ?
                """,
                (self.starting_balance, account_id),
            )
            return cursor.rowcount > 0

    def reset_all(self) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM accounts")
            return cursor.rowcount
