"""
SQLite-backed append-only history: work sessions, transfers and roulette rounds.
"""

from domain.models.account import TransferRecord, WorkSession
from domain.models.wager import WagerRound
from repositories.base_repository import BaseRepository
from repositories.interfaces import IHistoryStore


class PersistentHistoryStore(BaseRepository, IHistoryStore):
    """
    Repository for ledger history.

    Rows are only ever inserted; reads feed streaks, daily limits and stats.
    """

    @staticmethod
    def _row_to_round(row) -> WagerRound:
        return WagerRound(
            round_id=row["round_id"],
            account_id=row["account_id"],
            bet_type=row["bet_type"],
            bet_selector=row["bet_selector"],
            bet_amount=row["bet_amount"],
            outcome_number=row["outcome_number"],
            outcome_color=row["outcome_color"],
            won=bool(row["won"]),
            win_amount=row["win_amount"],
            payout_ratio=row["payout_ratio"],
            balance_before=row["balance_before"],
            balance_after=row["balance_after"],
            played_at=row["played_at"],
            consolation_applied=bool(row["consolation_applied"]),
            consolation_amount=row["consolation_amount"],
            losing_streak=row["losing_streak"],
        )

    @staticmethod
    def _row_to_transfer(row) -> TransferRecord:
        return TransferRecord(
            transaction_id=row["transaction_id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            amount=row["amount"],
            fee=row["fee"],
            sender_balance_before=row["sender_balance_before"],
            sender_balance_after=row["sender_balance_after"],
            receiver_balance_before=row["receiver_balance_before"],
            receiver_balance_after=row["receiver_balance_after"],
            created_at=row["created_at"],
            memo=row["memo"],
            transaction_type=row["transaction_type"],
        )

    # --- Work sessions ---

    def add_work_session(self, session: WorkSession) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO work_sessions
                    (account_id, reward, balance_before, balance_after, was_bailout, worked_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    session.account_id,
                    session.reward,
                    session.balance_before,
                    session.balance_after,
                    1 if session.was_bailout else 0,
                    session.worked_at,
                ),
            )
            return cursor.lastrowid

    def get_work_sessions(self, account_id: int, limit: int = 10) -> list[WorkSession]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT session_id, account_id, reward, balance_before, balance_after,
                       was_bailout, worked_at
                FROM work_sessions
                WHERE account_id = ?
                ORDER BY worked_at DESC, session_id DESC
                LIMIT ?
                """,
                (account_id, limit),
            )
            return [
                WorkSession(
                    session_id=row["session_id"],
                    account_id=row["account_id"],
                    reward=row["reward"],
                    balance_before=row["balance_before"],
                    balance_after=row["balance_after"],
                    was_bailout=bool(row["was_bailout"]),
                    worked_at=row["worked_at"],
                )
                for row in cursor.fetchall()
            ]

    # --- Transfers ---

    def add_transfer(self, record: TransferRecord) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO transactions
                    (sender_id, receiver_id, amount, fee, transaction_type, memo,
                     sender_balance_before, sender_balance_after,
                     receiver_balance_before, receiver_balance_after, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.sender_id,
                    record.receiver_id,
                    record.amount,
                    record.fee,
                    record.transaction_type,
                    record.memo,
                    record.sender_balance_before,
                    record.sender_balance_after,
                    record.receiver_balance_before,
                    record.receiver_balance_after,
                    record.created_at,
                ),
            )
            return cursor.lastrowid

    def get_transfers(self, account_id: int, limit: int = 10) -> list[TransferRecord]:
        """Transfers sent or received by an account, newest first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT *
                FROM transactions
                WHERE sender_id = ? OR receiver_id = ?
                ORDER BY created_at DESC, transaction_id DESC
                LIMIT ?
                """,
                (account_id, account_id, limit),
            )
            return [self._row_to_transfer(row) for row in cursor.fetchall()]

    def get_transfer_totals(self, sender_id: int, since: int, until: int) -> tuple[int, int]:
        """
        Count and sum of a sender's transfers in [since, until).

        Returns:
            (transfer_count, total_amount)
        """
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT COUNT(*) AS transfer_count, COALESCE(SUM(amount), 0) AS total_amount
                FROM transactions
                WHERE sender_id = ? AND transaction_type = 'transfer'
                  AND created_at >= ? AND created_at < ?
                """,
                (sender_id, since, until),
            )
            row = cursor.fetchone()
            return row["transfer_count"], row["total_amount"]

    # --- Roulette rounds ---

    def add_round(self, wager_round: WagerRound) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO wager_rounds
                    (account_id, bet_type, bet_selector, bet_amount, outcome_number, outcome_color,
                     won, win_amount, payout_ratio, consolation_applied, consolation_amount,
                     losing_streak, balance_before, balance_after, played_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    wager_round.account_id,
                    wager_round.bet_type,
                    wager_round.bet_selector,
                    wager_round.bet_amount,
                    wager_round.outcome_number,
                    wager_round.outcome_color,
                    1 if wager_round.won else 0,
                    wager_round.win_amount,
                    wager_round.payout_ratio,
                    1 if wager_round.consolation_applied else 0,
                    wager_round.consolation_amount,
                    wager_round.losing_streak,
                    wager_round.balance_before,
                    wager_round.balance_after,
                    wager_round.played_at,
                ),
            )
            return cursor.lastrowid

    def get_recent_rounds(self, account_id: int, limit: int = 10) -> list[WagerRound]:
        """Most recent rounds for an account, newest first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT *
                FROM wager_rounds
                WHERE account_id = ?
                ORDER BY played_at DESC, round_id DESC
                LIMIT ?
                """,
                (account_id, limit),
            )
            return [self._row_to_round(row) for row in cursor.fetchall()]

    def get_round_stats(
        self, account_id: int | None = None, since: int | None = None, until: int | None = None
    ) -> dict:
        """
        Aggregate roulette statistics.

        Args:
            account_id: Restrict to one account (None for everyone)
            since: Inclusive lower bound on played_at
            until: Exclusive upper bound on played_at

        Returns:
            Dict with games_played, wins, losses, total_bet, total_won, consolation_total
        """
        clauses = []
        params: list = []
        if account_id is not None:
            clauses.append("account_id = ?")
            params.append(account_id)
        if since is not None:
            clauses.append("played_at >= ?")
            params.append(since)
        if until is not None:
            clauses.append("played_at < ?")
            params.append(until)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT COUNT(*) AS games_played,
                       COALESCE(SUM(won), 0) AS wins,
                       COALESCE(SUM(bet_amount), 0) AS total_bet,
                       COALESCE(SUM(win_amount), 0) AS total_won,
                       COALESCE(SUM(consolation_amount), 0) AS consolation_total
                FROM wager_rounds
                {where}
                """,
                params,
            )
            row = cursor.fetchone()
            return {
                "games_played": row["games_played"],
                "wins": row["wins"],
                "losses": row["games_played"] - row["wins"],
                "total_bet": row["total_bet"],
                "total_won": row["total_won"],
                "consolation_total": row["consolation_total"],
            }

    def count_players(self) -> int:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(DISTINCT account_id) FROM wager_rounds")
            return cursor.fetchone()[0]

    def get_top_winners(self, limit: int = 10) -> list[dict]:
        """Accounts ranked by roulette net profit (won minus bet)."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT account_id,
                       COUNT(*) AS games_played,
                       SUM(win_amount) AS total_won,
                       SUM(win_amount) - SUM(bet_amount) AS net_profit
                FROM wager_rounds
                GROUP BY account_id
                HAVING net_profit > 0
                ORDER BY net_profit DESC, account_id ASC
                LIMIT ?
                """,
                (limit,),
            )
            return [dict(row) for row in cursor.fetchall()]

    def get_bet_type_stats(self) -> list[dict]:
        """Per bet-type counts and totals, most played first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT bet_type,
                       COUNT(*) AS games_played,
                       SUM(won) AS wins,
                       SUM(bet_amount) AS total_bet,
                       SUM(win_amount) AS total_won
                FROM wager_rounds
                GROUP BY bet_type
                ORDER BY games_played DESC, bet_type ASC
                """
            )
            return [dict(row) for row in cursor.fetchall()]
