"""
Game and session recorder.

Appends work sessions, transfers and roulette rounds to history and reads
them back for losing streaks, daily transfer limits and statistics.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from config import LOSING_STREAK_LOOKBACK, RECENT_BET_WINDOW
from domain.models.account import TransferRecord, WorkSession
from domain.models.wager import WagerRound
from repositories.interfaces import IHistoryStore

logger = logging.getLogger("pod_bot.services.recorder")


def utc_day_bounds(timestamp: int) -> tuple[int, int]:
    """Unix [start, end) of the UTC calendar day containing ``timestamp``."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1)
    return int(start.timestamp()), int(end.timestamp())


def _summarize(stats: dict) -> dict:
    games = stats["games_played"]
    return {
        **stats,
        "win_rate": (stats["wins"] / games * 100) if games else 0.0,
        "net_profit": stats["total_won"] - stats["total_bet"],
    }


class GameRecorder:
    """
    Service over the append-only history store.

    Write failures propagate: a round that cannot be recorded must not be
    reported as settled.
    """

    def __init__(
        self,
        history_store: IHistoryStore,
        streak_lookback: int | None = None,
        recent_bet_window: int | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self.history_store = history_store
        self.streak_lookback = streak_lookback if streak_lookback is not None else LOSING_STREAK_LOOKBACK
        self.recent_bet_window = recent_bet_window if recent_bet_window is not None else RECENT_BET_WINDOW
        self._clock = clock or time.time

    def _now(self) -> int:
        return int(self._clock())

    # --- Writes ---

    def record_work_session(self, session: WorkSession) -> int:
        session_id = self.history_store.add_work_session(session)
        logger.debug(
            f"Recorded work session {session_id} for {session.account_id}: +{session.reward}"
            f"{' (bailout)' if session.was_bailout else ''}"
        )
        return session_id

    def record_transfer(self, record: TransferRecord) -> int:
        transaction_id = self.history_store.add_transfer(record)
        logger.debug(
            f"Recorded transfer {transaction_id}: {record.sender_id} -> {record.receiver_id} "
            f"amount={record.amount} fee={record.fee}"
        )
        return transaction_id

    def record_round(self, wager_round: WagerRound) -> int:
        round_id = self.history_store.add_round(wager_round)
        wager_round.round_id = round_id
        logger.debug(
            f"Recorded round {round_id} for {wager_round.account_id}: {wager_round.bet_type} "
            f"{wager_round.bet_amount} -> {wager_round.outcome_number} "
            f"{'won' if wager_round.won else 'lost'} {wager_round.win_amount}"
        )
        return round_id

    # --- Streaks and averages ---

    def get_losing_streak(self, account_id: int) -> int:
        """Consecutive losses counting back from the latest round (capped at the lookback)."""
        streak = 0
        for wager_round in self.history_store.get_recent_rounds(account_id, self.streak_lookback):
            if wager_round.won:
                break
            streak += 1
        return streak

    def get_recent_average_bet(self, account_id: int) -> float | None:
        """Mean stake over the recent window, None if the account has never played."""
        rounds = self.history_store.get_recent_rounds(account_id, self.recent_bet_window)
        if not rounds:
            return None
        return sum(r.bet_amount for r in rounds) / len(rounds)

    # --- Transfers ---

    def get_daily_transfer_totals(self, sender_id: int, now: int | None = None) -> tuple[int, int]:
        """(count, amount) of transfers sent today (UTC)."""
        start, end = utc_day_bounds(now if now is not None else self._now())
        return self.history_store.get_transfer_totals(sender_id, start, end)

    def get_recent_transfers(self, account_id: int, limit: int = 10) -> list[TransferRecord]:
        return self.history_store.get_transfers(account_id, limit)

    def get_recent_work_sessions(self, account_id: int, limit: int = 10) -> list[WorkSession]:
        return self.history_store.get_work_sessions(account_id, limit)

    # --- Statistics ---

    def get_recent_rounds(self, account_id: int, limit: int = 10) -> list[WagerRound]:
        return self.history_store.get_recent_rounds(account_id, limit)

    def get_daily_stats(self, account_id: int) -> dict:
        """
        Today's (UTC) roulette stats for an account.

        Returns:
            Dict with games_played, wins, losses, win_rate (percent),
            total_bet, total_won, consolation_total, net_profit
        """
        start, end = utc_day_bounds(self._now())
        return _summarize(self.history_store.get_round_stats(account_id, start, end))

    def get_user_stats(self, account_id: int) -> dict:
        """All-time roulette stats for an account (same keys as get_daily_stats)."""
        return _summarize(self.history_store.get_round_stats(account_id))

    def get_global_stats(self) -> dict:
        """All-time stats across all accounts, plus total_players."""
        stats = _summarize(self.history_store.get_round_stats())
        stats["total_players"] = self.history_store.count_players()
        return stats

    def get_top_winners(self, limit: int = 10) -> list[dict]:
        return self.history_store.get_top_winners(limit)

    def get_bet_type_stats(self) -> list[dict]:
        """Per bet-type totals with win_rate (percent) added."""
        rows = []
        for row in self.history_store.get_bet_type_stats():
            games = row["games_played"]
            rows.append({**row, "win_rate": (row["wins"] / games * 100) if games else 0.0})
        return rows
