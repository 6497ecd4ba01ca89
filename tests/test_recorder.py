"""Tests for GameRecorder history queries."""

import pytest

from domain.models.account import TransferRecord, WorkSession
from services.recorder_service import utc_day_bounds
from tests.conftest import BASE_TIME, make_round


def _transfer(sender_id, amount, created_at=BASE_TIME, receiver_id=99):
    return TransferRecord(
        sender_id=sender_id,
        receiver_id=receiver_id,
        amount=amount,
        fee=0,
        sender_balance_before=10_000,
        sender_balance_after=10_000 - amount,
        receiver_balance_before=0,
        receiver_balance_after=amount,
        created_at=created_at,
    )


class TestUtcDayBounds:
    def test_midday(self):
        start, end = utc_day_bounds(BASE_TIME)
        assert start == BASE_TIME - 12 * 3600
        assert end == start + 86400

    def test_midnight_starts_new_day(self):
        midnight = BASE_TIME + 12 * 3600
        assert utc_day_bounds(midnight)[0] == midnight
        assert utc_day_bounds(midnight - 1)[1] == midnight


class TestLosingStreak:
    """Streak counts consecutive losses from the newest round."""

    def test_no_history(self, recorder):
        assert recorder.get_losing_streak(1) == 0

    def test_counts_back_to_last_win(self, recorder):
        recorder.record_round(make_round(1, won=True, played_at=BASE_TIME))
        for i in range(3):
            recorder.record_round(make_round(1, won=False, played_at=BASE_TIME + 1 + i))
        assert recorder.get_losing_streak(1) == 3

    def test_latest_win_resets(self, recorder):
        for i in range(6):
            recorder.record_round(make_round(1, won=False, played_at=BASE_TIME + i))
        recorder.record_round(make_round(1, won=True, played_at=BASE_TIME + 10))
        assert recorder.get_losing_streak(1) == 0

    def test_capped_at_lookback(self, history_store, clock):
        from services.recorder_service import GameRecorder

        recorder = GameRecorder(history_store, streak_lookback=5, clock=clock)
        for i in range(8):
            recorder.record_round(make_round(1, won=False, played_at=BASE_TIME + i))
        assert recorder.get_losing_streak(1) == 5

    def test_other_accounts_ignored(self, recorder):
        recorder.record_round(make_round(2, won=False))
        assert recorder.get_losing_streak(1) == 0


class TestRecentAverageBet:
    def test_none_without_history(self, recorder):
        assert recorder.get_recent_average_bet(1) is None

    def test_uses_recent_window(self, recorder):
        # Ten rounds of 10 newer than one round of 1000
        recorder.record_round(make_round(1, won=False, bet_amount=1000, played_at=BASE_TIME - 100))
        for i in range(10):
            recorder.record_round(make_round(1, won=False, bet_amount=10, played_at=BASE_TIME + i))
        assert recorder.get_recent_average_bet(1) == pytest.approx(10.0)


class TestTransfers:
    def test_daily_totals_only_count_today(self, recorder):
        recorder.record_transfer(_transfer(1, 100, created_at=BASE_TIME - 13 * 3600))  # yesterday
        recorder.record_transfer(_transfer(1, 200))
        recorder.record_transfer(_transfer(1, 300, created_at=BASE_TIME + 3600))
        recorder.record_transfer(_transfer(2, 999))

        assert recorder.get_daily_transfer_totals(1, BASE_TIME) == (2, 500)

    def test_recent_transfers_include_received(self, recorder):
        recorder.record_transfer(_transfer(1, 100, receiver_id=2))
        assert len(recorder.get_recent_transfers(2)) == 1

    def test_record_returns_id(self, recorder):
        assert recorder.record_transfer(_transfer(1, 100)) is not None


class TestWorkSessions:
    def test_round_trip(self, recorder):
        session = WorkSession(
            account_id=1, reward=80, balance_before=0, balance_after=80, worked_at=BASE_TIME, was_bailout=True
        )
        recorder.record_work_session(session)

        stored = recorder.get_recent_work_sessions(1)
        assert len(stored) == 1
        assert stored[0].was_bailout is True
        assert stored[0].reward == 80


class TestStats:
    def test_empty_stats(self, recorder):
        stats = recorder.get_user_stats(1)
        assert stats["games_played"] == 0
        assert stats["win_rate"] == 0.0
        assert stats["net_profit"] == 0

    def test_daily_stats_window(self, recorder):
        recorder.record_round(make_round(1, won=True, bet_amount=100, played_at=BASE_TIME - 13 * 3600))
        recorder.record_round(make_round(1, won=False, bet_amount=40))

        daily = recorder.get_daily_stats(1)
        overall = recorder.get_user_stats(1)

        assert daily["games_played"] == 1
        assert daily["net_profit"] == -40
        assert overall["games_played"] == 2
        assert overall["win_rate"] == pytest.approx(50.0)

    def test_consolation_tracked_separately(self, recorder):
        recorder.record_round(
            make_round(1, won=False, win_amount=13, consolation_applied=True, consolation_amount=13)
        )
        assert recorder.get_user_stats(1)["consolation_total"] == 13

    def test_global_stats(self, recorder):
        recorder.record_round(make_round(1, won=True))
        recorder.record_round(make_round(2, won=False))

        stats = recorder.get_global_stats()
        assert stats["games_played"] == 2
        assert stats["total_players"] == 2

    def test_bet_type_stats(self, recorder):
        recorder.record_round(make_round(1, won=True, bet_type="red"))
        recorder.record_round(make_round(1, won=False, bet_type="red"))
        recorder.record_round(make_round(1, won=False, bet_type="number", bet_selector=7, payout_ratio=35))

        rows = {row["bet_type"]: row for row in recorder.get_bet_type_stats()}
        assert rows["red"]["games_played"] == 2
        assert rows["red"]["win_rate"] == pytest.approx(50.0)
        assert rows["number"]["wins"] == 0
