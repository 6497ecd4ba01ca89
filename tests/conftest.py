"""
Pytest fixtures for tests.

Performance optimization: uses a session-scoped schema template so migrations
run once; each test copies the resulting database file instead of
re-initializing it.
"""

import random
import shutil

import pytest

from database import Database
from domain.models.wager import WagerRound
from repositories.history_store import PersistentHistoryStore
from repositories.ledger_store import PersistentLedgerStore
from services.ledger_service import LedgerService
from services.recorder_service import GameRecorder
from services.roulette_service import RouletteService
from services.transfer_service import TransferService
from utils.rate_limiter import GLOBAL_RATE_LIMITER

# 2024-01-15 12:00:00 UTC
BASE_TIME = 1705320000


class FakeClock:
    """Settable clock for cooldown and daily-window tests."""

    def __init__(self, start: float = BASE_TIME):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FixedRng:
    """random.Random stand-in whose randint returns queued values (last one repeats)."""

    def __init__(self, *values: int):
        self.values = list(values)

    def randint(self, a: int, b: int) -> int:
        value = self.values.pop(0) if len(self.values) > 1 else self.values[0]
        assert a <= value <= b
        return value


def make_round(account_id: int, won: bool, bet_amount: int = 50, played_at: int = BASE_TIME, **overrides) -> WagerRound:
    """Build a history row without going through the engine."""
    fields = dict(
        account_id=account_id,
        bet_type="red",
        bet_selector=None,
        bet_amount=bet_amount,
        outcome_number=1 if won else 2,
        outcome_color="red" if won else "black",
        won=won,
        win_amount=bet_amount * 2 if won else 0,
        payout_ratio=1,
        balance_before=1000,
        balance_after=1000 + bet_amount if won else 1000 - bet_amount,
        played_at=played_at,
    )
    fields.update(overrides)
    return WagerRound(**fields)


@pytest.fixture(autouse=True)
def clear_rate_limiter():
    """The command rate limiter is process-global; keep tests independent."""
    GLOBAL_RATE_LIMITER._hits.clear()
    yield
    GLOBAL_RATE_LIMITER._hits.clear()


@pytest.fixture(scope="session")
def _schema_template_path(tmp_path_factory):
    """
    Create a schema template database once per test session.

    Tests copy from this template instead of running schema initialization each time.
    """
    template_dir = tmp_path_factory.mktemp("schema_template")
    template_path = str(template_dir / "template.db")
    Database(template_path)
    yield template_path


@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path (no schema)."""
    path = str(tmp_path / "temp.db")
    yield path


@pytest.fixture
def repo_db_path(_schema_template_path, tmp_path):
    """
    Create a temporary database with initialized schema for repository tests.

    Fast: file copy instead of schema initialization.
    """
    test_db_path = str(tmp_path / "test.db")
    shutil.copy2(_schema_template_path, test_db_path)
    yield test_db_path


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger_store(repo_db_path):
    return PersistentLedgerStore(repo_db_path)


@pytest.fixture
def history_store(repo_db_path):
    return PersistentHistoryStore(repo_db_path)


@pytest.fixture
def recorder(history_store, clock):
    return GameRecorder(history_store, streak_lookback=50, recent_bet_window=10, clock=clock)


@pytest.fixture
def ledger_service(ledger_store, recorder, clock):
    return LedgerService(
        ledger_store,
        recorder=recorder,
        cooldown_seconds=1800,
        reward_min=50,
        reward_max=150,
        rng=random.Random(42),
        clock=clock,
    )


@pytest.fixture
def transfer_service(ledger_service, recorder, clock):
    return TransferService(
        ledger_service,
        recorder,
        min_amount=10,
        max_amount=50000,
        cooldown_seconds=30,
        max_daily_count=10,
        max_daily_amount=200000,
        bailout_fee_rate=0.10,
        confirm_timeout_seconds=60,
        memo_max_length=100,
        clock=clock,
    )


@pytest.fixture
def roulette_service(ledger_service, recorder, clock):
    return RouletteService(ledger_service, recorder, min_bet=10, max_bet=10000, clock=clock)
