"""
Centralized configuration for the Pod economy bot.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _parse_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_float(env_var: str, default: float) -> float:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_bool(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _parse_int_list(env_var: str, default: list[int]) -> list[int]:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return [int(x.strip()) for x in raw.split(",") if x.strip()]
    except ValueError:
        return default


def _parse_thresholds(env_var: str, default: dict[int, int]) -> dict[int, int]:
    """Parse "streak:bonus" pairs, e.g. "5:25,10:50"."""
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        pairs = [item.split(":") for item in raw.split(",") if item.strip()]
        return {int(streak.strip()): int(bonus.strip()) for streak, bonus in pairs}
    except ValueError:
        return default


DB_PATH = os.getenv("DB_PATH", "pod_economy.db")
DISCORD_BOT_TOKEN = os.getenv("DISCORD_BOT_TOKEN")
ADMIN_USER_IDS: list[int] = _parse_int_list("ADMIN_USER_IDS", [])

# If the database cannot be opened, keep serving from memory instead of failing every command
ALLOW_VOLATILE_FALLBACK = _parse_bool("ALLOW_VOLATILE_FALLBACK", True)

CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "t$t")
STARTING_BALANCE = _parse_int("STARTING_BALANCE", 0)

# Work configuration
WORK_COOLDOWN_SECONDS = _parse_int("WORK_COOLDOWN_SECONDS", 1800)  # 30 minutes
WORK_REWARD_MIN = _parse_int("WORK_REWARD_MIN", 50)
WORK_REWARD_MAX = _parse_int("WORK_REWARD_MAX", 150)

# Transfer (/pay) configuration
TRANSFER_MIN_AMOUNT = _parse_int("TRANSFER_MIN_AMOUNT", 10)
TRANSFER_MAX_AMOUNT = _parse_int("TRANSFER_MAX_AMOUNT", 50000)
TRANSFER_COOLDOWN_SECONDS = _parse_int("TRANSFER_COOLDOWN_SECONDS", 30)
TRANSFER_MAX_DAILY_COUNT = _parse_int("TRANSFER_MAX_DAILY_COUNT", 10)
TRANSFER_MAX_DAILY_AMOUNT = _parse_int("TRANSFER_MAX_DAILY_AMOUNT", 200000)
TRANSFER_CONFIRM_TIMEOUT_SECONDS = _parse_int("TRANSFER_CONFIRM_TIMEOUT_SECONDS", 60)
TRANSFER_MEMO_MAX_LENGTH = _parse_int("TRANSFER_MEMO_MAX_LENGTH", 100)

# Fee for transfers touching an account that has taken a bailout (clamped to 0.0 - 0.5)
_raw_bailout_fee_rate = _parse_float("TRANSFER_BAILOUT_FEE_RATE", 0.10)
TRANSFER_BAILOUT_FEE_RATE = max(0.0, min(0.5, _raw_bailout_fee_rate))

# Roulette configuration
ROULETTE_MIN_BET = _parse_int("ROULETTE_MIN_BET", 10)
ROULETTE_MAX_BET = _parse_int("ROULETTE_MAX_BET", 10000)

# Consolation (pity) configuration
CONSOLATION_MAX_BET = _parse_int("CONSOLATION_MAX_BET", 200)  # Bets above this never get consolation
CONSOLATION_THRESHOLDS: dict[int, int] = _parse_thresholds(
    "CONSOLATION_THRESHOLDS", {5: 25, 10: 50, 15: 75, 25: 100}
)
CONSOLATION_MIN_AMOUNT = _parse_int("CONSOLATION_MIN_AMOUNT", 5)
CONSOLATION_BET_REFERENCE = _parse_int("CONSOLATION_BET_REFERENCE", 100)  # Bet size for a full bonus
CONSOLATION_BALANCE_THRESHOLD = _parse_int("CONSOLATION_BALANCE_THRESHOLD", 1000)
CONSOLATION_BALANCE_SCALE = _parse_int("CONSOLATION_BALANCE_SCALE", 10000)
CONSOLATION_MAX_BALANCE_REDUCTION = _parse_float("CONSOLATION_MAX_BALANCE_REDUCTION", 0.8)
CONSOLATION_MANIPULATION_PENALTY = _parse_float("CONSOLATION_MANIPULATION_PENALTY", 0.5)
LOSING_STREAK_LOOKBACK = _parse_int("LOSING_STREAK_LOOKBACK", 50)  # Rounds scanned for the streak
RECENT_BET_WINDOW = _parse_int("RECENT_BET_WINDOW", 10)  # Rounds averaged for manipulation check

LEADERBOARD_DEFAULT_LIMIT = _parse_int("LEADERBOARD_DEFAULT_LIMIT", 10)
