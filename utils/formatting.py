"""
Shared formatting helpers for economy messages.
"""

from config import CURRENCY_SYMBOL

COLOR_EMOJIS = {
    "red": "🔴",
    "black": "⚫",
    "green": "🟢",
}

RANK_MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}


def format_currency(amount: int) -> str:
    """Return an amount with the currency symbol and thousands separators (e.g. 't$t 1,234')."""
    return f"{CURRENCY_SYMBOL} {amount:,}"


def format_duration(seconds: int) -> str:
    """
    Human-friendly duration for cooldown messages.

    Examples: 45 -> '45s', 125 -> '2m 5s', 3720 -> '1h 2m'.
    """
    seconds = max(0, int(seconds))
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s" if secs else f"{minutes}m"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m" if minutes else f"{hours}h"


def format_outcome(number: int, color: str) -> str:
    """Return a wheel result with its color emoji (e.g. '🔴 7 Red')."""
    emoji = COLOR_EMOJIS.get(color, "")
    return f"{emoji} {number} {color.capitalize()}".strip()


def format_bet_display(bet_label: str, selector: int | None) -> str:
    """Return a bet selection for display ('Red', 'Single Number 17')."""
    if selector is None:
        return bet_label
    return f"{bet_label} {selector}"


def format_rank(rank: int) -> str:
    """Medal for the top three, '#n' otherwise."""
    return RANK_MEDALS.get(rank, f"#{rank}")


def format_percent(value: float, digits: int = 1) -> str:
    """Format a 0-100 percentage value."""
    return f"{value:.{digits}f}%"


def format_signed(amount: int) -> str:
    """Signed currency amount for profit/loss lines ('+t$t 50', '-t$t 20')."""
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{format_currency(abs(amount))}"
