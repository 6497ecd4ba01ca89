"""Tests for the shared message formatting helpers."""

import pytest

from utils.formatting import (
    format_bet_display,
    format_currency,
    format_duration,
    format_outcome,
    format_percent,
    format_rank,
    format_signed,
)


class TestCurrency:
    def test_thousands_separator(self, monkeypatch):
        monkeypatch.setattr("utils.formatting.CURRENCY_SYMBOL", "t$t")
        assert format_currency(1234) == "t$t 1,234"

    def test_signed(self, monkeypatch):
        monkeypatch.setattr("utils.formatting.CURRENCY_SYMBOL", "t$t")
        assert format_signed(50) == "+t$t 50"
        assert format_signed(-20) == "-t$t 20"
        assert format_signed(0) == "+t$t 0"


class TestDuration:
    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0s"), (45, "45s"), (60, "1m"), (125, "2m 5s"), (3600, "1h"), (3720, "1h 2m"), (-5, "0s")],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestWheelDisplay:
    def test_outcome_with_emoji(self):
        assert format_outcome(7, "red") == "🔴 7 Red"
        assert format_outcome(0, "green") == "🟢 0 Green"

    def test_bet_display(self):
        assert format_bet_display("Red", None) == "Red"
        assert format_bet_display("Single Number", 17) == "Single Number 17"


class TestRanksAndPercent:
    def test_medals_for_top_three(self):
        assert format_rank(1) == "🥇"
        assert format_rank(3) == "🥉"
        assert format_rank(4) == "#4"

    def test_percent(self):
        assert format_percent(48.6486) == "48.6%"
        assert format_percent(2.7027, digits=2) == "2.70%"
