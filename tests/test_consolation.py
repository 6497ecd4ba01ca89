"""Tests for the losing-streak consolation calculator."""

import pytest

from domain.services.consolation_service import ConsolationCalculator, round_half_up

THRESHOLDS = {5: 25, 10: 50, 15: 75, 25: 100}


@pytest.fixture
def calculator():
    return ConsolationCalculator(
        thresholds=THRESHOLDS,
        max_bet=200,
        min_amount=5,
        bet_reference=100,
        balance_threshold=1000,
        balance_scale=10000,
        max_balance_reduction=0.8,
        manipulation_penalty=0.5,
    )


class TestEligibility:
    """Tests for when consolation is paid at all."""

    def test_short_streak_gets_nothing(self, calculator):
        result = calculator.calculate(losing_streak=4, bet_amount=100, balance=500)
        assert result.amount == 0
        assert result.applied is False

    def test_large_bet_gets_nothing(self, calculator):
        assert calculator.calculate(losing_streak=30, bet_amount=201, balance=500).amount == 0

    def test_max_bet_is_still_eligible(self, calculator):
        assert calculator.calculate(losing_streak=5, bet_amount=200, balance=500).amount == 25

    def test_zero_bet_gets_nothing(self, calculator):
        assert calculator.calculate(losing_streak=10, bet_amount=0, balance=500).amount == 0


class TestBaseAmount:
    """Tests for the threshold table."""

    @pytest.mark.parametrize(
        "streak,expected",
        [(5, 25), (9, 25), (10, 50), (15, 75), (24, 75), (25, 100), (50, 100)],
    )
    def test_highest_threshold_met(self, calculator, streak, expected):
        assert calculator.base_amount(streak) == expected

    def test_table_sorted_by_streak(self, calculator):
        assert calculator.table() == [(5, 25), (10, 50), (15, 75), (25, 100)]

    def test_min_streak(self, calculator):
        assert calculator.min_streak == 5


class TestDampeners:
    """Tests for the three dampening multipliers."""

    def test_half_size_bet_on_five_loss_streak(self, calculator):
        """25 * 0.5 = 12.5 rounds half-up to 13."""
        result = calculator.calculate(losing_streak=5, bet_amount=50, balance=1000)
        assert result.base_amount == 25
        assert result.bet_multiplier == 0.5
        assert result.amount == 13

    def test_balance_dampener(self, calculator):
        result = calculator.calculate(losing_streak=10, bet_amount=100, balance=6000)
        assert result.balance_multiplier == pytest.approx(0.5)
        assert result.amount == 25

    def test_balance_dampener_capped(self, calculator):
        assert calculator.balance_multiplier(1_000_000) == pytest.approx(0.2)

    def test_balance_at_threshold_not_dampened(self, calculator):
        assert calculator.balance_multiplier(1000) == 1.0

    def test_manipulation_penalty(self, calculator):
        """Tiny bets to build a streak, then one big bet, halves the credit."""
        result = calculator.calculate(losing_streak=10, bet_amount=100, balance=500, recent_average_bet=20)
        assert result.manipulation_multiplier == 0.5
        assert result.amount == 25

    def test_no_history_means_no_penalty(self, calculator):
        assert calculator.manipulation_multiplier(100, None) == 1.0

    def test_average_of_exactly_half_not_penalized(self, calculator):
        assert calculator.manipulation_multiplier(100, 50.0) == 1.0

    def test_floor_at_minimum_amount(self, calculator):
        """25 * 0.1 = 2.5 -> 3, raised to the floor of 5."""
        assert calculator.calculate(losing_streak=5, bet_amount=10, balance=500).amount == 5

    def test_all_dampeners_compound(self, calculator):
        result = calculator.calculate(losing_streak=25, bet_amount=50, balance=3000, recent_average_bet=10)
        # 100 * 0.5 * 0.8 * 0.5 = 20
        assert result.amount == 20


class TestMonotonicity:
    """Longer streaks never pay less."""

    @pytest.mark.parametrize("bet_amount,balance", [(10, 0), (50, 1000), (100, 5000), (200, 20000)])
    def test_non_decreasing_in_streak(self, calculator, bet_amount, balance):
        amounts = [calculator.calculate(s, bet_amount, balance).amount for s in range(0, 60)]
        assert amounts == sorted(amounts)


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(12.49) == 12
    assert round_half_up(2.5) == 3
