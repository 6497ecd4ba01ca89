"""Tests for the roulette wheel: colors, bet evaluation and payouts."""

import random

import pytest

from domain.models.wager import WheelOutcome
from domain.services.roulette_wheel import (
    BLACK_NUMBERS,
    RED_NUMBERS,
    BetType,
    RouletteWheel,
    check_win,
    color_of,
    column_of,
    dozen_of,
    outcome_for,
    parse_bet,
    payout_ratio,
    validate_selector,
    win_amount,
)


class TestWheelLayout:
    """Tests for the pocket layout."""

    def test_eighteen_red_and_eighteen_black(self):
        assert len(RED_NUMBERS) == 18
        assert len(BLACK_NUMBERS) == 18
        assert RED_NUMBERS.isdisjoint(BLACK_NUMBERS)

    def test_zero_is_green(self):
        assert color_of(0) == "green"
        assert dozen_of(0) is None
        assert column_of(0) is None

    @pytest.mark.parametrize("number,color", [(1, "red"), (2, "black"), (19, "red"), (20, "black"), (36, "red")])
    def test_known_colors(self, number, color):
        assert color_of(number) == color

    def test_dozens_and_columns(self):
        assert dozen_of(12) == 1
        assert dozen_of(13) == 2
        assert dozen_of(36) == 3
        assert column_of(1) == 1
        assert column_of(2) == 2
        assert column_of(3) == 3
        assert column_of(34) == 1

    def test_outcome_for_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            outcome_for(37)


class TestCheckWin:
    """Tests for bet evaluation against an outcome."""

    def test_red_wins_on_red(self):
        assert check_win(BetType.RED, None, outcome_for(7)) is True
        assert check_win(BetType.RED, None, outcome_for(8)) is False

    def test_straight_number(self):
        assert check_win(BetType.NUMBER, 17, outcome_for(17)) is True
        assert check_win(BetType.NUMBER, 17, outcome_for(18)) is False

    def test_zero_loses_every_category_bet(self):
        zero = outcome_for(0)
        for bet_type in BetType:
            if bet_type == BetType.NUMBER:
                continue
            assert check_win(bet_type, None, zero) is False, bet_type

    def test_zero_wins_straight_bet_on_zero(self):
        assert check_win(BetType.NUMBER, 0, outcome_for(0)) is True

    def test_even_odd_low_high(self):
        assert check_win(BetType.EVEN, None, outcome_for(18)) is True
        assert check_win(BetType.ODD, None, outcome_for(18)) is False
        assert check_win(BetType.LOW, None, outcome_for(18)) is True
        assert check_win(BetType.HIGH, None, outcome_for(19)) is True

    def test_dozen_and_column_bets(self):
        assert check_win(BetType.DOZEN2, None, outcome_for(24)) is True
        assert check_win(BetType.DOZEN3, None, outcome_for(24)) is False
        assert check_win(BetType.COLUMN3, None, outcome_for(36)) is True

    def test_pure_function_of_inputs(self):
        outcome = WheelOutcome(number=5, color="red")
        results = {check_win(BetType.RED, None, outcome) for _ in range(10)}
        assert results == {True}


class TestPayouts:
    """Tests for the payout table."""

    def test_payout_ratios(self):
        assert payout_ratio(BetType.NUMBER) == 35
        assert payout_ratio(BetType.RED) == 1
        assert payout_ratio(BetType.DOZEN1) == 2
        assert payout_ratio(BetType.COLUMN2) == 2

    def test_red_win_returns_double(self):
        assert win_amount(BetType.RED, 100, won=True) == 200

    def test_straight_win_returns_36x(self):
        assert win_amount(BetType.NUMBER, 100, won=True) == 3600

    def test_loss_returns_nothing(self):
        assert win_amount(BetType.NUMBER, 100, won=False) == 0


class TestSelectorsAndParsing:
    """Tests for selector validation and bet parsing."""

    def test_number_bet_requires_pocket(self):
        assert validate_selector(BetType.NUMBER, 0) is True
        assert validate_selector(BetType.NUMBER, 36) is True
        assert validate_selector(BetType.NUMBER, 37) is False
        assert validate_selector(BetType.NUMBER, None) is False

    def test_category_bet_takes_no_selector(self):
        assert validate_selector(BetType.RED, None) is True
        assert validate_selector(BetType.RED, 5) is False

    @pytest.mark.parametrize(
        "text,selector,expected",
        [
            ("17", None, (BetType.NUMBER, 17)),
            ("number", 0, (BetType.NUMBER, 0)),
            ("Red", None, (BetType.RED, None)),
            ("1st12", None, (BetType.DOZEN1, None)),
            ("col3", None, (BetType.COLUMN3, None)),
            ("19-36", None, (BetType.HIGH, None)),
            ("dozen", 2, (BetType.DOZEN2, None)),
            ("Column", 3, (BetType.COLUMN3, None)),
            (BetType.RED, None, (BetType.RED, None)),
        ],
    )
    def test_parse_bet(self, text, selector, expected):
        assert parse_bet(text, selector) == expected

    @pytest.mark.parametrize(
        "text,selector",
        [
            ("37", None),
            ("purple", None),
            ("number", None),
            ("", None),
            ("dozen", None),
            ("dozen", 4),
            ("column", 0),
            ("red", 5),
            ("17", 17),
        ],
    )
    def test_parse_bet_rejects_invalid(self, text, selector):
        assert parse_bet(text, selector) is None


class TestRouletteWheel:
    """Tests for outcome generation."""

    def test_spin_covers_all_pockets(self):
        wheel = RouletteWheel(random.Random(7))
        seen = {wheel.spin().number for _ in range(2000)}
        assert seen == set(range(37))

    def test_spin_color_matches_number(self):
        wheel = RouletteWheel(random.Random(1))
        for _ in range(100):
            outcome = wheel.spin()
            assert outcome.color == color_of(outcome.number)
