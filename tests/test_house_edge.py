"""Statistical checks on the wheel's house edge."""

import random

import pytest

from domain.services.roulette_wheel import (
    BetType,
    RouletteWheel,
    check_win,
    house_edge,
    win_amount,
    win_probability,
)

SAMPLE_SIZE = 200_000


class TestHouseEdge:
    """The single zero gives every bet the same 1/37 edge."""

    def test_house_edge_value(self):
        assert house_edge() == pytest.approx(0.027027, abs=1e-6)

    @pytest.mark.parametrize("bet_type", list(BetType))
    def test_expected_value_identical_for_every_bet(self, bet_type):
        stake = 100
        expected = win_probability(bet_type) * win_amount(bet_type, stake, won=True) - stake
        assert expected / stake == pytest.approx(-house_edge())

    def test_straight_bet_win_rate_converges(self):
        wheel = RouletteWheel(random.Random(20240115))
        wins = sum(1 for _ in range(SAMPLE_SIZE) if check_win(BetType.NUMBER, 17, wheel.spin()))
        assert wins / SAMPLE_SIZE == pytest.approx(1 / 37, abs=0.002)

    def test_even_money_bet_return_converges(self):
        wheel = RouletteWheel(random.Random(99))
        stake = 10
        returned = 0
        for _ in range(SAMPLE_SIZE):
            won = check_win(BetType.RED, None, wheel.spin())
            returned += win_amount(BetType.RED, stake, won)
        ev_per_unit = (returned - stake * SAMPLE_SIZE) / (stake * SAMPLE_SIZE)
        assert ev_per_unit == pytest.approx(-1 / 37, abs=0.01)
