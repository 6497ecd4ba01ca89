"""
Roulette wheel: outcome generation, payout table and win evaluation.

Single-zero wheel (pockets 0-36). Zero is green and loses every bet except
a straight-number bet on 0, which is where the house edge comes from.
"""

import random
from enum import Enum

from domain.models.wager import WheelOutcome

RED_NUMBERS = frozenset({1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36})
BLACK_NUMBERS = frozenset(n for n in range(1, 37) if n not in RED_NUMBERS)

POCKET_COUNT = 37


class BetType(str, Enum):
    NUMBER = "number"
    RED = "red"
    BLACK = "black"
    ODD = "odd"
    EVEN = "even"
    LOW = "low"  # 1-18
    HIGH = "high"  # 19-36
    DOZEN1 = "dozen1"  # 1-12
    DOZEN2 = "dozen2"  # 13-24
    DOZEN3 = "dozen3"  # 25-36
    COLUMN1 = "column1"  # 1, 4, 7, ... 34
    COLUMN2 = "column2"  # 2, 5, 8, ... 35
    COLUMN3 = "column3"  # 3, 6, 9, ... 36


# Profit ratio (x:1). A winning bet returns stake * (ratio + 1).
PAYOUT_RATIOS: dict[BetType, int] = {
    BetType.NUMBER: 35,
    BetType.RED: 1,
    BetType.BLACK: 1,
    BetType.ODD: 1,
    BetType.EVEN: 1,
    BetType.LOW: 1,
    BetType.HIGH: 1,
    BetType.DOZEN1: 2,
    BetType.DOZEN2: 2,
    BetType.DOZEN3: 2,
    BetType.COLUMN1: 2,
    BetType.COLUMN2: 2,
    BetType.COLUMN3: 2,
}

BET_TYPE_LABELS: dict[BetType, str] = {
    BetType.NUMBER: "Single Number",
    BetType.RED: "Red",
    BetType.BLACK: "Black",
    BetType.ODD: "Odd",
    BetType.EVEN: "Even",
    BetType.LOW: "Low (1-18)",
    BetType.HIGH: "High (19-36)",
    BetType.DOZEN1: "1st Dozen (1-12)",
    BetType.DOZEN2: "2nd Dozen (13-24)",
    BetType.DOZEN3: "3rd Dozen (25-36)",
    BetType.COLUMN1: "1st Column",
    BetType.COLUMN2: "2nd Column",
    BetType.COLUMN3: "3rd Column",
}

# Aliases accepted by parse_bet, beyond the enum values themselves
_BET_ALIASES: dict[str, BetType] = {
    "r": BetType.RED,
    "b": BetType.BLACK,
    "1-18": BetType.LOW,
    "19-36": BetType.HIGH,
    "1st12": BetType.DOZEN1,
    "2nd12": BetType.DOZEN2,
    "3rd12": BetType.DOZEN3,
    "col1": BetType.COLUMN1,
    "col2": BetType.COLUMN2,
    "col3": BetType.COLUMN3,
}

# Categories whose selector (1-3) picks the concrete bet type
BET_FAMILIES: dict[str, tuple[BetType, BetType, BetType]] = {
    "dozen": (BetType.DOZEN1, BetType.DOZEN2, BetType.DOZEN3),
    "column": (BetType.COLUMN1, BetType.COLUMN2, BetType.COLUMN3),
}

# What a player picks before choosing a selector
BET_CATEGORY_LABELS: dict[str, str] = {
    BetType.NUMBER.value: "Single Number (pick 0-36)",
    BetType.RED.value: "Red",
    BetType.BLACK.value: "Black",
    BetType.ODD.value: "Odd",
    BetType.EVEN.value: "Even",
    BetType.LOW.value: "Low (1-18)",
    BetType.HIGH.value: "High (19-36)",
    "dozen": "Dozen (pick 1-3)",
    "column": "Column (pick 1-3)",
}


def color_of(number: int) -> str:
    if number == 0:
        return "green"
    return "red" if number in RED_NUMBERS else "black"


def dozen_of(number: int) -> int | None:
    if 1 <= number <= 12:
        return 1
    if 13 <= number <= 24:
        return 2
    if 25 <= number <= 36:
        return 3
    return None


def column_of(number: int) -> int | None:
    if number == 0:
        return None
    # 1st column = 1 mod 3, 2nd = 2 mod 3, 3rd = 0 mod 3
    r = number % 3
    return 3 if r == 0 else r


def outcome_for(number: int) -> WheelOutcome:
    if not 0 <= number <= 36:
        raise ValueError(f"Pocket out of range: {number}")
    return WheelOutcome(number=number, color=color_of(number))


def payout_ratio(bet_type: BetType) -> int:
    return PAYOUT_RATIOS[BetType(bet_type)]


def win_probability(bet_type: BetType) -> float:
    """Chance that a bet of this type wins on a fair single-zero wheel."""
    bet_type = BetType(bet_type)
    if bet_type == BetType.NUMBER:
        return 1 / POCKET_COUNT
    if PAYOUT_RATIOS[bet_type] == 1:
        return 18 / POCKET_COUNT
    return 12 / POCKET_COUNT


def house_edge() -> float:
    """Expected loss per unit wagered, identical for every bet type."""
    return 1 / POCKET_COUNT


def validate_selector(bet_type: BetType, selector: int | None) -> bool:
    """A straight-number bet needs a pocket 0-36; every other bet takes no selector."""
    if BetType(bet_type) == BetType.NUMBER:
        return selector is not None and 0 <= selector <= 36
    return selector is None


def check_win(bet_type: BetType, selector: int | None, outcome: WheelOutcome) -> bool:
    """
    Evaluate a bet against an outcome.

    Pure function of its arguments. Zero only satisfies a straight-number
    bet on 0; every category bet loses on zero.
    """
    bet_type = BetType(bet_type)
    number = outcome.number

    if number == 0:
        return bet_type == BetType.NUMBER and selector == 0

    if bet_type == BetType.NUMBER:
        return number == selector
    if bet_type == BetType.RED:
        return number in RED_NUMBERS
    if bet_type == BetType.BLACK:
        return number in BLACK_NUMBERS
    if bet_type == BetType.ODD:
        return number % 2 == 1
    if bet_type == BetType.EVEN:
        return number % 2 == 0
    if bet_type == BetType.LOW:
        return 1 <= number <= 18
    if bet_type == BetType.HIGH:
        return 19 <= number <= 36
    if bet_type in (BetType.DOZEN1, BetType.DOZEN2, BetType.DOZEN3):
        return dozen_of(number) == int(bet_type.value[-1])
    if bet_type in (BetType.COLUMN1, BetType.COLUMN2, BetType.COLUMN3):
        return column_of(number) == int(bet_type.value[-1])
    return False


def win_amount(bet_type: BetType, bet_amount: int, won: bool) -> int:
    """Stake returned plus profit on a win, 0 on a loss."""
    if not won:
        return 0
    return bet_amount * (payout_ratio(bet_type) + 1)


def parse_bet(text: str | BetType, selector: int | None = None) -> tuple[BetType, int | None] | None:
    """
    Resolve a user-facing bet selection to a concrete bet.

    Accepts a pocket number ("17"), an enum value ("red", "dozen2"), a
    common alias ("1st12", "col3"), or a category with a selector:
    ("number", 0-36), ("dozen", 1-3), ("column", 1-3). Dozen and column
    bets resolve to their concrete type with no selector.

    Returns None if unrecognized or if the selector does not fit the bet.
    """
    s = (text.value if isinstance(text, BetType) else str(text)).strip().lower().replace(" ", "")

    if s in BET_FAMILIES:
        if selector is None or not 1 <= selector <= 3:
            return None
        return BET_FAMILIES[s][selector - 1], None

    if s.isdigit():
        if selector is not None:
            return None
        s, selector = BetType.NUMBER.value, int(s)

    if s in _BET_ALIASES:
        bet_type = _BET_ALIASES[s]
    else:
        try:
            bet_type = BetType(s)
        except ValueError:
            return None
    if not validate_selector(bet_type, selector):
        return None
    return bet_type, selector


class RouletteWheel:
    """Uniform outcome generator over pockets 0-36."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def spin(self) -> WheelOutcome:
        return outcome_for(self.rng.randint(0, 36))
