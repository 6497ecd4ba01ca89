"""
Domain services containing pure business logic.
"""

from domain.services.consolation_service import ConsolationCalculator
from domain.services.roulette_wheel import BetType, RouletteWheel
from domain.services.wagering_engine import WageringEngine

__all__ = ["BetType", "ConsolationCalculator", "RouletteWheel", "WageringEngine"]
