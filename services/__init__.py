"""
Application services layer.

Services orchestrate business operations using stores and domain services.
"""

from services.ledger_service import LedgerService
from services.permissions import has_admin_permission, has_allowlisted_admin
from services.recorder_service import GameRecorder

# Result type for consistent error handling
from services.result import Result
from services.roulette_service import RouletteService
from services.store_selector import StoreSelector
from services.transfer_service import TransferService

# Service interfaces (ABCs)
from services.interfaces import (
    ILedgerService,
    IRouletteService,
    ITransferService,
)

__all__ = [
    # Concrete services
    "LedgerService",
    "TransferService",
    "RouletteService",
    "GameRecorder",
    "StoreSelector",
    # Permissions
    "has_admin_permission",
    "has_allowlisted_admin",
    # Result type
    "Result",
    # Interfaces
    "ILedgerService",
    "ITransferService",
    "IRouletteService",
]
