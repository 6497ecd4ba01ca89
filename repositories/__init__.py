"""
Repository layer: ledger and history stores.
"""

from repositories.base_repository import BaseRepository
from repositories.errors import ConcurrencyConflictError, StorageUnavailableError
from repositories.history_store import PersistentHistoryStore
from repositories.interfaces import IHistoryStore, ILedgerStore
from repositories.ledger_store import PersistentLedgerStore
from repositories.volatile_store import VolatileHistoryStore, VolatileLedgerStore

__all__ = [
    "BaseRepository",
    "PersistentLedgerStore",
    "PersistentHistoryStore",
    "VolatileLedgerStore",
    "VolatileHistoryStore",
    "ILedgerStore",
    "IHistoryStore",
    "StorageUnavailableError",
    "ConcurrencyConflictError",
]
