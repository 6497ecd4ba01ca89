"""
Storage failover between the SQLite stores and their in-memory counterparts.
"""

import logging
import threading

from repositories.errors import StorageUnavailableError
from repositories.interfaces import IHistoryStore, ILedgerStore
from repositories.volatile_store import VolatileHistoryStore, VolatileLedgerStore

logger = logging.getLogger("pod_bot.services.store_selector")

LEDGER = "ledger"
HISTORY = "history"


class _FailoverProxy:
    """Forwards method calls to whichever store the selector currently routes to."""

    def __init__(self, selector: "StoreSelector", kind: str):
        self._selector = selector
        self._kind = kind

    def __getattr__(self, name: str):
        def call(*args, **kwargs):
            return self._selector.call(self._kind, name, *args, **kwargs)

        call.__name__ = name
        return call


class StoreSelector:
    """
    Routes ledger and history calls to the persistent stores until one fails.

    On the first StorageUnavailableError the selector switches both stores to
    volatile memory (balances start over from zero) and re-runs the failed
    call there once. In degraded mode errors propagate to the caller.

    Usage:
        selector = StoreSelector(PersistentLedgerStore(path), PersistentHistoryStore(path))
        selector.ledger.credit(user_id, 100)
    """

    def __init__(
        self,
        persistent_ledger: ILedgerStore | None,
        persistent_history: IHistoryStore | None,
        allow_fallback: bool = True,
        starting_balance: int = 0,
    ):
        self._persistent = {LEDGER: persistent_ledger, HISTORY: persistent_history}
        self._volatile: dict[str, object] | None = None
        self.allow_fallback = allow_fallback
        self.starting_balance = starting_balance
        self._lock = threading.Lock()
        self._degraded = False
        self.ledger = _FailoverProxy(self, LEDGER)
        self.history = _FailoverProxy(self, HISTORY)

        if persistent_ledger is None or persistent_history is None:
            self._degrade("persistent storage not available at startup")

    @property
    def is_degraded(self) -> bool:
        """True once calls are being served from volatile memory."""
        return self._degraded

    def _degrade(self, reason: str) -> None:
        with self._lock:
            if self._degraded:
                return
            self._volatile = {
                LEDGER: VolatileLedgerStore(starting_balance=self.starting_balance),
                HISTORY: VolatileHistoryStore(),
            }
            self._degraded = True
        logger.warning(
            f"Storage degraded to in-memory ledger ({reason}). "
            "Balances will not survive a restart."
        )

    def current(self, kind: str):
        if self._degraded:
            return self._volatile[kind]
        return self._persistent[kind]

    def call(self, kind: str, method: str, *args, **kwargs):
        """Invoke ``method`` on the active store of ``kind``, failing over once."""
        if self._degraded:
            return getattr(self._volatile[kind], method)(*args, **kwargs)

        try:
            return getattr(self._persistent[kind], method)(*args, **kwargs)
        except StorageUnavailableError as exc:
            if not self.allow_fallback:
                raise
            logger.error(f"{kind}.{method} failed on persistent storage: {exc}")
            self._degrade(f"{kind}.{method}: {exc}")
            return getattr(self._volatile[kind], method)(*args, **kwargs)
