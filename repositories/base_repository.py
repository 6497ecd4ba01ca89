"""
Shared SQLite plumbing for the persistent stores.
"""

import logging
import sqlite3
from abc import ABC
from contextlib import contextmanager

from database import Database
from repositories.errors import StorageUnavailableError

logger = logging.getLogger("pod_bot.repositories")


class BaseRepository(ABC):
    """
    Connection handling for SQLite-backed stores.

    Every operation opens its own short-lived connection. sqlite3 errors
    other than integrity violations are re-raised as StorageUnavailableError,
    which is what the store selector fails over on.
    """

    # Schema setup runs once per database file per process
    _schema_initialized_paths = set()

    def __init__(self, db_path: str):
        """
        Args:
            db_path: SQLite database file

        Raises:
            StorageUnavailableError: If the file cannot be opened or migrated
        """
        self.db_path = db_path
        initialized = type(self)._schema_initialized_paths
        if db_path not in initialized:
            try:
                Database(db_path)
            except sqlite3.Error as exc:
                raise StorageUnavailableError(f"Cannot initialize database at {db_path}: {exc}") from exc
            initialized.add(db_path)

    def get_connection(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA busy_timeout=5000")
        except sqlite3.Error as exc:
            raise StorageUnavailableError(f"Cannot open database at {self.db_path}: {exc}") from exc
        return conn

    @contextmanager
    def _managed(self, immediate: bool):
        conn = self.get_connection()
        try:
            if immediate:
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            raise
        except sqlite3.Error as exc:
            conn.rollback()
            logger.debug(f"SQLite error on {self.db_path}: {exc}")
            raise StorageUnavailableError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def connection(self):
        """Connection that commits on success and rolls back on any error."""
        return self._managed(immediate=False)

    def atomic_transaction(self):
        """
        Like connection(), but takes the write lock up front (BEGIN IMMEDIATE).

        Use it wherever a balance is read and then written, so a concurrent
        writer cannot slip in between:

            with self.atomic_transaction() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT balance FROM accounts WHERE account_id = ?", (account_id,))
                ...
        """
        return self._managed(immediate=True)
