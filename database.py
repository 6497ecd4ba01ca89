"""
Database bootstrap for the economy ledger.
"""

import logging
import sqlite3

from infrastructure.schema_manager import SchemaManager

logger = logging.getLogger("pod_bot.database")


class Database:
    """
    Ensures the SQLite schema exists at ``db_path``.

    Repositories open their own connections; this object only owns
    schema creation and exposes a raw connection helper for tooling.
    """

    def __init__(self, db_path: str = "pod_economy.db"):
        self.db_path = db_path
        SchemaManager(db_path).initialize()

    def get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn
