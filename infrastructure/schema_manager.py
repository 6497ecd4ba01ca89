"""
Schema and migration management for SQLite database.
"""

import logging
import sqlite3

logger = logging.getLogger("pod_bot.schema")


class SchemaManager:
    """
    Owns schema creation and migrations.

    Call initialize() to ensure schema is present and migrations are applied.
    """

    def __init__(self, db_path: str, use_uri: bool = False):
        self.db_path = db_path
        self.use_uri = use_uri

    def initialize(self) -> None:
        """Create base schema and apply migrations."""
        logger.info(f"Initializing database schema: {self.db_path}")
        with self._connect() as conn:
            cursor = conn.cursor()
            self._create_base_schema(cursor)
            self._create_schema_migrations_table(cursor)
            self._run_migrations(cursor)
            conn.commit()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, uri=self.use_uri)
        conn.row_factory = sqlite3.Row
        if not self.use_uri:  # Skip WAL for in-memory databases
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA busy_timeout=5000")
        return conn

    def _create_base_schema(self, cursor) -> None:
        # Accounts: one row per user, balance can never go negative
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS accounts (
                account_id INTEGER PRIMARY KEY,
                display_name TEXT,
                balance INTEGER NOT NULL DEFAULT 0 CHECK (balance >= 0),
                last_work_at INTEGER,
                bailout_used INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

        # Work sessions (append-only)
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS work_sessions (
                session_id INTEGER PRIMARY KEY AUTOINCREMENT,
                account_id INTEGER NOT NULL,
                reward INTEGER NOT NULL,
                balance_before INTEGER NOT NULL,
                balance_after INTEGER NOT NULL,
                was_bailout INTEGER NOT NULL DEFAULT 0,
                worked_at INTEGER NOT NULL
            )
            """
        )

        # Transfers (append-only audit log, also feeds daily limits)
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS transactions (
                transaction_id INTEGER PRIMARY KEY AUTOINCREMENT,
                sender_id INTEGER NOT NULL,
                receiver_id INTEGER NOT NULL,
                amount INTEGER NOT NULL,
                transaction_type TEXT NOT NULL DEFAULT 'transfer',
                memo TEXT,
                sender_balance_before INTEGER,
                sender_balance_after INTEGER,
                receiver_balance_before INTEGER,
                receiver_balance_after INTEGER,
                created_at INTEGER NOT NULL
            )
            """
        )

        # Roulette rounds (append-only)
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS wager_rounds (
                round_id INTEGER PRIMARY KEY AUTOINCREMENT,
                account_id INTEGER NOT NULL,
                bet_type TEXT NOT NULL,
                bet_selector INTEGER,
                bet_amount INTEGER NOT NULL,
                outcome_number INTEGER NOT NULL,
                outcome_color TEXT NOT NULL,
                won INTEGER NOT NULL DEFAULT 0,
                win_amount INTEGER NOT NULL DEFAULT 0,
                payout_ratio INTEGER NOT NULL,
                balance_before INTEGER NOT NULL,
                balance_after INTEGER NOT NULL,
                played_at INTEGER NOT NULL
            )
            """
        )

    # --- Migration helpers ---

    def _add_column_if_not_exists(self, cursor, table: str, column: str, column_type: str) -> None:
        try:
            cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
        except sqlite3.OperationalError:
            pass

    def _create_schema_migrations_table(self, cursor) -> None:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

    def _run_migrations(self, cursor) -> None:
        applied = {row["name"] for row in cursor.execute("SELECT name FROM schema_migrations")}
        for name, action in self._get_migrations():
            if name in applied:
                continue
            logger.info(f"Applying migration: {name}")
            action(cursor)
            cursor.execute(
                "INSERT INTO schema_migrations (name) VALUES (?)",
                (name,),
            )

    def _get_migrations(self):
        return [
            ("add_bailout_count_to_accounts", self._migration_add_bailout_count),
            ("add_transfer_fee_column", self._migration_add_transfer_fee_column),
            ("add_wager_consolation_columns", self._migration_add_wager_consolation_columns),
            ("add_history_indexes_v1", self._migration_add_history_indexes_v1),
        ]

    # --- Migrations ---

    def _migration_add_bailout_count(self, cursor) -> None:
        # Lifetime bailout uses; bailout_used alone is re-armed after a bankruptcy
        self._add_column_if_not_exists(cursor, "accounts", "bailout_count", "INTEGER NOT NULL DEFAULT 0")
        cursor.execute("UPDATE accounts SET bailout_count = 1 WHERE bailout_used = 1 AND bailout_count = 0")

    def _migration_add_transfer_fee_column(self, cursor) -> None:
        self._add_column_if_not_exists(cursor, "transactions", "fee", "INTEGER NOT NULL DEFAULT 0")

    def _migration_add_wager_consolation_columns(self, cursor) -> None:
        self._add_column_if_not_exists(cursor, "wager_rounds", "consolation_applied", "INTEGER NOT NULL DEFAULT 0")
        self._add_column_if_not_exists(cursor, "wager_rounds", "consolation_amount", "INTEGER NOT NULL DEFAULT 0")
        self._add_column_if_not_exists(cursor, "wager_rounds", "losing_streak", "INTEGER NOT NULL DEFAULT 0")

    def _migration_add_history_indexes_v1(self, cursor) -> None:
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_wager_rounds_account_played ON wager_rounds(account_id, played_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_transactions_sender_created ON transactions(sender_id, created_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_work_sessions_account_worked ON work_sessions(account_id, worked_at)"
        )
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_accounts_balance ON accounts(balance DESC)")
