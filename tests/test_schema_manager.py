import sqlite3

from infrastructure.schema_manager import SchemaManager


def _tables(db_path):
    with sqlite3.connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
        return {row[0] for row in cursor.fetchall()}


def _columns(db_path, table):
    with sqlite3.connect(db_path) as conn:
        return {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}


def test_schema_manager_initializes_tables(tmp_path):
    """SchemaManager creates the ledger and history tables."""
    db_path = str(tmp_path / "test.db")
    SchemaManager(db_path).initialize()

    required = {"accounts", "work_sessions", "transactions", "wager_rounds", "schema_migrations"}
    assert required.issubset(_tables(db_path))


def test_migrations_add_columns(tmp_path):
    db_path = str(tmp_path / "test.db")
    SchemaManager(db_path).initialize()

    assert "bailout_count" in _columns(db_path, "accounts")
    assert "fee" in _columns(db_path, "transactions")
    assert {"consolation_applied", "consolation_amount"}.issubset(_columns(db_path, "wager_rounds"))


def test_initialize_is_idempotent(tmp_path):
    db_path = str(tmp_path / "test.db")
    SchemaManager(db_path).initialize()
    SchemaManager(db_path).initialize()

    with sqlite3.connect(db_path) as conn:
        names = [row[0] for row in conn.execute("SELECT name FROM schema_migrations")]
    assert len(names) == len(set(names))
    assert "add_history_indexes_v1" in names
