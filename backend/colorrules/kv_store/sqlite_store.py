"""
SQLite-backed key-value store. One connection per handle, explicit BEGIN/COMMIT/ROLLBACK.
"""
import logging
import sqlite3
from typing import Optional

from ..errors import StoreUnavailableError
from .store import KeyValueStore

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS key_value_store (
        _app_name TEXT NOT NULL,
        _table_id TEXT NOT NULL,
        _partition TEXT NOT NULL,
        _aspect TEXT NOT NULL,
        _key TEXT NOT NULL,
        _value TEXT NOT NULL,
        PRIMARY KEY (_app_name, _table_id, _partition, _aspect, _key)
    )
"""


class SqliteHandle:
    def __init__(self, scope_id: str, conn: sqlite3.Connection):
        self.scope_id = scope_id
        self.conn = conn


class SqliteKeyValueStore(KeyValueStore):
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def open(self, scope_id: str) -> SqliteHandle:
        if not scope_id:
            raise StoreUnavailableError("A scope id is required to open the store")
        try:
            # isolation_level=None: transactions are driven explicitly by begin/end
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Could not open key-value store at {self.db_path}: {e}") from e
        try:
            conn.execute(CREATE_TABLE_SQL)
        except sqlite3.Error as e:
            conn.close()
            raise StoreUnavailableError(f"Could not prepare key-value store at {self.db_path}: {e}") from e
        return SqliteHandle(scope_id, conn)

    def begin(self, handle: SqliteHandle) -> None:
        try:
            handle.conn.execute('BEGIN IMMEDIATE')
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Could not begin transaction: {e}") from e

    def get_text(self, handle, table_id, partition, aspect, key) -> Optional[str]:
        try:
            row = handle.conn.execute(
                """
                SELECT _value FROM key_value_store
                WHERE _app_name = ? AND _table_id = ? AND _partition = ? AND _aspect = ? AND _key = ?
                """,
                (handle.scope_id, table_id, partition, aspect, key),
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Read failed for {partition}/{aspect}/{key}: {e}") from e
        return row[0] if row else None

    def set_text(self, handle, table_id, partition, aspect, key, value) -> None:
        try:
            handle.conn.execute(
                """
                INSERT OR REPLACE INTO key_value_store
                    (_app_name, _table_id, _partition, _aspect, _key, _value)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (handle.scope_id, table_id, partition, aspect, key, value),
            )
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Write failed for {partition}/{aspect}/{key}: {e}") from e

    def remove_key(self, handle, table_id, partition, aspect, key) -> None:
        try:
            handle.conn.execute(
                """
                DELETE FROM key_value_store
                WHERE _app_name = ? AND _table_id = ? AND _partition = ? AND _aspect = ? AND _key = ?
                """,
                (handle.scope_id, table_id, partition, aspect, key),
            )
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Delete failed for {partition}/{aspect}/{key}: {e}") from e

    def end(self, handle: SqliteHandle, success: bool) -> None:
        try:
            if handle.conn.in_transaction:
                if success:
                    handle.conn.execute('COMMIT')
                else:
                    handle.conn.execute('ROLLBACK')
                    logger.info(f"Rolled back key-value transaction in scope '{handle.scope_id}'")
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Could not end transaction: {e}") from e
        finally:
            handle.conn.close()
