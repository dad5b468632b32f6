import json
import logging
import os
import sqlite3
import time

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Handles SQL persistence to keep the pet 'alive' on disk.

    A single key-value table; each value is replaced in one transaction.
    """
    def __init__(self, db_path):
        self.db_path = db_path
        self.conn = sqlite3.connect(db_path)
        self.create_tables()

    def create_tables(self):
        query = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at REAL
        )
        """
        self.conn.execute(query)
        self.conn.commit()

    def get(self, key):
        cursor = self.conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row else None

    def set(self, key, value):
        with self.conn:
            self.conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, time.time()),
            )

    def delete(self, key):
        with self.conn:
            self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def close(self):
        self.conn.close()


class JsonFileStore:
    """Key-value store kept in one JSON file.

    Uses a simple atomic replace pattern to avoid truncated saves.
    """
    def __init__(self, path):
        self.path = path

    def _read_all(self):
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _write_all(self, data):
        tmp = self.path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp, self.path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def _read_for_update(self):
        # A corrupt file must not block writes; the next write replaces it
        try:
            return self._read_all()
        except (ValueError, RecursionError) as e:
            logger.warning("Discarding unreadable store file '%s': %s", self.path, e)
            return {}

    def get(self, key):
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key, value):
        data = self._read_for_update()
        data[key] = value
        self._write_all(data)

    def delete(self, key):
        data = self._read_for_update()
        if data.pop(key, None) is not None:
            self._write_all(data)

    def close(self):
        pass


def open_store(backend, path):
    """Open the configured key-value backend ('sqlite' or 'json')."""
    if backend == "sqlite":
        return DatabaseManager(path)
    if backend == "json":
        return JsonFileStore(path)
    raise ValueError(f"Unknown store backend '{backend}'")
