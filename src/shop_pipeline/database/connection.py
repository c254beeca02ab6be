"""SQLite connection management with context manager."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path

# Seconds to wait on a write lock held by another process (a scheduled
# reconcile run and the shop front desk share one file)
BUSY_TIMEOUT = 10.0


class DatabaseConnection:
    """Opens a fresh SQLite connection per unit of work.

    Every connection gets ``sqlite3.Row`` rows and foreign key
    enforcement. Writes commit when the ``with`` block exits cleanly and
    roll back on any exception.
    """

    def __init__(self, db_path: str | Path, timeout: float = BUSY_TIMEOUT):
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def get_connection(self):
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def execute(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Run a single statement and return all rows."""
        with self.get_connection() as conn:
            return conn.execute(sql, params).fetchall()

    def backup_to(self, target: str | Path) -> Path:
        """Write a consistent copy of the database to ``target``.

        Uses SQLite's online backup, so it is safe while other
        connections are writing.
        """
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        src = self._connect()
        dest = sqlite3.connect(str(target))
        try:
            src.backup(dest)
        finally:
            dest.close()
            src.close()
        return target
