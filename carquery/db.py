# carquery/db.py
import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator, Protocol

from .config import settings
from .errors import ExecutionError, StoreUnavailableError
from .models import AcceptedStatement, ResultRow

logger = logging.getLogger(__name__)


class Store(Protocol):
    def run(self, sql: str) -> list[ResultRow]: ...


class SQLiteStore:
    """
    Read-only view over an on-disk SQLite snapshot.

    Every call hydrates a private in-memory copy of the file, so concurrent
    requests never share a connection and nothing can write back to disk.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    @classmethod
    def from_settings(cls) -> "SQLiteStore":
        return cls(settings.db_path)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        if not self.db_path.is_file():
            raise StoreUnavailableError(f"Database file not found: {self.db_path}")
        try:
            source = sqlite3.connect(f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Cannot open database: {e}") from e

        conn = sqlite3.connect(":memory:")
        try:
            try:
                source.backup(conn)
            except sqlite3.Error as e:
                raise StoreUnavailableError(f"Cannot load database: {e}") from e
            finally:
                source.close()
            # Second line of defense: the engine refuses any write.
            conn.execute("PRAGMA query_only = ON")
            yield conn
        finally:
            conn.close()

    def run(self, sql: str) -> list[ResultRow]:
        """
        Runs exactly one statement and returns rows as dicts, in the order
        the engine produced them. No LIMIT is added.
        """
        with self.connect() as conn:
            try:
                with closing(conn.cursor()) as cur:
                    cur.execute(sql)
                    cols = [d[0] for d in cur.description] if cur.description else []
                    return [dict(zip(cols, row)) for row in cur.fetchall()]
            except (sqlite3.Error, sqlite3.Warning) as e:
                raise ExecutionError(str(e)) from e


class QueryExecutor:
    def __init__(self, store: Store):
        self.store = store

    def execute(self, statement: AcceptedStatement) -> list[ResultRow]:
        if not isinstance(statement, AcceptedStatement):
            raise TypeError("execute() only accepts statements that passed the gate")
        try:
            rows = self.store.run(statement.text)
        except (ExecutionError, StoreUnavailableError) as e:
            logger.error("Query failed: %s | SQL: %s", e.message, statement.text)
            raise
        logger.info("Query returned %d row(s)", len(rows))
        return rows
