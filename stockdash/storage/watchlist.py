"""Watchlist persistence: the user's tracked symbols.

One logical table — ``id, symbol, name, added_at, is_active``. Symbols are
stored upper-cased and are unique among *active* rows; removal only clears
``is_active``, so a removed symbol can be added again as a new row.
"""

import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import closing, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from stockdash.core.errors import AlreadyExistsError
from stockdash.core.logger import logger
from stockdash.models.datatypes import WatchlistEntry


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WatchlistStore(ABC):
    """Abstract add / list / soft-remove store."""

    @abstractmethod
    def list(self) -> List[WatchlistEntry]:
        """Return active entries in insertion order."""
        pass

    @abstractmethod
    def add(self, symbol: str, name: str) -> WatchlistEntry:
        """
        Add a symbol.

        Raises:
            AlreadyExistsError: An active entry already holds the symbol (any case).
        """
        pass

    @abstractmethod
    def remove(self, symbol: str) -> None:
        """Deactivate the symbol's active entry; unknown symbols are ignored."""
        pass

    def get(self, symbol: str) -> Optional[WatchlistEntry]:
        """Return the active entry for ``symbol`` if there is one."""
        key = symbol.strip().upper()
        return next((e for e in self.list() if e.symbol == key), None)


class InMemoryWatchlistStore(WatchlistStore):
    """Process-local store; contents vanish with the instance."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._rows: List[WatchlistEntry] = []
        self._next_id = 1
        self._clock = clock
        self._lock = threading.Lock()

    def list(self) -> List[WatchlistEntry]:
        with self._lock:
            return [e for e in self._rows if e.is_active]

    def add(self, symbol: str, name: str) -> WatchlistEntry:
        key = symbol.strip().upper()
        with self._lock:
            if any(e.is_active and e.symbol == key for e in self._rows):
                raise AlreadyExistsError(key)
            entry = WatchlistEntry(
                id=self._next_id, symbol=key, name=name, added_at=self._clock(), is_active=True
            )
            self._next_id += 1
            self._rows.append(entry)
        logger.info(f"Watchlist: added {key}")
        return entry

    def remove(self, symbol: str) -> None:
        key = symbol.strip().upper()
        with self._lock:
            for entry in self._rows:
                if entry.is_active and entry.symbol == key:
                    entry.is_active = False
        logger.info(f"Watchlist: removed {key}")


class SQLiteWatchlistStore(WatchlistStore):
    """SQLite-backed store; survives restarts.

    A partial unique index on active rows enforces symbol uniqueness inside
    the database as well as in :meth:`add`.
    """

    def __init__(self, db_path: str = "output/watchlist.db", clock: Callable[[], datetime] = _utcnow) -> None:
        self.db_path = db_path
        self._clock = clock
        self._lock = threading.Lock()
        self._memory_conn: Optional[sqlite3.Connection] = None
        if db_path == ":memory:":
            self._memory_conn = sqlite3.connect(db_path, check_same_thread=False)
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        if self._memory_conn is not None:
            with self._memory_conn:
                yield self._memory_conn
            return
        with closing(sqlite3.connect(self.db_path, check_same_thread=False)) as conn:
            with conn:
                yield conn

    def _init_db(self) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS watchlist (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    symbol TEXT NOT NULL,
                    name TEXT NOT NULL,
                    added_at TEXT NOT NULL,
                    is_active INTEGER NOT NULL DEFAULT 1
                )
                """
            )
            conn.execute(
                """
                CREATE UNIQUE INDEX IF NOT EXISTS ux_watchlist_active_symbol
                ON watchlist (symbol) WHERE is_active = 1
                """
            )

    @staticmethod
    def _row_to_entry(row: tuple) -> WatchlistEntry:
        return WatchlistEntry(
            id=int(row[0]),
            symbol=row[1],
            name=row[2],
            added_at=datetime.fromisoformat(row[3]),
            is_active=bool(row[4]),
        )

    def list(self) -> List[WatchlistEntry]:
        with self._lock, self._get_connection() as conn:
            rows = conn.execute(
                "SELECT id, symbol, name, added_at, is_active FROM watchlist "
                "WHERE is_active = 1 ORDER BY id"
            ).fetchall()
        return [self._row_to_entry(r) for r in rows]

    def add(self, symbol: str, name: str) -> WatchlistEntry:
        key = symbol.strip().upper()
        added_at = self._clock()
        with self._lock:
            try:
                with self._get_connection() as conn:
                    cursor = conn.execute(
                        "INSERT INTO watchlist (symbol, name, added_at, is_active) VALUES (?, ?, ?, 1)",
                        (key, name, added_at.isoformat()),
                    )
                    row_id = cursor.lastrowid
            except sqlite3.IntegrityError as exc:
                raise AlreadyExistsError(key) from exc
        logger.info(f"Watchlist: added {key} (id={row_id})")
        return WatchlistEntry(id=int(row_id), symbol=key, name=name, added_at=added_at, is_active=True)

    def remove(self, symbol: str) -> None:
        key = symbol.strip().upper()
        with self._lock, self._get_connection() as conn:
            conn.execute(
                "UPDATE watchlist SET is_active = 0 WHERE symbol = ? AND is_active = 1",
                (key,),
            )
        logger.info(f"Watchlist: removed {key}")

    def history(self) -> Dict[str, int]:
        """Row count per symbol including inactive rows."""
        with self._lock, self._get_connection() as conn:
            rows = conn.execute("SELECT symbol, COUNT(*) FROM watchlist GROUP BY symbol").fetchall()
        return {symbol: int(count) for symbol, count in rows}


def build_watchlist_store(settings) -> WatchlistStore:
    """SQLite when ``settings.watchlist_db`` is set, otherwise in-memory."""
    if settings.watchlist_db:
        return SQLiteWatchlistStore(settings.watchlist_db)
    return InMemoryWatchlistStore()
