"""Local SQLite caching utility for API responses."""

import json
import sqlite3
import time
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from stockdash.core.logger import logger


class ResponseCache:
    """A minimal SQLite-backed key-value cache for JSON API responses, with per-read expiry.

    Used to keep repeated news queries from burning free-tier credits.
    """

    def __init__(
        self,
        db_path: str = "output/.cache.db",
        ttl_seconds: float = 900.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the SQLite cache.

        Args:
            db_path (str): Path to the SQLite database file, or ``":memory:"``.
            ttl_seconds (float): Entries older than this are treated as misses.
            clock (Callable[[], float]): Wall-clock source in epoch seconds.
        """
        self.db_path = db_path
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._memory_conn: Optional[sqlite3.Connection] = None
        if db_path == ":memory:":
            self._memory_conn = sqlite3.connect(db_path, check_same_thread=False)
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction; file connections are closed afterwards."""
        if self._memory_conn is not None:
            with self._memory_conn:
                yield self._memory_conn
            return
        with closing(sqlite3.connect(self.db_path, check_same_thread=False)) as conn:
            with conn:
                yield conn

    def _init_db(self) -> None:
        """Create the cache table if it doesn't exist."""
        with self._get_connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS response_cache (
                    cache_key TEXT PRIMARY KEY,
                    payload TEXT,
                    stored_at REAL
                )
                """
            )

    def get(self, key: str) -> Optional[Any]:
        """
        Retrieve a cached response, or ``None`` when absent or expired.

        Args:
            key (str): The cache key.

        Returns:
            Optional[Any]: The parsed JSON response if found and fresh, else None.
        """
        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "SELECT payload, stored_at FROM response_cache WHERE cache_key = ?",
                    (key,)
                )
                row = cursor.fetchone()
            if row:
                age = self._clock() - float(row[1])
                if age < self.ttl_seconds:
                    logger.debug(f"Cache hit for key: {key}")
                    return json.loads(row[0])
                logger.debug(f"Cache expired for key: {key} (age {age:.0f}s)")
        except sqlite3.Error as e:
            logger.error(f"SQLite error retrieving cache for key {key}: {e}")
        except json.JSONDecodeError as e:
            logger.error(f"JSON decode error for cached key {key}: {e}")

        logger.debug(f"Cache miss for key: {key}")
        return None

    def set(self, key: str, value: Any) -> None:
        """
        Store a JSON-serialisable response in the cache.

        Args:
            key (str): The cache key.
            value (Any): The response to store.
        """
        try:
            value_str = json.dumps(value)
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO response_cache (cache_key, payload, stored_at)
                    VALUES (?, ?, ?)
                    """,
                    (key, value_str, self._clock())
                )
        except (sqlite3.Error, TypeError) as e:
            logger.error(f"Error saving to cache for key {key}: {e}")
