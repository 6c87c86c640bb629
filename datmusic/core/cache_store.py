"""
Key/value cache stores used for search results and byte-length memoization.

Both stores expose the same get/put/has/remember/forget contract. A ``ttl`` of
``None`` keeps the entry forever. Values must be JSON serializable so the
SQLite store can share them between processes.
"""

from __future__ import annotations

import json
import sqlite3
import time
from abc import ABC, abstractmethod
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple


class CacheStore(ABC):
    """Expired entries are swept every ``purge_every`` writes."""

    def __init__(self, purge_every: int = 256):
        self.purge_every = max(1, int(purge_every))
        self._writes = 0

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def forget(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        raise NotImplementedError

    def close(self) -> None:
        pass

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def remember(self, key: str, ttl: Optional[float], producer: Callable[[], Any]) -> Any:
        """Return the cached value, or compute, store and return it."""
        value = self.get(key)
        if value is not None:
            return value
        value = producer()
        if value is not None:
            self.put(key, value, ttl)
        return value

    def _count_write(self) -> None:
        self._writes += 1
        if self._writes % self.purge_every == 0:
            self.purge_expired()


class MemoryCacheStore(CacheStore):
    """Process-local store; the clock is injectable so TTL can be tested."""

    def __init__(self, clock: Callable[[], float] = time.time, purge_every: int = 256):
        super().__init__(purge_every)
        self._clock = clock
        self._lock = RLock()
        self._entries: Dict[str, Tuple[Optional[float], Any]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if expires_at is not None and expires_at <= self._clock():
                del self._entries[key]
                return default
            return value

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = None if ttl is None else self._clock() + float(ttl)
        with self._lock:
            self._entries[key] = (expires_at, value)
        self._count_write()

    def forget(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, (expires_at, _) in self._entries.items() if expires_at is not None and expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)


class SqliteCacheStore(CacheStore):
    """Durable store shared by every worker process pointing at the same file."""

    def __init__(
        self,
        data_dir: Path,
        filename: str = "cache.db",
        clock: Callable[[], float] = time.time,
        purge_every: int = 256,
    ):
        super().__init__(purge_every)
        self._clock = clock
        self._lock = RLock()
        self._db_path = Path(data_dir) / filename
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False, timeout=10.0)
        self._conn.row_factory = sqlite3.Row
        with self._conn:
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._migrate()

    def _migrate(self) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_entries (
                  key TEXT PRIMARY KEY,
                  value_json TEXT NOT NULL,
                  expires_at REAL
                )
                """
            )

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            row = self._conn.execute(
                "SELECT value_json, expires_at FROM cache_entries WHERE key = ?",
                (key,),
            ).fetchone()
        if not row:
            return default
        if row["expires_at"] is not None and float(row["expires_at"]) <= self._clock():
            self.forget(key)
            return default
        return json.loads(row["value_json"])

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = None if ttl is None else self._clock() + float(ttl)
        payload = json.dumps(value, ensure_ascii=False)
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO cache_entries(key, value_json, expires_at) VALUES (?,?,?)",
                (key, payload, expires_at),
            )
        self._count_write()

    def forget(self, key: str) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))

    def purge_expired(self) -> int:
        with self._lock, self._conn:
            cur = self._conn.execute(
                "DELETE FROM cache_entries WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (self._clock(),),
            )
            return int(cur.rowcount or 0)

    def close(self) -> None:
        with self._lock:
            self._conn.close()
