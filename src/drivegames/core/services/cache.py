from __future__ import annotations

"""
Tiered Cache.

Two independent tiers behind one routing facade:
- DurableCache: SQLite-backed, survives restarts, entries expire after a
  fixed TTL (checked and evicted at read time).
- SessionCache: in-memory, no TTL, lives as long as the explorer session.

Writes fail open: a full or broken store degrades caching to a no-op and
never fails the operation that produced the value.
"""

import json
import logging
import sqlite3
import threading
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from drivegames.domain import constants as const
from drivegames.domain.errors import StorageFull
from drivegames.domain.models import CacheEntry
from drivegames.infra.fs import ensure_parent_dir

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheKind(str, Enum):
    METADATA = "meta"
    CHILDREN = "children"
    TREE = "tree"


DURABLE_KINDS = (CacheKind.METADATA, CacheKind.CHILDREN)


# -----------------------------------------------------------------------------
# DURABLE TIER
# -----------------------------------------------------------------------------

class DurableCache:
    """
    Time-boxed persistent cache for node metadata and child listings.

    Args:
        db_path: SQLite file location.
        ttl_seconds: Entry lifetime; an entry is valid iff age < ttl.
        namespace: Key prefix separating our rows from unrelated state.
        clock: Time source (epoch seconds), injectable for tests.
        max_entries: Optional quota; writes beyond it raise StorageFull internally.
    """

    def __init__(
            self,
            db_path: str,
            ttl_seconds: float = const.DEFAULT_CACHE_TTL_SECONDS,
            namespace: str = const.DURABLE_CACHE_NAMESPACE,
            clock: Clock = time.time,
            max_entries: Optional[int] = None,
    ) -> None:
        self._db_path = db_path
        self._ttl = float(ttl_seconds)
        self._namespace = namespace
        self._clock = clock
        self._max_entries = max_entries
        self._lock = threading.Lock()
        self._enabled = True

        self._init_db()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def ttl(self) -> float:
        return self._ttl

    def _init_db(self) -> None:
        try:
            ensure_parent_dir(self._db_path)
            with self._lock, sqlite3.connect(self._db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS durable_cache (
                        cache_key TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        created_at REAL NOT NULL
                    )
                """)
                conn.commit()
            logger.debug(f"DurableCache: database ready at {self._db_path}")

        except (sqlite3.Error, OSError) as e:
            logger.warning(f"DurableCache: cannot open {self._db_path}. Caching disabled. Error: {e}")
            self._enabled = False

    def key_for(self, kind: str, node_id: str) -> str:
        return f"{self._namespace}:{kind}:{node_id}"

    # -------------------------------------------------------------------------
    # READ / WRITE
    # -------------------------------------------------------------------------

    def get(self, kind: str, node_id: str) -> Optional[Any]:
        """
        Return the cached value, or None when absent, expired or unreadable.

        Expired and undecodable rows are deleted on the spot.
        """
        if not self._enabled:
            return None

        key = self.key_for(kind, node_id)
        try:
            with self._lock, sqlite3.connect(self._db_path) as conn:
                row = conn.execute(
                    "SELECT payload, created_at FROM durable_cache WHERE cache_key = ?",
                    (key,),
                ).fetchone()
                if row is None:
                    return None

                entry = CacheEntry(value=row[0], created_at=float(row[1]))
                if not entry.is_valid(self._clock(), self._ttl):
                    conn.execute("DELETE FROM durable_cache WHERE cache_key = ?", (key,))
                    conn.commit()
                    logger.debug(f"DurableCache: expired {key}")
                    return None

                try:
                    return json.loads(entry.value)
                except ValueError:
                    conn.execute("DELETE FROM durable_cache WHERE cache_key = ?", (key,))
                    conn.commit()
                    logger.warning(f"DurableCache: dropped undecodable entry {key}")
                    return None

        except sqlite3.Error as e:
            logger.warning(f"DurableCache: read error for {key}: {e}")
            return None

    def set(self, kind: str, node_id: str, value: Any) -> bool:
        """
        Store a value; on a failed write evict expired rows and retry once.

        Returns:
            bool: True if the value is now cached.
        """
        if not self._enabled:
            return False

        key = self.key_for(kind, node_id)
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(f"DurableCache: value for {key} is not serializable: {e}")
            return False

        try:
            self._write(key, payload)
            return True
        except StorageFull as first:
            logger.debug(f"DurableCache: write failed for {key} ({first}). Evicting expired entries.")

        self.invalidate_expired()
        try:
            self._write(key, payload)
            return True
        except StorageFull as e:
            logger.warning(f"DurableCache: storage full, {key} not cached: {e}")
            return False

    def _write(self, key: str, payload: str) -> None:
        try:
            with self._lock, sqlite3.connect(self._db_path) as conn:
                if self._max_entries is not None:
                    (count,) = conn.execute(
                        "SELECT COUNT(*) FROM durable_cache WHERE cache_key != ?", (key,)
                    ).fetchone()
                    if count >= self._max_entries:
                        raise StorageFull(f"quota of {self._max_entries} entries reached")
                conn.execute(
                    "INSERT OR REPLACE INTO durable_cache (cache_key, payload, created_at) VALUES (?, ?, ?)",
                    (key, payload, self._clock()),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise StorageFull(str(e)) from e

    # -------------------------------------------------------------------------
    # MAINTENANCE
    # -------------------------------------------------------------------------

    def invalidate_expired(self) -> int:
        """Delete every expired row of our namespace. Returns the number removed."""
        if not self._enabled:
            return 0

        cutoff = self._clock() - self._ttl
        try:
            with self._lock, sqlite3.connect(self._db_path) as conn:
                cur = conn.execute(
                    "DELETE FROM durable_cache WHERE cache_key LIKE ? AND created_at <= ?",
                    (f"{self._namespace}:%", cutoff),
                )
                conn.commit()
                removed = cur.rowcount
        except sqlite3.Error as e:
            logger.warning(f"DurableCache: expiry sweep failed: {e}")
            return 0

        if removed:
            logger.info(f"DurableCache: evicted {removed} expired entries.")
        return removed

    def clear(self) -> None:
        """Remove every row of our namespace."""
        if not self._enabled:
            return
        try:
            with self._lock, sqlite3.connect(self._db_path) as conn:
                conn.execute("DELETE FROM durable_cache WHERE cache_key LIKE ?", (f"{self._namespace}:%",))
                conn.commit()
            logger.info("DurableCache: storage purged.")
        except sqlite3.Error as e:
            logger.error(f"DurableCache: failed to purge: {e}")

    def __len__(self) -> int:
        if not self._enabled:
            return 0
        try:
            with self._lock, sqlite3.connect(self._db_path) as conn:
                (count,) = conn.execute(
                    "SELECT COUNT(*) FROM durable_cache WHERE cache_key LIKE ?", (f"{self._namespace}:%",)
                ).fetchone()
            return int(count)
        except sqlite3.Error:
            return 0


# -----------------------------------------------------------------------------
# SESSION TIER
# -----------------------------------------------------------------------------

class SessionCache:
    """In-memory cache without expiry, cleared only by `clear()`."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    @staticmethod
    def key_for(kind: str, node_id: str) -> str:
        return f"{kind}:{node_id}"

    def get(self, kind: str, node_id: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(self.key_for(kind, node_id))
        return entry.value if entry is not None else None

    def set(self, kind: str, node_id: str, value: Any) -> bool:
        with self._lock:
            self._entries[self.key_for(kind, node_id)] = CacheEntry(value=value, created_at=self._clock())
        return True

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# -----------------------------------------------------------------------------
# ROUTING FACADE
# -----------------------------------------------------------------------------

class TieredCache:
    """
    Routes cache kinds to their tier.

    `meta` and `children` live in the durable tier; `tree` lives in the
    session tier.
    """

    def __init__(self, durable: DurableCache, session: Optional[SessionCache] = None) -> None:
        self.durable = durable
        self.session = session or SessionCache()

    def _tier(self, kind: CacheKind) -> Any:
        return self.durable if CacheKind(kind) in DURABLE_KINDS else self.session

    def get(self, kind: CacheKind, node_id: str) -> Optional[Any]:
        value = self._tier(kind).get(CacheKind(kind).value, node_id)
        logger.debug(f"Cache {'hit' if value is not None else 'miss'}: {CacheKind(kind).value}/{node_id}")
        return value

    def set(self, kind: CacheKind, node_id: str, value: Any) -> bool:
        return self._tier(kind).set(CacheKind(kind).value, node_id, value)

    def invalidate_expired(self) -> int:
        return self.durable.invalidate_expired()

    def reset(self) -> None:
        """Clear every tier (root switch / reconnect)."""
        self.durable.clear()
        self.session.clear()
        logger.info("TieredCache: all tiers cleared.")
