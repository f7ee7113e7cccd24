"""In-memory cache of parsed entity metadata.

Entries expire a fixed time after insertion and the least recently used
entry is evicted when the cache is full. Reads do not extend the lifetime
of an entry.
"""

import logging
import time
from collections import OrderedDict
from datetime import timedelta
from threading import Lock
from typing import Callable, Optional, Tuple, Union

from .models.metadata import EntityMetadata

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_TTL_SECONDS = 3600.0


class MetadataCache:
    """Time and size bounded store of EntityMetadata keyed by entity ID.

    Thread-safe: a single lock guards the underlying ordered dict so the
    cache can be shared by concurrent fetches without caller-side locking.

    Attributes:
        max_entries: Maximum number of entries held
        ttl: Time-to-live of each entry in seconds

    Example:
        >>> cache = MetadataCache(max_entries=100, ttl=300)
        >>> cache.insert("https://idp.example.org/shibboleth", metadata)
        >>> cache.get("https://idp.example.org/shibboleth") is metadata
        True
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl: Union[float, timedelta] = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty cache.

        Args:
            max_entries: Capacity bound, must be >= 1
            ttl: Entry lifetime in seconds or as a timedelta, must be > 0
            clock: Monotonic time source (injectable for tests)

        Raises:
            ValueError: If max_entries or ttl is out of range
        """
        if isinstance(ttl, timedelta):
            ttl = ttl.total_seconds()

        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        if ttl <= 0:
            raise ValueError(f"ttl must be > 0, got {ttl}")

        self.max_entries = max_entries
        self.ttl = float(ttl)
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, EntityMetadata]]" = OrderedDict()
        self._lock = Lock()

        logger.debug(
            "MetadataCache initialized with max_entries=%d, ttl=%.1fs",
            self.max_entries,
            self.ttl,
        )

    def get(self, key: str) -> Optional[EntityMetadata]:
        """Return cached metadata if present and not expired.

        Args:
            key: Entity identifier

        Returns:
            Cached EntityMetadata or None if missing or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            inserted_at, value = entry
            if self._is_expired(inserted_at):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None

            self._entries.move_to_end(key)
            return value

    def insert(self, key: str, value: EntityMetadata) -> None:
        """Store or replace metadata for an entity.

        Resets the entry's TTL and evicts least recently used entries when
        the capacity bound is exceeded.

        Args:
            key: Entity identifier
            value: Parsed metadata to cache
        """
        with self._lock:
            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)

            while len(self._entries) > self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cache entry: {evicted_key}")

    def invalidate(self, key: str) -> None:
        """Remove an entity from the cache; no error if absent."""
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()
        logger.debug("Metadata cache cleared")

    def purge_expired(self) -> int:
        """Drop all expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            expired = [
                key
                for key, (inserted_at, _) in self._entries.items()
                if self._is_expired(inserted_at)
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
            return entry is not None and not self._is_expired(entry[0])

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _is_expired(self, inserted_at: float) -> bool:
        return self._clock() - inserted_at >= self.ttl
