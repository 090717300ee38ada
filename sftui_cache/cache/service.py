#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Cache Service - Memory and Disk Cache for External Command Results

Public entry point of the cache. Owns the options, TTL policy, statistics and
the lock; delegates storage to TieredStorage and size control to the
PruningEngine. Storage problems never escape: they show up as misses, as
no-ops and in the ``errors`` statistic.
"""

__author__ = "bibow"

import copy
import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..datetime_handler import Clock, PendulumDateTimeHandler, system_clock
from ..json_handler import Codec, HighPerformanceJSONHandler, JSONCodec
from ..options import CacheOptions
from .entry import CacheEntry
from .pruning import PruningEngine
from .storage import DiskTier, TieredStorage


@dataclass(frozen=True)
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    errors: int = 0
    entries: int = 0
    size_bytes: int = 0


class CacheService:
    """
    Two-tier cache with TTL expiry and size-based pruning.

    Args:
        options: Cache settings; defaults to ``CacheOptions()``
        logger: Logger for every diagnostic the cache emits
        codec: Converts values to and from stored JSON documents
        clock: Returns the current time in epoch milliseconds

    Raises:
        ConfigurationError: If the options are invalid
    """

    def __init__(
        self,
        options: Optional[CacheOptions] = None,
        logger: Optional[logging.Logger] = None,
        codec: Optional[Codec] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.options = (options or CacheOptions()).validate()
        self.logger = logger or logging.getLogger("sftui_cache.cache")
        self.codec = codec or JSONCodec()
        self._clock = clock or system_clock
        self._lock = threading.RLock()

        self._storage = TieredStorage(
            DiskTier(self.options.directory, self.codec, logger=logger),
            logger=logger,
        )
        self._pruner = PruningEngine(self.options.max_size_bytes, logger=logger)

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._errors = 0

    @property
    def enabled(self) -> bool:
        return self.options.enabled

    def _resolve(self, key: str) -> Optional[CacheEntry]:
        """Look up a live entry, dropping it from both tiers if it has expired."""
        entry = self._storage.read(key)
        if entry is None:
            return None

        now = self._clock()
        if entry.is_expired(now, self.options.ttl_ms):
            self.logger.debug(
                "Cache entry %s expired (created %s)",
                key,
                PendulumDateTimeHandler.format_millis(entry.created_at),
            )
            self._storage.remove(key)
            return None
        return entry

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return the cached value for ``key``, or ``default`` when it is missing,
        expired or unreadable.
        """
        if not self.enabled:
            return default

        with self._lock:
            entry = self._resolve(key)
            if entry is None:
                self._misses += 1
                self.logger.debug("Cache miss: %s", key)
                return default

            self._hits += 1
            self.logger.debug("Cache hit: %s", key)
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any, tags: Iterable[str] = ()) -> None:
        """
        Store ``value`` under ``key``. The cache keeps its own copy, decoded
        from the serialized payload, so later changes to ``value`` are not seen.
        """
        if not self.enabled:
            return

        try:
            document = self.codec.encode(value)
            data = HighPerformanceJSONHandler.dumps(document)
            size_bytes = len(data)
            stored = self.codec.decode(HighPerformanceJSONHandler.loads(data))
        except (TypeError, ValueError) as exc:
            with self._lock:
                self._errors += 1
            self.logger.warning("Cannot cache %s, value is not serializable: %s", key, exc)
            return

        with self._lock:
            entry = CacheEntry(
                key=key,
                value=stored,
                created_at=self._clock(),
                size_bytes=size_bytes,
                tags=tuple(tags),
            )
            if self._storage.write(entry, document):
                self.logger.debug("Cached %s (%d bytes)", key, size_bytes)
            else:
                self.logger.debug("Cached %s in memory only (%d bytes)", key, size_bytes)

            result = self._pruner.prune(self._storage, protected_key=key)
            self._evictions += len(result.evicted)

    def has(self, key: str) -> bool:
        """Presence check that leaves the hit/miss counters alone."""
        if not self.enabled:
            return False

        with self._lock:
            return self._resolve(key) is not None

    def delete(self, key: str) -> None:
        if not self.enabled:
            return

        with self._lock:
            self._storage.remove(key)

    def invalidate(self, prefix: str) -> int:
        """Remove every entry whose logical key starts with ``prefix``."""
        if not self.enabled:
            return 0

        with self._lock:
            removed = self._storage.remove_where(lambda key: key.startswith(prefix))
        self.logger.info("Invalidated %d cache entries with prefix %r", removed, prefix)
        return removed

    def invalidate_tag(self, tag: str) -> int:
        """Remove every entry stored with ``tag``."""
        if not self.enabled:
            return 0

        with self._lock:
            removed = self._storage.remove_entries_where(lambda entry: tag in entry.tags)
        self.logger.info("Invalidated %d cache entries tagged %r", removed, tag)
        return removed

    def clear(self) -> None:
        """Empty both tiers. Statistics are kept."""
        if not self.enabled:
            return

        with self._lock:
            self._storage.clear()
        self.logger.info("Cache cleared")

    def get_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                errors=self._errors + self._storage.faults,
                entries=len(self._storage) if self.enabled else 0,
                size_bytes=self._storage.total_bytes if self.enabled else 0,
            )

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._errors = 0
            self._storage.faults = 0
