#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Size-based pruning.

When the total payload size of the cache exceeds the ceiling, entries are
removed oldest write first until it fits again.
"""

__author__ = "bibow"

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..performance_monitor import performance_monitor
from .storage import TieredStorage


@dataclass(frozen=True)
class PruneResult:
    evicted: List[str] = field(default_factory=list)
    total_bytes: int = 0
    ceiling_violated: bool = False


class PruningEngine:
    def __init__(self, max_size_bytes: int, logger: Optional[logging.Logger] = None):
        self.max_size_bytes = max_size_bytes
        self.logger = logger or logging.getLogger("sftui_cache.pruning")

    @performance_monitor.monitor_operation(operation_name="pruning")
    def prune(
        self, storage: TieredStorage, protected_key: Optional[str] = None
    ) -> PruneResult:
        """
        Evict the oldest entries until the aggregate size fits the ceiling.

        ``protected_key`` (the entry just written) is never evicted. If it
        still exceeds the ceiling on its own, it is kept and the violation is
        logged.
        """
        total_bytes = storage.total_bytes
        if total_bytes <= self.max_size_bytes:
            return PruneResult(total_bytes=total_bytes)

        entries = storage.entries()
        total_bytes = sum(entry.size_bytes for entry in entries)

        # sorted() is stable: equal timestamps keep write order.
        candidates = sorted(
            (entry for entry in entries if entry.key != protected_key),
            key=lambda entry: entry.created_at,
        )

        evicted = []
        for entry in candidates:
            if total_bytes <= self.max_size_bytes:
                break
            storage.remove(entry.key)
            total_bytes -= entry.size_bytes
            evicted.append(entry.key)

        violated = total_bytes > self.max_size_bytes
        if violated:
            self.logger.warning(
                "Cache size %d bytes still exceeds the %d byte ceiling after pruning; "
                "keeping %s",
                total_bytes,
                self.max_size_bytes,
                protected_key,
            )

        if evicted:
            self.logger.info(
                "Pruned %d cache entries, %d bytes remain", len(evicted), total_bytes
            )

        return PruneResult(
            evicted=evicted, total_bytes=total_bytes, ceiling_violated=violated
        )
