#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Storage Tiers - In-Process Memory Map over a Directory of JSON Records

The memory tier answers for everything written during this process; the disk
tier keeps entries across restarts. Reads fall through memory to disk and
hydrate memory on a disk hit. Disk faults never leave this module: they are
logged, counted and turned into misses or no-ops.
"""

__author__ = "bibow"

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import orjson

from ..exceptions import CorruptEntry, StorageFault
from ..json_handler import Codec, HighPerformanceJSONHandler, JSONCodec
from ..performance_monitor import performance_monitor
from .entry import CacheEntry
from .keys import DISK_SUFFIX, disk_filename

TEMP_PREFIX = ".tmp_"
TEMP_SUFFIX = ".tmp"


class MemoryTier:
    """Insertion-ordered map of key to CacheEntry."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def put(self, entry: CacheEntry) -> None:
        # Re-inserting moves the key to the end so iteration follows write order.
        self._entries.pop(entry.key, None)
        self._entries[entry.key] = entry

    def pop(self, key: str) -> Optional[CacheEntry]:
        return self._entries.pop(key, None)

    def entries(self) -> List[CacheEntry]:
        return list(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class DiskTier:
    """
    One JSON record per entry, named by the SHA-256 of its key.

    Records are written to a temp file in the same directory and renamed into
    place, so a reader sees either the old record or the new one.
    """

    def __init__(
        self,
        directory: str,
        codec: Optional[Codec] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.directory = Path(directory).expanduser()
        self.codec = codec or JSONCodec()
        self.logger = logger or logging.getLogger("sftui_cache.storage")

    def path_for(self, key: str) -> Path:
        return self.directory / disk_filename(key)

    def ensure_directory(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFault("mkdir", str(self.directory), exc) from exc

    # Reads -------------------------------------------------------------

    def _read_path(self, file_path: Path) -> CacheEntry:
        try:
            data = file_path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise StorageFault("read", str(file_path), exc) from exc

        try:
            record = HighPerformanceJSONHandler.loads(data)
        except orjson.JSONDecodeError as exc:
            raise CorruptEntry(file_path.name, f"unparsable JSON: {exc}") from exc

        return CacheEntry.from_record(record, self.codec.decode, source=file_path.name)

    def load(self, key: str) -> Optional[CacheEntry]:
        """
        Return the stored entry for ``key`` or None.

        A corrupt record is deleted. A record that belongs to a different key
        is left alone and reported as absent.
        """
        file_path = self.path_for(key)
        try:
            entry = self._read_path(file_path)
        except FileNotFoundError:
            return None
        except CorruptEntry as exc:
            self.logger.warning("Discarding corrupt cache entry: %s", exc)
            self._safe_remove(file_path)
            return None

        if entry.key != key:
            self.logger.debug(
                "Cache file %s holds key %s, not %s", file_path.name, entry.key, key
            )
            return None
        return entry

    @performance_monitor.monitor_operation(operation_name="disk")
    def scan(self) -> Iterator[Tuple[Path, CacheEntry]]:
        """
        Yield every readable record in sorted file name order.

        Corrupt records are deleted along the way; unreadable files are
        logged and skipped.
        """
        if not self.directory.is_dir():
            return iter(())

        try:
            paths = sorted(self.directory.glob(f"*{DISK_SUFFIX}"))
        except OSError as exc:
            raise StorageFault("list", str(self.directory), exc) from exc

        return self._iter_records(paths)

    def _iter_records(self, paths: List[Path]) -> Iterator[Tuple[Path, CacheEntry]]:
        for file_path in paths:
            try:
                yield file_path, self._read_path(file_path)
            except FileNotFoundError:
                continue
            except CorruptEntry as exc:
                self.logger.warning("Discarding corrupt cache entry: %s", exc)
                self._safe_remove(file_path)
            except StorageFault as exc:
                self.logger.warning("Skipping unreadable cache entry: %s", exc)

    # Writes ------------------------------------------------------------

    def save(self, entry: CacheEntry, document: Any) -> None:
        """Atomically write ``entry`` with ``document`` as its stored payload."""
        self.ensure_directory()
        file_path = self.path_for(entry.key)
        data = HighPerformanceJSONHandler.dumps(entry.to_record(document))

        try:
            tmp_fd, tmp_path = tempfile.mkstemp(
                prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX, dir=self.directory
            )
        except OSError as exc:
            raise StorageFault("write", str(file_path), exc) from exc

        try:
            with os.fdopen(tmp_fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_path, file_path)
        except OSError as exc:
            self._safe_remove(Path(tmp_path))
            raise StorageFault("write", str(file_path), exc) from exc

    def delete(self, key: str) -> bool:
        return self.delete_path(self.path_for(key))

    def delete_path(self, file_path: Path) -> bool:
        try:
            file_path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageFault("delete", str(file_path), exc) from exc

    def _safe_remove(self, file_path: Path) -> bool:
        try:
            return self.delete_path(file_path)
        except StorageFault as exc:
            self.logger.warning("%s", exc)
            return False

    def clear(self) -> int:
        """
        Delete every record and leftover temp file; returns records removed.

        A file that cannot be deleted is logged and skipped so the rest of
        the directory is still cleared.
        """
        if not self.directory.is_dir():
            return 0

        try:
            paths = list(self.directory.glob(f"*{DISK_SUFFIX}"))
            temp_paths = list(self.directory.glob(f"{TEMP_PREFIX}*{TEMP_SUFFIX}"))
        except OSError as exc:
            raise StorageFault("list", str(self.directory), exc) from exc

        for temp_path in temp_paths:
            self._safe_remove(temp_path)
        return sum(int(self._safe_remove(file_path)) for file_path in paths)


class TieredStorage:
    """
    Two-level lookup over a MemoryTier and a DiskTier.

    Every StorageFault raised by the disk tier is absorbed here: logged at
    WARNING, counted in ``faults`` and converted to a miss or a no-op.

    Payload sizes of all known keys are tracked in memory. The index is seeded
    by one disk scan on first use and kept current by every write and removal,
    so size checks never touch the disk.
    """

    def __init__(
        self,
        disk: DiskTier,
        memory: Optional[MemoryTier] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.disk = disk
        self.memory = memory or MemoryTier()
        self.logger = logger or logging.getLogger("sftui_cache.storage")
        self.faults = 0
        self._sizes: Optional[Dict[str, int]] = None

    def _fault(self, exc: StorageFault) -> None:
        self.faults += 1
        self.logger.warning("Cache storage fault: %s", exc)

    def _size_index(self) -> Dict[str, int]:
        if self._sizes is None:
            sizes = {entry.key: entry.size_bytes for _, entry in self._scan_disk()}
            sizes.update((entry.key, entry.size_bytes) for entry in self.memory.entries())
            self._sizes = sizes
        return self._sizes

    def _forget(self, key: str) -> None:
        if self._sizes is not None:
            self._sizes.pop(key, None)

    @property
    def total_bytes(self) -> int:
        return sum(self._size_index().values())

    def __len__(self) -> int:
        return len(self._size_index())

    def read(self, key: str) -> Optional[CacheEntry]:
        entry = self.memory.get(key)
        if entry is not None:
            return entry

        try:
            entry = self.disk.load(key)
        except StorageFault as exc:
            self._fault(exc)
            return None

        if entry is not None:
            self.memory.put(entry)
            if self._sizes is not None:
                self._sizes[key] = entry.size_bytes
            self.logger.debug("Hydrated %s from disk", key)
        return entry

    def write(self, entry: CacheEntry, document: Any) -> bool:
        """Store in memory, then on disk. Returns False when the disk write failed."""
        sizes = self._size_index()
        self.memory.put(entry)
        sizes[entry.key] = entry.size_bytes
        try:
            self.disk.save(entry, document)
        except StorageFault as exc:
            self._fault(exc)
            return False
        return True

    def remove(self, key: str) -> None:
        self.memory.pop(key)
        self._forget(key)
        try:
            self.disk.delete(key)
        except StorageFault as exc:
            self._fault(exc)

    def remove_where(self, predicate: Callable[[str], bool]) -> int:
        """Remove every key, from either tier, for which ``predicate`` is true."""
        return self.remove_entries_where(lambda entry: predicate(entry.key))

    def remove_entries_where(self, predicate: Callable[[CacheEntry], bool]) -> int:
        removed = set()

        for entry in self.memory.entries():
            if predicate(entry):
                self.memory.pop(entry.key)
                self._forget(entry.key)
                removed.add(entry.key)

        for file_path, entry in self._scan_disk():
            if entry.key in removed or predicate(entry):
                try:
                    self.disk.delete_path(file_path)
                except StorageFault as exc:
                    self._fault(exc)
                    continue
                self.memory.pop(entry.key)
                self._forget(entry.key)
                removed.add(entry.key)

        return len(removed)

    def entries(self) -> List[CacheEntry]:
        """
        Union of both tiers, one entry per key.

        Entries known to the memory tier come first in write order, followed
        by disk-only entries in sorted file name order. The memory copy wins
        for a key present in both. Reading the full listing also resyncs the
        size index.
        """
        merged = self.memory.entries()
        known = {entry.key for entry in merged}
        merged.extend(
            entry for _, entry in self._scan_disk() if entry.key not in known
        )
        self._sizes = {entry.key: entry.size_bytes for entry in merged}
        return merged

    def clear(self) -> None:
        self.memory.clear()
        self._sizes = {}
        try:
            self.disk.clear()
        except StorageFault as exc:
            self._fault(exc)

    def _scan_disk(self) -> List[Tuple[Path, CacheEntry]]:
        try:
            return list(self.disk.scan())
        except StorageFault as exc:
            self._fault(exc)
            return []
