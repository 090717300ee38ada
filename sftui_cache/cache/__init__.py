"""
SF-TUI Cache Module - Memory/Disk Cache for External Command Results

Core pieces:
- CacheService          - get/set/has/delete/invalidate/clear/stats with TTL
- TieredStorage         - memory tier over a directory of JSON records
- PruningEngine         - size ceiling, oldest write evicted first
- generate_key()        - deterministic key for a command and its arguments
- @command_cache()      - memoize any function in a CacheService

Usage:
    from sftui_cache import CacheOptions, CacheService, command_cache

    cache = CacheService(CacheOptions(ttl_ms=60_000, directory="/tmp/sf-cache"))

    @command_cache(cache)
    def list_orgs(): ...
"""

from .decorators import command_cache
from .entry import CacheEntry
from .keys import command_prefix, disk_filename, generate_key
from .pruning import PruneResult, PruningEngine
from .service import CacheService, CacheStats
from .storage import DiskTier, MemoryTier, TieredStorage

__all__ = [
    "CacheEntry",
    "CacheService",
    "CacheStats",
    "DiskTier",
    "MemoryTier",
    "PruneResult",
    "PruningEngine",
    "TieredStorage",
    "command_cache",
    "command_prefix",
    "disk_filename",
    "generate_key",
]
