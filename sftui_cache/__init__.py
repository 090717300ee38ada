#!/usr/bin/python
# -*- coding: utf-8 -*-
__author__ = "bibow"

__all__ = [
    "cache",
    "command_executor",
    "datetime_handler",
    "exceptions",
    "json_handler",
    "options",
    "performance_monitor",
    "CacheEntry",
    "CacheError",
    "CacheOptions",
    "CacheService",
    "CacheStats",
    "CachedCommandExecutor",
    "Codec",
    "CommandInvocationError",
    "CommandResult",
    "CommandRunner",
    "ConfigurationError",
    "CorruptEntry",
    "DataclassCodec",
    "JSONCodec",
    "JSONHandler",
    "MutationPolicy",
    "StorageFault",
    "SubprocessCommandRunner",
    "command_cache",
    "generate_key",
    "performance_monitor",
]

from .cache import CacheEntry, CacheService, CacheStats, command_cache, generate_key
from .command_executor import (
    CachedCommandExecutor,
    CommandResult,
    CommandRunner,
    MutationPolicy,
    SubprocessCommandRunner,
)
from .exceptions import (
    CacheError,
    CommandInvocationError,
    ConfigurationError,
    CorruptEntry,
    StorageFault,
)
from .json_handler import Codec, DataclassCodec, JSONCodec, JSONHandler
from .options import CacheOptions
from .performance_monitor import performance_monitor
