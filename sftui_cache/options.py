#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Cache configuration.

Options can be built directly, from the ``cache`` section of the TUI config
file, or from environment variables.
"""

__author__ = "bibow"

import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .exceptions import ConfigurationError

DEFAULT_TTL_MS = 5 * 60 * 1000
DEFAULT_MAX_SIZE_BYTES = 10 * 1024 * 1024
DEFAULT_CACHE_DIR = os.path.join(os.path.expanduser("~"), ".sf-tui", "cache")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CacheOptions:
    """
    Immutable settings for one CacheService.

    Attributes:
        enabled: When False the cache reads nothing and writes nothing
        ttl_ms: Entry lifetime in milliseconds; 0 or None disables expiry
        max_size_bytes: Aggregate payload size that triggers pruning
        directory: Location of the disk tier, created on first write
    """

    enabled: bool = True
    ttl_ms: Optional[int] = DEFAULT_TTL_MS
    max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES
    directory: str = field(default=DEFAULT_CACHE_DIR)

    def validate(self) -> "CacheOptions":
        if self.ttl_ms is not None and self.ttl_ms < 0:
            raise ConfigurationError(f"ttl_ms must be non-negative, got {self.ttl_ms}")
        if self.max_size_bytes is None or self.max_size_bytes <= 0:
            raise ConfigurationError(
                f"max_size_bytes must be positive, got {self.max_size_bytes}"
            )
        if self.enabled and not str(self.directory or "").strip():
            raise ConfigurationError("directory is required when the cache is enabled")
        return self

    @property
    def expires(self) -> bool:
        return bool(self.ttl_ms)

    @classmethod
    def from_config(cls, section: Mapping[str, Any]) -> "CacheOptions":
        """
        Build options from the ``cache`` section of the TUI config file.

        The section uses the config file's own names: ``enabled``, ``ttl``
        (milliseconds), ``maxSize`` (bytes) and ``cacheDir``. Missing keys
        take the defaults.
        """
        return cls(
            enabled=bool(section.get("enabled", True)),
            ttl_ms=section.get("ttl", DEFAULT_TTL_MS),
            max_size_bytes=section.get("maxSize", DEFAULT_MAX_SIZE_BYTES),
            directory=section.get("cacheDir") or DEFAULT_CACHE_DIR,
        ).validate()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CacheOptions":
        """
        Build options from ``SFTUI_CACHE_*`` environment variables.

        Recognised variables: SFTUI_CACHE_ENABLED, SFTUI_CACHE_TTL_MS,
        SFTUI_CACHE_MAX_SIZE and SFTUI_CACHE_DIR.
        """
        environ = os.environ if environ is None else environ

        return cls(
            enabled=_env_bool(environ, "SFTUI_CACHE_ENABLED", True),
            ttl_ms=_env_int(environ, "SFTUI_CACHE_TTL_MS", DEFAULT_TTL_MS),
            max_size_bytes=_env_int(
                environ, "SFTUI_CACHE_MAX_SIZE", DEFAULT_MAX_SIZE_BYTES
            ),
            directory=environ.get("SFTUI_CACHE_DIR") or DEFAULT_CACHE_DIR,
        ).validate()


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default

    try:
        return int(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
