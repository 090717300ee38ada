#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Exception hierarchy for the command result cache.

Only ConfigurationError (at construction) and CommandInvocationError (from the
command runner) ever reach calling code. StorageFault and CorruptEntry are
raised and absorbed inside the storage tiers.
"""

__author__ = "bibow"


class CacheError(Exception):
    """Base class for every error raised by sftui_cache."""


class ConfigurationError(CacheError, ValueError):
    """Invalid cache options supplied at construction time."""


class StorageFault(CacheError):
    """A disk read, write or delete failed."""

    def __init__(self, operation: str, path: str, cause: Exception) -> None:
        self.operation = operation
        self.path = path
        self.cause = cause
        super().__init__(f"{operation} failed for {path}: {cause}")


class CorruptEntry(CacheError):
    """A disk record could not be parsed or is missing required fields."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt cache entry {path}: {reason}")


class CommandInvocationError(CacheError):
    """The external command could not be launched or did not finish in time."""

    def __init__(self, command: str, args, cause: Exception) -> None:
        self.command = command
        self.args_list = list(args)
        self.cause = cause
        super().__init__(
            f"Failed to invoke {' '.join([command, *self.args_list])}: {cause}"
        )
