#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Test configuration and fixtures for sftui_cache tests.
"""

import logging
import os
import sys

import pytest

# Add the package root to the path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sftui_cache.cache import CacheService
from sftui_cache.command_executor import CommandResult, CommandRunner
from sftui_cache.exceptions import CommandInvocationError
from sftui_cache.options import CacheOptions

# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

# Keep slow-operation timing out of the test output unless a test asks for it
logging.getLogger("sftui_cache.performance").setLevel(logging.CRITICAL)


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> int:
        self.now += millis
        return self.now


class FakeRunner(CommandRunner):
    """Command runner returning scripted results and recording every call."""

    def __init__(self, results=None, error=None):
        self.results = dict(results or {})
        self.error = error
        self.calls = []

    def run(self, command, args=(), cwd=None, env=None, timeout=None):
        self.calls.append((command, list(args)))
        if self.error is not None:
            raise CommandInvocationError(command, args, self.error)
        line = " ".join([command, *args])
        return self.results.get(
            line, CommandResult(stdout=f"output of {line}", stderr="", exit_code=0)
        )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def make_cache(cache_dir, clock):
    """Factory building a CacheService over the test cache directory."""

    def _make(**overrides):
        settings = {
            "enabled": True,
            "ttl_ms": 60_000,
            "max_size_bytes": 1024 * 1024,
            "directory": str(cache_dir),
        }
        codec = overrides.pop("codec", None)
        logger = overrides.pop("logger", None)
        settings.update(overrides)
        return CacheService(
            CacheOptions(**settings), logger=logger, codec=codec, clock=clock
        )

    return _make


@pytest.fixture
def cache(make_cache):
    return make_cache()


@pytest.fixture
def runner():
    return FakeRunner()
