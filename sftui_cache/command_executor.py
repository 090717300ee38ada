#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Command Executor - Cached Invocation of External CLI Commands

Runs external commands (normally the ``sf`` CLI) and memoizes successful,
read-only invocations in a CacheService. Commands that change state bypass
the cache completely, in both directions.
"""

__author__ = "bibow"

import dataclasses
import logging
import os
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .cache.keys import command_prefix, generate_key
from .cache.service import CacheService
from .exceptions import CommandInvocationError
from .json_handler import DataclassCodec

DEFAULT_TIMEOUT_SECONDS = 60

DEFAULT_EXCLUDED_COMMANDS = (
    "org:create",
    "org:delete",
    "auth",
    "deploy",
    "retrieve",
    "push",
    "pull",
    "data:import",
    "data:export",
    "apex:execute",
)

DEFAULT_MUTATING_KEYWORDS = (
    "create",
    "delete",
    "deploy",
    "push",
    "pull",
    "install",
    "uninstall",
    "auth",
    "login",
    "logout",
)


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    stderr: str
    exit_code: int
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """Interface of anything that can run an external command."""

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        raise NotImplementedError


class SubprocessCommandRunner(CommandRunner):
    """
    Runs commands with ``subprocess.run``.

    Non-zero exit codes are returned in the result. A command that cannot be
    started or exceeds the timeout raises CommandInvocationError.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.timeout = timeout

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        try:
            completed = subprocess.run(
                [command, *args],
                cwd=cwd,
                env={**os.environ, **env} if env else None,
                capture_output=True,
                text=True,
                timeout=timeout or self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise CommandInvocationError(command, args, exc) from exc

        return CommandResult(
            stdout=_strip_final_newline(completed.stdout),
            stderr=_strip_final_newline(completed.stderr),
            exit_code=completed.returncode,
        )


def _strip_final_newline(output: Optional[str]) -> str:
    if not output:
        return ""
    if output.endswith("\r\n"):
        return output[:-2]
    if output.endswith("\n"):
        return output[:-1]
    return output


def _tokenize(command: str, args: Iterable[str]) -> List[str]:
    """Split a command line into lowercase words; ``org:create`` and ``org create`` match alike."""
    tokens = []
    for part in [command, *args]:
        tokens.extend(
            token for token in str(part).lower().replace(":", " ").split() if token
        )
    return tokens


class MutationPolicy:
    """
    Decides which command invocations change state and must not be cached.

    An invocation is mutating when one of ``excluded_commands`` (colon
    separated topics such as ``org:create``) appears as consecutive words of
    the command line, or when any word equals one of ``mutating_keywords``.
    """

    def __init__(
        self,
        excluded_commands: Iterable[str] = DEFAULT_EXCLUDED_COMMANDS,
        mutating_keywords: Iterable[str] = DEFAULT_MUTATING_KEYWORDS,
    ) -> None:
        self.excluded_commands = [
            _tokenize(topic, ()) for topic in excluded_commands if str(topic).strip()
        ]
        self.mutating_keywords = {str(keyword).lower() for keyword in mutating_keywords}

    def is_mutating(self, command: str, args: Sequence[str] = ()) -> bool:
        tokens = _tokenize(command, args)

        if any(token in self.mutating_keywords for token in tokens):
            return True

        for topic in self.excluded_commands:
            width = len(topic)
            if any(
                tokens[index : index + width] == topic
                for index in range(len(tokens) - width + 1)
            ):
                return True
        return False


class CachedCommandExecutor:
    """
    Runs commands through a CommandRunner with result caching.

    Only invocations that exit with status 0 and are not classified as
    mutating are cached. Results served from the cache carry
    ``from_cache=True``.
    """

    _codec = DataclassCodec(CommandResult)

    def __init__(
        self,
        cache: CacheService,
        runner: Optional[CommandRunner] = None,
        policy: Optional[MutationPolicy] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.cache = cache
        self.runner = runner or SubprocessCommandRunner()
        self.policy = policy or MutationPolicy()
        self.logger = logger or logging.getLogger("sftui_cache.command")

    def _cached_result(self, key: str) -> Optional[CommandResult]:
        cached = self.cache.get(key)
        if cached is None:
            return None

        try:
            result = (
                cached
                if isinstance(cached, CommandResult)
                else self._codec.decode(cached)
            )
        except (TypeError, ValueError) as exc:
            self.logger.warning("Dropping unusable cached result for %s: %s", key, exc)
            self.cache.delete(key)
            return None
        return dataclasses.replace(result, from_cache=True)

    def execute(
        self,
        command: str,
        args: Sequence[str] = (),
        use_cache: bool = True,
        tags: Iterable[str] = (),
        **run_kwargs: Any,
    ) -> CommandResult:
        """
        Run ``command`` with ``args``, answering from the cache when possible.

        Raises:
            CommandInvocationError: If the runner could not run the command
        """
        args = [str(arg) for arg in args]
        command_line = " ".join([command, *args])

        if not use_cache or not self.cache.enabled or self.policy.is_mutating(command, args):
            self.logger.debug("Executing command without cache: %s", command_line)
            return self.runner.run(command, args, **run_kwargs)

        key = generate_key(command, args)
        cached = self._cached_result(key)
        if cached is not None:
            self.logger.debug("Cache hit for command: %s", command_line)
            return cached

        self.logger.debug("Executing command: %s", command_line)
        result = self.runner.run(command, args, **run_kwargs)

        if result.ok:
            self.cache.set(
                key,
                self._codec.encode(dataclasses.replace(result, from_cache=False)),
                tags=tags,
            )
        else:
            self.logger.debug(
                "Not caching %s, exit code %d", command_line, result.exit_code
            )
        return result

    def execute_sf(self, args: Sequence[str] = (), **kwargs: Any) -> CommandResult:
        """Run a Salesforce CLI command."""
        return self.execute("sf", args, **kwargs)

    def invalidate_command(self, command: str, args: Optional[Sequence[str]] = None) -> int:
        """
        Drop cached results of ``command``.

        Without ``args`` every cached invocation of the command goes; with
        ``args`` only that exact invocation.
        """
        if args is None:
            return self.cache.invalidate(command_prefix(command))
        return self.cache.invalidate(generate_key(command, [str(arg) for arg in args]))

    def clear(self) -> None:
        self.cache.clear()
