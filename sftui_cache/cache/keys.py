#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
Cache key generation.

Keys look like ``<command_id>:<sha256 hex>`` so that every cached invocation
of one command shares the prefix ``<command_id>:``. The command id is
percent-encoded, so a colon inside it cannot make one command's prefix match
another command's keys.
"""

__author__ = "bibow"

import hashlib
from typing import Sequence
from urllib.parse import quote

import orjson

KEY_SEPARATOR = ":"
DISK_SUFFIX = ".json"


def generate_key(command_id: str, args: Sequence[str] = ()) -> str:
    """
    Generate a deterministic key for a command invocation.

    The digest covers a JSON array of the command id and the argument list,
    so argument order matters and ``("ab", ["c"])`` cannot collide with
    ``("a", ["bc"])``.
    """
    payload = orjson.dumps([str(command_id), [str(arg) for arg in args]])
    digest = hashlib.sha256(payload).hexdigest()
    return f"{command_prefix(command_id)}{digest}"


def command_prefix(command_id: str) -> str:
    return f"{quote(str(command_id), safe='')}{KEY_SEPARATOR}"


def disk_filename(key: str) -> str:
    """Fixed-length, filesystem-safe file name for a logical key."""
    return hashlib.sha256(key.encode("utf-8")).hexdigest() + DISK_SUFFIX
