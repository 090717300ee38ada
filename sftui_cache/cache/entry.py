#!/usr/bin/python
# -*- coding: utf-8 -*-
__author__ = "bibow"

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from ..datetime_handler import PendulumDateTimeHandler
from ..exceptions import CorruptEntry

REQUIRED_FIELDS = ("key", "value", "createdAt", "sizeBytes")


@dataclass(frozen=True)
class CacheEntry:
    """
    One cached result.

    ``value`` is the decoded payload; ``size_bytes`` is the length of its
    serialized document. ``created_at`` is epoch milliseconds and is never
    refreshed by reads.
    """

    key: str
    value: Any
    created_at: int
    size_bytes: int
    tags: Tuple[str, ...] = field(default_factory=tuple)

    def is_expired(self, now: int, ttl_ms: Optional[int]) -> bool:
        if not ttl_ms:
            return False
        return PendulumDateTimeHandler.age_millis(self.created_at, now) > ttl_ms

    def to_record(self, document: Any) -> Dict[str, Any]:
        """Disk representation, with ``document`` as the encoded payload."""
        return {
            "key": self.key,
            "value": document,
            "createdAt": self.created_at,
            "sizeBytes": self.size_bytes,
            "tags": list(self.tags),
        }

    @classmethod
    def from_record(
        cls,
        record: Any,
        decode: Callable[[Any], Any],
        source: str = "<record>",
    ) -> "CacheEntry":
        """
        Rebuild an entry from its disk record.

        Unknown fields are ignored. Missing or mistyped required fields raise
        CorruptEntry, as does a payload the codec cannot decode.
        """
        if not isinstance(record, dict):
            raise CorruptEntry(source, f"expected an object, got {type(record).__name__}")

        missing = [name for name in REQUIRED_FIELDS if name not in record]
        if missing:
            raise CorruptEntry(source, f"missing fields {', '.join(missing)}")

        key = record["key"]
        if not isinstance(key, str):
            raise CorruptEntry(source, "key is not a string")

        created_at = record["createdAt"]
        if not PendulumDateTimeHandler.is_valid_epoch_millis(created_at):
            raise CorruptEntry(source, f"invalid createdAt {created_at!r}")

        size_bytes = record["sizeBytes"]
        if isinstance(size_bytes, bool) or not isinstance(size_bytes, int) or size_bytes < 0:
            raise CorruptEntry(source, f"invalid sizeBytes {size_bytes!r}")

        tags = record.get("tags") or []
        if not isinstance(tags, list):
            raise CorruptEntry(source, "tags is not a list")

        try:
            value = decode(record["value"])
        except (TypeError, ValueError, KeyError) as e:
            raise CorruptEntry(source, f"payload could not be decoded: {e}") from e

        return cls(
            key=key,
            value=value,
            created_at=created_at,
            size_bytes=size_bytes,
            tags=tuple(str(tag) for tag in tags),
        )
