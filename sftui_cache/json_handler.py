#!/usr/bin/python
# -*- coding: utf-8 -*-
"""
JSON Handler and Payload Codecs

orjson-backed serialization for cache records, plus the Codec capability that
keeps the cache core agnostic of the payload type: a codec turns a value into
a JSON document before it is stored and back again after it is read.
"""

__author__ = "bibow"

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Generic, Type, TypeVar, Union

import orjson

from .performance_monitor import performance_monitor

T = TypeVar("T")


class HighPerformanceJSONHandler:
    """
    orjson wrapper used for every byte that reaches the disk tier.

    Output is compact UTF-8 bytes so that the byte length of a serialized
    payload is directly its accounted size.
    """

    @staticmethod
    def _serialize_handler(obj: Any) -> Any:
        """Fallback for types orjson does not serialize natively."""
        if isinstance(obj, Decimal):
            return float(obj)
        elif isinstance(obj, (datetime, date)):
            return obj.isoformat()
        elif isinstance(obj, (set, frozenset)):
            return sorted(obj, key=str)
        elif hasattr(obj, "_asdict"):
            # namedtuples
            return obj._asdict()
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    @staticmethod
    @performance_monitor.monitor_operation(operation_name="json")
    def dumps(obj: Any) -> bytes:
        return orjson.dumps(obj, default=HighPerformanceJSONHandler._serialize_handler)

    @staticmethod
    @performance_monitor.monitor_operation(operation_name="json")
    def loads(data: Union[str, bytes]) -> Any:
        return orjson.loads(data)

    @staticmethod
    def is_json(data: Union[str, bytes]) -> bool:
        try:
            orjson.loads(data)
            return True
        except orjson.JSONDecodeError:
            return False

    @staticmethod
    def size_of(obj: Any) -> int:
        """Serialized size of ``obj`` in bytes."""
        return len(HighPerformanceJSONHandler.dumps(obj))

    @classmethod
    def get_library_info(cls) -> Dict[str, Any]:
        return {"library": "orjson", "version": orjson.__version__}


class Codec(Generic[T]):
    """
    Converts cached values to and from JSON documents.

    Subclasses override ``encode`` and ``decode``; the base implementation
    is the identity, suitable for values that are already JSON-compatible.
    """

    def encode(self, value: T) -> Any:
        return value

    def decode(self, document: Any) -> T:
        return document


class JSONCodec(Codec[Any]):
    """Identity codec for plain JSON-compatible payloads."""


class DataclassCodec(Codec[T]):
    """
    Codec for a dataclass payload type.

    Fields missing from a stored document fall back to the dataclass defaults;
    unknown fields are dropped so older records stay readable.
    """

    def __init__(self, cls: Type[T]) -> None:
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls!r} is not a dataclass")
        self.cls = cls
        self._field_names = {field.name for field in dataclasses.fields(cls)}

    def encode(self, value: T) -> Any:
        return dataclasses.asdict(value)

    def decode(self, document: Any) -> T:
        if not isinstance(document, dict):
            raise TypeError(
                f"Expected an object for {self.cls.__name__}, got {type(document).__name__}"
            )
        return self.cls(
            **{name: value for name, value in document.items() if name in self._field_names}
        )


# Convenience alias
JSONHandler = HighPerformanceJSONHandler
