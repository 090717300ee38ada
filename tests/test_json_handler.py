from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

import pendulum
import pytest

from sftui_cache.json_handler import DataclassCodec, HighPerformanceJSONHandler, JSONCodec


@dataclass
class OrgInfo:
    alias: str
    username: str
    is_default: bool = False


def test_dumps_is_compact_bytes():
    encoded = HighPerformanceJSONHandler.dumps({"a": 1, "b": [1, 2]})

    assert isinstance(encoded, bytes)
    assert encoded == b'{"a":1,"b":[1,2]}'


def test_size_matches_serialized_length():
    assert HighPerformanceJSONHandler.size_of("x" * 98) == 100
    assert HighPerformanceJSONHandler.size_of({"k": "v"}) == len(b'{"k":"v"}')


def test_non_native_types_are_converted():
    payload = {
        "total": Decimal("42.5"),
        "created_at": pendulum.datetime(2024, 1, 1, 12, 0, tz="UTC"),
        "naive": datetime(2024, 1, 1, 12, 0),
        "labels": {"b", "a"},
    }

    decoded = HighPerformanceJSONHandler.loads(HighPerformanceJSONHandler.dumps(payload))

    assert decoded["total"] == 42.5
    assert decoded["created_at"].startswith("2024-01-01T12:00:00")
    assert decoded["labels"] == ["a", "b"]


def test_unsupported_type_raises_type_error():
    with pytest.raises(TypeError):
        HighPerformanceJSONHandler.dumps({"handle": object()})


def test_is_json():
    assert HighPerformanceJSONHandler.is_json('{"ok": true}')
    assert not HighPerformanceJSONHandler.is_json("{broken")


def test_json_codec_is_identity():
    value = {"a": [1, 2]}
    codec = JSONCodec()

    assert codec.encode(value) is value
    assert codec.decode(value) is value


class TestDataclassCodec:
    def test_round_trip(self):
        codec = DataclassCodec(OrgInfo)
        org = OrgInfo(alias="dev", username="dev@example.com", is_default=True)

        assert codec.decode(codec.encode(org)) == org

    def test_unknown_fields_dropped_and_defaults_applied(self):
        codec = DataclassCodec(OrgInfo)

        org = codec.decode({"alias": "uat", "username": "u@example.com", "legacy": 1})

        assert org == OrgInfo(alias="uat", username="u@example.com")

    def test_missing_required_field_raises(self):
        with pytest.raises(TypeError):
            DataclassCodec(OrgInfo).decode({"alias": "uat"})

    def test_rejects_non_dataclass(self):
        with pytest.raises(TypeError):
            DataclassCodec(dict)


def test_library_info():
    assert HighPerformanceJSONHandler.get_library_info()["library"] == "orjson"
