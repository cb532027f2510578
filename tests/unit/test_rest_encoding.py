"""Unit tests for Firestore REST value encoding."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from fieldops.domain.enums import TriggerEvent
from fieldops.infrastructure.firebase._rest_encoding import decode_document, encode_document


def test_encode_scalars() -> None:
    fields = encode_document(
        {"none": None, "flag": True, "n": 3, "x": 1.5, "s": "hi", "b": b"\x00\x01"}
    )["fields"]
    assert fields["none"] == {"nullValue": None}
    assert fields["flag"] == {"booleanValue": True}
    assert fields["n"] == {"integerValue": "3"}
    assert fields["x"] == {"doubleValue": 1.5}
    assert fields["s"] == {"stringValue": "hi"}
    assert fields["b"] == {"bytesValue": "AAE="}


def test_encode_bool_is_not_integer() -> None:
    assert encode_document({"v": False})["fields"]["v"] == {"booleanValue": False}


def test_encode_aware_datetime_as_utc() -> None:
    plus_two = timezone(timedelta(hours=2))
    fields = encode_document({"at": datetime(2026, 3, 1, 12, 0, tzinfo=plus_two)})["fields"]
    assert fields["at"] == {"timestampValue": "2026-03-01T10:00:00.000000Z"}


def test_encode_nested_permission_map() -> None:
    fields = encode_document({"permissions": {"work-orders": {"view": True}, "invoicing": True}})
    assert fields["fields"]["permissions"] == {
        "mapValue": {
            "fields": {
                "work-orders": {"mapValue": {"fields": {"view": {"booleanValue": True}}}},
                "invoicing": {"booleanValue": True},
            }
        }
    }


def test_encode_enum_by_value_and_naive_datetime_as_utc() -> None:
    fields = encode_document(
        {"event": TriggerEvent.ON_ENTER, "at": datetime(2026, 3, 1, 10, 0)}
    )["fields"]
    assert fields["event"] == {"stringValue": "on_enter"}
    assert fields["at"] == {"timestampValue": "2026-03-01T10:00:00.000000Z"}


def test_encode_unsupported_type() -> None:
    with pytest.raises(TypeError):
        encode_document({"bad": object()})


def test_decode_nanosecond_timestamp() -> None:
    decoded = decode_document({"at": {"timestampValue": "2026-03-01T10:00:00.123456789Z"}})
    assert decoded["at"] == datetime(2026, 3, 1, 10, 0, 0, 123456, tzinfo=UTC)


def test_decode_array_and_map() -> None:
    decoded = decode_document(
        {
            "ids": {"arrayValue": {"values": [{"stringValue": "wo1"}, {"integerValue": "2"}]}},
            "empty": {"arrayValue": {}},
            "m": {"mapValue": {"fields": {"k": {"nullValue": None}}}},
        }
    )
    assert decoded == {"ids": ["wo1", 2], "empty": [], "m": {"k": None}}


def test_decode_empty_fields() -> None:
    assert decode_document(None) == {}
    assert decode_document({}) == {}
