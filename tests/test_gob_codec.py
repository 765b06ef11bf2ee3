from __future__ import annotations

import os
import pickle
import uuid
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from enum import IntEnum
from zoneinfo import ZoneInfo

import pytest
from pydantic import BaseModel

from zipx.core.gob_codec import decode_gob, encode_gob, is_gob_stream
from zipx.core.json_codec import decode_json, encode_json
from zipx.errors import DecodeFailure, EncodeFailure


class Priority(IntEnum):
    LOW = 1
    HIGH = 2


class Event(BaseModel):
    id: uuid.UUID
    at: datetime
    amount: Decimal
    priority: Priority
    labels: set[str] = set()
    _cache: dict = {}


class Shell:
    def __reduce__(self):
        return (os.getcwd, ())


class _FixedOffset(tzinfo):
    def utcoffset(self, dt):
        return timedelta(hours=2)

    def dst(self, dt):
        return timedelta(0)


def _event() -> Event:
    return Event(
        id=uuid.UUID("12345678-1234-5678-1234-567812345678"),
        at=datetime(2025, 12, 4, 18, 15, tzinfo=timezone(timedelta(hours=8))),
        amount=Decimal("12.50"),
        priority=Priority.HIGH,
        labels={"a", "b"},
    )


def test_gob_plain_roundtrip() -> None:
    value = {"name": "Alice", "n": [1, 2.5, None, True], "blob": b"\x00\xff"}
    assert decode_gob(encode_gob(value)) == value


def test_gob_model_roundtrip_keeps_value_types() -> None:
    ev = _event()
    out = decode_gob(encode_gob(ev), Event)
    assert out == ev
    assert out.at.utcoffset() == timedelta(hours=8)
    assert out.priority is Priority.HIGH


def test_gob_untyped_decode_gives_plain_dict() -> None:
    out = decode_gob(encode_gob(_event()))
    assert isinstance(out, dict)
    assert out["priority"] == 2
    assert out["amount"] == Decimal("12.50")
    assert "_cache" not in out


def test_gob_stream_has_no_prefix() -> None:
    blob = encode_gob({"a": 1})
    assert blob[0] == 0x80
    assert blob[1] == 5
    assert is_gob_stream(blob)
    assert not is_gob_stream(encode_json({"a": 1}))
    assert not is_gob_stream(b"\x80")


def test_gob_rejects_json_bytes() -> None:
    with pytest.raises(DecodeFailure):
        decode_gob(b'{"a": 1}')


def test_gob_rejects_foreign_globals() -> None:
    with pytest.raises(DecodeFailure, match="non ammesso"):
        decode_gob(pickle.dumps(Shell(), protocol=5))
    with pytest.raises(DecodeFailure):
        decode_gob(pickle.dumps(_event(), protocol=5))


def test_gob_rejects_trailing_bytes() -> None:
    with pytest.raises(DecodeFailure, match="eccesso"):
        decode_gob(encode_gob([1, 2, 3]) + b"\x00")


def test_gob_rejects_truncated_stream() -> None:
    with pytest.raises(DecodeFailure):
        decode_gob(encode_gob({"k": "v" * 100})[:-5])


def test_gob_type_mismatch_is_decode_failure() -> None:
    with pytest.raises(DecodeFailure):
        decode_gob(encode_gob({"id": "not-a-uuid"}), Event)


def test_gob_encode_failures() -> None:
    with pytest.raises(EncodeFailure):
        encode_gob(object())


class _Floating(tzinfo):
    def utcoffset(self, dt):
        return None

    def dst(self, dt):
        return None


class Stamp(BaseModel):
    id: str
    timestamp: datetime


def test_gob_zoneinfo_timestamp_keeps_instant() -> None:
    at = datetime(2025, 1, 1, 8, tzinfo=ZoneInfo("Asia/Shanghai"))
    out = decode_gob(encode_gob(Stamp(id="a", timestamp=at)), Stamp)
    assert out.timestamp == at
    assert out.timestamp.utcoffset() == timedelta(hours=8)


def test_gob_accepts_timestamp_decoded_from_json() -> None:
    stamp = decode_json(b'{"id": "a", "timestamp": "2025-01-01T00:00:00Z"}', Stamp)
    out = decode_gob(encode_gob(stamp), Stamp)
    assert out == stamp
    assert out.timestamp.utcoffset() == timedelta(0)


def test_gob_custom_tzinfo_is_pinned_to_its_offset() -> None:
    at = datetime(2025, 1, 1, 12, tzinfo=_FixedOffset())
    out = decode_gob(encode_gob(at))
    assert out == at
    assert type(out.tzinfo) is timezone
    assert out.utcoffset() == timedelta(hours=2)


def test_gob_tzinfo_without_offset_gives_naive_value() -> None:
    out = decode_gob(encode_gob(datetime(2025, 1, 1, 12, tzinfo=_Floating())))
    assert out == datetime(2025, 1, 1, 12)
    assert out.tzinfo is None


def test_gob_cyclic_value_is_encode_failure() -> None:
    cyclic: list = []
    cyclic.append(cyclic)
    with pytest.raises(EncodeFailure):
        encode_gob(cyclic)
    nested: dict = {"k": 1}
    nested["self"] = nested
    with pytest.raises(EncodeFailure):
        encode_gob(nested)
