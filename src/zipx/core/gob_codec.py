"""Gob stage: compact binary encoding of a value's schema fields.

Layout: a plain pickle (protocol 5) stream, no prefix, no framing.

The pickled object is never the value itself but the python-mode dump of its
pydantic schema (models and dataclasses become dicts, private attributes are
dropped, enums become their values). Decoding re-validates the plain data
against the target type, so only schema fields round-trip.

The unpickler resolves only a fixed allow-list of value types; anything else
(including every user class) is rejected, which makes decoding untrusted input
safe.
"""

from __future__ import annotations

import datetime as _dt
import decimal
import enum
import io
import pickle
import uuid
from typing import Any

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from zipx.core.json_codec import adapter_for
from zipx.core.pool import write_pool
from zipx.errors import DecodeFailure, EncodeFailure

GOB_PROTOCOL = 5
_PROTO_OPCODE = pickle.PROTO  # b"\x80", first byte of every protocol>=2 stream

_ALLOWED_GLOBALS: frozenset[tuple[str, str]] = frozenset(
    {
        ("builtins", "set"),
        ("builtins", "frozenset"),
        ("builtins", "complex"),
        ("builtins", "bytearray"),
        ("datetime", "datetime"),
        ("datetime", "date"),
        ("datetime", "time"),
        ("datetime", "timedelta"),
        ("datetime", "timezone"),
        ("decimal", "Decimal"),
        ("uuid", "UUID"),
    }
)

_SCALARS = (type(None), bool, int, float, str, bytes, bytearray, complex)
_VALUES = (_dt.date, _dt.time, _dt.timedelta, decimal.Decimal, uuid.UUID)


class _GobUnpickler(pickle.Unpickler):
    def find_class(self, module: str, name: str) -> Any:
        if (module, name) in _ALLOWED_GLOBALS:
            return super().find_class(module, name)
        raise pickle.UnpicklingError(f"gob: tipo non ammesso: {module}.{name}")


def _fixed_offset(obj: _dt.datetime | _dt.time) -> _dt.datetime | _dt.time:
    """Pin any tzinfo (ZoneInfo, pydantic TzInfo, ...) to a ``datetime.timezone``.

    The offset is the one in effect for this value, so the instant is kept; a
    tzinfo that reports no offset leaves the value naive.
    """
    tz = obj.tzinfo
    if tz is None or type(tz) is _dt.timezone:
        return obj
    offset = obj.utcoffset()
    if offset is None:
        return obj.replace(tzinfo=None)
    return obj.replace(tzinfo=_dt.timezone(offset))


def _plain(obj: Any) -> Any:
    """Reduce a python-mode dump to types the unpickler accepts."""
    if isinstance(obj, enum.Enum):
        return _plain(obj.value)
    if isinstance(obj, _SCALARS):
        return obj
    if isinstance(obj, (_dt.datetime, _dt.time)):
        return _fixed_offset(obj)
    if isinstance(obj, _VALUES):
        return obj
    if isinstance(obj, dict):
        return {_plain(k): _plain(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_plain(v) for v in obj]
    if isinstance(obj, tuple):
        return tuple(_plain(v) for v in obj)
    if isinstance(obj, frozenset):
        return frozenset(_plain(v) for v in obj)
    if isinstance(obj, set):
        return {_plain(v) for v in obj}
    raise EncodeFailure(f"gob: tipo non supportato: {type(obj).__name__}")


def encode_gob(value: Any, type_: Any = Any) -> bytes:
    try:
        dumped = adapter_for(type_).dump_python(value, mode="python")
        plain = _plain(dumped)
    except (PydanticSerializationError, ValueError, RecursionError) as e:
        # cyclic values end here, either from pydantic or from the walk
        raise EncodeFailure(f"gob: valore non serializzabile: {e}") from e

    with write_pool.acquire() as buf:
        # Pickler has no reset across values: one per call.
        try:
            pickle.Pickler(buf, protocol=GOB_PROTOCOL).dump(plain)
        except (pickle.PicklingError, RecursionError) as e:
            raise EncodeFailure(f"gob: encode fallito: {e}") from e
        return buf.getvalue()


def is_gob_stream(data: bytes) -> bool:
    return len(data) >= 2 and data[0] == _PROTO_OPCODE[0]


def decode_gob(data: bytes, type_: Any = Any) -> Any:
    if not is_gob_stream(data):
        raise DecodeFailure("gob: header non valido (non è uno stream gob)")

    f = io.BytesIO(data)
    try:
        plain = _GobUnpickler(f).load()
    except Exception as e:
        raise DecodeFailure(f"gob: stream corrotto: {e}") from e
    if f.tell() != len(data):
        raise DecodeFailure(f"gob: {len(data) - f.tell()} byte in eccesso dopo lo stream")

    try:
        return adapter_for(type_).validate_python(plain)
    except ValidationError as e:
        raise DecodeFailure(f"gob: valore non conforme al tipo: {e}") from e
