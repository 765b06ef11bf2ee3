"""JSON stage shared by the object-level codec forms and the serializer.

Values go through a pydantic ``TypeAdapter`` so that a decode can target a
concrete type (``BaseModel``, dataclass, ``list[Message]``, ...) and not only
plain dicts. With ``type_=Any`` the adapter infers the runtime type on dump and
returns plain JSON values on load.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from zipx.errors import DecodeFailure, EncodeFailure


@lru_cache(maxsize=256)
def _cached_adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def adapter_for(type_: Any) -> TypeAdapter[Any]:
    """Return a (cached) TypeAdapter for ``type_``.

    Building an adapter compiles a schema, which is far more expensive than a
    dump; unhashable type expressions are simply not cached.
    """
    try:
        return _cached_adapter(type_)
    except TypeError:
        return TypeAdapter(type_)


def encode_json(value: Any, type_: Any = Any) -> bytes:
    try:
        return adapter_for(type_).dump_json(value)
    except (PydanticSerializationError, ValueError, RecursionError) as e:
        raise EncodeFailure(f"json: valore non serializzabile: {e}") from e


def decode_json(data: bytes, type_: Any = Any) -> Any:
    try:
        return adapter_for(type_).validate_json(data)
    except ValidationError as e:
        raise DecodeFailure(f"json: decode fallito: {e}") from e
