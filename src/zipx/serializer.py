"""Generic serializer: encoder stage -> optional compression -> optional Base64.

    payload T -> [gob | json bytes] -> [gzip | zlib bytes] -> [base64 str]

Decoding reverses the arrow and is *permissive*: if the configured encoder
cannot decode the buffer, the other one (gob <-> json) is tried before giving
up, so a store can migrate between the two without a flag day. The fallback
never crosses compression or Base64 settings. ``with_strict(True)`` turns it
off.

The instance only holds an immutable SerializerConfig, swapped by reference on
every ``with_*`` call; each encode/decode reads it once, so instances can be
shared across threads.
"""

from __future__ import annotations

import base64
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Generic, TypeVar

from zipx.compress import get_codec
from zipx.core.codec_base import ByteCodec, BytesLike, as_bytes
from zipx.core.gob_codec import decode_gob, encode_gob
from zipx.core.json_codec import decode_json, encode_json
from zipx.errors import (
    CodecNotImplemented,
    DecodeFailure,
    EmptyInput,
    EncodeFailure,
    ZipxError,
)
from zipx.serializer_spec import SerializerSpecV1, load_serializer_spec

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BENCH_ITERATIONS = 1000


class SerializeType(IntEnum):
    JSON = 0x01
    GOB = 0x02
    MSGPACK = 0x03  # reserved
    PROTOBUF = 0x04  # reserved


class CompressionType(IntEnum):
    NONE = 0x00
    GZIP = 0x01
    ZLIB = 0x02
    ZSTD = 0x03  # reserved


_ENCODERS: dict[SerializeType, Callable[[Any, Any], bytes]] = {
    SerializeType.GOB: encode_gob,
    SerializeType.JSON: encode_json,
}
_DECODERS: dict[SerializeType, Callable[[bytes, Any], Any]] = {
    SerializeType.GOB: decode_gob,
    SerializeType.JSON: decode_json,
}


@dataclass(frozen=True)
class SerializerConfig:
    encoder: SerializeType = SerializeType.GOB
    compression: CompressionType = CompressionType.NONE
    base64_enabled: bool = True
    strict: bool = False
    custom_encoder: Callable[[Any], bytes] | None = None
    custom_decoder: Callable[[bytes], Any] | None = None


@dataclass(frozen=True)
class SerializerStats:
    type: SerializeType
    compression: CompressionType
    base64: bool
    current_size: int = 0
    json_size: int = 0
    gob_size: int = 0
    compression_ratio: float = 0.0
    space_saved: int = 0
    space_saved_percent: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.name.lower(),
            "compression": self.compression.name.lower(),
            "base64": self.base64,
            "current_size": self.current_size,
            "json_size": self.json_size,
            "gob_size": self.gob_size,
            "compression_ratio": round(self.compression_ratio, 4),
            "space_saved": self.space_saved,
            "space_saved_percent": round(self.space_saved_percent, 2),
        }


@dataclass(frozen=True)
class BenchmarkResult:
    encode_time: float  # seconds per call
    decode_time: float
    data_size: int
    type: SerializeType
    compression: CompressionType
    iterations: int

    def __str__(self) -> str:
        return (
            f"Type: {self.type.name}, Compression: {self.compression.name}, "
            f"Encode: {self.encode_time * 1e6:.2f}us, Decode: {self.decode_time * 1e6:.2f}us, "
            f"Size: {self.data_size} bytes, Iterations: {self.iterations}"
        )


def _codec_for(compression: CompressionType) -> ByteCodec:
    return get_codec(compression.name.lower())


class Serializer(Generic[T]):
    """Configurable serializer for values of type ``T``.

    ``type_`` is the decode target (pydantic model, dataclass, ``list[Msg]``,
    ...). With the default ``Any`` decoded values are plain Python data.

    Defaults: gob, no compression, Base64 on, permissive decode.
    """

    def __init__(self, type_: Any = Any, config: SerializerConfig | None = None):
        self._type = type_
        self._config = config if config is not None else SerializerConfig()

    @classmethod
    def from_spec(cls, spec: SerializerSpecV1 | str, type_: Any = Any) -> Serializer[Any]:
        """Build a serializer from a SerializerSpecV1 or a spec argument ('@file.json' / inline)."""
        if isinstance(spec, str):
            spec = load_serializer_spec(spec)
        return cls(
            type_,
            SerializerConfig(
                encoder=SerializeType[spec.encoder.upper()],
                compression=CompressionType[spec.compression.upper()],
                base64_enabled=spec.base64,
                strict=spec.strict,
            ),
        )

    # -- builder -----------------------------------------------------------

    def with_type(self, encoder: SerializeType | int) -> Serializer[T]:
        self._config = replace(self._config, encoder=SerializeType(encoder))
        return self

    def with_compression(self, compression: CompressionType | int) -> Serializer[T]:
        self._config = replace(self._config, compression=CompressionType(compression))
        return self

    def with_base64(self, enable: bool) -> Serializer[T]:
        self._config = replace(self._config, base64_enabled=bool(enable))
        return self

    def with_strict(self, enable: bool) -> Serializer[T]:
        self._config = replace(self._config, strict=bool(enable))
        return self

    def with_custom_encoder(self, encoder: Callable[[T], bytes] | None) -> Serializer[T]:
        self._config = replace(self._config, custom_encoder=encoder)
        return self

    def with_custom_decoder(self, decoder: Callable[[bytes], T] | None) -> Serializer[T]:
        self._config = replace(self._config, custom_decoder=decoder)
        return self

    @property
    def config(self) -> SerializerConfig:
        return self._config

    @property
    def type_(self) -> Any:
        return self._type

    @property
    def serialize_type(self) -> SerializeType:
        return self._config.encoder

    @property
    def compression(self) -> CompressionType:
        return self._config.compression

    @property
    def base64_enabled(self) -> bool:
        return self._config.base64_enabled

    @property
    def strict(self) -> bool:
        return self._config.strict

    # -- encode ------------------------------------------------------------

    def encode(self, obj: T) -> bytes:
        return self._encode(self._config, obj)

    def encode_to_string(self, obj: T) -> str:
        cfg = self._config
        data = self._encode(cfg, obj)
        if cfg.base64_enabled:
            return base64.b64encode(data).decode("ascii")
        # Lossless for arbitrary bytes: invalid UTF-8 maps to lone surrogates.
        return data.decode("utf-8", "surrogateescape")

    def _encode(self, cfg: SerializerConfig, obj: T) -> bytes:
        if cfg.custom_encoder is not None:
            return as_bytes(cfg.custom_encoder(obj))

        data = self._encode_stage(cfg.encoder, obj)
        if cfg.compression is not CompressionType.NONE:
            data = _codec_for(cfg.compression).compress(data)
        return data

    def _encode_stage(self, encoder: SerializeType, obj: T) -> bytes:
        fn = _ENCODERS.get(encoder)
        if fn is None:
            raise CodecNotImplemented(f"serializzazione {encoder.name} non ancora implementata")
        return fn(obj, self._type)

    # -- decode ------------------------------------------------------------

    def decode(self, data: BytesLike) -> T:
        return self._decode(self._config, data)

    def decode_from_string(self, encoded: str) -> T:
        if not encoded:
            raise EmptyInput("serializer: stringa codificata vuota")

        cfg = self._config
        raw = encoded.encode("utf-8", "surrogateescape")
        if cfg.base64_enabled:
            try:
                raw = base64.b64decode(encoded, validate=True)
            except ValueError:
                # Legacy callers may hand over the unencoded payload.
                logger.debug("base64 decode failed, treating input as raw payload")
        return self._decode(cfg, raw)

    def _decode(self, cfg: SerializerConfig, data: BytesLike) -> T:
        if not data:
            raise EmptyInput("serializer: dati vuoti")

        raw = as_bytes(data)
        if cfg.custom_decoder is not None:
            return cfg.custom_decoder(raw)

        if cfg.compression is not CompressionType.NONE:
            raw = _codec_for(cfg.compression).decompress(raw)

        return self._decode_with_fallback(cfg, raw)

    def _decode_with_fallback(self, cfg: SerializerConfig, raw: bytes) -> T:
        attempts: list[SerializeType] = []
        if cfg.encoder in _DECODERS:
            attempts.append(cfg.encoder)
        if not cfg.strict:
            attempts.extend(e for e in _DECODERS if e is not cfg.encoder)
        if not attempts:
            raise CodecNotImplemented(f"deserializzazione {cfg.encoder.name} non ancora implementata")

        first_err: DecodeFailure | None = None
        for enc in attempts:
            try:
                return _DECODERS[enc](raw, self._type)
            except DecodeFailure as e:
                logger.debug("decode with %s failed: %s", enc.name.lower(), e)
                if first_err is None:
                    first_err = e

        tried = ", ".join(e.name.lower() for e in attempts)
        raise DecodeFailure(
            f"serializer: impossibile decodificare i dati (provati: {tried})"
        ) from first_err

    # -- stats / benchmark -------------------------------------------------

    def get_stats(self, obj: T) -> SerializerStats:
        """Compare gob-only, json-only and configured sizes; failing encodings count as 0."""
        cfg = self._config

        gob_size = _size_or_zero(lambda: encode_gob(obj, self._type))
        json_size = _size_or_zero(lambda: encode_json(obj, self._type))
        try:
            current_size: int | None = len(self._encode(cfg, obj))
        except Exception:
            logger.debug("stats: configured encode failed", exc_info=True)
            current_size = None

        stats = SerializerStats(
            type=cfg.encoder,
            compression=cfg.compression,
            base64=cfg.base64_enabled,
            current_size=current_size or 0,
            json_size=json_size,
            gob_size=gob_size,
        )
        if current_size is not None and json_size > 0:
            ratio = current_size / json_size
            stats = replace(
                stats,
                compression_ratio=ratio,
                space_saved=json_size - current_size,
                space_saved_percent=(1.0 - ratio) * 100,
            )
        return stats

    def benchmark(self, obj: T, iterations: int = DEFAULT_BENCH_ITERATIONS) -> BenchmarkResult:
        """Time ``iterations`` encodes, then ``iterations`` decodes of the last buffer."""
        if iterations <= 0:
            iterations = DEFAULT_BENCH_ITERATIONS
        cfg = self._config

        last = b""
        start = time.perf_counter()
        for _ in range(iterations):
            last = self._encode(cfg, obj)
        encode_time = (time.perf_counter() - start) / iterations

        start = time.perf_counter()
        for _ in range(iterations):
            self._decode(cfg, last)
        decode_time = (time.perf_counter() - start) / iterations

        return BenchmarkResult(
            encode_time=encode_time,
            decode_time=decode_time,
            data_size=len(last),
            type=cfg.encoder,
            compression=cfg.compression,
            iterations=iterations,
        )


def _size_or_zero(fn: Callable[[], bytes]) -> int:
    try:
        return len(fn())
    except ZipxError as e:
        logger.debug("stats: sub-encoding failed: %s", e)
        return 0


# ==================== preset factories ====================


def new_json(type_: Any = Any) -> Serializer[Any]:
    """JSON, no compression, no Base64."""
    return Serializer(type_).with_type(SerializeType.JSON).with_base64(False)


def new_gob(type_: Any = Any) -> Serializer[Any]:
    """Gob + Base64."""
    return Serializer(type_).with_type(SerializeType.GOB).with_base64(True)


def new_compact(type_: Any = Any) -> Serializer[Any]:
    """Gob + Gzip + Base64."""
    return (
        Serializer(type_)
        .with_type(SerializeType.GOB)
        .with_compression(CompressionType.GZIP)
        .with_base64(True)
    )


def new_zlib_compact(type_: Any = Any) -> Serializer[Any]:
    """Gob + Zlib + Base64."""
    return (
        Serializer(type_)
        .with_type(SerializeType.GOB)
        .with_compression(CompressionType.ZLIB)
        .with_base64(True)
    )


def new_fast(type_: Any = Any) -> Serializer[Any]:
    """Gob, no compression, no Base64."""
    return (
        Serializer(type_)
        .with_type(SerializeType.GOB)
        .with_compression(CompressionType.NONE)
        .with_base64(False)
    )


def new_ultra_compact(type_: Any = Any) -> Serializer[Any]:
    """JSON + Gzip + Base64 (most portable compact form)."""
    return (
        Serializer(type_)
        .with_type(SerializeType.JSON)
        .with_compression(CompressionType.GZIP)
        .with_base64(True)
    )


# ==================== lenient JSON helpers ====================


def to_json(value: Any) -> str:
    """JSON text of ``value``, or "" if it cannot be encoded."""
    try:
        return encode_json(value).decode("utf-8")
    except EncodeFailure:
        return ""


def from_json(text: str, type_: Any = Any, default: Any = None) -> Any:
    """Parse ``text`` as ``type_``; empty or invalid input gives ``default``."""
    if not text:
        return default
    try:
        return decode_json(text.encode("utf-8", "surrogateescape"), type_)
    except DecodeFailure:
        return default
