"""Module-level compression API.

Thin functions over two shared default codecs, so callers can write
``zlib_compress(data)`` without holding a codec instance. The codecs are
stateless apart from their level; every call is independent and thread-safe.

  gzip_compress / gzip_decompress          RFC 1952
  zlib_compress / zlib_decompress          RFC 1950
  *_n                                      n rounds (depth must match on decode)
  *_object / *_object_with_size / *_object_n   JSON -> compress (and inverse)
  zlib_*_with_prefix / zlib_is_prefixed    b"ZLIB:" framing
"""

from __future__ import annotations

from typing import Any

from zipx.core.codec_base import ByteCodec, BytesLike
from zipx.core.codec_gzip import CodecGzip
from zipx.core.codec_zlib import ZLIB_PREFIX, CodecZlib
from zipx.errors import CodecNotImplemented

_GZIP = CodecGzip()
_ZLIB = CodecZlib()

RESERVED_CODECS = frozenset({"zstd"})


def get_codec(codec_id: str, level: int | None = None) -> ByteCodec:
    """Resolve a codec id ("gzip", "zlib") to a codec instance.

    Reserved ids ("zstd") raise CodecNotImplemented; unknown ids raise ValueError.
    """
    cid = codec_id.strip().lower()
    if cid in RESERVED_CODECS:
        raise CodecNotImplemented(f"codec '{cid}' non ancora implementato")
    if cid == "gzip":
        return _GZIP if level is None else CodecGzip(level=level)
    if cid == "zlib":
        return _ZLIB if level is None else CodecZlib(level=level)
    raise ValueError(f"codec sconosciuto: {codec_id!r}")


# -- gzip ------------------------------------------------------------------


def gzip_compress(data: BytesLike) -> bytes:
    return _GZIP.compress(data)


def gzip_decompress(data: BytesLike) -> bytes:
    return _GZIP.decompress(data)


def gzip_compress_n(data: BytesLike, n: int) -> bytes:
    return _GZIP.compress_n(data, n)


def gzip_decompress_n(data: BytesLike, n: int) -> bytes:
    return _GZIP.decompress_n(data, n)


def gzip_compress_object(value: Any) -> bytes:
    return _GZIP.compress_object(value)


def gzip_compress_object_with_size(value: Any) -> tuple[bytes, int]:
    return _GZIP.compress_object_with_size(value)


def gzip_decompress_object(data: BytesLike, type_: Any = Any) -> Any:
    return _GZIP.decompress_object(data, type_)


def gzip_compress_object_n(value: Any, n: int) -> bytes:
    return _GZIP.compress_object_n(value, n)


def gzip_decompress_object_n(data: BytesLike, n: int, type_: Any = Any) -> Any:
    return _GZIP.decompress_object_n(data, n, type_)


# -- zlib ------------------------------------------------------------------


def zlib_compress(data: BytesLike) -> bytes:
    return _ZLIB.compress(data)


def zlib_decompress(data: BytesLike) -> bytes:
    return _ZLIB.decompress(data)


def zlib_compress_n(data: BytesLike, n: int) -> bytes:
    return _ZLIB.compress_n(data, n)


def zlib_decompress_n(data: BytesLike, n: int) -> bytes:
    return _ZLIB.decompress_n(data, n)


def zlib_compress_object(value: Any) -> bytes:
    return _ZLIB.compress_object(value)


def zlib_compress_object_with_size(value: Any) -> tuple[bytes, int]:
    return _ZLIB.compress_object_with_size(value)


def zlib_decompress_object(data: BytesLike, type_: Any = Any) -> Any:
    return _ZLIB.decompress_object(data, type_)


def zlib_compress_object_n(value: Any, n: int) -> bytes:
    return _ZLIB.compress_object_n(value, n)


def zlib_decompress_object_n(data: BytesLike, n: int, type_: Any = Any) -> Any:
    return _ZLIB.decompress_object_n(data, n, type_)


def zlib_compress_with_prefix(data: BytesLike) -> bytes:
    return _ZLIB.compress_with_prefix(data)


def zlib_decompress_with_prefix(data: BytesLike) -> bytes:
    return _ZLIB.decompress_with_prefix(data)


def zlib_is_prefixed(data: BytesLike) -> bool:
    return CodecZlib.is_prefixed(data)


__all__ = [
    "ZLIB_PREFIX",
    "RESERVED_CODECS",
    "get_codec",
    "gzip_compress",
    "gzip_decompress",
    "gzip_compress_n",
    "gzip_decompress_n",
    "gzip_compress_object",
    "gzip_compress_object_with_size",
    "gzip_decompress_object",
    "gzip_compress_object_n",
    "gzip_decompress_object_n",
    "zlib_compress",
    "zlib_decompress",
    "zlib_compress_n",
    "zlib_decompress_n",
    "zlib_compress_object",
    "zlib_compress_object_with_size",
    "zlib_decompress_object",
    "zlib_compress_object_n",
    "zlib_decompress_object_n",
    "zlib_compress_with_prefix",
    "zlib_decompress_with_prefix",
    "zlib_is_prefixed",
]
