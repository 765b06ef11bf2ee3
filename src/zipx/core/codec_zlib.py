from __future__ import annotations

import zlib
from dataclasses import dataclass

from zipx.core.codec_base import ByteCodec, BytesLike, as_bytes
from zipx.core.pool import read_pool, write_pool
from zipx.errors import BadFormat


# Framing tag for compress_with_prefix: exactly these five ASCII bytes, case-sensitive,
# no version byte, no delimiter. Internal convention of this library, kept stable.
ZLIB_PREFIX = b"ZLIB:"

CHUNK_SIZE = 64 * 1024


@dataclass
class CodecZlib(ByteCodec):
    """zlib/DEFLATE byte codec (RFC 1950 stream, no custom framing).

    compress/decompress objects cannot be reset once a stream is finished,
    so a fresh one is created per call; only the scratch buffers are pooled.
    """

    level: int = 6
    codec_id: str = "zlib"

    def __post_init__(self) -> None:
        if not (0 <= self.level <= 9):
            raise ValueError(f"zlib level must be 0..9, got {self.level}")

    def compress(self, data: BytesLike) -> bytes:
        view = memoryview(as_bytes(data))
        c = zlib.compressobj(self.level, zlib.DEFLATED, zlib.MAX_WBITS)
        with write_pool.acquire() as buf:
            for i in range(0, len(view), CHUNK_SIZE):
                buf.write(c.compress(view[i : i + CHUNK_SIZE]))
            buf.write(c.flush())
            return buf.getvalue()

    def decompress(self, data: BytesLike) -> bytes:
        raw = as_bytes(data)
        if not raw:
            raise BadFormat("zlib: input vuoto")

        d = zlib.decompressobj(zlib.MAX_WBITS)
        with read_pool.acquire() as buf:
            try:
                buf.write(d.decompress(raw, CHUNK_SIZE))
                while d.unconsumed_tail and not d.eof:
                    buf.write(d.decompress(d.unconsumed_tail, CHUNK_SIZE))
                buf.write(d.flush())
            except zlib.error as e:
                raise BadFormat(f"zlib: stream non valido: {e}") from e
            if not d.eof:
                raise BadFormat("zlib: stream troncato")
            if d.unused_data:
                raise BadFormat(f"zlib: {len(d.unused_data)} byte in eccesso dopo lo stream")
            return buf.getvalue()

    # -- framing ----------------------------------------------------------

    def compress_with_prefix(self, data: BytesLike) -> bytes:
        """Return ``ZLIB_PREFIX + compress(data)``."""
        return ZLIB_PREFIX + self.compress(data)

    def decompress_with_prefix(self, data: BytesLike) -> bytes:
        """Decompress framed input; input without the tag is returned unchanged."""
        raw = as_bytes(data)
        if not raw.startswith(ZLIB_PREFIX):
            return raw
        return self.decompress(raw[len(ZLIB_PREFIX) :])

    @staticmethod
    def is_prefixed(data: BytesLike) -> bool:
        raw = as_bytes(data)
        return len(raw) > len(ZLIB_PREFIX) and raw[: len(ZLIB_PREFIX)] == ZLIB_PREFIX
