from __future__ import annotations

import gzip
import io
import zlib
from dataclasses import dataclass

from zipx.core.codec_base import ByteCodec, BytesLike, as_bytes
from zipx.core.codec_zlib import CHUNK_SIZE
from zipx.core.pool import read_pool, write_pool
from zipx.errors import BadFormat


@dataclass
class CodecGzip(ByteCodec):
    """gzip byte codec (RFC 1952 member, no custom framing).

    - the header carries mtime=0, so equal input/level gives equal output
    - decompress accepts concatenated members, like ``gzip.decompress``
    """

    level: int = 6
    codec_id: str = "gzip"

    def __post_init__(self) -> None:
        if not (0 <= self.level <= 9):
            raise ValueError(f"gzip level must be 0..9, got {self.level}")

    def compress(self, data: BytesLike) -> bytes:
        raw = as_bytes(data)
        with write_pool.acquire() as buf:
            # GzipFile cannot be re-bound to another buffer: one writer per call,
            # closed (trailer written) before the buffer is read.
            with gzip.GzipFile(fileobj=buf, mode="wb", compresslevel=self.level, mtime=0) as w:
                w.write(raw)
            return buf.getvalue()

    def decompress(self, data: BytesLike) -> bytes:
        raw = as_bytes(data)
        if not raw:
            raise BadFormat("gzip: input vuoto")

        with read_pool.acquire() as buf:
            try:
                with gzip.GzipFile(fileobj=io.BytesIO(raw), mode="rb") as r:
                    while True:
                        chunk = r.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        buf.write(chunk)
            except (gzip.BadGzipFile, EOFError, zlib.error) as e:
                raise BadFormat(f"gzip: stream non valido: {e}") from e
            return buf.getvalue()
