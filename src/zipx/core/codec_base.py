from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from zipx.core.json_codec import decode_json, encode_json

BytesLike = bytes | bytearray | memoryview


def as_bytes(data: BytesLike) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"data must be bytes-like, got {type(data).__name__}")
    return bytes(data)


def check_rounds(n: int) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"rounds must be int, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"rounds must be >= 0, got {n}")
    return n


class ByteCodec(ABC):
    """
    Whole-buffer byte codec (gzip, zlib).

    Subclasses implement ``compress``/``decompress``; the multi-round and
    object forms are built on top of them and behave the same for every codec.

    Contract:
      - results are always fresh ``bytes`` owned by the caller
      - ``decompress`` raises ``BadFormat`` on empty/truncated/invalid input
    """

    codec_id: str

    @abstractmethod
    def compress(self, data: BytesLike) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def decompress(self, data: BytesLike) -> bytes:
        raise NotImplementedError

    def compress_n(self, data: BytesLike, n: int) -> bytes:
        """Apply ``compress`` exactly ``n`` times (``n=0`` returns the input)."""
        out = as_bytes(data)
        for _ in range(check_rounds(n)):
            out = self.compress(out)
        return out

    def decompress_n(self, data: BytesLike, n: int) -> bytes:
        out = as_bytes(data)
        for _ in range(check_rounds(n)):
            out = self.decompress(out)
        return out

    # -- object forms: JSON -> compress --------------------------------

    def compress_object(self, value: Any) -> bytes:
        return self.compress(encode_json(value))

    def compress_object_with_size(self, value: Any) -> tuple[bytes, int]:
        """Return (blob, json_len); json_len is the size of the intermediate JSON."""
        raw = encode_json(value)
        return self.compress(raw), len(raw)

    def decompress_object(self, data: BytesLike, type_: Any = Any) -> Any:
        return decode_json(self.decompress(data), type_)

    def compress_object_n(self, value: Any, n: int) -> bytes:
        return self.compress_n(encode_json(value), n)

    def decompress_object_n(self, data: BytesLike, n: int, type_: Any = Any) -> Any:
        return decode_json(self.decompress_n(data, n), type_)
