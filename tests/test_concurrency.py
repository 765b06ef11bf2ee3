from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest
from pydantic import BaseModel

from zipx.compress import gzip_compress, gzip_decompress, zlib_compress, zlib_decompress
from zipx.serializer import new_zlib_compact

pytestmark = pytest.mark.p1


class Message(BaseModel):
    id: str
    content: str
    timestamp: datetime
    user_id: str
    type: int


def _payload(i: int) -> bytes:
    return f"worker {i}: ".encode() * (1 + i % 37) + bytes([i % 256]) * (i % 513)


@pytest.mark.parametrize(
    "compress,decompress",
    [(gzip_compress, gzip_decompress), (zlib_compress, zlib_decompress)],
    ids=["gzip", "zlib"],
)
def test_parallel_roundtrips_never_mix_buffers(compress, decompress) -> None:
    def job(i: int) -> bool:
        data = _payload(i)
        for _ in range(5):
            if decompress(compress(data)) != data:
                return False
        return True

    with ThreadPoolExecutor(max_workers=64) as ex:
        results = list(ex.map(job, range(1024)))
    assert all(results)


def test_shared_serializer_under_contention() -> None:
    ts = datetime(2025, 12, 4, 18, 15, tzinfo=timezone.utc)
    messages = [
        Message(id=f"msg_{i}", content=f"并发测试消息 {i}", timestamp=ts, user_id=f"u{i}", type=i % 3)
        for i in range(10)
    ]
    ser = new_zlib_compact(list[Message])
    failures: list[str] = []
    lock = threading.Lock()

    def worker(n: int) -> None:
        for j in range(50):
            try:
                out = ser.decode_from_string(ser.encode_to_string(messages))
            except Exception as e:  # collected and asserted below
                out = e
            if out != messages:
                with lock:
                    failures.append(f"thread {n} iter {j}: {out!r}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(100)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert failures == []
