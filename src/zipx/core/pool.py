from __future__ import annotations

import io
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolStats:
    created: int
    reused: int
    idle: int


class BufferPool:
    """Thread-safe free-list of ``io.BytesIO`` scratch buffers.

    ``acquire()`` hands out exclusive ownership of one buffer for the duration
    of a ``with`` block. On exit (normal or exceptional) the buffer is rewound,
    truncated and put back, unless it grew beyond ``max_retained`` bytes, in
    which case it is dropped so one huge payload does not pin memory forever.

    Callers must copy the content out (``getvalue()``) *before* leaving the
    block. Nothing read from the buffer after release is valid.
    """

    def __init__(self, max_idle: int = 64, max_retained: int = 1 << 20):
        if max_idle < 0:
            raise ValueError(f"max_idle must be >= 0, got {max_idle}")
        self._max_idle = int(max_idle)
        self._max_retained = int(max_retained)
        self._free: list[io.BytesIO] = []
        self._lock = threading.Lock()
        self._created = 0
        self._reused = 0

    @contextmanager
    def acquire(self) -> Iterator[io.BytesIO]:
        buf = self._get()
        try:
            yield buf
        finally:
            self._put(buf)

    def stats(self) -> PoolStats:
        with self._lock:
            return PoolStats(created=self._created, reused=self._reused, idle=len(self._free))

    def _get(self) -> io.BytesIO:
        with self._lock:
            if self._free:
                self._reused += 1
                return self._free.pop()
            self._created += 1
        return io.BytesIO()

    def _put(self, buf: io.BytesIO) -> None:
        size = buf.seek(0, io.SEEK_END)
        buf.seek(0)
        buf.truncate(0)
        if size > self._max_retained:
            logger.debug("dropping scratch buffer of %d bytes", size)
            return
        with self._lock:
            if len(self._free) < self._max_idle:
                self._free.append(buf)


# Shared process-wide pools: one for compressed output, one for decompressed output.
write_pool = BufferPool()
read_pool = BufferPool()
