#!/usr/bin/env python3
"""Serializer benchmark tool.

Runs encode/decode timings and size stats for the preset matrix
(gob, json, gob+gzip, json+gzip, gob+zlib, fast) over a synthetic
message batch, or for a single serializer spec.

Usage example:
  python tools/bench_serializer.py --messages 50 --iters 2000
  python tools/bench_serializer.py --spec '{"spec": "zipx.serializer.v1", "encoder": "json", "compression": "zlib"}'

Notes:
- Uses internal APIs (no subprocess). Run inside repo venv.
- --json prints one JSON object per serializer (stable keys) instead of the table.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("zipx.bench")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s [%(name)s:%(funcName)s] : %(message)s",
    )


def _make_messages(n: int) -> list[dict[str, Any]]:
    base = datetime(2025, 12, 4, 18, 15, tzinfo=timezone.utc)
    return [
        {
            "id": f"msg_{i:06d}",
            "content": f"这是一条用于基准测试的消息 #{i}. Hello World! " * 4,
            "timestamp": base.isoformat(),
            "user_id": f"user_{i % 7}",
            "type": i % 3 + 1,
        }
        for i in range(n)
    ]


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="bench_serializer.py", description="zipx serializer benchmark")
    ap.add_argument("--messages", type=int, default=20, help="Messages per payload")
    ap.add_argument("--iters", type=int, default=1000)
    ap.add_argument("--spec", default=None, help="Serializer spec (@file.json or inline JSON)")
    ap.add_argument("--json", action="store_true", help="Emit JSON lines instead of a table")
    ap.add_argument("--log-level", default="WARNING")
    ns = ap.parse_args(argv)

    setup_logging(ns.log_level)

    from zipx.serializer import (
        Serializer,
        new_compact,
        new_fast,
        new_gob,
        new_json,
        new_ultra_compact,
        new_zlib_compact,
    )

    if ns.spec:
        candidates = {"spec": Serializer.from_spec(ns.spec)}
    else:
        candidates = {
            "gob": new_gob(),
            "json": new_json(),
            "gob+gzip": new_compact(),
            "json+gzip": new_ultra_compact(),
            "gob+zlib": new_zlib_compact(),
            "fast": new_fast(),
        }

    payload = _make_messages(ns.messages)
    logger.info("payload: %d messages, %d iterations", len(payload), ns.iters)

    if not ns.json:
        print(f"{'name':<12} {'encode_us':>10} {'decode_us':>10} {'size':>8} {'vs_json':>8}")

    for name, ser in candidates.items():
        res = ser.benchmark(payload, ns.iters)
        stats = ser.get_stats(payload)
        if ns.json:
            row = {"name": name, **stats.to_dict()}
            row["encode_us"] = round(res.encode_time * 1e6, 2)
            row["decode_us"] = round(res.decode_time * 1e6, 2)
            print(json.dumps(row, ensure_ascii=False, sort_keys=True))
        else:
            print(
                f"{name:<12} {res.encode_time * 1e6:>10.2f} {res.decode_time * 1e6:>10.2f} "
                f"{res.data_size:>8} {stats.compression_ratio:>8.2%}"
            )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
