"""Size/speed comparison of GRIN against general-purpose baselines.

Each row compresses the same input once:
  - grin : this codec (round-trip checked)
  - zlib : level 9
  - zstd : zstandard, configurable level
"""

from __future__ import annotations

import time
import zlib
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import zstandard as zstd

from grin_codec.config import ZSTD_LEVEL_DEFAULT
from grin_codec.engine.container import decode_bytes, encode_bytes
from grin_codec.errors import CorruptPayload, GrinIOError

BENCH_SCHEMA = "grin.bench.v1"


@dataclass(frozen=True)
class BenchRow:
    codec: str
    size_in: int
    size_out: int
    t_compress: float
    t_decompress: float

    @property
    def ratio(self) -> float:
        return self.size_out / self.size_in if self.size_in else 0.0

    def as_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["ratio"] = round(self.ratio, 4)
        return d


def _timed(fn, arg):
    t0 = time.perf_counter()
    out = fn(arg)
    return out, time.perf_counter() - t0


def _row(codec: str, data: bytes, compress, decompress) -> BenchRow:
    comp, t_c = _timed(compress, data)
    back, t_d = _timed(decompress, comp)
    if back != data:
        raise CorruptPayload(f"bench: {codec} round-trip mismatch")
    return BenchRow(
        codec=codec,
        size_in=len(data),
        size_out=len(comp),
        t_compress=t_c,
        t_decompress=t_d,
    )


def bench_bytes(data: bytes, *, zstd_level: int = ZSTD_LEVEL_DEFAULT) -> list[BenchRow]:
    zc = zstd.ZstdCompressor(level=int(zstd_level))
    zd = zstd.ZstdDecompressor()
    return [
        _row("grin", data, encode_bytes, decode_bytes),
        _row("zlib", data, lambda b: zlib.compress(b, 9), zlib.decompress),
        _row("zstd", data, zc.compress, zd.decompress),
    ]


def bench_file(path: Path, *, zstd_level: int = ZSTD_LEVEL_DEFAULT) -> list[BenchRow]:
    p = Path(path)
    try:
        data = p.read_bytes()
    except OSError as err:
        raise GrinIOError(f"cannot read {p}: {err.strerror or err}") from err
    return bench_bytes(data, zstd_level=zstd_level)


def bench_report(path: Path, rows: list[BenchRow], *, zstd_level: int) -> dict[str, Any]:
    return {
        "schema": BENCH_SCHEMA,
        "input": str(path),
        "zstd_level": int(zstd_level),
        "rows": [r.as_dict() for r in rows],
    }
