from __future__ import annotations

from pathlib import Path

import pytest

from grin_codec.bench import BENCH_SCHEMA, bench_bytes, bench_file, bench_report
from grin_codec.errors import GrinIOError


def test_bench_rows() -> None:
    data = b"hello " * 100
    rows = bench_bytes(data, zstd_level=3)
    assert [r.codec for r in rows] == ["grin", "zlib", "zstd"]
    assert all(r.size_in == len(data) for r in rows)
    grin = rows[0]
    assert 0 < grin.size_out < len(data)
    assert grin.ratio == grin.size_out / len(data)


def test_bench_empty_input() -> None:
    rows = bench_bytes(b"", zstd_level=1)
    assert rows[0].size_out == 6
    assert all(r.ratio == 0.0 for r in rows)


def test_bench_report(tmp_path: Path) -> None:
    p = tmp_path / "in.bin"
    p.write_bytes(bytes(range(256)) * 4)
    rows = bench_file(p, zstd_level=5)
    rep = bench_report(p, rows, zstd_level=5)
    assert rep["schema"] == BENCH_SCHEMA
    assert rep["rows"][0]["codec"] == "grin"
    assert set(rep["rows"][0]) == {
        "codec",
        "size_in",
        "size_out",
        "t_compress",
        "t_decompress",
        "ratio",
    }


def test_bench_missing_file(tmp_path: Path) -> None:
    with pytest.raises(GrinIOError):
        bench_file(tmp_path / "missing")
