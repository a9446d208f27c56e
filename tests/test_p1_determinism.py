from __future__ import annotations

import hashlib
import os
import random
from pathlib import Path

import pytest

from grin_codec.engine.container import decode_file, encode_file

pytestmark = pytest.mark.p1


def sha256_file(p: Path) -> str:
    h = hashlib.sha256()
    with p.open("rb") as f:
        while True:
            b = f.read(1024 * 1024)
            if not b:
                break
            h.update(b)
    return h.hexdigest()


def _inputs(root: Path) -> list[Path]:
    rng = random.Random(2024)
    files = {
        "empty.bin": b"",
        "one.bin": b"\x00",
        "text.txt": ("ciao mondo\nΩ λ\n" * 500).encode("utf-8"),
        "skewed.bin": bytes(rng.choices(range(8), weights=[64, 32, 16, 8, 4, 2, 1, 1], k=30_000)),
        "random.bin": os.urandom(8192),
        "ties.bin": bytes(range(256)) * 16,
    }
    out = []
    for name, data in files.items():
        p = root / name
        p.write_bytes(data)
        out.append(p)
    return out


def test_encode_is_byte_identical_across_runs(tmp_path: Path) -> None:
    for inp in _inputs(tmp_path):
        a = tmp_path / f"{inp.name}.1.grin"
        b = tmp_path / f"{inp.name}.2.grin"
        encode_file(inp, a)
        encode_file(inp, b)
        assert sha256_file(a) == sha256_file(b), inp.name


def test_roundtrip_matrix(tmp_path: Path) -> None:
    for inp in _inputs(tmp_path):
        for chunk in (1, 13, 65536):
            enc = tmp_path / f"{inp.name}.{chunk}.grin"
            back = tmp_path / f"{inp.name}.{chunk}.out"
            encode_file(inp, enc, chunk_size=chunk)
            decode_file(enc, back, chunk_size=chunk)
            assert sha256_file(back) == sha256_file(inp), (inp.name, chunk)
