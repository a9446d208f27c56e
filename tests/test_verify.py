from __future__ import annotations

from pathlib import Path

import pytest

from grin_codec.engine.container import encode_bytes
from grin_codec.errors import BadMagic, CorruptPayload, GrinIOError, TruncatedStream
from grin_codec.verify import describe_grin_file, format_symbol, verify_grin_file


def _write(tmp_path: Path, blob: bytes, name: str = "x.grin") -> Path:
    p = tmp_path / name
    p.write_bytes(blob)
    return p


def test_verify_light_and_full(tmp_path: Path) -> None:
    p = _write(tmp_path, encode_bytes(b"AAA"))

    light = verify_grin_file(p)
    assert light.full is False
    assert light.leaves == 2
    assert light.height == 1
    assert light.tree_bits == 21
    assert light.decoded_size is None

    full = verify_grin_file(p, full=True)
    assert full.full is True
    assert full.payload_bits == 4
    assert full.decoded_size == 3


def test_verify_empty_payload(tmp_path: Path) -> None:
    p = _write(tmp_path, encode_bytes(b""))
    s = verify_grin_file(p, full=True)
    assert s.leaves == 1
    assert s.height == 0
    assert s.decoded_size == 0


def test_verify_light_does_not_read_payload(tmp_path: Path) -> None:
    p = _write(tmp_path, encode_bytes(b"hello hello")[:-1])
    verify_grin_file(p)
    with pytest.raises(TruncatedStream):
        verify_grin_file(p, full=True)


def test_verify_bad_magic(tmp_path: Path) -> None:
    p = _write(tmp_path, b"not a grin file")
    with pytest.raises(BadMagic):
        verify_grin_file(p)


def test_verify_trailing_data(tmp_path: Path) -> None:
    p = _write(tmp_path, encode_bytes(b"AAA") + b"\x00")
    verify_grin_file(p)
    with pytest.raises(CorruptPayload):
        verify_grin_file(p, full=True)


def test_verify_non_zero_padding(tmp_path: Path) -> None:
    blob = bytearray(encode_bytes(b"AAA"))
    blob[-1] |= 0x01
    p = _write(tmp_path, bytes(blob))
    with pytest.raises(CorruptPayload):
        verify_grin_file(p, full=True)


def test_verify_missing_file(tmp_path: Path) -> None:
    with pytest.raises(GrinIOError):
        verify_grin_file(tmp_path / "missing.grin")


def test_describe_sorted_by_length(tmp_path: Path) -> None:
    p = _write(tmp_path, encode_bytes(b"AAAAABBC"))
    rows = describe_grin_file(p)
    assert [sym for sym, _ in rows] == [0x41, 0x42, 0x43, 256]
    assert [c.length for _, c in rows] == [1, 2, 3, 3]


def test_format_symbol() -> None:
    assert format_symbol(256) == "EOF"
    assert format_symbol(0x41) == "0x41 'A'"
    assert format_symbol(0x0A) == "0x0a"
