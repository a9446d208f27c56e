from __future__ import annotations

import io
import random
from pathlib import Path

import pytest

from grin_codec.core.bitio import BitReader, BitWriter
from grin_codec.engine.container import (
    MAGIC,
    decode_bytes,
    decode_file,
    decode_stream,
    encode_bytes,
    encode_file,
    encode_stream,
    read_header,
)
from grin_codec.errors import BadMagic, GrinIOError, MalformedTree, TruncatedStream

# Golden vectors (bit-level layout, MSB first):
#   magic u32 1846 | tree | payload | zero padding
#
# b"AAA": tree = 1 0(100000000) 0(001000001), payload = 1 1 1 0
GRIN_AAA_HEX = "00000736a0020f00"
# b"": tree = 0(100000000), no payload bits
GRIN_EMPTY_HEX = "000007364000"


def _samples() -> list[bytes]:
    rng = random.Random(1846)
    return [
        b"A",
        b"AB",
        b"hello, world\n",
        bytes(range(256)),
        bytes(rng.getrandbits(8) for _ in range(4096)),
        b"\x00" * 1000 + b"\xff",
        ("FATTURA 1001\nTOTALE 12.00\n" * 50).encode("utf-8"),
    ]


def test_golden_three_a() -> None:
    blob = encode_bytes(b"AAA")
    assert blob.hex() == GRIN_AAA_HEX
    assert decode_bytes(blob) == b"AAA"


def test_golden_empty() -> None:
    blob = encode_bytes(b"")
    assert blob.hex() == GRIN_EMPTY_HEX
    assert decode_bytes(blob) == b""


@pytest.mark.parametrize("data", _samples(), ids=lambda d: f"len{len(d)}")
def test_roundtrip_bytes(data: bytes) -> None:
    assert decode_bytes(encode_bytes(data)) == data


def test_encode_report_three_a() -> None:
    out = io.BytesIO()
    rep = encode_stream(io.BytesIO(b"AAA"), out)
    assert rep.bytes_in == 3
    assert rep.bytes_out == len(out.getvalue()) == 8
    assert rep.leaves == 2
    assert rep.tree_bits == 21
    assert rep.payload_bits == 4


def test_encode_empty_report() -> None:
    out = io.BytesIO()
    rep = encode_stream(io.BytesIO(b""), out)
    assert rep.bytes_in == 0
    assert rep.leaves == 1
    assert rep.payload_bits == 0
    assert rep.ratio == 0.0


def test_decode_report() -> None:
    blob = encode_bytes(b"abracadabra")
    rep = decode_stream(io.BytesIO(blob), io.BytesIO())
    assert rep.bytes_out == 11
    assert rep.bytes_in == len(blob)
    assert rep.leaves == 6


def test_encode_stream_starts_at_current_position() -> None:
    src = io.BytesIO(b"skip:payload")
    src.seek(5)
    out = io.BytesIO()
    encode_stream(src, out)
    assert decode_bytes(out.getvalue()) == b"payload"


def test_file_roundtrip(tmp_path: Path) -> None:
    inp = tmp_path / "in.bin"
    enc = tmp_path / "out.grin"
    back = tmp_path / "back.bin"
    data = b"".join(_samples())
    inp.write_bytes(data)

    encode_file(inp, enc, chunk_size=7)
    decode_file(enc, back, chunk_size=5)
    assert back.read_bytes() == data
    assert enc.stat().st_size < len(data)


def test_bad_magic_fails_before_tree() -> None:
    buf = io.BytesIO()
    with BitWriter(buf) as w:
        w.write_bits(MAGIC + 1, 32)
        w.write_bits(0x3FF, 10)
    reader = BitReader(buf.getvalue())
    with pytest.raises(BadMagic):
        read_header(reader)
    assert reader.bits_read == 32


def test_bad_magic_on_foreign_file() -> None:
    with pytest.raises(BadMagic):
        decode_bytes(b"PK\x03\x04" + b"\x00" * 32)


def test_short_header_is_truncated() -> None:
    with pytest.raises(TruncatedStream):
        decode_bytes(b"\x00\x00\x07")
    with pytest.raises(TruncatedStream):
        decode_bytes(bytes.fromhex("00000736"))


def test_truncated_payload() -> None:
    blob = encode_bytes(b"hello hello hello")
    with pytest.raises(TruncatedStream):
        decode_bytes(blob[:-1])


def test_malformed_tree() -> None:
    buf = io.BytesIO()
    with BitWriter(buf) as w:
        w.write_bits(MAGIC, 32)
        w.write_bit(0)
        w.write_bits(0x41, 9)  # lone leaf, no sentinel
    with pytest.raises(MalformedTree):
        decode_bytes(buf.getvalue())


def test_missing_input_is_io_error(tmp_path: Path) -> None:
    with pytest.raises(GrinIOError):
        encode_file(tmp_path / "nope.bin", tmp_path / "out.grin")
    with pytest.raises(GrinIOError):
        decode_file(tmp_path / "nope.grin", tmp_path / "out.bin")
