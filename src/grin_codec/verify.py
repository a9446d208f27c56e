"""Verification helpers.

  - light (default): magic + tree parse
  - full: also decode the whole payload into a discarding sink, require the
    end-of-stream code, and require that only zero padding follows it.

show: dump the code table of a GRIN file.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from grin_codec.core.bitio import BitReader, BitWriter
from grin_codec.core.freq import EOF_SYMBOL
from grin_codec.core.huffman_tree import Code
from grin_codec.engine.container import MAGIC_BITS, read_header
from grin_codec.errors import CorruptPayload, GrinIOError


@dataclass(frozen=True)
class GrinSummary:
    path: Path
    size: int
    leaves: int
    height: int
    tree_bits: int
    full: bool
    payload_bits: int | None = None
    decoded_size: int | None = None


class _DiscardSink:
    """Binary sink that only counts bytes."""

    def __init__(self) -> None:
        self.n = 0

    def write(self, b: bytes) -> int:
        self.n += len(b)
        return len(b)

    def flush(self) -> None:
        pass


def _check_file(path: Path) -> int:
    if not path.is_file():
        raise GrinIOError(f"file not found: {path}")
    return path.stat().st_size


def _check_trailer(reader: BitReader) -> None:
    pad = reader.pending_bits
    if pad and reader.read_bits(pad) != 0:
        raise CorruptPayload("non-zero padding after end-of-stream code")
    if reader.has_more():
        raise CorruptPayload("trailing data after end-of-stream code")


def verify_grin_file(path: Path, *, full: bool = False) -> GrinSummary:
    p = Path(path)
    size = _check_file(p)

    with BitReader(p) as reader:
        tree = read_header(reader)
        tree_bits = reader.bits_read - MAGIC_BITS
        if not full:
            return GrinSummary(
                path=p,
                size=size,
                leaves=len(tree.codes),
                height=tree.height,
                tree_bits=tree_bits,
                full=False,
            )

        sink = _DiscardSink()
        with BitWriter(sink) as writer:
            tree.decode(reader, writer)
        payload_bits = reader.bits_read - MAGIC_BITS - tree_bits
        _check_trailer(reader)

    return GrinSummary(
        path=p,
        size=size,
        leaves=len(tree.codes),
        height=tree.height,
        tree_bits=tree_bits,
        full=True,
        payload_bits=payload_bits,
        decoded_size=sink.n,
    )


def describe_grin_file(path: Path) -> list[tuple[int, Code]]:
    """(symbol, code) pairs sorted by code length, then symbol."""
    p = Path(path)
    _check_file(p)
    with BitReader(p) as reader:
        tree = read_header(reader)
    return sorted(tree.codes.items(), key=lambda kv: (kv[1].length, kv[0]))


def format_symbol(sym: int) -> str:
    if sym == EOF_SYMBOL:
        return "EOF"
    if 0x21 <= sym <= 0x7E:
        return f"0x{sym:02x} {chr(sym)!r}"
    return f"0x{sym:02x}"
