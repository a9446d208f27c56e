from __future__ import annotations

import io
import os
from dataclasses import dataclass
from typing import BinaryIO, Union

from grin_codec.config import READ_CHUNK_DEFAULT
from grin_codec.core.bitio import BitReader, BitWriter
from grin_codec.core.freq import FrequencyTable
from grin_codec.core.huffman_tree import HuffmanTree
from grin_codec.errors import BadMagic, GrinIOError

MAGIC = 1846
MAGIC_BITS = 32

PathLike = Union[str, "os.PathLike[str]"]


# -------------------
# GRIN layout (bit-granular, MSB first)
# [MAGIC(u32=1846)|TREE(pre-order)|PAYLOAD(codes..., EOF code)|PAD(0..7 zero bits)]
# -------------------
@dataclass(frozen=True, slots=True)
class EncodeReport:
    bytes_in: int
    bytes_out: int
    leaves: int
    tree_bits: int
    payload_bits: int

    @property
    def ratio(self) -> float:
        return self.bytes_out / self.bytes_in if self.bytes_in else 0.0


@dataclass(frozen=True, slots=True)
class DecodeReport:
    bytes_in: int
    bytes_out: int
    leaves: int
    tree_bits: int
    payload_bits: int

    @property
    def ratio(self) -> float:
        return self.bytes_in / self.bytes_out if self.bytes_out else 0.0


def write_header(writer: BitWriter, tree: HuffmanTree) -> None:
    writer.write_bits(MAGIC, MAGIC_BITS)
    tree.serialize(writer)


def read_header(reader: BitReader) -> HuffmanTree:
    """Check the magic number, then parse the tree."""
    magic = reader.read_bits(MAGIC_BITS)
    if magic != MAGIC:
        raise BadMagic(f"not a GRIN file: magic {magic} (expected {MAGIC})")
    return HuffmanTree.deserialize(reader)


def _open(path: PathLike, mode: str) -> BinaryIO:
    try:
        return open(path, mode)
    except OSError as err:
        what = "input" if "r" in mode else "output"
        raise GrinIOError(f"cannot open {what} {path}: {err.strerror or err}") from err


def _tell(fp: BinaryIO) -> int:
    try:
        return fp.tell()
    except OSError as err:
        raise GrinIOError("encode needs a seekable input (two passes)") from err


def encode_stream(
    src: BinaryIO, dst: BinaryIO, *, chunk_size: int = READ_CHUNK_DEFAULT
) -> EncodeReport:
    """
    Two passes over src: frequencies first, then the payload.
    src must be seekable; dst is left open.
    """
    start = _tell(src)
    with BitReader(src, chunk_size=chunk_size) as reader:
        freqs = FrequencyTable.build(reader)
    tree = HuffmanTree.build(freqs)

    try:
        src.seek(start)
    except OSError as err:
        raise GrinIOError("encode needs a seekable input (two passes)") from err

    with BitReader(src, chunk_size=chunk_size) as reader, BitWriter(dst) as writer:
        write_header(writer, tree)
        tree_bits = writer.bits_written - MAGIC_BITS
        tree.encode(reader, writer)
        payload_bits = writer.bits_written - MAGIC_BITS - tree_bits

    return EncodeReport(
        bytes_in=freqs.total,
        bytes_out=(writer.bits_written + 7) // 8,
        leaves=len(freqs),
        tree_bits=tree_bits,
        payload_bits=payload_bits,
    )


def decode_stream(
    src: BinaryIO, dst: BinaryIO, *, chunk_size: int = READ_CHUNK_DEFAULT
) -> DecodeReport:
    with BitReader(src, chunk_size=chunk_size) as reader, BitWriter(dst) as writer:
        tree = read_header(reader)
        tree_bits = reader.bits_read - MAGIC_BITS
        tree.decode(reader, writer)
        payload_bits = reader.bits_read - MAGIC_BITS - tree_bits

    return DecodeReport(
        bytes_in=(reader.bits_read + 7) // 8,
        bytes_out=writer.bits_written // 8,
        leaves=len(tree.codes),
        tree_bits=tree_bits,
        payload_bits=payload_bits,
    )


def encode_file(
    input_path: PathLike, output_path: PathLike, *, chunk_size: int = READ_CHUNK_DEFAULT
) -> EncodeReport:
    with _open(input_path, "rb") as src, _open(output_path, "wb") as dst:
        return encode_stream(src, dst, chunk_size=chunk_size)


def decode_file(
    input_path: PathLike, output_path: PathLike, *, chunk_size: int = READ_CHUNK_DEFAULT
) -> DecodeReport:
    with _open(input_path, "rb") as src, _open(output_path, "wb") as dst:
        return decode_stream(src, dst, chunk_size=chunk_size)


def encode_bytes(data: bytes) -> bytes:
    out = io.BytesIO()
    encode_stream(io.BytesIO(bytes(data)), out)
    return out.getvalue()


def decode_bytes(blob: bytes) -> bytes:
    out = io.BytesIO()
    decode_stream(io.BytesIO(bytes(blob)), out)
    return out.getvalue()
