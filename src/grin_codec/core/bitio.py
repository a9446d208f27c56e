"""Bit-granular I/O.

BitReader / BitWriter move single bits and unsigned integers of up to 32 bits,
most-significant bit first. The writer pads the last partial byte with zero
bits on close.

Both accept either a filesystem path (they own the handle and close it) or an
already-open binary file object (left open on close). The reader also accepts
an in-memory bytes-like buffer.
"""

from __future__ import annotations

import io
import os
from typing import BinaryIO, Union

from grin_codec.config import READ_CHUNK_DEFAULT
from grin_codec.errors import GrinIOError, TruncatedStream

MAX_BITS = 32
WRITE_BUFFER_SIZE = 64 * 1024

PathLike = Union[str, "os.PathLike[str]"]
ByteSource = Union[PathLike, bytes, bytearray, memoryview, BinaryIO]
ByteSink = Union[PathLike, BinaryIO]


def _check_width(n: int) -> None:
    if not 1 <= n <= MAX_BITS:
        raise ValueError(f"bit width must be in 1..{MAX_BITS}, got {n}")


def _io_message(action: str, target: object, err: OSError) -> str:
    return f"cannot {action} {target}: {err.strerror or err}"


class BitReader:
    """Sequential, forward-only reader over a bit stream."""

    def __init__(self, source: ByteSource, *, chunk_size: int = READ_CHUNK_DEFAULT):
        self._name: object
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._fp: BinaryIO = io.BytesIO(bytes(source))
            self._owns = True
            self._name = "<memory>"
        elif isinstance(source, (str, os.PathLike)):
            try:
                self._fp = open(source, "rb")
            except OSError as err:
                raise GrinIOError(_io_message("open input", source, err)) from err
            self._owns = True
            self._name = os.fspath(source)
        else:
            self._fp = source
            self._owns = False
            self._name = getattr(source, "name", "<stream>")

        self._chunk_size = max(1, int(chunk_size))
        self._buf = b""
        self._pos = 0
        self._cur = 0  # current byte
        self._left = 0  # unread bits in _cur
        self._eof = False
        self._closed = False
        self.bits_read = 0

    def _fill(self) -> bool:
        """Load the next byte into the bit register. False at end of stream."""
        if self._pos >= len(self._buf):
            if self._eof:
                return False
            try:
                chunk = self._fp.read(self._chunk_size)
            except OSError as err:
                raise GrinIOError(_io_message("read", self._name, err)) from err
            if not chunk:
                self._eof = True
                return False
            self._buf = chunk
            self._pos = 0
        self._cur = self._buf[self._pos]
        self._pos += 1
        self._left = 8
        return True

    def has_more(self) -> bool:
        return self._left > 0 or self._fill()

    @property
    def pending_bits(self) -> int:
        """Unread bits left in the current byte (0..7 once a byte is started)."""
        return self._left

    def read_bit(self) -> int:
        if self._left == 0 and not self._fill():
            raise TruncatedStream(f"{self._name}: bit stream exhausted")
        self._left -= 1
        self.bits_read += 1
        return (self._cur >> self._left) & 1

    def read_bits(self, n: int) -> int:
        _check_width(n)
        value = 0
        need = n
        while need:
            if self._left == 0 and not self._fill():
                raise TruncatedStream(
                    f"{self._name}: bit stream exhausted (wanted {n} bits, got {n - need})"
                )
            take = min(need, self._left)
            self._left -= take
            value = (value << take) | ((self._cur >> self._left) & ((1 << take) - 1))
            need -= take
        self.bits_read += n
        return value

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns:
            self._fp.close()

    def __enter__(self) -> "BitReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class BitWriter:
    """Accumulates bits into bytes; close() pads the last byte with zeros."""

    def __init__(self, sink: ByteSink):
        self._name: object
        if isinstance(sink, (str, os.PathLike)):
            try:
                self._fp: BinaryIO = open(sink, "wb")
            except OSError as err:
                raise GrinIOError(_io_message("open output", sink, err)) from err
            self._owns = True
            self._name = os.fspath(sink)
        else:
            self._fp = sink
            self._owns = False
            self._name = getattr(sink, "name", "<stream>")

        self._acc = 0
        self._nacc = 0  # bits in _acc, always < 8 between calls
        self._out = bytearray()
        self._closed = False
        self.bits_written = 0

    def write_bit(self, bit: int) -> None:
        self.write_bits(1 if bit else 0, 1)

    def write_bits(self, value: int, n: int) -> None:
        if self._closed:
            raise ValueError("BitWriter: write on closed writer")
        _check_width(n)
        acc = (self._acc << n) | (value & ((1 << n) - 1))
        nacc = self._nacc + n
        while nacc >= 8:
            nacc -= 8
            self._out.append((acc >> nacc) & 0xFF)
        self._acc = acc & ((1 << nacc) - 1)
        self._nacc = nacc
        self.bits_written += n
        if len(self._out) >= WRITE_BUFFER_SIZE:
            self._drain()

    def _drain(self) -> None:
        if not self._out:
            return
        try:
            self._fp.write(self._out)
        except OSError as err:
            raise GrinIOError(_io_message("write", self._name, err)) from err
        self._out.clear()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._nacc:
                self._out.append((self._acc << (8 - self._nacc)) & 0xFF)
                self._acc = 0
                self._nacc = 0
            self._drain()
            try:
                self._fp.flush()
            except OSError as err:
                raise GrinIOError(_io_message("flush", self._name, err)) from err
        finally:
            if self._owns:
                self._fp.close()

    def __enter__(self) -> "BitWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
