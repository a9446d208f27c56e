"""Huffman tree for GRIN.

Nodes are a tagged union: Leaf(symbol) | Internal(left, right).
Frequencies only live in the construction heap; they are not part of the tree
and not serialized.

Serialized form (pre-order, self-delimiting, MSB first):
  internal -> bit 1, left subtree, right subtree
  leaf     -> bit 0, 9-bit symbol

Degenerate tree: for an empty input the sentinel leaf is the root. Its code is
empty (length 0): encode emits no bits for it and decode stops before reading
any payload bit.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Union

from grin_codec.core.bitio import MAX_BITS, BitReader, BitWriter
from grin_codec.core.freq import EOF_SYMBOL, SYMBOL_BITS, FrequencyTable
from grin_codec.errors import InternalCodeTableError, MalformedTree

# 257 symbols -> at most 256 internal levels
MAX_DEPTH = EOF_SYMBOL


@dataclass(frozen=True, slots=True)
class Leaf:
    symbol: int


@dataclass(frozen=True, slots=True)
class Internal:
    left: "Node"
    right: "Node"


Node = Union[Leaf, Internal]


@dataclass(frozen=True, slots=True)
class Code:
    bits: int
    length: int

    def __str__(self) -> str:
        if self.length == 0:
            return ""
        return format(self.bits, f"0{self.length}b")


class HuffmanTree:
    def __init__(self, root: Node):
        self.root = root
        self._codes: dict[int, Code] | None = None

    # -------------------
    # Construction
    # -------------------
    @classmethod
    def build(cls, freqs: FrequencyTable) -> "HuffmanTree":
        """
        Greedy merge on a min-heap keyed by (frequency, lowest symbol in subtree).

        The first node popped becomes the left child. Leaf symbols are unique,
        so the key is a total order: same table, same tree.
        """
        heap: list[tuple[int, int, Node]] = [(n, sym, Leaf(sym)) for sym, n in freqs.items()]
        if not heap:
            raise ValueError("empty frequency table")
        heapq.heapify(heap)

        while len(heap) > 1:
            f1, s1, n1 = heapq.heappop(heap)
            f2, s2, n2 = heapq.heappop(heap)
            heapq.heappush(heap, (f1 + f2, min(s1, s2), Internal(n1, n2)))

        return cls(heap[0][2])

    @classmethod
    def deserialize(cls, reader: BitReader) -> "HuffmanTree":
        seen: set[int] = set()
        root = _read_node(reader, seen, 0)
        if EOF_SYMBOL not in seen:
            raise MalformedTree("tree has no end-of-stream leaf")
        return cls(root)

    # -------------------
    # Introspection
    # -------------------
    @property
    def codes(self) -> dict[int, Code]:
        """symbol -> Code, derived once by depth-first traversal."""
        if self._codes is None:
            codes: dict[int, Code] = {}
            _collect_codes(self.root, 0, 0, codes)
            self._codes = codes
        return self._codes

    def leaves(self) -> Iterator[Leaf]:
        stack: list[Node] = [self.root]
        while stack:
            node = stack.pop()
            if isinstance(node, Leaf):
                yield node
            else:
                stack.append(node.right)
                stack.append(node.left)

    @property
    def height(self) -> int:
        return max(c.length for c in self.codes.values())

    def serialized_bits(self) -> int:
        n_leaves = len(self.codes)
        return n_leaves * (1 + SYMBOL_BITS) + (n_leaves - 1)

    # -------------------
    # Wire format
    # -------------------
    def serialize(self, writer: BitWriter) -> None:
        _write_node(self.root, writer)

    def encode(self, reader: BitReader, writer: BitWriter) -> None:
        """Encode every byte of reader, then the end-of-stream code once."""
        codes = self.codes
        while reader.has_more():
            sym = reader.read_bits(8)
            code = codes.get(sym)
            if code is None:
                raise InternalCodeTableError(f"no code for byte 0x{sym:02x}")
            _write_code(writer, code)

        eof = codes.get(EOF_SYMBOL)
        if eof is None:
            raise InternalCodeTableError("no code for end-of-stream symbol")
        _write_code(writer, eof)

    def decode(self, reader: BitReader, writer: BitWriter) -> None:
        """Trace codes from the root until the end-of-stream leaf."""
        root = self.root
        if isinstance(root, Leaf):
            # Degenerate tree: nothing but the sentinel was ever encoded.
            if root.symbol != EOF_SYMBOL:
                raise MalformedTree("single-leaf tree without end-of-stream symbol")
            return

        while True:
            node: Node = root
            while isinstance(node, Internal):
                node = node.right if reader.read_bit() else node.left
            if node.symbol == EOF_SYMBOL:
                return
            writer.write_bits(node.symbol & 0xFF, 8)


def _collect_codes(node: Node, bits: int, length: int, out: dict[int, Code]) -> None:
    if isinstance(node, Leaf):
        out[node.symbol] = Code(bits, length)
        return
    _collect_codes(node.left, bits << 1, length + 1, out)
    _collect_codes(node.right, (bits << 1) | 1, length + 1, out)


def _write_code(writer: BitWriter, code: Code) -> None:
    # Codes can exceed 32 bits on very skewed inputs: emit high chunks first.
    remaining = code.length
    while remaining > MAX_BITS:
        remaining -= MAX_BITS
        writer.write_bits(code.bits >> remaining, MAX_BITS)
    if remaining:
        writer.write_bits(code.bits, remaining)


def _write_node(node: Node, writer: BitWriter) -> None:
    if isinstance(node, Leaf):
        writer.write_bit(0)
        writer.write_bits(node.symbol, SYMBOL_BITS)
        return
    writer.write_bit(1)
    _write_node(node.left, writer)
    _write_node(node.right, writer)


def _read_node(reader: BitReader, seen: set[int], depth: int) -> Node:
    if reader.read_bit():
        if depth >= MAX_DEPTH:
            raise MalformedTree(f"tree deeper than {MAX_DEPTH} levels")
        left = _read_node(reader, seen, depth + 1)
        right = _read_node(reader, seen, depth + 1)
        return Internal(left, right)

    sym = reader.read_bits(SYMBOL_BITS)
    if sym > EOF_SYMBOL:
        raise MalformedTree(f"leaf symbol out of range: {sym}")
    if sym in seen:
        raise MalformedTree(f"duplicate leaf symbol: {sym}")
    seen.add(sym)
    return Leaf(sym)
