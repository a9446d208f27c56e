from __future__ import annotations

from collections import Counter
from collections.abc import Iterator, Mapping

from grin_codec.core.bitio import BitReader

EOF_SYMBOL = 256
SYMBOL_BITS = 9


class FrequencyTable(Mapping[int, int]):
    """
    symbol -> count, for symbols 0..255 plus the end-of-stream sentinel (256).

    The sentinel is always present with count 1, even for an empty input.
    Iteration is in ascending symbol order.
    """

    __slots__ = ("_counts",)

    def __init__(self, counts: Mapping[int, int]):
        table: dict[int, int] = {}
        for sym, n in counts.items():
            sym = int(sym)
            n = int(n)
            if not 0 <= sym <= EOF_SYMBOL:
                raise ValueError(f"symbol out of range 0..{EOF_SYMBOL}: {sym}")
            if n < 1:
                raise ValueError(f"count for symbol {sym} must be >= 1, got {n}")
            table[sym] = n
        if table.setdefault(EOF_SYMBOL, 1) != 1:
            raise ValueError(f"end-of-stream symbol count must be 1, got {table[EOF_SYMBOL]}")
        self._counts = dict(sorted(table.items()))

    @classmethod
    def build(cls, reader: BitReader) -> "FrequencyTable":
        """Count 8-bit chunks until the reader is exhausted."""
        counts = [0] * 256
        while reader.has_more():
            counts[reader.read_bits(8)] += 1
        return cls({sym: n for sym, n in enumerate(counts) if n})

    @classmethod
    def from_bytes(cls, data: bytes) -> "FrequencyTable":
        return cls(Counter(data))

    @classmethod
    def from_counts(cls, counts: Mapping[int, int]) -> "FrequencyTable":
        return cls(counts)

    @property
    def total(self) -> int:
        """Number of data bytes counted (sentinel excluded)."""
        return sum(n for sym, n in self._counts.items() if sym != EOF_SYMBOL)

    def __getitem__(self, sym: int) -> int:
        return self._counts[sym]

    def __iter__(self) -> Iterator[int]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"FrequencyTable({self._counts!r})"
