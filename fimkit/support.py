"""Support counting over packed membership bitsets."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .store import TransactionStore

_WORD_BITS = 64


def pack_rows(bits: np.ndarray) -> np.ndarray:
    """Pack a boolean ``(n_sets, n_bits)`` array into ``uint64`` words per row."""
    bits = np.ascontiguousarray(bits, dtype=bool)
    n_sets, n_bits = bits.shape
    n_words = max(1, -(-n_bits // _WORD_BITS))
    packed = np.packbits(bits, axis=1, bitorder="little")
    out = np.zeros((n_sets, n_words * 8), dtype=np.uint8)
    out[:, : packed.shape[1]] = packed
    return out.view(np.uint64)


def popcount(bits: np.ndarray) -> int:
    """Number of set bits in one packed bitset."""
    return int(np.bitwise_count(bits).sum())


class BitsetIndex:
    """Immutable table of packed bitsets, one per search position.

    In the vertical layout each position is an item and each bit a
    transaction; :meth:`transposed` builds the opposite layout, one bitset per
    transaction over the item positions. ``labels[p]`` is the store index the
    position stands for.
    """

    __slots__ = ("_bits", "_labels", "_n_bits", "_counts")

    def __init__(self, bits: np.ndarray, labels: Sequence[int], n_bits: int) -> None:
        if bits.shape[0] != len(labels):
            raise ValueError(f"Got {len(labels)} labels for {bits.shape[0]} bitsets.")
        bits.setflags(write=False)
        self._bits = bits
        self._labels = tuple(int(x) for x in labels)
        self._n_bits = n_bits
        self._counts = np.bitwise_count(bits).sum(axis=1, dtype=np.int64)
        self._counts.setflags(write=False)

    @classmethod
    def from_matrix(cls, matrix: np.ndarray, positions: Sequence[int]) -> BitsetIndex:
        """Vertical layout: one bitset per selected item column."""
        cols = np.asarray(matrix, dtype=bool)[:, list(positions)]
        return cls(pack_rows(cols.T), positions, cols.shape[0])

    @classmethod
    def transposed(cls, matrix: np.ndarray, positions: Sequence[int]) -> BitsetIndex:
        """Row layout: one bitset per transaction over the selected item columns.

        Bit ``p`` of row ``t`` is set when transaction ``t`` contains item
        ``positions[p]``.
        """
        cols = np.asarray(matrix, dtype=bool)[:, list(positions)]
        return cls(pack_rows(cols), range(cols.shape[0]), len(positions))

    def __len__(self) -> int:
        return len(self._labels)

    @property
    def labels(self) -> tuple[int, ...]:
        return self._labels

    @property
    def n_bits(self) -> int:
        return self._n_bits

    def bits(self, pos: int) -> np.ndarray:
        return self._bits[pos]

    def count(self, pos: int) -> int:
        """Population count of the bitset at *pos*."""
        return int(self._counts[pos])

    def counts(self) -> np.ndarray:
        return self._counts

    def full(self) -> np.ndarray:
        """Bitset with every one of the ``n_bits`` bits set."""
        return pack_rows(np.ones((1, self._n_bits), dtype=bool))[0]

    def extend(self, bits: np.ndarray, pos: int) -> np.ndarray:
        """Intersect a running bitset with the bitset at *pos*."""
        return np.bitwise_and(bits, self._bits[pos])

    def intersect(self, positions: Iterable[int]) -> np.ndarray:
        bits = self.full()
        for pos in positions:
            bits = np.bitwise_and(bits, self._bits[pos])
        return bits

    def support(self, positions: Iterable[int]) -> int:
        """Size of the intersection of the bitsets at *positions*."""
        return popcount(self.intersect(positions))

    def overlaps(self, bits: np.ndarray) -> np.ndarray:
        """Per-position size of the intersection with *bits*."""
        return np.bitwise_count(np.bitwise_and(self._bits, bits)).sum(axis=1, dtype=np.int64)

    def covering(self, bits: np.ndarray, size: int | None = None) -> np.ndarray:
        """Positions whose bitset is a superset of *bits*, ascending."""
        if size is None:
            size = popcount(bits)
        return np.flatnonzero(self.overlaps(bits) == size)

    def members(self, bits: np.ndarray) -> np.ndarray:
        """Indices of the bits set in *bits*, ascending."""
        raw = np.unpackbits(bits.view(np.uint8), bitorder="little")[: self._n_bits]
        return np.flatnonzero(raw)


def count_support(store: TransactionStore, itemset: Iterable[int]) -> int:
    """Number of transactions of *store* that contain every item of *itemset*."""
    items = sorted(set(itemset))
    if not items:
        return store.n_transactions
    return BitsetIndex.from_matrix(store.matrix, items).support(range(len(items)))


def vertical_index(store: TransactionStore, min_count: int) -> BitsetIndex:
    """Bitsets of the items meeting *min_count*, by ascending support then index.

    Rare items come first so that the early, widest search branches carry
    the smallest bitsets.
    """
    supports = store.item_supports()
    order = sorted(store.frequent_items(min_count), key=lambda i: (int(supports[i]), i))
    return BitsetIndex.from_matrix(store.matrix, order)
