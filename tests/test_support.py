"""Tests for the bitset support counter."""

from __future__ import annotations

import numpy as np
import pytest

from fimkit import TransactionStore, count_support
from fimkit.support import BitsetIndex, pack_rows, popcount, vertical_index


def test_pack_rows_spans_words() -> None:
    bits = np.zeros((2, 130), dtype=bool)
    bits[0, [0, 63, 64, 129]] = True
    bits[1, 70] = True
    packed = pack_rows(bits)
    assert packed.dtype == np.uint64
    assert packed.shape == (2, 3)
    assert popcount(packed[0]) == 4
    assert popcount(packed[1]) == 1


def test_pack_rows_empty_width() -> None:
    packed = pack_rows(np.zeros((3, 0), dtype=bool))
    assert packed.shape == (3, 1)
    assert popcount(packed[0]) == 0


class TestBitsetIndex:
    matrix = np.array(
        [
            [1, 1, 0],
            [1, 0, 1],
            [1, 1, 1],
            [0, 1, 0],
        ],
        dtype=bool,
    )

    def test_vertical_counts(self) -> None:
        index = BitsetIndex.from_matrix(self.matrix, [2, 0])
        assert index.labels == (2, 0)
        assert index.n_bits == 4
        assert index.counts().tolist() == [2, 3]
        assert index.count(1) == 3

    def test_support_and_intersect(self) -> None:
        index = BitsetIndex.from_matrix(self.matrix, [0, 1, 2])
        assert index.support([0, 1]) == 2
        assert index.support([0, 1, 2]) == 1
        assert index.support([]) == 4
        assert index.members(index.intersect([0, 2])).tolist() == [1, 2]

    def test_extend(self) -> None:
        index = BitsetIndex.from_matrix(self.matrix, [0, 1])
        bits = index.extend(index.bits(0), 1)
        assert popcount(bits) == 2

    def test_covering(self) -> None:
        index = BitsetIndex.from_matrix(self.matrix, [0, 1, 2])
        bits = index.intersect([2])
        # Rows 1 and 2 contain item 2; only item 0 also covers both
        assert index.covering(bits).tolist() == [0, 2]
        assert index.overlaps(bits).tolist() == [2, 1, 2]

    def test_transposed(self) -> None:
        rows = BitsetIndex.transposed(self.matrix, [0, 2])
        assert len(rows) == 4
        assert rows.n_bits == 2
        assert rows.counts().tolist() == [1, 2, 2, 0]
        assert rows.members(rows.bits(1)).tolist() == [0, 1]

    def test_full(self) -> None:
        index = BitsetIndex.from_matrix(self.matrix, [0])
        assert popcount(index.full()) == 4

    def test_label_mismatch(self) -> None:
        with pytest.raises(ValueError, match="labels"):
            BitsetIndex(np.zeros((2, 1), dtype=np.uint64), [0], 10)


def test_count_support(grocery_store: TransactionStore) -> None:
    eggs, milk = grocery_store.indices(["eggs", "milk"])
    assert count_support(grocery_store, [eggs, milk]) == 4
    assert count_support(grocery_store, [milk, eggs, eggs]) == 4
    assert count_support(grocery_store, []) == 9


def test_vertical_index_orders_rare_first(grocery_store: TransactionStore) -> None:
    index = vertical_index(grocery_store, 3)
    # beer, bread, cheese, ham (3 each) then eggs, milk (5 each)
    assert index.labels == (1, 2, 3, 5, 4, 8)
    assert index.counts().tolist() == [3, 3, 3, 3, 5, 5]
