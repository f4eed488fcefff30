"""FP-Growth tests, adapted from mlxtend/tests/test_fpgrowth.py."""

from __future__ import annotations

import unittest

import numpy as np
import pandas as pd
import pytest
from test_fpbase import (
    FPTestEdgeCases,
    FPTestErrors,
    FPTestEx1All,
    FPTestEx2All,
    FPTestEx3All,
    named,
)

from fimkit import FPGrowth, FPTree, TransactionStore, fpgrowth, mine_frequent


class TestEdgeCases(unittest.TestCase, FPTestEdgeCases):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEdgeCases.setUp(self, fpgrowth)


class TestErrors(unittest.TestCase, FPTestErrors):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestErrors.setUp(self, fpgrowth)


class TestEx1(unittest.TestCase, FPTestEx1All):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEx1All.setUp(self, fpgrowth)


class TestEx1BoolInput(unittest.TestCase, FPTestEx1All):
    def setUp(self) -> None:  # type: ignore[override]
        one_ary = np.array(
            [
                [False, False, False, True, False, True, True, True, True, False, True],
                [False, False, True, True, False, True, False, True, True, False, True],
                [True, False, False, True, False, True, True, False, False, False, False],
                [False, True, False, False, False, True, True, False, False, True, True],
                [False, True, False, True, True, True, False, False, True, False, False],
            ]
        )
        FPTestEx1All.setUp(self, fpgrowth, one_ary=one_ary)


class TestEx2(unittest.TestCase, FPTestEx2All):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEx2All.setUp(self, fpgrowth)


class TestEx3(unittest.TestCase, FPTestEx3All):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEx3All.setUp(self, fpgrowth)


def _itemsets_as_tuples(res_df: pd.DataFrame) -> list[tuple]:
    return [tuple(sorted(x)) for x in res_df["itemsets"]]


def test_disjoint_groups_no_cross_contamination() -> None:
    """Two groups of items that never co-occur: no cross-group pairs should appear."""
    df = pd.DataFrame(
        {
            "alpha": [1, 1, 1, 1, 1, 0, 0, 0, 0, 0],
            "beta": [1, 1, 1, 1, 1, 0, 0, 0, 0, 0],
            "gamma": [0, 0, 0, 0, 0, 1, 1, 1, 1, 1],
            "delta": [0, 0, 0, 0, 0, 1, 1, 1, 1, 1],
        }
    ).astype(bool)

    found = _itemsets_as_tuples(fpgrowth(df, min_support=0.5, use_colnames=True))

    for item in ["alpha", "beta", "gamma", "delta"]:
        assert (item,) in found
    assert ("alpha", "beta") in found
    assert ("delta", "gamma") in found

    assert ("alpha", "gamma") not in found
    assert ("alpha", "delta") not in found
    assert ("beta", "gamma") not in found
    assert ("beta", "delta") not in found


def test_single_item_only_transactions() -> None:
    """When each transaction has exactly one item, no multi-item itemsets should appear."""
    df = pd.DataFrame(np.eye(5, dtype=bool), columns=["cat", "dog", "bird", "fish", "snake"])

    found = _itemsets_as_tuples(fpgrowth(df, min_support=0.1, use_colnames=True))

    assert len(found) == 5
    assert all(len(fs) == 1 for fs in found)


def test_single_path_tree() -> None:
    """Nested transactions collapse into one FP-tree chain."""
    df = pd.DataFrame(
        [[1, 1, 1, 1], [1, 1, 1, 0], [1, 1, 0, 0], [1, 0, 0, 0]],
        columns=["a", "b", "c", "d"],
    ).astype(bool)

    res = fpgrowth(df, min_support=1, use_colnames=True)
    counts = dict(zip(_itemsets_as_tuples(res), res["count"]))

    assert len(counts) == 15
    assert counts[("a",)] == 4
    assert counts[("a", "b", "c")] == 2
    assert counts[("a", "c", "d")] == 1
    assert counts[("b", "c")] == 2


def test_grocery_frequent(grocery_store: TransactionStore) -> None:
    result = named(grocery_store, mine_frequent(grocery_store, 3, method="fpgrowth"))
    assert result == {
        frozenset({"beer"}): 3,
        frozenset({"bread"}): 3,
        frozenset({"cheese"}): 3,
        frozenset({"eggs"}): 5,
        frozenset({"ham"}): 3,
        frozenset({"milk"}): 5,
        frozenset({"eggs", "milk"}): 4,
    }


def test_prebuilt_tree(grocery_store: TransactionStore) -> None:
    tree = FPTree.from_store(grocery_store, 2)
    from_tree = mine_frequent(tree, 3, method="fpgrowth")
    assert from_tree == mine_frequent(grocery_store, 3, method="fpgrowth")
    assert mine_frequent(tree, 2) == mine_frequent(grocery_store, 2, method="eclat")


def test_prebuilt_tree_threshold_too_high(grocery_store: TransactionStore) -> None:
    tree = FPTree.from_store(grocery_store, 3)
    with pytest.raises(ValueError, match="higher than the requested"):
        mine_frequent(tree, 2)


def test_prebuilt_tree_rejects_vertical_method(grocery_store: TransactionStore) -> None:
    tree = FPTree.from_store(grocery_store, 2)
    with pytest.raises(ValueError, match="pre-built FPTree"):
        mine_frequent(tree, 2, method="eclat")


def test_prebuilt_tree_frame(grocery_store: TransactionStore) -> None:
    tree = FPTree.from_store(grocery_store, 3)
    res = fpgrowth(tree, min_support=3, column_names=grocery_store.item_names, use_colnames=True)
    assert len(res) == 7
    assert res.attrs["num_itemsets"] == 9
    assert list(res.iloc[0]["itemsets"]) in (["eggs"], ["milk"])


def test_estimator_from_transactions() -> None:
    miner = FPGrowth.from_transactions(
        [["bread", "milk"], ["bread", "eggs"], ["bread", "milk", "eggs"]],
        min_support=2,
        use_colnames=True,
    )
    res = miner.mine()
    assert set(_itemsets_as_tuples(res)) == {("bread",), ("milk",), ("eggs",), ("bread", "milk"), ("bread", "eggs")}
    fitted = miner.fit()
    assert fitted is miner
    assert miner.predict() is miner.predict()


def test_estimator_mine_itemsets_overrides() -> None:
    data = np.array([[1, 1, 0], [1, 0, 1], [1, 1, 1]], dtype=bool)
    miner = FPGrowth(data, min_support=3)
    assert miner.mine_itemsets() == {(0,): 3}
    assert miner.mine_itemsets(min_support=2, max_len=1) == {(0,): 3, (1,): 2, (2,): 2}
