"""Maximal itemset miners: FPMax and GenMax."""

from __future__ import annotations

import unittest

import numpy as np
import pytest
from test_fpbase import (
    FPTestEdgeCases,
    FPTestErrors,
    FPTestEx1Maximal,
    FPTestEx2Reduced,
    FPTestEx3All,
    named,
)

from fimkit import FPTree, GenMax, TransactionStore, fpmax, genmax, mine_maximal

MAXIMAL_METHODS = ["fpmax", "genmax"]


class TestFPMaxEdgeCases(unittest.TestCase, FPTestEdgeCases):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEdgeCases.setUp(self, fpmax)


class TestFPMaxErrors(unittest.TestCase, FPTestErrors):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestErrors.setUp(self, fpmax)


class TestFPMaxEx1(unittest.TestCase, FPTestEx1Maximal):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEx1Maximal.setUp(self, fpmax)


class TestFPMaxEx2(unittest.TestCase, FPTestEx2Reduced):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEx2Reduced.setUp(self, fpmax)


class TestFPMaxEx3(unittest.TestCase, FPTestEx3All):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEx3All.setUp(self, fpmax)


class TestGenMaxEdgeCases(unittest.TestCase, FPTestEdgeCases):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEdgeCases.setUp(self, genmax)


class TestGenMaxErrors(unittest.TestCase, FPTestErrors):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestErrors.setUp(self, genmax)


class TestGenMaxEx1(unittest.TestCase, FPTestEx1Maximal):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEx1Maximal.setUp(self, genmax)


class TestGenMaxEx2(unittest.TestCase, FPTestEx2Reduced):
    def setUp(self) -> None:  # type: ignore[override]
        FPTestEx2Reduced.setUp(self, genmax)


@pytest.mark.parametrize("method", MAXIMAL_METHODS)
def test_grocery_maximal(grocery_store: TransactionStore, method: str) -> None:
    result = named(grocery_store, mine_maximal(grocery_store, 3, method=method))
    assert result == {
        frozenset({"eggs", "milk"}): 4,
        frozenset({"beer"}): 3,
        frozenset({"bread"}): 3,
        frozenset({"cheese"}): 3,
        frozenset({"ham"}): 3,
    }


@pytest.mark.parametrize("method", MAXIMAL_METHODS)
def test_grocery_maximal_low_support(grocery_store: TransactionStore, method: str) -> None:
    result = named(grocery_store, mine_maximal(grocery_store, 2, method=method))
    assert set(result) == {
        frozenset({"bacon", "eggs"}),
        frozenset({"beer", "hamburger"}),
        frozenset({"beer", "milk"}),
        frozenset({"bread", "ham"}),
        frozenset({"cheese", "ham"}),
        frozenset({"eggs", "milk", "sugar"}),
        frozenset({"ketchup"}),
    }
    assert all(count == 2 for count in result.values())


@pytest.mark.parametrize("method", MAXIMAL_METHODS)
def test_scenario_maximal(scenario_store: TransactionStore, method: str) -> None:
    result = named(scenario_store, mine_maximal(scenario_store, 3, method=method))
    assert result == {frozenset({"A", "B"}): 4}


@pytest.mark.parametrize("method", MAXIMAL_METHODS)
def test_maximal_of_identical_rows(method: str) -> None:
    store = TransactionStore(np.ones((3, 4), dtype=bool))
    assert mine_maximal(store, 3, method=method) == {(0, 1, 2, 3): 3}


@pytest.mark.parametrize("method", MAXIMAL_METHODS)
def test_maximal_n_jobs_independent(grocery_store: TransactionStore, method: str) -> None:
    assert mine_maximal(grocery_store, 2, method=method, n_jobs=1) == mine_maximal(
        grocery_store, 2, method=method, n_jobs=3
    )


def test_fpmax_on_prebuilt_tree(grocery_store: TransactionStore) -> None:
    tree = FPTree.from_store(grocery_store, 2)
    assert mine_maximal(tree, 3) == mine_maximal(grocery_store, 3, method="genmax")


def test_genmax_estimator_colnames() -> None:
    data = np.array([[1, 1, 0], [1, 1, 1], [0, 1, 1]], dtype=bool)
    res = GenMax(data, item_names=["x", "y", "z"], min_support=2, use_colnames=True).mine()
    assert sorted(sorted(x) for x in res["itemsets"]) == [["x", "y"], ["y", "z"]]
    assert res["count"].tolist() == [2, 2]
