"""Tests for TransactionStore construction and queries."""

from __future__ import annotations

import numpy as np
import pandas as pd
import pyarrow as pa
import pytest
from scipy import sparse

from fimkit import TransactionStore


class TestConstruction:
    def test_from_numpy(self) -> None:
        store = TransactionStore(np.array([[1, 0, 1], [0, 1, 1]]))
        assert store.n_transactions == 2
        assert store.n_items == 3
        assert store.item_names == ["0", "1", "2"]
        assert store.row_names is None
        assert store.matrix.dtype == bool
        assert store.matrix.flags.f_contiguous

    def test_matrix_is_read_only(self) -> None:
        store = TransactionStore(np.eye(2, dtype=bool))
        with pytest.raises(ValueError):
            store.matrix[0, 0] = False

    def test_wrong_dimensions(self) -> None:
        with pytest.raises(ValueError, match="2-dimensional"):
            TransactionStore(np.array([1, 0, 1]))

    def test_name_count_mismatch(self) -> None:
        with pytest.raises(ValueError, match="item names"):
            TransactionStore(np.eye(2, dtype=bool), item_names=["a"])
        with pytest.raises(ValueError, match="row names"):
            TransactionStore(np.eye(2, dtype=bool), row_names=["r1"])

    def test_from_pandas_keeps_names(self) -> None:
        df = pd.DataFrame({"x": [True, False], "y": [True, True]}, index=["t1", "t2"])
        store = TransactionStore.from_data(df)
        assert store.item_names == ["x", "y"]
        assert store.row_names == ["t1", "t2"]

    def test_from_pandas_null_values(self) -> None:
        df = pd.DataFrame({"x": [True, np.nan], "y": [True, True]})
        store = TransactionStore.from_data(df, null_values=True)
        assert store.item_supports().tolist() == [1, 2]

    def test_integer_frame_warns(self) -> None:
        df = pd.DataFrame({"x": [1, 0], "y": [1, 1]})
        with pytest.warns(DeprecationWarning, match=r"astype\(bool\)"):
            store = TransactionStore.from_data(df)
        assert store.item_supports().tolist() == [1, 2]

    def test_null_values_without_nan_warns(self) -> None:
        df = pd.DataFrame({"x": [1, 0], "y": [1, 1]})
        with pytest.warns(UserWarning, match="without NaN"):
            TransactionStore.from_data(df, null_values=True)

    def test_nan_rejected_without_null_values(self) -> None:
        df = pd.DataFrame({"x": [1.0, np.nan], "y": [1.0, 0.0]})
        with pytest.warns(DeprecationWarning), pytest.raises(ValueError, match="unless `null_values=True`"):
            TransactionStore.from_data(df)

    def test_from_scipy(self) -> None:
        csr = sparse.csr_matrix(np.array([[1, 0], [1, 1]]))
        store = TransactionStore.from_data(csr, item_names=["a", "b"])
        assert isinstance(store.matrix, np.ndarray)
        assert store.matrix.flags.f_contiguous
        assert store.item_supports().tolist() == [2, 1]
        assert store.item_names == ["a", "b"]

    def test_from_arrow(self) -> None:
        table = pa.table({"a": [True, False, True], "b": [False, False, True]})
        store = TransactionStore.from_data(table)
        assert store.item_names == ["a", "b"]
        assert store.item_supports().tolist() == [2, 1]

    def test_store_passes_through(self) -> None:
        store = TransactionStore(np.eye(2, dtype=bool))
        assert TransactionStore.from_data(store) is store

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError, match="Expected"):
            TransactionStore.from_data(42)

    def test_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        TransactionStore.from_data(np.eye(3, dtype=bool), verbose=1)
        assert "Built store with 3 transactions" in capsys.readouterr().out


class TestQueries:
    def test_supports(self, grocery_store: TransactionStore) -> None:
        assert grocery_store.item_support(grocery_store.item_index("eggs")) == 5
        assert grocery_store.frequent_items(5) == [4, 8]
        assert int(grocery_store.item_supports().sum()) == 30

    def test_density(self, grocery_store: TransactionStore) -> None:
        assert grocery_store.density == pytest.approx(30 / 90)
        assert TransactionStore(np.zeros((0, 0), dtype=bool)).density == 0.0

    def test_rows_and_columns(self, grocery_store: TransactionStore) -> None:
        assert grocery_store.names(grocery_store.row(8)) == ["bread", "ham"]
        assert grocery_store.column(grocery_store.item_index("bacon")).nonzero()[0].tolist() == [0, 4]

    def test_name_lookup(self, grocery_store: TransactionStore) -> None:
        assert grocery_store.indices(["milk", "eggs"]) == (4, 8)
        assert grocery_store.item_name(0) == "bacon"
        with pytest.raises(KeyError, match="Unknown item"):
            grocery_store.item_index("caviar")

    def test_repr(self, grocery_store: TransactionStore) -> None:
        assert repr(grocery_store) == "TransactionStore(n_transactions=9, n_items=10)"
