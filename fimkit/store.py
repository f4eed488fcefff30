"""Column-major boolean incidence matrix shared read-only by every miner."""

from __future__ import annotations

import time
import typing
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import numpy as np

from ._compat import frame_kind, to_dataframe

if TYPE_CHECKING:
    import pandas as pd

    from ._compat import DataFrame


class TransactionStore:
    """Boolean ``transactions x items`` matrix plus item and row name maps.

    The matrix is held in Fortran (column-major) order so that per-item
    membership columns are contiguous. A store is immutable once built; all
    miners only read from it. The matrix is always dense: SciPy and pandas
    sparse inputs are expanded with ``toarray()`` on the way in, so memory
    grows with ``n_transactions * n_items`` whatever the input density.

    Parameters
    ----------
    matrix:
        2-D boolean array of shape ``(n_transactions, n_items)``.
    item_names:
        Display name per column. Defaults to ``"0" .. "n_items-1"``.
    row_names:
        Optional identifier per transaction.
    """

    __slots__ = ("_matrix", "_item_names", "_row_names", "_name_to_index", "_supports")

    def __init__(
        self,
        matrix: np.ndarray,
        item_names: Sequence[Any] | None = None,
        row_names: Sequence[Any] | None = None,
    ) -> None:
        arr = np.asarray(matrix)
        if arr.ndim != 2:
            raise ValueError(f"Transaction matrix must be 2-dimensional, got shape {arr.shape}.")
        arr = np.asfortranarray(arr != 0)
        arr.setflags(write=False)

        n_rows, n_cols = arr.shape
        names = list(item_names) if item_names is not None else [str(i) for i in range(n_cols)]
        if len(names) != n_cols:
            raise ValueError(f"Got {len(names)} item names for {n_cols} item columns.")
        rows = list(row_names) if row_names is not None else None
        if rows is not None and len(rows) != n_rows:
            raise ValueError(f"Got {len(rows)} row names for {n_rows} transactions.")

        self._matrix = arr
        self._item_names = names
        self._row_names = rows
        self._name_to_index = {name: i for i, name in enumerate(names)}
        self._supports = arr.sum(axis=0, dtype=np.int64)
        self._supports.setflags(write=False)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_data(
        cls,
        data: DataFrame | Any,
        item_names: Sequence[Any] | None = None,
        null_values: bool = False,
        verbose: int = 0,
    ) -> TransactionStore:
        """Build a store from any supported one-hot container.

        Accepts pandas (dense or sparse), Polars, NumPy, SciPy sparse,
        PyArrow and Spark inputs, or an existing store (returned unchanged).
        Sparse inputs are densified; see :class:`TransactionStore`.
        """
        if isinstance(data, TransactionStore):
            return data

        t0 = 0.0
        if verbose:
            print(f"[{time.strftime('%X')}] Analyzing input data type...")
            t0 = time.perf_counter()

        kind = frame_kind(data)
        data = to_dataframe(data)

        if kind == "polars":
            matrix = np.asarray(data.to_numpy()).astype(bool)
            names = item_names if item_names is not None else list(data.columns)
            store = cls(matrix, names)
        elif kind == "scipy":
            csr: Any = data.tocsr()
            csr.eliminate_zeros()
            store = cls(csr.toarray(), item_names)
        elif kind == "numpy":
            store = cls(typing.cast("np.ndarray", data), item_names)
        elif kind in ("pandas", "pyarrow", "spark"):
            store = cls._from_pandas(typing.cast("pd.DataFrame", data), item_names, null_values)
        else:
            raise TypeError(
                "Expected a Pandas/Polars/PyArrow DataFrame, a NumPy array, a SciPy sparse matrix "
                f"or a TransactionStore, got {type(data)}"
            )

        if verbose:
            print(
                f"[{time.strftime('%X')}] Built store with {store.n_transactions:,} transactions and "
                f"{store.n_items:,} items in {time.perf_counter() - t0:.2f}s."
            )
        return store

    @classmethod
    def _from_pandas(
        cls,
        df: pd.DataFrame,
        item_names: Sequence[Any] | None,
        null_values: bool,
    ) -> TransactionStore:
        import pandas as pd

        from ._validation import valid_input_check

        # Validate first so invalid values (e.g. 2) are caught before coercion
        valid_input_check(df, null_values)

        if hasattr(df, "sparse"):
            csr = df.sparse.to_coo().tocsr()
            csr.eliminate_zeros()
            matrix = csr.toarray()
        elif null_values:
            matrix = df.fillna(False).to_numpy()
        else:
            matrix = df.to_numpy()

        names = item_names if item_names is not None else list(df.columns)
        rows = None if df.index.equals(pd.RangeIndex(len(df))) else list(df.index)
        return cls(matrix.astype(bool), names, rows)

    @classmethod
    def from_transactions(
        cls,
        data: DataFrame | Sequence[Sequence[str | int]] | Any,
        transaction_col: str | None = None,
        item_col: str | None = None,
        min_item_count: int = 1,
        verbose: int = 0,
    ) -> TransactionStore:
        """Build a store from long-format data or a list of item lists."""
        from .transactions import from_transactions

        ohe = from_transactions(
            data,
            transaction_col=transaction_col,
            item_col=item_col,
            min_item_count=min_item_count,
            verbose=verbose,
        )
        return cls._from_pandas(ohe, None, False)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def matrix(self) -> np.ndarray:
        """Read-only boolean incidence matrix, column-major."""
        return self._matrix

    @property
    def n_transactions(self) -> int:
        return self._matrix.shape[0]

    @property
    def n_items(self) -> int:
        return self._matrix.shape[1]

    @property
    def item_names(self) -> list[Any]:
        return list(self._item_names)

    @property
    def row_names(self) -> list[Any] | None:
        return None if self._row_names is None else list(self._row_names)

    @property
    def density(self) -> float:
        size = self._matrix.size
        return float(self._supports.sum()) / size if size else 0.0

    def item_supports(self) -> np.ndarray:
        """Per-item transaction counts (column sums)."""
        return self._supports

    def item_support(self, item: int) -> int:
        return int(self._supports[item])

    def column(self, item: int) -> np.ndarray:
        """Membership vector of *item* over all transactions."""
        return self._matrix[:, item]

    def row(self, transaction: int) -> np.ndarray:
        """Indices of the items contained in *transaction*."""
        return np.flatnonzero(self._matrix[transaction])

    def item_name(self, item: int) -> Any:
        return self._item_names[item]

    def item_index(self, name: Any) -> int:
        try:
            return self._name_to_index[name]
        except KeyError:
            raise KeyError(f"Unknown item {name!r}.") from None

    def names(self, itemset: Sequence[int]) -> list[Any]:
        """Resolve item indices to display names."""
        return [self._item_names[i] for i in itemset]

    def indices(self, names: Sequence[Any]) -> tuple[int, ...]:
        """Resolve display names to an ascending itemset of indices."""
        return tuple(sorted(self.item_index(n) for n in names))

    def frequent_items(self, min_count: int) -> list[int]:
        """Items meeting *min_count*, in ascending index order."""
        return [int(i) for i in np.flatnonzero(self._supports >= min_count)]

    def __repr__(self) -> str:
        return f"TransactionStore(n_transactions={self.n_transactions}, n_items={self.n_items})"
