from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from ._compat import frame_kind

if TYPE_CHECKING:
    import pandas as pd
    import polars as pl
    from typing_extensions import Self

    from .results import Itemset, Mode

#: Frame libraries a result is converted back into; anything else stays pandas
_ROUND_TRIP_KINDS = ("pyarrow", "polars", "spark")


def _result_kind(data: Any) -> str:
    kind = frame_kind(data)
    return kind if kind in _ROUND_TRIP_KINDS else "pandas"


class BaseModel(ABC):
    """Root of the fimkit estimators.

    Every estimator can be built straight from long-format data (one row per
    transaction/item pair) or from a list of baskets; the ``from_*``
    shorthands differ only in the container they document.
    """

    @classmethod
    @abstractmethod
    def from_transactions(
        cls,
        data: Any,
        transaction_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """Build the estimator from long-format data or a list of baskets."""

    def __dir__(self) -> list[str]:
        # Keep tab completion to the public surface
        return [name for name in super().__dir__() if not name.startswith("_")]

    @classmethod
    def from_pandas(
        cls,
        df: pd.DataFrame,
        transaction_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """:meth:`from_transactions` for a long-format pandas frame."""
        return cls.from_transactions(df, transaction_col, item_col, verbose, **kwargs)

    @classmethod
    def from_polars(
        cls,
        df: pl.DataFrame,
        transaction_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """:meth:`from_transactions` for a long-format Polars frame."""
        return cls.from_transactions(df, transaction_col, item_col, verbose, **kwargs)

    @classmethod
    def from_arrow(
        cls,
        table: Any,
        transaction_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """:meth:`from_transactions` for a long-format ``pyarrow.Table``."""
        return cls.from_transactions(table, transaction_col, item_col, verbose, **kwargs)


class Miner(BaseModel):
    """An estimator bound to one transaction matrix.

    Parameters
    ----------
    data
        One-hot transactions in any container :func:`fimkit.mine` accepts,
        a :class:`~fimkit.store.TransactionStore`, or a pre-built
        :class:`~fimkit.fptree.FPTree`.
    item_names
        Item labels for containers without column names (NumPy, SciPy).
        Frames and stores supply their own.
    """

    def __init__(self, data: pd.DataFrame | Any, item_names: Sequence[Any] | None = None, **kwargs: Any):
        from .fptree import FPTree
        from .store import TransactionStore

        self.data = data
        self.kwargs = kwargs
        self.item_names: list[Any] | None = self._infer_item_names(data, item_names)

        if isinstance(data, (TransactionStore, FPTree)):
            n_rows = data.n_transactions
        elif getattr(data, "shape", None):
            n_rows = data.shape[0]
        else:
            try:
                n_rows = len(data)
            except TypeError:
                n_rows = 0
        # Reported on result frames as attrs["num_itemsets"]
        self._num_itemsets: int = n_rows
        self._orig_df_type: str = _result_kind(data)

    @staticmethod
    def _infer_item_names(data: Any, item_names: Sequence[Any] | None) -> list[Any] | None:
        from .store import TransactionStore

        if item_names is not None:
            return list(item_names)
        if isinstance(data, TransactionStore):
            return data.item_names
        if frame_kind(data) == "pyarrow":
            return list(data.column_names)
        columns = getattr(data, "columns", None)
        return None if columns is None else list(columns)

    def _convert_to_orig_type(self, df: pd.DataFrame) -> Any:
        """Hand *df* back in the frame library the input came in."""
        kind = self._orig_df_type
        if kind == "pyarrow":
            import pyarrow as pa

            return pa.Table.from_pandas(df, preserve_index=False)
        if kind == "polars":
            from ._dependencies import import_optional_dependency

            pl = import_optional_dependency("polars", extra="Install it with `pip install fimkit[polars]`.")
            return pl.from_pandas(df)
        if kind == "spark":
            from ._dependencies import import_optional_dependency

            pyspark_sql = import_optional_dependency("pyspark.sql", errors="ignore")
            session = None if pyspark_sql is None else pyspark_sql.SparkSession.getActiveSession()
            if session is not None:
                return session.createDataFrame(df)
        return df

    @classmethod
    def from_transactions(
        cls,
        data: pd.DataFrame | pl.DataFrame | Sequence[Sequence[str | int]] | Any,
        transaction_col: str | None = None,
        item_col: str | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ) -> Self:
        """One-hot encode long-format data and bind the estimator to it.

        Parameters
        ----------
        data
            A pandas / Polars / Spark frame or ``pyarrow.Table`` holding a
            transaction id column and an item column, or a list of baskets
            such as ``[["bread", "milk"], ["bread", "eggs"]]``.
        transaction_col, item_col
            Column names; default to the first and second column. Unused for
            a list of baskets.
        verbose
            Print encoding progress when ``> 0``.
        **kwargs
            Estimator parameters such as ``min_support`` or ``use_colnames``.

        Returns
        -------
        Miner
            Ready for :meth:`mine`; results come back in the input's frame
            library.
        """
        from .transactions import from_transactions

        encoded = from_transactions(data, transaction_col=transaction_col, item_col=item_col, verbose=verbose)
        miner = cls(encoded, **kwargs)
        miner._orig_df_type = _result_kind(data)
        return miner

    @abstractmethod
    def mine(self, **kwargs: Any) -> pd.DataFrame:
        """Run the search on :attr:`data`."""

    def fit(self, **kwargs: Any) -> Self:
        """Mine and keep the result for :meth:`predict`."""
        self._result = self.mine(**kwargs)
        return self  # type: ignore[return-value]

    def predict(self, **kwargs: Any) -> pd.DataFrame:
        """The result of the last :meth:`fit`, fitting first if there is none."""
        if getattr(self, "_result", None) is None:
            self.fit(**kwargs)
        return self._result  # type: ignore[return-value]


class ItemsetMiner(Miner):
    """Shared estimator for the frequent, closed and maximal itemset miners.

    Subclasses pick the result kind with ``mode`` and the search algorithm
    with ``method``; everything else (input coercion, validation, result
    frames) lives in :func:`fimkit._core.dispatch`.
    """

    mode: ClassVar[Mode] = "frequent"
    method: ClassVar[str] = "auto"

    def __init__(
        self,
        data: pd.DataFrame | pl.DataFrame | Any,
        item_names: list[str] | None = None,
        min_support: float = 0.5,
        null_values: bool = False,
        use_colnames: bool = False,
        max_len: int | None = None,
        n_jobs: int | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ):
        """Initialize the miner.

        Parameters
        ----------
        data : pandas.DataFrame, polars.DataFrame, numpy.ndarray, TransactionStore or FPTree
            The input dataset containing transactions.
        item_names : list[str] | None, default=None
            Custom column names to use if input is a numpy array or scipy sparse matrix
            and `use_colnames=True`.
        min_support : float, default=0.5
            The minimum support threshold: a fraction of the transactions in
            `(0, 1]`, or an absolute transaction count when an int.
        null_values : bool, default=False
            If True, allow missing/null values in pandas DataFrames.
        use_colnames : bool, default=False
            If True, returns itemsets containing actual item names (column names)
            rather than their column indices.
        max_len : int | None, default=None
            Maximum length of the itemsets generated (frequent itemsets only).
            If None, no limit is applied.
        n_jobs : int | None, default=None
            Worker threads for the top-level search. None uses every CPU,
            1 mines in the calling thread.
        verbose : int, default=0
            If > 0, print progress details to standard output.
        """
        super().__init__(data=data, item_names=item_names, **kwargs)
        self.min_support = min_support
        self.null_values = null_values
        self.use_colnames = use_colnames
        self.max_len = max_len
        self.n_jobs = n_jobs
        self.verbose = verbose

    def _params(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        # Per-call keyword arguments override the constructor's
        return {
            "mode": kwargs.get("mode", self.mode),
            "method": kwargs.get("method", self.method),
            "min_support": kwargs.get("min_support", self.min_support),
            "null_values": kwargs.get("null_values", self.null_values),
            "max_len": kwargs.get("max_len", self.max_len),
            "n_jobs": kwargs.get("n_jobs", self.n_jobs),
            "verbose": kwargs.get("verbose", self.verbose),
        }

    def mine(self, **kwargs: Any) -> pd.DataFrame:
        """Execute the algorithm on the stored data.

        Returns
        -------
        pandas.DataFrame
            DataFrame with four columns:
            - `support`: the relative support.
            - `itemsets`: list of items (indices or column names).
            - `count`: the absolute support.
            - `length`: the number of items.
        """
        from ._core import dispatch

        result_df = dispatch(
            self.data,
            use_colnames=kwargs.get("use_colnames", self.use_colnames),
            column_names=self.item_names,
            **self._params(kwargs),
        )
        return self._convert_to_orig_type(result_df)

    def mine_itemsets(self, **kwargs: Any) -> dict[Itemset, int]:
        """Like :meth:`mine` but return the raw ``itemset -> count`` mapping."""
        from ._core import mine_itemsets

        return mine_itemsets(self.data, item_names=self.item_names, **self._params(kwargs))
