from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .model import ItemsetMiner

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl

    from ._core import Method
    from .fptree import FPTree
    from .results import Itemset, Mode
    from .store import TransactionStore


def mine_frequent(
    store: TransactionStore | FPTree | Any,
    min_support: float | int,
    method: Method | str = "auto",
    n_jobs: int | None = None,
    max_len: int | None = None,
) -> dict[Itemset, int]:
    """Every itemset whose support reaches *min_support*.

    Parameters
    ----------
    store
        A :class:`~fimkit.store.TransactionStore`, any one-hot input it
        accepts, or a pre-built :class:`~fimkit.fptree.FPTree` whose own
        threshold is at most *min_support*.
    min_support
        Absolute transaction count (int ``>= 1``) or fraction in ``(0, 1]``,
        rounded up to a count.
    method
        ``"fpgrowth"`` / ``"tree"``, ``"eclat"`` / ``"vertical"`` or ``"auto"``.
    n_jobs
        Worker threads. ``None`` uses every CPU, ``1`` runs inline.
    max_len
        Longest itemset to report.

    Returns
    -------
    dict
        Ascending item-index tuples mapped to absolute supports.

    Examples
    --------
    >>> import numpy as np
    >>> from fimkit import TransactionStore, mine_frequent
    >>> store = TransactionStore(np.array([[1, 1], [1, 0], [1, 1]]))
    >>> mine_frequent(store, 2)
    {(0,): 3, (1,): 2, (0, 1): 2}
    """
    from ._core import mine_itemsets

    return mine_itemsets(store, "frequent", min_support, method=method, n_jobs=n_jobs, max_len=max_len)


def mine_closed(
    store: TransactionStore | FPTree | Any,
    min_support: float | int,
    method: Method | str = "auto",
    n_jobs: int | None = None,
) -> dict[Itemset, int]:
    """Frequent itemsets that have no superset with the same support.

    *method* is ``"fpclose"`` / ``"tree"``, ``"charm"``, ``"lcm"`` /
    ``"vertical"``, ``"carpenter"`` or ``"auto"``.
    """
    from ._core import mine_itemsets

    return mine_itemsets(store, "closed", min_support, method=method, n_jobs=n_jobs)


def mine_maximal(
    store: TransactionStore | FPTree | Any,
    min_support: float | int,
    method: Method | str = "auto",
    n_jobs: int | None = None,
) -> dict[Itemset, int]:
    """Frequent itemsets that have no frequent proper superset.

    *method* is ``"fpmax"`` / ``"tree"``, ``"genmax"`` / ``"vertical"`` or
    ``"auto"``.
    """
    from ._core import mine_itemsets

    return mine_itemsets(store, "maximal", min_support, method=method, n_jobs=n_jobs)


class AutoMiner(ItemsetMiner):
    """Automatic itemset miner.

    Selects the search strategy from the shape and density of the data:
    vertical bitsets for sparse data, FP-trees for dense data, and row
    enumeration for closed itemsets on very wide data.
    """

    def __init__(
        self,
        data: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
        item_names: list[str] | None = None,
        min_support: float = 0.5,
        null_values: bool = False,
        use_colnames: bool = False,
        max_len: int | None = None,
        mode: Mode = "frequent",
        method: Method | str = "auto",
        n_jobs: int | None = None,
        verbose: int = 0,
        **kwargs: Any,
    ):
        """Initialize the automatic miner.

        Parameters
        ----------
        mode : {"frequent", "closed", "maximal"}, default="frequent"
            Which itemsets to report.
        method : str, default="auto"
            Search algorithm; ``"auto"`` picks one from the data.

        The remaining parameters are those of
        :class:`~fimkit.model.ItemsetMiner`.
        """
        super().__init__(
            data=data,
            item_names=item_names,
            min_support=min_support,
            null_values=null_values,
            use_colnames=use_colnames,
            max_len=max_len,
            n_jobs=n_jobs,
            verbose=verbose,
            **kwargs,
        )
        self.mode = mode  # type: ignore[misc]
        self.method = method  # type: ignore[misc]


def mine(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    mode: Mode = "frequent",
    method: Method | str = "auto",
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Mine frequent, closed or maximal itemsets with the optimal algorithm.

    This module-level function relies on the Object-Oriented APIs.
    """
    return AutoMiner(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        mode=mode,
        method=method,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
