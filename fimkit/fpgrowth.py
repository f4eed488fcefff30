from __future__ import annotations

import logging
from itertools import combinations
from typing import TYPE_CHECKING, Any

from ._parallel import fan_out
from .fptree import FPTree, as_tree
from .model import ItemsetMiner
from .results import ResultSet

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl

    from .results import Itemset
    from .store import TransactionStore

logger = logging.getLogger(__name__)


def fpgrowth_search(
    source: TransactionStore | FPTree,
    min_count: int,
    n_jobs: int | None = None,
    max_len: int | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """All itemsets with support ``>= min_count`` by recursive FP-tree projection.

    Every top-level header item is mined as its own thread-pool task.
    """
    tree = as_tree(source, min_count)
    results = ResultSet()

    def _mine_item(item: int) -> None:
        support = tree.item_support(item)
        results.add((item,), support)
        if max_len is not None and max_len <= 1:
            return
        cond = tree.conditional_tree(item, min_count)
        if not cond.is_empty:
            _grow(cond, (item,), min_count, max_len, results)

    tasks = [item for item in tree.items() if tree.item_support(item) >= min_count]
    fan_out(_mine_item, tasks, n_jobs=n_jobs, verbose=verbose, desc="FP-Growth")
    logger.debug("FP-Growth found %d itemsets from %d items", len(results), len(tasks))
    return results.finalize("frequent")


def _grow(
    tree: FPTree,
    suffix: tuple[int, ...],
    min_count: int,
    max_len: int | None,
    results: ResultSet,
) -> None:
    chain = tree.single_path()
    if chain is not None:
        _emit_chain(chain, suffix, min_count, max_len, results)
        return

    for item in reversed(tree.items()):
        support = tree.item_support(item)
        if support < min_count:
            continue
        itemset = suffix + (item,)
        results.add(itemset, support)
        if max_len is not None and len(itemset) >= max_len:
            continue
        cond = tree.conditional_tree(item, min_count)
        if not cond.is_empty:
            _grow(cond, itemset, min_count, max_len, results)


def _emit_chain(
    chain: list[tuple[int, int]],
    suffix: tuple[int, ...],
    min_count: int,
    max_len: int | None,
    results: ResultSet,
) -> None:
    # Counts never grow going down a path, so the frequent nodes form a prefix
    nodes = [(item, count) for item, count in chain if count >= min_count]
    limit = len(nodes) if max_len is None else min(len(nodes), max_len - len(suffix))
    for size in range(1, limit + 1):
        for combo in combinations(range(len(nodes)), size):
            items = tuple(nodes[i][0] for i in combo)
            # Support of a subset of a chain is the count of its deepest node
            results.add(suffix + items, nodes[combo[-1]][1])


class FPGrowth(ItemsetMiner):
    """FP-Growth frequent itemset miner.

    Builds an FP-tree once and mines every frequent itemset by recursive
    conditional-tree projection. Usually the better choice on dense data.
    """

    mode = "frequent"
    method = "fpgrowth"


def fpgrowth(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Find frequent itemsets using the FP-Growth algorithm.

    Parameters
    ----------
    df
        One-hot encoded transactions (pandas, Polars, NumPy, SciPy sparse,
        PyArrow), a :class:`~fimkit.store.TransactionStore` or a pre-built
        :class:`~fimkit.fptree.FPTree`.
    min_support
        Fraction of transactions in ``(0, 1]`` or an absolute count ``>= 1``.
    null_values
        Allow NaN in pandas input; NaN counts as absent.
    use_colnames
        Report item names instead of column indices.
    max_len
        Longest itemset to report. ``None`` means no limit.
    n_jobs
        Worker threads. ``None`` uses every CPU, ``1`` runs inline.
    verbose
        Print progress when ``> 0``.
    column_names
        Item names for NumPy / SciPy input.

    Returns
    -------
    pandas.DataFrame
        Columns ``support``, ``itemsets``, ``count`` and ``length``.

    Examples
    --------
    >>> import numpy as np
    >>> import fimkit
    >>> data = np.array([[1, 1, 0], [1, 0, 1], [1, 1, 1]], dtype=bool)
    >>> fimkit.fpgrowth(data, min_support=2)["count"].tolist()
    [3, 2, 2, 2, 2]
    """
    return FPGrowth(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
