from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ._parallel import fan_out
from .fptree import FPTree, as_tree
from .model import ItemsetMiner
from .results import Outcome, ResultSet

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl

    from .results import Itemset
    from .store import TransactionStore

logger = logging.getLogger(__name__)


def fpmax_search(
    source: TransactionStore | FPTree,
    min_count: int,
    n_jobs: int | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """Maximal itemsets with support ``>= min_count`` over an FP-tree.

    A candidate is reported only when its conditional tree has no frequent
    item left. Subtrees whose every itemset is contained in an already
    reported one are skipped.
    """
    tree = as_tree(source, min_count)
    results = ResultSet()

    def _mine_item(item: int) -> None:
        _maximize_item(tree, (), item, min_count, results)

    tasks = [item for item in tree.items() if tree.item_support(item) >= min_count]
    fan_out(_mine_item, tasks, n_jobs=n_jobs, verbose=verbose, desc="FPMax")
    logger.debug("FPMax collected %d candidates from %d items", len(results), len(tasks))
    return results.finalize("maximal")


def _maximize_item(
    tree: FPTree,
    suffix: tuple[int, ...],
    item: int,
    min_count: int,
    results: ResultSet,
) -> None:
    candidate = suffix + (item,)
    cond = tree.conditional_tree(item, min_count)
    if _fpmax(cond, candidate, min_count, results) is Outcome.TERMINAL:
        results.add(candidate, tree.item_support(item))


def _fpmax(tree: FPTree, suffix: tuple[int, ...], min_count: int, results: ResultSet) -> Outcome:
    items = [item for item in tree.items() if tree.item_support(item) >= min_count]
    if not items:
        return Outcome.TERMINAL

    # Everything below is a subset of suffix + items
    if results.covers(suffix + tuple(items)):
        return Outcome.EXTENDED

    for item in items:
        _maximize_item(tree, suffix, item, min_count, results)
    return Outcome.EXTENDED


class FPMax(ItemsetMiner):
    """FPMax maximal itemset miner.

    A maximal itemset has no frequent proper superset. Maximal itemsets are
    the most compact summary of the frequent itemsets but lose their
    supports (see :func:`fimkit.recovery.recover_maximal`).
    """

    mode = "maximal"
    method = "fpmax"


def fpmax(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Find maximal itemsets using the FPMax algorithm."""
    return FPMax(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
