from __future__ import annotations

import logging
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


def fpclose_search(
    source: TransactionStore | FPTree,
    min_count: int,
    n_jobs: int | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """Closed itemsets with support ``>= min_count`` over an FP-tree.

    Items that occur in every transaction of a candidate's projection are
    folded into the candidate before recursing, so the search walks closures
    instead of every frequent itemset.
    """
    tree = as_tree(source, min_count)
    results = ResultSet()

    def _mine_item(item: int) -> None:
        _close_item(tree, (), item, min_count, results)

    tasks = [item for item in tree.items() if tree.item_support(item) >= min_count]
    fan_out(_mine_item, tasks, n_jobs=n_jobs, verbose=verbose, desc="FPClose")
    logger.debug("FPClose collected %d candidates from %d items", len(results), len(tasks))
    return results.finalize("closed")


def _close_item(
    tree: FPTree,
    suffix: tuple[int, ...],
    item: int,
    min_count: int,
    results: ResultSet,
) -> None:
    support = tree.item_support(item)
    paths = tree.prefix_paths(item)
    cond = FPTree.from_paths(paths, min_count, tree.n_transactions)

    # Prefix items present on every path of `item` belong to its closure
    folded = tuple(i for i in cond.items() if cond.item_support(i) == support)
    if folded:
        cond = FPTree.from_paths(paths, min_count, tree.n_transactions, exclude=folded)

    candidate = suffix + (item,) + folded
    results.add_closed(candidate, support)
    if not cond.is_empty:
        _fpclose(cond, candidate, min_count, results)


def _fpclose(tree: FPTree, suffix: tuple[int, ...], min_count: int, results: ResultSet) -> None:
    for item in reversed(tree.items()):
        if tree.item_support(item) >= min_count:
            _close_item(tree, suffix, item, min_count, results)


class FPClose(ItemsetMiner):
    """FPClose closed itemset miner.

    A closed itemset has no superset with the same support; together with
    their supports they describe every frequent itemset losslessly (see
    :func:`fimkit.recovery.recover_closed`).
    """

    mode = "closed"
    method = "fpclose"


def fpclose(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Find closed itemsets using the FPClose algorithm.

    Accepts the same inputs as :func:`fimkit.fpgrowth`, including a pre-built
    :class:`~fimkit.fptree.FPTree`.
    """
    return FPClose(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
