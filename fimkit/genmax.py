from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from ._parallel import fan_out
from .model import ItemsetMiner
from .results import Outcome, ResultSet
from .support import BitsetIndex, popcount, vertical_index

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl

    from .results import Itemset
    from .store import TransactionStore

logger = logging.getLogger(__name__)


def genmax_search(
    store: TransactionStore,
    min_count: int,
    n_jobs: int | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """Maximal itemsets with support ``>= min_count`` by backtracking over bitsets."""
    index = vertical_index(store, min_count)
    labels = index.labels
    results = ResultSet()

    def _mine_position(pos: int) -> None:
        itemset = (labels[pos],)
        tail = range(pos + 1, len(index))
        if _genmax(index, itemset, index.bits(pos), tail, min_count, results) is Outcome.TERMINAL:
            results.add(itemset, index.count(pos))

    fan_out(_mine_position, range(len(index)), n_jobs=n_jobs, verbose=verbose, desc="GenMax")
    logger.debug("GenMax collected %d candidates from %d items", len(results), len(index))
    return results.finalize("maximal")


def _genmax(
    index: BitsetIndex,
    prefix: tuple[int, ...],
    bits: np.ndarray,
    candidates: Sequence[int],
    min_count: int,
    results: ResultSet,
) -> Outcome:
    frequent: list[tuple[int, np.ndarray, int]] = []
    for pos in candidates:
        joined = index.extend(bits, pos)
        support = popcount(joined)
        if support >= min_count:
            frequent.append((pos, joined, support))

    if not frequent:
        return Outcome.TERMINAL

    # Lookahead: the whole branch fits inside a reported itemset
    if results.covers(prefix + tuple(index.labels[p] for p, _, _ in frequent)):
        return Outcome.EXTENDED

    for k, (pos, joined, support) in enumerate(frequent):
        itemset = prefix + (index.labels[pos],)
        tail = [p for p, _, _ in frequent[k + 1 :]]
        if _genmax(index, itemset, joined, tail, min_count, results) is Outcome.TERMINAL:
            results.add(itemset, support)
    return Outcome.EXTENDED


class GenMax(ItemsetMiner):
    """GenMax maximal itemset miner over vertical bitsets."""

    mode = "maximal"
    method = "genmax"


def genmax(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Find maximal itemsets using the GenMax algorithm."""
    return GenMax(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
