from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from ._parallel import fan_out
from .model import ItemsetMiner
from .results import ResultSet
from .support import BitsetIndex, popcount, vertical_index

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl

    from .results import Itemset
    from .store import TransactionStore

logger = logging.getLogger(__name__)


def eclat_search(
    store: TransactionStore,
    min_count: int,
    n_jobs: int | None = None,
    max_len: int | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """All itemsets with support ``>= min_count`` by bitset intersection.

    Positions are ordered by ascending support; an itemset is only extended
    with positions after its last one, so each itemset is visited once.
    """
    index = vertical_index(store, min_count)
    labels = index.labels
    results = ResultSet()

    def _mine_position(pos: int) -> None:
        itemset = (labels[pos],)
        results.add(itemset, index.count(pos))
        _extend(index, itemset, index.bits(pos), range(pos + 1, len(index)), min_count, max_len, results)

    fan_out(_mine_position, range(len(index)), n_jobs=n_jobs, verbose=verbose, desc="Eclat")
    logger.debug("Eclat found %d itemsets from %d items", len(results), len(index))
    return results.finalize("frequent")


def _extend(
    index: BitsetIndex,
    prefix: tuple[int, ...],
    bits: np.ndarray,
    candidates: Sequence[int],
    min_count: int,
    max_len: int | None,
    results: ResultSet,
) -> None:
    if max_len is not None and len(prefix) >= max_len:
        return

    frequent: list[tuple[int, np.ndarray, int]] = []
    for pos in candidates:
        joined = index.extend(bits, pos)
        support = popcount(joined)
        if support >= min_count:
            frequent.append((pos, joined, support))

    for k, (pos, joined, support) in enumerate(frequent):
        itemset = prefix + (index.labels[pos],)
        results.add(itemset, support)
        tail = [p for p, _, _ in frequent[k + 1 :]]
        if tail:
            _extend(index, itemset, joined, tail, min_count, max_len, results)


class Eclat(ItemsetMiner):
    """Eclat frequent itemset miner.

    Eclat is typically faster than FP-Growth on sparse datasets thanks to
    vertical bitset intersections.
    """

    mode = "frequent"
    method = "eclat"


def eclat(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Find frequent itemsets using the Eclat algorithm.

    This module-level function relies on the Object-Oriented APIs.
    """
    return Eclat(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
