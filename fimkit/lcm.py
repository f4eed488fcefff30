from __future__ import annotations

import logging
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


def lcm_search(
    store: TransactionStore,
    min_count: int,
    n_jobs: int | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """Closed itemsets with support ``>= min_count`` by prefix-preserving closure extension.

    Each closed itemset is reached from exactly one parent: extending a
    closed set ``P`` by position ``e`` is accepted only when the closure adds
    no position below ``e`` that ``P`` lacks.

    References
    ----------
    Uno, T., Asai, T., Uchida, Y., & Arimura, H. (2004). An Efficient
    Algorithm for Enumerating Closed Patterns in Transaction Databases.
    Discovery Science 2004, LNCS 3245.
    """
    index = vertical_index(store, min_count)
    results = ResultSet()
    if not len(index) or store.n_transactions < min_count:
        return results.finalize("closed")

    full = index.full()
    root = _closure(index, full, store.n_transactions)
    if root:
        # Items present in every transaction
        results.add(_labels(index, root), store.n_transactions)

    def _mine_position(pos: int) -> None:
        _expand(index, root, full, pos, min_count, results)

    fan_out(_mine_position, range(len(index)), n_jobs=n_jobs, verbose=verbose, desc="LCM")
    logger.debug("LCM found %d closed itemsets from %d items", len(results), len(index))
    return results.finalize("closed")


def _closure(index: BitsetIndex, bits: np.ndarray, support: int) -> tuple[int, ...]:
    return tuple(int(p) for p in index.covering(bits, support))


def _labels(index: BitsetIndex, positions: tuple[int, ...]) -> tuple[int, ...]:
    labels = index.labels
    return tuple(labels[p] for p in positions)


def _expand(
    index: BitsetIndex,
    closed: tuple[int, ...],
    bits: np.ndarray,
    pos: int,
    min_count: int,
    results: ResultSet,
) -> None:
    if pos in closed:
        return
    joined = index.extend(bits, pos)
    support = popcount(joined)
    if support < min_count:
        return

    extended = _closure(index, joined, support)
    # Prefix-preserving check: the closure may only add positions above `pos`
    if tuple(p for p in extended if p < pos) != tuple(p for p in closed if p < pos):
        return

    results.add(_labels(index, extended), support)
    for nxt in range(pos + 1, len(index)):
        _expand(index, extended, joined, nxt, min_count, results)


class LCM(ItemsetMiner):
    """LCM closed itemset miner.

    Generates each closed itemset exactly once, without keeping previously
    found itemsets around for duplicate checks.
    """

    mode = "closed"
    method = "lcm"


def lcm(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Find closed itemsets using the LCM algorithm."""
    return LCM(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
