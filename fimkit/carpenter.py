from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from ._parallel import fan_out
from .model import ItemsetMiner
from .results import ResultSet
from .support import BitsetIndex, popcount

if TYPE_CHECKING:
    import pandas as pd
    import polars as pl

    from .results import Itemset
    from .store import TransactionStore

logger = logging.getLogger(__name__)


class _RowSpace:
    """Transposed view of the frequent items: one item bitset per transaction."""

    def __init__(self, store: TransactionStore, min_count: int) -> None:
        self.positions = store.frequent_items(min_count)
        self.rows = BitsetIndex.transposed(store.matrix, self.positions)
        self.min_count = min_count

    def items(self, bits: np.ndarray) -> tuple[int, ...]:
        positions = self.positions
        return tuple(positions[p] for p in self.rows.members(bits))

    def tidset(self, bits: np.ndarray) -> tuple[int, ...]:
        """Transactions containing every item of *bits*, ascending."""
        return tuple(int(t) for t in self.rows.covering(bits))

    def reachable(self, bits: np.ndarray, tidset: tuple[int, ...], after: int) -> int:
        """Transactions above *after* outside *tidset* that still share an item with *bits*."""
        overlaps = self.rows.overlaps(bits)
        hits = np.flatnonzero(overlaps[after + 1 :]) + after + 1
        members = set(tidset)
        return sum(1 for t in hits if int(t) not in members)


def carpenter_search(
    store: TransactionStore,
    min_count: int,
    n_jobs: int | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """Closed itemsets with support ``>= min_count`` by row enumeration.

    Searches closed transaction sets instead of itemsets, which pays off when
    a few transactions carry very many items. A transaction set ``X`` stands
    for the itemset ``I`` shared by all of its rows; extending ``X`` with row
    ``t`` intersects ``I`` with that row and closes the result again.

    References
    ----------
    Pan, F., Cong, G., Tung, A. K. H., Yang, J., & Zaki, M. J. (2003).
    CARPENTER: Finding Closed Patterns in Long Biological Datasets. KDD 2003.
    """
    space = _RowSpace(store, min_count)
    rows = space.rows
    results = ResultSet()
    if not space.positions or store.n_transactions < min_count:
        return results.finalize("closed")

    full = rows.full()
    root = space.tidset(full)
    if len(root) >= min_count:
        # Every frequent item together
        results.add(space.items(full), len(root))

    def _mine_row(t: int) -> None:
        _enumerate(space, root, full, t, results)

    fan_out(_mine_row, range(len(rows)), n_jobs=n_jobs, verbose=verbose, desc="Carpenter")
    logger.debug("Carpenter found %d closed itemsets over %d rows", len(results), len(rows))
    return results.finalize("closed")


def _enumerate(
    space: _RowSpace,
    tidset: tuple[int, ...],
    bits: np.ndarray,
    t: int,
    results: ResultSet,
) -> None:
    if t in tidset:
        return
    shared = space.rows.extend(bits, t)
    if popcount(shared) == 0:
        return

    closed = space.tidset(shared)
    # Prefix-preserving check over transaction ids
    if tuple(x for x in closed if x < t) != tuple(x for x in tidset if x < t):
        return

    min_count = space.min_count
    if len(closed) + space.reachable(shared, closed, t) < min_count:
        return
    if len(closed) >= min_count:
        results.add(space.items(shared), len(closed))

    for nxt in range(t + 1, len(space.rows)):
        _enumerate(space, closed, shared, nxt, results)


class Carpenter(ItemsetMiner):
    """Carpenter closed itemset miner.

    Enumerates transaction sets rather than itemsets; meant for data with far
    more items than transactions, such as gene expression tables.
    """

    mode = "closed"
    method = "carpenter"


def carpenter(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Find closed itemsets using the Carpenter algorithm."""
    return Carpenter(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
