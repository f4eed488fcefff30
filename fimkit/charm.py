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


def charm_search(
    store: TransactionStore,
    min_count: int,
    n_jobs: int | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """Closed itemsets with support ``>= min_count`` by closure extension.

    Within an equivalence class, later items whose bitset covers the
    prefix's are folded into the prefix; the remaining frequent extensions
    form the next class.

    References
    ----------
    Zaki, M. J., & Hsiao, C.-J. (2002). CHARM: An Efficient Algorithm for
    Closed Itemset Mining. SDM 2002.
    """
    index = vertical_index(store, min_count)
    results = ResultSet()

    def _mine_position(pos: int) -> None:
        prefix = (index.labels[pos],)
        _charm(index, prefix, index.bits(pos), index.count(pos), range(pos + 1, len(index)), min_count, results)

    fan_out(_mine_position, range(len(index)), n_jobs=n_jobs, verbose=verbose, desc="CHARM")
    logger.debug("CHARM collected %d candidates from %d items", len(results), len(index))
    return results.finalize("closed")


def _charm(
    index: BitsetIndex,
    prefix: tuple[int, ...],
    bits: np.ndarray,
    support: int,
    candidates: Sequence[int],
    min_count: int,
    results: ResultSet,
) -> None:
    folded: list[int] = []
    branch: list[tuple[int, np.ndarray, int]] = []
    for pos in candidates:
        joined = index.extend(bits, pos)
        count = popcount(joined)
        if count == support:
            folded.append(index.labels[pos])
        elif count >= min_count:
            branch.append((pos, joined, count))

    closed = prefix + tuple(folded)
    results.add_closed(closed, support)

    for k, (pos, joined, count) in enumerate(branch):
        tail = [p for p, _, _ in branch[k + 1 :]]
        _charm(index, closed + (index.labels[pos],), joined, count, tail, min_count, results)


class Charm(ItemsetMiner):
    """CHARM closed itemset miner over vertical bitsets."""

    mode = "closed"
    method = "charm"


def charm(
    df: pd.DataFrame | pl.DataFrame | np.ndarray | Any,
    min_support: float = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    verbose: int = 0,
    column_names: list[str] | None = None,
) -> pd.DataFrame:
    """Find closed itemsets using the CHARM algorithm."""
    return Charm(
        data=df,
        item_names=column_names,
        min_support=min_support,
        null_values=null_values,
        use_colnames=use_colnames,
        max_len=max_len,
        n_jobs=n_jobs,
        verbose=verbose,
    ).mine()
