from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Literal

from .results import MODES

if TYPE_CHECKING:
    import pandas as pd

    from ._compat import DataFrame
    from .fptree import FPTree
    from .results import Itemset, Mode
    from .store import TransactionStore

logger = logging.getLogger(__name__)

Method = Literal[
    "auto",
    "tree",
    "vertical",
    "fpgrowth",
    "eclat",
    "fpclose",
    "charm",
    "lcm",
    "carpenter",
    "fpmax",
    "genmax",
]

#: Mode -> (tree method, vertical method)
_STRATEGIES: dict[str, tuple[str, str]] = {
    "frequent": ("fpgrowth", "eclat"),
    "closed": ("fpclose", "lcm"),
    "maximal": ("fpmax", "genmax"),
}
TREE_METHODS = frozenset({"fpgrowth", "fpclose", "fpmax"})

#: Below this one-hot density the vertical strategy is preferred
_DENSITY_THRESHOLD = 0.15
#: Closed mining switches to row enumeration past this items/transactions ratio
_WIDE_RATIO = 10


def _engines(mode: str) -> dict[str, Callable[..., dict[Itemset, int]]]:
    if mode == "frequent":
        from .eclat import eclat_search
        from .fpgrowth import fpgrowth_search

        return {"fpgrowth": fpgrowth_search, "eclat": eclat_search}
    if mode == "closed":
        from .carpenter import carpenter_search
        from .charm import charm_search
        from .fpclose import fpclose_search
        from .lcm import lcm_search

        return {"fpclose": fpclose_search, "charm": charm_search, "lcm": lcm_search, "carpenter": carpenter_search}
    if mode == "maximal":
        from .fpmax import fpmax_search
        from .genmax import genmax_search

        return {"fpmax": fpmax_search, "genmax": genmax_search}
    raise ValueError(f"`mode` must be one of {MODES}. Got: {mode}")


def _select_method(
    mode: Mode,
    method: str,
    source: TransactionStore | FPTree,
    verbose: int,
) -> str:
    from .fptree import FPTree

    tree_method, vertical_method = _STRATEGIES[mode]
    if method == "auto":
        if isinstance(source, FPTree):
            chosen = tree_method
            label = "pre-built FP-tree"
        elif mode == "closed" and source.n_items > _WIDE_RATIO * source.n_transactions:
            chosen = "carpenter"
            label = f"{source.n_items:,} items x {source.n_transactions:,} transactions"
        else:
            chosen = vertical_method if source.density < _DENSITY_THRESHOLD else tree_method
            label = f"density={source.density:.4f}"
        if verbose:
            print(f"[{time.strftime('%X')}] Auto-selected method: '{chosen}' ({label})")
        return chosen
    if method == "tree":
        return tree_method
    if method == "vertical":
        return vertical_method
    return method


def as_source(
    data: DataFrame | TransactionStore | FPTree | Any,
    item_names: Sequence[Any] | None = None,
    null_values: bool = False,
    verbose: int = 0,
) -> TransactionStore | FPTree:
    """Pass stores and trees through; build a store from anything else."""
    from .fptree import FPTree
    from .store import TransactionStore

    if isinstance(data, (TransactionStore, FPTree)):
        return data
    return TransactionStore.from_data(data, item_names=item_names, null_values=null_values, verbose=verbose)


def mine_itemsets(
    data: DataFrame | TransactionStore | FPTree | Any,
    mode: Mode = "frequent",
    min_support: float | int = 0.5,
    method: Method | str = "auto",
    n_jobs: int | None = None,
    max_len: int | None = None,
    null_values: bool = False,
    item_names: Sequence[Any] | None = None,
    verbose: int = 0,
) -> dict[Itemset, int]:
    """Mine *data* and return the ``itemset -> absolute support`` mapping.

    Raises
    ------
    ValueError
        For an unknown mode or method, a non-positive threshold, ``max_len``
        outside frequent mining, a vertical method on a pre-built tree, or a
        pre-built tree filtered above the requested threshold.
    """
    from ._validation import min_count_from_support
    from .fptree import FPTree

    engines = _engines(mode)
    if max_len is not None:
        if mode != "frequent":
            raise ValueError(f"`max_len` is only supported for frequent itemsets, not {mode} ones.")
        if max_len < 1:
            raise ValueError(f"`max_len` must be a positive integer or None. Got {max_len}.")

    source = as_source(data, item_names, null_values, verbose)
    min_count = min_count_from_support(min_support, source.n_transactions)

    chosen = _select_method(mode, method, source, verbose)
    if chosen not in engines:
        raise ValueError(
            f"`method` for {mode} itemsets must be 'auto', 'tree', 'vertical' or one of {sorted(engines)}. "
            f"Got: {method}"
        )
    if isinstance(source, FPTree) and chosen not in TREE_METHODS:
        raise ValueError(f"A pre-built FPTree can only be mined with {sorted(TREE_METHODS)}, not '{chosen}'.")

    kwargs: dict[str, Any] = {"n_jobs": n_jobs, "verbose": verbose}
    if max_len is not None:
        kwargs["max_len"] = max_len

    t0 = 0.0
    if verbose:
        print(f"[{time.strftime('%X')}] Mining {mode} itemsets with '{chosen}' (min_count={min_count})...")
        t0 = time.perf_counter()
    result = engines[chosen](source, min_count, **kwargs)
    if verbose:
        print(f"[{time.strftime('%X')}] Found {len(result):,} itemsets in {time.perf_counter() - t0:.2f}s.")
    logger.debug("%s/%s: %d itemsets at min_count=%d", mode, chosen, len(result), min_count)
    return result


def dispatch(
    df: DataFrame | Any,
    mode: Mode = "frequent",
    method: Method | str = "auto",
    min_support: float | int = 0.5,
    null_values: bool = False,
    use_colnames: bool = False,
    max_len: int | None = None,
    n_jobs: int | None = None,
    column_names: Sequence[Any] | None = None,
    verbose: int = 0,
) -> pd.DataFrame:
    """Mine *df* and assemble the result DataFrame."""
    from .results import build_frame
    from .store import TransactionStore

    source = as_source(df, column_names, null_values, verbose)
    result = mine_itemsets(
        source,
        mode=mode,
        min_support=min_support,
        method=method,
        n_jobs=n_jobs,
        max_len=max_len,
        verbose=verbose,
    )

    if isinstance(source, TransactionStore):
        names: Sequence[Any] | None = source.item_names
    else:
        names = column_names

    if verbose:
        print(f"[{time.strftime('%X')}] Assembling result DataFrame...")
    return build_frame(result, source.n_transactions, names, use_colnames)
