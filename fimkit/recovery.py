"""Expand closed or maximal itemsets back into every frequent itemset.

References
----------
Pasquier, N., Bastide, Y., Taouil, R., & Lakhal, L. (1999). Efficient Mining of
Association Rules Using Closed Itemset Lattices. Information Systems 24(1), 25-46.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from itertools import combinations

from .results import Itemset, sorted_items


def _subsets(itemset: Itemset) -> Iterable[Itemset]:
    for size in range(1, len(itemset) + 1):
        yield from combinations(itemset, size)


def recover_closed(closed: Mapping[Itemset, int], min_support: int | None = None) -> dict[Itemset, int]:
    """Every frequent itemset with its support, from the closed itemsets alone.

    The support of an itemset is the largest support among the closed
    itemsets containing it.

    Parameters
    ----------
    closed:
        ``itemset -> absolute support`` as returned by
        :func:`fimkit.mine_closed`.
    min_support:
        Absolute threshold; closed itemsets below it are ignored. ``None``
        keeps them all.

    Returns
    -------
    dict
        Same layout as :func:`fimkit.mine_frequent`.
    """
    if min_support is not None and min_support < 1:
        raise ValueError(f"`min_support` must be a positive integer count. Got {min_support}.")

    recovered: dict[Itemset, int] = {}
    # Highest support first: the first closed superset seen sets the support
    for itemset, support in sorted_items(closed):
        if min_support is not None and support < min_support:
            continue
        for subset in _subsets(tuple(sorted(itemset))):
            if subset not in recovered:
                recovered[subset] = support
    return dict(sorted_items(recovered))


def recover_maximal(maximal: Iterable[Itemset]) -> list[Itemset]:
    """Every frequent itemset, from the maximal itemsets alone.

    Supports cannot be recovered from maximal itemsets, so only the itemsets
    are returned: longest first, then in item order.
    """
    recovered: set[Itemset] = set()
    for itemset in maximal:
        recovered.update(_subsets(tuple(sorted(itemset))))
    return sorted(recovered, key=lambda x: (-len(x), x))
