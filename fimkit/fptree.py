"""Arena-backed FP-tree with a header table of node handles.

Nodes live in parallel lists indexed by an integer handle; handle ``0`` is the
root. The header table maps each item to the handles of the nodes carrying
it, so conditional trees are built by walking handles upward and inserting
the collected prefix paths into a brand-new tree.

References
----------
Han, J., Pei, J., & Yin, Y. (2000). Mining Frequent Patterns without Candidate
Generation. SIGMOD Rec. 29(2), 1-12.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

if TYPE_CHECKING:
    from .store import TransactionStore

logger = logging.getLogger(__name__)

ROOT = 0

#: One prefix path of a projection: items from the top of the tree down, and
#: the number of transactions that followed it.
Path = tuple[tuple[int, ...], int]


class FPNode(NamedTuple):
    """Read-only snapshot of one arena slot."""

    item: int
    count: int
    parent: int


class FPTree:
    """Prefix tree over support-filtered transactions.

    Parameters
    ----------
    min_support:
        Absolute threshold the tree was filtered with.
    n_transactions:
        Number of transactions of the store the tree summarizes.
    order:
        Items in insertion order: descending support, ties by item index.
    """

    __slots__ = ("_item", "_count", "_parent", "_children", "_header", "_rank", "min_support", "n_transactions")

    def __init__(self, min_support: int = 0, n_transactions: int = 0, order: Sequence[int] = ()) -> None:
        self._item: list[int] = [-1]
        self._count: list[int] = [0]
        self._parent: list[int] = [-1]
        self._children: list[dict[int, int]] = [{}]
        self._header: dict[int, list[int]] = {}
        self._rank: dict[int, int] = {item: r for r, item in enumerate(order)}
        self.min_support = min_support
        self.n_transactions = n_transactions

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_store(cls, store: TransactionStore, min_support: float | int) -> FPTree:
        """Build the tree of *store*, keeping items with support ``>= min_support``.

        *min_support* may be an absolute count or a fraction in ``(0, 1]``.
        """
        from ._validation import min_count_from_support

        min_count = min_count_from_support(min_support, store.n_transactions)
        supports = store.item_supports()
        frequent = store.frequent_items(min_count)
        order = sorted(frequent, key=lambda i: (-int(supports[i]), i))

        tree = cls(min_count, store.n_transactions, order)
        if not order:
            return tree

        # Identical projected transactions share one path; insert each once
        projected = store.matrix[:, order]
        rows, multiplicity = np.unique(projected, axis=0, return_counts=True)
        for row, count in zip(rows, multiplicity):
            path = [order[j] for j in np.flatnonzero(row)]
            if path:
                tree.insert(path, int(count))

        logger.debug("Built FP-tree: %d items, %d nodes, min_support=%d", len(order), len(tree), min_count)
        return tree

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[Path],
        min_support: int,
        n_transactions: int,
        exclude: Collection[int] = (),
    ) -> FPTree:
        """Build a tree from weighted prefix paths.

        Items whose aggregated support falls below *min_support*, and any item
        in *exclude*, are dropped; survivors are re-ordered by descending
        aggregated support (ties by item index) before insertion.
        """
        paths = list(paths)
        totals: dict[int, int] = {}
        for items, count in paths:
            for item in items:
                totals[item] = totals.get(item, 0) + count

        keep = {item for item, total in totals.items() if total >= min_support and item not in exclude}
        order = sorted(keep, key=lambda i: (-totals[i], i))
        tree = cls(min_support, n_transactions, order)
        rank = tree._rank

        for items, count in paths:
            kept = sorted((item for item in items if item in keep), key=rank.__getitem__)
            if kept:
                tree.insert(kept, count)
        return tree

    def insert(self, path: Sequence[int], count: int = 1) -> None:
        """Merge one transaction path into the tree, adding *count* along it.

        Items must already be in tree order.
        """
        node = ROOT
        self._count[ROOT] += count
        for item in path:
            child = self._children[node].get(item)
            if child is None:
                child = len(self._item)
                self._item.append(item)
                self._count.append(0)
                self._parent.append(node)
                self._children.append({})
                self._children[node][item] = child
                self._header.setdefault(item, []).append(child)
                if item not in self._rank:
                    self._rank[item] = len(self._rank)
            self._count[child] += count
            node = child

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def prefix_paths(self, item: int) -> list[Path]:
        """Weighted root-to-parent paths of every node carrying *item*."""
        paths: list[Path] = []
        for handle in self._header.get(item, ()):
            prefix: list[int] = []
            node = self._parent[handle]
            while node != ROOT:
                prefix.append(self._item[node])
                node = self._parent[node]
            if prefix:
                prefix.reverse()
                paths.append((tuple(prefix), self._count[handle]))
        return paths

    def conditional_tree(self, item: int, min_support: int, exclude: Collection[int] = ()) -> FPTree:
        """Tree of the transactions containing *item*, restricted to its prefix items."""
        return FPTree.from_paths(self.prefix_paths(item), min_support, self.n_transactions, exclude)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def header_table(self) -> dict[int, tuple[int, ...]]:
        return {item: tuple(handles) for item, handles in self._header.items()}

    @property
    def is_empty(self) -> bool:
        return not self._header

    def node(self, handle: int) -> FPNode:
        return FPNode(self._item[handle], self._count[handle], self._parent[handle])

    def children(self, handle: int) -> dict[int, int]:
        return dict(self._children[handle])

    def item_support(self, item: int) -> int:
        """Sum of the counts on every node of *item*."""
        count = self._count
        return sum(count[h] for h in self._header.get(item, ()))

    def items(self) -> list[int]:
        """Header items in tree order (descending support, ties by index)."""
        rank = self._rank
        return sorted(self._header, key=rank.__getitem__)

    def supports(self) -> dict[int, int]:
        return {item: self.item_support(item) for item in self._header}

    def single_path(self) -> list[tuple[int, int]] | None:
        """``(item, count)`` pairs top-down when the tree is one chain, else ``None``."""
        chain: list[tuple[int, int]] = []
        node = ROOT
        while self._children[node]:
            if len(self._children[node]) > 1:
                return None
            node = next(iter(self._children[node].values()))
            chain.append((self._item[node], self._count[node]))
        return chain

    def __len__(self) -> int:
        return len(self._item) - 1

    def __repr__(self) -> str:
        return (
            f"FPTree(items={len(self._header)}, nodes={len(self)}, "
            f"min_support={self.min_support}, n_transactions={self.n_transactions})"
        )


def as_tree(source: TransactionStore | FPTree, min_count: int) -> FPTree:
    """Return *source* when it is a tree built at or below *min_count*, else build one.

    Raises
    ------
    ValueError
        If a pre-built tree was filtered with a threshold above *min_count*;
        itemsets it dropped can no longer be recovered.
    """
    if isinstance(source, FPTree):
        if source.min_support > min_count:
            raise ValueError(
                f"The FP-tree was built with min_support={source.min_support}, which is higher than the "
                f"requested min_support={min_count}. Rebuild the tree with a lower threshold."
            )
        return source
    return FPTree.from_store(source, min_count)
