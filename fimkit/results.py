from __future__ import annotations

import enum
import threading
import typing
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    import pandas as pd

Itemset = tuple[int, ...]
Mode = Literal["frequent", "closed", "maximal"]

MODES: tuple[Mode, ...] = ("frequent", "closed", "maximal")


class Outcome(enum.Enum):
    """What a maximal-search call found below its candidate."""

    #: At least one frequent extension exists; the candidate is not maximal.
    EXTENDED = "extended"
    #: No frequent extension; the candidate is reported.
    TERMINAL = "terminal"


class ResultSet:
    """Thread-safe ``itemset -> support`` collector shared by mining workers.

    The lock guards single inserts and snapshot copies only; subset scans run
    on the copies outside it. Inserting an existing key overwrites it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[Itemset, int] = {}
        self._by_support: dict[int, list[frozenset[int]]] = {}
        # Every key ever inserted, in insertion order; only appended to
        self._recorded: list[frozenset[int]] = []

    def add(self, itemset: Sequence[int], support: int) -> None:
        key = tuple(sorted(itemset))
        with self._lock:
            self._store(key, support)

    def add_closed(self, itemset: Sequence[int], support: int) -> bool:
        """Insert *itemset* unless an accepted proper superset has equal support.

        The support group is scanned outside the lock. The insert happens
        under the lock only once no entry has joined the group since the
        last scan, so check and insert stay atomic.

        Returns whether the itemset was inserted.
        """
        key = tuple(sorted(itemset))
        candidate = frozenset(key)
        group: list[frozenset[int]] | None = None
        checked = 0
        while True:
            with self._lock:
                current = self._by_support.get(support)
                if current is None or (current is group and len(current) == checked):
                    self._store(key, support)
                    return True
                if current is not group:
                    group, checked = current, 0
                fresh = current[checked:]
                checked = len(current)
            if _has_superset(candidate, fresh, strict=True):
                return False

    def covers(self, itemset: Iterable[int]) -> bool:
        """Whether some recorded itemset contains every item of *itemset*."""
        candidate = frozenset(itemset)
        with self._lock:
            recorded = self._recorded[:]
        return _has_superset(candidate, recorded)

    def _store(self, key: Itemset, support: int) -> None:
        entry = frozenset(key)
        previous = self._data.get(key)
        if previous is None:
            self._recorded.append(entry)
        elif previous != support:
            # Replace the old group rather than mutate it; add_closed tracks groups by identity
            self._by_support[previous] = [other for other in self._by_support[previous] if other != entry]
        if previous != support:
            self._by_support.setdefault(support, []).append(entry)
        self._data[key] = support

    def finalize(self, mode: Mode = "frequent") -> dict[Itemset, int]:
        """Apply the subsumption filter for *mode* once and return a plain dict.

        Call only after every producer has finished. Keys come out in
        :func:`sorted_items` order whatever order the workers finished in.
        """
        with self._lock:
            snapshot = dict(self._data)
        if mode == "frequent":
            kept = snapshot
        elif mode == "closed":
            kept = filter_closed(snapshot)
        elif mode == "maximal":
            kept = filter_maximal(snapshot)
        else:
            raise ValueError(f"`mode` must be one of {MODES}. Got: {mode}")
        return dict(sorted_items(kept))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, itemset: object) -> bool:
        return itemset in self._data

    def __iter__(self) -> Iterator[Itemset]:
        with self._lock:
            return iter(list(self._data))

    def get(self, itemset: Itemset, default: int | None = None) -> int | None:
        return self._data.get(itemset, default)


def _has_superset(candidate: frozenset[int], others: Iterable[frozenset[int]], strict: bool = False) -> bool:
    if strict:
        return any(candidate < other for other in others)
    return any(candidate <= other for other in others)


def _drop_subsumed(itemsets: list[Itemset]) -> list[Itemset]:
    """Keep the itemsets that are not a strict subset of another in the list."""
    kept: list[Itemset] = []
    containing: dict[int, set[int]] = {}

    for itemset in sorted(itemsets, key=lambda x: (-len(x), x)):
        # Kept itemsets are processed longest first, so any kept superset is strict
        owners: set[int] | None = None
        for item in itemset:
            ids = containing.get(item)
            if not ids:
                owners = set()
                break
            owners = set(ids) if owners is None else owners & ids
            if not owners:
                break
        if owners:
            continue

        kept_id = len(kept)
        kept.append(itemset)
        for item in itemset:
            containing.setdefault(item, set()).add(kept_id)
    return kept


def filter_closed(result: Mapping[Itemset, int]) -> dict[Itemset, int]:
    """Drop every itemset that has a strict superset with equal support."""
    groups: dict[int, list[Itemset]] = {}
    for itemset, support in result.items():
        groups.setdefault(support, []).append(itemset)

    closed: dict[Itemset, int] = {}
    for support, itemsets in groups.items():
        for itemset in _drop_subsumed(itemsets):
            closed[itemset] = support
    return closed


def filter_maximal(result: Mapping[Itemset, int]) -> dict[Itemset, int]:
    """Drop every itemset that has a strict superset, regardless of support."""
    return {itemset: result[itemset] for itemset in _drop_subsumed(list(result))}


def sorted_items(result: Mapping[Itemset, int]) -> list[tuple[Itemset, int]]:
    """Deterministic order: descending support, then length, then items."""
    return sorted(result.items(), key=lambda kv: (-kv[1], len(kv[0]), kv[0]))


def build_frame(
    result: Mapping[Itemset, int],
    n_transactions: int,
    col_names: Sequence[Any] | None = None,
    use_colnames: bool = False,
) -> pd.DataFrame:
    """Assemble the ``support / itemsets / count / length`` result frame.

    ``itemsets`` is an Arrow list column of item indices, or of item names
    when *use_colnames* is set.
    """
    import numpy as np
    import pandas as pd
    import pyarrow as pa

    columns = ["support", "itemsets", "count", "length"]
    if not result:
        empty = pd.DataFrame(columns=columns)  # type: ignore[arg-type]
        empty.attrs["num_itemsets"] = n_transactions
        return empty

    rows = sorted_items(result)
    counts = np.fromiter((support for _, support in rows), dtype=np.int64, count=len(rows))
    lengths = np.fromiter((len(itemset) for itemset, _ in rows), dtype=np.int64, count=len(rows))
    offsets = np.zeros(len(rows) + 1, dtype=np.int32)
    np.cumsum(lengths, out=offsets[1:])
    items = np.fromiter((i for itemset, _ in rows for i in itemset), dtype=np.int32, count=int(offsets[-1]))

    if use_colnames:
        if col_names is None:
            raise ValueError("`use_colnames=True` requires item names.")
        col_array = pa.array(list(col_names))
        items_pa = pa.DictionaryArray.from_arrays(pa.array(items, type=pa.int32()), col_array).dictionary_decode()
        item_type = col_array.type
    else:
        items_pa = pa.array(items, type=pa.int32())
        item_type = pa.int32()

    list_arr = pa.ListArray.from_arrays(pa.array(offsets, type=pa.int32()), items_pa)

    frame = pd.DataFrame(
        {
            "support": counts / n_transactions if n_transactions else counts.astype(float),
            "itemsets": pd.Series(list_arr, dtype=pd.ArrowDtype(pa.list_(item_type))),
            "count": counts,
            "length": lengths,
        }
    )
    frame.attrs["num_itemsets"] = n_transactions
    return typing.cast("pd.DataFrame", frame)
