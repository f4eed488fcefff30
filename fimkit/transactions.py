"""One-hot encoding of basket data for the miners."""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Hashable, Sequence
from typing import TYPE_CHECKING, Any

from ._compat import frame_kind, to_dataframe

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd

    from ._compat import DataFrame


def from_transactions(
    data: DataFrame | Sequence[Sequence[str | int]] | Any,
    transaction_col: str | None = None,
    item_col: str | None = None,
    min_item_count: int = 1,
    verbose: int = 0,
) -> pd.DataFrame:
    """One-hot encode baskets into a sparse boolean ``transactions x items`` frame.

    Parameters
    ----------
    data
        Either a long-format table (pandas, Polars or Spark frame, or a
        ``pyarrow.Table``) with one row per transaction/item pair, or a list
        of baskets such as ``[["bread", "milk"], ["bread", "eggs"]]``.
    transaction_col
        Column holding the transaction id; the first column by default.
        Unused for a list of baskets.
    item_col
        Column holding the item; the second column by default. Unused for a
        list of baskets.
    min_item_count
        Items found in fewer transactions are left out of the encoding.
    verbose
        Print timing lines when ``> 0``.

    Returns
    -------
    pandas.DataFrame
        Sparse boolean frame, one column per item (named by ``str(item)``,
        sorted) and one row per transaction. Long-format input keeps the
        transaction ids as the index.

    Examples
    --------
    >>> import fimkit
    >>> ohe = fimkit.from_transactions([["bread", "milk"], ["bread", "eggs"]])
    >>> list(ohe.columns)
    ['bread', 'eggs', 'milk']
    """
    kind = frame_kind(data)
    data = to_dataframe(data)

    if isinstance(data, (list, tuple)):
        return _from_list(data, min_item_count=min_item_count, verbose=verbose)

    if kind == "polars":
        data = data.to_pandas()

    import pandas as pd

    if isinstance(data, pd.DataFrame):
        return _from_dataframe(data, transaction_col, item_col, min_item_count=min_item_count, verbose=verbose)

    raise TypeError(f"Expected a Pandas/Polars/PyArrow DataFrame or a list of baskets, got {type(data)}")


def _sparse_frame(
    rows: np.ndarray,
    cols: np.ndarray,
    shape: tuple[int, int],
    items: Sequence[Any],
    index: pd.Index | None = None,
) -> pd.DataFrame:
    """Boolean sparse frame with a True at every ``(rows[k], cols[k])``."""
    import numpy as np
    import pandas as pd
    from scipy import sparse as sp

    # Repeated coordinates sum on conversion; clip back to 0/1
    csr = sp.csr_matrix((np.ones(len(rows), dtype=np.int8), (rows, cols)), shape=shape)
    csr.data = np.minimum(csr.data, 1)
    frame = pd.DataFrame.sparse.from_spmatrix(csr, index=index, columns=[str(item) for item in items])
    return frame.astype(pd.SparseDtype("bool", fill_value=False))


def _from_list(
    baskets: Sequence[Sequence[Hashable]],
    min_item_count: int = 1,
    verbose: int = 0,
) -> pd.DataFrame:
    import numpy as np

    t0 = time.perf_counter()
    unique = [set(basket) for basket in baskets]
    counts: Counter[Hashable] = Counter()
    for basket in unique:
        counts.update(basket)

    # Numbers before strings so mixed baskets still sort
    items = sorted((item for item, n in counts.items() if n >= min_item_count), key=lambda x: (isinstance(x, str), x))
    position = {item: i for i, item in enumerate(items)}
    if verbose:
        print(f"[{time.strftime('%X')}] {len(baskets):,} baskets, {len(items):,} distinct items.")

    pairs = [(row, position[item]) for row, basket in enumerate(unique) for item in basket if item in position]
    coords = np.array(pairs, dtype=np.int64).reshape(-1, 2)
    frame = _sparse_frame(coords[:, 0], coords[:, 1], (len(baskets), len(items)), items)

    if verbose:
        print(f"[{time.strftime('%X')}] One-hot encoding took {time.perf_counter() - t0:.2f}s.")
    return frame


def _from_dataframe(
    df: pd.DataFrame,
    transaction_col: str | None,
    item_col: str | None,
    min_item_count: int = 1,
    verbose: int = 0,
) -> pd.DataFrame:
    import pandas as pd

    t0 = time.perf_counter()
    columns = list(df.columns)
    if len(columns) < 2:
        raise ValueError(f"Long-format data needs at least 2 columns (transaction id and item), got {columns}")

    txn_col = transaction_col or columns[0]
    itm_col = item_col or columns[1]
    for role, name in (("Transaction", txn_col), ("Item", itm_col)):
        if name not in df.columns:
            raise ValueError(f"{role} column '{name}' not found in {columns}")

    if min_item_count > 1:
        per_item = df.drop_duplicates([txn_col, itm_col])[itm_col].value_counts()
        df = df[df[itm_col].isin(per_item.index[(per_item >= min_item_count).to_numpy()])]

    txn_codes, txn_ids = pd.factorize(df[txn_col], sort=False)
    item_codes, items = pd.factorize(df[itm_col], sort=True)
    frame = _sparse_frame(
        txn_codes.astype("int64"),
        item_codes.astype("int64"),
        (len(txn_ids), len(items)),
        list(items),
        index=pd.Index(txn_ids, name=txn_col),
    )

    if verbose:
        print(
            f"[{time.strftime('%X')}] Encoded {len(df):,} rows into {frame.shape[0]:,} x {frame.shape[1]:,} "
            f"in {time.perf_counter() - t0:.2f}s."
        )
    return frame
