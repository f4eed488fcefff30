"""Input validation utilities for transaction matrices and support thresholds."""

from __future__ import annotations

import math
import numbers
import warnings

import numpy as np
import pandas as pd


def min_count_from_support(min_support: float | int, n_transactions: int) -> int:
    """Normalize *min_support* to an absolute transaction count.

    Integers are absolute counts and must be at least 1. Floats are fractions
    of *n_transactions* in ``(0, 1]`` and are rounded up, so the threshold is
    never under-counted.

    Raises
    ------
    ValueError
        If the threshold is not positive or a fraction exceeds 1.
    """
    if isinstance(min_support, bool) or not isinstance(min_support, numbers.Real):
        raise ValueError(
            f"`min_support` must be a positive number within the interval `(0, 1]` "
            f"or a positive integer count. Got {min_support!r}."
        )

    if isinstance(min_support, numbers.Integral):
        if min_support <= 0:
            raise ValueError(
                f"`min_support` must be a positive number within the interval `(0, 1]`. Got {min_support}."
            )
        return int(min_support)

    if not min_support > 0.0 or min_support > 1.0:
        raise ValueError(
            f"`min_support` must be a positive number within the interval `(0, 1]`. Got {min_support}."
        )
    # A fraction of an empty store still needs at least one supporting row.
    return max(1, math.ceil(float(min_support) * n_transactions))


def valid_input_check(df: pd.DataFrame, null_values: bool = False) -> None:
    """Reject a one-hot frame that is not a 0/1 incidence matrix.

    Boolean frames pass without a scan. Any other dtype is accepted for now
    with a ``DeprecationWarning`` and checked element by element.

    Parameters
    ----------
    df : pandas.DataFrame
        Dense or sparse one-hot frame, one column per item.
    null_values : bool
        Treat NaN as an absent item instead of rejecting it.

    Raises
    ------
    ValueError
        On NaN without *null_values*, on any value other than 0/1/True/False,
        or on a sparse frame whose integer column names do not start at 0.
    """
    if df is None or df.size == 0:
        return

    is_sparse = hasattr(df, "sparse")
    if is_sparse:
        _check_sparse_columns(df.columns)

    if _is_boolean(df, null_values):
        return

    warnings.warn(
        "Mining a non-boolean one-hot frame is slower and may stop being supported. "
        "Convert it first with `df.astype(bool)`.",
        DeprecationWarning,
        stacklevel=3,
    )

    values = df.sparse.to_coo().data if is_sparse else df.to_numpy()
    missing = pd.isna(values)
    if missing.any() and not null_values:
        raise ValueError("NaN values are not permitted unless `null_values=True`.")
    if null_values and not missing.any():
        warnings.warn("`null_values=True` on a frame without NaN only slows mining down.", stacklevel=3)

    invalid = ~(missing | (values == 0) | (values == 1))
    if invalid.any():
        allowed = "0, 1, True, False or NaN" if null_values else "0, 1, True or False"
        raise ValueError(f"One-hot values must be {allowed}. Found {values[invalid][0]}.")


def _check_sparse_columns(columns: pd.Index) -> None:
    # pandas sparse accessors misalign integer column labels not numbered from 0
    first = columns[0]
    if not isinstance(first, str) and first != 0:
        raise ValueError(
            "A sparse frame with integer column names must number them from 0. "
            "Otherwise cast them to strings: `df.columns = [str(c) for c in df.columns]`."
        )


def _is_boolean(df: pd.DataFrame, null_values: bool) -> bool:
    if not null_values:
        return bool(df.dtypes.map(pd.api.types.is_bool_dtype).all())
    return bool(df.apply(lambda col: col.map(_bool_or_missing)).all().all())


def _bool_or_missing(value: object) -> bool:
    return bool(pd.isna(value)) or isinstance(value, (bool, np.bool_))
