from __future__ import annotations

from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    import numpy as np
    import pandas as pd
    import polars as pl
    import pyarrow as pa

    #: Union of the tabular containers accepted as a transaction matrix:
    #:
    #: * ``pandas.DataFrame`` – dense or sparse-backed, bool / 0-1 columns
    #: * ``polars.DataFrame``
    #: * ``numpy.ndarray`` – 2-D boolean / 0-1 matrix
    #: * ``scipy.sparse`` CSR matrix / array
    #: * ``pyarrow.Table`` – converted to pandas
    DataFrame = Union[pd.DataFrame, pl.DataFrame, np.ndarray, pa.Table]  # noqa: UP007


def frame_kind(data: Any) -> str:
    """Name the container family of *data* without importing optional libraries."""
    _type = type(data)
    name = _type.__name__
    mod = getattr(_type, "__module__", "") or ""

    if name == "Table" and mod.startswith("pyarrow"):
        return "pyarrow"
    if name == "DataFrame":
        if mod.startswith("pyspark"):
            return "spark"
        if mod.startswith("polars"):
            return "polars"
        return "pandas"
    if name in ("csr_matrix", "csr_array", "csc_matrix", "csc_array", "coo_matrix", "coo_array"):
        return "scipy"
    if name == "ndarray":
        return "numpy"
    if isinstance(data, (list, tuple)):
        return "list"
    return "unknown"


def to_dataframe(data: Any) -> Any:
    """Coerce Spark/PyArrow inputs to pandas; return everything else unchanged."""
    kind = frame_kind(data)

    if kind == "pyarrow":
        return data.to_pandas()

    if kind == "spark":
        if hasattr(data, "toArrow"):
            try:
                return data.toArrow().to_pandas()
            except Exception as e:  # noqa: BLE001
                import warnings

                warnings.warn(
                    f"Failed to extract Arrow batches from PySpark, falling back to toPandas(). Exception: {e}",
                    stacklevel=2,
                )
        return data.toPandas()

    return data
