import importlib
import importlib.util
import types
import warnings

# Import name -> distribution name to suggest in the install hint
_INSTALL_NAMES = {
    "polars": "polars",
    "pyspark": "pyspark",
    "tqdm": "tqdm",
}


def import_optional_dependency(
    name: str,
    extra: str = "",
    errors: str = "raise",
) -> types.ModuleType:
    """Import *name*, a module from a package fimkit does not require.

    Parameters
    ----------
    name : str
        Dotted module path, e.g. ``"tqdm.auto"``.
    extra : str
        Appended to the message when the package is missing.
    errors : {'raise', 'warn', 'ignore'}
        On a missing package: raise ``ImportError``, or return ``None``
        after a ``UserWarning``, or return ``None`` silently.
    """
    if errors not in ("raise", "warn", "ignore"):
        raise ValueError(f"`errors` must be 'raise', 'warn' or 'ignore'. Got: {errors}")

    top_level = name.partition(".")[0]
    if importlib.util.find_spec(top_level) is None:
        hint = _INSTALL_NAMES.get(top_level, top_level)
        msg = f"Missing optional dependency '{top_level}'. Install it with `pip install {hint}`."
        if extra:
            msg = f"{msg} {extra}"
        if errors == "raise":
            raise ImportError(msg)
        if errors == "warn":
            warnings.warn(msg, UserWarning, stacklevel=2)
        return None  # type: ignore[return-value]

    return importlib.import_module(name)
