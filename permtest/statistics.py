"""
Test statistics and a small name registry.

Each statistic maps a sample to a float and must not depend on anything
but the sample's content and order. Series statistics take a 1-D
array-like; paired statistics take an (n, 2) array-like or a two-column
DataFrame, with column 0 compared against column 1.

Constant inputs give NaN for correlation-type statistics; the engine
rejects that on the observed sample and tolerates it on permuted ones.
"""

from __future__ import annotations

from typing import Callable, Dict, List

import numpy as np
import pandas as pd

from .errors import InvalidInput

StatFn = Callable[..., float]

__all__ = [
    "StatFn",
    "lag1_autocorrelation",
    "pearson_correlation",
    "median_difference",
    "median_of_differences",
    "mean_difference",
    "total",
    "register_statistic",
    "get_statistic",
    "available_statistics",
]


def _as_series_array(x) -> np.ndarray:
    arr = np.asarray(x, dtype=np.float64)
    if arr.ndim != 1:
        raise InvalidInput("expected a 1-D series of observations")
    return arr


def _as_pair_columns(pairs) -> tuple[np.ndarray, np.ndarray]:
    if isinstance(pairs, pd.DataFrame):
        arr = pairs.to_numpy(dtype=np.float64)
    else:
        arr = np.asarray(pairs, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise InvalidInput("expected a paired table with exactly two columns")
    return arr[:, 0], arr[:, 1]


def _corr(a: np.ndarray, b: np.ndarray) -> float:
    # Pearson r; NaN when either side has zero variance
    if a.size < 2:
        return float("nan")
    da = a - a.mean()
    db = b - b.mean()
    denom = np.sqrt(np.dot(da, da) * np.dot(db, db))
    if denom == 0.0 or not np.isfinite(denom):
        return float("nan")
    return float(np.dot(da, db) / denom)


# --------------------------------------------------------------------- #
# Series statistics
# --------------------------------------------------------------------- #
def lag1_autocorrelation(x) -> float:
    """Pearson correlation between consecutive observations, x[t] vs x[t+1]."""
    arr = _as_series_array(x)
    if arr.size < 3:
        return float("nan")
    return _corr(arr[:-1], arr[1:])


def total(x) -> float:
    """Sum of all observations (order-invariant)."""
    return float(np.sum(np.asarray(x, dtype=np.float64)))


# --------------------------------------------------------------------- #
# Paired statistics
# --------------------------------------------------------------------- #
def pearson_correlation(pairs) -> float:
    a, b = _as_pair_columns(pairs)
    return _corr(a, b)


def median_difference(pairs) -> float:
    """median(column 0) - median(column 1); even counts use the midpoint."""
    a, b = _as_pair_columns(pairs)
    return float(np.median(a) - np.median(b))


def median_of_differences(pairs) -> float:
    a, b = _as_pair_columns(pairs)
    return float(np.median(a - b))


def mean_difference(pairs) -> float:
    a, b = _as_pair_columns(pairs)
    return float(np.mean(a) - np.mean(b))


# --------------------------------------------------------------------- #
# Registry
# --------------------------------------------------------------------- #
_REGISTRY: Dict[str, StatFn] = {
    "lag1_autocorrelation": lag1_autocorrelation,
    "autocorrelation": lag1_autocorrelation,
    "total": total,
    "sum": total,
    "pearson_correlation": pearson_correlation,
    "correlation": pearson_correlation,
    "median_difference": median_difference,
    "median_of_differences": median_of_differences,
    "mean_difference": mean_difference,
}


def register_statistic(name: str, fn: StatFn, *, overwrite: bool = False) -> None:
    """Make `fn` available to `permutation_test(statistic=name)`."""
    if not callable(fn):
        raise ValueError(f"statistic {name!r} must be callable")
    if name in _REGISTRY and not overwrite:
        raise ValueError(
            f"statistic {name!r} is already registered; pass overwrite=True to replace it"
        )
    _REGISTRY[name] = fn


def get_statistic(name: str) -> StatFn:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise InvalidInput(
            f"Validation error: unknown statistic {name!r}; "
            f"available: {available_statistics()}"
        ) from None


def available_statistics() -> List[str]:
    return sorted(_REGISTRY)
