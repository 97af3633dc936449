"""
permtest.validation
===================

Centralised input validation for the public ``permutation_test()`` API.

The *only* job of this module is to:

1. Check that the user supplied **consistent, supported** arguments.
2. Refuse anything unexpected or ambiguous with clear `InvalidInput` errors.
3. Convert lists, NumPy arrays and pandas objects to float64 arrays of the
   shape required by the shuffle engine, remembering how to rebuild the
   caller's container kind around a permuted array.
4. Evaluate the statistic once on the original sample and reject a
   non-finite result with `NonFiniteStatistic`.

No mutation of the caller's data is done; everything downstream works on
copies.
"""

from __future__ import annotations

import math
import time
import warnings
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import canonical_ci_method
from .engine.shuffle import Scheme, canonical_scheme
from .errors import InvalidInput, NonFiniteStatistic
from .statistics import get_statistic

__all__ = ["ValidatedInputs", "SampleWrapper", "validate_inputs"]

# Warm-up calls slower than this trigger a "may be slow" warning
_SLOW_STAT_SECONDS = 1.0


# --------------------------------------------------------------------- #
# Container round-tripping
# --------------------------------------------------------------------- #
@dataclass(frozen=True)
class SampleWrapper:
    """Rebuilds the caller's container kind around a (permuted) array."""

    kind: str  # "array" | "series" | "frame"
    index: Optional[pd.Index] = None
    name: Any = None
    columns: Optional[Tuple[Any, Any]] = None

    def __call__(self, arr: np.ndarray) -> Any:
        if self.kind == "series":
            return pd.Series(arr, index=self.index, name=self.name)
        if self.kind == "frame":
            return pd.DataFrame(arr, index=self.index, columns=list(self.columns or ()))
        return arr


# --------------------------------------------------------------------- #
# Public return container
# --------------------------------------------------------------------- #
@dataclass
class ValidatedInputs:
    """Everything the engine needs, NA-free and correctly typed."""

    data: np.ndarray
    scheme: Scheme
    statistic: Callable[[Any], float]
    wrap: SampleWrapper
    observed: float

    reps: int = 1000
    confidence_level: float = 0.95
    alternative: str = "two-sided"
    ci_method: str = "wald"
    statistic_name: str = ""

    warmup_time: float = 0.0
    warnings: List[str] = field(default_factory=list)

    @property
    def n_obs(self) -> int:
        return int(self.data.shape[0])


# --------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------- #
def _require(cond: object, msg: str) -> None:
    """Raise InvalidInput with message if `cond` is falsy (bool-cast)."""
    if not bool(cond):
        raise InvalidInput(f"Validation error: {msg}")


def _to_float(values: Any, what: str) -> np.ndarray:
    try:
        return np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"Validation error: {what} must be numeric ({exc})") from None


def _is_numeric_series(s: pd.Series) -> bool:
    # Accept ints, floats, and booleans; everything else is rejected.
    t = s.dtype
    return (
        pd.api.types.is_integer_dtype(t)
        or pd.api.types.is_float_dtype(t)
        or pd.api.types.is_bool_dtype(t)
    )


def _series_sample(sample: Any) -> Tuple[np.ndarray, SampleWrapper]:
    if isinstance(sample, pd.DataFrame):
        _require(
            sample.shape[1] == 1,
            "full-shuffle expects a single series; got a DataFrame with "
            f"{sample.shape[1]} columns",
        )
        sample = sample.iloc[:, 0]

    if isinstance(sample, pd.Series):
        _require(_is_numeric_series(sample), "series must be numeric/boolean")
        arr = _to_float(sample.to_numpy(), "series")
        wrap = SampleWrapper("series", index=sample.index, name=sample.name)
    else:
        arr = _to_float(sample, "series")
        wrap = SampleWrapper("array")

    _require(arr.ndim == 1, f"full-shuffle expects a 1-D series (got ndim={arr.ndim})")
    return arr, wrap


def _paired_sample(
    sample: Any, columns: Optional[Sequence[Any]]
) -> Tuple[np.ndarray, SampleWrapper]:
    if isinstance(sample, pd.DataFrame):
        if columns is not None:
            cols = list(columns)
            _require(len(cols) == 2, "`columns` must name exactly two columns")
            for c in cols:
                _require(c in sample.columns, f"column {c!r} not in dataframe")
        else:
            _require(
                sample.shape[1] == 2,
                "paired table must have exactly two columns; pass `columns=(a, b)` "
                f"to select them (got {sample.shape[1]} columns)",
            )
            cols = list(sample.columns)

        frame = sample[cols]
        for c in cols:
            _require(_is_numeric_series(frame[c]), f"column {c!r} must be numeric/boolean")
        arr = _to_float(frame.to_numpy(), "paired table")
        wrap = SampleWrapper("frame", index=frame.index, columns=(cols[0], cols[1]))
    else:
        _require(columns is None, "`columns` is only valid with a pandas DataFrame")
        arr = _to_float(sample, "paired table")
        wrap = SampleWrapper("array")

    _require(
        arr.ndim == 2 and arr.shape[1] == 2,
        f"rowwise-swap expects an (n, 2) table (got shape {arr.shape})",
    )
    return arr, wrap


def _resolve_statistic(statistic: Union[str, Callable[[Any], float]]) -> Tuple[Callable, str]:
    if isinstance(statistic, str):
        return get_statistic(statistic), statistic
    _require(callable(statistic), "`statistic` must be callable or a registered name")
    return statistic, getattr(statistic, "__name__", type(statistic).__name__)


# --------------------------------------------------------------------- #
# Main public validator
# --------------------------------------------------------------------- #
def validate_inputs(
    sample: Any,
    *,
    statistic: Union[str, Callable[[Any], float]],
    scheme: Union[str, Scheme] = Scheme.FULL_SHUFFLE,
    reps: int = 1000,
    confidence_level: float = 0.95,
    alternative: str = "two-sided",
    ci_method: str = "wald",
    columns: Optional[Sequence[Any]] = None,
) -> ValidatedInputs:
    """
    Validate *all* user arguments and evaluate the observed statistic.

    Raises
    ------
    InvalidInput
        If any argument rule is violated.
    NonFiniteStatistic
        If the statistic is NaN, infinite or non-numeric on `sample`.
    """

    # ------------------------------------------------------------------ #
    # 0. scalar controls
    # ------------------------------------------------------------------ #
    sch = canonical_scheme(scheme)

    _require(
        not isinstance(reps, bool) and isinstance(reps, (int, np.integer)),
        f"reps must be an integer (got {reps!r})",
    )
    _require(reps >= 1, f"reps must be >= 1 (got {reps!r})")

    try:
        level = float(confidence_level)
    except (TypeError, ValueError):
        level = float("nan")
    _require(0.0 < level < 1.0, f"confidence_level must be in (0, 1) (got {confidence_level!r})")

    _require(
        alternative in {"two-sided", "left", "right"},
        "alternative must be 'two-sided', 'left', or 'right'",
    )

    try:
        ci_method_canon = canonical_ci_method(ci_method)
    except ValueError as exc:
        raise InvalidInput(f"Validation error: {exc}") from None

    stat_fn, stat_name = _resolve_statistic(statistic)

    # ------------------------------------------------------------------ #
    # 1. sample shape and content
    # ------------------------------------------------------------------ #
    _require(sample is not None, "sample is required")
    if sch is Scheme.FULL_SHUFFLE:
        _require(columns is None, "`columns` is only used with the rowwise-swap scheme")
        data, wrap = _series_sample(sample)
    else:
        data, wrap = _paired_sample(sample, columns)

    _require(data.shape[0] >= 1, "sample is empty")
    _require(np.isfinite(data).all(), "sample contains missing or non-finite values")

    warnings_list: List[str] = []
    if data.shape[0] == 1:
        msg = "sample has a single observation; every permutation equals the original."
        warnings_list.append(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    # ------------------------------------------------------------------ #
    # 2. warm-up call: observed statistic + runtime
    # ------------------------------------------------------------------ #
    t0 = time.perf_counter()
    try:
        stat0 = stat_fn(wrap(data.copy()))
    except (InvalidInput, NonFiniteStatistic):
        raise
    except Exception as e:
        raise InvalidInput(f"statistic raised an error on original data: {e}") from e
    dt = time.perf_counter() - t0

    if isinstance(stat0, np.ndarray) and stat0.size == 1:
        stat0 = stat0.reshape(()).item()
    if isinstance(stat0, (bool, np.bool_)) or not isinstance(
        stat0, (int, float, np.integer, np.floating)
    ):
        raise NonFiniteStatistic(
            f"statistic must return a numeric scalar (got {type(stat0).__name__})"
        )
    observed = float(stat0)
    if not math.isfinite(observed):
        raise NonFiniteStatistic(
            f"statistic {stat_name!r} is {observed} on the observed sample"
        )

    if dt > _SLOW_STAT_SECONDS:
        msg = f"statistic took {dt:.2f}s; permutation test may be slow."
        warnings_list.append(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    return ValidatedInputs(
        data=data,
        scheme=sch,
        statistic=stat_fn,
        wrap=wrap,
        observed=observed,
        reps=int(reps),
        confidence_level=level,
        alternative=alternative,
        ci_method=ci_method_canon,
        statistic_name=stat_name,
        warmup_time=dt,
        warnings=warnings_list,
    )
