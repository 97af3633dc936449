"""Tail counts and p-values from a permutation null distribution."""

from __future__ import annotations

from typing import Literal

import numpy as np

from .errors import InvalidInput

Alt = Literal["two-sided", "left", "right"]

__all__ = ["Alt", "count_extreme", "pvalue"]


def count_extreme(null: np.ndarray, observed: float, alternative: Alt = "two-sided") -> int:
    """
    Count null draws at least as extreme as `observed`.

    Ties count as extreme. NaN draws compare False and are never counted;
    infinite draws compare like any other value.
    """
    null = np.asarray(null, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        if alternative == "two-sided":
            extreme = np.abs(null) >= abs(observed)
        elif alternative == "right":
            extreme = null >= observed
        elif alternative == "left":
            extreme = null <= observed
        else:
            raise InvalidInput(
                "invalid alternative: must be 'two-sided', 'left', or 'right'"
            )
    return int(extreme.sum())


def pvalue(null: np.ndarray, observed: float, alternative: Alt = "two-sided") -> float:
    """Proportion of `null` at least as extreme as `observed`."""
    null = np.asarray(null, dtype=np.float64)
    if null.size == 0:
        raise InvalidInput("pvalue: the null distribution is empty.")
    return count_extreme(null, observed, alternative) / null.size
