"""
Confidence intervals for permutation p-values.

Interpretation
--------------
The exceedance count ``c`` is treated as a Binomial(n=reps, p_true) draw,
where ``p_true`` is the p-value the test would report with unlimited
permutations. This module computes an interval for ``p_true`` at a given
confidence level using one of two methods:

- "wald":            normal approximation ``p ± z·sqrt(p(1-p)/reps)``.
- "clopper-pearson": exact equal-tailed binomial interval.

Boundary behaviour (Wald)
-------------------------
The Wald interval is returned unclamped by default, so it may extend below
0 or above 1 when ``p`` is near the boundary. At ``p == 0`` or ``p == 1`` the
margin is exactly 0 and both bounds equal ``p``. Pass ``clamp=True`` to clip
the bounds to [0, 1].

Boundary behaviour (Clopper–Pearson)
------------------------------------
- If ``c == 0``, the lower bound is 0.
- If ``c == reps``, the upper bound is 1.
"""

from __future__ import annotations

import math
from typing import Literal, Tuple

from scipy.stats import beta, norm

from ..config import canonical_ci_method
from ..errors import InvalidInput

_PValCIMethod = Literal["wald", "clopper-pearson"]

__all__ = ["pvalue_ci", "pvalue_se", "z_critical"]


def _clamp01(x: float) -> float:
    """Clamp a scalar to the closed interval [0, 1]."""
    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    return x


def _check_level(confidence_level: float) -> float:
    try:
        level = float(confidence_level)
    except (TypeError, ValueError):
        level = float("nan")
    if not (0.0 < level < 1.0):
        raise InvalidInput(
            f"`confidence_level` must be in (0, 1) (got {confidence_level!r})"
        )
    return level


def _check_counts(c: int, reps: int) -> None:
    if isinstance(reps, bool) or not isinstance(reps, int) or reps < 1:
        raise InvalidInput(f"`reps` must be a positive integer (got {reps!r})")
    if isinstance(c, bool) or not isinstance(c, int) or not (0 <= c <= reps):
        raise InvalidInput(f"`c` must be an integer in [0, reps] (got {c!r})")


def z_critical(confidence_level: float = 0.95) -> float:
    """Two-sided normal critical value, e.g. 1.959964 for 0.95."""
    level = _check_level(confidence_level)
    return float(norm.ppf(1.0 - (1.0 - level) / 2.0))


def pvalue_se(c: int, reps: int) -> float:
    """Binomial standard error of the estimated p-value ``c / reps``."""
    _check_counts(c, reps)
    p_hat = c / reps
    return math.sqrt(p_hat * (1.0 - p_hat) / reps)


def pvalue_ci(
    c: int,
    reps: int,
    confidence_level: float = 0.95,
    method: str = "wald",
    clamp: bool = False,
) -> Tuple[float, float]:
    """
    Compute a confidence interval for the permutation p-value.

    Parameters
    ----------
    c : int
        Number of permuted statistics at least as extreme as observed.
        Must satisfy 0 <= c <= reps.
    reps : int
        Total number of permutation draws; must be a positive integer.
    confidence_level : float, default 0.95
        Coverage of the interval, strictly between 0 and 1.
    method : {"wald", "clopper-pearson"}, default "wald"
        Aliases "normal", "cp" and "exact" are accepted.
    clamp : bool, default False
        Clip Wald bounds to [0, 1]. Ignored for Clopper–Pearson, which is
        always inside the unit interval.

    Returns
    -------
    (lower, upper) : tuple of float
        Bounds satisfying lower <= c/reps <= upper.

    Raises
    ------
    InvalidInput
        If inputs are invalid or the method is unrecognised.
    """
    _check_counts(c, reps)
    level = _check_level(confidence_level)
    try:
        meth = canonical_ci_method(method)
    except ValueError as exc:
        raise InvalidInput(f"Unknown ci method: {method!r}") from exc

    alpha = 1.0 - level

    if meth == "wald":
        p_hat = c / reps
        margin = z_critical(level) * math.sqrt(p_hat * (1.0 - p_hat) / reps)
        lo = p_hat - margin
        hi = p_hat + margin
        if clamp:
            return (_clamp01(lo), _clamp01(hi))
        return (lo, hi)

    # Clopper–Pearson; beta.ppf returns NaN at the c == 0 / c == reps edges
    lo_raw = float(beta.ppf(alpha / 2.0, c, reps - c + 1))
    hi_raw = float(beta.ppf(1.0 - alpha / 2.0, c + 1, reps - c))
    lo = 0.0 if (c == 0 or math.isnan(lo_raw)) else _clamp01(lo_raw)
    hi = 1.0 if (c == reps or math.isnan(hi_raw)) else _clamp01(hi_raw)
    return (lo, hi)
