"""
permtest.results
================

Presentation utilities and container class for permutation-test output.

`PermTestResult` is the object returned by `permutation_test()` (see run.py).
It is a lightweight, self-contained container that:

- Stores the observed statistic, the null distribution, p-value and counts,
- Stores the confidence interval for the p-value,
- Knows enough settings to reconstruct a stable textual summary,
- Can draw a histogram of the null distribution with the observed value marked.

Design notes
------------
- No global state: everything needed for summary/plotting is stored on the
  instance.
- Formatting is deterministic with fixed decimals.
- Matplotlib is imported lazily inside `plot()`; the method returns an Axes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import numpy as np

from .ci.pvalue_ci import pvalue_se

if TYPE_CHECKING:
    from matplotlib.axes import Axes  # pragma: no cover

__all__ = ["PermTestResult"]


# --------- formatting helpers (deterministic) --------- #
def _fmt_float(x: float, nd: int = 4) -> str:
    """Format a scalar as a fixed-decimal string; fall back to `str(x)` on error."""
    try:
        return f"{float(x):.{nd}f}"
    except (TypeError, ValueError):
        return str(x)


def _fmt_pct(p: float, nd: int = 1) -> str:
    try:
        return f"{float(p) * 100:.{nd}f}%"
    except (TypeError, ValueError):
        return str(p)


def _fmt_ci(ci: Optional[Tuple[float, float]], nd: int = 4) -> str:
    """Format a (lo, hi) pair as `[lo, hi]`, or `'not computed'` if missing."""
    if not ci or len(ci) != 2:
        return "not computed"
    lo, hi = ci
    return f"[{_fmt_float(lo, nd)}, {_fmt_float(hi, nd)}]"


# --------- main result container --------- #
@dataclass(slots=True)
class PermTestResult:
    """
    Container for permutation-test output and basic presentation helpers.

    This class does not perform any inference itself; it organises the
    outputs returned by `permutation_test()` and exposes:

    - `__repr__` / `__str__` for quick inspection,
    - `summary()` for a multi-section text report,
    - `explain()` for a short plain-language takeaway,
    - `to_dict()` for serialisable scalars,
    - `plot()` for the null-distribution histogram.

    Notes
    -----
    Non-finite values produced by the statistic on permuted samples are kept
    in `null_distribution` as-is. NaN draws never count as extreme. Infinite
    draws are compared like any other value, so `+inf` counts in the right
    and two-sided tails and `-inf` in the left and two-sided tails.
    `n_nonfinite` reports how many non-finite draws there were.
    """

    observed: float
    null_distribution: np.ndarray
    pval: float
    pval_ci: Tuple[float, float]
    reps: int
    c: int
    alternative: str  # "two-sided" | "left" | "right"

    scheme: str = "full-shuffle"
    statistic: str = ""
    confidence_level: float = 0.95
    ci_method: str = "wald"

    settings: Dict[str, object] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    runtime: Optional[float] = None

    # --------------- derived quantities --------------- #
    @property
    def confidence_interval(self) -> Tuple[float, float]:
        return self.pval_ci

    @property
    def pval_se(self) -> float:
        """Binomial standard error of `pval` given `reps` draws."""
        return pvalue_se(self.c, self.reps)

    @property
    def n_nonfinite(self) -> int:
        return int(np.count_nonzero(~np.isfinite(self.null_distribution)))

    # --------------- dunder methods --------------- #
    def __repr__(self) -> str:
        return (
            f"PermTestResult(obs={_fmt_float(self.observed)}, "
            f"p={_fmt_float(self.pval, nd=4)}, alt='{self.alternative}', reps={self.reps})"
        )

    def __str__(self) -> str:
        return (
            f"Permutation test: p={_fmt_float(self.pval, nd=4)} ({self.alternative}), "
            f"reps={self.reps}, observed={_fmt_float(self.observed)}"
        )

    # --------------- user-facing helpers --------------- #
    def explain(self, alpha: Optional[float] = None) -> str:
        """
        Return a brief, plain-language interpretation of the result.

        Parameters
        ----------
        alpha : float, optional
            Significance threshold to reference. Defaults to
            ``1 - confidence_level``.
        """
        a = (1.0 - float(self.confidence_level)) if alpha is None else float(alpha)
        tail = self.alternative
        p = float(self.pval)

        dir_phrase = {
            "two-sided": "in either direction",
            "left": "in the negative direction",
            "right": "in the positive direction",
        }.get(tail, "as or more extreme")

        lines = [
            f"Across {self.reps} random permutations, {_fmt_pct(p)} produced a statistic "
            f"as or more extreme {dir_phrase} than the observed value."
        ]
        if p <= a:
            lines.append(
                f"At α = {_fmt_float(a, 3)}, the result is **statistically significant** "
                f"for a {tail} test."
            )
        else:
            lines.append(
                f"At α = {_fmt_float(a, 3)}, the result is **not statistically significant** "
                f"for a {tail} test."
            )
        lines.append(
            "The p-value is a Monte Carlo estimate; its interval reflects the "
            "number of permutations drawn."
        )
        return " ".join(lines)

    def summary(self, print_out: bool = True) -> str:
        """
        Build a deterministic, human-friendly summary.

        Parameters
        ----------
        print_out : bool, default True
            If True, print the summary to stdout. The string is always returned.
        """
        seed = self.settings.get("seed", "unknown")
        n_jobs = self.settings.get("n_jobs", "unknown")
        clamp = self.settings.get("clamp_ci", False)

        lines: list[str] = []
        lines.append("Permutation Test Result")
        lines.append("=" * 23)
        lines.append("")
        lines.append("Statistic")
        lines.append("---------")
        lines.append(f"Statistic:              {self.statistic or 'custom'}")
        lines.append(f"Observed value:         {_fmt_float(self.observed)}")
        lines.append(f"Scheme:                 {self.scheme}")

        lines.append("")
        lines.append("Permutation test")
        lines.append("----------------")
        lines.append(f"Tail (alternative):     {self.alternative}")
        lines.append(
            f"p-value:                {_fmt_float(self.pval, nd=4)} ({_fmt_pct(self.pval)})"
        )
        lines.append(
            f"{_fmt_pct(self.confidence_level)} CI ({self.ci_method}): "
            f"{_fmt_ci(self.pval_ci, nd=4)}"
        )
        lines.append(f"Std. error of p:        {_fmt_float(self.pval_se, nd=4)}")
        lines.append(f"As-or-more extreme:     {self.c} / {self.reps}")
        if self.n_nonfinite:
            lines.append(f"Non-finite draws:       {self.n_nonfinite}")

        lines.append("")
        lines.append("Settings")
        lines.append("--------")
        lines.append(f"seed:                   {seed}")
        lines.append(f"clamp_ci:               {clamp}")
        lines.append(f"n_jobs:                 {n_jobs}")

        lines.append("")
        lines.append("Interpretation")
        lines.append("--------------")
        lines.append(self.explain())

        out = "\n".join(lines)
        if print_out:
            print(out)
        return out

    def to_dict(self) -> Dict[str, Any]:
        """Plain-Python scalars (the null distribution is left out)."""
        return {
            "observed": float(self.observed),
            "pval": float(self.pval),
            "pval_ci": (float(self.pval_ci[0]), float(self.pval_ci[1])),
            "pval_se": self.pval_se,
            "reps": int(self.reps),
            "c": int(self.c),
            "alternative": self.alternative,
            "scheme": self.scheme,
            "statistic": self.statistic,
            "confidence_level": float(self.confidence_level),
            "ci_method": self.ci_method,
            "n_nonfinite": self.n_nonfinite,
        }

    def plot(self, *, bins: int = 30, show: bool = False) -> "Axes":
        """
        Histogram of the null distribution with the observed value marked.

        For two-sided tests the mirror value ``-observed`` is marked too, since
        draws beyond either line count as extreme. Non-finite draws are
        dropped from the histogram.

        Parameters
        ----------
        bins : int, default 30
            Histogram bins.
        show : bool, default False
            If True, call `plt.show()` before returning.

        Returns
        -------
        matplotlib.axes.Axes
        """
        import matplotlib.pyplot as plt  # type: ignore

        null = np.asarray(self.null_distribution, dtype=float)
        null = null[np.isfinite(null)]

        fig, ax = plt.subplots()
        ax.hist(null, bins=bins, density=True, alpha=0.6, label="null distribution")
        ax.axvline(
            x=self.observed,
            color="red",
            linewidth=1.5,
            label=f"observed = {_fmt_float(self.observed)}",
        )
        if self.alternative == "two-sided" and self.observed != 0.0:
            ax.axvline(x=-self.observed, color="red", linestyle="--", linewidth=1.0)

        ax.set_xlabel(self.statistic or "statistic")
        ax.set_ylabel("Density")
        ax.set_title(f"Permutation null ({self.reps} draws), p = {_fmt_float(self.pval)}")
        ax.legend(loc="best", frameon=False)

        if show:
            plt.show()

        return ax
