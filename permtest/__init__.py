"""Public interface for the permtest package.

This module exposes a stable, user-facing API:

- `permutation_test`: run an approximate permutation test.
- `PermTestResult`: container for outputs and basic presentation helpers.
- `Scheme`: the full-shuffle and rowwise-swap permutation schemes.
- `InvalidInput`, `NonFiniteStatistic`: errors raised before any draw.
- Statistic helpers: `lag1_autocorrelation`, `median_difference`, ... and
  the `register_statistic` / `get_statistic` registry.
- Config helpers: `permtest_set`, `permtest_get`, `permtest_reset`,
  `permtest_config`.
"""

from __future__ import annotations

from .ci.pvalue_ci import pvalue_ci
from .config import permtest_config, permtest_get, permtest_reset, permtest_set
from .engine.shuffle import Scheme
from .errors import InvalidInput, NonFiniteStatistic
from .results import PermTestResult
from .run import interactive_reps, permutation_test
from .statistics import (
    available_statistics,
    get_statistic,
    lag1_autocorrelation,
    mean_difference,
    median_difference,
    median_of_differences,
    pearson_correlation,
    register_statistic,
    total,
)

__all__ = [
    "permutation_test",
    "interactive_reps",
    "PermTestResult",
    "Scheme",
    "InvalidInput",
    "NonFiniteStatistic",
    "pvalue_ci",
    "lag1_autocorrelation",
    "pearson_correlation",
    "median_difference",
    "median_of_differences",
    "mean_difference",
    "total",
    "register_statistic",
    "get_statistic",
    "available_statistics",
    "permtest_set",
    "permtest_get",
    "permtest_reset",
    "permtest_config",
]

__version__ = "0.1.0"
