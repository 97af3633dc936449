"""Exception types raised by permtest.

Both subclass ValueError so callers that already catch ValueError around
validation keep working.
"""

from __future__ import annotations

__all__ = ["InvalidInput", "NonFiniteStatistic"]


class InvalidInput(ValueError):
    """Malformed or out-of-range input; raised before any permutation is drawn."""


class NonFiniteStatistic(ValueError):
    """The statistic is NaN, infinite or non-numeric on the observed sample."""
