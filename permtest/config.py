"""Configuration handling for permtest.

Defines the DEFAULTS dict that stores all global configuration values,
and the public interface for safely reading/updating them.

Public API:
- DEFAULTS                  : live dict with current global config (do not mutate directly)
- permtest_set(overrides)   : validate and update selected keys (in-place)
- permtest_get(key=None)    : read a single value or a (shallow) copy of all config
- permtest_reset(keys=None) : restore all or selected keys to import-time defaults
- permtest_config(overrides): context manager for temporary overrides (auto-reset)

Notes:
- DEFAULTS is a live dictionary used internally throughout the package.
- Prefer permtest_set / permtest_reset / permtest_config over mutating DEFAULTS directly.
- Mutations are applied in-place (identity of DEFAULTS is preserved).
"""

from __future__ import annotations

from contextlib import contextmanager
from copy import deepcopy
from typing import Any, Dict, Iterable, Mapping, Optional

__all__ = [
    "DEFAULTS",
    "permtest_set",
    "permtest_get",
    "permtest_reset",
    "permtest_config",
    "canonical_ci_method",
]

# ---------------------------------------------------------------------
# Global config used by all internal modules
# ---------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    # --- Main permutation settings ---
    "reps": 1000,  # Number of permutation draws
    "seed": 23,  # Seed for the default generator
    "confidence_level": 0.95,  # Level of the p-value interval
    "alternative": "two-sided",
    # --- CI for permutation p-value ---
    # 'wald'            : normal approximation, unclamped unless clamp_ci
    # 'clopper-pearson' : exact binomial interval
    "ci_method": "wald",
    "clamp_ci": False,
    # --- Parallelism ---
    "n_jobs": 1,  # -1 = use all available CPU cores
    # --- Draw blocks ---
    # Permuted samples are materialised this many at a time before the
    # statistic is applied to each of them.
    "perm_chunk_rows": 256,
    # --- Interactive controls ---
    # Upper bound applied by run.interactive_reps() to keep regenerate-on-click
    # responsive. Batch calls to permutation_test() are not capped.
    "max_interactive_reps": 1000,
}

_BASE_DEFAULTS: Dict[str, Any] = deepcopy(DEFAULTS)

_ALLOWED_ALTERNATIVES = {"two-sided", "left", "right"}

_CI_METHOD_ALIASES = {
    "wald": "wald",
    "normal": "wald",
    "clopper-pearson": "clopper-pearson",
    "cp": "clopper-pearson",
    "exact": "clopper-pearson",
}


def canonical_ci_method(name: str) -> str:
    """Map user-facing CI method labels onto 'wald' or 'clopper-pearson'."""
    key = str(name).strip().lower()
    if key not in _CI_METHOD_ALIASES:
        raise ValueError(
            f"ci_method must be one of {sorted(_CI_METHOD_ALIASES)} (got {name!r})"
        )
    return _CI_METHOD_ALIASES[key]


def _validate_pair(key: str, val: Any) -> None:
    """Raise ValueError if (key, val) is invalid."""
    if key not in DEFAULTS:
        raise ValueError(f"Invalid config key: '{key}'")

    if key == "reps":
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ValueError(f"reps must be a positive integer (got {val!r})")

    elif key == "seed":
        if isinstance(val, bool) or not isinstance(val, int):
            raise ValueError(f"seed must be an integer (got {val!r})")

    elif key == "confidence_level":
        try:
            ok = 0 < float(val) < 1
        except (TypeError, ValueError):
            ok = False
        if not ok:
            raise ValueError(
                f"confidence_level must be a float strictly between 0 and 1 (got {val!r})"
            )

    elif key == "alternative":
        if val not in _ALLOWED_ALTERNATIVES:
            raise ValueError(
                f"alternative must be one of {_ALLOWED_ALTERNATIVES} (got {val!r})"
            )

    elif key == "ci_method":
        canonical_ci_method(val)

    elif key == "clamp_ci":
        if not isinstance(val, bool):
            raise ValueError("clamp_ci must be True/False")

    elif key == "n_jobs":
        if isinstance(val, bool) or not isinstance(val, int):
            raise ValueError(f"n_jobs must be an integer (got {val!r})")
        if not (val == -1 or val >= 1):
            raise ValueError("n_jobs must be -1 (all cores) or a positive integer >= 1")

    elif key == "perm_chunk_rows":
        if isinstance(val, bool) or not isinstance(val, int) or val < 1:
            raise ValueError(f"perm_chunk_rows must be an integer >= 1 (got {val!r})")

    elif key == "max_interactive_reps":
        if isinstance(val, bool) or not isinstance(val, int) or val < 1:
            raise ValueError(f"max_interactive_reps must be an integer >= 1 (got {val!r})")


def permtest_set(overrides: Mapping[str, Any]) -> None:
    """
    Update the global configuration in-place (validated).

    Parameters
    ----------
    overrides : Mapping[str, Any]
        Dict-like with keys in DEFAULTS. Unknown keys are rejected.

    Raises
    ------
    ValueError
        If unknown keys or invalid values are passed.

    Notes
    -----
    - This mutates global state. Prefer `permtest_config(...)` for temporary
      overrides that automatically revert.
    """
    if not isinstance(overrides, Mapping):
        raise ValueError("overrides must be a mapping of {key: value}")

    # All-or-nothing
    for k, v in overrides.items():
        _validate_pair(k, v)

    updates = dict(overrides)
    if "ci_method" in updates:
        updates["ci_method"] = canonical_ci_method(updates["ci_method"])
    DEFAULTS.update(updates)


def permtest_get(key: Optional[str] = None) -> Any:
    """
    Read configuration values safely.

    Parameters
    ----------
    key : str or None, optional
        If None (default), returns a shallow copy of the entire config.
        If a key is provided, returns the current value for that key.

    Raises
    ------
    KeyError
        If `key` is provided and is not a valid config key.
    """
    if key is None:
        return dict(DEFAULTS)
    if key not in DEFAULTS:
        raise KeyError(f"Unknown config key: {key!r}")
    return DEFAULTS[key]


def permtest_reset(keys: Optional[Iterable[str]] = None) -> None:
    """
    Reset configuration to the import-time defaults.

    Parameters
    ----------
    keys : iterable of str or None, optional
        - None (default): reset all keys to baseline values.
        - Iterable: reset only those keys (unknown keys raise ValueError).
    """
    if keys is None:
        DEFAULTS.clear()
        DEFAULTS.update(_BASE_DEFAULTS)
        return

    to_reset = list(keys)
    for k in to_reset:
        if k not in DEFAULTS:
            raise ValueError(f"Unknown config key for reset: {k!r}")

    for k in to_reset:
        DEFAULTS[k] = _BASE_DEFAULTS[k]


@contextmanager
def permtest_config(overrides: Mapping[str, Any]):
    """
    Context manager for temporary configuration overrides.

    Example
    -------
    >>> with permtest_config({"reps": 5000, "seed": 1}):
    ...     pass
    >>> # here config is restored to previous values
    """
    prev = dict(DEFAULTS)
    try:
        permtest_set(overrides)
        yield
    finally:
        DEFAULTS.clear()
        DEFAULTS.update(prev)
