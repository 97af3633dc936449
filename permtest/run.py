"""Permutation-test engine for permtest.

This module contains the `permutation_test()` implementation used by the
public API. It coordinates:

- configuration (DEFAULTS and caller overrides),
- validation and the single evaluation of the observed statistic,
- permutation draws in blocks of `perm_chunk_rows` (sequential, or split
  across threads),
- p-value and p-value CI calculation,
- packaging results into `PermTestResult`.
"""

from __future__ import annotations

import os
import time
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .ci.pvalue_ci import pvalue_ci
from .config import DEFAULTS, canonical_ci_method
from .engine.shuffle import Scheme, iter_permuted_samples, spawn_generators
from .errors import InvalidInput
from .pvalues import Alt, count_extreme
from .results import PermTestResult
from .validation import ValidatedInputs, validate_inputs

__all__ = ["permutation_test", "interactive_reps"]


def _coerce_n_jobs(val: Any) -> int:
    """Resolve `n_jobs` to a worker count; -1 means all available cores."""
    if isinstance(val, bool) or not isinstance(val, (int, np.integer)):
        raise InvalidInput(f"Validation error: `n_jobs` must be an integer (got {val!r})")
    v = int(val)
    if v == -1:
        return max(os.cpu_count() or 1, 1)
    if v < 1:
        raise InvalidInput(
            f"Validation error: `n_jobs` must be -1 (all cores) or >= 1 (got {val!r})"
        )
    return v


def _split_blocks(reps: int, k: int) -> List[Tuple[int, int]]:
    """Split range(reps) into k contiguous (start, stop) blocks of near-equal size."""
    bounds = np.linspace(0, reps, k + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:]) if b > a]


def interactive_reps(requested: int) -> int:
    """Clip a requested permutation count to [1, DEFAULTS['max_interactive_reps']]."""
    upper = int(DEFAULTS["max_interactive_reps"])
    return int(min(max(int(requested), 1), upper))


def _draw_block(
    v: ValidatedInputs, rng: np.random.Generator, n: int, chunk_rows: int
) -> np.ndarray:
    """Evaluate the statistic on `n` fresh permutations drawn from `rng`."""
    out = np.empty(n, dtype=np.float64)
    i = 0
    for block in iter_permuted_samples(
        v.data, n, v.scheme, rng=rng, chunk_rows=chunk_rows
    ):
        for perm in block:
            out[i] = float(v.statistic(v.wrap(perm)))
            i += 1
    return out


def permutation_test(
    sample: Any,
    statistic: Union[str, Callable[[Any], float]],
    *,
    scheme: Union[str, Scheme] = Scheme.FULL_SHUFFLE,
    reps: int | None = None,
    confidence_level: float | None = None,
    alternative: Alt | None = None,
    ci_method: str | None = None,
    clamp_ci: bool | None = None,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
    n_jobs: int | None = None,
    columns: Optional[Sequence[Any]] = None,
) -> PermTestResult:
    """
    Approximate permutation test of `statistic` on `sample`.

    Parameters
    ----------
    sample :
        For ``scheme="full-shuffle"``: a 1-D sequence, array or `pd.Series`.
        For ``scheme="rowwise-swap"``: an (n, 2) array-like or a `pd.DataFrame`
        (use `columns` to pick two columns from a wider frame).
    statistic : callable or str
        Pure function of the sample returning a float, or the name of a
        registered statistic (see `permtest.statistics`). It receives
        permuted samples in the same container kind as `sample`.
    scheme : {"full-shuffle", "rowwise-swap"}
        How each permuted sample is drawn.
    reps, confidence_level, alternative, ci_method, clamp_ci, n_jobs :
        Override the corresponding `config.DEFAULTS` entries when not None.
        `n_jobs` must be -1 (all cores) or a positive integer.
    seed : int, optional
        Seed for a fresh `np.random.default_rng`. Ignored when `rng` is given.
    rng : numpy.random.Generator, optional
        Explicit randomness source. Draws consume it in a fixed order, so
        the same generator state reproduces the same result.
    columns : pair of labels, optional
        Columns of a DataFrame forming the paired table.

    Returns
    -------
    PermTestResult

    Raises
    ------
    InvalidInput
        Empty sample, ``reps < 1``, confidence level outside (0, 1), or any
        other malformed argument. Raised before any permutation is drawn.
    NonFiniteStatistic
        If the statistic is NaN or infinite on the original sample.

    Notes
    -----
    Non-finite statistic values on *permuted* samples are kept in the null
    distribution. NaN draws never count as extreme. Infinite draws are
    compared like any other value, so `+inf` is extreme for "right" and
    "two-sided" and `-inf` for "left" and "two-sided". A RuntimeWarning
    reports the NaN and infinite counts.

    With ``n_jobs > 1`` the draws are split into contiguous blocks, each
    with its own generator spawned from the parent, so results are
    reproducible for a fixed seed *and* a fixed `n_jobs`, but differ from
    the sequential stream.
    """
    t_start = time.perf_counter()

    # 0) Controls: pull from DEFAULTS, allow explicit overrides
    cfg = DEFAULTS
    reps = cfg["reps"] if reps is None else reps
    confidence_level = (
        float(cfg["confidence_level"]) if confidence_level is None else confidence_level
    )
    alternative = str(cfg["alternative"]) if alternative is None else alternative
    ci_method = canonical_ci_method(cfg["ci_method"]) if ci_method is None else ci_method
    clamp_ci = bool(cfg["clamp_ci"]) if clamp_ci is None else bool(clamp_ci)
    n_jobs = _coerce_n_jobs(cfg["n_jobs"] if n_jobs is None else n_jobs)
    chunk_rows = int(cfg["perm_chunk_rows"])

    # 1) Validate & evaluate observed statistic (fails atomically)
    v = validate_inputs(
        sample,
        statistic=statistic,
        scheme=scheme,
        reps=reps,
        confidence_level=confidence_level,
        alternative=alternative,
        ci_method=ci_method,
        columns=columns,
    )
    reps = v.reps

    if rng is not None:
        if not isinstance(rng, np.random.Generator):
            raise InvalidInput("Validation error: `rng` must be a numpy.random.Generator")
        seed_used: Optional[int] = None
    else:
        seed_used = int(cfg["seed"]) if seed is None else int(seed)
        rng = np.random.default_rng(seed_used)

    # 2) Null distribution
    n_workers = min(n_jobs, reps)
    if n_workers == 1:
        null = _draw_block(v, rng, reps, chunk_rows)
    else:
        null = np.empty(reps, dtype=np.float64)
        blocks = _split_blocks(reps, n_workers)
        gens = spawn_generators(rng, len(blocks))

        def _work(args: Tuple[Tuple[int, int], np.random.Generator]) -> Tuple[int, np.ndarray]:
            (start, stop), g = args
            return start, _draw_block(v, g, stop - start, chunk_rows)

        with ThreadPoolExecutor(max_workers=n_workers) as ex:
            for start, vals in ex.map(_work, zip(blocks, gens)):
                null[start : start + vals.size] = vals

    warnings_list = list(v.warnings)
    n_nan = int(np.count_nonzero(np.isnan(null)))
    n_inf = int(np.count_nonzero(np.isinf(null)))
    if n_nan or n_inf:
        msg = (
            f"{n_nan + n_inf} of {reps} permuted statistics are non-finite "
            f"({n_nan} NaN, {n_inf} infinite); they are kept in the null "
            "distribution. NaN draws never count as extreme; infinite draws "
            "count wherever the tail reaches them."
        )
        warnings_list.append(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    # 3) P-value + CI for p
    c = count_extreme(null, v.observed, v.alternative)  # type: ignore[arg-type]
    p_val = c / reps
    p_ci = pvalue_ci(
        c,
        reps,
        confidence_level=v.confidence_level,
        method=v.ci_method,
        clamp=clamp_ci,
    )

    # 4) Package results
    settings: Dict[str, object] = {
        "reps": reps,
        "seed": seed_used,
        "confidence_level": v.confidence_level,
        "alternative": v.alternative,
        "ci_method": v.ci_method,
        "clamp_ci": clamp_ci,
        "n_jobs": n_workers,
        "perm_chunk_rows": chunk_rows,
        "scheme": v.scheme.value,
        "n_obs": v.n_obs,
    }

    null.setflags(write=False)
    return PermTestResult(
        observed=v.observed,
        null_distribution=null,
        pval=float(p_val),
        pval_ci=p_ci,
        reps=reps,
        c=c,
        alternative=v.alternative,
        scheme=v.scheme.value,
        statistic=v.statistic_name,
        confidence_level=v.confidence_level,
        ci_method=v.ci_method,
        settings=settings,
        warnings=warnings_list,
        runtime=time.perf_counter() - t_start,
    )
