"""
Permutation schemes for the two supported sample designs.

Implements the full shuffle of an ordered series and the within-row swap
of a paired two-column table. Upstream validation handles types and
missing-value rules; this module focuses on correct and deterministic
resampling.

Design
------
- Two schemes: full-shuffle (1-D series) and rowwise-swap ((n, 2) table).
- Every draw returns a fresh array; inputs are never modified in place.
- All draws consume a caller-supplied `np.random.Generator`; a fixed seed
  and a fixed draw order reproduce the same sequence.

Invariants
----------
- full-shuffle preserves the multiset of values.
- rowwise-swap preserves the multiset of values within each row; rows are
  never exchanged with one another.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Optional, Union

import numpy as np

from ..errors import InvalidInput

__all__ = [
    "Scheme",
    "canonical_scheme",
    "full_shuffle",
    "rowwise_swap",
    "permute_sample",
    "generate_permuted_samples",
    "iter_permuted_samples",
    "spawn_generators",
]


class Scheme(str, Enum):
    """Permutation scheme identifiers."""

    FULL_SHUFFLE = "full-shuffle"
    ROWWISE_SWAP = "rowwise-swap"


_SCHEME_ALIASES = {
    "full-shuffle": Scheme.FULL_SHUFFLE,
    "full_shuffle": Scheme.FULL_SHUFFLE,
    "shuffle": Scheme.FULL_SHUFFLE,
    "full": Scheme.FULL_SHUFFLE,
    "rowwise-swap": Scheme.ROWWISE_SWAP,
    "rowwise_swap": Scheme.ROWWISE_SWAP,
    "swap": Scheme.ROWWISE_SWAP,
    "paired": Scheme.ROWWISE_SWAP,
}


def canonical_scheme(scheme: Union[str, Scheme]) -> Scheme:
    """Normalise a scheme label (or enum member) to a `Scheme`."""
    if isinstance(scheme, Scheme):
        return scheme
    key = str(scheme).strip().lower()
    if key not in _SCHEME_ALIASES:
        raise InvalidInput(
            f"Validation error: unknown permutation scheme {scheme!r}; "
            f"expected one of {[s.value for s in Scheme]}"
        )
    return _SCHEME_ALIASES[key]


# ------------------------------------------------------------------ #
# Full shuffle
# ------------------------------------------------------------------ #


def full_shuffle(x: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Uniformly random reordering of a 1-D array (Fisher–Yates via NumPy)."""
    if x.ndim != 1:
        raise InvalidInput("full_shuffle: expected a 1-D array.")
    return rng.permutation(x)


# ------------------------------------------------------------------ #
# Row-wise swap
# ------------------------------------------------------------------ #


def rowwise_swap(pairs: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """
    Swap the two columns of each row independently with probability 0.5.

    Exchangeability holds within a pair, not across pairs, so row positions
    are left untouched.
    """
    if pairs.ndim != 2 or pairs.shape[1] != 2:
        raise InvalidInput("rowwise_swap: expected an (n, 2) array.")
    flip = rng.random(pairs.shape[0]) < 0.5
    out = pairs.copy()
    out[flip] = pairs[flip, ::-1]
    return out


# ------------------------------------------------------------------ #
# Dispatcher
# ------------------------------------------------------------------ #


def permute_sample(
    data: np.ndarray,
    scheme: Union[str, Scheme],
    *,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Return one permuted copy of `data` according to `scheme`."""
    if rng is None:
        rng = np.random.default_rng()

    sch = canonical_scheme(scheme)
    if sch is Scheme.FULL_SHUFFLE:
        return full_shuffle(data, rng)
    if sch is Scheme.ROWWISE_SWAP:
        return rowwise_swap(data, rng)

    raise InvalidInput(f"Unhandled permutation scheme: {sch!r}")


# ------------------------------------------------------------------ #
# Stacked draws
# ------------------------------------------------------------------ #


def generate_permuted_samples(
    data: np.ndarray,
    reps: int,
    scheme: Union[str, Scheme],
    *,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Return a (reps, *data.shape) stack of independently permuted copies.

    Draws are taken sequentially from the same generator, so the stack is
    reproducible for a fixed seed.
    """
    if rng is None:
        rng = np.random.default_rng()

    if reps < 0:
        raise InvalidInput("generate_permuted_samples: `reps` must be non-negative.")

    out = np.empty((reps,) + data.shape, dtype=data.dtype)
    for r in range(reps):
        out[r] = permute_sample(data, scheme, rng=rng)
    return out


def iter_permuted_samples(
    data: np.ndarray,
    reps: int,
    scheme: Union[str, Scheme],
    *,
    rng: Optional[np.random.Generator] = None,
    chunk_rows: Optional[int] = None,
) -> Iterator[np.ndarray]:
    """
    Yield successive blocks of permuted copies of `data`.

    Produces blocks of at most `chunk_rows` draws until `reps` draws have
    been generated. The concatenated stream matches
    `generate_permuted_samples` for the same generator state.
    """
    if rng is None:
        rng = np.random.default_rng()

    if reps < 0:
        raise InvalidInput("iter_permuted_samples: `reps` must be non-negative.")
    if chunk_rows is None or chunk_rows >= reps:
        yield generate_permuted_samples(data, reps, scheme, rng=rng)
        return
    if chunk_rows < 1:
        raise InvalidInput("iter_permuted_samples: `chunk_rows` must be >= 1.")

    produced = 0
    while produced < reps:
        m = min(chunk_rows, reps - produced)
        yield generate_permuted_samples(data, m, scheme, rng=rng)
        produced += m


# ------------------------------------------------------------------ #
# Parallel sub-streams
# ------------------------------------------------------------------ #


def spawn_generators(
    seed_or_rng: Union[int, np.random.SeedSequence, np.random.Generator], k: int
) -> List[np.random.Generator]:
    """
    Derive `k` independent generators from a seed, `SeedSequence` or `Generator`.

    An int seeds a fresh `SeedSequence`; a `SeedSequence` is spawned directly.
    For a `Generator`, a single entropy value is drawn from it and expanded
    with `SeedSequence.spawn`, so the children depend only on its state.
    """
    if k < 1:
        raise InvalidInput("spawn_generators: `k` must be >= 1.")
    if isinstance(seed_or_rng, np.random.Generator):
        ss = np.random.SeedSequence(int(seed_or_rng.integers(0, 2**63 - 1)))
    elif isinstance(seed_or_rng, np.random.SeedSequence):
        ss = seed_or_rng
    elif isinstance(seed_or_rng, (int, np.integer)) and not isinstance(seed_or_rng, bool):
        ss = np.random.SeedSequence(int(seed_or_rng))
    else:
        raise InvalidInput(
            "spawn_generators: expected an int seed, a SeedSequence or a Generator "
            f"(got {type(seed_or_rng).__name__})"
        )
    return [np.random.default_rng(c) for c in ss.spawn(k)]
