# tests/test_validation.py
"""
Tests for permtest.validation.validate_inputs

Run with:
    pytest -q tests/test_validation.py
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from permtest.engine.shuffle import Scheme
from permtest.errors import InvalidInput, NonFiniteStatistic
from permtest.statistics import lag1_autocorrelation, median_difference, total
from permtest.validation import SampleWrapper, validate_inputs


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #
def _brothers_like() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "family": np.arange(1, 7),
            "older": [40.0, 52.0, 38.0, 61.0, 45.0, 50.0],
            "younger": [35.0, 50.0, 39.0, 55.0, 41.0, 47.0],
        }
    )


# ------------------------------------------------------------------ #
# 1. Happy paths
# ------------------------------------------------------------------ #
def test_series_from_list():
    v = validate_inputs([1, 2, 3, 4, 5], statistic=total)
    assert v.scheme is Scheme.FULL_SHUFFLE
    assert v.data.dtype == np.float64 and v.data.shape == (5,)
    assert v.observed == 15.0
    assert v.wrap.kind == "array"
    assert v.n_obs == 5


def test_series_from_pandas_keeps_index_and_name():
    s = pd.Series([1.0, 3.0, 2.0, 5.0], index=[10, 11, 12, 13], name="gpa")
    v = validate_inputs(s, statistic=lag1_autocorrelation)
    rebuilt = v.wrap(v.data)
    assert isinstance(rebuilt, pd.Series)
    assert list(rebuilt.index) == [10, 11, 12, 13]
    assert rebuilt.name == "gpa"


def test_single_column_frame_is_treated_as_series():
    df = pd.DataFrame({"x": [1.0, 2.0, 4.0, 3.0]})
    v = validate_inputs(df, statistic="total")
    assert v.data.shape == (4,)
    assert v.statistic_name == "total"


def test_paired_frame_with_columns_selection():
    df = _brothers_like()
    v = validate_inputs(
        df, statistic=median_difference, scheme="rowwise-swap", columns=("older", "younger")
    )
    assert v.scheme is Scheme.ROWWISE_SWAP
    assert v.data.shape == (6, 2)
    rebuilt = v.wrap(v.data)
    assert isinstance(rebuilt, pd.DataFrame)
    assert list(rebuilt.columns) == ["older", "younger"]
    assert v.observed == median_difference(df[["older", "younger"]])


def test_paired_frame_with_exactly_two_columns():
    df = _brothers_like()[["older", "younger"]]
    v = validate_inputs(df, statistic=median_difference, scheme="paired")
    assert v.data.shape == (6, 2)


def test_paired_array():
    v = validate_inputs(
        [[10, 2], [10, 2]], statistic=median_difference, scheme=Scheme.ROWWISE_SWAP
    )
    assert v.observed == 8.0
    assert v.wrap == SampleWrapper("array")


def test_ci_method_alias_canonicalised():
    v = validate_inputs([1.0, 2.0, 3.0], statistic=total, ci_method="cp")
    assert v.ci_method == "clopper-pearson"


def test_numpy_integer_reps_accepted():
    v = validate_inputs([1.0, 2.0, 3.0], statistic=total, reps=np.int64(20))
    assert v.reps == 20 and isinstance(v.reps, int)


def test_caller_data_not_mutated():
    x = np.array([3.0, 1.0, 2.0])
    snapshot = x.copy()

    def mutating(a):
        a[0] = 99.0
        return float(np.sum(a))

    validate_inputs(x, statistic=mutating)
    assert np.array_equal(x, snapshot)


def test_single_observation_warns():
    with pytest.warns(RuntimeWarning, match="single observation"):
        v = validate_inputs([4.0], statistic=total)
    assert v.warnings


# ------------------------------------------------------------------ #
# 2. InvalidInput
# ------------------------------------------------------------------ #
@pytest.mark.parametrize("empty", [[], np.array([]), pd.Series([], dtype=float)])
def test_empty_series_rejected(empty):
    with pytest.raises(InvalidInput, match="empty"):
        validate_inputs(empty, statistic=total)


def test_empty_paired_table_rejected():
    df = pd.DataFrame({"a": pd.Series([], dtype=float), "b": pd.Series([], dtype=float)})
    with pytest.raises(InvalidInput, match="empty"):
        validate_inputs(df, statistic=median_difference, scheme="rowwise-swap")


@pytest.mark.parametrize("bad_reps", [0, -3, 2.5, "10", True])
def test_bad_reps_rejected(bad_reps):
    with pytest.raises(InvalidInput, match="reps"):
        validate_inputs([1.0, 2.0], statistic=total, reps=bad_reps)


@pytest.mark.parametrize("bad_level", [0.0, 1.0, -0.5, 1.5, float("nan"), "high"])
def test_bad_confidence_level_rejected(bad_level):
    with pytest.raises(InvalidInput, match="confidence_level"):
        validate_inputs([1.0, 2.0], statistic=total, confidence_level=bad_level)


def test_bad_alternative_rejected():
    with pytest.raises(InvalidInput, match="alternative"):
        validate_inputs([1.0, 2.0], statistic=total, alternative="greater")


def test_bad_ci_method_rejected():
    with pytest.raises(InvalidInput, match="ci_method"):
        validate_inputs([1.0, 2.0], statistic=total, ci_method="bootstrap")


def test_unknown_scheme_rejected():
    with pytest.raises(InvalidInput, match="scheme"):
        validate_inputs([1.0, 2.0], statistic=total, scheme="block")


def test_non_callable_statistic_rejected():
    with pytest.raises(InvalidInput, match="callable"):
        validate_inputs([1.0, 2.0], statistic=42)  # type: ignore[arg-type]


def test_unknown_statistic_name_rejected():
    with pytest.raises(InvalidInput, match="unknown statistic"):
        validate_inputs([1.0, 2.0], statistic="skewness")


def test_missing_values_rejected():
    with pytest.raises(InvalidInput, match="missing"):
        validate_inputs([1.0, np.nan, 3.0], statistic=total)
    df = _brothers_like()
    df.loc[2, "younger"] = np.nan
    with pytest.raises(InvalidInput, match="missing"):
        validate_inputs(df, statistic=median_difference, scheme="swap", columns=["older", "younger"])


def test_non_numeric_series_rejected():
    with pytest.raises(InvalidInput, match="numeric"):
        validate_inputs(pd.Series(["a", "b", "c"]), statistic=total)
    with pytest.raises(InvalidInput, match="numeric"):
        validate_inputs(["a", "b"], statistic=total)


def test_full_shuffle_rejects_2d_input():
    with pytest.raises(InvalidInput, match="1-D"):
        validate_inputs(np.zeros((3, 2)), statistic=total)


def test_full_shuffle_rejects_columns_argument():
    with pytest.raises(InvalidInput, match="columns"):
        validate_inputs([1.0, 2.0], statistic=total, columns=("a", "b"))


def test_paired_requires_two_columns():
    df = _brothers_like()
    with pytest.raises(InvalidInput, match="exactly two columns"):
        validate_inputs(df, statistic=median_difference, scheme="rowwise-swap")
    with pytest.raises(InvalidInput, match=r"\(n, 2\)"):
        validate_inputs(np.zeros((4, 3)), statistic=median_difference, scheme="rowwise-swap")


def test_paired_columns_must_exist_and_be_two():
    df = _brothers_like()
    with pytest.raises(InvalidInput, match="not in dataframe"):
        validate_inputs(
            df, statistic=median_difference, scheme="rowwise-swap", columns=("older", "middle")
        )
    with pytest.raises(InvalidInput, match="exactly two"):
        validate_inputs(
            df, statistic=median_difference, scheme="rowwise-swap", columns=("older",)
        )


def test_paired_columns_only_with_dataframe():
    with pytest.raises(InvalidInput, match="DataFrame"):
        validate_inputs(
            [[1.0, 2.0]], statistic=median_difference, scheme="rowwise-swap", columns=(0, 1)
        )


def test_statistic_error_on_original_wrapped():
    def broken(_):
        raise ZeroDivisionError("nope")

    with pytest.raises(InvalidInput, match="statistic raised an error"):
        validate_inputs([1.0, 2.0], statistic=broken)


# ------------------------------------------------------------------ #
# 3. NonFiniteStatistic
# ------------------------------------------------------------------ #
def test_nan_statistic_on_observed_rejected():
    # autocorrelation is undefined for a constant series
    with pytest.raises(NonFiniteStatistic):
        validate_inputs([2.0, 2.0, 2.0, 2.0], statistic=lag1_autocorrelation)


def test_infinite_statistic_on_observed_rejected():
    with pytest.raises(NonFiniteStatistic):
        validate_inputs([1.0, 2.0], statistic=lambda x: float("inf"))


@pytest.mark.parametrize("bad", ["3.0", None, [1.0, 2.0], True])
def test_non_numeric_statistic_rejected(bad):
    with pytest.raises(NonFiniteStatistic, match="numeric scalar"):
        validate_inputs([1.0, 2.0], statistic=lambda x: bad)


def test_zero_dim_array_statistic_accepted():
    v = validate_inputs([1.0, 2.0], statistic=lambda x: np.sum(x, keepdims=True))
    assert v.observed == 3.0
