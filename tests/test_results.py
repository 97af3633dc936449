# tests/test_results.py
import math

import numpy as np
import pytest

from permtest.results import PermTestResult


def make_res(
    *,
    observed: float = 0.4321,
    pval: float = 0.032,
    pval_ci: tuple[float, float] = (0.021, 0.043),
    reps: int = 1000,
    c: int = 32,
    alternative: str = "two-sided",
    null: np.ndarray | None = None,
):
    if null is None:
        null = np.linspace(-0.5, 0.5, reps)
    return PermTestResult(
        observed=observed,
        null_distribution=null,
        pval=pval,
        pval_ci=pval_ci,
        reps=reps,
        c=c,
        alternative=alternative,
        scheme="full-shuffle",
        statistic="lag1_autocorrelation",
        confidence_level=0.95,
        ci_method="wald",
        settings={"seed": 123, "n_jobs": 1, "clamp_ci": False},
    )


def test_repr_and_str_are_short_and_deterministic():
    r = make_res()
    assert repr(r) == "PermTestResult(obs=0.4321, p=0.0320, alt='two-sided', reps=1000)"
    assert str(r).startswith("Permutation test: p=0.0320 (two-sided)")


def test_summary_includes_sections_and_values():
    r = make_res()
    s = r.summary(print_out=False)
    for section in ("Permutation Test Result", "Statistic", "Permutation test", "Settings", "Interpretation"):
        assert section in s
    assert "lag1_autocorrelation" in s
    assert "0.4321" in s
    assert "[0.0210, 0.0430]" in s
    assert "32 / 1000" in s
    assert "seed:                   123" in s
    assert "Non-finite draws" not in s


def test_summary_prints_when_requested(capsys):
    r = make_res()
    out = r.summary()
    captured = capsys.readouterr()
    assert out in captured.out


def test_summary_reports_non_finite_draws():
    null = np.array([0.1, np.nan, -0.2, np.inf])
    r = make_res(reps=4, c=1, pval=0.25, pval_ci=(-0.17, 0.67), null=null)
    assert r.n_nonfinite == 2
    assert "Non-finite draws:       2" in r.summary(print_out=False)


def test_explain_significance_wording():
    sig = make_res(pval=0.01)
    not_sig = make_res(pval=0.2)
    assert "**statistically significant**" in sig.explain()
    assert "**not statistically significant**" in not_sig.explain()
    # explicit alpha overrides the level-derived one
    assert "**statistically significant**" in not_sig.explain(alpha=0.25)


@pytest.mark.parametrize(
    "alt,phrase",
    [("two-sided", "either direction"), ("left", "negative"), ("right", "positive")],
)
def test_explain_direction_phrase(alt, phrase):
    assert phrase in make_res(alternative=alt).explain()


def test_derived_properties():
    r = make_res()
    assert r.confidence_interval == r.pval_ci
    assert math.isclose(r.pval_se, math.sqrt(0.032 * 0.968 / 1000))


def test_to_dict_contains_plain_scalars():
    d = make_res().to_dict()
    assert d["observed"] == 0.4321
    assert d["pval_ci"] == (0.021, 0.043)
    assert d["reps"] == 1000 and d["c"] == 32
    assert d["scheme"] == "full-shuffle"
    assert "null_distribution" not in d


def test_plot_returns_axes_with_observed_lines():
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from matplotlib.axes import Axes

    r = make_res(null=np.append(np.linspace(-0.5, 0.5, 999), np.nan))
    ax = r.plot(bins=20)
    assert isinstance(ax, Axes)
    # observed and mirrored observed for two-sided
    assert len(ax.lines) == 2
    assert "p = 0.0320" in ax.get_title()
    plt.close(ax.figure)


def test_plot_one_sided_marks_only_observed():
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    ax = make_res(alternative="right").plot()
    assert len(ax.lines) == 1
    plt.close(ax.figure)


def test_pval_se_matches_ci_module():
    from permtest.ci.pvalue_ci import pvalue_se

    assert make_res().pval_se == pvalue_se(32, 1000)
    assert make_res(c=0, pval=0.0).pval_se == 0.0
