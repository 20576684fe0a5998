# tests/test_options.py
import pytest

from xflplot.options import (
    DEFAULT_PROBS,
    QuantileOptions,
    quantile_method,
    validate_probs,
)


def test_validate_probs_returns_floats():
    assert validate_probs([0.1, 0.5, 0.9]) == (0.1, 0.5, 0.9)
    assert validate_probs(0.5) == (0.5,)


@pytest.mark.parametrize(
    "probs, match",
    [
        ((), "at least one"),
        ((0.25, 0.75), "odd length"),
        ((0.9, 0.5, 0.1), "sorted"),
        ((0.1, 0.1, 0.9), "sorted"),
        ((0.1, 0.5, 1.5), r"within \[0, 1\]"),
    ],
)
def test_validate_probs_rejects(probs, match):
    with pytest.raises(ValueError, match=match):
        validate_probs(probs)


def test_quantile_method_accepts_types_and_names():
    assert quantile_method(7) == "linear"
    assert quantile_method("type 1") == "inverted_cdf"
    assert quantile_method("8") == "median_unbiased"
    assert quantile_method("Hazen") == "hazen"


@pytest.mark.parametrize("rule", [0, 10, True, "median", "type x"])
def test_quantile_method_rejects(rule):
    with pytest.raises(ValueError):
        quantile_method(rule)


def test_post_init_normalization():
    opts = QuantileOptions(missing="PROPAGATE", type="type 5", iters=3)
    assert opts.probs == DEFAULT_PROBS
    assert opts.missing == "propagate"
    assert opts.skipna is False
    assert opts.method == "hazen"
    assert opts.iters == [3]


def test_post_init_rejects_bad_values():
    with pytest.raises(ValueError, match="odd length"):
        QuantileOptions(probs=(0.1, 0.9))
    with pytest.raises(ValueError, match="missing-value policy"):
        QuantileOptions(missing="drop")


def test_from_kwargs_keeps_unknown_in_extra():
    opts = QuantileOptions.from_kwargs(probs=(0.05, 0.5, 0.95), colour="red")
    assert opts.probs == (0.05, 0.5, 0.95)
    assert opts.extra == {"colour": "red"}
