# tests/test_quantiles.py
import numpy as np
import pytest
import xarray as xr

from xflplot.pivot import long_to_wide
from xflplot.quantiles import iteration_worms, quantile_label, to_long
from xflplot.schema import ColumnRole


def test_quantile_label():
    assert quantile_label(0.1) == "10%"
    assert quantile_label(0.5) == "50%"
    assert quantile_label(0.025) == "2.5%"


def test_long_rows_ordered_by_coordinate_then_probability(make_quant):
    da = make_quant(n_years=2, n_iter=10)
    long = to_long(da, probs=(0.1, 0.5, 0.9))
    frame = long.frame
    assert long.labels == ("10%", "50%", "90%")
    assert frame["prob"].tolist() == ["10%", "50%", "90%"] * 2
    assert frame["year"].tolist() == [2000] * 3 + [2001] * 3
    assert long.schema.first(ColumnRole.LABEL).name == "prob"
    assert long.schema.first(ColumnRole.VALUE).name == "data"


def test_quantiles_are_monotone_in_probability(make_quant):
    da = make_quant(n_years=4, n_iter=30)
    wide = long_to_wide(to_long(da))
    values = wide.frame[list(wide.labels)].to_numpy()
    assert np.all(np.diff(values, axis=1) >= 0)


def test_single_iteration_keeps_raw_values(make_quant):
    da = make_quant(n_years=6, n_iter=1)
    wide = long_to_wide(to_long(da))
    assert [c.name for c in wide.schema.values()] == ["data"]
    assert wide.central == "data"
    assert not wide.has_quantiles
    np.testing.assert_allclose(wide.frame["data"].to_numpy(), da.values.ravel())


def test_single_iteration_without_collapse_gives_flat_quantiles(make_quant):
    da = make_quant(n_years=3, n_iter=1)
    wide = long_to_wide(to_long(da, probs=(0.1, 0.5, 0.9), collapse_single=False))
    assert wide.labels == ("10%", "50%", "90%")
    for label in wide.labels:
        np.testing.assert_allclose(wide.frame[label].to_numpy(), da.values.ravel())


def test_quantiles_converge_on_uniform_ensemble():
    n = 100
    base = (np.arange(n) + 0.5) / n
    rng = np.random.default_rng(1)
    data = np.stack([rng.permutation(base) for _ in range(3)])
    da = xr.DataArray(
        data,
        dims=("year", "iter"),
        coords={"year": [2000, 2001, 2002], "iter": [str(i + 1) for i in range(n)]},
    )
    wide = long_to_wide(to_long(da, probs=(0.25, 0.5, 0.75)))
    for label, p in zip(wide.labels, (0.25, 0.5, 0.75)):
        np.testing.assert_allclose(wide.frame[label].to_numpy(), p, atol=0.01)


def test_quantile_type_changes_statistic():
    da = xr.DataArray(
        [[1.0, 2.0, 3.0, 4.0]],
        dims=("year", "iter"),
        coords={"year": [2000], "iter": ["1", "2", "3", "4"]},
    )
    linear = long_to_wide(to_long(da, probs=(0.5,), method=7))
    lower = long_to_wide(to_long(da, probs=(0.5,), method=1))
    assert linear.frame["50%"].iloc[0] == pytest.approx(2.5)
    assert lower.frame["50%"].iloc[0] == pytest.approx(2.0)


def test_missing_policy(make_quant):
    da = make_quant(n_years=2, n_iter=10)
    da[0, 0, 0, 0, 0, 3] = np.nan

    excluded = long_to_wide(to_long(da, missing="exclude"))
    assert excluded.frame["50%"].notna().all()

    propagated = long_to_wide(to_long(da, missing="propagate"))
    assert propagated.frame["50%"].isna().tolist() == [True, False]


def test_invalid_probs_rejected_before_computing(make_quant):
    da = make_quant(n_iter=10)
    with pytest.raises(ValueError, match="odd length"):
        to_long(da, probs=(0.25, 0.75))
    with pytest.raises(ValueError, match="missing-value policy"):
        to_long(da, missing="drop")


def test_seasonal_table_has_dates(make_quant):
    da = make_quant(n_years=2, n_seasons=4)
    frame = long_to_wide(to_long(da)).frame
    assert list(frame.columns[:6]) == ["quant", "year", "unit", "season", "area", "date"]
    assert list(frame["date"].dt.month[:4]) == [1, 4, 7, 10]


def test_iteration_worms_by_position_and_label(make_quant):
    da = make_quant(n_years=3, n_iter=5)

    worms = iteration_worms(da, [1, 3], value_name="50%")
    assert sorted(worms["iter"].unique()) == ["1", "3"]
    assert "50%" in worms
    assert list(worms.columns).index("iter") == list(worms.columns).index("date") + 1
    assert len(worms) == 6

    by_label = iteration_worms(da, ["2"])
    np.testing.assert_allclose(
        by_label["data"].to_numpy(), da.sel(iter="2").values.ravel()
    )

    with pytest.raises(ValueError, match="out of range"):
        iteration_worms(da, [6])


def test_iteration_worms_with_float_labels():
    da = xr.DataArray(
        np.arange(6, dtype=float).reshape(2, 3),
        dims=("year", "iter"),
        coords={"year": [2000, 2001], "iter": [0.5, 1.5, 2.5]},
    )
    worms = iteration_worms(da, [1.5])
    assert worms["iter"].unique().tolist() == ["1.5"]
    np.testing.assert_allclose(worms["data"].to_numpy(), [1.0, 4.0])
