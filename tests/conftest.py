"""
Global pytest fixtures for xflplot unit tests.
Provide a factory for small labelled arrays (make_quant) and ready stocks.
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
import xarray as xr

from xflplot.stock import Stock

DIMS = ("quant", "year", "unit", "season", "area", "iter")


def _make_quant(
    n_years: int = 5,
    n_iter: int = 1,
    n_seasons: int = 1,
    units=("unique",),
    areas=("unique",),
    quant=("all",),
    start_year: int = 2000,
    name: str = "catch",
    seed: int = 0,
) -> xr.DataArray:
    rng = np.random.default_rng(seed)
    shape = (len(quant), n_years, len(units), n_seasons, len(areas), n_iter)
    seasons = ["all"] if n_seasons == 1 else [str(s + 1) for s in range(n_seasons)]
    coords = {
        "quant": list(quant),
        "year": np.arange(start_year, start_year + n_years),
        "unit": list(units),
        "season": seasons,
        "area": list(areas),
        "iter": [str(i + 1) for i in range(n_iter)],
    }
    data = rng.lognormal(mean=3.0, sigma=0.2, size=shape)
    return xr.DataArray(data, dims=DIMS, coords=coords, name=name)


@pytest.fixture
def make_quant():
    """Return a factory building a six-dimensional labelled array."""
    return _make_quant


@pytest.fixture
def make_stock():
    """Return a factory building a Stock with Rec, SSB, Catch and F."""

    def factory(name: str = "stock", n_iter: int = 1, units=("unique",), seed: int = 0):
        metrics = {
            key: _make_quant(n_iter=n_iter, units=units, name=key, seed=seed + k)
            for k, key in enumerate(("Rec", "SSB", "Catch", "F"))
        }
        return Stock(metrics, name=name)

    return factory
