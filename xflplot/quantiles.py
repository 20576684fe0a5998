"""Order statistics over the iteration axis, in long format.

Each labelled array is normalized with :func:`xflplot.labeled.as_labeled`,
reduced over ``iter`` with :meth:`xarray.DataArray.quantile` and flattened to a
:class:`~xflplot.schema.LongTable` with one row per coordinate and quantile.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np
import pandas as pd
import xarray as xr

from .labeled import STANDARD_DIMS, as_labeled, date_column, n_iter
from .options import DEFAULT_PROBS, quantile_method, validate_probs
from .schema import (
    LABEL_COLUMN,
    VALUE_COLUMN,
    Column,
    ColumnRole,
    LongTable,
    TableSchema,
)

logger = logging.getLogger(__name__)

_DIM_ROLES = {
    "year": ColumnRole.YEAR,
    "unit": ColumnRole.UNIT,
    "season": ColumnRole.SEASON,
    "area": ColumnRole.AREA,
}


def quantile_label(p: float) -> str:
    """Format a probability as a percentage label: 0.1 -> '10%', 0.025 -> '2.5%'."""
    return f"{p * 100:g}%"


def _coordinate_columns(qdim: str) -> list[Column]:
    cols = [Column(qdim, ColumnRole.QUANT)]
    for dim in STANDARD_DIMS[:-1]:
        cols.append(Column(dim, _DIM_ROLES[dim]))
    cols.append(Column("date", ColumnRole.DATE))
    return cols


def _flatten(da: xr.DataArray, name: str, season_levels: Sequence[Any]) -> pd.DataFrame:
    """DataArray -> row-major DataFrame with a ``date`` column after ``area``."""
    frame = da.reset_coords(drop=True).to_dataframe(name=name).reset_index()
    dates = date_column(frame["year"], frame["season"], season_levels)
    frame.insert(frame.columns.get_loc("area") + 1, "date", dates)
    return frame


def to_long(
    da: xr.DataArray,
    probs: Sequence[float] = DEFAULT_PROBS,
    method: int | str = 7,
    missing: str = "exclude",
    collapse_single: bool = True,
) -> LongTable:
    """
    Compute quantiles of *da* along ``iter`` and return them in long format.

    Parameters
    ----------
    da : xr.DataArray
        Labelled array; normalized with :func:`as_labeled` first.
    probs : sequence of float
        Odd-length, strictly increasing probabilities in [0, 1].
    method : int or str
        Quantile type 1-9 (default 7) or its numpy method name.
    missing : {"exclude", "propagate"}
        Drop NaN values from each statistic, or let any NaN along ``iter``
        produce a NaN statistic.
    collapse_single : bool
        If True and ``iter`` has length one, skip the statistics and keep the
        raw values under the ``"data"`` column.

    Returns
    -------
    LongTable
        Rows ordered by coordinate, then by probability.

    Raises
    ------
    ValueError
        If *probs*, *method* or *missing* are invalid. Probabilities are
        checked before anything is computed.
    """
    probs = validate_probs(probs)
    method_name = quantile_method(method)
    if missing not in ("exclude", "propagate"):
        raise ValueError(
            f"Unknown missing-value policy '{missing}'. Expected 'exclude' or 'propagate'"
        )

    lab = as_labeled(da)
    qdim = str(lab.dims[0])
    season_levels = list(lab["season"].values)
    coords = _coordinate_columns(qdim)

    if collapse_single and n_iter(lab) == 1:
        logger.debug("'%s' has a single iteration, using raw values", da.name)
        frame = _flatten(lab.isel(iter=0, drop=True), VALUE_COLUMN, season_levels)
        schema = TableSchema(tuple(coords + [Column(VALUE_COLUMN, ColumnRole.VALUE)]))
        return LongTable(frame=frame, schema=schema)

    logger.debug(
        "quantiles %s of '%s' over %d iterations (method=%s, missing=%s)",
        probs,
        da.name,
        n_iter(lab),
        method_name,
        missing,
    )
    stats = lab.quantile(
        list(probs), dim="iter", method=method_name, skipna=(missing == "exclude")
    )
    labels = tuple(quantile_label(p) for p in probs)
    stats = (
        stats.transpose(qdim, *STANDARD_DIMS[:-1], "quantile")
        .assign_coords(quantile=list(labels))
        .rename(quantile=LABEL_COLUMN)
    )
    frame = _flatten(stats, VALUE_COLUMN, season_levels)

    schema = TableSchema(
        tuple(
            coords
            + [
                Column(LABEL_COLUMN, ColumnRole.LABEL),
                Column(VALUE_COLUMN, ColumnRole.VALUE),
            ]
        )
    )
    return LongTable(frame=frame, schema=schema, probs=probs, labels=labels)


def iteration_worms(
    da: xr.DataArray, iters: Sequence[Any], value_name: str = VALUE_COLUMN
) -> pd.DataFrame:
    """
    Values of selected iterations, for drawing individual trajectories over
    the quantile ribbons.

    Integers select iterations by 1-based position; anything else is taken as
    an ``iter`` label.
    """
    lab = as_labeled(da)
    season_levels = list(lab["season"].values)
    iters = list(np.atleast_1d(iters))
    if all(isinstance(i, (int, np.integer)) for i in iters):
        positions = [int(i) - 1 for i in iters]
        if any(p < 0 or p >= n_iter(lab) for p in positions):
            raise ValueError(
                f"Iterations {iters} out of range for {n_iter(lab)} iterations"
            )
        picked = lab.isel(iter=positions)
    else:
        picked = lab.sel(iter=[str(i) for i in iters])

    frame = _flatten(picked, value_name, season_levels)
    # move iter after date so it reads as a coordinate
    iter_col = frame.pop("iter")
    frame.insert(frame.columns.get_loc("date") + 1, "iter", iter_col.astype(str))
    return frame
