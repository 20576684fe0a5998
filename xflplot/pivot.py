"""Long-to-wide reshaping of quantile tables."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .schema import (
    Column,
    ColumnRole,
    LongTable,
    TableSchema,
    WideTable,
)

logger = logging.getLogger(__name__)


def long_to_wide(table: LongTable | WideTable) -> WideTable:
    """
    Pivot a long quantile table into one column per quantile label.

    Rows are grouped on every coordinate column of the schema and emitted in
    the order their key is first met; label columns follow the probability
    order of the table. A (key, label) cell that is absent in the long table
    is NaN in the result.

    Parameters
    ----------
    table : LongTable or WideTable
        A table that is already wide is returned unchanged.

    Returns
    -------
    WideTable

    Raises
    ------
    ValueError
        If the same (key, label) pair appears twice.
    """
    if isinstance(table, WideTable):
        return table

    label_col = table.schema.first(ColumnRole.LABEL)
    value_col = table.schema.first(ColumnRole.VALUE)
    if value_col is None:
        raise ValueError("Long table has no value column")

    coords = table.schema.coordinates()
    keys = [c.name for c in coords]
    frame = table.frame

    # raw values, nothing to spread
    if label_col is None:
        return WideTable(
            frame=frame.reset_index(drop=True),
            schema=TableSchema(tuple(coords + [value_col])),
        )

    group_id = frame.groupby(keys, sort=False, dropna=False).ngroup().to_numpy()
    if pd.Series(list(zip(group_id, frame[label_col.name]))).duplicated().any():
        raise ValueError(
            "Duplicated coordinate/label pairs found, cannot pivot to wide format"
        )

    first = ~pd.Series(group_id).duplicated().to_numpy()
    wide = frame.loc[first, keys].reset_index(drop=True)
    n_rows = len(wide)

    labels = list(table.labels) or list(pd.unique(frame[label_col.name]))
    probs = list(table.probs) or [None] * len(labels)
    columns = []
    for label, prob in zip(labels, probs):
        cells = np.full(n_rows, np.nan)
        mask = (frame[label_col.name] == label).to_numpy()
        cells[group_id[mask]] = frame.loc[mask, value_col.name].to_numpy(dtype=float)
        wide[label] = cells
        columns.append(Column(label, ColumnRole.QUANTILE, prob))

    logger.debug("pivoted %d long rows into %d wide rows", len(frame), n_rows)
    return WideTable(
        frame=wide,
        schema=TableSchema(tuple(coords + columns)),
        probs=tuple(table.probs),
        labels=tuple(labels),
    )
