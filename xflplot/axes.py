"""Recommend plot roles (x, y, ribbons, facets, groups) for a wide table."""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from .schema import ColumnRole, WideTable


@dataclass(frozen=True)
class Ribbon:
    lower: str
    upper: str
    alpha: float


@dataclass(frozen=True)
class AxisRoles:
    """
    Column roles handed to a renderer.

    ``ribbons`` are shaded bands, outermost first; ``bounds`` is the extreme
    pair drawn as dotted lines. ``facets`` split panels (first on rows, rest on
    columns) and ``groups`` split lines within a panel.
    """

    x: str
    y: str
    ribbons: tuple[Ribbon, ...] = ()
    bounds: tuple[str, str] | None = None
    facets: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()


def _cardinality(frame: pd.DataFrame, column: str) -> int:
    return int(frame[column].nunique(dropna=True))


def select_axes(table: WideTable) -> AxisRoles:
    """
    Pick axis roles from the schema of *table*.

    * x: the ``date`` column when more than one season is present in the data,
      ``year`` otherwise, so sub-yearly points do not collapse on one x value.
    * y: the central quantile column, or ``data`` for raw values.
    * facets: the quantity-name column when it holds several quantities,
      followed by quant and area columns with more than one level.
    * groups: unit columns with more than one level, and series columns.
    """
    schema = table.schema
    frame = table.frame

    year = schema.first(ColumnRole.YEAR)
    season = schema.first(ColumnRole.SEASON)
    date = schema.first(ColumnRole.DATE)
    if year is None:
        raise ValueError("Table has no year column to use as x axis")

    x = year.name
    if (
        season is not None
        and date is not None
        and _cardinality(frame, season.name) > 1
        and frame[date.name].notna().any()
    ):
        x = date.name

    y = table.central

    ribbons: list[Ribbon] = []
    bounds = None
    if table.has_quantiles and len(table.labels) > 1:
        labels, probs = table.labels, table.probs
        n = len(labels)
        bounds = (labels[0], labels[-1])
        for i in range(n // 2):
            alpha = probs[i] if i < len(probs) else 0.1
            ribbons.append(Ribbon(labels[i], labels[n - 1 - i], alpha))

    facets: list[str] = []
    for col in schema.by_role(ColumnRole.QNAME):
        if _cardinality(frame, col.name) > 1:
            facets.append(col.name)
    for col in schema.by_role(ColumnRole.QUANT, ColumnRole.AREA):
        if col.name != x and _cardinality(frame, col.name) > 1:
            facets.append(col.name)

    groups: list[str] = []
    for col in schema.by_role(ColumnRole.UNIT):
        if _cardinality(frame, col.name) > 1:
            groups.append(col.name)
    groups.extend(c.name for c in schema.by_role(ColumnRole.SERIES))

    return AxisRoles(
        x=x,
        y=y,
        ribbons=tuple(ribbons),
        bounds=bounds,
        facets=tuple(facets),
        groups=tuple(groups),
    )
