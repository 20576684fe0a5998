"""Typed table schema shared by the tabulation, pivot and axis-selection steps.

Columns are described by a role rather than picked by name, so choosing the
x axis or the facet keys is a query over the schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import pandas as pd

# sentinel label for raw values of arrays without iterations
CENTRAL_LABEL = "data"
LABEL_COLUMN = "prob"
VALUE_COLUMN = "data"


class ColumnRole(str, Enum):
    QUANT = "quant"
    YEAR = "year"
    UNIT = "unit"
    SEASON = "season"
    AREA = "area"
    ITER = "iter"
    DATE = "date"
    QNAME = "qname"  # name of the quantity inside a collection
    SERIES = "series"  # name of the source (e.g. stock) being compared
    LABEL = "label"  # quantile label of a long table
    VALUE = "value"  # raw values
    QUANTILE = "quantile"  # one order statistic of a wide table


COORDINATE_ROLES = frozenset(
    {
        ColumnRole.QUANT,
        ColumnRole.YEAR,
        ColumnRole.UNIT,
        ColumnRole.SEASON,
        ColumnRole.AREA,
        ColumnRole.ITER,
        ColumnRole.DATE,
        ColumnRole.QNAME,
        ColumnRole.SERIES,
    }
)


@dataclass(frozen=True)
class Column:
    name: str
    role: ColumnRole
    prob: float | None = None


@dataclass(frozen=True)
class TableSchema:
    """Ordered column descriptors of a long or wide table."""

    columns: tuple[Column, ...] = ()

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.columns]

    def __contains__(self, name: object) -> bool:
        return any(c.name == name for c in self.columns)

    def by_role(self, *roles: ColumnRole) -> list[Column]:
        return [c for c in self.columns if c.role in roles]

    def first(self, role: ColumnRole) -> Column | None:
        found = self.by_role(role)
        return found[0] if found else None

    def coordinates(self) -> list[Column]:
        return [c for c in self.columns if c.role in COORDINATE_ROLES]

    def values(self) -> list[Column]:
        return self.by_role(ColumnRole.VALUE, ColumnRole.QUANTILE)

    def rename(self, old: str, new: str) -> TableSchema:
        return TableSchema(
            tuple(
                Column(new, c.role, c.prob) if c.name == old else c
                for c in self.columns
            )
        )

    def insert_after_coordinates(self, column: Column) -> TableSchema:
        n = len(self.coordinates())
        cols = list(self.columns)
        cols.insert(n, column)
        return TableSchema(tuple(cols))

    def merge(self, other: TableSchema) -> TableSchema:
        """Union of both schemas by column name; coordinates stay in front."""
        seen = {c.name for c in self.columns}
        extra = [c for c in other.columns if c.name not in seen]
        merged = list(self.columns) + extra
        coords = [c for c in merged if c.role in COORDINATE_ROLES]
        rest = [c for c in merged if c.role not in COORDINATE_ROLES]
        rest.sort(key=lambda c: (c.prob is None, c.prob if c.prob is not None else 0))
        return TableSchema(tuple(coords + rest))


@dataclass
class LongTable:
    """One row per (coordinate, quantile label) pair."""

    frame: pd.DataFrame
    schema: TableSchema
    probs: tuple[float, ...] = ()
    labels: tuple[str, ...] = ()


@dataclass
class WideTable:
    """
    One row per coordinate tuple, one column per quantile label.

    ``probs`` is empty when the table holds raw values under the
    ``"data"`` column.
    """

    frame: pd.DataFrame
    schema: TableSchema
    probs: tuple[float, ...] = ()
    labels: tuple[str, ...] = field(default=())

    @property
    def central(self) -> str:
        """Name of the column plotted as the central line."""
        if self.labels:
            return self.labels[len(self.labels) // 2]
        return CENTRAL_LABEL

    @property
    def has_quantiles(self) -> bool:
        return bool(self.labels)

    def key_columns(self) -> list[str]:
        return [c.name for c in self.schema.coordinates()]
