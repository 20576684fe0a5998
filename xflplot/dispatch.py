"""Entry point turning any supported subject into a :class:`PlotFrame`.

Subjects and references are classified into closed kinds, and each supported
(subject, reference) pair has exactly one handler in :data:`HANDLERS`:

================  ==========================================================
subject           reference
================  ==========================================================
ARRAY             NONE
COLLECTION        NONE, POINTS
STOCK             NONE, POINTS, STOCK, STOCKS
STOCKS            NONE, POINTS (metrics relative to the reference points)
================  ==========================================================
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from numbers import Real
from typing import Any

import pandas as pd
import xarray as xr

from .align import align_series, broadcast_reference
from .axes import AxisRoles, select_axes
from .decorators import with_options
from .labeled import NamedCollection, ReferencePoints, n_iter
from .options import QuantileOptions, UnusedOptionWarning
from .pivot import long_to_wide
from .quantiles import iteration_worms, to_long
from .schema import ColumnRole, WideTable
from .stock import TWO_SEX_LABELS, Stock, relative_metrics, stock_metrics

logger = logging.getLogger(__name__)

QNAME_COLUMN = "qname"
SERIES_COLUMN = "stock"


class SubjectKind(Enum):
    ARRAY = "array"
    COLLECTION = "collection"
    STOCK = "stock"
    STOCKS = "stocks"


class ReferenceKind(Enum):
    NONE = "none"
    POINTS = "points"
    STOCK = "stock"
    STOCKS = "stocks"


@dataclass
class PlotFrame:
    """
    Everything a renderer needs: the wide table, the axis roles and the
    optional overlay layers.

    Attributes
    ----------
    table : WideTable
        One row per coordinate (and series), one column per quantile.
    roles : AxisRoles
        Recommended x / y / ribbon / facet / group columns.
    reference : pd.DataFrame, optional
        Reference points broadcast over the rows of their quantity.
    worms : pd.DataFrame, optional
        Individual iterations, value column named as ``roles.y``.
    missing : pd.DataFrame, optional
        Rows whose raw value is missing, to be marked on the x axis.
    legend : dict, optional
        Group value -> legend label.
    """

    table: WideTable
    roles: AxisRoles
    reference: pd.DataFrame | None = None
    worms: pd.DataFrame | None = None
    missing: pd.DataFrame | None = None
    legend: dict[str, str] | None = None


# ------------------------------------------------------------------
# classification
# ------------------------------------------------------------------
def _entries(obj: Any) -> list[Any] | None:
    if isinstance(obj, NamedCollection):
        return obj.values()
    if isinstance(obj, Mapping):
        return list(obj.values())
    return None


def subject_kind(obj: Any) -> SubjectKind:
    if isinstance(obj, xr.DataArray):
        return SubjectKind.ARRAY
    if isinstance(obj, Stock):
        return SubjectKind.STOCK
    entries = _entries(obj)
    if entries:
        if all(isinstance(e, Stock) for e in entries):
            return SubjectKind.STOCKS
        if all(isinstance(e, (xr.DataArray, WideTable)) for e in entries):
            return SubjectKind.COLLECTION
    raise TypeError(f"Cannot tabulate object of type {type(obj).__name__}")


def reference_kind(obj: Any) -> ReferenceKind:
    if obj is None:
        return ReferenceKind.NONE
    if isinstance(obj, Stock):
        return ReferenceKind.STOCK
    entries = _entries(obj)
    if entries:
        if all(isinstance(e, Stock) for e in entries):
            return ReferenceKind.STOCKS
        if isinstance(obj, Mapping) and all(isinstance(e, Real) for e in entries):
            return ReferenceKind.POINTS
    raise TypeError(f"Unsupported reference of type {type(obj).__name__}")


# ------------------------------------------------------------------
# shared steps
# ------------------------------------------------------------------
def _missing_rows(table: WideTable) -> pd.DataFrame | None:
    if table.has_quantiles:
        return None
    frame = table.frame
    lost = frame[frame[table.central].isna()]
    return lost if len(lost) else None


def _collection_worms(
    coll: NamedCollection, opts: QuantileOptions, value_name: str
) -> pd.DataFrame | None:
    if not opts.iters:
        return None
    layers = []
    for name, da in coll.items():
        if isinstance(da, xr.DataArray) and n_iter(da) > 1:
            worms = iteration_worms(da, opts.iters, value_name)
            worms.insert(worms.columns.get_loc("iter") + 1, QNAME_COLUMN, name)
            layers.append(worms)
    return pd.concat(layers, ignore_index=True) if layers else None


def _frame(table: WideTable, **layers) -> PlotFrame:
    return PlotFrame(
        table=table,
        roles=select_axes(table),
        missing=_missing_rows(table),
        **layers,
    )


def _with_reference(frame: PlotFrame, refpts: Mapping[str, float]) -> PlotFrame:
    layer = broadcast_reference(frame.table, refpts, value_column=frame.roles.y)
    return replace(frame, reference=layer)


# ------------------------------------------------------------------
# handlers
# ------------------------------------------------------------------
def _array(da: xr.DataArray, _ref: None, opts: QuantileOptions) -> PlotFrame:
    table = long_to_wide(to_long(da, opts.probs, opts.method, opts.missing))
    worms = None
    if opts.iters and n_iter(da) > 1:
        worms = iteration_worms(da, opts.iters, table.central)
    return _frame(table, worms=worms)


def _collection(coll, _ref: None, opts: QuantileOptions) -> PlotFrame:
    coll = coll if isinstance(coll, NamedCollection) else NamedCollection(coll)
    table = align_series(
        coll, opts.probs, opts.method, opts.missing, QNAME_COLUMN, ColumnRole.QNAME
    )
    return _frame(table, worms=_collection_worms(coll, opts, table.central))


def _collection_points(coll, refpts, opts: QuantileOptions) -> PlotFrame:
    return _with_reference(_collection(coll, None, opts), refpts)


def _stock(stock: Stock, _ref: None, opts: QuantileOptions) -> PlotFrame:
    mets, two_sex = stock_metrics(stock, opts.metrics)
    frame = _collection(mets, None, opts)
    if two_sex:
        frame = replace(frame, legend=dict(TWO_SEX_LABELS))
    return frame


def _stock_points(stock: Stock, refpts, opts: QuantileOptions) -> PlotFrame:
    return _with_reference(_stock(stock, None, opts), refpts)


def _compare(
    stocks: NamedCollection[Stock],
    opts: QuantileOptions,
    metrics: Callable[[Stock], NamedCollection],
) -> PlotFrame:
    collapse = not any(s.n_iter > 1 for s in stocks)
    tables = []
    for name, stock in stocks.items():
        mets = metrics(stock)
        tables.append(
            (
                name,
                align_series(
                    mets,
                    opts.stock_probs,
                    opts.method,
                    opts.missing,
                    QNAME_COLUMN,
                    ColumnRole.QNAME,
                    collapse_single=collapse,
                ),
            )
        )
    table = align_series(
        NamedCollection(tables), series_column=SERIES_COLUMN, role=ColumnRole.SERIES
    )
    return _frame(table)


def _stocks(stocks, _ref: None, opts: QuantileOptions) -> PlotFrame:
    stocks = stocks if isinstance(stocks, NamedCollection) else NamedCollection(stocks)
    return _compare(stocks, opts, lambda s: stock_metrics(s, opts.metrics)[0])


def _stocks_relative(stocks, refpts, opts: QuantileOptions) -> PlotFrame:
    stocks = stocks if isinstance(stocks, NamedCollection) else NamedCollection(stocks)
    return _compare(stocks, opts, lambda s: relative_metrics(s, refpts))


def _stock_pair(stock: Stock, other: Stock, opts: QuantileOptions) -> PlotFrame:
    return _stocks(NamedCollection([(stock.name, stock), (other.name, other)]), None, opts)


def _stock_prepend(stock: Stock, others, opts: QuantileOptions) -> PlotFrame:
    others = others if isinstance(others, NamedCollection) else NamedCollection(others)
    return _stocks(NamedCollection([(stock.name, stock)] + others.items()), None, opts)


Handler = Callable[[Any, Any, QuantileOptions], PlotFrame]

HANDLERS: dict[tuple[SubjectKind, ReferenceKind], Handler] = {
    (SubjectKind.ARRAY, ReferenceKind.NONE): _array,
    (SubjectKind.COLLECTION, ReferenceKind.NONE): _collection,
    (SubjectKind.COLLECTION, ReferenceKind.POINTS): _collection_points,
    (SubjectKind.STOCK, ReferenceKind.NONE): _stock,
    (SubjectKind.STOCK, ReferenceKind.POINTS): _stock_points,
    (SubjectKind.STOCK, ReferenceKind.STOCK): _stock_pair,
    (SubjectKind.STOCK, ReferenceKind.STOCKS): _stock_prepend,
    (SubjectKind.STOCKS, ReferenceKind.NONE): _stocks,
    (SubjectKind.STOCKS, ReferenceKind.POINTS): _stocks_relative,
}


@with_options()
def tabulate(subject, reference=None, *, opts: QuantileOptions, local) -> PlotFrame:
    """
    Tabulate *subject* (optionally against *reference*) for plotting.

    Parameters
    ----------
    subject : xr.DataArray, NamedCollection, mapping, Stock or stocks
        What to plot.
    reference : mapping of float, Stock or stocks, optional
        Reference points, or other stocks to compare against. Falls back to
        ``opts.reference_points``.
    opts : QuantileOptions, optional
        Options; any field may also be passed as a keyword argument.

    Returns
    -------
    PlotFrame

    Raises
    ------
    TypeError
        If the (subject, reference) combination is not supported.

    Warns
    -----
    UnusedOptionWarning
        If keyword options match no field of :class:`QuantileOptions`.
    """
    if opts.extra:
        warnings.warn(
            f"Unknown options {sorted(opts.extra)} were ignored",
            UnusedOptionWarning,
            stacklevel=3,
        )
    if reference is None and opts.reference_points is not None:
        reference = ReferencePoints(opts.reference_points)
    if isinstance(reference, Mapping) and not isinstance(reference, ReferencePoints):
        if reference_kind(reference) is ReferenceKind.POINTS:
            reference = ReferencePoints(reference)

    key = (subject_kind(subject), reference_kind(reference))
    handler = HANDLERS.get(key)
    if handler is None:
        raise TypeError(
            f"No tabulation defined for a {key[0].value} subject "
            f"with a {key[1].value} reference"
        )
    logger.debug("tabulating %s / %s", key[0].value, key[1].value)
    return handler(subject, reference, opts)
