# ------------------------------------------------------------------
# 1) data model and options (no plotting imports)
# ------------------------------------------------------------------
from .labeled import NamedCollection, ReferencePoints, as_labeled
from .options import DEFAULT_PROBS, QuantileOptions, UnusedOptionWarning, validate_probs
from .schema import Column, ColumnRole, LongTable, TableSchema, WideTable
from .stock import Stock, relative_metrics, stock_metrics

# ------------------------------------------------------------------
# 2) tabulation pipeline
# ------------------------------------------------------------------
from .align import (
    DuplicateNameWarning,
    UnmatchedReferenceWarning,
    align_series,
    broadcast_reference,
    dedupe_names,
)
from .axes import AxisRoles, Ribbon, select_axes
from .dispatch import PlotFrame, ReferenceKind, SubjectKind, tabulate
from .pivot import long_to_wide
from .quantiles import iteration_worms, quantile_label, to_long

# ------------------------------------------------------------------
# 3) plotting sub-package
# ------------------------------------------------------------------
from .plot.config import PlotConfig
from .plot.ribbons import render

# ------------------------------------------------------------------
# 4) public symbol table
# ------------------------------------------------------------------
__all__: list[str] = [
    # data model
    "NamedCollection",
    "ReferencePoints",
    "Stock",
    "as_labeled",
    "stock_metrics",
    "relative_metrics",
    # options
    "DEFAULT_PROBS",
    "QuantileOptions",
    "validate_probs",
    # schema
    "Column",
    "ColumnRole",
    "LongTable",
    "TableSchema",
    "WideTable",
    # pipeline
    "to_long",
    "quantile_label",
    "iteration_worms",
    "long_to_wide",
    "align_series",
    "broadcast_reference",
    "dedupe_names",
    "select_axes",
    "AxisRoles",
    "Ribbon",
    "tabulate",
    "PlotFrame",
    "SubjectKind",
    "ReferenceKind",
    # diagnostics
    "DuplicateNameWarning",
    "UnmatchedReferenceWarning",
    "UnusedOptionWarning",
    # plotting
    "PlotConfig",
    "render",
]

__version__ = "0.1.0"
