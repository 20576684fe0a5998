"""
xflplot.plot sub-package public API.
"""

from __future__ import annotations

# ------------------------------------------------------------------
# Re-export configuration and renderer
# ------------------------------------------------------------------
from .config import PlotConfig
from .ribbons import apply_smart_time_ticks, plot, render

# ------------------------------------------------------------------
# Public symbol table
# ------------------------------------------------------------------
__all__: list[str] = [
    "PlotConfig",
    "apply_smart_time_ticks",
    "plot",
    "render",
]
