from __future__ import annotations

from typing import Any, Dict


class PlotConfig:
    """
    Stores plot configuration settings.
    """

    # ----------------------------------------------------------------
    # Default figure settings (figsize None -> derived from panel size)
    # ----------------------------------------------------------------
    DEFAULT_FIGURE = {
        "figsize": None,
        "panel_size": (7.0, 2.2),
        "dpi": 100,
        "facecolor": "white",
    }

    # ----------------------------------------------------------------
    # Default colours
    # ----------------------------------------------------------------
    DEFAULT_COLOR = {
        # Matplotlib “tab10” colors
        "color_cycle": [
            "#1f77b4",  # blue
            "#ff7f0e",  # orange
            "#2ca02c",  # green
            "#d62728",  # red
            "#9467bd",  # purple
            "#8c564b",  # brown
            "#e377c2",  # pink
            "#7f7f7f",  # gray
            "#bcbd22",  # olive
            "#17becf",  # cyan
        ],
        "fill": "red",  # quantile ribbons of a single series
        "line": "black",  # central line of a single series
        "reference": "blue",
        "missing": "darkgrey",
        # two-sex stocks: both sexes combined, females, males
        "sexes": {"unique": "#8da0cb", "F": "#fc8d62", "M": "#66c2a5"},
    }

    # ----------------------------------------------------------------
    # Default grid settings
    # ----------------------------------------------------------------
    DEFAULT_GRID = {"linestyle": "--", "linewidth": 0.5, "color": "gray", "alpha": 0.7}

    # ----------------------------------------------------------------
    # Class‐level defaults for font sizes (can be overridden)
    # ----------------------------------------------------------------
    DEFAULT_FONT_SIZES = {
        "xticks": 10,  # size of x-axis tick labels
        "yticks": 10,  # size of y-axis tick labels
        "xlabel": 11,  # size of x-axis label
        "ylabel": 11,  # size of y-axis label
        "title": 11,  # size of panel (facet) title
        "suptitle": 12,  # size of figure suptitle
        "legend": 9,  # size of legend text
    }

    # ----------------------------------------------------------------
    # Class‐level defaults for line widths (can be overridden)
    # ----------------------------------------------------------------
    DEFAULT_LINE_WIDTHS = {
        "plot": 1.5,  # central line
        "bounds": 1.0,  # dotted extreme quantiles
        "reference": 1.0,  # reference point lines
        "worm": 0.8,  # individual iterations
        "tick_params": 0.8,  # width parameter in ax.tick_params
    }

    def __init__(
        self,
        figsize=None,
        dpi=None,
        facecolor=None,
        panel_size=None,
        figure=None,
        color=None,
        grid=None,
        fontsize=None,
        linewidth=None,
        **kwargs,
    ):
        """
        Initialize the PlotConfig instance.
        Parameters:
        - figsize: Figure size in inches (width, height); None sizes the
          figure from the number of facet panels.
        - panel_size: Size of one facet panel in inches (width, height).
        - dpi: Dots per inch for the plot.
        - color: Colour overrides (see DEFAULT_COLOR).
        - grid: Grid overrides (see DEFAULT_GRID).
        - fontsize: Font size settings for various plot elements.
        - linewidth: Line width settings for various plot elements.
        - **kwargs: Additional keyword arguments for customization.
        """
        # Merge figure settings
        fig_opts = {**self.DEFAULT_FIGURE, **(figure or {})}
        # Override by individual args if provided
        if figsize is not None:
            fig_opts["figsize"] = figsize
        if dpi is not None:
            fig_opts["dpi"] = dpi
        if facecolor is not None:
            fig_opts["facecolor"] = facecolor
        if panel_size is not None:
            fig_opts["panel_size"] = panel_size
        for name, val in fig_opts.items():
            setattr(self, name, val)

        # Merge user-provided color settings
        col_opts = {**self.DEFAULT_COLOR, **(color or {})}
        self.color_cycle = col_opts["color_cycle"]
        for name in ("fill", "line", "reference", "missing", "sexes"):
            setattr(self, f"color_{name}", col_opts[name])

        # Merge grid settings
        grid_opts = {**self.DEFAULT_GRID, **(grid or {})}
        self.grid_linestyle = grid_opts["linestyle"]
        self.grid_linewidth = grid_opts["linewidth"]
        self.grid_color = grid_opts["color"]
        self.grid_alpha = grid_opts["alpha"]

        # ------------------------------------------------------------
        # Merge and assign font sizes
        # ------------------------------------------------------------
        merged_fs = {**self.DEFAULT_FONT_SIZES, **(fontsize or {})}
        self.fontsize = merged_fs
        # Also expose as individual attributes: fontsize_xticks, fontsize_xlabel, …
        for name, size in merged_fs.items():
            setattr(self, f"fontsize_{name}", size)
        # ------------------------------------------------------------
        # Merge and assign line widths
        # ------------------------------------------------------------
        merged_lw = {**self.DEFAULT_LINE_WIDTHS, **(linewidth or {})}
        self.linewidth = merged_lw
        # Also expose as individual attributes: linewidth_plot, linewidth_bounds, …
        for name, lw in merged_lw.items():
            setattr(self, f"linewidth_{name}", lw)

        self.extra: Dict[str, Any] = kwargs

    def figure_size(self, nrows: int, ncols: int) -> tuple[float, float]:
        """Figure size for a grid of *nrows* x *ncols* panels."""
        if self.figsize is not None:
            return tuple(self.figsize)
        width, height = self.panel_size
        return (width * max(ncols, 1), height * max(nrows, 1))
