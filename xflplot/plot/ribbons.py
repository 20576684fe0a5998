"""Quantile-ribbon rendering of :class:`~xflplot.dispatch.PlotFrame` objects.

The renderer draws what the tabulation step recommends and makes no layout
decisions of its own: facets, groups, ribbons and overlays all come from
``PlotFrame.roles``.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.dates import AutoDateLocator, ConciseDateFormatter

from ..decorators import with_options
from ..dispatch import PlotFrame, tabulate
from ..options import QuantileOptions
from .config import PlotConfig

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

# ------------------------------------------------------------------
# Module-level logger
# ------------------------------------------------------------------
logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# If user hasn’t configured logging, fall back to console INFO output
# ------------------------------------------------------------------
if not logger.hasHandlers():
    _h = logging.StreamHandler()
    _h.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_h)
    logger.setLevel(logging.INFO)


def apply_smart_time_ticks(ax, minticks=3, maxticks=7, rotation=30):
    """Apply concise datetime tick formatting to the x axis of *ax*.

    Parameters
    ----------
    ax : Axes
        Matplotlib axes object
    minticks : int
        Minimum number of ticks (default: 3)
    maxticks : int
        Maximum number of ticks (default: 7)
    rotation : int
        Label rotation angle in degrees (default: 30)

    Returns
    -------
    Axes
        The modified axes object
    """
    locator = AutoDateLocator(minticks=minticks, maxticks=maxticks)
    formatter = ConciseDateFormatter(locator)
    ax.xaxis.set_major_locator(locator)
    ax.xaxis.set_major_formatter(formatter)

    # Rotate labels manually (compatible with constrained_layout)
    if rotation != 0:
        for label in ax.get_xticklabels():
            label.set_rotation(rotation)
            label.set_ha("right")

    return ax


def _facet_levels(frame: pd.DataFrame, columns: tuple[str, ...]) -> list[tuple]:
    if not columns:
        return [()]
    levels = frame[list(columns)].dropna().drop_duplicates()
    return [tuple(row) for row in levels.itertuples(index=False, name=None)]


def _subset(frame: pd.DataFrame | None, columns: tuple[str, ...], values: tuple):
    if frame is None or len(frame) == 0:
        return None
    mask = np.ones(len(frame), dtype=bool)
    for col, val in zip(columns, values):
        if col not in frame:
            continue
        mask &= (frame[col] == val).to_numpy()
    sub = frame[mask]
    return sub if len(sub) else None


def _group_label(key: Any) -> str:
    if isinstance(key, tuple):
        return ", ".join(str(k) for k in key)
    return str(key)


def _draw_panel(ax: Axes, panel: pd.DataFrame, frame: PlotFrame, cfg: PlotConfig):
    roles = frame.roles
    x, y = roles.x, roles.y
    groups = list(roles.groups)

    if groups:
        grouped = list(panel.groupby(groups, sort=False, dropna=False))
    else:
        grouped = [(None, panel)]

    for k, (key, data) in enumerate(grouped):
        data = data.dropna(subset=[y]).sort_values(x)
        if data.empty:
            continue

        if key is None:
            color, fill, label = cfg.color_line, cfg.color_fill, None
        else:
            label = _group_label(key)
            if frame.legend and label in frame.legend:
                color = cfg.color_sexes.get(label, cfg.color_cycle[k % len(cfg.color_cycle)])
                label = frame.legend[label]
            else:
                color = cfg.color_cycle[k % len(cfg.color_cycle)]
            fill = color

        for ribbon in roles.ribbons:
            ax.fill_between(
                data[x],
                data[ribbon.lower],
                data[ribbon.upper],
                color=fill,
                alpha=ribbon.alpha,
                linewidth=0,
            )
        if roles.bounds is not None:
            for col in roles.bounds:
                ax.plot(
                    data[x],
                    data[col],
                    color=fill,
                    alpha=0.5,
                    linestyle=":",
                    linewidth=cfg.linewidth_bounds,
                )
        ax.plot(data[x], data[y], color=color, label=label, linewidth=cfg.linewidth_plot)


def render(
    frame: PlotFrame,
    cfg: PlotConfig | None = None,
    fig: Figure | None = None,
    title: str | None = None,
    xlabel: str = "",
    ylabel: str = "",
) -> tuple[Figure, np.ndarray]:
    """
    Draw *frame* as a grid of quantile-ribbon panels.

    Parameters
    ----------
    frame : PlotFrame
        Output of :func:`xflplot.tabulate`.
    cfg : PlotConfig, optional
        Plot configuration. If None, uses defaults.
    fig : Figure, optional
        Figure to draw into. If None, creates a new one.
    title, xlabel, ylabel : str, optional
        Figure title and axis labels.

    Returns
    -------
    tuple
        (Figure, 2-D array of Axes), one axes per facet panel.
    """
    cfg = cfg or PlotConfig()
    roles = frame.roles
    table = frame.table.frame

    row_cols = roles.facets[:1]
    col_cols = roles.facets[1:]
    rows = _facet_levels(table, row_cols)
    cols = _facet_levels(table, col_cols)

    if fig is None:
        fig, axes = plt.subplots(
            len(rows),
            len(cols),
            figsize=cfg.figure_size(len(rows), len(cols)),
            dpi=cfg.dpi,
            facecolor=cfg.facecolor,
            squeeze=False,
            sharex=True,
            constrained_layout=True,
        )
    else:
        axes = fig.subplots(len(rows), len(cols), squeeze=False, sharex=True)

    is_date = pd.api.types.is_datetime64_any_dtype(table[roles.x])

    for i, row in enumerate(rows):
        for j, col in enumerate(cols):
            ax = axes[i, j]
            keys = row_cols + col_cols
            values = row + col
            panel = _subset(table, keys, values)
            if panel is not None:
                _draw_panel(ax, panel, frame, cfg)

            reference = _subset(frame.reference, keys, values)
            if reference is not None:
                for value in pd.unique(reference[roles.y]):
                    ax.axhline(
                        value,
                        color=cfg.color_reference,
                        linestyle="--",
                        linewidth=cfg.linewidth_reference,
                    )

            worms = _subset(frame.worms, keys, values)
            if worms is not None:
                for n, (_, worm) in enumerate(worms.groupby("iter", sort=False)):
                    worm = worm.sort_values(roles.x)
                    ax.plot(
                        worm[roles.x],
                        worm[roles.y],
                        color=cfg.color_cycle[(n + 1) % len(cfg.color_cycle)],
                        linewidth=cfg.linewidth_worm,
                    )

            missing = _subset(frame.missing, keys, values)
            if missing is not None:
                ax.scatter(
                    missing[roles.x],
                    np.zeros(len(missing)),
                    s=4,
                    color=cfg.color_missing,
                    zorder=3,
                )

            # always include zero on the y axis
            bottom, top = ax.get_ylim()
            ax.set_ylim(min(bottom, 0.0), max(top, 0.0))

            if keys:
                ax.set_title(
                    " | ".join(f"{k}: {v}" for k, v in zip(keys, values)),
                    fontsize=cfg.fontsize_title,
                )
            ax.grid(
                True,
                alpha=cfg.grid_alpha,
                linestyle=cfg.grid_linestyle,
                linewidth=cfg.grid_linewidth,
                color=cfg.grid_color,
            )
            ax.tick_params(
                axis="both",
                labelsize=cfg.fontsize_xticks,
                width=cfg.linewidth_tick_params,
            )
            if is_date:
                apply_smart_time_ticks(ax)
            if i == len(rows) - 1:
                ax.set_xlabel(xlabel, fontsize=cfg.fontsize_xlabel)
            if j == 0:
                ax.set_ylabel(ylabel, fontsize=cfg.fontsize_ylabel)

    if roles.groups:
        handles, labels = axes[0, 0].get_legend_handles_labels()
        if handles:
            axes[0, 0].legend(handles, labels, fontsize=cfg.fontsize_legend)

    if title:
        fig.suptitle(title, fontsize=cfg.fontsize_suptitle)

    logger.debug("rendered %d x %d panels", len(rows), len(cols))
    return fig, axes


@with_options("cfg", "fig", "title", "xlabel", "ylabel", "fill", "colour")
def plot(
    subject, reference=None, *, opts: QuantileOptions, local: dict
) -> tuple[Figure, np.ndarray]:
    """
    Tabulate *subject* and draw it.

    Accepts the same subjects, references and options as
    :func:`xflplot.tabulate`, plus ``cfg``, ``fig``, ``title``, ``xlabel``
    and ``ylabel`` for :func:`render`. ``fill`` and ``colour`` override the
    ribbon and central line colours of a single series.

    Examples
    --------
    >>> fig, axes = plot(catch, probs=(0.05, 0.5, 0.95), title="Catch")
    >>> fig, axes = plot(NamedCollection(SSB=ssb, Catch=catch), {"yield": 1.2e5})
    >>> fig, axes = plot(catch, fill="green", colour="darkgreen")
    """
    cfg = local["cfg"] or PlotConfig()
    if local["fill"] is not None or local["colour"] is not None:
        # never touch the caller's config
        cfg = copy.copy(cfg)
        if local["fill"] is not None:
            cfg.color_fill = local["fill"]
        if local["colour"] is not None:
            cfg.color_line = local["colour"]

    frame = tabulate(subject, reference, opts=opts)
    return render(
        frame,
        cfg=cfg,
        fig=local["fig"],
        title=local["title"],
        xlabel=local["xlabel"] or "",
        ylabel=local["ylabel"] or "",
    )
