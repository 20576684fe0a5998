"""Stock objects: a named bundle of metric arrays (recruitment, SSB, catch, F)."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

import xarray as xr

from .align import canonical_name
from .labeled import NamedCollection, as_labeled, n_iter

logger = logging.getLogger(__name__)

DEFAULT_METRICS: tuple[str, ...] = ("Rec", "SSB", "Catch", "F")
SEXES = frozenset({"F", "M"})
TWO_SEX_LABELS: dict[str, str] = {"unique": "Both", "F": "F", "M": "M"}


class Stock:
    """
    Assessment output of one stock, kept as labelled metric arrays.

    Parameters
    ----------
    metrics : mapping of str to xr.DataArray
        Metric name -> array, e.g. ``{"Rec": rec, "SSB": ssb, ...}``. Order is
        kept and decides the panel order of plots.
    name : str
        Used as series label when several stocks are compared.
    """

    def __init__(self, metrics: Mapping[str, xr.DataArray], name: str = "stock"):
        if not metrics:
            raise ValueError("A Stock needs at least one metric")
        for key, da in metrics.items():
            if not isinstance(da, xr.DataArray):
                raise TypeError(
                    f"Metric '{key}' must be an xr.DataArray, got {type(da).__name__}"
                )
        self._metrics = {str(k): v for k, v in metrics.items()}
        self.name = str(name)

    @property
    def n_iter(self) -> int:
        return max(n_iter(da) for da in self._metrics.values())

    def metric(self, name: str) -> xr.DataArray:
        """Look up a metric by case-insensitive name (synonyms allowed)."""
        wanted = canonical_name(name)
        for key, da in self._metrics.items():
            if canonical_name(key) == wanted:
                return da
        raise KeyError(f"Stock '{self.name}' has no metric '{name}'")

    def metrics(self) -> NamedCollection[xr.DataArray]:
        """Default metric set, in :data:`DEFAULT_METRICS` order when present."""
        picked = []
        for key in DEFAULT_METRICS:
            try:
                picked.append((key, self.metric(key)))
            except KeyError:
                continue
        if not picked:
            picked = list(self._metrics.items())
        return NamedCollection(picked)

    def __repr__(self) -> str:
        return f"Stock(name={self.name!r}, metrics={list(self._metrics)})"


def _position(mets: NamedCollection, name: str) -> int | None:
    for i, key in enumerate(mets.names):
        if canonical_name(key) == canonical_name(name):
            return i
    return None


def stock_metrics(
    stock: Stock,
    metrics: Callable[[Stock], NamedCollection | Mapping[str, xr.DataArray]] | None = None,
) -> tuple[NamedCollection[xr.DataArray], bool]:
    """
    Metric arrays of *stock*, adapted for plotting.

    * Two-sex stocks (SSB units exactly ``F`` and ``M``): SSB becomes F + M and
      recruitment is summed across units, both labelled ``unique``.
    * Seasonal recruitment: zeros are set to NaN so empty seasons do not show
      as collapses.

    Returns
    -------
    tuple
        The adapted collection and whether the two-sex adaptation applied.
    """
    raw = metrics(stock) if metrics is not None else stock.metrics()
    mets = raw if isinstance(raw, NamedCollection) else NamedCollection(raw)
    items = [as_labeled(da) for da in mets]
    names = mets.names

    two_sex = False
    i_ssb = _position(mets, "ssb")
    i_rec = _position(mets, "rec")

    if i_ssb is not None:
        ssb = items[i_ssb]
        units = {str(u) for u in ssb["unit"].values}
        if units == SEXES:
            two_sex = True
            both = ssb.sel(unit="F", drop=True) + ssb.sel(unit="M", drop=True)
            items[i_ssb] = as_labeled(both.expand_dims(unit=["unique"]))
            if i_rec is not None:
                rec = items[i_rec].sum("unit", min_count=1)
                items[i_rec] = as_labeled(rec.expand_dims(unit=["unique"]))
            logger.debug("two-sex stock '%s': SSB and Rec summed over sexes", stock.name)

    if i_rec is not None and items[i_rec].sizes["season"] > 1:
        rec = items[i_rec]
        items[i_rec] = rec.where(rec != 0)

    return NamedCollection(list(zip(names, items))), two_sex


def relative_metrics(stock: Stock, refpts: Mapping[str, float]) -> NamedCollection:
    """
    SSB and F relative to their reference points, plus absolute catch.

    Reference points are looked up as ``ssb`` and ``harvest`` (or ``f``).
    """
    lookup = {canonical_name(k): float(v) for k, v in refpts.items()}
    missing = [k for k in ("ssb", "f") if k not in lookup]
    if missing:
        raise KeyError(
            f"Reference points {missing} needed for relative metrics, "
            f"got {list(refpts)}"
        )
    return NamedCollection(
        SSB=stock.metric("SSB") / lookup["ssb"],
        F=stock.metric("F") / lookup["f"],
        Catch=stock.metric("Catch"),
    )
