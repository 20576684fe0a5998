"""Labelled array conventions used throughout xflplot.

Arrays are plain :class:`xarray.DataArray` objects laid out on six named
dimensions, ``(quant, year, unit, season, area, iter)``. The first one carries
the quantity being measured (ages, lengths, or a single ``"all"`` level) and may
have any name; the last one holds repeated stochastic draws.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any, Generic, TypeVar

import numpy as np
import pandas as pd
import xarray as xr

STANDARD_DIMS: tuple[str, ...] = ("year", "unit", "season", "area", "iter")
DEFAULT_QUANT = "quant"

# label given to a dimension that was missing on input
DEFAULT_LABELS: dict[str, Any] = {
    "quant": "all",
    "year": 1,
    "unit": "unique",
    "season": "all",
    "area": "unique",
    "iter": "1",
}

T = TypeVar("T")


def quant_dim(da: xr.DataArray) -> str:
    """Return the name of the quantity dimension of *da*."""
    extra = [d for d in da.dims if d not in STANDARD_DIMS]
    if len(extra) > 1:
        raise ValueError(
            f"Cannot identify the quant dimension: found {extra}, "
            f"expected at most one dimension besides {list(STANDARD_DIMS)}"
        )
    return str(extra[0]) if extra else DEFAULT_QUANT


def as_labeled(da: xr.DataArray) -> xr.DataArray:
    """
    Normalize *da* onto the six canonical dimensions.

    Missing dimensions are added with length one and a default label, dims
    without coordinates get positional labels, ``iter`` labels are cast to
    strings, and the result is transposed to
    ``(quant, year, unit, season, area, iter)``.

    Parameters
    ----------
    da : xr.DataArray
        Array with any subset of the canonical dimensions.

    Returns
    -------
    xr.DataArray
        A new array; *da* is left untouched.

    Raises
    ------
    TypeError
        If *da* is not a DataArray.
    ValueError
        If more than one non-standard dimension is present.
    """
    if not isinstance(da, xr.DataArray):
        raise TypeError(f"Expected xr.DataArray, got {type(da).__name__}")

    qdim = quant_dim(da)
    out = da
    for dim in (qdim, *STANDARD_DIMS):
        if dim not in out.dims:
            label = DEFAULT_LABELS["quant" if dim == qdim else dim]
            out = out.expand_dims({dim: [label]})
        elif dim not in out.coords:
            start = 1 if dim in ("year", "iter") else 0
            labels = np.arange(start, start + out.sizes[dim])
            if dim == "iter":
                labels = labels.astype(str)
            out = out.assign_coords({dim: labels})

    # iteration labels are always strings
    if out["iter"].dtype.kind not in "OU":
        out = out.assign_coords(iter=out["iter"].values.astype(str))

    return out.transpose(qdim, *STANDARD_DIMS)


def n_iter(da: xr.DataArray) -> int:
    """Length of the iteration axis (1 when absent)."""
    return int(da.sizes.get("iter", 1))


def date_column(
    years: pd.Series, seasons: pd.Series, season_levels: Sequence[Any]
) -> pd.Series:
    """Build the ``date`` column for a table holding *years* and *seasons*."""
    n_seasons = max(len(season_levels), 1)
    position = {s: k for k, s in enumerate(season_levels)}
    numeric = pd.to_numeric(years, errors="coerce")
    months = seasons.map(lambda s: 1 + (12 * position.get(s, 0)) // n_seasons)
    parts = pd.DataFrame(
        {"year": numeric.to_numpy(), "month": months.to_numpy(), "day": 1},
        index=years.index,
    )
    dates = pd.to_datetime(parts, errors="coerce")
    dates.name = "date"
    return dates


class NamedCollection(Sequence, Generic[T]):
    """
    Ordered list of ``(name, item)`` pairs.

    Unlike a ``dict`` this keeps duplicated names around, so they can be
    reported and repaired later (see :func:`xflplot.align.dedupe_names`).

    Examples
    --------
    >>> NamedCollection(SSB=ssb, Rec=rec)
    >>> NamedCollection([("Run", a), ("Run", b)])
    """

    def __init__(
        self,
        items: Mapping[str, T] | Iterable[tuple[str, T]] | None = None,
        **kwargs: T,
    ):
        pairs: list[tuple[str, T]] = []
        if isinstance(items, Mapping):
            pairs.extend((str(k), v) for k, v in items.items())
        elif items is not None:
            for entry in items:
                name, value = entry
                pairs.append((str(name), value))
        pairs.extend(kwargs.items())
        self._names = [name for name, _ in pairs]
        self._items = [value for _, value in pairs]

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def items(self) -> list[tuple[str, T]]:
        return list(zip(self._names, self._items))

    def values(self) -> list[T]:
        return list(self._items)

    def renamed(self, names: Sequence[str]) -> NamedCollection[T]:
        """Return a copy with *names* replacing the current ones."""
        if len(names) != len(self._items):
            raise ValueError(
                f"Expected {len(self._items)} names, got {len(names)}"
            )
        return NamedCollection(list(zip(names, self._items)))

    def __getitem__(self, key):  # type: ignore[override]
        if isinstance(key, str):
            try:
                return self._items[self._names.index(key)]
            except ValueError:
                raise KeyError(key) from None
        return self._items[key]

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __repr__(self) -> str:
        return f"NamedCollection({self._names!r})"


class ReferencePoints(dict):
    """
    Small set of named scalar thresholds, e.g. ``F=0.14, SSB=1.8e5``.

    Values are coerced to float at construction.
    """

    def __init__(self, *args, **kwargs):
        raw = dict(*args, **kwargs)
        super().__init__({str(k): float(v) for k, v in raw.items()})

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v:g}" for k, v in self.items())
        return f"ReferencePoints({inner})"
