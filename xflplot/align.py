"""Merging of several named series into one plot table.

Covers three things:

* repairing duplicated names (``Run``, ``Run`` -> ``Run_A``, ``Run_B``),
* row-wise union of independently tabulated series, tagged with a name column,
* broadcasting reference points onto the rows of the matching quantity.
"""

from __future__ import annotations

import logging
import warnings
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

import pandas as pd
import xarray as xr

from .labeled import NamedCollection, n_iter
from .options import DEFAULT_PROBS
from .pivot import long_to_wide
from .quantiles import to_long
from .schema import Column, ColumnRole, TableSchema, WideTable

logger = logging.getLogger(__name__)

# alternate quantity names -> canonical (lower-case) names
REFERENCE_SYNONYMS: dict[str, str] = {
    "yield": "catch",
    "harvest": "f",
}

REFERENCE_COLUMN = "refpt"


class DuplicateNameWarning(UserWarning):
    """Emitted when duplicated series names are rewritten."""


class UnmatchedReferenceWarning(UserWarning):
    """Emitted when reference points match none of the plotted quantities."""


def letter_suffix(k: int) -> str:
    """0 -> 'A', 25 -> 'Z', 26 -> 'AA', 27 -> 'AB', ..."""
    if k < 0:
        raise ValueError(f"Suffix index must be non-negative, got {k}")
    out = ""
    k += 1
    while k > 0:
        k, rem = divmod(k - 1, 26)
        out = chr(ord("A") + rem) + out
    return out


def dedupe_names(names: Iterable[str], sep: str = "_") -> list[str]:
    """
    Make *names* unique by suffixing every member of a duplicated group.

    Suffixes run A, B, ..., Z, AA, AB, ... in encounter order, independently
    for each duplicated name, and skip any candidate that is already in use.
    A single :class:`DuplicateNameWarning` lists all rewrites.

    Examples
    --------
    >>> dedupe_names(["Run", "Base", "Run"])
    ['Run_A', 'Base', 'Run_B']
    """
    names = [str(n) for n in names]
    counts = Counter(names)
    dups = {n for n, c in counts.items() if c > 1}
    if not dups:
        return names

    taken = {n for n in names if n not in dups}
    next_idx = dict.fromkeys(dups, 0)
    out: list[str] = []
    rewrites: list[str] = []
    for name in names:
        if name not in dups:
            out.append(name)
            continue
        candidate = f"{name}{sep}{letter_suffix(next_idx[name])}"
        next_idx[name] += 1
        while candidate in taken:
            candidate = f"{name}{sep}{letter_suffix(next_idx[name])}"
            next_idx[name] += 1
        taken.add(candidate)
        out.append(candidate)
        rewrites.append(f"{name} -> {candidate}")

    logger.debug("renamed duplicated series: %s", rewrites)
    warnings.warn(
        "Duplicated names in object, changed to differentiate: "
        + ", ".join(rewrites),
        DuplicateNameWarning,
        stacklevel=2,
    )
    return out


def _as_collection(items) -> NamedCollection:
    if isinstance(items, NamedCollection):
        return items
    return NamedCollection(items)


def align_series(
    collection: NamedCollection | Mapping[str, xr.DataArray | WideTable],
    probs: Sequence[float] = DEFAULT_PROBS,
    method: int | str = 7,
    missing: str = "exclude",
    series_column: str = "qname",
    role: ColumnRole = ColumnRole.QNAME,
    collapse_single: bool | None = None,
) -> WideTable:
    """
    Tabulate every entry of *collection* and stack the results row-wise.

    Parameters
    ----------
    collection : NamedCollection or mapping
        Labelled arrays, or tables already returned by
        :func:`~xflplot.pivot.long_to_wide`.
    probs, method, missing
        Passed to :func:`~xflplot.quantiles.to_long`.
    series_column : str
        Name of the column tagging each row with its entry name.
    role : ColumnRole
        ``QNAME`` for quantities of one object, ``SERIES`` for objects being
        compared.
    collapse_single : bool, optional
        Forwarded to :func:`~xflplot.quantiles.to_long`. By default, raw values
        are kept only when no array in the collection has iterations.

    Returns
    -------
    WideTable
        Union of all rows; entries need not share coordinates.

    Notes
    -----
    If any array has more than one iteration, all arrays get quantile
    columns, so the value columns are the same for every entry. The quant
    column of every entry is renamed after the first entry's, so an
    age-structured array and an aggregate one share it (``1, 2, ..., "all"``).
    """
    collection = _as_collection(collection)
    if len(collection) == 0:
        raise ValueError("Cannot align an empty collection")

    collection = collection.renamed(dedupe_names(collection.names))
    if collapse_single is None:
        collapse_single = not any(
            isinstance(item, xr.DataArray) and n_iter(item) > 1 for item in collection
        )

    frames: list[pd.DataFrame] = []
    schema: TableSchema | None = None
    quant_name: str | None = None
    for name, item in collection.items():
        if isinstance(item, WideTable):
            table = item
        else:
            table = long_to_wide(
                to_long(item, probs, method, missing, collapse_single=collapse_single)
            )
        if series_column in table.schema:
            raise ValueError(
                f"Column '{series_column}' already present in table for '{name}'"
            )
        frame = table.frame.copy()
        entry_schema = table.schema

        # one shared quant column, named after the first entry's
        quant = entry_schema.first(ColumnRole.QUANT)
        if quant is not None:
            quant_name = quant_name or quant.name
            if quant.name != quant_name:
                frame = frame.rename(columns={quant.name: quant_name})
                entry_schema = entry_schema.rename(quant.name, quant_name)
            frame[quant_name] = frame[quant_name].astype(object)

        frame.insert(len(entry_schema.coordinates()), series_column, name)
        frames.append(frame)

        tagged = entry_schema.insert_after_coordinates(Column(series_column, role))
        schema = tagged if schema is None else schema.merge(tagged)

    assert schema is not None
    combined = pd.concat(frames, ignore_index=True, sort=False)[schema.names]
    quantiles = schema.by_role(ColumnRole.QUANTILE)
    logger.debug(
        "aligned %d series into %d rows on '%s'", len(frames), len(combined), series_column
    )
    return WideTable(
        frame=combined,
        schema=schema,
        probs=tuple(c.prob for c in quantiles if c.prob is not None),
        labels=tuple(c.name for c in quantiles),
    )


def canonical_name(name: str) -> str:
    key = str(name).strip().lower()
    return REFERENCE_SYNONYMS.get(key, key)


def broadcast_reference(
    table: WideTable,
    refpts: Mapping[str, float],
    value_column: str | None = None,
) -> pd.DataFrame:
    """
    Repeat each reference point over the rows of its quantity.

    Names are compared case-insensitively after mapping synonyms through
    :data:`REFERENCE_SYNONYMS`, so ``yield`` lands on ``Catch``. Reference
    points matching no quantity are dropped with an
    :class:`UnmatchedReferenceWarning`.

    Parameters
    ----------
    table : WideTable
        Table with a ``QNAME`` column.
    refpts : mapping
        Name -> threshold.
    value_column : str, optional
        Column holding the threshold; defaults to the table's central column
        so the layer shares the y aesthetic of the main plot.

    Returns
    -------
    pd.DataFrame
        Coordinate columns of the matched rows, plus ``refpt`` and the value.
    """
    facet = table.schema.first(ColumnRole.QNAME)
    if facet is None:
        raise ValueError("Reference points need a table with a quantity-name column")

    value_column = value_column or table.central
    keys = table.key_columns()
    frame = table.frame

    lookup: dict[str, str] = {}
    for qname in pd.unique(frame[facet.name]):
        lookup.setdefault(canonical_name(qname), qname)

    layers: list[pd.DataFrame] = []
    unmatched: list[str] = []
    for name, value in refpts.items():
        target = lookup.get(canonical_name(name))
        if target is None:
            unmatched.append(name)
            continue
        layer = frame.loc[frame[facet.name] == target, keys].copy()
        layer[REFERENCE_COLUMN] = name
        layer[value_column] = float(value)
        layers.append(layer)

    if unmatched:
        logger.debug("unmatched reference points: %s", unmatched)
        warnings.warn(
            f"Reference points {unmatched} match none of the quantities "
            f"{list(lookup.values())} and were dropped",
            UnmatchedReferenceWarning,
            stacklevel=2,
        )

    if not layers:
        return pd.DataFrame(columns=keys + [REFERENCE_COLUMN, value_column])
    return pd.concat(layers, ignore_index=True)
