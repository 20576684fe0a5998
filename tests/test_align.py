# tests/test_align.py
import warnings

import numpy as np
import pytest
import xarray as xr

from xflplot.align import (
    DuplicateNameWarning,
    UnmatchedReferenceWarning,
    align_series,
    broadcast_reference,
    dedupe_names,
    letter_suffix,
)
from xflplot.labeled import NamedCollection
from xflplot.pivot import long_to_wide
from xflplot.quantiles import to_long
from xflplot.schema import ColumnRole


def test_letter_suffix():
    assert [letter_suffix(k) for k in (0, 1, 25, 26, 27, 701, 702)] == [
        "A",
        "B",
        "Z",
        "AA",
        "AB",
        "ZZ",
        "AAA",
    ]
    with pytest.raises(ValueError):
        letter_suffix(-1)


def test_dedupe_names_warns_once():
    with pytest.warns(DuplicateNameWarning) as record:
        names = dedupe_names(["Run", "Run"])
    assert names == ["Run_A", "Run_B"]
    assert len([w for w in record if issubclass(w.category, DuplicateNameWarning)]) == 1


def test_dedupe_names_unique_is_silent():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert dedupe_names(["SSB", "Rec"]) == ["SSB", "Rec"]


def test_dedupe_names_past_z_and_collisions():
    with pytest.warns(DuplicateNameWarning):
        names = dedupe_names(["x"] * 28)
    assert names[25:] == ["x_Z", "x_AA", "x_AB"]
    assert len(set(names)) == 28

    with pytest.warns(DuplicateNameWarning):
        names = dedupe_names(["Run_A", "Run", "Run", "Base", "Base"])
    assert names == ["Run_A", "Run_B", "Run_C", "Base_A", "Base_B"]


def test_align_duplicated_names(make_quant):
    coll = NamedCollection([("Run", make_quant(seed=1)), ("Run", make_quant(seed=2))])
    with pytest.warns(DuplicateNameWarning):
        table = align_series(coll)
    assert list(table.frame["qname"].unique()) == ["Run_A", "Run_B"]


def test_align_disjoint_years(make_quant):
    coll = NamedCollection(
        a=make_quant(n_years=5, start_year=2000),
        b=make_quant(n_years=7, start_year=2003),
    )
    table = align_series(coll)
    frame = table.frame
    assert len(frame) == 12
    assert frame.groupby("qname")["year"].min().to_dict() == {"a": 2000, "b": 2003}
    assert table.schema.first(ColumnRole.QNAME).name == "qname"
    # qname sits right after the coordinates
    assert list(frame.columns).index("qname") == list(frame.columns).index("date") + 1


def test_align_mixed_iterations_all_get_quantiles(make_quant):
    coll = NamedCollection(a=make_quant(n_iter=50), b=make_quant(n_iter=1, seed=3))
    table = align_series(coll, probs=(0.1, 0.5, 0.9))
    assert table.labels == ("10%", "50%", "90%")
    assert "data" not in table.frame
    single = table.frame[table.frame["qname"] == "b"]
    np.testing.assert_allclose(single["10%"], single["90%"])


def test_align_accepts_wide_tables(make_quant):
    wide = long_to_wide(to_long(make_quant(n_iter=10)))
    table = align_series(NamedCollection(a=wide, b=wide), series_column="stock", role=ColumnRole.SERIES)
    assert table.schema.first(ColumnRole.SERIES).name == "stock"
    assert len(table.frame) == 2 * len(wide.frame)


def test_broadcast_reference_uses_synonyms(make_quant):
    coll = NamedCollection(Catch=make_quant(name="catch"), SSB=make_quant(name="ssb", seed=4))
    table = align_series(coll)
    layer = broadcast_reference(table, {"yield": 500.0})

    n_catch = int((table.frame["qname"] == "Catch").sum())
    assert set(layer["qname"]) == {"Catch"}
    assert len(layer) == n_catch
    assert (layer[table.central] == 500.0).all()
    assert (layer["refpt"] == "yield").all()


def test_broadcast_reference_drops_unmatched(make_quant):
    table = align_series(NamedCollection(SSB=make_quant()))
    with pytest.warns(UnmatchedReferenceWarning):
        layer = broadcast_reference(table, {"Fmsy_xx": 0.2, "ssb": 10.0})
    assert set(layer["qname"]) == {"SSB"}

    with pytest.warns(UnmatchedReferenceWarning):
        empty = broadcast_reference(table, {"Fmsy_xx": 0.2})
    assert empty.empty
    assert "refpt" in empty.columns


def test_broadcast_reference_needs_quantity_names(make_quant):
    wide = long_to_wide(to_long(make_quant()))
    with pytest.raises(ValueError, match="quantity-name"):
        broadcast_reference(wide, {"ssb": 1.0})


def _catch_at_age():
    return xr.DataArray(
        np.arange(15, dtype=float).reshape(3, 5) + 1.0,
        dims=("age", "year"),
        coords={"age": [1, 2, 3], "year": np.arange(2000, 2005)},
        name="catch_n",
    )


def test_align_shares_one_quant_column(make_quant):
    coll = NamedCollection(catch_n=_catch_at_age(), ssb=make_quant(name="ssb"))
    table = align_series(coll)
    frame = table.frame

    quants = table.schema.by_role(ColumnRole.QUANT)
    assert [c.name for c in quants] == ["age"]
    assert "quant" not in frame

    ages = frame.loc[frame["qname"] == "catch_n", "age"]
    assert ages.tolist() == [1] * 5 + [2] * 5 + [3] * 5
    assert not any(isinstance(a, float) for a in ages)
    assert set(frame.loc[frame["qname"] == "ssb", "age"]) == {"all"}
    assert frame["age"].notna().all()
