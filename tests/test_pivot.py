# tests/test_pivot.py
import numpy as np
import pandas as pd
import pytest

from xflplot.pivot import long_to_wide
from xflplot.quantiles import to_long
from xflplot.schema import ColumnRole, LongTable


def test_wide_layout(make_quant):
    da = make_quant(n_years=3, n_iter=20)
    long = to_long(da)
    wide = long_to_wide(long)

    assert list(wide.frame.columns) == [
        "quant",
        "year",
        "unit",
        "season",
        "area",
        "date",
        "10%",
        "25%",
        "50%",
        "75%",
        "90%",
    ]
    assert len(wide.frame) == 3
    assert wide.central == "50%"
    assert [c.prob for c in wide.schema.by_role(ColumnRole.QUANTILE)] == [
        0.1,
        0.25,
        0.5,
        0.75,
        0.9,
    ]
    # every long value lands in its cell
    for (_, row), label in zip(long.frame.iterrows(), long.frame["prob"]):
        cell = wide.frame.loc[wide.frame["year"] == row["year"], label].iloc[0]
        assert cell == pytest.approx(row["data"])


def test_pivot_is_idempotent(make_quant):
    wide = long_to_wide(to_long(make_quant(n_iter=10)))
    again = long_to_wide(wide)
    assert again is wide
    pd.testing.assert_frame_equal(again.frame, wide.frame)


def test_missing_cell_becomes_nan(make_quant):
    long = to_long(make_quant(n_years=2, n_iter=10), probs=(0.1, 0.5, 0.9))
    frame = long.frame
    drop = frame.index[(frame["year"] == 2001) & (frame["prob"] == "90%")]
    holed = LongTable(
        frame=frame.drop(index=drop),
        schema=long.schema,
        probs=long.probs,
        labels=long.labels,
    )
    wide = long_to_wide(holed)
    assert len(wide.frame) == 2
    assert np.isnan(wide.frame["90%"].iloc[1])
    assert wide.frame["90%"].iloc[0] == pytest.approx(frame["data"].iloc[2])


def test_duplicated_pairs_rejected(make_quant):
    long = to_long(make_quant(n_iter=10))
    doubled = LongTable(
        frame=pd.concat([long.frame, long.frame.iloc[:1]], ignore_index=True),
        schema=long.schema,
        probs=long.probs,
        labels=long.labels,
    )
    with pytest.raises(ValueError, match="Duplicated"):
        long_to_wide(doubled)


def test_raw_table_passes_through(make_quant):
    long = to_long(make_quant(n_years=4))
    wide = long_to_wide(long)
    assert wide.labels == ()
    assert list(wide.frame.columns)[-1] == "data"
    assert len(wide.frame) == 4
