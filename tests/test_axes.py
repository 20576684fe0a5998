# tests/test_axes.py
from xflplot.align import align_series
from xflplot.axes import Ribbon, select_axes
from xflplot.labeled import NamedCollection
from xflplot.pivot import long_to_wide
from xflplot.quantiles import to_long


def test_yearly_data_uses_year_axis(make_quant):
    roles = select_axes(long_to_wide(to_long(make_quant(n_iter=10))))
    assert roles.x == "year"
    assert roles.y == "50%"
    assert roles.ribbons == (Ribbon("10%", "90%", 0.1), Ribbon("25%", "75%", 0.25))
    assert roles.bounds == ("10%", "90%")
    assert roles.facets == ()
    assert roles.groups == ()


def test_seasonal_data_uses_date_axis(make_quant):
    roles = select_axes(long_to_wide(to_long(make_quant(n_seasons=4))))
    assert roles.x == "date"
    assert roles.y == "data"
    assert roles.ribbons == ()
    assert roles.bounds is None


def test_facets_and_groups(make_quant):
    coll = NamedCollection(
        catch=make_quant(quant=("1", "2", "3"), units=("F", "M"), n_iter=5),
        landings=make_quant(quant=("1", "2", "3"), units=("F", "M"), n_iter=5, seed=2),
    )
    roles = select_axes(align_series(coll, probs=(0.05, 0.5, 0.95)))
    assert roles.facets == ("qname", "quant")
    assert roles.groups == ("unit",)
    assert roles.y == "50%"


def test_single_quantity_is_not_faceted(make_quant):
    roles = select_axes(align_series(NamedCollection(ssb=make_quant(areas=("N", "S")))))
    assert roles.facets == ("area",)
