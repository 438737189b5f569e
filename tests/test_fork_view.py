"""Tests for the field add/remove surface and the field catalog."""

from __future__ import annotations

import pytest

from schemas.field import FieldCatalog, FieldDescriptor
from shelves.fork_view import ForkView

pytestmark = pytest.mark.unit


def test_catalog_rejects_duplicates_and_empty_ids(region) -> None:
    """The catalog is validated when it is built."""

    with pytest.raises(ValueError):
        FieldCatalog([region, region])

    with pytest.raises(ValueError):
        FieldCatalog(
            [FieldDescriptor(fid="", semantic_type="nominal", analytic_type="dimension")]
        )


def test_catalog_display_name_falls_back_to_id(catalog) -> None:
    """Unknown ids display as themselves."""

    assert catalog.display_name("Region") == "Region"
    assert catalog.display_name("missing") == "missing"


def test_measure_defaults_to_sum_and_dimensions_drop_agg() -> None:
    """Measures always carry an aggregation; dimensions never do."""

    m = FieldDescriptor(fid="m", semantic_type="quantitative", analytic_type="measure")
    d = FieldDescriptor(
        fid="d", semantic_type="nominal", analytic_type="dimension", agg_name="sum"
    )

    assert m.agg_name == "sum"
    assert d.agg_name is None


def test_add_and_remove_fields(catalog) -> None:
    """Adding is idempotent; removing a measure drops its op too."""

    view = ForkView()
    view.add_field("dimensions", "Region", catalog)
    view.add_field("dimensions", "Region", catalog)
    view.add_field("measures", "Sales", catalog)
    view.add_field("measures", "Profit", catalog)

    assert view.dimensions == ["Region"]
    assert view.measures == ["Sales", "Profit"]
    assert view.ops == ["sum", "mean"]

    view.remove_field("measures", "Sales")
    assert view.measures == ["Profit"]
    assert view.ops == ["mean"]

    view.remove_field("dimensions", "absent")
    assert view.dimensions == ["Region"]


def test_unknown_role_is_rejected() -> None:
    """Only dimensions and measures are valid roles."""

    with pytest.raises(ValueError):
        ForkView().add_field("colors", "Region")  # type: ignore[arg-type]


def test_labels_show_ops_when_aggregated(catalog) -> None:
    """Measure labels read name(op) only with aggregation on."""

    view = ForkView(dimensions=["Region", "ghost"], measures=["Sales"], ops=["max"])

    assert view.labels(catalog, aggregated=True) == (["Region", "ghost"], ["Sales(max)"])
    assert view.labels(catalog, aggregated=False) == (["Region", "ghost"], ["Sales"])


def test_shelves_resolve_fields_with_current_ops(catalog) -> None:
    """Measures land on rows with their op; unknown ids get fallback descriptors."""

    view = ForkView()
    view.add_field("dimensions", "Date", catalog)
    view.add_field("dimensions", "ghost")
    view.add_field("measures", "Sales", catalog)
    view.set_op("Sales", "median")

    rows, columns = view.shelves(catalog)

    assert [f.fid for f in rows] == ["Sales"]
    assert rows[0].agg_name == "median"
    assert [f.fid for f in columns] == ["Date", "ghost"]
    assert columns[1].name == "ghost"
    assert columns[1].analytic_type == "dimension"
