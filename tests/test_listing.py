from __future__ import annotations

from decimal import Decimal

from landscape_inventory.domain.dimensions import MeasurementsDimension
from landscape_inventory.domain.models import ProductRecord
from landscape_inventory.inventory.listing import ProductFilters, filter_products, product_row


def _p(name: str, category: str, brand: str, supplier: str) -> ProductRecord:
    return ProductRecord(
        id=name.lower(),
        name=name,
        description="",
        cost_price=Decimal("10"),
        category=category,
        brand=brand,
        preferred_supplier=supplier,
    )


PRODUCTS = [
    _p("Fern", "Plants", "Scotts", "Local Nursery"),
    _p("Mulch", "Soil & Mulch", "Scotts", "Big Box Store"),
    _p("Palm", "Plants", "Generic", "Local Nursery"),
    _p("Lamp", "Lighting", "Kichler", "Online Retailer"),
]


def _names(filters: ProductFilters):
    return [p.name for p in filter_products(PRODUCTS, filters)]


def test_default_filters_show_everything() -> None:
    assert _names(ProductFilters()) == ["Fern", "Mulch", "Palm", "Lamp"]


def test_filters_combine_with_and() -> None:
    assert _names(ProductFilters(category="Plants")) == ["Fern", "Palm"]
    assert _names(ProductFilters(category="Plants", brand="Scotts")) == ["Fern"]
    assert _names(ProductFilters(brand="Scotts", supplier="Big Box Store")) == ["Mulch"]
    assert _names(ProductFilters(category="Lighting", brand="Scotts")) == []


def test_empty_selection_means_all() -> None:
    filters = ProductFilters(category="Plants").with_selection("category", "")
    assert filters == ProductFilters()


def test_reset_only_clears_matching_selection() -> None:
    filters = ProductFilters(category="Plants", supplier="Local Nursery")
    assert filters.reset("category", "Tools") == filters
    assert filters.reset("supplier", "Local Nursery") == ProductFilters(category="Plants")


def test_product_row_projection() -> None:
    product = ProductRecord(
        id="p1",
        name="Paver",
        description="Concrete",
        cost_price=Decimal("2"),
        markup_percent=Decimal("50"),
        category="Hardscaping",
        brand="Belgard",
        preferred_supplier="Specialty Supplier",
        dimension=MeasurementsDimension(width=Decimal("30"), height=Decimal("30"), length=Decimal("6"), unit="cm"),
    )
    row = product_row(product)
    assert row["sku"] == "N/A"
    assert row["supplier"] == "Specialty Supplier"
    assert row["dimensions"] == "30cm x 30cm x 6cm"
    assert row["selling_price"] == "3.00"
    assert row["cost_price"] == "2.00"
