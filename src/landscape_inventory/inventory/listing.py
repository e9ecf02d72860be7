from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from ..domain.dimensions import NOT_AVAILABLE, format_dimension
from ..domain.models import ProductRecord
from ..domain.pricing import format_money
from .constants import (
    ALL_BRANDS,
    ALL_CATEGORIES,
    ALL_SUPPLIERS,
    FILTER_SENTINELS,
    KIND_BRAND,
    KIND_CATEGORY,
    KIND_SUPPLIER,
)


@dataclass(frozen=True)
class ProductFilters:
    """Three independent selections; each sentinel means "no restriction"."""

    category: str = ALL_CATEGORIES
    brand: str = ALL_BRANDS
    supplier: str = ALL_SUPPLIERS

    def selection(self, kind: str) -> str:
        return {
            KIND_CATEGORY: self.category,
            KIND_BRAND: self.brand,
            KIND_SUPPLIER: self.supplier,
        }[kind]

    def with_selection(self, kind: str, value: Optional[str]) -> "ProductFilters":
        value = value or FILTER_SENTINELS[kind]
        if kind == KIND_CATEGORY:
            return replace(self, category=value)
        if kind == KIND_BRAND:
            return replace(self, brand=value)
        return replace(self, supplier=value)

    def reset(self, kind: str, name: str) -> "ProductFilters":
        """Drop the selection for `kind` if it names the deleted entry `name`."""
        if self.selection(kind) != name:
            return self
        return self.with_selection(kind, None)

    def to_dict(self) -> Dict[str, str]:
        return {"category": self.category, "brand": self.brand, "supplier": self.supplier}


def matches(product: ProductRecord, filters: ProductFilters) -> bool:
    return (
        (filters.category == ALL_CATEGORIES or product.category == filters.category)
        and (filters.brand == ALL_BRANDS or product.brand == filters.brand)
        and (filters.supplier == ALL_SUPPLIERS or product.preferred_supplier == filters.supplier)
    )


def filter_products(products: Iterable[ProductRecord], filters: ProductFilters) -> List[ProductRecord]:
    return [p for p in products if matches(p, filters)]


def product_row(product: ProductRecord) -> Dict[str, Any]:
    """Display projection of a product for the list view."""
    return {
        "id": product.id,
        "name": product.name,
        "sku": product.sku or NOT_AVAILABLE,
        "description": product.description,
        "category": product.category,
        "brand": product.brand,
        "supplier": product.preferred_supplier,
        "dimensions": format_dimension(product.dimension),
        "selling_price": format_money(product.selling_price),
        "cost_price": format_money(product.cost_price),
        "markup_percent": format(product.markup_percent, "f"),
    }
