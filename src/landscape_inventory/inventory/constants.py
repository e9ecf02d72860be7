from __future__ import annotations

from typing import Dict, Tuple

from ..store.documents import (
    COLLECTION_BRANDS,
    COLLECTION_CATEGORIES,
    COLLECTION_SUPPLIERS,
)

KIND_CATEGORY = "category"
KIND_BRAND = "brand"
KIND_SUPPLIER = "supplier"

TAXONOMY_KINDS: Tuple[str, ...] = (KIND_CATEGORY, KIND_BRAND, KIND_SUPPLIER)

# Collection holding each taxonomy kind.
TAXONOMY_COLLECTIONS: Dict[str, str] = {
    KIND_CATEGORY: COLLECTION_CATEGORIES,
    KIND_BRAND: COLLECTION_BRANDS,
    KIND_SUPPLIER: COLLECTION_SUPPLIERS,
}

# Product field that references an entry of each taxonomy kind (by name).
PRODUCT_FIELDS: Dict[str, str] = {
    KIND_CATEGORY: "category",
    KIND_BRAND: "brand",
    KIND_SUPPLIER: "preferred_supplier",
}

ALL_CATEGORIES = "All Categories"
ALL_BRANDS = "All Brands"
ALL_SUPPLIERS = "All Suppliers"

FILTER_SENTINELS: Dict[str, str] = {
    KIND_CATEGORY: ALL_CATEGORIES,
    KIND_BRAND: ALL_BRANDS,
    KIND_SUPPLIER: ALL_SUPPLIERS,
}

DEFAULT_SEEDS: Dict[str, Tuple[str, ...]] = {
    KIND_CATEGORY: ("Plants", "Hardscaping", "Tools", "Soil & Mulch", "Lighting"),
    KIND_BRAND: ("Generic", "Scotts", "DeWalt", "Belgard", "Kichler"),
    KIND_SUPPLIER: ("Local Nursery", "Big Box Store", "Online Retailer", "Specialty Supplier"),
}

COPY_SUFFIX = " (Copy)"

MSG_NAME_REQUIRED = "Name is required."
MSG_DESCRIPTION_REQUIRED = "Description is required."
MSG_COST_REQUIRED = "A valid cost price is required."
MSG_SKU_TAKEN = "This SKU already exists in this category."
MSG_NOT_CONNECTED = "Error: Database not connected."
