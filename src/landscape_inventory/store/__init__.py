"""Document store backing the product and taxonomy collections."""

from .documents import (
    COLLECTION_BRANDS,
    COLLECTION_CATEGORIES,
    COLLECTION_PRODUCTS,
    COLLECTION_SUPPLIERS,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    Snapshot,
    StoreError,
    StoreUnavailableError,
    Subscription,
    collection_path,
)

__all__ = [
    "COLLECTION_BRANDS",
    "COLLECTION_CATEGORIES",
    "COLLECTION_PRODUCTS",
    "COLLECTION_SUPPLIERS",
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "Snapshot",
    "StoreError",
    "StoreUnavailableError",
    "Subscription",
    "collection_path",
]
