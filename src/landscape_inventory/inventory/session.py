from __future__ import annotations

import time
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..config import DEFAULT_APP_ID, DEFAULT_TOAST_SECONDS
from ..domain.models import ProductRecord, TaxonomyEntry
from ..identity import IdentityProvider
from ..logging import get_logger
from ..store.documents import (
    COLLECTION_PRODUCTS,
    DocumentNotFoundError,
    DocumentStore,
    Snapshot,
    Subscription,
    collection_path,
)
from .constants import (
    DEFAULT_SEEDS,
    KIND_BRAND,
    KIND_CATEGORY,
    KIND_SUPPLIER,
    TAXONOMY_COLLECTIONS,
    TAXONOMY_KINDS,
)
from .feedback import ConfirmationCenter, ConfirmationPrompt, ToastCenter
from .form import ProductForm, draft_from_record, duplicate_draft
from .listing import ProductFilters, filter_products, product_row
from .taxonomy import TaxonomyManager


LOG = get_logger("inventory-session")


class InventorySession:
    """Application context for one running inventory UI.

    Owns the live collections of the signed-in user, the filter selection,
    the toast and the open confirmation. Collections are only read or written
    once the identity provider has an id; until then they stay empty and
    products report `loading`.
    """

    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityProvider,
        *,
        namespace: str = DEFAULT_APP_ID,
        toast_seconds: float = DEFAULT_TOAST_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.identity = identity
        self.namespace = namespace
        self.toasts = ToastCenter(clock=clock, default_seconds=toast_seconds)
        self.confirmations = ConfirmationCenter()
        self.taxonomy = TaxonomyManager(self)
        self.filters = ProductFilters()
        self._user_id: Optional[str] = None
        self._subscriptions: List[Subscription] = []
        self._unsubscribe_identity: Optional[Callable[[], None]] = None
        self._seed_pending: Set[str] = set()
        self._taxonomies: Dict[str, Tuple[TaxonomyEntry, ...]] = {kind: () for kind in TAXONOMY_KINDS}
        self._products: Tuple[ProductRecord, ...] = ()
        self._loading = True

    # ---------- lifecycle ----------
    def start(self) -> "InventorySession":
        if self._unsubscribe_identity is None:
            self._unsubscribe_identity = self.identity.on_change(self._on_identity)
        return self

    def close(self) -> None:
        if self._unsubscribe_identity is not None:
            self._unsubscribe_identity()
            self._unsubscribe_identity = None
        self._teardown()
        self._user_id = None

    def _on_identity(self, user_id: Optional[str]) -> None:
        if user_id == self._user_id:
            return
        self._teardown()
        self._user_id = user_id
        if user_id is None:
            LOG.info("No identity; store access deferred")
            return
        LOG.info("Subscribing collections for user %s", user_id)
        for kind in TAXONOMY_KINDS:
            self._seed_pending.add(kind)
            path = self._path(TAXONOMY_COLLECTIONS[kind])
            self._subscriptions.append(
                self.store.subscribe(path, partial(self._on_taxonomy_snapshot, kind))
            )
        self._subscriptions.append(
            self.store.subscribe(self._path(COLLECTION_PRODUCTS), self._on_products_snapshot)
        )

    def _teardown(self) -> None:
        for sub in self._subscriptions:
            sub.dispose()
        self._subscriptions = []
        self._seed_pending.clear()
        self._taxonomies = {kind: () for kind in TAXONOMY_KINDS}
        self._products = ()
        self._loading = True

    def _path(self, collection: str) -> str:
        # Raises StoreUnavailableError while signed out.
        return collection_path(self.namespace, self._user_id or "", collection)

    # ---------- snapshot handlers ----------
    def _on_taxonomy_snapshot(self, kind: str, snapshot: Snapshot) -> None:
        first = kind in self._seed_pending
        self._seed_pending.discard(kind)
        if first and snapshot.empty and DEFAULT_SEEDS[kind]:
            LOG.info("Seeding default %s entries into %s", kind, snapshot.path)
            for name in DEFAULT_SEEDS[kind]:
                self.store.add(snapshot.path, {"name": name})
            return
        self._taxonomies[kind] = tuple(
            TaxonomyEntry.from_document(doc.id, doc.data) for doc in snapshot.documents
        )

    def _on_products_snapshot(self, snapshot: Snapshot) -> None:
        records = []
        for doc in snapshot.documents:
            try:
                records.append(ProductRecord.from_document(doc.id, doc.data))
            except ValueError as exc:
                LOG.warning("Skipping unreadable product %s: %s", doc.id, exc)
        self._products = tuple(records)
        self._loading = False

    # ---------- read-only views ----------
    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def products(self) -> Tuple[ProductRecord, ...]:
        return self._products

    @property
    def categories(self) -> Tuple[TaxonomyEntry, ...]:
        return self._taxonomies[KIND_CATEGORY]

    @property
    def brands(self) -> Tuple[TaxonomyEntry, ...]:
        return self._taxonomies[KIND_BRAND]

    @property
    def suppliers(self) -> Tuple[TaxonomyEntry, ...]:
        return self._taxonomies[KIND_SUPPLIER]

    def taxonomy_entries(self, kind: str) -> Tuple[TaxonomyEntry, ...]:
        return self._taxonomies[kind]

    def get_product(self, product_id: str) -> ProductRecord:
        for product in self._products:
            if product.id == product_id:
                return product
        raise DocumentNotFoundError(f"No product {product_id}")

    # ---------- store writes ----------
    def add_taxonomy_entry(self, kind: str, name: str) -> str:
        return self.store.add(self._path(TAXONOMY_COLLECTIONS[kind]), {"name": name})

    def delete_taxonomy_entry(self, kind: str, entry_id: str) -> None:
        self.store.delete(self._path(TAXONOMY_COLLECTIONS[kind]), entry_id)

    def _product_document(self, record: ProductRecord) -> Dict[str, Any]:
        data = record.to_document()
        data["user_id"] = self._user_id
        return data

    def create_product(self, record: ProductRecord) -> str:
        path = self._path(COLLECTION_PRODUCTS)
        product_id = self.store.add(path, self._product_document(record))
        LOG.info("Created product %r (%s)", record.name, product_id)
        return product_id

    def update_product(self, record: ProductRecord) -> None:
        if record.id is None:
            raise DocumentNotFoundError("Cannot update a product without an id")
        self.store.set(self._path(COLLECTION_PRODUCTS), record.id, self._product_document(record))
        LOG.info("Updated product %r (%s)", record.name, record.id)

    def delete_product(self, product_id: str) -> None:
        self.store.delete(self._path(COLLECTION_PRODUCTS), product_id)
        LOG.info("Deleted product %s", product_id)

    # ---------- workflow ----------
    def new_form(self, on_success: Optional[Callable[[], None]] = None) -> ProductForm:
        return ProductForm(self, on_success=on_success)

    def edit_form(self, product_id: str, on_success: Optional[Callable[[], None]] = None) -> ProductForm:
        return ProductForm(self, draft_from_record(self.get_product(product_id)), on_success=on_success)

    def duplicate_form(self, product_id: str, on_success: Optional[Callable[[], None]] = None) -> ProductForm:
        return ProductForm(self, duplicate_draft(self.get_product(product_id)), on_success=on_success)

    def request_delete_product(self, product_id: str) -> ConfirmationPrompt:
        self.get_product(product_id)
        return self.confirmations.request(
            title="Delete Product?",
            message="Are you sure you want to delete this product?",
            on_confirm=lambda: self.delete_product(product_id),
        )

    def set_filters(
        self,
        category: Optional[str] = None,
        brand: Optional[str] = None,
        supplier: Optional[str] = None,
    ) -> ProductFilters:
        """Replace all three selections; empty values select "All"."""
        self.filters = (
            ProductFilters()
            .with_selection(KIND_CATEGORY, category)
            .with_selection(KIND_BRAND, brand)
            .with_selection(KIND_SUPPLIER, supplier)
        )
        return self.filters

    def reset_filter(self, kind: str, name: str) -> None:
        self.filters = self.filters.reset(kind, name)

    def filtered_products(self, filters: Optional[ProductFilters] = None) -> List[ProductRecord]:
        return filter_products(self._products, filters or self.filters)

    def rows(self, filters: Optional[ProductFilters] = None) -> List[Dict[str, Any]]:
        return [product_row(p) for p in self.filtered_products(filters)]
