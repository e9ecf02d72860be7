from __future__ import annotations

from decimal import Decimal

import pytest

from landscape_inventory.domain.models import ProductRecord
from landscape_inventory.identity import IdentityProvider
from landscape_inventory.inventory.constants import DEFAULT_SEEDS, MSG_NOT_CONNECTED
from landscape_inventory.inventory.session import InventorySession
from landscape_inventory.store import DocumentStore, StoreUnavailableError


def _record(name: str = "Boxwood", **kwargs) -> ProductRecord:
    base = dict(id=None, name=name, description="Shrub", cost_price=Decimal("10"), category="Plants")
    base.update(kwargs)
    return ProductRecord(**base)


def test_store_access_waits_for_identity(store: DocumentStore, identity: IdentityProvider) -> None:
    session = InventorySession(store, identity).start()
    assert session.user_id is None
    assert session.loading is True
    assert session.categories == ()
    with pytest.raises(StoreUnavailableError):
        session.add_taxonomy_entry("category", "Trees")

    form = session.new_form()
    form.update("name", "Fern")
    form.update("description", "Shade plant")
    form.update("cost_price", "4")
    result = form.submit()
    assert result.ok is False
    assert result.message == MSG_NOT_CONNECTED

    identity.sign_in("user-1")
    assert session.loading is False
    assert [c.name for c in session.categories] == list(DEFAULT_SEEDS["category"])


def test_default_seeds_on_first_open(session: InventorySession) -> None:
    assert [b.name for b in session.brands] == list(DEFAULT_SEEDS["brand"])
    assert [s.name for s in session.suppliers] == list(DEFAULT_SEEDS["supplier"])
    assert session.products == ()


def test_emptied_collection_is_not_reseeded(session: InventorySession) -> None:
    for entry in list(session.categories):
        session.delete_taxonomy_entry("category", entry.id)
    assert session.categories == ()


def test_writes_land_under_the_user_scope(session: InventorySession, store: DocumentStore) -> None:
    product_id = session.create_product(_record())
    snap = store.list("default-app-id/users/user-1/products")
    assert [d.id for d in snap.documents] == [product_id]
    assert snap.documents[0].data["user_id"] == "user-1"
    assert snap.documents[0].data["selling_price"] == "10.00"
    assert session.get_product(product_id).name == "Boxwood"


def test_identity_change_swaps_collections(session: InventorySession, identity: IdentityProvider) -> None:
    session.create_product(_record())
    session.taxonomy.add("Trees", "category")

    identity.sign_in("user-2")
    assert session.user_id == "user-2"
    assert session.products == ()
    assert "Trees" not in [c.name for c in session.categories]

    identity.sign_out()
    assert session.loading is True
    assert session.products == ()

    identity.sign_in("user-1")
    assert len(session.products) == 1
    assert "Trees" in [c.name for c in session.categories]


def test_close_stops_following_identity(session: InventorySession, identity: IdentityProvider) -> None:
    session.close()
    identity.sign_in("user-3")
    assert session.user_id is None


def test_filtered_rows(session: InventorySession) -> None:
    session.create_product(_record("Fern", brand="Scotts"))
    session.create_product(_record("Shovel", category="Tools", brand="DeWalt", sku="SH-1"))

    session.set_filters(category="Tools")
    rows = session.rows()
    assert [r["name"] for r in rows] == ["Shovel"]
    assert rows[0]["sku"] == "SH-1"

    session.set_filters()
    assert len(session.rows()) == 2
