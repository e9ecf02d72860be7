from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Dict

import pytest
from starlette.testclient import TestClient

from landscape_inventory.frontend import create_app


def _client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    for key in ("INVENTORY_APP_ID", "INVENTORY_USER_ID", "INVENTORY_DB_PATH", "INVENTORY_TOAST_SECONDS"):
        monkeypatch.delenv(key, raising=False)
    (tmp_path / "README.md").write_text("marker", encoding="utf-8")
    app = create_app(root_dir=str(tmp_path), user_id="tester", allow_origins=["*"])
    return TestClient(app)


def _boxwood(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": "Boxwood",
        "description": "Evergreen shrub",
        "cost_price": "100",
        "markup": "25",
        "category": "Plants",
        "dimension": {"kind": "size", "value": "Large"},
    }
    payload.update(overrides)
    return payload


def test_health_and_seeded_taxonomies(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client(tmp_path, monkeypatch)

    health = client.get("/api/health").json()
    assert health["status"] == "ok"
    assert health["user_id"] == "tester"
    assert health["db_path"].startswith(str(tmp_path))

    categories = client.get("/api/taxonomies/category").json()["items"]
    assert [c["name"] for c in categories] == ["Plants", "Hardscaping", "Tools", "Soil & Mulch", "Lighting"]
    assert client.get("/api/taxonomies/colour").status_code == 404


def test_create_list_and_filter_products(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client(tmp_path, monkeypatch)

    created = client.post("/api/products", json=_boxwood())
    assert created.status_code == 201
    product = created.json()["product"]
    assert product["selling_price"] == "125.00"
    assert product["dimension"] == {"kind": "size", "value": "Large"}

    listing = client.get("/api/products").json()
    assert listing["total"] == 1
    row = listing["items"][0]
    assert row["sku"] == "N/A"
    assert row["dimensions"] == "Large"
    assert row["supplier"] == "Local Nursery"

    assert client.get("/api/products", params={"category": "Tools"}).json()["total"] == 0
    assert client.get("/api/products", params={"category": "Plants", "brand": "Generic"}).json()["total"] == 1

    saved = client.put("/api/filters", json={"category": "Tools"}).json()
    assert saved == {"category": "Tools", "brand": "All Brands", "supplier": "All Suppliers"}
    assert client.get("/api/products").json()["total"] == 0


def test_validation_errors_return_draft(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client(tmp_path, monkeypatch)

    r = client.post("/api/products", json={"markup": "10"})
    assert r.status_code == 422
    body = r.json()
    assert set(body["errors"]) == {"name", "description", "cost_price"}
    assert body["draft"]["markup"] == "10"

    assert client.post("/api/products", json={"colour": "green"}).status_code == 400

    assert client.post("/api/products", json=_boxwood(sku="BX-1")).status_code == 201
    clash = client.post("/api/products", json=_boxwood(name="Other", sku="BX-1"))
    assert clash.status_code == 422
    assert set(clash.json()["errors"]) == {"sku"}


def test_update_and_duplicate(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client(tmp_path, monkeypatch)
    product_id = client.post("/api/products", json=_boxwood(sku="BX-1")).json()["id"]

    updated = client.put(f"/api/products/{product_id}", json={"name": "Boxwood XL", "markup": "50"})
    assert updated.status_code == 200
    assert updated.json()["product"]["name"] == "Boxwood XL"
    assert updated.json()["product"]["selling_price"] == "150.00"

    draft = client.post(f"/api/products/{product_id}/duplicate").json()["draft"]
    assert draft["id"] is None
    assert draft["name"] == "Boxwood XL (Copy)"
    assert draft["sku"] == ""

    copy = client.post("/api/products", json=draft)
    assert copy.status_code == 201
    assert client.get("/api/products").json()["total"] == 2

    assert client.get("/api/products/missing").status_code == 404


def test_product_delete_is_two_step(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client(tmp_path, monkeypatch)
    product_id = client.post("/api/products", json=_boxwood()).json()["id"]

    pending = client.delete(f"/api/products/{product_id}")
    assert pending.status_code == 202
    prompt = pending.json()["confirmation"]
    assert prompt["title"] == "Delete Product?"
    assert client.get("/api/confirmations").json()["confirmation"]["id"] == prompt["id"]

    assert client.delete(f"/api/confirmations/{prompt['id']}").json() == {"status": "cancelled"}
    assert client.get("/api/products").json()["total"] == 1

    prompt = client.delete(f"/api/products/{product_id}").json()["confirmation"]
    confirmed = client.post(f"/api/confirmations/{prompt['id']}")
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"
    assert client.get("/api/products").json()["total"] == 0
    assert client.post(f"/api/confirmations/{prompt['id']}").status_code == 409


def test_taxonomy_add_and_guarded_delete(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client(tmp_path, monkeypatch)
    client.post("/api/products", json=_boxwood())

    assert client.post("/api/taxonomies/brand", json={"name": "  "}).status_code == 400
    acme = client.post("/api/taxonomies/brand", json={"name": "Acme"})
    assert acme.status_code == 201
    assert acme.json()["name"] == "Acme"

    plants = next(
        c for c in client.get("/api/taxonomies/category").json()["items"] if c["name"] == "Plants"
    )
    refused = client.delete(f"/api/taxonomies/category/{plants['id']}")
    assert refused.status_code == 409
    assert refused.json()["toast"]["message"] == 'Cannot delete "Plants" as it is currently in use.'
    assert client.get("/api/toasts").json()["toast"]["message"].startswith("Cannot delete")

    lighting = next(
        c for c in client.get("/api/taxonomies/category").json()["items"] if c["name"] == "Lighting"
    )
    client.put("/api/filters", json={"category": "Lighting"})
    prompt = client.delete(f"/api/taxonomies/category/{lighting['id']}").json()["confirmation"]
    assert prompt["title"] == "Delete category?"

    confirmed = client.post(f"/api/confirmations/{prompt['id']}").json()
    assert confirmed["filters"]["category"] == "All Categories"
    names = [c["name"] for c in client.get("/api/taxonomies/category").json()["items"]]
    assert "Lighting" not in names
    assert client.delete("/api/taxonomies/category/missing").status_code == 404


def test_pricing_preview(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client(tmp_path, monkeypatch)
    r = client.post("/api/pricing/preview", json={"cost_price": "19.99", "markup": "33"})
    assert r.json() == {"selling_price": "26.59"}
    assert client.post("/api/pricing/preview", json={"cost_price": "x"}).json() == {"selling_price": "0.00"}
    assert client.post("/api/pricing/preview", json={"cost_price": "1e30", "markup": "5"}).json() == {
        "selling_price": "0.00"
    }


def test_store_failure_answers_503_with_draft(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client(tmp_path, monkeypatch)
    lighting = next(
        c for c in client.get("/api/taxonomies/category").json()["items"] if c["name"] == "Lighting"
    )
    prompt = client.delete(f"/api/taxonomies/category/{lighting['id']}").json()["confirmation"]

    with closing(sqlite3.connect(client.app.state.store.db_path)) as conn:
        conn.execute("DROP TABLE documents")
        conn.commit()

    r = client.post("/api/products", json=_boxwood())
    assert r.status_code == 503
    assert r.json()["detail"].startswith("Error: ")
    assert r.json()["draft"]["name"] == "Boxwood"

    assert client.post(f"/api/confirmations/{prompt['id']}").status_code == 503
    assert client.post("/api/taxonomies/brand", json={"name": "Acme"}).status_code == 503
