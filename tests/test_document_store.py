from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import List

import pytest

from landscape_inventory.store import (
    DocumentNotFoundError,
    DocumentStore,
    Snapshot,
    StoreError,
    StoreUnavailableError,
    collection_path,
)


def _store(tmp_path: Path) -> DocumentStore:
    return DocumentStore(db_path=str(tmp_path / "docs.sqlite3"))


def test_collection_path_requires_identity() -> None:
    assert collection_path("app", "u1", "products") == "app/users/u1/products"
    with pytest.raises(StoreUnavailableError):
        collection_path("app", "", "products")


def test_documents_keep_insertion_order(tmp_path: Path) -> None:
    store = _store(tmp_path)
    path = "app/users/u1/categories"
    first = store.add(path, {"name": "Plants"})
    second = store.add(path, {"name": "Tools"})

    snap = store.list(path)
    assert [d.id for d in snap.documents] == [first, second]
    assert store.get(path, second).data == {"name": "Tools"}
    assert store.list("app/users/u2/categories").empty


def test_subscribe_delivers_current_then_every_write(tmp_path: Path) -> None:
    store = _store(tmp_path)
    path = "app/users/u1/brands"
    seen: List[int] = []
    sub = store.subscribe(path, lambda snap: seen.append(len(snap)))
    assert seen == [0]

    doc_id = store.add(path, {"name": "Acme"})
    store.set(path, doc_id, {"name": "Acme Corp"})
    store.delete(path, doc_id)
    assert seen == [0, 1, 1, 0]

    sub.dispose()
    store.add(path, {"name": "Other"})
    assert seen == [0, 1, 1, 0]


def test_delete_of_missing_document_is_silent(tmp_path: Path) -> None:
    store = _store(tmp_path)
    path = "app/users/u1/brands"
    seen: List[int] = []
    store.subscribe(path, lambda snap: seen.append(len(snap)))
    store.delete(path, "missing")
    assert seen == [0]


def test_set_on_missing_document_raises(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(DocumentNotFoundError):
        store.set("app/users/u1/products", "missing", {"name": "x"})


def test_listener_writes_are_queued_not_reentrant(tmp_path: Path) -> None:
    store = _store(tmp_path)
    path = "app/users/u1/suppliers"
    sizes: List[int] = []
    state = {"inside": False, "reentered": False}

    def on_snapshot(snap: Snapshot) -> None:
        if state["inside"]:
            state["reentered"] = True
        state["inside"] = True
        sizes.append(len(snap))
        if snap.empty:
            store.add(path, {"name": "Local Nursery"})
            store.add(path, {"name": "Big Box Store"})
        state["inside"] = False

    store.subscribe(path, on_snapshot)
    assert state["reentered"] is False
    assert sizes == [0, 2, 2]


def test_sqlite_failures_surface_as_store_error(tmp_path: Path) -> None:
    store = _store(tmp_path)
    path = "app/users/u1/products"
    with closing(sqlite3.connect(store.db_path)) as conn:
        conn.execute("DROP TABLE documents")
        conn.commit()

    with pytest.raises(StoreError, match="no such table"):
        store.add(path, {"name": "Fern"})
    with pytest.raises(StoreError):
        store.list(path)
    with pytest.raises(StoreError):
        store.get(path, "abc")
    with pytest.raises(StoreError):
        store.delete(path, "abc")
