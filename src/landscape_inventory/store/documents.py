from __future__ import annotations

import json
import os
import sqlite3
import uuid
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Tuple

from ..logging import get_logger
from ..paths import default_store_path


LOG = get_logger("inventory-store")

COLLECTION_CATEGORIES = "categories"
COLLECTION_BRANDS = "brands"
COLLECTION_SUPPLIERS = "suppliers"
COLLECTION_PRODUCTS = "products"


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS documents (
  seq         INTEGER PRIMARY KEY AUTOINCREMENT,
  collection  TEXT NOT NULL,
  doc_id      TEXT NOT NULL,
  data        TEXT NOT NULL,            -- JSON object
  created_at  TEXT DEFAULT (datetime('now')),
  updated_at  TEXT DEFAULT (datetime('now')),
  UNIQUE(collection, doc_id)
);

CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection, seq);
"""


class StoreError(Exception):
    pass


class StoreUnavailableError(StoreError):
    """Raised when a read or write is attempted before an identity exists."""


class DocumentNotFoundError(StoreError):
    pass


def collection_path(namespace: str, identity: str, name: str) -> str:
    """Return `{namespace}/users/{identity}/{name}`."""
    if not namespace or not identity or not name:
        raise StoreUnavailableError("collection path needs namespace, identity and name")
    return f"{namespace}/users/{identity}/{name}"


@dataclass(frozen=True)
class Document:
    id: str
    data: Dict[str, Any]


@dataclass(frozen=True)
class Snapshot:
    """Full contents of one collection, in insertion order."""

    path: str
    documents: Tuple[Document, ...]

    @property
    def empty(self) -> bool:
        return not self.documents

    def __len__(self) -> int:
        return len(self.documents)


SnapshotCallback = Callable[[Snapshot], None]


class Subscription:
    def __init__(self, store: "DocumentStore", path: str, callback: SnapshotCallback) -> None:
        self.store = store
        self.path = path
        self.callback = callback
        self.active = True

    def dispose(self) -> None:
        if not self.active:
            return
        self.active = False
        self.store._remove_subscription(self)


class DocumentStore:
    """SQLite-backed document store with per-collection snapshot listeners.

    - Places the DB under `<project-root>/var/inventory/documents.sqlite3`
      unless `db_path` is given.
    - Documents are JSON objects keyed by (collection path, opaque id).
    - Every write enqueues a full snapshot for the listeners of that path;
      the queue is drained on the writing thread, one delivery at a time,
      so a listener that writes never re-enters another listener.
    - Writes are last-write-wins.
    """

    def __init__(self, root_dir: Optional[str] = None, *, db_path: Optional[str] = None) -> None:
        self.db_path = os.path.abspath(db_path) if db_path else default_store_path(root_dir)
        os.makedirs(os.path.dirname(self.db_path), exist_ok=True)
        LOG.info(f"Document store path: {self.db_path}")
        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._pending: Deque[Subscription] = deque()
        self._dispatching = False
        self._ensure_schema()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection for one operation; SQLite failures surface as StoreError."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            LOG.error(f"Cannot open document store {self.db_path}: {exc}")
            raise StoreError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as exc:
            conn.rollback()
            LOG.error(f"Document store operation failed: {exc}")
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self.connect() as conn:
            cur = conn.cursor()
            try:
                cur.execute("PRAGMA journal_mode=WAL;")
                cur.execute("PRAGMA synchronous=NORMAL;")
            except sqlite3.DatabaseError:
                LOG.debug("WAL journal mode not available; using defaults")
            cur.executescript(SCHEMA_SQL)
            conn.commit()
        LOG.debug("Document store schema ensured.")

    # --------------- Reads ---------------
    def list(self, path: str) -> Snapshot:
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT doc_id, data FROM documents WHERE collection = ? ORDER BY seq;",
                (path,),
            )
            rows = cur.fetchall()
        docs = tuple(Document(id=row["doc_id"], data=json.loads(row["data"])) for row in rows)
        return Snapshot(path=path, documents=docs)

    def get(self, path: str, doc_id: str) -> Optional[Document]:
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT doc_id, data FROM documents WHERE collection = ? AND doc_id = ?;",
                (path, doc_id),
            )
            row = cur.fetchone()
        if row is None:
            return None
        return Document(id=row["doc_id"], data=json.loads(row["data"]))

    # --------------- Writes ---------------
    def add(self, path: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        payload = json.dumps(data, ensure_ascii=False)
        with self.connect() as conn:
            conn.execute(
                "INSERT INTO documents (collection, doc_id, data) VALUES (?, ?, ?);",
                (path, doc_id, payload),
            )
            conn.commit()
        LOG.debug(f"Added document {doc_id} to {path}")
        self._notify(path)
        return doc_id

    def set(self, path: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Overwrite an existing document entirely."""
        payload = json.dumps(data, ensure_ascii=False)
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE documents
                SET data = ?, updated_at = datetime('now')
                WHERE collection = ? AND doc_id = ?;
                """,
                (payload, path, doc_id),
            )
            if cur.rowcount == 0:
                raise DocumentNotFoundError(f"No document {doc_id} in {path}")
            conn.commit()
        LOG.debug(f"Overwrote document {doc_id} in {path}")
        self._notify(path)

    def delete(self, path: str, doc_id: str) -> None:
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM documents WHERE collection = ? AND doc_id = ?;",
                (path, doc_id),
            )
            removed = cur.rowcount
            conn.commit()
        if removed:
            LOG.debug(f"Deleted document {doc_id} from {path}")
            self._notify(path)

    # --------------- Subscriptions ---------------
    def subscribe(self, path: str, callback: SnapshotCallback) -> Subscription:
        """Deliver the current snapshot now and a fresh one after each write."""
        sub = Subscription(self, path, callback)
        self._subscriptions.setdefault(path, []).append(sub)
        self._pending.append(sub)
        self._drain()
        return sub

    def _remove_subscription(self, sub: Subscription) -> None:
        subs = self._subscriptions.get(sub.path) or []
        if sub in subs:
            subs.remove(sub)
        if not subs:
            self._subscriptions.pop(sub.path, None)

    def _notify(self, path: str) -> None:
        for sub in list(self._subscriptions.get(path) or []):
            self._pending.append(sub)
        self._drain()

    def _drain(self) -> None:
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                sub = self._pending.popleft()
                if not sub.active:
                    continue
                sub.callback(self.list(sub.path))
        finally:
            self._dispatching = False
            self._pending.clear()
