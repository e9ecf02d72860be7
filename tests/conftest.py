from __future__ import annotations

from pathlib import Path

import pytest

from landscape_inventory.identity import IdentityProvider
from landscape_inventory.inventory.session import InventorySession
from landscape_inventory.store import DocumentStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path) -> DocumentStore:
    return DocumentStore(db_path=str(tmp_path / "documents.sqlite3"))


@pytest.fixture
def identity() -> IdentityProvider:
    return IdentityProvider()


@pytest.fixture
def session(store: DocumentStore, identity: IdentityProvider, clock: FakeClock) -> InventorySession:
    """Session signed in as `user-1` with the default seeds in place."""
    s = InventorySession(store, identity, clock=clock).start()
    identity.sign_in("user-1")
    return s
