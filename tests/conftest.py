"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from entity_pruner.adapters.memory import InMemoryAdapter
from entity_pruner.core.catalog import FieldCatalog
from entity_pruner.pruning.pruner import EntityPruner


@pytest.fixture
def store() -> dict[tuple[type, Any], Any]:
    """Backing store for the in-memory adapter, keyed by (type, id)."""
    return {}


@pytest.fixture
def child_store() -> dict[tuple[int, str], list[Any]]:
    """Collection contents keyed by (id(owner), field name)."""
    return {}


@pytest.fixture
def adapter(store, child_store) -> InMemoryAdapter:
    """In-memory adapter whose loaders read from the store fixtures.

    Usage:
        store[(Parent, 42)] = Parent(id=42)
        ref = adapter.create_placeholder(Parent, 42)
    """

    def load(target: type, identifier: Any) -> Any:
        return store[(target, identifier)]

    def load_children(owner: Any, field_name: str) -> list[Any]:
        return child_store.get((id(owner), field_name), [])

    return InMemoryAdapter(loader=load, collection_loader=load_children)


@pytest.fixture
def catalog() -> FieldCatalog:
    """A fresh catalog so tests never share cached tables."""
    return FieldCatalog()


@pytest.fixture
def pruner(adapter: InMemoryAdapter, catalog: FieldCatalog) -> EntityPruner:
    """Pruner wired to the in-memory adapter and a fresh catalog."""
    return EntityPruner(adapter, catalog)
