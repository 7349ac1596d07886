"""In-memory lazy-loading adapter.

Placeholders backed by plain callables instead of a database session.
Useful for tests, examples and services that assemble entity graphs
without an ORM.

    def load(target, identifier):
        return repository[target][identifier]

    adapter = InMemoryAdapter(loader=load)
    child.parent = adapter.create_placeholder(Parent, 42)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableSequence
from typing import Any

from entity_pruner.core.exceptions import AdapterError, UnsupportedCollectionError

ReferenceLoader = Callable[[type, Any], Any]
CollectionLoader = Callable[[Any, str], Iterable[Any]]

_SUPPORTED_COLLECTIONS: tuple[type, ...] = (list, set, frozenset, tuple)

_UNSET = object()


class LazyReference:
    """Placeholder for a single entity identified by (target, identifier)."""

    def __init__(
        self,
        target: type,
        identifier: Any,
        loader: ReferenceLoader | None = None,
        value: Any = _UNSET,
    ) -> None:
        self.target = target
        self.identifier = identifier
        self._loader = loader
        self._value = value

    @property
    def initialized(self) -> bool:
        return self._value is not _UNSET

    def load(self) -> Any:
        """Return the entity, calling the loader on first access."""
        if self._value is _UNSET:
            if self._loader is None:
                raise AdapterError(
                    f"Cannot load {self.target.__name__} #{self.identifier}: no loader configured"
                )
            self._value = self._loader(self.target, self.identifier)
        return self._value

    def __repr__(self) -> str:
        state = "loaded" if self.initialized else "unloaded"
        return f"<LazyReference {self.target.__name__} #{self.identifier!r} ({state})>"


class LazyCollection(MutableSequence):
    """List-like collection whose elements are fetched on first access."""

    def __init__(
        self,
        collection_type: type = list,
        items: Iterable[Any] | None = None,
        owner: Any = None,
        field_name: str | None = None,
        loader: CollectionLoader | None = None,
    ) -> None:
        self.collection_type = collection_type
        self.owner = owner
        self.field_name = field_name
        self._loader = loader
        self._items: list[Any] | None = list(items) if items is not None else None

    @property
    def initialized(self) -> bool:
        return self._items is not None

    def load(self) -> list[Any]:
        """Fetch the elements through the loader if not done yet."""
        if self._items is None:
            if self._loader is None or self.field_name is None:
                raise AdapterError(
                    f"Cannot load collection '{self.field_name}': no loader configured"
                )
            self._items = list(self._loader(self.owner, self.field_name))
        return self._items

    def __getitem__(self, index: Any) -> Any:
        return self.load()[index]

    def __setitem__(self, index: Any, value: Any) -> None:
        self.load()[index] = value

    def __delitem__(self, index: Any) -> None:
        del self.load()[index]

    def __len__(self) -> int:
        return len(self.load())

    def __iter__(self) -> Iterator[Any]:
        return iter(self.load())

    def insert(self, index: int, value: Any) -> None:
        self.load().insert(index, value)

    def __repr__(self) -> str:
        if self._items is None:
            return f"<LazyCollection {self.field_name!r} (unloaded)>"
        return f"<LazyCollection {self.field_name!r} {self._items!r}>"


class InMemoryAdapter:
    """LazyLoadingAdapter implementation for LazyReference and LazyCollection.

    Args:
        loader: Called as loader(target, identifier) to materialize a
            reference placeholder.
        collection_loader: Called as collection_loader(owner, field_name)
            to fill an uninitialized collection.
    """

    def __init__(
        self,
        loader: ReferenceLoader | None = None,
        collection_loader: CollectionLoader | None = None,
    ) -> None:
        self._loader = loader
        self._collection_loader = collection_loader

    def is_lazy_placeholder(self, value: Any) -> bool:
        return isinstance(value, LazyReference)

    def is_materialized(self, placeholder: LazyReference) -> bool:
        return placeholder.initialized

    def materialized_value(self, placeholder: LazyReference) -> Any:
        return placeholder.load()

    def identifier_of(self, placeholder: LazyReference) -> Any:
        return placeholder.identifier

    def create_placeholder(self, target: type, identifier: Any) -> LazyReference:
        return LazyReference(target, identifier, loader=self._loader)

    def is_lazy_collection(self, value: Any) -> bool:
        return isinstance(value, LazyCollection)

    def is_initialized(self, collection: LazyCollection) -> bool:
        return collection.initialized

    def initialize(self, collection: LazyCollection) -> None:
        collection.load()

    def snapshot(self, collection: Iterable[Any], collection_type: type) -> Any:
        if collection_type not in _SUPPORTED_COLLECTIONS:
            raise UnsupportedCollectionError(collection_type)
        return collection_type(collection)

    def create_uninitialized_collection(
        self,
        collection_type: type,
        owner: Any = None,
        field_name: str | None = None,
    ) -> LazyCollection:
        if collection_type not in _SUPPORTED_COLLECTIONS:
            raise UnsupportedCollectionError(collection_type)
        return LazyCollection(
            collection_type,
            owner=owner,
            field_name=field_name,
            loader=self._collection_loader,
        )
