"""Lazy-loading adapter protocol.

This is the only boundary between the pruning engines and a persistence
provider. The engines never inspect provider types directly; they only ask
the adapter these questions.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LazyLoadingAdapter(Protocol):
    """Persistence provider capability used by the prune and unprune engines."""

    # --- Single-valued references ---

    def is_lazy_placeholder(self, value: Any) -> bool:
        """True if value is a provider placeholder for an entity."""
        ...

    def is_materialized(self, placeholder: Any) -> bool:
        """True if the placeholder already holds its entity."""
        ...

    def materialized_value(self, placeholder: Any) -> Any:
        """Return the concrete entity behind a placeholder, loading it if needed."""
        ...

    def identifier_of(self, placeholder: Any) -> Any:
        """Return the identifier a placeholder stands for."""
        ...

    def create_placeholder(self, target: type, identifier: Any) -> Any:
        """Create an unmaterialized placeholder for target with identifier."""
        ...

    # --- Collections ---

    def is_lazy_collection(self, value: Any) -> bool:
        """True if value is a provider collection wrapper."""
        ...

    def is_initialized(self, collection: Any) -> bool:
        """True if the collection's elements have been loaded."""
        ...

    def initialize(self, collection: Any) -> None:
        """Load the collection's elements."""
        ...

    def snapshot(self, collection: Iterable[Any], collection_type: type) -> Any:
        """Copy a collection into a plain instance of collection_type."""
        ...

    def create_uninitialized_collection(
        self,
        collection_type: type,
        owner: Any = None,
        field_name: str | None = None,
    ) -> Any:
        """Create an unloaded collection wrapper for owner.field_name."""
        ...
