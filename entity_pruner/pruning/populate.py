"""Loading helpers used before pruning.

populate() fetches what a request asked for while a persistence session is
still available, so that the later prune keeps it instead of stripping
unloaded placeholders.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from entity_pruner.adapters.protocol import LazyLoadingAdapter
from entity_pruner.core.catalog import FieldCatalog, default_catalog
from entity_pruner.core.options import PruningOptions
from entity_pruner.pruning.entity import Prunable


def is_initialized(collection: Any, adapter: LazyLoadingAdapter) -> bool:
    """True if the collection can be read without a database round trip.

    None counts as uninitialized.
    """
    if collection is None:
        return False
    if adapter.is_lazy_collection(collection):
        return adapter.is_initialized(collection)
    return True


def deproxy(value: Any, adapter: LazyLoadingAdapter) -> Any:
    """Return the entity behind a placeholder, or value itself."""
    if value is not None and adapter.is_lazy_placeholder(value):
        return adapter.materialized_value(value)
    return value


def populate(
    entity: Any,
    options: PruningOptions | Mapping[str, Any] | int | None,
    adapter: LazyLoadingAdapter,
    catalog: FieldCatalog = default_catalog,
) -> None:
    """Load the parts of an entity graph a request asked for.

    Options are read the same way as for pruning, but:

    - depth defaults to 1 (the entity and its references)
    - references are loaded when named in select, or when there is no
      select and depth > 0
    - collections are loaded when named in include, or when there is no
      include and depth > 1; their children are populated with depth - 1
    - include and select apply to the top entity only
    """
    parsed = PruningOptions.from_mapping(options)
    depth = 1 if parsed.depth is None else parsed.depth
    _populate(entity, depth, parsed.include, parsed.select, adapter, catalog)


def _populate(
    entity: Any,
    depth: int,
    include: frozenset[str] | None,
    select: frozenset[str] | None,
    adapter: LazyLoadingAdapter,
    catalog: FieldCatalog,
) -> None:
    if entity is None or not isinstance(entity, Prunable):
        return

    for descriptor in catalog.fields(type(entity)):
        if descriptor.is_reference:
            selected = select is not None and descriptor.name in select
            if selected or (select is None and depth > 0):
                deproxy(descriptor.get(entity), adapter)
        elif descriptor.is_collection:
            included = include is not None and descriptor.name in include
            if not (included or (include is None and depth > 1)):
                continue
            collection = descriptor.get(entity)
            if collection is None:
                continue
            if not is_initialized(collection, adapter):
                adapter.initialize(collection)
            for child in list(collection):
                _populate(child, depth - 1, None, None, adapter, catalog)
