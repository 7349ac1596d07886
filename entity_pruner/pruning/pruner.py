"""EntityPruner - single entry point for the RPC/service boundary.

    pruner = EntityPruner(InMemoryAdapter(loader=load))
    pruner.prune(order, {"depth": "2", "include": "lines"})
    payload = serialize(order)
    ...
    incoming = deserialize(payload)
    pruner.unprune(incoming)
    dao.save(incoming)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from entity_pruner.adapters.protocol import LazyLoadingAdapter
from entity_pruner.core.catalog import FieldCatalog, default_catalog
from entity_pruner.core.options import PruningOptions
from entity_pruner.pruning.populate import deproxy, populate
from entity_pruner.pruning.prune import PruneEngine
from entity_pruner.pruning.relationship import RelationshipResolver
from entity_pruner.pruning.unprune import UnpruneEngine


class EntityPruner:
    """Prunes entity graphs before serialization and restores them afterwards.

    Both engines share one catalog and one relationship resolver.

    Args:
        adapter: Persistence provider capability for placeholders.
        catalog: Field catalog. Defaults to the process-wide one.
        resolver: Back-reference resolver. Defaults to one built on catalog.
    """

    def __init__(
        self,
        adapter: LazyLoadingAdapter,
        catalog: FieldCatalog | None = None,
        resolver: RelationshipResolver | None = None,
    ) -> None:
        self._adapter = adapter
        self._catalog = catalog if catalog is not None else default_catalog
        self._resolver = resolver if resolver is not None else RelationshipResolver(self._catalog)
        self._prune_engine = PruneEngine(adapter, self._catalog, self._resolver)
        self._unprune_engine = UnpruneEngine(adapter, self._catalog, self._resolver)

    @property
    def adapter(self) -> LazyLoadingAdapter:
        return self._adapter

    def prune(
        self,
        entity: Any,
        options: PruningOptions | Mapping[str, Any] | int | None = None,
    ) -> None:
        """Prune entity in place. See PruneEngine.prune."""
        self._prune_engine.prune(entity, options)

    def unprune(self, entity: Any) -> None:
        """Restore entity in place. See UnpruneEngine.unprune."""
        self._unprune_engine.unprune(entity)

    def populate(
        self,
        entity: Any,
        options: PruningOptions | Mapping[str, Any] | int | None = None,
    ) -> None:
        """Load what options ask for. See populate()."""
        populate(entity, options, self._adapter, self._catalog)

    def deproxy(self, value: Any) -> Any:
        return deproxy(value, self._adapter)
