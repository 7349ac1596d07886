"""Shared plumbing for the prune and unprune engines."""

from __future__ import annotations

import logging
from typing import Any

from entity_pruner.adapters.protocol import LazyLoadingAdapter
from entity_pruner.core.catalog import FieldCatalog, FieldDescriptor, default_catalog
from entity_pruner.core.enums import PruningState
from entity_pruner.core.exceptions import FieldAccessError, RelationshipConfigurationError
from entity_pruner.pruning.entity import Prunable
from entity_pruner.pruning.relationship import RelationshipResolver

logger = logging.getLogger(__name__)


class GraphWalker:
    """Base for engines that walk a prunable entity graph in place.

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

    @property
    def adapter(self) -> LazyLoadingAdapter:
        return self._adapter

    @property
    def catalog(self) -> FieldCatalog:
        return self._catalog

    @staticmethod
    def is_prunable(value: Any) -> bool:
        return isinstance(value, Prunable)

    @staticmethod
    def _set_state(entity: Any, state: PruningState) -> None:
        try:
            entity.pruning_state = state
        except (AttributeError, TypeError, ValueError) as e:
            raise FieldAccessError(type(entity), "pruning_state", str(e)) from e

    @staticmethod
    def _field_id_map(entity: Any) -> dict[str, Any]:
        """The entity's field id map, created on first use."""
        id_map = entity.field_id_map
        if id_map is None:
            id_map = {}
            try:
                entity.field_id_map = id_map
            except (AttributeError, TypeError, ValueError) as e:
                raise FieldAccessError(type(entity), "field_id_map", str(e)) from e
        return id_map

    def _back_reference(
        self,
        parent_type: type,
        descriptor: FieldDescriptor,
        child_type: type,
        resolved: dict[type, FieldDescriptor | None],
    ) -> FieldDescriptor | None:
        """Back-reference for one child type, looked up once per collection."""
        if child_type not in resolved:
            try:
                resolved[child_type] = self._resolver.resolve_back_reference(
                    parent_type, descriptor.name, child_type
                )
            except RelationshipConfigurationError as e:
                logger.warning("%s; treating the collection as one-directional", e)
                resolved[child_type] = None
        return resolved[child_type]
