"""Prune engine.

Turns a live entity graph into a finite, acyclic snapshot that is safe to
serialize:

- materialized placeholders are replaced by their entities
- unmaterialized placeholders are nulled, their identifiers recorded in
  the owner's field_id_map
- collections outside the requested depth/include are nulled
- back-references from children to their parent collection owner are nulled
- plain attributes outside a select list are nulled (PRUNED_PARTIAL)

An entity is marked pruned before its fields are visited, so a cycle back
to it stops there.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from entity_pruner.core.catalog import FieldDescriptor
from entity_pruner.core.enums import FieldKind, PruningState, parse_state
from entity_pruner.core.options import PruningOptions
from entity_pruner.pruning.base import GraphWalker

logger = logging.getLogger(__name__)


class PruneEngine(GraphWalker):
    """Depth and attribute bounded, cycle-safe graph pruning."""

    def prune(
        self,
        entity: Any,
        options: PruningOptions | Mapping[str, Any] | int | None = None,
    ) -> None:
        """Prune an entity graph in place.

        Args:
            entity: Root of the graph. None is a no-op.
            options: A PruningOptions, a client option map
                ({"depth": ..., "include": ..., "select": ...}), a bare
                depth, or None for an unbounded prune.

        Raises:
            FieldAccessError: If a field cannot be read or written.
        """
        self._prune(entity, PruningOptions.from_mapping(options))

    def _prune(self, entity: Any, options: PruningOptions) -> None:
        if entity is None or not self.is_prunable(entity):
            return
        state = parse_state(entity.pruning_state)
        if state is not None and state.is_pruned:
            return

        logger.debug("Pruning %s (depth=%s)", type(entity).__name__, options.depth)
        # Marked before visiting fields; cycles back to this entity stop here.
        self._set_state(entity, PruningState.PRUNED_COMPLETE)

        # Single-valued references keep the current depth.
        reference_options = options.for_children(options.depth)

        for descriptor in self._catalog.fields(type(entity)):
            if descriptor.kind is FieldKind.SIDECAR:
                continue
            if descriptor.is_reference:
                self._prune_reference(entity, descriptor, reference_options)
            elif descriptor.is_collection:
                if not descriptor.transient:
                    self._prune_collection(entity, descriptor, options)
            elif not options.selects(descriptor.name):
                descriptor.set(entity, None)
                self._set_state(entity, PruningState.PRUNED_PARTIAL)

    def _prune_reference(
        self, entity: Any, descriptor: FieldDescriptor, options: PruningOptions
    ) -> None:
        value = descriptor.get(entity)
        adapter = self._adapter

        if value is not None and adapter.is_lazy_placeholder(value):
            if not adapter.is_materialized(value):
                self._field_id_map(entity)[descriptor.name] = adapter.identifier_of(value)
                descriptor.set(entity, None)
                return
            value = adapter.materialized_value(value)
            descriptor.set(entity, value)

        # Only fields stripped while unmaterialized may appear in the map.
        if entity.field_id_map:
            entity.field_id_map.pop(descriptor.name, None)

        self._prune(value, options)

    def _expands(self, descriptor: FieldDescriptor, options: PruningOptions) -> bool:
        if options.include is not None:
            return descriptor.name in options.include
        return options.depth is None or options.depth > 1

    def _prune_collection(
        self, entity: Any, descriptor: FieldDescriptor, options: PruningOptions
    ) -> None:
        collection = descriptor.get(entity)
        if collection is None:
            return
        if not self._expands(descriptor, options):
            descriptor.set(entity, None)
            return

        adapter = self._adapter
        if adapter.is_lazy_collection(collection):
            if not adapter.is_initialized(collection):
                # Never fetched; null means "children not loaded".
                descriptor.set(entity, None)
                return
            collection = adapter.snapshot(collection, descriptor.collection_type or list)

        child_depth = None if options.depth is None else options.depth - 1
        child_options = options.for_children(child_depth)
        resolved: dict[type, FieldDescriptor | None] = {}

        for child in list(collection):
            if not self.is_prunable(child):
                continue
            back_reference = self._back_reference(type(entity), descriptor, type(child), resolved)
            if back_reference is not None:
                back_reference.set(child, None)
            self._prune(child, child_options)

        descriptor.set(entity, collection)
