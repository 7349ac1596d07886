"""Unprune engine.

Reverses a prune before a snapshot is handed back to the persistence
layer: references stripped while lazy become placeholders again, null
collections of persistent entities become uninitialized placeholders (so
"absent" is not mistaken for "no children"), and children get their
back-references restored.
"""

from __future__ import annotations

import logging
from typing import Any

from entity_pruner.core.catalog import FieldDescriptor
from entity_pruner.core.enums import FieldKind, PruningState, parse_state
from entity_pruner.core.exceptions import UnknownTargetError
from entity_pruner.pruning.base import GraphWalker

logger = logging.getLogger(__name__)


class UnpruneEngine(GraphWalker):
    """Inverse of PruneEngine."""

    def unprune(self, entity: Any) -> None:
        """Restore a pruned entity graph in place.

        A PRUNED_COMPLETE entity becomes UNPRUNED. Anything else that is
        not already unpruned, including a missing state, becomes
        UNPRUNED_PARTIAL.

        Raises:
            FieldAccessError: If a field cannot be read or written.
            UnknownTargetError: If a stripped reference has no resolvable type.
        """
        if entity is None or not self.is_prunable(entity):
            return
        state = parse_state(entity.pruning_state)
        if state is not None and state.is_unpruned:
            return

        logger.debug("Unpruning %s (state=%s)", type(entity).__name__, state)
        if state is PruningState.PRUNED_COMPLETE:
            self._set_state(entity, PruningState.UNPRUNED)
        else:
            self._set_state(entity, PruningState.UNPRUNED_PARTIAL)

        for descriptor in self._catalog.fields(type(entity)):
            if descriptor.kind is FieldKind.SIDECAR:
                continue
            if descriptor.is_reference:
                self._unprune_reference(entity, descriptor)
            elif descriptor.is_collection and not descriptor.transient:
                self._unprune_collection(entity, descriptor)

    def _unprune_reference(self, entity: Any, descriptor: FieldDescriptor) -> None:
        value = descriptor.get(entity)
        if value is not None:
            if not self._adapter.is_lazy_placeholder(value):
                self.unprune(value)
            return

        # No id means the reference was never set, or was cleared on purpose.
        id_map = entity.field_id_map or {}
        identifier = id_map.get(descriptor.name)
        if identifier is None:
            return
        if descriptor.target is None:
            raise UnknownTargetError(type(entity), descriptor.name)
        descriptor.set(entity, self._adapter.create_placeholder(descriptor.target, identifier))

    def _unprune_collection(self, entity: Any, descriptor: FieldDescriptor) -> None:
        collection = descriptor.get(entity)
        adapter = self._adapter

        if collection is not None:
            if adapter.is_lazy_collection(collection) and not adapter.is_initialized(collection):
                return
            # Some deserializers turn a null collection into [None].
            if any(child is None for child in collection):
                logger.debug(
                    "Treating %s.%s as null: it contains None",
                    type(entity).__name__,
                    descriptor.name,
                )
                collection = None

        if collection is None:
            replacement = None
            if entity.is_persistent():
                replacement = adapter.create_uninitialized_collection(
                    descriptor.collection_type or list,
                    owner=entity,
                    field_name=descriptor.name,
                )
            descriptor.set(entity, replacement)
            return

        resolved: dict[type, FieldDescriptor | None] = {}
        for child in list(collection):
            if not self.is_prunable(child):
                continue
            self.unprune(child)
            # Restored after the child is unpruned, mirroring the prune order.
            back_reference = self._back_reference(type(entity), descriptor, type(child), resolved)
            if back_reference is not None:
                back_reference.set(child, entity)
