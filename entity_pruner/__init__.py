"""Entity Pruner - safe, finite snapshots of persistent entity graphs."""

from __future__ import annotations

from entity_pruner.adapters.memory import InMemoryAdapter, LazyCollection, LazyReference
from entity_pruner.adapters.protocol import LazyLoadingAdapter
from entity_pruner.core.catalog import (
    FieldCatalog,
    FieldDescriptor,
    Relationship,
    default_catalog,
)
from entity_pruner.core.enums import FieldKind, PruningState
from entity_pruner.core.exceptions import (
    AdapterError,
    CatalogError,
    EntityPrunerError,
    FieldAccessError,
    RelationshipConfigurationError,
    RelationshipError,
    UnknownTargetError,
    UnsupportedCollectionError,
)
from entity_pruner.core.options import DEPTH, INCLUDE, SELECT, PruningOptions
from entity_pruner.pruning import (
    EntityPruner,
    Prunable,
    PrunableEntity,
    PrunableModel,
    PruneEngine,
    RelationshipResolver,
    UnpruneEngine,
    collection,
    copy_transient_data,
    deproxy,
    is_initialized,
    populate,
    reference,
    transient,
)

__all__ = [
    # Pruning
    "EntityPruner",
    "PruneEngine",
    "UnpruneEngine",
    "RelationshipResolver",
    "populate",
    "deproxy",
    "is_initialized",
    "copy_transient_data",
    # Entities
    "Prunable",
    "PrunableEntity",
    "PrunableModel",
    "reference",
    "collection",
    "transient",
    # Catalog
    "FieldCatalog",
    "FieldDescriptor",
    "Relationship",
    "default_catalog",
    # Options
    "PruningOptions",
    "DEPTH",
    "INCLUDE",
    "SELECT",
    # Adapters
    "LazyLoadingAdapter",
    "InMemoryAdapter",
    "LazyReference",
    "LazyCollection",
    # Enums
    "PruningState",
    "FieldKind",
    # Exceptions
    "EntityPrunerError",
    "CatalogError",
    "FieldAccessError",
    "UnsupportedCollectionError",
    "UnknownTargetError",
    "RelationshipError",
    "RelationshipConfigurationError",
    "AdapterError",
]
