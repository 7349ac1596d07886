"""Pruning layer - prune and unprune entity graphs in place."""

from __future__ import annotations

from entity_pruner.pruning.entity import (
    Prunable,
    PrunableEntity,
    PrunableModel,
    collection,
    copy_transient_data,
    reference,
    transient,
)
from entity_pruner.pruning.populate import deproxy, is_initialized, populate
from entity_pruner.pruning.prune import PruneEngine
from entity_pruner.pruning.pruner import EntityPruner
from entity_pruner.pruning.relationship import RelationshipResolver
from entity_pruner.pruning.unprune import UnpruneEngine

__all__ = [
    "EntityPruner",
    "PruneEngine",
    "UnpruneEngine",
    "RelationshipResolver",
    "Prunable",
    "PrunableEntity",
    "PrunableModel",
    "reference",
    "collection",
    "transient",
    "copy_transient_data",
    "populate",
    "deproxy",
    "is_initialized",
]
