"""Pruning state and field classification enumerations."""

from __future__ import annotations

from enum import Enum


class PruningState(str, Enum):
    """Pruning state carried by every prunable entity.

    Values are plain strings so the state survives any serialization
    format the caller picks.
    """

    UNPRUNED = "UNPRUNED"
    PRUNED_COMPLETE = "PRUNED_COMPLETE"
    PRUNED_PARTIAL = "PRUNED_PARTIAL"
    UNPRUNED_PARTIAL = "UNPRUNED_PARTIAL"

    @property
    def is_pruned(self) -> bool:
        return self in (PruningState.PRUNED_COMPLETE, PruningState.PRUNED_PARTIAL)

    @property
    def is_unpruned(self) -> bool:
        return self in (PruningState.UNPRUNED, PruningState.UNPRUNED_PARTIAL)


class FieldKind(Enum):
    """How the engines treat a catalogued field."""

    VALUE = "value"
    REFERENCE = "reference"
    COLLECTION = "collection"
    SIDECAR = "sidecar"


def parse_state(value: object) -> PruningState | None:
    """Coerce a state received from a client into a PruningState.

    Unknown values are treated like a missing state.
    """
    if value is None or isinstance(value, PruningState):
        return value
    try:
        return PruningState(str(value))
    except ValueError:
        return None
