"""Prunable entity bases and field declaration helpers.

Dataclass entities inherit from PrunableEntity and declare relationships
with reference() and collection():

    @dataclass
    class Parent(PrunableEntity):
        id: int | None = None
        code: str | None = None
        children: list[Child] = collection("Child", mapped_by="parent")

    @dataclass
    class Child(PrunableEntity):
        id: int | None = None
        parent: Parent | None = reference("Parent")

Pydantic entities inherit from PrunableModel and use Annotated metadata:

    class Parent(PrunableModel):
        children: Annotated[list[Child], Relationship.collection(mapped_by="parent")] = []
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from entity_pruner.core.catalog import RELATIONSHIP_KEY, FieldCatalog, Relationship, default_catalog
from entity_pruner.core.enums import FieldKind, PruningState


@runtime_checkable
class Prunable(Protocol):
    """Anything the pruning engines can walk into."""

    pruning_state: PruningState | None
    field_id_map: dict[str, Any] | None

    def is_persistent(self) -> bool:
        """True if the entity has been saved to storage."""
        ...


def reference(target: type | str | None = None, *, default: Any = None, **kwargs: Any) -> Any:
    """Declare a single-valued association on a dataclass entity.

    repr and compare default to False so that parent/child cycles do not
    recurse through __repr__ or __eq__.
    """
    kwargs.setdefault("repr", False)
    kwargs.setdefault("compare", False)
    return field(
        default=default,
        metadata={RELATIONSHIP_KEY: Relationship.reference(target)},
        **kwargs,
    )


def collection(
    target: type | str | None = None,
    *,
    mapped_by: str | None = None,
    collection_type: type | None = None,
    transient: bool = False,
    **kwargs: Any,
) -> Any:
    """Declare a collection of child entities on a dataclass entity."""
    kwargs.setdefault("repr", False)
    kwargs.setdefault("compare", False)
    if "default" not in kwargs:
        kwargs.setdefault("default_factory", collection_type or list)
    return field(
        metadata={
            RELATIONSHIP_KEY: Relationship.collection(
                target,
                mapped_by=mapped_by,
                collection_type=collection_type,
                transient=transient,
            )
        },
        **kwargs,
    )


def transient(*, default: Any = None, **kwargs: Any) -> Any:
    """Declare a plain attribute that is never persisted."""
    kwargs.setdefault("compare", False)
    return field(
        default=default,
        metadata={RELATIONSHIP_KEY: Relationship.transient_value()},
        **kwargs,
    )


@dataclass(eq=False)
class PrunableEntity:
    """Dataclass base for prunable entities.

    pruning_state and field_id_map travel with the entity when it is
    serialized, but must never be mapped to storage. Subclasses declared
    with @dataclass(eq=False) keep identity equality and hashing, which
    set-valued collections need.
    """

    identifier_field: ClassVar[str] = "id"

    pruning_state: PruningState | None = field(
        default=PruningState.UNPRUNED,
        kw_only=True,
        repr=False,
        compare=False,
        metadata={RELATIONSHIP_KEY: Relationship.sidecar()},
    )
    field_id_map: dict[str, Any] = field(
        default_factory=dict,
        kw_only=True,
        repr=False,
        compare=False,
        metadata={RELATIONSHIP_KEY: Relationship.sidecar()},
    )

    def is_persistent(self) -> bool:
        return getattr(self, self.identifier_field, None) is not None


class PrunableModel(BaseModel):
    """Pydantic base for prunable entities."""

    identifier_field: ClassVar[str] = "id"

    pruning_state: Annotated[PruningState | None, Relationship.sidecar()] = PruningState.UNPRUNED
    field_id_map: Annotated[dict[str, Any], Relationship.sidecar()] = Field(default_factory=dict)

    def is_persistent(self) -> bool:
        return getattr(self, self.identifier_field, None) is not None


def copy_transient_data(
    source: Any, dest: Any, catalog: FieldCatalog = default_catalog
) -> None:
    """Copy every transient attribute from one entity to another.

    A DAO save usually hands back a fresh copy of the entity, which loses
    anything that was never written to storage.

    Raises:
        FieldAccessError: If a transient attribute cannot be read or written.
    """
    for descriptor in catalog.fields(type(source), include_private=False):
        if descriptor.transient and descriptor.kind is not FieldKind.SIDECAR:
            descriptor.set(dest, descriptor.get(source))
