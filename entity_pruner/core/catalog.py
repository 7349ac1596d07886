"""Field catalog - per-type descriptor tables for prunable entities.

Supports dataclasses, Pydantic models, and plain annotated classes.
Relationship metadata is declared explicitly:

    dataclasses  -> field(metadata={RELATIONSHIP_KEY: Relationship.reference()})
    Pydantic     -> Annotated[Parent | None, Relationship.reference()]
    any class    -> __relationships__ = {"parent": Relationship.reference()}

Catalogs are built once per type and cached for the life of the process.
"""

from __future__ import annotations

import dataclasses
import inspect
import sys
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from entity_pruner.core.enums import FieldKind
from entity_pruner.core.exceptions import FieldAccessError

RELATIONSHIP_KEY = "entity_pruner"

_COLLECTION_TYPES: tuple[type, ...] = (list, set, frozenset, tuple)


@dataclass(frozen=True)
class Relationship:
    """Declared relationship metadata for one field."""

    kind: FieldKind
    target: type | str | None = None
    mapped_by: str | None = None
    collection_type: type | None = None
    transient: bool = False

    @classmethod
    def reference(cls, target: type | str | None = None) -> Relationship:
        """A single-valued association to another entity."""
        return cls(FieldKind.REFERENCE, target=target)

    @classmethod
    def collection(
        cls,
        target: type | str | None = None,
        mapped_by: str | None = None,
        collection_type: type | None = None,
        transient: bool = False,
    ) -> Relationship:
        """A collection of child entities.

        Args:
            target: Child entity type, or its name in the declaring module.
            mapped_by: Name of the child field that points back at the
                parent. None for one-directional collections.
            collection_type: list, set, frozenset or tuple. Inferred from
                the annotation when omitted.
            transient: True for caller-managed collections that are not
                persisted; the engines leave them alone.
        """
        return cls(
            FieldKind.COLLECTION,
            target=target,
            mapped_by=mapped_by,
            collection_type=collection_type,
            transient=transient,
        )

    @classmethod
    def transient_value(cls) -> Relationship:
        """A plain attribute that is never persisted."""
        return cls(FieldKind.VALUE, transient=True)

    @classmethod
    def sidecar(cls) -> Relationship:
        """Pruning bookkeeping (state and field id map)."""
        return cls(FieldKind.SIDECAR, transient=True)


_PLAIN = Relationship(FieldKind.VALUE)


@dataclass(frozen=True)
class FieldDescriptor:
    """Catalog entry for a single field of an entity type."""

    name: str
    owner: type
    kind: FieldKind
    target: type | None = None
    collection_type: type | None = None
    mapped_by: str | None = None
    transient: bool = False

    @property
    def is_reference(self) -> bool:
        return self.kind is FieldKind.REFERENCE

    @property
    def is_collection(self) -> bool:
        return self.kind is FieldKind.COLLECTION

    @property
    def is_value(self) -> bool:
        return self.kind is FieldKind.VALUE

    @property
    def is_private(self) -> bool:
        return self.name.startswith("_")

    def get(self, entity: Any) -> Any:
        """Read this field from an entity."""
        try:
            return getattr(entity, self.name)
        except AttributeError as e:
            raise FieldAccessError(type(entity), self.name, str(e)) from e

    def set(self, entity: Any, value: Any) -> None:
        """Write this field on an entity."""
        try:
            setattr(entity, self.name, value)
        except (AttributeError, TypeError, ValueError) as e:
            raise FieldAccessError(type(entity), self.name, str(e)) from e


def _relationship_from_metadata(metadata: Any) -> Relationship | None:
    """Find a Relationship in dataclass metadata or Pydantic FieldInfo.metadata."""
    if isinstance(metadata, Mapping):
        found = metadata.get(RELATIONSHIP_KEY)
        return found if isinstance(found, Relationship) else None
    for item in metadata or ():
        if isinstance(item, Relationship):
            return item
    return None


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return typing.get_origin(annotation) is typing.ClassVar


def _declared_fields(cls: type) -> list[tuple[str, Relationship | None]]:
    """Declared field names (base to derived) with any relationship metadata."""
    # Pydantic model
    if hasattr(cls, "model_fields") and isinstance(cls.model_fields, Mapping):
        return [
            (name, _relationship_from_metadata(info.metadata))
            for name, info in cls.model_fields.items()
        ]

    # Dataclass
    if dataclasses.is_dataclass(cls):
        return [
            (f.name, _relationship_from_metadata(f.metadata)) for f in dataclasses.fields(cls)
        ]

    # Plain class - annotated attributes across the MRO
    seen: dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, annotation in inspect.get_annotations(klass).items():
            if not _is_class_var(annotation):
                seen.setdefault(name, None)
    return [(name, None) for name in seen]


def _declaring_class(cls: type, name: str) -> type:
    for klass in reversed(cls.__mro__):
        if name in inspect.get_annotations(klass):
            return klass
    return cls


def _type_hints(cls: type) -> dict[str, Any]:
    """Resolved type hints, or an empty dict when forward references fail."""
    if hasattr(cls, "model_fields") and isinstance(cls.model_fields, Mapping):
        # Pydantic has already resolved (and unwrapped) every field annotation.
        return {name: info.annotation for name, info in cls.model_fields.items()}
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError, AttributeError):
        return {}


def _resolve_name(owner: type, name: str) -> type | None:
    module = sys.modules.get(owner.__module__)
    candidate = getattr(module, name, None) if module is not None else None
    return candidate if isinstance(candidate, type) else None


def _unwrap(hint: Any) -> tuple[type | None, type | None]:
    """Split a hint into (entity type, collection type).

    Parent | None      -> (Parent, None)
    list[Child] | None -> (Child, list)
    """
    origin = typing.get_origin(hint)
    if origin in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) != 1:
            return None, None
        return _unwrap(args[0])
    if origin in _COLLECTION_TYPES:
        args = typing.get_args(hint)
        item = args[0] if args else None
        return (item if isinstance(item, type) else None), origin
    if isinstance(hint, type):
        if hint in _COLLECTION_TYPES:
            return None, hint
        return hint, None
    return None, None


class FieldCatalog:
    """Builds and caches field descriptors per runtime type.

    The cache is read-mostly. Two threads building the same type at once
    produce equal tables and the last write wins.
    """

    def __init__(self) -> None:
        self._cache: dict[type, tuple[FieldDescriptor, ...]] = {}
        self._index: dict[type, dict[str, FieldDescriptor]] = {}

    def fields(self, cls: type, include_private: bool = True) -> list[FieldDescriptor]:
        """Ordered descriptors for a type, ancestors' fields first.

        Args:
            cls: The entity type.
            include_private: False omits underscore-prefixed attributes.
        """
        descriptors = self._cache.get(cls)
        if descriptors is None:
            descriptors = self._build(cls)
            # Index first: a type present in _cache always has an index.
            self._index[cls] = {d.name: d for d in descriptors}
            self._cache[cls] = descriptors
        if include_private:
            return list(descriptors)
        return [d for d in descriptors if not d.is_private]

    def get(self, cls: type, name: str) -> FieldDescriptor | None:
        """Descriptor for a named field, or None when the type has no such field."""
        index = self._index.get(cls)
        if index is None:
            index = {d.name: d for d in self.fields(cls)}
        return index.get(name)

    def __contains__(self, cls: object) -> bool:
        return cls in self._cache

    def clear(self) -> None:
        """Drop every cached table."""
        self._cache.clear()
        self._index.clear()

    def _build(self, cls: type) -> tuple[FieldDescriptor, ...]:
        overrides: Mapping[str, Relationship] = getattr(cls, "__relationships__", None) or {}
        hints: dict[str, Any] | None = None
        descriptors: list[FieldDescriptor] = []

        for name, relationship in _declared_fields(cls):
            relationship = overrides.get(name, relationship) or _PLAIN
            owner = _declaring_class(cls, name)
            if relationship.kind in (FieldKind.VALUE, FieldKind.SIDECAR):
                descriptors.append(
                    FieldDescriptor(
                        name=name,
                        owner=owner,
                        kind=relationship.kind,
                        transient=relationship.transient,
                    )
                )
                continue

            if hints is None:
                hints = _type_hints(cls)
            hinted_target, hinted_collection = _unwrap(hints.get(name))

            target = relationship.target
            if isinstance(target, str):
                target = _resolve_name(owner, target)
            if target is None:
                target = hinted_target

            collection_type = None
            if relationship.kind is FieldKind.COLLECTION:
                collection_type = relationship.collection_type or hinted_collection or list

            descriptors.append(
                FieldDescriptor(
                    name=name,
                    owner=owner,
                    kind=relationship.kind,
                    target=target,
                    collection_type=collection_type,
                    mapped_by=relationship.mapped_by,
                    transient=relationship.transient,
                )
            )
        return tuple(descriptors)


default_catalog = FieldCatalog()
