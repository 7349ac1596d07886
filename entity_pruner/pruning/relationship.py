"""Back-reference resolution for bidirectional collections.

A parent collection declared with mapped_by="parent" says that every child
holds a "parent" field pointing back at its owner. Pruning nulls that field
to break the cycle; unpruning puts it back.
"""

from __future__ import annotations

from entity_pruner.core.catalog import FieldCatalog, FieldDescriptor, default_catalog
from entity_pruner.core.exceptions import RelationshipConfigurationError


class RelationshipResolver:
    """Finds the child field that refers back to a parent collection's owner.

    Results are cached per (parent type, collection name, child type).
    """

    def __init__(self, catalog: FieldCatalog = default_catalog) -> None:
        self._catalog = catalog
        self._cache: dict[tuple[type, str, type], FieldDescriptor | None] = {}

    def resolve_back_reference(
        self,
        parent_type: type,
        field_name: str,
        child_type: type,
    ) -> FieldDescriptor | None:
        """Return the child's back-reference descriptor, or None.

        None means the collection is one-directional.

        A back-reference whose target type could not be inferred is
        accepted as long as it is declared as a reference.

        Raises:
            RelationshipConfigurationError: If the collection names a
                mapped_by field the child does not have, that is not a
                single-valued reference, or whose declared type cannot hold
                the parent. Raised once per key; later calls return None.
        """
        key = (parent_type, field_name, child_type)
        if key in self._cache:
            return self._cache[key]

        collection = self._catalog.get(parent_type, field_name)
        mapped_by = collection.mapped_by if collection is not None else None
        if not mapped_by:
            self._cache[key] = None
            return None

        back_reference = self._catalog.get(child_type, mapped_by)
        detail = None
        if back_reference is None:
            detail = f"{child_type.__name__} has no such field"
        elif not back_reference.is_reference:
            detail = f"{child_type.__name__}.{mapped_by} is not a reference"
        elif back_reference.target is not None and not issubclass(
            parent_type, back_reference.target
        ):
            detail = f"{child_type.__name__}.{mapped_by} holds {back_reference.target.__name__}"
        if detail is not None:
            # Reported once, then treated as one-directional.
            self._cache[key] = None
            raise RelationshipConfigurationError(parent_type, field_name, mapped_by, detail)

        self._cache[key] = back_reference
        return back_reference

    def clear(self) -> None:
        self._cache.clear()
