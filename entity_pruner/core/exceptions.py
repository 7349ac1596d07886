"""Entity pruner exception hierarchy.

Field access problems are always fatal and propagate to the caller.
Relationship misconfiguration is reported through
RelationshipConfigurationError, which the engines downgrade to a warning.
"""

from __future__ import annotations


class EntityPrunerError(Exception):
    """Base exception for all entity pruner errors."""


# --- Catalog ---


class CatalogError(EntityPrunerError):
    """Base for field catalog and field access errors."""


class FieldAccessError(CatalogError):
    """Raised when a catalogued attribute cannot be read or written."""

    def __init__(self, entity_type: type, field_name: str, detail: str) -> None:
        self.entity_type = entity_type
        self.field_name = field_name
        super().__init__(
            f"Cannot access field '{field_name}' of {entity_type.__name__}: {detail}"
        )


class UnsupportedCollectionError(CatalogError):
    """Raised when a collection type cannot be copied or recreated."""

    def __init__(self, collection_type: object) -> None:
        self.collection_type = collection_type
        super().__init__(f"{collection_type!r} collections are not supported")


class UnknownTargetError(CatalogError):
    """Raised when a reference must be restored but its target type is unknown."""

    def __init__(self, entity_type: type, field_name: str) -> None:
        self.entity_type = entity_type
        self.field_name = field_name
        super().__init__(
            f"Cannot restore '{field_name}' of {entity_type.__name__}: "
            "the referenced type could not be resolved"
        )


# --- Relationships ---


class RelationshipError(EntityPrunerError):
    """Base for relationship resolution errors."""


class RelationshipConfigurationError(RelationshipError):
    """Raised when a bidirectional mapping points at a missing or mistyped field."""

    def __init__(self, parent_type: type, field_name: str, mapped_by: str, detail: str) -> None:
        self.parent_type = parent_type
        self.field_name = field_name
        self.mapped_by = mapped_by
        super().__init__(
            f"{parent_type.__name__}.{field_name} is mapped by '{mapped_by}', but {detail}"
        )


# --- Adapter ---


class AdapterError(EntityPrunerError):
    """Raised by lazy-loading adapters when a placeholder cannot be handled."""
