"""Pruning options.

PruningOptions is a Pydantic model built from the flat, string-keyed map a
remote client sends along with a request:

    {"depth": "2", "include": "children, notes", "select": "code,description"}

Malformed values never raise. An unparseable depth means "unbounded" and
unknown attribute names are simply never matched.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

DEPTH = "depth"
INCLUDE = "include"
SELECT = "select"


def _split_names(value: Any) -> frozenset[str] | None:
    """Turn "a, b,,c" (or an iterable of names) into {"a", "b", "c"}."""
    if value is None:
        return None
    if isinstance(value, str):
        parts: Iterable[Any] = value.split(",")
    elif isinstance(value, Iterable):
        parts = value
    else:
        parts = [value]
    names = frozenset(str(part).strip() for part in parts if part is not None)
    names = names - {""}
    return names or None


class PruningOptions(BaseModel):
    """Depth, include and select settings for a single prune call.

    Attributes:
        depth: 1 keeps only the entity, N expands N-1 levels of
            collections. None means unbounded.
        include: Collection names to expand regardless of depth. Once
            present, every other collection is dropped.
        select: The only plain attributes to keep.
    """

    model_config = ConfigDict(frozen=True)

    depth: int | None = None
    include: frozenset[str] | None = None
    select: frozenset[str] | None = None

    @field_validator("depth", mode="before")
    @classmethod
    def _parse_depth(cls, value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            return None

    @field_validator("include", "select", mode="before")
    @classmethod
    def _parse_names(cls, value: Any) -> frozenset[str] | None:
        return _split_names(value)

    @classmethod
    def from_mapping(
        cls, options: PruningOptions | Mapping[str, Any] | int | None
    ) -> PruningOptions:
        """Build options from a client map, a bare depth, or None."""
        if isinstance(options, PruningOptions):
            return options
        if options is None:
            return cls()
        if isinstance(options, int) and not isinstance(options, bool):
            return cls(depth=options)
        if isinstance(options, Mapping):
            return cls(
                depth=options.get(DEPTH),
                include=options.get(INCLUDE),
                select=options.get(SELECT),
            )
        return cls()

    def for_children(self, depth: int | None) -> PruningOptions:
        """Options for a recursive call. Include and select never cascade."""
        return PruningOptions(depth=depth)

    def includes(self, name: str) -> bool:
        return self.include is not None and name in self.include

    def selects(self, name: str) -> bool:
        return self.select is None or name in self.select
