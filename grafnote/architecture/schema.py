"""Graph type schema snapshots.

The schema of a grafnote database is loose: it only says which properties a
node or relationship type usually carries, which relationship types a node
type may start, and which node types a relationship type may point to. It is
the source of truth for the choices offered by the editor before any data
exists.

Key Components:
    - TypeSchema: type name -> ordered property names
    - AdjacencySchema: node type -> relationship types, relationship type -> node types
    - GraphSchema: immutable snapshot bundling the four mappings

Snapshots are frozen. Adding a property a user has just typed produces a new
snapshot, so a snapshot held by a running lookup never changes under it.

Example:
    >>> schema = GraphSchema(
    ...     node_properties=TypeSchema(entries={"Person": ("name", "age")}),
    ... )
    >>> schema.property_names("Person")  # ("name", "age")
    >>> schema.property_names("Place")  # (" ",)
    >>> schema = schema.with_node_property("Person", "email")
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ConfigDict, Field as PydanticField, field_validator

from grafnote.architecture.base import ConfigBaseModel
from grafnote.onto import PLACEHOLDER

logger = logging.getLogger(__name__)

# Options offered for a schema row with no trailing columns.
EMPTY_ROW = (PLACEHOLDER, PLACEHOLDER)


class TypeSchema(ConfigBaseModel):
    """Mapping from a type name to an ordered sequence of names.

    Used both for property lists (node/relationship type -> property names)
    and for adjacency lists (node type -> relationship types, relationship
    type -> target node types). Insertion order of keys and values is kept
    and duplicate values are not removed.
    """

    model_config = ConfigDict(frozen=True)

    entries: dict[str, tuple[str, ...]] = PydanticField(
        default_factory=dict,
        description="Type name -> ordered names taken from the source row.",
    )

    @field_validator("entries", mode="before")
    @classmethod
    def _normalize_entries(cls, v: Any) -> Any:
        """Replace empty rows by the placeholder pair."""
        if not isinstance(v, dict):
            return v
        return {k: tuple(vals) if vals else EMPTY_ROW for k, vals in v.items()}

    @classmethod
    def from_rows(cls, rows: list[list[str]]) -> TypeSchema:
        """Build a mapping from rows of the form ``[key, value1, value2, ...]``.

        Empty rows are ignored. A later row with the same key replaces an
        earlier one.
        """
        entries: dict[str, tuple[str, ...]] = {}
        for row in rows:
            if not row:
                continue
            key, *values = row
            if key in entries:
                logger.debug(f"Schema key '{key}' defined twice, keeping last row")
            entries[key] = tuple(values)
        return cls(entries=entries)

    def keys(self) -> tuple[str, ...]:
        return tuple(self.entries)

    def get(self, key: str) -> tuple[str, ...]:
        """Return the names for ``key`` or the placeholder if it is absent."""
        return self.entries.get(key, (PLACEHOLDER,))

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def with_value(self, key: str, value: str) -> TypeSchema:
        """Return a new mapping where ``value`` is appended to ``key``'s names.

        If ``value`` is already listed, ``self`` is returned unchanged. A key
        whose row was empty loses its placeholder pair.
        """
        current = self.entries.get(key, ())
        if value in current:
            return self
        kept = tuple(v for v in current if v != PLACEHOLDER)
        entries = dict(self.entries)
        entries[key] = kept + (value,)
        return TypeSchema(entries=entries)


class AdjacencySchema(ConfigBaseModel):
    """Which relationships a node type may start and where they may lead."""

    model_config = ConfigDict(frozen=True)

    node_relationships: TypeSchema = PydanticField(
        default_factory=TypeSchema,
        description="Node type -> permitted outgoing relationship types.",
    )
    relationship_nodes: TypeSchema = PydanticField(
        default_factory=TypeSchema,
        description="Relationship type -> permitted target node types.",
    )


class GraphSchema(ConfigBaseModel):
    """Immutable snapshot of the loaded type schema.

    Rebuilt wholesale whenever the database target changes. All lookups are
    schema-only and never contact the store; a lookup on an absent key yields
    the placeholder rather than failing.
    """

    model_config = ConfigDict(frozen=True)

    node_properties: TypeSchema = PydanticField(
        default_factory=TypeSchema,
        description="Node type -> property names.",
    )
    relationship_properties: TypeSchema = PydanticField(
        default_factory=TypeSchema,
        description="Relationship type -> property names.",
    )
    adjacency: AdjacencySchema = PydanticField(
        default_factory=AdjacencySchema,
        description="Permitted relationship types and target node types.",
    )

    def node_types(self) -> tuple[str, ...]:
        """All known node types, in file order, or the placeholder if none."""
        types = self.node_properties.keys()
        return types if types else (PLACEHOLDER,)

    def property_names(self, node_type: str) -> tuple[str, ...]:
        return self.node_properties.get(node_type)

    def relationship_types(self, node_type: str) -> tuple[str, ...]:
        """Relationship types a node of ``node_type`` may start."""
        return self.adjacency.node_relationships.get(node_type)

    def relationship_property_names(self, relationship_type: str) -> tuple[str, ...]:
        return self.relationship_properties.get(relationship_type)

    def target_node_types(self, relationship_type: str) -> tuple[str, ...]:
        """Node types a relationship of ``relationship_type`` may point to."""
        return self.adjacency.relationship_nodes.get(relationship_type)

    def with_node_property(self, node_type: str, name: str) -> GraphSchema:
        """Return a snapshot where ``node_type`` also lists property ``name``."""
        updated = self.node_properties.with_value(node_type, name)
        if updated is self.node_properties:
            return self
        logger.info(f"Discovered node property '{name}' for type '{node_type}'")
        return self.model_copy(update={"node_properties": updated})

    def with_relationship_property(
        self, relationship_type: str, name: str
    ) -> GraphSchema:
        """Return a snapshot where ``relationship_type`` also lists property ``name``."""
        updated = self.relationship_properties.with_value(relationship_type, name)
        if updated is self.relationship_properties:
            return self
        logger.info(
            f"Discovered relationship property '{name}' for type '{relationship_type}'"
        )
        return self.model_copy(update={"relationship_properties": updated})
