"""Browse operations backing the editor's cascading choices.

``GraphBrowser`` answers every "list the candidates for this field" question,
either from the schema snapshot or by running a built query. All answers
follow one policy:

- any input equal to the placeholder short-circuits: the placeholder list is
  returned and the store is not contacted;
- query results are rendered as text, deduplicated and sorted ascending;
- an empty answer becomes the placeholder list, so no control is ever left
  without a choice.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from grafnote.architecture.schema import GraphSchema
from grafnote.db.conn import Connection
from grafnote.onto import is_placeholder, placeholder_list
from grafnote.query import cypher
from grafnote.query.cypher import CypherQuery
from grafnote.query.decode import as_text, scalar_values

logger = logging.getLogger(__name__)


def as_choices(values: Iterable[Any]) -> list[str]:
    """Deduplicated, ascending text values, or the placeholder list if none."""
    texts = sorted({as_text(v) for v in values if v is not None})
    return texts if texts else placeholder_list()


def any_placeholder(*args: str) -> bool:
    return any(is_placeholder(a) for a in args)


class GraphBrowser:
    """Candidate lists for the editor, from the schema and the store.

    Attributes:
        schema: Schema snapshot used for schema-only lookups
        connection: Gateway used for data lookups
    """

    def __init__(self, schema: GraphSchema, connection: Connection):
        self.schema = schema
        self.connection = connection

    def with_schema(self, schema: GraphSchema) -> GraphBrowser:
        """Return a browser on the same connection using another snapshot."""
        return GraphBrowser(schema, self.connection)

    def _values(self, query: CypherQuery) -> list[str]:
        rows = self.connection.run(query)
        return as_choices(scalar_values(rows))

    # schema lookups

    def node_types(self) -> list[str]:
        return list(self.schema.node_types())

    def property_names(self, node_type: str) -> list[str]:
        if is_placeholder(node_type):
            return placeholder_list()
        return list(self.schema.property_names(node_type))

    def relationship_types(self, node_type: str) -> list[str]:
        if is_placeholder(node_type):
            return placeholder_list()
        return list(self.schema.relationship_types(node_type))

    def relationship_property_names(self, relationship_type: str) -> list[str]:
        if is_placeholder(relationship_type):
            return placeholder_list()
        return list(self.schema.relationship_property_names(relationship_type))

    def target_node_types(self, relationship_type: str) -> list[str]:
        if is_placeholder(relationship_type):
            return placeholder_list()
        return list(self.schema.target_node_types(relationship_type))

    # store lookups

    def node_names(self, node_type: str) -> list[str]:
        if any_placeholder(node_type):
            return placeholder_list()
        return self._values(cypher.node_names_query(node_type))

    def node_ids(self, node_type: str, node_name: str) -> list[str]:
        if any_placeholder(node_type, node_name):
            return placeholder_list()
        return self._values(cypher.node_ids_query(node_type, node_name))

    def node_property_names(self, node_id: str) -> list[str]:
        """Property keys present on a node, ID excluded."""
        if any_placeholder(node_id):
            return placeholder_list()
        return self._values(cypher.node_property_names_query(node_id))

    def node_property_value(self, node_id: str, property_name: str) -> list[str]:
        if any_placeholder(node_id, property_name):
            return placeholder_list()
        return self._values(cypher.node_property_value_query(node_id, property_name))

    def relationship_property_value(
        self,
        source_id: str,
        target_id: str,
        relationship_type: str,
        property_name: str,
    ) -> list[str]:
        if any_placeholder(source_id, target_id, relationship_type, property_name):
            return placeholder_list()
        return self._values(
            cypher.relationship_property_value_query(
                source_id, target_id, relationship_type, property_name
            )
        )

    def peer_names(self, source_id: str, relationship_type: str) -> list[str]:
        if any_placeholder(source_id, relationship_type):
            return placeholder_list()
        return self._values(cypher.peer_names_query(source_id, relationship_type))

    def peer_ids(
        self, source_id: str, relationship_type: str, peer_name: str
    ) -> list[str]:
        if any_placeholder(source_id, relationship_type, peer_name):
            return placeholder_list()
        return self._values(
            cypher.peer_ids_query(source_id, relationship_type, peer_name)
        )

    def all_node_ids(self) -> list[str]:
        """Every node ID as stored, unsorted and without placeholder filling."""
        rows = self.connection.run(cypher.all_node_ids_query())
        return [as_text(v) for v in scalar_values(rows) if v is not None]

    def node_name(self, node_id: str) -> str:
        """Name of a node, or the empty string if it has none."""
        if is_placeholder(node_id):
            return ""
        names = as_choices(
            scalar_values(self.connection.run(cypher.node_name_query(node_id)))
        )
        return "" if is_placeholder(names[0]) else names[0]

    def node_label(self, node_id: str) -> str:
        """First label of a node, or the empty string if it has none."""
        if is_placeholder(node_id):
            return ""
        labels = self._values(cypher.node_labels_query(node_id))
        return "" if is_placeholder(labels[0]) else labels[0]
