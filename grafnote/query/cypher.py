"""Query builders for the Cypher statements issued by grafnote.

Each public function is pure: it maps its inputs to a ``CypherQuery`` holding
the statement text, the bound parameters and the declared result columns.
Nothing here talks to the store.

Two kinds of input reach a statement:

- schema identifiers (node labels, relationship types) are spliced into the
  text after back-tick escaping, since Cypher cannot bind them;
- every other value (IDs, names, property keys and property values) is bound
  as a parameter and never becomes query syntax.

Example:
    >>> q = node_ids_query("Person", "Alice")
    >>> q.text
    'MATCH (n:`Person`) WHERE n.name = $name RETURN DISTINCT n.ID AS value ORDER BY value'
    >>> q.params
    {'name': 'Alice'}
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field as PydanticField

from grafnote.architecture.base import ConfigBaseModel
from grafnote.onto import ID_KEY, NAME_KEY, PLACEHOLDER, TargetKind

# Result shape of every single-column "list" query.
VALUE_COLUMNS = ("value",)

ONE_HOP_COLUMNS = ("peer_id", "peer_name", "relationship_type")
TWO_HOP_COLUMNS = ("mid_id", "mid_name", "end_id", "end_name", "relationship_type")
NODE_COLUMNS = ("id", "name", "labels")
RELATIONSHIP_COLUMNS = ("source_id", "target_id", "relationship_type")


class CypherQuery(ConfigBaseModel):
    """A Cypher statement together with its parameters and result shape.

    Attributes:
        name: Stable operation name, used in logs and error messages
        text: Statement text
        params: Values bound to ``$name`` placeholders in ``text``
        identifiers: Schema identifiers spliced (escaped) into ``text``
        columns: Declared result columns, empty for write statements
    """

    model_config = ConfigDict(frozen=True)

    name: str
    text: str
    params: dict[str, Any] = PydanticField(default_factory=dict)
    identifiers: dict[str, str] = PydanticField(default_factory=dict)
    columns: tuple[str, ...] = ()

    @property
    def width(self) -> int:
        """Number of declared result columns."""
        return len(self.columns)


def escape_identifier(name: str) -> str:
    """Quote a label, relationship type or property key for Cypher.

    Raises:
        ValueError: If ``name`` is empty or the placeholder
    """
    if not name or not name.strip() or name == PLACEHOLDER:
        raise ValueError(f"Not a valid schema identifier: {name!r}")
    return "`" + name.replace("`", "``") + "`"


# ---------------------------------------------------------------------------
# Browse queries
# ---------------------------------------------------------------------------


def node_names_query(node_type: str) -> CypherQuery:
    """Names of all nodes of ``node_type``."""
    label = escape_identifier(node_type)
    return CypherQuery(
        name="node_names",
        text=(
            f"MATCH (n:{label}) WHERE n.{NAME_KEY} IS NOT NULL "
            f"RETURN DISTINCT n.{NAME_KEY} AS value ORDER BY value"
        ),
        identifiers={"node_type": node_type},
        columns=VALUE_COLUMNS,
    )


def node_ids_query(node_type: str, node_name: str) -> CypherQuery:
    """IDs of all nodes of ``node_type`` called ``node_name``."""
    label = escape_identifier(node_type)
    return CypherQuery(
        name="node_ids",
        text=(
            f"MATCH (n:{label}) WHERE n.{NAME_KEY} = $name "
            f"RETURN DISTINCT n.{ID_KEY} AS value ORDER BY value"
        ),
        params={"name": node_name},
        identifiers={"node_type": node_type},
        columns=VALUE_COLUMNS,
    )


def node_property_names_query(node_id: str) -> CypherQuery:
    """Property keys currently present on a node, excluding its ID."""
    return CypherQuery(
        name="node_property_names",
        text=(
            f"MATCH (n) WHERE n.{ID_KEY} = $id "
            "UNWIND keys(n) AS value "
            "WITH DISTINCT value WHERE value <> $id_key "
            "RETURN value ORDER BY value"
        ),
        params={"id": node_id, "id_key": ID_KEY},
        columns=VALUE_COLUMNS,
    )


def node_property_value_query(node_id: str, property_name: str) -> CypherQuery:
    """Current value of one property of a node."""
    return CypherQuery(
        name="node_property_value",
        text=(
            f"MATCH (n) WHERE n.{ID_KEY} = $id AND n[$property] IS NOT NULL "
            "RETURN DISTINCT n[$property] AS value"
        ),
        params={"id": node_id, "property": property_name},
        columns=VALUE_COLUMNS,
    )


def relationship_property_value_query(
    source_id: str, target_id: str, relationship_type: str, property_name: str
) -> CypherQuery:
    """Value of one property of the relationships between two nodes, either direction."""
    rel = escape_identifier(relationship_type)
    return CypherQuery(
        name="relationship_property_value",
        text=(
            f"MATCH (a)-[r:{rel}]-(b) "
            f"WHERE a.{ID_KEY} = $source_id AND b.{ID_KEY} = $target_id "
            "AND r[$property] IS NOT NULL "
            "RETURN DISTINCT r[$property] AS value"
        ),
        params={
            "source_id": source_id,
            "target_id": target_id,
            "property": property_name,
        },
        identifiers={"relationship_type": relationship_type},
        columns=VALUE_COLUMNS,
    )


def peer_names_query(source_id: str, relationship_type: str) -> CypherQuery:
    """Names of the nodes reached from ``source_id`` over ``relationship_type``."""
    rel = escape_identifier(relationship_type)
    return CypherQuery(
        name="peer_names",
        text=(
            f"MATCH (a)-[:{rel}]->(b) "
            f"WHERE a.{ID_KEY} = $source_id AND b.{NAME_KEY} IS NOT NULL "
            f"RETURN DISTINCT b.{NAME_KEY} AS value ORDER BY value"
        ),
        params={"source_id": source_id},
        identifiers={"relationship_type": relationship_type},
        columns=VALUE_COLUMNS,
    )


def peer_ids_query(
    source_id: str, relationship_type: str, peer_name: str
) -> CypherQuery:
    """IDs of the nodes called ``peer_name`` reached from ``source_id``."""
    rel = escape_identifier(relationship_type)
    return CypherQuery(
        name="peer_ids",
        text=(
            f"MATCH (a)-[:{rel}]->(b) "
            f"WHERE a.{ID_KEY} = $source_id AND b.{NAME_KEY} = $name "
            f"RETURN DISTINCT b.{ID_KEY} AS value ORDER BY value"
        ),
        params={"source_id": source_id, "name": peer_name},
        identifiers={"relationship_type": relationship_type},
        columns=VALUE_COLUMNS,
    )


def all_node_ids_query() -> CypherQuery:
    """Every node ID in the database, used to seed the ID allocator."""
    return CypherQuery(
        name="all_node_ids",
        text=f"MATCH (n) WHERE n.{ID_KEY} IS NOT NULL RETURN n.{ID_KEY} AS value",
        columns=VALUE_COLUMNS,
    )


def node_name_query(node_id: str) -> CypherQuery:
    return CypherQuery(
        name="node_name",
        text=f"MATCH (n) WHERE n.{ID_KEY} = $id RETURN n.{NAME_KEY} AS value",
        params={"id": node_id},
        columns=VALUE_COLUMNS,
    )


def node_labels_query(node_id: str) -> CypherQuery:
    return CypherQuery(
        name="node_labels",
        text=f"MATCH (n) WHERE n.{ID_KEY} = $id UNWIND labels(n) AS value RETURN value",
        params={"id": node_id},
        columns=VALUE_COLUMNS,
    )


# ---------------------------------------------------------------------------
# Neighbourhood and whole-graph queries
# ---------------------------------------------------------------------------


def one_hop_query(node_id: str) -> CypherQuery:
    """Direct neighbours of a node, over relationships in either direction."""
    return CypherQuery(
        name="one_hop",
        text=(
            f"MATCH (a)-[r]-(b) WHERE a.{ID_KEY} = $id "
            f"RETURN b.{ID_KEY} AS peer_id, b.{NAME_KEY} AS peer_name, "
            "type(r) AS relationship_type"
        ),
        params={"id": node_id},
        columns=ONE_HOP_COLUMNS,
    )


def two_hop_query(node_id: str) -> CypherQuery:
    """Relationships one step beyond the direct neighbours of a node."""
    return CypherQuery(
        name="two_hop",
        text=(
            f"MATCH (a)-[]-(m)-[r]-(e) WHERE a.{ID_KEY} = $id "
            f"RETURN m.{ID_KEY} AS mid_id, m.{NAME_KEY} AS mid_name, "
            f"e.{ID_KEY} AS end_id, e.{NAME_KEY} AS end_name, "
            "type(r) AS relationship_type"
        ),
        params={"id": node_id},
        columns=TWO_HOP_COLUMNS,
    )


def all_nodes_query() -> CypherQuery:
    return CypherQuery(
        name="all_nodes",
        text=(
            f"MATCH (n) RETURN n.{ID_KEY} AS id, n.{NAME_KEY} AS name, "
            "labels(n) AS labels"
        ),
        columns=NODE_COLUMNS,
    )


def all_relationships_query() -> CypherQuery:
    return CypherQuery(
        name="all_relationships",
        text=(
            f"MATCH (a)-[r]->(b) RETURN a.{ID_KEY} AS source_id, "
            f"b.{ID_KEY} AS target_id, type(r) AS relationship_type"
        ),
        columns=RELATIONSHIP_COLUMNS,
    )


# ---------------------------------------------------------------------------
# Write statements
# ---------------------------------------------------------------------------


def create_node_query(
    node_type: str, node_id: str, properties: dict[str, Any]
) -> CypherQuery:
    """``CREATE`` a node of ``node_type`` carrying ``ID`` plus ``properties``."""
    label = escape_identifier(node_type)
    props = {ID_KEY: node_id}
    props.update({k: v for k, v in properties.items() if k != ID_KEY})
    return CypherQuery(
        name="create_node",
        text=f"CREATE (n:{label} $props)",
        params={"props": props},
        identifiers={"node_type": node_type},
    )


def create_relationship_query(
    source_id: str,
    target_id: str,
    relationship_type: str,
    properties: dict[str, Any],
) -> CypherQuery:
    """``CREATE`` one directed relationship between two existing nodes."""
    rel = escape_identifier(relationship_type)
    return CypherQuery(
        name="create_relationship",
        text=(
            "MATCH (a), (b) "
            f"WHERE a.{ID_KEY} = $source_id AND b.{ID_KEY} = $target_id "
            f"CREATE (a)-[r:{rel}]->(b) SET r = $props"
        ),
        params={
            "source_id": source_id,
            "target_id": target_id,
            "props": dict(properties),
        },
        identifiers={"relationship_type": relationship_type},
    )


def set_node_properties_query(node_id: str, properties: dict[str, Any]) -> CypherQuery:
    """Merge ``properties`` into an existing node; its ID is never overwritten."""
    props = {k: v for k, v in properties.items() if k != ID_KEY}
    return CypherQuery(
        name="set_node_properties",
        text=f"MATCH (n) WHERE n.{ID_KEY} = $id SET n += $props",
        params={"id": node_id, "props": props},
    )


def set_relationship_properties_query(
    source_id: str,
    target_id: str,
    relationship_type: str,
    properties: dict[str, Any],
) -> CypherQuery:
    """Merge ``properties`` into the relationships from ``source_id`` to ``target_id``."""
    rel = escape_identifier(relationship_type)
    return CypherQuery(
        name="set_relationship_properties",
        text=(
            f"MATCH (a)-[r:{rel}]->(b) "
            f"WHERE a.{ID_KEY} = $source_id AND b.{ID_KEY} = $target_id "
            "SET r += $props"
        ),
        params={
            "source_id": source_id,
            "target_id": target_id,
            "props": dict(properties),
        },
        identifiers={"relationship_type": relationship_type},
    )


def incident_relationships_query(node_id: str) -> CypherQuery:
    """Count of incoming and outgoing relationships of a node."""
    return CypherQuery(
        name="incident_relationships",
        text=(
            f"MATCH (n) WHERE n.{ID_KEY} = $id "
            "OPTIONAL MATCH (n)-[out]->() WITH n, count(out) AS outgoing "
            "OPTIONAL MATCH (n)<-[inc]-() "
            "RETURN outgoing, count(inc) AS incoming"
        ),
        params={"id": node_id},
        columns=("outgoing", "incoming"),
    )


def delete_node_query(node_id: str) -> CypherQuery:
    """Plain ``DELETE``; the store refuses it while relationships remain."""
    return CypherQuery(
        name="delete_node",
        text=f"MATCH (n) WHERE n.{ID_KEY} = $id DELETE n",
        params={"id": node_id},
    )


def delete_relationship_query(
    source_id: str, target_id: str, relationship_type: str
) -> CypherQuery:
    rel = escape_identifier(relationship_type)
    return CypherQuery(
        name="delete_relationship",
        text=(
            f"MATCH (a)-[r:{rel}]->(b) "
            f"WHERE a.{ID_KEY} = $source_id AND b.{ID_KEY} = $target_id "
            "DELETE r"
        ),
        params={"source_id": source_id, "target_id": target_id},
        identifiers={"relationship_type": relationship_type},
    )


def commit_query(
    kind: TargetKind | str, key: tuple[str, ...], properties: dict[str, Any]
) -> CypherQuery:
    """Build the single statement that commits staged ``properties``.

    Args:
        kind: What the edits apply to
        key: Identifying key of the target, see ``TargetKind``
        properties: Staged property values

    Raises:
        ValueError: If ``key`` does not fit ``kind``
    """
    kind = TargetKind(kind)
    expected = {
        TargetKind.NEW_NODE: 2,
        TargetKind.NODE: 1,
        TargetKind.NEW_RELATIONSHIP: 3,
        TargetKind.RELATIONSHIP: 3,
    }[kind]
    if len(key) != expected:
        raise ValueError(f"{kind} target needs a key of {expected} items, got {key!r}")

    if kind == TargetKind.NEW_NODE:
        node_type, node_id = key
        return create_node_query(node_type, node_id, properties)
    if kind == TargetKind.NODE:
        return set_node_properties_query(key[0], properties)
    source_id, target_id, relationship_type = key
    if kind == TargetKind.NEW_RELATIONSHIP:
        return create_relationship_query(
            source_id, target_id, relationship_type, properties
        )
    return set_relationship_properties_query(
        source_id, target_id, relationship_type, properties
    )
