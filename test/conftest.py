import logging
from pathlib import Path

import pytest

from grafnote.architecture.loader import load_schema
from grafnote.db.conn import Connection, QueryExecutionError
from grafnote.db.connection import Neo4jConfig
from grafnote.onto import ID_KEY, NAME_KEY
from grafnote.query.browser import GraphBrowser
from grafnote.query.cypher import CypherQuery

logger = logging.getLogger(__name__)

SCHEMA_TABLES = {
    "NodeProperties.csv": "Person,name,age\nPlace,name,address\nNote\n",
    "RelationshipProperties.csv": "KNOWS,since\nLIVES_IN,from,to\n",
    "NodeRelationships.csv": "Person,KNOWS,LIVES_IN\nPlace\n",
    "RelationshipNodes.csv": "KNOWS,Person\nLIVES_IN,Place\n",
}


class FakeGraphStore(Connection):
    """In-memory property graph answering the queries grafnote builds.

    Queries are dispatched on ``CypherQuery.name``; every query run is
    recorded in ``queries``. Names listed in ``fail_on`` raise
    ``QueryExecutionError`` without touching the graph.
    """

    def __init__(self):
        self.nodes: dict[str, dict] = {}
        self.relationships: list[dict] = []
        self.queries: list[CypherQuery] = []
        self.fail_on: set[str] = set()
        self.closed = False

    # fixtures

    def add_node(self, node_type, node_id, **props):
        self.nodes[node_id] = {"type": node_type, "props": {ID_KEY: node_id, **props}}

    def add_relationship(self, source_id, target_id, rel_type, **props):
        self.relationships.append(
            {"source": source_id, "target": target_id, "type": rel_type, "props": props}
        )

    @property
    def query_names(self) -> list[str]:
        return [q.name for q in self.queries]

    # Connection

    def execute(self, query, **kwargs):
        raise AssertionError("tests only run built queries")

    def close(self):
        self.closed = True

    def run(self, query: CypherQuery):
        if self.closed:
            raise QueryExecutionError("Connection is closed", query_name=query.name)
        self.queries.append(query)
        if query.name in self.fail_on:
            raise QueryExecutionError(f"{query.name} rejected", query_name=query.name)
        handler = getattr(self, f"_{query.name}")
        return handler(query.params, query.identifiers)

    # helpers

    def _name(self, node_id):
        return self.nodes[node_id]["props"].get(NAME_KEY)

    def _of_type(self, node_type):
        return [n for n in self.nodes.values() if n["type"] == node_type]

    def _rels(self, rel_type=None, source=None, target=None):
        return [
            r
            for r in self.relationships
            if (rel_type is None or r["type"] == rel_type)
            and (source is None or r["source"] == source)
            and (target is None or r["target"] == target)
        ]

    @staticmethod
    def _values(values):
        seen = []
        for v in values:
            if v not in seen:
                seen.append(v)
        return [{"value": v} for v in seen]

    # browse

    def _node_names(self, params, ids):
        return self._values(
            n["props"][NAME_KEY]
            for n in self._of_type(ids["node_type"])
            if NAME_KEY in n["props"]
        )

    def _node_ids(self, params, ids):
        return self._values(
            n["props"][ID_KEY]
            for n in self._of_type(ids["node_type"])
            if n["props"].get(NAME_KEY) == params["name"]
        )

    def _node_property_names(self, params, ids):
        node = self.nodes.get(params["id"])
        if node is None:
            return []
        return self._values(k for k in node["props"] if k != params["id_key"])

    def _node_property_value(self, params, ids):
        node = self.nodes.get(params["id"])
        if node is None or params["property"] not in node["props"]:
            return []
        return self._values([node["props"][params["property"]]])

    def _relationship_property_value(self, params, ids):
        a, b = params["source_id"], params["target_id"]
        rels = self._rels(ids["relationship_type"], a, b) + self._rels(
            ids["relationship_type"], b, a
        )
        return self._values(
            r["props"][params["property"]] for r in rels if params["property"] in r["props"]
        )

    def _peer_names(self, params, ids):
        return self._values(
            self._name(r["target"])
            for r in self._rels(ids["relationship_type"], params["source_id"])
            if self._name(r["target"]) is not None
        )

    def _peer_ids(self, params, ids):
        return self._values(
            r["target"]
            for r in self._rels(ids["relationship_type"], params["source_id"])
            if self._name(r["target"]) == params["name"]
        )

    def _all_node_ids(self, params, ids):
        return [{"value": node_id} for node_id in self.nodes]

    def _node_name(self, params, ids):
        if params["id"] not in self.nodes:
            return []
        return [{"value": self._name(params["id"])}]

    def _node_labels(self, params, ids):
        if params["id"] not in self.nodes:
            return []
        return [{"value": self.nodes[params["id"]]["type"]}]

    # neighbourhood

    def _incident(self, node_id):
        for r in self.relationships:
            if r["source"] == node_id:
                yield r, r["target"]
            elif r["target"] == node_id:
                yield r, r["source"]

    def _one_hop(self, params, ids):
        return [
            {
                "peer_id": peer,
                "peer_name": self._name(peer),
                "relationship_type": r["type"],
            }
            for r, peer in self._incident(params["id"])
        ]

    def _two_hop(self, params, ids):
        rows = []
        for first, mid in self._incident(params["id"]):
            for second, end in self._incident(mid):
                if second is first:
                    continue
                rows.append(
                    {
                        "mid_id": mid,
                        "mid_name": self._name(mid),
                        "end_id": end,
                        "end_name": self._name(end),
                        "relationship_type": second["type"],
                    }
                )
        return rows

    def _all_nodes(self, params, ids):
        return [
            {"id": node_id, "name": self._name(node_id), "labels": [n["type"]]}
            for node_id, n in self.nodes.items()
        ]

    def _all_relationships(self, params, ids):
        return [
            {
                "source_id": r["source"],
                "target_id": r["target"],
                "relationship_type": r["type"],
            }
            for r in self.relationships
        ]

    # writes

    def _create_node(self, params, ids):
        props = dict(params["props"])
        self.nodes[props[ID_KEY]] = {"type": ids["node_type"], "props": props}
        return []

    def _create_relationship(self, params, ids):
        a, b = params["source_id"], params["target_id"]
        if a in self.nodes and b in self.nodes:
            self.add_relationship(a, b, ids["relationship_type"], **params["props"])
        return []

    def _set_node_properties(self, params, ids):
        if params["id"] in self.nodes:
            self.nodes[params["id"]]["props"].update(params["props"])
        return []

    def _set_relationship_properties(self, params, ids):
        for r in self._rels(
            ids["relationship_type"], params["source_id"], params["target_id"]
        ):
            r["props"].update(params["props"])
        return []

    def _incident_relationships(self, params, ids):
        if params["id"] not in self.nodes:
            return []
        return [
            {
                "outgoing": len(self._rels(source=params["id"])),
                "incoming": len(self._rels(target=params["id"])),
            }
        ]

    def _delete_node(self, params, ids):
        if any(True for _ in self._incident(params["id"])):
            raise QueryExecutionError("Node still has relationships", "delete_node")
        self.nodes.pop(params["id"], None)
        return []

    def _delete_relationship(self, params, ids):
        doomed = self._rels(
            ids["relationship_type"], params["source_id"], params["target_id"]
        )
        self.relationships = [r for r in self.relationships if r not in doomed]
        return []


@pytest.fixture(scope="function")
def db_folder(tmp_path) -> Path:
    for name, content in SCHEMA_TABLES.items():
        (tmp_path / name).write_text(content)
    return tmp_path


@pytest.fixture(scope="function")
def schema(db_folder):
    return load_schema(db_folder)


@pytest.fixture(scope="function")
def store():
    return FakeGraphStore()


@pytest.fixture(scope="function")
def populated_store(store):
    store.add_node("Person", "1", name="Alice", age="30")
    store.add_node("Person", "2", name="Bob")
    store.add_node("Place", "3", name="Paris")
    store.add_relationship("1", "2", "KNOWS", since="2020")
    store.add_relationship("1", "3", "LIVES_IN")
    return store


@pytest.fixture(scope="function")
def browser(schema, populated_store):
    return GraphBrowser(schema, populated_store)


@pytest.fixture(scope="function")
def config():
    return Neo4jConfig(uri="bolt://localhost:7687", username="neo4j", password="pw")
