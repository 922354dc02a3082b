"""Neighbourhood and whole-graph fetches for the graph view.

The fetcher runs the neighbourhood queries, decodes their rows against the
declared columns and assembles a ``GraphView``: plain node and edge records
that an external renderer consumes. Nothing here knows about layout.

Example:
    >>> fetcher = NeighborhoodFetcher(connection)
    >>> view = fetcher.surroundings("1")
    >>> view.to_dict()["nodes"][0]
    {'id': '1', 'label': 'Alice'}
"""

from __future__ import annotations

import logging

from pydantic import PrivateAttr, model_validator

from grafnote.architecture.base import ConfigBaseModel
from grafnote.db.conn import Connection
from grafnote.query import cypher
from grafnote.query.cypher import CypherQuery
from grafnote.query.decode import as_text, decode_rows

logger = logging.getLogger(__name__)


class Neighbor(ConfigBaseModel):
    """A node one relationship away from the centre."""

    peer_id: str
    peer_name: str
    relationship_type: str


class TwoHopPath(ConfigBaseModel):
    """A relationship leaving a direct neighbour of the centre."""

    mid_id: str
    mid_name: str
    end_id: str
    end_name: str
    relationship_type: str


class NodeRecord(ConfigBaseModel):
    id: str
    label: str


class EdgeRecord(ConfigBaseModel):
    source_id: str
    target_id: str
    label: str


class GraphView(ConfigBaseModel):
    """Nodes and edges handed to the renderer.

    Nodes are unique by ID, the first label seen wins. Edges are kept as
    added.
    """

    nodes: list[NodeRecord] = []
    edges: list[EdgeRecord] = []

    _node_ids: set[str] = PrivateAttr(default_factory=set)

    @model_validator(mode="after")
    def build_node_ids(self) -> "GraphView":
        object.__setattr__(self, "_node_ids", {n.id for n in self.nodes})
        return self

    def node_ids(self) -> set[str]:
        return set(self._node_ids)

    def add_node(self, node_id: str, label: str) -> None:
        if node_id not in self._node_ids:
            self._node_ids.add(node_id)
            self.nodes.append(NodeRecord(id=node_id, label=label))

    def add_edge(self, source_id: str, target_id: str, label: str) -> None:
        self.edges.append(
            EdgeRecord(source_id=source_id, target_id=target_id, label=label)
        )


class NeighborhoodFetcher:
    """Runs neighbourhood queries against a connection.

    Args:
        connection: Gateway the queries are run on
    """

    def __init__(self, connection: Connection):
        self.connection = connection

    def _rows(self, query: CypherQuery) -> list[tuple[str, ...]]:
        rows = decode_rows(self.connection.run(query), query.columns)
        return [tuple(as_text(v) for v in row) for row in rows]

    def one_hop(self, node_id: str) -> list[Neighbor]:
        query = cypher.one_hop_query(node_id)
        return [Neighbor(**dict(zip(query.columns, row))) for row in self._rows(query)]

    def two_hop(self, node_id: str) -> list[TwoHopPath]:
        query = cypher.two_hop_query(node_id)
        return [
            TwoHopPath(**dict(zip(query.columns, row))) for row in self._rows(query)
        ]

    def surroundings(self, node_id: str, name: str | None = None) -> GraphView:
        """The node, its neighbours and their neighbours as one view.

        Args:
            node_id: ID of the centre node
            name: Label of the centre node; looked up when not given

        Returns:
            GraphView: Centre node first, then every node within two hops
        """
        if name is None:
            rows = self._rows(cypher.node_name_query(node_id))
            name = rows[0][0] if rows else ""
        view = GraphView()
        view.add_node(node_id, name)
        for n in self.one_hop(node_id):
            view.add_node(n.peer_id, n.peer_name)
            view.add_edge(node_id, n.peer_id, n.relationship_type)
        for p in self.two_hop(node_id):
            # the walk may come back to the centre; its edge is already drawn
            if p.end_id == node_id:
                continue
            view.add_node(p.mid_id, p.mid_name)
            view.add_node(p.end_id, p.end_name)
            view.add_edge(p.mid_id, p.end_id, p.relationship_type)
        logger.info(
            f"Neighbourhood of {node_id}: {len(view.nodes)} nodes, {len(view.edges)} edges"
        )
        return view

    def whole_graph(self) -> GraphView:
        """Every node labelled by name and every relationship labelled by type."""
        view = GraphView()
        for node_id, name, _labels in self._rows(cypher.all_nodes_query()):
            view.add_node(node_id, name)
        for source_id, target_id, rel_type in self._rows(
            cypher.all_relationships_query()
        ):
            view.add_edge(source_id, target_id, rel_type)
        logger.info(f"Whole graph: {len(view.nodes)} nodes, {len(view.edges)} edges")
        return view
