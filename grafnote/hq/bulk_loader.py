"""Bulk creation of nodes and relationships from delimited files.

Node files carry one node per row::

    ID, node type, key1, value1, key2, value2, ...

Relationship files carry one relationship per row, between existing nodes::

    source ID, target ID, relationship type, key1, value1, ...

Rows too short to describe an entity are logged and skipped. A trailing key
without a value is ignored. Every accepted row becomes one parameter-bound
create statement.
"""

from __future__ import annotations

import logging
from pathlib import Path

from grafnote.architecture.base import ConfigBaseModel
from grafnote.architecture.loader import read_table
from grafnote.db.conn import Connection
from grafnote.hq.ids import IDAllocator
from grafnote.query import cypher

logger = logging.getLogger(__name__)

MIN_NODE_CELLS = 4
MIN_RELATIONSHIP_CELLS = 3


class LoadReport(ConfigBaseModel):
    """Outcome of one bulk load.

    Attributes:
        created: Number of statements executed
        skipped: Number of rows rejected as too short
        messages: One line per created entity
    """

    created: int = 0
    skipped: int = 0
    messages: list[str] = []


def pairs(cells: list[str]) -> dict[str, str]:
    """Key/value cells as a property map; an unpaired last key is dropped."""
    return {cells[i]: cells[i + 1] for i in range(0, len(cells) - 1, 2)}


class BulkLoader:
    """Creates entities from files on a connection.

    Args:
        connection: Gateway the create statements are run on
        allocator: Allocator that learns the IDs of created nodes
    """

    def __init__(self, connection: Connection, allocator: IDAllocator | None = None):
        self.connection = connection
        self.allocator = allocator if allocator is not None else IDAllocator()

    def load_nodes(self, path: Path | str) -> LoadReport:
        """Create one node per row of ``path``.

        Raises:
            FileNotFoundError: If ``path`` does not exist
            QueryExecutionError: If a create fails; earlier rows stay created
        """
        report = LoadReport()
        for i, row in enumerate(read_table(path)):
            if len(row) < MIN_NODE_CELLS:
                logger.warning(
                    f"{path}:{i + 1}: skipped, a node row needs ID, node type "
                    f"and at least one property"
                )
                report.skipped += 1
                continue
            node_id, node_type, *rest = row
            properties = pairs(rest)
            self.connection.run(
                cypher.create_node_query(node_type, node_id, properties)
            )
            self.allocator.register(node_id)
            report.created += 1
            report.messages.append(f"Created node {node_type} {node_id} {properties}")
        logger.info(
            f"Loaded nodes from {path}: {report.created} created, {report.skipped} skipped"
        )
        return report

    def load_relationships(self, path: Path | str) -> LoadReport:
        """Create one relationship per row of ``path``.

        Raises:
            FileNotFoundError: If ``path`` does not exist
            QueryExecutionError: If a create fails; earlier rows stay created
        """
        report = LoadReport()
        for i, row in enumerate(read_table(path)):
            if len(row) < MIN_RELATIONSHIP_CELLS:
                logger.warning(
                    f"{path}:{i + 1}: skipped, a relationship row needs two IDs "
                    f"and a relationship type"
                )
                report.skipped += 1
                continue
            source_id, target_id, rel_type, *rest = row
            properties = pairs(rest)
            self.connection.run(
                cypher.create_relationship_query(
                    source_id, target_id, rel_type, properties
                )
            )
            report.created += 1
            report.messages.append(
                f"Created relationship {source_id} -[{rel_type}]-> {target_id} {properties}"
            )
        logger.info(
            f"Loaded relationships from {path}: "
            f"{report.created} created, {report.skipped} skipped"
        )
        return report
