"""Editing session over one graph database.

``GraphEditor`` is what a front end drives. It owns the open connection, the
schema snapshot, the selection state, the ID allocator and the staged edits
for the node and relationship being created. Every action reads its targets
from the current selection, reports its outcome to the status log and leaves
the selection consistent with the store.

Example:
    >>> editor = GraphEditor()
    >>> editor.open_database("dbs/notes", Neo4jConfig.from_auth_file("auth.txt"))
    >>> editor.select(SelectionField.NEW_NODE_TYPE, "Person")
    >>> editor.stage_node_property("name", "Alice")
    >>> editor.create_node()
    '1'
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import contextmanager
from pathlib import Path

from grafnote.architecture.loader import load_schema
from grafnote.architecture.schema import GraphSchema
from grafnote.db.conn import Connection, QueryExecutionError
from grafnote.db.connection.onto import Neo4jConfig
from grafnote.db.manager import ConnectionFactory, ConnectionManager, connect
from grafnote.hq.bulk_loader import BulkLoader, LoadReport
from grafnote.hq.ids import IDAllocator, InvalidIDFormat
from grafnote.hq.neighborhood import GraphView, NeighborhoodFetcher
from grafnote.hq.selection import (
    SelectionField,
    SelectionState,
    initial_state,
    recompute,
    refresh,
)
from grafnote.hq.staging import PendingEdits, PropertyEditor
from grafnote.hq.status import StatusLog
from grafnote.onto import EntityKind, TargetKind, is_placeholder
from grafnote.query import cypher
from grafnote.query.browser import GraphBrowser
from grafnote.query.decode import decode_rows

logger = logging.getLogger(__name__)

F = SelectionField

# Fields whose options come from the store's node population.
NODE_LISTS = (F.NODE_NAME, F.PEER_NAME, F.TARGET_NAME)


def first_value(values: list[str]) -> str:
    """First candidate of a value lookup, empty when there is none."""
    return "" if not values or is_placeholder(values[0]) else values[0]


class DeleteBlockedError(RuntimeError):
    """A node still has relationships and cannot be deleted.

    Attributes:
        node_id: The node that was not deleted
        outgoing: Number of relationships starting at the node
        incoming: Number of relationships ending at the node
    """

    def __init__(self, node_id: str, outgoing: int, incoming: int):
        self.node_id = node_id
        self.outgoing = outgoing
        self.incoming = incoming
        super().__init__(
            f"Node {node_id} has {self.incident} relationships; delete them first"
        )

    @property
    def incident(self) -> int:
        return self.outgoing + self.incoming


class NothingSelectedError(ValueError):
    """An action needs a field that holds the placeholder."""


class DatabaseNotOpenError(RuntimeError):
    """An action needs a database but none is open."""


class GraphEditor:
    """Stateful editing session.

    Args:
        factory: Opens a connection for a config; the Neo4j driver by default
        property_editor: Asks the user for many property values at once
        status: Sink for user-visible outcomes

    Attributes:
        manager: Owns the open connection, None while no database is open
        schema: Current schema snapshot
        state: Current selection state, None while no database is open
        allocator: Node ID allocator for this session
        node_edits: Staged properties of the node to create
        relationship_edits: Staged properties of the relationship to create
    """

    def __init__(
        self,
        factory: ConnectionFactory = connect,
        property_editor: PropertyEditor | None = None,
        status: StatusLog | None = None,
    ):
        self.factory = factory
        self.property_editor = property_editor
        self.status = status if status is not None else StatusLog()
        self.manager: ConnectionManager | None = None
        self.connection: Connection | None = None
        self.browser: GraphBrowser | None = None
        self.schema = GraphSchema()
        self.state: SelectionState | None = None
        self.allocator = IDAllocator()
        self.node_edits = PendingEdits()
        self.relationship_edits = PendingEdits()

    # session

    def open_database(self, folder: Path | str, config: Neo4jConfig) -> SelectionState:
        """Switch to the database described by ``folder`` and ``config``.

        The previous connection is closed first. The schema is reloaded from
        the folder, the allocator is seeded with every ID in the store and all
        staged edits are dropped.
        """
        self.close()
        self.schema = load_schema(folder)
        try:
            with self._reported(f"Opening {config.uri}"):
                self.manager = ConnectionManager(config, self.factory)
                self.connection = self.manager.open()
                self.browser = GraphBrowser(self.schema, self.connection)
                self.allocator.seed(self.browser.all_node_ids())
                self.state = initial_state(self.browser)
        except Exception:
            self.close()
            raise
        self.node_edits.clear()
        self.relationship_edits.clear()
        self.status.info(f"Opened database {folder} at {config.uri}")
        return self.state

    def close(self) -> None:
        if self.manager is not None:
            self.manager.close()
            logger.info("Closed database connection")
        self.manager = None
        self.connection = None
        self.browser = None
        self.state = None

    @property
    def is_open(self) -> bool:
        return self.connection is not None

    def _require_open(self) -> tuple[Connection, GraphBrowser, SelectionState]:
        if self.connection is None or self.browser is None or self.state is None:
            raise DatabaseNotOpenError("No database is open")
        return self.connection, self.browser, self.state

    @contextmanager
    def _reported(self, action: str):
        try:
            yield
        except (
            QueryExecutionError,
            InvalidIDFormat,
            DeleteBlockedError,
            FileNotFoundError,
        ) as e:
            self.status.error(f"{action} failed: {e}", exc_info=True)
            raise

    def _selected(self, *fields: SelectionField) -> tuple[str, ...]:
        _, _, state = self._require_open()
        values = tuple(state.value(f) for f in fields)
        missing = [str(f) for f, v in zip(fields, values) if is_placeholder(v)]
        if missing:
            message = f"Nothing selected for {', '.join(missing)}"
            self.status.warning(message)
            raise NothingSelectedError(message)
        return values

    def _refresh(self, fields: Iterable[SelectionField] | None = None) -> None:
        _, browser, state = self._require_open()
        self.state = refresh(state, browser, fields)

    def _set_schema(self, schema: GraphSchema, fields: Iterable[SelectionField]) -> None:
        if schema is self.schema:
            return
        self.schema = schema
        if self.browser is not None:
            self.browser = self.browser.with_schema(schema)
            self._refresh(fields)

    # selection

    def select(self, field: SelectionField | str, value: str) -> SelectionState:
        """Change one field and recompute everything depending on it."""
        _, browser, state = self._require_open()
        self.state = recompute(state, field, value, browser)
        return self.state

    def value(self, field: SelectionField | str) -> str:
        _, _, state = self._require_open()
        return state.value(field)

    # staging for new entities

    def _discover_node_property(self, node_type: str, name: str) -> None:
        self._set_schema(
            self.schema.with_node_property(node_type, name), [F.NEW_NODE_PROPERTY]
        )

    def _discover_relationship_property(self, relationship_type: str, name: str) -> None:
        self._set_schema(
            self.schema.with_relationship_property(relationship_type, name),
            [F.RELATIONSHIP_PROPERTY, F.CREATE_RELATIONSHIP_PROPERTY],
        )

    def _edit_values(
        self,
        entity: EntityKind,
        type_name: str,
        names: list[str],
        current: list[str],
        staged: PendingEdits,
    ) -> list[tuple[str, str]]:
        if self.property_editor is None:
            raise RuntimeError("No property editor configured")
        return staged.add_all(entity, type_name, names, self.property_editor, current)

    def stage_node_property(self, name: str, value: str) -> None:
        """Stage one property of the node to create.

        A name the schema does not list for the new node's type is added to
        the schema snapshot.
        """
        (node_type,) = self._selected(F.NEW_NODE_TYPE)
        self.node_edits.add(name, value)
        self._discover_node_property(node_type, name)

    def stage_all_node_properties(self) -> list[tuple[str, str]]:
        """Ask for a value of every schema property of the new node's type."""
        (node_type,) = self._selected(F.NEW_NODE_TYPE)
        names = list(self.schema.property_names(node_type))
        return self._edit_values(
            EntityKind.NODE, node_type, names, [""] * len(names), self.node_edits
        )

    def clear_node_properties(self) -> None:
        self.node_edits.clear()

    def stage_relationship_property(self, name: str, value: str) -> None:
        (rel_type,) = self._selected(F.CREATE_RELATIONSHIP)
        self.relationship_edits.add(name, value)
        self._discover_relationship_property(rel_type, name)

    def stage_all_relationship_properties(self) -> list[tuple[str, str]]:
        (rel_type,) = self._selected(F.CREATE_RELATIONSHIP)
        names = list(self.schema.relationship_property_names(rel_type))
        return self._edit_values(
            EntityKind.RELATIONSHIP,
            rel_type,
            names,
            [""] * len(names),
            self.relationship_edits,
        )

    def clear_relationship_properties(self) -> None:
        self.relationship_edits.clear()

    # create

    def create_node(self) -> str:
        """Create a node of the selected new-node type from the staged edits.

        Returns:
            str: ID of the created node

        Raises:
            InvalidIDFormat: If the store holds a non-numeric ID; nothing is created
            QueryExecutionError: If the create fails; edits stay staged
        """
        connection, _, _ = self._require_open()
        (node_type,) = self._selected(F.NEW_NODE_TYPE)
        with self._reported(f"Creating {node_type} node"):
            node_id = self.allocator.allocate()
            query = self.node_edits.commit(
                connection, TargetKind.NEW_NODE, (node_type, node_id)
            )
        self.status.info(f"Created node {node_type} {query.params['props']}")
        self._refresh(NODE_LISTS)
        return node_id

    def create_relationship(self) -> tuple[str, str, str]:
        """Create a relationship from the current node to the selected target.

        Returns:
            tuple[str, str, str]: Source ID, target ID and relationship type
        """
        connection, _, _ = self._require_open()
        source_id, target_id, rel_type = self._selected(
            F.NODE_ID, F.TARGET_ID, F.CREATE_RELATIONSHIP
        )
        key = (source_id, target_id, rel_type)
        with self._reported(f"Creating {rel_type} relationship"):
            query = self.relationship_edits.commit(
                connection, TargetKind.NEW_RELATIONSHIP, key
            )
        self.status.info(
            f"Created relationship {source_id} -[{rel_type}]-> {target_id} "
            f"{query.params['props']}"
        )
        self._refresh([F.PEER_NAME])
        return key

    # update

    def set_node_property(
        self, name: str, value: str, node_field: SelectionField = F.NODE_ID
    ) -> None:
        """Set one property of the node selected in ``node_field``.

        The property is added to the schema under the node's own label as
        stored, which can differ from the type field next to ``node_field``.
        """
        connection, browser, _ = self._require_open()
        (node_id,) = self._selected(node_field)
        with self._reported(f"Updating node {node_id}"):
            connection.run(cypher.set_node_properties_query(node_id, {name: value}))
        self.status.info(f"Updated node {node_id}: {name} = {value!r}")
        node_type = browser.node_label(node_id)
        if node_type:
            self._discover_node_property(node_type, name)
        self._refresh([F.PROPERTY, *NODE_LISTS])

    def edit_node_properties(self, node_field: SelectionField = F.NODE_ID) -> int:
        """Ask for new values of every property the node has; one update.

        Returns:
            int: Number of properties sent
        """
        connection, browser, _ = self._require_open()
        (node_id,) = self._selected(node_field)
        names = [n for n in browser.node_property_names(node_id) if not is_placeholder(n)]
        current = [first_value(browser.node_property_value(node_id, n)) for n in names]
        edits = PendingEdits()
        node_type = browser.node_label(node_id)
        self._edit_values(EntityKind.NODE, node_type, names, current, edits)
        count = len(edits)
        with self._reported(f"Updating node {node_id}"):
            edits.commit(connection, TargetKind.NODE, (node_id,))
        self.status.info(f"Updated {count} node properties of {node_id}")
        self._refresh([F.PROPERTY, *NODE_LISTS])
        return count

    def set_relationship_property(self, name: str, value: str) -> None:
        """Set one property of the current relationship (current node to peer)."""
        connection, _, _ = self._require_open()
        source_id, target_id, rel_type = self._selected(
            F.NODE_ID, F.PEER_ID, F.RELATIONSHIP
        )
        with self._reported(f"Updating {rel_type} relationship"):
            connection.run(
                cypher.set_relationship_properties_query(
                    source_id, target_id, rel_type, {name: value}
                )
            )
        self.status.info(
            f"Updated relationship {source_id} -[{rel_type}]-> {target_id}: "
            f"{name} = {value!r}"
        )
        self._discover_relationship_property(rel_type, name)
        self._refresh([F.RELATIONSHIP_VALUE])

    def edit_relationship_properties(self) -> int:
        """Ask for new values of every schema property of the current relationship."""
        connection, browser, _ = self._require_open()
        source_id, target_id, rel_type = self._selected(
            F.NODE_ID, F.PEER_ID, F.RELATIONSHIP
        )
        names = [
            n
            for n in self.schema.relationship_property_names(rel_type)
            if not is_placeholder(n)
        ]
        current = [
            first_value(
                browser.relationship_property_value(source_id, target_id, rel_type, n)
            )
            for n in names
        ]
        edits = PendingEdits()
        self._edit_values(EntityKind.RELATIONSHIP, rel_type, names, current, edits)
        count = len(edits)
        with self._reported(f"Updating {rel_type} relationship"):
            edits.commit(
                connection, TargetKind.RELATIONSHIP, (source_id, target_id, rel_type)
            )
        self.status.info(f"Updated {count} relationship properties")
        self._refresh([F.RELATIONSHIP_VALUE])
        return count

    # delete

    def delete_node(self) -> str:
        """Delete the current node if it has no relationships.

        Only the node's own relationships, in both directions, are checked.

        Returns:
            str: ID of the deleted node

        Raises:
            DeleteBlockedError: If the node has any incident relationship
        """
        connection, _, _ = self._require_open()
        (node_id,) = self._selected(F.NODE_ID)
        with self._reported(f"Deleting node {node_id}"):
            query = cypher.incident_relationships_query(node_id)
            rows = decode_rows(connection.run(query), query.columns)
            outgoing, incoming = (int(v) for v in rows[0]) if rows else (0, 0)
            if outgoing or incoming:
                raise DeleteBlockedError(node_id, outgoing, incoming)
            connection.run(cypher.delete_node_query(node_id))
        self.status.info(f"Deleted node {node_id}")
        self._refresh(NODE_LISTS)
        return node_id

    def delete_relationship(self) -> tuple[str, str, str]:
        """Delete the current relationship (current node to peer)."""
        connection, _, _ = self._require_open()
        key = self._selected(F.NODE_ID, F.PEER_ID, F.RELATIONSHIP)
        source_id, target_id, rel_type = key
        with self._reported(f"Deleting {rel_type} relationship"):
            connection.run(
                cypher.delete_relationship_query(source_id, target_id, rel_type)
            )
        self.status.info(f"Deleted relationship {source_id} -[{rel_type}]-> {target_id}")
        self._refresh([F.PEER_NAME])
        return key

    # view

    def view_node(self, node_field: SelectionField = F.NODE_ID) -> GraphView:
        """The selected node and everything within two relationships of it."""
        connection, browser, _ = self._require_open()
        (node_id,) = self._selected(node_field)
        with self._reported(f"Fetching neighbourhood of {node_id}"):
            return NeighborhoodFetcher(connection).surroundings(
                node_id, name=browser.node_name(node_id)
            )

    def view_graph(self) -> GraphView:
        connection, _, _ = self._require_open()
        with self._reported("Fetching graph"):
            return NeighborhoodFetcher(connection).whole_graph()

    # bulk load

    def _load(self, path: Path | str, nodes: bool) -> LoadReport:
        connection, _, _ = self._require_open()
        loader = BulkLoader(connection, self.allocator)
        try:
            with self._reported(f"Loading {path}"):
                report = (
                    loader.load_nodes(path) if nodes else loader.load_relationships(path)
                )
        finally:
            self._refresh()
        for message in report.messages:
            self.status.info(message)
        if report.skipped:
            self.status.warning(f"Skipped {report.skipped} short rows in {path}")
        return report

    def load_nodes_file(self, path: Path | str) -> LoadReport:
        """Create nodes from a file of ``ID, type, key, value, ...`` rows."""
        return self._load(path, nodes=True)

    def load_relationships_file(self, path: Path | str) -> LoadReport:
        """Create relationships from a file of ``ID1, ID2, type, key, value, ...`` rows."""
        return self._load(path, nodes=False)
