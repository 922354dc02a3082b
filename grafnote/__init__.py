"""grafnote: a schema-driven editor core for property graphs.

grafnote keeps the choices of a visual graph editor consistent with a Neo4j
store. It loads a loose type schema from four CSV tables, turns selections
into parameter-bound Cypher, recomputes dependent selections in one pass,
allocates node IDs and stages property edits until they are committed.

Key Features:
    - Immutable schema snapshots loaded from a database folder
    - Pure, parameter-bound query builders
    - Cascading selection state machine with placeholder propagation
    - Staged property edits sent as a single statement
    - Neighbourhood and whole-graph views for an external renderer

Example:
    >>> from grafnote import GraphEditor, Neo4jConfig, SelectionField
    >>> editor = GraphEditor()
    >>> editor.open_database("dbs/notes", Neo4jConfig())
    >>> editor.select(SelectionField.NODE_TYPE, "Person")
"""

# --- Editing session -------------------------------------------------------
from .hq import (
    BulkLoader,
    DeleteBlockedError,
    GraphEditor,
    GraphView,
    IDAllocator,
    InvalidIDFormat,
    InvalidSelection,
    NeighborhoodFetcher,
    PendingEdits,
    SelectionField,
    SelectionState,
    StatusLog,
)

# --- Architecture ----------------------------------------------------------
from .architecture import GraphSchema, TypeSchema, load_schema

# --- Database --------------------------------------------------------------
from .db import Connection, ConnectionManager, Neo4jConfig, QueryExecutionError

# --- Queries ---------------------------------------------------------------
from .query import CypherQuery, RowDecodeError

# --- Enums & constants -----------------------------------------------------
from .onto import PLACEHOLDER, EntityKind, TargetKind

__all__ = [
    # Editing session
    "GraphEditor",
    "SelectionField",
    "SelectionState",
    "InvalidSelection",
    "PendingEdits",
    "IDAllocator",
    "InvalidIDFormat",
    "DeleteBlockedError",
    "NeighborhoodFetcher",
    "GraphView",
    "BulkLoader",
    "StatusLog",
    # Architecture
    "GraphSchema",
    "TypeSchema",
    "load_schema",
    # Database
    "Connection",
    "ConnectionManager",
    "Neo4jConfig",
    "QueryExecutionError",
    # Queries
    "CypherQuery",
    "RowDecodeError",
    # Enums & constants
    "PLACEHOLDER",
    "EntityKind",
    "TargetKind",
]
