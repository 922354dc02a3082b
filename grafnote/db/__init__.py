"""Graph store access: configuration, connections and their lifecycle."""

from .conn import Connection, QueryExecutionError
from .connection import Neo4jConfig
from .manager import ConnectionFactory, ConnectionManager, connect
from .neo4j import Neo4jConnection

__all__ = [
    "Connection",
    "ConnectionFactory",
    "ConnectionManager",
    "Neo4jConfig",
    "Neo4jConnection",
    "QueryExecutionError",
    "connect",
]
