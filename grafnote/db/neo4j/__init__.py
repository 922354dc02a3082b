"""Neo4j database implementation."""

from .conn import Neo4jConnection

__all__ = [
    "Neo4jConnection",
]
