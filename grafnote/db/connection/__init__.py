from .onto import DEFAULT_BOLT_PORT, Neo4jConfig

__all__ = [
    "DEFAULT_BOLT_PORT",
    "Neo4jConfig",
]
