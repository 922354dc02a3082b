"""Abstract connection interface for the backing graph store.

A ``Connection`` executes one statement at a time and returns its rows as
ordered key/value mappings. Concrete connectors (Neo4j) implement
``execute`` and ``close``; ``run`` is shared and adds the query name to
logging and to failures.

Example:
    >>> with ConnectionManager(connection_config=config) as conn:
    ...     rows = conn.run(node_names_query("Person"))
"""

from __future__ import annotations

import abc
import logging
from typing import Any

from grafnote.query.cypher import CypherQuery

logger = logging.getLogger(__name__)


class QueryExecutionError(RuntimeError):
    """A statement failed in the store or could not be delivered to it.

    Attributes:
        query_name: Name of the failed ``CypherQuery``, if known
    """

    def __init__(self, message: str, query_name: str | None = None):
        super().__init__(message)
        self.query_name = query_name


class Connection(abc.ABC):
    """Abstract base class for graph store connections."""

    @abc.abstractmethod
    def execute(self, query: str, **kwargs: Any) -> list[dict[str, Any]]:
        """Execute a raw statement with bound parameters.

        Args:
            query: Statement text
            **kwargs: Parameters bound to ``$name`` placeholders

        Returns:
            list[dict[str, Any]]: Result rows, keys in ``RETURN`` order

        Raises:
            QueryExecutionError: If the store rejects the statement
        """

    @abc.abstractmethod
    def close(self) -> None:
        """Release the connection; it must not be used afterwards."""

    def run(self, query: CypherQuery) -> list[dict[str, Any]]:
        """Execute a built query."""
        logger.debug(f"Running {query.name}: {query.text}")
        try:
            return self.execute(query.text, **query.params)
        except QueryExecutionError as e:
            if e.query_name is None:
                e.query_name = query.name
            raise

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback) -> None:
        self.close()
