"""Neo4j connector implementation.

This module provides the session gateway grafnote uses to reach a Neo4j
server over Bolt. It implements the grafnote ``Connection`` interface on top
of the official ``neo4j`` Python driver.

Architecture
------------
One driver and one long-lived session are opened per connection. Statements
run in auto-commit mode, each one a blocking round trip:

    Neo4jConnection
    └── neo4j.Driver
        └── neo4j.Session (auto-commit)

Error Handling
--------------
- Server-side failures (``neo4j.exceptions.Neo4jError``) and transport
  failures (``neo4j.exceptions.DriverError``) are raised as
  ``QueryExecutionError`` with the original exception chained
- No retries and no timeouts are applied here

Example
-------
Basic usage with ConnectionManager::

    from grafnote.db import ConnectionManager, Neo4jConfig

    config = Neo4jConfig(uri="bolt://localhost:7687", username="neo4j", password="pw")

    with ConnectionManager(connection_config=config) as db:
        rows = db.execute("MATCH (n:Person) RETURN n.name AS name")
"""

from __future__ import annotations

import logging
from typing import Any

from neo4j import Driver, GraphDatabase, Session
from neo4j.exceptions import DriverError, Neo4jError

from grafnote.db.conn import Connection, QueryExecutionError
from grafnote.db.connection.onto import Neo4jConfig

logger = logging.getLogger(__name__)


class Neo4jConnection(Connection):
    """Neo4j connector implementing the grafnote Connection interface.

    Thread Safety
    -------------
    This class is NOT thread-safe. grafnote drives it from a single
    interactive thread.

    Attributes
    ----------
    config : Neo4jConfig
        Connection configuration (URI, credentials, database)
    driver : neo4j.Driver | None
        Underlying driver, None once closed
    session : neo4j.Session | None
        Long-lived session, None once closed
    """

    driver: Driver | None
    session: Session | None

    def __init__(self, config: Neo4jConfig):
        super().__init__()
        self.config = config
        self.driver = GraphDatabase.driver(config.uri, auth=config.auth)
        if config.database:
            self.session = self.driver.session(database=config.database)
        else:
            self.session = self.driver.session()
        logger.info(f"Opened Neo4j session on {config.uri}")

    def execute(self, query: str, **kwargs: Any) -> list[dict[str, Any]]:
        """Execute a raw Cypher statement with bound parameters.

        Parameters
        ----------
        query : str
            Cypher statement to execute
        **kwargs
            Query parameters, bound by the driver

        Returns
        -------
        list[dict[str, Any]]
            One mapping per record, keys in ``RETURN`` order
        """
        if self.session is None:
            raise QueryExecutionError("Connection is closed")
        try:
            result = self.session.run(query, parameters=kwargs)
            return [record.data() for record in result]
        except (Neo4jError, DriverError) as e:
            logger.error(f"Query failed on {self.config.uri}: {e}", exc_info=True)
            raise QueryExecutionError(str(e)) from e

    def close(self) -> None:
        """Close the session, then the driver."""
        if self.session is not None:
            self.session.close()
        self.session = None
        if self.driver is not None:
            self.driver.close()
        self.driver = None
        logger.info(f"Closed Neo4j session on {self.config.uri}")
