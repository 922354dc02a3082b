"""Context manager for graph store connections.

Example:
    >>> with ConnectionManager(connection_config=config) as conn:
    ...     rows = conn.execute("MATCH (n) RETURN count(n) AS total")
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from grafnote.db.conn import Connection
from grafnote.db.connection.onto import Neo4jConfig
from grafnote.db.neo4j.conn import Neo4jConnection

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[Neo4jConfig], Connection]


def connect(config: Neo4jConfig) -> Connection:
    """Open a connection for ``config``."""
    return Neo4jConnection(config)


class ConnectionManager:
    """Opens a connection on enter and always closes it on exit.

    Long-lived sessions call ``open`` and ``close`` directly instead of
    using the ``with`` block.

    Attributes:
        config: Connection configuration
        factory: Callable opening a connection for a config
        conn: The open connection, None while closed
    """

    def __init__(
        self,
        connection_config: Neo4jConfig,
        factory: ConnectionFactory = connect,
    ):
        self.config = connection_config
        self.factory = factory
        self.conn: Connection | None = None

    def open(self) -> Connection:
        if self.conn is None:
            self.conn = self.factory(self.config)
            logger.debug(f"Opened connection to {self.config.uri}")
        return self.conn

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            logger.debug(f"Closed connection to {self.config.uri}")
        self.conn = None

    def __enter__(self) -> Connection:
        return self.open()

    def __exit__(self, exc_type, exc_value, exc_traceback) -> None:
        self.close()
