"""Connection configuration for the backing graph store.

Configuration can come from the environment (``NEO4J_URI``,
``NEO4J_USERNAME``, ``NEO4J_PASSWORD``, ``NEO4J_DATABASE``), from keyword
arguments, or from a two-line credential file (principal, then secret).

Example:
    >>> config = Neo4jConfig(uri="bolt://localhost:7687", username="neo4j", password="pw")
    >>> config = Neo4jConfig.from_auth_file("auth.txt", uri="bolt://localhost:7687")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_BOLT_PORT = 7687


class Neo4jConfig(BaseSettings):
    """Neo4j connection settings.

    Attributes:
        uri: Bolt URI (``bolt://host:port`` or ``neo4j://host:port``)
        username: Principal; empty when no credentials are known
        password: Secret; empty when no credentials are known
        database: Database name, or None for the server default
    """

    model_config = SettingsConfigDict(
        env_prefix="NEO4J_",
        extra="ignore",
        validate_assignment=True,
    )

    uri: str = Field(default=f"bolt://localhost:{DEFAULT_BOLT_PORT}")
    username: str = Field(default="")
    password: str = Field(default="")
    database: str | None = Field(default=None)

    @property
    def auth(self) -> tuple[str, str] | None:
        """Basic auth tuple, or None when no principal is configured."""
        if not self.username:
            return None
        return self.username, self.password

    @classmethod
    def from_auth_file(cls, path: Path | str, **kwargs: Any) -> Neo4jConfig:
        """Build a config whose credentials are read from a two-line file.

        A missing or short file is not fatal: it is logged and yields empty
        credentials, so the failure surfaces when connecting instead.

        Args:
            path: Credential file, line 1 principal, line 2 secret
            **kwargs: Other settings (uri, database)
        """
        username, password = "", ""
        try:
            lines = Path(path).read_text().splitlines()
        except FileNotFoundError:
            logger.warning(f"Auth file not present: {path}")
            lines = []
        if len(lines) >= 2:
            username, password = lines[0].strip(), lines[1].strip()
        elif lines:
            logger.warning(f"Auth file {path} has no secret line")
            username = lines[0].strip()
        return cls(username=username, password=password, **kwargs)
