"""Client-side staging of property edits.

Edits are collected as ordered ``(name, value)`` pairs and sent in one
statement on commit. Either the whole statement is sent or nothing is: the
staged list is only cleared after the statement succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from grafnote.db.conn import Connection
from grafnote.onto import PLACEHOLDER, EntityKind, TargetKind
from grafnote.query.cypher import CypherQuery, commit_query

logger = logging.getLogger(__name__)

# (entity kind, type name, property names, current values) -> entered values
PropertyEditor = Callable[[EntityKind, str, list[str], list[str]], Sequence[str]]


class PendingEdits:
    """Ordered property edits awaiting a single create/update statement."""

    def __init__(self):
        self._edits: list[tuple[str, str]] = []

    def __len__(self) -> int:
        return len(self._edits)

    def __bool__(self) -> bool:
        return bool(self._edits)

    @property
    def edits(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._edits)

    def add(self, name: str, value: str) -> None:
        """Stage one edit.

        Raises:
            ValueError: If ``name`` is empty or the placeholder
        """
        if not name or not name.strip() or name == PLACEHOLDER:
            raise ValueError(f"Cannot stage an edit without a property name: {name!r}")
        self._edits.append((name, value))

    def add_all(
        self,
        entity: EntityKind,
        type_name: str,
        names: Sequence[str],
        editor: PropertyEditor,
        current: Sequence[str] | None = None,
    ) -> list[tuple[str, str]]:
        """Replace the staged edits with values entered for every ``names`` item.

        The editor is seeded with each property name and its current value
        (empty when not given) and must return one value per name. Placeholder
        names are skipped.

        Raises:
            ValueError: If the editor returns a different number of values
        """
        if current is None:
            current = [""] * len(names)
        seeded = [(n, c) for n, c in zip(names, current) if n != PLACEHOLDER]
        names = [n for n, _ in seeded]
        values = list(editor(entity, type_name, names, [c for _, c in seeded]))
        if len(values) != len(names):
            raise ValueError(
                f"Property editor returned {len(values)} values for {len(names)} properties"
            )
        self._edits = list(zip(names, values))
        logger.debug(f"Staged {len(self._edits)} {entity} properties for {type_name}")
        return list(self._edits)

    def clear(self) -> None:
        self._edits.clear()

    def as_properties(self) -> dict[str, Any]:
        """Staged edits as a property map; a later edit of a name wins."""
        return dict(self._edits)

    def build(self, kind: TargetKind | str, key: tuple[str, ...]) -> CypherQuery:
        return commit_query(kind, key, self.as_properties())

    def commit(
        self, connection: Connection, kind: TargetKind | str, key: tuple[str, ...]
    ) -> CypherQuery:
        """Send all staged edits to ``key`` in one statement, then clear them.

        Returns:
            CypherQuery: The statement that was executed

        Raises:
            QueryExecutionError: If the statement fails; edits stay staged
        """
        query = self.build(kind, key)
        connection.run(query)
        logger.info(f"Committed {len(self._edits)} edits to {kind} {key}")
        self.clear()
        return query
