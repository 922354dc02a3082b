"""Allocation of node identifiers.

Every node carries an ``ID`` property holding a non-negative integer in
canonical decimal form. New IDs are one more than the current maximum and
are registered as soon as they are handed out, so two allocations in one
session never collide even before anything is written to the store.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class InvalidIDFormat(ValueError):
    """A registered ID is not a decimal integer; allocation is impossible."""


class IDAllocator:
    """Monotonic allocator over the set of known node IDs.

    Example:
        >>> allocator = IDAllocator(["1", "3", "5"])
        >>> allocator.allocate()
        '6'
    """

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: set[str] = set()
        self.seed(ids)

    def seed(self, ids: Iterable[str]) -> None:
        """Replace the known IDs, e.g. with the result of a full scan."""
        self._ids = {str(i) for i in ids}
        logger.debug(f"Seeded ID allocator with {len(self._ids)} IDs")

    def register(self, node_id: str) -> None:
        """Record an ID created outside ``allocate`` (bulk loads)."""
        self._ids.add(str(node_id))

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def allocate(self) -> str:
        """Return and register a new ID greater than every known one.

        Raises:
            InvalidIDFormat: If a known ID is not a decimal integer. Nothing
                is registered and the caller must not create the node.
        """
        if not self._ids:
            new_id = "1"
        else:
            values = []
            for node_id in self._ids:
                if not node_id.isdecimal():
                    logger.error(f"Cannot allocate: existing ID {node_id!r} is not numeric")
                    raise InvalidIDFormat(f"Existing node ID {node_id!r} is not numeric")
                values.append(int(node_id))
            new_id = str(max(values) + 1)
        self._ids.add(new_id)
        logger.debug(f"Allocated node ID {new_id}")
        return new_id
