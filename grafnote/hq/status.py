"""Append-only log of user-visible outcomes.

The editor reports what happened (node created, delete refused, query failed)
as status entries instead of interrupting the user. Every entry is mirrored
to the module logger at the matching level.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from grafnote.architecture.base import ConfigBaseModel
from grafnote.onto import BaseEnum

logger = logging.getLogger(__name__)


class StatusLevel(BaseEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    StatusLevel.INFO: logging.INFO,
    StatusLevel.WARNING: logging.WARNING,
    StatusLevel.ERROR: logging.ERROR,
}


class StatusEntry(ConfigBaseModel):
    level: StatusLevel
    message: str
    timestamp: datetime


class StatusLog:
    """Entries in the order they were reported; never edited or removed."""

    def __init__(self):
        self._entries: list[StatusEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> tuple[StatusEntry, ...]:
        return tuple(self._entries)

    @property
    def last(self) -> StatusEntry | None:
        return self._entries[-1] if self._entries else None

    def messages(self) -> list[str]:
        return [e.message for e in self._entries]

    def append(
        self, level: StatusLevel | str, message: str, exc_info: bool = False
    ) -> StatusEntry:
        level = StatusLevel(level)
        entry = StatusEntry(
            level=level, message=message, timestamp=datetime.now(timezone.utc)
        )
        self._entries.append(entry)
        logger.log(_LOG_LEVELS[level], message, exc_info=exc_info)
        return entry

    def info(self, message: str) -> StatusEntry:
        return self.append(StatusLevel.INFO, message)

    def warning(self, message: str) -> StatusEntry:
        return self.append(StatusLevel.WARNING, message)

    def error(self, message: str, exc_info: bool = False) -> StatusEntry:
        return self.append(StatusLevel.ERROR, message, exc_info=exc_info)
