"""Editing session components.

Key Components:
    - GraphEditor: stateful session a front end drives
    - SelectionState: consistent snapshot of the cascading choices
    - IDAllocator: monotonic node ID allocation
    - PendingEdits: property edits staged for one statement
    - NeighborhoodFetcher: node surroundings and whole-graph views
    - BulkLoader: node and relationship creation from files
"""

from .bulk_loader import BulkLoader, LoadReport
from .editor import (
    DatabaseNotOpenError,
    DeleteBlockedError,
    GraphEditor,
    NothingSelectedError,
)
from .ids import IDAllocator, InvalidIDFormat
from .neighborhood import (
    EdgeRecord,
    GraphView,
    Neighbor,
    NeighborhoodFetcher,
    NodeRecord,
    TwoHopPath,
)
from .selection import (
    Choice,
    InvalidSelection,
    SelectionField,
    SelectionState,
    initial_state,
    recompute,
    refresh,
)
from .staging import PendingEdits, PropertyEditor
from .status import StatusEntry, StatusLevel, StatusLog

__all__ = [
    "BulkLoader",
    "Choice",
    "DatabaseNotOpenError",
    "DeleteBlockedError",
    "EdgeRecord",
    "GraphEditor",
    "GraphView",
    "IDAllocator",
    "InvalidIDFormat",
    "InvalidSelection",
    "LoadReport",
    "Neighbor",
    "NeighborhoodFetcher",
    "NodeRecord",
    "NothingSelectedError",
    "PendingEdits",
    "PropertyEditor",
    "SelectionField",
    "SelectionState",
    "StatusEntry",
    "StatusLevel",
    "StatusLog",
    "TwoHopPath",
    "initial_state",
    "recompute",
    "refresh",
]
