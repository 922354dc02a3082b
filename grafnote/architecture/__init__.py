"""Schema snapshots and their loading from a database folder."""

from .base import ConfigBaseModel
from .loader import SchemaFile, load_schema, load_type_schema, read_table
from .schema import EMPTY_ROW, AdjacencySchema, GraphSchema, TypeSchema

__all__ = [
    "AdjacencySchema",
    "ConfigBaseModel",
    "EMPTY_ROW",
    "GraphSchema",
    "SchemaFile",
    "TypeSchema",
    "load_schema",
    "load_type_schema",
    "read_table",
]
