"""Loading schema snapshots and tabular files from a database folder.

A database folder holds four comma-separated files, one row per type:

    NodeProperties.csv          node type, property, property, ...
    RelationshipProperties.csv  relationship type, property, property, ...
    NodeRelationships.csv       node type, relationship type, ...
    RelationshipNodes.csv       relationship type, node type, ...

Rows are ragged: each row has as many cells as its type needs. A missing file
is not fatal; it is logged and contributes an empty mapping.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import pandas as pd

from grafnote.architecture.schema import AdjacencySchema, GraphSchema, TypeSchema
from grafnote.onto import BaseEnum

logger = logging.getLogger(__name__)


class SchemaFile(BaseEnum):
    """File names of the four schema tables inside a database folder."""

    NODE_PROPERTIES = "NodeProperties.csv"
    RELATIONSHIP_PROPERTIES = "RelationshipProperties.csv"
    NODE_RELATIONSHIPS = "NodeRelationships.csv"
    RELATIONSHIP_NODES = "RelationshipNodes.csv"


def read_table(path: Path | str, sep: str = ",") -> list[list[str]]:
    """Read a ragged delimited file into a list of string rows.

    Every cell is read as a string. Quote characters are ordinary text
    and never group cells. Whitespace following a delimiter is
    skipped, trailing empty cells of a row are dropped, blank lines are
    ignored.

    Args:
        path: File to read
        sep: Cell delimiter

    Returns:
        list[list[str]]: One list of cells per non-blank line

    Raises:
        FileNotFoundError: If ``path`` does not exist
    """
    path = Path(path)
    with path.open() as f:
        width = max((line.count(sep) + 1 for line in f if line.strip()), default=0)
    if width == 0:
        return []

    df = pd.read_csv(
        path,
        sep=sep,
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        skipinitialspace=True,
        quoting=csv.QUOTE_NONE,
        engine="python",
    ).fillna("")
    rows: list[list[str]] = []
    for record in df.itertuples(index=False, name=None):
        cells = list(record)
        while cells and cells[-1] == "":
            cells.pop()
        if cells:
            rows.append(cells)
    return rows


def load_type_schema(path: Path | str) -> TypeSchema:
    """Load one schema table, or an empty mapping if the file is missing."""
    try:
        rows = read_table(path)
    except FileNotFoundError:
        logger.warning(f"Schema file not found: {path}")
        return TypeSchema()
    schema = TypeSchema.from_rows(rows)
    logger.debug(f"Loaded {len(schema)} schema entries from {path}")
    return schema


def load_schema(folder: Path | str) -> GraphSchema:
    """Load the four schema tables of a database folder into a snapshot.

    Args:
        folder: Database folder containing the ``SchemaFile`` tables

    Returns:
        GraphSchema: A fresh snapshot; missing tables are empty
    """
    folder = Path(folder)
    schema = GraphSchema(
        node_properties=load_type_schema(folder / SchemaFile.NODE_PROPERTIES),
        relationship_properties=load_type_schema(
            folder / SchemaFile.RELATIONSHIP_PROPERTIES
        ),
        adjacency=AdjacencySchema(
            node_relationships=load_type_schema(
                folder / SchemaFile.NODE_RELATIONSHIPS
            ),
            relationship_nodes=load_type_schema(
                folder / SchemaFile.RELATIONSHIP_NODES
            ),
        ),
    )
    logger.info(
        f"Loaded schema from {folder}: "
        f"{len(schema.node_properties)} node types, "
        f"{len(schema.relationship_properties)} relationship types"
    )
    return schema
