"""Query construction and result decoding."""

from .cypher import CypherQuery, commit_query, escape_identifier
from .decode import RowDecodeError, decode_rows, flatten, regroup

__all__ = [
    "CypherQuery",
    "RowDecodeError",
    "commit_query",
    "decode_rows",
    "escape_identifier",
    "flatten",
    "regroup",
]
