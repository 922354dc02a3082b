"""Decoding of query results into fixed-width records.

Results arrive from the gateway as ordered key/value rows. Every query
declares its columns, and decoding checks each row against that contract
instead of trusting the store to return the expected shape.

``regroup`` handles the flattened form, a single stream of scalars that must
be cut into rows of a known width. A stream whose length is not a multiple of
the width means the query or the result schema is wrong; it is rejected
rather than truncated.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any


class RowDecodeError(ValueError):
    """A result does not match the shape its query declared."""


def regroup(stream: Sequence[Any], width: int) -> list[tuple[Any, ...]]:
    """Cut a flattened scalar stream into rows of ``width`` items.

    Raises:
        ValueError: If ``width`` is not positive
        RowDecodeError: If ``len(stream)`` is not a multiple of ``width``
    """
    if width <= 0:
        raise ValueError(f"Row width must be positive, got {width}")
    if len(stream) % width:
        raise RowDecodeError(
            f"Stream of {len(stream)} values does not split into rows of {width}"
        )
    return [tuple(stream[i : i + width]) for i in range(0, len(stream), width)]


def flatten(rows: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> list[Any]:
    """Flatten rows into one scalar stream, in declared column order."""
    stream: list[Any] = []
    for row in rows:
        stream.extend(row.get(c) for c in columns)
    return stream


def decode_rows(
    rows: Iterable[Mapping[str, Any]], columns: Sequence[str]
) -> list[tuple[Any, ...]]:
    """Turn result rows into tuples ordered as ``columns``.

    Raises:
        RowDecodeError: If a row's keys differ from ``columns``
    """
    expected = set(columns)
    decoded = []
    for i, row in enumerate(rows):
        if set(row) != expected:
            raise RowDecodeError(
                f"Row {i} has columns {sorted(row)}, expected {list(columns)}"
            )
        decoded.append(tuple(row[c] for c in columns))
    return decoded


def scalar_values(rows: Iterable[Mapping[str, Any]], column: str = "value") -> list[Any]:
    """Values of a single-column result."""
    return [values[0] for values in decode_rows(rows, (column,))]


def as_text(value: Any) -> str:
    """Render a result scalar as the text shown to users.

    ``None`` becomes an empty string and lists (e.g. node labels) are joined
    with commas.
    """
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(as_text(v) for v in value)
    return str(value)
