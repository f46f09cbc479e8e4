"""
mapping/rows.py
---------------
Row mapping helpers: turn the positional tuples a DB-API cursor returns
into dictionaries, named tuples, or parsed JSON documents.
"""

import json
from collections import namedtuple
from functools import lru_cache
from typing import Any, Iterable, Optional, Sequence

from psycopg2 import extras

from db.exceptions import ResultShapeError


def column_names(description: Optional[Sequence]) -> list[str]:
    """
    Extract column names from a cursor description.

    Works with psycopg2 ``Column`` objects and plain DB-API 7-tuples alike,
    both expose the name at index 0.
    """
    if not description:
        return []
    return [col[0] for col in description]


def row_to_dict(row: Optional[Sequence], columns: Sequence[str]) -> Optional[dict]:
    """Zip a positional row with its column names."""
    if row is None:
        return None
    if len(row) != len(columns):
        raise ResultShapeError(
            f"Row has {len(row)} values but {len(columns)} column names were given."
        )
    return dict(zip(columns, row))


def rows_to_dicts(rows: Iterable[Sequence], columns: Sequence[str]) -> list[dict]:
    return [row_to_dict(r, columns) for r in rows]


@lru_cache(maxsize=128)
def _cached_record_type(typename: str, fields: tuple[str, ...]) -> type:
    return namedtuple(typename, fields, rename=True)


def record_type(typename: str, fields: Sequence[str]) -> type:
    """
    Return a named tuple class for the given field names.

    Classes are cached per (typename, fields) so repeated calls for the same
    function share one type. Names that are not valid identifiers (e.g. a
    ``?column?`` from an unnamed expression) are replaced by positional names.
    """
    return _cached_record_type(typename, tuple(fields))


def row_to_namedtuple(
    row: Optional[Sequence], fields: Sequence[str], typename: str = "Record"
) -> Optional[tuple]:
    """
    Map an unnamed tuple (e.g. a composite type expanded into columns)
    onto a named tuple.

    Args:
        row: The positional row, or None.
        fields: Field names in column order.
        typename: Name of the generated named tuple class.

    Returns:
        A named tuple instance, or None when ``row`` is None.

    Raises:
        ResultShapeError: If the row and field counts differ.
    """
    if row is None:
        return None
    if len(row) != len(fields):
        raise ResultShapeError(
            f"{typename} expects {len(fields)} fields, row has {len(row)} values."
        )
    return record_type(typename, fields)(*row)


def single_column(row: Optional[Sequence]) -> Any:
    """Unwrap a one-column row. None (no row) stays None."""
    if row is None:
        return None
    if len(row) != 1:
        raise ResultShapeError(f"Expected a single column, got {len(row)}.")
    return row[0]


def parse_json_value(value: Any) -> Any:
    """
    JSON passthrough: parse a JSON value produced by the server.

    psycopg2 already decodes ``json``/``jsonb`` columns, so anything that is
    not text is returned unchanged. Text (e.g. a function declared
    ``RETURNS TEXT`` or a ``::text`` cast) is parsed with ``json.loads``.
    """
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ResultShapeError(f"Function returned invalid JSON text: {e}") from e
    return value


def register_composite_type(name: str, conn_or_curs) -> type:
    """
    Register a composite type caster on a connection.

    After registration ``SELECT func()`` yields named tuples for ``name``
    instead of the raw ``(1,Alice,...)`` text form.

    Returns:
        The named tuple class psycopg2 generated for the type.
    """
    caster = extras.register_composite(name, conn_or_curs)
    return caster.type
