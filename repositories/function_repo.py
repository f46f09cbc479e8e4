"""
repositories/function_repo.py
------------------------------
Calls PostgreSQL stored functions through ``cursor.callproc`` and maps the
result with one of the supported mapping modes. Parameters are always
bound by the driver; only the validated function name reaches the SQL text.
"""

import re
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from psycopg2 import extras

from db.connection import cursor
from db.exceptions import InvalidFunctionNameError
from mapping.modes import MappingMode
from mapping.rows import (
    column_names,
    parse_json_value,
    row_to_namedtuple,
    single_column,
)
from utils.logger import get_logger

logger = get_logger(__name__)

Params = Optional[Union[Sequence[Any], Mapping[str, Any]]]

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_FUNCTION_NAME_RE = re.compile(rf"^{_IDENT}(\.{_IDENT})?$")


def validate_function_name(name: str) -> str:
    """
    Ensure ``name`` is ``function`` or ``schema.function``.

    callproc pastes the name into the SQL text unquoted, so anything
    beyond plain identifiers is rejected.
    """
    if not isinstance(name, str) or not _FUNCTION_NAME_RE.match(name):
        raise InvalidFunctionNameError(f"Invalid function name: {name!r}")
    return name


def default_typename(name: str) -> str:
    """get_user_summary -> GetUserSummary"""
    base = name.rsplit(".", 1)[-1]
    return "".join(part.capitalize() for part in base.split("_") if part) or "Record"


class FunctionRepository:
    """Generic stored-function calls, one method per mapping mode."""

    def _call(
        self,
        name: str,
        params: Params,
        fetch: Callable,
        factory: Optional[type] = None,
    ) -> Any:
        """
        Run ``SELECT * FROM name(params)`` and hand the open cursor to ``fetch``.

        Args:
            name: Function name, optionally schema-qualified.
            params: Positional sequence or a mapping of named arguments.
            fetch: Callable receiving the cursor and returning the result.
            factory: Optional psycopg2 cursor class.
        """
        validate_function_name(name)
        try:
            with cursor(factory) as cur:
                cur.callproc(name, params)
                result = fetch(cur)
            logger.debug(f"Called {name} with {len(params or ())} parameter(s).")
            return result
        except Exception as e:
            logger.error(f"Failed to call function {name}: {e}")
            raise

    # ── DICT ──────────────────────────────────────────────

    def call_table(self, name: str, params: Params = None) -> list[dict]:
        """
        Call a table-returning function and return every row as a dict.

        Returns:
            List of plain dicts keyed by column name (empty for no rows).
        """
        return self._call(
            name,
            params,
            lambda cur: [dict(r) for r in cur.fetchall()],
            extras.RealDictCursor,
        )

    def call_one(self, name: str, params: Params = None) -> Optional[dict]:
        """Call a function and return only its first row as a dict, or None."""

        def fetch(cur):
            row = cur.fetchone()
            return dict(row) if row is not None else None

        return self._call(name, params, fetch, extras.RealDictCursor)

    # ── RECORD ────────────────────────────────────────────

    def call_composite(
        self,
        name: str,
        params: Params = None,
        fields: Optional[Sequence[str]] = None,
        typename: Optional[str] = None,
    ) -> Optional[tuple]:
        """
        Call a composite-returning function and map its single row
        onto a named tuple.

        Args:
            name: Function name.
            params: Function arguments.
            fields: Field names; default is the column names the server reports.
            typename: Named tuple class name; default derives from ``name``.

        Returns:
            A named tuple, or None when the function produced no row.
        """
        typename = typename or default_typename(name)

        def fetch(cur):
            return row_to_namedtuple(
                cur.fetchone(), fields or column_names(cur.description), typename
            )

        return self._call(name, params, fetch)

    def call_records(
        self,
        name: str,
        params: Params = None,
        fields: Optional[Sequence[str]] = None,
        typename: Optional[str] = None,
    ) -> list[tuple]:
        """Like call_composite, for every row of a set-returning function."""
        typename = typename or default_typename(name)

        def fetch(cur):
            names = fields or column_names(cur.description)
            return [row_to_namedtuple(r, names, typename) for r in cur.fetchall()]

        return self._call(name, params, fetch)

    # ── JSON ──────────────────────────────────────────────

    def call_json(self, name: str, params: Params = None) -> Any:
        """
        Call a JSON-returning function and return the parsed document.

        Returns:
            The decoded JSON value; None when there is no row or the
            function returned SQL NULL.

        Raises:
            ResultShapeError: If the function returns more than one column.
        """
        return self._call(
            name, params, lambda cur: parse_json_value(single_column(cur.fetchone()))
        )

    # ── HYBRID / TUPLE ────────────────────────────────────

    def call_hybrid(self, name: str, params: Params = None) -> list[extras.DictRow]:
        """Return DictRow objects, readable as ``row[0]`` and ``row['col']``."""
        return self._call(name, params, lambda cur: cur.fetchall(), extras.DictCursor)

    def call_tuples(
        self, name: str, params: Params = None
    ) -> tuple[list[str], list[tuple]]:
        """Return the column names and the raw positional rows."""
        return self._call(
            name,
            params,
            lambda cur: (column_names(cur.description), list(cur.fetchall())),
        )

    # ── DISPATCH ──────────────────────────────────────────

    def call(
        self, name: str, params: Params = None, mode: MappingMode = MappingMode.DICT
    ) -> Any:
        """Call ``name`` and map the result according to ``mode``."""
        handlers = {
            MappingMode.DICT: self.call_table,
            MappingMode.RECORD: self.call_records,
            MappingMode.JSON: self.call_json,
            MappingMode.HYBRID: self.call_hybrid,
            MappingMode.TUPLE: self.call_tuples,
        }
        return handlers[MappingMode(mode)](name, params)
