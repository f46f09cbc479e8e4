"""
mapping/modes.py
----------------
Catalogue of the supported result mapping modes: which SQL return style
each one suits, which cursor it uses, and how the caller reads the result.
"""

from dataclasses import dataclass
from enum import Enum


class MappingMode(str, Enum):
    DICT = "dict"
    RECORD = "record"
    JSON = "json"
    HYBRID = "hybrid"
    TUPLE = "tuple"


@dataclass(frozen=True)
class ModeInfo:
    mode: MappingMode
    sql_contract: str
    cursor: str
    access: str
    notes: str


MAPPING_MODES: tuple[ModeInfo, ...] = (
    ModeInfo(
        MappingMode.DICT,
        "RETURNS TABLE(...) / SETOF",
        "RealDictCursor",
        "row['name']",
        "Plain dicts, ready for JSON encoding.",
    ),
    ModeInfo(
        MappingMode.RECORD,
        "RETURNS <composite type>",
        "default cursor",
        "row.name",
        "Positional tuple zipped with field names into a named tuple.",
    ),
    ModeInfo(
        MappingMode.JSON,
        "RETURNS JSON / JSONB",
        "default cursor",
        "doc['name']",
        "Server builds the structure; client only parses one value.",
    ),
    ModeInfo(
        MappingMode.HYBRID,
        "any",
        "DictCursor",
        "row[0] or row['name']",
        "DictRow supports both index and key access.",
    ),
    ModeInfo(
        MappingMode.TUPLE,
        "any",
        "default cursor",
        "row[0]",
        "Raw positional rows plus the column names.",
    ),
)

_HEADERS = ("mode", "sql contract", "cursor", "access", "notes")


def format_modes_table() -> str:
    """Render MAPPING_MODES as an aligned plain-text table."""
    rows = [
        (m.mode.value, m.sql_contract, m.cursor, m.access, m.notes)
        for m in MAPPING_MODES
    ]
    widths = [
        max(len(str(r[i])) for r in (_HEADERS, *rows)) for i in range(len(_HEADERS))
    ]

    def _line(values) -> str:
        return " | ".join(str(v).ljust(w) for v, w in zip(values, widths)).rstrip()

    separator = "-+-".join("-" * w for w in widths)
    return "\n".join([_line(_HEADERS), separator, *(_line(r) for r in rows)])
