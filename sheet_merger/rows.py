"""Row model shared by the codec, merge engine, preview and export.

A row is a plain ``dict`` from column name to a scalar cell value
(str, int, float, bool or None). Rows coming out of one sheet share that
sheet's columns; rows from different sheets do not, and are only reconciled
once the header set is known (see ``fill_missing``).
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

CellValue = Optional[Union[str, int, float, bool]]
Row = Dict[str, CellValue]

SOURCE_COLUMN = "SOURCE NAME"


def normalize_cell(value: Any) -> CellValue:
    """Coerce a decoded cell into one of the row value types."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime, date, time)):
        if value is pd.NaT:
            return None
        if isinstance(value, datetime) and value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ") if isinstance(value, datetime) else value.isoformat()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if hasattr(value, "item"):
        # numpy scalars
        return normalize_cell(value.item())
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    return str(value)


def header_name(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def tag_rows(source_name: str, rows: Iterable[Row]) -> List[Row]:
    """Prefix every row with the provenance column.

    The provenance key is written first and the row's own keys second, so a
    sheet that already has a column named ``SOURCE_COLUMN`` keeps its own
    value for that column.
    """
    return [{SOURCE_COLUMN: source_name, **row} for row in rows]


def carries_source_column(rows: Sequence[Row]) -> bool:
    return any(SOURCE_COLUMN in row for row in rows)


def fill_missing(rows: Iterable[Row], headers: Sequence[str]) -> List[Row]:
    """Return new rows holding every header, absent cells as explicit None."""
    return [{header: row.get(header) for header in headers} for row in rows]
