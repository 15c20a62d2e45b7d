from __future__ import annotations

from typing import Sequence

import pandas as pd

from sheet_merger.rows import CellValue, Row

PREVIEW_LIMIT = 100


def format_cell(value: CellValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def project(rows: Sequence[Row], headers: Sequence[str], limit: int = PREVIEW_LIMIT) -> list[list[str]]:
    """First ``limit`` rows as display strings, one column per header."""
    return [[format_cell(row.get(header)) for header in headers] for row in rows[:limit]]


def preview_frame(rows: Sequence[Row], headers: Sequence[str], limit: int = PREVIEW_LIMIT) -> pd.DataFrame:
    return pd.DataFrame(project(rows, headers, limit), columns=list(headers))
