from __future__ import annotations

from typing import Iterable

from sheet_merger.rows import SOURCE_COLUMN, Row


def compute_headers(rows: Iterable[Row]) -> list[str]:
    """Ordered, de-duplicated column names across ``rows``.

    A column counts as seen the first time any row carries the key, whatever
    its value. The provenance column, when present, is moved to the front;
    every other column keeps its first-seen position.
    """
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)

    headers = list(seen)
    if SOURCE_COLUMN in seen:
        return [SOURCE_COLUMN] + [header for header in headers if header != SOURCE_COLUMN]
    return headers
