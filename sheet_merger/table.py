from __future__ import annotations

from dataclasses import dataclass

from sheet_merger.rows import SOURCE_COLUMN, Row


@dataclass(frozen=True)
class MergedTable:
    """Result of one merge: every row holds every header, in header order."""

    rows: tuple[Row, ...]
    headers: tuple[str, ...]
    # (file name, sheet name) of every sheet that contributed rows, in merge order
    sheets: tuple[tuple[str, str], ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def sheet_count(self) -> int:
        return len(self.sheets)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def source_names(self) -> list[str]:
        """Distinct provenance values in first-seen order."""
        seen: dict[str, None] = {}
        for row in self.rows:
            value = row.get(SOURCE_COLUMN)
            if value is not None:
                seen.setdefault(str(value), None)
        return list(seen)
