from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from sheet_merger.codec import EXPORT_EXTENSION, write_workbook
from sheet_merger.errors import EmptyResultError
from sheet_merger.headers import compute_headers
from sheet_merger.rows import Row

EXPORT_SHEET_NAME = "MergedData"
DEFAULT_EXPORT_BASENAME = "merged-data"
EXPORT_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ExportedFile:
    file_name: str
    data: bytes = field(repr=False)
    mime: str = EXPORT_MIME


def export_table(rows: Sequence[Row], file_base_name: str = DEFAULT_EXPORT_BASENAME) -> ExportedFile:
    """Serialise the whole merged table as one ``MergedData`` sheet.

    Always receives the full table, never a preview slice.
    """
    if not rows:
        raise EmptyResultError()
    headers = compute_headers(rows)
    data = write_workbook(rows, headers, EXPORT_SHEET_NAME)
    return ExportedFile(file_name=f"{file_base_name}{EXPORT_EXTENSION}", data=data)


def write_export(rows: Sequence[Row], output_path: Path) -> Path:
    """Write the export to ``output_path`` atomically via a temp file."""
    exported = export_table(rows, output_path.stem)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{output_path.stem}.", suffix=output_path.suffix, dir=str(output_path.parent))
    os.close(fd)
    temp_path = Path(tmp_name)
    try:
        temp_path.write_bytes(exported.data)
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return output_path
