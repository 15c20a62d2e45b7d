"""
merge.py: schema-unifying merge of spreadsheet sources

Two strategies, both producing a provenance-tagged row stream:

    merge_files(files)                       every sheet of every file
    merge_sheets(file, selected_sheet_names) chosen sheets of one file

Files are decoded strictly one after another. A file that cannot be decoded
aborts the whole merge with FileDecodeError naming it; rows gathered from
earlier files are dropped and later files are never read.

Non-fatal observations (empty sheets, selected sheets that do not exist,
sheets that already carry the provenance column) are appended to the
optional ``warnings`` list instead of being printed.
"""

from __future__ import annotations

from typing import Optional, Sequence

from sheet_merger.codec import Sheet, SourceFile, read_sheet_names, read_workbook
from sheet_merger.errors import EmptyResultError, EmptySelectionError, NoFilesError
from sheet_merger.headers import compute_headers
from sheet_merger.rows import SOURCE_COLUMN, Row, carries_source_column, fill_missing, tag_rows
from sheet_merger.table import MergedTable


def _append_sheet(
    merged: list[Row],
    sheet: Sheet,
    file_name: str,
    warnings: Optional[list[str]],
    appended: Optional[list[tuple[str, str]]],
) -> None:
    if not sheet.rows:
        if warnings is not None:
            warnings.append(f"Sheet '{sheet.name}' in {file_name} has no data rows; skipped.")
        return
    if warnings is not None and carries_source_column(sheet.rows):
        warnings.append(
            f"Sheet '{sheet.name}' in {file_name} already has a '{SOURCE_COLUMN}' column; "
            "its own values were kept."
        )
    merged.extend(tag_rows(sheet.name, sheet.rows))
    if appended is not None:
        appended.append((file_name, sheet.name))


def merge_files(
    files: Sequence[SourceFile],
    warnings: Optional[list[str]] = None,
    appended: Optional[list[tuple[str, str]]] = None,
) -> list[Row]:
    """Merge every sheet of every file, in (file, sheet, row) order."""
    merged: list[Row] = []
    for source in files:
        for sheet in read_workbook(source):
            _append_sheet(merged, sheet, source.name, warnings, appended)
    return merged


def merge_sheets(
    source: SourceFile,
    selected_sheet_names: Sequence[str],
    warnings: Optional[list[str]] = None,
    appended: Optional[list[tuple[str, str]]] = None,
) -> list[Row]:
    """Merge the named sheets of one file, in the order they were selected.

    Names that are not in the workbook are skipped without error.
    """
    sheets = {sheet.name: sheet for sheet in read_workbook(source)}
    merged: list[Row] = []
    for name in selected_sheet_names:
        sheet = sheets.get(name)
        if sheet is None:
            if warnings is not None:
                warnings.append(f"Sheet '{name}' not found in {source.name}; skipped.")
            continue
        _append_sheet(merged, sheet, source.name, warnings, appended)
    return merged


def list_sheet_names(source: SourceFile) -> list[str]:
    return read_sheet_names(source)


def build_table(rows: Sequence[Row], sheets: Sequence[tuple[str, str]] = ()) -> MergedTable:
    """Unify ``rows`` into a MergedTable; raises EmptyResultError on no rows.

    ``sheets`` lists the (file name, sheet name) pairs the rows came from.
    """
    if not rows:
        raise EmptyResultError()
    headers = compute_headers(rows)
    return MergedTable(
        rows=tuple(fill_missing(rows, headers)),
        headers=tuple(headers),
        sheets=tuple(sheets),
    )


def run_merge(
    mode: str,
    files: Sequence[SourceFile],
    selected_sheet_names: Optional[Sequence[str]] = None,
    warnings: Optional[list[str]] = None,
) -> MergedTable:
    """Validate preconditions, merge, and unify in one call.

    ``mode`` is "files" or "sheets". In sheet mode only ``files[0]`` is used
    and an empty selection fails before anything is decoded.
    """
    if not files:
        raise NoFilesError()
    appended: list[tuple[str, str]] = []
    if mode == "files":
        rows = merge_files(files, warnings, appended)
    elif mode == "sheets":
        if not selected_sheet_names:
            raise EmptySelectionError()
        rows = merge_sheets(files[0], selected_sheet_names, warnings, appended)
    else:
        raise ValueError(f"Unknown merge mode: {mode!r}")
    return build_table(rows, appended)
