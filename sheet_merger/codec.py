"""
codec.py: workbook bytes <-> named sheets of rows

Reading goes through pandas (which picks openpyxl, xlrd or odfpy from the
file content); writing goes through openpyxl directly so the header row can
be styled and large exports can use the write-only path.

Public API:
    source = SourceFile.from_path("book.xlsx")
    sheets = read_workbook(source)        # [Sheet(name, rows), ...]
    names  = read_sheet_names(source)     # ["Jan", "Feb", ...]
    data   = write_workbook(rows, headers, "MergedData")
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import openpyxl
import pandas as pd
from openpyxl.cell import WriteOnlyCell
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from sheet_merger.errors import FileDecodeError, FileUnreadableError
from sheet_merger.rows import Row, header_name, normalize_cell

# ── Format groups ──────────────────────────────────────────────────────────────
MODERN_EXCEL_FORMATS = {".xlsx", ".xlsm"}
LEGACY_EXCEL_FORMATS = {".xls"}
ODS_FORMATS          = {".ods"}
ALL_FORMATS          = MODERN_EXCEL_FORMATS | LEGACY_EXCEL_FORMATS | ODS_FORMATS

EXPORT_EXTENSION = ".xlsx"
WRITE_ONLY_THRESHOLD = 5_000
HEADER_COLOR = "1565C0"


@dataclass(frozen=True)
class SourceFile:
    """One uploaded (or fetched) spreadsheet file held in memory."""

    name: str
    data: bytes = field(repr=False)

    @classmethod
    def from_path(cls, path: "str | Path") -> "SourceFile":
        path = Path(path)
        return cls(name=path.name, data=path.read_bytes())

    @property
    def suffix(self) -> str:
        return Path(self.name).suffix.lower()

    @property
    def size_kb(self) -> int:
        return round(len(self.data) / 1024)


@dataclass(frozen=True)
class Sheet:
    name: str
    rows: list[Row]


def _require_engine(source: SourceFile) -> None:
    # .xls and .ods need optional engines; give a clear error if missing.
    if source.suffix in LEGACY_EXCEL_FORMATS:
        try:
            import xlrd  # noqa: F401
        except ImportError:
            raise ImportError(f"Could not process file {source.name}: .xls files require xlrd, run pip install xlrd")
    if source.suffix in ODS_FORMATS:
        try:
            import odf  # noqa: F401
        except ImportError:
            raise ImportError(f"Could not process file {source.name}: .ods files require odfpy, run pip install odfpy")


def _unique_headers(columns) -> list[str]:
    """Stringified header cells, with repeats suffixed ".1", ".2" like pandas does.

    Distinct cells can stringify to the same name (numeric 1 and text "1").
    """
    seen: set[str] = set()
    names: list[str] = []
    for column in columns:
        base = header_name(column)
        name, n = base, 1
        while name in seen:
            name = f"{base}.{n}"
            n += 1
        seen.add(name)
        names.append(name)
    return names


def _frame_rows(frame: pd.DataFrame) -> list[Row]:
    """Rows of one sheet, blank rows dropped, every column present per row."""
    frame = frame.dropna(how="all")
    columns = _unique_headers(frame.columns)
    return [
        {column: normalize_cell(value) for column, value in zip(columns, values)}
        for values in frame.itertuples(index=False, name=None)
    ]


def read_workbook(source: SourceFile) -> list[Sheet]:
    """Decode every sheet of ``source`` in workbook order.

    The first row of each sheet is the header row. Cells missing inside the
    sheet's rectangle come back as None rather than absent keys.

    Raises:
        FileDecodeError  if the bytes are not a readable workbook.
        ImportError      if the optional engine for .xls/.ods is missing.
    """
    _require_engine(source)
    try:
        frames = pd.read_excel(
            io.BytesIO(source.data),
            sheet_name=None,
            dtype=object,
            keep_default_na=False,
            na_values=[""],
        )
    except ImportError:
        raise
    except Exception as exc:
        raise FileDecodeError(source.name, str(exc)) from exc
    return [Sheet(name=str(name), rows=_frame_rows(frame)) for name, frame in frames.items()]


def read_sheet_names(source: SourceFile) -> list[str]:
    """Sheet names in workbook order, without loading cell data."""
    _require_engine(source)
    try:
        with pd.ExcelFile(io.BytesIO(source.data)) as xf:
            return [str(name) for name in xf.sheet_names]
    except ImportError:
        raise
    except Exception as exc:
        raise FileUnreadableError(source.name, str(exc)) from exc


# ══════════════════════════════════════════════════════════════════════════════
# WRITING
# ══════════════════════════════════════════════════════════════════════════════

def _infer_col_widths(rows: list[list], min_width: int = 10, max_width: int = 60, sample: int = 300) -> list[int]:
    if not rows:
        return []
    widths = [max(min_width, min(max_width, len(str(v)) + 2)) for v in rows[0]]
    for row in rows[1 : sample + 1]:
        for i, val in enumerate(row):
            if val is None:
                continue
            widths[i] = max(widths[i], min(max_width, len(str(val)) + 2))
    return widths


def _is_formula_text(value) -> bool:
    return isinstance(value, str) and value.startswith("=")


def _write_standard(ws, headers: list[str], matrix: list[list]) -> None:
    ws.append(headers)
    for values in matrix:
        ws.append(values)
        for col, value in enumerate(values, start=1):
            if _is_formula_text(value):
                ws.cell(ws.max_row, col).data_type = "s"

    fill = PatternFill("solid", fgColor=HEADER_COLOR)
    font = Font(bold=True, color="FFFFFF")
    for cell in ws[1]:
        cell.font = font
        cell.fill = fill
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=False)
    ws.freeze_panes = "A2"
    for i, width in enumerate(_infer_col_widths([headers] + matrix), start=1):
        ws.column_dimensions[get_column_letter(i)].width = width


def _write_fast(ws, headers: list[str], matrix: list[list]) -> None:
    """write_only=True path for large exports."""
    for i in range(1, len(headers) + 1):
        ws.column_dimensions[get_column_letter(i)].width = 15
    header_cells = []
    for header in headers:
        cell = WriteOnlyCell(ws, value=header)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill("solid", fgColor=HEADER_COLOR)
        header_cells.append(cell)
    ws.append(header_cells)
    for values in matrix:
        if any(_is_formula_text(value) for value in values):
            cells = []
            for value in values:
                cell = WriteOnlyCell(ws, value=value)
                if _is_formula_text(value):
                    cell.data_type = "s"
                cells.append(cell)
            ws.append(cells)
        else:
            ws.append(values)


def write_workbook(rows: Sequence[Row], headers: Sequence[str], sheet_name: str) -> bytes:
    """Serialise ``rows`` as a single-sheet .xlsx workbook.

    Column order follows ``headers``; keys a row lacks are written as empty
    cells.
    """
    headers = list(headers)
    matrix = [[row.get(header) for header in headers] for row in rows]

    if len(matrix) > WRITE_ONLY_THRESHOLD:
        wb = openpyxl.Workbook(write_only=True)
        ws = wb.create_sheet(sheet_name)
        _write_fast(ws, headers, matrix)
    else:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = sheet_name
        _write_standard(ws, headers, matrix)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
