"""
session.py: the one mutable piece of the merger

A MergeSession owns what the user has chosen so far (mode, files, sheet
selection) and the last merged table. The web UI keeps one instance in
``st.session_state``; the CLI builds one per run. Everything it delegates to
(merge, preview, export) is stateless.

Merging is clear-then-attempt: the previous table and error are dropped
before the new merge starts, so a failed merge leaves no table behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from sheet_merger.codec import SourceFile
from sheet_merger.config import MergerSettings
from sheet_merger.errors import EmptyResultError, FileDecodeError, MergeError, UnknownError
from sheet_merger.export import ExportedFile, export_table
from sheet_merger.merge import list_sheet_names, run_merge
from sheet_merger.preview import project
from sheet_merger.table import MergedTable

MODE_FILES = "files"
MODE_SHEETS = "sheets"
MODES = (MODE_FILES, MODE_SHEETS)


@dataclass
class SheetChoice:
    name: str
    selected: bool = True


@dataclass
class MergeSession:
    settings: MergerSettings = field(default_factory=MergerSettings)
    mode: str = MODE_FILES
    files: list[SourceFile] = field(default_factory=list)
    sheets: list[SheetChoice] = field(default_factory=list)
    table: Optional[MergedTable] = None
    error: Optional[BaseException] = None
    notice: Optional[MergeError] = None
    warnings: list[str] = field(default_factory=list)

    # ── state transitions ────────────────────────────────────────────────────

    def reset(self) -> None:
        self.files = []
        self.sheets = []
        self.table = None
        self.error = None
        self.notice = None
        self.warnings = []

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown merge mode: {mode!r}")
        self.mode = mode
        self.reset()

    def select_files(self, files: Sequence[SourceFile]) -> None:
        """Take a new upload; sheet mode keeps only the first file.

        An empty selection clears the files, the sheet list and any result.
        """
        self.table = None
        self.error = None
        self.notice = None
        self.warnings = []
        if not files:
            self.files = []
            self.sheets = []
        elif self.mode == MODE_SHEETS:
            self.files = [files[0]]
            self.load_sheet_names()
        else:
            self.files = list(files)

    def load_sheet_names(self) -> None:
        self.error = None
        try:
            names = list_sheet_names(self.files[0])
        except (FileDecodeError, ImportError) as exc:
            self.error = exc if isinstance(exc, FileDecodeError) else UnknownError(str(exc))
            self.files = []
            self.sheets = []
            return
        self.sheets = [SheetChoice(name) for name in names]

    def set_sheet_selected(self, name: str, selected: bool) -> None:
        for choice in self.sheets:
            if choice.name == name:
                choice.selected = selected

    def select_all_sheets(self, selected: bool = True) -> None:
        for choice in self.sheets:
            choice.selected = selected

    # ── queries ──────────────────────────────────────────────────────────────

    @property
    def selected_sheet_names(self) -> list[str]:
        return [choice.name for choice in self.sheets if choice.selected]

    @property
    def can_merge(self) -> bool:
        if not self.files:
            return False
        if self.mode == MODE_SHEETS and self.sheets and not self.selected_sheet_names:
            return False
        return True

    @property
    def can_export(self) -> bool:
        return self.table is not None and len(self.table) > 0

    # ── actions ──────────────────────────────────────────────────────────────

    def merge(self) -> Optional[MergedTable]:
        """Run the merge for the current mode and selection.

        Failures are stored on ``error`` (``notice`` for an empty result) and
        never raised; the session stays usable either way.
        """
        self.table = None
        self.error = None
        self.notice = None
        self.warnings = []
        try:
            self.table = run_merge(
                self.mode,
                self.files,
                self.selected_sheet_names if self.mode == MODE_SHEETS else None,
                warnings=self.warnings,
            )
        except EmptyResultError as exc:
            self.notice = exc
        except MergeError as exc:
            self.error = exc
        except Exception as exc:
            self.error = UnknownError(str(exc))
        return self.table

    def preview(self) -> list[list[str]]:
        if self.table is None:
            return []
        return project(self.table.rows, self.table.headers, self.settings.preview_limit)

    def export(self, file_base_name: Optional[str] = None) -> ExportedFile:
        if not self.can_export:
            raise EmptyResultError()
        return export_table(self.table.rows, file_base_name or self.settings.export_basename)
