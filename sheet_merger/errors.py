"""Error kinds raised by the merge engine, codec and session.

Every error carries a stable ``kind`` so the presentation layer can pick a
localised message from ``sheet_merger.messages`` instead of showing the raw
exception text.
"""

from __future__ import annotations


class MergeError(Exception):
    kind = "unknown"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)


class FileDecodeError(MergeError):
    kind = "file_decode"

    def __init__(self, file_name: str, reason: str = "") -> None:
        self.file_name = file_name
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not process file {file_name}{detail}")


class FileUnreadableError(FileDecodeError):
    kind = "file_unreadable"


class NoFilesError(MergeError):
    kind = "no_files"

    def __init__(self) -> None:
        super().__init__("No input file selected.")


class EmptySelectionError(MergeError):
    kind = "empty_selection"

    def __init__(self) -> None:
        super().__init__("Select at least one sheet to merge.")


class EmptyResultError(MergeError):
    kind = "empty_result"

    def __init__(self) -> None:
        super().__init__("No data rows were found in the selected files/sheets.")


class UnknownError(MergeError):
    kind = "unknown"
