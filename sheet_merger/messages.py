"""User-facing text, keyed by error kind or notice id, per locale."""

from __future__ import annotations

from sheet_merger.errors import FileDecodeError, MergeError

DEFAULT_LOCALE = "en"

CATALOGUES: dict[str, dict[str, str]] = {
    "en": {
        "file_decode": "Could not process file: {file_name}",
        "file_unreadable": "Could not read the file. Please check whether it is damaged.",
        "no_files": "Please choose a file.",
        "empty_selection": "Please select at least one sheet to merge.",
        "empty_result": "No data was found in the selected files/sheets.",
        "unknown": "An unknown error occurred.",
        "preview_caption": "Showing the first {limit} rows. Total merged rows: {total}.",
        "mode_files": "Merge multiple Excel files",
        "mode_files_help": "Choose several separate Excel files and merge them into one.",
        "mode_sheets": "Merge several sheets of one file",
        "mode_sheets_help": "Choose one Excel file and merge the sheets you pick from it.",
        "upload_multiple": "Excel files (.xlsx, .xls) - several files allowed",
        "upload_single": "Excel file (.xlsx, .xls) - one file only",
        "select_all": "Select all",
        "select_none": "Select none",
        "merge": "Merge",
        "download": "Download merged file",
    },
    "vi": {
        "file_decode": "Không thể xử lý file: {file_name}",
        "file_unreadable": "Không thể đọc được file. Vui lòng kiểm tra lại file có bị lỗi không.",
        "no_files": "Vui lòng chọn file.",
        "empty_selection": "Vui lòng chọn ít nhất một sheet để gộp.",
        "empty_result": "Không tìm thấy dữ liệu trong các file/sheet đã chọn.",
        "unknown": "Đã xảy ra lỗi không xác định.",
        "preview_caption": "Hiển thị {limit} dòng đầu tiên. Tổng số dòng đã gộp: {total}.",
        "mode_files": "Gộp nhiều file Excel",
        "mode_files_help": "Chọn và gộp nhiều file excel riêng biệt thành một file duy nhất.",
        "mode_sheets": "Gộp nhiều sheet trong 1 file",
        "mode_sheets_help": "Chọn một file excel và gộp các sheet được chỉ định từ file đó.",
        "upload_multiple": "File Excel (.xlsx, .xls) - Có thể chọn nhiều file",
        "upload_single": "File Excel (.xlsx, .xls) - Chỉ chọn một file",
        "select_all": "Chọn tất cả",
        "select_none": "Bỏ chọn tất cả",
        "merge": "Gộp File",
        "download": "Tải File đã gộp",
    },
}

SUPPORTED_LOCALES = tuple(CATALOGUES)


def text(key: str, locale: str = DEFAULT_LOCALE, **params: object) -> str:
    catalogue = CATALOGUES.get(locale, CATALOGUES[DEFAULT_LOCALE])
    template = catalogue.get(key) or CATALOGUES[DEFAULT_LOCALE][key]
    return template.format(**params)


def describe_error(exc: BaseException, locale: str = DEFAULT_LOCALE) -> str:
    """Localised message for ``exc``.

    Unknown failures keep their own message when they have one, matching how
    the merge surface reports whatever text is available.
    """
    if isinstance(exc, FileDecodeError):
        return text(exc.kind, locale, file_name=exc.file_name)
    if isinstance(exc, MergeError) and exc.kind != "unknown":
        return text(exc.kind, locale)
    detail = str(exc).strip()
    return detail or text("unknown", locale)
