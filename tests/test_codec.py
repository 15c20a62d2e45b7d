import io
import unittest
from unittest import mock

from openpyxl import load_workbook

from sheet_merger import codec
from sheet_merger.codec import SourceFile, read_sheet_names, read_workbook, write_workbook
from sheet_merger.errors import FileDecodeError, FileUnreadableError
from workbook_fixtures import workbook_source


class ReadWorkbookTests(unittest.TestCase):
    def test_sheets_come_back_in_workbook_order(self):
        source = workbook_source("book.xlsx", {
            "Mar": [["a"], [1]],
            "Jan": [["a"], [2]],
            "Feb": [["a"], [3]],
        })
        self.assertEqual([sheet.name for sheet in read_workbook(source)], ["Mar", "Jan", "Feb"])
        self.assertEqual(read_sheet_names(source), ["Mar", "Jan", "Feb"])

    def test_missing_cells_are_explicit_none(self):
        source = workbook_source("book.xlsx", {"Data": [["a", "b", "c"], [1, None, "x"], [None, 2, None]]})
        rows = read_workbook(source)[0].rows
        self.assertEqual(rows, [{"a": 1, "b": None, "c": "x"}, {"a": None, "b": 2, "c": None}])

    def test_blank_rows_are_dropped(self):
        source = workbook_source("book.xlsx", {"Data": [["a", "b"], [1, 2], [None, None], [3, 4]]})
        rows = read_workbook(source)[0].rows
        self.assertEqual([row["a"] for row in rows], [1, 3])

    def test_header_only_and_empty_sheets_yield_no_rows(self):
        source = workbook_source("book.xlsx", {"HeaderOnly": [["a", "b"]], "Empty": [], "Data": [["a"], [1]]})
        sheets = {sheet.name: sheet.rows for sheet in read_workbook(source)}
        self.assertEqual(sheets["HeaderOnly"], [])
        self.assertEqual(sheets["Empty"], [])
        self.assertEqual(sheets["Data"], [{"a": 1}])

    def test_scalar_types_are_preserved(self):
        source = workbook_source("book.xlsx", {"Data": [["text", "num", "flag", "na"], ["hello", 12.5, True, "N/A"]]})
        row = read_workbook(source)[0].rows[0]
        self.assertEqual(row["text"], "hello")
        self.assertEqual(row["num"], 12.5)
        self.assertIs(row["flag"], True)
        self.assertEqual(row["na"], "N/A")

    def test_corrupt_bytes_raise_file_decode_error(self):
        source = SourceFile(name="broken.xlsx", data=b"not-a-real-workbook")
        with self.assertRaises(FileDecodeError) as ctx:
            read_workbook(source)
        self.assertEqual(ctx.exception.file_name, "broken.xlsx")

    def test_corrupt_bytes_raise_unreadable_when_listing_sheets(self):
        source = SourceFile(name="broken.xlsx", data=b"not-a-real-workbook")
        with self.assertRaises(FileUnreadableError) as ctx:
            read_sheet_names(source)
        self.assertEqual(ctx.exception.kind, "file_unreadable")

    def test_missing_xlrd_raises_clear_importerror(self):
        source = SourceFile(name="legacy.xls", data=b"not-a-real-xls")
        original_import = __import__

        def fake_import(name, globals=None, locals=None, fromlist=(), level=0):
            if name == "xlrd":
                raise ImportError("simulated missing xlrd")
            return original_import(name, globals, locals, fromlist, level)

        with mock.patch("builtins.__import__", side_effect=fake_import):
            with self.assertRaisesRegex(ImportError, r"\.xls files require xlrd") as ctx:
                read_workbook(source)
        self.assertIn("legacy.xls", str(ctx.exception))

    def test_headers_that_stringify_alike_keep_both_columns(self):
        source = workbook_source("book.xlsx", {"S": [[1, "1", "1.1"], ["first", "second", "third"]]})
        rows = read_workbook(source)[0].rows
        self.assertEqual(rows, [{"1": "first", "1.1": "second", "1.1.1": "third"}])


class WriteWorkbookTests(unittest.TestCase):
    def test_writes_single_sheet_with_header_order(self):
        data = write_workbook([{"b": 1, "a": "x"}, {"a": "y"}], ["a", "b"], "MergedData")
        wb = load_workbook(io.BytesIO(data))
        self.assertEqual(wb.sheetnames, ["MergedData"])
        values = list(wb["MergedData"].iter_rows(values_only=True))
        self.assertEqual(values, [("a", "b"), ("x", 1), ("y", None)])
        self.assertEqual(wb["MergedData"].freeze_panes, "A2")

    def test_formula_like_text_stays_text(self):
        data = write_workbook([{"a": "=SUM(A1:A2)"}], ["a"], "MergedData")
        rows = read_workbook(SourceFile(name="out.xlsx", data=data))[0].rows
        self.assertEqual(rows, [{"a": "=SUM(A1:A2)"}])

    def test_large_exports_use_write_only_path(self):
        rows = [{"n": i} for i in range(12)]
        with mock.patch.object(codec, "WRITE_ONLY_THRESHOLD", 10):
            data = write_workbook(rows, ["n"], "MergedData")
        wb = load_workbook(io.BytesIO(data))
        self.assertEqual(wb.sheetnames, ["MergedData"])
        self.assertEqual(wb["MergedData"].max_row, 13)


if __name__ == "__main__":
    unittest.main()
