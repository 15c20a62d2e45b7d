import unittest

from sheet_merger import __version__
from sheet_merger.contracts import CONTRACT_VERSIONS, build_merge_summary, build_sheet_list
from sheet_merger.merge import build_table
from sheet_merger.rows import SOURCE_COLUMN


class ContractTests(unittest.TestCase):
    def test_merge_summary_reports_table_shape(self):
        table = build_table([
            {SOURCE_COLUMN: "Jan", "A": 1},
            {SOURCE_COLUMN: "Feb", "B": 2},
            {SOURCE_COLUMN: "Jan", "A": 3},
        ])
        summary = build_merge_summary(
            mode="sheets",
            table=table,
            inputs=["book.xlsx"],
            selected_sheets=["Jan", "Feb"],
            output_path="out.xlsx",
            warnings=["Sheet 'Mar' was not found in book.xlsx and was skipped."],
        )
        self.assertEqual(summary["contract"], {"name": "sheet_merger.merge_summary", "version": CONTRACT_VERSIONS["sheet_merger.merge_summary"]})
        self.assertEqual(summary["tool_version"], __version__)
        self.assertEqual(summary["headers"], [SOURCE_COLUMN, "A", "B"])
        self.assertEqual(summary["selected_sheets"], ["Jan", "Feb"])
        run = summary["run_summary"]
        self.assertEqual(run["command"], "merge")
        self.assertEqual(run["output_file"], "out.xlsx")
        self.assertEqual(run["warnings_count"], 1)
        self.assertEqual(run["metrics"]["rows"], 3)
        self.assertEqual(run["metrics"]["columns"], 3)
        self.assertEqual(run["metrics"]["sources"], ["Jan", "Feb"])
        self.assertTrue(run["generated_at"].endswith("Z"))

    def test_sheets_merged_counts_contributing_sheets(self):
        table = build_table(
            [{SOURCE_COLUMN: "Sheet1", "A": 1}, {SOURCE_COLUMN: "Sheet1", "A": 2}],
            sheets=[("a.xlsx", "Sheet1"), ("b.xlsx", "Sheet1")],
        )
        summary = build_merge_summary(mode="files", table=table, inputs=["a.xlsx", "b.xlsx"])
        metrics = summary["run_summary"]["metrics"]
        self.assertEqual(metrics["sheets_merged"], 2)
        self.assertEqual(metrics["sources"], ["Sheet1"])

    def test_file_mode_summary_has_no_sheet_selection(self):
        table = build_table([{SOURCE_COLUMN: "S", "A": 1}])
        summary = build_merge_summary(mode="files", table=table, inputs=["a.xlsx", "b.xlsx"])
        self.assertIsNone(summary["selected_sheets"])
        self.assertEqual(summary["run_summary"]["metrics"]["files"], 2)

    def test_sheet_list(self):
        payload = build_sheet_list(input_name="book.xlsx", sheet_names=["Jan", "Feb"])
        self.assertEqual(payload["contract"]["name"], "sheet_merger.sheet_list")
        self.assertEqual(payload["sheet_names"], ["Jan", "Feb"])


if __name__ == "__main__":
    unittest.main()
