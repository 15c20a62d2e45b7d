import unittest

from sheet_merger.headers import compute_headers
from sheet_merger.rows import SOURCE_COLUMN, fill_missing, normalize_cell, tag_rows


class ComputeHeadersTests(unittest.TestCase):
    def test_empty_input_returns_empty_list(self):
        self.assertEqual(compute_headers([]), [])

    def test_first_seen_order_is_kept(self):
        rows = [{"b": 1, "a": 2}, {"c": 3, "a": 4}, {"d": None}]
        self.assertEqual(compute_headers(rows), ["b", "a", "c", "d"])

    def test_source_column_is_moved_to_front(self):
        rows = [{"x": 1, SOURCE_COLUMN: "Jan", "y": 2}, {"z": 3}]
        self.assertEqual(compute_headers(rows), [SOURCE_COLUMN, "x", "y", "z"])

    def test_key_presence_counts_even_when_value_is_none(self):
        rows = [{"a": None}, {"b": 1}]
        self.assertEqual(compute_headers(rows), ["a", "b"])

    def test_no_duplicates_and_every_key_once(self):
        rows = [
            {SOURCE_COLUMN: "s1", "a": 1, "b": 2},
            {SOURCE_COLUMN: "s2", "b": 3, "c": 4},
            {SOURCE_COLUMN: "s3", "a": 5, "c": 6, "d": 7},
        ]
        headers = compute_headers(rows)
        self.assertEqual(len(headers), len(set(headers)))
        self.assertEqual(set(headers), {key for row in rows for key in row})
        self.assertEqual(headers[0], SOURCE_COLUMN)

    def test_does_not_modify_rows(self):
        rows = [{"b": 1, SOURCE_COLUMN: "x"}]
        compute_headers(rows)
        self.assertEqual(list(rows[0]), ["b", SOURCE_COLUMN])


class RowModelTests(unittest.TestCase):
    def test_tag_rows_puts_provenance_first(self):
        tagged = tag_rows("Jan", [{"A": 1}])
        self.assertEqual(tagged, [{SOURCE_COLUMN: "Jan", "A": 1}])
        self.assertEqual(list(tagged[0])[0], SOURCE_COLUMN)

    def test_source_rows_own_provenance_value_wins(self):
        tagged = tag_rows("Jan", [{SOURCE_COLUMN: "legacy", "A": 1}])
        self.assertEqual(tagged[0][SOURCE_COLUMN], "legacy")

    def test_tag_rows_builds_new_rows(self):
        original = {"A": 1}
        tagged = tag_rows("Jan", [original])
        self.assertIsNot(tagged[0], original)
        self.assertEqual(original, {"A": 1})

    def test_fill_missing_uses_explicit_none(self):
        rows = fill_missing([{"A": 1}, {"B": 2}], ["A", "B"])
        self.assertEqual(rows, [{"A": 1, "B": None}, {"A": None, "B": 2}])

    def test_normalize_cell_handles_nan_and_dates(self):
        from datetime import datetime

        self.assertIsNone(normalize_cell(float("nan")))
        self.assertIsNone(normalize_cell(None))
        self.assertEqual(normalize_cell(datetime(2024, 1, 15)), "2024-01-15")
        self.assertEqual(normalize_cell(datetime(2024, 1, 15, 9, 30)), "2024-01-15 09:30:00")
        self.assertIs(normalize_cell(True), True)
        self.assertEqual(normalize_cell("N/A"), "N/A")

    def test_normalize_cell_unwraps_numpy_scalars(self):
        import numpy as np

        value = normalize_cell(np.int64(7))
        self.assertEqual(value, 7)
        self.assertIsInstance(value, int)
        self.assertIs(normalize_cell(np.bool_(False)), False)


if __name__ == "__main__":
    unittest.main()
