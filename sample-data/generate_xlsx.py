#!/usr/bin/env python3
"""
Generates sample workbooks for trying out sheet-merger.

Run from the repo root:
    python sample-data/generate_xlsx.py

Files written:
  monthly_sales.xlsx
    - "Jan", "Feb", "Mar" with overlapping but different columns
    - "Notes" has a header row and no data rows (contributes nothing)
  regional_sales.xlsx
    - "North" and "South" with their own column orders
    - "South" has a blank row between data rows
"""

from __future__ import annotations

from pathlib import Path

import openpyxl

OUTPUT_DIR = Path(__file__).parent


def build_monthly_workbook(path: Path) -> Path:
    wb = openpyxl.Workbook()

    jan = wb.active
    jan.title = "Jan"
    jan.append(["order_id", "customer", "amount"])
    jan.append([1001, "Smith", 250.0])
    jan.append([1002, "Jones", 180.5])

    feb = wb.create_sheet("Feb")
    feb.append(["order_id", "amount", "discount"])
    feb.append([1003, 320.0, 0.1])

    mar = wb.create_sheet("Mar")
    mar.append(["customer", "order_id", "amount", "paid"])
    mar.append(["Brown", 1004, 99.0, True])
    mar.append(["Taylor", 1005, None, False])

    notes = wb.create_sheet("Notes")
    notes.append(["note"])

    wb.save(path)
    return path


def build_regional_workbook(path: Path) -> Path:
    wb = openpyxl.Workbook()

    north = wb.active
    north.title = "North"
    north.append(["region_code", "order_id", "amount"])
    north.append(["N1", 2001, 75.0])

    south = wb.create_sheet("South")
    south.append(["order_id", "amount", "rep"])
    south.append([3001, 40.0, "Moore"])
    south.append([None, None, None])
    south.append([3002, 60.0, "Harris"])

    wb.save(path)
    return path


if __name__ == "__main__":
    for builder, name in ((build_monthly_workbook, "monthly_sales.xlsx"), (build_regional_workbook, "regional_sales.xlsx")):
        print(f"Created: {builder(OUTPUT_DIR / name)}")
