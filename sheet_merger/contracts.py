"""Shared versioned contracts for machine-readable sheet-merger output."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Sequence

from sheet_merger import __version__ as TOOL_VERSION
from sheet_merger.table import MergedTable

CONTRACT_VERSIONS = {
    "sheet_merger.merge_summary": "1.0.0",
    "sheet_merger.sheet_list": "1.0.0",
}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_contract(name: str) -> dict[str, str]:
    version = CONTRACT_VERSIONS[name]
    return {"name": name, "version": version}


def build_run_summary(
    *,
    command: str,
    inputs: Sequence[str],
    status: str = "ok",
    output_path: str | None = None,
    metrics: dict[str, Any] | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "tool": "sheet-merger",
        "command": command,
        "status": status,
        "generated_at": utc_now_iso(),
        "input_files": list(inputs),
        "output_file": output_path,
        "warnings_count": len(warnings or []),
        "warnings": list(warnings or []),
        "metrics": metrics or {},
    }


def build_merge_summary(
    *,
    mode: str,
    table: MergedTable,
    inputs: Sequence[str],
    selected_sheets: Sequence[str] | None = None,
    output_path: str | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    contract = build_contract("sheet_merger.merge_summary")
    sources = table.source_names()
    return {
        "contract": contract,
        "schema_version": contract["version"],
        "tool_version": TOOL_VERSION,
        "mode": mode,
        "selected_sheets": list(selected_sheets) if selected_sheets is not None else None,
        "headers": list(table.headers),
        "run_summary": build_run_summary(
            command="merge",
            inputs=inputs,
            output_path=output_path,
            warnings=warnings,
            metrics={
                "rows": len(table),
                "columns": table.column_count,
                "files": len(inputs),
                "sources": sources,
                "sheets_merged": table.sheet_count,
            },
        ),
    }


def build_sheet_list(*, input_name: str, sheet_names: Sequence[str]) -> dict[str, Any]:
    contract = build_contract("sheet_merger.sheet_list")
    return {
        "contract": contract,
        "schema_version": contract["version"],
        "tool_version": TOOL_VERSION,
        "input_file": input_name,
        "sheet_names": list(sheet_names),
    }
