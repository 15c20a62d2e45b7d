from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from sheet_merger import __version__ as TOOL_VERSION
from sheet_merger.codec import ALL_FORMATS, SourceFile
from sheet_merger.config import DEFAULT_CONFIG_NAME, ConfigError, MergerSettings, load_settings, starter_config
from sheet_merger.contracts import build_merge_summary, build_sheet_list
from sheet_merger.errors import (
    EmptyResultError,
    EmptySelectionError,
    FileDecodeError,
    MergeError,
    NoFilesError,
)
from sheet_merger.export import EXPORT_SHEET_NAME, write_export
from sheet_merger.merge import list_sheet_names, run_merge
from sheet_merger.messages import describe_error, text
from sheet_merger.preview import preview_frame
from sheet_merger.remote import fetch_remote_source, is_url
from sheet_merger.session import MODE_FILES, MODE_SHEETS
from sheet_merger.table import MergedTable

EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_DECODE_FAILED = 2
EXIT_EMPTY_RESULT = 3
EXIT_UNKNOWN = 4


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class SheetMergerArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def emit_verbose(message: str, args: argparse.Namespace) -> None:
    if getattr(args, "verbose", False) and not getattr(args, "quiet", False):
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)


def write_text(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")


def classify_exception(exc: BaseException) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, (FileDecodeError, ImportError)):
        return EXIT_DECODE_FAILED
    if isinstance(exc, (EmptyResultError, EmptySelectionError)):
        return EXIT_EMPTY_RESULT
    if isinstance(exc, (NoFilesError, ConfigError, FileNotFoundError)):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, ValueError):
        return EXIT_DECODE_FAILED
    return EXIT_UNKNOWN


def error_message(exc: BaseException, settings: MergerSettings | None) -> str:
    if isinstance(exc, MergeError):
        return describe_error(exc, settings.locale if settings else "en")
    return str(exc)


def resolve_sources(inputs: list[str], settings: MergerSettings, args: argparse.Namespace) -> list[SourceFile]:
    sources: list[SourceFile] = []
    for raw in inputs:
        if is_url(raw):
            emit_verbose(f"Fetching {raw}", args)
            sources.append(fetch_remote_source(raw, max_bytes=settings.max_remote_file_bytes))
            continue
        path = Path(raw)
        if not path.exists():
            raise CliError(f"File not found: {path}", EXIT_COMMAND_ERROR)
        suffix = path.suffix.lower()
        if suffix not in ALL_FORMATS:
            raise CliError(
                f"Unsupported file type '{suffix or '[missing extension]'}'. "
                f"Supported: {', '.join(sorted(ALL_FORMATS))}",
                EXIT_COMMAND_ERROR,
            )
        sources.append(SourceFile.from_path(path))
    return sources


def choose_mode(args: argparse.Namespace) -> str:
    mode = args.mode
    if mode == "auto":
        mode = MODE_SHEETS if args.sheets else MODE_FILES
    if mode == MODE_FILES and args.sheets:
        raise CliError("--sheet only applies to --mode sheets.", EXIT_COMMAND_ERROR)
    if mode == MODE_SHEETS and len(args.inputs) != 1:
        raise CliError("Sheet mode takes exactly one input file.", EXIT_COMMAND_ERROR)
    return mode


def merge_inputs(
    args: argparse.Namespace,
    settings: MergerSettings,
    warnings: list[str],
) -> tuple[str, list[SourceFile], list[str] | None, MergedTable]:
    mode = choose_mode(args)
    sources = resolve_sources(args.inputs, settings, args)
    selected = None
    if mode == MODE_SHEETS:
        # No --sheet means every sheet, the same default as the web checklist.
        selected = list(args.sheets) if args.sheets else list_sheet_names(sources[0])
        emit_verbose(f"Sheets selected: {', '.join(selected) or '[none]'}", args)
    emit_verbose(f"Merging {len(sources)} file(s) in {mode} mode", args)
    table = run_merge(mode, sources, selected, warnings=warnings)
    return mode, sources, selected, table


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help=f"JSON config path (default: ./{DEFAULT_CONFIG_NAME} when present)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")
    parser.add_argument("-v", "--verbose", action="store_true", help="More human logs")


def add_merge_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("inputs", nargs="+", help="Input workbook paths or public URLs")
    parser.add_argument("--mode", choices=["auto", MODE_FILES, MODE_SHEETS], default="auto", help="Merge every sheet of every file, or chosen sheets of one file")
    parser.add_argument("--sheet", dest="sheets", action="append", default=[], help="Sheet to merge in sheet mode; repeat to merge several, in the given order")


def build_parser() -> argparse.ArgumentParser:
    parser = SheetMergerArgumentParser(prog="sheet-merger", description="Merge sheets and workbooks with different columns into one table.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sheets = subparsers.add_parser("sheets", help="List the sheet names of a workbook.")
    sheets.add_argument("input", help="Input workbook path or public URL")
    sheets.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    add_common_arguments(sheets)

    merge = subparsers.add_parser("merge", help="Merge workbooks or sheets and write one .xlsx file.")
    add_merge_arguments(merge)
    merge.add_argument("-o", "--output", help="Output .xlsx path")
    merge.add_argument("--name", help="Output base name when --output is not given")
    merge.add_argument("--force", action="store_true", help="Overwrite an existing output file")
    merge.add_argument("--json", action="store_true", help="Write the merge summary JSON to stdout")
    merge.add_argument("--json-summary", dest="json_summary", help="Write the merge summary JSON to this path")
    add_common_arguments(merge)

    preview = subparsers.add_parser("preview", help="Print the first rows of the merged table.")
    add_merge_arguments(preview)
    preview.add_argument("--limit", type=int, help="Rows to show (default from config, 100)")
    preview.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    add_common_arguments(preview)

    config = subparsers.add_parser("config", help="Generate configuration.")
    config_subparsers = config.add_subparsers(dest="config_command", required=True)
    config_init = config_subparsers.add_parser("init", help="Write a starter config file.")
    config_init.add_argument("--path", default=DEFAULT_CONFIG_NAME, help="Config output path")

    subparsers.add_parser("version", help="Print version")
    return parser


def output_path_for(args: argparse.Namespace, settings: MergerSettings) -> Path:
    if args.output:
        path = Path(args.output)
        if path.suffix.lower() != ".xlsx":
            raise CliError("Output must be an .xlsx path.", EXIT_COMMAND_ERROR)
    else:
        path = Path.cwd() / f"{args.name or settings.export_basename}.xlsx"
    if path.exists() and not args.force:
        raise CliError(f"Refusing to overwrite existing output: {path}", EXIT_COMMAND_ERROR)
    return path


def run_sheets(args: argparse.Namespace) -> int:
    settings = None
    try:
        settings = load_settings(args.config)
        source = resolve_sources([args.input], settings, args)[0]
        names = list_sheet_names(source)
        if args.json:
            print(json_dumps(build_sheet_list(input_name=source.name, sheet_names=names)))
        else:
            for name in names:
                print(name)
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(error_message(exc, settings))
        return classify_exception(exc)


def run_merge_command(args: argparse.Namespace) -> int:
    settings = None
    quiet = args.quiet or args.json
    try:
        settings = load_settings(args.config)
        output_path = output_path_for(args, settings)
        warnings: list[str] = []
        mode, sources, selected, table = merge_inputs(args, settings, warnings)
        for warning in warnings:
            emit_human(f"Warning: {warning}", quiet=quiet)

        write_export(list(table.rows), output_path)
        summary = build_merge_summary(
            mode=mode,
            table=table,
            inputs=[source.name for source in sources],
            selected_sheets=selected,
            output_path=str(output_path),
            warnings=warnings,
        )
        if args.json_summary:
            write_text(Path(args.json_summary), json_dumps(summary))
        if args.json:
            print(json_dumps(summary))
        emit_human(f"Rows merged: {len(table)}", quiet=quiet)
        emit_human(f"Columns: {table.column_count}", quiet=quiet)
        emit_human(f"Output written: {output_path} (sheet {EXPORT_SHEET_NAME})", quiet=quiet)
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(error_message(exc, settings))
        return classify_exception(exc)


def run_preview(args: argparse.Namespace) -> int:
    settings = None
    try:
        settings = load_settings(args.config)
        limit = args.limit if args.limit is not None else settings.preview_limit
        if limit < 1:
            raise CliError("--limit must be at least 1.", EXIT_COMMAND_ERROR)
        warnings: list[str] = []
        _, _, _, table = merge_inputs(args, settings, warnings)
        frame = preview_frame(table.rows, table.headers, limit)
        if args.json:
            print(json_dumps({
                "headers": list(table.headers),
                "rows": frame.values.tolist(),
                "shown_rows": len(frame),
                "total_rows": len(table),
            }))
            return EXIT_SUCCESS
        for warning in warnings:
            emit_human(f"Warning: {warning}", quiet=args.quiet)
        print(frame.to_string(index=False))
        emit_human(text("preview_caption", settings.locale, limit=limit, total=len(table)), quiet=args.quiet)
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(error_message(exc, settings))
        return classify_exception(exc)


def run_config_init(args: argparse.Namespace) -> int:
    config_path = Path(args.path)
    if config_path.exists():
        eprint(f"Refusing to overwrite existing config: {config_path}")
        return EXIT_COMMAND_ERROR
    write_text(config_path, starter_config())
    emit_human(f"Config written: {config_path}")
    return EXIT_SUCCESS


def run_version() -> int:
    print(TOOL_VERSION)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        if args.command == "sheets":
            return run_sheets(args)
        if args.command == "merge":
            return run_merge_command(args)
        if args.command == "preview":
            return run_preview(args)
        if args.command == "config":
            if args.config_command == "init":
                return run_config_init(args)
        if args.command == "version":
            return run_version()
        raise CliError(f"Unknown command: {args.command}", EXIT_COMMAND_ERROR)
    except CliError as exc:
        eprint(str(exc))
        return exc.code


if __name__ == "__main__":
    raise SystemExit(main())
