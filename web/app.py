#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import pandas as pd
import requests
import streamlit as st

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sheet_merger.codec import ALL_FORMATS, SourceFile
from sheet_merger.config import ConfigError, MergerSettings, load_settings
from sheet_merger.messages import describe_error, text
from sheet_merger.preview import preview_frame
from sheet_merger.remote import fetch_remote_source, parse_urls
from sheet_merger.session import MODE_FILES, MODE_SHEETS, MergeSession

UPLOAD_TYPES = [ext.lstrip(".") for ext in sorted(ALL_FORMATS)]


@st.cache_resource(show_spinner=False)
def load_app_settings() -> tuple[MergerSettings, Optional[str]]:
    try:
        return load_settings(), None
    except ConfigError as exc:
        return MergerSettings(), str(exc)


def ensure_state() -> MergeSession:
    settings, _ = load_app_settings()
    st.session_state.setdefault("merge_session", MergeSession(settings=settings))
    st.session_state.setdefault("uploader_version", 0)
    st.session_state.setdefault("sheet_widget_version", 0)
    st.session_state.setdefault("source_signature", None)
    st.session_state.setdefault("remote_sources", [])
    st.session_state.setdefault("remote_errors", [])
    st.session_state.setdefault("exported", None)
    return st.session_state["merge_session"]


def t(key: str, **params) -> str:
    return text(key, st.session_state["merge_session"].settings.locale, **params)


def on_mode_change() -> None:
    session: MergeSession = st.session_state["merge_session"]
    session.set_mode(st.session_state["mode_input"])
    st.session_state["uploader_version"] += 1
    st.session_state["source_signature"] = None
    st.session_state["remote_sources"] = []
    st.session_state["remote_errors"] = []
    st.session_state["exported"] = None


def on_sheet_toggle(name: str, key: str) -> None:
    session: MergeSession = st.session_state["merge_session"]
    session.set_sheet_selected(name, bool(st.session_state.get(key)))


def on_toggle_all(selected: bool) -> None:
    session: MergeSession = st.session_state["merge_session"]
    session.select_all_sheets(selected)
    st.session_state["sheet_widget_version"] += 1


def uploaded_sources(uploads) -> list[SourceFile]:
    if uploads is None:
        return []
    if not isinstance(uploads, list):
        uploads = [uploads]
    return [SourceFile(name=upload.name, data=upload.getvalue()) for upload in uploads]


def fetch_remote_sources(raw_urls: str, settings: MergerSettings) -> tuple[list[SourceFile], list[str]]:
    sources: list[SourceFile] = []
    errors: list[str] = []
    for url in parse_urls(raw_urls):
        try:
            sources.append(fetch_remote_source(url, max_bytes=settings.max_remote_file_bytes))
        except (ValueError, requests.RequestException) as exc:
            errors.append(f"{url}: {exc}")
    return sources, errors


def sync_sources(session: MergeSession, sources: list[SourceFile]) -> None:
    """Hand a changed file selection to the session; sheet mode keeps one file."""
    signature = tuple((source.name, len(source.data)) for source in sources)
    if signature == st.session_state["source_signature"]:
        return
    st.session_state["source_signature"] = signature
    st.session_state["exported"] = None
    session.select_files(sources)
    st.session_state["sheet_widget_version"] += 1


def render_sheet_selection(session: MergeSession, disabled: bool) -> None:
    if session.mode != MODE_SHEETS or not session.sheets:
        return
    st.subheader("3. Choose the sheets to merge")
    left, right = st.columns(2)
    left.button(t("select_all"), on_click=on_toggle_all, args=(True,), disabled=disabled, width="stretch")
    right.button(t("select_none"), on_click=on_toggle_all, args=(False,), disabled=disabled, width="stretch")
    version = st.session_state["sheet_widget_version"]
    for idx, choice in enumerate(session.sheets):
        key = f"sheet_{version}_{idx}"
        st.checkbox(
            choice.name,
            value=choice.selected,
            key=key,
            on_change=on_sheet_toggle,
            args=(choice.name, key),
            disabled=disabled,
        )


def render_messages(session: MergeSession) -> None:
    locale = session.settings.locale
    if session.error is not None:
        st.error(describe_error(session.error, locale))
    if session.notice is not None:
        st.warning(describe_error(session.notice, locale))
    if session.warnings:
        st.warning("Merge notes:\n- " + "\n- ".join(session.warnings))


def render_results(session: MergeSession) -> None:
    table = session.table
    if table is None:
        return
    limit = session.settings.preview_limit
    st.subheader("Result & download")
    metrics = st.columns(3)
    metrics[0].metric("Rows", len(table))
    metrics[1].metric("Columns", table.column_count)
    metrics[2].metric("Sheets merged", table.sheet_count)
    st.caption(t("preview_caption", limit=limit, total=len(table)))

    exported = st.session_state.get("exported")
    if exported is None:
        exported = session.export()
        st.session_state["exported"] = exported
    st.download_button(
        t("download"),
        data=exported.data,
        file_name=exported.file_name,
        mime=exported.mime,
        type="primary",
        width="stretch",
    )
    frame: pd.DataFrame = preview_frame(table.rows, table.headers, limit)
    st.dataframe(frame, width="stretch", hide_index=True, height=420)


def set_visuals() -> None:
    st.set_page_config(page_title="sheet-merger", page_icon="📑", layout="centered")
    st.markdown(
        """
        <style>
        .merge-panel {
            border: 1px solid rgba(49, 51, 63, 0.15);
            border-radius: 12px;
            padding: 0.25rem 1rem;
            margin-bottom: 1rem;
        }
        .file-list { font-size: 0.9rem; color: #5f6b7a; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def main() -> None:
    set_visuals()
    session = ensure_state()
    _, config_error = load_app_settings()

    st.title("sheet-merger")
    st.caption("Merge several sheets or files into one. Columns are added automatically when structures differ.")
    if config_error:
        st.warning(f"Config ignored: {config_error}")

    st.subheader("1. Choose a merge mode")
    st.radio(
        "Mode",
        options=[MODE_FILES, MODE_SHEETS],
        index=0 if session.mode == MODE_FILES else 1,
        format_func=lambda mode: t("mode_files") if mode == MODE_FILES else t("mode_sheets"),
        key="mode_input",
        on_change=on_mode_change,
        horizontal=True,
        label_visibility="collapsed",
    )
    st.caption(t("mode_files_help") if session.mode == MODE_FILES else t("mode_sheets_help"))

    st.subheader("2. Upload files")
    multiple = session.mode == MODE_FILES
    uploads = st.file_uploader(
        t("upload_multiple") if multiple else t("upload_single"),
        type=UPLOAD_TYPES,
        accept_multiple_files=multiple,
        key=f"uploads_{session.mode}_{st.session_state['uploader_version']}",
    )
    with st.expander("Public file URLs"):
        raw_urls = st.text_area(
            "One public file URL per line",
            key=f"urls_{st.session_state['uploader_version']}",
            height=90,
            placeholder="Direct links and public share links from GitHub, Dropbox, Google Drive, OneDrive, Box.",
        )
        if st.button("Fetch URLs", disabled=not raw_urls.strip()):
            with st.spinner("Downloading..."):
                sources, errors = fetch_remote_sources(raw_urls, session.settings)
            st.session_state["remote_sources"] = sources
            st.session_state["remote_errors"] = errors
        for message in st.session_state["remote_errors"]:
            st.error(message)
        st.caption(f"URL mode makes outbound requests and rejects files above {session.settings.max_remote_file_mb} MB.")

    sync_sources(session, uploaded_sources(uploads) + list(st.session_state["remote_sources"]))
    if session.files:
        listing = "".join(f"<li>{source.name} ({source.size_kb} KB)</li>" for source in session.files)
        st.markdown(f'<div class="file-list">Selected files:<ul>{listing}</ul></div>', unsafe_allow_html=True)

    render_sheet_selection(session, disabled=False)

    if st.button(t("merge"), type="primary", width="stretch", disabled=not session.can_merge):
        st.session_state["exported"] = None
        with st.spinner("Merging..."):
            session.merge()

    render_messages(session)
    render_results(session)


if __name__ == "__main__":
    main()
