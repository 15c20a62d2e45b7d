"""Fetch public spreadsheet URLs into in-memory SourceFiles.

Share-page links from GitHub, Dropbox, Box, OneDrive and Google Drive are
rewritten to their direct-download form first; Google Sheets are exported
as .xlsx.
"""

from __future__ import annotations

import io
import re
import zipfile
from pathlib import Path
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

import requests

from sheet_merger.codec import ALL_FORMATS, SourceFile

DEFAULT_MAX_BYTES = 100 * 1024 * 1024
CHUNK_SIZE = 1024 * 1024
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

CONTENT_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
    "application/vnd.ms-excel.sheet.macroenabled.12": ".xlsm",
    "application/vnd.ms-excel": ".xls",
    "application/vnd.oasis.opendocument.spreadsheet": ".ods",
}


def is_url(value: str) -> bool:
    return value.strip().lower().startswith(("http://", "https://"))


def parse_urls(raw_urls: str) -> list[str]:
    return [line.strip() for line in raw_urls.splitlines() if line.strip()]


def normalize_public_url(raw_url: str) -> str:
    parsed = urlparse(raw_url.strip())
    if not parsed.scheme:
        raise ValueError("URL must start with http:// or https://")

    host = parsed.netloc.lower()
    path = parsed.path
    query = parse_qs(parsed.query, keep_blank_values=True)

    if host == "github.com" and "/blob/" in path:
        owner_repo, blob_path = path.lstrip("/").split("/blob/", 1)
        return f"https://raw.githubusercontent.com/{owner_repo}/{blob_path}"

    if host in {"drive.google.com", "docs.google.com"}:
        sheet = re.search(r"/spreadsheets/d/([^/]+)", path)
        if sheet:
            # Export every tab; a gid would limit the export to one sheet.
            return f"https://docs.google.com/spreadsheets/d/{sheet.group(1)}/export?format=xlsx"
        file_id = re.search(r"/file/d/([^/]+)", path)
        if file_id:
            return f"https://drive.google.com/uc?export=download&id={file_id.group(1)}"
        if "id" in query:
            return f"https://drive.google.com/uc?export=download&id={query['id'][0]}"

    download_flag = None
    if "dropbox.com" in host:
        download_flag = "dl"
    elif "box.com" in host or host.endswith("1drv.ms") or "onedrive.live.com" in host:
        download_flag = "download"
    if download_flag:
        query[download_flag] = ["1"]
        return urlunparse(parsed._replace(query=urlencode(query, doseq=True)))

    return raw_url.strip()


def remote_filename(raw_url: str, response: requests.Response) -> str:
    disposition = response.headers.get("content-disposition", "")
    match = re.search(r"filename\*=UTF-8''([^;]+)|filename=\"([^\"]+)\"|filename=([^;]+)", disposition, re.I)
    if match:
        for group in match.groups():
            if group:
                return Path(group.strip().strip('"')).name
    for candidate in (response.url, raw_url):
        name = Path(urlparse(candidate or "").path).name
        if name:
            return name
    return "downloaded_file"


def sniff_extension(filename: str, content_type: str, content: bytes, raw_url: str = "") -> str:
    """Best guess at the workbook extension; "" when nothing matches."""
    ext = Path(filename).suffix.lower()
    if ext in ALL_FORMATS:
        return ext

    mapped = CONTENT_TYPES.get(content_type.split(";")[0].strip().lower())
    if mapped:
        return mapped

    parsed = urlparse(raw_url)
    if "docs.google.com" in parsed.netloc.lower() and "/spreadsheets/" in parsed.path:
        return ".xlsx"

    if content.startswith(b"PK"):
        try:
            with zipfile.ZipFile(io.BytesIO(content)) as zf:
                names = set(zf.namelist())
                if "mimetype" in names:
                    mimetype = zf.read("mimetype").decode("utf-8", errors="ignore").strip()
                    if mimetype == "application/vnd.oasis.opendocument.spreadsheet":
                        return ".ods"
                if "xl/vbaProject.bin" in names:
                    return ".xlsm"
                if "xl/workbook.xml" in names:
                    return ".xlsx"
        except zipfile.BadZipFile:
            pass

    if content[:8] == OLE_MAGIC:
        return ".xls"
    return ""


def fetch_remote_source(raw_url: str, max_bytes: int = DEFAULT_MAX_BYTES, timeout: int = 60) -> SourceFile:
    """Download ``raw_url`` into memory, enforcing ``max_bytes``.

    Raises:
        ValueError                 oversized or non-spreadsheet content.
        requests.RequestException  network or HTTP failures.
    """
    limit_mb = max_bytes // (1024 * 1024)
    url = normalize_public_url(raw_url)
    response = requests.get(url, timeout=timeout, allow_redirects=True, stream=True)
    try:
        response.raise_for_status()
        declared = response.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > max_bytes:
            raise ValueError(f"Remote file is larger than {limit_mb} MB.")

        chunks: list[bytes] = []
        downloaded = 0
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if not chunk:
                continue
            downloaded += len(chunk)
            if downloaded > max_bytes:
                raise ValueError(f"Remote file is larger than {limit_mb} MB.")
            chunks.append(chunk)
        content = b"".join(chunks)
    finally:
        response.close()

    filename = remote_filename(raw_url, response)
    ext = sniff_extension(filename, response.headers.get("content-type", ""), content, raw_url)
    if not ext:
        raise ValueError(f"Unsupported remote file type: {filename}")
    if Path(filename).suffix.lower() != ext:
        filename = f"{filename}{ext}"
    return SourceFile(name=filename, data=content)
