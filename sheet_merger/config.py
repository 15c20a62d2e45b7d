"""Runtime settings: defaults, then a JSON config file, then environment."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from sheet_merger.export import DEFAULT_EXPORT_BASENAME
from sheet_merger.messages import SUPPORTED_LOCALES
from sheet_merger.preview import PREVIEW_LIMIT

DEFAULT_CONFIG_NAME = "sheet-merger.json"
CONFIG_ENV = "SHEET_MERGER_CONFIG"
ENV_KEYS = {
    "export_basename": "SHEET_MERGER_EXPORT_NAME",
    "preview_limit": "SHEET_MERGER_PREVIEW_LIMIT",
    "locale": "SHEET_MERGER_LOCALE",
}
SUPPORTED_CONFIG_SUFFIXES = {".json", ".yml", ".yaml"}


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class MergerSettings:
    export_basename: str = DEFAULT_EXPORT_BASENAME
    preview_limit: int = PREVIEW_LIMIT
    locale: str = "en"
    max_remote_file_mb: int = 100

    @property
    def max_remote_file_bytes(self) -> int:
        return self.max_remote_file_mb * 1024 * 1024

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _positive_int(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if number < 1:
        raise ConfigError(f"{name} must be at least 1, got {number}")
    return number


def _validated(settings: MergerSettings) -> MergerSettings:
    if not str(settings.export_basename).strip():
        raise ConfigError("export_basename must not be empty")
    if settings.locale not in SUPPORTED_LOCALES:
        raise ConfigError(
            f"Unsupported locale {settings.locale!r}. Supported: {', '.join(SUPPORTED_LOCALES)}"
        )
    return replace(
        settings,
        export_basename=str(settings.export_basename).strip(),
        preview_limit=_positive_int("preview_limit", settings.preview_limit),
        max_remote_file_mb=_positive_int("max_remote_file_mb", settings.max_remote_file_mb),
    )


def read_config_file(path: Path) -> dict[str, Any]:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ConfigError("Config must be a .json file")
    if suffix in {".yml", ".yaml"}:
        raise ConfigError("YAML config is not supported. Use JSON.")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:
        raise ConfigError(f"Could not read config {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError("Config root must be a JSON object.")
    known = set(MergerSettings.__dataclass_fields__)
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
    return payload


def load_settings(
    config_path: Optional["str | Path"] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> MergerSettings:
    """Resolve settings from defaults, a config file and the environment.

    An explicit ``config_path`` (or ``SHEET_MERGER_CONFIG``) must exist; the
    default ``sheet-merger.json`` in the working directory is optional.
    """
    environ = os.environ if environ is None else environ
    settings = MergerSettings()

    explicit = config_path or environ.get(CONFIG_ENV)
    path = Path(explicit) if explicit else Path.cwd() / DEFAULT_CONFIG_NAME
    if path.exists():
        settings = replace(settings, **read_config_file(path))
    elif explicit:
        raise ConfigError(f"Config not found: {path}")

    overrides = {field: environ[key] for field, key in ENV_KEYS.items() if environ.get(key)}
    if overrides:
        settings = replace(settings, **overrides)
    return _validated(settings)


def starter_config() -> str:
    return json.dumps(MergerSettings().to_dict(), indent=2) + "\n"
