"""Utilities for loading table settings from YAML configuration files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

_SOURCE_KINDS = {"csv", "google", "memory"}
_DUPLICATE_POLICIES = {"first", "error"}


def _require_env(name: str, purpose: str) -> str:
    value = os.getenv(name)
    if not value:
        raise OSError(f"Environment variable '{name}' is required for {purpose}")
    return value


@dataclass(slots=True)
class SourceSettings:
    kind: str
    path_env: str = "SHEET_CSV_PATH"
    spreadsheet_id_env: str = "SPREADSHEET_ID"
    worksheet: str = "Sheet1"
    credentials_env: str = "GOOGLE_SERVICE_ACCOUNT_FILE"
    header: list[str] = field(default_factory=list)

    def resolve_path(self) -> Path:
        path = Path(_require_env(self.path_env, "CSV sheet source")).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"CSV sheet source not found at '{path}'")
        return path

    def resolve_spreadsheet_id(self) -> str:
        return _require_env(self.spreadsheet_id_env, "Google Sheets source")

    def resolve_credentials_file(self) -> Path:
        path = Path(_require_env(self.credentials_env, "Google Sheets credentials")).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Service account file not found at '{path}'")
        return path


@dataclass(slots=True)
class TableSettings:
    name: str = "sheet"
    duplicate_fields: str = "first"
    normalize_to_text: bool = False


@dataclass(slots=True)
class PathsSettings:
    mutation_logs_dir: str | None = None


@dataclass(slots=True)
class Settings:
    source: SourceSettings
    table: TableSettings
    paths: PathsSettings | None


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_settings(path: str | Path) -> Settings:
    """Read configuration from *path* and return structured settings."""

    config_path = Path(path)
    raw = _load_yaml(config_path)

    source_raw = raw.get("source") or {}
    kind = str(source_raw.get("kind", "memory")).lower()
    if kind not in _SOURCE_KINDS:
        raise ValueError(f"Unknown source kind '{kind}'. Expected one of {sorted(_SOURCE_KINDS)}")
    source = SourceSettings(
        kind=kind,
        path_env=str(source_raw.get("path_env", "SHEET_CSV_PATH")),
        spreadsheet_id_env=str(source_raw.get("spreadsheet_id_env", "SPREADSHEET_ID")),
        worksheet=str(source_raw.get("worksheet", "Sheet1")),
        credentials_env=str(source_raw.get("credentials_env", "GOOGLE_SERVICE_ACCOUNT_FILE")),
        header=[str(name) for name in source_raw.get("header") or []],
    )
    if kind == "memory" and not source.header:
        raise ValueError("A memory source needs a header listing its field names")

    table_raw = raw.get("table") or {}
    duplicate_fields = str(table_raw.get("duplicate_fields", "first")).lower()
    if duplicate_fields not in _DUPLICATE_POLICIES:
        raise ValueError(
            f"Unknown duplicate_fields policy '{duplicate_fields}'. "
            f"Expected one of {sorted(_DUPLICATE_POLICIES)}"
        )
    table = TableSettings(
        name=str(table_raw.get("name", source.worksheet if kind == "google" else "sheet")),
        duplicate_fields=duplicate_fields,
        normalize_to_text=bool(table_raw.get("normalize_to_text", False)),
    )

    paths_raw: dict[str, Any] | None = raw.get("paths")
    paths = None
    if paths_raw:
        mutation_logs_dir = paths_raw.get("mutation_logs_dir")
        paths = PathsSettings(
            mutation_logs_dir=str(mutation_logs_dir) if mutation_logs_dir else None,
        )

    return Settings(source=source, table=table, paths=paths)
