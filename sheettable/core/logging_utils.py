"""Helpers for naming and stamping per-table JSONL mutation logs."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

# One log file per (directory, table) for the lifetime of the process.
_LOG_FILES: dict[tuple[str, str], Path] = {}


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """Render *moment* as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""

    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def table_log_filename(table_name: str, opened_at: datetime) -> str:
    """Return ``<sortable UTC slug>-<safe table name>.jsonl``."""

    slug = opened_at.astimezone(UTC).strftime("%Y%m%dT%H%M%S%f")[:-3]
    safe_name = re.sub(r"[^A-Za-z0-9_-]+", "-", table_name.strip()) or "table"
    return f"{slug}-{safe_name}.jsonl"


def table_log_path(base_dir: Path, table_name: str, opened_at: datetime) -> Path:
    """Return the log file for *table_name*, naming it after the first event's time."""

    directory = base_dir.expanduser().resolve()
    key = (str(directory), table_name)
    target = _LOG_FILES.get(key)
    if target is None:
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / table_log_filename(table_name, opened_at)
        _LOG_FILES[key] = target
    return target
