"""Factory helpers for constructing a table and its store from settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sheettable.core.config import Settings
from sheettable.core.observability import JSONLTableLogger, TableObservationSink
from sheettable.core.table import SheetStore, Table
from sheettable.integrations.csv_sheet import CsvSheet
from sheettable.integrations.in_memory_sheet import InMemorySheet


def build_store(settings: Settings) -> SheetStore:
    """Create the backing store described by *settings*."""

    source = settings.source
    if source.kind == "csv":
        return CsvSheet(csv_path=source.resolve_path())
    if source.kind == "google":
        from sheettable.integrations.google_sheet import GoogleSheet, open_worksheet

        worksheet = open_worksheet(
            spreadsheet_id=source.resolve_spreadsheet_id(),
            worksheet=source.worksheet,
            credentials_file=str(source.resolve_credentials_file()),
        )
        return GoogleSheet(worksheet=worksheet)
    return InMemorySheet(rows=[list(source.header)])


def build_table(settings: Settings, store: SheetStore | None = None) -> Table:
    """Load a :class:`Table` using *settings*, optionally over a supplied *store*."""

    backing = store if store is not None else build_store(settings)
    return Table(
        store=backing,
        name=settings.table.name,
        duplicate_fields=settings.table.duplicate_fields,  # type: ignore[arg-type]
        normalize=_text_normalizer if settings.table.normalize_to_text else None,
        observer=_build_observer(settings),
    )


def _text_normalizer(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _build_observer(settings: Settings) -> TableObservationSink | None:
    base = settings.paths.mutation_logs_dir if settings.paths else None
    if not base:
        return None
    path = Path(base).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return JSONLTableLogger(base_dir=path)

