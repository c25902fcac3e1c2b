"""JSONL-backed observability helpers for table mutations."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from sheettable.core.logging_utils import format_timestamp, table_log_path, utc_now


class TableObservationSink(Protocol):
    """Records mutation events emitted by a table."""

    def log_event(self, table_name: str, event: str, payload: dict[str, Any]) -> None:  # pragma: no cover - interface
        ...


def _build_event(event: str, payload: dict[str, Any], moment: datetime) -> dict[str, Any]:
    enriched = {key: value for key, value in payload.items() if value is not None}
    enriched.setdefault("event", event)
    enriched.setdefault("timestamp", format_timestamp(moment))
    return enriched


@dataclass(slots=True)
class JSONLTableLogger(TableObservationSink):
    """Persists table mutation events under a dedicated logs directory."""

    base_dir: Path

    def log_event(self, table_name: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        moment = utc_now()
        prepared = _build_event(event, payload, moment)
        target = table_log_path(self.base_dir, table_name, moment)
        with target.open("a", encoding="utf-8") as handle:
            json.dump(prepared, handle, ensure_ascii=False, default=str)
            handle.write("\n")


@dataclass(slots=True)
class InMemoryTableLogger(TableObservationSink):
    """Keeps mutation events in a list; handy for tests and notebooks."""

    events: list[dict[str, Any]] = field(default_factory=list)

    def log_event(self, table_name: str, event: str, payload: dict[str, Any]) -> None:  # type: ignore[override]
        prepared = _build_event(event, payload, utc_now())
        prepared.setdefault("table", table_name)
        self.events.append(prepared)
