"""Record-oriented view over a single sheet.

A :class:`Table` reads every cell of its backing store once, treats the first
row as the field list and every following row as a record. Reads are served
from the in-memory cache; writes go to the store first and are mirrored into
the cache only after the store accepted them.

Cache position ``i`` always corresponds to store row ``row_position(i)``.
Store rows are 1-indexed and the header occupies row 1, so the first record
lives in row 2. Every mutator goes through :func:`row_position`; nothing else
in the package computes store row numbers.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Protocol, Sequence

from sheettable.core.observability import TableObservationSink

LOGGER = logging.getLogger(__name__)

HEADER_ROWS = 1
EMPTY = ""

DuplicateFieldPolicy = Literal["first", "error"]
_DUPLICATE_POLICIES = ("first", "error")
_MEMBERSHIP_TYPES = (list, tuple, set, frozenset)


class SheetStore(Protocol):
    """Minimal surface a backing sheet must offer to a table."""

    def read_all(self) -> list[list[Any]]:  # pragma: no cover - interface
        """Return every cell as a row-major grid, header first."""

    def write_row(self, position: int, values: Sequence[Any]) -> None:  # pragma: no cover - interface
        """Overwrite (or append) the 1-indexed row at *position*."""

    def delete_row(self, position: int) -> bool:  # pragma: no cover - interface
        """Remove the 1-indexed row at *position* and report whether it happened."""


class DuplicateFieldError(ValueError):
    """Raised when a header repeats a field name and duplicates are rejected."""


class _FieldNotFound:
    """Sentinel returned by lookups against a field the table does not have."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "FIELD_NOT_FOUND"

    def __bool__(self) -> bool:
        return False


FIELD_NOT_FOUND = _FieldNotFound()


def row_position(index: int) -> int:
    """Translate a cache index into the 1-indexed store row that holds it."""

    if index < 0:
        raise ValueError(f"Cache index must be non-negative, got {index}")
    return index + HEADER_ROWS + 1


def _is_blank(value: Any) -> bool:
    # Falsy keys (None, "", 0, False) never identify a record.
    return not value


def _strict_equals(left: Any, right: Any) -> bool:
    # 1 == 1.0 and True == 1 hold in Python; cell matching must not coerce.
    return type(left) is type(right) and left == right


def _matches(cell: Any, expected: Any) -> bool:
    if isinstance(expected, _MEMBERSHIP_TYPES):
        return any(_strict_equals(cell, candidate) for candidate in expected)
    return _strict_equals(cell, expected)


@dataclass(slots=True)
class Table:
    """In-memory record cache kept position-aligned with a backing sheet."""

    store: SheetStore
    name: str = "sheet"
    duplicate_fields: DuplicateFieldPolicy = "first"
    normalize: Callable[[Any], Any] | None = None
    observer: TableObservationSink | None = None
    _fields: list[str] = field(init=False, default_factory=list)
    _columns: dict[str, list[int]] = field(init=False, default_factory=dict)
    _records: list[dict[str, Any]] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        if self.store is None:
            raise ValueError("A backing sheet store is required")
        if self.duplicate_fields not in _DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicate_fields must be one of {_DUPLICATE_POLICIES}, got '{self.duplicate_fields}'"
            )
        self._load()

    def _load(self) -> None:
        grid = [list(row) for row in self.store.read_all()]
        if not grid:
            LOGGER.debug("Table '%s' loaded from an empty sheet", self.name)
            return

        header = ["" if cell is None else str(cell) for cell in grid[0]]
        columns: dict[str, list[int]] = {}
        for index, name in enumerate(header):
            if name in columns and self.duplicate_fields == "error":
                raise DuplicateFieldError(
                    f"Field '{name}' appears more than once in the header of '{self.name}'"
                )
            columns.setdefault(name, []).append(index)

        self._fields = header
        self._columns = columns
        self._records = [
            {name: self._cell(row, indexes[0]) for name, indexes in columns.items()}
            for row in grid[1:]
        ]
        LOGGER.debug(
            "Table '%s' loaded fields=%s records=%d", self.name, header, len(self._records)
        )

    def _cell(self, row: list[Any], column: int) -> Any:
        value = row[column] if column < len(row) else None
        return self._normalized(EMPTY if value is None else value)

    def _normalized(self, value: Any) -> Any:
        if self.normalize is None:
            return value
        return self.normalize(value)

    @property
    def fields(self) -> list[str]:
        """Return the header as loaded, in column order."""

        return list(self._fields)

    def __len__(self) -> int:
        return len(self._records)

    def has_field(self, name: str) -> bool:
        return isinstance(name, str) and name in self._columns

    def get_record(self, field: str, value: Any) -> dict[str, Any] | _FieldNotFound | None:
        """Return a copy of the first record whose *field* equals *value*.

        ``None`` means no record matched (or an argument was blank);
        :data:`FIELD_NOT_FOUND` means the table has no such field.
        """

        if _is_blank(field) or _is_blank(value):
            return None
        if not self.has_field(field):
            return FIELD_NOT_FOUND
        index = self._locate(field, value)
        if index is None:
            return None
        return dict(self._records[index])

    def get_records(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Return copies of the records satisfying every recognized query key.

        A query value that is a list, tuple or set matches any of its members;
        any other value must equal the cell exactly. Unknown keys are ignored.
        """

        selected = self._records
        if query is not None and not isinstance(query, Mapping):
            return []
        if query:
            for name, expected in query.items():
                if not self.has_field(name):
                    continue
                selected = [record for record in selected if _matches(record[name], expected)]
        return [dict(record) for record in selected]

    def add_record(self, record: Mapping[str, Any] | None) -> bool:
        """Append *record* to the sheet and the cache.

        Declared fields missing from *record* are stored as empty values and
        keys that are not fields are dropped. A record with no declared field
        at all is rejected without touching the sheet.
        """

        if not isinstance(record, Mapping) or not record:
            return False

        normalized: dict[str, Any] = {}
        recognized = False
        for name in self._columns:
            if name in record:
                normalized[name] = self._normalized(record[name])
                recognized = True
            else:
                normalized[name] = self._normalized(EMPTY)

        if not recognized:
            LOGGER.debug("Add to '%s' skipped: no recognized fields in %s", self.name, list(record))
            return False

        position = row_position(len(self._records))
        self.store.write_row(position, self._build_row(normalized))
        self._records.append(normalized)
        LOGGER.debug("Added record to '%s' at row %d", self.name, position)
        self._emit("record_added", {"row": position, "record": dict(normalized)})
        return True

    def update_record(
        self, key_field: str, key_value: Any, changes: Mapping[str, Any] | None
    ) -> bool:
        """Apply *changes* to the first record whose *key_field* equals *key_value*."""

        if _is_blank(key_field) or _is_blank(key_value):
            return False
        if not isinstance(changes, Mapping) or not changes:
            return False
        if not self.has_field(key_field):
            return False

        index = self._locate(key_field, key_value)
        if index is None:
            return False

        applied = {
            name: self._normalized(changes[name]) for name in self._columns if name in changes
        }
        if not applied:
            LOGGER.debug("Update on '%s' skipped: no recognized fields in %s", self.name, list(changes))
            return False

        current = self._records[index]
        position = row_position(index)
        self.store.write_row(position, self._build_row({**current, **applied}))
        current.update(applied)
        LOGGER.debug("Updated row %d of '%s' fields=%s", position, self.name, list(applied))
        self._emit(
            "record_updated",
            {"row": position, "key_field": key_field, "key_value": key_value, "changes": applied},
        )
        return True

    def delete_record(self, field: str, value: Any) -> bool:
        """Delete the first record whose *field* equals *value* from sheet and cache."""

        if _is_blank(field) or _is_blank(value):
            return False
        if not self.has_field(field):
            return False

        index = self._locate(field, value)
        if index is None:
            return False

        position = row_position(index)
        if not self.store.delete_row(position):
            LOGGER.warning("Sheet declined deletion of row %d in '%s'", position, self.name)
            self._emit("delete_declined", {"row": position, "field": field, "value": value})
            return False

        removed = self._records.pop(index)
        LOGGER.debug("Deleted row %d of '%s'", position, self.name)
        self._emit("record_deleted", {"row": position, "record": removed})
        return True

    def _locate(self, field: str, value: Any) -> int | None:
        for index, record in enumerate(self._records):
            if _strict_equals(record[field], value):
                return index
        return None

    def _build_row(self, values: Mapping[str, Any]) -> list[Any]:
        return [values[name] for name in self._fields]

    def _emit(self, event: str, payload: dict[str, Any]) -> None:
        if self.observer is not None:
            self.observer.log_event(self.name, event, payload)


def load_table(store: SheetStore | None, **options: Any) -> Table | None:
    """Build a :class:`Table` over *store*, or return ``None`` when no store is given."""

    if store is None:
        return None
    return Table(store=store, **options)


__all__ = [
    "EMPTY",
    "FIELD_NOT_FOUND",
    "HEADER_ROWS",
    "DuplicateFieldError",
    "SheetStore",
    "Table",
    "load_table",
    "row_position",
]
