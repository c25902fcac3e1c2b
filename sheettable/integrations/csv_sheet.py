"""CSV-file-backed sheet store.

The whole file is held in memory as a grid of strings. Every write or delete
updates the grid and rewrites the file, so the CSV on disk stays the source
of positional truth for the next process that opens it.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CsvSheet:
    """Expose a CSV file through the `SheetStore` protocol."""

    csv_path: str | Path
    encoding: str = "utf-8"
    _grid: list[list[str]] = field(init=False, default_factory=list)
    _path: Path = field(init=False)

    def __post_init__(self) -> None:
        self._path = Path(self.csv_path).expanduser()
        self.refresh()

    @property
    def path(self) -> Path:
        return self._path

    def refresh(self) -> None:
        """Reload the CSV contents from disk."""

        if not self._path.exists():
            raise FileNotFoundError(f"CSV file not found: {self._path}")

        with self._path.open("r", encoding=self.encoding, newline="") as handle:
            self._grid = [list(row) for row in csv.reader(handle)]
        LOGGER.debug("Loaded %d rows from %s", len(self._grid), self._path)

    def read_all(self) -> list[list[Any]]:
        return [list(row) for row in self._grid]

    def write_row(self, position: int, values: Sequence[Any]) -> None:
        if position < 1:
            raise IndexError(f"Row positions start at 1, got {position}")
        while len(self._grid) < position:
            self._grid.append([])
        self._grid[position - 1] = ["" if value is None else str(value) for value in values]
        self._write_rows()

    def delete_row(self, position: int) -> bool:
        if position < 1 or position > len(self._grid):
            LOGGER.warning("Row %d is outside %s (%d rows)", position, self._path, len(self._grid))
            return False
        del self._grid[position - 1]
        self._write_rows()
        return True

    def _write_rows(self) -> None:
        with self._path.open("w", encoding=self.encoding, newline="") as handle:
            writer = csv.writer(handle)
            writer.writerows(self._grid)
