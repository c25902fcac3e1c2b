"""Grid-backed sheet store kept entirely in memory.

Useful inside tests and notebooks where a real spreadsheet is not available.
Rows are 1-indexed to match spreadsheet conventions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence


@dataclass(slots=True)
class InMemorySheet:
    """List-of-lists grid that satisfies the `SheetStore` protocol."""

    rows: list[list[Any]] = field(default_factory=list)
    history: list[tuple[str, int]] = field(init=False, default_factory=list)

    def read_all(self) -> list[list[Any]]:
        """Return a copy of the grid, header first."""

        return [list(row) for row in self.rows]

    def write_row(self, position: int, values: Sequence[Any]) -> None:
        """Overwrite row *position*, padding with empty rows when writing past the end."""

        if position < 1:
            raise IndexError(f"Row positions start at 1, got {position}")
        while len(self.rows) < position:
            self.rows.append([])
        self.rows[position - 1] = list(values)
        self.history.append(("write", position))

    def delete_row(self, position: int) -> bool:
        """Remove row *position*; rows outside the grid are reported as not deleted."""

        if position < 1 or position > len(self.rows):
            return False
        del self.rows[position - 1]
        self.history.append(("delete", position))
        return True
