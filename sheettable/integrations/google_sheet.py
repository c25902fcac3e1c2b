"""Google Sheets store built on gspread.

Only connection setup and the three row-level calls live here; the table
logic never talks to gspread directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials

LOGGER = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


def open_worksheet(spreadsheet_id: str, worksheet: str, credentials_file: str) -> gspread.Worksheet:
    """Authorize with a service-account file and open *worksheet* by title."""

    credentials = Credentials.from_service_account_file(credentials_file, scopes=SCOPES)
    client = gspread.authorize(credentials)
    spreadsheet = client.open_by_key(spreadsheet_id)
    return spreadsheet.worksheet(worksheet)


@dataclass(slots=True)
class GoogleSheet:
    """Expose a gspread worksheet through the `SheetStore` protocol."""

    worksheet: Any

    def read_all(self) -> list[list[Any]]:
        return [list(row) for row in self.worksheet.get_all_values()]

    def write_row(self, position: int, values: Sequence[Any]) -> None:
        if position < 1:
            raise IndexError(f"Row positions start at 1, got {position}")
        row = list(values)
        missing = position - int(self.worksheet.row_count)
        if missing > 0:
            self.worksheet.add_rows(missing)
        target = f"{rowcol_to_a1(position, 1)}:{rowcol_to_a1(position, max(len(row), 1))}"
        LOGGER.debug("Writing %d cells to %s!%s", len(row), self.worksheet.title, target)
        self.worksheet.update(range_name=target, values=[row])

    def delete_row(self, position: int) -> bool:
        try:
            self.worksheet.delete_rows(position)
        except gspread.exceptions.APIError as exc:
            LOGGER.warning(
                "Google Sheets refused to delete row %d of %s: %s",
                position,
                self.worksheet.title,
                exc,
            )
            return False
        return True
