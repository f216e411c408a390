from __future__ import annotations

import logging
import os
from typing import Protocol

import gspread

from petition_tracker.models import ChartUpdateOperation, WriteOperation

logger = logging.getLogger(__name__)

# Formulas must be parsed by Sheets, not stored as text
VALUE_INPUT_OPTION = "USER_ENTERED"


class SheetStore(Protocol):
    def apply_writes(self, writes: list[WriteOperation]) -> None: ...

    def apply_chart_updates(self, charts: list[ChartUpdateOperation]) -> None: ...


class SheetsClient:
    def __init__(self, spreadsheet: gspread.Spreadsheet) -> None:
        self._spreadsheet = spreadsheet

    def apply_writes(self, writes: list[WriteOperation]) -> None:
        """Send every write in one ``values.batchUpdate`` call."""
        if not writes:
            return
        self._spreadsheet.values_batch_update(
            {
                "valueInputOption": VALUE_INPUT_OPTION,
                "data": [w.to_value_range() for w in writes],
            }
        )
        logger.info("Applied %d value ranges", len(writes))

    def apply_chart_updates(self, charts: list[ChartUpdateOperation]) -> None:
        if not charts:
            return
        self._spreadsheet.batch_update({"requests": [c.to_request() for c in charts]})
        logger.info("Updated %d charts", len(charts))

    def list_charts(self) -> list[tuple[str, int, int, str]]:
        """Return (sheet title, sheet id, chart id, chart title) for every chart."""
        charts: list[tuple[str, int, int, str]] = []
        metadata = self._spreadsheet.fetch_sheet_metadata()
        for sheet in metadata.get("sheets", []):
            properties = sheet.get("properties", {})
            for chart in sheet.get("charts", []):
                charts.append(
                    (
                        properties.get("title", ""),
                        properties.get("sheetId", 0),
                        chart["chartId"],
                        chart.get("spec", {}).get("title", ""),
                    )
                )
        return charts


def create_sheets_client(spreadsheet_id: str | None = None) -> SheetsClient:
    creds_path = os.environ.get("GOOGLE_SHEETS_CREDENTIALS")
    if not creds_path:
        raise ValueError("GOOGLE_SHEETS_CREDENTIALS environment variable is not set")

    sheet_id = spreadsheet_id or os.environ.get("GOOGLE_SHEET_ID")
    if not sheet_id:
        raise ValueError("GOOGLE_SHEET_ID environment variable is not set")

    gc = gspread.service_account(filename=creds_path)
    spreadsheet = gc.open_by_key(sheet_id)
    return SheetsClient(spreadsheet)
