from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from petition_tracker.formulas import Cell, render_cell


class MajorDimension(str, Enum):
    ROWS = "ROWS"
    COLUMNS = "COLUMNS"


@dataclass(frozen=True)
class WriteOperation:
    range: str
    major_dimension: MajorDimension
    values: list[list[Cell]]

    def to_value_range(self) -> dict:
        """Body entry for ``spreadsheets.values.batchUpdate``."""
        return {
            "range": self.range,
            "majorDimension": self.major_dimension.value,
            "values": [[render_cell(cell) for cell in line] for line in self.values],
        }


@dataclass(frozen=True)
class GridRange:
    """Zero-based, end-exclusive grid coordinates."""

    sheet_id: int
    start_column: int
    start_row: int
    end_column: int
    end_row: int

    def to_source(self) -> dict:
        return {
            "sheetId": self.sheet_id,
            "startRowIndex": self.start_row,
            "endRowIndex": self.end_row,
            "startColumnIndex": self.start_column,
            "endColumnIndex": self.end_column,
        }


@dataclass(frozen=True)
class ChartUpdateOperation:
    chart_id: int
    sheet_id: int
    chart_type: str
    domain: GridRange
    series: tuple[GridRange, ...]
    header_count: int = 1

    @classmethod
    def for_columns(
        cls,
        chart_id: int,
        sheet_id: int,
        chart_type: str,
        end_row: int,
        domain_column: int,
        series_columns: tuple[int, ...],
    ) -> ChartUpdateOperation:
        """Build a chart whose domain and series are single columns ending before ``end_row``."""

        def column(index: int) -> GridRange:
            return GridRange(sheet_id, index, 0, index + 1, end_row)

        return cls(
            chart_id=chart_id,
            sheet_id=sheet_id,
            chart_type=chart_type,
            domain=column(domain_column),
            series=tuple(column(index) for index in series_columns),
        )

    def to_request(self) -> dict:
        """``updateChartSpec`` request for ``spreadsheets.batchUpdate``."""
        return {
            "updateChartSpec": {
                "chartId": self.chart_id,
                "spec": {
                    "basicChart": {
                        "chartType": self.chart_type,
                        "domains": [{"domain": {"sourceRange": {"sources": [self.domain.to_source()]}}}],
                        "series": [
                            {
                                "series": {"sourceRange": {"sources": [s.to_source()]}},
                                "targetAxis": "LEFT_AXIS",
                            }
                            for s in self.series
                        ],
                        "headerCount": self.header_count,
                    }
                },
            }
        }


@dataclass
class UpdateBatch:
    hourly_row: int
    daily_row: int
    writes: list[WriteOperation] = field(default_factory=list)
    charts: list[ChartUpdateOperation] = field(default_factory=list)


@dataclass(frozen=True)
class SheetLayout:
    """Where one deployment keeps its series, summaries and charts."""

    hourly_sheet_name: str
    hourly_sheet_id: int
    hourly_chart_id: int
    hourly_summary_range: str
    daily_sheet_name: str
    daily_sheet_id: int
    daily_chart_id: int
    daily_summary_range: str
    weekly_summary_range: str | None = None
    sevenly_summary_range: str | None = None
    hourly_offsets: tuple[int, ...] = (6, 12, 24, 48)
    sevenly_offsets: tuple[int, ...] = (7, 14, 21, 28)
    hourly_trend: bool = False
    hourly_series_columns: tuple[int, ...] = (1, 2)
    daily_series_columns: tuple[int, ...] = (2, 3)
