from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from petition_tracker.formulas import PLACEHOLDER, Cell, CellRef, difference
from petition_tracker.models import (
    ChartUpdateOperation,
    MajorDimension,
    SheetLayout,
    UpdateBatch,
    WriteOperation,
)
from petition_tracker.ranges import (
    DEFAULT_COLUMN_BOUNDS,
    ColumnBounds,
    ConfigurationError,
    RangeDescriptor,
    parse_range,
)
from petition_tracker.summaries import (
    DELTA_COLUMN,
    SIGNATURE_COLUMN,
    check_offsets,
    daily_summary,
    rolling_summary,
    weekly_summary,
)
from petition_tracker.timeline import TemporalIndexer

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%d-%m-%Y %H:%M:%S"
DATE_FORMAT = "%d-%m-%Y"
HOURLY_CHART_TYPE = "LINE"
DAILY_CHART_TYPE = "COLUMN"


def _row_range(sheet: str, first_column: str, last_column: str, row: int) -> str:
    return RangeDescriptor(sheet, first_column, row, last_column, row).to_a1()


@dataclass(frozen=True)
class _ParsedRanges:
    hourly_summary: RangeDescriptor
    daily_summary: RangeDescriptor
    weekly_summary: RangeDescriptor | None
    sevenly_summary: RangeDescriptor | None


@dataclass
class UpdateBatchAssembler:
    layout: SheetLayout
    indexer: TemporalIndexer = field(default_factory=TemporalIndexer)
    bounds: ColumnBounds = DEFAULT_COLUMN_BOUNDS

    def _parse_ranges(self) -> _ParsedRanges:
        layout = self.layout
        return _ParsedRanges(
            hourly_summary=parse_range(layout.hourly_summary_range),
            daily_summary=parse_range(layout.daily_summary_range),
            weekly_summary=(
                parse_range(layout.weekly_summary_range) if layout.weekly_summary_range else None
            ),
            sevenly_summary=(
                parse_range(layout.sevenly_summary_range) if layout.sevenly_summary_range else None
            ),
        )

    def validate(self) -> _ParsedRanges:
        """Parse the layout ranges and offsets without touching the clock or the network."""
        ranges = self._parse_ranges()
        check_offsets(self.layout.hourly_offsets)
        if ranges.sevenly_summary is not None:
            check_offsets(self.layout.sevenly_offsets)
        return ranges

    def assemble(self, now: datetime, signature: int, goal: int) -> UpdateBatch:
        """Build every write and chart update for one run at ``now``.

        Raises ConfigurationError before anything is built when a range or
        column of the layout is unusable.
        """
        ranges = self.validate()
        layout = self.layout
        now = self.indexer.localize(now)
        first_row = self.indexer.config.first_row

        hourly_row = self.indexer.hourly_row(now)
        daily_row = self.indexer.daily_row(now)
        midnight = self.indexer.is_midnight(now)
        if min(hourly_row, daily_row) < first_row:
            raise ConfigurationError(f"{now:%d-%m-%Y %H:%M} is before the start of the series")
        logger.info("Hourly row %d, daily row %d (midnight: %s)", hourly_row, daily_row, midnight)

        batch = UpdateBatch(hourly_row=hourly_row, daily_row=daily_row)
        batch.writes.append(
            WriteOperation(
                _row_range(layout.hourly_sheet_name, "A", "C", hourly_row),
                MajorDimension.ROWS,
                [[now.strftime(TIMESTAMP_FORMAT), signature, goal]],
            )
        )
        batch.writes.extend(
            rolling_summary(
                layout.hourly_sheet_name,
                SIGNATURE_COLUMN,
                hourly_row,
                layout.hourly_offsets,
                ranges.hourly_summary,
                first_row=first_row,
                with_trend=layout.hourly_trend,
                bounds=self.bounds,
            )
        )

        # Opening count of the next day, refreshed until that day's row is written
        batch.writes.append(
            WriteOperation(
                _row_range(layout.daily_sheet_name, SIGNATURE_COLUMN, SIGNATURE_COLUMN, daily_row + 1),
                MajorDimension.ROWS,
                [[signature]],
            )
        )

        if midnight:
            batch.writes.extend(self._daily_writes(ranges, now, daily_row, signature))

        batch.charts.append(
            ChartUpdateOperation.for_columns(
                chart_id=layout.hourly_chart_id,
                sheet_id=layout.hourly_sheet_id,
                chart_type=HOURLY_CHART_TYPE,
                end_row=hourly_row,
                domain_column=0,
                series_columns=layout.hourly_series_columns,
            )
        )
        if midnight:
            batch.charts.append(
                ChartUpdateOperation.for_columns(
                    chart_id=layout.daily_chart_id,
                    sheet_id=layout.daily_sheet_id,
                    chart_type=DAILY_CHART_TYPE,
                    end_row=daily_row,
                    domain_column=0,
                    series_columns=layout.daily_series_columns,
                )
            )
        return batch

    def _daily_writes(
        self, ranges: _ParsedRanges, now: datetime, row: int, signature: int
    ) -> list[WriteOperation]:
        layout = self.layout
        sheet = layout.daily_sheet_name
        first_row = self.indexer.config.first_row

        delta = difference(CellRef(sheet, SIGNATURE_COLUMN, row + 1), CellRef(sheet, SIGNATURE_COLUMN, row))
        day_trend: Cell = PLACEHOLDER
        if row - 1 >= first_row:
            day_trend = difference(CellRef(sheet, DELTA_COLUMN, row), CellRef(sheet, DELTA_COLUMN, row - 1))

        writes = daily_summary(sheet, row, ranges.daily_summary, first_row=first_row, bounds=self.bounds)
        if ranges.weekly_summary is not None:
            writes.extend(
                weekly_summary(
                    sheet,
                    row,
                    self.indexer.weekday_index(now),
                    ranges.weekly_summary,
                    first_row=first_row,
                    bounds=self.bounds,
                )
            )
        if ranges.sevenly_summary is not None:
            writes.extend(
                rolling_summary(
                    sheet,
                    SIGNATURE_COLUMN,
                    row,
                    layout.sevenly_offsets,
                    ranges.sevenly_summary,
                    first_row=first_row,
                    with_trend=True,
                    bounds=self.bounds,
                )
            )
        writes.append(
            WriteOperation(
                _row_range(sheet, "A", "D", row),
                MajorDimension.ROWS,
                [[now.strftime(DATE_FORMAT), signature, delta, day_trend]],
            )
        )
        return writes
