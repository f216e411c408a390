"""Formula generators for the summary blocks next to the charts.

Every generator takes the row just computed for the series and a target
range, and returns the write operations filling that range (plus the
trend column right of it). Rows before ``first_row`` do not exist yet;
their cells get the ``"-"`` placeholder instead of a formula.
"""

from __future__ import annotations

from collections.abc import Sequence

from petition_tracker.formulas import (
    PLACEHOLDER,
    Cell,
    CellRef,
    Formula,
    RangeRef,
    Sum,
    difference,
    trend,
)
from petition_tracker.models import MajorDimension, WriteOperation
from petition_tracker.ranges import (
    DEFAULT_COLUMN_BOUNDS,
    ColumnBounds,
    ConfigurationError,
    RangeDescriptor,
)

SIGNATURE_COLUMN = "B"
DELTA_COLUMN = "C"
DAYS_PER_WEEK = 7


def _check_target(target: RangeDescriptor, cells: int) -> None:
    if target.start_column != target.end_column:
        raise ConfigurationError(f"summary range must be a single column: {target.to_a1()}")
    if target.height != cells:
        raise ConfigurationError(
            f"summary range {target.to_a1()} has {target.height} cells, expected {cells}"
        )


def check_offsets(offsets: Sequence[int]) -> None:
    if not offsets:
        raise ConfigurationError("no rolling offsets configured")
    if any(o <= 0 for o in offsets):
        raise ConfigurationError(f"rolling offsets must be positive: {list(offsets)}")


def _column_write(target: RangeDescriptor, cells: list[Cell]) -> WriteOperation:
    return WriteOperation(target.to_a1(), MajorDimension.COLUMNS, [cells])


def rolling_summary(
    sheet: str,
    column: str,
    row: int,
    offsets: Sequence[int],
    target: RangeDescriptor,
    first_row: int = 2,
    with_trend: bool = False,
    bounds: ColumnBounds = DEFAULT_COLUMN_BOUNDS,
) -> list[WriteOperation]:
    """Difference between the current value and the value ``offset`` rows back.

    Cell ``i`` of ``target`` gets ``current - value(row - offsets[i])``; the
    trend column gets the latest window minus the window before it. A
    window reaching past the start of the series is a placeholder, and so
    is its trend; offsets may come in any order.
    """
    check_offsets(offsets)
    _check_target(target, len(offsets))
    trend_target = target.shifted(bounds) if with_trend else None

    current = CellRef(sheet, column, row)
    values: list[Cell] = []
    trends: list[Cell] = []
    for offset in offsets:
        missing = row - offset < first_row
        missing_trend = missing or row - 2 * offset < first_row

        past = CellRef(sheet, column, row - offset)
        values.append(PLACEHOLDER if missing else difference(current, past))
        if missing_trend:
            trends.append(PLACEHOLDER)
        else:
            trends.append(trend(current, past, CellRef(sheet, column, row - 2 * offset)))

    writes = [_column_write(target, values)]
    if trend_target is not None:
        writes.append(_column_write(trend_target, trends))
    return writes


def daily_summary(
    daily_sheet: str,
    row: int,
    target: RangeDescriptor,
    first_row: int = 2,
    bounds: ColumnBounds = DEFAULT_COLUMN_BOUNDS,
) -> list[WriteOperation]:
    """Last ``N`` daily deltas (oldest first) plus a trend cell.

    With ``N`` the target height the offsets are ``N, N-1, ..., 0``: the
    first one is only the baseline of the trend, which sits right of the
    first target cell and compares it with the day before.
    """
    offsets = list(range(target.height, -1, -1))
    _check_target(target, len(offsets) - 1)
    trend_column = target.shifted(bounds).start_column

    cells: list[Cell] = []
    for offset in offsets[1:]:
        past = row - offset
        cells.append(PLACEHOLDER if past < first_row else Formula(CellRef(daily_sheet, DELTA_COLUMN, past)))

    baseline = row - offsets[0]
    trend_cell: Cell = PLACEHOLDER
    if baseline >= first_row:
        trend_cell = difference(
            CellRef(target.sheet_name, target.start_column, target.start_row),
            CellRef(daily_sheet, DELTA_COLUMN, baseline),
        )

    trend_target = RangeDescriptor(
        target.sheet_name, trend_column, target.start_row, trend_column, target.start_row
    )
    return [
        WriteOperation(trend_target.to_a1(), MajorDimension.ROWS, [[trend_cell]]),
        _column_write(target, cells),
    ]


def week_window(row: int, weekday_index: int) -> tuple[int, int]:
    """First and last row of the week window ending ``weekday_index`` rows before ``row``."""
    end = row - weekday_index
    return end - (DAYS_PER_WEEK - 1), end


def weekly_summary(
    daily_sheet: str,
    row: int,
    weekday_index: int,
    target: RangeDescriptor,
    first_row: int = 2,
    bounds: ColumnBounds = DEFAULT_COLUMN_BOUNDS,
) -> list[WriteOperation]:
    """Sum of the daily deltas per week, one cell per week, oldest first.

    The trend column holds each week's sum minus the previous week's.
    """
    _check_target(target, target.height)
    trend_target = target.shifted(bounds)

    sums: list[Cell] = []
    trends: list[Cell] = []
    start, end = week_window(row, weekday_index)
    missing = missing_trend = False
    for _ in range(target.height):
        current = Sum(RangeRef(daily_sheet, DELTA_COLUMN, start, end))
        previous = Sum(RangeRef(daily_sheet, DELTA_COLUMN, start - DAYS_PER_WEEK, end - DAYS_PER_WEEK))
        missing = missing or start < first_row
        missing_trend = missing or missing_trend or start - DAYS_PER_WEEK < first_row

        sums.append(PLACEHOLDER if missing else Formula(current))
        trends.append(PLACEHOLDER if missing_trend else difference(current, previous))
        start -= DAYS_PER_WEEK
        end -= DAYS_PER_WEEK

    sums.reverse()
    trends.reverse()
    return [_column_write(target, sums), _column_write(trend_target, trends)]
