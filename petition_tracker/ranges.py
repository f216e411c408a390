from __future__ import annotations

import re
from dataclasses import dataclass

# Sheet!F28:G31, Sheet!F28:31 (end column implied) or Sheet!F28
_RANGE_PATTERN = re.compile(
    r"^(?P<sheet>'(?:[^']|'')+'|[^!']+)!"
    r"(?P<start_col>[A-Za-z]+)(?P<start_row>[0-9]+)"
    r"(?::(?P<end_col>[A-Za-z]*)(?P<end_row>[0-9]+))?$"
)
_PLAIN_SHEET_NAME = re.compile(r"^[A-Za-z0-9_]+$")


class ConfigurationError(ValueError):
    """Raised for malformed range strings or unusable columns."""


@dataclass(frozen=True)
class ColumnBounds:
    first: str = "A"
    # Incrementing the last letter would need a two-letter rollover
    last: str = "Z"


DEFAULT_COLUMN_BOUNDS = ColumnBounds()


def quoted(name: str) -> str:
    """Sheet name in single quotes, embedded quotes doubled (``Bob's`` -> ``'Bob''s'``)."""
    escaped = name.replace("'", "''")
    return f"'{escaped}'"


def quote_sheet_name(name: str) -> str:
    if _PLAIN_SHEET_NAME.match(name):
        return name
    return quoted(name)


@dataclass(frozen=True)
class RangeDescriptor:
    sheet_name: str
    start_column: str
    start_row: int
    end_column: str
    end_row: int

    @property
    def height(self) -> int:
        return self.end_row - self.start_row + 1

    def to_a1(self) -> str:
        sheet = quote_sheet_name(self.sheet_name)
        start = f"{self.start_column}{self.start_row}"
        end = f"{self.end_column}{self.end_row}"
        if start == end:
            return f"{sheet}!{start}"
        return f"{sheet}!{start}:{end}"

    def shifted(self, bounds: ColumnBounds = DEFAULT_COLUMN_BOUNDS) -> RangeDescriptor:
        """Return the same rows one column to the right (used for trend columns)."""
        return RangeDescriptor(
            sheet_name=self.sheet_name,
            start_column=next_column(self.start_column, bounds),
            start_row=self.start_row,
            end_column=next_column(self.end_column, bounds),
            end_row=self.end_row,
        )


def parse_range(value: str) -> RangeDescriptor:
    """Parse an A1 range such as ``Chart!F28:F31`` into a RangeDescriptor.

    The end column may be omitted (``Chart!F28:31``), in which case it is the
    start column. A single cell (``Chart!F28``) gives equal start and end.
    """
    match = _RANGE_PATTERN.match(value.strip())
    if match is None:
        raise ConfigurationError(f"invalid range: {value!r}")

    sheet = match.group("sheet")
    if sheet.startswith("'"):
        sheet = sheet[1:-1].replace("''", "'")
    start_col = match.group("start_col").upper()
    start_row = int(match.group("start_row"))

    if match.group("end_row") is None:
        end_col, end_row = start_col, start_row
    else:
        end_col = (match.group("end_col") or start_col).upper()
        end_row = int(match.group("end_row"))

    if start_row < 1:
        raise ConfigurationError(f"invalid range: {value!r} (rows are one-based)")
    if start_row > end_row:
        raise ConfigurationError(f"invalid range: {value!r} (start row after end row)")

    return RangeDescriptor(
        sheet_name=sheet,
        start_column=start_col,
        start_row=start_row,
        end_column=end_col,
        end_row=end_row,
    )


def next_column(column: str, bounds: ColumnBounds = DEFAULT_COLUMN_BOUNDS) -> str:
    """Return the column right of ``column`` (e.g. 'B' -> 'C')."""
    if len(column) != 1:
        raise ConfigurationError(f"invalid column: {column!r}")
    if column < bounds.first or column >= bounds.last:
        raise ConfigurationError(f"column out of range: {column!r}")
    return chr(ord(column) + 1)
