from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, tzinfo
from enum import Enum
from zoneinfo import ZoneInfo


class TimeUnit(Enum):
    HOUR = timedelta(hours=1)
    DAY = timedelta(days=1)


@dataclass(frozen=True)
class EpochAnchor:
    """A fixed (instant, row) pair: ``instant`` is written at ``row``."""

    instant: datetime
    row: int
    unit: TimeUnit


# Zone of the production spreadsheet (CET/CEST)
DEFAULT_ZONE = ZoneInfo("Europe/Paris")

# Anchors of the production spreadsheet. The hourly one is wall time in the
# configured zone, the daily one is a UTC midnight (row 1 is the header, day 0
# is row 2).
HOURLY_ANCHOR = EpochAnchor(datetime(2024, 4, 15, 3, 0), 18, TimeUnit.HOUR)
DAILY_ANCHOR = EpochAnchor(datetime(2024, 3, 28, tzinfo=UTC), 2, TimeUnit.DAY)


@dataclass(frozen=True)
class TimelineConfig:
    hourly: EpochAnchor = HOURLY_ANCHOR
    daily: EpochAnchor = DAILY_ANCHOR
    zone: tzinfo = DEFAULT_ZONE
    first_row: int = 2
    midnight_hour: int = 0
    # datetime.weekday() numbering, 0 = Monday
    week_start: int = 0


def _utc_midnight(moment: datetime) -> datetime:
    return datetime(moment.year, moment.month, moment.day, tzinfo=UTC)


@dataclass(frozen=True)
class TemporalIndexer:
    config: TimelineConfig = field(default_factory=TimelineConfig)

    def now(self) -> datetime:
        return datetime.now(self.config.zone)

    def localize(self, moment: datetime) -> datetime:
        """Express ``moment`` in the configured zone.

        Naive values are wall time in that zone; their ``fold`` picks the
        repeated hour when clocks go back.
        """
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.config.zone)
        return moment.astimezone(self.config.zone)

    def hourly_row(self, now: datetime) -> int:
        anchor = self.config.hourly
        # Real elapsed time: a DST switch never skips or repeats a row
        elapsed = self.localize(now).astimezone(UTC) - self.localize(anchor.instant).astimezone(UTC)
        return anchor.row + elapsed // anchor.unit.value

    def daily_row(self, now: datetime) -> int:
        """Row of the local calendar day of ``now``.

        Both dates are re-stamped at UTC midnight before subtracting, so a
        23 or 25 hour local day still counts as exactly one row, and a run
        at local midnight is never pushed back to the previous day.
        """
        anchor = self.config.daily
        local = self.localize(now)
        days = (_utc_midnight(local) - _utc_midnight(anchor.instant)) // anchor.unit.value
        return anchor.row + days

    def is_midnight(self, now: datetime) -> bool:
        return self.localize(now).hour == self.config.midnight_hour

    def weekday_index(self, now: datetime) -> int:
        return (self.localize(now).weekday() - self.config.week_start) % 7
