import pytest

from petition_tracker.formulas import (
    PLACEHOLDER,
    CellRef,
    Formula,
    RangeRef,
    Sum,
    difference,
    trend,
)
from petition_tracker.models import MajorDimension
from petition_tracker.ranges import ConfigurationError, parse_range
from petition_tracker.summaries import (
    daily_summary,
    rolling_summary,
    week_window,
    weekly_summary,
)


def hourly(row: int) -> CellRef:
    return CellRef("Hourly", "B", row)


def delta(row: int) -> CellRef:
    return CellRef("Daily", "C", row)


def week_sum(start: int, end: int) -> Sum:
    return Sum(RangeRef("Daily", "C", start, end))


class TestRollingSummary:
    def test_placeholders_where_history_is_missing(self) -> None:
        writes = rolling_summary("Hourly", "B", 18, [6, 12, 24, 48], parse_range("Chart!F2:F5"))

        assert len(writes) == 1
        assert writes[0].range == "Chart!F2:F5"
        assert writes[0].major_dimension is MajorDimension.COLUMNS
        assert writes[0].values == [
            [
                difference(hourly(18), hourly(12)),
                difference(hourly(18), hourly(6)),
                PLACEHOLDER,
                PLACEHOLDER,
            ]
        ]

    def test_full_history(self) -> None:
        writes = rolling_summary("Hourly", "B", 100, [6, 12, 24, 48], parse_range("Chart!F2:F5"))
        assert writes[0].values[0][3] == difference(hourly(100), hourly(52))

    def test_first_valid_row_is_inclusive(self) -> None:
        writes = rolling_summary("Hourly", "B", 8, [6, 7], parse_range("Chart!F2:F3"))
        assert writes[0].values == [[difference(hourly(8), hourly(2)), PLACEHOLDER]]

    def test_placeholder_latches_for_longer_windows(self) -> None:
        writes = rolling_summary(
            "Hourly", "B", 30, [6, 12, 24, 48], parse_range("Chart!F2:F5"), first_row=10
        )
        cells = writes[0].values[0]
        assert cells[:2] == [difference(hourly(30), hourly(24)), difference(hourly(30), hourly(18))]
        assert cells[2:] == [PLACEHOLDER, PLACEHOLDER]

    def test_trend_column(self) -> None:
        writes = rolling_summary(
            "Hourly", "B", 18, [6, 12, 24, 48], parse_range("Chart!F2:F5"), with_trend=True
        )

        assert len(writes) == 2
        assert writes[1].range == "Chart!G2:G5"
        assert writes[1].values == [
            [trend(hourly(18), hourly(12), hourly(6)), PLACEHOLDER, PLACEHOLDER, PLACEHOLDER]
        ]

    def test_trend_placeholder_follows_value_placeholder(self) -> None:
        writes = rolling_summary(
            "Hourly", "B", 20, [6, 12], parse_range("Chart!F2:F3"), with_trend=True
        )
        values, trends = writes[0].values[0], writes[1].values[0]
        assert values == [difference(hourly(20), hourly(14)), difference(hourly(20), hourly(8))]
        assert trends == [trend(hourly(20), hourly(14), hourly(8)), PLACEHOLDER]

    def test_doubling_and_explicit_offsets_share_one_path(self) -> None:
        doubling = [6 * 2**i for i in range(4)]
        explicit = (6, 12, 24, 48)
        target = parse_range("Chart!F2:F5")
        assert rolling_summary("Hourly", "B", 60, doubling, target) == rolling_summary(
            "Hourly", "B", 60, explicit, target
        )

    def test_descending_offsets_keep_their_order(self) -> None:
        writes = rolling_summary(
            "Hourly", "B", 18, [48, 24, 12, 6], parse_range("Chart!F2:F5"), with_trend=True
        )
        assert writes[0].values == [
            [
                PLACEHOLDER,
                PLACEHOLDER,
                difference(hourly(18), hourly(6)),
                difference(hourly(18), hourly(12)),
            ]
        ]
        assert writes[1].values == [
            [PLACEHOLDER, PLACEHOLDER, PLACEHOLDER, trend(hourly(18), hourly(12), hourly(6))]
        ]

    def test_offset_order_only_permutes_cells(self) -> None:
        ascending = rolling_summary("Hourly", "B", 30, [6, 12, 24, 48], parse_range("Chart!F2:F5"))
        descending = rolling_summary("Hourly", "B", 30, [48, 24, 12, 6], parse_range("Chart!F2:F5"))
        assert descending[0].values[0] == ascending[0].values[0][::-1]

    @pytest.mark.parametrize("offsets", [[6, 0], [-6, 12], []])
    def test_unusable_offsets_are_rejected(self, offsets: list[int]) -> None:
        with pytest.raises(ConfigurationError, match="offsets"):
            rolling_summary("Hourly", "B", 60, offsets, parse_range("Chart!F2:F3"))

    def test_target_size_must_match_offsets(self) -> None:
        with pytest.raises(ConfigurationError, match="expected 4"):
            rolling_summary("Hourly", "B", 60, [6, 12, 24, 48], parse_range("Chart!F2:F4"))

    def test_target_must_be_one_column(self) -> None:
        with pytest.raises(ConfigurationError, match="single column"):
            rolling_summary("Hourly", "B", 60, [6, 12], parse_range("Chart!F2:G3"))

    def test_trend_needs_a_free_column(self) -> None:
        with pytest.raises(ConfigurationError, match="out of range"):
            rolling_summary("Hourly", "B", 60, [6, 12], parse_range("Chart!Z2:Z3"), with_trend=True)


class TestDailySummary:
    def test_offsets_follow_target_height(self) -> None:
        writes = daily_summary("Daily", 40, parse_range("Chart!F28:F31"))

        trend_write, summary_write = writes
        assert trend_write.range == "Chart!G28"
        assert trend_write.major_dimension is MajorDimension.ROWS
        assert trend_write.values == [[difference(CellRef("Chart", "F", 28), delta(36))]]

        assert summary_write.range == "Chart!F28:F31"
        assert summary_write.major_dimension is MajorDimension.COLUMNS
        assert summary_write.values == [
            [Formula(delta(37)), Formula(delta(38)), Formula(delta(39)), Formula(delta(40))]
        ]

    def test_rendered_text(self) -> None:
        trend_write, summary_write = daily_summary("Daily", 40, parse_range("Chart!F28:F31"))
        assert trend_write.to_value_range()["values"] == [["='Chart'!F28-'Daily'!C36"]]
        assert summary_write.to_value_range()["values"][0][0] == "='Daily'!C37"

    def test_young_series_uses_placeholders(self) -> None:
        trend_write, summary_write = daily_summary("Daily", 4, parse_range("Chart!F28:F31"))
        assert trend_write.values == [[PLACEHOLDER]]
        assert summary_write.values == [
            [PLACEHOLDER, Formula(delta(2)), Formula(delta(3)), Formula(delta(4))]
        ]


class TestWeekWindow:
    def test_wednesday(self) -> None:
        assert week_window(100, 2) == (92, 98)

    def test_monday(self) -> None:
        assert week_window(100, 0) == (94, 100)


class TestWeeklySummary:
    def test_wednesday_windows(self) -> None:
        sums, trends = weekly_summary("Daily", 100, 2, parse_range("Chart!H28:H30"))

        assert sums.range == "Chart!H28:H30"
        assert trends.range == "Chart!I28:I30"
        # Oldest week at the top
        assert sums.values == [
            [Formula(week_sum(78, 84)), Formula(week_sum(85, 91)), Formula(week_sum(92, 98))]
        ]
        assert trends.values == [
            [
                difference(week_sum(78, 84), week_sum(71, 77)),
                difference(week_sum(85, 91), week_sum(78, 84)),
                difference(week_sum(92, 98), week_sum(85, 91)),
            ]
        ]

    def test_current_week_rendered(self) -> None:
        sums, trends = weekly_summary("Daily", 100, 2, parse_range("Chart!H28:H28"))
        assert sums.to_value_range()["values"] == [["=SUM('Daily'!C92:C98)"]]
        assert trends.to_value_range()["values"] == [
            ["=SUM('Daily'!C92:C98)-SUM('Daily'!C85:C91)"]
        ]

    def test_insufficient_history(self) -> None:
        sums, trends = weekly_summary("Daily", 12, 0, parse_range("Chart!H28:H29"))
        assert sums.values == [[PLACEHOLDER, Formula(week_sum(6, 12))]]
        assert trends.values == [[PLACEHOLDER, PLACEHOLDER]]

    def test_multi_column_target_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            weekly_summary("Daily", 100, 2, parse_range("Chart!H28:I30"))
