import argparse
import logging
import os
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import gspread
from dotenv import load_dotenv

from petition_tracker.batch import UpdateBatchAssembler
from petition_tracker.formulas import render_cell
from petition_tracker.models import SheetLayout, UpdateBatch
from petition_tracker.petition import ChangeOrgFetcher, MetricsFetcher, PetitionFetchError
from petition_tracker.sheets import SheetStore, create_sheets_client
from petition_tracker.timeline import TemporalIndexer, TimelineConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_REQUIRED_LAYOUT = (
    "hourly_sheet_name",
    "hourly_summary_range",
    "hourly_sheet_id",
    "hourly_chart_id",
    "daily_sheet_name",
    "daily_summary_range",
    "daily_sheet_id",
    "daily_chart_id",
)


def _offsets(text: str) -> tuple[int, ...]:
    try:
        return tuple(int(part) for part in text.split(",") if part.strip())
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid offsets: {text!r}") from e


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise argparse.ArgumentTypeError(f"unknown timezone: {name!r}") from e


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track petition signatures in Google Sheets")
    parser.add_argument(
        "--petition-name",
        default=os.environ.get("PETITION_NAME"),
        help="name of the petition to get metrics from",
    )
    parser.add_argument(
        "--spreadsheet-id",
        default=os.environ.get("GOOGLE_SHEET_ID"),
        help="id of the spreadsheet to update",
    )
    parser.add_argument(
        "--timezone",
        type=_zone,
        default=os.environ.get("PETITION_TIMEZONE", "Europe/Paris"),
        help="IANA zone the sheet rows and the midnight run follow",
    )

    parser.add_argument("--hourly-sheet-name", help="name of the sheet for hourly update")
    parser.add_argument("--hourly-summary-range", help="range in columns for the hourly summary")
    parser.add_argument("--hourly-sheet-id", type=int, help="id of the sheet for hourly update")
    parser.add_argument("--hourly-chart-id", type=int, help="id of the chart for hourly update")
    parser.add_argument(
        "--hourly-offsets",
        type=_offsets,
        default=(6, 12, 24, 48),
        help="comma-separated hours compared in the hourly summary",
    )
    parser.add_argument(
        "--hourly-trend", action="store_true", help="also write the trend column of the hourly summary"
    )

    parser.add_argument("--daily-sheet-name", help="name of the sheet for daily update")
    parser.add_argument("--daily-summary-range", help="range in columns for the daily summary")
    parser.add_argument("--daily-sheet-id", type=int, help="id of the sheet for daily update")
    parser.add_argument("--daily-chart-id", type=int, help="id of the chart for daily update")
    parser.add_argument("--weekly-summary-range", help="range in columns for the weekly summary")
    parser.add_argument("--sevenly-summary-range", help="range in columns for the 7-day summary")

    sub = parser.add_subparsers(dest="command")
    update_parser = sub.add_parser("update", help="Fetch metrics and update the spreadsheet")
    update_parser.add_argument(
        "--dry-run", action="store_true", help="print the operations instead of sending them"
    )
    sub.add_parser("charts", help="List the charts of the spreadsheet")
    return parser


def _layout_from_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> SheetLayout:
    missing = [name for name in _REQUIRED_LAYOUT if not getattr(args, name)]
    if not args.petition_name:
        missing.insert(0, "petition_name")
    if missing:
        parser.error("missing " + ", ".join("--" + name.replace("_", "-") for name in missing))

    return SheetLayout(
        hourly_sheet_name=args.hourly_sheet_name,
        hourly_sheet_id=args.hourly_sheet_id,
        hourly_chart_id=args.hourly_chart_id,
        hourly_summary_range=args.hourly_summary_range,
        daily_sheet_name=args.daily_sheet_name,
        daily_sheet_id=args.daily_sheet_id,
        daily_chart_id=args.daily_chart_id,
        daily_summary_range=args.daily_summary_range,
        weekly_summary_range=args.weekly_summary_range,
        sevenly_summary_range=args.sevenly_summary_range,
        hourly_offsets=args.hourly_offsets,
        hourly_trend=args.hourly_trend,
    )


def _print_batch(batch: UpdateBatch) -> None:
    print(f"Hourly row {batch.hourly_row}, daily row {batch.daily_row}")
    for write in batch.writes:
        values = [[render_cell(cell) for cell in line] for line in write.values]
        print(f"  {write.range} ({write.major_dimension.value}): {values}")
    for chart in batch.charts:
        print(f"  chart {chart.chart_id} on sheet {chart.sheet_id}: rows [0, {chart.domain.end_row})")


def update(
    layout: SheetLayout,
    petition_name: str,
    fetcher: MetricsFetcher,
    store: SheetStore | None,
    now: datetime | None = None,
    indexer: TemporalIndexer | None = None,
) -> UpdateBatch:
    """Fetch, assemble and apply one batch. ``store=None`` only builds it.

    The layout is checked before the petition is fetched, so a bad range
    costs no request.
    """
    assembler = UpdateBatchAssembler(layout, indexer=indexer or TemporalIndexer())
    assembler.validate()
    if now is None:
        now = assembler.indexer.now()
    signature, goal = fetcher.fetch(petition_name)
    batch = assembler.assemble(now, signature, goal)

    if store is not None:
        store.apply_writes(batch.writes)
        # Charts only point at rows written above
        store.apply_chart_updates(batch.charts)
    return batch


def _update(args: argparse.Namespace, layout: SheetLayout) -> None:
    indexer = TemporalIndexer(TimelineConfig(zone=args.timezone))
    UpdateBatchAssembler(layout, indexer=indexer).validate()
    store = None if args.dry_run else create_sheets_client(args.spreadsheet_id)
    batch = update(layout, args.petition_name, ChangeOrgFetcher(), store, indexer=indexer)
    if args.dry_run:
        _print_batch(batch)
    else:
        print(
            f"Wrote {len(batch.writes)} ranges and updated {len(batch.charts)} charts "
            f"(hourly row {batch.hourly_row})."
        )


def _list_charts(spreadsheet_id: str | None) -> None:
    client = create_sheets_client(spreadsheet_id)
    for sheet_title, sheet_id, chart_id, chart_title in client.list_charts():
        print(f"{sheet_title} (sheet {sheet_id}): chart {chart_id} {chart_title}".rstrip())


def run() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    parser = _build_parser()
    args = parser.parse_args()

    try:
        if args.command == "charts":
            _list_charts(args.spreadsheet_id)
            return
        if args.command is None:
            args.dry_run = False
        _update(args, _layout_from_args(parser, args))
    except (ValueError, PetitionFetchError, gspread.exceptions.APIError):
        logger.error("Run aborted", exc_info=True)
        raise SystemExit(1)
