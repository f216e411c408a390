from petition_tracker.models import SheetLayout


def make_layout(**overrides: object) -> SheetLayout:
    """Create a SheetLayout with sensible defaults. Override any field via kwargs."""
    defaults = {
        "hourly_sheet_name": "Hourly",
        "hourly_sheet_id": 111,
        "hourly_chart_id": 1001,
        "hourly_summary_range": "Chart!F2:F5",
        "daily_sheet_name": "Daily",
        "daily_sheet_id": 222,
        "daily_chart_id": 2002,
        "daily_summary_range": "Chart!F28:F31",
    }
    defaults.update(overrides)
    return SheetLayout(**defaults)


def make_stats_payload(signature: int = 12345, goal: int = 20000) -> list[dict]:
    """GraphQL response body as returned by change.org."""
    return [
        {
            "data": {
                "petitionStats": {
                    "signatureState": {
                        "signatureCount": {"displayed": signature},
                        "signatureGoal": {"displayed": goal},
                    }
                }
            }
        }
    ]
