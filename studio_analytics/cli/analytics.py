# ==============================================================================
# Analytics Commands
# ==============================================================================
"""
Reporting commands for the studio analytics CLI.

Displays the visitor funnel and raw storage totals.
"""

import json

import typer

from studio_analytics.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    EndOption,
    JsonOption,
    StartOption,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header,
    _truncate,
    open_service,
    print_error,
)

DURATION_LABELS = {
    "under_30s": "Under 30s",
    "30s_to_2m": "30s - 2m",
    "2m_to_5m": "2m - 5m",
    "over_5m": "Over 5m",
}


def _format_duration(seconds: int) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs:02d}s" if minutes else f"{secs}s"


# ==============================================================================
# Commands
# ==============================================================================


def show_funnel(
    start: StartOption = None,
    end: EndOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the visitor funnel report.

    Sessions without any filter use or scrolling count as inactive and are
    left out of every statistic except the inactive count.

    Examples:
        studio-analytics funnel                          # Formatted report
        studio-analytics funnel --start 2025-01-01       # From a date
        studio-analytics funnel --json                   # JSON output for scripting
    """
    with open_service() as service:
        try:
            report = service.funnel(start, end)
        except Exception as e:
            print_error(f"Failed to fetch funnel data: {e}")
            raise typer.Exit(1)

    if json_output:
        print(json.dumps(report, indent=2, default=str))
        return

    W = BOX_WIDTH
    active = len(report["activeJourneys"])

    print()
    print(_box_header("VISITOR FUNNEL", W))
    print(_empty_line(W))

    rows = [
        ("Active sessions", f"{active:,}"),
        ("  -> Visited", f"{report['totalVisitors']:,}"),
        ("  -> Used filters", f"{report['usedFilters']:,}"),
        ("  -> Clicked registration", f"{report['clickedRegistration']:,}"),
        ("Inactive sessions", f"{report['inactiveJourneys']:,}"),
        ("Conversion rate", f"{float(report['conversionRate']):.2f}%"),
        ("Avg duration", _format_duration(report["avgDuration"])),
    ]
    for label, value in rows:
        print(_box_line(f"  {label:<30}{value:>20}", W))
    print(_empty_line(W))

    print(_section_header("Duration", W))
    for key, count in report["durationDistribution"].items():
        print(_box_line(f"  {DURATION_LABELS.get(key, key):<30}{count:>20,}", W))
    print(_empty_line(W))

    print(_section_header("Filter dimensions used", W))
    for used, count in report["filterUsageBreakdown"].items():
        print(_box_line(f"  {used!s:<30}{count:>20,}", W))
    print(_empty_line(W))

    popular = report["popularFilters"]
    print(_section_header("Popular filters", W))
    by_type = ", ".join(f"{k}={v}" for k, v in popular["byType"].items())
    print(_box_line(f"  {C.DIM}{_truncate(by_type, W - 6)}{C.RESET}", W))
    for entry in popular["topFilters"]:
        print(_box_line(f"  {I.BULLET} {_truncate(entry['filter'], 40):<40}{entry['count']:>10,}", W))
    print(_empty_line(W))

    print(_section_header("Popular classes", W))
    if not report["popularClasses"]:
        print(_box_line(f"  {C.DIM}No registration clicks{C.RESET}", W))
    for entry in report["popularClasses"]:
        name = str(entry.get("class_name") or entry.get("className") or entry.get("class_id") or "?")
        print(_box_line(f"  {I.BULLET} {_truncate(name, 40):<40}{entry['count']:>10,}", W))
    print(_empty_line(W))
    print(_box_bottom(W))
    print()


def show_summary(
    start: StartOption = None,
    end: EndOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show stored session and event totals.

    Examples:
        studio-analytics summary
        studio-analytics summary --json     # Full rows as JSON
    """
    with open_service() as service:
        try:
            summary = service.summary(start, end)
        except Exception as e:
            print_error(f"Failed to fetch analytics: {e}")
            raise typer.Exit(1)

    if json_output:
        print(json.dumps(summary, indent=2, default=str))
        return

    event_types: dict[str, int] = {}
    for event in summary["events"]:
        event_types[event["event_type"]] = event_types.get(event["event_type"], 0) + 1

    W = BOX_WIDTH
    print()
    print(_box_header("ANALYTICS SUMMARY", W))
    print(_empty_line(W))
    print(_box_line(f"  {'Sessions':<30}{summary['totalSessions']:>20,}", W))
    print(_box_line(f"  {'Events':<30}{summary['totalEvents']:>20,}", W))
    print(_empty_line(W))
    if event_types:
        print(_section_header("Events by type", W))
        for event_type, count in sorted(event_types.items(), key=lambda kv: -kv[1]):
            print(_box_line(f"  {C.WHITE}{event_type:<30}{C.RESET}{count:>20,}", W))
        print(_empty_line(W))
    print(_box_bottom(W))
    print()
