#!/usr/bin/env python3
"""
Unified CLI for the maintenance schedule engine.

Commands:
  run            - Run one evaluation pass and generate due work orders
  status         - Show which schedules are due without generating anything
  preview        - List upcoming due dates for a schedule
  thresholds     - Show usage schedules approaching their mileage/hours limit
  update-reading - Record an asset's current mileage and/or hours
"""

import argparse
import sys
from datetime import date, datetime
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from maintenance import (
    LoggingNotifier,
    PassSummary,
    ScheduleRunner,
    SqliteCycleLedger,
    ThresholdAlert,
    YamlAssetReadings,
    YamlScheduleStore,
    YamlWorkOrderLog,
    approaching_thresholds,
    evaluate,
    load_schedule_file,
    preview_schedule_occurrences,
    save_asset_reading,
)
from maintenance.logger import init_logging
from maintenance.settings import settings
from maintenance.thresholds import UsageStatus

# =============================================================================
# Formatting helpers
# =============================================================================


def format_number(value: Optional[float]) -> str:
    """Format mileage/hours for display."""
    return f"{value:,.0f}" if value is not None else "-"


def format_date(value: Optional[date]) -> str:
    """Format a date for display."""
    return value.isoformat() if value is not None else "-"


def format_usage(usage: Optional[UsageStatus]) -> str:
    """Format usage progress as 'current / next (pct%)'."""
    if usage is None:
        return "-"
    return (
        f"{format_number(usage.current)} / {format_number(usage.next_trigger)} "
        f"({usage.progress}%)"
    )


def parse_as_of(value: Optional[str]) -> datetime:
    """Parse --as-of (YYYY-MM-DD or ISO timestamp), default now."""
    if not value:
        return datetime.now()
    if len(value) == 10:
        return datetime.combine(date.fromisoformat(value), datetime.min.time())
    return datetime.fromisoformat(value)


# =============================================================================
# Run command
# =============================================================================


def make_summary_table(summary: PassSummary) -> List[List[str]]:
    """Convert pass counts to table rows."""
    return [
        ["Checked", str(summary.checked)],
        ["Fired", str(summary.fired)],
        ["Skipped (not due)", str(summary.skipped_not_due)],
        ["Skipped (duplicate)", str(summary.skipped_duplicate)],
        ["Errors", str(summary.errors)],
    ]


def cmd_run(args):
    """Run one evaluation pass."""
    runner = ScheduleRunner(
        store=YamlScheduleStore(args.schedule_file),
        readings=YamlAssetReadings(args.schedule_file),
        generator=YamlWorkOrderLog(args.schedule_file),
        ledger=SqliteCycleLedger(args.ledger),
        notifier=LoggingNotifier(),
    )
    as_of = parse_as_of(args.as_of)
    summary = runner.run_evaluation_pass(as_of=as_of, organisation_id=args.org)

    print(f"Evaluation pass as of {as_of.date().isoformat()}")
    print(tabulate(make_summary_table(summary), tablefmt="simple"))
    print()

    fired = [o for o in summary.outcomes if o.action_ids]
    if fired:
        print("GENERATED:")
        rows = [
            [o.schedule_id, ", ".join(o.action_ids), "; ".join(o.messages)]
            for o in fired
        ]
        print(tabulate(rows, headers=["Schedule", "Work Orders", "Trigger"], tablefmt="simple"))
        print()

    if summary.degraded_schedule_ids:
        print("TIME-ONLY (no usage reading):")
        for schedule_id in summary.degraded_schedule_ids:
            print(f"  {schedule_id}")
        print()

    if summary.errored_schedule_ids:
        print("ERRORS:")
        for outcome in summary.outcomes:
            if outcome.schedule_id in summary.errored_schedule_ids:
                print(f"  {outcome.schedule_id}: {outcome.error}")
        return 1

    return 0


# =============================================================================
# Status command
# =============================================================================


def make_status_table(schedule_file, today: date) -> List[List[str]]:
    """Evaluate each schedule (without firing) and build table rows."""
    rows = []
    for schedule in schedule_file.schedules:
        if not schedule.is_active:
            rows.append([schedule.schedule_id, schedule.name, "-", "inactive"])
            continue
        reading = schedule_file.readings.get(schedule.asset_id)
        result = evaluate(schedule, reading, today)
        rows.append(
            [
                schedule.schedule_id,
                schedule.name,
                format_date(schedule.next_due_date),
                str(result.reason) + (" (time only)" if result.degraded else ""),
            ]
        )
    return rows


def cmd_status(args):
    """Show which schedules are due."""
    schedule_file = load_schedule_file(args.schedule_file)
    today = parse_as_of(args.as_of).date()

    print(f"Schedules: {len(schedule_file.schedules)} (as of {today.isoformat()})")
    print()
    headers = ["Schedule", "Name", "Next Due", "Trigger"]
    print(tabulate(make_status_table(schedule_file, today), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Preview command
# =============================================================================


def cmd_preview(args):
    """List upcoming due dates for a schedule."""
    schedule_file = load_schedule_file(args.schedule_file)
    schedule = schedule_file.get_schedule(args.schedule_id)

    if schedule is None:
        print(f"Error: Unknown schedule '{args.schedule_id}'")
        print("\nAvailable schedules:")
        for s in schedule_file.schedules:
            print(f"  {s.schedule_id}  ({s.name})")
        return 1

    if not 1 <= args.count <= settings.PREVIEW_MAX:
        print(f"Error: --count must be between 1 and {settings.PREVIEW_MAX}")
        return 1

    occurrences = preview_schedule_occurrences(schedule, args.count)
    print(f"Schedule: {schedule.name}")
    print(f"Showing: {len(occurrences)} occurrence(s)")
    print()
    if not occurrences:
        print("No occurrences before end date.")
        return 0

    rows = [[format_date(o.due_date), format_date(o.lead_date)] for o in occurrences]
    print(tabulate(rows, headers=["Due", "Actionable From"], tablefmt="simple"))
    return 0


# =============================================================================
# Thresholds command
# =============================================================================


def make_thresholds_table(alerts: List[ThresholdAlert]) -> List[List[str]]:
    """Convert threshold alerts to table rows."""
    return [
        [
            alert.schedule.schedule_id,
            alert.schedule.asset_id,
            alert.urgency.upper(),
            format_usage(alert.mileage),
            format_usage(alert.hours),
        ]
        for alert in alerts
    ]


def cmd_thresholds(args):
    """Show usage schedules approaching their thresholds."""
    schedule_file = load_schedule_file(args.schedule_file)
    alerts = approaching_thresholds(schedule_file.schedules, schedule_file.readings)

    if not alerts:
        print("No schedules approaching usage thresholds.")
        return 0

    headers = ["Schedule", "Asset", "Urgency", "Mileage", "Hours"]
    print(tabulate(make_thresholds_table(alerts), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Update Reading command
# =============================================================================


def cmd_update_reading(args):
    """Record an asset's current mileage and/or hours."""
    if args.mileage is None and args.hours is None:
        print("Error: provide --mileage and/or --hours")
        return 1

    print(f"Asset: {args.asset_id}")
    if args.mileage is not None:
        print(f"  Mileage: {args.mileage:,.0f}")
    if args.hours is not None:
        print(f"  Hours:   {args.hours:,.1f}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_asset_reading(args.schedule_file, args.asset_id, args.mileage, args.hours)
    print("Reading updated.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Maintenance schedule engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s schedules/fleet.yaml run
  %(prog)s schedules/fleet.yaml run --as-of 2025-03-01 --org acme
  %(prog)s schedules/fleet.yaml status
  %(prog)s schedules/fleet.yaml preview oil-change --count 5
  %(prog)s schedules/fleet.yaml thresholds
  %(prog)s schedules/fleet.yaml update-reading truck-7 --mileage 58000
""",
    )
    parser.add_argument(
        "schedule_file",
        type=Path,
        help="Path to schedule YAML file",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Run subcommand
    run_parser = subparsers.add_parser(
        "run", help="Run one evaluation pass and generate due work orders"
    )
    run_parser.add_argument(
        "--as-of",
        type=str,
        help="Evaluation date (YYYY-MM-DD, default: now)",
    )
    run_parser.add_argument(
        "--org",
        type=str,
        help="Only evaluate schedules of this organisation",
    )
    run_parser.add_argument(
        "--ledger",
        type=Path,
        default=Path(settings.LEDGER_PATH),
        help=f"Cycle ledger sqlite file (default: {settings.LEDGER_PATH})",
    )

    # Status subcommand
    status_parser = subparsers.add_parser(
        "status", help="Show which schedules are due without generating anything"
    )
    status_parser.add_argument(
        "--as-of",
        type=str,
        help="Evaluation date (YYYY-MM-DD, default: today)",
    )

    # Preview subcommand
    preview_parser = subparsers.add_parser(
        "preview", help="List upcoming due dates for a schedule"
    )
    preview_parser.add_argument("schedule_id", type=str, help="Schedule id")
    preview_parser.add_argument(
        "--count",
        type=int,
        default=settings.PREVIEW_DEFAULT,
        help=f"Number of occurrences (default: {settings.PREVIEW_DEFAULT})",
    )

    # Thresholds subcommand
    subparsers.add_parser(
        "thresholds", help="Show usage schedules approaching their limits"
    )

    # Update Reading subcommand
    reading_parser = subparsers.add_parser(
        "update-reading", help="Record an asset's current mileage and/or hours"
    )
    reading_parser.add_argument("asset_id", type=str, help="Asset id")
    reading_parser.add_argument("--mileage", type=float, help="Current mileage")
    reading_parser.add_argument("--hours", type=float, help="Current operating hours")
    reading_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without saving",
    )

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    init_logging()

    # Validate schedule file exists
    if not args.schedule_file.exists():
        print(f"Error: File not found: {args.schedule_file}")
        return 1

    # Dispatch to command handler
    if args.command == "run":
        return cmd_run(args)
    elif args.command == "status":
        return cmd_status(args)
    elif args.command == "preview":
        return cmd_preview(args)
    elif args.command == "thresholds":
        return cmd_thresholds(args)
    elif args.command == "update-reading":
        return cmd_update_reading(args)

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
