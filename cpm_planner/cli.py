#!/usr/bin/env python3
"""
CPM Planner command line.

Loads a plan file, computes the CPM schedule, prints the critical path
report and optionally exports the schedule or tries a manual reschedule.

Usage:
    cpm-planner plan.csv
    cpm-planner plan.csv --output schedule.csv
    cpm-planner plan.csv --reschedule 12 3
    python -m cpm_planner --help
"""

import argparse
import logging
from typing import Optional, Sequence

from cpm_planner.analysis.critical_path import (
    analyze_critical_path,
    get_critical_chains,
    print_critical_path_report,
)
from cpm_planner.analysis.reschedule import reschedule_task
from cpm_planner.config.settings import settings
from cpm_planner.cpm.engine import compute_schedule
from cpm_planner.cpm.errors import (
    CyclicDependencyError,
    EmptyScheduleError,
    InvalidManualEditError,
)
from cpm_planner.cpm.network import TaskNetwork
from cpm_planner.data_loader import load_tasks
from cpm_planner.loaders.file_loader import FileLoader, schedule_rows
from cpm_planner.utils.logger import configure_logging

logger = logging.getLogger('cpm_planner')

EXIT_OK = 0
EXIT_LOAD_FAILED = 1
EXIT_CYCLE = 2
EXIT_INVALID_EDIT = 3
EXIT_EXPORT_FAILED = 4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cpm-planner',
        description='Compute the critical path schedule for a plan file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cpm-planner plan.csv                          # Print critical path report
  cpm-planner plan.csv -o schedule.csv          # Also export the schedule
  cpm-planner plan.csv --format json -o s.json  # Export as JSON
  cpm-planner plan.csv --reschedule 12 3        # Move task 12 three days later
        """
    )

    parser.add_argument('plan', type=str,
                        help='Delimited plan file (ID, WBS, Task Name, Start, Finish, Duration, Predecessors)')
    parser.add_argument('--delimiter', '-d', type=str, default=None,
                        help=f'Field delimiter (default: {settings.CSV_DELIMITER!r})')
    parser.add_argument('--output', '-o', type=str, default=None,
                        help='Export the computed schedule to this path')
    parser.add_argument('--format', choices=['csv', 'json'], default='csv',
                        help='Export format (default: csv)')
    parser.add_argument('--near-critical-days', type=int, default=None,
                        help=f'Near-critical float threshold (default: {settings.NEAR_CRITICAL_DAYS})')
    parser.add_argument('--reschedule', nargs=2, type=int, metavar=('TASK_ID', 'DAYS'),
                        help='Shift a task by DAYS and recompute before reporting')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Minimal output')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging('cpm_planner')

    problems = settings.validate_required_settings()
    if args.delimiter is not None and len(args.delimiter) != 1:
        problems.append(f"--delimiter must be a single character, got {args.delimiter!r}")
    if problems:
        for problem in problems:
            logger.error(f"Configuration error: {problem}")
        return EXIT_LOAD_FAILED

    try:
        loaded = load_tasks(args.plan, delimiter=args.delimiter)
    except FileNotFoundError:
        logger.error(f"Plan file not found: {args.plan}")
        return EXIT_LOAD_FAILED
    except EmptyScheduleError as e:
        logger.error(f"{e} ({e.skipped_rows} rows skipped)")
        return EXIT_LOAD_FAILED

    if loaded.skipped_rows:
        logger.warning(f"{loaded.skipped_rows} malformed rows skipped")

    network = TaskNetwork.from_tasks(loaded.tasks)
    logger.debug(f"Network statistics: {network.get_statistics()}")
    if network.dropped_references:
        logger.info(f"{len(network.dropped_references)} predecessor references outside the plan were ignored")

    try:
        if args.reschedule:
            task_id, days = args.reschedule
            change = reschedule_task(loaded.tasks, task_id, days)
            print(f"Task {task_id} ({change.task_name}) moved {days:+d} days: {change.get_slip_summary()}")
            result = change.schedule
        else:
            result = compute_schedule(loaded.tasks)
    except CyclicDependencyError as e:
        logger.error(f"Schedule not computed: {e}")
        return EXIT_CYCLE
    except InvalidManualEditError as e:
        logger.error(f"Edit rejected: {e}")
        return EXIT_INVALID_EDIT
    except ValueError as e:
        logger.error(str(e))
        return EXIT_INVALID_EDIT

    print(result.get_summary())

    if not args.quiet:
        analysis = analyze_critical_path(result, args.near_critical_days)
        print_critical_path_report(analysis)
        chains = get_critical_chains(result)
        if len(chains) > 1:
            print(f"\n{len(chains)} separate critical chains:")
            for chain in chains:
                print("  " + " -> ".join(str(tid) for tid in chain))

    if args.output:
        rows = schedule_rows(result)
        loader = FileLoader()
        if not loader.load(rows, file_path=args.output, format=args.format):
            return EXIT_EXPORT_FAILED
        if not loader.validate_load(len(rows)):
            return EXIT_EXPORT_FAILED
        print(f"Schedule saved to: {loader.file_path}")

    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
