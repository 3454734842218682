#!/usr/bin/env python3
"""Run LeaseKeeper's scheduled jobs.

Meant to be called from cron (see DESIGN.md for the crontab):

    python jobs.py run overdue-payments
    python jobs.py run maintenance-escalation
    python jobs.py run-daily --date 2024-03-05
    python jobs.py list

A run already recorded in job_runs for the same slot is skipped; pass
--force to run it again.
"""

import argparse
import logging
import sys
from datetime import datetime, time

from config import get_settings
from services.job_runner import DAILY_JOBS, JOBS, JobResult, run_daily_jobs, run_job
from utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> datetime:
    try:
        return datetime.combine(datetime.strptime(value, "%Y-%m-%d").date(), time(hour=9))
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from None


def _report(results: list[JobResult]) -> int:
    for result in results:
        line = f"{result.job_name} [{result.run_key}]: {result.status}"
        if result.status == "succeeded":
            line += f" ({result.processed} processed)"
        elif result.error:
            line += f" ({result.error})"
        print(line)
    return 1 if any(result.status == "failed" for result in results) else 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the requested jobs."""
    parser = argparse.ArgumentParser(description="LeaseKeeper scheduled jobs")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one job")
    run_parser.add_argument("job", choices=sorted(JOBS), help="Job name")

    daily_parser = subparsers.add_parser("run-daily", help=f"Run {', '.join(DAILY_JOBS)}")

    for sub in (run_parser, daily_parser):
        sub.add_argument(
            "--date",
            type=_parse_date,
            default=None,
            help="Run as of this day, YYYY-MM-DD (default: now)",
        )
        sub.add_argument("--force", action="store_true", help="Run even if this slot already ran")

    subparsers.add_parser("list", help="List available jobs")

    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(level=settings.log_level, format_type=settings.log_format)

    if args.command == "list":
        for name, job in JOBS.items():
            print(f"{name}\t{'daily' if job.daily else 'every 4 hours'}")
        return 0

    if args.command == "run":
        results = [run_job(args.job, now=args.date, force=args.force)]
    else:
        results = run_daily_jobs(now=args.date, force=args.force)

    return _report(results)


if __name__ == "__main__":
    sys.exit(main())
