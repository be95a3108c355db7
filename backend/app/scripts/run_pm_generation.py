#!/usr/bin/env python3
"""
Run one preventive maintenance due pass from the shell.

Usage:
    python -m app.scripts.run_pm_generation [--as-of YYYY-MM-DD] [--store-id ID]

Exits 0 when every due schedule was handled, 1 when some schedules failed or
need review, and 2 when the pass could not run at all.
"""

import argparse
import sys
from datetime import date

from app.core.config import settings
from app.core.db import get_engine, session_factory_for
from app.core.observability import set_correlation_id, setup_structured_logging
from app.domain.maintenance.value_objects.enums import PassOutcome
from app.domain.shared.exceptions import GenerationPassAbortedError
from app.infrastructure.database.service_dependencies import build_generation_service


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate due PM work orders")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Run as of this day (default: today in the reference time zone)",
    )
    parser.add_argument("--store-id", default=None, help="Restrict to one store")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main execution function."""
    args = parse_args(argv)
    setup_structured_logging()
    set_correlation_id()

    print(f"Running due pass against {settings.POSTGRES_SERVER}/{settings.POSTGRES_DB}")

    service = build_generation_service(session_factory_for(get_engine()))
    try:
        report = service.run_generation_pass(today=args.as_of, store_id=args.store_id)
    except GenerationPassAbortedError as e:
        print(f"Due pass aborted: {e.reason}")
        return 2

    print(f"As of {report.as_of.isoformat()}: {report.summary()}")
    for item in report.failed + report.needs_review:
        print(f"  {item.schedule_id}: {item.code.value} ({item.error})")

    return 0 if report.outcome == PassOutcome.SUCCESS else 1


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
