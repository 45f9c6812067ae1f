"""Command-line entry point: print the yearly summary and a year breakdown."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import pandas as pd

from .config import DEFAULT_SEP, DEFAULT_SORT, LOG_LEVEL, SALARY_SOURCE
from .data_manager import load_engine
from .errors import DataUnavailableError
from .plotting import format_usd

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Summarize salary records per work year and, optionally, break "
            "one year down by job title."
        )
    )
    parser.add_argument(
        "--source",
        default=SALARY_SOURCE,
        help="Path or URL to the salary CSV (default: data/salary_data.csv).",
    )
    parser.add_argument(
        "--sep",
        default=DEFAULT_SEP,
        help=f"Delimiter used in the salary CSV (default: '{DEFAULT_SEP}').",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=None,
        help="Also list job-title counts for this work year.",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help="Logging level (default: SALARY_LOG_LEVEL or INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        engine = load_engine(args.source, sep=args.sep)
    except DataUnavailableError as exc:
        print(f"No data: {exc}", file=sys.stderr)
        return 1

    summary = engine.yearly_summary().sort_values(DEFAULT_SORT)
    display = summary.assign(average_salary=summary["average_salary"].map(format_usd))

    print("\n--- YEARLY SUMMARY ---")
    print(f"Records: {engine.record_count} | Skipped rows: {engine.skipped_rows}")
    print(display.to_string(index=False))

    if args.year is not None:
        breakdown = engine.job_title_breakdown(args.year).sort_values(
            ["total_jobs", "job_title"], ascending=[False, True]
        )
        print(f"\n--- JOB TITLES IN {args.year} ---")
        if breakdown.empty:
            years = ", ".join(str(y) for y in engine.years())
            print(f"No jobs recorded for {args.year}. Available years: {years}")
        else:
            with pd.option_context("display.max_rows", None):
                print(breakdown.to_string(index=False))
    return 0
