#!/usr/bin/env python3
"""
Import legacy outreach log interactions into Street Reach.

This script is used by program staff to load service interactions from the
legacy log (exported to CSV) and attach them to existing clients.

The import process:
1. Loads every client from the record store
2. Resolves each name in the People column to exactly one client
3. Creates an encounter per resolved client, with service flags from the
   Sub Type column
4. Recalculates contact counts and last contact dates

Names that do not resolve are listed at the end; add the client or an AKA
and re-run with --replace.

Usage:
    python scripts/import_log_interactions.py logreport.csv
    python scripts/import_log_interactions.py logreport.csv --dry-run

Requirements:
    - SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY and SUPABASE_JWT_SECRET set in
      the environment or .env
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from streetreach.exceptions import StoreError
from streetreach.import_.log_csv_parser import parse_log_csv
from streetreach.import_.log_importer import LogImportReport, import_log_entries
from streetreach.services.record_store import create_record_store


def print_report(report: LogImportReport) -> None:
    title = "Dry Run Complete" if report.dry_run else "Import Complete"
    print(f"\n=== {title} ===")
    print(f"Total log entries: {report.total_rows}")
    verb = "would be imported" if report.dry_run else "imported"
    print(f"Interactions {verb}: {report.imported}")
    print(f"Skipped (no people): {report.skipped}")
    print(f"No match found: {report.no_match}")
    print(f"Errors: {report.errors}")

    if report.subtype_counts:
        print("\n=== Service Subtype Counts ===")
        for subtype, count in sorted(
            report.subtype_counts.items(), key=lambda item: item[1], reverse=True
        ):
            print(f"  {subtype}: {count}")

    if report.unmatched_names:
        print("\n=== Unmatched Names ===")
        for name in report.unmatched_names:
            print(f" - {name}")

    if not report.dry_run:
        print(f"\nUpdated contact counts for {report.persons_updated} persons")


async def run(file_path: Path, dry_run: bool, replace: bool) -> LogImportReport:
    entries = parse_log_csv(file_path.read_text(encoding="utf-8-sig"))
    print(f"Found {len(entries)} log entries")

    store = create_record_store()
    try:
        return await import_log_entries(
            entries, store, dry_run=dry_run, replace=replace
        )
    finally:
        await store.supabase.close()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Import legacy outreach log interactions into Street Reach",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Import a log export
    python scripts/import_log_interactions.py logreport.csv

    # Check name resolution without writing anything
    python scripts/import_log_interactions.py logreport.csv --dry-run

    # Re-import from scratch, deleting all existing encounters first
    python scripts/import_log_interactions.py logreport.csv --replace
        """,
    )

    parser.add_argument(
        "file_path",
        type=Path,
        help="Path to the log CSV export",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve names and count interactions without writing",
    )

    parser.add_argument(
        "--replace",
        action="store_true",
        help="Delete ALL existing encounters before importing",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.file_path.exists():
        print(f"Error: File not found: {args.file_path}", file=sys.stderr)
        sys.exit(1)

    if not args.file_path.suffix.lower() == ".csv":
        print(f"Error: Expected CSV file, got: {args.file_path}", file=sys.stderr)
        sys.exit(1)

    print("Starting Street Reach interactions import...")

    try:
        report = asyncio.run(run(args.file_path, args.dry_run, args.replace))
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print_report(report)


if __name__ == "__main__":
    main()
