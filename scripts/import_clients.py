#!/usr/bin/env python3
"""
Import the legacy client roster into Street Reach.

Reads a CSV export of the roster and creates one client per row that has a
first name. Run this before import_log_interactions.py so log names have
clients to resolve to.

Usage:
    python scripts/import_clients.py roster.csv
    python scripts/import_clients.py roster.csv --dry-run
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from streetreach.exceptions import StoreError
from streetreach.import_.client_roster import RosterImportReport, import_roster
from streetreach.services.record_store import create_record_store


async def run(file_path: Path, dry_run: bool) -> RosterImportReport:
    store = create_record_store()
    try:
        return await import_roster(
            file_path.read_text(encoding="utf-8-sig"), store, dry_run=dry_run
        )
    finally:
        await store.supabase.close()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Import the legacy client roster into Street Reach",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/import_clients.py All_People.csv
    python scripts/import_clients.py All_People.csv --dry-run
        """,
    )

    parser.add_argument("file_path", type=Path, help="Path to the roster CSV export")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Count importable rows without writing",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.file_path.exists():
        print(f"Error: File not found: {args.file_path}", file=sys.stderr)
        sys.exit(1)

    print("Starting Street Reach client import...")

    try:
        report = asyncio.run(run(args.file_path, args.dry_run))
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print("\n=== Import Complete ===")
    print(f"Total rows: {report.total_rows}")
    print(f"Imported: {report.imported}")
    print(f"Skipped (no name): {report.skipped}")
    print(f"Errors: {report.errors}")


if __name__ == "__main__":
    main()
