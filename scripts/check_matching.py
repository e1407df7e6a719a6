#!/usr/bin/env python3
"""
Report which legacy log names resolve to a client.

Runs the same exact-match rules as import_log_interactions.py over every
distinct name in the log and lists the ones that do not resolve. Nothing is
written.

Usage:
    python scripts/check_matching.py logreport.csv
"""

import argparse
import asyncio
import sys
from pathlib import Path

from streetreach.exceptions import StoreError
from streetreach.import_.log_csv_parser import parse_log_csv
from streetreach.import_.log_importer import check_log_names
from streetreach.matching import PersonRecord
from streetreach.services.record_store import create_record_store


async def load_persons() -> list[PersonRecord]:
    store = create_record_store()
    try:
        return await store.fetch_persons()
    finally:
        await store.supabase.close()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Report which legacy log names resolve to a client",
    )
    parser.add_argument("file_path", type=Path, help="Path to the log CSV export")
    args = parser.parse_args()

    if not args.file_path.exists():
        print(f"Error: File not found: {args.file_path}", file=sys.stderr)
        sys.exit(1)

    entries = parse_log_csv(args.file_path.read_text(encoding="utf-8-sig"))

    try:
        persons = asyncio.run(load_persons())
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    matched, unmatched = check_log_names(entries, persons)

    print(f"Unique names in log: {len(matched) + len(unmatched)}")
    print(f"Persons in database: {len(persons)}")
    print(f"\nExact matches: {len(matched)}")
    print(f"No match: {len(unmatched)}")

    if unmatched:
        print("\nUnmatched names:")
        for name in unmatched:
            print(f" - {name}")


if __name__ == "__main__":
    main()
