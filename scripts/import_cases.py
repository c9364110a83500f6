"""
Import cases from an .xlsx file from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from app.mappers.column_resolver import ColumnResolutionError
from app.parsers.spreadsheet_parser import ParseError
from app.repositories.case_repository import SQLAlchemyCaseRepository
from app.repositories.memory_case_store import InMemoryCaseStore
from app.services.case_import_service import CaseImportService, get_case_import_service


def main() -> int:
    parser = argparse.ArgumentParser(description="Import cases from a spreadsheet.")
    parser.add_argument("path", type=Path, help="Path to the .xlsx file.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and reconcile against an empty in-memory store instead of the database.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")

    content = args.path.read_bytes()
    try:
        if args.dry_run:
            # no reference locations in memory, so skip the location pre-check
            report = CaseImportService(location_precheck=False).import_cases(
                content=content,
                store=InMemoryCaseStore(enforce_locations=False),
            )
        else:
            from db.session import SessionLocal

            with SessionLocal() as db:
                report = get_case_import_service().import_cases(
                    content=content,
                    store=SQLAlchemyCaseRepository(db),
                )
    except ColumnResolutionError as exc:
        print(json.dumps(exc.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 2
    except ParseError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return 1 if report.errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
