"""
app/services/case_import_service.py

Service layer for spreadsheet case import.

The pipeline runs in two phases:

    1. Parse the first sheet, resolve the header row and normalize every data
       row. ParseError and ColumnResolutionError abort before any row is
       processed; bad rows are collected and skipped.
    2. Reconcile each valid draft against the record store, one at a time in
       row order. Per-row failures are recorded and the import continues.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.config import get_case_import_settings
from app.domain.case_import import (
    CaseDraft,
    ImportReport,
    RowOutcome,
    RowValidationError,
)
from app.mappers.column_resolver import ColumnResolver
from app.parsers.spreadsheet_parser import parse_spreadsheet
from app.repositories.case_store import CaseStore
from app.services.reconciliation_service import CaseReconciler
from app.validators.row_normalizer import RowNormalizer

logger = logging.getLogger(__name__)

# Spreadsheet row number of the first data row (header is row 1).
_FIRST_DATA_ROW = 2


class CaseImportService:
    """
    Coordinates parsing, header resolution, row normalization and reconciliation.
    """

    def __init__(
        self,
        *,
        resolver: ColumnResolver | None = None,
        normalizer: RowNormalizer | None = None,
        log_row_errors: bool = True,
        location_precheck: bool = True,
    ) -> None:
        self._resolver = resolver or ColumnResolver()
        self._normalizer = normalizer or RowNormalizer()
        self._log_row_errors = log_row_errors
        self._location_precheck = location_precheck

    def import_cases(self, *, content: bytes, store: CaseStore) -> ImportReport:
        """
        Import every case row of a spreadsheet buffer into ``store``.

        Raises:
            ParseError: the buffer is not a workbook or has no data rows.
            ColumnResolutionError: a required header is missing.
        """

        sheet = parse_spreadsheet(content)
        columns = self._resolver.resolve(sheet.header)

        drafts: list[tuple[int, CaseDraft]] = []
        row_errors: list[RowValidationError] = []
        blank_rows = 0

        for row_number, row in enumerate(sheet.rows, start=_FIRST_DATA_ROW):
            if self._normalizer.is_blank_row(row):
                blank_rows += 1
                continue

            draft, errors = self._normalizer.normalize_row(
                row=row,
                columns=columns,
                row_number=row_number,
            )
            if errors:
                for error in errors:
                    self._record_error(row_errors, error)
                continue
            if draft is not None:
                drafts.append((row_number, draft))

        reconciler = CaseReconciler(store, location_precheck=self._location_precheck)
        outcomes: list[RowOutcome] = []
        for row_number, draft in drafts:
            outcomes.append(reconciler.reconcile(draft, row_number=row_number))

        report = ImportReport(
            total_rows=len(sheet.rows),
            valid_cases_found=len(drafts),
            outcomes=tuple(outcomes),
            row_errors=tuple(row_errors),
        )
        logger.info(
            "Case import finished sheet=%r total_rows=%d blank_rows=%d valid=%d "
            "created=%d updated=%d skipped=%d failed=%d row_errors=%d",
            sheet.sheet_name,
            report.total_rows,
            blank_rows,
            report.valid_cases_found,
            report.created,
            report.updated,
            report.skipped,
            report.failed,
            len(report.row_errors),
        )
        return report

    def _record_error(
        self,
        row_errors: list[RowValidationError],
        error: RowValidationError,
    ) -> None:
        if self._log_row_errors:
            logger.warning(
                "Case import row error row=%s column=%s message=%s value=%r",
                error.row_number,
                error.column,
                error.message,
                error.value,
            )
        row_errors.append(error)


@lru_cache(maxsize=1)
def get_case_import_service() -> CaseImportService:
    """
    Build and cache the import service with env-driven settings.
    """

    settings = get_case_import_settings()
    return CaseImportService(
        log_row_errors=settings.log_row_errors,
        location_precheck=settings.location_precheck,
    )
