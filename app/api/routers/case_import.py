"""
app/api/routers/case_import.py

Spreadsheet case import HTTP endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from app.api.dependencies import get_case_store
from app.domain.case_import import ImportReport
from app.mappers.column_resolver import ColumnResolutionError
from app.parsers.spreadsheet_parser import ParseError
from app.repositories.case_store import CaseStore
from app.schemas.case_import import CaseImportResponse
from app.services.case_import_service import CaseImportService, get_case_import_service

router = APIRouter(prefix="/cases", tags=["cases"])


@router.post("/import", response_model=CaseImportResponse)
def import_cases(
    response: Response,
    file: UploadFile = File(...),
    store: CaseStore = Depends(get_case_store),
    import_service: CaseImportService = Depends(get_case_import_service),
) -> CaseImportResponse:
    """
    Import cases from an uploaded .xlsx file.

    Responds 200 when every row succeeded, 207 when some rows failed and
    400 when no row succeeded.
    """

    try:
        content = file.file.read()
        report = import_service.import_cases(content=content, store=store)
    except ColumnResolutionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except ParseError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        file.file.close()

    payload = build_import_response(report)
    response.status_code = _status_for(payload)
    return payload


def build_import_response(report: ImportReport) -> CaseImportResponse:
    body = report.to_dict()
    successes = len(body["success"])
    summary = {
        "totalRows": report.total_rows,
        "validCasesFound": report.valid_cases_found,
        "created": report.created,
        "updated": report.updated,
        "success": successes,
        "skipped": report.skipped,
        "failed": report.failed,
        "errors": len(body["errors"]),
    }
    return CaseImportResponse.model_validate(
        {
            "message": _summary_message(report, error_count=len(body["errors"])),
            "summary": summary,
            "success": body["success"],
            "skippedCases": body["skippedCases"],
            "errors": body["errors"],
        }
    )


def _summary_message(report: ImportReport, *, error_count: int) -> str:
    message = f"Import completed: {report.created} cases created"
    if report.updated:
        message += f", {report.updated} cases updated"
    if report.skipped:
        message += f", {report.skipped} cases skipped (no changes)"
    if error_count:
        message += f", {error_count} errors"
    return message


def _status_for(payload: CaseImportResponse) -> int:
    if payload.errors and not payload.success:
        return status.HTTP_400_BAD_REQUEST
    if payload.errors:
        return status.HTTP_207_MULTI_STATUS
    return status.HTTP_200_OK
