"""
app/schemas package marker.
"""

from app.schemas.case_import import (
    CaseImportResponse,
    CaseImportSummaryResponse,
    FieldChangeResponse,
    ImportedCaseResponse,
    SkippedCaseResponse,
)

__all__ = [
    "CaseImportResponse",
    "CaseImportSummaryResponse",
    "FieldChangeResponse",
    "ImportedCaseResponse",
    "SkippedCaseResponse",
]
