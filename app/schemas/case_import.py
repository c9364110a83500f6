"""
app/schemas/case_import.py

Response schemas for the spreadsheet case import endpoint.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldChangeResponse(BaseModel):
    """
    Old and new value of one field changed by an import.
    """

    old: Any = None
    new: Any = None


class ImportedCaseResponse(_CamelModel):
    """
    One case created or updated by the import.
    """

    aviso: str
    data: dict[str, Any]
    updated: bool = False
    changes: dict[str, FieldChangeResponse] = Field(default_factory=dict)


class SkippedCaseResponse(_CamelModel):
    aviso: str
    reason: str


class CaseImportSummaryResponse(_CamelModel):
    """
    Counters for one import run.
    """

    total_rows: int = Field(..., ge=0)
    valid_cases_found: int = Field(..., ge=0)
    created: int = Field(..., ge=0)
    updated: int = Field(..., ge=0)
    success: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)


class CaseImportResponse(_CamelModel):
    """
    API response model for a spreadsheet case import.
    """

    message: str
    summary: CaseImportSummaryResponse
    success: list[ImportedCaseResponse] = Field(default_factory=list)
    skipped_cases: list[SkippedCaseResponse] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
