"""
app/mappers/column_resolver.py

Resolves spreadsheet header text into canonical case field positions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any, Sequence

from app.domain.case_import import RawCell

DEFAULT_COLUMN_HEADERS: tuple[tuple[str, str], ...] = (
    ("Aviso", "aviso"),
    ("Texto Breve", "texto_breve"),
    ("Tipologia", "tipologia"),
    ("Prioridad", "prioridad"),
    ("zona", "zona"),
    ("ubicación", "ubicacion"),
    ("Fecha Creado", "fecha_creacion"),
    ("Fin Avería con tiempo de respuesta", "fin_averia_tiempo_respuesta"),
)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_header(header: Any) -> str:
    """
    Collapse line breaks and whitespace runs, trim and lowercase.
    """

    if not isinstance(header, str):
        return ""
    return _WHITESPACE_RE.sub(" ", header).strip().lower()


@dataclass(frozen=True)
class ColumnIndexMap:
    """
    Column position of every canonical case field within a row.
    """

    aviso: int
    texto_breve: int
    tipologia: int
    prioridad: int
    zona: int
    ubicacion: int
    fecha_creacion: int
    fin_averia_tiempo_respuesta: int

    def value_at(self, row: Sequence[RawCell], field_name: str) -> RawCell:
        index = getattr(self, field_name)
        if index >= len(row):
            return None
        return row[index]


CANONICAL_FIELDS: tuple[str, ...] = tuple(item.name for item in fields(ColumnIndexMap))


@dataclass(frozen=True)
class ColumnErrorDetail:
    """
    Structured header resolution error detail.
    """

    code: str
    message: str
    canonical_field: str | None = None
    expected_header: str | None = None
    context: dict[str, Any] | None = None


class ColumnResolutionError(ValueError):
    """
    Raised when the header row cannot be mapped onto the case fields.
    """

    def __init__(self, *, message: str, errors: Sequence[ColumnErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [
                {
                    "code": error.code,
                    "message": error.message,
                    "canonical_field": error.canonical_field,
                    "expected_header": error.expected_header,
                    "context": error.context,
                }
                for error in self.errors
            ],
        }


class MissingColumnsError(ColumnResolutionError):
    """
    Raised when one or more required headers are absent.
    """

    def __init__(
        self,
        *,
        missing: Sequence[str],
        available: Sequence[str],
        errors: Sequence[ColumnErrorDetail],
    ) -> None:
        self.missing = tuple(missing)
        self.available = tuple(available)
        listed = ", ".join(f'"{header}"' for header in self.available) or "none"
        super().__init__(
            message=(
                f"Required columns not found: {', '.join(self.missing)}. "
                f"Columns present in the file: {listed}."
            ),
            errors=errors,
        )

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["missing"] = list(self.missing)
        payload["available"] = list(self.available)
        return payload


class ColumnResolver:
    """
    Maps a header row onto canonical case fields by exact normalized text.
    """

    def __init__(
        self,
        header_table: Sequence[tuple[str, str]] = DEFAULT_COLUMN_HEADERS,
    ) -> None:
        table = tuple((str(header), str(field_name)) for header, field_name in header_table)
        unknown = [field_name for _, field_name in table if field_name not in CANONICAL_FIELDS]
        if unknown:
            raise ValueError(f"Unknown canonical fields in header table: {unknown}")
        covered = [field_name for _, field_name in table]
        if sorted(covered) != sorted(CANONICAL_FIELDS):
            raise ValueError("Header table must name every canonical field exactly once.")
        self._header_table = table

    def resolve(self, header_row: Sequence[RawCell]) -> ColumnIndexMap:
        positions: dict[str, int] = {}
        for index, cell in enumerate(header_row):
            normalized = normalize_header(cell)
            if normalized and normalized not in positions:
                positions[normalized] = index

        resolved: dict[str, int] = {}
        missing: list[str] = []
        errors: list[ColumnErrorDetail] = []
        available = [str(cell) for cell in header_row if cell is not None and str(cell).strip()]

        for expected_header, canonical_field in self._header_table:
            index = positions.get(normalize_header(expected_header))
            if index is None:
                missing.append(expected_header)
                errors.append(
                    ColumnErrorDetail(
                        code="required_column_missing",
                        message="Required column is not present in the header row.",
                        canonical_field=canonical_field,
                        expected_header=expected_header,
                        context={"available_headers": available},
                    )
                )
                continue
            resolved[canonical_field] = index

        if missing:
            raise MissingColumnsError(missing=missing, available=available, errors=errors)

        return ColumnIndexMap(**resolved)
