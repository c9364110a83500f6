"""
app/repositories/case_store.py

Record-store contract consumed by the reconciliation engine.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from app.domain.case_import import CaseRecord, LocationRecord

# Fields a store accepts on insert/update; anything else is dropped.
WRITABLE_CASE_FIELDS: frozenset[str] = frozenset(
    {
        "aviso",
        "fecha_creacion",
        "tipologia",
        "texto_breve",
        "zona",
        "ubicacion",
        "denominacion_ubicacion_tecnica",
        "fin_averia_tiempo_respuesta",
        "prioridad",
        "estado",
    }
)


class CaseStore(Protocol):
    """
    Persistent case store keyed by aviso.

    Implementations raise typed errors from ``app.repositories.errors``
    instead of leaking driver exceptions.
    """

    def insert_case(self, payload: Mapping[str, Any]) -> CaseRecord:
        ...

    def get_case_by_aviso(self, aviso: str) -> CaseRecord | None:
        ...

    def update_case(self, aviso: str, fields: Mapping[str, Any]) -> CaseRecord:
        ...

    def get_location_by_code(self, code: str) -> LocationRecord | None:
        ...


def sanitize_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """
    Keep writable fields with non-blank values only.
    """

    cleaned: dict[str, Any] = {}
    for key, value in payload.items():
        if key not in WRITABLE_CASE_FIELDS or value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        cleaned[key] = value
    return cleaned
