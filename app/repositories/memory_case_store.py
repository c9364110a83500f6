"""Dict-backed CaseStore used for dry runs and unit tests."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date
from typing import Any, Mapping

from app.domain.case_import import DEFAULT_ESTADO, CaseRecord, LocationRecord
from app.repositories.case_store import sanitize_payload
from app.repositories.errors import CaseNotFoundError, DuplicateCaseError, UnknownLocationError


class InMemoryCaseStore:
    """Enforces aviso uniqueness and the location reference like the database does."""

    def __init__(
        self,
        *,
        locations: Mapping[str, str] | None = None,
        enforce_locations: bool = True,
    ) -> None:
        self._cases: dict[str, CaseRecord] = {}
        self._locations: dict[str, str] = dict(locations or {})
        self._enforce_locations = enforce_locations

    def add_location(self, code: str, name: str) -> None:
        self._locations[code] = name

    def all_cases(self) -> list[CaseRecord]:
        return list(self._cases.values())

    def insert_case(self, payload: Mapping[str, Any]) -> CaseRecord:
        values = sanitize_payload(payload)
        aviso = str(values.get("aviso", "")).strip()
        if aviso in self._cases:
            raise DuplicateCaseError(aviso)
        self._check_location(values.get("ubicacion"))

        values.setdefault("fecha_creacion", date.today().isoformat())
        values.setdefault("estado", DEFAULT_ESTADO)
        values["aviso"] = aviso
        record = CaseRecord(id=str(uuid.uuid4()), **values)
        self._cases[aviso] = record
        return record

    def get_case_by_aviso(self, aviso: str) -> CaseRecord | None:
        return self._cases.get(str(aviso).strip())

    def update_case(self, aviso: str, fields: Mapping[str, Any]) -> CaseRecord:
        key = str(aviso).strip()
        existing = self._cases.get(key)
        if existing is None:
            raise CaseNotFoundError(key)
        values = sanitize_payload(fields)
        values.pop("aviso", None)
        if not values:
            return existing
        self._check_location(values.get("ubicacion"))
        updated = replace(existing, **values)
        self._cases[key] = updated
        return updated

    def get_location_by_code(self, code: str) -> LocationRecord | None:
        name = self._locations.get(code)
        if name is None:
            return None
        return LocationRecord(code=code, name=name)

    def _check_location(self, code: Any) -> None:
        if self._enforce_locations and code is not None and code not in self._locations:
            raise UnknownLocationError(str(code))
