"""
app/repositories/case_repository.py

SQLAlchemy-backed CaseStore.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.case_import import DATE_FIELDS, CaseRecord, LocationRecord
from app.repositories.case_store import sanitize_payload
from app.repositories.errors import (
    CaseNotFoundError,
    CaseStoreError,
    DuplicateCaseError,
    UnknownLocationError,
)
from db.models.case import Case
from db.models.location import Location

logger = logging.getLogger(__name__)


class SQLAlchemyCaseRepository:
    """
    Case persistence over one SQLAlchemy session.

    Every write commits on its own so a failing row never rolls back rows
    written before it.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert_case(self, payload: Mapping[str, Any]) -> CaseRecord:
        values = self._to_columns(sanitize_payload(payload))
        aviso = str(values.get("aviso", "")).strip()
        if not aviso:
            raise CaseStoreError("Aviso is required.")
        values["aviso"] = aviso

        case = Case(**values)
        self._session.add(case)
        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise self._classify_integrity_error(aviso=aviso, ubicacion=values.get("ubicacion")) from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise CaseStoreError(f"Failed to insert aviso {aviso}.") from exc

        logger.debug("Inserted case aviso=%s id=%s", aviso, case.id)
        return self._to_record(case)

    def get_case_by_aviso(self, aviso: str) -> CaseRecord | None:
        case = self._find_case(str(aviso).strip())
        return self._to_record(case) if case is not None else None

    def update_case(self, aviso: str, fields: Mapping[str, Any]) -> CaseRecord:
        key = str(aviso).strip()
        case = self._find_case(key)
        if case is None:
            raise CaseNotFoundError(key)

        values = self._to_columns(sanitize_payload(fields))
        values.pop("aviso", None)
        if not values:
            return self._to_record(case)

        for name, value in values.items():
            setattr(case, name, value)
        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise self._classify_integrity_error(aviso=None, ubicacion=values.get("ubicacion")) from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise CaseStoreError(f"Failed to update aviso {key}.") from exc

        logger.debug("Updated case aviso=%s fields=%s", key, sorted(values))
        return self._to_record(case)

    def get_location_by_code(self, code: str) -> LocationRecord | None:
        try:
            location = self._session.get(Location, code)
        except SQLAlchemyError as exc:
            raise CaseStoreError(f"Failed to look up location code {code}.") from exc
        if location is None:
            return None
        return LocationRecord(code=location.code, name=location.name)

    def _find_case(self, aviso: str) -> Case | None:
        try:
            return self._session.scalars(select(Case).where(Case.aviso == aviso)).one_or_none()
        except SQLAlchemyError as exc:
            raise CaseStoreError(f"Failed to load aviso {aviso}.") from exc

    def _classify_integrity_error(self, *, aviso: str | None, ubicacion: Any) -> CaseStoreError:
        if aviso is not None and self._find_case(aviso) is not None:
            return DuplicateCaseError(aviso)
        if ubicacion is not None and self._session.get(Location, ubicacion) is None:
            return UnknownLocationError(str(ubicacion))
        return CaseStoreError("Case violates a database constraint.")

    @staticmethod
    def _to_columns(values: dict[str, Any]) -> dict[str, Any]:
        converted = dict(values)
        for name in DATE_FIELDS:
            raw = converted.get(name)
            if isinstance(raw, str):
                try:
                    converted[name] = date.fromisoformat(raw[:10])
                except ValueError as exc:
                    raise CaseStoreError(f"Invalid date for {name}: {raw!r}.") from exc
        return converted

    @staticmethod
    def _to_record(case: Case) -> CaseRecord:
        return CaseRecord(
            id=str(case.id),
            aviso=case.aviso,
            zona=case.zona,
            ubicacion=case.ubicacion,
            denominacion_ubicacion_tecnica=case.denominacion_ubicacion_tecnica,
            texto_breve=case.texto_breve,
            tipologia=case.tipologia,
            prioridad=case.prioridad,
            fecha_creacion=case.fecha_creacion.isoformat() if case.fecha_creacion else None,
            fin_averia_tiempo_respuesta=(
                case.fin_averia_tiempo_respuesta.isoformat()
                if case.fin_averia_tiempo_respuesta
                else None
            ),
            estado=case.estado,
        )
