"""
app/services/reconciliation_service.py

Create / update / skip decision for one imported case draft.

Flow per draft:

    1. Location pre-check (4-digit codes only) so the failure message names
       the missing code instead of surfacing a constraint violation.
    2. Explicit lookup by aviso. Not found -> insert -> Created.
       A DuplicateCaseError on insert means another writer got there first;
       the case is re-fetched and handled as existing.
    3. Existing -> field diff -> Skipped (no changes) or Updated (changed
       fields only; aviso is never written).

The store's unique and foreign-key constraints stay the authoritative
backstop; this module only reacts to the store's typed errors.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from app.domain.case_import import (
    COMPARABLE_FIELDS,
    DATE_FIELDS,
    CaseDraft,
    CaseRecord,
    Created,
    Failed,
    FieldChange,
    FieldDiff,
    RowOutcome,
    Skipped,
    Updated,
)
from app.repositories.case_store import CaseStore
from app.repositories.errors import CaseStoreError, DuplicateCaseError

logger = logging.getLogger(__name__)

SKIP_NOT_FOUND_ON_REFETCH = "exists, not found on refetch"
SKIP_NO_CHANGES = "duplicate, no changes"

_LOCATION_CODE_RE = re.compile(r"^\d{4}$")


def compute_field_diff(existing: CaseRecord, draft: CaseDraft) -> FieldDiff:
    """
    Return the comparable fields whose new value is non-empty and differs.

    A blank new value never produces a change, so re-imports can correct
    but never clear stored data.
    """

    changes: FieldDiff = {}
    for name in COMPARABLE_FIELDS:
        old_value = getattr(existing, name, None)
        new_value = getattr(draft, name, None)
        old_normalized = _normalize_for_compare(old_value, is_date=name in DATE_FIELDS)
        new_normalized = _normalize_for_compare(new_value, is_date=name in DATE_FIELDS)
        if new_normalized and new_normalized != old_normalized:
            changes[name] = FieldChange(old=old_value, new=new_value)
    return changes


def _normalize_for_compare(value: Any, *, is_date: bool) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    if is_date:
        text = text.split("T", 1)[0].split(" ", 1)[0]
    return text


class CaseReconciler:
    """
    Persists case drafts against a CaseStore and reports one outcome each.
    """

    def __init__(self, store: CaseStore, *, location_precheck: bool = True) -> None:
        self._store = store
        self._location_precheck = location_precheck

    def reconcile(self, draft: CaseDraft, *, row_number: int) -> RowOutcome:
        try:
            return self._reconcile(draft, row_number=row_number)
        except CaseStoreError as exc:
            logger.warning(
                "Case reconciliation failed row=%s aviso=%s: %s",
                row_number,
                draft.aviso,
                exc,
            )
            return Failed(row_number=row_number, aviso=draft.aviso, message=str(exc))

    def _reconcile(self, draft: CaseDraft, *, row_number: int) -> RowOutcome:
        location_name: str | None = None
        if self._location_precheck and draft.ubicacion and _LOCATION_CODE_RE.match(draft.ubicacion):
            location = self._store.get_location_by_code(draft.ubicacion)
            if location is None:
                logger.warning(
                    "Unknown location code row=%s aviso=%s code=%s",
                    row_number,
                    draft.aviso,
                    draft.ubicacion,
                )
                return Failed(
                    row_number=row_number,
                    aviso=draft.aviso,
                    message=f'Location code "{draft.ubicacion}" does not exist.',
                )
            location_name = location.name

        existing = self._store.get_case_by_aviso(draft.aviso)
        if existing is None:
            payload = draft.to_payload()
            if location_name:
                payload["denominacion_ubicacion_tecnica"] = location_name
            try:
                record = self._store.insert_case(payload)
            except DuplicateCaseError:
                existing = self._store.get_case_by_aviso(draft.aviso)
                if existing is None:
                    logger.info(
                        "Aviso %s reported as duplicate but not found on refetch row=%s",
                        draft.aviso,
                        row_number,
                    )
                    return Skipped(
                        row_number=row_number,
                        aviso=draft.aviso,
                        reason=SKIP_NOT_FOUND_ON_REFETCH,
                    )
            else:
                logger.debug("Created case aviso=%s row=%s", draft.aviso, row_number)
                return Created(row_number=row_number, aviso=draft.aviso, record=record)

        changes = compute_field_diff(existing, draft)
        if not changes:
            logger.debug("Skipped unchanged case aviso=%s row=%s", draft.aviso, row_number)
            return Skipped(row_number=row_number, aviso=draft.aviso, reason=SKIP_NO_CHANGES)

        fields: dict[str, Any] = {name: change.new for name, change in changes.items()}
        if "ubicacion" in changes and location_name:
            fields["denominacion_ubicacion_tecnica"] = location_name
        record = self._store.update_case(draft.aviso, fields)
        logger.debug(
            "Updated case aviso=%s row=%s fields=%s",
            draft.aviso,
            row_number,
            sorted(changes),
        )
        return Updated(row_number=row_number, aviso=draft.aviso, record=record, changes=changes)
