"""
app/validators/row_normalizer.py

Row-level extraction, coercion and validation for spreadsheet case import.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Sequence

from app.domain.case_import import DEFAULT_ESTADO, CaseDraft, RawCell, RowValidationError
from app.mappers.column_resolver import ColumnIndexMap

SPREADSHEET_EPOCH = date(1899, 12, 30)

DATE_FORMATS: tuple[str, ...] = (
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%Y",
)

ACCEPTED_ZONE_VARIANTS: tuple[str, ...] = (
    "Zona Bogotá",
    "Zona Bogota",
    "Zona Ibague centro",
    "Zona Ibagué Centro",
    "Zona Ibagué centro",
    "Zona oriental",
    "Zona Oriental",
    "Zona Santander",
    "Zona Santanderes",
)

# Checked in order; first keyword hit wins.
ZONE_KEYWORD_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("bogota", "bogotá"), "Zona Bogotá"),
    (("ibague", "ibagué"), "Zona Ibagué Centro"),
    (("oriental",), "Zona Oriental"),
    (("santander",), "Zona Santanderes"),
)

_AVISO_RE = re.compile(r"^\d+$")
_DIGIT_RUN_RE = re.compile(r"\d+")
# Day serials: 5+ digits or a fractional part; "2024" is a year, not a serial.
_SERIAL_RE = re.compile(r"^(\d{5,}(\.\d+)?|\d+\.\d+)$")
_ISO_PREFIX_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})")

# Variants may be written without the shared prefix, e.g. "bogota".
_ZONE_PREFIX = "zona "


class ZoneCatalog:
    """
    Accepted zone spellings and their canonical display names.
    """

    def __init__(
        self,
        *,
        variants: Sequence[str] = ACCEPTED_ZONE_VARIANTS,
        keyword_rules: Sequence[tuple[Sequence[str], str]] = ZONE_KEYWORD_RULES,
    ) -> None:
        self._rules = tuple(
            (tuple(keyword.lower() for keyword in keywords), canonical)
            for keywords, canonical in keyword_rules
        )
        self._accepted = tuple(variant.strip() for variant in variants)
        self._variants: dict[str, str] = {}
        for variant in variants:
            normalized = variant.strip().lower()
            canonical = self._canonical_for(normalized)
            if canonical is None:
                raise ValueError(f"Zone variant {variant!r} matches no keyword rule.")
            self._variants[normalized] = canonical
            if normalized.startswith(_ZONE_PREFIX):
                self._variants.setdefault(normalized[len(_ZONE_PREFIX):].strip(), canonical)

    @property
    def accepted_variants(self) -> tuple[str, ...]:
        return self._accepted

    @property
    def canonical_names(self) -> tuple[str, ...]:
        seen: list[str] = []
        for _, canonical in self._rules:
            if canonical not in seen:
                seen.append(canonical)
        return tuple(seen)

    def resolve(self, value: str) -> str | None:
        """
        Return the canonical zone for an accepted variant, else None.
        """

        return self._variants.get(value.strip().lower())

    def _canonical_for(self, normalized: str) -> str | None:
        for keywords, canonical in self._rules:
            if any(keyword in normalized for keyword in keywords):
                return canonical
        return None


DEFAULT_ZONE_CATALOG = ZoneCatalog()


@dataclass(frozen=True)
class _FieldValues:
    aviso: RawCell
    zona: RawCell
    ubicacion: RawCell
    texto_breve: RawCell
    tipologia: RawCell
    prioridad: RawCell
    fecha_creacion: RawCell
    fin_averia_tiempo_respuesta: RawCell


class RowNormalizer:
    """
    Converts one positional spreadsheet row into a CaseDraft.
    """

    def __init__(self, *, zone_catalog: ZoneCatalog | None = None) -> None:
        self._zones = zone_catalog or DEFAULT_ZONE_CATALOG

    def is_blank_row(self, row: Sequence[RawCell]) -> bool:
        """
        Return True when all cells are empty or whitespace.
        """

        return all(_is_blank(value) for value in row)

    def normalize_row(
        self,
        *,
        row: Sequence[RawCell],
        columns: ColumnIndexMap,
        row_number: int,
    ) -> tuple[CaseDraft | None, list[RowValidationError]]:
        """
        Validate and coerce one row; never raises for bad data.
        """

        values = _FieldValues(
            aviso=columns.value_at(row, "aviso"),
            zona=columns.value_at(row, "zona"),
            ubicacion=columns.value_at(row, "ubicacion"),
            texto_breve=columns.value_at(row, "texto_breve"),
            tipologia=columns.value_at(row, "tipologia"),
            prioridad=columns.value_at(row, "prioridad"),
            fecha_creacion=columns.value_at(row, "fecha_creacion"),
            fin_averia_tiempo_respuesta=columns.value_at(row, "fin_averia_tiempo_respuesta"),
        )

        if _is_blank(values.aviso):
            return None, [
                RowValidationError(
                    row_number=row_number,
                    column="aviso",
                    message="Aviso is required.",
                )
            ]
        aviso = _coerce_aviso(values.aviso)
        if not _AVISO_RE.match(aviso):
            return None, [
                RowValidationError(
                    row_number=row_number,
                    column="aviso",
                    message=f'Aviso must be a non-negative whole number (value: "{aviso}").',
                    value=aviso,
                )
            ]

        if _is_blank(values.zona):
            return None, [
                RowValidationError(
                    row_number=row_number,
                    column="zona",
                    message="Zona is required.",
                )
            ]
        raw_zona = str(values.zona).strip()
        zona = self._zones.resolve(raw_zona)
        if zona is None:
            allowed = ", ".join(self._zones.accepted_variants)
            return None, [
                RowValidationError(
                    row_number=row_number,
                    column="zona",
                    message=f'Zona "{raw_zona}" is not an accepted zone. Accepted zones: {allowed}.',
                    value=raw_zona,
                )
            ]

        return (
            CaseDraft(
                aviso=aviso,
                zona=zona,
                ubicacion=extract_location_code(values.ubicacion),
                texto_breve=_optional_text(values.texto_breve),
                tipologia=_optional_text(values.tipologia),
                prioridad=_optional_text(values.prioridad),
                fecha_creacion=normalize_date(values.fecha_creacion),
                fin_averia_tiempo_respuesta=normalize_date(values.fin_averia_tiempo_respuesta),
                estado=DEFAULT_ESTADO,
            ),
            [],
        )


def extract_location_code(value: RawCell) -> str | None:
    """
    Take the last 4 characters of the last digit run, e.g. VT-1008-5249 -> 5249.
    """

    if _is_blank(value):
        return None
    raw = str(value).strip()
    digit_runs = _DIGIT_RUN_RE.findall(raw)
    if not digit_runs:
        return raw
    return digit_runs[-1][-4:]


def normalize_date(value: RawCell) -> str | None:
    """
    Normalize a spreadsheet serial or a date string to YYYY-MM-DD.

    Unparseable input yields None rather than an error.
    """

    if _is_blank(value) or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return _serial_to_iso(float(value))

    raw = str(value).strip()
    if _SERIAL_RE.match(raw):
        return _serial_to_iso(float(raw))

    try:
        return datetime.fromisoformat(raw).date().isoformat()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date().isoformat()
        except ValueError:
            continue

    prefix = _ISO_PREFIX_RE.match(raw)
    if prefix:
        try:
            return date.fromisoformat(prefix.group(1)).isoformat()
        except ValueError:
            return None
    return None


def _serial_to_iso(serial: float) -> str | None:
    if serial <= 0:
        return None
    try:
        return (SPREADSHEET_EPOCH + timedelta(days=serial)).isoformat()
    except OverflowError:
        return None


def _coerce_aviso(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _optional_text(value: RawCell) -> str | None:
    if _is_blank(value):
        return None
    return str(value).strip()


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return str(value).strip() == ""
