"""
app/domain/case_import.py

Domain models used by the spreadsheet case import flow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Union

DEFAULT_ESTADO = "Abierto"

RawCell = Union[str, int, float, None]
RawRow = tuple[RawCell, ...]

COMPARABLE_FIELDS: tuple[str, ...] = (
    "texto_breve",
    "tipologia",
    "prioridad",
    "zona",
    "ubicacion",
    "fecha_creacion",
    "fin_averia_tiempo_respuesta",
    "estado",
)

DATE_FIELDS: frozenset[str] = frozenset({"fecha_creacion", "fin_averia_tiempo_respuesta"})


@dataclass(frozen=True)
class CaseDraft:
    """
    Normalized, validated representation of one spreadsheet row.
    """

    aviso: str
    zona: str
    ubicacion: str | None = None
    texto_breve: str | None = None
    tipologia: str | None = None
    prioridad: str | None = None
    fecha_creacion: str | None = None
    fin_averia_tiempo_respuesta: str | None = None
    estado: str = DEFAULT_ESTADO

    def to_payload(self) -> dict[str, str]:
        """
        Return only the populated fields, ready for the record store.
        """

        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class LocationRecord:
    """
    Reference location (store/facility) looked up by its 4-digit code.
    """

    code: str
    name: str


@dataclass(frozen=True)
class CaseRecord:
    """
    Persisted case as returned by a record store.
    """

    id: str
    aviso: str
    zona: str | None = None
    ubicacion: str | None = None
    denominacion_ubicacion_tecnica: str | None = None
    texto_breve: str | None = None
    tipologia: str | None = None
    prioridad: str | None = None
    fecha_creacion: str | None = None
    fin_averia_tiempo_respuesta: str | None = None
    estado: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FieldChange:
    old: Any
    new: Any


FieldDiff = dict[str, FieldChange]


@dataclass(frozen=True)
class RowValidationError:
    """
    One spreadsheet row normalization error detail.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None

    def describe(self) -> str:
        return f"Row {self.row_number}: {self.message}"


# ---------------------------------------------------------------------------
# Row outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Created:
    row_number: int
    aviso: str
    record: CaseRecord

    @property
    def case_id(self) -> str:
        return self.record.id


@dataclass(frozen=True)
class Updated:
    row_number: int
    aviso: str
    record: CaseRecord
    changes: FieldDiff

    @property
    def case_id(self) -> str:
        return self.record.id


@dataclass(frozen=True)
class Skipped:
    row_number: int
    aviso: str
    reason: str


@dataclass(frozen=True)
class Failed:
    row_number: int
    aviso: str
    message: str

    def describe(self) -> str:
        return f"Aviso {self.aviso}: {self.message}"


RowOutcome = Union[Created, Updated, Skipped, Failed]


@dataclass(frozen=True)
class ImportReport:
    """
    End-of-run import summary.
    """

    total_rows: int
    valid_cases_found: int
    outcomes: tuple[RowOutcome, ...] = ()
    row_errors: tuple[RowValidationError, ...] = field(default_factory=tuple)

    @property
    def created(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Created))

    @property
    def updated(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Updated))

    @property
    def skipped(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Skipped))

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if isinstance(outcome, Failed))

    @property
    def errors(self) -> list[str]:
        """
        Row-level errors followed by reconciliation errors, in row order.
        """

        messages = [error.describe() for error in self.row_errors]
        messages.extend(
            outcome.describe() for outcome in self.outcomes if isinstance(outcome, Failed)
        )
        return messages

    def to_dict(self) -> dict[str, Any]:
        success: list[dict[str, Any]] = []
        for outcome in self.outcomes:
            if isinstance(outcome, Created):
                success.append({"aviso": outcome.aviso, "data": outcome.record.to_dict()})
            elif isinstance(outcome, Updated):
                success.append(
                    {
                        "aviso": outcome.aviso,
                        "data": outcome.record.to_dict(),
                        "updated": True,
                        "changes": {
                            name: {"old": change.old, "new": change.new}
                            for name, change in outcome.changes.items()
                        },
                    }
                )

        return {
            "totalRows": self.total_rows,
            "validCasesFound": self.valid_cases_found,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "success": success,
            "skippedCases": [
                {"aviso": outcome.aviso, "reason": outcome.reason}
                for outcome in self.outcomes
                if isinstance(outcome, Skipped)
            ],
            "errors": self.errors,
        }
