"""
db/models/case.py

Facility-maintenance case keyed by its aviso number.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class CaseStatus:
    OPEN = "Abierto"
    CLOSED = "Cerrado"


class Case(TimestampMixin, Base):
    __tablename__ = "cases"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    aviso: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        comment="Business-unique case number, digits only",
    )
    texto_breve: Mapped[str | None] = mapped_column(Text, nullable=True)
    tipologia: Mapped[str | None] = mapped_column(String(120), nullable=True)
    prioridad: Mapped[str | None] = mapped_column(String(60), nullable=True)
    zona: Mapped[str | None] = mapped_column(String(60), nullable=True)
    ubicacion: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("locations.code"),
        nullable=True,
    )
    denominacion_ubicacion_tecnica: Mapped[str | None] = mapped_column(String(255), nullable=True)
    fecha_creacion: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    fin_averia_tiempo_respuesta: Mapped[date | None] = mapped_column(Date, nullable=True)
    estado: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=CaseStatus.OPEN,
        comment="Abierto, Cerrado",
    )

    __table_args__ = (
        Index("ix_cases_zona", "zona"),
        Index("ix_cases_estado", "estado"),
        Index("ix_cases_fecha_creacion", "fecha_creacion"),
    )
