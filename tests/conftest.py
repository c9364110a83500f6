"""
Shared fixtures: in-memory .xlsx and .xls builders and record stores.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence
from datetime import date, datetime
from typing import Any

import pytest
import xlwt
from openpyxl import Workbook

from app.repositories.memory_case_store import InMemoryCaseStore

CASE_HEADERS: tuple[str, ...] = (
    "Aviso",
    "Texto Breve",
    "Tipologia",
    "Prioridad",
    "zona",
    "ubicación",
    "Fecha Creado",
    "Fin Avería con\ntiempo de respuesta",
)

KNOWN_LOCATIONS = {
    "5249": "Tienda Centro",
    "1008": "Tienda Norte",
}


def build_xlsx(rows: Sequence[Sequence[Any]], *, header: Sequence[Any] = CASE_HEADERS) -> bytes:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Casos"
    worksheet.append(list(header))
    for row in rows:
        worksheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_xls(rows: Sequence[Sequence[Any]], *, header: Sequence[Any] = CASE_HEADERS) -> bytes:
    """Legacy BIFF .xls bytes; datetime cells are written with a date format."""
    workbook = xlwt.Workbook()
    worksheet = workbook.add_sheet("Casos")
    date_style = xlwt.easyxf(num_format_str="YYYY-MM-DD")
    for row_index, row in enumerate([header, *rows]):
        for col_index, value in enumerate(row):
            if value is None:
                continue
            if isinstance(value, (date, datetime)):
                worksheet.write(row_index, col_index, value, date_style)
            else:
                worksheet.write(row_index, col_index, value)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def xls() -> Callable[..., bytes]:
    """Factory turning header + rows into legacy .xls bytes."""
    return build_xls


@pytest.fixture()
def xlsx() -> Callable[..., bytes]:
    """Factory turning header + rows into .xlsx bytes."""
    return build_xlsx


@pytest.fixture()
def store() -> InMemoryCaseStore:
    return InMemoryCaseStore(locations=KNOWN_LOCATIONS)
