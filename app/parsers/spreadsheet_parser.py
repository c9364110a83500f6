"""
app/parsers/spreadsheet_parser.py

Decodes an uploaded .xlsx or legacy .xls buffer into positional string rows.

Workbooks starting with the OLE2 compound-document signature are read with
xlrd; everything else goes through openpyxl.
"""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Iterable

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from app.domain.case_import import RawRow

logger = logging.getLogger(__name__)

OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0"


class ParseError(ValueError):
    """
    Raised when the buffer is not a usable spreadsheet.
    """


@dataclass(frozen=True)
class ParsedSheet:
    """
    First-sheet contents split into header and data rows.
    """

    sheet_name: str
    header: RawRow
    rows: tuple[RawRow, ...]


def parse_spreadsheet(content: bytes) -> ParsedSheet:
    """
    Read the first worksheet of an .xlsx or .xls workbook.

    Every non-empty cell is coerced to ``str`` so no native numeric or date
    types leak into the rows; empty cells become ``None``. The first row is
    the header and is not part of ``rows``.
    """

    if not content:
        raise ParseError("Spreadsheet file is empty.")

    if content[: len(OLE2_SIGNATURE)] == OLE2_SIGNATURE:
        sheet_name, grid = _read_xls(content)
    else:
        sheet_name, grid = _read_xlsx(content)

    grid = _trim_trailing_blank_rows(grid)
    if len(grid) < 2:
        raise ParseError(
            "Spreadsheet must contain a header row and at least one data row."
        )

    logger.debug("Parsed sheet=%r rows=%d", sheet_name, len(grid) - 1)
    return ParsedSheet(sheet_name=sheet_name, header=grid[0], rows=tuple(grid[1:]))


def _read_xlsx(content: bytes) -> tuple[str, list[RawRow]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise ParseError(f"Could not read spreadsheet: {exc}") from exc

    try:
        if not workbook.worksheets:
            raise ParseError("Spreadsheet has no sheets.")
        worksheet = workbook.worksheets[0]
        grid = [
            tuple(coerce_cell(value) for value in row)
            for row in worksheet.iter_rows(values_only=True)
        ]
        return worksheet.title, grid
    finally:
        workbook.close()


def _read_xls(content: bytes) -> tuple[str, list[RawRow]]:
    try:
        book = xlrd.open_workbook(file_contents=content, on_demand=True)
    except (xlrd.XLRDError, CompDocError, OSError, ValueError) as exc:
        raise ParseError(f"Could not read spreadsheet: {exc}") from exc

    try:
        if book.nsheets == 0:
            raise ParseError("Spreadsheet has no sheets.")
        worksheet = book.sheet_by_index(0)
        grid = [
            tuple(_xls_cell_value(cell, book.datemode) for cell in worksheet.row(index))
            for index in range(worksheet.nrows)
        ]
        return worksheet.name, grid
    finally:
        book.release_resources()


def _xls_cell_value(cell: xlrd.sheet.Cell, datemode: int) -> str | None:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
        return None
    if cell.ctype == xlrd.XL_CELL_DATE:
        try:
            return coerce_cell(xlrd.xldate_as_datetime(cell.value, datemode))
        except (xlrd.XLDateError, OverflowError):
            return coerce_cell(cell.value)
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return coerce_cell(bool(cell.value))
    return coerce_cell(cell.value)


def coerce_cell(value: Any) -> str | None:
    """
    Convert one workbook cell value into its string form.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            # int() keeps large avisos out of scientific notation
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    text = str(value)
    return text if text != "" else None


def _trim_trailing_blank_rows(grid: list[RawRow]) -> list[RawRow]:
    end = len(grid)
    while end > 0 and _is_blank(grid[end - 1]):
        end -= 1
    return grid[:end]


def _is_blank(row: Iterable[Any]) -> bool:
    return all(cell is None or str(cell).strip() == "" for cell in row)
