"""
tests/test_case_import_service.py

End-to-end tests for CaseImportService: real .xlsx bytes in, ImportReport out,
persisted into the in-memory record store.
"""

from __future__ import annotations

import unittest

from app.domain.case_import import Created, Failed, Skipped
from app.mappers.column_resolver import MissingColumnsError
from app.parsers.spreadsheet_parser import ParseError
from app.repositories.memory_case_store import InMemoryCaseStore
from app.services.case_import_service import CaseImportService
from tests.conftest import CASE_HEADERS, KNOWN_LOCATIONS, build_xls, build_xlsx

MIXED_ROWS = [
    ["400001", "Fuga de agua", "Plomeria", "Alta", "Zona Bogota", "VT-1008-5249", "2024-01-15", None],
    ["", "Sin aviso", None, None, "Zona Oriental", None, None, None],
    [None, None, None, None, None, None, None, None],
    ["400002", "Luz intermitente", "Electrico", "Media", "Zona Caribe", None, None, None],
    ["400003", "Aire acondicionado", "HVAC", "Baja", "zona oriental", "9999", None, None],
    ["400004", "Puerta", "Cerrajeria", "Alta", "Zona Santander", "1008", 45306, None],
]


class CaseImportServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryCaseStore(locations=KNOWN_LOCATIONS)
        self.service = CaseImportService(log_row_errors=False)

    def test_mixed_file_counts_add_up(self) -> None:
        report = self.service.import_cases(content=build_xlsx(MIXED_ROWS), store=self.store)

        self.assertEqual(report.total_rows, 6)
        self.assertEqual(report.valid_cases_found, 3)
        self.assertEqual(report.created, 2)
        self.assertEqual(report.failed, 1)
        self.assertEqual(
            report.created + report.updated + report.skipped + report.failed,
            report.valid_cases_found,
        )
        self.assertEqual(len(self.store.all_cases()), 2)

    def test_errors_are_row_errors_then_store_failures(self) -> None:
        report = self.service.import_cases(content=build_xlsx(MIXED_ROWS), store=self.store)

        self.assertEqual(len(report.errors), 3)
        self.assertTrue(report.errors[0].startswith("Row 3: Aviso is required"))
        self.assertTrue(report.errors[1].startswith('Row 5: Zona "Zona Caribe"'))
        self.assertEqual(report.errors[2], 'Aviso 400003: Location code "9999" does not exist.')

    def test_blank_rows_are_neither_valid_nor_errors(self) -> None:
        rows = [
            ["400010", None, None, None, "Zona Oriental", None, None, None],
            [None, "  ", None, None, None, None, None, None],
            ["400011", None, None, None, "Zona Oriental", None, None, None],
        ]

        report = self.service.import_cases(content=build_xlsx(rows), store=self.store)

        self.assertEqual(report.total_rows, 3)
        self.assertEqual(report.valid_cases_found, 2)
        self.assertEqual(report.errors, [])
        self.assertEqual([outcome.row_number for outcome in report.outcomes], [2, 4])

    def test_reimport_is_idempotent(self) -> None:
        content = build_xlsx(MIXED_ROWS)
        self.service.import_cases(content=content, store=self.store)
        snapshot = {case.aviso: case for case in self.store.all_cases()}

        report = self.service.import_cases(content=content, store=self.store)

        self.assertEqual(report.created, 0)
        self.assertEqual(report.updated, 0)
        self.assertEqual(report.skipped, 2)
        self.assertTrue(
            all(isinstance(outcome, (Skipped, Failed)) for outcome in report.outcomes)
        )
        self.assertEqual({case.aviso: case for case in self.store.all_cases()}, snapshot)

    def test_changed_row_is_updated_on_reimport(self) -> None:
        first = [["400020", "Fuga", None, "Alta", "Zona Bogota", "5249", "2024-01-15", None]]
        second = [["400020", "Fuga", None, "Baja", "Zona Bogota", "5249", "2024-01-15", None]]
        self.service.import_cases(content=build_xlsx(first), store=self.store)

        report = self.service.import_cases(content=build_xlsx(second), store=self.store)

        self.assertEqual(report.updated, 1)
        payload = report.to_dict()
        self.assertEqual(
            payload["success"][0]["changes"],
            {"prioridad": {"old": "Alta", "new": "Baja"}},
        )
        self.assertTrue(payload["success"][0]["updated"])

    def test_leading_zero_aviso_and_zone_are_normalized(self) -> None:
        rows = [["00123", None, None, None, "bogota", None, None, None]]

        report = self.service.import_cases(content=build_xlsx(rows), store=self.store)

        outcome = report.outcomes[0]
        self.assertIsInstance(outcome, Created)
        self.assertEqual(outcome.aviso, "00123")
        self.assertEqual(outcome.record.zona, "Zona Bogotá")
        self.assertEqual(outcome.record.estado, "Abierto")
        self.assertIsNotNone(outcome.record.fecha_creacion)

    def test_missing_required_column_aborts_before_writes(self) -> None:
        header = [name for name in CASE_HEADERS if name != "Prioridad"]
        rows = [["400030", None, None, "Zona Oriental", None, None, None]]

        with self.assertRaises(MissingColumnsError) as ctx:
            self.service.import_cases(content=build_xlsx(rows, header=header), store=self.store)

        self.assertIn("Prioridad", ctx.exception.missing)
        self.assertEqual(self.store.all_cases(), [])

    def test_columns_may_appear_in_any_order(self) -> None:
        header = list(reversed(CASE_HEADERS))
        row = [None, "2024-01-15", "5249", "Zona Oriental", "Alta", "Plomeria", "Fuga", "400040"]

        report = self.service.import_cases(content=build_xlsx([row], header=header), store=self.store)

        self.assertEqual(report.created, 1)
        created = self.store.get_case_by_aviso("400040")
        self.assertEqual(created.texto_breve, "Fuga")
        self.assertEqual(created.denominacion_ubicacion_tecnica, "Tienda Centro")

    def test_legacy_xls_workbook_is_imported(self) -> None:
        rows = [[400001, "Fuga", "Plomeria", "Alta", "Zona Bogota", "VT-1008-5249", None, None]]

        report = self.service.import_cases(content=build_xls(rows), store=self.store)

        self.assertEqual(report.created, 1)
        self.assertEqual(report.errors, [])
        created = self.store.get_case_by_aviso("400001")
        self.assertEqual(created.zona, "Zona Bogotá")
        self.assertEqual(created.ubicacion, "5249")

    def test_unreadable_buffer_raises_parse_error(self) -> None:
        with self.assertRaises(ParseError):
            self.service.import_cases(content=b"aviso;zona\n1;x\n", store=self.store)

    def test_header_only_file_raises_parse_error(self) -> None:
        with self.assertRaises(ParseError):
            self.service.import_cases(content=build_xlsx([]), store=self.store)


if __name__ == "__main__":
    unittest.main()
