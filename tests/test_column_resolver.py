from __future__ import annotations

import unittest

from app.mappers.column_resolver import (
    CANONICAL_FIELDS,
    DEFAULT_COLUMN_HEADERS,
    ColumnResolver,
    MissingColumnsError,
    normalize_header,
)

HEADERS = [
    "Aviso",
    "Texto Breve",
    "Tipologia",
    "Prioridad",
    "zona",
    "ubicación",
    "Fecha Creado",
    "Fin Avería con tiempo de respuesta",
]


class TestNormalizeHeader(unittest.TestCase):
    def test_collapses_line_breaks_and_spaces(self) -> None:
        self.assertEqual(
            normalize_header("  Fin Avería con\r\ntiempo   de\nrespuesta "),
            "fin avería con tiempo de respuesta",
        )

    def test_non_string_headers_normalize_to_empty(self) -> None:
        self.assertEqual(normalize_header(None), "")
        self.assertEqual(normalize_header(42), "")


class TestColumnResolver(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = ColumnResolver()

    def test_resolves_positions_for_every_field(self) -> None:
        columns = self.resolver.resolve(HEADERS)

        self.assertEqual(columns.aviso, 0)
        self.assertEqual(columns.zona, 4)
        self.assertEqual(columns.ubicacion, 5)
        self.assertEqual(columns.fin_averia_tiempo_respuesta, 7)

    def test_matching_ignores_case_and_layout_but_not_spelling(self) -> None:
        headers = ["Notas", "AVISO", "texto  breve", "TIPOLOGIA", "prioridad", "Zona",
                   "Ubicación", "fecha\ncreado", "FIN AVERÍA CON TIEMPO DE RESPUESTA"]

        columns = self.resolver.resolve(headers)

        self.assertEqual(columns.aviso, 1)
        self.assertEqual(columns.texto_breve, 2)
        self.assertEqual(columns.fecha_creacion, 7)

        headers[6] = "ubicacion"
        with self.assertRaises(MissingColumnsError) as ctx:
            self.resolver.resolve(headers)
        self.assertEqual(ctx.exception.missing, ("ubicación",))

    def test_first_duplicate_header_wins(self) -> None:
        columns = self.resolver.resolve(HEADERS + ["Aviso"])

        self.assertEqual(columns.aviso, 0)

    def test_missing_prioridad_lists_missing_and_available(self) -> None:
        headers = [header for header in HEADERS if header != "Prioridad"]

        with self.assertRaises(MissingColumnsError) as ctx:
            self.resolver.resolve(headers)

        error = ctx.exception
        self.assertEqual(error.missing, ("Prioridad",))
        self.assertEqual(list(error.available), headers)
        self.assertIn("Prioridad", str(error))
        self.assertEqual(error.errors[0].canonical_field, "prioridad")
        payload = error.to_dict()
        self.assertEqual(payload["missing"], ["Prioridad"])
        self.assertEqual(payload["errors"][0]["code"], "required_column_missing")

    def test_value_at_tolerates_short_rows(self) -> None:
        columns = self.resolver.resolve(HEADERS)

        self.assertIsNone(columns.value_at(("123", None), "zona"))
        self.assertEqual(columns.value_at(("123",), "aviso"), "123")

    def test_header_table_must_cover_each_field_once(self) -> None:
        with self.assertRaises(ValueError):
            ColumnResolver(DEFAULT_COLUMN_HEADERS[:-1])
        with self.assertRaises(ValueError):
            ColumnResolver(DEFAULT_COLUMN_HEADERS + (("Numero", "numero"),))

    def test_canonical_fields_match_header_table(self) -> None:
        self.assertEqual(
            sorted(CANONICAL_FIELDS),
            sorted(field for _, field in DEFAULT_COLUMN_HEADERS),
        )


if __name__ == "__main__":
    unittest.main()
