"""
tests/test_case_import_router.py

HTTP tests for POST /cases/import with the record store swapped for the
in-memory implementation.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_case_store
from app.main import create_app
from app.repositories.memory_case_store import InMemoryCaseStore
from tests.conftest import CASE_HEADERS, KNOWN_LOCATIONS, build_xlsx

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture()
def case_store() -> InMemoryCaseStore:
    return InMemoryCaseStore(locations=KNOWN_LOCATIONS)


@pytest.fixture()
def client(case_store: InMemoryCaseStore) -> TestClient:
    application = create_app()
    application.dependency_overrides[get_case_store] = lambda: case_store
    return TestClient(application)


def _upload(client: TestClient, content: bytes):
    return client.post(
        "/cases/import",
        files={"file": ("casos.xlsx", content, XLSX_MEDIA_TYPE)},
    )


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_all_rows_created_returns_200(client: TestClient, case_store: InMemoryCaseStore) -> None:
    content = build_xlsx(
        [
            ["400001", "Fuga", "Plomeria", "Alta", "Zona Bogota", "VT-1008-5249", "2024-01-15", None],
            ["400002", "Luz", "Electrico", "Media", "Zona Oriental", None, None, None],
        ]
    )

    response = _upload(client, content)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Import completed: 2 cases created"
    assert body["summary"]["totalRows"] == 2
    assert body["summary"]["validCasesFound"] == 2
    assert body["summary"]["created"] == 2
    assert body["errors"] == []
    assert body["success"][0]["aviso"] == "400001"
    assert body["success"][0]["data"]["denominacion_ubicacion_tecnica"] == "Tienda Centro"
    assert len(case_store.all_cases()) == 2


def test_reimport_reports_skipped_cases(client: TestClient) -> None:
    content = build_xlsx([["400003", None, None, None, "Zona Oriental", None, None, None]])
    _upload(client, content)

    response = _upload(client, content)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Import completed: 0 cases created, 1 cases skipped (no changes)"
    assert body["skippedCases"] == [{"aviso": "400003", "reason": "duplicate, no changes"}]


def test_partial_failure_returns_207(client: TestClient) -> None:
    content = build_xlsx(
        [
            ["400004", None, None, None, "Zona Oriental", None, None, None],
            ["400005", None, None, None, "Zona Caribe", None, None, None],
        ]
    )

    response = _upload(client, content)

    assert response.status_code == 207
    body = response.json()
    assert body["summary"]["created"] == 1
    assert body["summary"]["errors"] == 1
    assert body["message"].endswith(", 1 errors")


def test_no_successful_rows_returns_400_with_report(client: TestClient) -> None:
    content = build_xlsx([["abc", None, None, None, "Zona Oriental", None, None, None]])

    response = _upload(client, content)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] == []
    assert body["errors"][0].startswith("Row 2: Aviso must be a non-negative whole number")


def test_missing_column_returns_400_with_detail(client: TestClient) -> None:
    header = [name for name in CASE_HEADERS if name != "Prioridad"]
    content = build_xlsx([["400006", None, None, "Zona Oriental", None, None, None]], header=header)

    response = _upload(client, content)

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["missing"] == ["Prioridad"]
    assert "Prioridad" in detail["message"]


def test_non_workbook_upload_returns_400(client: TestClient) -> None:
    response = _upload(client, b"aviso,zona\n1,Zona Oriental\n")

    assert response.status_code == 400
    assert isinstance(response.json()["detail"], str)
