"""Tests for the FastAPI REST endpoints."""

from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from pouchdoc.api.app import app
from pouchdoc.assembly.pipeline import ExtractionPipeline
from pouchdoc.assembly.store import InMemoryDispatchSheetStore
from pouchdoc.utils.config import AppConfig, LocationConfig, ValidationConfig


@pytest.fixture
def client() -> TestClient:
    """Create a FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def pipeline(config_dir: Path) -> ExtractionPipeline:
    """Pipeline over the project config tables and a fresh store."""
    config = AppConfig(
        locations=LocationConfig(locations_path=str(config_dir / "locations.yaml")),
        validation=ValidationConfig(rules_path=str(config_dir / "validation_rules.yaml")),
    )
    return ExtractionPipeline(config, InMemoryDispatchSheetStore())


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_200(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["stored_dispatch_sheets"] >= 0


class TestClassifyEndpoint:
    """Tests for POST /classify."""

    def test_classify_guide(self, client: TestClient, pipeline, guide_payload) -> None:
        with patch("pouchdoc.api.app._get_components", return_value=pipeline):
            response = client.post("/classify", json=guide_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["document_type"] == "pouchManifest"
        assert data["language"] == "spanish"
        assert 0.0 <= data["confidence"]["document_type"] <= 1.0

    def test_empty_body_is_valid(self, client: TestClient, pipeline) -> None:
        with patch("pouchdoc.api.app._get_components", return_value=pipeline):
            response = client.post("/classify", json={})

        assert response.status_code == 200
        assert response.json()["confidence"]["direction"] == 0.5

    def test_null_fields_treated_as_empty(self, client: TestClient, pipeline) -> None:
        payload = {
            "content": None,
            "keyValuePairs": [{"key": "PARA", "value": None, "confidence": None}],
            "tables": None,
        }
        with patch("pouchdoc.api.app._get_components", return_value=pipeline):
            response = client.post("/classify", json=payload)

        assert response.status_code == 200
        assert response.json()["document_type"] == "pouchManifest"

    def test_invalid_body_returns_422(self, client: TestClient) -> None:
        response = client.post("/classify", json={"keyValuePairs": "nope"})
        assert response.status_code == 422


class TestGuideEndpoint:
    """Tests for POST /guides."""

    def test_assemble_guide(self, client: TestClient, pipeline, guide_payload) -> None:
        with patch("pouchdoc.api.app._get_components", return_value=pipeline):
            response = client.post("/guides", json=guide_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["guide"]["guide_number"] == "07EXT-2025"
        assert data["guide"]["sent_at"] == "2025-12-19"
        assert len(data["guide"]["items"]) == 2
        assert len(data["linked_sheets"]) == 1
        sheet = data["linked_sheets"][0]
        assert data["guide"]["items"][0]["linked_dispatch_sheet_id"] == sheet["id"]
        assert data["validation"]["all_valid"] is True

    def test_null_cells_and_values(
        self, client: TestClient, pipeline, guide_payload, table_factory
    ) -> None:
        guide_payload["keyValuePairs"].append({"key": "FIRMA DEL RECEPTOR", "value": None})
        items = table_factory(["DESTINATARIO", "CONTENIDO"], [["ARCHIVO", "OFICIOS"]])
        items["cells"].append({"rowIndex": 1, "columnIndex": None, "content": None})
        guide_payload["tables"] = [{"rowCount": 1, "columnCount": 1, "cells": None}, items]
        with patch("pouchdoc.api.app._get_components", return_value=pipeline):
            response = client.post("/guides", json=guide_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["guide"]["receiver_signature"] is None
        assert data["guide"]["seals"] == []
        assert [item["content"] for item in data["guide"]["items"]] == ["OFICIOS"]

    def test_unexpected_failure_returns_500(self, client: TestClient, guide_payload) -> None:
        with patch(
            "pouchdoc.api.app._get_components", side_effect=RuntimeError("store offline")
        ):
            response = client.post("/guides", json=guide_payload)

        assert response.status_code == 500
        assert "store offline" in response.json()["detail"]


class TestDispatchSheetEndpoint:
    """Tests for POST /dispatch-sheets."""

    def test_assemble_dispatch_sheet(
        self, client: TestClient, pipeline, dispatch_sheet_payload
    ) -> None:
        with patch("pouchdoc.api.app._get_components", return_value=pipeline):
            response = client.post("/dispatch-sheets", json=dispatch_sheet_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["sheet"]["full_number"] == "HR N°5-18-A/37"
        assert data["sheet"]["unit_code"] == "DAO"
        assert data["sheet"]["date"] == "2025-12-19"
        assert data["sheet"]["field_confidence"]["document"] == 0.9
        assert data["validation"]["all_valid"] is True
