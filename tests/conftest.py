"""Shared test fixtures for the pouch document test suite."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from pouchdoc.models import RawExtraction


def _table(headers: list[str], rows: list[list[str]]) -> dict[str, Any]:
    """Build an OCR table payload: header row 0, data rows from 1."""
    cells = [
        {"rowIndex": 0, "columnIndex": col, "content": text, "kind": "columnHeader"}
        for col, text in enumerate(headers)
    ]
    for row_index, row in enumerate(rows, 1):
        cells.extend(
            {"rowIndex": row_index, "columnIndex": col, "content": text}
            for col, text in enumerate(row)
        )
    return {"rowCount": len(rows) + 1, "columnCount": len(headers), "cells": cells}


@pytest.fixture
def table_factory() -> Callable[[list[str], list[list[str]]], dict[str, Any]]:
    """Return a builder for table payloads in the OCR service's JSON shape."""
    return _table


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def guide_payload() -> dict[str, Any]:
    """An extraordinary manifest with one seal and two items, one of them a dispatch sheet."""
    return {
        "content": (
            "GUÍA DE VALIJA DIPLOMÁTICA Nº07\n"
            "EXTRAORDINARIA\n"
            "EMBAJADA DEL PERÚ EN JAPÓN"
        ),
        "keyValuePairs": [
            {"key": "DE:", "value": "GUÍA DE VALIJA DIPLOMÁTICA Nº07", "confidence": 0.9},
            {"key": "PARA:", "value": "CONSULADO GENERAL DEL PERÚ EN TOKIO", "confidence": 0.9},
            {"key": "FECHA DE\nENVIO:", "value": "19(/12/2025", "confidence": 0.8},
            {"key": "FECHA DE RECIBO:", "value": "20/12/2025", "confidence": 0.8},
            {"key": "Peso Total:", "value": "63.810 Kgrs.", "confidence": 0.8},
            {"key": "Peso Oficial:", "value": "34.700+34.500", "confidence": 0.8},
            {"key": "Total de Items:", "value": "2", "confidence": 0.9},
            {"key": "Preparado Por:", "value": "J. PEREZ", "confidence": 0.7},
            {"key": "Revisado Por:", "value": "M. QUISPE", "confidence": 0.7},
            {"key": "OBSERVACIONES:", "value": "SIN\nNOVEDAD", "confidence": 0.6},
        ],
        "tables": [
            _table(
                ["Precinto", "Precinto/Cable", "Bolsa", "Guía Aérea"],
                [["A-001", "C-17", "GRANDE", "AWB-123"]],
            ),
            _table(
                ["Nº", "DESTINATARIO", "CONTENIDO", "REMITENTE", "CAN", "PESO"],
                [
                    ["1", "SECCIÓN CONSULAR", "HR Nº5-18-A/ 3 CAJA", "DGC", "3", "0.930"],
                    ["2", "ARCHIVO CENTRAL", "OFICIOS VARIOS", "DAO", "1", "1,5"],
                    ["", "", "", "", "", ""],
                ],
            ),
        ],
    }


@pytest.fixture
def guide_raw(guide_payload: dict[str, Any]) -> RawExtraction:
    return RawExtraction.from_dict(guide_payload)


@pytest.fixture
def dispatch_sheet_payload() -> dict[str, Any]:
    """A dispatch sheet with a unit-coded header pair and a header table."""
    return {
        "content": (
            "HOJA DE REMISIÓN (DAO) Nº 5-18-A/37\n"
            "Lima, 19 de diciembre del 2025"
        ),
        "keyValuePairs": [
            {"key": "HOJA DE REMISIÓN (DAO) Nº", "value": "5-18-A/ 37", "confidence": 0.9},
            {"key": "FECHA:", "value": "Lima, 19 de diciembre del 2025", "confidence": 0.8},
            {"key": "PARA:", "value": "SECCIÓN CONSULAR EN TOKIO", "confidence": 0.8},
            {"key": "DE LA:", "value": "DIRECCIÓN DE ASUNTOS CONSULARES", "confidence": 0.8},
            {"key": "REFERENCIA:", "value": "OF. RE (DAO) N° 2-5/123", "confidence": 0.7},
            {"key": "PESO:", "value": "2,5 kg", "confidence": 0.7},
        ],
        "tables": [
            _table(
                ["DOCUMENTO", "ASUNTO", "DESTINO"],
                [["OFICIO Nº 123-2025", "REMISIÓN DE PASAPORTES", "CONSULADO EN TOKIO"]],
            ),
        ],
    }


@pytest.fixture
def dispatch_sheet_raw(dispatch_sheet_payload: dict[str, Any]) -> RawExtraction:
    return RawExtraction.from_dict(dispatch_sheet_payload)
