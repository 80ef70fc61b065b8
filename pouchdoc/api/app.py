"""FastAPI application for the pouch document extraction core.

Accepts OCR output as JSON and returns classifications, assembled guides
(with their linked dispatch sheets) and assembled dispatch sheets.
"""

import time

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from pouchdoc.assembly.pipeline import ExtractionPipeline
from pouchdoc.assembly.store import InMemoryDispatchSheetStore
from pouchdoc.models import RawExtraction
from pouchdoc.utils.config import load_config
from pouchdoc.utils.logger import get_logger

from .schemas import (
    ClassificationResponse,
    DispatchSheetResponse,
    GuideResponse,
    HealthResponse,
    RawExtractionRequest,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Pouch Document Extraction API",
    description="Classify diplomatic pouch documents and assemble manifests and dispatch sheets",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store = InMemoryDispatchSheetStore()


def _get_components() -> ExtractionPipeline:
    """Build the extraction pipeline over the process-wide sheet store."""
    return ExtractionPipeline(load_config(), _store)


def _to_raw(request: RawExtractionRequest) -> RawExtraction:
    return RawExtraction.from_dict(request.model_dump(by_alias=True))


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    return HealthResponse(status="healthy", version=VERSION, stored_dispatch_sheets=len(_store))


@app.post("/classify", response_model=ClassificationResponse)
async def classify_document(request: RawExtractionRequest) -> ClassificationResponse:
    """Guess language, document type and direction from the OCR text."""
    try:
        pipeline = _get_components()
        result = pipeline.classify(_to_raw(request))
        return ClassificationResponse(**result.to_dict())
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Classification failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/guides", response_model=GuideResponse)
async def assemble_guide(request: RawExtractionRequest) -> GuideResponse:
    """Assemble a pouch manifest and link its items to dispatch sheets.

    Args:
        request: OCR output of the manifest.

    Returns:
        The guide, the dispatch sheets created or updated for its items,
        and the validation report.
    """
    start_time = time.time()

    try:
        pipeline = _get_components()
        result = pipeline.process_guide(_to_raw(request)).to_dict()
        return GuideResponse(
            success=True,
            guide=result["guide"],
            linked_sheets=result["linked_sheets"],
            validation=result["validation"],
            processing_time_ms=(time.time() - start_time) * 1000,
        )
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Guide assembly failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.post("/dispatch-sheets", response_model=DispatchSheetResponse)
async def assemble_dispatch_sheet(request: RawExtractionRequest) -> DispatchSheetResponse:
    """Assemble a dispatch sheet with its per-field confidences.

    Args:
        request: OCR output of the dispatch sheet.

    Returns:
        The sheet and its validation report.
    """
    start_time = time.time()

    try:
        pipeline = _get_components()
        result = pipeline.process_dispatch_sheet(_to_raw(request)).to_dict()
        return DispatchSheetResponse(
            success=True,
            sheet=result["sheet"],
            validation=result["validation"],
            processing_time_ms=(time.time() - start_time) * 1000,
        )
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Dispatch sheet assembly failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
