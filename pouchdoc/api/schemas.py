"""Pydantic request/response schemas for the FastAPI endpoints."""

import datetime

from pydantic import BaseModel, ConfigDict, Field


# Request fields accept null; RawExtraction.from_dict turns nulls into
# empty strings, zeros and empty lists.


class KeyValuePairIn(BaseModel):
    """A label/value pair detected by OCR."""

    key: str | None = None
    value: str | None = None
    confidence: float | None = None


class TableCellIn(BaseModel):
    """A table cell; ``kind`` is ``columnHeader`` for header cells."""

    model_config = ConfigDict(populate_by_name=True)

    row_index: int | None = Field(None, alias="rowIndex")
    column_index: int | None = Field(None, alias="columnIndex")
    content: str | None = None
    kind: str | None = None
    confidence: float | None = None


class TableIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    row_count: int | None = Field(None, alias="rowCount")
    column_count: int | None = Field(None, alias="columnCount")
    cells: list[TableCellIn] | None = None


class RawExtractionRequest(BaseModel):
    """OCR output of one document, as produced by the OCR service."""

    model_config = ConfigDict(populate_by_name=True)

    content: str | None = None
    key_value_pairs: list[KeyValuePairIn] | None = Field(None, alias="keyValuePairs")
    tables: list[TableIn] | None = None


class ClassificationResponse(BaseModel):
    """Response schema for a classification request."""

    language: str
    document_type: str
    direction: str
    confidence: dict[str, float]
    matched_keywords: dict[str, list[str]]


class ItemResponse(BaseModel):
    item_number: int
    recipient: str
    content: str
    sender: str | None = None
    quantity: int | None = None
    weight: float | None = None
    linked_dispatch_sheet_id: str | None = None


class SealResponse(BaseModel):
    seal_id: str | None = None
    seal_or_cable_id: str | None = None
    bag_size: str | None = None
    air_waybill_number: str | None = None


class GuideRecord(BaseModel):
    """An assembled pouch manifest."""

    guide_number: str
    direction: str
    extraordinary: bool
    sent_at: datetime.date | None = None
    received_at: datetime.date | None = None
    sender_name: str
    recipient_name: str
    origin_city: str | None = None
    origin_country: str | None = None
    destination_city: str | None = None
    destination_country: str | None = None
    declared_weight: float | None = None
    official_weight: float | None = None
    package_count: int | None = None
    items: list[ItemResponse]
    seals: list[SealResponse]
    prepared_by: str | None = None
    reviewed_by: str | None = None
    observations: str | None = None
    receiver_signature: str | None = None


class DispatchSheetRecord(BaseModel):
    """An assembled dispatch sheet with per-field confidence."""

    id: str | None = None
    full_number: str
    sequence_number: int
    unit_code: str
    date: datetime.date | None = None
    to: str | None = None
    sender: str | None = None
    reference: str | None = None
    document: str | None = None
    subject: str | None = None
    destination: str | None = None
    weight: float | None = None
    field_confidence: dict[str, float]


class ValidationResultResponse(BaseModel):
    """Response schema for a validation check result."""

    field_name: str
    is_valid: bool
    message: str
    rule_name: str


class ValidationResponse(BaseModel):
    all_valid: bool
    results: list[ValidationResultResponse]
    warnings: list[str]
    field_confidences: dict[str, float]


class GuideResponse(BaseModel):
    """Response schema for a guide assembly request."""

    success: bool
    guide: GuideRecord
    linked_sheets: list[DispatchSheetRecord]
    validation: ValidationResponse | None = None
    processing_time_ms: float


class DispatchSheetResponse(BaseModel):
    """Response schema for a dispatch sheet assembly request."""

    success: bool
    sheet: DispatchSheetRecord
    validation: ValidationResponse
    processing_time_ms: float


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    stored_dispatch_sheets: int
