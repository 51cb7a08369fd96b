"""
Bulk upload schemas: column mappings, preview rows and save results.
"""

from pydantic import BaseModel, Field, model_validator
from typing import Any, Optional
from decimal import Decimal

from models.base import BaseSchema


class ColumnMapping(BaseSchema):
    """One uploaded header mapped onto a canonical site field."""
    csv_column: str = Field(..., min_length=1, examples=["Site URL"])
    site_field: str = Field(..., min_length=1, examples=["site_url"])


class UploadColumn(BaseModel):
    """Canonical field a header can be mapped to."""
    key: str
    label: str
    required: bool
    order: int


class RowValidationError(BaseModel):
    """Single validation problem found in one uploaded row."""
    row: int
    field: str
    value: Optional[Any] = None
    error: str


class PreviewRow(BaseModel):
    """
    One validated upload row as shown to the operator.

    site_url and base_price carry the normalized values when
    normalization succeeded, the raw input otherwise.
    """
    row_index: int = Field(..., ge=1)
    site_url: str = ""
    da: int = 0
    dr: int = 0
    ahrefs_traffic: int = 0
    ss: Optional[int] = None
    tat: str = ""
    category: str = ""
    status: str = "ACTIVE"
    base_price: int = 0
    country: str = ""
    publisher: str = ""
    site_language: str = ""
    displayed_price: Decimal = Decimal("0")
    is_valid: bool = False
    errors: list[RowValidationError] = Field(default_factory=list)


class ParseResponse(BaseModel):
    """Result of the parse step: detected columns and suggested mappings."""
    total_rows: int
    available_columns: list[str]
    auto_mappings: list[ColumnMapping]
    column_order_warnings: list[str] = Field(default_factory=list)
    upload_columns: list[UploadColumn]
    client_percentage: Decimal
    contract_version: str


class BulkUploadPreview(BaseModel):
    """Bounded, annotated preview of an upload."""
    total_rows: int
    valid_rows: int
    invalid_rows: int
    preview_data: list[PreviewRow]
    column_mappings: list[ColumnMapping]
    available_columns: list[str]
    preview_id: Optional[str] = None
    contract_version: str


class BulkSaveRequest(BaseModel):
    """
    Save selected preview rows.

    Either preview_id (server-cached preview) or preview_data must be sent.
    """
    preview_id: Optional[str] = None
    preview_data: Optional[list[PreviewRow]] = None
    selected_rows: list[int]

    @model_validator(mode="after")
    def require_preview_source(self):
        if not self.preview_id and self.preview_data is None:
            raise ValueError("Either preview_id or preview_data is required")
        return self


class BulkUploadResult(BaseModel):
    """Outcome of committing selected rows."""
    saved: int
    errors: list[str] = Field(default_factory=list)
    message: str
