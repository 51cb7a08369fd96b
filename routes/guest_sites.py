"""
Guest blog site API routes: bulk upload and client pricing.

Bulk upload flow:
    GET  /bulk-upload/template   CSV template
    POST /bulk-upload/parse      file -> columns + suggested mappings
    POST /bulk-upload/preview    file + mappings -> validated preview
    POST /bulk-upload/save       preview_id/preview_data + selected rows -> saved sites
"""

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse, Response
from typing import Literal, Optional
import structlog

from models.bulk_upload import (
    BulkSaveRequest,
    BulkUploadPreview,
    BulkUploadResult,
    ParseResponse,
)
from models.pricing import PriceOverride, PriceOverrideSet, SitePricing
from services.bulk_upload_service import generate_csv_template, get_bulk_upload_service
from services.pricing_service import get_pricing_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/guest-sites", tags=["Guest Blog Sites"])

TEMPLATE_FILENAME = "guest-blog-sites-template.csv"


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# BULK UPLOAD
# ===================

@router.get("/bulk-upload/template")
async def download_template(
    variant: Literal["current", "legacy"] = Query("current", description="Header layout")
):
    """
    Download the CSV template for bulk upload.

    "current" is the supported layout; "legacy" reproduces the older
    long-label layout for operators still using it.
    """
    return Response(
        content=generate_csv_template(variant),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'}
    )


@router.post("/bulk-upload/parse", response_model=ParseResponse)
async def parse_bulk_upload(
    file: UploadFile = File(..., description="CSV or Excel file"),
    client_id: Optional[str] = Form(None, alias="clientId", description="Client for markup calculation")
):
    """
    Parse an uploaded file and suggest column mappings.

    Raises:
        413: File too large
        415: Unsupported file type
        422: Empty or unreadable file
    """
    try:
        content = await file.read()
        service = get_bulk_upload_service()
        return service.parse_file(
            file.filename,
            content,
            content_type=file.content_type,
            client_id=client_id
        )

    except Exception as e:
        return handle_error(e)


@router.post("/bulk-upload/preview", response_model=BulkUploadPreview)
async def preview_bulk_upload(
    file: UploadFile = File(..., description="CSV or Excel file"),
    mappings: str = Form(..., description="JSON list of {csv_column, site_field}"),
    client_id: Optional[str] = Form(None, alias="clientId", description="Client for markup calculation")
):
    """
    Validate the first rows of an upload with the chosen column mappings.

    Raises:
        413: File too large
        415: Unsupported file type
        422: Invalid mappings, empty or unreadable file
    """
    try:
        content = await file.read()
        service = get_bulk_upload_service()
        return service.preview_file(
            file.filename,
            content,
            mappings,
            content_type=file.content_type,
            client_id=client_id
        )

    except Exception as e:
        return handle_error(e)


@router.post("/bulk-upload/save", response_model=BulkUploadResult)
async def save_bulk_upload(data: BulkSaveRequest):
    """
    Save selected rows from a preview.

    Per-row failures are reported in the result, not as an error response.

    Raises:
        404: Preview expired
    """
    try:
        service = get_bulk_upload_service()
        return service.save(data)

    except Exception as e:
        return handle_error(e)


# ===================
# PRICING
# ===================

@router.get("/pricing/{client_id}", response_model=list[SitePricing])
async def get_client_pricing(client_id: str):
    """
    Prices of all active sites for a client.

    Raises:
        404: Client not found
    """
    try:
        return get_pricing_service().get_client_pricing(client_id)

    except Exception as e:
        return handle_error(e)


@router.get("/pricing/{client_id}/{site_id}", response_model=SitePricing)
async def get_site_pricing(client_id: str, site_id: str):
    """
    Price of one site for a client.

    Raises:
        404: Client or site not found
    """
    try:
        return get_pricing_service().get_site_pricing(client_id, site_id)

    except Exception as e:
        return handle_error(e)


@router.post("/pricing/{client_id}/{site_id}/override", response_model=PriceOverride)
async def set_price_override(client_id: str, site_id: str, data: PriceOverrideSet):
    """
    Set or replace the price override for a client-site pair.

    Raises:
        404: Client or site not found
        422: Negative price
    """
    try:
        return get_pricing_service().set_override(client_id, site_id, data.override_price)

    except Exception as e:
        return handle_error(e)


@router.delete("/pricing/{client_id}/{site_id}/override", status_code=204)
async def remove_price_override(client_id: str, site_id: str):
    """Remove the price override for a client-site pair (no error if absent)."""
    try:
        get_pricing_service().remove_override(client_id, site_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)
