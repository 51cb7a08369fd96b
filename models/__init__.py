"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.site import (
    SiteCategory,
    SiteStatus,
    CATEGORY_DISPLAY_NAMES,
    SiteCreate,
    SiteResponse,
)
from models.publisher import Publisher
from models.client import Client
from models.pricing import (
    PriceOverrideSet,
    PriceOverride,
    SitePricing,
)
from models.bulk_upload import (
    ColumnMapping,
    UploadColumn,
    RowValidationError,
    PreviewRow,
    ParseResponse,
    BulkUploadPreview,
    BulkSaveRequest,
    BulkUploadResult,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Site
    "SiteCategory",
    "SiteStatus",
    "CATEGORY_DISPLAY_NAMES",
    "SiteCreate",
    "SiteResponse",

    # Publisher / Client
    "Publisher",
    "Client",

    # Pricing
    "PriceOverrideSet",
    "PriceOverride",
    "SitePricing",

    # Bulk upload
    "ColumnMapping",
    "UploadColumn",
    "RowValidationError",
    "PreviewRow",
    "ParseResponse",
    "BulkUploadPreview",
    "BulkSaveRequest",
    "BulkUploadResult",
]
