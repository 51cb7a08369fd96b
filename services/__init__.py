"""
Business logic services.

Each service handles one domain area.
"""

from services.bulk_upload_service import (
    BulkUploadService,
    get_bulk_upload_service,
    generate_csv_template,
    generate_excel_template,
)
from services.pricing_service import (
    PricingService,
    get_pricing_service,
    calculate_site_price,
    DEFAULT_MARKUP_PERCENTAGE,
)

__all__ = [
    "BulkUploadService",
    "get_bulk_upload_service",
    "generate_csv_template",
    "generate_excel_template",
    "PricingService",
    "get_pricing_service",
    "calculate_site_price",
    "DEFAULT_MARKUP_PERCENTAGE",
]
