"""
Bulk upload service for guest blog sites.

Pipeline:
    parse_file()    bytes -> headers + suggested column mappings
    preview_file()  bytes + mappings -> validated preview of the first rows
    save()          selected preview rows -> persisted sites

Rows are validated and committed one at a time. A bad row never aborts
the batch: validation problems are attached to the row, commit problems
are collected as "Row N: ..." messages.
"""

from decimal import Decimal
from io import BytesIO
from typing import Any, Optional
import structlog

import pandas as pd
from openpyxl.utils import get_column_letter
from pydantic import ValidationError as PydanticValidationError

from config.settings import settings
from exceptions import (
    AppError,
    FileTooLargeError,
    PreviewNotFoundError,
    SiteURLExistsError,
)
from models.bulk_upload import (
    BulkSaveRequest,
    BulkUploadPreview,
    BulkUploadResult,
    ColumnMapping,
    ParseResponse,
    PreviewRow,
    RowValidationError,
)
from models.publisher import Publisher
from models.site import SiteCreate
from parsers.tabular_parser import parse_upload
from repositories.base import MarketplaceRepository
from services import preview_cache_service
from services.column_mapping import (
    COLUMN_ALIASES,
    EXPECTED_COLUMN_ORDER,
    LEGACY_COLUMN_ORDER,
    UPLOAD_COLUMNS,
    UPLOAD_CONTRACT_VERSION,
    apply_column_mappings,
    detect_column_mappings,
    parse_mapping_payload,
    validate_column_order,
)
from services.pricing_service import PricingService, calculate_site_price
from services.row_validator import find_publisher, parse_number, validate_row
from utils.url_normalization import normalize_url

logger = structlog.get_logger(__name__)


# ===================
# CSV TEMPLATES
# ===================

TEMPLATE_ROWS: list[list[str]] = [
    ["https://techcrunch.com", "editor@techcrunch.com", "95", "94", "15000000", "2", "TECHNOLOGY_GADGETS", "US", "en", "2-3 days", "500", "ACTIVE"],
    ["https://forbes.com/business", "business@forbes.com", "92", "93", "12000000", "1", "BUSINESS_ENTREPRENEURSHIP", "US", "en", "3-5 days", "450", "ACTIVE"],
    ["https://entrepreneur.com", "editor@entrepreneur.com", "88", "87", "8500000", "3", "BUSINESS_ENTREPRENEURSHIP", "US", "en", "1-2 days", "400", "ACTIVE"],
    ["https://mashable.com", "tech@mashable.com", "85", "86", "7200000", "2", "TECHNOLOGY_GADGETS", "US", "en", "2-4 days", "350", "ACTIVE"],
    ["https://businessinsider.com", "editor@businessinsider.com", "90", "89", "9800000", "1", "BUSINESS_ENTREPRENEURSHIP", "US", "en", "3-4 days", "425", "ACTIVE"],
    ["https://healthline.com", "editorial@healthline.com", "82", "83", "6500000", "1", "HEALTH_FITNESS", "US", "en", "5-7 days", "300", "ACTIVE"],
    ["https://investopedia.com", "finance@investopedia.com", "88", "87", "3800000", "1", "FINANCE_INVESTMENT", "US", "en", "3-5 days", "375", "ACTIVE"],
    ["https://cnn.com/travel", "travel@cnn.com", "87", "88", "8900000", "2", "TRAVEL_TOURISM", "US", "en", "3-5 days", "400", "ACTIVE"],
    ["https://foodnetwork.com", "editor@foodnetwork.com", "81", "80", "3600000", "1", "FOOD_NUTRITION", "US", "en", "4-6 days", "250", "ACTIVE"],
    ["https://vogue.com", "fashion@vogue.com", "89", "88", "4200000", "1", "FASHION_BEAUTY", "US", "en", "7-10 days", "450", "ACTIVE"],
]

LEGACY_TEMPLATE_ROWS: list[list[str]] = [
    ["https://techcrunch.com", "95", "94", "15000000", "2", "2-3 days", "TECHNOLOGY_GADGETS", "ACTIVE", "500", "US", "TechCrunch Editor", "en"],
    ["https://forbes.com/business", "92", "93", "12000000", "1", "3-5 days", "BUSINESS_ENTREPRENEURSHIP", "ACTIVE", "450", "US", "Forbes Business Team", "en"],
    ["https://entrepreneur.com", "88", "87", "8500000", "3", "1-2 days", "BUSINESS_ENTREPRENEURSHIP", "ACTIVE", "400", "US", "Entrepreneur Magazine", "en"],
    ["https://mashable.com", "85", "86", "7200000", "2", "2-4 days", "TECHNOLOGY_GADGETS", "ACTIVE", "350", "US", "Mashable Tech", "en"],
    ["https://businessinsider.com", "90", "89", "9800000", "1", "3-4 days", "BUSINESS_ENTREPRENEURSHIP", "ACTIVE", "425", "US", "Business Insider", "en"],
    ["https://healthline.com", "82", "83", "6500000", "1", "5-7 days", "HEALTH_FITNESS", "ACTIVE", "300", "US", "Healthline Editorial", "en"],
    ["https://webmd.com", "80", "81", "5800000", "2", "4-6 days", "HEALTH_FITNESS", "ACTIVE", "275", "US", "WebMD Health", "en"],
    ["https://mayoclinic.org", "85", "84", "4200000", "1", "7-10 days", "HEALTH_FITNESS", "ACTIVE", "350", "US", "Mayo Clinic", "en"],
    ["https://investopedia.com", "88", "87", "3800000", "1", "3-5 days", "FINANCE_INVESTMENT", "ACTIVE", "375", "US", "Investopedia Finance", "en"],
    ["https://nerdwallet.com", "82", "83", "3200000", "2", "2-4 days", "FINANCE_INVESTMENT", "ACTIVE", "325", "US", "NerdWallet Team", "en"],
]

TEMPLATE_VARIANTS: dict[str, tuple[list[str], list[list[str]]]] = {
    "current": (EXPECTED_COLUMN_ORDER, TEMPLATE_ROWS),
    "legacy": (LEGACY_COLUMN_ORDER, LEGACY_TEMPLATE_ROWS),
}


def generate_csv_template(variant: str = "current") -> str:
    """
    CSV template for download: header row plus ten sample rows.

    Raises:
        KeyError: Unknown variant
    """
    headers, rows = TEMPLATE_VARIANTS[variant]
    lines = [",".join(headers)]
    lines.extend(",".join(row) for row in rows)
    return "\n".join(lines)


NUMERIC_TEMPLATE_FIELDS = {"da", "dr", "ahrefs_traffic", "ss", "base_price"}
EXCEL_SHEET_NAME = "Guest Blog Sites"


def generate_excel_template(variant: str = "current") -> bytes:
    """
    Excel (.xlsx) version of the CSV template.

    Metric and price columns are written as numbers; column widths fit
    the longest cell.

    Raises:
        KeyError: Unknown variant
    """
    headers, rows = TEMPLATE_VARIANTS[variant]
    df = pd.DataFrame(rows, columns=headers)

    for column in headers:
        if COLUMN_ALIASES.get(column.lower()) in NUMERIC_TEMPLATE_FIELDS:
            df[column] = pd.to_numeric(df[column])

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=EXCEL_SHEET_NAME, index=False)
        sheet = writer.sheets[EXCEL_SHEET_NAME]
        for index, column in enumerate(headers, start=1):
            width = max(len(column), *(len(str(v)) for v in df[column])) + 2
            sheet.column_dimensions[get_column_letter(index)].width = width

    return output.getvalue()


class BulkUploadService:
    """
    Bulk site upload business logic.

    Repository and pricing are injected; nothing here touches a global
    database client.
    """

    def __init__(
        self,
        repository: MarketplaceRepository,
        pricing_service: Optional[PricingService] = None,
        preview_limit: Optional[int] = None,
    ):
        self.repository = repository
        self.pricing = pricing_service or PricingService(repository)
        self.preview_limit = preview_limit or settings.preview_row_limit

    # ===================
    # PARSE
    # ===================

    def parse_file(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> ParseResponse:
        """
        Parse an upload and suggest column mappings.

        Raises:
            FileTooLargeError, UnsupportedFileTypeError, EmptyDatasetError,
            TabularParseError
        """
        self._check_size(content)
        parsed = parse_upload(filename, content, content_type)

        auto_mappings = detect_column_mappings(parsed.headers)
        _, warnings = validate_column_order(parsed.headers)
        percentage = self.pricing.get_client_percentage(client_id)

        logger.info(
            "bulk_upload_parsed",
            filename=filename,
            total_rows=parsed.total_rows,
            mapped_columns=len(auto_mappings),
            order_warnings=len(warnings)
        )

        return ParseResponse(
            total_rows=parsed.total_rows,
            available_columns=parsed.headers,
            auto_mappings=auto_mappings,
            column_order_warnings=warnings,
            upload_columns=UPLOAD_COLUMNS,
            client_percentage=percentage,
            contract_version=UPLOAD_CONTRACT_VERSION,
        )

    # ===================
    # PREVIEW
    # ===================

    def preview_file(
        self,
        filename: Optional[str],
        content: bytes,
        mappings_payload: Any,
        content_type: Optional[str] = None,
        client_id: Optional[str] = None,
    ) -> BulkUploadPreview:
        """
        Parse an upload with operator-chosen mappings and build the preview.

        The preview rows are cached so save() can commit them by preview_id.

        Raises:
            InvalidColumnMappingError: Malformed mapping payload
            FileTooLargeError, UnsupportedFileTypeError, EmptyDatasetError,
            TabularParseError
        """
        mappings = parse_mapping_payload(mappings_payload)
        self._check_size(content)
        parsed = parse_upload(filename, content, content_type)
        percentage = self.pricing.get_client_percentage(client_id)

        preview = self.generate_preview(
            parsed.rows,
            mappings,
            client_percentage=percentage,
            available_columns=parsed.headers,
        )
        preview.preview_id = preview_cache_service.store_preview(
            preview.preview_data,
            ttl_minutes=settings.preview_ttl_minutes,
        )
        return preview

    def generate_preview(
        self,
        rows: list[dict[str, str]],
        column_mappings: list[ColumnMapping],
        client_percentage: Optional[Decimal] = None,
        available_columns: Optional[list[str]] = None,
    ) -> BulkUploadPreview:
        """
        Validate the first preview_limit rows and price them.

        Rows past the limit are counted in total_rows but never validated,
        so they can never be selected for saving.
        """
        publishers = self.repository.list_publishers()
        if client_percentage is None:
            client_percentage = Decimal(str(settings.default_markup_percentage))

        preview_data: list[PreviewRow] = []
        for position, raw_row in enumerate(rows[:self.preview_limit], start=1):
            mapped = apply_column_mappings(raw_row, column_mappings)
            errors = validate_row(mapped, position, publishers)
            preview_data.append(self._build_preview_row(mapped, position, errors, client_percentage))

        valid_rows = sum(1 for row in preview_data if row.is_valid)

        if available_columns is None:
            available_columns = list(rows[0].keys()) if rows else []

        logger.info(
            "bulk_upload_preview_generated",
            total_rows=len(rows),
            previewed=len(preview_data),
            valid_rows=valid_rows,
            invalid_rows=len(preview_data) - valid_rows
        )

        return BulkUploadPreview(
            total_rows=len(rows),
            valid_rows=valid_rows,
            invalid_rows=len(preview_data) - valid_rows,
            preview_data=preview_data,
            column_mappings=column_mappings,
            available_columns=available_columns,
            contract_version=UPLOAD_CONTRACT_VERSION,
        )

    # ===================
    # SAVE
    # ===================

    def save(self, request: BulkSaveRequest) -> BulkUploadResult:
        """
        Commit the selected rows of a preview.

        Cached previews (preview_id) are committed as validated. Rows sent
        back by the client are validated again first.

        Raises:
            PreviewNotFoundError: preview_id expired or unknown
        """
        if request.preview_id:
            rows = preview_cache_service.retrieve_preview(request.preview_id)
            if rows is None:
                raise PreviewNotFoundError(request.preview_id)
        else:
            publishers = self.repository.list_publishers()
            rows = [self._revalidate(row, publishers) for row in request.preview_data or []]

        result = self.save_bulk_data(rows, request.selected_rows)

        if request.preview_id:
            preview_cache_service.delete_preview(request.preview_id)

        return result

    def save_bulk_data(self, preview_rows: list[PreviewRow], selected_rows: list[int]) -> BulkUploadResult:
        """
        Persist selected, valid rows one by one.

        Per selected row, in row order:
            1. invalid row            -> error, skip
            2. publisher not found    -> error, skip
            3. URL already stored     -> error, skip
            4. create site; failures  -> error, continue with next row

        The URL lookup is only a fast path. Uniqueness is enforced by
        storage; a rejected insert is reported the same way.
        """
        by_index = {
            row.row_index: row for row in preview_rows
            if row.row_index <= self.preview_limit
        }
        publishers = self.repository.list_publishers()

        saved = 0
        errors: list[str] = []

        for row_index in sorted(set(selected_rows)):
            row = by_index.get(row_index)
            if row is None:
                errors.append(f"Row {row_index}: Row is not part of the preview")
                continue

            if not row.is_valid:
                errors.append(f"Row {row_index}: {_describe_errors(row.errors)}")
                continue

            publisher = find_publisher(publishers, row.publisher)
            if publisher is None:
                errors.append(f'Row {row_index}: Publisher "{row.publisher}" not found')
                continue

            try:
                site_url = normalize_url(row.site_url)

                if self.repository.get_site_by_url(site_url) is not None:
                    errors.append(f'Row {row_index}: Site "{site_url}" already exists')
                    continue

                self.repository.create_site(self._to_site_create(row, site_url, publisher))
                saved += 1

            except SiteURLExistsError as e:
                errors.append(f'Row {row_index}: Site "{e.site_url}" already exists')
            except AppError as e:
                errors.append(f"Row {row_index}: {e.message}")
            except PydanticValidationError as e:
                errors.append(f"Row {row_index}: {e.errors()[0]['msg']}")
            except Exception as e:
                logger.error(
                    "bulk_row_save_failed",
                    row=row_index,
                    error=str(e),
                    error_type=type(e).__name__
                )
                errors.append(f"Row {row_index}: {e}")

        logger.info(
            "bulk_upload_saved",
            selected=len(set(selected_rows)),
            saved=saved,
            errors=len(errors)
        )

        return BulkUploadResult(
            saved=saved,
            errors=errors,
            message=f"Successfully saved {saved} guest blog sites. {len(errors)} errors occurred.",
        )

    # ===================
    # HELPERS
    # ===================

    def _check_size(self, content: bytes) -> None:
        if len(content) > settings.max_upload_bytes:
            raise FileTooLargeError(len(content), settings.max_upload_bytes)

    @staticmethod
    def _build_preview_row(
        mapped: dict[str, Any],
        row_index: int,
        errors: list[RowValidationError],
        client_percentage: Decimal,
    ) -> PreviewRow:
        base_price = _validated_price(mapped.get("base_price"))
        ss = _to_int(mapped.get("ss"))

        return PreviewRow(
            row_index=row_index,
            site_url=str(mapped.get("site_url") or ""),
            da=_to_int(mapped.get("da")) or 0,
            dr=_to_int(mapped.get("dr")) or 0,
            ahrefs_traffic=_to_int(mapped.get("ahrefs_traffic")) or 0,
            ss=ss,
            tat=str(mapped.get("tat") or ""),
            category=str(mapped.get("category") or ""),
            status=str(mapped.get("status") or "ACTIVE"),
            base_price=base_price,
            country=str(mapped.get("country") or ""),
            publisher=str(mapped.get("publisher") or ""),
            site_language=str(mapped.get("site_language") or ""),
            displayed_price=calculate_site_price(base_price, client_percentage),
            is_valid=not errors,
            errors=errors,
        )

    @staticmethod
    def _revalidate(row: PreviewRow, publishers: list[Publisher]) -> PreviewRow:
        """Run validation again on a row echoed back by the client."""
        mapped: dict[str, Any] = {
            "site_url": row.site_url,
            "publisher": row.publisher,
            "da": str(row.da),
            "dr": str(row.dr),
            "ahrefs_traffic": str(row.ahrefs_traffic),
            "ss": "" if row.ss is None else str(row.ss),
            "category": row.category,
            "country": row.country,
            "site_language": row.site_language,
            "tat": row.tat,
            "base_price": str(row.base_price),
            "status": row.status,
        }
        errors = validate_row(mapped, row.row_index, publishers)
        return row.model_copy(update={
            "site_url": str(mapped["site_url"]),
            "base_price": _validated_price(mapped["base_price"]),
            "category": str(mapped["category"]),
            "status": str(mapped["status"]),
            "is_valid": not errors,
            "errors": errors,
        })

    @staticmethod
    def _to_site_create(row: PreviewRow, site_url: str, publisher: Publisher) -> SiteCreate:
        return SiteCreate(
            site_url=site_url,
            publisher_id=publisher.id,
            da=row.da,
            dr=row.dr,
            ahrefs_traffic=row.ahrefs_traffic,
            ss=row.ss,
            tat=row.tat,
            category=row.category,
            status=row.status,
            base_price=Decimal(row.base_price),
            country=row.country,
            site_language=row.site_language,
        )


def _validated_price(value: Any) -> int:
    """Rounded base price left by validate_row, 0 when the cell was rejected."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


def _to_int(value: Any) -> Optional[int]:
    """Whole part of a numeric cell, None if not numeric."""
    number = parse_number(value) if value not in (None, "") else None
    if number is None:
        return None
    return int(number)


def _describe_errors(errors: list[RowValidationError]) -> str:
    if not errors:
        return "Row has validation errors"
    return "Row has validation errors (" + "; ".join(e.error for e in errors) + ")"


# Singleton instance
_service: Optional[BulkUploadService] = None


def get_bulk_upload_service() -> BulkUploadService:
    """Get or create BulkUploadService instance."""
    global _service
    if _service is None:
        from repositories import get_repository
        _service = BulkUploadService(get_repository())
    return _service
