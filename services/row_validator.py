"""
Row validation for bulk site uploads.

validate_row() checks one canonical-field row and normalizes it in place:
site_url becomes the normalized URL, base_price the rounded integer,
category and status their upper-case enum values. Problems are returned
as RowValidationError entries; nothing here raises for bad input.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional
import structlog

from exceptions import InvalidURLError
from models.bulk_upload import RowValidationError
from models.publisher import Publisher
from models.site import SiteCategory, SiteStatus
from utils.price_rounding import auto_round_price
from utils.url_normalization import normalize_url

logger = structlog.get_logger(__name__)

# field -> (label, lower bound, upper bound or None)
METRIC_RANGES: dict[str, tuple[str, int, Optional[int]]] = {
    "da": ("DA", 0, 100),
    "dr": ("DR", 0, 100),
    "ahrefs_traffic": ("Traffic", 0, None),
    "ss": ("SS", 0, 100),
}

MAX_CELL_NUMBER = Decimal("1e15")

REQUIRED_TEXT_FIELDS: list[tuple[str, str]] = [
    ("publisher", "Publisher Email is required"),
    ("category", "Category is required"),
    ("country", "Country is required"),
    ("site_language", "Site Language is required"),
    ("tat", "TAT is required"),
]


def find_publisher(publishers: list[Publisher], identifier: Optional[str]) -> Optional[Publisher]:
    """
    Resolve a human-entered publisher reference.

    Matches name OR email, case-insensitively. First match wins.
    """
    if not identifier or not identifier.strip():
        return None
    for publisher in publishers:
        if publisher.matches(identifier):
            return publisher
    return None


def parse_number(value: Any) -> Optional[Decimal]:
    """
    Parse a cell into a finite Decimal, None if it is not a number.

    Magnitudes above MAX_CELL_NUMBER ("1e5000") are treated as not a number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite() or abs(number) > MAX_CELL_NUMBER:
        return None
    return number


def validate_row(
    row: dict[str, Any],
    row_index: int,
    publishers: list[Publisher],
) -> list[RowValidationError]:
    """
    Validate and normalize one mapped upload row.

    Args:
        row: Canonical field -> cell value (mutated in place)
        row_index: 1-based position of the row in the upload
        publishers: Current publisher roster

    Returns:
        Ordered list of errors; the row is valid when it is empty
    """
    errors: list[RowValidationError] = []

    def add_error(field: str, value: Any, message: str) -> None:
        errors.append(RowValidationError(row=row_index, field=field, value=value, error=message))

    # Site URL: required, normalized in place
    site_url = _text(row.get("site_url"))
    if not site_url:
        add_error("site_url", row.get("site_url"), "Site URL is required")
    else:
        try:
            row["site_url"] = normalize_url(site_url)
        except InvalidURLError as e:
            add_error("site_url", row.get("site_url"), e.message)

    for field, message in REQUIRED_TEXT_FIELDS:
        if not _text(row.get(field)):
            add_error(field, row.get(field), message)

    # Base price: required, non-negative, rounded in place
    raw_price = row.get("base_price")
    price = parse_number(raw_price) if _text(raw_price) else None
    if price is None:
        add_error("base_price", raw_price, "Base Price is required and must be a valid number")
    elif price < 0:
        add_error("base_price", raw_price, "Base Price must be a non-negative number")
    else:
        row["base_price"] = auto_round_price(price)

    # Optional metrics: checked only when provided
    for field, (label, low, high) in METRIC_RANGES.items():
        raw = row.get(field)
        if not _text(raw):
            continue
        number = parse_number(raw)
        if number is None or number < low or (high is not None and number > high):
            if high is None:
                message = f"{label} must be a positive number"
            else:
                message = f"{label} must be between {low} and {high}"
            add_error(field, raw, message)

    # Status: defaults to ACTIVE
    raw_status = _text(row.get("status"))
    if not raw_status:
        row["status"] = SiteStatus.ACTIVE.value
    else:
        status = SiteStatus.parse(raw_status)
        if status is None:
            add_error("status", row.get("status"), "Status must be ACTIVE or INACTIVE")
        else:
            row["status"] = status.value

    raw_category = _text(row.get("category"))
    if raw_category:
        category = SiteCategory.parse(raw_category)
        if category is None:
            add_error("category", row.get("category"), "Invalid category")
        else:
            row["category"] = category.value

    identifier = _text(row.get("publisher"))
    if identifier and find_publisher(publishers, identifier) is None:
        add_error("publisher", row.get("publisher"), "Publisher with this name or email does not exist")

    if errors:
        logger.debug("row_invalid", row=row_index, error_count=len(errors))

    return errors


def _text(value: Any) -> str:
    """Cell value as trimmed text ("" for missing)."""
    if value is None:
        return ""
    return str(value).strip()
