"""
Column mapping for bulk site uploads.

Maps uploaded headers onto canonical site fields using an exact
(lowercased, trimmed) alias table. No fuzzy matching: a header either
appears in COLUMN_ALIASES or it is ignored.
"""

import json
from typing import Any
import structlog

from exceptions import InvalidColumnMappingError
from models.bulk_upload import ColumnMapping, UploadColumn

logger = structlog.get_logger(__name__)

# Version of the upload contract (required fields + template order).
# Bump when either changes.
UPLOAD_CONTRACT_VERSION = "2"

UPLOAD_COLUMNS: list[UploadColumn] = [
    UploadColumn(key="site_url", label="Site URL", required=True, order=1),
    UploadColumn(key="publisher", label="Publisher Email", required=True, order=2),
    UploadColumn(key="da", label="Domain Authority (DA)", required=False, order=3),
    UploadColumn(key="dr", label="Domain Rating (DR)", required=False, order=4),
    UploadColumn(key="ahrefs_traffic", label="Ahrefs Traffic", required=False, order=5),
    UploadColumn(key="ss", label="Spam Score (SS)", required=False, order=6),
    UploadColumn(key="category", label="Category", required=True, order=7),
    UploadColumn(key="country", label="Country", required=True, order=8),
    UploadColumn(key="site_language", label="Site Language", required=True, order=9),
    UploadColumn(key="tat", label="Turnaround Time (TAT)", required=True, order=10),
    UploadColumn(key="base_price", label="Base Price", required=True, order=11),
    UploadColumn(key="status", label="Status", required=False, order=12),
]

SITE_FIELDS: frozenset[str] = frozenset(col.key for col in UPLOAD_COLUMNS)
REQUIRED_FIELDS: tuple[str, ...] = tuple(col.key for col in UPLOAD_COLUMNS if col.required)

# Lowercased header -> canonical field.
# Covers the current template labels and the legacy long-form labels.
COLUMN_ALIASES: dict[str, str] = {
    "site url": "site_url",
    "publisher email": "publisher",
    "publisher": "publisher",
    "da": "da",
    "domain authority (da)": "da",
    "dr": "dr",
    "domain rating (dr)": "dr",
    "traffic": "ahrefs_traffic",
    "ahrefs traffic": "ahrefs_traffic",
    "ss": "ss",
    "spam score (ss)": "ss",
    "category": "category",
    "country": "country",
    "language": "site_language",
    "site language": "site_language",
    "tat": "tat",
    "turnaround time (tat)": "tat",
    "base price": "base_price",
    "status": "status",
}

# Header order of the current CSV template
EXPECTED_COLUMN_ORDER: list[str] = [
    "Site URL", "Publisher Email", "DA", "DR", "Traffic", "SS",
    "Category", "Country", "Language", "TAT", "Base Price", "Status",
]

# Header order of the legacy (long-label) template
LEGACY_COLUMN_ORDER: list[str] = [
    "Site URL", "Domain Authority (DA)", "Domain Rating (DR)", "Ahrefs Traffic",
    "Spam Score (SS)", "Turnaround Time (TAT)", "Category", "Status",
    "Base Price", "Country", "Publisher", "Site Language",
]


def detect_column_mappings(headers: list[str]) -> list[ColumnMapping]:
    """
    Auto-detect mappings from uploaded headers.

    Headers are processed in file order. Each canonical field is claimed by
    the first header that maps to it; later headers mapping to the same
    field are dropped. Unknown headers are skipped.

    Args:
        headers: Header strings exactly as they appear in the file

    Returns:
        Ordered list of ColumnMapping
    """
    mappings: list[ColumnMapping] = []
    used_fields: set[str] = set()
    used_headers: set[str] = set()

    for header in headers:
        if header in used_headers:
            continue

        field = COLUMN_ALIASES.get(str(header).strip().lower())
        if field is None or field in used_fields:
            continue

        mappings.append(ColumnMapping(csv_column=header, site_field=field))
        used_fields.add(field)
        used_headers.add(header)

    logger.debug(
        "column_mappings_detected",
        header_count=len(headers),
        mapped_count=len(mappings)
    )
    return mappings


def validate_column_order(headers: list[str]) -> tuple[bool, list[str]]:
    """
    Compare headers against the current template order.

    Mismatches only produce warnings; uploads with other orders still map
    through the alias table.

    Returns:
        (is_valid, warnings)
    """
    warnings: list[str] = []
    normalized = [str(h).strip().lower() for h in headers]
    expected = [h.lower() for h in EXPECTED_COLUMN_ORDER]

    if len(normalized) != len(expected):
        warnings.append(
            f"Column count mismatch: expected {len(expected)} columns, found {len(normalized)}"
        )

    for index, expected_header in enumerate(expected):
        if index >= len(normalized):
            warnings.append(f'Missing column: "{EXPECTED_COLUMN_ORDER[index]}"')
        elif normalized[index] != expected_header:
            warnings.append(
                f'Column order mismatch at position {index + 1}: '
                f'expected "{EXPECTED_COLUMN_ORDER[index]}", found "{headers[index]}"'
            )

    return not warnings, warnings


def parse_mapping_payload(raw: Any) -> list[ColumnMapping]:
    """
    Decode and check the mapping chosen by the operator.

    Args:
        raw: JSON string (from a multipart form) or an already decoded list

    Returns:
        List of ColumnMapping, injective in both directions

    Raises:
        InvalidColumnMappingError: If the payload is malformed, names an
            unknown field, or maps a header or field twice
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidColumnMappingError(
                "Invalid column mappings format",
                details={"original_error": str(e)}
            )

    if not isinstance(raw, list):
        raise InvalidColumnMappingError("Column mappings must be a list")

    mappings: list[ColumnMapping] = []
    seen_fields: set[str] = set()
    seen_columns: set[str] = set()

    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise InvalidColumnMappingError(
                "Each column mapping must be an object",
                details={"index": index}
            )

        csv_column = item.get("csv_column", item.get("csvColumn"))
        site_field = item.get("site_field", item.get("guestBlogSiteField"))

        if not isinstance(csv_column, str) or not csv_column.strip():
            raise InvalidColumnMappingError(
                "Column mapping is missing csv_column",
                details={"index": index}
            )
        if site_field not in SITE_FIELDS:
            raise InvalidColumnMappingError(
                f"Unknown site field: {site_field}",
                details={"index": index, "valid": sorted(SITE_FIELDS)}
            )
        if site_field in seen_fields:
            raise InvalidColumnMappingError(
                f"Site field mapped more than once: {site_field}",
                details={"index": index}
            )
        if csv_column in seen_columns:
            raise InvalidColumnMappingError(
                f"Column mapped more than once: {csv_column}",
                details={"index": index}
            )

        seen_fields.add(site_field)
        seen_columns.add(csv_column)
        mappings.append(ColumnMapping(csv_column=csv_column, site_field=site_field))

    return mappings


def apply_column_mappings(raw_row: dict[str, str], mappings: list[ColumnMapping]) -> dict[str, str]:
    """Project an uploaded row onto canonical fields (missing cells become "")."""
    return {m.site_field: raw_row.get(m.csv_column) or "" for m in mappings}
