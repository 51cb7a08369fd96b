"""
Tabular parser for bulk site uploads.

Turns uploaded CSV or Excel bytes into an ordered list of rows, each a
header -> string mapping. Every cell is stringified and trimmed; typing
happens later in the row validator.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO, StringIO
from typing import Any, Optional, Union
import structlog

import pandas as pd

from exceptions import EmptyDatasetError, TabularParseError, UnsupportedFileTypeError

logger = structlog.get_logger(__name__)

CSV_CONTENT_TYPES = {"text/csv", "application/csv"}
EXCEL_CONTENT_TYPES = {
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
EXCEL_EXTENSIONS = {"xlsx", "xls"}


@dataclass
class ParsedUpload:
    """Rows decoded from an uploaded file."""
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)
    file_type: str = "csv"

    @property
    def total_rows(self) -> int:
        return len(self.rows)


def detect_file_type(filename: Optional[str], content_type: Optional[str] = None) -> str:
    """
    Decide how to parse an upload.

    Returns:
        "csv" or "excel"

    Raises:
        UnsupportedFileTypeError: Neither extension nor content type is known
    """
    extension = ""
    if filename and "." in filename:
        extension = filename.rsplit(".", 1)[-1].lower()

    if extension == "csv" or content_type in CSV_CONTENT_TYPES:
        return "csv"
    if extension in EXCEL_EXTENSIONS or content_type in EXCEL_CONTENT_TYPES:
        return "excel"

    raise UnsupportedFileTypeError(filename, content_type)


def parse_upload(
    filename: Optional[str],
    content: bytes,
    content_type: Optional[str] = None,
) -> ParsedUpload:
    """
    Parse an uploaded CSV or Excel file.

    Args:
        filename: Original file name (extension decides the format)
        content: Raw file bytes
        content_type: MIME type sent by the browser, if any

    Returns:
        ParsedUpload with headers and rows

    Raises:
        UnsupportedFileTypeError: Not a CSV or Excel file
        EmptyDatasetError: Fewer than one header row plus one data row
        TabularParseError: File could not be read
    """
    file_type = detect_file_type(filename, content_type)
    logger.info("parsing_upload", filename=filename, file_type=file_type, size=len(content))

    if file_type == "csv":
        parsed = parse_csv(content)
    else:
        parsed = parse_excel(content)

    logger.info(
        "upload_parsed",
        filename=filename,
        file_type=file_type,
        columns=len(parsed.headers),
        rows=parsed.total_rows
    )
    return parsed


def parse_csv(content: Union[bytes, str]) -> ParsedUpload:
    """
    Parse CSV text with conformant quoting (quoted commas, escaped quotes).

    Raises:
        EmptyDatasetError: No data rows
        TabularParseError: Not UTF-8 or malformed CSV
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise TabularParseError(
                message="CSV file must be UTF-8 encoded",
                details={"original_error": str(e)}
            )
    else:
        text = content.lstrip("\ufeff")

    if not text.strip():
        raise EmptyDatasetError("CSV")

    try:
        df = pd.read_csv(
            StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
        )
    except pd.errors.EmptyDataError:
        raise EmptyDatasetError("CSV")
    except (pd.errors.ParserError, ValueError) as e:
        logger.error("csv_read_failed", error=str(e))
        raise TabularParseError(
            message="Failed to read CSV file",
            details={"original_error": str(e)}
        )

    headers, rows = _frame_to_rows(df)
    if not rows:
        raise EmptyDatasetError("CSV")

    return ParsedUpload(headers=headers, rows=rows, file_type="csv")


def parse_excel(content: bytes) -> ParsedUpload:
    """
    Parse the first sheet of an Excel workbook.

    Row 1 holds the headers; every other cell is stringified.

    Raises:
        EmptyDatasetError: No data rows on the first sheet
        TabularParseError: Workbook could not be read
    """
    try:
        df = pd.read_excel(BytesIO(content), sheet_name=0, header=0, dtype=object)
    except Exception as e:
        logger.error("excel_read_failed", error=str(e))
        raise TabularParseError(
            message="Failed to read Excel file",
            details={"original_error": str(e)}
        )

    headers, rows = _frame_to_rows(df)
    if not rows:
        raise EmptyDatasetError("Excel file")

    return ParsedUpload(headers=headers, rows=rows, file_type="excel")


# ===================
# HELPER FUNCTIONS
# ===================

def _frame_to_rows(df: pd.DataFrame) -> tuple[list[str], list[dict[str, str]]]:
    """Convert a DataFrame to trimmed string rows, dropping blank rows."""
    headers = _dedupe_headers([_stringify(col) for col in df.columns])
    rows = []

    for values in df.itertuples(index=False, name=None):
        row = {header: _stringify(value) for header, value in zip(headers, values)}
        if any(row.values()):
            rows.append(row)

    return headers, rows


def _dedupe_headers(headers: list[str]) -> list[str]:
    """
    Suffix repeated headers the way pandas mangles them.

    Trimming can make "Base Price" and "Base Price " equal; the later one
    becomes "Base Price.1" so each column keeps its own value.
    """
    seen: set[str] = set()
    unique = []

    for header in headers:
        candidate = header
        suffix = 0
        while candidate in seen:
            suffix += 1
            candidate = f"{header}.{suffix}"
        seen.add(candidate)
        unique.append(candidate)

    return unique


def _stringify(value: Any) -> str:
    """
    Render a cell as text.

    500.0 -> "500", 123.5 -> "123.5", NaN -> "", dates -> ISO format
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if pd.isna(value):
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
