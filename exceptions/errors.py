"""
Custom exception classes for the application.

Every error raised by services and parsers inherits from AppError so
routes can convert it to the standard error response.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        code: Error code (e.g., "SITE_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DuplicateError(ConflictError):
    """Duplicate resource (409)."""

    def __init__(
        self,
        resource: str,
        field: str,
        value: str
    ):
        super().__init__(
            code=f"{resource.upper()}_{field.upper()}_EXISTS",
            message=f"{resource} with this {field} already exists",
            details={field: value}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# NORMALIZATION ERRORS
# ===================

class InvalidURLError(ValidationError):
    """URL could not be normalized into an absolute http(s) URL."""

    def __init__(self, value: Optional[str], reason: str):
        super().__init__(
            code="INVALID_URL",
            message=f"Invalid URL format: {reason}",
            details={"provided": value}
        )
        self.reason = reason


# ===================
# UPLOAD ERRORS
# ===================

class EmptyDatasetError(ValidationError):
    """Uploaded file has no data rows."""

    def __init__(self, file_kind: str = "File"):
        super().__init__(
            code="EMPTY_DATASET",
            message=f"{file_kind} must have at least a header row and one data row"
        )


class UnsupportedFileTypeError(AppError):
    """Uploaded file is neither CSV nor Excel (415)."""

    def __init__(self, filename: Optional[str], content_type: Optional[str] = None):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message="Unsupported file format. Please upload CSV or Excel files only.",
            status_code=415,
            details={"filename": filename, "content_type": content_type}
        )


class FileTooLargeError(AppError):
    """Uploaded file exceeds the configured size limit (413)."""

    def __init__(self, size_bytes: int, limit_bytes: int):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"File exceeds the {limit_bytes // (1024 * 1024)}MB upload limit",
            status_code=413,
            details={"size_bytes": size_bytes, "limit_bytes": limit_bytes}
        )


class TabularParseError(ValidationError):
    """CSV or Excel bytes could not be read."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="TABULAR_PARSE_ERROR",
            message=message,
            details=details
        )


class InvalidColumnMappingError(ValidationError):
    """Column mapping payload is malformed or not one-to-one."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_COLUMN_MAPPING",
            message=message,
            details=details
        )


class PreviewNotFoundError(NotFoundError):
    """Cached preview expired or never existed."""

    def __init__(self, preview_id: str):
        super().__init__(
            resource="Preview",
            identifier=preview_id,
            code="PREVIEW_NOT_FOUND"
        )


# ===================
# MARKETPLACE ERRORS
# ===================

class SiteNotFoundError(NotFoundError):
    """Guest blog site not found."""

    def __init__(self, site_id: str):
        super().__init__(
            resource="Guest blog site",
            identifier=site_id,
            code="SITE_NOT_FOUND"
        )


class SiteURLExistsError(DuplicateError):
    """A site with this URL is already stored."""

    def __init__(self, site_url: str):
        super().__init__(
            resource="Site",
            field="site_url",
            value=site_url
        )
        self.site_url = site_url


class ClientNotFoundError(NotFoundError):
    """Client not found."""

    def __init__(self, client_id: str):
        super().__init__(
            resource="Client",
            identifier=client_id,
            code="CLIENT_NOT_FOUND"
        )


class InvalidOverridePriceError(ValidationError):
    """Override price must be a non-negative number."""

    def __init__(self, price: Any):
        super().__init__(
            code="INVALID_OVERRIDE_PRICE",
            message="Override price must be a non-negative number",
            details={"provided": str(price)}
        )
