"""
Custom exceptions module.

All application errors derive from AppError.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DuplicateError,
    DatabaseError,

    # Normalization
    InvalidURLError,

    # Upload
    EmptyDatasetError,
    UnsupportedFileTypeError,
    FileTooLargeError,
    TabularParseError,
    InvalidColumnMappingError,
    PreviewNotFoundError,

    # Marketplace
    SiteNotFoundError,
    SiteURLExistsError,
    ClientNotFoundError,
    InvalidOverridePriceError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DuplicateError",
    "DatabaseError",

    # Normalization
    "InvalidURLError",

    # Upload
    "EmptyDatasetError",
    "UnsupportedFileTypeError",
    "FileTooLargeError",
    "TabularParseError",
    "InvalidColumnMappingError",
    "PreviewNotFoundError",

    # Marketplace
    "SiteNotFoundError",
    "SiteURLExistsError",
    "ClientNotFoundError",
    "InvalidOverridePriceError",
]
