"""
Upload parsers module.
"""

from parsers.tabular_parser import (
    parse_upload,
    parse_csv,
    parse_excel,
    detect_file_type,
    ParsedUpload,
)

__all__ = [
    "parse_upload",
    "parse_csv",
    "parse_excel",
    "detect_file_type",
    "ParsedUpload",
]
