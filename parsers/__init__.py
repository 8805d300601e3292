"""
Upload parsers module.
"""

from parsers.upload_parser import (
    parse_upload,
    detect_file_type,
    ParsedUpload,
    SUPPORTED_EXTENSIONS,
)

__all__ = [
    "parse_upload",
    "detect_file_type",
    "ParsedUpload",
    "SUPPORTED_EXTENSIONS",
]
