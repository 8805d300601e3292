"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    ExternalServiceError,

    # Credentials / sessions
    MissingCredentialError,
    InvalidCredentialError,
    SessionNotFoundError,

    # Webflow
    WebflowAPIError,
    SiteNotFoundError,
    CollectionNotFoundError,

    # Uploads
    FileParseError,
    UnsupportedFileTypeError,
    UploadTooLargeError,

    # Imports
    UploadNotFoundError,
    InvalidMappingError,
    EmptyImportError,
    ImportJobNotFoundError,
    ImportInProgressError,

    # Images
    ImageProcessingError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "ExternalServiceError",

    # Credentials / sessions
    "MissingCredentialError",
    "InvalidCredentialError",
    "SessionNotFoundError",

    # Webflow
    "WebflowAPIError",
    "SiteNotFoundError",
    "CollectionNotFoundError",

    # Uploads
    "FileParseError",
    "UnsupportedFileTypeError",
    "UploadTooLargeError",

    # Imports
    "UploadNotFoundError",
    "InvalidMappingError",
    "EmptyImportError",
    "ImportJobNotFoundError",
    "ImportInProgressError",

    # Images
    "ImageProcessingError",
]
