"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict so
routes can return the same error envelope everywhere.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "SESSION_NOT_FOUND")
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
    """Conflict with current state (409)."""

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


class AuthenticationError(AppError):
    """Credential missing or unusable (401)."""

    def __init__(
        self,
        message: str,
        code: str = "UNAUTHORIZED",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=401,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (502)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=502,
            details={"service": service, **(details or {})}
        )


# ===================
# CREDENTIAL / SESSION ERRORS
# ===================

class MissingCredentialError(AuthenticationError):
    """No Webflow API token was supplied."""

    def __init__(self):
        super().__init__(
            code="CREDENTIAL_MISSING",
            message="A Webflow API token is required"
        )


class InvalidCredentialError(AuthenticationError):
    """Webflow API token is malformed."""

    def __init__(self, reason: str = "Token is too short to be a Webflow API token"):
        super().__init__(
            code="CREDENTIAL_INVALID",
            message="Webflow API token is malformed",
            details={"reason": reason}
        )


class SessionNotFoundError(NotFoundError):
    """CMS session unknown or expired."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Session",
            identifier=session_id,
            code="SESSION_NOT_FOUND"
        )


# ===================
# WEBFLOW ERRORS
# ===================

class WebflowAPIError(ExternalServiceError):
    """Webflow returned an error response or could not be reached."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        endpoint: Optional[str] = None,
        body: Optional[Any] = None
    ):
        super().__init__(
            service="webflow",
            message=message,
            details={
                "upstream_status": status,
                "endpoint": endpoint,
                "body": body,
            }
        )
        self.upstream_status = status


class SiteNotFoundError(NotFoundError):
    """Site not available to the current token."""

    def __init__(self, site_id: str):
        super().__init__(
            resource="Site",
            identifier=site_id,
            code="SITE_NOT_FOUND"
        )


class CollectionNotFoundError(NotFoundError):
    """Collection not part of the session's site."""

    def __init__(self, collection_id: str):
        super().__init__(
            resource="Collection",
            identifier=collection_id,
            code="COLLECTION_NOT_FOUND"
        )


# ===================
# UPLOAD / PARSE ERRORS
# ===================

class FileParseError(ValidationError):
    """Uploaded file could not be parsed."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="FILE_PARSE_ERROR",
            message=message,
            details=details
        )


class UnsupportedFileTypeError(ValidationError):
    """Uploaded file has an extension we cannot read."""

    def __init__(self, filename: str, supported: list[str]):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message="Unsupported file type. Please upload a CSV, JSON or XLSX file.",
            details={"filename": filename, "supported": supported}
        )


class UploadTooLargeError(ValidationError):
    """Uploaded file exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            code="UPLOAD_TOO_LARGE",
            message=f"Upload exceeds the {limit // (1024 * 1024)} MB limit",
            details={"size": size, "limit": limit}
        )


# ===================
# IMPORT ERRORS
# ===================

class UploadNotFoundError(NotFoundError):
    """Parsed upload expired or never existed."""

    def __init__(self, upload_id: str):
        super().__init__(
            resource="Upload",
            identifier=upload_id,
            code="UPLOAD_NOT_FOUND"
        )


class InvalidMappingError(ValidationError):
    """Field mapping references columns the upload does not have."""

    def __init__(self, unknown_columns: list[str]):
        super().__init__(
            code="INVALID_MAPPING",
            message=f"Mapping references {len(unknown_columns)} unknown source column(s)",
            details={"unknown_columns": unknown_columns}
        )


class EmptyImportError(ValidationError):
    """Nothing to import."""

    def __init__(self):
        super().__init__(
            code="EMPTY_IMPORT",
            message="The upload has no rows to import"
        )


class ImportJobNotFoundError(NotFoundError):
    """Import job unknown."""

    def __init__(self, job_id: str):
        super().__init__(
            resource="Import job",
            identifier=job_id,
            code="IMPORT_JOB_NOT_FOUND"
        )


class ImportInProgressError(ConflictError):
    """Another import run is still active."""

    def __init__(self, job_id: str):
        super().__init__(
            code="IMPORT_IN_PROGRESS",
            message="An import is already running",
            details={"job_id": job_id}
        )


# ===================
# IMAGE ERRORS
# ===================

class ImageProcessingError(ValidationError):
    """Image could not be decoded or processed."""

    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="IMAGE_PROCESSING_ERROR",
            message=message,
            details={"filename": filename, **(details or {})}
        )
