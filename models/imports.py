"""
Data import models.

Covers the upload → map → preview → run workflow and the result
envelope of an import job.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import Field, field_validator

from models.base import BaseSchema


class ImportMode(str, Enum):
    """How rows are written."""
    CREATE = "create"
    UPSERT = "upsert"


class FileType(str, Enum):
    """Accepted upload formats."""
    CSV = "csv"
    JSON = "json"
    XLSX = "xlsx"


class ImportJobStatus(str, Enum):
    """Lifecycle of an import job."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ItemAction(str, Enum):
    """What happened to a row that was written successfully."""
    CREATED = "created"
    UPDATED = "updated"


# ===================
# UPLOAD
# ===================

class UploadResponse(BaseSchema):
    """Parsed upload, ready for mapping."""

    upload_id: str
    filename: str
    file_type: FileType
    headers: list[str]
    row_count: int
    sample_rows: list[dict[str, Any]]
    expires_in_minutes: int


class MappingSuggestion(BaseSchema):
    """Auto-mapping of upload columns onto collection fields."""

    collection_id: str
    mapping: dict[str, str]
    unmapped_headers: list[str]


# ===================
# IMPORT REQUESTS
# ===================

class ImportRequest(BaseSchema):
    """
    Import configuration.

    mapping: source column -> destination field slug. A null or empty
    target skips the column.
    """

    collection_id: str = Field(..., min_length=1)
    mapping: dict[str, Optional[str]] = Field(default_factory=dict)
    mode: ImportMode = ImportMode.CREATE
    live: bool = Field(True, description="Publish items immediately instead of leaving drafts")

    @field_validator("mapping")
    @classmethod
    def drop_skipped_targets(cls, v: dict[str, Optional[str]]) -> dict[str, Optional[str]]:
        """Normalize blank targets to None (skip)."""
        return {
            source: (target.strip() or None) if isinstance(target, str) else None
            for source, target in v.items()
        }


# ===================
# RESULTS
# ===================

class DryRunResponse(BaseSchema):
    """Dry-run classification of transformed rows."""

    mode: str = "dry-run"
    import_mode: ImportMode
    total: int
    with_id: int
    with_slug: int
    new: int
    preview: list[dict[str, Any]]


class ProgressEventResponse(BaseSchema):
    """One progress event of a run."""

    phase: str
    message: str
    current: Optional[int] = None
    total: Optional[int] = None


class RowResultResponse(BaseSchema):
    """A row written successfully."""

    index: int
    action: ItemAction
    item: dict[str, Any]


class RowErrorResponse(BaseSchema):
    """A row that failed."""

    index: int
    error: str
    row: dict[str, Any]


class ImportResultResponse(BaseSchema):
    """Outcome of a finished run."""

    mode: ImportMode
    total: int
    created: int
    updated: int
    failed: int
    results: list[RowResultResponse]
    errors: list[RowErrorResponse]
    diagnostics: Optional[dict[str, Any]] = None


class ImportJobResponse(BaseSchema):
    """Import job status."""

    job_id: str
    upload_id: str
    collection_id: str
    mode: ImportMode
    live: bool
    status: ImportJobStatus
    events: list[ProgressEventResponse]
    result: Optional[ImportResultResponse] = None
    error: Optional[str] = None
    created_at: datetime
    finished_at: Optional[datetime] = None
