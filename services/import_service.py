"""
Import workflow service.

Upload -> map -> preview -> run. Parsed uploads are cached for a while so
the operator can adjust the mapping; runs execute as jobs whose progress
events and result are kept in memory. Only one run may be active at a time.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
import threading
import structlog

from config import settings
from exceptions import (
    EmptyImportError,
    ImportInProgressError,
    ImportJobNotFoundError,
    UploadNotFoundError,
    UploadTooLargeError,
)
from models.imports import ImportJobStatus, ImportMode, ImportRequest
from parsers.upload_parser import ParsedUpload, parse_upload
from services.mapping_service import suggest_mapping, transform_rows, validate_mapping
from services.reconciler import (
    DryRunPreview,
    ImportResult,
    ItemStore,
    ProgressEvent,
    create_items,
    preview_rows,
    summarize,
    upsert_items,
)
from services.session_service import CMSSession
from services.ttl_store import TTLStore

logger = structlog.get_logger(__name__)

# Finished jobs are kept around this long for polling
JOB_TTL_MINUTES = 24 * 60


@dataclass
class ImportJob:
    """One import run and everything it reported."""
    job_id: str
    upload_id: str
    collection_id: str
    mode: ImportMode
    live: bool
    rows: list[dict] = field(default_factory=list, repr=False)
    status: ImportJobStatus = ImportJobStatus.PENDING
    events: list[ProgressEvent] = field(default_factory=list)
    result: Optional[ImportResult] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in (ImportJobStatus.PENDING, ImportJobStatus.RUNNING)

    def record(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "job_id": self.job_id,
            "upload_id": self.upload_id,
            "collection_id": self.collection_id,
            "mode": self.mode,
            "live": self.live,
            "status": self.status,
            "events": [e.to_dict() for e in self.events],
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
            "created_at": self.created_at,
            "finished_at": self.finished_at,
        }


class ImportService:
    """
    Data import workflow.

    Holds parsed uploads and import jobs in TTL stores.
    """

    def __init__(
        self,
        upload_ttl_minutes: Optional[int] = None,
        job_ttl_minutes: int = JOB_TTL_MINUTES,
    ):
        self.upload_ttl_minutes = upload_ttl_minutes or settings.upload_ttl_minutes
        self.uploads: TTLStore[ParsedUpload] = TTLStore(self.upload_ttl_minutes)
        self.jobs: TTLStore[ImportJob] = TTLStore(job_ttl_minutes)
        self._run_lock = threading.Lock()
        self._active_job_id: Optional[str] = None

    # ===================
    # UPLOADS
    # ===================

    def register_upload(self, filename: str, content: bytes) -> tuple[str, ParsedUpload]:
        """
        Parse an upload and cache it.

        Returns:
            (upload_id, parsed upload)

        Raises:
            UploadTooLargeError: Over the configured size limit
            UnsupportedFileTypeError: Unknown extension
            FileParseError: Unreadable file
        """
        if len(content) > settings.max_upload_bytes:
            raise UploadTooLargeError(len(content), settings.max_upload_bytes)

        upload = parse_upload(filename, content)
        upload_id = self.uploads.put(upload)

        logger.info(
            "upload_registered",
            upload_id=upload_id,
            filename=filename,
            rows=upload.row_count
        )
        return upload_id, upload

    def get_upload(self, upload_id: str) -> ParsedUpload:
        upload = self.uploads.get(upload_id)
        if upload is None:
            raise UploadNotFoundError(upload_id)
        return upload

    def discard_upload(self, upload_id: str) -> None:
        self.get_upload(upload_id)
        self.uploads.delete(upload_id)

    def suggest_mapping(self, upload_id: str, fields: list[dict]) -> dict[str, str]:
        upload = self.get_upload(upload_id)
        return suggest_mapping(upload.headers, fields)

    # ===================
    # PREVIEW / RUN
    # ===================

    def prepare_rows(self, upload_id: str, request: ImportRequest) -> list[dict]:
        """
        Apply the request's mapping to a cached upload.

        Upsert mode keeps the source "id" column so rows can match by id.
        """
        upload = self.get_upload(upload_id)
        validate_mapping(request.mapping, upload.headers)
        return transform_rows(
            upload.rows,
            request.mapping,
            keep_id=request.mode == ImportMode.UPSERT,
        )

    def preview(self, upload_id: str, request: ImportRequest) -> DryRunPreview:
        """Dry run: classify mapped rows without calling Webflow."""
        rows = self.prepare_rows(upload_id, request)
        preview = preview_rows(rows)
        logger.info(
            "import_previewed",
            upload_id=upload_id,
            mode=request.mode.value,
            total=preview.total,
            with_id=preview.with_id,
            with_slug=preview.with_slug,
            new=preview.new
        )
        return preview

    def start_job(self, session: CMSSession, upload_id: str, request: ImportRequest) -> ImportJob:
        """
        Reserve the single run slot and create a pending job.

        The caller executes it with run_job (typically as a background task).

        Raises:
            CollectionNotFoundError: Collection not on the session's site
            UploadNotFoundError / InvalidMappingError: Bad input
            EmptyImportError: Upload has no rows
            ImportInProgressError: Another run is active
        """
        session.find_collection(request.collection_id)
        rows = self.prepare_rows(upload_id, request)
        if not rows:
            raise EmptyImportError()

        with self._run_lock:
            if self._active_job_id is not None:
                active = self.jobs.get(self._active_job_id)
                if active is not None and active.is_active:
                    raise ImportInProgressError(active.job_id)

            job = ImportJob(
                job_id="",
                upload_id=upload_id,
                collection_id=request.collection_id,
                mode=request.mode,
                live=request.live,
                rows=rows,
            )
            job.job_id = self.jobs.put(job)
            self._active_job_id = job.job_id

        logger.info(
            "import_job_created",
            job_id=job.job_id,
            upload_id=upload_id,
            collection_id=request.collection_id,
            mode=request.mode.value,
            rows=len(rows)
        )
        return job

    def run_job(self, job_id: str, store: ItemStore) -> ImportJob:
        """
        Execute a pending job to completion.

        Row failures end up in the result; only a failure outside the row
        loop (listing existing items) marks the job failed.
        """
        job = self.get_job(job_id)
        job.status = ImportJobStatus.RUNNING

        logger.info("import_job_started", job_id=job_id, mode=job.mode.value)

        try:
            if job.mode == ImportMode.UPSERT:
                job.result = upsert_items(
                    store,
                    job.collection_id,
                    job.rows,
                    live=job.live,
                    on_progress=job.record,
                )
            else:
                job.result = create_items(
                    store,
                    job.collection_id,
                    job.rows,
                    live=job.live,
                    on_progress=job.record,
                )
            job.status = ImportJobStatus.COMPLETED
            logger.info("import_job_completed", job_id=job_id, **summarize(job.result))

        except Exception as e:
            job.status = ImportJobStatus.FAILED
            job.error = getattr(e, "message", None) or str(e)
            job.record(ProgressEvent("failed", f"Import failed: {job.error}"))
            logger.error(
                "import_job_failed",
                job_id=job_id,
                error=str(e),
                error_type=type(e).__name__
            )

        finally:
            job.finished_at = datetime.utcnow()
            job.rows = []
            with self._run_lock:
                if self._active_job_id == job_id:
                    self._active_job_id = None

        return job

    def get_job(self, job_id: str) -> ImportJob:
        job = self.jobs.get(job_id)
        if job is None:
            raise ImportJobNotFoundError(job_id)
        return job


# Singleton instance
_import_service: Optional[ImportService] = None


def get_import_service() -> ImportService:
    """Get or create ImportService instance."""
    global _import_service
    if _import_service is None:
        _import_service = ImportService()
    return _import_service
