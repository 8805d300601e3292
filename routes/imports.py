"""
Bulk import API routes.

Workflow:
    1. POST /upload              parse a CSV, JSON or XLSX file
    2. POST /{id}/mapping/auto   suggest column -> field mapping
    3. POST /{id}/preview        dry run, no Webflow calls
    4. POST /{id}/run            start the import job
    5. GET  /jobs/{job_id}       poll progress and result
"""

from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile
import structlog

from config import settings
from models.imports import (
    DryRunResponse,
    ImportJobResponse,
    ImportRequest,
    MappingSuggestion,
    UploadResponse,
)
from services.collection_service import CollectionService
from services.import_service import get_import_service
from services.session_service import CMSSession
from routes.common import handle_error, current_session

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/imports", tags=["Imports"])


# ===================
# UPLOAD ROUTES
# ===================

@router.post("/upload", response_model=UploadResponse, status_code=201)
async def upload_file(file: UploadFile = File(..., description="CSV, JSON or XLSX file")):
    """
    Parse an upload and keep it for mapping.

    Every cell comes back as a string; the sample holds the first rows.

    Raises:
        422: File too large, unsupported type, or unparseable
    """
    try:
        contents = await file.read()
        service = get_import_service()
        upload_id, upload = service.register_upload(file.filename or "", contents)

        return UploadResponse(
            upload_id=upload_id,
            filename=upload.filename,
            file_type=upload.file_type,
            headers=upload.headers,
            row_count=upload.row_count,
            sample_rows=upload.rows[:settings.preview_size],
            expires_in_minutes=service.upload_ttl_minutes,
        )
    except Exception as e:
        return handle_error(e)


@router.delete("/{upload_id}", status_code=204)
async def discard_upload(upload_id: str):
    """Drop a cached upload."""
    try:
        get_import_service().discard_upload(upload_id)
    except Exception as e:
        return handle_error(e)


@router.post("/{upload_id}/mapping/auto", response_model=MappingSuggestion)
async def suggest_mapping(
    upload_id: str,
    collection_id: str = Query(..., description="Target collection"),
    session: CMSSession = Depends(current_session),
):
    """Match upload headers to field slugs or display names, ignoring case."""
    try:
        service = get_import_service()
        fields = CollectionService(session).get_fields(collection_id)
        mapping = service.suggest_mapping(upload_id, fields)
        headers = service.get_upload(upload_id).headers

        return MappingSuggestion(
            collection_id=collection_id,
            mapping=mapping,
            unmapped_headers=[h for h in headers if h not in mapping],
        )
    except Exception as e:
        return handle_error(e)


# ===================
# IMPORT ROUTES
# ===================

@router.post("/{upload_id}/preview", response_model=DryRunResponse)
async def preview_import(upload_id: str, request: ImportRequest):
    """
    Dry run.

    Counts rows that would match by id, by slug, or be created, and
    returns the first mapped rows. Nothing is sent to Webflow.
    """
    try:
        preview = get_import_service().preview(upload_id, request)
        return DryRunResponse(import_mode=request.mode, **preview.to_dict())
    except Exception as e:
        return handle_error(e)


@router.post("/{upload_id}/run", response_model=ImportJobResponse, status_code=202)
async def run_import(
    upload_id: str,
    request: ImportRequest,
    background_tasks: BackgroundTasks,
    session: CMSSession = Depends(current_session),
):
    """
    Start an import job.

    The job runs after the response is sent; poll GET /jobs/{job_id}.

    Raises:
        404: Upload or collection not found
        409: Another import is running
        422: Bad mapping or empty upload
    """
    try:
        service = get_import_service()
        job = service.start_job(session, upload_id, request)
        background_tasks.add_task(service.run_job, job.job_id, session.client)
        return job.to_dict()
    except Exception as e:
        return handle_error(e)


@router.get("/jobs/{job_id}", response_model=ImportJobResponse)
async def get_job(job_id: str):
    """Progress events and, once finished, the result of an import job."""
    try:
        return get_import_service().get_job(job_id).to_dict()
    except Exception as e:
        return handle_error(e)
