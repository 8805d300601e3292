"""
Collection browser API routes.

Schema and item views, field management, exports and the import
template download. All routes act on the current session's site.
"""

import json

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
import structlog

from models.webflow import (
    CMSItem,
    CollectionDetail,
    CollectionField,
    CollectionSchemaExport,
    CollectionSummary,
    FieldCreate,
    FieldUpdate,
    ItemListResponse,
    PublishRequest,
)
from services.collection_service import CollectionService
from services.session_service import CMSSession
from routes.common import handle_error, current_session

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/collections", tags=["Collections"])
sites_router = APIRouter(prefix="/api/sites", tags=["Sites"])


def _download(content: str, filename: str, media_type: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("", response_model=list[CollectionSummary])
async def list_collections(session: CMSSession = Depends(current_session)):
    """Collections of the session's site (cached at session open)."""
    return CollectionService(session).list_collections()


@router.get("/{collection_id}", response_model=CollectionDetail)
async def get_collection(collection_id: str, session: CMSSession = Depends(current_session)):
    """
    Collection details with its field schema.

    Raises:
        404: Collection not on this site
        502: Webflow error
    """
    try:
        return CollectionService(session).get_collection(collection_id)
    except Exception as e:
        return handle_error(e)


@router.get("/{collection_id}/items", response_model=ItemListResponse)
async def list_items(
    collection_id: str,
    limit: int = Query(100, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0, description="Items to skip"),
    session: CMSSession = Depends(current_session),
):
    """One page of collection items."""
    try:
        items = CollectionService(session).list_items(collection_id, limit=limit, offset=offset)
        return ItemListResponse(data=items, count=len(items), limit=limit, offset=offset)
    except Exception as e:
        return handle_error(e)


@router.get("/{collection_id}/schema", response_model=CollectionSchemaExport)
async def export_schema(
    collection_id: str,
    download: bool = Query(False, description="Return as a file attachment"),
    session: CMSSession = Depends(current_session),
):
    """Portable schema: name, slug and fields (name, slug, type, required, helpText)."""
    try:
        service = CollectionService(session)
        schema = service.export_schema(collection_id)
        if not download:
            return schema
        return _download(
            schema.model_dump_json(indent=2),
            f"{schema.slug or collection_id}-schema.json",
            "application/json",
        )
    except Exception as e:
        return handle_error(e)


@router.get("/{collection_id}/items/export")
async def export_items(collection_id: str, session: CMSSession = Depends(current_session)):
    """Every item of the collection as a JSON download."""
    try:
        service = CollectionService(session)
        items = service.export_items(collection_id)
        return _download(
            json.dumps(items, indent=2, ensure_ascii=False),
            f"{service.collection_slug(collection_id)}-items.json",
            "application/json",
        )
    except Exception as e:
        return handle_error(e)


@router.get("/{collection_id}/template")
async def download_template(collection_id: str, session: CMSSession = Depends(current_session)):
    """CSV import template: every non-system field slug as a column."""
    try:
        service = CollectionService(session)
        csv_text = service.template_csv(collection_id)
        return _download(
            csv_text,
            f"{service.collection_slug(collection_id)}-template.csv",
            "text/csv",
        )
    except Exception as e:
        return handle_error(e)


# ===================
# ITEMS
# ===================

@router.get("/{collection_id}/items/{item_id}", response_model=CMSItem)
async def get_item(
    collection_id: str,
    item_id: str,
    session: CMSSession = Depends(current_session),
):
    """
    Single item.

    Raises:
        404: Collection not on this site
        502: Webflow error (including an unknown item)
    """
    try:
        return CollectionService(session).get_item(collection_id, item_id)
    except Exception as e:
        return handle_error(e)


@router.delete("/{collection_id}/items/{item_id}", status_code=204)
async def delete_item(
    collection_id: str,
    item_id: str,
    session: CMSSession = Depends(current_session),
):
    """Delete an item."""
    try:
        CollectionService(session).delete_item(collection_id, item_id)
    except Exception as e:
        return handle_error(e)


# ===================
# FIELDS
# ===================

@router.post("/{collection_id}/fields", response_model=CollectionField, status_code=201)
async def create_field(
    collection_id: str,
    data: FieldCreate,
    session: CMSSession = Depends(current_session),
):
    """Add a field to the collection."""
    try:
        return CollectionService(session).create_field(collection_id, data)
    except Exception as e:
        return handle_error(e)


@router.patch("/{collection_id}/fields/{field_id}", response_model=CollectionField)
async def update_field(
    collection_id: str,
    field_id: str,
    data: FieldUpdate,
    session: CMSSession = Depends(current_session),
):
    """Update a field's label, required flag or help text."""
    try:
        return CollectionService(session).update_field(collection_id, field_id, data)
    except Exception as e:
        return handle_error(e)


@router.delete("/{collection_id}/fields/{field_id}", status_code=204)
async def delete_field(
    collection_id: str,
    field_id: str,
    session: CMSSession = Depends(current_session),
):
    """Remove a field from the collection."""
    try:
        CollectionService(session).delete_field(collection_id, field_id)
    except Exception as e:
        return handle_error(e)


# ===================
# SITES
# ===================

@sites_router.post("/{site_id}/publish")
async def publish_site(
    site_id: str,
    data: PublishRequest = PublishRequest(),
    session: CMSSession = Depends(current_session),
):
    """Publish a site visible to the session's token."""
    try:
        return CollectionService(session).publish_site(site_id, data)
    except Exception as e:
        return handle_error(e)
