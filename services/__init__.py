"""
Business logic services.

Each service handles one domain area.
"""

from services.session_service import CMSSession, SessionService, get_session_service
from services.collection_service import CollectionService
from services.import_service import ImportJob, ImportService, get_import_service
from services.image_service import ImageService, ProcessedImage, get_image_service
from services.rate_limiter import FixedIntervalRateLimiter
from services.reconciler import (
    ItemStore,
    ImportResult,
    ProgressEvent,
    upsert_items,
    create_items,
    preview_rows,
)

__all__ = [
    "CMSSession",
    "SessionService",
    "get_session_service",
    "CollectionService",
    "ImportJob",
    "ImportService",
    "get_import_service",
    "ImageService",
    "ProcessedImage",
    "get_image_service",
    "FixedIntervalRateLimiter",
    "ItemStore",
    "ImportResult",
    "ProgressEvent",
    "upsert_items",
    "create_items",
    "preview_rows",
]
