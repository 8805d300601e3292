"""
Helpers shared by route modules.
"""

from typing import Optional

from fastapi import Header
from fastapi.responses import JSONResponse
import structlog

from exceptions import AppError
from services.session_service import CMSSession, get_session_service

logger = structlog.get_logger(__name__)

SESSION_HEADER = "X-Session-Id"


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def current_session(
    x_session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
) -> CMSSession:
    """
    Resolve the CMS session named by the X-Session-Id header.

    Raises:
        SessionNotFoundError: Header missing, or session unknown/expired
    """
    return get_session_service().get(x_session_id)
