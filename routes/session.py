"""
CMS session API routes.

Open a session with a Webflow token, inspect it, refresh its collection
list, close it.
"""

from fastapi import APIRouter, Depends
import structlog

from models.session import SessionCreate, SessionResponse
from services.session_service import CMSSession, get_session_service
from routes.common import handle_error, current_session

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/session", tags=["Session"])


def _to_response(session: CMSSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        site=session.site,
        sites=session.sites,
        collections=session.collections,
        expires_at=get_session_service().expires_at(session.session_id),
    )


@router.post("", response_model=SessionResponse, status_code=201)
async def open_session(data: SessionCreate):
    """
    Open a CMS session.

    Validates the token before calling Webflow, then loads the sites and
    the collections of the selected site.

    Raises:
        401: Token missing or malformed
        404: Site not found
        502: Webflow error
    """
    try:
        service = get_session_service()
        session = service.open(token=data.token, site_id=data.site_id)
        return _to_response(session)
    except Exception as e:
        return handle_error(e)


@router.get("", response_model=SessionResponse)
async def get_session(session: CMSSession = Depends(current_session)):
    """Summary of the current session."""
    return _to_response(session)


@router.post("/refresh", response_model=SessionResponse)
async def refresh_session(session: CMSSession = Depends(current_session)):
    """Reload the collection list from Webflow."""
    try:
        refreshed = get_session_service().refresh_collections(session.session_id)
        return _to_response(refreshed)
    except Exception as e:
        return handle_error(e)


@router.delete("", status_code=204)
async def close_session(session: CMSSession = Depends(current_session)):
    """Forget the session and its token."""
    try:
        get_session_service().close(session.session_id)
    except Exception as e:
        return handle_error(e)
