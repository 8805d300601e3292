"""
CMS session service.

A CMSSession is the explicit context every Webflow operation runs in: the
validated token (inside its client), the selected site, and the cached
collection list for that site.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional
import structlog

from config import settings
from exceptions import (
    SessionNotFoundError,
    SiteNotFoundError,
    CollectionNotFoundError,
)
from integrations.webflow import WebflowClient, validate_token
from services.ttl_store import TTLStore

logger = structlog.get_logger(__name__)


@dataclass
class CMSSession:
    """Working context for one operator and one site."""
    session_id: str
    client: WebflowClient
    site: dict
    sites: list[dict] = field(default_factory=list)
    collections: list[dict] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def site_id(self) -> str:
        return self.site["id"]

    def find_collection(self, collection_id: str) -> dict:
        """
        Cached collection summary by id.

        Raises:
            CollectionNotFoundError: Collection not on the session's site
        """
        for collection in self.collections:
            if collection.get("id") == collection_id:
                return collection
        raise CollectionNotFoundError(collection_id)

    def find_site(self, site_id: str) -> dict:
        """
        Site by id among those the token can see.

        Raises:
            SiteNotFoundError: Token has no access to the site
        """
        for site in self.sites:
            if site.get("id") == site_id:
                return site
        raise SiteNotFoundError(site_id)


class SessionService:
    """
    Opens, looks up and closes CMS sessions.

    Sessions live in memory and expire after settings.session_ttl_minutes.
    """

    def __init__(
        self,
        ttl_minutes: Optional[int] = None,
        client_factory: Callable[[str], WebflowClient] = WebflowClient,
    ):
        self.store: TTLStore[CMSSession] = TTLStore(ttl_minutes or settings.session_ttl_minutes)
        self.client_factory = client_factory

    def open(self, token: Optional[str] = None, site_id: Optional[str] = None) -> CMSSession:
        """
        Validate the token, pick a site and load its collections.

        Args:
            token: Webflow API token (configured default when omitted)
            site_id: Site to select (first site when omitted)

        Returns:
            New CMSSession

        Raises:
            MissingCredentialError: No token given or configured
            InvalidCredentialError: Token malformed
            SiteNotFoundError: Token sees no sites, or not site_id
            WebflowAPIError: Webflow call failed
        """
        token = validate_token(token or settings.webflow_api_token)
        client = self.client_factory(token)

        sites = client.get_sites()
        if not sites:
            raise SiteNotFoundError(site_id or "any")

        if site_id:
            site = next((s for s in sites if s.get("id") == site_id), None)
            if site is None:
                raise SiteNotFoundError(site_id)
        else:
            site = sites[0]

        collections = client.get_collections(site["id"])

        session = CMSSession(
            session_id="",
            client=client,
            site=site,
            sites=sites,
            collections=collections,
        )
        session.session_id = self.store.put(session)

        logger.info(
            "session_opened",
            session_id=session.session_id,
            site_id=site["id"],
            sites=len(sites),
            collections=len(collections)
        )
        return session

    def get(self, session_id: Optional[str]) -> CMSSession:
        """
        Look up an open session.

        Raises:
            SessionNotFoundError: Unknown or expired id
        """
        session = self.store.get(session_id) if session_id else None
        if session is None:
            raise SessionNotFoundError(session_id or "")
        return session

    def expires_at(self, session_id: str) -> Optional[datetime]:
        return self.store.expires_at(session_id)

    def refresh_collections(self, session_id: str) -> CMSSession:
        """Reload the collection list of the session's site."""
        session = self.get(session_id)
        session.collections = session.client.get_collections(session.site_id)
        logger.info(
            "session_collections_refreshed",
            session_id=session_id,
            collections=len(session.collections)
        )
        return session

    def close(self, session_id: str) -> None:
        self.get(session_id)
        self.store.delete(session_id)
        logger.info("session_closed", session_id=session_id)


# Singleton instance
_session_service: Optional[SessionService] = None


def get_session_service() -> SessionService:
    """Get or create SessionService instance."""
    global _session_service
    if _session_service is None:
        _session_service = SessionService()
    return _session_service
