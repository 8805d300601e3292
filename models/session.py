"""
CMS session models.

A session binds one Webflow API token to a selected site and its
collection list for the lifetime of an operator's visit.
"""

from datetime import datetime
from typing import Optional
from pydantic import Field

from models.base import BaseSchema
from models.webflow import SiteResponse, CollectionSummary


class SessionCreate(BaseSchema):
    """Open a session."""

    token: Optional[str] = Field(
        None,
        description="Webflow API token (falls back to the configured default)"
    )
    site_id: Optional[str] = Field(
        None,
        description="Site to work on (defaults to the first site of the token)"
    )


class SessionResponse(BaseSchema):
    """Open session summary."""

    session_id: str
    site: SiteResponse
    sites: list[SiteResponse]
    collections: list[CollectionSummary]
    expires_at: datetime
