"""
Webflow Data API v2 client.

Talks to Webflow directly with a bearer token. Implements the item-store
operations the import reconciler needs (list/get/create/update items) plus
item deletion and the site, collection and field endpoints used by the
collection browser.
"""

from typing import Any, Optional
import requests
import structlog

from config import settings
from exceptions import (
    MissingCredentialError,
    InvalidCredentialError,
    WebflowAPIError,
)

logger = structlog.get_logger(__name__)

# Webflow tokens are long opaque strings; anything this short is a paste error
MIN_TOKEN_LENGTH = 21

_BODY_METHODS = ("POST", "PATCH", "PUT")


def is_valid_token(token: Optional[str]) -> bool:
    """Check whether a token looks like a Webflow API token."""
    return bool(token) and len(token.strip()) >= MIN_TOKEN_LENGTH


def validate_token(token: Optional[str]) -> str:
    """
    Validate token format before any remote call is attempted.

    Args:
        token: Raw token as supplied by the operator

    Returns:
        Stripped token

    Raises:
        MissingCredentialError: No token supplied
        InvalidCredentialError: Token too short to be real
    """
    if token is None or not token.strip():
        raise MissingCredentialError()
    if not is_valid_token(token):
        raise InvalidCredentialError()
    return token.strip()


def _error_message(data: Any, status: int) -> str:
    """Pick the most useful message out of a Webflow error body."""
    if isinstance(data, dict):
        message = data.get("message") or data.get("error")
        if message:
            return str(message)
    return f"API Error: {status}"


class WebflowClient:
    """
    Thin wrapper over the Webflow REST API.

    One instance per token. Every method returns decoded JSON and raises
    WebflowAPIError on transport failures and non-2xx responses.
    """

    def __init__(
        self,
        token: Optional[str],
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
    ):
        self.token = validate_token(token)
        self.base_url = (base_url or settings.webflow_api_base_url).rstrip("/")
        self.timeout = timeout or settings.webflow_request_timeout
        self.http = http or requests.Session()
        self.http.headers.update({
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "accept": "application/json",
            "accept-version": api_version or settings.webflow_api_version,
        })

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Send a request to the Webflow API.

        Args:
            endpoint: Path below the API base URL (e.g. "/sites")
            method: HTTP method
            body: JSON body, only sent for POST/PATCH/PUT
            params: Query string parameters

        Returns:
            Decoded JSON response ({} for empty bodies)

        Raises:
            WebflowAPIError: Request failed or Webflow returned an error
        """
        method = method.upper()
        url = f"{self.base_url}{endpoint}"

        logger.debug("webflow_request", method=method, endpoint=endpoint)

        try:
            response = self.http.request(
                method,
                url,
                json=body if body is not None and method in _BODY_METHODS else None,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(
                "webflow_request_failed",
                method=method,
                endpoint=endpoint,
                error=str(e),
                error_type=type(e).__name__
            )
            raise WebflowAPIError(
                f"Failed to reach Webflow: {e}",
                endpoint=endpoint
            ) from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {"raw": response.text[:500]}

        if not response.ok:
            message = _error_message(data, response.status_code)
            logger.warning(
                "webflow_api_error",
                method=method,
                endpoint=endpoint,
                status=response.status_code,
                message=message
            )
            raise WebflowAPIError(
                message,
                status=response.status_code,
                endpoint=endpoint,
                body=data
            )

        return data

    # ===================
    # SITES
    # ===================

    def get_sites(self) -> list[dict]:
        data = self.request("/sites")
        return data.get("sites", [])

    def publish_site(self, site_id: str, options: Optional[dict] = None) -> dict:
        logger.info("publishing_site", site_id=site_id)
        return self.request(f"/sites/{site_id}/publish", method="POST", body=options or {})

    # ===================
    # COLLECTIONS
    # ===================

    def get_collections(self, site_id: str) -> list[dict]:
        data = self.request(f"/sites/{site_id}/collections")
        return data.get("collections", [])

    def get_collection(self, collection_id: str) -> dict:
        return self.request(f"/collections/{collection_id}")

    def create_field(self, collection_id: str, field_data: dict) -> dict:
        logger.info("creating_field", collection_id=collection_id, type=field_data.get("type"))
        return self.request(f"/collections/{collection_id}/fields", method="POST", body=field_data)

    def update_field(self, collection_id: str, field_id: str, field_data: dict) -> dict:
        return self.request(
            f"/collections/{collection_id}/fields/{field_id}",
            method="PATCH",
            body=field_data
        )

    def delete_field(self, collection_id: str, field_id: str) -> dict:
        logger.info("deleting_field", collection_id=collection_id, field_id=field_id)
        return self.request(f"/collections/{collection_id}/fields/{field_id}", method="DELETE")

    # ===================
    # ITEMS
    # ===================

    def list_items(self, collection_id: str, limit: int = 100, offset: int = 0) -> list[dict]:
        """
        Fetch one page of items.

        Webflow caps limit at 100.
        """
        params = {}
        if limit:
            params["limit"] = limit
        if offset:
            params["offset"] = offset
        data = self.request(f"/collections/{collection_id}/items", params=params or None)
        return data.get("items", [])

    def get_item(self, collection_id: str, item_id: str) -> dict:
        """Fetch a single item (staged version)."""
        return self.request(f"/collections/{collection_id}/items/{item_id}")

    def create_item(self, collection_id: str, field_data: dict, live: bool = True) -> dict:
        """Create an item, published immediately when live, else as a draft."""
        endpoint = f"/collections/{collection_id}/items"
        if live:
            endpoint += "/live"
        return self.request(endpoint, method="POST", body={"fieldData": field_data})

    def update_item(
        self,
        collection_id: str,
        item_id: str,
        field_data: dict,
        live: bool = True
    ) -> dict:
        """Update an item, publishing the change immediately when live."""
        endpoint = f"/collections/{collection_id}/items/{item_id}"
        if live:
            endpoint += "/live"
        return self.request(endpoint, method="PATCH", body={"fieldData": field_data})

    def delete_item(self, collection_id: str, item_id: str) -> dict:
        logger.info("deleting_item", collection_id=collection_id, item_id=item_id)
        return self.request(f"/collections/{collection_id}/items/{item_id}", method="DELETE")
