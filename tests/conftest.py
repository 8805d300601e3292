"""
Shared test fixtures.

Webflow is never called: services get an in-memory item store or a
MagicMock client, and throttling intervals are patched to zero.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import MagicMock
from typing import Callable, Generator, Optional

from config import settings
from exceptions import WebflowAPIError
from integrations.webflow import WebflowClient
from services.session_service import CMSSession, SessionService
from tests.factories import CollectionFactory, FieldFactory, SiteFactory

TEST_TOKEN = "wf-test-token-0123456789abcdef"


# ===================
# IN-MEMORY ITEM STORE
# ===================

class InMemoryItemStore:
    """
    Item store backed by a dict, recording every call.

    Usage:
        store = InMemoryItemStore([ItemFactory.create(slug="a")])
        store.fail_when = lambda field_data: field_data.get("name") == "bad"
    """

    def __init__(self, items: Optional[list[dict]] = None):
        self.items: list[dict] = [dict(item) for item in (items or [])]
        self.calls: list[tuple] = []
        self.fail_when: Optional[Callable[[dict], bool]] = None
        self.list_error: Optional[Exception] = None
        self._counter = 0

    def _maybe_fail(self, field_data: dict) -> None:
        if self.fail_when is not None and self.fail_when(field_data):
            raise WebflowAPIError("Validation Error", status=400, endpoint="/items")

    def list_items(self, collection_id: str, limit: int = 100, offset: int = 0) -> list[dict]:
        self.calls.append(("list", collection_id, limit, offset))
        if self.list_error is not None:
            raise self.list_error
        return self.items[offset:offset + limit]

    def get_item(self, collection_id: str, item_id: str) -> dict:
        self.calls.append(("get", collection_id, item_id))
        for item in self.items:
            if item["id"] == item_id:
                return item
        raise WebflowAPIError("Item not found", status=404, endpoint=f"/items/{item_id}")

    def create_item(self, collection_id: str, field_data: dict, live: bool = True) -> dict:
        self.calls.append(("create", collection_id, dict(field_data), live))
        self._maybe_fail(field_data)
        self._counter += 1
        item = {"id": f"new-{self._counter}", "fieldData": dict(field_data)}
        self.items.append(item)
        return item

    def update_item(
        self,
        collection_id: str,
        item_id: str,
        field_data: dict,
        live: bool = True
    ) -> dict:
        self.calls.append(("update", collection_id, item_id, dict(field_data), live))
        self._maybe_fail(field_data)
        item = next(item for item in self.items if item["id"] == item_id)
        item["fieldData"] = {**item.get("fieldData", {}), **field_data}
        return item

    def writes(self) -> list[tuple]:
        """Create and update calls only, in order."""
        return [call for call in self.calls if call[0] in ("create", "update")]


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def no_throttle(monkeypatch):
    """Zero every inter-call delay so tests never sleep."""
    monkeypatch.setattr(settings, "write_interval_seconds", 0.0)
    monkeypatch.setattr(settings, "page_interval_seconds", 0.0)


@pytest.fixture
def item_store() -> InMemoryItemStore:
    """Empty in-memory item store."""
    return InMemoryItemStore()


@pytest.fixture
def sample_fields() -> list[dict]:
    """Field schema of a typical blog collection."""
    return [
        FieldFactory.create(slug="name", display_name="Name", is_required=True),
        FieldFactory.create(slug="slug", display_name="Slug", is_required=True),
        FieldFactory.create(slug="summary", display_name="Post Summary"),
        FieldFactory.create(slug="main-image", display_name="Main Image", type="Image"),
        FieldFactory.create(slug="_archived", display_name="Archived", type="Switch"),
        FieldFactory.create(slug="_draft", display_name="Draft", type="Switch"),
    ]


@pytest.fixture
def mock_webflow(sample_fields) -> MagicMock:
    """
    MagicMock standing in for WebflowClient.

    Usage:
        def test_something(mock_webflow):
            mock_webflow.get_sites.return_value = [...]
    """
    client = MagicMock(spec=WebflowClient)
    client.get_sites.return_value = [
        SiteFactory.create(id="site-1", display_name="Main Site"),
        SiteFactory.create(id="site-2", display_name="Staging"),
    ]
    client.get_collections.return_value = [
        CollectionFactory.create(id="col-posts", display_name="Posts", slug="posts"),
        CollectionFactory.create(id="col-authors", display_name="Authors", slug="authors"),
    ]
    client.get_collection.side_effect = lambda collection_id: CollectionFactory.create(
        id=collection_id,
        display_name="Posts",
        slug="posts",
        fields=sample_fields,
    )
    client.list_items.return_value = []
    return client


@pytest.fixture
def session_service(mock_webflow) -> SessionService:
    """SessionService whose clients are the mock Webflow client."""
    return SessionService(ttl_minutes=60, client_factory=lambda token: mock_webflow)


@pytest.fixture
def cms_session(session_service) -> CMSSession:
    """Open session on site-1."""
    return session_service.open(token=TEST_TOKEN)


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/health")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def api_services(monkeypatch, session_service) -> Generator:
    """
    Install fresh session and import services as the app singletons.

    Usage:
        def test_endpoint(test_client, api_services, cms_session):
            headers = {"X-Session-Id": cms_session.session_id}
    """
    import services.session_service as session_module
    import services.import_service as import_module

    import_service = import_module.ImportService(upload_ttl_minutes=30)
    monkeypatch.setattr(session_module, "_session_service", session_service)
    monkeypatch.setattr(import_module, "_import_service", import_service)
    yield session_service, import_service
