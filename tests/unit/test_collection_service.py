"""
Unit tests for CollectionService.

Run: pytest tests/unit/test_collection_service.py -v
"""

import pytest

from exceptions import CollectionNotFoundError, SiteNotFoundError
from models.webflow import FieldCreate, FieldUpdate, PublishRequest
from services.collection_service import CollectionService
from tests.conftest import InMemoryItemStore
from tests.factories import ItemFactory


@pytest.fixture
def service(cms_session) -> CollectionService:
    return CollectionService(cms_session)


class TestCollectionReads:
    """Tests for collection and item reads"""

    def test_list_collections_from_session(self, service, mock_webflow):
        assert len(service.list_collections()) == 2
        mock_webflow.get_collection.assert_not_called()

    def test_get_collection(self, service):
        details = service.get_collection("col-posts")

        assert details["id"] == "col-posts"
        assert len(details["fields"]) == 6

    def test_collection_not_on_site_never_calls_webflow(self, service, mock_webflow):
        with pytest.raises(CollectionNotFoundError):
            service.get_collection("col-foreign")

        mock_webflow.get_collection.assert_not_called()

    def test_list_items_page(self, service, mock_webflow):
        mock_webflow.list_items.return_value = [ItemFactory.create()]

        items = service.list_items("col-posts", limit=10, offset=20)

        assert len(items) == 1
        mock_webflow.list_items.assert_called_once_with("col-posts", limit=10, offset=20)

    def test_get_item_from_item_store(self, cms_session):
        store = InMemoryItemStore([ItemFactory.create(id="i1", slug="hello")])
        cms_session.client = store

        item = CollectionService(cms_session).get_item("col-posts", "i1")

        assert item["fieldData"]["slug"] == "hello"
        assert store.calls == [("get", "col-posts", "i1")]

    def test_get_item_on_foreign_collection(self, service, mock_webflow):
        with pytest.raises(CollectionNotFoundError):
            service.get_item("col-foreign", "i1")

        mock_webflow.get_item.assert_not_called()

    def test_delete_item(self, service, mock_webflow):
        service.delete_item("col-posts", "i1")

        mock_webflow.delete_item.assert_called_once_with("col-posts", "i1")

    def test_export_items_fetches_every_page(self, service, mock_webflow):
        pages = [ItemFactory.create_batch(100), ItemFactory.create_batch(30)]
        mock_webflow.list_items.side_effect = pages

        items = service.export_items("col-posts")

        assert len(items) == 130
        assert mock_webflow.list_items.call_count == 2


class TestExports:
    """Tests for schema export and template download"""

    def test_export_schema_shape(self, service):
        schema = service.export_schema("col-posts")

        assert schema.name == "Posts"
        assert schema.slug == "posts"
        assert schema.fields[0].model_dump() == {
            "name": "Name",
            "slug": "name",
            "type": "PlainText",
            "required": True,
            "helpText": "",
        }
        assert schema.fields[3].type == "Image"

    def test_template_csv_excludes_system_fields(self, service):
        text = service.template_csv("col-posts")

        assert text.splitlines()[0] == "name,slug,summary,main-image"

    def test_collection_slug(self, service):
        assert service.collection_slug("col-authors") == "authors"


class TestFieldManagement:
    """Tests for create/update/delete field"""

    def test_create_field_body(self, service, mock_webflow):
        mock_webflow.create_field.return_value = {"id": "f-new", "slug": "subtitle"}

        field = service.create_field(
            "col-posts",
            FieldCreate(display_name="Subtitle", type="PlainText", help_text="Shown under the title")
        )

        assert field["id"] == "f-new"
        mock_webflow.create_field.assert_called_once_with("col-posts", {
            "displayName": "Subtitle",
            "type": "PlainText",
            "isRequired": False,
            "helpText": "Shown under the title",
        })

    def test_update_field_sends_only_given_values(self, service, mock_webflow):
        service.update_field("col-posts", "f-1", FieldUpdate(is_required=True))

        mock_webflow.update_field.assert_called_once_with("col-posts", "f-1", {"isRequired": True})

    def test_delete_field(self, service, mock_webflow):
        service.delete_field("col-posts", "f-1")

        mock_webflow.delete_field.assert_called_once_with("col-posts", "f-1")

    def test_field_change_on_foreign_collection(self, service, mock_webflow):
        with pytest.raises(CollectionNotFoundError):
            service.delete_field("col-foreign", "f-1")

        mock_webflow.delete_field.assert_not_called()


class TestPublishSite:
    """Tests for publish_site()"""

    def test_publish_default_body(self, service, mock_webflow):
        service.publish_site("site-1")

        mock_webflow.publish_site.assert_called_once_with(
            "site-1", {"publishToWebflowSubdomain": True}
        )

    def test_publish_custom_domains(self, service, mock_webflow):
        service.publish_site("site-2", PublishRequest(custom_domain_ids=["d1"]))

        mock_webflow.publish_site.assert_called_once_with(
            "site-2", {"publishToWebflowSubdomain": True, "customDomains": ["d1"]}
        )

    def test_publish_unknown_site(self, service):
        with pytest.raises(SiteNotFoundError):
            service.publish_site("site-9")
