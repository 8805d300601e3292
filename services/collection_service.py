"""
Collection browser service.

Reads collection schemas and items, manages fields and exports schema,
items and import templates for the collection views.
"""

from typing import Optional
import structlog

from models.webflow import (
    CollectionSchemaExport,
    ExportedField,
    FieldCreate,
    FieldUpdate,
    PublishRequest,
)
from services.mapping_service import build_template_csv
from services.reconciler import fetch_all_items
from services.session_service import CMSSession

logger = structlog.get_logger(__name__)


class CollectionService:
    """
    Collection operations scoped to one CMS session.

    Every collection id is checked against the session's cached collection
    list before Webflow is called.
    """

    def __init__(self, session: CMSSession):
        self.session = session
        self.client = session.client

    def list_collections(self) -> list[dict]:
        return self.session.collections

    def get_collection(self, collection_id: str) -> dict:
        """Collection details including the field schema."""
        self.session.find_collection(collection_id)
        return self.client.get_collection(collection_id)

    def get_fields(self, collection_id: str) -> list[dict]:
        return self.get_collection(collection_id).get("fields", [])

    def list_items(self, collection_id: str, limit: int = 100, offset: int = 0) -> list[dict]:
        """One page of items."""
        self.session.find_collection(collection_id)
        return self.client.list_items(collection_id, limit=limit, offset=offset)

    def get_item(self, collection_id: str, item_id: str) -> dict:
        self.session.find_collection(collection_id)
        return self.client.get_item(collection_id, item_id)

    def delete_item(self, collection_id: str, item_id: str) -> None:
        self.session.find_collection(collection_id)
        self.client.delete_item(collection_id, item_id)
        logger.info("item_deleted", collection_id=collection_id, item_id=item_id)

    def export_schema(self, collection_id: str) -> CollectionSchemaExport:
        """
        Portable schema description.

        Shape: {name, slug, fields: [{name, slug, type, required, helpText}]}
        """
        details = self.get_collection(collection_id)
        return CollectionSchemaExport(
            name=details.get("displayName") or details.get("name"),
            slug=details.get("slug"),
            fields=[
                ExportedField(
                    name=f.get("displayName") or f.get("name"),
                    slug=f["slug"],
                    type=f["type"],
                    required=bool(f.get("isRequired")),
                    helpText=f.get("helpText"),
                )
                for f in details.get("fields", [])
            ],
        )

    def export_items(self, collection_id: str) -> list[dict]:
        """All items of the collection."""
        self.session.find_collection(collection_id)
        items = fetch_all_items(self.client, collection_id)
        logger.info("items_exported", collection_id=collection_id, count=len(items))
        return items

    def template_csv(self, collection_id: str) -> str:
        """Blank import template for the collection."""
        return build_template_csv(self.get_fields(collection_id))

    def collection_slug(self, collection_id: str) -> str:
        """Slug for download filenames, falling back to the id."""
        collection = self.session.find_collection(collection_id)
        return collection.get("slug") or collection_id

    # ===================
    # FIELDS
    # ===================

    def create_field(self, collection_id: str, data: FieldCreate) -> dict:
        self.session.find_collection(collection_id)
        field = self.client.create_field(collection_id, data.to_webflow())
        logger.info(
            "field_created",
            collection_id=collection_id,
            field_id=field.get("id"),
            type=data.type
        )
        return field

    def update_field(self, collection_id: str, field_id: str, data: FieldUpdate) -> dict:
        self.session.find_collection(collection_id)
        field = self.client.update_field(collection_id, field_id, data.to_webflow())
        logger.info("field_updated", collection_id=collection_id, field_id=field_id)
        return field

    def delete_field(self, collection_id: str, field_id: str) -> None:
        self.session.find_collection(collection_id)
        self.client.delete_field(collection_id, field_id)
        logger.info("field_deleted", collection_id=collection_id, field_id=field_id)

    # ===================
    # SITE
    # ===================

    def publish_site(self, site_id: str, data: Optional[PublishRequest] = None) -> dict:
        """Publish one of the sites visible to the session's token."""
        self.session.find_site(site_id)
        data = data or PublishRequest()
        return self.client.publish_site(site_id, data.to_webflow())
