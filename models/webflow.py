"""
Webflow site, collection, field and item models.

Mirrors the Webflow Data API v2 payloads the tool reads and writes.
"""

from typing import Any, Literal, Optional
from pydantic import Field

from models.base import BaseSchema, WebflowSchema


FieldType = Literal[
    "PlainText",
    "RichText",
    "Image",
    "MultiImage",
    "Video",
    "Link",
    "Email",
    "Phone",
    "Number",
    "DateTime",
    "Switch",
    "Color",
    "Option",
    "File",
    "Reference",
    "MultiReference",
]

# Webflow system fields never offered in import templates
SYSTEM_FIELD_SLUGS = ("_archived", "_draft")


class SiteResponse(WebflowSchema):
    """Webflow site."""

    id: str = Field(..., description="Site ID")
    display_name: Optional[str] = Field(None, alias="displayName")
    short_name: Optional[str] = Field(None, alias="shortName")
    last_published: Optional[str] = Field(None, alias="lastPublished")
    custom_domains: list[dict[str, Any]] = Field(default_factory=list, alias="customDomains")


class CollectionField(WebflowSchema):
    """One typed field of a collection schema."""

    id: str = Field(..., description="Field ID")
    slug: str = Field(..., description="Field slug used as the key in fieldData")
    display_name: Optional[str] = Field(None, alias="displayName")
    type: str = Field(..., description="Webflow field type")
    is_required: bool = Field(False, alias="isRequired")
    is_editable: Optional[bool] = Field(None, alias="isEditable")
    help_text: Optional[str] = Field(None, alias="helpText")


class CollectionSummary(WebflowSchema):
    """Collection as listed for a site."""

    id: str = Field(..., description="Collection ID")
    display_name: Optional[str] = Field(None, alias="displayName")
    singular_name: Optional[str] = Field(None, alias="singularName")
    slug: Optional[str] = None


class CollectionDetail(CollectionSummary):
    """Collection with its field schema."""

    fields: list[CollectionField] = Field(default_factory=list)


class CMSItem(WebflowSchema):
    """One item of a collection."""

    id: str = Field(..., description="Item ID")
    field_data: dict[str, Any] = Field(default_factory=dict, alias="fieldData")
    is_draft: Optional[bool] = Field(None, alias="isDraft")
    is_archived: Optional[bool] = Field(None, alias="isArchived")
    created_on: Optional[str] = Field(None, alias="createdOn")
    last_updated: Optional[str] = Field(None, alias="lastUpdated")
    last_published: Optional[str] = Field(None, alias="lastPublished")

    @property
    def slug(self) -> Optional[str]:
        """Item slug, if the item has one."""
        return self.field_data.get("slug")


class ItemListResponse(BaseSchema):
    """One page of collection items."""

    data: list[CMSItem]
    count: int
    limit: int
    offset: int


# ===================
# SCHEMA EXPORT
# ===================

class ExportedField(BaseSchema):
    """Field entry of an exported collection schema."""

    name: Optional[str] = None
    slug: str
    type: str
    required: bool = False
    helpText: Optional[str] = None


class CollectionSchemaExport(BaseSchema):
    """Portable description of a collection schema."""

    name: Optional[str] = None
    slug: Optional[str] = None
    fields: list[ExportedField] = Field(default_factory=list)


# ===================
# FIELD MANAGEMENT
# ===================

class FieldCreate(BaseSchema):
    """Add a field to a collection."""

    display_name: str = Field(..., min_length=1, max_length=200, description="Field label")
    type: FieldType = Field(..., description="Webflow field type")
    is_required: bool = Field(False, description="Whether items must set this field")
    help_text: str = Field("", max_length=500, description="Hint shown to editors")

    def to_webflow(self) -> dict:
        """Request body for the Webflow create-field endpoint."""
        return {
            "displayName": self.display_name,
            "type": self.type,
            "isRequired": self.is_required,
            "helpText": self.help_text,
        }


class FieldUpdate(BaseSchema):
    """
    Update an existing field.

    All fields optional - only provided fields are sent.
    """

    display_name: Optional[str] = Field(None, min_length=1, max_length=200)
    is_required: Optional[bool] = None
    help_text: Optional[str] = Field(None, max_length=500)

    def to_webflow(self) -> dict:
        """Request body for the Webflow update-field endpoint."""
        body = {
            "displayName": self.display_name,
            "isRequired": self.is_required,
            "helpText": self.help_text,
        }
        return {key: value for key, value in body.items() if value is not None}


class PublishRequest(BaseSchema):
    """Publish a site to its Webflow subdomain and/or custom domains."""

    publish_to_webflow_subdomain: bool = True
    custom_domain_ids: list[str] = Field(default_factory=list)

    def to_webflow(self) -> dict:
        body: dict[str, Any] = {"publishToWebflowSubdomain": self.publish_to_webflow_subdomain}
        if self.custom_domain_ids:
            body["customDomains"] = self.custom_domain_ids
        return body
