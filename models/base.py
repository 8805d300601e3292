"""
Base schemas for all models.

Two bases:
    BaseSchema: request/response models owned by this API
    WebflowSchema: models mirroring Webflow payloads (camelCase aliases)
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM/dataclass objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class WebflowSchema(BaseModel):
    """
    Base for models parsed from Webflow API responses.

    Webflow uses camelCase keys; fields declare snake_case names with
    camelCase aliases and accept either form. Unknown keys are ignored so
    API additions never break parsing.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore"
    )
