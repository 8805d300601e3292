"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    WebflowSchema,
)
from models.webflow import (
    FieldType,
    SYSTEM_FIELD_SLUGS,
    SiteResponse,
    CollectionField,
    CollectionSummary,
    CollectionDetail,
    CMSItem,
    ItemListResponse,
    ExportedField,
    CollectionSchemaExport,
    FieldCreate,
    FieldUpdate,
    PublishRequest,
)
from models.session import (
    SessionCreate,
    SessionResponse,
)
from models.imports import (
    ImportMode,
    FileType,
    ImportJobStatus,
    ItemAction,
    UploadResponse,
    MappingSuggestion,
    ImportRequest,
    DryRunResponse,
    ProgressEventResponse,
    RowResultResponse,
    RowErrorResponse,
    ImportResultResponse,
    ImportJobResponse,
)
from models.images import (
    ImageFormat,
    SizePreset,
    QualityPreset,
    CropBox,
    ImageOptions,
    SizePresetResponse,
    QualityPresetResponse,
    PresetListResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "WebflowSchema",

    # Webflow
    "FieldType",
    "SYSTEM_FIELD_SLUGS",
    "SiteResponse",
    "CollectionField",
    "CollectionSummary",
    "CollectionDetail",
    "CMSItem",
    "ItemListResponse",
    "ExportedField",
    "CollectionSchemaExport",
    "FieldCreate",
    "FieldUpdate",
    "PublishRequest",

    # Session
    "SessionCreate",
    "SessionResponse",

    # Imports
    "ImportMode",
    "FileType",
    "ImportJobStatus",
    "ItemAction",
    "UploadResponse",
    "MappingSuggestion",
    "ImportRequest",
    "DryRunResponse",
    "ProgressEventResponse",
    "RowResultResponse",
    "RowErrorResponse",
    "ImportResultResponse",
    "ImportJobResponse",

    # Images
    "ImageFormat",
    "SizePreset",
    "QualityPreset",
    "CropBox",
    "ImageOptions",
    "SizePresetResponse",
    "QualityPresetResponse",
    "PresetListResponse",
]
