"""
Image processing models.
"""

from enum import Enum
from typing import Optional
from pydantic import Field, model_validator

from models.base import BaseSchema


class ImageFormat(str, Enum):
    """Output encodings."""
    WEBP = "webp"
    JPEG = "jpeg"
    PNG = "png"


class SizePreset(str, Enum):
    """Named output sizes."""
    MAIN_PHOTO = "main-photo"
    GALLERY = "gallery"
    SQUARE = "square"
    VERTICAL = "vertical"
    CUSTOM = "custom"


class QualityPreset(str, Enum):
    """Named encoder qualities."""
    HIGH = "high"
    BALANCED = "balanced"
    OPTIMIZED = "optimized"


class CropBox(BaseSchema):
    """Crop rectangle in source pixels."""

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class ImageOptions(BaseSchema):
    """
    Processing options for one image or a batch.

    A preset other than custom fixes width and height; custom uses the
    explicit width/height (either may be omitted to keep the source value).
    """

    preset: SizePreset = SizePreset.CUSTOM
    width: Optional[int] = Field(None, gt=0, le=10000)
    height: Optional[int] = Field(None, gt=0, le=10000)
    quality: QualityPreset = QualityPreset.BALANCED
    format: ImageFormat = ImageFormat.WEBP
    maintain_aspect: bool = True
    crop: Optional[CropBox] = None

    @model_validator(mode="after")
    def custom_needs_no_preset_size(self):
        if self.preset != SizePreset.CUSTOM and (self.width or self.height):
            raise ValueError("width/height can only be set with the custom preset")
        return self


class SizePresetResponse(BaseSchema):
    """Size preset description."""

    key: SizePreset
    label: str
    width: Optional[int] = None
    height: Optional[int] = None


class QualityPresetResponse(BaseSchema):
    """Quality preset description."""

    key: QualityPreset
    label: str
    quality: int


class PresetListResponse(BaseSchema):
    """All presets and formats the processor understands."""

    sizes: list[SizePresetResponse]
    qualities: list[QualityPresetResponse]
    formats: list[ImageFormat]

