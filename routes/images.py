"""
Image processing API routes.

Resize, crop and convert images before uploading them to the CMS.
"""

from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError as PydanticValidationError
import structlog

from exceptions import ValidationError
from models.images import (
    CropBox,
    ImageFormat,
    ImageOptions,
    PresetListResponse,
    QualityPreset,
    QualityPresetResponse,
    SizePreset,
    SizePresetResponse,
)
from services.image_service import QUALITY_PRESETS, SIZE_PRESETS, get_image_service
from routes.common import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/images", tags=["Images"])


def _build_options(
    preset: SizePreset,
    width: Optional[int],
    height: Optional[int],
    quality: QualityPreset,
    image_format: ImageFormat,
    maintain_aspect: bool,
    crop_x: Optional[int],
    crop_y: Optional[int],
    crop_width: Optional[int],
    crop_height: Optional[int],
) -> ImageOptions:
    """
    Assemble ImageOptions from form fields.

    Raises:
        ValidationError: Inconsistent options or partial crop box
    """
    crop_values = (crop_x, crop_y, crop_width, crop_height)
    if any(v is not None for v in crop_values) and not all(v is not None for v in crop_values):
        raise ValidationError(
            "Crop needs crop_x, crop_y, crop_width and crop_height",
            code="INVALID_IMAGE_OPTIONS"
        )

    try:
        crop = None
        if crop_x is not None:
            crop = CropBox(x=crop_x, y=crop_y, width=crop_width, height=crop_height)
        return ImageOptions(
            preset=preset,
            width=width,
            height=height,
            quality=quality,
            format=image_format,
            maintain_aspect=maintain_aspect,
            crop=crop,
        )
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid image options",
            code="INVALID_IMAGE_OPTIONS",
            details={"errors": [err["msg"] for err in e.errors()]}
        )


@router.get("/presets", response_model=PresetListResponse)
async def list_presets():
    """Size presets, quality presets and output formats."""
    return PresetListResponse(
        sizes=[
            SizePresetResponse(key=key, label=p["label"], width=p["width"], height=p["height"])
            for key, p in SIZE_PRESETS.items()
        ],
        qualities=[
            QualityPresetResponse(key=key, label=p["label"], quality=p["quality"])
            for key, p in QUALITY_PRESETS.items()
        ],
        formats=list(ImageFormat),
    )


@router.post("/process")
async def process_image(
    file: UploadFile = File(..., description="Image to process"),
    preset: SizePreset = Form(SizePreset.CUSTOM),
    width: Optional[int] = Form(None),
    height: Optional[int] = Form(None),
    quality: QualityPreset = Form(QualityPreset.BALANCED),
    format: ImageFormat = Form(ImageFormat.WEBP),
    maintain_aspect: bool = Form(True),
    crop_x: Optional[int] = Form(None),
    crop_y: Optional[int] = Form(None),
    crop_width: Optional[int] = Form(None),
    crop_height: Optional[int] = Form(None),
):
    """
    Process one image and return the encoded bytes.

    Output size and name are reported in X-Image-Width, X-Image-Height and
    the Content-Disposition header.

    Raises:
        422: Bad options, unreadable image or crop outside the image
    """
    try:
        options = _build_options(
            preset, width, height, quality, format, maintain_aspect,
            crop_x, crop_y, crop_width, crop_height,
        )
        data = await file.read()
        processed = get_image_service().process(data, file.filename or "image", options)

        return Response(
            content=processed.data,
            media_type=processed.media_type,
            headers={
                "Content-Disposition": f'attachment; filename="{processed.filename}"',
                "X-Image-Width": str(processed.width),
                "X-Image-Height": str(processed.height),
            },
        )
    except Exception as e:
        return handle_error(e)


@router.post("/batch")
async def process_batch(
    files: list[UploadFile] = File(..., description="Images to process"),
    preset: SizePreset = Form(SizePreset.CUSTOM),
    width: Optional[int] = Form(None),
    height: Optional[int] = Form(None),
    quality: QualityPreset = Form(QualityPreset.BALANCED),
    format: ImageFormat = Form(ImageFormat.WEBP),
    maintain_aspect: bool = Form(True),
):
    """
    Process several images with the same options.

    Returns a ZIP of the outputs plus manifest.json. Files that fail are
    listed in the manifest with their error instead of failing the batch.
    """
    try:
        options = _build_options(
            preset, width, height, quality, format, maintain_aspect,
            None, None, None, None,
        )
        payload = [(f.filename or "image", await f.read()) for f in files]
        archive, manifest = get_image_service().process_batch(payload, options)

        failed = sum(1 for entry in manifest if "error" in entry)
        return Response(
            content=archive,
            media_type="application/zip",
            headers={
                "Content-Disposition": 'attachment; filename="images.zip"',
                "X-Batch-Processed": str(len(manifest) - failed),
                "X-Batch-Failed": str(failed),
            },
        )
    except Exception as e:
        return handle_error(e)
