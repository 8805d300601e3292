"""
Image processing service.

Resizes, crops and re-encodes images for CMS upload using Pillow.
Batches come back as a ZIP plus a manifest of per-file outcomes.
"""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional
import json
import zipfile
import structlog

from PIL import Image, ImageOps, UnidentifiedImageError

from exceptions import ImageProcessingError
from models.images import (
    CropBox,
    ImageFormat,
    ImageOptions,
    QualityPreset,
    SizePreset,
)

logger = structlog.get_logger(__name__)

SIZE_PRESETS: dict[SizePreset, dict] = {
    SizePreset.MAIN_PHOTO: {"width": 1920, "height": 1080, "label": "Main Photo (1920×1080)"},
    SizePreset.GALLERY: {"width": 1200, "height": 800, "label": "Gallery (1200×800)"},
    SizePreset.SQUARE: {"width": 1000, "height": 1000, "label": "Square (1000×1000)"},
    SizePreset.VERTICAL: {"width": 800, "height": 1200, "label": "Vertical (800×1200)"},
    SizePreset.CUSTOM: {"width": None, "height": None, "label": "Custom Size"},
}

QUALITY_PRESETS: dict[QualityPreset, dict] = {
    QualityPreset.HIGH: {"quality": 92, "label": "High (92%)"},
    QualityPreset.BALANCED: {"quality": 85, "label": "Balanced (85%)"},
    QualityPreset.OPTIMIZED: {"quality": 75, "label": "Optimized (75%)"},
}

# format -> (Pillow encoder, media type, file extension)
ENCODERS: dict[ImageFormat, tuple[str, str, str]] = {
    ImageFormat.WEBP: ("WEBP", "image/webp", "webp"),
    ImageFormat.JPEG: ("JPEG", "image/jpeg", "jpg"),
    ImageFormat.PNG: ("PNG", "image/png", "png"),
}

MANIFEST_NAME = "manifest.json"


@dataclass
class ProcessedImage:
    """Encoded output image."""
    data: bytes
    width: int
    height: int
    format: ImageFormat
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def media_type(self) -> str:
        return ENCODERS[self.format][1]


def target_dimensions(options: ImageOptions) -> tuple[Optional[int], Optional[int]]:
    """Requested width/height after applying the size preset."""
    if options.preset == SizePreset.CUSTOM:
        return options.width, options.height
    preset = SIZE_PRESETS[options.preset]
    return preset["width"], preset["height"]


def fit_dimensions(
    source_width: int,
    source_height: int,
    width: Optional[int],
    height: Optional[int],
    maintain_aspect: bool = True,
) -> tuple[int, int]:
    """
    Output size for a resize.

    Missing dimensions keep the source value. With both given and
    maintain_aspect, the image is fitted inside the box: a source wider than
    the box keeps the box width, otherwise the box height.
    """
    target_width = width or source_width
    target_height = height or source_height

    if maintain_aspect and width and height:
        aspect = source_width / source_height
        if aspect > width / height:
            target_height = width / aspect
        else:
            target_width = height * aspect

    return max(1, round(target_width)), max(1, round(target_height))


def output_filename(source_name: str, image_format: ImageFormat) -> str:
    """Source stem with the extension of the output format."""
    stem = Path(source_name or "image").stem or "image"
    return f"{stem}.{ENCODERS[image_format][2]}"


class ImageService:
    """Resize/crop/convert images."""

    def load(self, data: bytes, filename: Optional[str] = None) -> Image.Image:
        """
        Decode image bytes, applying EXIF orientation.

        Raises:
            ImageProcessingError: Not an image Pillow can read, or over
                Pillow's pixel limit
        """
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except (OSError, UnidentifiedImageError) as e:
            logger.warning("image_decode_failed", filename=filename, error=str(e))
            raise ImageProcessingError("Failed to load image", filename=filename)
        except Image.DecompressionBombError as e:
            logger.warning("image_too_large", filename=filename, error=str(e))
            raise ImageProcessingError("Image is too large to process", filename=filename)
        return ImageOps.exif_transpose(image)

    def resize(
        self,
        image: Image.Image,
        width: Optional[int],
        height: Optional[int],
        maintain_aspect: bool = True,
    ) -> Image.Image:
        size = fit_dimensions(image.width, image.height, width, height, maintain_aspect)
        if size == image.size:
            return image
        return image.resize(size, Image.Resampling.LANCZOS)

    def crop(
        self,
        image: Image.Image,
        box: CropBox,
        width: Optional[int] = None,
        height: Optional[int] = None,
        filename: Optional[str] = None,
    ) -> Image.Image:
        """
        Crop to box, then scale to exactly width x height when given.

        A single given dimension scales the other one proportionally.
        """
        if box.x + box.width > image.width or box.y + box.height > image.height:
            raise ImageProcessingError(
                "Crop box lies outside the image",
                filename=filename,
                details={"image_size": [image.width, image.height], "crop": box.model_dump()}
            )

        cropped = image.crop((box.x, box.y, box.x + box.width, box.y + box.height))

        if width and height:
            size = (width, height)
        elif width:
            size = (width, max(1, round(width * cropped.height / cropped.width)))
        elif height:
            size = (max(1, round(height * cropped.width / cropped.height)), height)
        else:
            return cropped

        return cropped.resize(size, Image.Resampling.LANCZOS)

    def encode(self, image: Image.Image, image_format: ImageFormat, quality: int) -> bytes:
        """Encode to the output format. JPEG output is flattened onto white."""
        encoder = ENCODERS[image_format][0]

        if image_format == ImageFormat.JPEG:
            image = _flatten_on_white(image)
        elif image.mode not in ("RGB", "RGBA", "L", "LA"):
            image = image.convert("RGBA")

        buffer = BytesIO()
        if image_format == ImageFormat.PNG:
            image.save(buffer, format=encoder, optimize=True)
        else:
            image.save(buffer, format=encoder, quality=quality)
        return buffer.getvalue()

    def process(self, data: bytes, filename: str, options: ImageOptions) -> ProcessedImage:
        """
        Process one image according to options.

        Raises:
            ImageProcessingError: Undecodable image or bad crop box
        """
        image = self.load(data, filename)
        width, height = target_dimensions(options)

        if options.crop:
            image = self.crop(image, options.crop, width, height, filename=filename)
        else:
            image = self.resize(image, width, height, options.maintain_aspect)

        quality = QUALITY_PRESETS[options.quality]["quality"]
        encoded = self.encode(image, options.format, quality)

        logger.info(
            "image_processed",
            filename=filename,
            width=image.width,
            height=image.height,
            format=options.format.value,
            bytes=len(encoded)
        )

        return ProcessedImage(
            data=encoded,
            width=image.width,
            height=image.height,
            format=options.format,
            filename=output_filename(filename, options.format),
        )

    def process_batch(
        self,
        files: list[tuple[str, bytes]],
        options: ImageOptions,
    ) -> tuple[bytes, list[dict]]:
        """
        Process many images with the same options.

        A file that fails is listed in the manifest with its error and the
        batch continues.

        Returns:
            (ZIP bytes including manifest.json, manifest entries)
        """
        manifest: list[dict] = []
        used_names: set[str] = {MANIFEST_NAME}
        buffer = BytesIO()

        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for filename, data in files:
                try:
                    processed = self.process(data, filename, options)
                except ImageProcessingError as e:
                    manifest.append({"source": filename, "error": e.message})
                    continue

                name = _unique_name(processed.filename, used_names)
                archive.writestr(name, processed.data)
                manifest.append({
                    "source": filename,
                    "output": name,
                    "width": processed.width,
                    "height": processed.height,
                    "size": processed.size,
                })

            archive.writestr(MANIFEST_NAME, json.dumps(manifest, indent=2))

        logger.info(
            "image_batch_processed",
            files=len(files),
            failed=sum(1 for entry in manifest if "error" in entry)
        )
        return buffer.getvalue(), manifest


def _flatten_on_white(image: Image.Image) -> Image.Image:
    """Composite transparent images onto a white background."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    return image.convert("RGB")


def _unique_name(name: str, used: set[str]) -> str:
    """Suffix -1, -2, ... until name is unused, then reserve it."""
    candidate = name
    stem, suffix = Path(name).stem, Path(name).suffix
    counter = 1
    while candidate in used:
        candidate = f"{stem}-{counter}{suffix}"
        counter += 1
    used.add(candidate)
    return candidate


# Singleton instance
_image_service: Optional[ImageService] = None


def get_image_service() -> ImageService:
    """Get or create ImageService instance."""
    global _image_service
    if _image_service is None:
        _image_service = ImageService()
    return _image_service
