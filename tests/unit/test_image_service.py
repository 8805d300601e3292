"""
Unit tests for ImageService.

Images are generated in memory with Pillow.

Run: pytest tests/unit/test_image_service.py -v
"""

import json
import zipfile
from io import BytesIO

import pytest
from PIL import Image
from pydantic import ValidationError as PydanticValidationError

from exceptions import ImageProcessingError
from models.images import CropBox, ImageFormat, ImageOptions, QualityPreset, SizePreset
from services.image_service import (
    ImageService,
    fit_dimensions,
    output_filename,
    target_dimensions,
)


def make_image(width: int, height: int, mode: str = "RGB", fmt: str = "PNG") -> bytes:
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    buffer = BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def open_image(data: bytes) -> Image.Image:
    return Image.open(BytesIO(data))


@pytest.fixture
def service() -> ImageService:
    return ImageService()


class TestFitDimensions:
    """Tests for fit_dimensions()"""

    def test_wider_source_keeps_box_width(self):
        assert fit_dimensions(4000, 2000, 1200, 800) == (1200, 600)

    def test_taller_source_keeps_box_height(self):
        assert fit_dimensions(1000, 2000, 1200, 800) == (400, 800)

    def test_single_dimension_keeps_other_from_source(self):
        assert fit_dimensions(4000, 2000, 1000, None) == (1000, 2000)

    def test_no_aspect_uses_box(self):
        assert fit_dimensions(4000, 2000, 1000, 1000, maintain_aspect=False) == (1000, 1000)

    def test_nothing_requested(self):
        assert fit_dimensions(640, 480, None, None) == (640, 480)


class TestOptions:
    """Tests for preset handling in ImageOptions"""

    def test_preset_dimensions(self):
        assert target_dimensions(ImageOptions(preset=SizePreset.GALLERY)) == (1200, 800)

    def test_custom_dimensions(self):
        assert target_dimensions(ImageOptions(width=300)) == (300, None)

    def test_size_with_named_preset_rejected(self):
        with pytest.raises(PydanticValidationError):
            ImageOptions(preset=SizePreset.SQUARE, width=300)

    def test_output_filename(self):
        assert output_filename("holiday.photo.PNG", ImageFormat.JPEG) == "holiday.photo.jpg"
        assert output_filename("", ImageFormat.WEBP) == "image.webp"


class TestProcess:
    """Tests for ImageService.process()"""

    def test_resize_and_convert_to_webp(self, service):
        options = ImageOptions(preset=SizePreset.GALLERY)

        result = service.process(make_image(2400, 1200), "wide.png", options)

        assert (result.width, result.height) == (1200, 600)
        assert result.filename == "wide.webp"
        assert result.media_type == "image/webp"
        assert open_image(result.data).format == "WEBP"

    def test_jpeg_flattens_transparency(self, service):
        options = ImageOptions(format=ImageFormat.JPEG, quality=QualityPreset.HIGH)

        result = service.process(make_image(50, 50, mode="RGBA"), "logo.png", options)

        decoded = open_image(result.data)
        assert decoded.format == "JPEG"
        assert decoded.mode == "RGB"
        assert result.filename == "logo.jpg"

    def test_png_keeps_alpha(self, service):
        options = ImageOptions(format=ImageFormat.PNG)

        result = service.process(make_image(40, 20, mode="RGBA"), "logo.png", options)

        assert open_image(result.data).mode == "RGBA"

    def test_crop_then_exact_size(self, service):
        options = ImageOptions(
            width=100,
            height=50,
            format=ImageFormat.PNG,
            crop=CropBox(x=10, y=10, width=300, height=300),
        )

        result = service.process(make_image(400, 400), "photo.png", options)

        assert (result.width, result.height) == (100, 50)

    def test_crop_single_dimension_proportional(self, service):
        options = ImageOptions(width=100, crop=CropBox(x=0, y=0, width=200, height=100))

        result = service.process(make_image(400, 400), "photo.png", options)

        assert (result.width, result.height) == (100, 50)

    def test_crop_outside_image_rejected(self, service):
        options = ImageOptions(crop=CropBox(x=350, y=0, width=100, height=100))

        with pytest.raises(ImageProcessingError) as exc_info:
            service.process(make_image(400, 400), "photo.png", options)

        assert exc_info.value.details["filename"] == "photo.png"

    def test_undecodable_bytes_rejected(self, service):
        with pytest.raises(ImageProcessingError) as exc_info:
            service.process(b"definitely not an image", "bad.jpg", ImageOptions())

        assert exc_info.value.message == "Failed to load image"

    def test_oversized_image_rejected(self, service, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

        with pytest.raises(ImageProcessingError) as exc_info:
            service.process(make_image(100, 100), "huge.png", ImageOptions())

        assert exc_info.value.status_code == 422
        assert exc_info.value.details["filename"] == "huge.png"

    def test_lower_quality_is_smaller(self, service):
        noisy = Image.effect_noise((400, 400), 60).convert("RGB")
        buffer = BytesIO()
        noisy.save(buffer, format="PNG")
        source = buffer.getvalue()

        high = service.process(source, "n.png", ImageOptions(format=ImageFormat.JPEG, quality=QualityPreset.HIGH))
        low = service.process(source, "n.png", ImageOptions(format=ImageFormat.JPEG, quality=QualityPreset.OPTIMIZED))

        assert low.size < high.size


class TestProcessBatch:
    """Tests for ImageService.process_batch()"""

    def test_zip_contains_outputs_and_manifest(self, service):
        files = [
            ("a.png", make_image(300, 200)),
            ("b.jpg", make_image(200, 300, fmt="JPEG")),
        ]

        archive, manifest = service.process_batch(files, ImageOptions(preset=SizePreset.SQUARE))

        with zipfile.ZipFile(BytesIO(archive)) as zf:
            names = sorted(zf.namelist())
            stored_manifest = json.loads(zf.read("manifest.json"))

        assert names == ["a.webp", "b.webp", "manifest.json"]
        assert stored_manifest == manifest
        assert manifest[0]["source"] == "a.png"
        assert (manifest[0]["width"], manifest[0]["height"]) == (1000, 667)

    def test_failed_file_listed_and_batch_continues(self, service):
        files = [("bad.png", b"nope"), ("good.png", make_image(10, 10))]

        archive, manifest = service.process_batch(files, ImageOptions())

        assert manifest[0] == {"source": "bad.png", "error": "Failed to load image"}
        assert manifest[1]["output"] == "good.webp"

    def test_oversized_file_listed_and_batch_continues(self, service, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        files = [("big.png", make_image(100, 100)), ("ok.png", make_image(10, 10))]

        archive, manifest = service.process_batch(files, ImageOptions())

        assert manifest[0] == {"source": "big.png", "error": "Image is too large to process"}
        assert manifest[1]["output"] == "ok.webp"

    def test_duplicate_output_names_suffixed(self, service):
        files = [("photo.png", make_image(10, 10)), ("photo.jpg", make_image(10, 10, fmt="JPEG"))]

        archive, manifest = service.process_batch(files, ImageOptions())

        assert [entry["output"] for entry in manifest] == ["photo.webp", "photo-1.webp"]
