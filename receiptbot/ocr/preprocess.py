from __future__ import annotations

import io
import logging

from PIL import Image, ImageFilter, ImageOps

logger = logging.getLogger(__name__)

MAX_WIDTH = 1200


def resize(image: Image.Image, max_width: int = MAX_WIDTH) -> Image.Image:
    if image.width <= max_width:
        return image
    ratio = max_width / float(image.width)
    new_height = max(1, int(image.height * ratio))
    return image.resize((max_width, new_height), Image.Resampling.LANCZOS)


def normalize_for_ocr(image: Image.Image, max_width: int = MAX_WIDTH) -> Image.Image:
    """Downscale, sharpen, stretch contrast and drop colour."""
    processed = ImageOps.exif_transpose(image)
    if processed.mode not in ("RGB", "L"):
        processed = processed.convert("RGB")
    processed = resize(processed, max_width=max_width)
    processed = processed.filter(ImageFilter.SHARPEN)
    processed = ImageOps.autocontrast(processed)
    return processed.convert("L")


class ImagePreprocessor:
    """Normalize raw receipt photos before they are sent to OCR providers.

    ``process`` never raises: when the image cannot be decoded or transformed
    the original bytes are returned unchanged.
    """

    def __init__(self, max_width: int = MAX_WIDTH) -> None:
        self.max_width = max_width

    def process(self, data: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(data)) as image:
                original_size = image.size
                processed = normalize_for_ocr(image, max_width=self.max_width)
                buffer = io.BytesIO()
                processed.save(buffer, format="PNG", optimize=True)
        except Exception as exc:
            logger.warning(f"Image preprocessing failed, using original bytes: {exc}")
            return data

        output = buffer.getvalue()
        logger.info(
            f"Preprocessed image {original_size[0]}x{original_size[1]} -> "
            f"{processed.width}x{processed.height} ({len(data)} -> {len(output)} bytes)"
        )
        return output
