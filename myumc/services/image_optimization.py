"""
Image optimization for uploaded profile pictures.

Downscales to fit a square bounding box (never enlarging) and re-encodes
without metadata using Pillow.
"""
import io
import logging
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from myumc.services.errors import InvalidOperationError

logger = logging.getLogger(__name__)


class ImageOptimizationService:
    """Service class for shrinking and re-encoding images."""

    def __init__(self, max_dimension: int = 1200, quality: int = 80):
        self.max_dimension = max_dimension
        self.quality = quality

    def calculate_dimensions(self, width: int, height: int) -> Tuple[int, int]:
        """Fit (width, height) inside max_dimension keeping the aspect ratio."""
        if width <= self.max_dimension and height <= self.max_dimension:
            return width, height
        ratio = min(self.max_dimension / width, self.max_dimension / height)
        return int(width * ratio), int(height * ratio)

    def optimize(self, data: bytes, output_format: str = "JPEG") -> bytes:
        """Return the optimized encoding of `data`.

        JPEG output drops any alpha channel onto a white background. EXIF and
        other metadata are not carried over; orientation is applied first.
        """
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise InvalidOperationError("Uploaded file is not a valid image") from exc

        image = ImageOps.exif_transpose(image)
        size = self.calculate_dimensions(image.width, image.height)
        if size != (image.width, image.height):
            image = image.resize(size, Image.Resampling.LANCZOS)

        output_format = output_format.upper()
        out = io.BytesIO()
        if output_format == "PNG":
            if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                image = image.convert("RGBA")
            image.save(out, format="PNG", optimize=True)
        else:
            image = _flatten_to_rgb(image)
            image.save(out, format="JPEG", quality=self.quality, optimize=True)

        result = out.getvalue()
        logger.info(
            "Optimized image to %sx%s %s: %d -> %d bytes",
            image.width, image.height, output_format, len(data), len(result),
        )
        return result


def _flatten_to_rgb(image: Image.Image) -> Image.Image:
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image
