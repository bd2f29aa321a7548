"""
Pillow helpers for decoding, resizing and persisting generated images
"""
import base64
import io
import math
import os
from typing import Optional, Tuple

from PIL import Image, ImageOps

from ai.models.image_models import ImageDimensions
from config import JPEG_QUALITY, MIN_API_DIMENSION
from utils.logging_config import get_logger

logger = get_logger(__name__)

BACKGROUND_RGB = (255, 255, 255)
BACKGROUND_RGBA = (255, 255, 255, 255)


def decode_image(b64_data: str) -> Image.Image:
    """Decode a base64 payload into a fully loaded Pillow image"""
    buffer = base64.b64decode(b64_data)
    image = Image.open(io.BytesIO(buffer))
    image.load()
    return image


def needs_resize(requested_width: int, requested_height: int) -> bool:
    """Only requests below the API minimum get scaled down after generation"""
    return requested_width < MIN_API_DIMENSION or requested_height < MIN_API_DIMENSION


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compute_target_size(
    requested_width: int,
    requested_height: int,
    original_width: int,
    original_height: int,
) -> Optional[Tuple[int, int]]:
    """
    Work out the size to scale a generated image down to, keeping the aspect
    ratio of the image the API actually returned.

    Returns None when neither requested side is below the API minimum.

    When both sides are below the minimum the height branch runs last and
    its width replaces the one derived from the requested width, so the
    result always follows the requested height. 100x50 on a square source
    therefore gives 50x50, not 100x50.
    """
    if not needs_resize(requested_width, requested_height):
        return None

    aspect_ratio = original_width / original_height
    target_width = requested_width
    target_height = requested_height

    if requested_width < MIN_API_DIMENSION:
        target_width = requested_width
        target_height = _round_half_up(requested_width / aspect_ratio)
    if requested_height < MIN_API_DIMENSION:
        target_height = requested_height
        target_width = _round_half_up(requested_height * aspect_ratio)

    if target_width < 1 or target_height < 1:
        raise ValueError(f"Cannot resize image to {target_width}x{target_height}")
    return target_width, target_height


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info


def resize_contain(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Fit the whole image inside size and pad the rest with opaque white"""
    if _has_alpha(image):
        image = image.convert("RGBA")
        background = BACKGROUND_RGBA
    else:
        image = image.convert("RGB")
        background = BACKGROUND_RGB
    return ImageOps.pad(image, size, method=Image.Resampling.LANCZOS, color=background)


def save_image(image: Image.Image, filepath: str, image_format: str) -> str:
    """
    Encode image according to image_format and write it to filepath.

    Returns the path that was actually written. svg has no vector tracing
    yet: a PNG is written next to the requested path with a .png extension.
    """
    if image_format == "png":
        image.save(filepath, format="PNG")
        return filepath

    if image_format == "jpg":
        if _has_alpha(image):
            rgba = image.convert("RGBA")
            flattened = Image.new("RGB", rgba.size, BACKGROUND_RGB)
            flattened.paste(rgba, mask=rgba.getchannel("A"))
            image = flattened
        elif image.mode != "RGB":
            image = image.convert("RGB")
        image.save(filepath, format="JPEG", quality=JPEG_QUALITY)
        return filepath

    if image_format == "svg":
        png_path = os.path.splitext(filepath)[0] + ".png"
        image.save(png_path, format="PNG")
        logger.warning(f"⚠️ SVG output is not fully supported yet, wrote PNG instead: {png_path}")
        return png_path

    raise ValueError(f"Unsupported image format: {image_format}")


def read_dimensions(filepath: str) -> ImageDimensions:
    """Read width/height back from a file on disk"""
    with Image.open(filepath) as image:
        width, height = image.size
    return ImageDimensions(width=width, height=height)
