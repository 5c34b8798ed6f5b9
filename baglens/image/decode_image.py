"""Image messages to RGBA pixels.

See also ``sensor_msgs/image_encodings.hpp`` for the raw encoding names.
"""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Callable

import numpy as np
from PIL import Image, UnidentifiedImageError

from baglens.config import BitmapOptions, RawImageOptions
from baglens.const import (
    DEFAULT_FLOAT_MAX_VALUE,
    DEFAULT_FLOAT_MIN_VALUE,
    DEFAULT_MONO16_MAX_VALUE,
    DEFAULT_MONO16_MIN_VALUE,
)
from baglens.exceptions import ImageDecodeError

from . import raw
from .encodings import ImageEncoding
from .types import CompressedImage, RawImage

logger = logging.getLogger(__name__)

_PackedDecoder = Callable[..., np.ndarray]

_PACKED_DECODERS: dict[ImageEncoding, _PackedDecoder] = {
    ImageEncoding.UYVY: raw.decode_uyvy,
    ImageEncoding.YUYV: raw.decode_yuyv,
    ImageEncoding.RGB8: raw.decode_rgb8,
    ImageEncoding.RGBA8: raw.decode_rgba8,
    ImageEncoding.BGRA8: raw.decode_bgra8,
    ImageEncoding.BGR8: raw.decode_bgr8,
    ImageEncoding.BAYER_RGGB8: raw.decode_bayer_rggb8,
    ImageEncoding.BAYER_BGGR8: raw.decode_bayer_bggr8,
    ImageEncoding.BAYER_GBRG8: raw.decode_bayer_gbrg8,
    ImageEncoding.BAYER_GRBG8: raw.decode_bayer_grbg8,
    ImageEncoding.MONO8: raw.decode_mono8,
}


def decode_raw_image(
    image: RawImage,
    options: RawImageOptions | None = None,
    output: np.ndarray | None = None,
) -> np.ndarray:
    """Convert a raw image to an ``(height, width, 4)`` RGBA8 array.

    Args:
        image: The raw image message.
        options: Intensity range for ``mono16`` and ``32FC1``.
        output: Optional destination buffer, filled in place.

    Raises:
        UnsupportedEncodingError: If ``image.encoding`` has no decoder.
        ImageDecodeError: If the pixel buffer is too short for the geometry.
    """
    encoding = ImageEncoding.parse(image.encoding)
    options = options or RawImageOptions()
    width, height, step = int(image.width), int(image.height), int(image.step)
    data = bytes(image.data)

    if encoding is ImageEncoding.MONO16:
        return raw.decode_mono16(
            data,
            width,
            height,
            image.is_bigendian,
            _or_default(options.min_value, DEFAULT_MONO16_MIN_VALUE),
            _or_default(options.max_value, DEFAULT_MONO16_MAX_VALUE),
            step,
            output,
        )
    if encoding is ImageEncoding.FLOAT1C:
        return raw.decode_float1c(
            data,
            width,
            height,
            image.is_bigendian,
            _or_default(options.min_value, DEFAULT_FLOAT_MIN_VALUE),
            _or_default(options.max_value, DEFAULT_FLOAT_MAX_VALUE),
            step,
            output,
        )
    return _PACKED_DECODERS[encoding](data, width, height, step, output)


def _or_default(value: float | None, default: float) -> float:
    return default if value is None else value


def _decode_compressed(data: bytes, mime_type: str) -> Image.Image:
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return image.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageDecodeError(f"Failed decoding {mime_type}: {exc}") from exc


async def decode_compressed_image_to_bitmap(
    image: CompressedImage, resize_width: int | None = None
) -> Image.Image:
    """Decode a compressed image off the event loop into an RGBA bitmap.

    ``image.format`` is only a hint; Pillow detects the actual codec from the
    payload. When ``resize_width`` is set the height keeps the aspect ratio.
    """
    resize_width = BitmapOptions(resize_width=resize_width).resize_width
    mime_type = f"image/{image.format}"
    bitmap = await asyncio.to_thread(_decode_compressed, bytes(image.data), mime_type)
    if resize_width is not None and resize_width != bitmap.width:
        height = max(1, round(bitmap.height * resize_width / bitmap.width))
        bitmap = await asyncio.to_thread(
            bitmap.resize, (resize_width, height), Image.Resampling.BILINEAR
        )
    logger.debug("Decoded %s to %dx%d", mime_type, bitmap.width, bitmap.height)
    return bitmap
