"""Raw image encodings with a decoder.

Names follow ``sensor_msgs/image_encodings.hpp``; several OpenCV-style aliases
map onto the same decoder.
"""

from __future__ import annotations

from enum import Enum

from baglens.exceptions import UnsupportedEncodingError


class ImageEncoding(str, Enum):
    """Encodings ``decode_raw_image`` can convert to RGBA."""

    UYVY = "uyvy"
    YUYV = "yuyv"
    RGB8 = "rgb8"
    RGBA8 = "rgba8"
    BGRA8 = "bgra8"
    BGR8 = "bgr8"
    FLOAT1C = "32FC1"
    BAYER_RGGB8 = "bayer_rggb8"
    BAYER_BGGR8 = "bayer_bggr8"
    BAYER_GBRG8 = "bayer_gbrg8"
    BAYER_GRBG8 = "bayer_grbg8"
    MONO8 = "mono8"
    MONO16 = "mono16"

    @classmethod
    def parse(cls, encoding: str) -> ImageEncoding:
        """Map an encoding string, aliases included, to its enum member.

        Raises:
            UnsupportedEncodingError: If no decoder exists for ``encoding``.
        """
        member = _ALIASES.get(encoding)
        if member is None:
            raise UnsupportedEncodingError(encoding)
        return member

    @property
    def bytes_per_pixel(self) -> int:
        """Bytes one pixel occupies in the packed source row."""
        return _BYTES_PER_PIXEL[self]


_ALIASES: dict[str, ImageEncoding] = {
    "yuv422": ImageEncoding.UYVY,
    "uyvy": ImageEncoding.UYVY,
    "yuv422_yuy2": ImageEncoding.YUYV,
    "yuyv": ImageEncoding.YUYV,
    "rgb8": ImageEncoding.RGB8,
    "rgba8": ImageEncoding.RGBA8,
    "bgra8": ImageEncoding.BGRA8,
    "bgr8": ImageEncoding.BGR8,
    "8UC3": ImageEncoding.BGR8,
    "32FC1": ImageEncoding.FLOAT1C,
    "bayer_rggb8": ImageEncoding.BAYER_RGGB8,
    "bayer_bggr8": ImageEncoding.BAYER_BGGR8,
    "bayer_gbrg8": ImageEncoding.BAYER_GBRG8,
    "bayer_grbg8": ImageEncoding.BAYER_GRBG8,
    "mono8": ImageEncoding.MONO8,
    "8UC1": ImageEncoding.MONO8,
    "mono16": ImageEncoding.MONO16,
    "16UC1": ImageEncoding.MONO16,
}

_BYTES_PER_PIXEL: dict[ImageEncoding, int] = {
    ImageEncoding.UYVY: 2,
    ImageEncoding.YUYV: 2,
    ImageEncoding.RGB8: 3,
    ImageEncoding.RGBA8: 4,
    ImageEncoding.BGRA8: 4,
    ImageEncoding.BGR8: 3,
    ImageEncoding.FLOAT1C: 4,
    ImageEncoding.BAYER_RGGB8: 1,
    ImageEncoding.BAYER_BGGR8: 1,
    ImageEncoding.BAYER_GBRG8: 1,
    ImageEncoding.BAYER_GRBG8: 1,
    ImageEncoding.MONO8: 1,
    ImageEncoding.MONO16: 2,
}
