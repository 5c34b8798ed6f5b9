"""Raw and compressed image decoding."""

from .decode_image import decode_compressed_image_to_bitmap, decode_raw_image
from .encodings import ImageEncoding
from .types import CompressedImage, CompressedVideo, RawImage

__all__ = [
    "CompressedImage",
    "CompressedVideo",
    "ImageEncoding",
    "RawImage",
    "decode_compressed_image_to_bitmap",
    "decode_raw_image",
]
