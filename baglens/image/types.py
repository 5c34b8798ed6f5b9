"""Image and video message payloads consumed by the decoders."""

from __future__ import annotations

from dataclasses import dataclass

from baglens.core.time import Time


@dataclass(frozen=True, slots=True)
class RawImage:
    """Uncompressed pixels, as in ``sensor_msgs/Image``.

    ``step`` is the row length in bytes; 0 means rows are tightly packed.
    """

    width: int
    height: int
    encoding: str
    data: bytes
    step: int = 0
    is_bigendian: bool = False


@dataclass(frozen=True, slots=True)
class CompressedImage:
    """An encoded still image such as ``sensor_msgs/CompressedImage``."""

    data: bytes
    format: str


@dataclass(frozen=True, slots=True)
class CompressedVideo:
    """One frame of an encoded video stream (``foxglove_msgs/CompressedVideo``)."""

    timestamp: Time
    data: bytes
    format: str
