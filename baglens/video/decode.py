"""Compressed video frames to bitmaps."""

from __future__ import annotations

import logging
from enum import Enum

from PIL import Image

from baglens.config import BitmapOptions
from baglens.const import EMPTY_VIDEO_FRAME_SIZE, NSEC_PER_USEC
from baglens.image.types import CompressedVideo

from . import h264
from .h264 import VideoDecoderConfig
from .video_player import VideoPlayer, resize_to_width

logger = logging.getLogger(__name__)


class VideoFormat(str, Enum):
    """Video bitstream formats that can be inspected and decoded."""

    H264 = "h264"


def _video_format(frame: CompressedVideo) -> VideoFormat | None:
    try:
        return VideoFormat(frame.format)
    except ValueError:
        return None


def is_video_keyframe(frame: CompressedVideo) -> bool:
    """Return True when ``frame`` can start decoding on its own."""
    if _video_format(frame) is VideoFormat.H264:
        return h264.is_keyframe(frame.data)
    return False


def get_video_decoder_config(frame: CompressedVideo) -> VideoDecoderConfig | None:
    """Return the decoder configuration carried by ``frame``, if any.

    For H.264 the SPS that precedes each keyframe provides it.
    """
    if _video_format(frame) is VideoFormat.H264:
        return h264.parse_decoder_config(frame.data)
    return None


def empty_video_frame(
    player: VideoPlayer | None = None, resize_width: int | None = None
) -> Image.Image:
    """Blank RGBA bitmap shown while no decoded picture is available.

    Sized to the player's last coded size, else to a square of
    ``resize_width`` (or 32) pixels, then resized to ``resize_width``.
    """
    edge = resize_width if resize_width is not None else EMPTY_VIDEO_FRAME_SIZE
    size = player.coded_size() if player is not None else None
    dimensions = (size.width, size.height) if size is not None else (edge, edge)
    image = Image.new("RGBA", dimensions, (0, 0, 0, 0))
    return resize_to_width(image, resize_width)


async def decode_compressed_video_to_bitmap(
    frame: CompressedVideo,
    player: VideoPlayer,
    first_message_time_ns: int,
    resize_width: int | None = None,
) -> Image.Image:
    """Decode ``frame`` with ``player`` and return an RGBA bitmap.

    Timestamps passed to the decoder are integer microseconds relative to
    ``first_message_time_ns``. A placeholder is returned while the player is
    not initialized or has no picture ready.
    """
    resize_width = BitmapOptions(resize_width=resize_width).resize_width
    if not player.is_initialized():
        return empty_video_frame(player, resize_width)

    first_timestamp_us = first_message_time_ns // NSEC_PER_USEC
    timestamp_us = frame.timestamp.to_microseconds() - first_timestamp_us
    decoded = await player.decode(
        frame.data, timestamp_us, "key" if is_video_keyframe(frame) else "delta"
    )
    if decoded is None:
        return empty_video_frame(player, resize_width)
    try:
        return decoded.to_bitmap(resize_width)
    finally:
        decoded.close()
