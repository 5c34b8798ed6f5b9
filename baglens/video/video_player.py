"""Streaming H.264 decoder built on PyAV."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Literal

import av
from av.error import FFmpegError
from PIL import Image

from baglens.exceptions import VideoDecodeError

from .h264 import VideoDecoderConfig

av.logging.set_level(None)

logger = logging.getLogger(__name__)

FrameType = Literal["key", "delta"]


@dataclass(frozen=True, slots=True)
class CodedSize:
    """Frame size in pixels reported by the decoder."""

    width: int
    height: int


def resize_to_width(image: Image.Image, resize_width: int | None) -> Image.Image:
    """Resize ``image`` to ``resize_width``, keeping the aspect ratio."""
    if resize_width is None or resize_width == image.width:
        return image
    height = max(1, round(image.height * resize_width / image.width))
    return image.resize((resize_width, height), Image.Resampling.BILINEAR)


class DecodedVideoFrame:
    """A decoded picture; call ``close()`` once it has been converted."""

    def __init__(self, frame: av.VideoFrame, timestamp_us: int) -> None:
        """Wrap a PyAV frame decoded for ``timestamp_us``."""
        self._frame: av.VideoFrame | None = frame
        self.timestamp_us = timestamp_us
        self.width = frame.width
        self.height = frame.height

    @property
    def closed(self) -> bool:
        """Return True after ``close()``."""
        return self._frame is None

    def to_bitmap(self, resize_width: int | None = None) -> Image.Image:
        """Convert the picture to an RGBA image."""
        if self._frame is None:
            raise VideoDecodeError("Decoded frame has already been closed")
        image = self._frame.to_image().convert("RGBA")
        return resize_to_width(image, resize_width)

    def close(self) -> None:
        """Release the underlying frame."""
        self._frame = None


class VideoPlayer:
    """Decodes an H.264 stream one access unit at a time.

    The player is configured from an SPS with ``init()``. Until a key frame
    has been submitted after ``init()``, delta frames are dropped. Calls must
    be serialized per stream.
    """

    def __init__(self) -> None:
        """Create an unconfigured player."""
        self._context: av.CodecContext | None = None
        self._config: VideoDecoderConfig | None = None
        self._coded_size: CodedSize | None = None
        self._awaiting_keyframe = True

    def init(self, config: VideoDecoderConfig) -> None:
        """(Re)configure the decoder for a new stream configuration.

        Raises:
            VideoDecodeError: If the codec is not H.264 or PyAV rejects it.
        """
        if not config.codec.startswith("avc1"):
            raise VideoDecodeError(f"Unsupported video codec {config.codec}")
        self.close()
        try:
            context = av.CodecContext.create("h264", "r")
        except FFmpegError as exc:
            raise VideoDecodeError(f"Failed to create H.264 decoder: {exc}") from exc
        self._context = context
        self._config = config
        self._coded_size = CodedSize(config.coded_width, config.coded_height)
        self._awaiting_keyframe = True
        logger.info(
            "Initialized video decoder %s (%dx%d)",
            config.codec,
            config.coded_width,
            config.coded_height,
        )

    def is_initialized(self) -> bool:
        """Return True once ``init()`` has configured a decoder."""
        return self._context is not None

    def coded_size(self) -> CodedSize | None:
        """Return the last known frame size, or None before configuration."""
        return self._coded_size

    @property
    def config(self) -> VideoDecoderConfig | None:
        """The configuration passed to the last ``init()``."""
        return self._config

    async def decode(
        self, data: bytes, timestamp_us: int, frame_type: FrameType
    ) -> DecodedVideoFrame | None:
        """Decode one access unit; returns None when no picture is ready."""
        return await asyncio.to_thread(self._decode, data, timestamp_us, frame_type)

    def _decode(
        self, data: bytes, timestamp_us: int, frame_type: FrameType
    ) -> DecodedVideoFrame | None:
        context = self._context
        if context is None:
            return None
        if frame_type == "key":
            self._awaiting_keyframe = False
        elif self._awaiting_keyframe:
            logger.debug(
                "Dropping delta frame at %dus before a key frame", timestamp_us
            )
            return None

        packet = av.Packet(data)
        packet.pts = timestamp_us
        try:
            frames = context.decode(packet)
        except FFmpegError as exc:
            raise VideoDecodeError(f"Failed to decode frame: {exc}") from exc
        if not frames:
            return None

        frame = frames[-1]
        self._coded_size = CodedSize(frame.width, frame.height)
        return DecodedVideoFrame(frame, timestamp_us)

    def close(self) -> None:
        """Release the decoder; the player can be re-initialized afterwards."""
        if self._context is not None:
            self._context = None
            logger.debug("Closed video decoder")
