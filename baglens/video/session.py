"""Per-stream video decoding state and its transitions.

A session starts uninitialized. The first frame seen fixes the time origin;
each keyframe that carries a configuration different from the active one
(re)initializes the player. Frames must be fed in stream order and one at a
time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from PIL import Image

from baglens.exceptions import VideoDecodeError
from baglens.image.types import CompressedVideo

from .decode import (
    decode_compressed_video_to_bitmap,
    get_video_decoder_config,
    is_video_keyframe,
)
from .h264 import VideoDecoderConfig
from .video_player import VideoPlayer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class VideoDecoderSession:
    """Decoding state for one video topic."""

    player: VideoPlayer = field(default_factory=VideoPlayer)
    first_message_time_ns: int | None = None
    config: VideoDecoderConfig | None = None
    closed: bool = False

    @property
    def is_initialized(self) -> bool:
        """Return True once the player has been configured."""
        return self.player.is_initialized()


def advance_video_session(
    session: VideoDecoderSession, frame: CompressedVideo
) -> VideoDecoderSession:
    """Apply ``frame`` to the session state and return the session.

    Raises:
        VideoDecodeError: If the session is closed or the player rejects the
            configuration.
    """
    if session.closed:
        raise VideoDecodeError("Video session is closed")

    if session.first_message_time_ns is None:
        session.first_message_time_ns = frame.timestamp.to_nanoseconds()

    if not is_video_keyframe(frame):
        return session

    try:
        config = get_video_decoder_config(frame)
    except VideoDecodeError as exc:
        logger.warning("Ignoring keyframe with unreadable configuration: %s", exc)
        return session

    if config is not None and config != session.config:
        session.player.init(config)
        session.config = config
    return session


async def decode_video_frame(
    session: VideoDecoderSession,
    frame: CompressedVideo,
    resize_width: int | None = None,
) -> Image.Image:
    """Advance the session with ``frame`` and decode it to a bitmap."""
    advance_video_session(session, frame)
    first_message_time_ns = session.first_message_time_ns
    if first_message_time_ns is None:
        first_message_time_ns = frame.timestamp.to_nanoseconds()
    return await decode_compressed_video_to_bitmap(
        frame, session.player, first_message_time_ns, resize_width
    )


def close_video_session(session: VideoDecoderSession) -> None:
    """Release the session's decoder; further frames are rejected."""
    if session.closed:
        return
    session.player.close()
    session.closed = True
    logger.debug("Closed video session")
