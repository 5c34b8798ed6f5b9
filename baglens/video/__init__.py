"""Video bitstream inspection and decoding."""

from .decode import (
    VideoFormat,
    decode_compressed_video_to_bitmap,
    empty_video_frame,
    get_video_decoder_config,
    is_video_keyframe,
)
from .h264 import VideoDecoderConfig, is_keyframe, parse_decoder_config
from .session import (
    VideoDecoderSession,
    advance_video_session,
    close_video_session,
    decode_video_frame,
)
from .video_player import CodedSize, DecodedVideoFrame, VideoPlayer

__all__ = [
    "CodedSize",
    "DecodedVideoFrame",
    "VideoDecoderConfig",
    "VideoDecoderSession",
    "VideoFormat",
    "VideoPlayer",
    "advance_video_session",
    "close_video_session",
    "decode_compressed_video_to_bitmap",
    "decode_video_frame",
    "empty_video_frame",
    "get_video_decoder_config",
    "is_keyframe",
    "is_video_keyframe",
    "parse_decoder_config",
]
