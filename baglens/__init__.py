"""Streaming, caching and decoding of rosbag2 recordings."""

from .config import BitmapOptions, RawImageOptions, StreamConfig
from .core import (
    Initialization,
    IteratorResult,
    MessageEvent,
    PlayerProblem,
    Time,
    TopicStats,
    TopicWithDecodingInfo,
)
from .exceptions import BaglensError
from .message_cache import BlockCache, BlockLoader, MessageBlock, flatten_blocks
from .players import IterableSource, RosDb3IterableSource

__version__ = "0.1.0"

__all__ = [
    "BaglensError",
    "BitmapOptions",
    "BlockCache",
    "BlockLoader",
    "Initialization",
    "IterableSource",
    "IteratorResult",
    "MessageBlock",
    "MessageEvent",
    "PlayerProblem",
    "RawImageOptions",
    "RosDb3IterableSource",
    "StreamConfig",
    "Time",
    "TopicStats",
    "TopicWithDecodingInfo",
    "flatten_blocks",
]
