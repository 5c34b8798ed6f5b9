"""In-memory block cache of loaded messages."""

from .block_cache import AllFramesByTopic, BlockCache, FlattenedView, flatten_blocks
from .block_loader import BlockLoader
from .blocks import MessageBlock, MessageBlockCache
from .progress import (
    LoggingProgressReporter,
    NullProgressReporter,
    ProgressReporter,
    RichProgressReporter,
)

__all__ = [
    "AllFramesByTopic",
    "BlockCache",
    "BlockLoader",
    "FlattenedView",
    "LoggingProgressReporter",
    "MessageBlock",
    "MessageBlockCache",
    "NullProgressReporter",
    "ProgressReporter",
    "RichProgressReporter",
    "flatten_blocks",
]
