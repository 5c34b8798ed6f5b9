"""rosbag2 SQLite (``.db3``) recordings."""

from .rosdb3_source import RosDb3IterableSource
from .segment import Db3Segment, SegmentMessage, SegmentSummary, SegmentTopic

__all__ = [
    "Db3Segment",
    "RosDb3IterableSource",
    "SegmentMessage",
    "SegmentSummary",
    "SegmentTopic",
]
