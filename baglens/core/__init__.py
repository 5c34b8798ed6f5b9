from .time import ZERO_TIME, Time, add_time, clamp_time
from .types import (
    Initialization,
    IteratorResult,
    MessageEvent,
    PlayerProblem,
    TopicStats,
    TopicWithDecodingInfo,
)

__all__ = [
    "Initialization",
    "IteratorResult",
    "MessageEvent",
    "PlayerProblem",
    "Time",
    "TopicStats",
    "TopicWithDecodingInfo",
    "ZERO_TIME",
    "add_time",
    "clamp_time",
]
