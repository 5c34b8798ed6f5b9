"""Sources that produce message events from recorded logs."""

from .iterable_source import IterableSource
from .rosdb3 import RosDb3IterableSource

__all__ = ["IterableSource", "RosDb3IterableSource"]
