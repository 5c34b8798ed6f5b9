"""Protocol implemented by sources that can be iterated by time range."""

from __future__ import annotations

from collections.abc import AsyncIterator, Collection
from typing import Protocol

from baglens.core.time import Time
from baglens.core.types import (
    Initialization,
    IteratorResult,
    MessageEvent,
    SourceType,
)


class IterableSource(Protocol):
    """Interface for a log that yields serialized messages by time range."""

    source_type: SourceType

    async def initialize(self) -> Initialization:
        """Open the log and describe its topics, bounds and problems."""
        ...

    def message_iterator(
        self,
        topics: Collection[str],
        start: Time | None = None,
        end: Time | None = None,
    ) -> AsyncIterator[IteratorResult]:
        """Iterate messages on ``topics`` with receive time in ``[start, end]``."""
        ...

    async def get_backfill_messages(
        self, topics: Collection[str], time: Time
    ) -> list[MessageEvent]:
        """Return the latest message at or before ``time`` for each topic."""
        ...

    async def close(self) -> None:
        """Release every resource held by the source."""
        ...
