"""Sealed message blocks and the block sequence they form."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from baglens.core.time import Time
from baglens.core.types import MessageEvent


@dataclass(frozen=True, slots=True, eq=False)
class MessageBlock:
    """Messages read during one load step, indexed by topic.

    Blocks compare by identity; consumers detect new blocks by reference.
    """

    messages_by_topic: Mapping[str, tuple[MessageEvent, ...]]
    size_in_bytes: int
    need_topics: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_events(
        cls,
        events: Iterable[MessageEvent],
        *,
        need_topics: Iterable[str] = (),
    ) -> MessageBlock:
        """Seal ``events`` into a block, keeping per-topic arrival order."""
        grouped: dict[str, list[MessageEvent]] = {}
        size = 0
        for event in events:
            grouped.setdefault(event.topic, []).append(event)
            size += event.size_in_bytes
        return cls(
            messages_by_topic=MappingProxyType(
                {topic: tuple(items) for topic, items in grouped.items()}
            ),
            size_in_bytes=size,
            need_topics=frozenset(need_topics),
        )


@dataclass(frozen=True, slots=True)
class MessageBlockCache:
    """Snapshot of loading progress: blocks in arrival order plus start time.

    An entry of ``None`` marks a block that has not been loaded yet.
    """

    blocks: tuple[MessageBlock | None, ...]
    start_time: Time

    @property
    def size_in_bytes(self) -> int:
        """Total payload size of all loaded blocks."""
        return sum(block.size_in_bytes for block in self.blocks if block is not None)
