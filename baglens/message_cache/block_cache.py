"""Append-only block cache and per-topic flattened views over it.

Consumers such as plots want every message of a topic loaded so far, as one
ordered sequence. ``AllFramesByTopic`` produces that view from a block
sequence and memoizes it, so repeated queries against an unchanged sequence
are free and growth of the sequence only concatenates the new blocks.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from baglens.core.time import Time
from baglens.core.types import MessageEvent

from .blocks import MessageBlock, MessageBlockCache

logger = logging.getLogger(__name__)

FlattenedView = Mapping[str, tuple[MessageEvent, ...]]


def flatten_blocks(
    blocks: Iterable[MessageBlock | None], topics: Iterable[str]
) -> FlattenedView:
    """Concatenate each topic's messages across ``blocks`` in block order.

    Unloaded (``None``) blocks and topics missing from a block contribute
    nothing; a topic with no messages at all is absent from the result.
    """
    wanted = set(topics)
    grouped: dict[str, list[MessageEvent]] = {}
    for block in blocks:
        if block is None:
            continue
        for topic, messages in block.messages_by_topic.items():
            if topic in wanted and messages:
                grouped.setdefault(topic, []).extend(messages)
    return MappingProxyType({topic: tuple(items) for topic, items in grouped.items()})


def _is_prefix(
    prefix: tuple[MessageBlock | None, ...], blocks: tuple[MessageBlock | None, ...]
) -> bool:
    if len(prefix) > len(blocks):
        return False
    return all(old is new for old, new in zip(prefix, blocks))


@dataclass(frozen=True, slots=True)
class _TopicPartial:
    blocks: tuple[MessageBlock | None, ...]
    messages: tuple[MessageEvent, ...]


class AllFramesByTopic:
    """Memoized ``flatten_blocks``.

    Results are cached per requested topic set against the identity of the
    block sequence. Per-topic concatenations are shared between topic sets and
    extended, never mutated, when the sequence grows by appending.
    """

    def __init__(self) -> None:
        """Start with empty memo tables."""
        self._views: dict[
            frozenset[str], tuple[tuple[MessageBlock | None, ...], FlattenedView]
        ] = {}
        self._partials: dict[str, _TopicPartial] = {}

    def flatten(
        self, blocks: Sequence[MessageBlock | None], topics: Iterable[str]
    ) -> FlattenedView:
        """Return the flattened view of ``topics`` over ``blocks``."""
        snapshot = blocks if isinstance(blocks, tuple) else tuple(blocks)
        key = frozenset(topics)

        cached = self._views.get(key)
        if cached is not None and cached[0] is snapshot:
            return cached[1]

        view: dict[str, tuple[MessageEvent, ...]] = {}
        for topic in sorted(key):
            messages = self._flatten_topic(topic, snapshot)
            if messages:
                view[topic] = messages
        result: FlattenedView = MappingProxyType(view)
        self._views[key] = (snapshot, result)
        return result

    def _flatten_topic(
        self, topic: str, blocks: tuple[MessageBlock | None, ...]
    ) -> tuple[MessageEvent, ...]:
        partial = self._partials.get(topic)
        if partial is not None and partial.blocks is blocks:
            return partial.messages

        start = 0
        prefix: tuple[MessageEvent, ...] = ()
        if partial is not None and _is_prefix(partial.blocks, blocks):
            start = len(partial.blocks)
            prefix = partial.messages

        appended = [
            message
            for block in blocks[start:]
            if block is not None
            for message in block.messages_by_topic.get(topic, ())
        ]
        messages = prefix + tuple(appended) if appended else prefix
        self._partials[topic] = _TopicPartial(blocks=blocks, messages=messages)
        return messages

    def clear(self) -> None:
        """Drop every memoized result."""
        self._views.clear()
        self._partials.clear()


class BlockCache:
    """Append-only sequence of sealed blocks for one recording.

    ``ingest`` is called by a single producer. Every ingest replaces the block
    tuple with a new one, so readers holding a snapshot never see it change.
    """

    def __init__(self, start_time: Time) -> None:
        """Create an empty cache for a recording starting at ``start_time``."""
        self._progress = MessageBlockCache(blocks=(), start_time=start_time)
        self._frames = AllFramesByTopic()

    @property
    def progress(self) -> MessageBlockCache:
        """Current snapshot of the block sequence."""
        return self._progress

    @property
    def blocks(self) -> tuple[MessageBlock | None, ...]:
        """Blocks in arrival order."""
        return self._progress.blocks

    @property
    def size_in_bytes(self) -> int:
        """Total payload size of all ingested blocks."""
        return self._progress.size_in_bytes

    def ingest(self, block: MessageBlock) -> MessageBlockCache:
        """Append a sealed block and return the new snapshot."""
        if not isinstance(block, MessageBlock):
            raise TypeError(f"Expected MessageBlock, got {type(block).__name__}")
        progress = MessageBlockCache(
            blocks=self._progress.blocks + (block,),
            start_time=self._progress.start_time,
        )
        self._progress = progress
        logger.debug(
            "Ingested block %d (%d bytes, %d topic(s))",
            len(progress.blocks),
            block.size_in_bytes,
            len(block.messages_by_topic),
        )
        return progress

    def flatten(self, topics: Iterable[str]) -> FlattenedView:
        """Flatten the current block sequence for ``topics``."""
        return self._frames.flatten(self._progress.blocks, topics)
