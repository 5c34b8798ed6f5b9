"""Fills a ``BlockCache`` from an iterable source in fixed-duration windows."""

from __future__ import annotations

import logging
from collections.abc import Collection
from contextlib import aclosing

from baglens.config import StreamConfig
from baglens.core.time import Time, add_time, clamp_time
from baglens.core.types import MessageEvent, PlayerProblem
from baglens.players.iterable_source import IterableSource

from .block_cache import BlockCache
from .blocks import MessageBlock
from .progress import NullProgressReporter, ProgressReporter

logger = logging.getLogger(__name__)


class BlockLoader:
    """Single producer that reads a source window by window into a cache.

    Windows cover ``[start, end]`` of the source without gaps or overlap:
    window ``i`` spans ``start + i * d`` to ``start + (i + 1) * d - 1ns``
    inclusive, the last one clamped to ``end``.
    """

    def __init__(
        self,
        source: IterableSource,
        cache: BlockCache,
        *,
        config: StreamConfig | None = None,
        progress: ProgressReporter | None = None,
    ) -> None:
        """Bind the loader to a source, a destination cache and settings."""
        self._source = source
        self._cache = cache
        self._config = config or StreamConfig()
        self._progress = progress or NullProgressReporter()

    async def load(self, topics: Collection[str]) -> list[PlayerProblem]:
        """Load every window for ``topics`` and return the problems met.

        Loading stops early, with a ``warn`` problem, once the cache holds more
        than the configured byte budget.
        """
        topic_set = frozenset(topics)
        if not topic_set:
            return []

        initialization = await self._source.initialize()
        start_ns = initialization.start.to_nanoseconds()
        end_ns = initialization.end.to_nanoseconds()
        duration_ns = self._config.block_duration_ns
        total_blocks = (end_ns - start_ns) // duration_ns + 1

        problems: list[PlayerProblem] = []
        self._progress.start(f"Loading {len(topic_set)} topic(s)", total_blocks)
        last_tick = Time.from_nanoseconds(duration_ns - 1)
        loaded = 0
        try:
            for index in range(total_blocks):
                window_start = Time.from_nanoseconds(start_ns + index * duration_ns)
                window_end = clamp_time(
                    add_time(window_start, last_tick),
                    initialization.start,
                    initialization.end,
                )
                events = await self._read_window(
                    topic_set, window_start, window_end, problems
                )
                # The window has been read in full, so nothing is still awaited.
                snapshot = self._cache.ingest(
                    MessageBlock.from_events(events, need_topics=frozenset())
                )
                loaded += 1
                self._progress.update(loaded, snapshot.size_in_bytes)

                if snapshot.size_in_bytes > self._config.max_block_cache_bytes:
                    problem = PlayerProblem(
                        severity="warn",
                        message=(
                            f"Cache is full ({snapshot.size_in_bytes} bytes); "
                            f"stopped loading after {loaded} of {total_blocks} "
                            "block(s)"
                        ),
                        tip=(
                            "Select fewer topics or raise "
                            "BAGLENS_MAX_BLOCK_CACHE_BYTES."
                        ),
                    )
                    logger.warning("%s", problem.message)
                    problems.append(problem)
                    break
        finally:
            self._progress.finish()

        logger.info(
            "Loaded %d block(s) for %d topic(s), %d bytes cached",
            loaded,
            len(topic_set),
            self._cache.size_in_bytes,
        )
        return problems

    async def _read_window(
        self,
        topics: frozenset[str],
        start: Time,
        end: Time,
        problems: list[PlayerProblem],
    ) -> list[MessageEvent]:
        events: list[MessageEvent] = []
        async with aclosing(self._source.message_iterator(topics, start, end)) as it:
            async for result in it:
                if result.msg_event is not None:
                    events.append(result.msg_event)
                elif result.problem is not None:
                    problems.append(result.problem)
        return events
