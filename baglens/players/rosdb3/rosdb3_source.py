"""Iterable source over one or more rosbag2 ``.db3`` segments.

All segment files passed to the source are treated as one logical recording:
time bounds, topics and message counts are combined, and iteration merges the
segments into a single time-ordered stream.
"""

from __future__ import annotations

import heapq
import logging
from collections.abc import (
    AsyncGenerator,
    AsyncIterator,
    Collection,
    Mapping,
    Sequence,
)
from pathlib import Path
from typing import Any

from baglens.config import StreamConfig
from baglens.const import (
    END_TIME_EPSILON_NSEC,
    PROFILE_ROS2,
    SCHEMA_ENCODING_ROS2MSG,
    UNSUPPORTED_DATATYPE_TIP,
)
from baglens.core.time import ZERO_TIME, Time, add_time
from baglens.core.types import (
    Initialization,
    IteratorResult,
    MessageEvent,
    PlayerProblem,
    SourceType,
    TopicStats,
    TopicWithDecodingInfo,
)
from baglens.exceptions import (
    MessageDefinitionError,
    SegmentError,
    SourceInitializationError,
    SourceNotInitializedError,
)
from baglens.msgdefs import (
    MessageDefinition,
    build_schema,
    lookup_definition,
    parse_message_definitions,
    well_known_definitions,
)
from baglens.utils.sampled_logger import make_sampled_logger

from .segment import Db3Segment, SegmentMessage, SegmentSummary, SegmentTopic

logger = logging.getLogger(__name__)


def _to_message_event(message: SegmentMessage) -> MessageEvent:
    return MessageEvent(
        topic=message.topic,
        receive_time=Time.from_nanoseconds(message.timestamp_ns),
        message=message.data,
        size_in_bytes=len(message.data),
        schema_name=message.schema_name,
    )


class RosDb3IterableSource:
    """Serialized-message source for rosbag2 SQLite recordings."""

    source_type: SourceType = "serialized"

    def __init__(
        self,
        paths: Sequence[Path | str],
        *,
        datatypes: Mapping[str, MessageDefinition] | None = None,
        config: StreamConfig | None = None,
    ) -> None:
        """Create a source over ``paths``.

        Args:
            paths: Segment files that together form one recording.
            datatypes: Registry used for types the segments do not embed.
                Defaults to the well-known ROS 2 definitions.
            config: Streaming configuration.
        """
        self._paths = [Path(path) for path in paths]
        self._registry = (
            dict(datatypes) if datatypes is not None else well_known_definitions()
        )
        self._config = config or StreamConfig()
        self._segments: list[Db3Segment] = []
        self._start: Time = ZERO_TIME
        self._end: Time = ZERO_TIME
        self._initialization: Initialization | None = None
        self._log_iterated = make_sampled_logger(
            "Iterated %d message(s); latest on %s at %s",
            log_interval=self._config.iterator_log_interval,
            target_logger=logger,
        )

    async def __aenter__(self) -> RosDb3IterableSource:
        """Initialize the source on context entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        """Close every segment on context exit."""
        await self.close()

    @property
    def initialization(self) -> Initialization:
        """The result of ``initialize()``."""
        return self._require_initialized()

    def _require_initialized(self) -> Initialization:
        if self._initialization is None:
            raise SourceNotInitializedError("RosDb3IterableSource is not initialized")
        return self._initialization

    async def _open_segments(
        self, problems: list[PlayerProblem]
    ) -> list[SegmentSummary]:
        summaries: list[SegmentSummary] = []
        for path in self._paths:
            segment = Db3Segment(path)
            try:
                await segment.open()
                summary = await segment.describe()
            except SegmentError as exc:
                await segment.close()
                problems.append(
                    PlayerProblem(
                        severity="error",
                        message=str(exc),
                        tip="The remaining segments are still loaded.",
                        error=exc,
                    )
                )
                continue
            self._segments.append(segment)
            summaries.append(summary)
        return summaries

    def _collect_datatypes(
        self, summaries: list[SegmentSummary], problems: list[PlayerProblem]
    ) -> dict[str, MessageDefinition]:
        datatypes = dict(self._registry)
        for summary in summaries:
            for type_name, (encoding, text) in summary.message_definitions.items():
                if encoding != SCHEMA_ENCODING_ROS2MSG:
                    logger.debug(
                        "Ignoring embedded %s definition for %s", encoding, type_name
                    )
                    continue
                try:
                    parsed = parse_message_definitions(text, type_name)
                except MessageDefinitionError as exc:
                    problems.append(
                        PlayerProblem(
                            severity="warn",
                            message=(
                                f"Embedded definition for \"{type_name}\" "
                                f"could not be parsed: {exc}"
                            ),
                            error=exc,
                        )
                    )
                    continue
                for definition in parsed:
                    datatypes[definition.name] = definition
        return datatypes

    async def initialize(self) -> Initialization:
        """Open every segment and describe the combined recording.

        Raises:
            SourceInitializationError: If no segment can be opened or the
                recording contains no messages.
            ResolutionError: If a well-known type references a missing subtype.
        """
        if self._initialization is not None:
            return self._initialization
        if not self._paths:
            raise SourceInitializationError("No segment files were provided")

        problems: list[PlayerProblem] = []
        summaries = await self._open_segments(problems)
        if not summaries:
            raise SourceInitializationError(
                f"Could not open any of {len(self._paths)} segment file(s)"
            )

        topic_defs: dict[str, SegmentTopic] = {}
        message_counts: dict[str, int] = {}
        for summary in summaries:
            for topic_def in summary.topics:
                existing = topic_defs.get(topic_def.name)
                if existing is None:
                    topic_defs[topic_def.name] = topic_def
                elif existing.type != topic_def.type:
                    problems.append(
                        PlayerProblem(
                            severity="warn",
                            message=(
                                f'Topic "{topic_def.name}" has conflicting datatypes '
                                f'"{existing.type}" and "{topic_def.type}" across '
                                "segments"
                            ),
                            tip=f'Using "{existing.type}".',
                        )
                    )
            for name, count in summary.message_counts.items():
                message_counts[name] = message_counts.get(name, 0) + count

        if not any(count > 0 for count in message_counts.values()):
            await self.close()
            raise SourceInitializationError("Bag contains no messages")

        ranges = [s.time_range for s in summaries if s.time_range is not None]
        start = Time.from_nanoseconds(min(r[0] for r in ranges))
        end = Time.from_nanoseconds(max(r[1] for r in ranges))

        datatypes = self._collect_datatypes(summaries, problems)
        topics: list[TopicWithDecodingInfo] = []
        topic_stats: dict[str, TopicStats] = {}
        try:
            for topic_def in topic_defs.values():
                topic = TopicWithDecodingInfo(
                    name=topic_def.name,
                    schema_name=topic_def.type,
                    message_encoding=topic_def.serialization_format,
                )
                num_messages = message_counts.get(topic_def.name)
                if num_messages is not None:
                    topic_stats[topic_def.name] = TopicStats(num_messages=num_messages)

                if lookup_definition(datatypes, topic_def.type) is None:
                    problems.append(
                        PlayerProblem(
                            severity="warn",
                            message=(
                                f'Topic "{topic_def.name}" has unsupported datatype '
                                f'"{topic_def.type}"'
                            ),
                            tip=UNSUPPORTED_DATATYPE_TIP,
                        )
                    )
                else:
                    topic.schema_data = build_schema(topic_def.type, datatypes)
                    topic.schema_encoding = SCHEMA_ENCODING_ROS2MSG
                topics.append(topic)
        except Exception:
            await self.close()
            raise

        for problem in problems:
            logger.warning("%s", problem.message)

        self._start = start
        self._end = end
        self._initialization = Initialization(
            topics=topics,
            topic_stats=topic_stats,
            start=start,
            end=end,
            problems=problems,
            profile=PROFILE_ROS2,
            datatypes=datatypes,
        )
        logger.info(
            "Opened recording with %d segment(s), %d topic(s), %d message(s) "
            "spanning %.3fs",
            len(self._segments),
            len(topics),
            sum(message_counts.values()),
            (end - start).to_seconds(),
        )
        return self._initialization

    async def message_iterator(
        self,
        topics: Collection[str],
        start: Time | None = None,
        end: Time | None = None,
    ) -> AsyncIterator[IteratorResult]:
        """Iterate messages on ``topics`` with receive time in ``[start, end]``.

        Each call returns a new, single-use iterator. Segments are streamed in
        parallel and merged by receive time; a segment that fails mid-stream
        produces one ``problem`` result and is dropped. Closing the iterator
        (or abandoning it) releases every open cursor.
        """
        self._require_initialized()
        if len(topics) == 0:
            return

        range_start = start if start is not None else self._start
        range_end = end if end is not None else self._end
        # Segment queries exclude the end time; extend by one tick to include it.
        query_end = add_time(range_end, Time(0, END_TIME_EPSILON_NSEC))
        topic_names = frozenset(topics)

        streams = [
            segment.stream_messages(
                topic_names, range_start.to_nanoseconds(), query_end.to_nanoseconds()
            )
            for segment in self._segments
        ]
        heap: list[tuple[int, int, int, SegmentMessage]] = []
        count = 0
        try:
            for index in range(len(streams)):
                problem = await self._advance(streams, index, heap)
                if problem is not None:
                    yield IteratorResult.of_problem(problem)

            while heap:
                _, index, _, message = heapq.heappop(heap)
                count += 1
                self._log_iterated(count, message.topic, message.timestamp_ns)
                yield IteratorResult.of_message(_to_message_event(message))
                problem = await self._advance(streams, index, heap)
                if problem is not None:
                    yield IteratorResult.of_problem(problem)
        finally:
            for stream in streams:
                await stream.aclose()

    async def _advance(
        self,
        streams: list[AsyncGenerator[SegmentMessage, None]],
        index: int,
        heap: list[tuple[int, int, int, SegmentMessage]],
    ) -> PlayerProblem | None:
        try:
            message = await anext(streams[index], None)
        except SegmentError as exc:
            logger.warning("Segment failed during iteration: %s", exc)
            return PlayerProblem(severity="error", message=str(exc), error=exc)
        if message is not None:
            heapq.heappush(heap, (message.timestamp_ns, index, message.row_id, message))
        return None

    async def get_backfill_messages(
        self, topics: Collection[str], time: Time
    ) -> list[MessageEvent]:
        """Return the latest message at or before ``time`` for each topic.

        Topics without such a message are omitted. Results are ordered by
        receive time.
        """
        self._require_initialized()
        at_ns = time.to_nanoseconds()
        events: list[MessageEvent] = []
        for topic in sorted(set(topics)):
            latest: SegmentMessage | None = None
            for segment in self._segments:
                candidate = await segment.latest_message(topic, at_ns)
                if candidate is None:
                    continue
                if latest is None or candidate.timestamp_ns >= latest.timestamp_ns:
                    latest = candidate
            if latest is not None:
                events.append(_to_message_event(latest))
        events.sort(key=lambda event: event.receive_time)
        return events

    async def close(self) -> None:
        """Close every segment; the source cannot be iterated afterwards."""
        segments, self._segments = self._segments, []
        for segment in segments:
            await segment.close()
        self._initialization = None
