from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from baglens.core.time import Time
from baglens.core.types import IteratorResult
from baglens.exceptions import (
    SegmentError,
    SourceInitializationError,
    SourceNotInitializedError,
)
from baglens.players import RosDb3IterableSource

STRING = "std_msgs/msg/String"


async def _collect(iterator: AsyncIterator[IteratorResult]) -> list[IteratorResult]:
    return [result async for result in iterator]


def _payloads(results: list[IteratorResult]) -> list[bytes]:
    return [r.msg_event.message for r in results if r.msg_event is not None]


@pytest.fixture
def two_segments(make_db3) -> list[Path]:
    first = make_db3(
        "rec_0.db3",
        [("/a", STRING)],
        [("/a", 10, b"a10"), ("/a", 30, b"a30-0"), ("/a", 50, b"a50")],
    )
    second = make_db3(
        "rec_1.db3",
        [("/a", STRING), ("/b", STRING)],
        [("/a", 20, b"a20"), ("/a", 30, b"a30-1"), ("/b", 40, b"b40")],
    )
    return [first, second]


@pytest.mark.asyncio
async def test_initialize_describes_single_segment(make_db3) -> None:
    path = make_db3(
        "single.db3",
        [("/chatter", STRING), ("/imu", "sensor_msgs/msg/Imu")],
        [
            ("/chatter", 1_000, b"hello"),
            ("/imu", 2_000, b"imu"),
            ("/chatter", 3_000_000_000, b"bye"),
        ],
    )

    async with RosDb3IterableSource([path]) as source:
        init = source.initialization

    assert init.start == Time.from_nanoseconds(1_000)
    assert init.end == Time(3, 0)
    assert init.profile == "ros2"
    assert init.problems == []
    assert init.topic_stats["/chatter"].num_messages == 2
    assert init.topic_stats["/imu"].num_messages == 1

    chatter = next(t for t in init.topics if t.name == "/chatter")
    assert chatter.schema_name == STRING
    assert chatter.message_encoding == "cdr"
    assert chatter.schema_encoding == "ros2msg"
    assert chatter.schema_data == b"string data"
    imu = next(t for t in init.topics if t.name == "/imu")
    assert imu.schema_data is not None
    assert imu.schema_data.startswith(b"std_msgs/Header header\n")


@pytest.mark.asyncio
async def test_unknown_type_is_a_warning(make_db3) -> None:
    path = make_db3(
        "unknown.db3",
        [("/custom", "UnknownType"), ("/chatter", STRING)],
        [("/custom", 5, b"?"), ("/chatter", 6, b"ok")],
    )

    async with RosDb3IterableSource([path]) as source:
        init = source.initialization

    assert len(init.problems) == 1
    problem = init.problems[0]
    assert problem.severity == "warn"
    assert "/custom" in problem.message
    assert problem.tip
    custom = next(t for t in init.topics if t.name == "/custom")
    assert custom.schema_data is None
    assert not custom.has_schema


@pytest.mark.asyncio
async def test_embedded_definitions_are_used(make_db3) -> None:
    path = make_db3(
        "embedded.db3",
        [("/custom", "my_pkg/msg/Custom")],
        [("/custom", 1, b"\x00")],
        definitions={"my_pkg/msg/Custom": "int32 value\nstd_msgs/Header header"},
    )

    async with RosDb3IterableSource([path]) as source:
        init = source.initialization

    assert init.problems == []
    assert init.topics[0].schema_data is not None
    assert init.topics[0].schema_data.startswith(
        b"int32 value\nstd_msgs/Header header\n"
    )
    assert "my_pkg/msg/Custom" in init.datatypes


@pytest.mark.asyncio
async def test_segments_combine_into_one_recording(two_segments: list[Path]) -> None:
    async with RosDb3IterableSource(two_segments) as source:
        init = source.initialization

    assert init.start == Time.from_nanoseconds(10)
    assert init.end == Time.from_nanoseconds(50)
    assert sorted(t.name for t in init.topics) == ["/a", "/b"]
    assert init.topic_stats["/a"].num_messages == 5
    assert init.topic_stats["/b"].num_messages == 1


@pytest.mark.asyncio
async def test_iteration_merges_segments_in_time_order(
    two_segments: list[Path],
) -> None:
    async with RosDb3IterableSource(two_segments) as source:
        results = await _collect(source.message_iterator({"/a", "/b"}))

    assert all(r.type == "message-event" for r in results)
    assert _payloads(results) == [b"a10", b"a20", b"a30-0", b"a30-1", b"b40", b"a50"]
    times = [r.msg_event.receive_time for r in results if r.msg_event is not None]
    assert times == sorted(times)


@pytest.mark.asyncio
async def test_iteration_range_is_inclusive(two_segments: list[Path]) -> None:
    start, end = Time.from_nanoseconds(20), Time.from_nanoseconds(40)

    async with RosDb3IterableSource(two_segments) as source:
        results = await _collect(source.message_iterator({"/a", "/b"}, start, end))

    assert _payloads(results) == [b"a20", b"a30-0", b"a30-1", b"b40"]
    for result in results:
        assert result.msg_event is not None
        assert start <= result.msg_event.receive_time <= end


@pytest.mark.asyncio
async def test_iteration_filters_topics(two_segments: list[Path]) -> None:
    async with RosDb3IterableSource(two_segments) as source:
        only_b = await _collect(source.message_iterator({"/b"}))
        nothing = await _collect(source.message_iterator(set()))

    assert _payloads(only_b) == [b"b40"]
    assert only_b[0].msg_event is not None
    assert only_b[0].msg_event.schema_name == STRING
    assert only_b[0].msg_event.size_in_bytes == 3
    assert nothing == []


@pytest.mark.asyncio
async def test_empty_topic_set_does_no_io(two_segments: list[Path]) -> None:
    def _unexpected_stream(*args, **kwargs):
        raise AssertionError("segment was queried")

    async with RosDb3IterableSource(two_segments) as source:
        for segment in source._segments:
            segment.stream_messages = _unexpected_stream
        results = await _collect(source.message_iterator(set()))
        checked_out = [
            segment._engine.sync_engine.pool.checkedout()
            for segment in source._segments
        ]

    assert results == []
    assert checked_out == [0, 0]


@pytest.mark.asyncio
async def test_iterator_can_be_closed_early(two_segments: list[Path]) -> None:
    async with RosDb3IterableSource(two_segments) as source:
        iterator = source.message_iterator({"/a"})
        first = await anext(iterator)
        await iterator.aclose()

        released = [
            segment._engine.sync_engine.pool.checkedout()
            for segment in source._segments
        ]

        again = await _collect(source.message_iterator({"/a"}))

    assert first.msg_event is not None
    assert first.msg_event.message == b"a10"
    assert len(again) == 5
    assert released == [0, 0]


@pytest.mark.asyncio
async def test_failing_segment_becomes_problem(two_segments: list[Path]) -> None:
    async def _failing(*args, **kwargs):
        raise SegmentError("rec_1.db3", "disk I/O error")
        yield  # pragma: no cover

    async with RosDb3IterableSource(two_segments) as source:
        source._segments[1].stream_messages = _failing
        results = await _collect(source.message_iterator({"/a", "/b"}))

    problems = [r.problem for r in results if r.problem is not None]
    assert len(problems) == 1
    assert problems[0].severity == "error"
    assert "disk I/O error" in problems[0].message
    assert _payloads(results) == [b"a10", b"a30-0", b"a50"]


@pytest.mark.asyncio
async def test_backfill_returns_latest_per_topic(two_segments: list[Path]) -> None:
    async with RosDb3IterableSource(two_segments) as source:
        at_35 = await source.get_backfill_messages(
            {"/a", "/b"}, Time.from_nanoseconds(35)
        )
        at_end = await source.get_backfill_messages(
            {"/a", "/b"}, Time.from_nanoseconds(100)
        )
        before_start = await source.get_backfill_messages(
            {"/a"}, Time.from_nanoseconds(5)
        )

    assert [e.message for e in at_35] == [b"a30-1"]
    assert [e.message for e in at_end] == [b"b40", b"a50"]
    assert before_start == []


@pytest.mark.asyncio
async def test_unreadable_segment_is_reported(make_db3, tmp_path: Path) -> None:
    good = make_db3("good.db3", [("/a", STRING)], [("/a", 1, b"x")])
    bad = tmp_path / "bad.db3"
    bad.write_bytes(b"this is not a sqlite database" * 10)

    async with RosDb3IterableSource([bad, good]) as source:
        init = source.initialization
        results = await _collect(source.message_iterator({"/a"}))

    assert len(init.problems) == 1
    assert init.problems[0].severity == "error"
    assert "bad.db3" in init.problems[0].message
    assert _payloads(results) == [b"x"]


@pytest.mark.asyncio
async def test_conflicting_topic_types_warn(make_db3) -> None:
    first = make_db3("x_0.db3", [("/x", STRING)], [("/x", 1, b"s")])
    second = make_db3("x_1.db3", [("/x", "std_msgs/msg/Int32")], [("/x", 2, b"i")])

    async with RosDb3IterableSource([first, second]) as source:
        init = source.initialization

    assert [p.severity for p in init.problems] == ["warn"]
    assert init.topics[0].schema_name == STRING


@pytest.mark.asyncio
async def test_no_readable_segment_fails(tmp_path: Path) -> None:
    source = RosDb3IterableSource([tmp_path / "missing.db3"])

    with pytest.raises(SourceInitializationError):
        await source.initialize()


@pytest.mark.asyncio
async def test_empty_recording_fails(make_db3) -> None:
    path = make_db3("empty.db3", [("/a", STRING)], [])
    source = RosDb3IterableSource([path])

    with pytest.raises(SourceInitializationError, match="no messages"):
        await source.initialize()


@pytest.mark.asyncio
async def test_use_before_initialize_raises(two_segments: list[Path]) -> None:
    source = RosDb3IterableSource(two_segments)

    with pytest.raises(SourceNotInitializedError):
        await anext(source.message_iterator({"/a"}))
    with pytest.raises(SourceNotInitializedError):
        await source.get_backfill_messages({"/a"}, Time(0, 0))
