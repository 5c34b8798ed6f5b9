"""Access to a single rosbag2 ``.db3`` segment file."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Collection
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from sqlalchemy import desc, func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from baglens.exceptions import SegmentError

from .tables import message_definitions, messages, topics

logger = logging.getLogger(__name__)

_REQUIRED_TABLES = frozenset({"topics", "messages"})


@dataclass(frozen=True, slots=True)
class SegmentTopic:
    """A topic declared in a segment's ``topics`` table."""

    name: str
    type: str
    serialization_format: str


@dataclass(frozen=True, slots=True)
class SegmentMessage:
    """One row of a segment's ``messages`` table joined with its topic."""

    topic: str
    schema_name: str
    timestamp_ns: int
    row_id: int
    data: bytes


@dataclass(frozen=True, slots=True)
class SegmentSummary:
    """Metadata read from a segment when it is opened."""

    topics: list[SegmentTopic]
    message_counts: dict[str, int]
    time_range: tuple[int, int] | None
    message_definitions: dict[str, tuple[str, str]] = field(default_factory=dict)


class Db3Segment:
    """Async reader for one SQLite segment of a rosbag2 recording."""

    def __init__(self, path: Path | str) -> None:
        """Bind the segment path; nothing is opened until ``open()``."""
        self.path = Path(path)
        self._engine: AsyncEngine | None = None
        self._has_message_definitions = False

    @property
    def is_open(self) -> bool:
        """Return True once ``open()`` succeeded and until ``close()``."""
        return self._engine is not None

    async def open(self) -> None:
        """Create the engine and check the file is a rosbag2 database.

        Raises:
            SegmentError: If the file is missing, not SQLite, or lacks the
                rosbag2 tables.
        """
        if not self.path.is_file():
            raise SegmentError(str(self.path), "file does not exist")

        engine = create_async_engine(f"sqlite+aiosqlite:///{self.path}", future=True)
        try:
            async with engine.connect() as conn:
                table_names = set(
                    await conn.run_sync(
                        lambda sync_conn: inspect(sync_conn).get_table_names()
                    )
                )
        except (SQLAlchemyError, OSError) as exc:
            await engine.dispose()
            raise SegmentError(str(self.path), str(exc)) from exc

        missing = _REQUIRED_TABLES - table_names
        if missing:
            await engine.dispose()
            raise SegmentError(
                str(self.path), f"missing rosbag2 tables: {', '.join(sorted(missing))}"
            )

        self._engine = engine
        self._has_message_definitions = "message_definitions" in table_names
        logger.debug("Opened segment %s", self.path)

    async def close(self) -> None:
        """Dispose the engine and every pooled connection."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[AsyncConnection]:
        if self._engine is None:
            raise SegmentError(str(self.path), "segment is not open")
        try:
            async with self._engine.connect() as conn:
                yield conn
        except SQLAlchemyError as exc:
            raise SegmentError(str(self.path), str(exc)) from exc

    async def describe(self) -> SegmentSummary:
        """Read topics, message counts, time range and embedded definitions."""
        return SegmentSummary(
            topics=await self.read_topics(),
            message_counts=await self.message_counts(),
            time_range=await self.time_range(),
            message_definitions=await self.read_message_definitions(),
        )

    async def read_topics(self) -> list[SegmentTopic]:
        """Return declared topics in declaration order."""
        stmt = select(
            topics.c.name, topics.c.type, topics.c.serialization_format
        ).order_by(topics.c.id)
        async with self._connect() as conn:
            rows = (await conn.execute(stmt)).all()
        return [
            SegmentTopic(name=row[0], type=row[1], serialization_format=row[2])
            for row in rows
        ]

    async def message_counts(self) -> dict[str, int]:
        """Return the number of messages stored per topic name."""
        stmt = (
            select(topics.c.name, func.count(messages.c.id).label("count"))
            .select_from(
                topics.outerjoin(messages, messages.c.topic_id == topics.c.id)
            )
            .group_by(topics.c.id, topics.c.name)
        )
        async with self._connect() as conn:
            rows = (await conn.execute(stmt)).all()
        counts: dict[str, int] = {}
        for row in rows:
            counts[row[0]] = counts.get(row[0], 0) + int(row[1])
        return counts

    async def time_range(self) -> tuple[int, int] | None:
        """Return the (min, max) message timestamp in ns, or None when empty."""
        stmt = select(func.min(messages.c.timestamp), func.max(messages.c.timestamp))
        async with self._connect() as conn:
            row = (await conn.execute(stmt)).one()
        if row[0] is None or row[1] is None:
            return None
        return int(row[0]), int(row[1])

    async def read_message_definitions(self) -> dict[str, tuple[str, str]]:
        """Return embedded definitions as ``type -> (encoding, text)``."""
        if not self._has_message_definitions:
            return {}
        stmt = select(
            message_definitions.c.topic_type,
            message_definitions.c.encoding,
            message_definitions.c.encoded_message_definition,
        )
        async with self._connect() as conn:
            rows = (await conn.execute(stmt)).all()
        return {row[0]: (row[1], row[2]) for row in rows if row[2]}

    async def stream_messages(
        self,
        topic_names: Collection[str],
        start_ns: int,
        end_ns: int,
    ) -> AsyncGenerator[SegmentMessage, None]:
        """Stream messages with ``start_ns <= timestamp < end_ns`` in time order.

        The cursor is closed when the generator is exhausted or closed.
        """
        stmt = (
            select(
                topics.c.name,
                topics.c.type,
                messages.c.id,
                messages.c.timestamp,
                messages.c.data,
            )
            .select_from(messages.join(topics, messages.c.topic_id == topics.c.id))
            .where(topics.c.name.in_(sorted(topic_names)))
            .where(messages.c.timestamp >= start_ns)
            .where(messages.c.timestamp < end_ns)
            .order_by(messages.c.timestamp, messages.c.id)
        )
        async with self._connect() as conn:
            result = await conn.stream(stmt)
            try:
                async for row in result:
                    yield SegmentMessage(
                        topic=row[0],
                        schema_name=row[1],
                        row_id=int(row[2]),
                        timestamp_ns=int(row[3]),
                        data=bytes(row[4]),
                    )
            finally:
                await result.close()

    async def latest_message(
        self, topic_name: str, at_ns: int
    ) -> SegmentMessage | None:
        """Return the last message on ``topic_name`` at or before ``at_ns``."""
        stmt = (
            select(
                topics.c.name,
                topics.c.type,
                messages.c.id,
                messages.c.timestamp,
                messages.c.data,
            )
            .select_from(messages.join(topics, messages.c.topic_id == topics.c.id))
            .where(topics.c.name == topic_name)
            .where(messages.c.timestamp <= at_ns)
            .order_by(desc(messages.c.timestamp), desc(messages.c.id))
            .limit(1)
        )
        async with self._connect() as conn:
            row = (await conn.execute(stmt)).first()
        if row is None:
            return None
        return SegmentMessage(
            topic=row[0],
            schema_name=row[1],
            row_id=int(row[2]),
            timestamp_ns=int(row[3]),
            data=bytes(row[4]),
        )
