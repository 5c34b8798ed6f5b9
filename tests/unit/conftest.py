from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest
from sqlalchemy import create_engine, insert

from baglens.players.rosdb3.tables import (
    message_definitions,
    messages,
    metadata,
    topics,
)

TopicSpec = tuple[str, str]
MessageSpec = tuple[str, int, bytes]
Db3Builder = Callable[..., Path]


def write_db3(
    path: Path,
    topic_specs: Sequence[TopicSpec],
    message_specs: Sequence[MessageSpec],
    definitions: dict[str, str] | None = None,
) -> Path:
    """Write a rosbag2 segment with the given topics and messages.

    ``message_specs`` entries are ``(topic_name, timestamp_ns, data)`` and are
    inserted in the given order, so row ids follow list order.
    """
    engine = create_engine(f"sqlite:///{path}")
    metadata.create_all(engine)
    topic_ids: dict[str, int] = {}
    with engine.begin() as conn:
        for index, (name, type_name) in enumerate(topic_specs, start=1):
            conn.execute(
                insert(topics).values(
                    id=index,
                    name=name,
                    type=type_name,
                    serialization_format="cdr",
                    offered_qos_profiles="",
                )
            )
            topic_ids[name] = index
        for topic_name, timestamp, data in message_specs:
            conn.execute(
                insert(messages).values(
                    topic_id=topic_ids[topic_name], timestamp=timestamp, data=data
                )
            )
        for type_name, text in (definitions or {}).items():
            conn.execute(
                insert(message_definitions).values(
                    topic_type=type_name,
                    encoding="ros2msg",
                    encoded_message_definition=text,
                    type_description_hash="",
                )
            )
    engine.dispose()
    return path


@pytest.fixture
def make_db3(tmp_path: Path) -> Db3Builder:
    """Factory fixture writing ``.db3`` segments into a temporary directory."""

    def _make(
        name: str,
        topic_specs: Sequence[TopicSpec],
        message_specs: Sequence[MessageSpec],
        definitions: dict[str, str] | None = None,
    ) -> Path:
        return write_db3(tmp_path / name, topic_specs, message_specs, definitions)

    return _make

