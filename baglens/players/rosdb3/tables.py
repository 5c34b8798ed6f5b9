"""SQLAlchemy table definitions for rosbag2 ``.db3`` segments.

Only the columns read by baglens are declared; segments written by newer
rosbag2 releases carry extra columns that are simply not selected.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    Table,
    Text,
)

metadata = MetaData()

topics = Table(
    "topics",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", Text, nullable=False),
    Column("type", Text, nullable=False),
    Column("serialization_format", Text, nullable=False),
    Column("offered_qos_profiles", Text, nullable=False, default=""),
)

messages = Table(
    "messages",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("topic_id", Integer, ForeignKey("topics.id"), nullable=False),
    Column("timestamp", Integer, nullable=False),
    Column("data", LargeBinary, nullable=False),
    Index("timestamp_idx", "timestamp"),
)

# Present in segments written by ROS 2 Iron and later.
message_definitions = Table(
    "message_definitions",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("topic_type", Text, nullable=False),
    Column("encoding", Text, nullable=False),
    Column("encoded_message_definition", Text, nullable=False),
    Column("type_description_hash", Text, nullable=False, default=""),
)
