"""Types exchanged between log sources and their consumers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from baglens.core.time import Time

if TYPE_CHECKING:
    from baglens.msgdefs.definitions import MessageDefinition

ProblemSeverity = Literal["warn", "error"]
SourceType = Literal["serialized", "deserialized"]


@dataclass(frozen=True, slots=True)
class PlayerProblem:
    """A non-fatal issue surfaced to the caller instead of being raised."""

    severity: ProblemSeverity
    message: str
    tip: str | None = None
    error: BaseException | None = None


@dataclass(frozen=True, slots=True)
class MessageEvent:
    """One message read from a log.

    ``message`` holds the serialized payload exactly as stored in the segment.
    """

    topic: str
    receive_time: Time
    message: bytes
    size_in_bytes: int
    schema_name: str


@dataclass(slots=True)
class TopicWithDecodingInfo:
    """A topic plus whatever is needed to deserialize its messages."""

    name: str
    schema_name: str
    message_encoding: str
    schema_data: bytes | None = None
    schema_encoding: str | None = None

    @property
    def has_schema(self) -> bool:
        """Return True when a schema document is attached."""
        return self.schema_data is not None


@dataclass(frozen=True, slots=True)
class TopicStats:
    """Per-topic statistics computed at initialization."""

    num_messages: int


@dataclass(slots=True)
class Initialization:
    """Result of initializing a log source."""

    topics: list[TopicWithDecodingInfo]
    topic_stats: dict[str, TopicStats]
    start: Time
    end: Time
    problems: list[PlayerProblem]
    profile: str
    datatypes: dict[str, MessageDefinition] = field(default_factory=dict)
    publishers_by_topic: dict[str, set[str]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class IteratorResult:
    """One element of a message iterator.

    Either a message event or a problem encountered while streaming.
    """

    type: Literal["message-event", "problem"]
    msg_event: MessageEvent | None = None
    problem: PlayerProblem | None = None

    @classmethod
    def of_message(cls, msg_event: MessageEvent) -> IteratorResult:
        """Wrap a message event."""
        return cls(type="message-event", msg_event=msg_event)

    @classmethod
    def of_problem(cls, problem: PlayerProblem) -> IteratorResult:
        """Wrap a problem."""
        return cls(type="problem", problem=problem)
