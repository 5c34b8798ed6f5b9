"""Parsed message type definitions.

A ``MessageDefinition`` is one named type with an ordered list of fields and
constants. Complex fields reference other definitions by their fully
qualified ``pkg/msg/Type`` name; resolution into a self-contained set happens in
``baglens.msgdefs.resolver``.
"""

from __future__ import annotations

from dataclasses import dataclass

ConstantValue = bool | int | float | str

PRIMITIVE_TYPES = frozenset({
    "bool",
    "byte",
    "char",
    "float32",
    "float64",
    "int8",
    "uint8",
    "int16",
    "uint16",
    "int32",
    "uint32",
    "int64",
    "uint64",
    "string",
    "wstring",
    "time",
    "duration",
})


@dataclass(frozen=True, slots=True)
class MessageDefinitionField:
    """One field or constant of a message definition.

    ``default_value`` keeps the literal text of a ROS 2 default so that it can be
    written back unchanged.
    """

    type: str
    name: str
    is_complex: bool = False
    is_array: bool = False
    array_length: int | None = None
    array_upper_bound: int | None = None
    upper_bound: int | None = None
    is_constant: bool = False
    value: ConstantValue | None = None
    value_text: str | None = None
    default_value: str | None = None


@dataclass(frozen=True, slots=True)
class MessageDefinition:
    """A named message type."""

    name: str
    definitions: tuple[MessageDefinitionField, ...]

    @property
    def fields(self) -> tuple[MessageDefinitionField, ...]:
        """Non-constant fields in declaration order."""
        return tuple(d for d in self.definitions if not d.is_constant)

    @property
    def constants(self) -> tuple[MessageDefinitionField, ...]:
        """Constants in declaration order."""
        return tuple(d for d in self.definitions if d.is_constant)

    @property
    def complex_types(self) -> tuple[str, ...]:
        """Names of the complex types referenced by this definition."""
        return tuple(d.type for d in self.definitions if d.is_complex)


def normalize_type_name(name: str) -> str:
    """Return the ``pkg/msg/Type`` form of ``pkg/Type`` or ``pkg/msg/Type``."""
    parts = name.split("/")
    if len(parts) == 2:
        return f"{parts[0]}/msg/{parts[1]}"
    return name


def short_type_name(name: str) -> str:
    """Return the ``pkg/Type`` form used in ``MSG:`` headers and field types."""
    parts = name.split("/")
    if len(parts) == 3 and parts[1] == "msg":
        return f"{parts[0]}/{parts[2]}"
    return name


def package_of(name: str) -> str | None:
    """Return the package component of a qualified type name."""
    if "/" not in name:
        return None
    return name.split("/", maxsplit=1)[0]
