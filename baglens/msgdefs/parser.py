"""Parser for ROS 2 ``.msg`` definition text.

Handles single definitions as well as the concatenated "gendeps" layout where
dependencies follow the root type, each introduced by a line of ``=`` and a
``MSG: pkg/Type`` header.
"""

from __future__ import annotations

import re

from baglens.exceptions import MessageDefinitionError

from .definitions import (
    PRIMITIVE_TYPES,
    ConstantValue,
    MessageDefinition,
    MessageDefinitionField,
    normalize_type_name,
    package_of,
)

_TYPE_RE = re.compile(
    r"^(?P<base>[A-Za-z][A-Za-z0-9_/]*)"
    r"(?:<=(?P<bound>\d+))?"
    r"(?P<array>\[(?P<array_bound><=)?(?P<length>\d*)\])?$"
)
_CONSTANT_RE = re.compile(r"^(?P<name>[A-Za-z][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$")
_FIELD_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_SEPARATOR_RE = re.compile(r"^=+\s*$")
_MSG_HEADER_RE = re.compile(r"^MSG:\s*(?P<name>\S+)\s*$")

_INTEGER_TYPES = frozenset({
    "byte",
    "char",
    "int8",
    "uint8",
    "int16",
    "uint16",
    "int32",
    "uint32",
    "int64",
    "uint64",
})
_FLOAT_TYPES = frozenset({"float32", "float64"})


def _strip_comment(text: str) -> str:
    """Drop a trailing ``#`` comment that is not inside a quoted string."""
    quote: str | None = None
    for index, char in enumerate(text):
        if quote is not None:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "#":
            return text[:index].rstrip()
    return text.rstrip()


def _resolve_complex_name(base: str, package: str | None) -> str:
    if base == "Header":
        return "std_msgs/msg/Header"
    if "/" in base:
        return normalize_type_name(base)
    if package is not None:
        return f"{package}/msg/{base}"
    return base


def _parse_constant_value(type_name: str, text: str) -> ConstantValue:
    try:
        if type_name == "bool":
            lowered = text.strip().lower()
            if lowered in ("true", "1"):
                return True
            if lowered in ("false", "0"):
                return False
            raise ValueError(text)
        if type_name in _INTEGER_TYPES:
            if text.lower().startswith(("0x", "-0x")):
                return int(text, 16)
            return int(text)
        if type_name in _FLOAT_TYPES:
            return float(text)
    except ValueError as exc:
        raise MessageDefinitionError(
            f"Invalid {type_name} constant value '{text}'"
        ) from exc
    return text


def _parse_line(line: str, package: str | None) -> MessageDefinitionField | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    parts = stripped.split(maxsplit=1)
    if len(parts) != 2:
        raise MessageDefinitionError(f"Malformed definition line '{stripped}'")
    type_token, rest = parts

    type_match = _TYPE_RE.match(type_token)
    if type_match is None:
        raise MessageDefinitionError(f"Malformed type '{type_token}'")

    base = type_match.group("base")
    is_complex = base not in PRIMITIVE_TYPES
    type_name = _resolve_complex_name(base, package) if is_complex else base
    upper_bound = (
        int(type_match.group("bound")) if type_match.group("bound") else None
    )

    constant_match = _CONSTANT_RE.match(rest)
    if constant_match is not None:
        if type_match.group("array") or is_complex:
            raise MessageDefinitionError(
                f"Constants must be primitive scalars: '{stripped}'"
            )
        raw_value = constant_match.group("value")
        # String constants run to the end of the line, '#' included.
        value_text = (
            raw_value.strip() if base in ("string", "wstring") else
            _strip_comment(raw_value).strip()
        )
        return MessageDefinitionField(
            type=type_name,
            name=constant_match.group("name"),
            is_constant=True,
            upper_bound=upper_bound,
            value=_parse_constant_value(base, value_text),
            value_text=value_text,
        )

    rest = _strip_comment(rest)
    name_and_default = rest.split(maxsplit=1)
    name = name_and_default[0]
    if not _FIELD_NAME_RE.match(name):
        raise MessageDefinitionError(f"Invalid field name '{name}'")
    default_value = name_and_default[1].strip() if len(name_and_default) > 1 else None

    is_array = type_match.group("array") is not None
    array_length: int | None = None
    array_upper_bound: int | None = None
    if is_array and type_match.group("length"):
        if type_match.group("array_bound"):
            array_upper_bound = int(type_match.group("length"))
        else:
            array_length = int(type_match.group("length"))

    return MessageDefinitionField(
        type=type_name,
        name=name,
        is_complex=is_complex,
        is_array=is_array,
        array_length=array_length,
        array_upper_bound=array_upper_bound,
        upper_bound=upper_bound,
        default_value=default_value,
    )


def parse_message_definition(text: str, name: str) -> MessageDefinition:
    """Parse the text of a single ``.msg`` definition.

    Args:
        text: Definition text.
        name: Fully qualified type name; bare complex names in ``text`` are
            resolved relative to its package.

    Returns:
        The parsed definition with its name normalized to ``pkg/msg/Type``.
    """
    qualified = normalize_type_name(name)
    package = package_of(qualified)
    definitions = []
    for line in text.splitlines():
        parsed = _parse_line(line, package)
        if parsed is not None:
            definitions.append(parsed)
    return MessageDefinition(name=qualified, definitions=tuple(definitions))


def parse_message_definitions(text: str, root_name: str) -> list[MessageDefinition]:
    """Parse a concatenated definition document.

    The first section describes ``root_name``; every following section starts
    with a ``MSG: pkg/Type`` header naming the type it describes.
    """
    sections: list[list[str]] = [[]]
    for line in text.splitlines():
        if _SEPARATOR_RE.match(line.strip()):
            sections.append([])
            continue
        sections[-1].append(line)

    result = [parse_message_definition("\n".join(sections[0]), root_name)]
    for section in sections[1:]:
        header_index = next(
            (i for i, line in enumerate(section) if line.strip()), None
        )
        if header_index is None:
            continue
        header = _MSG_HEADER_RE.match(section[header_index].strip())
        if header is None:
            raise MessageDefinitionError(
                f"Expected 'MSG: <type>' header, got '{section[header_index]}'"
            )
        body = "\n".join(section[header_index + 1 :])
        result.append(parse_message_definition(body, header.group("name")))
    return result
