"""Serialize message definitions back into ``ros2msg`` text."""

from __future__ import annotations

from collections.abc import Iterable

from .definitions import MessageDefinition, MessageDefinitionField, short_type_name

DEFINITION_SEPARATOR = "=" * 80


def _stringify_field(field: MessageDefinitionField) -> str:
    type_name = short_type_name(field.type) if field.is_complex else field.type
    upper_bound = f"<={field.upper_bound}" if field.upper_bound is not None else ""
    if field.is_constant:
        value_text = field.value_text if field.value_text is not None else field.value
        return f"{type_name}{upper_bound} {field.name}={value_text}"

    array = ""
    if field.is_array:
        if field.array_length is not None:
            array = f"[{field.array_length}]"
        elif field.array_upper_bound is not None:
            array = f"[<={field.array_upper_bound}]"
        else:
            array = "[]"
    default = f" {field.default_value}" if field.default_value is not None else ""
    return f"{type_name}{upper_bound}{array} {field.name}{default}"


def stringify(definitions: Iterable[MessageDefinition]) -> str:
    """Write definitions as one document, root first.

    Constants precede fields within each definition; every definition after the
    first is introduced by a separator line and a ``MSG: pkg/Type`` header.
    """
    sections = []
    for index, definition in enumerate(definitions):
        lines = []
        if index > 0:
            lines.append(f"MSG: {short_type_name(definition.name)}")
        lines.extend(_stringify_field(c) for c in definition.constants)
        lines.extend(_stringify_field(f) for f in definition.fields)
        sections.append("\n".join(lines))
    return f"\n{DEFINITION_SEPARATOR}\n".join(sections)
