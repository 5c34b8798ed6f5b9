"""Message definition parsing, serialization and schema resolution."""

from .definitions import (
    MessageDefinition,
    MessageDefinitionField,
    normalize_type_name,
    short_type_name,
)
from .parser import parse_message_definition, parse_message_definitions
from .resolver import build_schema, lookup_definition, resolve_closure
from .stringify import DEFINITION_SEPARATOR, stringify
from .well_known import well_known_definitions

__all__ = [
    "DEFINITION_SEPARATOR",
    "MessageDefinition",
    "MessageDefinitionField",
    "build_schema",
    "lookup_definition",
    "normalize_type_name",
    "parse_message_definition",
    "parse_message_definitions",
    "resolve_closure",
    "short_type_name",
    "stringify",
    "well_known_definitions",
]
