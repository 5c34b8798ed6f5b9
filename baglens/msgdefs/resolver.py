"""Resolve a type into the closure of definitions needed to describe it."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Mapping

from baglens.exceptions import ResolutionError

from .definitions import MessageDefinition, normalize_type_name
from .stringify import stringify

logger = logging.getLogger(__name__)


def lookup_definition(
    registry: Mapping[str, MessageDefinition], type_name: str
) -> MessageDefinition | None:
    """Find ``type_name`` in ``registry`` under either naming convention."""
    definition = registry.get(type_name)
    if definition is None:
        definition = registry.get(normalize_type_name(type_name))
    return definition


def resolve_closure(
    root_type: str, registry: Mapping[str, MessageDefinition]
) -> list[MessageDefinition]:
    """Return ``root_type`` followed by every complex type it depends on.

    Traversal is breadth-first in field declaration order, so the output order
    depends only on the registry contents. Shared subtypes appear once.

    Raises:
        ResolutionError: If the root or any referenced complex type is missing.
    """
    root = lookup_definition(registry, root_type)
    if root is None:
        raise ResolutionError(root_type)

    closure: dict[str, MessageDefinition] = {root.name: root}
    to_process: deque[MessageDefinition] = deque([root])
    while to_process:
        current = to_process.popleft()
        for field in current.definitions:
            if not field.is_complex or field.type in closure:
                continue
            subtype = lookup_definition(registry, field.type)
            if subtype is None:
                raise ResolutionError(field.type, referenced_by=current.name)
            closure[field.type] = subtype
            to_process.append(subtype)

    logger.debug("Resolved %s into %d definition(s)", root.name, len(closure))
    return list(closure.values())


def build_schema(root_type: str, registry: Mapping[str, MessageDefinition]) -> bytes:
    """Synthesize a self-contained ``ros2msg`` schema document for ``root_type``."""
    return stringify(resolve_closure(root_type, registry)).encode("utf-8")
