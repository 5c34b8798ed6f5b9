from __future__ import annotations

import pytest

from baglens.exceptions import ResolutionError
from baglens.msgdefs import (
    DEFINITION_SEPARATOR,
    build_schema,
    lookup_definition,
    parse_message_definition,
    resolve_closure,
    well_known_definitions,
)


def test_imu_closure_is_breadth_first_with_root_first() -> None:
    closure = resolve_closure("sensor_msgs/msg/Imu", well_known_definitions())

    assert [d.name for d in closure] == [
        "sensor_msgs/msg/Imu",
        "std_msgs/msg/Header",
        "geometry_msgs/msg/Quaternion",
        "geometry_msgs/msg/Vector3",
        "builtin_interfaces/msg/Time",
    ]


def test_build_schema_layout() -> None:
    schema = build_schema("sensor_msgs/msg/Imu", well_known_definitions())
    text = schema.decode("utf-8")
    sections = text.split(f"\n{DEFINITION_SEPARATOR}\n")

    assert sections[0].startswith("std_msgs/Header header\n")
    assert [s.splitlines()[0] for s in sections[1:]] == [
        "MSG: std_msgs/Header",
        "MSG: geometry_msgs/Quaternion",
        "MSG: geometry_msgs/Vector3",
        "MSG: builtin_interfaces/Time",
    ]
    assert "float64 w 1" in sections[2]


def test_build_schema_is_idempotent() -> None:
    registry = well_known_definitions()

    first = build_schema("geometry_msgs/msg/PoseStamped", registry)
    second = build_schema("geometry_msgs/msg/PoseStamped", registry)

    assert first == second


def test_short_names_resolve() -> None:
    registry = well_known_definitions()

    assert lookup_definition(registry, "std_msgs/String") is not None
    assert build_schema("std_msgs/String", registry) == b"string data"


def test_shared_subtypes_appear_once() -> None:
    closure = resolve_closure("geometry_msgs/msg/Twist", well_known_definitions())

    names = [d.name for d in closure]
    assert names == ["geometry_msgs/msg/Twist", "geometry_msgs/msg/Vector3"]


def test_missing_root_raises() -> None:
    with pytest.raises(ResolutionError, match="Type pkg/msg/Nope not found."):
        resolve_closure("pkg/msg/Nope", well_known_definitions())


def test_missing_subtype_names_the_referencing_type() -> None:
    registry = {
        "pkg/msg/Outer": parse_message_definition("Inner inner", "pkg/msg/Outer"),
    }

    with pytest.raises(ResolutionError) as exc_info:
        resolve_closure("pkg/msg/Outer", registry)

    assert exc_info.value.missing_type == "pkg/msg/Inner"
    assert exc_info.value.referenced_by == "pkg/msg/Outer"
    assert str(exc_info.value) == (
        "Subtype pkg/msg/Inner of type pkg/msg/Outer not found."
    )
