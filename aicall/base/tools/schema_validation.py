"""Structural JSON-schema checks.

Covers the subset of JSON Schema that tool parameter and output schemas use
in practice: ``type`` (single or list), ``enum``, ``const``, ``required``,
``properties``, ``additionalProperties``, ``items``, ``minItems``/``maxItems``,
``minLength``/``maxLength``, ``minimum``/``maximum`` and ``anyOf``/``oneOf``.
Unknown keywords are ignored.
"""
from __future__ import annotations

from typing import Any, List, Mapping

_TYPE_CHECKS = {
    "object": lambda v: isinstance(v, Mapping),
    "array": lambda v: isinstance(v, list),
    "string": lambda v: isinstance(v, str),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "null": lambda v: v is None,
}


def validate_against_schema(instance: Any, schema: Mapping[str, Any] | None, path: str = "$") -> List[str]:
    """Return human readable violations (empty when ``instance`` conforms)."""
    if not schema:
        return []
    errors: List[str] = []

    expected = schema.get("type")
    if expected is not None:
        types = expected if isinstance(expected, list) else [expected]
        if not any(_TYPE_CHECKS.get(t, lambda _v: True)(instance) for t in types):
            return [f"{path}: expected {' or '.join(types)}, got {_type_name(instance)}"]

    if "enum" in schema and instance not in schema["enum"]:
        errors.append(f"{path}: {instance!r} is not one of {schema['enum']!r}")
    if "const" in schema and instance != schema["const"]:
        errors.append(f"{path}: expected constant {schema['const']!r}")

    for key in ("anyOf", "oneOf"):
        options = schema.get(key)
        if options:
            matches = sum(1 for option in options if not validate_against_schema(instance, option, path))
            if matches == 0 or (key == "oneOf" and matches > 1):
                errors.append(f"{path}: does not match {key}")

    if isinstance(instance, Mapping):
        errors.extend(_check_object(instance, schema, path))
    elif isinstance(instance, list):
        errors.extend(_check_array(instance, schema, path))
    elif isinstance(instance, str):
        if "minLength" in schema and len(instance) < schema["minLength"]:
            errors.append(f"{path}: shorter than {schema['minLength']}")
        if "maxLength" in schema and len(instance) > schema["maxLength"]:
            errors.append(f"{path}: longer than {schema['maxLength']}")
    elif _TYPE_CHECKS["number"](instance):
        if "minimum" in schema and instance < schema["minimum"]:
            errors.append(f"{path}: below minimum {schema['minimum']}")
        if "maximum" in schema and instance > schema["maximum"]:
            errors.append(f"{path}: above maximum {schema['maximum']}")
    return errors


def _check_object(instance: Mapping[str, Any], schema: Mapping[str, Any], path: str) -> List[str]:
    errors: List[str] = []
    properties = schema.get("properties") or {}
    for name in schema.get("required") or ():
        if name not in instance:
            errors.append(f"{path}: missing required property '{name}'")
    additional = schema.get("additionalProperties", True)
    for name, value in instance.items():
        if name in properties:
            errors.extend(validate_against_schema(value, properties[name], f"{path}.{name}"))
        elif additional is False:
            errors.append(f"{path}: unexpected property '{name}'")
        elif isinstance(additional, Mapping):
            errors.extend(validate_against_schema(value, additional, f"{path}.{name}"))
    return errors


def _check_array(instance: list, schema: Mapping[str, Any], path: str) -> List[str]:
    errors: List[str] = []
    if "minItems" in schema and len(instance) < schema["minItems"]:
        errors.append(f"{path}: fewer than {schema['minItems']} items")
    if "maxItems" in schema and len(instance) > schema["maxItems"]:
        errors.append(f"{path}: more than {schema['maxItems']} items")
    items = schema.get("items")
    if isinstance(items, Mapping):
        for i, value in enumerate(instance):
            errors.extend(validate_against_schema(value, items, f"{path}[{i}]"))
    return errors


def _type_name(value: Any) -> str:
    for name in ("null", "boolean", "integer", "number", "string", "array", "object"):
        if _TYPE_CHECKS[name](value):
            return name
    return type(value).__name__


__all__ = ["validate_against_schema"]
