# Role: Converts Dialogflow's tagged Struct tree ({"fields": {k: {"kind": "stringValue", "stringValue": ...}}})
# into plain JSON values. Pure functions: no I/O, input is never mutated.

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

STRING_VALUE = "stringValue"
NUMBER_VALUE = "numberValue"
BOOL_VALUE = "boolValue"
NULL_VALUE = "nullValue"
LIST_VALUE = "listValue"
STRUCT_VALUE = "structValue"

KNOWN_KINDS = (STRING_VALUE, NUMBER_VALUE, BOOL_VALUE, NULL_VALUE, LIST_VALUE, STRUCT_VALUE)


def _kind_of(value: Any) -> Optional[str]:
    # Prefer the explicit discriminator; otherwise infer it from the single tag key present.
    if not isinstance(value, Mapping):
        return None

    kind = value.get("kind")
    if isinstance(kind, str) and kind:
        return kind

    present = [tag for tag in KNOWN_KINDS if tag in value]
    return present[0] if len(present) == 1 else None


def _fields_of(struct: Any) -> Optional[Mapping]:
    if isinstance(struct, Mapping):
        fields = struct.get("fields")
        if isinstance(fields, Mapping):
            return fields
    return None


def struct_to_json(struct: Any) -> Any:
    """
    Convert a Struct (or a lone tagged Value, e.g. a list element) into plain JSON.
    Anything without a field-map or a recognized tag is returned unchanged.
    """
    fields = _fields_of(struct)
    if fields is None:
        # Already-simple values (e.g. inside a list) or a single tagged value.
        if _kind_of(struct) is not None:
            return value_to_json(struct)
        return struct

    return {key: value_to_json(field) for key, field in fields.items()}


def value_to_json(value: Any) -> Any:
    # 1) Resolve the tag
    # 2) Scalars map to themselves, null to None
    # 3) Lists and nested structs recurse
    # 4) Unrecognized tags (or a tag without its payload) pass through unchanged
    kind = _kind_of(value)

    if kind == NULL_VALUE:
        return None

    if kind not in KNOWN_KINDS or kind not in value:
        return value

    payload = value[kind]

    if kind in (STRING_VALUE, NUMBER_VALUE, BOOL_VALUE):
        return payload

    if kind == LIST_VALUE:
        items = payload.get("values") if isinstance(payload, Mapping) else None
        return [struct_to_json(item) for item in (items or [])]

    return struct_to_json(payload)
