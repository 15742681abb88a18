"""Conversion between values and the remote store's JSON representation."""

from typing import Any

from .types import (
    Boolean,
    Date,
    Dictionary,
    ListValue,
    Null,
    Number,
    Reference,
    String,
    Value,
)


def encode(value: Value | None) -> Any:
    """Encode a value into JSON-compatible data.

    Raises:
        TypeError: If the value variant is unknown.
    """
    if value is None or isinstance(value, Null):
        return None
    if isinstance(value, (String, Number, Boolean)):
        return value.value
    if isinstance(value, Date):
        return {"__type": "Date", "iso": value.iso}
    if isinstance(value, Reference):
        return {
            "__type": "Pointer",
            "className": value.class_name,
            "objectId": value.object_id,
        }
    if isinstance(value, ListValue):
        return [encode(element) for element in value.contents or []]
    if isinstance(value, Dictionary):
        return {key: encode(element) for key, element in (value.contents or {}).items()}

    raise TypeError(f"Cannot encode {type(value).__name__}")


def decode(data: Any) -> Value:
    """Decode JSON data returned by the remote store into a value."""
    if data is None:
        return Null()
    if isinstance(data, bool):
        return Boolean(data)
    if isinstance(data, (int, float)):
        return Number(data)
    if isinstance(data, str):
        return String(data)
    if isinstance(data, list):
        return ListValue([decode(element) for element in data])
    if isinstance(data, dict):
        type_tag = data.get("__type")
        if type_tag == "Date":
            return Date.from_iso(data["iso"])
        if type_tag == "Pointer":
            return Reference(data["className"], data.get("objectId"))
        return Dictionary({key: decode(element) for key, element in data.items()})

    raise TypeError(f"Cannot decode {type(data).__name__}")
