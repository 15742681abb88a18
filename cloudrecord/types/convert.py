"""Conversion of plain Python objects into values."""

from datetime import datetime
from typing import Any

from .atomic import Boolean, Date, Null, Number, String
from .base import Value
from .dictionary import Dictionary
from .list_value import ListValue
from .reference import Reference


def to_value(obj: Any) -> Value:
    """Wrap a Python object in the matching value variant.

    Values pass through untouched. Records become references.

    Raises:
        TypeError: If the object has no value counterpart.
    """
    from ..record import Record

    if isinstance(obj, Value):
        return obj
    if obj is None:
        return Null()
    # bool before int: bool is an int subclass
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, (int, float)):
        return Number(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, datetime):
        return Date(obj)
    if isinstance(obj, (list, tuple)):
        return ListValue(obj)
    if isinstance(obj, dict):
        return Dictionary(obj)
    if isinstance(obj, Record):
        return Reference(obj.class_name, obj.object_id)

    raise TypeError(f"Cannot store {type(obj).__name__} in a record")
