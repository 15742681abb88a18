"""Typed value model for record attributes."""

from .atomic import Boolean, Date, Null, Number, String
from .base import MutationSink, Value
from .convert import to_value
from .dictionary import Dictionary
from .list_value import ListValue
from .reference import Reference

__all__ = [
    "Boolean",
    "Date",
    "Dictionary",
    "ListValue",
    "MutationSink",
    "Null",
    "Number",
    "Reference",
    "String",
    "Value",
    "to_value",
]
