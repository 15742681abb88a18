"""cloudrecord: client-side records that sync only their minimal changes.

Values stored on a record report each mutation as an operation. The record
reduces those operations to at most one per key, ready to be sent as an
atomic partial update.
"""

from .errors import (
    CloudRecordError,
    IncompatibleOperationError,
    InvalidOperationError,
    RemoteError,
    TypeMismatchError,
)
from .operation import Operation, OperationName
from .record import Record
from .reducer import OperationReducer, reduce
from .types import (
    Boolean,
    Date,
    Dictionary,
    ListValue,
    MutationSink,
    Null,
    Number,
    Reference,
    String,
    Value,
    to_value,
)

__all__ = [
    "Boolean",
    "CloudRecordError",
    "Date",
    "Dictionary",
    "IncompatibleOperationError",
    "InvalidOperationError",
    "ListValue",
    "MutationSink",
    "Null",
    "Number",
    "Operation",
    "OperationName",
    "OperationReducer",
    "Record",
    "Reference",
    "RemoteError",
    "String",
    "TypeMismatchError",
    "Value",
    "reduce",
    "to_value",
]
