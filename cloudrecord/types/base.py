"""Base class for every value that can be stored under a record key."""

import logging
import weakref
from abc import ABC, abstractmethod
from typing import Any, Protocol

from ..errors import TypeMismatchError
from ..operation import Operation, OperationName

logger = logging.getLogger(__name__)


class MutationSink(Protocol):
    """Anything that wants to hear about mutations of the values it owns."""

    def notify_mutation(self, key: str, operation: Operation) -> None:
        ...


class Value(ABC):
    """Abstract unit of storage.

    Two values are equal when they have the same variant and structurally
    equal contents. A value may be bound to a parent (a MutationSink) under a
    key; the value only keeps a weak reference to it, so the parent owns the
    value and never the other way around.
    """

    variant: str = "value"

    def __init__(self):
        self._parent: weakref.ref | None = None
        self._key: str | None = None

    @property
    @abstractmethod
    def value(self) -> Any:
        """The plain contents of this value (None when absent)."""
        pass

    @abstractmethod
    def copy(self) -> "Value":
        """Return an unbound value with the same contents."""
        pass

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, Value) or other.variant != self.variant:
            return False
        return self.value == other.value

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"

    # Arithmetic

    def add(self, other: "Value | None", unique: bool = False) -> "Value":
        raise TypeMismatchError("add", self, other)

    def subtract(self, other: "Value | None") -> "Value":
        raise TypeMismatchError("subtract", self, other)

    def __add__(self, other: "Value") -> "Value":
        return self.add(other)

    def __sub__(self, other: "Value") -> "Value":
        return self.subtract(other)

    # Parent binding

    def bind(self, sink: MutationSink, key: str) -> None:
        """Register the parent that receives this value's operations."""
        self._parent = weakref.ref(sink)
        self._key = key

    def unbind(self) -> None:
        """Detach from the parent; further mutations stay local."""
        self._parent = None
        self._key = None

    @property
    def parent(self) -> MutationSink | None:
        if self._parent is None:
            return None
        return self._parent()

    @property
    def key(self) -> str | None:
        return self._key

    @property
    def is_bound(self) -> bool:
        return self.parent is not None

    def _notify(self, name: OperationName, operand: "Value") -> None:
        """Send an operation to the parent, if there still is one."""
        parent = self.parent
        if parent is None:
            return
        parent.notify_mutation(self._key, Operation(name, self._key, operand))

    def _commit(self, name: OperationName, operand: "Value", rollback) -> None:
        """Notify the parent of a mutation already applied locally.

        If the parent rejects the operation, `rollback` restores the previous
        local state before the error reaches the caller.
        """
        try:
            self._notify(name, operand)
        except Exception:
            logger.debug(f"Rolling back {name.value} on key '{self._key}'")
            rollback()
            raise
