"""Atomic value variants: string, number, boolean, date and null."""

from datetime import datetime, timezone
from typing import Any

from ..errors import TypeMismatchError
from ..operation import OperationName
from .base import Value


class AtomicValue(Value):
    """A value wrapping a single immutable Python scalar."""

    def __init__(self, value: Any = None):
        super().__init__()
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    def copy(self) -> "AtomicValue":
        return type(self)(self._value)

    def __hash__(self) -> int:
        return hash((self.variant, self._value))


class String(AtomicValue):
    variant = "string"

    def __init__(self, value: str = ""):
        super().__init__(value)

    def __str__(self) -> str:
        return self._value


class Number(AtomicValue):
    """Numeric value. Also acts as a counter through `increment`."""

    variant = "number"

    def __init__(self, value: int | float = 0):
        super().__init__(value)

    def add(self, other: Value | None, unique: bool = False) -> "Number":
        if not isinstance(other, Number):
            raise TypeMismatchError("add", self, other)
        return Number(self._value + other.value)

    def subtract(self, other: Value | None) -> "Number":
        if not isinstance(other, Number):
            raise TypeMismatchError("subtract", self, other)
        return Number(self._value - other.value)

    def increment(self, amount: int | float = 1) -> None:
        """Add `amount` in place and report an Increment to the parent.

        Args:
            amount: Step to add; may be negative.
        """
        previous = self._value
        self._value = previous + amount

        def rollback():
            self._value = previous

        self._commit(OperationName.INCREMENT, Number(amount), rollback)


class Boolean(AtomicValue):
    variant = "boolean"

    def __init__(self, value: bool = False):
        super().__init__(bool(value))

    def __bool__(self) -> bool:
        return self._value


class Date(AtomicValue):
    """A point in time, always normalized to UTC."""

    variant = "date"

    def __init__(self, value: datetime | None = None):
        if value is None:
            value = datetime.now(timezone.utc)
        elif value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        else:
            value = value.astimezone(timezone.utc)
        super().__init__(value)

    @property
    def iso(self) -> str:
        """ISO-8601 form with millisecond precision, as the remote store expects."""
        return self._value.strftime("%Y-%m-%dT%H:%M:%S.") + (
            f"{self._value.microsecond // 1000:03d}Z"
        )

    @classmethod
    def from_iso(cls, text: str) -> "Date":
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return cls(datetime.fromisoformat(text))


class Null(AtomicValue):
    variant = "null"

    def __init__(self):
        super().__init__(None)

    def copy(self) -> "Null":
        return Null()
