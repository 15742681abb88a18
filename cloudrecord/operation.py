"""Operations: immutable descriptions of a single mutation on a record key."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from .errors import InvalidOperationError

if TYPE_CHECKING:
    from .types.base import Value


class OperationName(Enum):
    """Kinds of operation understood by the remote update protocol."""

    SET = "Set"
    DELETE = "Delete"
    ADD = "Add"
    ADD_UNIQUE = "AddUnique"
    REMOVE = "Remove"
    INCREMENT = "Increment"


LIST_OPERATIONS = frozenset(
    {OperationName.ADD, OperationName.ADD_UNIQUE, OperationName.REMOVE}
)


@dataclass(frozen=True)
class Operation:
    """A single mutation: kind + key + operand.

    The operand shape must agree with the kind. Add, AddUnique and Remove
    always carry a list, Increment carries a number, Delete carries nothing.
    """

    name: OperationName
    key: str
    value: "Value | None" = None

    def __post_init__(self) -> None:
        variant = self.operand_variant

        if self.name is OperationName.DELETE:
            if self.value is not None:
                raise InvalidOperationError("Delete takes no operand")
        elif self.name in LIST_OPERATIONS:
            if variant != "list":
                raise InvalidOperationError(
                    f"{self.name.value} requires a list operand, got {variant}"
                )
        elif self.name is OperationName.INCREMENT:
            if variant != "number":
                raise InvalidOperationError(
                    f"Increment requires a number operand, got {variant}"
                )
        elif self.value is None:
            raise InvalidOperationError(f"{self.name.value} requires an operand")

    @property
    def operand_variant(self) -> str | None:
        """Variant tag of the operand, or None when there is no operand."""
        if self.value is None:
            return None
        return self.value.variant

    @property
    def is_noop(self) -> bool:
        """True for list operations whose operand holds no elements."""
        return self.name in LIST_OPERATIONS and not self.value.contents

    def to_wire(self, encode: Callable[["Value"], Any]) -> Any:
        """Build the atomic-update representation for this operation.

        Args:
            encode: Value serializer (see cloudrecord.codec.encode).

        Returns:
            JSON-compatible data to send as the value of this key.
        """
        if self.name is OperationName.SET:
            return encode(self.value)
        if self.name is OperationName.DELETE:
            return {"__op": "Delete"}
        if self.name is OperationName.INCREMENT:
            return {"__op": "Increment", "amount": self.value.value}
        return {
            "__op": self.name.value,
            "objects": [encode(element) for element in self.value.contents or []],
        }

    def __repr__(self) -> str:
        return f"Operation({self.name.value}, {self.key!r}, {self.value!r})"
