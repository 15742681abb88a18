"""List value: an ordered sequence of values with Add/AddUnique/Remove tracking."""

from typing import Any, Iterable, Iterator, Sequence

from ..errors import TypeMismatchError
from ..operation import OperationName
from .base import Value


def _coerce(element: Any) -> Value:
    from .convert import to_value

    return to_value(element)


class ListValue(Value):
    """An ordered list of values.

    `contents` is None until the list has been materialized (created locally
    or fetched). Order is insertion order. Each mutation recomputes the
    contents first and only then reports a raw operation to the parent, so the
    parent always sees the post-mutation state.
    """

    variant = "list"

    def __init__(self, contents: Iterable[Any] | None = None):
        super().__init__()
        self.contents: list[Value] | None = (
            None if contents is None else [_coerce(e) for e in contents]
        )

    @property
    def value(self) -> list[Value] | None:
        return self.contents

    def copy(self) -> "ListValue":
        return ListValue(self.contents)

    def __len__(self) -> int:
        return len(self.contents) if self.contents is not None else 0

    def __iter__(self) -> Iterator[Value]:
        return iter(self.contents or [])

    def __getitem__(self, index: int) -> Value:
        if self.contents is None:
            raise IndexError("list is not materialized")
        return self.contents[index]

    def __contains__(self, element: Any) -> bool:
        return _coerce(element) in (self.contents or [])

    # Mutation

    def append(self, element: Any, unique: bool = False) -> None:
        """Append an element.

        With `unique`, the element is only appended when no equal element is
        present. The parent is told about it either way; the remote store
        runs its own uniqueness check.

        Args:
            element: Value (or plain Python object) to append.
            unique: Skip the append when an equal element already exists.
        """
        element = _coerce(element)
        name = OperationName.ADD_UNIQUE if unique else OperationName.ADD
        self._apply(self.concatenate_objects([element], unique), name, element)

    def remove(self, element: Any) -> None:
        """Remove every element equal to `element`."""
        element = _coerce(element)
        self._apply(self.subtract_objects([element]), OperationName.REMOVE, element)

    def _apply(
        self, contents: list[Value] | None, name: OperationName, element: Value
    ) -> None:
        previous = self.contents
        self.contents = contents

        def rollback():
            self.contents = previous

        self._commit(name, ListValue([element]), rollback)

    # Pure sequence helpers

    def concatenate_objects(
        self, other: Sequence[Value] | None, unique: bool = False
    ) -> list[Value] | None:
        """Return the contents followed by `other`, without mutating self.

        Absent contents count as empty. An absent `other` returns the contents
        unchanged. With `unique`, the result holds no two equal elements.
        """
        if other is None:
            return None if self.contents is None else list(self.contents)

        if not unique:
            return list(self.contents or []) + list(other)

        result: list[Value] = []
        for element in list(self.contents or []) + list(other):
            if element not in result:
                result.append(element)
        return result

    def subtract_objects(self, other: Sequence[Value] | None) -> list[Value] | None:
        """Return the contents minus every element equal to one in `other`.

        Absent contents stay absent; an absent `other` changes nothing.
        """
        if self.contents is None:
            return None
        if other is None:
            return list(self.contents)
        return [element for element in self.contents if element not in other]

    # Arithmetic

    def add(self, other: Value | None, unique: bool = False) -> "ListValue":
        if not isinstance(other, ListValue):
            raise TypeMismatchError("add", self, other)
        return ListValue(self.concatenate_objects(other.contents, unique))

    def subtract(self, other: Value | None) -> "ListValue":
        if not isinstance(other, ListValue):
            raise TypeMismatchError("subtract", self, other)
        return ListValue(self.subtract_objects(other.contents))
