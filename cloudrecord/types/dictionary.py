"""Dictionary value: string keys mapped to values."""

from typing import Any, Iterator, Mapping

from ..operation import OperationName
from .base import Value


class Dictionary(Value):
    """A mapping of string keys to values.

    The update protocol has no per-entry operation for dictionaries, so every
    local change is reported to the parent as a Set of the whole mapping.
    """

    variant = "dictionary"

    def __init__(self, contents: Mapping[str, Any] | None = None):
        super().__init__()
        from .convert import to_value

        self.contents: dict[str, Value] | None = (
            None
            if contents is None
            else {str(k): to_value(v) for k, v in contents.items()}
        )

    @property
    def value(self) -> dict[str, Value] | None:
        return self.contents

    def copy(self) -> "Dictionary":
        return Dictionary(self.contents)

    def __len__(self) -> int:
        return len(self.contents) if self.contents is not None else 0

    def __iter__(self) -> Iterator[str]:
        return iter(self.contents or {})

    def __getitem__(self, key: str) -> Value:
        if self.contents is None:
            raise KeyError(key)
        return self.contents[key]

    def __contains__(self, key: object) -> bool:
        return key in (self.contents or {})

    def get(self, key: str, default: Value | None = None) -> Value | None:
        return (self.contents or {}).get(key, default)

    def set(self, key: str, value: Any) -> None:
        from .convert import to_value

        previous = self.contents
        self.contents = dict(previous or {})
        self.contents[key] = to_value(value)
        self._commit_snapshot(previous)

    def remove(self, key: str) -> None:
        previous = self.contents
        if previous is None or key not in previous:
            return
        self.contents = {k: v for k, v in previous.items() if k != key}
        self._commit_snapshot(previous)

    def _commit_snapshot(self, previous: dict[str, Value] | None) -> None:
        def rollback():
            self.contents = previous

        self._commit(OperationName.SET, self.copy(), rollback)
