"""Records: named values plus the table of operations pending a save."""

import logging
from typing import Any, Iterator

from .errors import IncompatibleOperationError
from .operation import Operation, OperationName
from .reducer import OperationReducer, reducer as default_reducer
from .types import Date, ListValue, Number, Reference, Value, to_value

logger = logging.getLogger(__name__)

RESERVED_KEYS = frozenset({"objectId", "createdAt", "updatedAt", "ACL", "className"})


class Record:
    """A structured object stored in a remote class.

    Values assigned to a record are bound to it under their key and report
    their mutations back through `notify_mutation`. Every operation is reduced
    against the one already pending for its key, so the pending table holds at
    most one operation per key.

    A record is not safe for concurrent writers; confine it to one thread or
    serialize mutations externally.
    """

    def __init__(
        self,
        class_name: str,
        object_id: str | None = None,
        reducer: OperationReducer | None = None,
    ):
        self.class_name = class_name
        self.object_id = object_id
        self.created_at: Date | None = None
        self.updated_at: Date | None = None
        self._attributes: dict[str, Value] = {}
        self._operations: dict[str, Operation] = {}
        self._reducer = reducer or default_reducer
        self._flushes: list[tuple[dict[str, Operation], dict[str, Operation | None]]] = []

    def __repr__(self) -> str:
        return f"Record({self.class_name!r}, object_id={self.object_id!r})"

    # Attribute access

    def get(self, key: str, default: Value | None = None) -> Value | None:
        return self._attributes.get(key, default)

    def __getitem__(self, key: str) -> Value:
        return self._attributes[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.unset(key)

    def __contains__(self, key: object) -> bool:
        return key in self._attributes

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def keys(self) -> list[str]:
        return list(self._attributes)

    def as_reference(self) -> Reference:
        return Reference(self.class_name, self.object_id)

    # Mutation

    def set(self, key: str, value: Any) -> None:
        """Assign a value and record a Set operation.

        A value already bound to another owner is copied first, so each value
        reports to exactly one record.
        """
        self._validate_key(key)
        value = to_value(value)
        if value.is_bound and (value.parent is not self or value.key != key):
            value = value.copy()

        self.notify_mutation(key, Operation(OperationName.SET, key, value.copy()))
        self._attach(key, value)

    def unset(self, key: str) -> None:
        """Remove a key locally and record a Delete operation."""
        self._validate_key(key)
        self.notify_mutation(key, Operation(OperationName.DELETE, key))
        self._detach(key)

    def append(self, key: str, element: Any, unique: bool = False) -> None:
        """Append to the list under `key`, creating it when absent."""
        self._container(key, ListValue).append(element, unique=unique)

    def remove(self, key: str, element: Any) -> None:
        """Remove every equal element from the list under `key`."""
        self._container(key, ListValue).remove(element)

    def increment(self, key: str, amount: int | float = 1) -> None:
        """Increment the number under `key`, starting from zero when absent."""
        self._container(key, Number).increment(amount)

    def _container(self, key: str, kind: type) -> Value:
        self._validate_key(key)
        current = self._attributes.get(key)
        if current is None:
            current = ListValue([]) if kind is ListValue else kind()
            self._attach(key, current)
        elif not isinstance(current, kind):
            raise TypeError(
                f"Key '{key}' holds a {current.variant}, not a {kind.variant}"
            )
        return current

    def _attach(self, key: str, value: Value) -> None:
        self._detach(key)
        value.bind(self, key)
        self._attributes[key] = value

    def _detach(self, key: str) -> None:
        previous = self._attributes.pop(key, None)
        if previous is not None and previous.parent is self:
            previous.unbind()

    @staticmethod
    def _validate_key(key: str) -> None:
        if not key:
            raise ValueError("Key must be a non-empty string")
        if key in RESERVED_KEYS:
            raise ValueError(f"Key '{key}' is reserved")

    # Pending operations

    def notify_mutation(self, key: str, operation: Operation) -> None:
        """Reduce an operation into the pending table.

        Raises:
            IncompatibleOperationError: The operation cannot follow the one
                already pending for `key`; the table is left unchanged.
            TypeMismatchError: The operands cannot be combined.
        """
        try:
            reduced = self._reducer.reduce(self._operations.get(key), operation)
            # Operations issued during a save also reduce from scratch, so an
            # illegal sequence is rejected now rather than when the save ends
            later = [
                (issued, self._reducer.reduce(issued.get(key), operation))
                for _, issued in self._flushes
            ]
        except IncompatibleOperationError as e:
            logger.warning(
                f"Rejected {operation.name.value} on {self.class_name}.{key}: "
                f"{e.pending.name.value if e.pending else 'nothing'} is pending"
            )
            raise

        if reduced is None:
            self._operations.pop(key, None)
        else:
            self._operations[key] = reduced

        for issued, result in later:
            issued[key] = result

    @property
    def pending_operations(self) -> dict[str, Operation]:
        """Snapshot of the pending table."""
        return dict(self._operations)

    @property
    def has_pending_changes(self) -> bool:
        return bool(self._operations)

    def begin_flush(self) -> dict[str, Operation]:
        """Take a snapshot for a save and start a table for later operations.

        Pass the snapshot to `clear_operations` once the remote store has
        accepted it, or to `abort_flush` if the save failed.
        """
        snapshot = self.pending_operations
        self._flushes.append((snapshot, {}))
        return snapshot

    def abort_flush(self, snapshot: dict[str, Operation]) -> None:
        """Stop tracking a failed save; the pending table already holds everything."""
        self._flushes = [f for f in self._flushes if f[0] is not snapshot]

    def clear_operations(self, snapshot: dict[str, Operation]) -> None:
        """Drop the entries that were part of `snapshot`.

        Keys that received operations after the snapshot are not dropped:
        when the snapshot came from `begin_flush` their entry becomes the
        reduction of only those later operations, otherwise they are left as
        they are.
        """
        issued: dict[str, Operation | None] = {}
        for tracked, table in self._flushes:
            if tracked is snapshot:
                issued = table
        self.abort_flush(snapshot)

        for key, operation in snapshot.items():
            if key in issued:
                later = issued[key]
                if later is None:
                    self._operations.pop(key, None)
                else:
                    self._operations[key] = later
            elif self._operations.get(key) is operation:
                del self._operations[key]

    def discard_changes(self) -> None:
        """Forget every pending operation without touching local values."""
        self._operations.clear()

    def update_payload(self, snapshot: dict[str, Operation] | None = None) -> dict[str, Any]:
        """Build the atomic-update request body.

        Args:
            snapshot: Operations to encode; defaults to the whole pending table.
        """
        from .codec import encode

        operations = self._operations if snapshot is None else snapshot
        return {key: op.to_wire(encode) for key, op in operations.items()}

    # Server data

    def apply_server_data(self, data: dict[str, Any], replace: bool = False) -> None:
        """Merge fields returned by the remote store without recording operations.

        Args:
            data: Decoded response body.
            replace: Also drop local keys the response does not contain.
        """
        from .codec import decode

        if replace:
            for key in [k for k in self._attributes if k not in data]:
                self._detach(key)

        for key, raw in data.items():
            if key == "objectId":
                self.object_id = raw
            elif key == "createdAt":
                self.created_at = Date.from_iso(raw)
            elif key == "updatedAt":
                self.updated_at = Date.from_iso(raw)
            elif key in RESERVED_KEYS:
                continue
            else:
                self._attach(key, decode(raw))
