"""Exception hierarchy for cloudrecord."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .operation import Operation


class CloudRecordError(Exception):
    """Base class for all cloudrecord errors."""


class TypeMismatchError(CloudRecordError):
    """Binary arithmetic attempted between incompatible value variants."""

    def __init__(self, operation: str, lhs: object, rhs: object):
        self.operation = operation
        self.lhs_variant = getattr(lhs, "variant", type(lhs).__name__)
        self.rhs_variant = getattr(rhs, "variant", type(rhs).__name__)
        super().__init__(
            f"Cannot {operation} {self.rhs_variant} "
            f"{'to' if operation == 'add' else 'from'} {self.lhs_variant}"
        )


class IncompatibleOperationError(CloudRecordError):
    """A new operation cannot be merged with the pending one for its key."""

    def __init__(self, key: str, pending: "Operation | None", incoming: "Operation"):
        self.key = key
        self.pending = pending
        self.incoming = incoming
        pending_name = pending.name.value if pending else "nothing"
        super().__init__(
            f"Cannot apply {incoming.name.value} after {pending_name} "
            f"on key '{key}' before the record is saved"
        )


class InvalidOperationError(CloudRecordError):
    """An operation whose kind and operand shape disagree."""


class RemoteError(CloudRecordError):
    """The remote store rejected a request or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: int | None = None,
    ):
        self.status_code = status_code
        self.code = code
        super().__init__(message)
