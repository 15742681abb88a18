"""Operation reduction.

Merges a newly issued operation with the operation already pending for the
same key, so that a record never holds more than one operation per key. The
merged operation must be observationally equivalent to replaying both in
order; combinations that cannot be expressed as one operation are rejected.

Rules live in a single table keyed by
(pending operation name, incoming operation name, operand variant), which
keeps every legal combination listed in one place below.
"""

import logging
from typing import Callable

from .errors import IncompatibleOperationError
from .operation import Operation, OperationName
from .types import ListValue

logger = logging.getLogger(__name__)

ANY_VARIANT = "*"

Reduction = Callable[[Operation | None, Operation], Operation | None]
RuleKey = tuple[OperationName | None, OperationName, str]


class OperationReducer:
    """Dispatch table of reduction rules."""

    def __init__(self):
        self._rules: dict[RuleKey, Reduction] = {}

    def register(
        self,
        pending: OperationName | None,
        incoming: OperationName,
        variant: str = ANY_VARIANT,
    ) -> Callable[[Reduction], Reduction]:
        """Decorator registering a rule for one table cell.

        Args:
            pending: Name of the pending operation, None for an empty slot.
            incoming: Name of the newly issued operation.
            variant: Operand variant of the incoming operation, or "*".
        """

        def decorator(func: Reduction) -> Reduction:
            self._rules[(pending, incoming, variant)] = func
            return func

        return decorator

    def rule_for(
        self,
        pending: OperationName | None,
        incoming: OperationName,
        variant: str | None,
    ) -> Reduction | None:
        rule = self._rules.get((pending, incoming, variant))
        if rule is None:
            rule = self._rules.get((pending, incoming, ANY_VARIANT))
        return rule

    def reduce(self, pending: Operation | None, incoming: Operation) -> Operation | None:
        """Merge `incoming` into `pending`.

        Returns:
            The single equivalent operation, or None when the two cancel out.

        Raises:
            IncompatibleOperationError: No rule covers the combination.
            TypeMismatchError: The operands cannot be combined.
        """
        if pending is not None and pending.key != incoming.key:
            raise ValueError(
                f"Cannot reduce operations on different keys: "
                f"'{pending.key}' and '{incoming.key}'"
            )

        pending_name = pending.name if pending is not None else None
        rule = self.rule_for(pending_name, incoming.name, incoming.operand_variant)
        if rule is None:
            raise IncompatibleOperationError(incoming.key, pending, incoming)

        result = rule(pending, incoming)
        if result is not None and result.is_noop:
            result = None

        logger.debug(f"Reduced {pending!r} + {incoming!r} -> {result!r}")
        return result


reducer = OperationReducer()

_ALL_PENDING: tuple[OperationName | None, ...] = (None, *OperationName)


def _take_incoming(pending: Operation | None, incoming: Operation) -> Operation:
    return incoming


def _keep_pending(pending: Operation | None, incoming: Operation) -> Operation | None:
    return pending


# Set and Delete overwrite whatever was pending, for every variant.
for _name in _ALL_PENDING:
    reducer.register(_name, OperationName.SET)(_take_incoming)
    reducer.register(_name, OperationName.DELETE)(_take_incoming)


# List

for _name in (OperationName.ADD, OperationName.ADD_UNIQUE, OperationName.REMOVE):
    reducer.register(None, _name, "list")(_take_incoming)


@reducer.register(OperationName.ADD, OperationName.ADD, "list")
def _add_add(pending: Operation, incoming: Operation) -> Operation:
    return Operation(OperationName.ADD, incoming.key, pending.value.add(incoming.value))


@reducer.register(OperationName.ADD, OperationName.REMOVE, "list")
def _add_remove(pending: Operation, incoming: Operation) -> Operation:
    return Operation(
        OperationName.ADD, incoming.key, pending.value.subtract(incoming.value)
    )


@reducer.register(OperationName.ADD_UNIQUE, OperationName.ADD_UNIQUE, "list")
def _add_unique_add_unique(pending: Operation, incoming: Operation) -> Operation:
    return Operation(
        OperationName.ADD_UNIQUE,
        incoming.key,
        pending.value.add(incoming.value, unique=True),
    )


@reducer.register(OperationName.ADD_UNIQUE, OperationName.REMOVE, "list")
def _add_unique_remove(pending: Operation, incoming: Operation) -> Operation:
    return Operation(
        OperationName.ADD_UNIQUE, incoming.key, pending.value.subtract(incoming.value)
    )


@reducer.register(OperationName.REMOVE, OperationName.REMOVE, "list")
def _remove_remove(pending: Operation, incoming: Operation) -> Operation:
    return Operation(
        OperationName.REMOVE,
        incoming.key,
        pending.value.add(incoming.value, unique=True),
    )


@reducer.register(OperationName.SET, OperationName.ADD, "list")
def _set_add(pending: Operation, incoming: Operation) -> Operation:
    return Operation(OperationName.SET, incoming.key, pending.value.add(incoming.value))


@reducer.register(OperationName.SET, OperationName.ADD_UNIQUE, "list")
def _set_add_unique(pending: Operation, incoming: Operation) -> Operation:
    return Operation(
        OperationName.SET,
        incoming.key,
        pending.value.add(incoming.value, unique=True),
    )


@reducer.register(OperationName.SET, OperationName.REMOVE, "list")
def _set_remove(pending: Operation, incoming: Operation) -> Operation:
    return Operation(
        OperationName.SET, incoming.key, pending.value.subtract(incoming.value)
    )


@reducer.register(OperationName.DELETE, OperationName.ADD, "list")
def _delete_add(pending: Operation, incoming: Operation) -> Operation:
    return Operation(OperationName.SET, incoming.key, ListValue([]).add(incoming.value))


@reducer.register(OperationName.DELETE, OperationName.ADD_UNIQUE, "list")
def _delete_add_unique(pending: Operation, incoming: Operation) -> Operation:
    return Operation(
        OperationName.SET,
        incoming.key,
        ListValue([]).add(incoming.value, unique=True),
    )


reducer.register(OperationName.DELETE, OperationName.REMOVE, "list")(_keep_pending)


# Number

reducer.register(None, OperationName.INCREMENT, "number")(_take_incoming)


@reducer.register(OperationName.INCREMENT, OperationName.INCREMENT, "number")
def _increment_increment(pending: Operation, incoming: Operation) -> Operation:
    return Operation(
        OperationName.INCREMENT, incoming.key, pending.value.add(incoming.value)
    )


@reducer.register(OperationName.SET, OperationName.INCREMENT, "number")
def _set_increment(pending: Operation, incoming: Operation) -> Operation:
    return Operation(OperationName.SET, incoming.key, pending.value.add(incoming.value))


@reducer.register(OperationName.DELETE, OperationName.INCREMENT, "number")
def _delete_increment(pending: Operation, incoming: Operation) -> Operation:
    return Operation(OperationName.SET, incoming.key, incoming.value.copy())


def reduce(pending: Operation | None, incoming: Operation) -> Operation | None:
    """Reduce with the default rule table."""
    return reducer.reduce(pending, incoming)
