"""Tests for the list value."""

import pytest

from cloudrecord import (
    IncompatibleOperationError,
    ListValue,
    Number,
    OperationName,
    Record,
    String,
    TypeMismatchError,
)


def strings(*items):
    return [String(i) for i in items]


@pytest.fixture
def record():
    """Create a record with an empty list bound under 'tags'."""
    record = Record("TestObject")
    record.set("tags", [])
    record.discard_changes()
    return record


class TestListValueBasics:
    """Tests for construction, equality and copying."""

    def test_absent_by_default(self):
        """Test a new list has no materialized contents."""
        assert ListValue().contents is None
        assert len(ListValue()) == 0

    def test_plain_elements_are_wrapped(self):
        """Test plain Python objects become values."""
        lst = ListValue(["a", 1, True])

        assert lst.contents == [String("a"), Number(1), lst[2]]
        assert lst[2].variant == "boolean"

    def test_equality_is_structural(self):
        """Test two lists with equal contents compare equal."""
        assert ListValue(["a", "b"]) == ListValue(["a", "b"])
        assert ListValue(["a", "b"]) != ListValue(["b", "a"])

    def test_absent_equals_only_absent(self):
        """Test absent contents only equal absent contents."""
        assert ListValue() == ListValue()
        assert ListValue() != ListValue([])

    def test_copy_does_not_share_storage(self):
        """Test mutating a copy leaves the original alone."""
        original = ListValue(["a"])
        duplicate = original.copy()
        duplicate.append("b")

        assert original.contents == strings("a")
        assert duplicate.contents == strings("a", "b")

    def test_contains(self):
        """Test membership uses value equality."""
        lst = ListValue(["a"])

        assert "a" in lst
        assert String("a") in lst
        assert "b" not in lst


class TestConcatenate:
    """Tests for concatenate_objects."""

    def test_length_is_sum(self):
        """Test non-unique concatenation keeps every element."""
        a = ListValue(["x", "y", "x"])
        b = strings("y", "z")

        assert len(a.concatenate_objects(b)) == len(a) + len(b)

    def test_unique_has_no_duplicates(self):
        """Test unique concatenation yields no two equal elements."""
        a = ListValue(["x", "x", "y"])
        b = strings("y", "z", "z")

        result = a.concatenate_objects(b, unique=True)

        assert result == strings("x", "y", "z")

    def test_absent_other_returns_contents(self):
        """Test an absent argument is a no-op."""
        a = ListValue(["x"])

        assert a.concatenate_objects(None) == strings("x")
        assert ListValue().concatenate_objects(None) is None

    def test_absent_self_is_empty(self):
        """Test absent contents count as empty."""
        assert ListValue().concatenate_objects(strings("x")) == strings("x")

    def test_does_not_mutate(self):
        """Test concatenation is pure."""
        a = ListValue(["x"])
        a.concatenate_objects(strings("y"))

        assert a.contents == strings("x")


class TestSubtract:
    """Tests for subtract_objects."""

    def test_removes_every_equal_element(self):
        """Test all occurrences are filtered out."""
        a = ListValue(["x", "y", "x", "z"])

        assert a.subtract_objects(strings("x")) == strings("y", "z")

    def test_self_subtract_is_empty(self):
        """Test a duplicate-free list minus itself is empty."""
        a = ListValue(["x", "y", "z"])

        assert a.subtract_objects(a.contents) == []
        assert a.subtract(a).contents == []

    def test_absent_self_stays_absent(self):
        """Test undefined minus anything is undefined."""
        assert ListValue().subtract_objects(strings("x")) is None

    def test_absent_other_returns_contents(self):
        """Test subtracting nothing changes nothing."""
        assert ListValue(["x"]).subtract_objects(None) == strings("x")


class TestArithmetic:
    """Tests for add/subtract between values."""

    def test_add_returns_new_list(self):
        """Test add wraps the concatenation in a new list."""
        a = ListValue(["x"])
        result = a.add(ListValue(["y"]))

        assert isinstance(result, ListValue)
        assert result.contents == strings("x", "y")
        assert a.contents == strings("x")

    def test_add_unique(self):
        """Test add with unique skips equal elements."""
        result = ListValue(["x"]).add(ListValue(["x", "y"]), unique=True)

        assert result.contents == strings("x", "y")

    def test_operators(self):
        """Test + and - map to add and subtract."""
        a = ListValue(["x", "y"])

        assert (a + ListValue(["z"])).contents == strings("x", "y", "z")
        assert (a - ListValue(["x"])).contents == strings("y")

    def test_add_non_list_raises(self):
        """Test add with another variant is a type mismatch."""
        with pytest.raises(TypeMismatchError):
            ListValue(["x"]).add(Number(1))

    def test_subtract_non_list_raises(self):
        """Test subtract with another variant is a type mismatch."""
        with pytest.raises(TypeMismatchError):
            ListValue(["x"]).subtract(String("x"))

    def test_add_none_raises(self):
        """Test a missing operand is a type mismatch, not an empty result."""
        with pytest.raises(TypeMismatchError):
            ListValue(["x"]).add(None)


class TestUnboundMutation:
    """Tests for mutating a list that has no parent."""

    def test_append(self):
        """Test append adds to the end."""
        lst = ListValue([])
        lst.append("a")
        lst.append("b")

        assert lst.contents == strings("a", "b")

    def test_append_to_absent(self):
        """Test appending materializes an absent list."""
        lst = ListValue()
        lst.append("a")

        assert lst.contents == strings("a")

    def test_append_unique_skips_existing(self):
        """Test unique append is a local no-op for existing elements."""
        lst = ListValue(["a"])
        lst.append("a", unique=True)

        assert lst.contents == strings("a")

    def test_remove(self):
        """Test remove drops every equal element."""
        lst = ListValue(["a", "b", "a"])
        lst.remove("a")

        assert lst.contents == strings("b")

    def test_scenario(self):
        """Test append, unique append and remove in sequence."""
        lst = ListValue([])

        lst.append("a")
        assert lst.contents == strings("a")

        lst.append("b", unique=True)
        assert lst.contents == strings("a", "b")

        lst.remove("a")
        assert lst.contents == strings("b")


class TestBoundMutation:
    """Tests for mutations reported to the owning record."""

    def test_append_reports_add(self, record):
        """Test append records an Add with the element."""
        record["tags"].append("a")

        op = record.pending_operations["tags"]
        assert op.name is OperationName.ADD
        assert op.value == ListValue(["a"])

    def test_append_unique_reports_even_when_present(self, record):
        """Test AddUnique is recorded even if the local append was a no-op."""
        tags = record["tags"]
        tags.contents = strings("a")
        tags.append("a", unique=True)

        assert tags.contents == strings("a")
        op = record.pending_operations["tags"]
        assert op.name is OperationName.ADD_UNIQUE
        assert op.value == ListValue(["a"])

    def test_remove_reports_remove(self, record):
        """Test remove records a Remove with the element."""
        record["tags"].remove("a")

        op = record.pending_operations["tags"]
        assert op.name is OperationName.REMOVE
        assert op.value == ListValue(["a"])

    def test_contents_updated_before_notification(self):
        """Test the parent sees post-mutation contents during notification."""
        seen = []

        class Sink:
            def notify_mutation(self, key, operation):
                seen.append((key, operation.name, list(lst.contents)))

        sink = Sink()
        lst = ListValue([])
        lst.bind(sink, "tags")
        lst.append("a")

        assert seen == [("tags", OperationName.ADD, strings("a"))]

    def test_rejected_mutation_leaves_contents(self, record):
        """Test a rejected operation rolls the local contents back."""
        tags = record["tags"]
        tags.remove("x")
        before = list(tags.contents)

        with pytest.raises(IncompatibleOperationError):
            tags.append("y")

        assert tags.contents == before
        assert record.pending_operations["tags"].name is OperationName.REMOVE

    def test_bound_scenario(self, record):
        """Test the scenario on a record-bound list."""
        tags = record["tags"]

        tags.append("a")
        assert tags.contents == strings("a")
        assert record.pending_operations["tags"].value == ListValue(["a"])

        # Add then AddUnique has no single equivalent operation
        with pytest.raises(IncompatibleOperationError):
            tags.append("b", unique=True)
        assert tags.contents == strings("a")
        assert record.pending_operations["tags"].name is OperationName.ADD

        tags.remove("a")
        assert tags.contents == []
        assert "tags" not in record.pending_operations

    def test_parent_is_weak(self):
        """Test a list does not keep its record alive."""
        import gc

        record = Record("TestObject")
        record.append("tags", "a")
        tags = record["tags"]

        del record
        gc.collect()

        assert tags.parent is None
        tags.append("b")
        assert tags.contents == strings("a", "b")
