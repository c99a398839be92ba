"""Tests for trellis.types.converters module."""

from datetime import date, datetime, timezone

import pytest

from trellis import types as T
from trellis.errors import ValidationError


class Address(T.Struct):
    street = T.String
    city = T.String


class Person(T.Struct):
    name = T.String
    age = T.in_range(T.CoercibleInteger, minimum=0)
    nickname = T.String.optional()
    role = T.String.default("member")
    address = T.Instance(Address).optional()


class TestPrimitives:
    """Test coercion of the built-in primitives."""

    def test_strict_primitives(self):
        """Strict primitives accept only their own Python type."""
        assert T.TypeConverter.coerce(T.String, "x") == "x"
        assert T.TypeConverter.coerce(T.Integer, 5) == 5
        assert T.TypeConverter.coerce(T.Number, 5) == 5
        assert T.TypeConverter.coerce(T.Boolean, False) is False

        with pytest.raises(ValidationError, match="expected string"):
            T.TypeConverter.coerce(T.String, 5)
        with pytest.raises(ValidationError, match="expected integer"):
            T.TypeConverter.coerce(T.Integer, "5")

    def test_booleans_are_not_numbers(self):
        """Booleans are rejected where integers and numbers are expected."""
        with pytest.raises(ValidationError):
            T.TypeConverter.coerce(T.Integer, True)
        with pytest.raises(ValidationError):
            T.TypeConverter.coerce(T.CoercibleNumber, False)

    def test_coercible_primitives(self):
        """Coercible primitives parse wire strings."""
        assert T.TypeConverter.coerce(T.CoercibleInteger, "42") == 42
        assert T.TypeConverter.coerce(T.CoercibleInteger, 3.0) == 3
        assert T.TypeConverter.coerce(T.CoercibleNumber, "2.5") == 2.5
        assert T.TypeConverter.coerce(T.CoercibleBoolean, "yes") is True
        assert T.TypeConverter.coerce(T.CoercibleBoolean, "0") is False
        assert T.TypeConverter.coerce(T.CoercibleString, 7) == "7"

        with pytest.raises(ValidationError, match="expected coercible integer"):
            T.TypeConverter.coerce(T.CoercibleInteger, "abc")
        with pytest.raises(ValidationError):
            T.TypeConverter.coerce(T.CoercibleInteger, 2.5)
        with pytest.raises(ValidationError):
            T.TypeConverter.coerce(T.CoercibleNumber, "nan")

    def test_dates(self):
        """Dates and date-times parse ISO 8601 strings."""
        assert T.TypeConverter.coerce(T.Date, "2024-03-01") == date(2024, 3, 1)
        assert T.TypeConverter.coerce(T.DateTime, "2024-03-01T12:00:00Z") == datetime(
            2024, 3, 1, 12, tzinfo=timezone.utc
        )
        with pytest.raises(ValidationError):
            T.TypeConverter.coerce(T.Date, "March 1st")

    def test_nil_and_anything(self):
        assert T.TypeConverter.coerce(T.Nil, None) is None
        assert T.TypeConverter.coerce(T.Anything, {"a": [1]}) == {"a": [1]}
        with pytest.raises(ValidationError):
            T.TypeConverter.coerce(T.Nil, 0)

    def test_missing_value(self):
        """A missing value only satisfies descriptors that accept absence."""
        with pytest.raises(ValidationError, match="is missing"):
            T.TypeConverter.coerce(T.String, T.MISSING)
        assert T.TypeConverter.coerce(T.String.optional(), T.MISSING) is None
        assert T.TypeConverter.coerce(T.Integer.default(3), T.MISSING) == 3


class TestWrappers:
    """Test Optional, Default, Constrained and Union coercion."""

    def test_default_values_are_copied(self):
        """Mutable defaults are not shared between coercions."""
        descriptor = T.Array(T.String).default([])
        first = T.TypeConverter.coerce(descriptor, T.MISSING)
        first.append("x")
        assert T.TypeConverter.coerce(descriptor, T.MISSING) == []

    def test_optional_default(self):
        """An absent optional value still takes the default it wraps."""
        descriptor = T.Integer.default(5).optional()
        assert T.TypeConverter.coerce(descriptor, T.MISSING) == 5
        assert T.TypeConverter.coerce(descriptor, None) is None
        assert T.TypeConverter.coerce(T.Integer.optional(), T.MISSING) is None

        fields = T.Hash({"a": descriptor, "b": T.Integer.default(1).constrained(lambda v: v > 0)})
        assert T.TypeConverter.coerce(fields, {}) == {"a": 5, "b": 1}

    def test_constraint(self):
        """Constraints run on the coerced value."""
        descriptor = T.in_range(T.CoercibleInteger, minimum=1, maximum=10)
        assert T.TypeConverter.coerce(descriptor, "5") == 5

        with pytest.raises(ValidationError, match="must be >= 1 and <= 10"):
            T.TypeConverter.coerce(descriptor, "11")

    def test_one_of_and_matches(self):
        status = T.one_of(T.String, "open", "closed")
        assert T.TypeConverter.coerce(status, "open") == "open"
        with pytest.raises(ValidationError, match="must be one of: open, closed"):
            T.TypeConverter.coerce(status, "pending")

        code = T.matches(T.String, r"[A-Z]{3}")
        assert T.TypeConverter.coerce(code, "EUR") == "EUR"
        with pytest.raises(ValidationError, match="must match"):
            T.TypeConverter.coerce(code, "euro")

    def test_constraint_predicate_errors_fail_validation(self):
        """A predicate raising TypeError is a failed constraint."""
        descriptor = T.Anything.constrained(lambda value: value > 0, "must be positive")
        with pytest.raises(ValidationError, match="must be positive"):
            T.TypeConverter.coerce(descriptor, "text")

    def test_union(self):
        """Unions try the left branch first."""
        descriptor = T.Integer | T.String
        assert T.TypeConverter.coerce(descriptor, 1) == 1
        assert T.TypeConverter.coerce(descriptor, "one") == "one"

        with pytest.raises(ValidationError, match="does not match any of the allowed types"):
            T.TypeConverter.coerce(descriptor, 1.5)

    def test_nil_union(self):
        descriptor = T.String | T.Nil
        assert T.TypeConverter.coerce(descriptor, None) is None
        assert T.TypeConverter.coerce(descriptor, "x") == "x"


class TestContainers:
    """Test Array, Hash and Map coercion."""

    def test_array_reports_every_index(self):
        """All failing elements are reported with their index."""
        with pytest.raises(ValidationError) as exc_info:
            T.TypeConverter.coerce(T.Array(T.CoercibleInteger), ["1", "x", "3", "y"])

        locations = [v.location for v in exc_info.value.violations]
        assert locations == ["[1]", "[3]"]

    def test_array_rejects_non_lists(self):
        with pytest.raises(ValidationError, match="expected array, got str"):
            T.TypeConverter.coerce(T.Array(T.String), "abc")

    def test_hash(self):
        """Hashes coerce declared fields and drop undeclared ones."""
        descriptor = T.Hash({"a": T.Integer, "b": T.CoercibleInteger, "c": T.String.optional()})
        assert T.TypeConverter.coerce(descriptor, {"a": 5, "b": "10", "extra": 1}) == {
            "a": 5,
            "b": 10,
        }

    def test_hash_reports_every_field(self):
        descriptor = T.Hash({"a": T.Integer, "b": T.Integer})
        with pytest.raises(ValidationError) as exc_info:
            T.TypeConverter.coerce(descriptor, {})

        assert [v.location for v in exc_info.value.violations] == ["a", "b"]
        assert all(v.message == "is missing" for v in exc_info.value.violations)

    def test_map(self):
        descriptor = T.Map(T.String, T.CoercibleInteger)
        assert T.TypeConverter.coerce(descriptor, {"x": "1", "y": 2}) == {"x": 1, "y": 2}

        with pytest.raises(ValidationError) as exc_info:
            T.TypeConverter.coerce(descriptor, {"x": "one"})
        assert exc_info.value.violations[0].location == "x"


class TestStructs:
    """Test Struct coercion."""

    def test_coerce_struct(self):
        """Absent optionals become None and defaults are applied."""
        person = Person.coerce({"name": "Ada", "age": "36"})

        assert isinstance(person, Person)
        assert person.name == "Ada"
        assert person.age == 36
        assert person.nickname is None
        assert person.role == "member"
        assert person.address is None

    def test_nested_violation_paths(self):
        """Violations inside nested structs carry the full path."""
        with pytest.raises(ValidationError) as exc_info:
            Person.coerce({"name": "Ada", "age": -1, "address": {"street": "Main"}})

        locations = {v.location for v in exc_info.value.violations}
        assert locations == {"age", "address.city"}

    def test_constructor_validates(self):
        with pytest.raises(ValidationError, match="name: is missing"):
            Person(age=1)

    def test_struct_instances_pass_through(self):
        address = Address(street="Main", city="Springfield")
        assert T.TypeConverter.coerce(Address, address) is address

    def test_to_dict_and_equality(self):
        person = Person(name="Ada", age=36, address={"street": "Main", "city": "London"})

        assert person.to_dict() == {
            "name": "Ada",
            "age": 36,
            "nickname": None,
            "role": "member",
            "address": {"street": "Main", "city": "London"},
        }
        assert person == Person.coerce(person.to_dict())

    def test_inherited_fields_come_first(self):
        class Employee(Person):
            employer = T.String

        assert list(Employee.fields()) == [
            "name",
            "age",
            "nickname",
            "role",
            "address",
            "employer",
        ]

    def test_struct_rejects_non_objects(self):
        with pytest.raises(ValidationError, match="expected object, got list"):
            Address.coerce([])
