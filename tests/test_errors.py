"""Tests for trellis.errors module."""

from trellis.errors import (
    BadRequestError,
    ClientError,
    MissingParameterError,
    UnauthorizedError,
    UnparseableParameterError,
    ValidationError,
    Violation,
)


class TestViolation:
    def test_location(self):
        assert Violation(("items", 2, "name"), "is missing").location == "items[2].name"
        assert Violation((0,), "bad").location == "[0]"
        assert Violation((), "bad").location == ""

    def test_str(self):
        assert str(Violation(("a",), "is missing")) == "a: is missing"
        assert str(Violation((), "expected string")) == "expected string"


class TestClientErrors:
    """Test the client error hierarchy."""

    def test_validation_error_is_value_error(self):
        error = ValidationError([Violation(("a",), "is missing"), Violation(("b",), "bad")])
        assert isinstance(error, ValueError)
        assert str(error) == "a: is missing; b: bad"

    def test_status_codes(self):
        assert BadRequestError("x").status_code == 400
        assert UnauthorizedError().status_code == 401
        assert isinstance(MissingParameterError("a"), ClientError)

    def test_unparseable_parameter_prefixes_paths(self):
        error = UnparseableParameterError("filter", [Violation(("tags", 1), "expected string")])
        assert error.violations[0].location == "filter.tags[1]"

    def test_to_dict(self):
        error = MissingParameterError("X-Api-Key")

        assert error.to_dict() == {
            "status": 400,
            "message": "Invalid/missing parameter 'X-Api-Key'.",
            "violations": [{"location": "X-Api-Key", "message": "is missing"}],
        }
        assert error.to_dict(show_details=False) == {
            "status": 400,
            "message": "Invalid/missing parameter 'X-Api-Key'.",
        }
