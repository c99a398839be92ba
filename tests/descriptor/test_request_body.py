"""Tests for trellis.descriptor.request_body module."""

import pytest

from trellis import types as T
from trellis.descriptor import RequestBody
from trellis.errors import InvalidBodyError, MissingBodyError


class Pair(T.Struct):
    a = T.Integer
    b = T.CoercibleInteger


class TestRequestBody:
    """Test request body validation."""

    def test_missing_required_body(self):
        body = RequestBody(type=Pair, required=True)

        with pytest.raises(MissingBodyError) as exc_info:
            body.validate(T.MISSING)
        assert exc_info.value.status_code == 400

    def test_missing_optional_body(self):
        assert RequestBody(type=Pair).validate(T.MISSING) is T.MISSING

    def test_invalid_body_reports_every_field(self):
        body = RequestBody(type=Pair, required=True)

        with pytest.raises(InvalidBodyError) as exc_info:
            body.validate({})

        assert exc_info.value.status_code == 422
        assert [v.location for v in exc_info.value.violations] == ["a", "b"]
        assert exc_info.value.to_dict() == {
            "status": 422,
            "message": "The request body is invalid.",
            "violations": [
                {"location": "a", "message": "is missing"},
                {"location": "b", "message": "is missing"},
            ],
        }

    def test_error_details_can_be_hidden(self):
        with pytest.raises(InvalidBodyError) as exc_info:
            RequestBody(type=Pair).validate({})
        assert "violations" not in exc_info.value.to_dict(show_details=False)

    def test_coerces_struct_body(self):
        result = RequestBody(type=Pair).validate({"a": 5, "b": "10"})

        assert isinstance(result, Pair)
        assert result.to_dict() == {"a": 5, "b": 10}

    def test_coerces_hash_body(self):
        body = RequestBody(type=T.Hash({"a": T.Integer, "b": T.CoercibleInteger}))
        assert body.validate({"a": 5, "b": "10"}) == {"a": 5, "b": 10}

    def test_array_body(self):
        body = RequestBody(type=T.Array(Pair), required=True)

        with pytest.raises(InvalidBodyError) as exc_info:
            body.validate([{"a": 1, "b": 2}, {"a": "x", "b": 2}])
        assert [v.location for v in exc_info.value.violations] == ["[1].a"]

    def test_default_media_type(self):
        assert RequestBody(type=Pair).media_types == ["application/json"]
