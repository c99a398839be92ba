"""Tests for trellis.descriptor.parameters module."""

import pytest
from pydantic import TypeAdapter, ValidationError

from trellis import types as T
from trellis.descriptor import (
    CookieParameter,
    HeaderParameter,
    Parameter,
    PathParameter,
    QueryParameter,
)
from trellis.errors import BadRequestError, MissingParameterError, UnparseableParameterError


class TestQueryParameter:
    """Test query string parameters."""

    def test_coerces_value(self, make_request):
        parameter = QueryParameter(name="a", type=T.CoercibleInteger)
        assert parameter.retrieve(make_request("a=5")) == 5

    def test_absent_optional_is_missing(self, make_request):
        """Absent optional parameters are MISSING, never None."""
        parameter = QueryParameter(name="a", type=T.CoercibleInteger)
        assert parameter.retrieve(make_request("b=1")) is T.MISSING
        assert parameter.retrieve(make_request("")) is T.MISSING

    def test_absent_required(self, make_request):
        parameter = QueryParameter(name="a", type=T.CoercibleInteger, required=True)

        with pytest.raises(MissingParameterError) as exc_info:
            parameter.retrieve(make_request(""))

        assert exc_info.value.status_code == 400
        assert str(exc_info.value) == "Invalid/missing parameter 'a'."

    def test_unparseable(self, make_request):
        parameter = QueryParameter(name="a", type=T.CoercibleInteger)

        with pytest.raises(UnparseableParameterError) as exc_info:
            parameter.retrieve(make_request("a=five"))

        assert exc_info.value.status_code == 400
        assert exc_info.value.violations[0].location == "a"

    def test_blank_values(self, make_request):
        """Blank values count as absent unless allow_empty_value is set."""
        parameter = QueryParameter(name="q", type=T.CoercibleString)
        assert parameter.retrieve(make_request("q=")) is T.MISSING

        parameter = QueryParameter(name="q", type=T.CoercibleString, allow_empty_value=True)
        assert parameter.retrieve(make_request("q=")) == ""

    def test_repeated_keys(self, make_request):
        """Array parameters collect every value; scalars take the last one."""
        tags = QueryParameter(name="tag", type=T.Array(T.CoercibleInteger))
        assert tags.retrieve(make_request("tag=1&tag=2&other=x")) == [1, 2]
        assert tags.retrieve(make_request("tag[]=3&tag[]=4")) == [3, 4]

        single = QueryParameter(name="tag", type=T.CoercibleInteger)
        assert single.retrieve(make_request("tag=1&tag=2")) == 2

    def test_optional_array(self, make_request):
        tags = QueryParameter(name="tag", type=T.Array(T.CoercibleString).optional())
        assert tags.retrieve(make_request("tag=a")) == ["a"]

    def test_percent_decoding(self, make_request):
        parameter = QueryParameter(name="q", type=T.CoercibleString)
        assert parameter.retrieve(make_request("q=hello%20world%26more")) == "hello world&more"

    def test_too_many_fields(self, make_request):
        parameter = QueryParameter(name="a", type=T.CoercibleString, max_parameters=3)

        with pytest.raises(BadRequestError, match="Too many query parameters"):
            parameter.retrieve(make_request("a=1&b=2&c=3&d=4"))


class TestHeaderParameter:
    """Test header parameters."""

    def test_environ_key_is_precomputed(self):
        parameter = HeaderParameter(name="api_key", header_name="X-Api-Key", type=T.String)
        assert parameter.environ_key == "HTTP_X_API_KEY"

    def test_retrieve(self, make_request):
        parameter = HeaderParameter(name="api_key", header_name="X-Api-Key", type=T.String)
        request = make_request(headers={"X-Api-Key": "secret"})

        assert parameter.retrieve(request) == "secret"
        assert parameter.retrieve(make_request()) is T.MISSING

    def test_errors_use_header_name(self, make_request):
        """Errors report the wire name rather than the logical name."""
        parameter = HeaderParameter(
            name="request_id", header_name="X-Request-Id", type=T.CoercibleInteger, required=True
        )

        with pytest.raises(MissingParameterError, match="'X-Request-Id'"):
            parameter.retrieve(make_request())
        with pytest.raises(UnparseableParameterError) as exc_info:
            parameter.retrieve(make_request(headers={"X-Request-Id": "abc"}))
        assert exc_info.value.violations[0].location == "X-Request-Id"


class TestCookieParameter:
    def test_retrieve(self, make_request):
        parameter = CookieParameter(name="session", cookie_name="sid", type=T.String)

        assert parameter.retrieve(make_request(cookies={"sid": "abc"})) == "abc"
        assert parameter.retrieve(make_request()) is T.MISSING
        assert parameter.friendly_name == "sid"


class TestPathParameter:
    def test_always_required(self, make_request):
        parameter = PathParameter(name="id", type=T.CoercibleInteger)

        assert parameter.required is True
        assert parameter.retrieve(make_request(), {"id": "7"}) == 7
        with pytest.raises(MissingParameterError):
            parameter.retrieve(make_request(), {})

    def test_required_cannot_be_disabled(self):
        with pytest.raises(ValidationError):
            PathParameter(name="id", type=T.CoercibleInteger, required=False)


class TestParameterModels:
    """Test the pydantic side of parameter descriptors."""

    def test_struct_classes_are_accepted_as_types(self):
        class Filter(T.Struct):
            name = T.String

        parameter = QueryParameter(name="filter", type=Filter)
        assert isinstance(parameter.type, T.StructType)

    def test_invalid_type_rejected(self):
        with pytest.raises(ValidationError):
            QueryParameter(name="a", type=int)

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            QueryParameter(name="a", type=T.String, requierd=True)

    def test_descriptors_are_frozen(self):
        parameter = QueryParameter(name="a", type=T.String)
        with pytest.raises(ValidationError):
            parameter.name = "b"

    def test_discriminated_union(self):
        adapter = TypeAdapter(Parameter)
        parameter = adapter.validate_python(
            {"location": "header", "name": "token", "header_name": "X-Token", "type": T.String}
        )
        assert isinstance(parameter, HeaderParameter)
