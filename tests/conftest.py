"""
Global pytest configuration and fixtures.
"""

import logging

import pytest

from trellis.descriptor import RequestView, Services


@pytest.fixture
def services() -> Services:
    return Services(logger=logging.getLogger("trellis.tests"))


@pytest.fixture
def make_request():
    """Build a RequestView from plain header, cookie and query values."""

    def factory(query_string="", headers=None, cookies=None, **kwargs):
        environ = {
            "HTTP_" + name.upper().replace("-", "_"): value
            for name, value in (headers or {}).items()
        }
        return RequestView(
            query_string=query_string, environ=environ, cookies=cookies or {}, **kwargs
        )

    return factory
