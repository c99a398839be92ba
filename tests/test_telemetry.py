"""Tests for trellis.telemetry module."""

import pytest

from trellis.telemetry import traced_operation


class TestTracedOperation:
    def test_yields_span(self):
        with traced_operation("trellis.test", {"a": 1, "skipped": None}) as span:
            span.set_attribute("b", 2)

    def test_exceptions_propagate(self):
        with pytest.raises(RuntimeError, match="boom"):
            with traced_operation("trellis.test"):
                raise RuntimeError("boom")
