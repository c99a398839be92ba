"""Tracing helpers for trellis.

Wraps the OpenTelemetry API tracer. Without a configured OpenTelemetry SDK the
API hands out non-recording spans, so instrumented code costs next to nothing
when tracing is off.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from trellis.version import PACKAGE_NAME, PACKAGE_VERSION

logger = logging.getLogger(__name__)

__all__ = ["traced_operation"]

_tracer: trace.Tracer | None = None


def _get_tracer() -> trace.Tracer:
    """Get or create the trellis tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(PACKAGE_NAME, PACKAGE_VERSION)
    return _tracer


@contextmanager
def traced_operation(name: str, attributes: dict[str, Any] | None = None) -> Iterator[Span]:
    """Context manager for tracing operations.

    Args:
        name: Operation name (e.g., "trellis.security.validate")
        attributes: Initial span attributes; None values are skipped

    Yields:
        The active span

    Example:
        ```python
        with traced_operation("trellis.schema.compile", {"roots": 3}) as span:
            document = compiler.compile(roots)
            span.set_attribute("trellis.schema.count", len(document))
        ```
    """
    with _get_tracer().start_as_current_span(name, record_exception=False) as span:
        for key, value in (attributes or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
