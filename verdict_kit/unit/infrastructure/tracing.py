"""OpenTelemetry span helper for unit executions.

Spans go through the global tracer provider. Without an OpenTelemetry SDK
installed that provider is a no-op, so units can always open spans.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

_tracer = trace.get_tracer("verdict_kit.unit")

type AttributeValue = str | bool | int | float


@contextmanager
def unit_span(
    span_name: str,
    unit_type: str,
    unit_id: str,
    attributes: Mapping[str, AttributeValue],
) -> Iterator[Span]:
    """Open a span named span_name carrying unit identity and attributes.

    An exception escaping the block is recorded on the span and re-raised.
    """
    with _tracer.start_as_current_span(
        span_name, record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("unit.type", unit_type)
        span.set_attribute("unit.id", unit_id)
        for key, value in attributes.items():
            span.set_attribute(key, value)
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            raise
