"""
OpenTelemetry tracing for discovery runs.

Nothing is exported unless ``configure_tracing`` installs an exporter; until
then spans go to the global tracer provider, which is a no-op unless the host
application configured one.

The provider is kept here rather than registered globally so tracing can be
configured more than once in the same process (tests, embedding).
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.trace import Span, Status, StatusCode, Tracer

from .exporters import FileSpanExporter, create_console_exporter, create_otlp_trace_exporter

logger = logging.getLogger(__name__)

TRACER_NAME = "loadscout"
TRACE_EXPORTERS = ("none", "console", "file", "otlp")

_provider: TracerProvider | None = None


def create_exporter(
    exporter: str,
    *,
    file: str | None = None,
    endpoint: str | None = None,
) -> SpanExporter | None:
    """Build the span exporter named by ``exporter`` (one of TRACE_EXPORTERS)."""
    if exporter == "none":
        return None
    if exporter == "console":
        return create_console_exporter()
    if exporter == "file":
        if not file:
            raise ValueError("file trace exporter requires an output path")
        return FileSpanExporter(file)
    if exporter == "otlp":
        return create_otlp_trace_exporter(endpoint) if endpoint else create_otlp_trace_exporter()
    raise ValueError(
        f"Unknown trace exporter {exporter!r}; expected one of {', '.join(TRACE_EXPORTERS)}"
    )


def configure_tracing(
    exporter: SpanExporter | None,
    service_name: str = "loadscout",
    processor: Any = None,
) -> TracerProvider | None:
    """
    Install a tracer provider exporting through ``exporter``.

    Passing ``exporter=None`` without a processor removes any provider installed
    earlier. ``processor`` replaces the default BatchSpanProcessor (tests use a
    SimpleSpanProcessor).
    """
    global _provider
    from . import __version__

    shutdown_tracing()
    if exporter is None and processor is None:
        return None

    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name, "service.version": __version__})
    )
    provider.add_span_processor(processor or BatchSpanProcessor(exporter))
    _provider = provider
    logger.debug("Tracing enabled for service %s", service_name)
    return provider


def shutdown_tracing() -> None:
    """Flush and shut down the provider installed by configure_tracing."""
    global _provider
    if _provider is None:
        return
    provider, _provider = _provider, None
    provider.shutdown()


def get_tracer() -> Tracer:
    if _provider is not None:
        return _provider.get_tracer(TRACER_NAME)
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def start_span(
    name: str,
    parent: Span | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span]:
    """
    Start a span as an explicit child of ``parent`` and end it on exit.

    Spans are not made current, so they can stay open across generator yields
    without corrupting the active context of whoever consumes the generator.
    """
    context = trace.set_span_in_context(parent) if parent is not None else None
    span = get_tracer().start_span(
        name,
        context=context,
        attributes={k: v for k, v in (attributes or {}).items() if v is not None},
    )
    try:
        yield span
    except Exception as exc:
        mark_failed(span, exc)
        raise
    finally:
        span.end()


def mark_failed(span: Span, exc: BaseException) -> None:
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, str(exc)))
