"""
OTLP span exporter factory.

Discovery traces are sent over OTLP/HTTP, the protocol most collectors expose
on port 4318.
"""

from typing import Any

DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"


def create_otlp_trace_exporter(
    endpoint: str = DEFAULT_OTLP_ENDPOINT,
    headers: dict[str, str] | None = None,
    **kwargs: Any,
):
    """
    Create an OTLP/HTTP trace exporter.

    Args:
        endpoint: OTLP endpoint URL; ``/v1/traces`` is appended when missing
        headers: Optional headers to include
        **kwargs: Additional exporter configuration

    Returns:
        Configured SpanExporter
    """
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    traces_endpoint = endpoint.rstrip("/")
    if not traces_endpoint.endswith("/v1/traces"):
        traces_endpoint = f"{traces_endpoint}/v1/traces"
    return OTLPSpanExporter(
        endpoint=traces_endpoint,
        headers=headers,
        **kwargs,
    )
