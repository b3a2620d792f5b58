"""Span exporters for discovery traces."""

from .console_exporter import create_console_exporter
from .file_exporter import FileSpanExporter
from .otlp_exporter import DEFAULT_OTLP_ENDPOINT, create_otlp_trace_exporter

__all__ = [
    "DEFAULT_OTLP_ENDPOINT",
    "create_otlp_trace_exporter",
    "create_console_exporter",
    "FileSpanExporter",
]
